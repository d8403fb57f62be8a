"""Structured LLM outputs for style analysis and reply generation."""

from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, Field


class StyleProfile(BaseModel):
    """Communication style of a contact, as judged by the style model."""

    message_length: Literal["short", "medium", "long"] = "medium"
    formality_level: Literal["casual", "neutral", "formal"] = "neutral"
    emoji_usage: Literal["none", "low", "medium", "high"] = "low"
    response_speed: Literal["quick", "delayed"] = "quick"
    response_style: Literal["terse", "verbose"] = "terse"
    common_phrases: List[str] = Field(default_factory=list)
    topics: List[str] = Field(default_factory=list)
    emotional_tone: Literal["warm", "neutral", "professional"] = "neutral"
    summary: str = ""


class ReplyDraft(BaseModel):
    """Reply candidate returned by the reply model."""

    message: str = Field(..., min_length=1)
    confidence: float = Field(..., ge=0.0, le=1.0)
    reasoning: str = ""


class GeneratedReply(ReplyDraft):
    """Reply candidate plus token usage for the audit log."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
