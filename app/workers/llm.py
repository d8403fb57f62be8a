from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from pydantic_ai import Agent
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.litellm import LiteLLMProvider

from app.config import get_settings
from app.exceptions import GenerationError
from app.infra.logging_config import get_logger
from app.schemas.message import ChatMessage
from app.schemas.style import GeneratedReply, ReplyDraft, StyleProfile
from app.workers.prompts import (
    REPLY_INSTRUCTIONS,
    STYLE_INSTRUCTIONS,
    build_auto_reply_prompt,
    build_style_analysis_prompt,
)

logger = get_logger()


class BaseReplyGenerator(ABC):
    """Style analysis and reply drafting. Failures raise GenerationError."""

    @abstractmethod
    def analyze_style(
        self, contact_name: str, messages: Sequence[ChatMessage]
    ) -> StyleProfile: ...

    @abstractmethod
    def generate_reply(
        self,
        contact_name: str,
        style_profile: StyleProfile,
        messages: Sequence[ChatMessage],
        context: str,
    ) -> GeneratedReply: ...


def _usage_tokens(result) -> tuple[int, int]:
    usage = result.usage
    return int(usage.input_tokens or 0), int(usage.output_tokens or 0)


class LLMReplyGenerator(BaseReplyGenerator):
    def __init__(
        self,
        reply_model_name: str,
        style_model_name: Optional[str] = None,
        api_key: Optional[str] = None,
        api_base: Optional[str] = None,
    ) -> None:
        provider = LiteLLMProvider(api_key=api_key, api_base=api_base)
        style_model_name = style_model_name or reply_model_name
        logger.info(
            f"Initializing reply generator with models {reply_model_name} / {style_model_name}"
        )
        self._style_agent = Agent(
            OpenAIChatModel(style_model_name, provider=provider),
            output_type=StyleProfile,
            instructions=STYLE_INSTRUCTIONS,
        )
        self._reply_agent = Agent(
            OpenAIChatModel(reply_model_name, provider=provider),
            output_type=ReplyDraft,
            instructions=REPLY_INSTRUCTIONS,
        )

    def analyze_style(
        self, contact_name: str, messages: Sequence[ChatMessage]
    ) -> StyleProfile:
        prompt = build_style_analysis_prompt(contact_name, messages)
        try:
            result = self._style_agent.run_sync(prompt)
        except Exception as e:
            raise GenerationError(f"Style analysis failed for {contact_name}: {e}") from e
        return result.output

    def generate_reply(
        self,
        contact_name: str,
        style_profile: StyleProfile,
        messages: Sequence[ChatMessage],
        context: str,
    ) -> GeneratedReply:
        prompt = build_auto_reply_prompt(contact_name, style_profile, messages, context)
        try:
            result = self._reply_agent.run_sync(prompt)
            prompt_tokens, completion_tokens = _usage_tokens(result)
        except Exception as e:
            raise GenerationError(f"Reply generation failed for {contact_name}: {e}") from e
        return GeneratedReply(
            **result.output.model_dump(),
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
        )


def build_reply_generator_from_env() -> LLMReplyGenerator:
    settings = get_settings()
    logger.info(
        "Reply generator config: model=%s, style_model=%s, api_key=%s, api_base=%s",
        settings.llm_model,
        settings.style_model,
        "set" if settings.litellm_api_key else "not set",
        settings.litellm_api_base or "(default)",
    )
    if not settings.litellm_api_key:
        logger.warning(
            "LITELLM_API_KEY is not set; set it to a valid OpenAI or LiteLLM API key to avoid 401 errors."
        )
    return LLMReplyGenerator(
        reply_model_name=settings.llm_model,
        style_model_name=settings.style_model,
        api_key=settings.litellm_api_key,
        api_base=settings.litellm_api_base,
    )
