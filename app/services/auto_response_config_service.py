"""Per-chat auto-response config CRUD with partial-update semantics."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from app.constants.auto_response import DEFAULT_CONTEXT_WINDOW_MESSAGES
from app.core.daily_counter import rollover
from app.exceptions import InvalidInputError
from app.models.auto_response_config import AutoResponseConfig
from app.models.style_profile import StyleProfile
from app.schemas.auto_response import AutoResponseConfigUpdate
from app.utils.dates import to_storage

_NON_NULLABLE_FIELDS = ("enabled", "require_approval", "context_window_messages")


class AutoResponseConfigService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get_config(self, chat_jid: str) -> Optional[AutoResponseConfig]:
        return (
            self.db.query(AutoResponseConfig)
            .filter(AutoResponseConfig.chat_jid == chat_jid)
            .first()
        )

    def list_configs(self) -> List[AutoResponseConfig]:
        return (
            self.db.query(AutoResponseConfig)
            .order_by(AutoResponseConfig.chat_jid)
            .all()
        )

    def upsert_config(self, data: AutoResponseConfigUpdate) -> AutoResponseConfig:
        """
        Create the config on first use, otherwise update only supplied fields.

        New rows default to disabled, approval required, unlimited daily
        responses and a 10 message context window.
        """
        update_data = data.model_dump(exclude_unset=True, exclude={"chat_jid"})
        for key in _NON_NULLABLE_FIELDS:
            if key in update_data and update_data[key] is None:
                raise InvalidInputError(f"{key} cannot be null", field=key)
        if update_data.get("style_profile_id") is not None:
            self._check_style_profile(update_data["style_profile_id"])

        config = self.get_config(data.chat_jid)
        if config is None:
            config = AutoResponseConfig(
                chat_jid=data.chat_jid,
                enabled=False,
                require_approval=True,
                max_daily_responses=None,
                daily_response_count=0,
                daily_count_reset_at=None,
                context_window_messages=DEFAULT_CONTEXT_WINDOW_MESSAGES,
            )
            self.db.add(config)
        for key, value in update_data.items():
            setattr(config, key, value)
        self.db.commit()
        self.db.refresh(config)
        return config

    def roll_daily_counter(
        self, config: AutoResponseConfig, now: datetime
    ) -> AutoResponseConfig:
        """Apply the local-day rollover and persist it if the day changed."""
        counter = rollover(
            config.daily_response_count, config.daily_count_reset_at, now
        )
        if counter.rolled_over:
            config.daily_response_count = counter.count
            config.daily_count_reset_at = to_storage(counter.reset_at)
            self.db.commit()
            self.db.refresh(config)
        return config

    def increment_daily_count(self, chat_jid: str) -> None:
        """Atomic +1, issued only after a confirmed autonomous send."""
        self.db.execute(
            update(AutoResponseConfig)
            .where(AutoResponseConfig.chat_jid == chat_jid)
            .values(
                daily_response_count=AutoResponseConfig.daily_response_count + 1
            )
        )
        self.db.commit()

    def _check_style_profile(self, style_profile_id: int) -> None:
        exists = (
            self.db.query(StyleProfile.id)
            .filter(StyleProfile.id == style_profile_id)
            .first()
        )
        if exists is None:
            raise InvalidInputError(
                f"Style profile {style_profile_id} does not exist",
                field="style_profile_id",
            )
