"""Key/value settings: global kill switch and poll watermark."""

from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from app.constants.auto_response import AUTO_RESPONSE_ENABLED_KEY, LAST_CHECK_TS_KEY
from app.models.app_setting import AppSetting


class SettingService:
    """Reads always hit the database; nothing is cached in process."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, key: str) -> Optional[str]:
        setting = self.db.query(AppSetting).filter(AppSetting.key == key).first()
        return None if setting is None else str(setting.value)

    def set(self, key: str, value: str) -> AppSetting:
        setting = self.db.query(AppSetting).filter(AppSetting.key == key).first()
        if setting is None:
            setting = AppSetting(key=key, value=value)
            self.db.add(setting)
        else:
            setting.value = value
        self.db.commit()
        self.db.refresh(setting)
        return setting

    def is_auto_response_enabled(self) -> bool:
        """Kill switch. Absent or anything other than "true" means disabled."""
        return self.get(AUTO_RESPONSE_ENABLED_KEY) == "true"

    def set_auto_response_enabled(self, enabled: bool) -> None:
        self.set(AUTO_RESPONSE_ENABLED_KEY, "true" if enabled else "false")

    def seed_auto_response_enabled(self, enabled: bool) -> None:
        """Write the kill switch only if it has never been set."""
        if self.get(AUTO_RESPONSE_ENABLED_KEY) is None:
            self.set_auto_response_enabled(enabled)

    def get_watermark(self) -> int:
        value = self.get(LAST_CHECK_TS_KEY)
        if not value:
            return 0
        try:
            return int(value)
        except ValueError:
            return 0

    def advance_watermark(self, ts: int) -> int:
        """Move the watermark to ``ts`` unless it is already at or past it."""
        current = self.get_watermark()
        if ts <= current:
            return current
        self.set(LAST_CHECK_TS_KEY, str(ts))
        return ts
