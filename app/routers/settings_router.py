"""Auto-response settings: per-chat configs and the global kill switch."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db import get_db
from app.schemas.auto_response import (
    AutoResponseConfigList,
    AutoResponseConfigRead,
    AutoResponseConfigSaved,
    AutoResponseConfigUpdate,
    GlobalAutoResponseSetting,
)
from app.services.auto_response_config_service import AutoResponseConfigService
from app.services.setting_service import SettingService

settings_router = APIRouter(prefix="/settings", tags=["settings"])


@settings_router.get("/auto-response", response_model=AutoResponseConfigList)
def list_auto_response_configs(
    chat_jid: Optional[str] = Query(None),
    db: Session = Depends(get_db),
) -> AutoResponseConfigList:
    """All configs, or just the one for ``chat_jid`` (empty list if none)."""
    svc = AutoResponseConfigService(db)
    if chat_jid is not None:
        config = svc.get_config(chat_jid)
        configs = [config] if config is not None else []
    else:
        configs = svc.list_configs()
    return AutoResponseConfigList(
        configs=[AutoResponseConfigRead.model_validate(c) for c in configs]
    )


@settings_router.post("/auto-response", response_model=AutoResponseConfigSaved)
def save_auto_response_config(
    body: AutoResponseConfigUpdate,
    db: Session = Depends(get_db),
) -> AutoResponseConfigSaved:
    """Create or partially update a chat's config."""
    config = AutoResponseConfigService(db).upsert_config(body)
    return AutoResponseConfigSaved(config=AutoResponseConfigRead.model_validate(config))


@settings_router.get("/auto-response/global", response_model=GlobalAutoResponseSetting)
def get_global_auto_response(
    db: Session = Depends(get_db),
) -> GlobalAutoResponseSetting:
    return GlobalAutoResponseSetting(
        enabled=SettingService(db).is_auto_response_enabled()
    )


@settings_router.put("/auto-response/global", response_model=GlobalAutoResponseSetting)
def set_global_auto_response(
    body: GlobalAutoResponseSetting,
    db: Session = Depends(get_db),
) -> GlobalAutoResponseSetting:
    """Flip the kill switch; takes effect on the next decision."""
    svc = SettingService(db)
    svc.set_auto_response_enabled(body.enabled)
    return GlobalAutoResponseSetting(enabled=svc.is_auto_response_enabled())
