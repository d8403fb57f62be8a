from app.models.analysis_cache import AnalysisCacheEntry
from app.models.app_setting import AppSetting
from app.models.approval_queue_item import ApprovalQueueItem, ApprovalStatus
from app.models.auto_response_config import AutoResponseConfig
from app.models.auto_response_log import AutoResponseLogEntry
from app.models.style_profile import StyleProfile

__all__ = [
    "AnalysisCacheEntry",
    "AppSetting",
    "ApprovalQueueItem",
    "ApprovalStatus",
    "AutoResponseConfig",
    "AutoResponseLogEntry",
    "StyleProfile",
]
