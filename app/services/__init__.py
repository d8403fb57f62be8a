from app.services.analysis_cache_service import AnalysisCacheService
from app.services.approval_queue_service import ApprovalQueueService
from app.services.auto_response_config_service import AutoResponseConfigService
from app.services.auto_response_log_service import AutoResponseLogService
from app.services.setting_service import SettingService

__all__ = [
    "AnalysisCacheService",
    "ApprovalQueueService",
    "AutoResponseConfigService",
    "AutoResponseLogService",
    "SettingService",
]
