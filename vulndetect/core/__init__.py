"""이 파일은 .py 코어 패키지 초기화 모듈로 주요 심볼을 재노출합니다."""

from .config import DEFAULT_PAYLOAD_FILE, PLUGINS_DIR
from .logging import setup_logging
from .network_service import is_web_service
from .plugin_base import (
    BasePlugin,
    PortScanner,
    RemoteVulnDetector,
    ServiceFingerprinter,
    VulnDetector,
)
from .plugin_loader import PluginLoader
from .plugin_manager import MatchingResult, PluginManager
from .plugin_registry import PluginRegistry
from .types import (
    DetectionReport,
    MatchedPlugin,
    NetworkService,
    PluginDefinition,
    PluginType,
    ReconnaissanceReport,
    Software,
)

__all__ = [
    "BasePlugin",
    "DEFAULT_PAYLOAD_FILE",
    "DetectionReport",
    "MatchedPlugin",
    "MatchingResult",
    "NetworkService",
    "PLUGINS_DIR",
    "PluginDefinition",
    "PluginLoader",
    "PluginManager",
    "PluginRegistry",
    "PluginType",
    "PortScanner",
    "ReconnaissanceReport",
    "RemoteVulnDetector",
    "ServiceFingerprinter",
    "Software",
    "VulnDetector",
    "is_web_service",
    "setup_logging",
]
