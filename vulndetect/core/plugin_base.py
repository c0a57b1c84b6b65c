"""이 파일은 .py 플러그인 베이스 모듈로 카테고리별 플러그인 인터페이스를 제공합니다."""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence, Tuple

from .types import (
    DetectionReport,
    DetectionStatus,
    MatchedPlugin,
    NetworkService,
    PluginDefinition,
    ReconnaissanceReport,
)


class BasePlugin(ABC):
    def __init__(self, config: Optional[Dict] = None):
        # plugin.yml 또는 호출자가 넘긴 플러그인 설정값이다.
        self.config = config or {}
        self.results: List[DetectionReport] = []

    def add_report(
        self,
        plugin_id: str,
        service: Optional[NetworkService],
        title: str,
        evidence: Optional[Dict] = None,
        status: DetectionStatus = DetectionStatus.VULNERABILITY_VERIFIED,
    ) -> DetectionReport:
        report = DetectionReport(
            plugin_id=plugin_id,
            service=service,
            title=title,
            status=status,
            evidence=evidence or {},
        )
        self.results.append(report)
        return report


class PortScanner(BasePlugin):
    @abstractmethod
    def scan(self, target: str) -> ReconnaissanceReport:
        raise NotImplementedError


class ServiceFingerprinter(BasePlugin):
    @abstractmethod
    def fingerprint(self, target: str, service: NetworkService) -> NetworkService:
        raise NotImplementedError


class VulnDetector(BasePlugin):
    @abstractmethod
    def detect(self, target: str, matched_services: Sequence[NetworkService]) -> List[DetectionReport]:
        raise NotImplementedError


class RemoteVulnDetector(VulnDetector):
    """원격 소스에서 받은 플러그인 정의들을 대신 실행하는 탐지기.

    매칭 단계에서 (원격 정의, 매칭된 서비스) 쌍이 작업 목록에 추가되며,
    작업 목록은 추가만 가능하다. 같은 스캔 세션에서 두 호출자가 동시에 매칭하지 않는다.
    """

    def __init__(self, config: Optional[Dict] = None):
        super().__init__(config)
        self._matched_plugins: List[MatchedPlugin] = []

    @abstractmethod
    def get_all_plugins(self) -> List[PluginDefinition]:
        raise NotImplementedError

    def add_matched_plugin_to_detect(self, matched_plugin: MatchedPlugin) -> None:
        self._matched_plugins.append(matched_plugin)

    @property
    def matched_plugins(self) -> Tuple[MatchedPlugin, ...]:
        return tuple(self._matched_plugins)
