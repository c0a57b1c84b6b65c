"""이 파일은 .py 플러그인 매칭 모듈로 정찰 결과의 서비스에 적용할 플러그인을 선택합니다."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from .network_service import equals_ignore_ascii_case, is_web_service, service_name, software_name
from .plugin_base import (
    BasePlugin,
    PortScanner,
    RemoteVulnDetector,
    ServiceFingerprinter,
    VulnDetector,
)
from .plugin_registry import PluginFactory, PluginRegistry
from .types import (
    MatchedPlugin,
    NetworkService,
    PluginDefinition,
    PluginType,
    ReconnaissanceReport,
    services_of,
)

logger = logging.getLogger(__name__)

WebServicePredicate = Callable[[NetworkService], bool]

VULN_DETECTOR_TYPES = (PluginType.VULN_DETECTION, PluginType.REMOTE_VULN_DETECTION)


@dataclass(frozen=True)
class MatchingResult:
    # 매칭된 정의, 새로 생성한 플러그인 인스턴스, 적용 대상 서비스 묶음이다.
    plugin_definition: PluginDefinition
    plugin: BasePlugin
    matched_services: Tuple[NetworkService, ...] = ()
    # 원격 탐지기에 한해 작업 목록에 추가된 (원격 정의, 서비스) 쌍을 함께 돌려준다.
    matched_plugins: Tuple[MatchedPlugin, ...] = ()

    @property
    def plugin_id(self) -> str:
        return self.plugin_definition.plugin_id


def has_matching_service_name(
    service: NetworkService,
    definition: PluginDefinition,
    web_service_predicate: WebServicePredicate = is_web_service,
) -> bool:
    # 서비스명이 비어 있으면 아직 식별 전이므로 후보로 본다.
    name = service_name(service)
    name_match = bool(definition.target_service_names) and (
        not name
        or any(equals_ignore_ascii_case(target, name) for target in definition.target_service_names)
    )
    web_match = definition.for_web_service and web_service_predicate(service)
    return name_match or web_match


def has_matching_software(service: NetworkService, definition: PluginDefinition) -> bool:
    software = software_name(service)
    return bool(definition.target_software) and (
        not software or equals_ignore_ascii_case(definition.target_software, software)
    )


class PluginManager:
    """레지스트리와 정찰 결과를 받아 카테고리별 매칭 결과를 만든다.

    원격 탐지기 작업 목록에 추가하는 것을 제외하면 부수효과가 없고,
    같은 입력에 대해 항상 같은 순서의 결과를 돌려준다.
    """

    def __init__(
        self,
        registry: Optional[PluginRegistry],
        web_service_predicate: WebServicePredicate = is_web_service,
    ) -> None:
        self.registry = registry
        self.web_service_predicate = web_service_predicate

    def get_port_scanners(self) -> List[MatchingResult]:
        # 포트 스캐너는 서비스 단위가 아니라 전역으로 적용되므로 필터링하지 않는다.
        return [
            MatchingResult(plugin_definition=definition, plugin=self._build(definition, factory, PortScanner))
            for definition, factory in self._entries(PluginType.PORT_SCAN)
        ]

    def get_port_scanner(self) -> Optional[MatchingResult]:
        scanners = self.get_port_scanners()
        return scanners[0] if scanners else None

    def get_service_fingerprinter(self, service: NetworkService) -> Optional[MatchingResult]:
        # 핑거프린터는 이름 규칙만 보고, 등록 순서상 첫 번째 매칭만 돌려준다.
        for definition, factory in self._entries(PluginType.SERVICE_FINGERPRINT):
            if has_matching_service_name(service, definition, self.web_service_predicate):
                logger.debug("Fingerprinter %s matched %s:%s", definition.plugin_id, service.host, service.port)
                return MatchingResult(
                    plugin_definition=definition,
                    plugin=self._build(definition, factory, ServiceFingerprinter),
                    matched_services=(service,),
                )
        return None

    def get_vuln_detectors(self, report: Optional[ReconnaissanceReport]) -> List[MatchingResult]:
        services = services_of(report)
        results: List[MatchingResult] = []
        for definition, factory in self._entries(*VULN_DETECTOR_TYPES):
            if definition.plugin_type == PluginType.REMOTE_VULN_DETECTION:
                results.append(self._match_remote_vuln_detector(definition, factory, services))
                continue
            result = self._match_vuln_detector(definition, factory, services)
            if result is not None:
                results.append(result)
        logger.info(
            "Matched %d vuln detector(s) against %d service(s)",
            len(results),
            len(services),
        )
        return results

    def match_services(
        self,
        definition: PluginDefinition,
        services: Sequence[NetworkService],
    ) -> Tuple[NetworkService, ...]:
        # 와일드카드 정의는 모든 서비스, 그 외에는 이름 또는 소프트웨어 규칙을 만족하는 서비스만 남긴다.
        if definition.is_unconstrained:
            return tuple(services)
        return tuple(
            service
            for service in services
            if has_matching_service_name(service, definition, self.web_service_predicate)
            or has_matching_software(service, definition)
        )

    def _match_vuln_detector(
        self,
        definition: PluginDefinition,
        factory: PluginFactory,
        services: Sequence[NetworkService],
    ) -> Optional[MatchingResult]:
        matched = self.match_services(definition, services)
        # 조건이 있는 로컬 탐지기는 매칭 서비스가 없으면 결과에서 제외한다.
        if not matched and not definition.is_unconstrained:
            logger.debug("Vuln detector %s matched no services; skipped", definition.plugin_id)
            return None
        return MatchingResult(
            plugin_definition=definition,
            plugin=self._build(definition, factory, VulnDetector),
            matched_services=matched,
        )

    def _match_remote_vuln_detector(
        self,
        definition: PluginDefinition,
        factory: PluginFactory,
        services: Sequence[NetworkService],
    ) -> MatchingResult:
        detector = self._build(definition, factory, RemoteVulnDetector)
        added: List[MatchedPlugin] = []
        for remote_definition in detector.get_all_plugins() or []:
            # 로컬과 달리 매칭 서비스가 비어 있어도 작업 목록에 등록한다.
            matched_plugin = MatchedPlugin(
                plugin=remote_definition,
                services=self.match_services(remote_definition, services),
            )
            detector.add_matched_plugin_to_detect(matched_plugin)
            added.append(matched_plugin)
        logger.debug(
            "Remote vuln detector %s queued %d remote plugin(s)",
            definition.plugin_id,
            len(added),
        )
        return MatchingResult(
            plugin_definition=definition,
            plugin=detector,
            matched_services=tuple(services),
            matched_plugins=tuple(added),
        )

    def _entries(self, *plugin_types: PluginType) -> List[Tuple[PluginDefinition, PluginFactory]]:
        if self.registry is None:
            return []
        return [
            (definition, factory)
            for definition, factory in self.registry.all_definitions()
            if definition.plugin_type in plugin_types
        ]

    @staticmethod
    def _build(definition: PluginDefinition, factory: PluginFactory, expected: type):
        # factory 호출은 매칭 결과 하나당 정확히 한 번이며 캐시하지 않는다.
        plugin = factory()
        if not isinstance(plugin, expected):
            raise TypeError(
                f"Plugin {definition.plugin_id} declared as {definition.plugin_type.value} "
                f"but factory built {type(plugin).__name__}"
            )
        return plugin
