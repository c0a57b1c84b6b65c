"""이 파일은 .py 타입 정의 모듈로 네트워크 서비스, 플러그인 정의와 탐지 결과 모델을 제공합니다."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple

from .errors import PluginDefinitionError


@dataclass(frozen=True)
class Software:
    # 서비스에서 식별된 소프트웨어 정보이다. 알 수 없으면 빈 문자열을 쓴다.
    name: str = ""
    version: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", self.name or "")
        object.__setattr__(self, "version", self.version or "")


@dataclass(frozen=True)
class NetworkService:
    # 정찰 단계에서 발견된 하나의 네트워크 엔드포인트이다.
    host: str
    port: int
    transport_protocol: str = "tcp"
    # 빈 문자열은 "아직 식별되지 않은 서비스"를 의미한다.
    service_name: str = ""
    software: Software = field(default_factory=Software)
    supported_http_methods: Tuple[str, ...] = ()
    banner: str = ""

    def __post_init__(self) -> None:
        # None이 들어와도 문자열 비교가 항상 안전하도록 정규화한다.
        object.__setattr__(self, "service_name", self.service_name or "")
        object.__setattr__(self, "software", self.software or Software())
        object.__setattr__(self, "supported_http_methods", tuple(self.supported_http_methods or ()))
        object.__setattr__(self, "banner", self.banner or "")


@dataclass(frozen=True)
class ReconnaissanceReport:
    # 하나의 스캔 대상에 대해 발견된 서비스 목록(읽기 전용)이다.
    target: str
    network_services: Tuple[NetworkService, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "network_services", tuple(self.network_services or ()))


class PluginType(str, Enum):
    # 플러그인 카테고리별로 매칭 규칙이 다르다.
    PORT_SCAN = "PORT_SCAN"
    SERVICE_FINGERPRINT = "SERVICE_FINGERPRINT"
    VULN_DETECTION = "VULN_DETECTION"
    REMOTE_VULN_DETECTION = "REMOTE_VULN_DETECTION"


@dataclass(frozen=True)
class PluginDefinition:
    """설치된 플러그인 하나의 식별 정보와 적용 대상 메타데이터.

    target_service_names와 target_software는 없으면 None이고, 있으면 비어 있을 수 없다.
    원격 소스에서 내려온 원격 플러그인 정의도 같은 구조를 사용한다.
    """

    plugin_id: str
    plugin_type: PluginType
    target_service_names: Optional[FrozenSet[str]] = None
    target_software: Optional[str] = None
    for_web_service: bool = False
    name: str = ""
    version: str = ""
    description: str = ""

    def __post_init__(self) -> None:
        if not self.plugin_id:
            raise PluginDefinitionError("Plugin definition requires a plugin_id")
        try:
            object.__setattr__(self, "plugin_type", PluginType(self.plugin_type))
        except ValueError as exc:
            raise PluginDefinitionError(
                f"Unknown plugin type {self.plugin_type!r} for {self.plugin_id}"
            ) from exc
        if self.target_service_names is not None:
            names = self.target_service_names
            # 문자열 하나는 이름 하나로 본다. 문자 단위로 쪼개지 않는다.
            if isinstance(names, str):
                names = [names]
            names = frozenset(names)
            if not names:
                raise PluginDefinitionError(f"Empty target_service_names for {self.plugin_id}")
            object.__setattr__(self, "target_service_names", names)
        if self.target_software is not None and not self.target_software:
            raise PluginDefinitionError(f"Empty target_software for {self.plugin_id}")

    @property
    def is_unconstrained(self) -> bool:
        # 이름/소프트웨어/웹 조건이 모두 없으면 모든 서비스에 적용되는 와일드카드다.
        return (
            self.target_service_names is None
            and self.target_software is None
            and not self.for_web_service
        )


@dataclass(frozen=True)
class MatchedPlugin:
    # 원격 탐지기가 실행할 (원격 플러그인 정의, 매칭된 서비스) 쌍이다. 서비스는 비어 있을 수 있다.
    plugin: PluginDefinition
    services: Tuple[NetworkService, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "services", tuple(self.services))


class DetectionStatus(str, Enum):
    VULNERABILITY_VERIFIED = "VULNERABILITY_VERIFIED"
    VULNERABILITY_UNCONFIRMED = "VULNERABILITY_UNCONFIRMED"


@dataclass
class DetectionReport:
    # 탐지 플러그인 결과를 표준화한 구조체이다.
    plugin_id: str
    service: Optional[NetworkService]
    title: str
    status: DetectionStatus = DetectionStatus.VULNERABILITY_VERIFIED
    # evidence는 근거(요청, 응답 일부, 콜백 기록 등)를 담는다.
    evidence: Dict = field(default_factory=dict)


def services_of(report: Optional[ReconnaissanceReport]) -> Tuple[NetworkService, ...]:
    # None 리포트는 서비스가 없는 것으로 취급한다.
    if report is None:
        return ()
    return report.network_services
