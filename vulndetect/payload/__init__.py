"""이 파일은 .py 페이로드 패키지 초기화 모듈로 카탈로그/생성기/검증기를 노출합니다."""

from .catalog import (
    ExecutionEnvironment,
    InterpretationEnvironment,
    PayloadCatalog,
    PayloadDefinition,
    ValidationType,
    VulnerabilityType,
)
from .generator import Payload, PayloadGenerator, PayloadGeneratorConfig
from .validator import PayloadValidator, ValidationResult

__all__ = [
    "ExecutionEnvironment",
    "InterpretationEnvironment",
    "Payload",
    "PayloadCatalog",
    "PayloadDefinition",
    "PayloadGenerator",
    "PayloadGeneratorConfig",
    "PayloadValidator",
    "ValidationResult",
    "ValidationType",
    "VulnerabilityType",
]
