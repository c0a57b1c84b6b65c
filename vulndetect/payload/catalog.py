"""이 파일은 .py 페이로드 카탈로그 모듈로 YAML 정의 로딩, 검증과 선택을 담당합니다."""

from __future__ import annotations

import logging
import re
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from vulndetect.core.config import DEFAULT_PAYLOAD_FILE
from vulndetect.core.errors import PayloadCatalogError

logger = logging.getLogger(__name__)

# 렌더링 시 치환되는 토큰과 랜덤 토큰을 감싸는 표식 문자열이다.
TOKEN_URL = "$TOKEN_URL"
TOKEN_RANDOM = "$TOKEN_RANDOM"
PAYLOAD_START = "PAYLOAD_START"
PAYLOAD_END = "PAYLOAD_END"


class InterpretationEnvironment(str, Enum):
    # 페이로드가 작성된 언어/런타임이다.
    INTERPRETATION_ANY = "INTERPRETATION_ANY"
    LINUX_SHELL = "LINUX_SHELL"
    WINDOWS_SHELL = "WINDOWS_SHELL"
    JAVA = "JAVA"
    PYTHON = "PYTHON"


class ExecutionEnvironment(str, Enum):
    # 페이로드의 효과가 관찰되는 위치이다.
    EXEC_ANY = "EXEC_ANY"
    EXEC_INTERPRETATION_ENVIRONMENT = "EXEC_INTERPRETATION_ENVIRONMENT"


class ValidationType(str, Enum):
    VALIDATION_NONE = "VALIDATION_NONE"
    VALIDATION_REGEX = "VALIDATION_REGEX"
    VALIDATION_CALLBACK = "VALIDATION_CALLBACK"


class VulnerabilityType(str, Enum):
    SSRF = "SSRF"
    REFLECTIVE_RCE = "REFLECTIVE_RCE"
    BLIND_RCE = "BLIND_RCE"
    ARBITRARY_FILE_READ = "ARBITRARY_FILE_READ"
    ARBITRARY_FILE_WRITE = "ARBITRARY_FILE_WRITE"


def _normalize_enum_value(value: Any, short_forms: Dict[str, str]) -> Any:
    # "any", "regex" 같은 짧은 표기를 정식 열거값으로 바꾼다.
    if not isinstance(value, str):
        return value
    normalized = value.strip().upper()
    if normalized in short_forms:
        return short_forms[normalized]
    return normalized


class PayloadDefinition(BaseModel):
    """카탈로그의 페이로드 템플릿 한 건.

    각 필드는 snake_case와 camelCase 표기를 모두 받는다.
    validation_type이 없으면 콜백 페이로드는 VALIDATION_CALLBACK,
    정규식이 있으면 VALIDATION_REGEX, 그 외에는 VALIDATION_NONE으로 채운다.
    """

    name: str = Field(..., min_length=1)
    interpretation_environment: InterpretationEnvironment = Field(..., alias="interpretationEnvironment")
    execution_environment: ExecutionEnvironment = Field(..., alias="executionEnvironment")
    uses_callback_server: bool = Field(False, alias="usesCallbackServer")
    payload_string: str = Field(..., alias="payloadString", min_length=1)
    validation_type: Optional[ValidationType] = Field(None, alias="validationType")
    validation_regex: Optional[str] = Field(None, alias="validationRegex")
    vulnerability_type: List[VulnerabilityType] = Field(..., alias="vulnerabilityType", min_length=1)

    # alias 필드를 허용하여 두 가지 키 표기를 동일하게 처리한다.
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    @field_validator("interpretation_environment", mode="before")
    @classmethod
    def _interpretation_alias(cls, value: Any) -> Any:
        return _normalize_enum_value(value, {"ANY": "INTERPRETATION_ANY"})

    @field_validator("execution_environment", mode="before")
    @classmethod
    def _execution_alias(cls, value: Any) -> Any:
        return _normalize_enum_value(
            value,
            {"ANY": "EXEC_ANY", "INTERPRETATION_ENVIRONMENT": "EXEC_INTERPRETATION_ENVIRONMENT"},
        )

    @field_validator("validation_type", mode="before")
    @classmethod
    def _validation_alias(cls, value: Any) -> Any:
        return _normalize_enum_value(
            value,
            {"NONE": "VALIDATION_NONE", "REGEX": "VALIDATION_REGEX", "CALLBACK": "VALIDATION_CALLBACK"},
        )

    @field_validator("vulnerability_type", mode="before")
    @classmethod
    def _vulnerability_list(cls, value: Any) -> Any:
        # 단일 값도 목록으로 받아들인다.
        if isinstance(value, str):
            value = [value]
        if isinstance(value, list):
            return [item.strip().upper() if isinstance(item, str) else item for item in value]
        return value

    @model_validator(mode="after")
    def _check_validation(self) -> "PayloadDefinition":
        if self.uses_callback_server:
            if self.validation_type is None:
                self.validation_type = ValidationType.VALIDATION_CALLBACK
            if self.validation_type != ValidationType.VALIDATION_CALLBACK:
                raise ValueError("callback payloads are validated by the callback server only")
            if self.validation_regex:
                raise ValueError("callback payloads cannot declare validation_regex")
            if TOKEN_URL not in self.payload_string:
                raise ValueError(f"callback payloads must reference {TOKEN_URL}")
            return self

        if self.validation_type is None:
            self.validation_type = (
                ValidationType.VALIDATION_REGEX if self.validation_regex else ValidationType.VALIDATION_NONE
            )
        if self.validation_type == ValidationType.VALIDATION_CALLBACK:
            raise ValueError("VALIDATION_CALLBACK requires uses_callback_server")
        if self.validation_type == ValidationType.VALIDATION_REGEX:
            if not self.validation_regex:
                raise ValueError("VALIDATION_REGEX requires validation_regex")
            try:
                # 토큰 자리에 임의 값을 넣어 정규식이 컴파일되는지 미리 확인한다.
                re.compile(self.validation_regex.replace(TOKEN_RANDOM, "0" * 16))
            except re.error as exc:
                raise ValueError(f"invalid validation_regex: {exc}") from exc
        elif self.validation_regex:
            raise ValueError("validation_regex is only allowed with VALIDATION_REGEX")
        return self

    def supports(
        self,
        interpretation_environment: InterpretationEnvironment,
        execution_environment: ExecutionEnvironment,
        vulnerability_type: VulnerabilityType,
    ) -> bool:
        interpretation_ok = self.interpretation_environment in (
            InterpretationEnvironment.INTERPRETATION_ANY,
            interpretation_environment,
        )
        execution_ok = self.execution_environment in (ExecutionEnvironment.EXEC_ANY, execution_environment)
        return interpretation_ok and execution_ok and vulnerability_type in self.vulnerability_type


class PayloadCatalog:
    def __init__(self, payloads: List[PayloadDefinition]):
        # 선언 순서를 그대로 유지한다.
        self.payloads = list(payloads)

    @classmethod
    def from_records(cls, records: Any, source: str = "<memory>") -> "PayloadCatalog":
        # 최상위 payloads 키 아래 목록 또는 목록 자체를 받는다.
        if isinstance(records, dict):
            records = records.get("payloads")
        if records is None:
            records = []
        if not isinstance(records, list):
            raise PayloadCatalogError(f"Payload catalog {source} must contain a list of payloads")

        payloads: List[PayloadDefinition] = []
        seen = set()
        for index, record in enumerate(records):
            if not isinstance(record, dict):
                raise PayloadCatalogError(f"Payload #{index} in {source} must be a mapping")
            label = record.get("name") or f"#{index}"
            try:
                payload = PayloadDefinition.model_validate(record)
            except ValidationError as exc:
                raise PayloadCatalogError(f"Invalid payload {label} in {source}: {exc}") from exc
            if payload.name in seen:
                raise PayloadCatalogError(f"Duplicate payload name {payload.name} in {source}")
            seen.add(payload.name)
            payloads.append(payload)

        logger.info("Loaded %d payload definition(s) from %s", len(payloads), source)
        return cls(payloads)

    @classmethod
    def from_yaml(cls, text: str, source: str = "<memory>") -> "PayloadCatalog":
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise PayloadCatalogError(f"Cannot parse payload catalog {source}: {exc}") from exc
        return cls.from_records(data, source=source)

    @classmethod
    def from_file(cls, path: Path) -> "PayloadCatalog":
        path = Path(path)
        return cls.from_yaml(path.read_text(encoding="utf-8"), source=str(path))

    @classmethod
    def from_default(cls) -> "PayloadCatalog":
        return cls.from_file(DEFAULT_PAYLOAD_FILE)

    def select_payloads(
        self,
        interpretation_environment: InterpretationEnvironment,
        execution_environment: ExecutionEnvironment,
        vulnerability_type: VulnerabilityType,
    ) -> List[PayloadDefinition]:
        # 순위를 매기지 않고 선언 순서대로 조건을 만족하는 항목을 모두 돌려준다.
        return [
            payload
            for payload in self.payloads
            if payload.supports(
                InterpretationEnvironment(interpretation_environment),
                ExecutionEnvironment(execution_environment),
                VulnerabilityType(vulnerability_type),
            )
        ]

    def __len__(self) -> int:
        return len(self.payloads)
