"""이 파일은 .py 페이로드 생성 모듈로 카탈로그 선택과 토큰 치환을 담당합니다."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import re
import secrets
import time
from typing import Optional, Pattern

from vulndetect.adapters.callback import CallbackClient

from .catalog import (
    TOKEN_RANDOM,
    TOKEN_URL,
    ExecutionEnvironment,
    InterpretationEnvironment,
    PayloadCatalog,
    PayloadDefinition,
    ValidationType,
    VulnerabilityType,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PayloadGeneratorConfig:
    vulnerability_type: VulnerabilityType
    interpretation_environment: InterpretationEnvironment
    execution_environment: ExecutionEnvironment
    # 콜백 서버가 설정된 세션이면 콜백 페이로드를 우선한다.
    use_callback_server: bool = True


@dataclass(frozen=True)
class Payload:
    """토큰이 치환된, 한 번의 프로브 전용 페이로드.

    random_token과 callback_secret은 프로브마다 새로 만들어지며 다른 프로브와 공유하지 않는다.
    """

    definition: PayloadDefinition
    payload: str
    random_token: str
    callback_secret: Optional[str] = None
    callback_url: Optional[str] = None
    # 콜백 조회 시 "이 시각 이후의 기록"을 묻는 기준 시각(epoch 초)이다.
    created_at: float = field(default_factory=time.time)

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def validation_type(self) -> ValidationType:
        return self.definition.validation_type or ValidationType.VALIDATION_NONE

    @property
    def uses_callback_server(self) -> bool:
        return self.definition.uses_callback_server

    @property
    def validation_pattern(self) -> Optional[Pattern[str]]:
        # 같은 랜덤 토큰을 넣어 검증 정규식을 렌더링한다.
        if not self.definition.validation_regex:
            return None
        rendered = self.definition.validation_regex.replace(TOKEN_RANDOM, re.escape(self.random_token))
        return re.compile(rendered, re.DOTALL)


def generate_random_token() -> str:
    return secrets.token_hex(8)


def generate_callback_secret() -> str:
    return secrets.token_hex(16)


class PayloadGenerator:
    def __init__(self, catalog: PayloadCatalog, callback_client: Optional[CallbackClient] = None) -> None:
        self.catalog = catalog
        self.callback_client = callback_client

    def is_callback_server_enabled(self) -> bool:
        return self.callback_client is not None

    def generate(self, config: PayloadGeneratorConfig) -> Optional[Payload]:
        candidates = self.catalog.select_payloads(
            config.interpretation_environment,
            config.execution_environment,
            config.vulnerability_type,
        )
        if config.use_callback_server and self.is_callback_server_enabled():
            for definition in candidates:
                if definition.uses_callback_server:
                    return self.render(definition)
        # 콜백 서버를 쓸 수 없으면 콜백이 필요 없는 페이로드로 대체한다.
        for definition in candidates:
            if not definition.uses_callback_server:
                return self.render(definition)
        logger.info(
            "No payload for %s/%s/%s",
            config.vulnerability_type.value,
            config.interpretation_environment.value,
            config.execution_environment.value,
        )
        return None

    def render(self, definition: PayloadDefinition) -> Payload:
        # 호출마다 새 토큰을 만들어 프로브 간 상관관계 충돌을 막는다.
        random_token = generate_random_token()
        payload_string = definition.payload_string.replace(TOKEN_RANDOM, random_token)
        callback_secret = None
        callback_url = None
        if definition.uses_callback_server:
            if self.callback_client is None:
                raise ValueError(f"Payload {definition.name} requires a callback server")
            callback_secret = generate_callback_secret()
            callback_url = self.callback_client.get_callback_uri(callback_secret)
            payload_string = payload_string.replace(TOKEN_URL, callback_url)
        return Payload(
            definition=definition,
            payload=payload_string,
            random_token=random_token,
            callback_secret=callback_secret,
            callback_url=callback_url,
        )
