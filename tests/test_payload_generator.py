"""이 파일은 .py 테스트 모듈로 페이로드 생성과 토큰 치환을 검증합니다."""

from vulndetect.payload.catalog import (
    TOKEN_RANDOM,
    TOKEN_URL,
    ExecutionEnvironment,
    InterpretationEnvironment,
    PayloadCatalog,
    VulnerabilityType,
)
from vulndetect.payload.generator import PayloadGenerator, PayloadGeneratorConfig

LINUX_RCE = PayloadGeneratorConfig(
    vulnerability_type=VulnerabilityType.REFLECTIVE_RCE,
    interpretation_environment=InterpretationEnvironment.LINUX_SHELL,
    execution_environment=ExecutionEnvironment.EXEC_INTERPRETATION_ENVIRONMENT,
)


class StubCallbackClient:
    def get_callback_uri(self, secret: str) -> str:
        return f"http://cb.example.invalid/{secret}"

    def has_interaction(self, secret: str, since=None) -> bool:
        return False


def test_printf_payload_renders_random_token_between_sentinels() -> None:
    generator = PayloadGenerator(PayloadCatalog.from_default())

    payload = generator.generate(LINUX_RCE)

    assert payload.name == "linux_printf"
    assert payload.payload == f"printf %s%s%s PAYLOAD_START {payload.random_token} PAYLOAD_END"
    assert TOKEN_RANDOM not in payload.payload
    assert payload.callback_url is None


def test_each_generation_uses_fresh_tokens() -> None:
    generator = PayloadGenerator(PayloadCatalog.from_default(), StubCallbackClient())

    first = generator.generate(LINUX_RCE)
    second = generator.generate(LINUX_RCE)

    assert first.random_token != second.random_token
    assert first.callback_secret != second.callback_secret
    assert first.callback_url != second.callback_url


def test_callback_payload_preferred_when_callback_server_enabled() -> None:
    generator = PayloadGenerator(PayloadCatalog.from_default(), StubCallbackClient())

    payload = generator.generate(LINUX_RCE)

    assert payload.name == "linux_callback"
    assert payload.uses_callback_server
    assert payload.payload == f"curl {payload.callback_url}"
    assert TOKEN_URL not in payload.payload


def test_config_can_opt_out_of_callback_payloads() -> None:
    generator = PayloadGenerator(PayloadCatalog.from_default(), StubCallbackClient())
    config = PayloadGeneratorConfig(
        vulnerability_type=VulnerabilityType.REFLECTIVE_RCE,
        interpretation_environment=InterpretationEnvironment.LINUX_SHELL,
        execution_environment=ExecutionEnvironment.EXEC_INTERPRETATION_ENVIRONMENT,
        use_callback_server=False,
    )
    assert generator.generate(config).name == "linux_printf"


def test_blind_rce_without_callback_server_has_no_payload() -> None:
    generator = PayloadGenerator(PayloadCatalog.from_default())
    config = PayloadGeneratorConfig(
        vulnerability_type=VulnerabilityType.BLIND_RCE,
        interpretation_environment=InterpretationEnvironment.LINUX_SHELL,
        execution_environment=ExecutionEnvironment.EXEC_INTERPRETATION_ENVIRONMENT,
    )
    assert generator.generate(config) is None
