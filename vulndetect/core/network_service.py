"""이 파일은 .py 서비스 모델 헬퍼 모듈로 웹 서비스 판별과 이름 비교를 제공합니다."""

from __future__ import annotations

from .types import NetworkService

WEB_SERVICE_NAMES = frozenset(
    {
        "http",
        "http-alt",
        "http-proxy",
        "https",
        "https-alt",
        "radan-http",
        "ssl/http",
        "ssl/http-alt",
        "ssl/https",
        "ssl/https-alt",
        "sun-answerbook",
        "upnp",
        "webcache",
        "www",
    }
)


def service_name(service: NetworkService) -> str:
    # 식별되지 않은 서비스명은 빈 문자열로 돌려준다.
    return service.service_name or ""


def software_name(service: NetworkService) -> str:
    if service.software is None:
        return ""
    return service.software.name or ""


def ascii_lower(value: str) -> str:
    # ASCII 대문자만 소문자로 바꾸고 그 외 문자는 그대로 둔다.
    return "".join(chr(ord(ch) + 32) if "A" <= ch <= "Z" else ch for ch in value)


def equals_ignore_ascii_case(left: str, right: str) -> bool:
    if len(left) != len(right):
        return False
    return ascii_lower(left) == ascii_lower(right)


def is_web_service(service: NetworkService) -> bool:
    # HTTP 메서드를 광고하거나 알려진 웹 서비스명이면 웹 서비스로 분류한다.
    if service.supported_http_methods:
        return True
    return ascii_lower(service_name(service)) in WEB_SERVICE_NAMES
