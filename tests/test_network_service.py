"""이 파일은 .py 테스트 모듈로 서비스 모델 헬퍼를 검증합니다."""

from vulndetect.core.network_service import (
    equals_ignore_ascii_case,
    is_web_service,
    service_name,
    software_name,
)
from vulndetect.core.types import NetworkService, ReconnaissanceReport

from plugin_fakes import service


def test_none_names_are_normalized_to_empty_string() -> None:
    svc = NetworkService(host="10.0.0.1", port=8080, service_name=None, software=None)
    assert service_name(svc) == ""
    assert software_name(svc) == ""


def test_report_with_no_services_is_empty_tuple() -> None:
    report = ReconnaissanceReport(target="10.0.0.1", network_services=None)
    assert report.network_services == ()


def test_is_web_service_by_known_name() -> None:
    assert is_web_service(service("HTTP"))
    assert is_web_service(service("ssl/https", port=443))
    assert not is_web_service(service("ssh", port=22))


def test_is_web_service_by_http_methods() -> None:
    assert is_web_service(service("", port=9000, http_methods=["GET", "POST"]))


def test_equals_ignore_ascii_case_only_folds_ascii() -> None:
    assert equals_ignore_ascii_case("HTTP", "http")
    assert not equals_ignore_ascii_case("http", "https")
    # ASCII 외 문자는 대소문자를 구분한다.
    assert not equals_ignore_ascii_case("É", "é")
