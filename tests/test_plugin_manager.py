"""이 파일은 .py 테스트 모듈로 플러그인 매칭 규칙을 검증합니다."""

from vulndetect.core.plugin_base import RemoteVulnDetector
from vulndetect.core.plugin_manager import PluginManager
from vulndetect.core.plugin_registry import PluginRegistry
from vulndetect.core.types import PluginDefinition, PluginType, ReconnaissanceReport

from plugin_fakes import (
    FakeFingerprinter,
    FakePortScanner,
    FakeVulnDetector,
    definition,
    registry_with,
    remote_detector_class,
    service,
)


def _report(*services) -> ReconnaissanceReport:
    return ReconnaissanceReport(target="10.0.0.1", network_services=services)


def test_port_scanners_are_not_filtered() -> None:
    registry = registry_with(
        (definition("scanner_a", PluginType.PORT_SCAN), FakePortScanner),
        (definition("detector", names=["http"]), FakeVulnDetector),
        (definition("scanner_b", PluginType.PORT_SCAN), FakePortScanner),
    )
    manager = PluginManager(registry)

    scanners = manager.get_port_scanners()

    assert [result.plugin_id for result in scanners] == ["scanner_a", "scanner_b"]
    assert all(result.matched_services == () for result in scanners)
    assert manager.get_port_scanner().plugin_id == "scanner_a"


def test_port_scanner_is_none_without_registration() -> None:
    assert PluginManager(PluginRegistry()).get_port_scanner() is None
    assert PluginManager(None).get_port_scanners() == []


def test_fingerprinter_first_match_wins() -> None:
    registry = registry_with(
        (definition("fp_ssh", PluginType.SERVICE_FINGERPRINT, names=["ssh"]), FakeFingerprinter),
        (definition("fp_first", PluginType.SERVICE_FINGERPRINT, names=["http"]), FakeFingerprinter),
        (definition("fp_second", PluginType.SERVICE_FINGERPRINT, names=["HTTP"]), FakeFingerprinter),
    )
    target = service("http")

    result = PluginManager(registry).get_service_fingerprinter(target)

    assert result.plugin_id == "fp_first"
    assert result.matched_services == (target,)


def test_fingerprinter_ignores_software_rule() -> None:
    registry = registry_with(
        (definition("fp_nginx", PluginType.SERVICE_FINGERPRINT, software="nginx"), FakeFingerprinter),
    )
    assert PluginManager(registry).get_service_fingerprinter(service("ssh", software="nginx")) is None


def test_fingerprinter_matches_web_service_flag() -> None:
    registry = registry_with(
        (definition("fp_web", PluginType.SERVICE_FINGERPRINT, web=True), FakeFingerprinter),
    )
    manager = PluginManager(registry)
    assert manager.get_service_fingerprinter(service("https", port=443)).plugin_id == "fp_web"
    assert manager.get_service_fingerprinter(service("ssh", port=22)) is None


def test_case_insensitive_service_name_match() -> None:
    registry = registry_with((definition("http_only", names=["http"]), FakeVulnDetector))
    http = service("HTTP")

    results = PluginManager(registry).get_vuln_detectors(_report(http))

    assert len(results) == 1
    assert results[0].matched_services == (http,)


def test_empty_service_name_matches_any_target_name_set() -> None:
    registry = registry_with((definition("redis_only", names=["redis"]), FakeVulnDetector))
    unresolved = service("", port=6379)

    results = PluginManager(registry).get_vuln_detectors(_report(unresolved))

    assert [result.matched_services for result in results] == [(unresolved,)]


def test_only_matching_services_are_kept() -> None:
    ssh = service("ssh", port=22)
    http = service("http", port=80)
    registry = registry_with((definition("http_only", names=["http"]), FakeVulnDetector))

    results = PluginManager(registry).get_vuln_detectors(_report(ssh, http))

    assert len(results) == 1
    assert results[0].matched_services == (http,)


def test_software_match_with_unresolved_service_name() -> None:
    nginx = service("", software="nginx")
    registry = registry_with((definition("nginx_only", software="nginx"), FakeVulnDetector))

    results = PluginManager(registry).get_vuln_detectors(_report(nginx))

    assert len(results) == 1
    assert results[0].matched_services == (nginx,)


def test_empty_software_name_is_a_candidate() -> None:
    unknown = service("ssh", port=22, software="")
    registry = registry_with((definition("tomcat_only", software="Tomcat"), FakeVulnDetector))

    results = PluginManager(registry).get_vuln_detectors(_report(unknown))

    assert results[0].matched_services == (unknown,)


def test_constrained_detector_without_matches_is_suppressed() -> None:
    registry = registry_with(
        (definition("mysql_only", names=["mysql"], software="mysql"), FakeVulnDetector),
        (definition("web_only", web=True), FakeVulnDetector),
    )
    report = _report(service("ssh", port=22, software="openssh"))

    assert PluginManager(registry).get_vuln_detectors(report) == []


def test_wildcard_detector_covers_all_services() -> None:
    services = (service("ssh", port=22), service("http", port=80), service("", port=9999))
    registry = registry_with((definition("wildcard"), FakeVulnDetector))

    results = PluginManager(registry).get_vuln_detectors(_report(*services))

    assert len(results) == 1
    assert results[0].matched_services == services


def test_wildcard_detector_with_empty_report_still_emits_result() -> None:
    registry = registry_with((definition("wildcard"), FakeVulnDetector))

    results = PluginManager(registry).get_vuln_detectors(_report())

    assert len(results) == 1
    assert results[0].matched_services == ()


def test_none_report_is_treated_as_no_services() -> None:
    registry = registry_with((definition("http_only", names=["http"]), FakeVulnDetector))
    assert PluginManager(registry).get_vuln_detectors(None) == []


def test_web_only_detector_uses_injected_predicate() -> None:
    odd = service("custom", port=8443)
    registry = registry_with((definition("web_only", web=True), FakeVulnDetector))
    manager = PluginManager(registry, web_service_predicate=lambda svc: svc.port == 8443)

    results = manager.get_vuln_detectors(_report(odd, service("ssh", port=22)))

    assert results[0].matched_services == (odd,)


def test_remote_detector_always_emits_one_result() -> None:
    remote_class = remote_detector_class([])
    registry = registry_with((definition("remote", PluginType.REMOTE_VULN_DETECTION), remote_class))
    ssh = service("ssh", port=22)

    results = PluginManager(registry).get_vuln_detectors(_report(ssh))

    assert len(results) == 1
    assert results[0].matched_services == (ssh,)
    assert results[0].matched_plugins == ()


def test_remote_detector_queues_every_remote_definition() -> None:
    ssh = service("ssh", port=22)
    http = service("http", port=80)
    remote_class = remote_detector_class(
        [
            definition("remote_http", names=["http"]),
            definition("remote_mysql", names=["mysql"]),
            definition("remote_wildcard"),
        ]
    )
    registry = registry_with((definition("remote", PluginType.REMOTE_VULN_DETECTION), remote_class))

    results = PluginManager(registry).get_vuln_detectors(_report(ssh, http))

    detector = results[0].plugin
    assert isinstance(detector, RemoteVulnDetector)
    queued = {item.plugin.plugin_id: item.services for item in detector.matched_plugins}
    assert queued == {
        "remote_http": (http,),
        # 매칭이 없어도 로컬과 달리 작업 목록에 남는다.
        "remote_mysql": (),
        "remote_wildcard": (ssh, http),
    }
    assert results[0].matched_plugins == detector.matched_plugins


def test_matching_is_deterministic() -> None:
    registry = registry_with(
        (definition("wildcard"), FakeVulnDetector),
        (definition("http_only", names=["http"]), FakeVulnDetector),
        (definition("nginx_only", software="nginx"), FakeVulnDetector),
    )
    report = _report(service("http"), service("ssh", port=22, software="nginx"))
    manager = PluginManager(registry)

    first = manager.get_vuln_detectors(report)
    second = manager.get_vuln_detectors(report)

    assert [(r.plugin_id, r.matched_services) for r in first] == [
        (r.plugin_id, r.matched_services) for r in second
    ]
    assert [r.plugin_id for r in first] == ["wildcard", "http_only", "nginx_only"]


def test_factory_called_once_per_result() -> None:
    calls = []

    def factory() -> FakeVulnDetector:
        calls.append(1)
        return FakeVulnDetector()

    registry = PluginRegistry()
    registry.register(definition("wildcard"), factory)
    manager = PluginManager(registry)

    manager.get_vuln_detectors(_report(service("http")))
    manager.get_vuln_detectors(_report(service("http")))

    assert len(calls) == 2


def test_factory_building_wrong_category_raises() -> None:
    registry = registry_with((definition("scanner", PluginType.PORT_SCAN), FakeVulnDetector))
    try:
        PluginManager(registry).get_port_scanners()
    except TypeError as exc:
        assert "scanner" in str(exc)
    else:
        raise AssertionError("TypeError not raised")


def test_remote_definition_with_string_service_name_matches_whole_name() -> None:
    http = service("http", port=80)
    stray = service("t", port=7)
    remote_class = remote_detector_class(
        [PluginDefinition("remote_http", PluginType.VULN_DETECTION, target_service_names="http")]
    )
    registry = registry_with((definition("remote", PluginType.REMOTE_VULN_DETECTION), remote_class))

    results = PluginManager(registry).get_vuln_detectors(_report(http, stray))

    assert [(item.plugin.plugin_id, item.services) for item in results[0].matched_plugins] == [
        ("remote_http", (http,))
    ]
