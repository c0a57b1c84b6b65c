"""이 파일은 .py 오케스트레이터 서비스 모듈로 매칭된 플러그인 실행 흐름을 제공합니다."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Dict, List, Optional

from vulndetect.core import config
from vulndetect.core.plugin_loader import PluginLoader
from vulndetect.core.plugin_manager import MatchingResult, PluginManager
from vulndetect.core.plugin_registry import PluginRegistry
from vulndetect.core.types import DetectionReport, PluginDefinition, ReconnaissanceReport

logger = logging.getLogger(__name__)


@dataclass
class ScanSummary:
    target: str
    reports: List[DetectionReport] = field(default_factory=list)
    # 실패한 plugin_id -> 오류 메시지이다. 한 플러그인 실패가 다른 플러그인을 막지 않는다.
    failed_plugins: Dict[str, str] = field(default_factory=dict)
    executed_plugins: List[str] = field(default_factory=list)


class Orchestrator:
    def __init__(
        self,
        registry: Optional[PluginRegistry] = None,
        plugins_dir: Optional[Path] = None,
        max_workers: int = config.MAX_WORKERS,
    ) -> None:
        if registry is None:
            # 레지스트리가 주어지지 않으면 plugins 디렉토리에서 채운다.
            registry = PluginLoader(plugins_dir or config.PLUGINS_DIR).populate(PluginRegistry())
            registry.freeze()
        self.registry = registry
        self.manager = PluginManager(registry)
        self.max_workers = max(1, max_workers)

    def list_plugins(self) -> List[PluginDefinition]:
        return [definition for definition, _ in self.registry.all_definitions()]

    def run(self) -> None:
        plugins = self.list_plugins()
        logger.info("Discovered %d plugins", len(plugins))

    def fingerprint(self, target: str, report: ReconnaissanceReport) -> ReconnaissanceReport:
        # 서비스마다 첫 번째로 매칭되는 핑거프린터 결과로 교체한 새 리포트를 만든다.
        services = []
        for service in report.network_services:
            result = self.manager.get_service_fingerprinter(service)
            if result is None:
                services.append(service)
                continue
            services.append(result.plugin.fingerprint(target, service))
        return ReconnaissanceReport(target=report.target, network_services=tuple(services))

    def run_detectors(self, target: str, report: ReconnaissanceReport) -> ScanSummary:
        matches = self.manager.get_vuln_detectors(report)
        summary = ScanSummary(target=target)
        if not matches:
            logger.info("No vuln detectors matched target %s", target)
            return summary

        # 대상 과부하를 막기 위해 동시 실행 수를 제한한다.
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = {pool.submit(self._execute, target, match): match for match in matches}
            for future in as_completed(futures):
                match = futures[future]
                try:
                    reports = future.result()
                except Exception as exc:
                    logger.error("Plugin %s failed on %s: %s", match.plugin_id, target, exc, exc_info=True)
                    summary.failed_plugins[match.plugin_id] = str(exc)
                    continue
                summary.executed_plugins.append(match.plugin_id)
                summary.reports.extend(reports)

        logger.info(
            "Target %s: %d plugin(s) executed, %d failed, %d report(s)",
            target,
            len(summary.executed_plugins),
            len(summary.failed_plugins),
            len(summary.reports),
        )
        return summary

    @staticmethod
    def _execute(target: str, match: MatchingResult) -> List[DetectionReport]:
        return list(match.plugin.detect(target, match.matched_services) or [])
