"""이 파일은 .py 플러그인 로더 모듈로 plugin.yml 메타데이터 로딩과 레지스트리 등록을 수행합니다."""

import importlib.util
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from .plugin_base import (
    BasePlugin,
    PortScanner,
    RemoteVulnDetector,
    ServiceFingerprinter,
    VulnDetector,
)
from .plugin_registry import PluginFactory, PluginRegistry
from .types import PluginDefinition, PluginType

logger = logging.getLogger(__name__)

# 카테고리 태그별로 플러그인 클래스가 상속해야 하는 베이스 클래스이다.
BASE_CLASS_BY_TYPE = {
    PluginType.PORT_SCAN: PortScanner,
    PluginType.SERVICE_FINGERPRINT: ServiceFingerprinter,
    PluginType.VULN_DETECTION: VulnDetector,
    PluginType.REMOTE_VULN_DETECTION: RemoteVulnDetector,
}


@dataclass(frozen=True)
class PluginMeta:
    # plugin.yml에서 읽은 정의와 실행 진입점 정보를 묶는다.
    definition: PluginDefinition
    entry_point: str
    class_name: str
    plugin_dir: Path
    config: Dict

    @property
    def plugin_id(self) -> str:
        return self.definition.plugin_id

    @property
    def module_path(self) -> Path:
        # entry_point를 플러그인 디렉토리에 결합해 실제 모듈 경로를 만든다.
        return self.plugin_dir / self.entry_point


class PluginLoader:
    def __init__(self, plugins_dir: Path):
        self.plugins_dir = Path(plugins_dir)

    def discover(self) -> List[PluginMeta]:
        # plugins_dir 하위의 모든 plugin.yml을 경로 순서대로 탐색한다.
        metas: List[PluginMeta] = []
        if not self.plugins_dir.exists():
            logger.warning("Plugins directory not found: %s", self.plugins_dir)
            return metas
        for plugin_file in sorted(self.plugins_dir.rglob("plugin.yml")):
            meta = self._load_meta(plugin_file)
            if meta:
                metas.append(meta)
        return metas

    def populate(self, registry: PluginRegistry) -> PluginRegistry:
        # 탐색된 플러그인을 발견 순서대로 레지스트리에 등록한다.
        for meta in self.discover():
            registry.register(meta.definition, self.factory_for(meta))
        logger.info("Registered %d plugin(s) from %s", len(registry), self.plugins_dir)
        return registry

    def factory_for(self, meta: PluginMeta) -> PluginFactory:
        def factory() -> BasePlugin:
            # 호출될 때마다 새 인스턴스를 만든다.
            return self.load_plugin(meta)

        return factory

    def load_plugin(self, meta: PluginMeta) -> BasePlugin:
        # entry_point를 동적으로 import하여 클래스 인스턴스를 만든다.
        module = self._import_module(meta)
        plugin_class = getattr(module, meta.class_name, None)
        if plugin_class is None:
            raise ImportError(f"Class {meta.class_name} not found in {meta.module_path}")
        expected = BASE_CLASS_BY_TYPE[meta.definition.plugin_type]
        if not isinstance(plugin_class, type) or not issubclass(plugin_class, expected):
            raise TypeError(f"{meta.class_name} does not extend {expected.__name__}")
        return plugin_class(dict(meta.config))

    def _load_meta(self, plugin_file: Path) -> Optional[PluginMeta]:
        # plugin.yml을 읽어 필수 필드를 검증한다.
        data = yaml.safe_load(plugin_file.read_text()) or {}
        required = ["id", "type", "entry_point", "class_name"]
        for field in required:
            if field not in data:
                raise ValueError(f"Missing required field {field} in {plugin_file}")

        # 단일 문자열로 적힌 서비스명도 목록으로 받아들인다.
        names = data.get("target_service_names")
        if isinstance(names, str):
            names = [names]

        definition = PluginDefinition(
            plugin_id=str(data["id"]),
            plugin_type=str(data["type"]).upper(),
            target_service_names=frozenset(str(name) for name in names) if names is not None else None,
            target_software=data.get("target_software"),
            for_web_service=bool(data.get("for_web_service", False)),
            name=str(data.get("name", "")),
            version=str(data.get("version", "")),
            description=str(data.get("description", "") or ""),
        )
        return PluginMeta(
            definition=definition,
            entry_point=str(data["entry_point"]),
            class_name=str(data["class_name"]),
            plugin_dir=plugin_file.parent,
            config=data.get("config", {}) or {},
        )

    def _import_module(self, meta: PluginMeta):
        # entry_point 경로가 존재하는지 확인한다.
        module_path = meta.module_path
        if not module_path.exists():
            raise FileNotFoundError(f"Entry point not found: {module_path}")

        # importlib으로 플러그인 모듈을 로드한다.
        spec = importlib.util.spec_from_file_location(meta.plugin_id, module_path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot load module from {module_path}")

        # 모듈 객체를 생성한 뒤 실제 코드를 실행한다.
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module
