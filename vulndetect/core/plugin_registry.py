"""이 파일은 .py 플러그인 레지스트리 모듈로 정의와 생성 함수(factory)를 보관합니다."""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterator, List, Tuple

from .errors import PluginRegistryError
from .plugin_base import BasePlugin
from .types import PluginDefinition, PluginType

logger = logging.getLogger(__name__)

PluginFactory = Callable[[], BasePlugin]


class PluginRegistry:
    """PluginDefinition -> factory 매핑.

    순회 순서는 등록 순서로 고정되며 "첫 번째 매칭"은 이 순서를 따른다.
    factory는 호출될 때마다 새 인스턴스를 만들 수 있으므로 싱글턴을 가정하지 않는다.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Tuple[PluginDefinition, PluginFactory]] = {}
        self._frozen = False

    def register(self, definition: PluginDefinition, factory: PluginFactory) -> None:
        if self._frozen:
            raise PluginRegistryError("Registry is frozen; cannot register new plugins")
        if definition.plugin_id in self._entries:
            raise PluginRegistryError(f"Plugin already registered: {definition.plugin_id}")
        if not callable(factory):
            raise PluginRegistryError(f"Factory for {definition.plugin_id} is not callable")
        self._entries[definition.plugin_id] = (definition, factory)
        logger.debug("Registered plugin %s (%s)", definition.plugin_id, definition.plugin_type.value)

    def freeze(self) -> None:
        # 채우기가 끝난 뒤에는 읽기 전용으로 동시 조회가 안전하다.
        self._frozen = True

    def all_definitions(self) -> List[Tuple[PluginDefinition, PluginFactory]]:
        return list(self._entries.values())

    def by_type(self, plugin_type: PluginType) -> List[Tuple[PluginDefinition, PluginFactory]]:
        return [entry for entry in self._entries.values() if entry[0].plugin_type == plugin_type]

    def get(self, plugin_id: str) -> Tuple[PluginDefinition, PluginFactory]:
        if plugin_id not in self._entries:
            raise PluginRegistryError(f"Plugin not registered: {plugin_id}")
        return self._entries[plugin_id]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Tuple[PluginDefinition, PluginFactory]]:
        return iter(self.all_definitions())
