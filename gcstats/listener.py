"""
gcstats/listener.py — GC 事件监听器

GcEventListener 做两件事:
  1. 运行时 provider 出现时，仅启用 GC 类别（bit 0）、Informational 级别
  2. 收到 GCHeapStats_V1 / V2 事件时解码 payload，逐字段写入 Gauge

每个事件独立处理，不保留任何跨事件状态。
"""
import logging
from typing import Any, Dict, Optional

from .config import GCStatsConfig
from .events import (
    DiagnosticEvent,
    EventKeywords,
    EventLevel,
    EventListener,
    EventSource,
)
from .gauges import GaugeRegistry
from .heap_stats import (
    HeapStatsFields,
    HeapStatsVersion,
    iter_decode_stages,
    is_empty_payload,
    resolve_version,
)

logger = logging.getLogger(__name__)


class GcEventListener(EventListener):
    """
    GC 堆统计监听器

    使用方式:
        registry = InMemoryGaugeRegistry()
        listener = GcEventListener(registry)
        host.add_listener(listener)
    """

    def __init__(
        self,
        registry: GaugeRegistry,
        config: Optional[GCStatsConfig] = None,
    ):
        self._registry = registry
        self.config = config or GCStatsConfig()

    def on_event_source_created(self, source: EventSource) -> None:
        if source.name == self.config.provider_name:
            self.enable_events(source, EventLevel.INFORMATIONAL, EventKeywords.GC)
            logger.info(f"GcEventListener 已启用事件源: {source.name}")

    def on_event_written(self, event: DiagnosticEvent) -> None:
        version = resolve_version(event.name, self.config.normalize_event_names)
        if version is None:
            return
        self.process_heap_stats(event, version)

    def process_heap_stats(
        self,
        event: DiagnosticEvent,
        version: HeapStatsVersion,
    ) -> Optional[HeapStatsFields]:
        """
        解码并发布一个 GCHeapStats 事件

        Returns:
            解码结果；payload 为空时返回 None（不写任何 Gauge）

        Raises:
            PayloadDecodeError: 不捕获，交由事件宿主处理
        """
        if event is None or is_empty_payload(event.payload):
            return None

        # 逐阶段发布；V1 事件只有公共阶段，不触碰 POH Gauge
        fields = None
        for specs, fields in iter_decode_stages(event.payload, version, event.name):
            self._publish(fields, specs)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"{event.name.strip()} 已发布: {fields.to_dict()}")
        return fields

    def _publish(self, fields: HeapStatsFields, specs) -> None:
        for target, value in fields.gauge_values(specs):
            self._registry.set_gauge(target, value)

    def get_stats(self) -> Dict[str, Any]:
        return {
            "provider_name": self.config.provider_name,
            "normalize_event_names": self.config.normalize_event_names,
            "registry": self._registry.get_stats(),
        }
