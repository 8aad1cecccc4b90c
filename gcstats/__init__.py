"""
gcstats — GC 堆统计事件解码

把托管运行时诊断事件源发出的 GCHeapStats 事件解码为 Gauge 写入。

最小集成:
    from gcstats import EventSourceHost, GcEventListener, InMemoryGaugeRegistry

    host = EventSourceHost()
    registry = InMemoryGaugeRegistry()
    host.add_listener(GcEventListener(registry))

    runtime = host.create_source("Microsoft-Windows-DotNETRuntime")
    runtime.write("GCHeapStats_V1", payload, keywords=EventKeywords.GC)

导出到 Prometheus:
    from gcstats_observability import setup_gc_metrics
    setup_gc_metrics(host)
"""

__version__ = "1.0.0"

from .config import GCStatsConfig, RUNTIME_PROVIDER_NAME
from .events import (
    DiagnosticEvent,
    EventKeywords,
    EventLevel,
    EventListener,
    EventSource,
    EventSourceHost,
)
from .gauges import GaugeRegistry, GaugeTarget, InMemoryGaugeRegistry
from .heap_stats import (
    HEAP_STATS_FIELDS,
    HEAP_STATS_V1_EVENT,
    HEAP_STATS_V2_EVENT,
    FieldSpec,
    HeapStatsFields,
    HeapStatsVersion,
    decode_heap_stats,
    resolve_version,
)
from .listener import GcEventListener
from .exceptions import GCStatsError, ConfigError, PayloadDecodeError

__all__ = [
    # 核心
    "GcEventListener",
    "GCStatsConfig",
    "RUNTIME_PROVIDER_NAME",
    # 事件宿主
    "EventSourceHost",
    "EventSource",
    "EventListener",
    "DiagnosticEvent",
    "EventLevel",
    "EventKeywords",
    # Gauge
    "GaugeRegistry",
    "GaugeTarget",
    "InMemoryGaugeRegistry",
    # 解码
    "HeapStatsFields",
    "HeapStatsVersion",
    "FieldSpec",
    "HEAP_STATS_FIELDS",
    "HEAP_STATS_V1_EVENT",
    "HEAP_STATS_V2_EVENT",
    "decode_heap_stats",
    "resolve_version",
    # 异常
    "GCStatsError",
    "ConfigError",
    "PayloadDecodeError",
]
