"""
gcstats/gauges.py — Gauge 标识与指标注册表协议

GaugeTarget 是固定、预声明的 Gauge 集合，每个成员的 value 即指标名后缀。
GaugeRegistry 是外部指标注册表的唯一接口: set_gauge(target, value)，覆盖写入。

使用方式:
    # 1. 内置内存注册表（测试 / 无导出器时）
    registry = InMemoryGaugeRegistry()

    # 2. Prometheus 注册表
    from gcstats_observability import PrometheusGaugeRegistry
    registry = PrometheusGaugeRegistry(prefix="dotnet")
"""
import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, List, Optional, Tuple


class GaugeTarget(str, Enum):
    """GC 堆统计 Gauge 标识"""
    GEN0_HEAP_SIZE = "gen0_heap_size_bytes"
    GEN0_PROMOTED = "gen0_promoted_bytes"
    GEN1_HEAP_SIZE = "gen1_heap_size_bytes"
    GEN1_PROMOTED = "gen1_promoted_bytes"
    GEN2_HEAP_SIZE = "gen2_heap_size_bytes"
    GEN2_SURVIVED = "gen2_survived_bytes"
    LOH_SIZE = "loh_size_bytes"
    LOH_SURVIVED = "loh_survived_bytes"
    PINNED_OBJECTS = "pinned_objects"
    GC_HANDLES = "gc_handles"
    # 仅 V2
    POH_SIZE = "poh_size_bytes"
    POH_SURVIVED = "poh_survived_bytes"


# 指标帮助文本
GAUGE_DESCRIPTIONS: Dict[GaugeTarget, str] = {
    GaugeTarget.GEN0_HEAP_SIZE: "Gen0 heap size in bytes",
    GaugeTarget.GEN0_PROMOTED: "Bytes promoted from gen0",
    GaugeTarget.GEN1_HEAP_SIZE: "Gen1 heap size in bytes",
    GaugeTarget.GEN1_PROMOTED: "Bytes promoted from gen1",
    GaugeTarget.GEN2_HEAP_SIZE: "Gen2 heap size in bytes",
    GaugeTarget.GEN2_SURVIVED: "Bytes survived in gen2",
    GaugeTarget.LOH_SIZE: "Large object heap size in bytes",
    GaugeTarget.LOH_SURVIVED: "Bytes survived in the large object heap",
    GaugeTarget.PINNED_OBJECTS: "Number of pinned objects",
    GaugeTarget.GC_HANDLES: "Number of GC handles",
    GaugeTarget.POH_SIZE: "Pinned object heap size in bytes",
    GaugeTarget.POH_SURVIVED: "Bytes survived in the pinned object heap",
}


class GaugeRegistry(ABC):
    """指标注册表协议"""

    @abstractmethod
    def set_gauge(self, target: GaugeTarget, value: int) -> None:
        """覆盖写入某个 Gauge 的当前值"""
        ...

    def get_stats(self) -> Dict:
        return {"type": self.__class__.__name__}


class InMemoryGaugeRegistry(GaugeRegistry):
    """
    内存注册表

    保存每个 Gauge 的最新值，并按顺序记录所有写入（便于诊断和测试）。
    """

    def __init__(self, record_writes: bool = True):
        self._values: Dict[GaugeTarget, int] = {}
        self._writes: List[Tuple[GaugeTarget, int]] = []
        self._record_writes = record_writes
        self._lock = threading.Lock()

    def set_gauge(self, target: GaugeTarget, value: int) -> None:
        with self._lock:
            self._values[target] = value
            if self._record_writes:
                self._writes.append((target, value))

    def get(self, target: GaugeTarget) -> Optional[int]:
        return self._values.get(target)

    @property
    def values(self) -> Dict[GaugeTarget, int]:
        return dict(self._values)

    @property
    def writes(self) -> List[Tuple[GaugeTarget, int]]:
        return list(self._writes)

    def clear(self) -> None:
        with self._lock:
            self._values.clear()
            self._writes.clear()

    def get_stats(self) -> Dict:
        return {
            "type": self.__class__.__name__,
            "gauges": len(self._values),
            "writes": len(self._writes),
        }
