"""
gcstats/heap_stats.py — GCHeapStats 事件解码

事件 payload 是按位置寻址、稀疏、可为空的序列，有两个 schema 版本:
  - V1: 位置 0-7（u64），10、12（u32）
  - V2: V1 的严格超集，额外位置 14、15（u64，pinned object heap）

解码规则（逐字段）:
  1. 位置越界或值为 None → 字段保持默认值 0，不报错
  2. 值存在但不是对应宽度的无符号整数 → 抛出 PayloadDecodeError
  3. payload 为 None 或长度为 0 → 整个事件跳过（返回 None）

注意: 全部字段默认 0，"未测量"与"测量值为 0"在下游不可区分，
对 Gauge 型计数器可以接受。
"""
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from .exceptions import PayloadDecodeError
from .gauges import GaugeTarget


class HeapStatsVersion(IntEnum):
    """GCHeapStats schema 版本"""
    V1 = 1
    V2 = 2


HEAP_STATS_V1_EVENT = "GCHeapStats_V1"
# 历史字面量带一个尾随空格，严格匹配模式下按原样比较
HEAP_STATS_V2_EVENT = "GCHeapStats_V2 "

_EXACT_EVENT_NAMES: Dict[str, HeapStatsVersion] = {
    HEAP_STATS_V1_EVENT: HeapStatsVersion.V1,
    HEAP_STATS_V2_EVENT: HeapStatsVersion.V2,
}

_NORMALIZED_EVENT_NAMES: Dict[str, HeapStatsVersion] = {
    name.strip(): version for name, version in _EXACT_EVENT_NAMES.items()
}

U32_MAX = 2 ** 32 - 1
U64_MAX = 2 ** 64 - 1


@dataclass(frozen=True)
class FieldSpec:
    """(版本, 字段) → (位置, 宽度, Gauge) 映射项"""
    name: str
    position: int
    width: int  # 字节数: 8 = u64, 4 = u32
    target: GaugeTarget
    min_version: HeapStatsVersion = HeapStatsVersion.V1

    @property
    def max_value(self) -> int:
        return U64_MAX if self.width == 8 else U32_MAX


# 顺序即 Gauge 写入顺序
HEAP_STATS_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec("gen0_heap_size", 0, 8, GaugeTarget.GEN0_HEAP_SIZE),
    FieldSpec("gen0_promoted", 1, 8, GaugeTarget.GEN0_PROMOTED),
    FieldSpec("gen1_heap_size", 2, 8, GaugeTarget.GEN1_HEAP_SIZE),
    FieldSpec("gen1_promoted", 3, 8, GaugeTarget.GEN1_PROMOTED),
    FieldSpec("gen2_heap_size", 4, 8, GaugeTarget.GEN2_HEAP_SIZE),
    FieldSpec("gen2_survived", 5, 8, GaugeTarget.GEN2_SURVIVED),
    FieldSpec("loh_size", 6, 8, GaugeTarget.LOH_SIZE),
    FieldSpec("loh_survived", 7, 8, GaugeTarget.LOH_SURVIVED),
    FieldSpec("pinned_object_count", 10, 4, GaugeTarget.PINNED_OBJECTS),
    FieldSpec("gc_handle_count", 12, 4, GaugeTarget.GC_HANDLES),
    FieldSpec("poh_size", 14, 8, GaugeTarget.POH_SIZE, HeapStatsVersion.V2),
    FieldSpec("poh_promoted", 15, 8, GaugeTarget.POH_SURVIVED, HeapStatsVersion.V2),
)

COMMON_FIELDS: Tuple[FieldSpec, ...] = tuple(
    f for f in HEAP_STATS_FIELDS if f.min_version == HeapStatsVersion.V1
)
V2_FIELDS: Tuple[FieldSpec, ...] = tuple(
    f for f in HEAP_STATS_FIELDS if f.min_version == HeapStatsVersion.V2
)


@dataclass(frozen=True)
class HeapStatsFields:
    """单个事件解码结果，所有字段默认 0"""
    gen0_heap_size: int = 0
    gen0_promoted: int = 0
    gen1_heap_size: int = 0
    gen1_promoted: int = 0
    gen2_heap_size: int = 0
    gen2_survived: int = 0
    loh_size: int = 0
    loh_survived: int = 0
    pinned_object_count: int = 0
    gc_handle_count: int = 0
    poh_size: int = 0
    poh_promoted: int = 0

    def gauge_values(
        self, specs: Sequence[FieldSpec] = COMMON_FIELDS
    ) -> List[Tuple[GaugeTarget, int]]:
        """按字段表顺序返回 (Gauge, 值) 列表"""
        return [(spec.target, getattr(self, spec.name)) for spec in specs]

    def to_dict(self) -> Dict[str, int]:
        return {spec.name: getattr(self, spec.name) for spec in HEAP_STATS_FIELDS}


def resolve_version(event_name: Optional[str], normalize: bool = True) -> Optional[HeapStatsVersion]:
    """
    根据事件名识别 schema 版本

    Args:
        event_name: 事件名
        normalize: True 时去除首尾空白后比较；False 时与历史字面量严格相等

    Returns:
        HeapStatsVersion，未识别返回 None
    """
    if not isinstance(event_name, str):
        return None
    if normalize:
        return _NORMALIZED_EVENT_NAMES.get(event_name.strip())
    return _EXACT_EVENT_NAMES.get(event_name)


def fields_for_version(version: HeapStatsVersion) -> Tuple[FieldSpec, ...]:
    """某版本需要解码的全部字段"""
    return tuple(f for f in HEAP_STATS_FIELDS if f.min_version <= version)


def is_empty_payload(payload: Optional[Sequence[Any]]) -> bool:
    return payload is None or len(payload) == 0


def read_field(payload: Sequence[Any], spec: FieldSpec, event_name: str = "") -> int:
    """越界/None → 0；类型或宽度不符 → PayloadDecodeError"""
    if spec.position >= len(payload):
        return 0
    value = payload[spec.position]
    if value is None:
        return 0

    # bool 是 int 的子类，但不是合法计数值
    if isinstance(value, bool) or not isinstance(value, int):
        raise PayloadDecodeError(
            f"{event_name or 'event'}[{spec.position}] ({spec.name}) "
            f"期望 u{spec.width * 8}，实际为 {type(value).__name__}",
            event_name=event_name,
            position=spec.position,
            field_name=spec.name,
            value=value,
        )
    if value < 0 or value > spec.max_value:
        raise PayloadDecodeError(
            f"{event_name or 'event'}[{spec.position}] ({spec.name}) "
            f"值 {value} 超出 u{spec.width * 8} 范围",
            event_name=event_name,
            position=spec.position,
            field_name=spec.name,
            value=value,
        )
    return value


def decode_fields(
    payload: Sequence[Any],
    specs: Sequence[FieldSpec],
    event_name: str = "",
    base: Optional[HeapStatsFields] = None,
) -> HeapStatsFields:
    """解码指定字段，未列出的字段沿用 base（默认全 0）"""
    values = {spec.name: read_field(payload, spec, event_name) for spec in specs}
    return replace(base or HeapStatsFields(), **values)


def iter_decode_stages(
    payload: Sequence[Any],
    version: HeapStatsVersion,
    event_name: str = "",
) -> Iterator[Tuple[Tuple[FieldSpec, ...], HeapStatsFields]]:
    """
    分阶段解码: 先公共字段，V2 再追加 POH 字段

    每阶段产出 (本阶段字段表, 累计解码结果)。生成器是惰性的:
    调用方在取下一阶段前先发布本阶段，V2 位置出错时公共 Gauge 已写入。
    """
    fields = decode_fields(payload, COMMON_FIELDS, event_name)
    yield COMMON_FIELDS, fields

    if version == HeapStatsVersion.V2:
        yield V2_FIELDS, decode_fields(payload, V2_FIELDS, event_name, base=fields)


def decode_heap_stats(
    payload: Optional[Sequence[Any]],
    version: HeapStatsVersion,
    event_name: str = "",
) -> Optional[HeapStatsFields]:
    """
    解码一个 GCHeapStats 事件（一次性取完所有阶段）

    Returns:
        HeapStatsFields；payload 为空时返回 None

    Raises:
        PayloadDecodeError: 某个存在且非空的位置类型/宽度不符
    """
    if is_empty_payload(payload):
        return None

    fields = None
    for _, fields in iter_decode_stages(payload, version, event_name):
        pass
    return fields
