"""
gcstats/events.py — 进程内诊断事件宿主

模拟托管运行时的诊断事件源（push 模型）:
  - EventSourceHost: 进程内所有事件源的注册表
  - EventSource: 具名 provider，同步推送事件给已启用的监听器
  - EventListener: 监听器基类（收到 source 创建通知后自行决定是否启用）

设计要点:
  - 事件推送是同步的，监听器回调在 write() 调用线程中执行
  - 按 level + keywords 过滤，只有已启用的监听器才会收到事件
  - 单个监听器的回调异常被记录并丢弃，不影响其他监听器和事件写入方
"""
import time
import logging
import threading
from enum import IntEnum, IntFlag
from typing import Any, Dict, List, Optional, Sequence, Tuple
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


class EventLevel(IntEnum):
    """事件级别（数值越大越详细）"""
    LOG_ALWAYS = 0
    CRITICAL = 1
    ERROR = 2
    WARNING = 3
    INFORMATIONAL = 4
    VERBOSE = 5


class EventKeywords(IntFlag):
    """事件类别位掩码"""
    NONE = 0x0
    GC = 0x1  # 垃圾回收事件


@dataclass(frozen=True)
class DiagnosticEvent:
    """诊断事件（每次回调新建，不被保留）"""
    name: str
    payload: Optional[Sequence[Any]] = None
    level: EventLevel = EventLevel.INFORMATIONAL
    keywords: int = EventKeywords.NONE
    source_name: str = ""
    timestamp: float = field(default_factory=time.time)


class EventListener:
    """
    诊断事件监听器基类

    子类覆盖:
        on_event_source_created(source) — 新事件源出现时调用
        on_event_written(event)         — 已启用的事件源推送事件时调用
    """

    def on_event_source_created(self, source: "EventSource") -> None:
        pass

    def on_event_written(self, event: DiagnosticEvent) -> None:
        pass

    def enable_events(
        self,
        source: "EventSource",
        level: EventLevel,
        keywords: int = EventKeywords.NONE,
    ) -> None:
        """启用某事件源在指定级别和类别下的事件推送"""
        source._enable(self, level, keywords)

    def disable_events(self, source: "EventSource") -> None:
        """停止接收某事件源的事件"""
        source._disable(self)


class EventSource:
    """
    具名事件源

    使用方式:
        source = host.create_source("Microsoft-Windows-DotNETRuntime")
        source.write("GCHeapStats_V1", payload, keywords=EventKeywords.GC)
    """

    def __init__(self, name: str):
        self.name = name
        self._listeners: Dict[int, Tuple[EventListener, EventLevel, int]] = {}
        self._lock = threading.Lock()

        # 统计
        self._total_written = 0
        self._total_delivered = 0
        self._total_failed = 0

    def _enable(self, listener: EventListener, level: EventLevel, keywords: int) -> None:
        with self._lock:
            self._listeners[id(listener)] = (listener, EventLevel(level), int(keywords))
        logger.debug(
            f"EventSource {self.name!r} 已启用: level={EventLevel(level).name}, "
            f"keywords=0x{int(keywords):x}"
        )

    def _disable(self, listener: EventListener) -> None:
        with self._lock:
            self._listeners.pop(id(listener), None)

    def is_enabled(self, listener: EventListener) -> bool:
        return id(listener) in self._listeners

    @staticmethod
    def _admits(
        enabled_level: EventLevel,
        enabled_keywords: int,
        level: EventLevel,
        keywords: int,
    ) -> bool:
        """判断已启用的 (level, keywords) 是否放行某个事件"""
        if level != EventLevel.LOG_ALWAYS and level > enabled_level:
            return False
        if keywords and not (keywords & enabled_keywords):
            return False
        return True

    def write(
        self,
        name: str,
        payload: Optional[Sequence[Any]] = None,
        level: EventLevel = EventLevel.INFORMATIONAL,
        keywords: int = EventKeywords.NONE,
    ) -> int:
        """
        推送事件（同步）

        Returns:
            实际收到事件的监听器数量
        """
        event = DiagnosticEvent(
            name=name,
            payload=payload,
            level=EventLevel(level),
            keywords=int(keywords),
            source_name=self.name,
        )
        with self._lock:
            self._total_written += 1
            targets = list(self._listeners.values())

        delivered = 0
        for listener, enabled_level, enabled_keywords in targets:
            if not self._admits(enabled_level, enabled_keywords, event.level, event.keywords):
                continue
            try:
                listener.on_event_written(event)
                delivered += 1
            except Exception as e:
                # 单个事件的回调失败只丢弃该事件
                with self._lock:
                    self._total_failed += 1
                logger.warning(
                    f"事件回调异常，已丢弃: source={self.name!r}, "
                    f"event={name!r}, error={e}"
                )

        with self._lock:
            self._total_delivered += delivered
        return delivered

    def get_stats(self) -> Dict[str, Any]:
        """获取事件源统计"""
        return {
            "name": self.name,
            "listeners": len(self._listeners),
            "total_written": self._total_written,
            "total_delivered": self._total_delivered,
            "total_failed": self._total_failed,
        }


def _notify_source_created(listener: EventListener, source: EventSource) -> None:
    """单个监听器的创建回调失败不影响其他监听器和宿主"""
    try:
        listener.on_event_source_created(source)
    except Exception as e:
        logger.warning(
            f"事件源创建通知异常，已跳过: source={source.name!r}, "
            f"listener={type(listener).__name__}, error={e}"
        )


class EventSourceHost:
    """
    进程内事件源注册表

    使用方式:
        host = EventSourceHost()
        host.add_listener(GcEventListener(registry))
        runtime = host.create_source("Microsoft-Windows-DotNETRuntime")
        runtime.write("GCHeapStats_V1", [...], keywords=EventKeywords.GC)
    """

    def __init__(self):
        self._sources: Dict[str, EventSource] = {}
        self._listeners: List[EventListener] = []
        self._lock = threading.Lock()

    def create_source(self, name: str) -> EventSource:
        """创建事件源并通知所有监听器（同名 source 只创建一次）"""
        with self._lock:
            existing = self._sources.get(name)
            if existing is not None:
                return existing
            source = EventSource(name)
            self._sources[name] = source
            listeners = list(self._listeners)

        for listener in listeners:
            _notify_source_created(listener, source)
        return source

    def get_source(self, name: str) -> Optional[EventSource]:
        return self._sources.get(name)

    @property
    def sources(self) -> List[EventSource]:
        return list(self._sources.values())

    def add_listener(self, listener: EventListener) -> None:
        """挂载监听器，并为已存在的 source 补发创建通知"""
        with self._lock:
            if listener in self._listeners:
                return
            self._listeners.append(listener)
            existing = list(self._sources.values())

        for source in existing:
            _notify_source_created(listener, source)

    def remove_listener(self, listener: EventListener) -> None:
        """卸载监听器，并在所有 source 上停用"""
        with self._lock:
            self._listeners = [x for x in self._listeners if x is not listener]
            sources = list(self._sources.values())

        for source in sources:
            listener.disable_events(source)

    def get_stats(self) -> Dict[str, Any]:
        """获取宿主统计"""
        return {
            "listeners": len(self._listeners),
            "sources": {name: s.get_stats() for name, s in self._sources.items()},
        }
