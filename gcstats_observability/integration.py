"""
gcstats_observability/integration.py — 启动集成入口

宿主进程启动时调用:

    from gcstats_observability import setup_gc_metrics
    setup_gc_metrics(host)

设计要点:
  - 单例模式: 同一进程中只创建一个 GCMetricsCollector
  - Fail-Open: 任何异常不影响宿主进程
"""
import logging
import threading
from typing import Optional

from .config import ObservabilityConfig
from .collector import GCMetricsCollector

logger = logging.getLogger(__name__)

# 全局单例
_global_collector: Optional[GCMetricsCollector] = None
_lock = threading.Lock()


def setup_gc_metrics(
    host,
    config: Optional[ObservabilityConfig] = None,
    gcstats_config=None,
    **kwargs,
) -> Optional[GCMetricsCollector]:
    """
    启动入口

    Args:
        host: EventSourceHost 实例
        config: ObservabilityConfig（None 时从 gcstats_config 映射或使用默认值）
        gcstats_config: GCStatsConfig 实例（可选）
        **kwargs: 透传给 GCMetricsCollector（如 prometheus_registry）

    Returns:
        GCMetricsCollector 实例（如果创建成功）
    """
    global _global_collector

    with _lock:
        if _global_collector is not None:
            logger.debug("GCMetricsCollector 已存在，跳过重复创建")
            return _global_collector

        try:
            if config is None:
                if gcstats_config is not None:
                    config = ObservabilityConfig.from_gcstats_config(gcstats_config)
                else:
                    config = ObservabilityConfig()

            if not config.enabled or (
                gcstats_config is not None and not gcstats_config.enabled
            ):
                logger.debug("GC 指标采集已禁用")
                return None

            collector = GCMetricsCollector(
                host,
                config=config,
                gcstats_config=gcstats_config,
                **kwargs,
            )
            collector.start()

            _global_collector = collector
            logger.info("gcstats 指标采集已启动")
            return collector

        except Exception as e:
            # Fail-Open: 不影响宿主进程
            logger.warning(f"gcstats 指标采集启动失败 (Fail-Open): {e}")
            return None


def get_global_collector() -> Optional[GCMetricsCollector]:
    """获取全局 GCMetricsCollector 实例"""
    return _global_collector


def shutdown_gc_metrics() -> None:
    """关闭全局 GCMetricsCollector"""
    global _global_collector

    with _lock:
        if _global_collector:
            _global_collector.shutdown()
            _global_collector = None
            logger.info("gcstats 指标采集已关闭")
