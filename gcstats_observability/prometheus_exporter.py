"""
gcstats_observability/prometheus_exporter.py — Prometheus 指标注册表

GaugeRegistry 的 Prometheus 实现，每个 GaugeTarget 对应一个 Gauge。

指标清单（默认前缀 dotnet）:
  Gauges:
    - dotnet_gen0_heap_size_bytes         — Gen0 堆大小
    - dotnet_gen0_promoted_bytes          — Gen0 晋升字节数
    - dotnet_gen1_heap_size_bytes         — Gen1 堆大小
    - dotnet_gen1_promoted_bytes          — Gen1 晋升字节数
    - dotnet_gen2_heap_size_bytes         — Gen2 堆大小
    - dotnet_gen2_survived_bytes          — Gen2 存活字节数
    - dotnet_loh_size_bytes               — 大对象堆大小
    - dotnet_loh_survived_bytes           — 大对象堆存活字节数
    - dotnet_pinned_objects               — 固定对象数量
    - dotnet_gc_handles                   — GC 句柄数量
    - dotnet_poh_size_bytes               — 固定对象堆大小（仅 V2）
    - dotnet_poh_survived_bytes           — 固定对象堆存活字节数（仅 V2）

  Info:
    - dotnet_gcstats_build                — 构建信息
"""
import logging
import threading
from typing import Dict, Any, List, Optional

from prometheus_client import (
    Gauge,
    Info,
    start_http_server,
    REGISTRY,
)

from gcstats.gauges import GAUGE_DESCRIPTIONS, GaugeRegistry, GaugeTarget

logger = logging.getLogger(__name__)


class PrometheusGaugeRegistry(GaugeRegistry):
    """
    Prometheus Gauge 注册表

    使用方式:
        registry = PrometheusGaugeRegistry(prefix="dotnet")
        listener = GcEventListener(registry)
        registry.start_server()  # 启动 HTTP 端点
        # ...
        registry.shutdown()
    """

    def __init__(
        self,
        prefix: str = "dotnet",
        port: int = 9090,
        labels: Optional[Dict[str, str]] = None,
        registry: Optional[Any] = None,
    ):
        self._prefix = prefix
        self._port = port
        self._global_labels = labels or {}
        self._registry = registry if registry is not None else REGISTRY
        self._server_started = False
        self._server = None
        self._server_thread = None
        self._total_writes = 0
        self._stats_lock = threading.Lock()

        self._create_metrics()

        logger.info(
            f"PrometheusGaugeRegistry 初始化: prefix={prefix}, port={port}"
        )

    def _create_metrics(self):
        """创建所有 Prometheus 指标"""
        p = self._prefix
        label_names = sorted(self._global_labels)

        self._gauges: Dict[GaugeTarget, Any] = {}
        # 父级指标对象，shutdown 时从 CollectorRegistry 注销
        self._collectors: List[Any] = []
        for target in GaugeTarget:
            gauge = Gauge(
                f"{p}_{target.value}",
                GAUGE_DESCRIPTIONS[target],
                label_names,
                registry=self._registry,
            )
            self._collectors.append(gauge)
            # 全局标签固定，直接绑定子 Gauge
            if label_names:
                gauge = gauge.labels(**self._global_labels)
            self._gauges[target] = gauge

        self.info = Info(
            f"{p}_gcstats_build",
            "gcstats 构建信息",
            registry=self._registry,
        )
        self._collectors.append(self.info)

    def set_gauge(self, target: GaugeTarget, value: int) -> None:
        self._gauges[GaugeTarget(target)].set(value)
        with self._stats_lock:
            self._total_writes += 1

    def get_value(self, target: GaugeTarget) -> Optional[float]:
        """读取当前 Gauge 值（未写入过时为 0.0）"""
        name = f"{self._prefix}_{GaugeTarget(target).value}"
        return self._registry.get_sample_value(name, self._global_labels or None)

    def set_build_info(self, info: Dict[str, str]) -> None:
        """设置构建信息"""
        self.info.info(info)

    def start_server(self) -> None:
        """启动 Prometheus HTTP 端点"""
        if self._server_started:
            logger.warning("Prometheus HTTP 端点已启动")
            return

        try:
            self._server, self._server_thread = start_http_server(
                self._port, registry=self._registry
            )
            self._server_started = True
            logger.info(f"Prometheus HTTP 端点已启动: http://0.0.0.0:{self._port}/metrics")
        except Exception as e:
            logger.error(f"Prometheus HTTP 端点启动失败: {e}")

    def shutdown(self) -> None:
        """关闭 HTTP 端点，并从 CollectorRegistry 注销全部指标"""
        if self._server is not None:
            self._server.shutdown()
            self._server.server_close()
            self._server = None
            self._server_thread = None
        self._server_started = False

        for collector in self._collectors:
            try:
                self._registry.unregister(collector)
            except KeyError:
                # 已被注销
                pass
        self._collectors = []
        logger.info("PrometheusGaugeRegistry 已关闭")

    def get_stats(self) -> Dict[str, Any]:
        """获取注册表统计"""
        return {
            "type": self.__class__.__name__,
            "server_started": self._server_started,
            "port": self._port,
            "prefix": self._prefix,
            "gauges": len(self._gauges),
            "total_writes": self._total_writes,
        }
