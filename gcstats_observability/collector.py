"""
gcstats_observability/collector.py — 组件编排

GCMetricsCollector 负责把 GC 事件监听器接到事件宿主和导出器上:
  - PrometheusGaugeRegistry（或 InMemoryGaugeRegistry）
  - GcEventListener
  - LogExporter（可选）
  - GrafanaDashboardGenerator

它根据配置自动创建、连接和管理所有组件的生命周期。
"""
import logging
from typing import Optional, Dict, Any

from gcstats import __version__ as gcstats_version
from gcstats.config import GCStatsConfig
from gcstats.events import EventSourceHost
from gcstats.gauges import GaugeRegistry, InMemoryGaugeRegistry
from gcstats.listener import GcEventListener

from .config import ObservabilityConfig
from .prometheus_exporter import PrometheusGaugeRegistry
from .grafana_dashboard import GrafanaDashboardGenerator
from .log_exporter import LogExporter

logger = logging.getLogger(__name__)


class GCMetricsCollector:
    """
    GC 指标采集编排器

    使用方式:
        collector = GCMetricsCollector(host, config=ObservabilityConfig())
        collector.start()
        # ...
        collector.shutdown()
    """

    def __init__(
        self,
        host: EventSourceHost,
        config: Optional[ObservabilityConfig] = None,
        gcstats_config: Optional[GCStatsConfig] = None,
        registry: Optional[GaugeRegistry] = None,
        prometheus_registry: Optional[Any] = None,
    ):
        """
        Args:
            host: 事件宿主
            config: 导出配置
            gcstats_config: 监听配置
            registry: 自定义 GaugeRegistry（优先于配置）
            prometheus_registry: prometheus_client CollectorRegistry（None=全局 REGISTRY）
        """
        self._host = host
        self.config = config or ObservabilityConfig()
        self.gcstats_config = gcstats_config or GCStatsConfig()
        self._prometheus_registry = prometheus_registry
        self._running = False

        self.registry: Optional[GaugeRegistry] = registry
        self.listener: Optional[GcEventListener] = None
        self.log_exporter: Optional[LogExporter] = None
        self.dashboard_generator: Optional[GrafanaDashboardGenerator] = None

        self._create_components()

    def _create_components(self) -> None:
        """根据配置创建组件"""
        cfg = self.config

        # 1. Gauge 注册表
        if self.registry is None:
            if cfg.prometheus_enabled:
                self.registry = PrometheusGaugeRegistry(
                    prefix=cfg.prometheus_prefix,
                    port=cfg.prometheus_port,
                    labels=cfg.prometheus_labels,
                    registry=self._prometheus_registry,
                )
            else:
                self.registry = InMemoryGaugeRegistry()

        # 2. GC 事件监听器
        self.listener = GcEventListener(self.registry, self.gcstats_config)

        # 3. LogExporter
        if cfg.log_enabled:
            try:
                self.log_exporter = LogExporter(
                    format=cfg.log_format,
                    level=cfg.log_level,
                    file=cfg.log_file,
                    max_bytes=cfg.log_max_bytes,
                    backup_count=cfg.log_backup_count,
                    config=self.gcstats_config,
                )
            except Exception as e:
                logger.warning(f"LogExporter 创建失败: {e}")

        # 4. Dashboard Generator（始终可用）
        self.dashboard_generator = GrafanaDashboardGenerator(
            prefix=cfg.prometheus_prefix,
            title=cfg.dashboard_title,
        )

    def start(self, serve_http: bool = True) -> None:
        """挂载监听器并启动 HTTP 端点"""
        if self._running:
            logger.warning("GCMetricsCollector 已在运行")
            return

        self._running = True

        self._host.add_listener(self.listener)
        if self.log_exporter:
            self._host.add_listener(self.log_exporter)

        if isinstance(self.registry, PrometheusGaugeRegistry):
            self.registry.set_build_info({
                "version": gcstats_version,
                "provider": self.gcstats_config.provider_name,
            })
            if serve_http:
                self.registry.start_server()

        logger.info(
            f"GCMetricsCollector 已启动: "
            f"registry={self.registry.__class__.__name__}, "
            f"log={'✓' if self.log_exporter else '✗'}"
        )

    def shutdown(self) -> None:
        """卸载监听器并关闭所有组件"""
        self._running = False

        if self.listener:
            self._host.remove_listener(self.listener)
        if self.log_exporter:
            self._host.remove_listener(self.log_exporter)
            self.log_exporter.shutdown()
        if isinstance(self.registry, PrometheusGaugeRegistry):
            self.registry.shutdown()

        logger.info("GCMetricsCollector 已关闭")

    @property
    def running(self) -> bool:
        return self._running

    def get_stats(self) -> Dict[str, Any]:
        """获取所有组件统计"""
        stats = {
            "running": self._running,
            "listener": self.listener.get_stats(),
            "host": self._host.get_stats(),
        }
        if self.log_exporter:
            stats["log_exporter"] = self.log_exporter.get_stats()
        return stats

    def generate_dashboard(self, path: Optional[str] = None) -> str:
        """
        生成 Grafana Dashboard

        Args:
            path: 保存路径（None=仅返回 JSON 字符串）

        Returns:
            Dashboard JSON 字符串
        """
        if path:
            self.dashboard_generator.save(path)
        return self.dashboard_generator.generate()
