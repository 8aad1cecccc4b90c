"""
gcstats-observability — gcstats 导出附加包

为 gcstats 提供指标导出与启动集成:
  - Prometheus Gauge 注册表 + HTTP 端点
  - 结构化日志导出（JSON / Text）
  - Grafana Dashboard 自动生成

设计原则:
  1. 零侵入: 通过 EventSourceHost 挂载监听器，不修改 gcstats 核心
  2. Fail-Open: 导出组件故障不影响宿主进程
  3. 配置驱动: 所有行为通过 ObservabilityConfig 控制

使用方式:
    from gcstats import EventSourceHost
    from gcstats_observability import setup_gc_metrics

    host = EventSourceHost()
    collector = setup_gc_metrics(host)
    # ... 运行时创建 provider 并推送事件 ...
    collector.shutdown()
"""

__version__ = "1.0.0"

from .config import ObservabilityConfig
from .collector import GCMetricsCollector
from .integration import setup_gc_metrics, get_global_collector, shutdown_gc_metrics
from .prometheus_exporter import PrometheusGaugeRegistry
from .grafana_dashboard import GrafanaDashboardGenerator
from .log_exporter import LogExporter

__all__ = [
    # 核心入口
    "setup_gc_metrics",
    "get_global_collector",
    "shutdown_gc_metrics",
    "GCMetricsCollector",
    "ObservabilityConfig",
    # Prometheus
    "PrometheusGaugeRegistry",
    # Grafana
    "GrafanaDashboardGenerator",
    # 日志
    "LogExporter",
]
