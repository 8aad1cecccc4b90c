"""
gcstats_observability/config.py — 导出配置

Prometheus / 日志 / Dashboard 相关字段，支持直接创建、从字典创建，
或从 GCStatsConfig 的 observability 节映射。
"""
from dataclasses import dataclass, field
from typing import Dict, Any, Optional


@dataclass
class ObservabilityConfig:
    """
    导出配置

    可以从 GCStatsConfig 自动映射，也可以独立创建。
    """

    # === 总开关 ===
    enabled: bool = True

    # === Prometheus ===
    prometheus_enabled: bool = True
    prometheus_port: int = 9090
    prometheus_prefix: str = "dotnet"  # 指标前缀
    prometheus_labels: Dict[str, str] = field(default_factory=dict)  # 全局标签

    # === 日志 ===
    log_enabled: bool = False
    log_format: str = "json"  # json / text
    log_level: str = "INFO"
    log_file: Optional[str] = None  # 日志文件路径（None=仅 stderr）
    log_max_bytes: int = 100 * 1024 * 1024  # 100MB
    log_backup_count: int = 5

    # === Dashboard ===
    dashboard_title: str = "GC Heap Stats"

    @classmethod
    def from_gcstats_config(cls, gcstats_config) -> "ObservabilityConfig":
        """
        从 GCStatsConfig 的 observability 节映射

        Args:
            gcstats_config: GCStatsConfig 实例（无 observability 节时使用默认值）

        Returns:
            ObservabilityConfig 实例
        """
        section = getattr(gcstats_config, "observability", None) or {}
        return cls.from_dict(section)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ObservabilityConfig":
        """从字典创建"""
        data = dict(data)

        # 展平嵌套的 prometheus / logging 配置
        for section, prefix in (("prometheus", "prometheus_"), ("logging", "log_")):
            nested = data.pop(section, None)
            if isinstance(nested, dict):
                for k, v in nested.items():
                    data[f"{prefix}{k}"] = v

        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_fields}
        return cls(**filtered)
