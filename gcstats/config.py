"""
gcstats/config.py — GCStatsConfig 配置

监听器相关的全部可调项，支持直接创建、从字典或 YAML 加载。
导出器配置放在 observability 节中，由 gcstats_observability 读取。
"""
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List
from pathlib import Path

from .exceptions import ConfigError

RUNTIME_PROVIDER_NAME = "Microsoft-Windows-DotNETRuntime"


@dataclass
class GCStatsConfig:
    """
    GC 堆统计监听配置

    事件源固定以 Informational 级别、仅 GC 类别启用，不可配置。

    使用方式:
        # 1. 直接创建
        config = GCStatsConfig()

        # 2. 从 YAML 加载
        config = GCStatsConfig.from_yaml("gcstats.yaml")

        # 3. 从字典创建
        config = GCStatsConfig.from_dict({"normalize_event_names": False})
    """

    enabled: bool = True

    # === 事件源 ===
    provider_name: str = RUNTIME_PROVIDER_NAME  # 精确匹配

    # === 事件名匹配 ===
    # True: 去除首尾空白后匹配（可识别真实的 GCHeapStats_V2）
    # False: 与历史字面量严格相等（"GCHeapStats_V2 " 带尾随空格）
    normalize_event_names: bool = True

    # === 导出配置（ObservabilityConfig.from_dict 的输入） ===
    observability: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_yaml(cls, path: str) -> "GCStatsConfig":
        """从 YAML 文件加载配置"""
        try:
            import yaml
        except ImportError:
            raise ConfigError(
                "加载 YAML 配置需要 PyYAML。请运行: pip install pyyaml"
            )

        filepath = Path(path)
        if not filepath.exists():
            raise ConfigError(f"配置文件不存在: {path}")

        with open(filepath, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ConfigError(f"配置文件格式错误: {path}")

        return cls.from_dict(data.get("gcstats", data))

    @classmethod
    def from_dict(cls, data: Dict) -> "GCStatsConfig":
        """从字典创建配置"""
        data = dict(data)  # 避免修改原始字典

        # 展平嵌套的 listener 配置
        if "listener" in data:
            listener = data.pop("listener")
            if isinstance(listener, dict):
                for k, v in listener.items():
                    data[k] = v

        if "observability" in data:
            obs = data["observability"]
            data["observability"] = dict(obs) if isinstance(obs, dict) else {}

        # 过滤有效字段
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_fields}

        return cls(**filtered)

    def to_dict(self) -> Dict[str, Any]:
        """导出为字典"""
        return asdict(self)

    def validate(self) -> List[str]:
        """验证配置，返回错误列表"""
        errors = []

        if not self.provider_name:
            errors.append("provider_name 不能为空")
        if not isinstance(self.observability, dict):
            errors.append("observability 必须是字典")

        return errors
