"""
tests/test_observability/test_observability_config.py — ObservabilityConfig 测试
"""
import pytest
from gcstats.config import GCStatsConfig
from gcstats_observability.config import ObservabilityConfig


class TestObservabilityConfig:
    """ObservabilityConfig 测试"""

    def test_default_config(self):
        """默认配置"""
        config = ObservabilityConfig()
        assert config.enabled is True
        assert config.prometheus_enabled is True
        assert config.prometheus_port == 9090
        assert config.prometheus_prefix == "dotnet"
        assert config.log_enabled is False
        assert config.log_format == "json"

    def test_from_dict(self):
        """从字典创建"""
        config = ObservabilityConfig.from_dict({
            "prometheus_port": 9091,
            "log_format": "text",
            "dashboard_title": "GC",
        })
        assert config.prometheus_port == 9091
        assert config.log_format == "text"
        assert config.dashboard_title == "GC"

    def test_from_dict_nested_sections(self):
        """嵌套 prometheus / logging 节展平"""
        config = ObservabilityConfig.from_dict({
            "prometheus": {"port": 9100, "labels": {"env": "prod"}},
            "logging": {"enabled": True, "level": "DEBUG"},
        })
        assert config.prometheus_port == 9100
        assert config.prometheus_labels == {"env": "prod"}
        assert config.log_enabled is True
        assert config.log_level == "DEBUG"

    def test_from_gcstats_config(self):
        """从 GCStatsConfig 的 observability 节映射"""
        gcstats_config = GCStatsConfig.from_dict({
            "observability": {"prometheus_port": 9300, "log_enabled": True},
        })
        config = ObservabilityConfig.from_gcstats_config(gcstats_config)
        assert config.prometheus_port == 9300
        assert config.log_enabled is True

    def test_from_gcstats_config_nested(self):
        """observability 节内的嵌套 prometheus / logging 同样展平"""
        gcstats_config = GCStatsConfig(observability={
            "prometheus": {"enabled": False, "prefix": "svc"},
            "logging": {"format": "text", "level": "DEBUG"},
        })
        config = ObservabilityConfig.from_gcstats_config(gcstats_config)
        assert config.prometheus_enabled is False
        assert config.prometheus_prefix == "svc"
        assert config.log_format == "text"
        assert config.log_level == "DEBUG"

    def test_from_gcstats_config_yaml(self, tmp_path):
        """YAML → GCStatsConfig → ObservabilityConfig"""
        path = tmp_path / "gcstats.yaml"
        path.write_text(
            "gcstats:\n"
            "  observability:\n"
            "    prometheus_port: 9300\n"
            "    log_enabled: true\n",
            encoding="utf-8",
        )
        config = ObservabilityConfig.from_gcstats_config(
            GCStatsConfig.from_yaml(str(path))
        )
        assert config.prometheus_port == 9300
        assert config.log_enabled is True

    def test_from_gcstats_config_top_level_keys_ignored(self):
        """导出字段只从 observability 节读取"""
        gcstats_config = GCStatsConfig.from_dict({
            "prometheus_port": 9300,
            "log_enabled": True,
        })
        config = ObservabilityConfig.from_gcstats_config(gcstats_config)
        assert config.prometheus_port == 9090
        assert config.log_enabled is False

    def test_from_gcstats_config_defaults(self):
        """GCStatsConfig 无 observability 节 → 使用默认值"""
        config = ObservabilityConfig.from_gcstats_config(GCStatsConfig())
        assert config.enabled is True
        assert config.prometheus_port == 9090

    def test_unknown_fields_ignored(self):
        """未知字段被忽略"""
        config = ObservabilityConfig.from_dict({
            "unknown_field": "value",
            "prometheus_port": 9091,
        })
        assert config.prometheus_port == 9091
        assert not hasattr(config, "unknown_field")
