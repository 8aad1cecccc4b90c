"""
GCStatsConfig 单元测试
"""
import pytest
import sys
import os

# 添加项目路径
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from gcstats.config import GCStatsConfig, RUNTIME_PROVIDER_NAME
from gcstats.exceptions import ConfigError


class TestGCStatsConfig:
    """GCStatsConfig 测试"""

    def test_default_config(self):
        """测试默认配置"""
        config = GCStatsConfig()
        assert config.enabled is True
        assert config.provider_name == "Microsoft-Windows-DotNETRuntime"
        assert config.provider_name == RUNTIME_PROVIDER_NAME
        assert config.normalize_event_names is True
        assert config.observability == {}
        # 事件级别固定为 Informational，不是配置项
        assert not hasattr(config, "event_level")

    def test_from_dict(self):
        """测试从字典创建"""
        config = GCStatsConfig.from_dict({
            "provider_name": "Custom",
            "normalize_event_names": False,
        })
        assert config.provider_name == "Custom"
        assert config.normalize_event_names is False

    def test_from_dict_nested_listener(self):
        """测试嵌套 listener 配置展平"""
        data = {"listener": {"normalize_event_names": False}}
        config = GCStatsConfig.from_dict(data)
        assert config.normalize_event_names is False
        assert "listener" in data  # 原始字典不被修改

    def test_unknown_fields_ignored(self):
        config = GCStatsConfig.from_dict({"unknown": 1, "enabled": False})
        assert config.enabled is False
        assert not hasattr(config, "unknown")

    def test_legacy_event_level_key_ignored(self):
        """旧配置中的 event_level 键被忽略，校验仍通过"""
        config = GCStatsConfig.from_dict({"event_level": "info"})
        assert config.validate() == []

    def test_from_yaml(self, tmp_path):
        """测试从 YAML 加载"""
        path = tmp_path / "gcstats.yaml"
        path.write_text(
            "gcstats:\n"
            "  provider_name: Test-Runtime\n"
            "  listener:\n"
            "    normalize_event_names: false\n",
            encoding="utf-8",
        )
        config = GCStatsConfig.from_yaml(str(path))
        assert config.provider_name == "Test-Runtime"
        assert config.normalize_event_names is False

    def test_from_yaml_top_level(self, tmp_path):
        """无 gcstats 节时使用顶层"""
        path = tmp_path / "gcstats.yaml"
        path.write_text("provider_name: Top-Level\n", encoding="utf-8")
        config = GCStatsConfig.from_yaml(str(path))
        assert config.provider_name == "Top-Level"

    def test_from_yaml_missing_file(self):
        with pytest.raises(ConfigError):
            GCStatsConfig.from_yaml("/nonexistent/gcstats.yaml")

    def test_from_yaml_invalid_document(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            GCStatsConfig.from_yaml(str(path))

    def test_to_dict(self):
        data = GCStatsConfig().to_dict()
        assert data["provider_name"] == RUNTIME_PROVIDER_NAME
        assert GCStatsConfig.from_dict(data) == GCStatsConfig()

    def test_validate_ok(self):
        assert GCStatsConfig().validate() == []

    def test_validate_errors(self):
        config = GCStatsConfig(provider_name="", observability="oops")
        errors = config.validate()
        assert len(errors) == 2


class TestObservabilitySection:
    """observability 节测试"""

    def test_from_dict(self):
        config = GCStatsConfig.from_dict({
            "observability": {"prometheus_port": 9300, "log_enabled": True},
        })
        assert config.observability == {"prometheus_port": 9300, "log_enabled": True}

    def test_non_dict_section_replaced(self):
        config = GCStatsConfig.from_dict({"observability": "yes"})
        assert config.observability == {}

    def test_section_copied(self):
        """原始字典不被修改"""
        section = {"prometheus_port": 9300}
        config = GCStatsConfig.from_dict({"observability": section})
        config.observability["prometheus_port"] = 1
        assert section["prometheus_port"] == 9300

    def test_from_yaml(self, tmp_path):
        """YAML 中的 observability 节原样保留（含嵌套）"""
        path = tmp_path / "gcstats.yaml"
        path.write_text(
            "gcstats:\n"
            "  observability:\n"
            "    prometheus_port: 9300\n"
            "    logging:\n"
            "      enabled: true\n",
            encoding="utf-8",
        )
        config = GCStatsConfig.from_yaml(str(path))
        assert config.observability["prometheus_port"] == 9300
        assert config.observability["logging"] == {"enabled": True}
