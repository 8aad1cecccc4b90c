"""
tests/test_observability/test_grafana.py — GrafanaDashboardGenerator 测试
"""
import json
import pytest

from gcstats.gauges import GaugeTarget
from gcstats_observability.grafana_dashboard import GrafanaDashboardGenerator


class TestGrafanaDashboardGenerator:
    """GrafanaDashboardGenerator 测试"""

    def test_generate_json(self):
        """生成 JSON 字符串"""
        gen = GrafanaDashboardGenerator()
        result = gen.generate()
        assert isinstance(result, str)

        data = json.loads(result)
        assert "dashboard" in data
        assert "panels" in data["dashboard"]

    def test_panels_exist(self):
        """面板存在"""
        gen = GrafanaDashboardGenerator()
        panels = gen.to_dict()["dashboard"]["panels"]
        assert len(panels) > 0

        panel_types = {p["type"] for p in panels}
        assert panel_types == {"row", "stat", "timeseries"}

    def test_all_gauges_plotted(self):
        """每个 Gauge 至少出现在一个面板中"""
        result = GrafanaDashboardGenerator(prefix="svc").generate()
        for target in GaugeTarget:
            assert f"svc_{target.value}" in result

    def test_custom_title(self):
        gen = GrafanaDashboardGenerator(title="My GC Dashboard")
        assert gen.to_dict()["dashboard"]["title"] == "My GC Dashboard"

    def test_panel_ids_unique(self):
        gen = GrafanaDashboardGenerator()
        ids = [p["id"] for p in gen.to_dict()["dashboard"]["panels"]]
        assert len(ids) == len(set(ids))

    def test_save_to_file(self, tmp_path):
        gen = GrafanaDashboardGenerator()
        path = str(tmp_path / "dashboard.json")
        gen.save(path)

        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        assert "dashboard" in data

    def test_datasource_template(self):
        gen = GrafanaDashboardGenerator(datasource="MyPrometheus")
        templating = gen.to_dict()["dashboard"]["templating"]["list"]
        assert templating[0]["name"] == "datasource"
        assert templating[0]["current"]["value"] == "MyPrometheus"

    def test_refresh_interval(self):
        gen = GrafanaDashboardGenerator(refresh="30s")
        assert gen.to_dict()["dashboard"]["refresh"] == "30s"
