"""
gcstats_observability/grafana_dashboard.py — Grafana Dashboard 自动生成

生成标准的 Grafana Dashboard JSON，可直接导入 Grafana。

Dashboard 包含:
  - 概览面板: 各代堆大小、GC 句柄、固定对象
  - 堆大小面板: gen0/1/2、LOH、POH 时间序列
  - 晋升/存活面板: promoted / survived 字节数
"""
import json
import time
import logging
from typing import Dict, Any, List, Optional

logger = logging.getLogger(__name__)


class GrafanaDashboardGenerator:
    """
    Grafana Dashboard JSON 生成器

    使用方式:
        gen = GrafanaDashboardGenerator(prefix="dotnet")
        dashboard_json = gen.generate()

        # 保存到文件
        gen.save("gc_dashboard.json")
    """

    def __init__(
        self,
        prefix: str = "dotnet",
        datasource: str = "Prometheus",
        title: str = "GC Heap Stats",
        refresh: str = "10s",
    ):
        self._prefix = prefix
        self._datasource = datasource
        self._title = title
        self._refresh = refresh

    def generate(self) -> str:
        """生成 Dashboard JSON 字符串"""
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)

    def to_dict(self) -> Dict[str, Any]:
        """生成 Dashboard 字典"""
        p = self._prefix

        panels = []
        y_pos = 0

        # === Row 1: 概览 ===
        panels.append(self._row("概览", y_pos))
        y_pos += 1

        overview = [
            ("Gen2 堆大小", f"{p}_gen2_heap_size_bytes", "bytes"),
            ("大对象堆", f"{p}_loh_size_bytes", "bytes"),
            ("GC 句柄", f"{p}_gc_handles", "short"),
            ("固定对象", f"{p}_pinned_objects", "short"),
        ]
        for i, (title, expr, unit) in enumerate(overview):
            panels.append(self._stat_panel(
                title=title,
                expr=expr,
                unit=unit,
                x=i * 6, y=y_pos, w=6, h=4,
            ))
        y_pos += 4

        # === Row 2: 堆大小 ===
        panels.append(self._row("堆大小", y_pos))
        y_pos += 1

        panels.append(self._graph_panel(
            title="分代堆大小",
            exprs=[
                (f"{p}_gen0_heap_size_bytes", "Gen0"),
                (f"{p}_gen1_heap_size_bytes", "Gen1"),
                (f"{p}_gen2_heap_size_bytes", "Gen2"),
            ],
            unit="bytes",
            x=0, y=y_pos, w=12, h=8,
        ))

        panels.append(self._graph_panel(
            title="LOH / POH 大小",
            exprs=[
                (f"{p}_loh_size_bytes", "LOH"),
                (f"{p}_poh_size_bytes", "POH"),
            ],
            unit="bytes",
            x=12, y=y_pos, w=12, h=8,
        ))
        y_pos += 8

        # === Row 3: 晋升与存活 ===
        panels.append(self._row("晋升与存活", y_pos))
        y_pos += 1

        panels.append(self._graph_panel(
            title="晋升字节数",
            exprs=[
                (f"{p}_gen0_promoted_bytes", "Gen0 → Gen1"),
                (f"{p}_gen1_promoted_bytes", "Gen1 → Gen2"),
            ],
            unit="bytes",
            x=0, y=y_pos, w=12, h=8,
        ))

        panels.append(self._graph_panel(
            title="存活字节数",
            exprs=[
                (f"{p}_gen2_survived_bytes", "Gen2"),
                (f"{p}_loh_survived_bytes", "LOH"),
                (f"{p}_poh_survived_bytes", "POH"),
            ],
            unit="bytes",
            x=12, y=y_pos, w=12, h=8,
        ))
        y_pos += 8

        # 分配 panel ID
        for i, panel in enumerate(panels):
            panel["id"] = i + 1

        return {
            "dashboard": {
                "id": None,
                "uid": f"gcstats-{int(time.time())}",
                "title": self._title,
                "tags": ["dotnet", "gc", "runtime"],
                "timezone": "browser",
                "refresh": self._refresh,
                "schemaVersion": 39,
                "version": 1,
                "panels": panels,
                "time": {"from": "now-1h", "to": "now"},
                "templating": {
                    "list": [
                        {
                            "name": "datasource",
                            "type": "datasource",
                            "query": "prometheus",
                            "current": {"text": self._datasource, "value": self._datasource},
                        }
                    ]
                },
            },
            "overwrite": True,
        }

    def save(self, path: str) -> None:
        """保存 Dashboard JSON 到文件"""
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.generate())
        logger.info(f"Grafana Dashboard 已保存: {path}")

    # ========== 面板构建器 ==========

    def _row(self, title: str, y: int) -> Dict:
        return {
            "type": "row",
            "title": title,
            "collapsed": False,
            "gridPos": {"h": 1, "w": 24, "x": 0, "y": y},
            "panels": [],
        }

    def _stat_panel(
        self,
        title: str,
        expr: str,
        unit: str,
        x: int,
        y: int,
        w: int,
        h: int,
        thresholds: Optional[List[Dict]] = None,
    ) -> Dict:
        if thresholds is None:
            thresholds = [{"color": "green", "value": None}]

        return {
            "type": "stat",
            "title": title,
            "gridPos": {"h": h, "w": w, "x": x, "y": y},
            "targets": [
                {
                    "expr": expr,
                    "datasource": {"type": "prometheus", "uid": "${datasource}"},
                }
            ],
            "fieldConfig": {
                "defaults": {
                    "unit": unit,
                    "thresholds": {
                        "mode": "absolute",
                        "steps": thresholds,
                    },
                },
            },
        }

    def _graph_panel(
        self,
        title: str,
        exprs: List[tuple],
        unit: str,
        x: int,
        y: int,
        w: int,
        h: int,
    ) -> Dict:
        targets = []
        for expr, legend in exprs:
            targets.append({
                "expr": expr,
                "legendFormat": legend,
                "datasource": {"type": "prometheus", "uid": "${datasource}"},
            })

        return {
            "type": "timeseries",
            "title": title,
            "gridPos": {"h": h, "w": w, "x": x, "y": y},
            "targets": targets,
            "fieldConfig": {
                "defaults": {
                    "unit": unit,
                    "custom": {
                        "drawStyle": "line",
                        "lineInterpolation": "stepAfter",
                        "fillOpacity": 10,
                    },
                },
            },
        }
