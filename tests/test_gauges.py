"""
Gauge 标识与内存注册表测试
"""
from gcstats.gauges import GAUGE_DESCRIPTIONS, GaugeTarget, InMemoryGaugeRegistry


class TestGaugeTarget:

    def test_twelve_targets(self):
        assert len(GaugeTarget) == 12

    def test_all_described(self):
        assert set(GAUGE_DESCRIPTIONS) == set(GaugeTarget)

    def test_value_is_metric_suffix(self):
        assert GaugeTarget.GEN0_HEAP_SIZE.value == "gen0_heap_size_bytes"
        assert GaugeTarget("gc_handles") is GaugeTarget.GC_HANDLES


class TestInMemoryGaugeRegistry:

    def test_set_overwrites(self):
        registry = InMemoryGaugeRegistry()
        registry.set_gauge(GaugeTarget.GC_HANDLES, 5)
        registry.set_gauge(GaugeTarget.GC_HANDLES, 3)
        assert registry.get(GaugeTarget.GC_HANDLES) == 3
        assert registry.writes == [
            (GaugeTarget.GC_HANDLES, 5),
            (GaugeTarget.GC_HANDLES, 3),
        ]

    def test_unset_is_none(self):
        assert InMemoryGaugeRegistry().get(GaugeTarget.POH_SIZE) is None

    def test_record_writes_disabled(self):
        registry = InMemoryGaugeRegistry(record_writes=False)
        registry.set_gauge(GaugeTarget.LOH_SIZE, 1)
        assert registry.writes == []
        assert registry.values == {GaugeTarget.LOH_SIZE: 1}

    def test_clear_and_stats(self):
        registry = InMemoryGaugeRegistry()
        registry.set_gauge(GaugeTarget.LOH_SIZE, 1)
        assert registry.get_stats()["writes"] == 1
        registry.clear()
        assert registry.values == {}
        assert registry.get_stats()["gauges"] == 0
