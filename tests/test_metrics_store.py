"""Tests for per-step metrics persistence."""

import pytest
from py_erosion.core.erosion_model import SimulationParameters
from py_erosion.core.relief_statistics import ReliefStats
from py_erosion.db import Base, Database, MetricsStore


def make_stats(relief=100.0, hack=0.55, concavity=0.45):
    return ReliefStats(
        max_relief=relief,
        mean_elevation=relief / 2,
        drainage_density=0.1,
        hack_slope_exponent=hack,
        concavity_index=concavity,
    )


class TestMetricsStore:
    """Test upsert-by-step logging on in-memory SQLite."""

    @pytest.fixture
    def store(self):
        store = MetricsStore.connect("sqlite://")
        yield store
        store.database.dispose()

    def test_connect(self, store):
        assert store.enabled

    def test_log_step(self, store):
        params = SimulationParameters(rain=80.0)
        assert store.log_step(10, params, make_stats()) is True

        entry = store.get_step(10)
        assert entry.step == 10
        assert entry.rain == 80.0
        assert entry.erode_k == 0.005
        assert entry.deposit_d == 0.003
        assert entry.threshold_t == 20.0
        assert entry.uplift_u == 10.0
        assert entry.max_relief == 100.0
        assert entry.mean_elev == 50.0
        assert entry.drain_den == 0.1
        assert entry.hack_slope == pytest.approx(0.55)
        assert entry.concavity == pytest.approx(0.45)

    def test_upsert_replaces_row(self, store):
        store.log_step(20, SimulationParameters(), make_stats(relief=10.0))
        store.log_step(20, SimulationParameters(uplift_u=3.0), make_stats(relief=30.0))

        history = store.history()
        assert len(history) == 1
        assert history[0].max_relief == 30.0
        assert history[0].uplift_u == 3.0

    def test_history_ordered(self, store):
        for step in (30, 10, 20):
            store.log_step(step, SimulationParameters(), make_stats())
        assert [entry.step for entry in store.history()] == [10, 20, 30]

    def test_undefined_regression_stored_as_null(self, store):
        store.log_step(1, SimulationParameters(), make_stats(hack=None, concavity=None))
        entry = store.get_step(1)
        assert entry.hack_slope is None
        assert entry.concavity is None

    def test_column_names(self):
        columns = [c.name for c in Base.metadata.tables["ErosionLog"].columns]
        assert columns == [
            "Step", "Rain", "ErodeK", "DepositD", "ThresholdT", "UpliftU",
            "MaxRelief", "MeanElev", "DrainDen", "HackSlope", "Concavity",
        ]

    def test_write_failure_is_not_raised(self, store):
        Base.metadata.drop_all(bind=store.database.engine)
        assert store.log_step(5, SimulationParameters(), make_stats()) is False

    def test_unavailable_database_disables_store(self):
        store = MetricsStore.connect("notadialect://nowhere")
        assert not store.enabled
        assert store.log_step(1, SimulationParameters(), make_stats()) is False
        assert store.history() == []
        assert store.get_step(1) is None


class TestDatabase:
    def test_session_requires_initialize(self):
        with pytest.raises(RuntimeError):
            with Database("sqlite://").get_session():
                pass

    def test_initialize_without_url(self):
        with pytest.raises(RuntimeError):
            Database().initialize()
