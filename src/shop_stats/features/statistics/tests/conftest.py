import pytest

from shop_stats.features.statistics.tests.fakes import FailingStatisticsStore, FakeStatisticsStore


@pytest.fixture
def fake_store() -> FakeStatisticsStore:
    return FakeStatisticsStore()


@pytest.fixture
def failing_store() -> FailingStatisticsStore:
    return FailingStatisticsStore()
