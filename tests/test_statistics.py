from datetime import datetime

import pytest

from plantdash.services import statistics as stats

VALUES = [98.0, 99.5, 100.0, 100.5, 102.0]


def test_mean_and_std_dev():
    assert stats.calculate_mean(VALUES) == pytest.approx(100.0)
    assert stats.calculate_std_dev(VALUES) == pytest.approx(1.4577379, rel=1e-6)
    assert stats.calculate_std_dev(VALUES, sample=False) == pytest.approx(1.3038405, rel=1e-6)


def test_mean_and_std_dev_fail_soft():
    assert stats.calculate_mean([]) == 0.0
    assert stats.calculate_mean(None) == 0.0
    assert stats.calculate_std_dev([5.0]) == 0.0


def test_cpk_matches_formula():
    usl, lsl = 106.0, 95.0
    mean = stats.calculate_mean(VALUES)
    sigma = stats.calculate_std_dev(VALUES)
    expected = min((usl - mean) / (3 * sigma), (mean - lsl) / (3 * sigma))

    assert stats.calculate_cpk(VALUES, usl, lsl) == pytest.approx(expected)


@pytest.mark.parametrize("values", [[], [100.0], [100.0, 100.0, 100.0], None])
def test_cpk_and_cp_none_without_spread(values):
    assert stats.calculate_cpk(values, 105, 95) is None
    assert stats.calculate_cp(values, 105, 95) is None


def test_cp_matches_formula():
    sigma = stats.calculate_std_dev(VALUES)

    assert stats.calculate_cp(VALUES, 105, 95) == pytest.approx(10 / (6 * sigma))


def test_control_limits():
    limits = stats.calculate_control_limits(VALUES)
    sigma = stats.calculate_std_dev(VALUES)

    assert limits["mean"] == pytest.approx(100.0)
    assert limits["ucl"] == pytest.approx(100.0 + 3 * sigma)
    assert limits["lcl"] == pytest.approx(100.0 - 3 * sigma)
    assert stats.calculate_control_limits([1.0]) is None


def test_histogram_last_bin_includes_max():
    bins = stats.create_histogram([0, 1, 2, 3, 4, 5, 6, 7, 8, 10], bin_count=5)

    assert [b["count"] for b in bins] == [2, 2, 2, 2, 2]
    assert bins[0]["start"] == 0
    assert bins[-1]["end"] == 10
    assert sum(b["percentage"] for b in bins) == pytest.approx(100)


def test_histogram_edge_cases():
    assert stats.create_histogram([]) == []
    flat = stats.create_histogram([3.0, 3.0, 3.0], bin_count=4)
    assert [b["count"] for b in flat] == [3, 0, 0, 0]


def test_correlation():
    assert stats.calculate_correlation([1, 2, 3, 4], [2, 4, 6, 8]) == pytest.approx(1.0)
    assert stats.calculate_correlation([1, 2, 3, 4], [8, 6, 4, 2]) == pytest.approx(-1.0)


@pytest.mark.parametrize(
    "x, y",
    [([1, 2, 3], [1, 2]), ([1], [1]), ([1, 2, 3], [5, 5, 5]), (None, [1, 2])],
)
def test_correlation_fail_soft(x, y):
    assert stats.calculate_correlation(x, y) is None


def test_filter_outliers_uses_iqr_fences():
    values = [10, 11, 12, 12, 13, 14, 15, 100]

    assert stats.filter_outliers(values) == [10, 11, 12, 12, 13, 14, 15]
    assert stats.filter_outliers(values, multiplier=100) == values


def test_filter_outliers_needs_four_values():
    assert stats.filter_outliers([1, 2, 1000]) == [1, 2, 1000]


def test_parse_numeric():
    assert stats.parse_numeric("12.5") == 12.5
    assert stats.parse_numeric(7) == 7.0
    assert stats.parse_numeric("") is None
    assert stats.parse_numeric(None) is None
    assert stats.parse_numeric("abc") is None


def test_ole_to_datetime():
    assert stats.ole_to_datetime(1.5) == datetime(1899, 12, 31, 12, 0)
    assert stats.ole_to_datetime(None) is None
