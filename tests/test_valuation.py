import pytest

from portfolio_index.models import Holding
from portfolio_index.services.valuation import (
    change_pct,
    establish_baseline,
    normalize_index,
    portfolio_price,
    price_on_or_before,
)

SERIES = {"2024-01-12": 11.0, "2024-01-05": 10.0}


def test_price_on_or_before_carries_forward():
    assert price_on_or_before(SERIES, "2024-01-10") == 10.0
    assert price_on_or_before(SERIES, "2024-01-12") == 11.0
    assert price_on_or_before(SERIES, "2024-02-01") == 11.0


def test_price_on_or_before_absent():
    assert price_on_or_before(SERIES, "2024-01-01") is None
    assert price_on_or_before({}, "2024-01-10") is None
    assert price_on_or_before(None, "2024-01-10") is None


def test_portfolio_price_skips_missing_prices():
    holdings = [Holding(ticker="A", weight=0.6), Holding(ticker="B", weight=0.4)]

    result = portfolio_price(holdings, {"A": {"2024-01-05": 10.0}, "B": None}, "2024-01-10")

    assert result.total == pytest.approx(6.0)
    assert result.covered_weight == pytest.approx(0.6)


def test_portfolio_price_ignores_zero_weight():
    holdings = [Holding(ticker="A", weight=0.0), Holding(ticker="B", weight=2.0)]
    series = {"A": {"2024-01-05": 10.0}, "B": {"2024-01-05": 3.0}}

    result = portfolio_price(holdings, series, "2024-01-05")

    assert result.total == pytest.approx(6.0)
    assert result.covered_weight == pytest.approx(2.0)


def test_normalize_index():
    assert normalize_index(55, 50) == 110.0
    assert f"{normalize_index(55, 50):.2f}" == "110.00"
    assert normalize_index(1, 3, precision=4) == 33.3333


def test_establish_baseline():
    assert establish_baseline(None, [0.0, 0.0, 5.0, 6.0]) == 5.0
    assert establish_baseline(None, [0.0]) == 1.0
    assert establish_baseline(42.0, [5.0]) == 42.0
    assert establish_baseline(0.0, [5.0]) == 5.0


def test_change_pct_is_relative_to_first_point():
    assert change_pct([100.0, 110.0]) == 10.0
    assert change_pct([120.0, 100.0, 90.0]) == -25.0
    assert change_pct([]) == 0.0
    assert change_pct([0.0, 95.0]) == -5.0
