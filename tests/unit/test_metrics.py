"""
Unit Tests - Derived Metrics
"""
from decimal import Decimal

import pytest

from backoffice.services.metrics import (
    PEAK_HOUR_COUNT,
    StockStatus,
    TrendDirection,
    alert_severity,
    best_and_worst,
    calculate_growth,
    classify_stock,
    days_until_stockout,
    gross_profit_margin,
    item_cost,
    mean_price,
    rank_hours,
    rank_peak_hours,
    safe_average,
    safe_ratio,
    trend_direction,
)


class TestGrowth:
    """Tests for calculate_growth"""

    @pytest.mark.parametrize("current", [0, 1, 250, Decimal("99.99")])
    def test_zero_base_is_one_hundred(self, current):
        assert calculate_growth(current, 0) == 100.0

    @pytest.mark.parametrize("previous", [1, 40, Decimal("12.50")])
    def test_drop_to_zero_is_minus_one_hundred(self, previous):
        assert calculate_growth(0, previous) == -100.0

    @pytest.mark.parametrize("value", [1, 7, Decimal("1000.00")])
    def test_unchanged_is_zero(self, value):
        assert calculate_growth(value, value) == 0.0

    def test_week_over_week_revenue(self):
        assert calculate_growth(Decimal("1100.00"), Decimal("1000.00")) == 10.0

    def test_decline(self):
        assert calculate_growth(75, 100) == -25.0


class TestCostAndMargin:
    """Tests for cost of goods and margins"""

    def test_recorded_cost_basis_wins(self):
        assert item_cost(Decimal("50.00"), 2, Decimal("40.00")) == Decimal("80.00")

    def test_missing_cost_basis_uses_fallback_ratio(self):
        assert item_cost(Decimal("100.00"), 2) == Decimal("130")

    def test_zero_cost_basis_uses_fallback_ratio(self):
        assert item_cost(Decimal("100.00"), 2, Decimal("0")) == Decimal("130")

    def test_margin(self):
        assert gross_profit_margin(Decimal("200"), Decimal("130")) == 35.0

    def test_margin_without_revenue_is_zero(self):
        assert gross_profit_margin(Decimal("0"), Decimal("15")) == 0.0


class TestStockRisk:
    """Tests for stock cover and classification"""

    def test_days_until_stockout(self):
        # 30 units over 30 days is one a day
        assert days_until_stockout(10, 30, 30) == 10.0

    @pytest.mark.parametrize("stock,sold", [(0, 10), (10, 0), (0, 0)])
    def test_days_until_stockout_undefined(self, stock, sold):
        assert days_until_stockout(stock, sold, 30) is None

    def test_out_of_stock(self):
        assert classify_stock(0, None) == StockStatus.OUT_OF_STOCK

    def test_low_when_under_a_week_of_cover(self):
        assert classify_stock(5, 6.9) == StockStatus.LOW

    def test_ok_at_a_week_of_cover(self):
        assert classify_stock(7, 7.0) == StockStatus.OK

    def test_ok_without_sales(self):
        assert classify_stock(3, None) == StockStatus.OK


class TestAlertSeverity:
    """Tests for alert_severity"""

    def test_widget_scenario(self):
        assert alert_severity(3, 10) == 70

    def test_zero_alert_level_is_critical(self):
        assert alert_severity(4, 0) == 100

    def test_empty_shelf_is_critical(self):
        assert alert_severity(0, 8) == 100

    def test_halves_round_up(self):
        # 5/8 = 62.5%
        assert alert_severity(3, 8) == 63

    def test_above_alert_level_clamps_to_zero(self):
        assert alert_severity(20, 5) == 0

    @pytest.mark.parametrize("alert_level", [0, 1, 3, 7, 10, 50])
    def test_always_within_bounds(self, alert_level):
        for stock in range(0, 120):
            assert 0 <= alert_severity(stock, alert_level) <= 100


class TestRankings:
    """Tests for hour ranking, trend and best/worst"""

    def test_peak_hour_count(self):
        assert PEAK_HOUR_COUNT == 6

    def test_peak_hours_prefer_lower_hour_on_ties(self):
        counts = {hour: 0 for hour in range(24)}
        counts[18] = 5
        counts[9] = 3
        counts[20] = 3

        assert rank_peak_hours(counts) == [18, 9, 20, 0, 1, 2]

    def test_rank_hours_ends_with_last_quiet_hour(self):
        counts = {hour: 1 for hour in range(24)}
        counts[4] = 0
        counts[16] = 0

        assert rank_hours(counts)[-1] == 16

    @pytest.mark.parametrize("growth,direction", [
        (5.01, TrendDirection.GROWING),
        (5.0, TrendDirection.STABLE),
        (-5.0, TrendDirection.STABLE),
        (-5.01, TrendDirection.DECLINING),
        (100.0, TrendDirection.GROWING),
    ])
    def test_trend_direction(self, growth, direction):
        assert trend_direction(growth) == direction

    def test_best_and_worst_prefer_earliest_on_ties(self):
        entries = [("mon", 10), ("tue", 30), ("wed", 30), ("thu", 10)]

        best, worst = best_and_worst(entries, key=lambda entry: entry[1])

        assert best == ("tue", 30)
        assert worst == ("mon", 10)

    def test_best_and_worst_of_nothing(self):
        assert best_and_worst([], key=lambda entry: entry) == (None, None)


class TestAverages:
    """Tests for averaging helpers"""

    def test_safe_average_rounds_to_cents(self):
        assert safe_average(Decimal("100.00"), 3) == Decimal("33.33")

    def test_safe_average_of_nothing(self):
        assert safe_average(Decimal("0"), 0) == Decimal("0.00")

    def test_safe_ratio(self):
        assert safe_ratio(3, 2) == 1.5
        assert safe_ratio(3, 0) == 0.0

    def test_mean_price(self):
        assert mean_price([Decimal("10.00"), Decimal("12.00"), Decimal("12.00")]) == Decimal("11.33")
        assert mean_price([]) == Decimal("0.00")
