"""Derived metrics: growth, margins, stock risk and rankings"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Iterable, List, Mapping, Optional, Sequence, Tuple, TypeVar, Union
import enum
import math

from backoffice.utils.time_buckets import HOURS_IN_DAY

Number = Union[int, Decimal]
T = TypeVar("T")

COST_FALLBACK_RATIO = Decimal("0.65")
LOW_STOCK_DAYS = 7
PEAK_HOUR_SHARE = 0.25
PEAK_HOUR_COUNT = math.ceil(HOURS_IN_DAY * PEAK_HOUR_SHARE)
TREND_THRESHOLD = 5
MONEY_QUANTUM = Decimal("0.01")
ZERO = Decimal("0")


class StockStatus(str, enum.Enum):
    OK = "OK"
    LOW = "LOW"
    OUT_OF_STOCK = "OUT_OF_STOCK"


class TrendDirection(str, enum.Enum):
    GROWING = "GROWING"
    DECLINING = "DECLINING"
    STABLE = "STABLE"


def quantize_money(value: Number) -> Decimal:
    return Decimal(value).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def safe_average(total: Number, count: int) -> Decimal:
    """Mean rounded to cents; 0.00 for an empty population"""
    if not count:
        return quantize_money(ZERO)
    return quantize_money(Decimal(total) / count)


def safe_ratio(total: Number, count: int) -> float:
    """Plain per-unit rate (e.g. orders per day); 0 for an empty population"""
    if not count:
        return 0.0
    return float(Decimal(total) / count)


def calculate_growth(current: Number, previous: Number) -> float:
    """
    Percentage change from previous to current.

    A zero base reports 100 regardless of the current value, while a fall
    from a non-zero base to zero reports -100.
    """
    if previous == 0:
        return 100.0
    current, previous = Decimal(current), Decimal(previous)
    return float((current - previous) / previous * 100)


def item_cost(unit_price: Decimal, quantity: int, cost_basis: Optional[Decimal] = None) -> Decimal:
    """Cost of goods for one order line; estimated at 65% of price unless a non-zero cost is recorded"""
    unit_cost = cost_basis if cost_basis else unit_price * COST_FALLBACK_RATIO
    return unit_cost * quantity


def gross_profit_margin(revenue: Decimal, cost: Decimal) -> float:
    if revenue == 0:
        return 0.0
    return float((revenue - cost) / revenue * 100)


def days_until_stockout(total_stock: int, units_sold: int, period: int) -> Optional[float]:
    """Days of cover at the period's average daily sales rate, None when undefined"""
    if units_sold <= 0 or total_stock <= 0:
        return None
    daily_rate = Decimal(units_sold) / period
    return float(Decimal(total_stock) / daily_rate)


def classify_stock(total_stock: int, days_left: Optional[float]) -> StockStatus:
    if total_stock == 0:
        return StockStatus.OUT_OF_STOCK
    if days_left is not None and days_left < LOW_STOCK_DAYS:
        return StockStatus.LOW
    return StockStatus.OK


def alert_severity(current_stock: int, alert_level: int) -> int:
    """
    How far below its alert level a SKU has fallen, 0-100.

    round((alert - stock) / alert * 100) with halves rounded up, done in
    integer arithmetic; an alert level of 0 is always 100.
    """
    if alert_level <= 0:
        return 100
    severity = ((alert_level - current_stock) * 200 + alert_level) // (2 * alert_level)
    return max(0, min(100, severity))


def rank_hours(order_counts: Mapping[int, int]) -> List[int]:
    """Hours by order count, busiest first; equal counts keep hour order"""
    return sorted(order_counts, key=lambda hour: (-order_counts[hour], hour))


def rank_peak_hours(order_counts: Mapping[int, int]) -> List[int]:
    return rank_hours(order_counts)[:PEAK_HOUR_COUNT]


def trend_direction(growth: float) -> TrendDirection:
    if growth > TREND_THRESHOLD:
        return TrendDirection.GROWING
    if growth < -TREND_THRESHOLD:
        return TrendDirection.DECLINING
    return TrendDirection.STABLE


def best_and_worst(entries: Sequence[T], key: Callable[[T], Number]) -> Tuple[Optional[T], Optional[T]]:
    """Max and min entries by key; the earliest entry wins a tie"""
    if not entries:
        return None, None

    best = worst = entries[0]
    for entry in entries[1:]:
        if key(entry) > key(best):
            best = entry
        if key(entry) < key(worst):
            worst = entry
    return best, worst


def mean_price(prices: Iterable[Decimal]) -> Decimal:
    prices = list(prices)
    return safe_average(sum(prices, ZERO), len(prices))
