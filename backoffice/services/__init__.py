"""Services package"""

from .analytics_queries import AnalyticsQueries
from .metrics import StockStatus, TrendDirection, calculate_growth

__all__ = [
    "AnalyticsQueries",
    "StockStatus",
    "TrendDirection",
    "calculate_growth",
]
