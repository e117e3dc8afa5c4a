"""Analytics schemas"""

from pydantic import BaseModel, PlainSerializer
from typing import Annotated, List, Optional, Union
from decimal import Decimal
from uuid import UUID

from backoffice.services.metrics import StockStatus, TrendDirection

# Exact Decimal in Python, a JSON number on the wire; Numeric(12, 2) values survive the float
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class AnalyticsCard(BaseModel):
    title: str
    count: Union[int, Money]
    previous: Union[int, Money]
    growth: float
    description: str


class ChartDataPoint(BaseModel):
    date: str
    orders: int
    revenue: Money
    products: int


class TopProduct(BaseModel):
    product_name: str
    total_ordered: int


class TopProductMetrics(BaseModel):
    label: str
    total_ordered: int
    total_revenue: Money


class CategoryPerformanceEntry(BaseModel):
    category_id: UUID
    category_key: str
    category_name: str
    total_orders: int
    total_revenue: Money
    total_products: int


class DailyCategoryPerformance(BaseModel):
    date: str
    categories: List[CategoryPerformanceEntry]


class DailyCashSummary(BaseModel):
    date: str
    total_cash: Money
    orders_count: int
    average_order_value: Money
    completed_payments: Money
    pending_payments: Money
    items_sold: int


class LowStockAlert(BaseModel):
    sku_id: UUID
    sku: str
    product_name: str
    variant_name: str
    current_stock: int
    low_stock_alert: int
    price: Money
    cover_image: Optional[str] = None
    alert_severity: int  # 0-100


class DailyProfit(BaseModel):
    date: str
    revenue: Money
    cost_of_goods: Money
    gross_profit: Money
    profit_margin: float
    orders_count: int


class ProfitSummary(BaseModel):
    total_revenue: Money
    total_cost: Money
    total_profit: Money
    average_profit_margin: float
    daily_breakdown: List[DailyProfit]
    best_day: Optional[DailyProfit] = None
    worst_day: Optional[DailyProfit] = None


class BestSellingProduct(BaseModel):
    product_id: UUID
    product_name: str
    units_sold: int
    total_revenue: Money
    orders_count: int
    average_price: Money
    current_stock: int
    cover_image: Optional[str] = None
    stock_status: StockStatus
    days_until_stockout: Optional[float] = None


class HourlyPattern(BaseModel):
    hour: int
    hour_label: str
    average_orders: float
    total_orders: int
    average_revenue: Money
    total_revenue: Money
    average_items_sold: float
    is_peak_hour: bool


class HourlyPatternSummary(BaseModel):
    hourly_data: List[HourlyPattern]
    busiest_hour: HourlyPattern
    slowest_hour: HourlyPattern
    peak_hours: List[HourlyPattern]
    days_analyzed: int


class StockValueByCategory(BaseModel):
    category_id: UUID
    category_name: str
    total_stock: int
    stock_value: Money
    products_count: int
    percentage_of_total: float


class StockValueByProduct(BaseModel):
    product_id: UUID
    product_name: str
    total_stock: int
    average_price: Money
    stock_value: Money
    variants_count: int
    cover_image: Optional[str] = None


class StockValueSummary(BaseModel):
    total_stock_value: Money
    total_units: int
    unique_products: int
    unique_skus: int
    average_value_per_sku: Money
    low_stock_value: Money
    out_of_stock_value: Money
    by_category: List[StockValueByCategory]
    top_products: List[StockValueByProduct]


class WeeklyTrendData(BaseModel):
    week_number: int
    week_label: str
    start_date: str
    end_date: str
    orders_count: int
    revenue: Money
    items_sold: int
    average_order_value: Money
    unique_customers: int
    revenue_growth: float
    orders_growth: float


class WeeklyTrendsSummary(BaseModel):
    weekly_data: List[WeeklyTrendData]
    average_weekly_revenue: Money
    average_weekly_orders: float
    best_week: WeeklyTrendData
    worst_week: WeeklyTrendData
    trend_direction: TrendDirection
    overall_growth_rate: float
    weeks_analyzed: int
