"""Analytics API routes"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from backoffice.core.database import get_db
from backoffice.core.security import require_analytics_read
from .schemas import (
    AnalyticsCard,
    BestSellingProduct,
    ChartDataPoint,
    DailyCashSummary,
    DailyCategoryPerformance,
    HourlyPatternSummary,
    LowStockAlert,
    ProfitSummary,
    StockValueSummary,
    TopProduct,
    TopProductMetrics,
    WeeklyTrendsSummary,
)
from .services import AnalyticsService

router = APIRouter()

PERIOD_DESCRIPTION = "Number of days to look back"


@router.get(
    "/cards",
    response_model=List[AnalyticsCard],
    summary="Get key analytics cards"
)
async def get_cards(
    period: int = Query(30, ge=1, le=365, description=PERIOD_DESCRIPTION),
    current_user: dict = Depends(require_analytics_read),
    db: AsyncSession = Depends(get_db)
):
    """Orders, revenue, active users and products sold against the previous period"""
    service = AnalyticsService(db)
    return await service.get_cards(period=period)


@router.get(
    "/chart",
    response_model=List[ChartDataPoint],
    summary="Get daily chart data for orders, revenue, and products"
)
async def get_chart_data(
    period: int = Query(30, ge=1, le=365, description=PERIOD_DESCRIPTION),
    current_user: dict = Depends(require_analytics_read),
    db: AsyncSession = Depends(get_db)
):
    service = AnalyticsService(db)
    return await service.get_chart_data(period=period)


@router.get(
    "/top-products",
    response_model=List[TopProduct],
    summary="Get top 10 ordered products for a period"
)
async def get_top_products(
    period: int = Query(30, ge=1, le=365, description=PERIOD_DESCRIPTION),
    current_user: dict = Depends(require_analytics_read),
    db: AsyncSession = Depends(get_db)
):
    service = AnalyticsService(db)
    return await service.get_top_products(period=period)


@router.get(
    "/top-products-metrics",
    response_model=List[TopProductMetrics],
    summary="Get top products metrics for charting"
)
async def get_top_products_metrics(
    period: int = Query(30, ge=1, le=365, description=PERIOD_DESCRIPTION),
    current_user: dict = Depends(require_analytics_read),
    db: AsyncSession = Depends(get_db)
):
    service = AnalyticsService(db)
    return await service.get_top_products_metrics(period=period)


@router.get(
    "/category-performance",
    response_model=List[DailyCategoryPerformance],
    summary="Get category performance metrics for charting"
)
async def get_category_performance(
    period: int = Query(30, ge=1, le=365, description=PERIOD_DESCRIPTION),
    current_user: dict = Depends(require_analytics_read),
    db: AsyncSession = Depends(get_db)
):
    service = AnalyticsService(db)
    return await service.get_category_performance(period=period)


@router.get(
    "/daily-cash-summary",
    response_model=DailyCashSummary,
    summary="Get daily cash summary"
)
async def get_daily_cash_summary(
    period: int = Query(1, ge=1, le=365, description="Number of whole days, today included"),
    current_user: dict = Depends(require_analytics_read),
    db: AsyncSession = Depends(get_db)
):
    """Cash flow, orders and payment status for today (or the last few days)"""
    service = AnalyticsService(db)
    return await service.get_daily_cash_summary(period=period)


@router.get(
    "/low-stock-alerts",
    response_model=List[LowStockAlert],
    summary="Get low stock alerts"
)
async def get_low_stock_alerts(
    threshold: Optional[int] = Query(
        None,
        ge=0,
        description="Stock threshold; defaults to each SKU's own alert level"
    ),
    current_user: dict = Depends(require_analytics_read),
    db: AsyncSession = Depends(get_db)
):
    service = AnalyticsService(db)
    return await service.get_low_stock_alerts(threshold=threshold)


@router.get(
    "/profit-tracking",
    response_model=ProfitSummary,
    summary="Get daily profit tracking"
)
async def get_profit_tracking(
    period: int = Query(30, ge=1, le=365, description=PERIOD_DESCRIPTION),
    current_user: dict = Depends(require_analytics_read),
    db: AsyncSession = Depends(get_db)
):
    service = AnalyticsService(db)
    return await service.get_profit_tracking(period=period)


@router.get(
    "/best-selling-products",
    response_model=List[BestSellingProduct],
    summary="Get best-selling products with reorder insights"
)
async def get_best_selling_products(
    period: int = Query(30, ge=1, le=365, description=PERIOD_DESCRIPTION),
    limit: int = Query(10, ge=1, le=50),
    current_user: dict = Depends(require_analytics_read),
    db: AsyncSession = Depends(get_db)
):
    service = AnalyticsService(db)
    return await service.get_best_selling_products(period=period, limit=limit)


@router.get(
    "/hourly-pattern",
    response_model=HourlyPatternSummary,
    summary="Get sales pattern by hour of day"
)
async def get_hourly_pattern(
    period: int = Query(30, ge=1, le=365, description=PERIOD_DESCRIPTION),
    current_user: dict = Depends(require_analytics_read),
    db: AsyncSession = Depends(get_db)
):
    service = AnalyticsService(db)
    return await service.get_hourly_pattern(period=period)


@router.get(
    "/stock-value",
    response_model=StockValueSummary,
    summary="Get current inventory value"
)
async def get_stock_value(
    current_user: dict = Depends(require_analytics_read),
    db: AsyncSession = Depends(get_db)
):
    service = AnalyticsService(db)
    return await service.get_stock_value()


@router.get(
    "/weekly-trends",
    response_model=WeeklyTrendsSummary,
    summary="Get week-over-week trends"
)
async def get_weekly_trends(
    weeks: int = Query(12, ge=1, le=52, description="Number of weeks, current week included"),
    current_user: dict = Depends(require_analytics_read),
    db: AsyncSession = Depends(get_db)
):
    service = AnalyticsService(db)
    return await service.get_weekly_trends(weeks=weeks)
