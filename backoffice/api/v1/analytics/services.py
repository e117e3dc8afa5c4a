"""Analytics service layer"""

from typing import Dict, List, Optional
from datetime import datetime
from decimal import Decimal
from uuid import UUID
from zoneinfo import ZoneInfo
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from backoffice.core.monitoring import report_records, track_report
from backoffice.models import OrderStatus, PaymentStatus
from backoffice.services.analytics_queries import AnalyticsQueries
from backoffice.services.aggregation import (
    CashTotals,
    CategoryDayTotals,
    DayTotals,
    InventoryTotals,
    ProfitDayTotals,
    fold_cash_orders,
    fold_category_items,
    fold_chart_orders,
    fold_hourly_orders,
    fold_inventory,
    fold_named_products,
    fold_product_sales,
    fold_profit_orders,
    fold_stock_by_category,
    fold_stock_by_product,
    fold_week_orders,
    init_daily_buckets,
    init_hour_buckets,
)
from backoffice.services.metrics import (
    ZERO,
    alert_severity,
    best_and_worst,
    calculate_growth,
    classify_stock,
    days_until_stockout,
    gross_profit_margin,
    mean_price,
    quantize_money,
    rank_hours,
    rank_peak_hours,
    safe_average,
    safe_ratio,
    trend_direction,
)
from backoffice.utils.time_buckets import (
    DAY_KEY_FORMAT,
    comparison_windows,
    current_time,
    daily_bucket_keys,
    day_span_window,
    get_report_timezone,
    hour_label,
    localize,
    lookback_window,
    week_windows,
)
from .schemas import (
    AnalyticsCard,
    BestSellingProduct,
    CategoryPerformanceEntry,
    ChartDataPoint,
    DailyCashSummary,
    DailyCategoryPerformance,
    DailyProfit,
    HourlyPattern,
    HourlyPatternSummary,
    LowStockAlert,
    ProfitSummary,
    StockValueByCategory,
    StockValueByProduct,
    StockValueSummary,
    TopProduct,
    TopProductMetrics,
    WeeklyTrendData,
    WeeklyTrendsSummary,
)

logger = logging.getLogger(__name__)

TOP_PRODUCTS_LIMIT = 10
TOP_STOCK_PRODUCTS_LIMIT = 10


class AnalyticsService:
    """
    Back-office reporting.

    Every report is recomputed from the database on each call. `now` can be
    injected for reproducible output; it defaults to the current time in the
    reporting timezone.
    """

    def __init__(self, db: AsyncSession, tz: Optional[ZoneInfo] = None):
        self.db = db
        self.queries = AnalyticsQueries(db)
        self.tz = tz or get_report_timezone()

    def _now(self, now: Optional[datetime]) -> datetime:
        if now is None:
            return current_time(self.tz)
        return localize(now, self.tz)

    @track_report("cards")
    async def get_cards(self, period: int = 30, now: Optional[datetime] = None) -> List[AnalyticsCard]:
        """Headline numbers for the period against the equal-length period before it"""
        now = self._now(now)
        current, previous = comparison_windows(period, now)

        orders = (
            await self.queries.count_orders(current),
            await self.queries.count_orders(previous),
        )
        revenue = (
            await self.queries.sum_order_revenue(current),
            await self.queries.sum_order_revenue(previous),
        )
        active_users = (
            await self.queries.count_active_users(current),
            await self.queries.count_active_users(previous),
        )
        products_sold = (
            await self.queries.sum_items_sold(current),
            await self.queries.sum_items_sold(previous),
        )

        return [
            self._card("Total Orders", orders, f"Orders placed in the last {period} days"),
            self._card("Revenue", revenue, f"Revenue generated in the last {period} days"),
            self._card("Active Users", active_users, f"Users who logged in within the last {period} days"),
            self._card("Products Sold", products_sold, f"Total products sold in the last {period} days"),
        ]

    @staticmethod
    def _card(title: str, values, description: str) -> AnalyticsCard:
        current, previous = values
        return AnalyticsCard(
            title=title,
            count=current,
            previous=previous,
            growth=calculate_growth(current, previous),
            description=description,
        )

    @track_report("chart")
    async def get_chart_data(self, period: int = 30, now: Optional[datetime] = None) -> List[ChartDataPoint]:
        """Delivered, paid orders per day; days without orders are zero rows"""
        now = self._now(now)
        buckets = init_daily_buckets(daily_bucket_keys(period, now), DayTotals)

        orders = await self.queries.fetch_orders(
            lookback_window(period, now),
            status=OrderStatus.DELIVERED,
            payment_status=PaymentStatus.COMPLETED,
            include_items=True,
        )
        folded = fold_chart_orders(orders, buckets, self.tz)
        report_records.labels(report="chart").inc(folded)

        return [
            ChartDataPoint(date=date, orders=totals.orders, revenue=totals.revenue, products=totals.products)
            for date, totals in buckets.items()
        ]

    @track_report("top_products")
    async def get_top_products(self, period: int = 30, now: Optional[datetime] = None) -> List[TopProduct]:
        now = self._now(now)
        rows = await self.queries.top_product_quantities(lookback_window(period, now), limit=TOP_PRODUCTS_LIMIT)
        return [TopProduct(product_name=name, total_ordered=quantity) for name, quantity in rows]

    @track_report("top_products_metrics")
    async def get_top_products_metrics(
        self,
        period: int = 30,
        now: Optional[datetime] = None
    ) -> List[TopProductMetrics]:
        """Quantity and revenue per product name, top 10 by quantity"""
        now = self._now(now)
        items = await self.queries.fetch_order_items(lookback_window(period, now))
        totals = fold_named_products(items)
        report_records.labels(report="top_products_metrics").inc(len(items))

        ranked = sorted(totals.items(), key=lambda entry: (-entry[1].quantity, entry[0]))
        return [
            TopProductMetrics(label=name, total_ordered=entry.quantity, total_revenue=entry.revenue)
            for name, entry in ranked[:TOP_PRODUCTS_LIMIT]
        ]

    @track_report("category_performance")
    async def get_category_performance(
        self,
        period: int = 30,
        now: Optional[datetime] = None
    ) -> List[DailyCategoryPerformance]:
        """Per day, every active category with its orders, revenue and units"""
        now = self._now(now)
        categories = await self.queries.fetch_active_categories()

        def empty_day() -> Dict[UUID, CategoryDayTotals]:
            return {
                category_id: CategoryDayTotals(category_id=category_id, category_name=name)
                for category_id, name in categories
            }

        buckets = init_daily_buckets(daily_bucket_keys(period, now), empty_day)
        items = await self.queries.fetch_order_items(lookback_window(period, now), include_catalog=True)
        folded = fold_category_items(items, buckets, self.tz)
        report_records.labels(report="category_performance").inc(folded)

        return [
            DailyCategoryPerformance(
                date=date,
                categories=[
                    CategoryPerformanceEntry(
                        category_id=totals.category_id,
                        category_key=totals.category_key,
                        category_name=totals.category_name,
                        total_orders=totals.orders,
                        total_revenue=totals.revenue,
                        total_products=totals.products,
                    )
                    for totals in day.values()
                ],
            )
            for date, day in buckets.items()
        ]

    @track_report("daily_cash_summary")
    async def get_daily_cash_summary(self, period: int = 1, now: Optional[datetime] = None) -> DailyCashSummary:
        """Cash taken over the last `period` whole days, today included"""
        now = self._now(now)
        orders = await self.queries.fetch_orders(
            day_span_window(period, now),
            include_items=True,
            include_payments=True,
        )
        totals = fold_cash_orders(orders, CashTotals())

        return DailyCashSummary(
            date=now.strftime(DAY_KEY_FORMAT),
            total_cash=totals.total_cash,
            orders_count=totals.orders,
            average_order_value=safe_average(totals.total_cash, totals.orders),
            completed_payments=totals.completed_payments,
            pending_payments=totals.pending_payments,
            items_sold=totals.items_sold,
        )

    @track_report("low_stock_alerts")
    async def get_low_stock_alerts(self, threshold: Optional[int] = None) -> List[LowStockAlert]:
        """
        SKUs at or below `threshold`, or at or below their own alert level
        when no threshold is given. Severity is always measured against the
        SKU's own alert level.
        """
        skus = await self.queries.fetch_skus(threshold=threshold, low_stock_only=True)

        return [
            LowStockAlert(
                sku_id=sku.id,
                sku=sku.sku,
                product_name=sku.variant.product.name,
                variant_name=sku.variant.name,
                current_stock=sku.stock,
                low_stock_alert=sku.low_stock_alert,
                price=sku.price,
                cover_image=sku.cover_image,
                alert_severity=alert_severity(sku.stock, sku.low_stock_alert),
            )
            for sku in skus
        ]

    @track_report("profit_tracking")
    async def get_profit_tracking(self, period: int = 30, now: Optional[datetime] = None) -> ProfitSummary:
        now = self._now(now)
        buckets = init_daily_buckets(daily_bucket_keys(period, now), ProfitDayTotals)

        orders = await self.queries.fetch_orders(lookback_window(period, now), include_item_skus=True)
        folded = fold_profit_orders(orders, buckets, self.tz)
        report_records.labels(report="profit_tracking").inc(folded)

        daily_breakdown = [
            DailyProfit(
                date=date,
                revenue=totals.revenue,
                cost_of_goods=quantize_money(totals.cost),
                gross_profit=quantize_money(totals.gross_profit),
                profit_margin=gross_profit_margin(totals.revenue, totals.cost),
                orders_count=totals.orders,
            )
            for date, totals in buckets.items()
        ]

        total_revenue = sum((totals.revenue for totals in buckets.values()), ZERO)
        total_cost = sum((totals.cost for totals in buckets.values()), ZERO)
        best_day, worst_day = best_and_worst(daily_breakdown, key=lambda day: day.gross_profit)

        return ProfitSummary(
            total_revenue=total_revenue,
            total_cost=quantize_money(total_cost),
            total_profit=quantize_money(total_revenue - total_cost),
            average_profit_margin=gross_profit_margin(total_revenue, total_cost),
            daily_breakdown=daily_breakdown,
            best_day=best_day,
            worst_day=worst_day,
        )

    @track_report("best_selling_products")
    async def get_best_selling_products(
        self,
        period: int = 30,
        limit: int = 10,
        now: Optional[datetime] = None
    ) -> List[BestSellingProduct]:
        """Top sellers by units with their stock cover at the period's sales rate"""
        now = self._now(now)
        items = await self.queries.fetch_order_items(lookback_window(period, now), include_product_stock=True)
        products = fold_product_sales(items)
        report_records.labels(report="best_selling_products").inc(len(items))

        results = []
        for product in products.values():
            days_left = days_until_stockout(product.current_stock, product.units_sold, period)
            results.append(BestSellingProduct(
                product_id=product.product_id,
                product_name=product.product_name,
                units_sold=product.units_sold,
                total_revenue=product.revenue,
                orders_count=len(product.order_ids),
                average_price=mean_price(product.unit_prices),
                current_stock=product.current_stock,
                cover_image=product.cover_image,
                stock_status=classify_stock(product.current_stock, days_left),
                days_until_stockout=days_left,
            ))

        results.sort(key=lambda p: (-p.units_sold, p.product_name, str(p.product_id)))
        return results[:limit]

    @track_report("hourly_pattern")
    async def get_hourly_pattern(self, period: int = 30, now: Optional[datetime] = None) -> HourlyPatternSummary:
        """Orders by hour of day across the whole period, with the busiest hours flagged"""
        now = self._now(now)
        buckets = init_hour_buckets()

        orders = await self.queries.fetch_orders(lookback_window(period, now), include_items=True)
        folded = fold_hourly_orders(orders, buckets, self.tz)
        report_records.labels(report="hourly_pattern").inc(folded)

        order_counts = {hour: totals.orders for hour, totals in buckets.items()}
        peak = set(rank_peak_hours(order_counts))

        hourly_data = [
            HourlyPattern(
                hour=hour,
                hour_label=hour_label(hour),
                average_orders=safe_ratio(totals.orders, period),
                total_orders=totals.orders,
                average_revenue=safe_average(totals.revenue, period),
                total_revenue=totals.revenue,
                average_items_sold=safe_ratio(totals.items, period),
                is_peak_hour=hour in peak,
            )
            for hour, totals in buckets.items()
        ]

        # hourly_data is indexed by hour
        ranking = rank_hours(order_counts)
        return HourlyPatternSummary(
            hourly_data=hourly_data,
            busiest_hour=hourly_data[ranking[0]],
            slowest_hour=hourly_data[ranking[-1]],
            peak_hours=[entry for entry in hourly_data if entry.is_peak_hour],
            days_analyzed=period,
        )

    @track_report("stock_value")
    async def get_stock_value(self) -> StockValueSummary:
        """Value of the current inventory of active SKUs, by category and product"""
        skus = await self.queries.fetch_skus()
        inventory = fold_inventory(skus, InventoryTotals())
        report_records.labels(report="stock_value").inc(len(skus))

        total_value = inventory.stock_value

        by_category = [
            StockValueByCategory(
                category_id=entry.category_id,
                category_name=entry.category_name,
                total_stock=entry.total_stock,
                stock_value=entry.stock_value,
                products_count=len(entry.product_ids),
                percentage_of_total=float(entry.stock_value / total_value * 100) if total_value > 0 else 0.0,
            )
            for entry in fold_stock_by_category(skus).values()
        ]
        by_category.sort(key=lambda c: (-c.stock_value, c.category_name))

        top_products = []
        for entry in fold_stock_by_product(skus).values():
            exact_average = sum(entry.prices, ZERO) / len(entry.prices) if entry.prices else ZERO
            top_products.append(StockValueByProduct(
                product_id=entry.product_id,
                product_name=entry.product_name,
                total_stock=entry.total_stock,
                average_price=mean_price(entry.prices),
                stock_value=quantize_money(exact_average * entry.total_stock),
                variants_count=entry.variants_count,
                cover_image=entry.cover_image,
            ))
        top_products.sort(key=lambda p: (-p.stock_value, p.product_name))

        return StockValueSummary(
            total_stock_value=total_value,
            total_units=inventory.units,
            unique_products=len(inventory.product_ids),
            unique_skus=inventory.skus,
            average_value_per_sku=safe_average(total_value, inventory.skus),
            low_stock_value=inventory.low_stock_value,
            out_of_stock_value=inventory.out_of_stock_value,
            by_category=by_category,
            top_products=top_products[:TOP_STOCK_PRODUCTS_LIMIT],
        )

    @track_report("weekly_trends")
    async def get_weekly_trends(self, weeks: int = 12, now: Optional[datetime] = None) -> WeeklyTrendsSummary:
        """
        Week-over-week performance, oldest week first.

        Weeks are fetched one at a time from the oldest; each week's growth
        compares it with the week fetched just before it, so the first week
        reports 0.
        """
        now = self._now(now)
        weekly_data: List[WeeklyTrendData] = []
        previous: Optional[WeeklyTrendData] = None

        for week in week_windows(weeks, now):
            orders = await self.queries.fetch_orders(week.window, include_items=True)
            totals = fold_week_orders(orders)

            entry = WeeklyTrendData(
                week_number=week.week_number,
                week_label=week.label,
                start_date=week.start.strftime(DAY_KEY_FORMAT),
                end_date=week.end.strftime(DAY_KEY_FORMAT),
                orders_count=totals.orders,
                revenue=totals.revenue,
                items_sold=totals.items_sold,
                average_order_value=safe_average(totals.revenue, totals.orders),
                unique_customers=len(totals.customer_phones),
                revenue_growth=calculate_growth(totals.revenue, previous.revenue) if previous is not None else 0.0,
                orders_growth=calculate_growth(totals.orders, previous.orders_count) if previous is not None else 0.0,
            )
            weekly_data.append(entry)
            previous = entry

        total_revenue = sum((week.revenue for week in weekly_data), Decimal("0"))
        total_orders = sum(week.orders_count for week in weekly_data)
        best_week, worst_week = best_and_worst(weekly_data, key=lambda week: week.revenue)
        overall_growth = calculate_growth(weekly_data[-1].revenue, weekly_data[0].revenue)

        return WeeklyTrendsSummary(
            weekly_data=weekly_data,
            average_weekly_revenue=safe_average(total_revenue, weeks),
            average_weekly_orders=safe_ratio(total_orders, weeks),
            best_week=best_week,
            worst_week=worst_week,
            trend_direction=trend_direction(overall_growth),
            overall_growth_rate=overall_growth,
            weeks_analyzed=weeks,
        )
