"""
Shop Statistics Service

Report functions computing a single shop's business statistics: order
summary, top clients, per-product and per-category breakdowns and
year-over-year figures. Every report is a stateless read over an injected
``StatisticsStore``; independent queries of one report run concurrently.
"""

import asyncio
import datetime
import logging
from typing import Dict, List, Optional

from ...core import config
from ..orders.models import OrderStatus
from .repository import BuyerProfile, BuyerTotals, StatisticsStore
from .schemas import (
    CategoryStat, ClientRanking, GlobalStatsResponse, OrderSummaryResponse,
    ProductStat, TopClientsResponse
)
from .windows import (
    percentage_diff, previous_year_window, require_year, resolve_date_range, year_window
)

logger = logging.getLogger(__name__)

# Orders that represent committed revenue for client rankings
RANKED_STATUSES = (OrderStatus.CONFIRMED, OrderStatus.SHIPPED, OrderStatus.DELIVERED)


async def _fan_out(*queries):
    """Run independent store queries concurrently under the query timeout."""
    return await asyncio.wait_for(
        asyncio.gather(*queries), timeout=config.STATS_QUERY_TIMEOUT_SECONDS
    )


async def generate_order_summary_report(
    store: StatisticsStore,
    shop_id: int,
    start_date: Optional[datetime.date],
    end_date: Optional[datetime.date],
) -> OrderSummaryResponse:
    """
    Order count, revenue and pending/confirmed counts between two dates.

    Args:
        store: Data access for the order ledger
        shop_id: The shop the caller owns
        start_date: First day of the period (inclusive)
        end_date: Last day of the period (inclusive)

    Returns:
        OrderSummaryResponse: zeros when no order falls in the period.

    Raises:
        HTTPException: 400 when a date is missing.
    """
    window = resolve_date_range(start_date, end_date)
    totals, by_status = await _fan_out(
        store.order_totals(shop_id, window),
        store.status_counts(shop_id, window),
    )
    logger.debug(f"Shop {shop_id} order summary {window}: {totals}, {by_status}")
    return OrderSummaryResponse(
        total_orders=totals.order_count,
        total_amount=totals.total_amount,
        pending_orders=by_status.get(OrderStatus.PENDING.value, 0),
        confirmed_orders=by_status.get(OrderStatus.CONFIRMED.value, 0),
    )


def _by_count(row: BuyerTotals):
    return (-row.order_count, -row.total_amount, row.buyer_id)


def _by_amount(row: BuyerTotals):
    return (-row.total_amount, -row.order_count, row.buyer_id)


def _with_profiles(
    top: List[BuyerTotals], profiles: Dict[int, BuyerProfile]
) -> List[ClientRanking]:
    ranking = []
    for row in top:
        profile = profiles.get(row.buyer_id)
        if profile is None:
            continue  # buyer account no longer exists
        ranking.append(
            ClientRanking(
                buyer_id=profile.public_id,
                order_count=row.order_count,
                total_amount=row.total_amount,
                firstname=profile.firstname,
                lastname=profile.lastname,
                email=profile.email,
            )
        )
    return ranking


async def generate_top_clients_report(
    store: StatisticsStore,
    shop_id: int,
    start_date: Optional[datetime.date],
    end_date: Optional[datetime.date],
) -> TopClientsResponse:
    """
    The shop's best clients between two dates, by order count and by amount spent.

    Only confirmed, shipped and delivered orders count. Both rankings come from
    the same per-buyer grouping; ties are broken by the other metric, then by
    buyer id. Each ranking is cut to ``STATS_TOP_CLIENTS_LIMIT`` rows before the
    buyer profiles are joined, and rows whose buyer is gone are dropped.
    """
    window = resolve_date_range(start_date, end_date)
    limit = config.STATS_TOP_CLIENTS_LIMIT

    (grouped,) = await _fan_out(store.buyer_totals(shop_id, window, RANKED_STATUSES))

    by_count = sorted(grouped, key=_by_count)[:limit]
    by_amount = sorted(grouped, key=_by_amount)[:limit]
    wanted = sorted({row.buyer_id for row in by_count + by_amount})
    (profiles,) = await _fan_out(store.buyer_profiles(wanted))

    missing = [buyer_id for buyer_id in wanted if buyer_id not in profiles]
    if missing:
        logger.warning(f"Shop {shop_id} top clients: no user record for buyer(s) {missing}")

    return TopClientsResponse(
        top_by_count=_with_profiles(by_count, profiles),
        top_by_amount=_with_profiles(by_amount, profiles),
    )


async def generate_product_stats_report(
    store: StatisticsStore, shop_id: int, year: Optional[int]
) -> List[ProductStat]:
    """
    Line count and revenue per product for a calendar year, highest revenue first.

    The product name is the one recorded on the first order line of the year,
    so renamed products keep their historical name. ``order_count`` counts
    order lines, not distinct orders.
    """
    window = year_window(require_year(year))
    (lines,) = await _fan_out(store.line_items(shop_id, window))

    product_sales_data = {}
    for line in lines:
        if line.product_id not in product_sales_data:
            product_sales_data[line.product_id] = {"name": line.name, "count": 0, "revenue": 0.0}
        product_sales_data[line.product_id]["count"] += 1
        product_sales_data[line.product_id]["revenue"] += line.total_price

    response_items = [
        ProductStat(
            product_id=pid, product_name=data["name"],
            order_count=data["count"], total_amount=data["revenue"]
        )
        for pid, data in product_sales_data.items()
    ]
    response_items.sort(key=lambda x: (-x.total_amount, x.product_id))
    logger.debug(f"Shop {shop_id} product stats {year}: {len(lines)} lines, {len(response_items)} products")
    return response_items


async def generate_category_stats_report(
    store: StatisticsStore, shop_id: int, year: Optional[int]
) -> List[CategoryStat]:
    """
    Line count and revenue per product category for a calendar year.

    Lines whose product has no category, or whose category was deleted, are
    grouped into a single uncategorized bucket (``category_id`` None).
    """
    window = year_window(require_year(year))
    (lines,) = await _fan_out(store.categorized_line_items(shop_id, window))

    category_sales_data = {}
    for line in lines:
        cat_id, cat_name = (None, config.STATS_UNCATEGORIZED_LABEL)
        if line.category_id is not None:
            cat_id, cat_name = (line.category_id, line.category_name)

        if cat_id not in category_sales_data:
            category_sales_data[cat_id] = {"name": cat_name, "count": 0, "revenue": 0.0}
        category_sales_data[cat_id]["count"] += 1
        category_sales_data[cat_id]["revenue"] += line.total_price

    response_items = [
        CategoryStat(
            category_id=cid, category_name=data["name"],
            order_count=data["count"], total_amount=data["revenue"]
        )
        for cid, data in category_sales_data.items()
    ]
    response_items.sort(key=lambda x: (-x.total_amount, x.category_name, x.category_id or ""))
    return response_items


async def generate_global_stats_report(
    store: StatisticsStore, shop_id: int, year: Optional[int]
) -> GlobalStatsResponse:
    """
    Orders, revenue and distinct customers for a year against the previous one.

    The rating figures are the shop's current ones and are not limited to
    the year.
    """
    target_year = require_year(year)
    current_window = year_window(target_year)
    previous_window = previous_year_window(target_year)

    current, previous, current_buyers, previous_buyers, rating = await _fan_out(
        store.order_totals(shop_id, current_window),
        store.order_totals(shop_id, previous_window),
        store.distinct_buyers(shop_id, current_window),
        store.distinct_buyers(shop_id, previous_window),
        store.shop_rating(shop_id),
    )

    total_customers = len(set(current_buyers))
    total_customers_prev = len(set(previous_buyers))
    logger.debug(
        f"Shop {shop_id} global stats {target_year}: {current} vs {previous}, "
        f"customers {total_customers} vs {total_customers_prev}"
    )

    return GlobalStatsResponse(
        total_orders=current.order_count,
        orders_diff=percentage_diff(current.order_count, previous.order_count),
        total_amount=current.total_amount,
        amount_diff=percentage_diff(current.total_amount, previous.total_amount),
        avg_rating=(rating.avg_rating if rating else None) or 0,
        count_rating=(rating.count_rating if rating else None) or 0,
        total_customers=total_customers,
        customers_diff=percentage_diff(total_customers, total_customers_prev),
    )
