import logging
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

# Auth dependency resolving the caller's shop
from ..auth.security import get_current_shop_id

from .repository import StatisticsStore, get_statistics_store
from .schemas import (
    CategoryStat, DateRangeQuery, GlobalStatsResponse, OrderSummaryResponse, ProductStat,
    TopClientsResponse
)
from . import service as statistics_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/shop/statistics",
    tags=["ShopStatistics"],
    responses={400: {"description": "Missing parameter or no shop linked to the account"}},
)

ShopId = Annotated[int, Depends(get_current_shop_id)]
Store = Annotated[StatisticsStore, Depends(get_statistics_store)]
Period = Annotated[DateRangeQuery, Query()]  # startDate / endDate
Year = Annotated[Optional[int], Query(ge=1, le=9999, description="Calendar year (YYYY)")]


async def _run_report(report):
    try:
        return await report
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Statistics report failed: {e!r}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"message": "Server error", "error": str(e) or e.__class__.__name__},
        )


@router.get("/orders", response_model=OrderSummaryResponse,
            summary="Get shop order summary between two dates")
async def get_order_summary(shop_id: ShopId, store: Store, period: Period):
    return await _run_report(
        statistics_service.generate_order_summary_report(store, shop_id, period.start_date, period.end_date)
    )


@router.get("/top-clients", response_model=TopClientsResponse,
            summary="Get top clients by order count and by total amount")
async def get_top_clients(shop_id: ShopId, store: Store, period: Period):
    return await _run_report(
        statistics_service.generate_top_clients_report(store, shop_id, period.start_date, period.end_date)
    )


@router.get("/products", response_model=List[ProductStat],
            summary="Get per-product statistics for a year")
async def get_product_stats(shop_id: ShopId, store: Store, year: Year = None):
    return await _run_report(statistics_service.generate_product_stats_report(store, shop_id, year))


@router.get("/categories", response_model=List[CategoryStat],
            summary="Get per-category statistics for a year")
async def get_category_stats(shop_id: ShopId, store: Store, year: Year = None):
    return await _run_report(statistics_service.generate_category_stats_report(store, shop_id, year))


@router.get("/global", response_model=GlobalStatsResponse,
            summary="Get shop global statistics for a year compared with the previous year")
async def get_global_stats(shop_id: ShopId, store: Store, year: Year = None):
    return await _run_report(statistics_service.generate_global_stats_report(store, shop_id, year))
