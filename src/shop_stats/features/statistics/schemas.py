"""Shop Statistics API Schemas

Pydantic models for the five shop statistics reports:

1. Order summary over a date range
2. Top clients over a date range
3. Per-product statistics for a year
4. Per-category statistics for a year
5. Global statistics for a year, compared with the previous year

Fields are declared in snake_case and serialized in camelCase, the shape
the shop dashboard consumes."""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional
import datetime


class StatisticsModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
    )


# Query parameters of the date range reports
class DateRangeQuery(StatisticsModel):
    start_date: Optional[datetime.date] = Field(None, description="Start date of the period (YYYY-MM-DD)")
    end_date: Optional[datetime.date] = Field(None, description="End date of the period (YYYY-MM-DD, inclusive)")


# 1. Order summary
class OrderSummaryResponse(StatisticsModel):
    total_orders: int
    total_amount: float
    pending_orders: int
    confirmed_orders: int


# 2. Top clients
class ClientRanking(StatisticsModel):
    buyer_id: str
    order_count: int
    total_amount: float
    firstname: str
    lastname: str
    email: str


class TopClientsResponse(StatisticsModel):
    top_by_count: List[ClientRanking]
    top_by_amount: List[ClientRanking]


# 3. Per product
class ProductStat(StatisticsModel):
    product_id: str
    product_name: str
    order_count: int
    total_amount: float


# 4. Per category
class CategoryStat(StatisticsModel):
    category_id: Optional[str] = None  # None for the uncategorized bucket
    category_name: str
    order_count: int
    total_amount: float


# 5. Year over year
class GlobalStatsResponse(StatisticsModel):
    total_orders: int
    orders_diff: float
    total_amount: float
    amount_diff: float
    avg_rating: float
    count_rating: int
    total_customers: int
    customers_diff: float
