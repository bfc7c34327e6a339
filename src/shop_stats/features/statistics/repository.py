"""
Statistics data access.

Reports read the order ledger only through the ``StatisticsStore`` protocol.
Each method is one logical query (filter, group with aggregates, join by
foreign key or distinct values) and returns plain typed rows, so the reports
can be exercised against any store: ``TortoiseStatisticsStore`` in the
application, an in-memory fake in the unit tests.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Sequence

from tortoise.functions import Count, Sum

from ..auth.models import User
from ..catalog.models import Category, Product
from ..orders.models import Order, OrderItem, OrderStatus
from ..shops.models import Shop
from .windows import DateWindow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderTotals:
    order_count: int
    total_amount: float


@dataclass(frozen=True)
class BuyerTotals:
    buyer_id: int
    order_count: int
    total_amount: float


@dataclass(frozen=True)
class BuyerProfile:
    buyer_id: int
    public_id: str
    firstname: str
    lastname: str
    email: str


@dataclass(frozen=True)
class LineItem:
    product_id: str
    name: str
    total_price: float


@dataclass(frozen=True)
class CategorizedLineItem:
    product_id: str
    total_price: float
    # None when the product has no category or the category record is gone
    category_id: Optional[str]
    category_name: Optional[str]


@dataclass(frozen=True)
class ShopRating:
    avg_rating: Optional[float]
    count_rating: Optional[int]


class StatisticsStore(Protocol):
    async def order_totals(self, shop_id: int, window: DateWindow) -> OrderTotals:
        """Count and summed total of the shop's orders created within ``window``."""

    async def status_counts(self, shop_id: int, window: DateWindow) -> Dict[str, int]:
        """Order count per status value."""

    async def buyer_totals(
        self, shop_id: int, window: DateWindow, statuses: Sequence[OrderStatus]
    ) -> List[BuyerTotals]:
        """Orders restricted to ``statuses``, grouped by buyer."""

    async def buyer_profiles(self, buyer_ids: Sequence[int]) -> Dict[int, BuyerProfile]:
        """Profiles keyed by buyer id; unknown ids are absent from the result."""

    async def line_items(self, shop_id: int, window: DateWindow) -> List[LineItem]:
        """One row per order line, in order creation order."""

    async def categorized_line_items(
        self, shop_id: int, window: DateWindow
    ) -> List[CategorizedLineItem]:
        """Order lines joined to their product and its category.

        Lines whose product no longer exists are left out.
        """

    async def distinct_buyers(self, shop_id: int, window: DateWindow) -> List[int]:
        """Distinct buyer ids of the shop's orders within ``window``."""

    async def shop_rating(self, shop_id: int) -> Optional[ShopRating]:
        """Current rating aggregates of the shop, or None if the shop is unknown."""


def _status_value(value) -> str:
    return value.value if isinstance(value, OrderStatus) else str(value)


class TortoiseStatisticsStore:
    """``StatisticsStore`` backed by the Tortoise ORM models."""

    @staticmethod
    def _orders(shop_id: int, window: DateWindow):
        return Order.filter(
            shop_id=shop_id,
            created_at__gte=window.start,
            created_at__lt=window.end,
        )

    @staticmethod
    def _order_items(shop_id: int, window: DateWindow):
        return OrderItem.filter(
            order__shop_id=shop_id,
            order__created_at__gte=window.start,
            order__created_at__lt=window.end,
        ).order_by("order__created_at", "order_id", "id")

    async def order_totals(self, shop_id: int, window: DateWindow) -> OrderTotals:
        rows = await (
            self._orders(shop_id, window)
            .annotate(order_count=Count("id"), amount_sum=Sum("total_amount"))
            .group_by("shop_id")
            .values("order_count", "amount_sum")
        )
        if not rows:
            return OrderTotals(order_count=0, total_amount=0.0)
        return OrderTotals(
            order_count=rows[0]["order_count"] or 0,
            total_amount=float(rows[0]["amount_sum"] or 0.0),
        )

    async def status_counts(self, shop_id: int, window: DateWindow) -> Dict[str, int]:
        rows = await (
            self._orders(shop_id, window)
            .annotate(count=Count("id"))
            .group_by("status")
            .values("status", "count")
        )
        return {_status_value(row["status"]): row["count"] for row in rows if row["status"]}

    async def buyer_totals(
        self, shop_id: int, window: DateWindow, statuses: Sequence[OrderStatus]
    ) -> List[BuyerTotals]:
        rows = await (
            self._orders(shop_id, window)
            .filter(status__in=list(statuses))
            .annotate(order_count=Count("id"), amount_sum=Sum("total_amount"))
            .group_by("buyer_id")
            .values("buyer_id", "order_count", "amount_sum")
        )
        return [
            BuyerTotals(
                buyer_id=row["buyer_id"],
                order_count=row["order_count"],
                total_amount=float(row["amount_sum"] or 0.0),
            )
            for row in rows
        ]

    async def buyer_profiles(self, buyer_ids: Sequence[int]) -> Dict[int, BuyerProfile]:
        if not buyer_ids:
            return {}
        users = await User.filter(id__in=list(buyer_ids)).values(
            "id", "public_id", "firstname", "lastname", "email"
        )
        return {
            user["id"]: BuyerProfile(
                buyer_id=user["id"],
                public_id=user["public_id"],
                firstname=user["firstname"],
                lastname=user["lastname"],
                email=user["email"],
            )
            for user in users
        }

    async def line_items(self, shop_id: int, window: DateWindow) -> List[LineItem]:
        rows = await self._order_items(shop_id, window).values(
            "product_public_id", "name", "total_price"
        )
        return [
            LineItem(
                product_id=row["product_public_id"],
                name=row["name"],
                total_price=float(row["total_price"] or 0.0),
            )
            for row in rows
        ]

    async def categorized_line_items(
        self, shop_id: int, window: DateWindow
    ) -> List[CategorizedLineItem]:
        rows = await self._order_items(shop_id, window).values(
            "product_public_id", "total_price"
        )
        if not rows:
            return []

        product_ids = {row["product_public_id"] for row in rows}
        products = await Product.filter(public_id__in=list(product_ids)).values(
            "public_id", "category_id"
        )
        category_of = {p["public_id"]: p["category_id"] for p in products}

        category_ids = {cid for cid in category_of.values() if cid is not None}
        categories = {}
        if category_ids:
            for category in await Category.filter(id__in=list(category_ids)).values(
                "id", "public_id", "name"
            ):
                categories[category["id"]] = category

        lines = []
        for row in rows:
            product_id = row["product_public_id"]
            if product_id not in category_of:
                continue  # product deleted since the order was placed
            category = categories.get(category_of[product_id])
            lines.append(
                CategorizedLineItem(
                    product_id=product_id,
                    total_price=float(row["total_price"] or 0.0),
                    category_id=category["public_id"] if category else None,
                    category_name=category["name"] if category else None,
                )
            )
        if len(lines) != len(rows):
            logger.debug(
                f"Shop {shop_id}: {len(rows) - len(lines)} order line(s) reference missing products"
            )
        return lines

    async def distinct_buyers(self, shop_id: int, window: DateWindow) -> List[int]:
        return await self._orders(shop_id, window).distinct().values_list("buyer_id", flat=True)

    async def shop_rating(self, shop_id: int) -> Optional[ShopRating]:
        shop = await Shop.get_or_none(id=shop_id)
        if shop is None:
            return None
        return ShopRating(avg_rating=shop.avg_rating, count_rating=shop.count_rating)


def get_statistics_store() -> StatisticsStore:
    """FastAPI dependency providing the store used by the statistics routes."""
    return TortoiseStatisticsStore()
