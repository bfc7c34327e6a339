from enum import Enum

from tortoise import fields
from ...common.models import TimestampMixin, generate_ksuid


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class Order(TimestampMixin):
    id = fields.IntField(primary_key=True)
    public_id = fields.CharField(
        max_length=27, unique=True, default=generate_ksuid, db_index=True
    )
    status = fields.CharEnumField(OrderStatus, max_length=20, default=OrderStatus.PENDING)
    total_amount = fields.FloatField(default=0.0, description="Order total, tax included")

    shop: fields.ForeignKeyRelation["Shop"] = fields.ForeignKeyField(
        "models.Shop", related_name="orders", on_delete=fields.CASCADE
    )
    # Order history outlives user accounts: the buyer id is kept when the user row goes away
    buyer: fields.ForeignKeyRelation["User"] = fields.ForeignKeyField(
        "models.User",
        related_name="orders",
        on_delete=fields.NO_ACTION,
        db_constraint=False,
    )

    items: fields.ReverseRelation["OrderItem"]

    def __str__(self):
        return f"Order {self.public_id} - Status: {self.status}"

    class Meta:
        table = "orders"


class OrderItem(TimestampMixin):
    id = fields.IntField(primary_key=True)

    order: fields.ForeignKeyRelation[Order] = fields.ForeignKeyField(
        "models.Order",
        related_name="items",
        on_delete=fields.CASCADE,
    )

    # Snapshot of the product at order time; products may be renamed or deleted later
    product_public_id = fields.CharField(max_length=27, db_index=True)
    name = fields.CharField(max_length=255)

    quantity = fields.IntField(default=1)
    unit_price = fields.FloatField()
    total_price = fields.FloatField(description="Line total, tax included")

    def __str__(self):
        return f"{self.quantity} x {self.name}"

    class Meta:
        table = "order_items"
