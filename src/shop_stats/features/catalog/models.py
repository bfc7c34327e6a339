"""Data models for the product catalog, including Category and Product."""

from tortoise import fields
from ...common.models import TimestampMixin, generate_ksuid


class Category(TimestampMixin):
    id = fields.IntField(primary_key=True)
    public_id = fields.CharField(
        max_length=27, unique=True, default=generate_ksuid, db_index=True
    )
    name = fields.CharField(max_length=100, unique=True)

    products: fields.ReverseRelation["Product"]

    def __str__(self):
        return self.name

    class Meta:
        table = "categories"


class Product(TimestampMixin):
    id = fields.IntField(primary_key=True)
    public_id = fields.CharField(
        max_length=27, unique=True, default=generate_ksuid, db_index=True
    )
    name = fields.CharField(max_length=255)

    shop: fields.ForeignKeyRelation["Shop"] = fields.ForeignKeyField(
        "models.Shop", related_name="products", on_delete=fields.CASCADE
    )
    category: fields.ForeignKeyRelation[Category] = fields.ForeignKeyField(
        "models.Category",
        related_name="products",
        on_delete=fields.SET_NULL,
        null=True,
    )

    def __str__(self):
        return self.name

    class Meta:
        table = "products"
