"""Data model for marketplace shops (the seller tenants statistics are scoped to)."""

from tortoise import fields
from ...common.models import TimestampMixin, generate_ksuid


class Shop(TimestampMixin):
    id = fields.IntField(primary_key=True)
    public_id = fields.CharField(
        max_length=27, unique=True, default=generate_ksuid, db_index=True
    )
    name = fields.CharField(max_length=255)
    # Running rating aggregates, maintained by the reviews service
    avg_rating = fields.FloatField(default=0.0)
    count_rating = fields.IntField(default=0)

    owners: fields.ReverseRelation["User"]
    products: fields.ReverseRelation["Product"]
    orders: fields.ReverseRelation["Order"]

    def __str__(self):
        return f"{self.name} ({self.avg_rating:.1f} from {self.count_rating} ratings)"

    class Meta:
        table = "shops"
