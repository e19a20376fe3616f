"""Data models for stock tracking: storage locations and the inventory items held in them."""

from tortoise import fields
from ...common.models import TimestampMixin, generate_ksuid


class Location(TimestampMixin):
    id = fields.CharField(max_length=27, primary_key=True, default=generate_ksuid)
    name = fields.CharField(max_length=255, unique=True)
    type = fields.CharField(max_length=100, default="storage")
    description = fields.TextField(null=True)
    is_active = fields.BooleanField(default=True)

    # Hierarchy is stored but reports only group by the flat location_id
    parent: fields.ForeignKeyNullableRelation["Location"] = fields.ForeignKeyField(
        "models.Location",
        related_name="children",
        on_delete=fields.SET_NULL,
        null=True,
    )

    children: fields.ReverseRelation["Location"]
    inventory_items: fields.ReverseRelation["InventoryItem"]

    def __str__(self):
        return self.name

    class Meta:
        table = "locations"


class InventoryItem(TimestampMixin):
    id = fields.CharField(max_length=27, primary_key=True, default=generate_ksuid)
    name = fields.CharField(max_length=255, db_index=True)
    description = fields.TextField(null=True)
    category = fields.CharField(max_length=100, db_index=True)
    current_quantity = fields.FloatField(default=0.0)
    original_amount = fields.FloatField()
    minimum_quantity = fields.FloatField(default=0.0)
    unit = fields.CharField(max_length=50)
    expiry_date = fields.DateField(null=True, db_index=True)
    last_consumed_at = fields.DatetimeField(null=True)

    location: fields.ForeignKeyNullableRelation[Location] = fields.ForeignKeyField(
        "models.Location",
        related_name="inventory_items",
        on_delete=fields.SET_NULL,
        null=True,
    )

    consumption_records: fields.ReverseRelation["ConsumptionRecord"]

    def __str__(self):
        return f"{self.name} ({self.current_quantity:g}/{self.original_amount:g} {self.unit})"

    class Meta:
        table = "inventory_items"
