"""Consumption events recorded against inventory balances."""

from tortoise import fields
from ...common.models import TimestampMixin, generate_ksuid, utc_now


class ConsumptionRecord(TimestampMixin):
    id = fields.CharField(max_length=27, primary_key=True, default=generate_ksuid)

    inventory_item: fields.ForeignKeyRelation["InventoryItem"] = fields.ForeignKeyField(
        "models.InventoryItem",
        related_name="consumption_records",
        on_delete=fields.RESTRICT,
    )
    user: fields.ForeignKeyRelation["User"] = fields.ForeignKeyField(
        "models.User",
        related_name="consumption_records",
        on_delete=fields.RESTRICT,
    )

    quantity = fields.FloatField()
    unit = fields.CharField(max_length=50)
    notes = fields.TextField(null=True)
    recorded_at = fields.DatetimeField(default=utc_now, db_index=True)

    def __str__(self):
        return f"{self.quantity:g} {self.unit} of item {self.inventory_item_id} at {self.recorded_at}"

    class Meta:
        table = "consumption_records"
        ordering = ["-recorded_at"]
