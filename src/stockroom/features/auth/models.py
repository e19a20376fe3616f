from tortoise import fields

from ...common.models import TimestampMixin, generate_ksuid


class User(TimestampMixin):
    id = fields.CharField(max_length=27, primary_key=True, default=generate_ksuid)
    email = fields.CharField(max_length=255, unique=True, db_index=True)
    first_name = fields.CharField(max_length=100)
    last_name = fields.CharField(max_length=100)
    hashed_password = fields.CharField(max_length=255)
    role = fields.CharField(max_length=50, default="user")  # "admin", "manager" or "user"
    is_active = fields.BooleanField(default=True)

    consumption_records: fields.ReverseRelation["ConsumptionRecord"]

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __str__(self):
        return f"{self.email} ({self.role})"

    class Meta:
        table = "users"
