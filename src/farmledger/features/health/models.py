from tortoise import fields
from ...common.models import TimestampMixin, generate_ksuid


class HealthRecord(TimestampMixin):
    id = fields.IntField(primary_key=True)
    public_id = fields.CharField(
        max_length=27, unique=True, default=generate_ksuid, db_index=True
    )
    goat: fields.ForeignKeyRelation["Goat"] = fields.ForeignKeyField(
        "models.Goat", related_name="health_records", on_delete=fields.RESTRICT
    )
    date = fields.DatetimeField(db_index=True)
    type = fields.CharField(max_length=20, db_index=True)
    description = fields.TextField()
    veterinarian = fields.CharField(max_length=255, null=True)
    cost = fields.FloatField(null=True)
    next_due_date = fields.DatetimeField(null=True, db_index=True)
    notes = fields.TextField(null=True)

    created_by: fields.ForeignKeyNullableRelation["User"] = fields.ForeignKeyField(
        "models.User", related_name="health_records", on_delete=fields.SET_NULL, null=True
    )

    def __str__(self):
        return f"{self.type} on {self.date:%Y-%m-%d}"

    class Meta:
        table = "health_records"
