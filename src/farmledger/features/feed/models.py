from tortoise import fields
from ...common.models import TimestampMixin, generate_ksuid


class FeedRecord(TimestampMixin):
    id = fields.IntField(primary_key=True)
    public_id = fields.CharField(
        max_length=27, unique=True, default=generate_ksuid, db_index=True
    )
    # Either a single goat or a whole pen is fed
    goat: fields.ForeignKeyNullableRelation["Goat"] = fields.ForeignKeyField(
        "models.Goat", related_name="feed_records", on_delete=fields.SET_NULL, null=True
    )
    pen = fields.CharField(max_length=50, null=True, db_index=True)
    date = fields.DatetimeField(db_index=True)
    feed_type = fields.CharField(max_length=30, db_index=True)
    quantity = fields.FloatField()
    unit = fields.CharField(max_length=10)
    cost = fields.FloatField(null=True)
    supplier = fields.CharField(max_length=255, null=True)
    notes = fields.TextField(null=True)
    feeding_time = fields.CharField(max_length=20, null=True)
    consumed = fields.FloatField(null=True)
    waste = fields.FloatField(null=True)

    created_by: fields.ForeignKeyNullableRelation["User"] = fields.ForeignKeyField(
        "models.User", related_name="feed_records", on_delete=fields.SET_NULL, null=True
    )

    def __str__(self):
        return f"{self.feed_type} {self.quantity} {self.unit} on {self.date:%Y-%m-%d}"

    class Meta:
        table = "feed_records"
