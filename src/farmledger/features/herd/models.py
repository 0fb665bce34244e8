"""Goat records: identity, status and the denormalised sale/breeding state."""

from tortoise import fields
from ...common.models import TimestampMixin, generate_ksuid


class Goat(TimestampMixin):
    id = fields.IntField(primary_key=True)
    public_id = fields.CharField(
        max_length=27, unique=True, default=generate_ksuid, db_index=True
    )
    tag_number = fields.CharField(max_length=50, unique=True)
    name = fields.CharField(max_length=100)
    breed = fields.CharField(max_length=30, db_index=True)
    gender = fields.CharField(max_length=10, db_index=True)
    date_of_birth = fields.DateField(db_index=True)
    color = fields.CharField(max_length=50, null=True)
    status = fields.CharField(max_length=20, default="Active", db_index=True)

    # Filled in when the goat is sold, cleared when the sale is deleted
    sale: fields.ForeignKeyNullableRelation["Sale"] = fields.ForeignKeyField(
        "models.Sale", related_name="sold_goats", on_delete=fields.SET_NULL, null=True
    )
    sale_price = fields.FloatField(null=True)
    sale_date = fields.DatetimeField(null=True)

    is_pregnant = fields.BooleanField(default=False)
    due_date = fields.DatetimeField(null=True)
    last_breeding = fields.DatetimeField(null=True)
    sire: fields.ForeignKeyNullableRelation["Goat"] = fields.ForeignKeyField(
        "models.Goat", related_name="offspring_of", on_delete=fields.SET_NULL, null=True
    )

    pen = fields.CharField(max_length=50, null=True)
    notes = fields.TextField(null=True)

    def __str__(self):
        return f"{self.name} #{self.tag_number} ({self.status})"

    class Meta:
        table = "goats"
