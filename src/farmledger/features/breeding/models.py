from tortoise import fields
from ...common.models import TimestampMixin, generate_ksuid

# Statuses in which a doe is still carrying
PREGNANT_STATUSES = ("pregnancy-confirmed", "pregnant")


class BreedingRecord(TimestampMixin):
    id = fields.IntField(primary_key=True)
    public_id = fields.CharField(
        max_length=27, unique=True, default=generate_ksuid, db_index=True
    )
    doe: fields.ForeignKeyRelation["Goat"] = fields.ForeignKeyField(
        "models.Goat", related_name="breedings_as_doe", on_delete=fields.RESTRICT
    )
    buck: fields.ForeignKeyRelation["Goat"] = fields.ForeignKeyField(
        "models.Goat", related_name="breedings_as_buck", on_delete=fields.RESTRICT
    )
    mating_date = fields.DatetimeField(db_index=True)
    expected_due_date = fields.DatetimeField(db_index=True)
    pregnancy_confirmed = fields.BooleanField(default=False)
    confirmation_date = fields.DatetimeField(null=True, db_index=True)
    kidding_date = fields.DatetimeField(null=True, db_index=True)
    kids_born = fields.IntField(default=0)
    kids_survived = fields.IntField(default=0)
    breeding_method = fields.CharField(max_length=30, default="natural")
    breeding_cost = fields.FloatField(default=0.0)
    veterinary_cost = fields.FloatField(default=0.0)
    status = fields.CharField(max_length=30, default="mated", db_index=True)
    notes = fields.TextField(null=True)

    created_by: fields.ForeignKeyNullableRelation["User"] = fields.ForeignKeyField(
        "models.User", related_name="breeding_records", on_delete=fields.SET_NULL, null=True
    )

    def __str__(self):
        return f"Mating on {self.mating_date:%Y-%m-%d} ({self.status})"

    class Meta:
        table = "breeding_records"
