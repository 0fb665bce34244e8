import datetime
from tortoise import fields
from ...common.models import TimestampMixin, generate_ksuid


class Sale(TimestampMixin):
    id = fields.IntField(primary_key=True)
    public_id = fields.CharField(
        max_length=27, unique=True, default=generate_ksuid, db_index=True
    )
    invoice_number = fields.CharField(
        max_length=30, unique=True, description="Pattern: INV-<yyyymmdd>-<0000>"
    )
    date = fields.DatetimeField(db_index=True)

    buyer_name = fields.CharField(max_length=255, db_index=True)
    buyer_phone = fields.CharField(max_length=50, null=True)
    buyer_address = fields.TextField(null=True)

    sub_total = fields.FloatField(default=0.0)
    tax_rate = fields.FloatField(default=0.0)
    tax_amount = fields.FloatField(default=0.0)
    total_amount = fields.FloatField(default=0.0)
    notes = fields.TextField(null=True)

    created_by: fields.ForeignKeyNullableRelation["User"] = fields.ForeignKeyField(
        "models.User", related_name="sales", on_delete=fields.SET_NULL, null=True
    )

    items: fields.ReverseRelation["SaleItem"]

    @classmethod
    def invoice_prefix(cls, day: datetime.date) -> str:
        return f"INV-{day:%Y%m%d}"

    @classmethod
    async def generate_next_invoice_number(cls, day: datetime.date, using_db=None) -> str:
        """Next INV-YYYYMMDD-NNNN for `day`: one past the highest sequence in use."""
        prefix = cls.invoice_prefix(day)
        query = cls.filter(invoice_number__startswith=f"{prefix}-")
        if using_db is not None:
            query = query.using_db(using_db)
        last_sale = await query.order_by("-invoice_number").first()
        if last_sale:
            next_sequence = int(last_sale.invoice_number.rsplit("-", 1)[1]) + 1
        else:
            next_sequence = 1
        return f"{prefix}-{next_sequence:04d}"

    def __str__(self):
        return f"Sale {self.invoice_number} to {self.buyer_name} ({self.total_amount:.2f})"

    class Meta:
        table = "sales"


class SaleItem(TimestampMixin):
    id = fields.IntField(primary_key=True)

    sale: fields.ForeignKeyRelation[Sale] = fields.ForeignKeyField(
        "models.Sale", related_name="items", on_delete=fields.CASCADE
    )
    # Line items may reference one goat; free-text items (feed, manure...) have none
    goat: fields.ForeignKeyNullableRelation["Goat"] = fields.ForeignKeyField(
        "models.Goat", related_name="sale_items", on_delete=fields.RESTRICT, null=True
    )
    description = fields.CharField(max_length=255)
    quantity = fields.IntField(default=1)
    unit_price = fields.FloatField()
    weight_kg = fields.FloatField(null=True)
    total = fields.FloatField()

    def __str__(self):
        return f"{self.quantity} x {self.description} = {self.total:.2f}"

    class Meta:
        table = "sale_items"
