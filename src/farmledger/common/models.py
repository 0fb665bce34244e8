"""Models module for the app.

Shared database building blocks: a TimestampMixin that provides created_at
and updated_at fields, and the KSUID generator used for every public_id
(K-Sortable Unique IDentifiers are time-ordered, so public ids sort in
creation order)."""

from tortoise import fields, models
from ksuid import ksuid


def generate_ksuid():
    """Generate a K-Sortable Unique IDentifier (KSUID).

    Returns:
        str: A string representation of the generated KSUID.
    """
    return str(ksuid.Ksuid())


class TimestampMixin(models.Model):
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        abstract = True
