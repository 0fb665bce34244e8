import pytest


@pytest.fixture
def sale_payload():
    """Builds a sale request body; goat items are given as public IDs."""
    def _sale_payload(*goat_public_ids, buyer="Acme Meats", unit_price=200.0, extra_items=(), **overrides):
        items = [{"goat_public_id": pid, "unit_price": unit_price} for pid in goat_public_ids]
        items.extend(extra_items)
        payload = {"buyer": {"name": buyer}, "items": items}
        payload.update(overrides)
        return payload

    return _sale_payload
