"""
tests/test_order_numbers.py – order number allocation when inserts race
or fail for other reasons.
"""
import pytest
from sqlalchemy.exc import IntegrityError

from serb_burger.database import async_session_maker
from serb_burger.models import PaymentMethod
from serb_burger.services import orders
from serb_burger.services.orders import PricedLine


def line(product_id: int) -> PricedLine:
    return PricedLine(product_id=product_id, product_name="Бургер", quantity=1, unit_price=350, options=[])


@pytest.fixture
def numbers(monkeypatch):
    """Counts allocations; the first one returns an already used number."""
    calls = []
    real = orders._next_number

    async def next_number(db):
        calls.append(1)
        if len(calls) == 1:
            return 1
        return await real(db)

    monkeypatch.setattr(orders, "_next_number", next_number)
    return calls


class TestAllocation:
    @pytest.mark.asyncio
    async def test_taken_number_retried(self, admin, burger, numbers):
        r = admin.post("/api/checkout", json={
            "items": [{"productId": burger["product"]["id"], "quantity": 1}],
            "paymentMethod": "card",
        })
        assert r.json()["orderNumber"] == 1
        numbers.clear()

        async with async_session_maker() as db:
            order = await orders._persist_order(db, [line(burger["product"]["id"])], 350, PaymentMethod.CARD)

        assert order.number == 2
        assert len(numbers) == 2

    @pytest.mark.asyncio
    async def test_other_integrity_error_not_retried(self, client, numbers):
        async with async_session_maker() as db:
            with pytest.raises(IntegrityError):
                await orders._persist_order(db, [line(999)], 350, PaymentMethod.CARD)

        assert len(numbers) == 1
        assert client.get("/api/orders/1").status_code == 404
