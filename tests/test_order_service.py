"""Tests for the order placement workflow and customer order queries."""

import pytest
from sqlalchemy.exc import OperationalError

from conftest import DELHI_ADDRESS, GUEST, stock_of
from services.catalog_service.repository import CatalogRepository
from services.order_service.models import OrderStatus
from services.order_service.pricing import calculate_pricing
from services.order_service.repository import OrderRepository
from services.order_service.schemas import OrderCreate
from services.order_service.service import OrderService
from services.payment_service.reconciler import PaymentVerification
from shared.errors import (
    InsufficientStockError,
    InternalError,
    InvalidInputError,
    NotFoundError,
    PaymentAmountMismatchError,
)


def _order(items, method="COD", amount=None, customer=GUEST, address=DELHI_ADDRESS, **extra):
    """items: list of (catalog item, quantity)."""
    subtotal = sum(item.price * qty for item, qty in items)
    if amount is None:
        amount = calculate_pricing(subtotal, address["state"]).total
    return OrderCreate(
        customer=customer,
        items=[{"item_id": item.id, "quantity": qty, "price": item.price} for item, qty in items],
        shipping_address=address,
        payment_details={"method": method, "amount": amount, "currency": "INR"},
        **extra,
    )


class TestPlaceOrder:

    async def test_guest_cod_order(self, app, db, make_item):
        poster = await make_item(price=200.0, stock=5)

        order = await OrderService.place_order(db, _order([(poster, 1)]))

        assert order.id is not None
        assert order.status == OrderStatus.PENDING.value
        assert order.is_paid is False
        assert order.shipping_cost == 50
        assert order.tax_amount == 36
        assert order.total_price == 286
        assert order.customer == {"user_id": None, **GUEST}
        assert order.customer_user_id is None
        assert [(i.item_id, i.quantity, i.price) for i in order.items] == [(poster.id, 1, 200.0)]
        assert await stock_of(app, poster.id) == 4

    async def test_stock_decremented_per_line(self, app, db, make_item):
        first = await make_item(title="First", price=100.0, stock=10)
        second = await make_item(title="Second", price=75.0, stock=3)

        await OrderService.place_order(db, _order([(first, 4), (second, 3)]))

        assert await stock_of(app, first.id) == 6
        assert await stock_of(app, second.id) == 0

    async def test_online_method_without_verification_is_pending_but_paid(self, db, make_item):
        poster = await make_item()

        order = await OrderService.place_order(db, _order([(poster, 1)], method="ONLINE"))

        assert order.status == OrderStatus.PENDING.value
        assert order.is_paid is True

    async def test_verified_payment_moves_straight_to_processing(self, db, make_item, customer):
        poster = await make_item()
        payment = PaymentVerification(is_valid=True, order_id="order_x", payment_id="pay_x")

        order = await OrderService.place_order(
            db, _order([(poster, 1)], method="ONLINE"), user_id=customer.id, payment=payment
        )

        assert order.status == OrderStatus.PROCESSING.value
        assert order.is_paid is True
        assert order.payment_details["transaction_id"] == "pay_x"

    async def test_authenticated_customer_snapshot_falls_back_to_profile(self, db, make_item, customer):
        poster = await make_item()

        order = await OrderService.place_order(db, _order([(poster, 1)], customer=None), user_id=customer.id)

        assert order.customer_user_id == customer.id
        assert order.customer["name"] == "Asha Rao"
        assert order.customer["email"] == "asha@example.com"

    async def test_unknown_user_not_found(self, db, make_item):
        poster = await make_item()

        with pytest.raises(NotFoundError):
            await OrderService.place_order(db, _order([(poster, 1)]), user_id=4242)

    async def test_guest_without_customer_details_rejected(self, app, db, make_item):
        poster = await make_item(stock=5)

        with pytest.raises(InvalidInputError):
            await OrderService.place_order(db, _order([(poster, 1)], customer=None))

        assert await stock_of(app, poster.id) == 5

    async def test_client_total_mismatch_rejected(self, app, db, make_item):
        poster = await make_item(stock=5)

        with pytest.raises(PaymentAmountMismatchError):
            await OrderService.place_order(
                db, _order([(poster, 1)], shipping_cost=0, tax_amount=0, total_price=200)
            )

        assert await stock_of(app, poster.id) == 5
        assert await OrderRepository.count(db, []) == 0

    async def test_client_pricing_that_matches_is_accepted(self, db, make_item):
        poster = await make_item()

        order = await OrderService.place_order(
            db, _order([(poster, 1)], shipping_cost=50, tax_amount=36, total_price=286)
        )

        assert order.total_price == 286

    async def test_payment_amount_a_fraction_of_a_paisa_short_rejected(self, db, make_item):
        poster = await make_item()

        with pytest.raises(PaymentAmountMismatchError):
            await OrderService.place_order(db, _order([(poster, 1)], amount=285.985))

    async def test_payment_amount_mismatch_rejected(self, db, make_item):
        poster = await make_item()

        with pytest.raises(PaymentAmountMismatchError) as exc_info:
            await OrderService.place_order(db, _order([(poster, 1)], amount=250))

        assert exc_info.value.expected == 286
        assert exc_info.value.received == 250

    async def test_last_unit_sells_once(self, app, db, make_item):
        poster = await make_item(stock=1)

        await OrderService.place_order(db, _order([(poster, 1)]))
        assert await stock_of(app, poster.id) == 0

        with pytest.raises(InsufficientStockError):
            await OrderService.place_order(db, _order([(poster, 1)]))

    async def test_failed_decrement_keeps_order_and_earlier_decrements(self, app, db, make_item, monkeypatch):
        first = await make_item(title="First", stock=5)
        second = await make_item(title="Second", stock=5)
        real_decrement = CatalogRepository.decrement_stock

        async def flaky_decrement(session, item_id, quantity):
            if item_id == second.id:
                raise OperationalError("UPDATE catalog_items", {}, Exception("database is locked"))
            await real_decrement(session, item_id, quantity)

        monkeypatch.setattr(CatalogRepository, "decrement_stock", staticmethod(flaky_decrement))

        with pytest.raises(InternalError) as exc_info:
            await OrderService.place_order(db, _order([(first, 2), (second, 1)]))

        order_id = exc_info.value.details["order_id"]
        assert await OrderRepository.find_by_id(db, order_id) is not None
        assert await stock_of(app, first.id) == 3
        assert await stock_of(app, second.id) == 5


class TestCustomerOrders:

    async def test_newest_first_with_pagination(self, db, make_item, customer):
        poster = await make_item(stock=10)
        placed = [
            await OrderService.place_order(db, _order([(poster, 1)]), user_id=customer.id)
            for _ in range(3)
        ]

        result = await OrderService.get_orders_for_customer(db, customer.id, page=1, limit=2)

        assert [o.id for o in result["orders"]] == [placed[2].id, placed[1].id]
        assert result["pagination"] == {
            "current_page": 1,
            "total_pages": 2,
            "total_orders": 3,
            "limit": 2,
            "has_next_page": True,
            "has_prev_page": False,
        }

    async def test_limit_is_clamped(self, db, customer):
        result = await OrderService.get_orders_for_customer(db, customer.id, page=0, limit=500)

        assert result["pagination"]["limit"] == 50
        assert result["pagination"]["current_page"] == 1

    async def test_other_customers_order_is_not_found(self, db, make_item, make_user, customer):
        poster = await make_item()
        other = await make_user(email="other@example.com", name="Other")
        order = await OrderService.place_order(db, _order([(poster, 1)]), user_id=other.id)

        with pytest.raises(NotFoundError):
            await OrderService.get_order(db, order.id, user_id=customer.id)

        assert (await OrderService.get_order(db, order.id, user_id=other.id)).id == order.id
