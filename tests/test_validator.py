"""Tests for line-item validation against the catalog."""

import pytest

from conftest import stock_of
from services.order_service.schemas import OrderItemRequest
from services.order_service.validator import validate_order_items
from shared.errors import (
    InsufficientStockError,
    InvalidInputError,
    NotFoundError,
    PriceMismatchError,
)


def _line(item, quantity=1, price=None):
    return OrderItemRequest(item_id=item.id, quantity=quantity, price=item.price if price is None else price)


class TestValidateOrderItems:

    async def test_subtotal_is_catalog_price_times_quantity(self, db, make_item):
        poster = await make_item(title="Starry Night", price=200.0, stock=5)
        print_ = await make_item(title="Water Lilies", price=149.5, stock=3)

        result = await validate_order_items(db, [_line(poster, 2), _line(print_, 3)])

        assert result.subtotal == pytest.approx(200.0 * 2 + 149.5 * 3)
        assert [(i.item_id, i.quantity) for i in result.items] == [(poster.id, 2), (print_.id, 3)]

    async def test_catalog_price_replaces_client_price(self, db, make_item):
        poster = await make_item(price=200.0)

        result = await validate_order_items(db, [_line(poster, price=200.01)])

        assert result.items[0].price == 200.0
        assert result.subtotal == 200.0

    async def test_price_off_by_more_than_a_paisa_rejected(self, db, make_item):
        poster = await make_item(price=200.0)

        with pytest.raises(PriceMismatchError) as exc_info:
            await validate_order_items(db, [_line(poster, price=200.02)])

        assert exc_info.value.expected == 200.0
        assert exc_info.value.received == 200.02

    async def test_price_just_over_a_paisa_rejected(self, db, make_item):
        poster = await make_item(price=200.0)

        with pytest.raises(PriceMismatchError):
            await validate_order_items(db, [_line(poster, price=200.014)])

    async def test_quantity_equal_to_stock_accepted(self, db, make_item):
        poster = await make_item(stock=2)

        result = await validate_order_items(db, [_line(poster, 2)])

        assert result.items[0].quantity == 2

    async def test_quantity_above_stock_rejected(self, db, make_item):
        poster = await make_item(stock=2)

        with pytest.raises(InsufficientStockError) as exc_info:
            await validate_order_items(db, [_line(poster, 3)])

        assert exc_info.value.available == 2
        assert exc_info.value.requested == 3

    async def test_unknown_item_not_found(self, db):
        with pytest.raises(NotFoundError):
            await validate_order_items(db, [OrderItemRequest(item_id=999, quantity=1, price=10)])

    async def test_empty_order_invalid(self, db):
        with pytest.raises(InvalidInputError):
            await validate_order_items(db, [])

    async def test_stops_at_first_bad_line(self, db, make_item):
        sold_out = await make_item(title="Sold Out", stock=0)
        mispriced = await make_item(title="Mispriced", price=100.0)

        with pytest.raises(InsufficientStockError):
            await validate_order_items(db, [_line(sold_out), _line(mispriced, price=1.0)])

    async def test_does_not_touch_stock(self, app, db, make_item):
        poster = await make_item(stock=4)

        await validate_order_items(db, [_line(poster, 3)])

        assert await stock_of(app, poster.id) == 4
