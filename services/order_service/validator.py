from dataclasses import dataclass
from typing import List, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from services.catalog_service.repository import CatalogRepository
from shared.errors import (
    InsufficientStockError,
    InvalidInputError,
    NotFoundError,
    PriceMismatchError,
)
from .pricing import amounts_match
from .schemas import OrderItemRequest


@dataclass(frozen=True)
class ValidatedItem:
    item_id: int
    quantity: int
    price: float  # catalog price, not the client's


@dataclass(frozen=True)
class ValidatedOrder:
    items: List[ValidatedItem]
    subtotal: float


async def validate_order_items(db: AsyncSession, items: Sequence[OrderItemRequest]) -> ValidatedOrder:
    """
    Check every requested line against the catalog and return the
    server-authoritative lines with their subtotal.

    Stops at the first line that is missing, out of stock, or priced
    differently from the catalog. Read-only: stock is not reserved here.
    """
    if not items:
        raise InvalidInputError("Order must have at least one item")
    for item in items:
        if item.item_id <= 0:
            raise InvalidInputError("Invalid catalog item ID", {"item_id": item.item_id})
        if item.quantity < 1:
            raise InvalidInputError("Quantity must be at least 1", {"item_id": item.item_id})

    validated = []
    subtotal = 0.0
    for item in items:
        catalog_item = await CatalogRepository.find_by_id(db, item.item_id)
        if not catalog_item:
            raise NotFoundError(f"Catalog item with ID {item.item_id} not found", {"item_id": item.item_id})

        if catalog_item.stock < item.quantity:
            raise InsufficientStockError(catalog_item.id, catalog_item.title, catalog_item.stock, item.quantity)

        if not amounts_match(catalog_item.price, item.price):
            raise PriceMismatchError(catalog_item.id, catalog_item.title, catalog_item.price, item.price)

        validated.append(ValidatedItem(item_id=catalog_item.id, quantity=item.quantity, price=catalog_item.price))
        subtotal += catalog_item.price * item.quantity

    return ValidatedOrder(items=validated, subtotal=subtotal)
