import math
import time

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from services.auth_service.repository import UserRepository
from services.catalog_service.repository import CatalogRepository
from services.payment_service.reconciler import PaymentVerification
from shared.errors import (
    InternalError,
    InvalidInputError,
    NotFoundError,
    PaymentAmountMismatchError,
    ShopError,
)
from shared.observability import (
    shop_order_failures_total,
    shop_order_placement_duration_seconds,
    shop_orders_placed_total,
    shop_stock_decrement_failures_total,
)
from .models import Order, OrderItem, OrderStatus, PaymentMethod
from .pricing import Pricing, amounts_match, calculate_pricing
from .repository import OrderRepository
from .schemas import OrderCreate
from .validator import ValidatedOrder, validate_order_items

logger = structlog.get_logger(__name__)

MAX_PAGE_SIZE = 50


class OrderService:

    @staticmethod
    async def place_order(
        db: AsyncSession,
        data: OrderCreate,
        user_id: int | None = None,
        payment: PaymentVerification | None = None,
    ) -> Order:
        """
        validating -> priced -> persisted -> stock-adjusted, strictly in order.

        Nothing here is transactional. Stock is checked at validation and
        decremented only after the order row is committed, so two concurrent
        placements for the last unit can both succeed. A failed decrement
        leaves the order and any earlier decrements in place.
        """
        log = logger.bind(user_id=user_id, method=data.payment_details.method.value)
        started = time.perf_counter()
        try:
            validated = await validate_order_items(db, data.items)
            pricing = OrderService._reconcile_pricing(data, validated)
            customer = await OrderService._resolve_customer(db, data, user_id)

            order = await OrderRepository.insert(db, OrderService._build_order(data, validated, pricing, customer, payment))
            log = log.bind(order_id=order.id)
            log.info("order_persisted", total=order.total_price, status=order.status)

            await OrderService._decrement_stock(db, order, validated, log)
        except ShopError as e:
            shop_order_failures_total.labels(reason=e.code).inc()
            log.warning("order_placement_failed", code=e.code, error=e.message)
            raise
        except SQLAlchemyError as e:
            shop_order_failures_total.labels(reason=InternalError.code).inc()
            log.error("order_placement_failed", code=InternalError.code, error=str(e))
            raise InternalError("Order could not be saved") from e
        finally:
            shop_order_placement_duration_seconds.observe(time.perf_counter() - started)

        shop_orders_placed_total.labels(payment_method=data.payment_details.method.value).inc()
        log.info("order_placed", item_count=len(validated.items))
        return order

    @staticmethod
    def _reconcile_pricing(data: OrderCreate, validated: ValidatedOrder) -> Pricing:
        pricing = calculate_pricing(validated.subtotal, data.shipping_address.state)

        # Client-computed figures are only compared, never trusted
        if data.total_price is not None and not amounts_match(pricing.total, data.total_price):
            raise PaymentAmountMismatchError(pricing.total, data.total_price)

        if not amounts_match(pricing.total, data.payment_details.amount):
            raise PaymentAmountMismatchError(pricing.total, data.payment_details.amount)

        return pricing

    @staticmethod
    async def _resolve_customer(db: AsyncSession, data: OrderCreate, user_id: int | None) -> dict:
        if user_id is not None:
            user = await UserRepository.get_by_id(db, user_id)
            if not user:
                raise NotFoundError("User not found")
            return {
                "user_id": user.id,
                "name": data.customer.name if data.customer else user.name,
                "email": (data.customer.email if data.customer else None) or user.email,
                "phone": data.customer.phone if data.customer else None,
            }

        if data.customer is None:
            raise InvalidInputError("Guest orders require customer details")
        return {
            "user_id": None,
            "name": data.customer.name,
            "email": data.customer.email,
            "phone": data.customer.phone,
        }

    @staticmethod
    def _build_order(
        data: OrderCreate,
        validated: ValidatedOrder,
        pricing: Pricing,
        customer: dict,
        payment: PaymentVerification | None,
    ) -> Order:
        settled = payment is not None and payment.is_valid
        method = data.payment_details.method

        if settled:
            transaction_id = payment.payment_id
        else:
            transaction_id = data.payment_details.transaction_id or ""

        return Order(
            customer_user_id=customer["user_id"],
            customer=customer,
            items=[
                OrderItem(item_id=item.item_id, quantity=item.quantity, price=item.price)
                for item in validated.items
            ],
            shipping_address=data.shipping_address.model_dump(),
            payment_details={
                "method": method.value,
                "transaction_id": transaction_id,
                "amount": pricing.total,
                "currency": data.payment_details.currency,
            },
            status=(OrderStatus.PROCESSING if settled else OrderStatus.PENDING).value,
            is_paid=settled or method != PaymentMethod.COD,
            shipping_cost=pricing.shipping_cost,
            tax_amount=pricing.tax_amount,
            total_price=pricing.total,
            notes=data.notes,
        )

    @staticmethod
    async def _decrement_stock(db: AsyncSession, order: Order, validated: ValidatedOrder, log) -> None:
        for item in validated.items:
            try:
                await CatalogRepository.decrement_stock(db, item.item_id, item.quantity)
            except SQLAlchemyError as e:
                # The order stays persisted; earlier decrements are not undone
                shop_stock_decrement_failures_total.inc()
                log.error("stock_decrement_failed", item_id=item.item_id, quantity=item.quantity, error=str(e))
                raise InternalError(
                    "Order was saved but stock could not be updated",
                    {"order_id": order.id, "item_id": item.item_id},
                ) from e

    @staticmethod
    async def get_orders_for_customer(db: AsyncSession, user_id: int, page: int = 1, limit: int = 10) -> dict:
        page = max(1, page)
        limit = min(MAX_PAGE_SIZE, max(1, limit))

        total = await OrderRepository.count_by_customer(db, user_id)
        orders = await OrderRepository.find_by_customer(db, user_id, (page - 1) * limit, limit)
        return {"orders": orders, "pagination": paginate(page, limit, total)}

    @staticmethod
    async def get_order(db: AsyncSession, order_id: int, user_id: int | None = None) -> Order:
        order = await OrderRepository.find_by_id(db, order_id)
        # Someone else's order looks exactly like a missing one
        if not order or (user_id is not None and order.customer_user_id != user_id):
            raise NotFoundError(f"Order with ID {order_id} not found")
        return order


def paginate(page: int, limit: int, total: int) -> dict:
    total_pages = math.ceil(total / limit)
    return {
        "current_page": page,
        "total_pages": total_pages,
        "total_orders": total,
        "limit": limit,
        "has_next_page": page < total_pages,
        "has_prev_page": page > 1,
    }
