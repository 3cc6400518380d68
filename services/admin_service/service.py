import structlog
from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession

from services.auth_service.models import User
from services.auth_service.repository import UserRepository
from services.catalog_service.repository import CatalogRepository
from services.order_service.models import Order, OrderStatus
from services.order_service.repository import OrderRepository
from services.order_service.service import paginate
from shared.errors import InvalidInputError, NotFoundError

logger = structlog.get_logger(__name__)

# Fulfilment moves forward one step at a time; cancellation has its own path
ALLOWED_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}
CANCELLABLE = {OrderStatus.PENDING, OrderStatus.PROCESSING}


class AdminService:

    @staticmethod
    async def list_orders(
        db: AsyncSession,
        page: int = 1,
        limit: int = 10,
        status: OrderStatus | None = None,
        search: str | None = None,
    ) -> dict:
        page = max(1, page)
        limit = min(100, max(1, limit))

        conditions = []
        if status is not None:
            conditions.append(Order.status == status.value)
        if search:
            pattern = f"%{search}%"
            conditions.append(or_(
                Order.customer["name"].as_string().ilike(pattern),
                Order.customer["email"].as_string().ilike(pattern),
                Order.customer["phone"].as_string().ilike(pattern),
            ))

        total = await OrderRepository.count(db, conditions)
        orders = await OrderRepository.find_page(db, conditions, (page - 1) * limit, limit)
        return {"orders": orders, "pagination": paginate(page, limit, total)}

    @staticmethod
    async def recent_orders(db: AsyncSession, limit: int = 10):
        limit = min(50, max(1, limit))
        return await OrderRepository.find_page(db, [], 0, limit)

    @staticmethod
    async def list_customers(db: AsyncSession, page: int = 1, limit: int = 10, search: str | None = None) -> dict:
        """Accounts with their order count and the sum of their paid orders."""
        page = max(1, page)
        limit = min(100, max(1, limit))

        conditions = []
        if search:
            pattern = f"%{search}%"
            conditions.append(or_(User.name.ilike(pattern), User.email.ilike(pattern)))

        total = await UserRepository.count(db, conditions)
        users = await UserRepository.find_page(db, conditions, (page - 1) * limit, limit)
        totals = await OrderRepository.totals_by_customer(db, [u.id for u in users])

        customers = []
        for user in users:
            order_count, total_spent = totals.get(user.id, (0, 0.0))
            customers.append({
                "id": user.id,
                "email": user.email,
                "name": user.name,
                "role": user.role,
                "is_active": user.is_active,
                "created_at": user.created_at,
                "order_count": order_count,
                "total_spent": total_spent,
            })

        pagination = paginate(page, limit, total)
        pagination["total_customers"] = pagination.pop("total_orders")
        return {"customers": customers, "pagination": pagination}

    @staticmethod
    async def get_order(db: AsyncSession, order_id: int) -> Order:
        order = await OrderRepository.find_by_id(db, order_id)
        if not order:
            raise NotFoundError(f"Order with ID {order_id} not found")
        return order

    @staticmethod
    async def update_status(db: AsyncSession, order_id: int, status: OrderStatus, tracking_number: str | None = None) -> Order:
        order = await AdminService.get_order(db, order_id)
        current = OrderStatus(order.status)

        if status == OrderStatus.CANCELLED:
            raise InvalidInputError("Use the cancel endpoint to cancel an order")
        if status not in ALLOWED_TRANSITIONS[current]:
            raise InvalidInputError(
                f"Cannot move order from {current.value} to {status.value}",
                {"from": current.value, "to": status.value},
            )

        order.status = status.value
        if tracking_number and status == OrderStatus.SHIPPED:
            order.tracking_number = tracking_number

        order = await OrderRepository.save(db, order)
        logger.info("order_status_updated", order_id=order_id, from_status=current.value, to_status=status.value)
        return order

    @staticmethod
    async def cancel_order(db: AsyncSession, order_id: int, reason: str | None = None) -> Order:
        order = await AdminService.get_order(db, order_id)
        if OrderStatus(order.status) not in CANCELLABLE:
            raise InvalidInputError("Cannot cancel order that is already shipped, delivered or cancelled")

        # Same non-transactional shape as placement: stock first, then status
        for item in order.items:
            await CatalogRepository.restore_stock(db, item.item_id, item.quantity)

        order.status = OrderStatus.CANCELLED.value
        if reason:
            order.notes = f"Cancelled: {reason}"
        order = await OrderRepository.save(db, order)
        logger.info("order_cancelled", order_id=order_id, reason=reason)
        return order

    @staticmethod
    async def delete_order(db: AsyncSession, order_id: int) -> None:
        if not await OrderRepository.delete(db, order_id):
            raise NotFoundError(f"Order with ID {order_id} not found")
        logger.info("order_deleted", order_id=order_id)
