from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from services.order_service.models import OrderStatus
from services.order_service.schemas import OrderPage, OrderResponse
from shared.config.database import get_db
from shared.security import require_admin
from .schemas import CustomerPage, OrderCancel, OrderStatusUpdate
from .service import AdminService

# THIS PROTECTS THE ENTIRE ROUTER
router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(require_admin)])


@router.get("/orders", response_model=OrderPage)
async def list_orders(
    page: int = Query(default=1),
    limit: int = Query(default=10),
    status: OrderStatus | None = Query(default=None),
    search: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
):
    return await AdminService.list_orders(db, page, limit, status, search)


@router.get("/orders/recent", response_model=list[OrderResponse])
async def recent_orders(limit: int = Query(default=10), db: AsyncSession = Depends(get_db)):
    return await AdminService.recent_orders(db, limit)


@router.get("/orders/{order_id}", response_model=OrderResponse)
async def get_order(order_id: int, db: AsyncSession = Depends(get_db)):
    return await AdminService.get_order(db, order_id)


@router.patch("/orders/{order_id}/status", response_model=OrderResponse)
async def update_order_status(order_id: int, payload: OrderStatusUpdate, db: AsyncSession = Depends(get_db)):
    return await AdminService.update_status(db, order_id, payload.status, payload.tracking_number)


@router.patch("/orders/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(order_id: int, payload: OrderCancel, db: AsyncSession = Depends(get_db)):
    return await AdminService.cancel_order(db, order_id, payload.reason)


@router.delete("/orders/{order_id}", status_code=204)
async def delete_order(order_id: int, db: AsyncSession = Depends(get_db)):
    await AdminService.delete_order(db, order_id)


@router.get("/customers", response_model=CustomerPage)
async def list_customers(
    page: int = Query(default=1),
    limit: int = Query(default=10),
    search: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
):
    return await AdminService.list_customers(db, page, limit, search)
