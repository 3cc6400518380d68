from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.security import AuthenticatedUser, get_current_user, get_optional_user, limiter
from .schemas import OrderCreate, OrderPage, OrderResponse
from .service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.post("/", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("20/minute")
async def place_order(
    request: Request,                                          # slowapi needs this to key the limit
    payload: OrderCreate,
    user: AuthenticatedUser | None = Depends(get_optional_user),  # guests may check out with COD
    db: AsyncSession = Depends(get_db),
):
    return await OrderService.place_order(db, payload, user_id=user.id if user else None)


@router.get("/", response_model=OrderPage)
async def list_my_orders(
    page: int = Query(default=1),
    limit: int = Query(default=10),
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await OrderService.get_orders_for_customer(db, user.id, page, limit)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: int,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await OrderService.get_order(db, order_id, user_id=user.id)
