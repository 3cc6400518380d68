from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from services.order_service.schemas import OrderResponse
from shared.config.database import get_db
from shared.config.settings import Settings
from shared.security import AuthenticatedUser, get_current_user, get_settings, limiter, require_admin

from .gateway import RazorpayGateway
from .reconciler import PaymentReconciler
from .schemas import (
    InitiatePaymentRequest,
    InitiatePaymentResponse,
    PaymentKeyResponse,
    VerifyPaymentRequest,
)
from .service import PaymentService

router = APIRouter(prefix="/orders/payment", tags=["Payments"])


def get_payment_gateway(request: Request) -> RazorpayGateway:
    return request.app.state.payment_gateway


def get_reconciler(settings: Settings = Depends(get_settings)) -> PaymentReconciler:
    return PaymentReconciler(settings.razorpay_key_secret)


@router.get("/key", response_model=PaymentKeyResponse)
async def get_payment_key(
    _: AuthenticatedUser = Depends(get_current_user),
    gateway: RazorpayGateway = Depends(get_payment_gateway),
):
    return PaymentKeyResponse(key_id=gateway.key_id)


@router.post("/initiate", response_model=InitiatePaymentResponse)
@limiter.limit("10/minute")
async def initiate_payment(
    request: Request,
    payload: InitiatePaymentRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    gateway: RazorpayGateway = Depends(get_payment_gateway),
    db: AsyncSession = Depends(get_db),
):
    gateway_order = await PaymentService.initiate_payment(db, gateway, user.id, payload)
    return InitiatePaymentResponse(
        order_id=gateway_order.id,
        amount=gateway_order.amount,
        currency=gateway_order.currency,
        key_id=gateway.key_id,
    )


@router.post("/verify", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def verify_payment(
    payload: VerifyPaymentRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    reconciler: PaymentReconciler = Depends(get_reconciler),
    db: AsyncSession = Depends(get_db),
):
    return await PaymentService.verify_and_place_order(db, reconciler, user.id, payload)


@router.get("/{payment_id}", dependencies=[Depends(require_admin)])
async def get_payment_details(
    payment_id: str,
    gateway: RazorpayGateway = Depends(get_payment_gateway),
):
    """Raw gateway record for a payment, for support lookups."""
    return await gateway.fetch_payment(payment_id)
