import time

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from services.order_service.models import Order, PaymentMethod
from services.order_service.pricing import amounts_match, calculate_pricing, round_half_up
from services.order_service.schemas import OrderCreate, PaymentDetailsRequest
from services.order_service.service import OrderService
from services.order_service.validator import validate_order_items
from shared.errors import PaymentAmountMismatchError, PaymentVerificationFailedError
from .gateway import GatewayOrder, RazorpayGateway
from .reconciler import PaymentReconciler
from .schemas import InitiatePaymentRequest, VerifyPaymentRequest

logger = structlog.get_logger(__name__)

CURRENCY = "INR"
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def build_receipt(user_id: int, now_ms: int | None = None) -> str:
    """Gateway receipts are capped at 40 chars: short user id + base36 timestamp."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"ord_{str(user_id)[-8:]}_{to_base36(now_ms)}"


class PaymentService:

    @staticmethod
    async def initiate_payment(
        db: AsyncSession,
        gateway: RazorpayGateway,
        user_id: int,
        data: InitiatePaymentRequest,
    ) -> GatewayOrder:
        validated = await validate_order_items(db, data.items)
        pricing = calculate_pricing(validated.subtotal, data.shipping_address.state)
        if not amounts_match(pricing.total, data.total_price):
            raise PaymentAmountMismatchError(pricing.total, data.total_price)

        return await gateway.create_order(
            amount_minor_units=round_half_up(pricing.total * 100),
            currency=CURRENCY,
            receipt=build_receipt(user_id),
            notes={
                "userId": str(user_id),
                "itemCount": str(len(data.items)),
                "subtotal": str(validated.subtotal),
            },
        )

    @staticmethod
    async def verify_and_place_order(
        db: AsyncSession,
        reconciler: PaymentReconciler,
        user_id: int,
        data: VerifyPaymentRequest,
    ) -> Order:
        verification = reconciler.verify(
            data.razorpay_order_id,
            data.razorpay_payment_id,
            data.razorpay_signature,
        )
        if not verification.is_valid:
            logger.warning(
                "payment_verification_failed",
                user_id=user_id,
                gateway_order_id=data.razorpay_order_id,
                payment_id=data.razorpay_payment_id,
            )
            raise PaymentVerificationFailedError("Payment verification failed. Please contact support.")

        order_data = OrderCreate(
            customer=data.customer,
            items=data.items,
            shipping_address=data.shipping_address,
            payment_details=PaymentDetailsRequest(
                method=PaymentMethod.ONLINE,
                transaction_id=data.razorpay_payment_id,
                amount=data.total_price,
                currency=CURRENCY,
            ),
            shipping_cost=data.shipping_cost,
            tax_amount=data.tax_amount,
            total_price=data.total_price,
            notes=data.notes,
        )
        return await OrderService.place_order(db, order_data, user_id=user_id, payment=verification)
