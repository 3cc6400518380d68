from typing import List, Optional

from pydantic import BaseModel, Field

from services.order_service.schemas import CustomerInfo, OrderItemRequest, ShippingAddress


class PaymentKeyResponse(BaseModel):
    key_id: str


class InitiatePaymentRequest(BaseModel):
    items: List[OrderItemRequest] = Field(min_length=1)
    shipping_address: ShippingAddress
    shipping_cost: float = Field(ge=0)
    tax_amount: float = Field(ge=0)
    total_price: float = Field(ge=0)


class InitiatePaymentResponse(BaseModel):
    order_id: str  # gateway order id, not ours
    amount: int    # paise
    currency: str
    key_id: str


class VerifyPaymentRequest(BaseModel):
    razorpay_order_id: str = Field(min_length=1)
    razorpay_payment_id: str = Field(min_length=1)
    razorpay_signature: str = Field(min_length=1)

    # Order to create once the signature checks out
    customer: Optional[CustomerInfo] = None
    items: List[OrderItemRequest] = Field(min_length=1)
    shipping_address: ShippingAddress
    shipping_cost: float = Field(ge=0)
    tax_amount: float = Field(ge=0)
    total_price: float = Field(ge=0)
    notes: Optional[str] = Field(default=None, max_length=1000)
