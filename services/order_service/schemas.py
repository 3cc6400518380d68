from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field

from .models import OrderStatus, PaymentMethod


class OrderItemRequest(BaseModel):
    item_id: int = Field(gt=0)
    quantity: int = Field(ge=1)
    price: float = Field(ge=0)  # unit price the client saw at checkout


class ShippingAddress(BaseModel):
    address_line1: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    pincode: str = Field(pattern=r"^[1-9][0-9]{5}$")


class PaymentDetailsRequest(BaseModel):
    method: PaymentMethod
    transaction_id: Optional[str] = None
    amount: float = Field(ge=0)
    currency: Literal["INR"] = "INR"


class CustomerInfo(BaseModel):
    name: str = Field(min_length=1)
    email: Optional[EmailStr] = None
    phone: str = Field(pattern=r"^(\+91[\-\s]?)?[6-9]\d{9}$")


class OrderCreate(BaseModel):
    customer: Optional[CustomerInfo] = None
    items: List[OrderItemRequest] = Field(min_length=1)
    shipping_address: ShippingAddress
    payment_details: PaymentDetailsRequest
    # Optional client-computed pricing; reconciled against the server figures
    shipping_cost: Optional[float] = Field(default=None, ge=0)
    tax_amount: Optional[float] = Field(default=None, ge=0)
    total_price: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = Field(default=None, max_length=1000)


class OrderItemResponse(BaseModel):
    item_id: int
    quantity: int
    price: float

    class Config:
        from_attributes = True


class CustomerSnapshot(BaseModel):
    user_id: Optional[int] = None
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None


class PaymentDetailsSnapshot(BaseModel):
    method: str
    transaction_id: str = ""
    amount: float
    currency: str


class OrderResponse(BaseModel):
    id: int
    customer: CustomerSnapshot
    items: List[OrderItemResponse]
    shipping_address: ShippingAddress
    payment_details: PaymentDetailsSnapshot
    status: OrderStatus
    is_paid: bool
    shipping_cost: float
    tax_amount: float
    total_price: float
    tracking_number: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total_orders: int
    limit: int
    has_next_page: bool
    has_prev_page: bool


class OrderPage(BaseModel):
    orders: List[OrderResponse]
    pagination: Pagination
