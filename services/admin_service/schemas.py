from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from services.order_service.models import OrderStatus


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    tracking_number: Optional[str] = Field(default=None, max_length=100)


class OrderCancel(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=500)


class CustomerSummary(BaseModel):
    id: int
    email: str
    name: str
    role: str
    is_active: bool
    created_at: Optional[datetime] = None
    order_count: int
    total_spent: float


class CustomerPagination(BaseModel):
    current_page: int
    total_pages: int
    total_customers: int
    limit: int
    has_next_page: bool
    has_prev_page: bool


class CustomerPage(BaseModel):
    customers: List[CustomerSummary]
    pagination: CustomerPagination
