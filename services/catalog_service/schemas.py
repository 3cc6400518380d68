from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class CatalogItemCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    price: float = Field(ge=0)
    stock: int = Field(ge=0)
    category: str = Field(min_length=1, max_length=100)
    dimensions: Optional[str] = None
    material: Optional[str] = None
    tags: List[str] = []
    is_available: bool = True


class CatalogItemUpdate(BaseModel):
    # Partial update: only fields that are set are applied
    title: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    stock: Optional[int] = None
    category: Optional[str] = None
    dimensions: Optional[str] = None
    material: Optional[str] = None
    tags: Optional[List[str]] = None
    is_available: Optional[bool] = None


class StockUpdate(BaseModel):
    quantity: int = Field(gt=0)


class CatalogFilter(BaseModel):
    category: Optional[str] = None
    search: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    is_available: Optional[bool] = None
    sort_by: Literal["price", "stock", "created_at", "title"] = "created_at"
    sort_order: Literal["asc", "desc"] = "desc"


class CatalogItemResponse(BaseModel):
    id: int
    title: str
    description: Optional[str]
    price: float
    stock: int
    category: str
    dimensions: Optional[str]
    material: Optional[str]
    tags: List[str]
    is_available: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CatalogPagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int
    has_next: bool
    has_prev: bool


class CatalogPage(BaseModel):
    items: List[CatalogItemResponse]
    pagination: CatalogPagination


class CategoryCount(BaseModel):
    category: str
    count: int


class CatalogFilterOptions(BaseModel):
    """Facets the storefront offers as filter choices."""
    categories: List[CategoryCount]
    materials: List[str]
    dimensions: List[str]
