from typing import Literal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.security import require_admin
from .schemas import (
    CatalogFilter,
    CatalogFilterOptions,
    CatalogItemCreate,
    CatalogItemResponse,
    CatalogItemUpdate,
    CatalogPage,
    StockUpdate,
)
from .service import CatalogService

router = APIRouter(prefix="/catalog", tags=["Catalog"])
# Mutations are admin-only
admin_router = APIRouter(prefix="/catalog", tags=["Catalog"], dependencies=[Depends(require_admin)])


@router.get("/", response_model=CatalogPage)
async def list_items(
    page: int = Query(default=1),
    limit: int = Query(default=10),
    category: str | None = Query(default=None),
    search: str | None = Query(default=None),
    min_price: float | None = Query(default=None),
    max_price: float | None = Query(default=None),
    is_available: bool | None = Query(default=None),
    sort_by: Literal["price", "stock", "created_at", "title"] = Query(default="created_at"),
    sort_order: Literal["asc", "desc"] = Query(default="desc"),
    db: AsyncSession = Depends(get_db),
):
    filters = CatalogFilter(
        category=category,
        search=search,
        min_price=min_price,
        max_price=max_price,
        is_available=is_available,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return await CatalogService.list_items(db, page, limit, filters)


@router.get("/featured", response_model=list[CatalogItemResponse])
async def featured_items(db: AsyncSession = Depends(get_db)):
    return await CatalogService.featured_items(db)


@router.get("/filters", response_model=CatalogFilterOptions)
async def filter_options(db: AsyncSession = Depends(get_db)):
    return await CatalogService.filter_options(db)


@router.get("/{item_id}", response_model=CatalogItemResponse)
async def get_item(item_id: int, db: AsyncSession = Depends(get_db)):
    return await CatalogService.get_item(db, item_id)


@admin_router.post("/", response_model=CatalogItemResponse, status_code=status.HTTP_201_CREATED)
async def create_item(item: CatalogItemCreate, db: AsyncSession = Depends(get_db)):
    return await CatalogService.create_item(db, item)


@admin_router.put("/{item_id}", response_model=CatalogItemResponse)
async def update_item(item_id: int, changes: CatalogItemUpdate, db: AsyncSession = Depends(get_db)):
    return await CatalogService.update_item(db, item_id, changes)


@admin_router.post("/{item_id}/restock", response_model=CatalogItemResponse)
async def restock(item_id: int, payload: StockUpdate, db: AsyncSession = Depends(get_db)):
    return await CatalogService.restock(db, item_id, payload.quantity)


@admin_router.delete("/{item_id}", response_model=CatalogItemResponse)
async def soft_delete(item_id: int, db: AsyncSession = Depends(get_db)):
    """Hides the item from the storefront; orders keep referencing it."""
    return await CatalogService.soft_delete(db, item_id)


@admin_router.delete("/{item_id}/hard", status_code=status.HTTP_204_NO_CONTENT)
async def hard_delete(item_id: int, db: AsyncSession = Depends(get_db)):
    await CatalogService.hard_delete(db, item_id)
