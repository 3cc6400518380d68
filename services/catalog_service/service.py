import math

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from shared.errors import ConflictError, InvalidInputError, NotFoundError
from .models import CatalogItem
from .repository import CatalogRepository
from .schemas import CatalogFilter, CatalogItemCreate, CatalogItemUpdate

logger = structlog.get_logger(__name__)

MAX_PAGE_SIZE = 100
FEATURED_LIMIT = 8


class CatalogService:

    @staticmethod
    async def create_item(db: AsyncSession, data: CatalogItemCreate) -> CatalogItem:
        title = data.title.strip()
        if not title:
            raise InvalidInputError("Title cannot be empty")
        if await CatalogRepository.find_by_title(db, title):
            raise ConflictError(f'Catalog item "{title}" already exists')

        item = CatalogItem(
            title=title,
            description=data.description,
            price=data.price,
            stock=data.stock,
            category=data.category.strip(),
            dimensions=data.dimensions,
            material=data.material,
            tags=list(data.tags),
            is_available=data.is_available,
        )
        item = await CatalogRepository.create(db, item)
        logger.info("catalog_item_created", item_id=item.id, title=item.title, stock=item.stock)
        return item

    @staticmethod
    async def get_item(db: AsyncSession, item_id: int) -> CatalogItem:
        item = await CatalogRepository.find_by_id(db, item_id)
        if not item:
            raise NotFoundError("Catalog item not found", {"item_id": item_id})
        return item

    @staticmethod
    async def list_items(db: AsyncSession, page: int = 1, limit: int = 10, filters: CatalogFilter | None = None) -> dict:
        filters = filters or CatalogFilter()
        if page < 1 or limit < 1:
            raise InvalidInputError("Page and limit must be positive numbers")
        if limit > MAX_PAGE_SIZE:
            raise InvalidInputError(f"Limit cannot exceed {MAX_PAGE_SIZE}")
        if filters.min_price is not None and filters.min_price < 0:
            raise InvalidInputError("Minimum price cannot be negative")
        if (
            filters.min_price is not None
            and filters.max_price is not None
            and filters.min_price > filters.max_price
        ):
            raise InvalidInputError("Minimum price cannot be greater than maximum price")

        conditions = CatalogService._build_conditions(filters)
        column = getattr(CatalogItem, filters.sort_by)
        order_by = [column.asc() if filters.sort_order == "asc" else column.desc(), CatalogItem.id.asc()]

        total = await CatalogRepository.count(db, conditions)
        items = await CatalogRepository.find_page(db, conditions, order_by, (page - 1) * limit, limit)
        pages = math.ceil(total / limit)

        return {
            "items": items,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": pages,
                "has_next": page < pages,
                "has_prev": page > 1,
            },
        }

    @staticmethod
    async def featured_items(db: AsyncSession, limit: int = FEATURED_LIMIT):
        return await CatalogRepository.find_page(
            db,
            [CatalogItem.is_available.is_(True)],
            [CatalogItem.created_at.asc(), CatalogItem.id.asc()],
            0,
            limit,
        )

    @staticmethod
    async def filter_options(db: AsyncSession) -> dict:
        categories = await CatalogRepository.category_counts(db)
        return {
            "categories": [{"category": category, "count": count} for category, count in categories],
            "materials": await CatalogRepository.distinct_values(db, CatalogItem.material),
            "dimensions": await CatalogRepository.distinct_values(db, CatalogItem.dimensions),
        }

    @staticmethod
    async def update_item(db: AsyncSession, item_id: int, data: CatalogItemUpdate) -> CatalogItem:
        item = await CatalogService.get_item(db, item_id)
        changes = data.model_dump(exclude_unset=True)

        if changes.get("stock") is not None and changes["stock"] < 0:
            raise InvalidInputError("Stock cannot be negative")
        if changes.get("price") is not None and changes["price"] < 0:
            raise InvalidInputError("Price cannot be negative")
        if "title" in changes:
            title = (changes["title"] or "").strip()
            if not title:
                raise InvalidInputError("Title cannot be empty")
            existing = await CatalogRepository.find_by_title(db, title)
            if existing and existing.id != item.id:
                raise ConflictError(f'Catalog item "{title}" already exists')
            changes["title"] = title

        for field, value in changes.items():
            if value is not None:
                setattr(item, field, value)

        item = await CatalogRepository.save(db, item)
        logger.info("catalog_item_updated", item_id=item.id, fields=sorted(changes))
        return item

    @staticmethod
    async def restock(db: AsyncSession, item_id: int, quantity: int) -> CatalogItem:
        if quantity <= 0:
            raise InvalidInputError("Restock quantity must be positive")
        if not await CatalogRepository.restore_stock(db, item_id, quantity):
            raise NotFoundError("Catalog item not found", {"item_id": item_id})
        item = await CatalogService.get_item(db, item_id)
        await db.refresh(item)
        logger.info("catalog_item_restocked", item_id=item_id, quantity=quantity, stock=item.stock)
        return item

    @staticmethod
    async def soft_delete(db: AsyncSession, item_id: int) -> CatalogItem:
        item = await CatalogService.get_item(db, item_id)
        item.is_available = False
        return await CatalogRepository.save(db, item)

    @staticmethod
    async def hard_delete(db: AsyncSession, item_id: int) -> None:
        if not await CatalogRepository.delete(db, item_id):
            raise NotFoundError("Catalog item not found", {"item_id": item_id})
        logger.info("catalog_item_deleted", item_id=item_id)

    @staticmethod
    def _build_conditions(filters: CatalogFilter) -> list:
        conditions = []
        if filters.is_available is not None:
            conditions.append(CatalogItem.is_available.is_(filters.is_available))
        if filters.category:
            conditions.append(CatalogItem.category.ilike(filters.category))
        if filters.search:
            pattern = f"%{filters.search}%"
            conditions.append(CatalogItem.title.ilike(pattern) | CatalogItem.description.ilike(pattern))
        if filters.min_price is not None:
            conditions.append(CatalogItem.price >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(CatalogItem.price <= filters.max_price)
        return conditions
