import math

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from services.catalog_service.repository import CatalogRepository
from shared.errors import ConflictError, ForbiddenError, NotFoundError
from shared.security import AuthenticatedUser
from .models import Review
from .repository import ReviewRepository
from .schemas import ReviewCreate, ReviewUpdate

logger = structlog.get_logger(__name__)

SORT_OPTIONS = {
    "newest": [Review.created_at.desc(), Review.id.desc()],
    "oldest": [Review.created_at.asc(), Review.id.asc()],
    "highest": [Review.rating.desc(), Review.created_at.desc(), Review.id.desc()],
    "lowest": [Review.rating.asc(), Review.created_at.desc(), Review.id.desc()],
}


class ReviewService:

    @staticmethod
    async def create_review(db: AsyncSession, user_id: int, item_id: int, data: ReviewCreate) -> Review:
        if not await CatalogRepository.find_by_id(db, item_id):
            raise NotFoundError("Catalog item not found", {"item_id": item_id})

        if await ReviewRepository.find_for_user_and_item(db, user_id, item_id):
            raise ConflictError("You have already reviewed this item. You can only submit one review per item")

        review = Review(user_id=user_id, item_id=item_id, rating=data.rating, comment=data.comment)
        review = await ReviewRepository.create(db, review)
        logger.info("review_created", review_id=review.id, item_id=item_id, rating=review.rating)
        return review

    @staticmethod
    async def update_review(db: AsyncSession, review_id: int, user: AuthenticatedUser, data: ReviewUpdate) -> Review:
        review = await ReviewService._get_owned(db, review_id, user, "You can only update your own reviews")
        for field, value in data.model_dump(exclude_unset=True).items():
            if field == "rating" and value is None:
                continue
            setattr(review, field, value)
        return await ReviewRepository.save(db, review)

    @staticmethod
    async def delete_review(db: AsyncSession, review_id: int, user: AuthenticatedUser) -> None:
        review = await ReviewService._get_owned(db, review_id, user, "You can only delete your own review")
        await ReviewRepository.delete(db, review)
        logger.info("review_deleted", review_id=review_id, by_admin=user.is_admin)

    @staticmethod
    async def get_item_reviews(
        db: AsyncSession,
        item_id: int,
        page: int = 1,
        limit: int = 10,
        sort: str = "newest",
        rating: int | None = None,
    ) -> dict:
        page = max(1, page)
        if limit < 1 or limit > 100:
            limit = 10

        conditions = [Review.item_id == item_id]
        if rating is not None and 1 <= rating <= 5:
            conditions.append(Review.rating == rating)
        order_by = SORT_OPTIONS.get(sort, SORT_OPTIONS["newest"])

        total = await ReviewRepository.count(db, conditions)
        reviews = await ReviewRepository.find_page(db, conditions, order_by, (page - 1) * limit, limit)
        total_pages = math.ceil(total / limit)

        return {
            "reviews": reviews,
            "pagination": {
                "current_page": page,
                "total_pages": total_pages,
                "total_reviews": total,
                "limit": limit,
                "has_next_page": page < total_pages,
                "has_prev_page": page > 1,
            },
            "stats": await ReviewService._stats(db, item_id),
        }

    @staticmethod
    async def _stats(db: AsyncSession, item_id: int) -> dict:
        counts = await ReviewRepository.rating_distribution(db, item_id)
        distribution = {star: counts.get(star, 0) for star in range(1, 6)}
        total = sum(distribution.values())
        average = sum(star * n for star, n in distribution.items()) / total if total else 0
        return {
            "average_rating": average,
            "total_reviews": total,
            "rating_distribution": distribution,
        }

    @staticmethod
    async def _get_owned(db: AsyncSession, review_id: int, user: AuthenticatedUser, message: str) -> Review:
        review = await ReviewRepository.get(db, review_id)
        if not review:
            raise NotFoundError("Review not found")
        if not user.is_admin and review.user_id != user.id:
            raise ForbiddenError(message)
        return review
