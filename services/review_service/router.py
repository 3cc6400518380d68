from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.security import AuthenticatedUser, get_current_user
from .schemas import ReviewCreate, ReviewPage, ReviewResponse, ReviewUpdate
from .service import ReviewService

router = APIRouter(prefix="/reviews", tags=["Reviews"])


@router.post("/items/{item_id}", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
async def create_review(
    item_id: int,
    payload: ReviewCreate,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await ReviewService.create_review(db, user.id, item_id, payload)


@router.get("/items/{item_id}", response_model=ReviewPage)
async def list_item_reviews(
    item_id: int,
    page: int = Query(default=1),
    limit: int = Query(default=10),
    sort: str = Query(default="newest"),
    rating: int | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
):
    return await ReviewService.get_item_reviews(db, item_id, page, limit, sort, rating)


@router.put("/{review_id}", response_model=ReviewResponse)
async def update_review(
    review_id: int,
    payload: ReviewUpdate,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await ReviewService.update_review(db, review_id, user, payload)


@router.delete("/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_review(
    review_id: int,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await ReviewService.delete_review(db, review_id, user)
