from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class ReviewCreate(BaseModel):
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = Field(default=None, max_length=500)


class ReviewUpdate(BaseModel):
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    comment: Optional[str] = Field(default=None, max_length=500)


class ReviewResponse(BaseModel):
    id: int
    user_id: int
    item_id: int
    rating: int
    comment: Optional[str]
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ReviewPagination(BaseModel):
    current_page: int
    total_pages: int
    total_reviews: int
    limit: int
    has_next_page: bool
    has_prev_page: bool


class ReviewStats(BaseModel):
    average_rating: float
    total_reviews: int
    rating_distribution: Dict[int, int]


class ReviewPage(BaseModel):
    reviews: List[ReviewResponse]
    pagination: ReviewPagination
    stats: ReviewStats
