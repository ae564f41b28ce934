from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from learnhub.model.community_models import Discussion


# =============================
#   Reviews
# =============================
class ReviewRequest(BaseModel):
    rating: int = Field(..., description="Stars, 1 to 5")
    comment: Optional[str] = None


class ReviewView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    course_id: str
    rating: int
    comment: Optional[str] = None
    posted_at: datetime


class ReviewStats(BaseModel):
    average_rating: float = 0.0
    total_reviews: int = 0
    distribution: dict[int, int] = Field(
        default_factory=lambda: {5: 0, 4: 0, 3: 0, 2: 0, 1: 0},
        description="Review count per star value, 5 down to 1",
    )


# =============================
#   Discussions
# =============================
class ThreadCreate(BaseModel):
    title: str
    content: str


class ReplyCreate(BaseModel):
    content: str


class DiscussionView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    course_id: str
    user_id: str
    parent_id: Optional[str] = None
    title: Optional[str] = None
    content: str
    posted_at: datetime


class ThreadView(DiscussionView):
    replies: List[DiscussionView] = Field(default_factory=list)

    @classmethod
    def from_model(cls, thread: Discussion, replies: List[Discussion]) -> "ThreadView":
        view = DiscussionView.model_validate(thread)
        return cls(
            **view.model_dump(),
            replies=[DiscussionView.model_validate(reply) for reply in replies],
        )
