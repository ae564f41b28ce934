from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class EnrollmentView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    course_id: str
    enrolled_at: datetime
    progress_percentage: int
    completed_at: Optional[datetime] = None


class LessonProgressView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    lesson_id: str
    completed: bool
    completed_at: Optional[datetime] = None
