from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class FeedbackIn(BaseModel):
    # Presence and range are checked by crud.validate_feedback so that both
    # HTTP and direct callers get the same ValidationError.
    name: Optional[str] = None
    email: Optional[str] = None
    feedback_type: Optional[str] = None
    subject_course: Optional[str] = None
    overall_rating: Optional[int] = None
    detailed_feedback: Optional[str] = None


class FeedbackOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    feedback_type: str
    subject_course: Optional[str] = None
    overall_rating: int
    detailed_feedback: Optional[str] = None
    submission_date: datetime
    updated_at: Optional[datetime] = None


class FeedbackCreated(BaseModel):
    message: str
    id: int


class Message(BaseModel):
    message: str


class FeedbackPage(BaseModel):
    feedback: List[FeedbackOut]
    total: int
    limit: int
    offset: int


class SearchResults(BaseModel):
    results: List[FeedbackOut]
    count: int


class TypeStat(BaseModel):
    feedback_type: str
    count: int
    avg_rating: float


class MonthlyStat(BaseModel):
    year: int
    month: int
    month_name: str
    count: int


class RatingBucket(BaseModel):
    overall_rating: int
    count: int


class AnalyticsReport(BaseModel):
    total_feedback: int
    average_rating: str
    feedback_by_type: List[TypeStat]
    monthly_stats: List[MonthlyStat]
    rating_distribution: List[RatingBucket]
    recent_feedback: int


class CategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    category_name: str
    description: Optional[str] = None


class Health(BaseModel):
    status: str
    timestamp: datetime
