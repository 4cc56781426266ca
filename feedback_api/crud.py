import calendar
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple

from sqlalchemy import extract, func
from sqlalchemy.orm import Session

from .errors import NotFound, ValidationError
from .filters import PredicateBuilder, feedback_filters
from .models import Feedback, FeedbackCategory, utcnow

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50
SEARCH_LIMIT = 50
MIN_QUERY_LENGTH = 2
MONTHLY_WINDOW_MONTHS = 12
RECENT_WINDOW_DAYS = 7

REQUIRED_FIELDS = ("name", "email", "feedback_type", "overall_rating")
OPTIONAL_FIELDS = ("subject_course", "detailed_feedback")
SEARCH_FIELDS = ("detailed_feedback", "subject_course", "name")


def _missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def validate_feedback(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Check a submitted record and return the column values to store."""
    if any(_missing(payload.get(field)) for field in REQUIRED_FIELDS):
        raise ValidationError("Missing required fields")

    rating = payload["overall_rating"]
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationError("Rating must be an integer")
    if rating < 1 or rating > 5:
        raise ValidationError("Rating must be between 1 and 5")

    values = {field: payload[field] for field in REQUIRED_FIELDS}
    for field in OPTIONAL_FIELDS:
        values[field] = payload.get(field) or None
    return values


def create_feedback(db: Session, payload: Mapping[str, Any]) -> int:
    values = validate_feedback(payload)
    f = Feedback(**values)
    db.add(f)
    db.commit()
    db.refresh(f)
    logger.info("Feedback %s submitted", f.id)
    return f.id


def parse_rating_filter(raw: Optional[str]) -> Optional[int]:
    """Query-string rating filter; blank means no filter."""
    raw = (raw or "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError("Rating filter must be an integer")


def list_feedback(
    db: Session,
    feedback_type: Optional[str] = None,
    rating: Optional[int] = None,
    limit: int = DEFAULT_LIMIT,
    offset: int = 0,
) -> Tuple[List[Feedback], int]:
    if limit < 1:
        raise ValidationError("Limit must be at least 1")
    if offset < 0:
        raise ValidationError("Offset must not be negative")

    clauses = feedback_filters(feedback_type, rating).clauses()
    rows = (
        db.query(Feedback)
        .filter(*clauses)
        .order_by(Feedback.submission_date.desc(), Feedback.id.desc())
        .limit(limit)
        .offset(offset)
        .all()
    )
    total = db.query(func.count(Feedback.id)).filter(*clauses).scalar()
    return rows, int(total or 0)


def get_feedback(db: Session, feedback_id: int) -> Feedback:
    f = db.get(Feedback, feedback_id)
    if f is None:
        raise NotFound("Feedback not found")
    return f


def update_feedback(db: Session, feedback_id: int, payload: Mapping[str, Any]) -> None:
    values = validate_feedback(payload)
    values["updated_at"] = utcnow()
    affected = (
        db.query(Feedback)
        .filter(Feedback.id == feedback_id)
        .update(values, synchronize_session=False)
    )
    db.commit()
    if not affected:
        raise NotFound("Feedback not found")
    logger.info("Feedback %s updated", feedback_id)


def delete_feedback(db: Session, feedback_id: int) -> None:
    affected = (
        db.query(Feedback)
        .filter(Feedback.id == feedback_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    if not affected:
        raise NotFound("Feedback not found")


def search_feedback(
    db: Session,
    q: Optional[str],
    feedback_type: Optional[str] = None,
    rating: Optional[int] = None,
) -> List[Feedback]:
    term = (q or "").strip()
    if len(term) < MIN_QUERY_LENGTH:
        raise ValidationError(f"Search query must be at least {MIN_QUERY_LENGTH} characters")

    pattern = f"%{term}%"
    builder = (
        PredicateBuilder()
        .where_any((field, "ilike", pattern) for field in SEARCH_FIELDS)
        .where("feedback_type", "=", feedback_type or None)
        .where("overall_rating", "=", rating or None)
    )
    return (
        db.query(Feedback)
        .filter(*builder.clauses())
        .order_by(Feedback.submission_date.desc(), Feedback.id.desc())
        .limit(SEARCH_LIMIT)
        .all()
    )


def _months_before(moment: datetime, months: int) -> datetime:
    index = moment.year * 12 + (moment.month - 1) - months
    year, month0 = divmod(index, 12)
    day = min(moment.day, calendar.monthrange(year, month0 + 1)[1])
    return moment.replace(year=year, month=month0 + 1, day=day)


def _avg(value) -> float:
    return float(value) if value is not None else 0.0


def analytics(db: Session, now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or datetime.now(timezone.utc)

    total = db.query(func.count(Feedback.id)).scalar() or 0
    average = db.query(func.avg(Feedback.overall_rating)).scalar()

    by_type = (
        db.query(
            Feedback.feedback_type,
            func.count(Feedback.id),
            func.avg(Feedback.overall_rating),
        )
        .group_by(Feedback.feedback_type)
        .order_by(Feedback.feedback_type)
        .all()
    )

    year = extract("year", Feedback.submission_date)
    month = extract("month", Feedback.submission_date)
    monthly = (
        db.query(year.label("year"), month.label("month"), func.count(Feedback.id).label("count"))
        .filter(Feedback.submission_date >= _months_before(now, MONTHLY_WINDOW_MONTHS))
        .group_by(year, month)
        .order_by(year.desc(), month.desc())
        .all()
    )

    ratings = (
        db.query(Feedback.overall_rating, func.count(Feedback.id))
        .group_by(Feedback.overall_rating)
        .order_by(Feedback.overall_rating)
        .all()
    )

    recent = (
        db.query(func.count(Feedback.id))
        .filter(Feedback.submission_date >= now - timedelta(days=RECENT_WINDOW_DAYS))
        .scalar()
    )

    return {
        "total_feedback": int(total),
        "average_rating": f"{_avg(average):.1f}",
        "feedback_by_type": [
            {"feedback_type": t, "count": int(c), "avg_rating": round(_avg(a), 2)}
            for t, c, a in by_type
        ],
        "monthly_stats": [
            {
                "year": int(y),
                "month": int(m),
                "month_name": calendar.month_name[int(m)],
                "count": int(c),
            }
            for y, m, c in monthly
        ],
        "rating_distribution": [
            {"overall_rating": int(r), "count": int(c)} for r, c in ratings
        ],
        "recent_feedback": int(recent or 0),
    }


def list_categories(db: Session) -> List[FeedbackCategory]:
    return db.query(FeedbackCategory).order_by(FeedbackCategory.category_name).all()
