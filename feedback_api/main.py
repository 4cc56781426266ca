import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy.orm import Session

from . import crud
from .auth import require_user
from .config import get_settings
from .db import close_db, get_db, init_db
from .errors import register_exception_handlers
from .schemas import (
    AnalyticsReport,
    CategoryOut,
    FeedbackCreated,
    FeedbackIn,
    FeedbackOut,
    FeedbackPage,
    Health,
    Message,
    SearchResults,
)

settings = get_settings()

logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))
logger = logging.getLogger("feedback-api")

app = FastAPI(title="Feedback API", version="1.0.0")

allow_credentials = settings.cors_origins != ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.on_event("startup")
def _open_pool() -> None:
    init_db()


@app.on_event("shutdown")
def _close_pool() -> None:
    close_db()
    logger.info("Database pool closed")


@app.post("/api/feedback", response_model=FeedbackCreated, status_code=201)
def submit_feedback(payload: FeedbackIn, db: Session = Depends(get_db)):
    feedback_id = crud.create_feedback(db, payload.model_dump())
    return {"message": "Feedback submitted successfully", "id": feedback_id}


@app.get("/api/feedback", response_model=FeedbackPage)
def list_feedback(
    feedback_type: Optional[str] = Query(None, alias="type"),
    rating: Optional[str] = Query(None),
    limit: int = Query(crud.DEFAULT_LIMIT),
    offset: int = Query(0),
    db: Session = Depends(get_db),
):
    rating_filter = crud.parse_rating_filter(rating)
    rows, total = crud.list_feedback(db, feedback_type, rating_filter, limit, offset)
    return {"feedback": rows, "total": total, "limit": limit, "offset": offset}


@app.get("/api/feedback/{feedback_id}", response_model=FeedbackOut)
def get_feedback(feedback_id: int, db: Session = Depends(get_db)):
    return crud.get_feedback(db, feedback_id)


@app.put("/api/feedback/{feedback_id}", response_model=Message)
def update_feedback(feedback_id: int, payload: FeedbackIn, db: Session = Depends(get_db)):
    crud.update_feedback(db, feedback_id, payload.model_dump())
    return {"message": "Feedback updated successfully"}


@app.delete("/api/feedback/{feedback_id}", response_model=Message)
def delete_feedback(
    feedback_id: int,
    user: Dict[str, Any] = Depends(require_user),
    db: Session = Depends(get_db),
):
    crud.delete_feedback(db, feedback_id)
    logger.info("Feedback %s deleted by %s", feedback_id, user.get("sub"))
    return {"message": "Feedback deleted successfully"}


@app.get("/api/analytics", response_model=AnalyticsReport)
def get_analytics(db: Session = Depends(get_db)):
    return crud.analytics(db)


@app.get("/api/search", response_model=SearchResults)
def search_feedback(
    q: Optional[str] = Query(None),
    feedback_type: Optional[str] = Query(None, alias="type"),
    rating: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    rows = crud.search_feedback(db, q, feedback_type, crud.parse_rating_filter(rating))
    return {"results": rows, "count": len(rows)}


@app.get("/api/categories", response_model=List[CategoryOut])
def list_categories(db: Session = Depends(get_db)):
    return crud.list_categories(db)


@app.get("/api/health", response_model=Health)
def health():
    return {"status": "OK", "timestamp": datetime.now(timezone.utc)}


# Mounted last so the API routes above take precedence over "/".
_static_dir = Path(settings.static_dir)
if _static_dir.is_dir():
    app.mount("/", StaticFiles(directory=str(_static_dir), html=True), name="static")


def run() -> None:
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
