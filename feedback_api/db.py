import logging

from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import get_settings

Base = declarative_base()

logger = logging.getLogger(__name__)

_engine = None
_SessionLocal = None

DEFAULT_CATEGORIES = [
    ("Course Content", "Material, syllabus and learning resources"),
    ("Facilities", "Classrooms, labs and campus services"),
    ("General", "Anything that does not fit another category"),
    ("Instructor", "Teaching quality and instructor availability"),
    ("Technical Support", "Platform, login and connectivity issues"),
]


def _build_engine():
    settings = get_settings()
    if settings.is_sqlite:
        return create_engine(settings.database_url, connect_args={"check_same_thread": False})
    # Fixed-size pool; callers wait for a free connection when it is exhausted.
    return create_engine(
        settings.database_url,
        pool_size=settings.pool_size,
        max_overflow=0,
        pool_pre_ping=True,
    )


def get_engine():
    global _engine
    if _engine is None:
        _engine = _build_engine()
    return _engine


def get_session_local():
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
    return _SessionLocal


def init_db() -> bool:
    """Open the pool and prepare tables.

    An unreachable store is logged and left for requests to report, so the
    process still starts and serves the health check.
    """
    from . import models  # noqa: F401  registers tables on Base.metadata

    close_db()
    if not check_connection():
        return False
    Base.metadata.create_all(bind=get_engine())
    _seed_categories()
    return True


def close_db() -> None:
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None


def check_connection() -> bool:
    try:
        with get_engine().connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Database connection failed")
        return False
    logger.info("Database connected successfully")
    return True


def _seed_categories() -> None:
    from .models import FeedbackCategory

    db = get_session_local()()
    try:
        if db.query(FeedbackCategory).count():
            return
        db.add_all(
            FeedbackCategory(category_name=name, description=description)
            for name, description in DEFAULT_CATEGORIES
        )
        db.commit()
        logger.info("Seeded %d feedback categories", len(DEFAULT_CATEGORIES))
    finally:
        db.close()


def get_db():
    SessionLocal = get_session_local()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
