import os
from dataclasses import dataclass
from typing import List, Optional

from dotenv import load_dotenv
from sqlalchemy.engine import URL

load_dotenv()


def _parse_origins(raw: str) -> List[str]:
    raw = (raw or "").strip()
    if not raw or raw == "*":
        return ["*"]
    return [o.strip() for o in raw.split(",") if o.strip()]


@dataclass(frozen=True)
class Settings:
    database_url: str
    pool_size: int
    host: str
    port: int
    secret_key: str
    access_token_expire_minutes: int
    cors_origins: List[str]
    static_dir: str
    log_level: str

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


def _database_url() -> str:
    explicit = os.getenv("DATABASE_URL")
    if explicit:
        return explicit
    db_path: Optional[str] = os.getenv("DB_PATH")
    if db_path:
        return f"sqlite:///{db_path}"
    url = URL.create(
        "mysql+pymysql",
        username=os.getenv("DB_USER", "root"),
        password=os.getenv("DB_PASSWORD", ""),
        host=os.getenv("DB_HOST", "localhost"),
        port=int(os.getenv("DB_PORT", "3306")),
        database=os.getenv("DB_NAME", "feedback_system"),
    )
    return url.render_as_string(hide_password=False)


def get_settings() -> Settings:
    """Read settings from the environment.

    Called on demand rather than cached so that tests can swap variables
    with monkeypatch and pick them up on the next engine or token call.
    """
    secret = os.getenv("SECRET_KEY") or os.getenv("JWT_SECRET") or "dev-secret-change-me"
    return Settings(
        database_url=_database_url(),
        pool_size=int(os.getenv("DB_POOL_SIZE", "10")),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
        secret_key=secret,
        access_token_expire_minutes=int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "120")),
        cors_origins=_parse_origins(os.getenv("CORS_ORIGINS", "*")),
        static_dir=os.getenv("STATIC_DIR", "public"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
