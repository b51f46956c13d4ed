from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker

from .config import settings

SQLITE_BUSY_TIMEOUT = 30  # seconds


def make_engine(url: str) -> Engine:
    """
    Build an engine for `url`.

    SQLite connections get check_same_thread=False (FastAPI runs sync
    endpoints on a thread pool), a busy timeout and foreign keys enabled.
    """
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)

    db_path = make_url(url).database
    if db_path and db_path != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    sqlite_engine = create_engine(
        url,
        connect_args={"check_same_thread": False, "timeout": SQLITE_BUSY_TIMEOUT},
    )

    @event.listens_for(sqlite_engine, "connect")
    def enable_sqlite_fk(dbapi_connection, _):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return sqlite_engine


def make_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=bind)


engine = make_engine(settings.resolved_database_url)

# SessionLocal is the default storage handle; the core receives sessions explicitly
SessionLocal = make_session_factory(engine)


def init_db(bind: Engine | None = None) -> None:
    """Create all tables (development / tests; production uses alembic)."""
    from .models import Base

    Base.metadata.create_all(bind=bind or engine)


# Dependency for FastAPI
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
