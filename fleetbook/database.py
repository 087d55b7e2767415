from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from sqlalchemy.pool import QueuePool, StaticPool
from fleetbook.config import settings
from contextlib import nullcontext
import logging
import threading

logger = logging.getLogger(__name__)


# ─── Engine ────────────────────────────────────────────────────────────────────
def build_engine(url: str, echo: bool = False) -> Engine:
    """
    Create an engine for the given URL.

    SQLite in-memory databases live inside a single connection, so every
    session must share it (StaticPool) across the request thread pool.
    """
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=echo,
        )
    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        pool_timeout=settings.DATABASE_POOL_TIMEOUT,
        pool_pre_ping=True,          # Detect stale connections before using them
        echo=echo,
    )


engine = build_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)


# ─── Session Factory ───────────────────────────────────────────────────────────
def build_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(
        bind=bind,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,      # Avoid DetachedInstanceError after commit
    )


SessionLocal = build_session_factory(engine)


# A StaticPool engine hands every session the same connection, so one
# session's commit or rollback would land on another's transaction.
# Plain Lock: FastAPI may exit a dependency on a different worker thread.
_shared_connection_lock = threading.Lock()


def session_guard(bind: Engine):
    """Lock held for a session's lifetime on shared-connection engines; no-op otherwise."""
    if isinstance(bind.pool, StaticPool):
        return _shared_connection_lock
    return nullcontext()


# ─── Base Model ────────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.
    All models in fleetbook/models/ should inherit from this class.
    """
    pass


# ─── Dependency Injection ──────────────────────────────────────────────────────
def get_db():
    """
    FastAPI dependency that provides a database session per request.
    Automatically closes session after request completes. On the in-memory
    SQLite store requests take turns, see session_guard.

    Usage:
        @router.get("/items")
        def get_items(db: Session = Depends(get_db)):
            ...
    """
    with session_guard(engine):
        db = SessionLocal()
        try:
            yield db
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


# ─── Schema ────────────────────────────────────────────────────────────────────
def init_db(bind: Engine | None = None) -> None:
    """Create all tables. Models must be imported so they register on Base.metadata."""
    import fleetbook.models  # noqa: F401  (registers models)
    Base.metadata.create_all(bind=bind or engine)


# ─── Health Check ──────────────────────────────────────────────────────────────
def check_db_connection() -> bool:
    """Verify database is reachable. Used at startup."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False
