import logging

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from dotenv import load_dotenv

from app.core.config import settings
from app.db.base import Base

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

DATABASE_URL = settings.DATABASE_URL

if not DATABASE_URL:
    raise ValueError("[ERROR] DATABASE_URL not found!")

IS_SQLITE = DATABASE_URL.lower().startswith("sqlite")

# Sync engine; FastAPI runs the sync route handlers in its threadpool
if IS_SQLITE:
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},  # SQLite multi-thread
        echo=False,
    )
else:
    engine = create_engine(
        DATABASE_URL,
        echo=False,
        pool_pre_ping=True,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        pool_recycle=settings.DATABASE_POOL_RECYCLE,
        pool_timeout=30,
    )

# Create SessionLocal class
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


def get_db():
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def test_connection():
    """Test database connection - NON-BLOCKING."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
            return True
    except Exception as e:
        logger.warning(f"[DB] Database connection failed (continuing): {e}")
        return False


def init_db():
    """Initialize database tables - NON-BLOCKING."""
    try:
        # Import all models so they're registered with Base
        import app.models  # noqa: F401

        Base.metadata.create_all(bind=engine)
        logger.info("[DB] Database tables initialized")
        return True
    except Exception as e:
        logger.warning(f"[DB] Database init warning: {e}")
        return False


def close_db_connection():
    """Close database connections."""
    try:
        engine.dispose()
        logger.info("[DB] Database connections closed")
    except Exception as e:
        logger.warning(f"[DB] Error closing DB: {e}")
