from sqlalchemy import (
    Column,
    String,
    Integer,
    BigInteger,
    Boolean,
    DateTime,
    Text,
    Index,
    event,
)
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import declarative_base, sessionmaker
from utils.utcnow import utcnow
import logging

from config import settings, sqlite_database_path

logger = logging.getLogger(__name__)

Base = declarative_base()


# ==================== RANK REGISTRY ====================


class RankRecord(Base):
    """A named points band. ``max_points`` NULL means open-ended."""

    __tablename__ = "ranks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    min_points = Column(BigInteger, nullable=False, default=0)
    max_points = Column(BigInteger, nullable=True)
    logo_url = Column(Text, nullable=True)
    color = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    display_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (Index("idx_rank_active_min", "is_active", "min_points"),)


# ==================== TOKEN REGISTRY ====================


class TokenAsset(Base):
    """Token registry entry; ``is_meme`` drives meme/plain holding split."""

    __tablename__ = "token_assets"

    address = Column(String, primary_key=True)
    symbol = Column(String, nullable=True)
    name = Column(String, nullable=True)
    logo_url = Column(Text, nullable=True)
    is_meme = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (Index("idx_token_asset_meme", "is_meme"),)


# ==================== DATABASE SETUP ====================

# SQLite-specific: improve concurrency (WAL + busy_timeout applied in _set_sqlite_pragma)
_engine_kw: dict = {"echo": False}
if "sqlite" in settings.DATABASE_URL:
    _engine_kw["connect_args"] = {"timeout": 30}  # Wait up to 30s when DB is locked

async_engine = create_async_engine(settings.DATABASE_URL, **_engine_kw)


def _set_sqlite_pragma(dbapi_connection, connection_record):
    """Configure SQLite for concurrent readers (WAL mode, busy timeout)."""
    if "sqlite" not in settings.DATABASE_URL:
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA busy_timeout=30000")
    cursor.close()


# Apply pragmas on each new SQLite connection
event.listens_for(async_engine.sync_engine, "connect")(_set_sqlite_pragma)

AsyncSessionLocal = sessionmaker(
    async_engine, class_=AsyncSession, expire_on_commit=False
)


async def init_database():
    """Create registry tables if they do not exist yet."""
    db_path = sqlite_database_path(settings.DATABASE_URL)
    if db_path is not None:
        db_path.parent.mkdir(parents=True, exist_ok=True)

    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Registry tables ready")
