"""
Database configuration and ORM models.

This module defines the SQLAlchemy ORM models, the engine/session factory
and database initialization (tables plus seeded plan types).
"""

from functools import lru_cache
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    TypeDecorator,
    UniqueConstraint,
    event,
    select,
    text,
)
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from homely.core.config import get_settings
from homely.core.logger import setup_logger
from homely.utils.datetime_utils import ensure_utc, now_utc

logger = setup_logger(__name__)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


class UTCDateTime(TypeDecorator):
    """Timestamp stored as UTC and always read back timezone-aware.

    SQLite keeps no offset, so naive values from the driver are tagged UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return ensure_utc(value)

    def process_result_value(self, value, dialect):
        return ensure_utc(value)


class SoftDeletable:
    """Marks an ORM model as soft-deletable.

    Rows are never physically removed; ``deleted_at`` hides them from every
    repository read.
    """

    deleted_at = Column(UTCDateTime(), nullable=True, index=True)


# ===========================================
# ORM Models
# ===========================================


class PlanTypeORM(Base):
    """Subscription plan ORM model."""

    __tablename__ = "plan_types"

    id = Column(Integer, primary_key=True)
    name = Column(String(50), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    max_household_members = Column(Integer, nullable=True)
    max_tasks = Column(Integer, nullable=True)
    price_monthly = Column(Numeric(10, 2), nullable=False, default=0)
    price_yearly = Column(Numeric(10, 2), nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(UTCDateTime(), default=now_utc)
    updated_at = Column(UTCDateTime(), default=now_utc, onupdate=now_utc)


class HouseholdORM(SoftDeletable, Base):
    """Household ORM model."""

    __tablename__ = "households"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    name = Column(String(100), nullable=False)
    plan_type_id = Column(Integer, ForeignKey("plan_types.id"), nullable=False)
    subscription_status = Column(String(20), nullable=False, default="free")
    created_at = Column(UTCDateTime(), default=now_utc)
    updated_at = Column(UTCDateTime(), default=now_utc, onupdate=now_utc)


class HouseholdMemberORM(SoftDeletable, Base):
    """Household membership ORM model."""

    __tablename__ = "household_members"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    household_id = Column(String(36), ForeignKey("households.id"), nullable=False, index=True)
    user_id = Column(String(36), nullable=False, index=True)
    role = Column(String(20), nullable=False, default="member")
    invited_by = Column(String(36), nullable=True)
    invitation_token = Column(String(255), nullable=True, unique=True)
    invitation_expires_at = Column(UTCDateTime(), nullable=True)
    joined_at = Column(UTCDateTime(), nullable=True)
    created_at = Column(UTCDateTime(), default=now_utc)
    updated_at = Column(UTCDateTime(), default=now_utc, onupdate=now_utc)

    __table_args__ = (
        # One live membership per user and household; removed rows stay behind
        Index(
            "uq_household_members_active",
            "household_id",
            "user_id",
            unique=True,
            sqlite_where=text("deleted_at IS NULL"),
            postgresql_where=text("deleted_at IS NULL"),
        ),
    )


class TaskORM(SoftDeletable, Base):
    """Task template ORM model."""

    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    household_id = Column(String(36), ForeignKey("households.id"), nullable=False, index=True)
    category_id = Column(Integer, nullable=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    interval_years = Column(Integer, nullable=True)
    interval_months = Column(Integer, nullable=True)
    interval_weeks = Column(Integer, nullable=True)
    interval_days = Column(Integer, nullable=True)
    priority = Column(String(10), nullable=False, default="medium")
    notes = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    assigned_to = Column(String(36), nullable=True)
    created_by = Column(String(36), nullable=False)
    created_at = Column(UTCDateTime(), default=now_utc)
    updated_at = Column(UTCDateTime(), default=now_utc, onupdate=now_utc)

    __table_args__ = (
        CheckConstraint("interval_years IS NULL OR interval_years >= 0", name="ck_tasks_years"),
        CheckConstraint("interval_months IS NULL OR interval_months >= 0", name="ck_tasks_months"),
        CheckConstraint("interval_weeks IS NULL OR interval_weeks >= 0", name="ck_tasks_weeks"),
        CheckConstraint("interval_days IS NULL OR interval_days >= 0", name="ck_tasks_days"),
    )


class EventORM(SoftDeletable, Base):
    """Event ORM model."""

    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    task_id = Column(String(36), ForeignKey("tasks.id", ondelete="SET NULL"), nullable=True, index=True)
    household_id = Column(String(36), ForeignKey("households.id"), nullable=False)
    assigned_to = Column(String(36), nullable=True, index=True)
    due_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default="pending", index=True)
    priority = Column(String(10), nullable=False, default="medium")
    completion_date = Column(Date, nullable=True)
    completion_notes = Column(Text, nullable=True)
    postponed_from_date = Column(Date, nullable=True)
    postpone_reason = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    created_by = Column(String(36), nullable=False)
    created_at = Column(UTCDateTime(), default=now_utc)
    updated_at = Column(UTCDateTime(), default=now_utc, onupdate=now_utc)

    __table_args__ = (Index("ix_events_household_due", "household_id", "due_date"),)


class EventHistoryORM(Base):
    """Completion history ORM model. Append-only."""

    __tablename__ = "events_history"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    event_id = Column(String(36), ForeignKey("events.id", ondelete="SET NULL"), nullable=True, index=True)
    task_id = Column(String(36), ForeignKey("tasks.id", ondelete="SET NULL"), nullable=True)
    household_id = Column(String(36), ForeignKey("households.id"), nullable=False, index=True)
    assigned_to = Column(String(36), nullable=True)
    completed_by = Column(String(36), nullable=False)
    due_date = Column(Date, nullable=False)
    completion_date = Column(Date, nullable=False)
    task_name = Column(String(100), nullable=False)
    completion_notes = Column(Text, nullable=True)
    created_at = Column(UTCDateTime(), default=now_utc)


class PlanUsageORM(Base):
    """Daily plan usage ORM model."""

    __tablename__ = "plan_usage"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    household_id = Column(String(36), ForeignKey("households.id"), nullable=False)
    usage_type = Column(String(50), nullable=False)
    current_value = Column(Integer, nullable=False, default=0)
    max_value = Column(Integer, nullable=True)
    usage_date = Column(Date, nullable=False)
    created_at = Column(UTCDateTime(), default=now_utc)
    updated_at = Column(UTCDateTime(), default=now_utc, onupdate=now_utc)

    __table_args__ = (
        UniqueConstraint("household_id", "usage_type", "usage_date", name="uq_plan_usage_daily"),
    )


# ===========================================
# Seed data
# ===========================================

DEFAULT_PLAN_TYPES = [
    {
        "id": 1,
        "name": "Free",
        "description": "Basic household tracking",
        "max_household_members": 3,
        "max_tasks": 5,
        "price_monthly": 0,
        "price_yearly": 0,
    },
    {
        "id": 2,
        "name": "Premium",
        "description": "Larger households with more templates",
        "max_household_members": 10,
        "max_tasks": 100,
        "price_monthly": 4.99,
        "price_yearly": 49.99,
    },
    {
        "id": 3,
        "name": "Family",
        "description": "No limits",
        "max_household_members": None,
        "max_tasks": None,
        "price_monthly": 9.99,
        "price_yearly": 99.99,
    },
]


async def seed_plan_types(session: AsyncSession) -> None:
    """Insert the default plan types that are missing."""
    result = await session.execute(select(PlanTypeORM.id))
    existing = set(result.scalars().all())
    for plan in DEFAULT_PLAN_TYPES:
        if plan["id"] not in existing:
            session.add(PlanTypeORM(**plan))
    await session.flush()


# ===========================================
# Database Functions
# ===========================================


def install_sqlite_pragmas(engine: AsyncEngine) -> None:
    """Enforce foreign keys on every new SQLite connection."""

    @event.listens_for(engine.sync_engine, "connect")
    def _set_pragmas(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(database_url: str, echo: bool = False, busy_timeout: float = 5.0) -> AsyncEngine:
    """Create an async engine for ``database_url``."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["timeout"] = busy_timeout
    engine = create_async_engine(database_url, echo=echo, connect_args=connect_args)
    if database_url.startswith("sqlite"):
        install_sqlite_pragmas(engine)
    return engine


@lru_cache()
def get_engine() -> AsyncEngine:
    """Get the application's async engine."""
    settings = get_settings()
    return build_engine(
        settings.DATABASE_URL,
        echo=settings.DB_ECHO,
        busy_timeout=settings.DB_BUSY_TIMEOUT_SECONDS,
    )


def get_session_factory(engine: AsyncEngine | None = None):
    """Get async session factory."""
    return sessionmaker(engine or get_engine(), class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine | None = None) -> None:
    """Create tables and seed plan types."""
    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = get_session_factory(engine)
    async with session_factory() as session:
        await seed_plan_types(session)
        await session.commit()
    logger.info("Database initialized")
