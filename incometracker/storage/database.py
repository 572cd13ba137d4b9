"""Mini README: SQLAlchemy engine, session and column-type helpers.

Structure:
    * Base - declarative base shared by the ledger tables.
    * UTCDateTime - stores aware datetimes as naive UTC, returns aware UTC.
    * DecimalText - stores ``Decimal`` values as exact text.
    * create_database_engine - engine factory tuned for SQLite.
    * create_session_factory / init_schema - session maker and table creation.

SQLite has no native timezone or decimal support, so both are handled by
type decorators instead of relying on driver behaviour.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import DateTime, String, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.types import TypeDecorator

from ..logging_utils import get_logger

LOGGER = get_logger(__name__)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetime persisted as naive UTC."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect: Any) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None or value.utcoffset() is None:
            raise ValueError("Timestamps must be timezone-aware")
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    def process_result_value(self, value: Optional[datetime], dialect: Any) -> Optional[datetime]:
        if value is None:
            return None
        return value.replace(tzinfo=timezone.utc)


class DecimalText(TypeDecorator):
    """Exact decimal stored as its string representation."""

    impl = String(40)
    cache_ok = True

    def process_bind_param(self, value: Optional[Any], dialect: Any) -> Optional[str]:
        if value is None:
            return None
        return str(Decimal(str(value)))

    def process_result_value(self, value: Optional[str], dialect: Any) -> Optional[Decimal]:
        if value is None:
            return None
        return Decimal(value)


def _is_in_memory(url: str) -> bool:
    return url in {"sqlite://", "sqlite:///:memory:"} or "mode=memory" in url


def create_database_engine(url: str, *, echo: bool = False) -> Engine:
    """Create an engine; SQLite connections may be shared across threads."""

    kwargs: dict[str, Any] = {"echo": echo}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if _is_in_memory(url):
            # Every session must see the same in-memory database.
            kwargs["poolclass"] = StaticPool
    engine = create_engine(url, **kwargs)

    LOGGER.debug("Created database engine for %s", engine.url.render_as_string(hide_password=True))
    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False)


def init_schema(engine: Engine) -> None:
    """Create the ledger tables if they do not exist yet."""

    # Importing registers the mapped classes on Base.metadata.
    from . import models  # noqa: F401

    Base.metadata.create_all(engine)
    LOGGER.info("Ledger schema ready (%s tables)", len(Base.metadata.tables))
