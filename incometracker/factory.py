"""Mini README: Wiring helper that assembles a ready-to-use ledger.

``build_ledger`` reads settings, configures logging, opens the database,
creates missing tables, loads the price catalog and returns a
``LedgerService``. Presentation code calls it once at start-up; tests pass
their own settings pointing at an in-memory database.
"""

from __future__ import annotations

from typing import Optional

from .catalog import PriceCatalog
from .configuration import IncomeTrackerSettings, get_settings
from .ledger import LedgerService
from .logging_utils import configure_root_logger, get_logger
from .storage import RecordStore, create_database_engine, create_session_factory, init_schema

LOGGER = get_logger(__name__)


def build_ledger(settings: Optional[IncomeTrackerSettings] = None) -> LedgerService:
    """Create the store, catalog and ledger service described by ``settings``."""

    settings = settings or get_settings()
    configure_root_logger(settings.log_level)

    engine = create_database_engine(settings.resolved_database_url(), echo=settings.echo_sql)
    init_schema(engine)
    session_factory = create_session_factory(engine)

    catalog = PriceCatalog(session_factory)
    catalog.load_defaults()
    service = LedgerService(RecordStore(session_factory), catalog)
    LOGGER.info("Ledger ready (environment=%s)", settings.environment)
    return service
