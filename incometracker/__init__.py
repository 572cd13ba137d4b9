"""Mini README: Core package initializer for the income tracker.

Exposes the logging helper and the ``build_ledger`` factory so callers can
obtain a configured ``LedgerService`` without knowing the module layout.
Sub-packages: ``domain`` (values), ``storage`` (SQL persistence),
``catalog`` (prices) and ``ledger`` (queries, rollups and lifecycle).
"""

from .factory import build_ledger
from .logging_utils import get_logger

__all__ = ["build_ledger", "get_logger"]
