"""Storage collaborators for the community ledger."""

from __future__ import annotations

from .interfaces import (
    REPORT_COUNTER_FIELDS,
    BusinessFilters,
    CommunityStore,
    ReportFilters,
)
from .json_file import JsonFileStore
from .memory import InMemoryStore

__all__ = [
    "BusinessFilters",
    "CommunityStore",
    "InMemoryStore",
    "JsonFileStore",
    "REPORT_COUNTER_FIELDS",
    "ReportFilters",
]
