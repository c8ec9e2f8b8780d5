"""In-memory community store.

Keeps every collection as plain JSON-compatible dicts, the same shape
the file-backed store writes to disk, so callers never share mutable
objects with the store.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from ..errors import StorageError, ValidationError
from ..models import (
    AdverseReport,
    BusinessListing,
    EntityRef,
    EntityType,
    ReportVerification,
    TrustRecord,
    UserGamification,
    utc_now,
)
from .interfaces import REPORT_COUNTER_FIELDS, BusinessFilters, ReportFilters


def _empty_document() -> dict[str, Any]:
    return {
        "trust_records": {},
        "reports": {},
        "report_verifications": [],
        "businesses": {},
        "gamification": {},
    }


def _record_key(entity_id: str, entity_type: EntityType) -> str:
    return f"{entity_type.value}:{entity_id}"


class InMemoryStore:
    """Dict-backed implementation of :class:`CommunityStore`."""

    def __init__(self) -> None:
        self._document: dict[str, Any] | None = None

    # ------------------------------------------------------------------
    # Persistence hooks
    # ------------------------------------------------------------------

    async def _load(self) -> dict[str, Any]:
        """Return the live document, loading it on first use."""
        if self._document is None:
            self._document = _empty_document()
        return self._document

    async def _commit(self) -> None:
        """Flush the document after a write. Nothing to do in memory."""

    # ------------------------------------------------------------------
    # Trust records
    # ------------------------------------------------------------------

    async def get(self, entity_id: str, entity_type: EntityType) -> TrustRecord | None:
        doc = await self._load()
        data = doc["trust_records"].get(_record_key(entity_id, entity_type))
        return TrustRecord.from_dict(data) if data else None

    async def put(self, record: TrustRecord) -> None:
        doc = await self._load()
        doc["trust_records"][_record_key(record.entity_id, record.entity_type)] = (
            record.to_dict()
        )
        await self._commit()

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    async def create_report(self, report: AdverseReport) -> None:
        doc = await self._load()
        if report.id in doc["reports"]:
            raise StorageError(f"Report {report.id} already exists")
        doc["reports"][report.id] = report.to_dict()
        await self._commit()

    async def get_report(self, report_id: str) -> AdverseReport | None:
        doc = await self._load()
        data = doc["reports"].get(report_id)
        return AdverseReport.from_dict(data) if data else None

    async def _all_reports_newest_first(self) -> list[AdverseReport]:
        doc = await self._load()
        reports = [AdverseReport.from_dict(d) for d in reversed(doc["reports"].values())]
        # Stable sort keeps later insertions first among equal timestamps
        return sorted(reports, key=lambda r: r.created_at, reverse=True)

    async def query_reports(
        self, entity_refs: Sequence[EntityRef], limit: int = 10
    ) -> list[AdverseReport]:
        wanted = set(entity_refs)
        matches = [
            r
            for r in await self._all_reports_newest_first()
            if r.status == "active" and any(r.references(ref) for ref in wanted)
        ]
        return matches[:limit]

    async def list_reports(self, filters: ReportFilters) -> list[AdverseReport]:
        matches = [
            r for r in await self._all_reports_newest_first() if filters.matches(r)
        ]
        return matches[: filters.limit]

    async def increment_report_counters(self, report_id: str, field: str) -> None:
        if field not in REPORT_COUNTER_FIELDS:
            raise ValidationError(
                f"Unknown report counter '{field}'. "
                f"Available: {', '.join(REPORT_COUNTER_FIELDS)}"
            )
        doc = await self._load()
        data = doc["reports"].get(report_id)
        if data is None:
            raise StorageError(f"Report {report_id} not found")
        data[field] = int(data.get(field, 0)) + 1
        data["updated_at"] = utc_now()
        await self._commit()

    async def add_report_verification(self, verification: ReportVerification) -> None:
        doc = await self._load()
        doc["report_verifications"].append(verification.to_dict())
        await self._commit()

    async def list_report_verifications(self, report_id: str) -> list[ReportVerification]:
        doc = await self._load()
        return [
            ReportVerification.from_dict(v)
            for v in doc["report_verifications"]
            if v["report_id"] == report_id
        ]

    # ------------------------------------------------------------------
    # Business directory
    # ------------------------------------------------------------------

    async def create_business(self, listing: BusinessListing) -> None:
        doc = await self._load()
        if listing.id in doc["businesses"]:
            raise StorageError(f"Business listing {listing.id} already exists")
        doc["businesses"][listing.id] = listing.to_dict()
        await self._commit()

    async def list_businesses(self, filters: BusinessFilters) -> list[BusinessListing]:
        doc = await self._load()
        listings = [BusinessListing.from_dict(d) for d in doc["businesses"].values()]
        matches = [b for b in listings if filters.matches(b)]
        matches.sort(key=lambda b: b.trust_score, reverse=True)
        return matches[: filters.limit]

    # ------------------------------------------------------------------
    # Gamification
    # ------------------------------------------------------------------

    async def get_gamification(self, user_id: str) -> UserGamification | None:
        doc = await self._load()
        data = doc["gamification"].get(user_id)
        return UserGamification.from_dict(data) if data else None

    async def put_gamification(self, stats: UserGamification) -> None:
        doc = await self._load()
        doc["gamification"][stats.user_id] = stats.to_dict()
        await self._commit()
