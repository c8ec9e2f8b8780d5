"""Persistence protocol for the community ledger.

Defines the async store interface the trust engine and community
service are written against, plus the filter containers used by the
scam wall and business directory queries.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from ..models import (
    AdverseReport,
    BusinessListing,
    EntityRef,
    EntityType,
    ReportVerification,
    TrustRecord,
    UserGamification,
)

REPORT_COUNTER_FIELDS = ("upvotes", "corroborations")


@dataclass
class ReportFilters:
    """Scam wall query. ``None`` fields are not filtered on."""

    category: str | None = None
    location: str | None = None
    scam_type: str | None = None
    risk_level: int | None = None
    status: str = "active"
    limit: int = 50

    def matches(self, report: AdverseReport) -> bool:
        if report.status != self.status:
            return False
        if self.category is not None and report.category != self.category:
            return False
        if self.location is not None and report.location != self.location:
            return False
        if self.scam_type is not None and report.scam_type != self.scam_type:
            return False
        if self.risk_level is not None and report.risk_level != self.risk_level:
            return False
        return True


@dataclass
class BusinessFilters:
    """Business directory query. ``None`` fields are not filtered on."""

    category: str | None = None
    location: str | None = None
    verification_status: str | None = None
    is_student_business: bool | None = None
    verified_by_org: str | None = None
    limit: int = 50

    def matches(self, listing: BusinessListing) -> bool:
        if self.category is not None and listing.category != self.category:
            return False
        if self.location is not None and listing.location != self.location:
            return False
        if (
            self.verification_status is not None
            and listing.verification_status != self.verification_status
        ):
            return False
        if (
            self.is_student_business is not None
            and listing.is_student_business != self.is_student_business
        ):
            return False
        if (
            self.verified_by_org is not None
            and listing.verified_by_org != self.verified_by_org
        ):
            return False
        return True


@runtime_checkable
class CommunityStore(Protocol):
    """Async storage collaborator.

    Every method may raise :class:`fraudshield.errors.StorageError`.
    Implementations never retry.
    """

    async def get(self, entity_id: str, entity_type: EntityType) -> TrustRecord | None:
        """Fetch a trust record by normalized id and type."""
        ...

    async def put(self, record: TrustRecord) -> None:
        """Insert or replace a trust record."""
        ...

    async def query_reports(
        self, entity_refs: Sequence[EntityRef], limit: int = 10
    ) -> list[AdverseReport]:
        """Active reports referencing any of ``entity_refs``, newest first."""
        ...

    async def increment_report_counters(self, report_id: str, field: str) -> None:
        """Add one to ``upvotes`` or ``corroborations`` on a report."""
        ...

    async def create_report(self, report: AdverseReport) -> None:
        ...

    async def get_report(self, report_id: str) -> AdverseReport | None:
        ...

    async def list_reports(self, filters: ReportFilters) -> list[AdverseReport]:
        """Reports matching ``filters``, newest first."""
        ...

    async def add_report_verification(self, verification: ReportVerification) -> None:
        ...

    async def create_business(self, listing: BusinessListing) -> None:
        ...

    async def list_businesses(self, filters: BusinessFilters) -> list[BusinessListing]:
        """Listings matching ``filters``, highest trust score first."""
        ...

    async def get_gamification(self, user_id: str) -> UserGamification | None:
        ...

    async def put_gamification(self, stats: UserGamification) -> None:
        ...
