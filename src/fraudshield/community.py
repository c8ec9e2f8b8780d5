"""Community scam wall, entity checker and business directory.

This is the caller-facing API used by the chat and UI layers. It wires
the trust engine and risk assessor to an injected store and identity
provider; nothing here holds global state.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from .errors import ValidationError
from .gamification import apply_contribution
from .identity import IdentityProvider
from .models import (
    LISTING_STATUSES,
    VERIFICATION_KINDS,
    AdverseReport,
    BusinessListing,
    EntityCheck,
    EntityRef,
    EntityType,
    ReportSubmission,
    ReportVerification,
    SocialMediaLinks,
    TrustRecord,
    UserGamification,
    new_id,
    normalize_entity_id,
    utc_now,
)
from .risk import RiskAssessor
from .store.interfaces import BusinessFilters, CommunityStore, ReportFilters
from .trust import TrustScoreEngine

logger = structlog.get_logger()

# Verification kind -> report counter it bumps
_COUNTER_FOR_KIND = {
    "upvote": "upvotes",
    "happened_to_me": "corroborations",
}


class CommunityService:
    """Entry point for reporting, checking and browsing community data.

    Args:
        store: Persistence collaborator.
        identity: Resolves the acting user.
        assessor: Risk assessor; a default one is built if omitted.
        report_lookup_limit: Max reports joined into an entity check.
    """

    def __init__(
        self,
        store: CommunityStore,
        identity: IdentityProvider,
        assessor: RiskAssessor | None = None,
        report_lookup_limit: int = 10,
    ) -> None:
        self.store = store
        self.identity = identity
        self.trust = TrustScoreEngine(store)
        self.assessor = assessor or RiskAssessor()
        self.report_lookup_limit = report_lookup_limit

    # ------------------------------------------------------------------
    # Scam wall
    # ------------------------------------------------------------------

    async def record_adverse_report(self, submission: ReportSubmission) -> AdverseReport:
        """Store a scam report and penalize every entity it names.

        Raises:
            ValidationError: If the submission is malformed.
            StorageError: If any store call fails.
        """
        submission.validate()
        user_id = await self.identity.current_user_id()
        now = utc_now()
        report = AdverseReport(
            id=new_id("scam"),
            user_id=user_id,
            title=submission.title,
            description=submission.description,
            scam_type=submission.scam_type,
            category=submission.category,
            risk_level=submission.risk_level,
            entity_refs=[ref.normalized() for ref in submission.entity_refs],
            location=submission.location,
            amount_lost=submission.amount_lost,
            evidence_urls=list(submission.evidence_urls),
            created_at=now,
            updated_at=now,
        )
        await self.store.create_report(report)

        for ref in report.entity_refs:
            await self.trust.apply_delta(ref.entity_id, ref.entity_type, report_delta=1)
        await self._credit_user(user_id, scam_reports_submitted=1)

        logger.info(
            "adverse_report_recorded",
            report_id=report.id,
            entities=len(report.entity_refs),
            risk_level=report.risk_level,
        )
        return report

    async def list_reports(
        self,
        category: str | None = None,
        location: str | None = None,
        scam_type: str | None = None,
        risk_level: int | None = None,
        limit: int = 50,
    ) -> list[AdverseReport]:
        """Active scam wall reports matching the filters, newest first."""
        filters = ReportFilters(
            category=category,
            location=location,
            scam_type=scam_type,
            risk_level=risk_level,
            limit=limit,
        )
        return await self.store.list_reports(filters)

    async def verify_report(
        self, report_id: str, kind: str, comment: str | None = None
    ) -> ReportVerification:
        """Record an upvote, "happened to me" or dispute on a report.

        Raises:
            ValidationError: Unknown kind or report id.
            StorageError: If any store call fails.
        """
        if kind not in VERIFICATION_KINDS:
            raise ValidationError(
                f"Unknown verification kind '{kind}'. "
                f"Available: {', '.join(VERIFICATION_KINDS)}"
            )
        if await self.store.get_report(report_id) is None:
            raise ValidationError(f"Report {report_id} not found")

        user_id = await self.identity.current_user_id()
        verification = ReportVerification(
            id=new_id("verify"),
            report_id=report_id,
            user_id=user_id,
            kind=kind,
            comment=comment,
            created_at=utc_now(),
        )
        await self.store.add_report_verification(verification)

        counter = _COUNTER_FOR_KIND.get(kind)
        if counter:
            await self.store.increment_report_counters(report_id, counter)
        await self._credit_user(user_id, verifications_made=1)

        logger.info("report_verified", report_id=report_id, kind=kind)
        return verification

    # ------------------------------------------------------------------
    # Entity checker
    # ------------------------------------------------------------------

    async def record_verification_event(
        self, entity_id: str, entity_type: EntityType | str
    ) -> TrustRecord:
        """Count one successful verification of an entity."""
        return await self.trust.apply_delta(entity_id, entity_type, verification_delta=1)

    async def record_successful_transaction(
        self, entity_id: str, entity_type: EntityType | str
    ) -> TrustRecord:
        """Count one completed, non-fraudulent transaction with an entity."""
        return await self.trust.apply_delta(entity_id, entity_type, transaction_delta=1)

    async def check_entity(
        self, entity_id: str, entity_type: EntityType | str
    ) -> EntityCheck:
        """Look an entity up and assess its risk. Read-only.

        Raises:
            ValidationError: Unknown entity type.
            StorageError: If a store read fails. Callers must not treat
                this as a clean result.
        """
        kind = EntityType.parse(entity_type)
        normalized = normalize_entity_id(entity_id, kind)
        record = await self.store.get(normalized, kind)
        reports = await self.store.query_reports(
            [EntityRef(normalized, kind)], limit=self.report_lookup_limit
        )
        assessment = self.assessor.assess(normalized, kind, record, reports)
        logger.info(
            "entity_checked",
            entity_type=kind.value,
            risk_level=assessment.risk_level,
            reports=len(reports),
        )
        return EntityCheck(
            entity_id=normalized,
            entity_type=kind,
            trust_record=record,
            reports=reports,
            assessment=assessment,
        )

    # ------------------------------------------------------------------
    # Business directory
    # ------------------------------------------------------------------

    async def add_business_listing(
        self,
        business_name: str,
        category: str,
        services: Sequence[str] = (),
        verification_status: str = "pending",
        is_student_business: bool = False,
        is_sme: bool = False,
        social_links: SocialMediaLinks | dict | None = None,
        **details: str | None,
    ) -> BusinessListing:
        """Add a business to the directory.

        ``details`` accepts the optional descriptive fields of
        :class:`BusinessListing` (description, location, contact_phone...).

        Raises:
            ValidationError: Empty name, unknown status, unknown detail
                field or unrecognized social network.
        """
        if not business_name.strip():
            raise ValidationError("business_name must not be empty")
        if verification_status not in LISTING_STATUSES:
            raise ValidationError(
                f"Unknown verification status '{verification_status}'. "
                f"Available: {', '.join(LISTING_STATUSES)}"
            )
        allowed = {
            "description", "subcategory", "location", "contact_phone",
            "contact_email", "website", "verified_by_org",
        }
        unknown = sorted(set(details) - allowed)
        if unknown:
            raise ValidationError(f"Unknown listing fields: {', '.join(unknown)}")
        if not isinstance(social_links, SocialMediaLinks):
            social_links = SocialMediaLinks.from_dict(social_links)

        user_id = await self.identity.current_user_id()
        now = utc_now()
        listing = BusinessListing(
            id=new_id("business"),
            user_id=user_id,
            business_name=business_name.strip(),
            category=category,
            services=list(services),
            verification_status=verification_status,
            is_student_business=is_student_business,
            is_sme=is_sme,
            social_links=social_links,
            created_at=now,
            updated_at=now,
            **details,
        )
        await self.store.create_business(listing)
        return listing

    async def list_business_listings(
        self,
        category: str | None = None,
        location: str | None = None,
        verification_status: str | None = None,
        is_student_business: bool | None = None,
        verified_by_org: str | None = None,
        limit: int = 50,
    ) -> list[BusinessListing]:
        """Directory listings matching the filters, most trusted first."""
        filters = BusinessFilters(
            category=category,
            location=location,
            verification_status=verification_status,
            is_student_business=is_student_business,
            verified_by_org=verified_by_org,
            limit=limit,
        )
        return await self.store.list_businesses(filters)

    # ------------------------------------------------------------------
    # Gamification
    # ------------------------------------------------------------------

    async def get_user_gamification(self, user_id: str) -> UserGamification | None:
        return await self.store.get_gamification(user_id)

    async def _credit_user(self, user_id: str, **contributions: int) -> UserGamification:
        stats = await self.store.get_gamification(user_id)
        if stats is None:
            stats = UserGamification(user_id=user_id)
        apply_contribution(stats, **contributions)
        await self.store.put_gamification(stats)
        return stats
