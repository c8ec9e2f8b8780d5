"""Tests for fraudshield.community.CommunityService."""

from __future__ import annotations

import pytest

from fraudshield.community import CommunityService
from fraudshield.errors import StorageError, ValidationError
from fraudshield.identity import StaticIdentity
from fraudshield.models import Badge, EntityRef, EntityType
from fraudshield.risk import RiskAssessor
from fraudshield.store import InMemoryStore


class _BrokenReadStore(InMemoryStore):
    """Store whose report query always fails."""

    async def query_reports(self, entity_refs, limit=10):
        raise StorageError("connection reset")


# ---------------------------------------------------------------------------
# Scam wall
# ---------------------------------------------------------------------------


class TestRecordAdverseReport:
    """Tests for CommunityService.record_adverse_report()."""

    @pytest.mark.asyncio
    async def test_report_against_new_email(
        self, service: CommunityService, store: InMemoryStore, make_submission
    ) -> None:
        report = await service.record_adverse_report(make_submission())

        assert report.id.startswith("scam_")
        assert report.user_id == "alice"
        assert report.status == "active"
        assert report.upvotes == 0
        assert report.created_at

        record = await store.get("scam@fake.co", EntityType.EMAIL)
        assert record is not None
        assert record.report_count == 1
        assert record.score == 35
        assert record.badge == Badge.UNDER_WATCH

    @pytest.mark.asyncio
    async def test_end_to_end_check_after_report(
        self, service: CommunityService, make_submission
    ) -> None:
        before = await service.check_entity("scam@fake.co", "email")
        assert before.trust_record is None

        await service.record_adverse_report(make_submission())
        check = await service.check_entity("scam@fake.co", "email")

        assert check.assessment.risk_level >= 4
        assert "1 adverse report(s) found" in check.assessment.risk_factors
        assert check.trust_record.badge in (Badge.UNDER_WATCH, Badge.FLAGGED)
        assert len(check.reports) == 1

    @pytest.mark.asyncio
    async def test_every_referenced_entity_penalized(
        self, service: CommunityService, store: InMemoryStore, make_submission
    ) -> None:
        refs = [
            EntityRef("082 123 4567", EntityType.PHONE),
            EntityRef("Scam@Fake.co", EntityType.EMAIL),
            EntityRef("https://www.Fake-Shop.co.za/pay", EntityType.DOMAIN),
        ]
        report = await service.record_adverse_report(make_submission(entity_refs=refs))

        assert [r.entity_id for r in report.entity_refs] == [
            "0821234567",
            "scam@fake.co",
            "fake-shop.co.za",
        ]
        assert (await store.get("0821234567", EntityType.PHONE)).report_count == 1
        assert (await store.get("scam@fake.co", EntityType.EMAIL)).report_count == 1
        assert (await store.get("fake-shop.co.za", EntityType.DOMAIN)).report_count == 1

    @pytest.mark.asyncio
    async def test_three_reports_flag_entity(
        self, service: CommunityService, store: InMemoryStore, make_submission
    ) -> None:
        for _ in range(3):
            await service.record_adverse_report(make_submission())
        record = await store.get("scam@fake.co", EntityType.EMAIL)
        assert record.report_count == 3
        assert record.score == 10
        assert record.badge == Badge.FLAGGED

    @pytest.mark.asyncio
    async def test_report_without_entities(
        self, service: CommunityService, store: InMemoryStore, make_submission
    ) -> None:
        report = await service.record_adverse_report(make_submission(entity_refs=[]))
        assert await store.get_report(report.id) is not None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides",
        [
            {"risk_level": 0},
            {"risk_level": 6},
            {"scam_type": "pyramid"},
            {"category": "crypto"},
            {
                "entity_refs": [
                    EntityRef("a@b.co", EntityType.EMAIL),
                    EntityRef("c@d.co", EntityType.EMAIL),
                ]
            },
        ],
    )
    async def test_invalid_submission_writes_nothing(
        self, service: CommunityService, store: InMemoryStore, make_submission, overrides
    ) -> None:
        with pytest.raises(ValidationError):
            await service.record_adverse_report(make_submission(**overrides))
        assert await service.list_reports() == []
        assert await store.get("scam@fake.co", EntityType.EMAIL) is None
        assert await store.get_gamification("alice") is None

    @pytest.mark.asyncio
    async def test_reporter_credited(
        self, service: CommunityService, make_submission
    ) -> None:
        await service.record_adverse_report(make_submission())
        await service.record_adverse_report(make_submission())
        stats = await service.get_user_gamification("alice")
        assert stats.scam_reports_submitted == 2
        assert stats.points == 20
        assert stats.level == 1


class TestListReports:
    """Tests for CommunityService.list_reports()."""

    @pytest.mark.asyncio
    async def test_filters_and_order(
        self, service: CommunityService, store: InMemoryStore, make_report
    ) -> None:
        await store.create_report(make_report(id="old", location="Durban"))
        await store.create_report(make_report(id="mid", category="payment"))
        await store.create_report(make_report(id="new", location="Durban"))
        await store.create_report(make_report(id="closed", status="resolved"))

        assert [r.id for r in await service.list_reports()] == ["new", "mid", "old"]
        assert [r.id for r in await service.list_reports(location="Durban")] == ["new", "old"]
        assert [r.id for r in await service.list_reports(category="payment")] == ["mid"]
        assert [r.id for r in await service.list_reports(limit=1)] == ["new"]
        assert await service.list_reports(risk_level=1) == []


class TestVerifyReport:
    """Tests for CommunityService.verify_report()."""

    @pytest.mark.asyncio
    async def test_upvote_increments_upvotes(
        self, service: CommunityService, store: InMemoryStore, make_submission
    ) -> None:
        report = await service.record_adverse_report(make_submission())
        verification = await service.verify_report(report.id, "upvote", "Same number called me")

        assert verification.report_id == report.id
        assert verification.user_id == "alice"
        stored = await store.get_report(report.id)
        assert stored.upvotes == 1
        assert stored.corroborations == 0
        assert len(await store.list_report_verifications(report.id)) == 1

    @pytest.mark.asyncio
    async def test_happened_to_me_increments_corroborations(
        self, service: CommunityService, store: InMemoryStore, make_submission
    ) -> None:
        report = await service.record_adverse_report(make_submission())
        await service.verify_report(report.id, "happened_to_me")
        stored = await store.get_report(report.id)
        assert stored.corroborations == 1
        assert stored.upvotes == 0

    @pytest.mark.asyncio
    async def test_dispute_only_recorded(
        self, service: CommunityService, store: InMemoryStore, make_submission
    ) -> None:
        report = await service.record_adverse_report(make_submission())
        await service.verify_report(report.id, "dispute", "This is my real business")
        stored = await store.get_report(report.id)
        assert stored.upvotes == 0
        assert stored.corroborations == 0
        verifications = await store.list_report_verifications(report.id)
        assert [v.kind for v in verifications] == ["dispute"]

    @pytest.mark.asyncio
    async def test_verifier_credited(
        self, service: CommunityService, make_submission
    ) -> None:
        report = await service.record_adverse_report(make_submission())
        await service.verify_report(report.id, "upvote")
        stats = await service.get_user_gamification("alice")
        assert stats.verifications_made == 1
        assert stats.points == 15

    @pytest.mark.asyncio
    async def test_unknown_kind(self, service: CommunityService, make_submission) -> None:
        report = await service.record_adverse_report(make_submission())
        with pytest.raises(ValidationError, match="Unknown verification kind"):
            await service.verify_report(report.id, "like")

    @pytest.mark.asyncio
    async def test_missing_report(self, service: CommunityService) -> None:
        with pytest.raises(ValidationError, match="not found"):
            await service.verify_report("scam_missing", "upvote")


# ---------------------------------------------------------------------------
# Entity checker
# ---------------------------------------------------------------------------


class TestCheckEntity:
    """Tests for CommunityService.check_entity()."""

    @pytest.mark.asyncio
    async def test_unknown_entity(self, service: CommunityService) -> None:
        check = await service.check_entity("0821234567", "phone")
        assert check.trust_record is None
        assert check.reports == []
        assert check.assessment.risk_level == 4

    @pytest.mark.asyncio
    async def test_check_is_read_only(
        self, service: CommunityService, store: InMemoryStore
    ) -> None:
        await service.check_entity("0821234567", "phone")
        assert await store.get("0821234567", EntityType.PHONE) is None

    @pytest.mark.asyncio
    async def test_lookup_normalizes_identifier(
        self, service: CommunityService, make_submission
    ) -> None:
        await service.record_adverse_report(make_submission())
        check = await service.check_entity("  SCAM@Fake.CO ", "email")
        assert check.entity_id == "scam@fake.co"
        assert len(check.reports) == 1

    @pytest.mark.asyncio
    async def test_typosquat_domain_from_url(self, service: CommunityService) -> None:
        check = await service.check_entity("https://www.FNB-co.za/login", "domain")
        assert check.entity_id == "fnb-co.za"
        assert check.assessment.risk_level == 5
        assert "Potential typosquatting domain" in check.assessment.risk_factors

    @pytest.mark.asyncio
    async def test_trusted_entity(self, service: CommunityService) -> None:
        for _ in range(4):
            await service.record_verification_event("Acme Trading", "company")
        await service.record_successful_transaction("Acme  Trading", "company")

        check = await service.check_entity("acme trading", "company")
        assert check.trust_record is None  # company names keep their case

        check = await service.check_entity("Acme Trading", "company")
        assert check.trust_record.score == 72
        assert check.trust_record.badge == Badge.VERIFIED
        assert check.assessment.risk_level == 1
        assert check.assessment.recommendations == [
            "Entity appears trustworthy based on community data"
        ]

    @pytest.mark.asyncio
    async def test_resolved_reports_ignored(
        self, service: CommunityService, store: InMemoryStore, make_report
    ) -> None:
        await store.create_report(make_report(status="resolved"))
        check = await service.check_entity("0821234567", "phone")
        assert check.reports == []

    @pytest.mark.asyncio
    async def test_report_lookup_limit(self, store: InMemoryStore, make_report) -> None:
        for _ in range(5):
            await store.create_report(make_report())
        service = CommunityService(
            store=store, identity=StaticIdentity("bob"), report_lookup_limit=2
        )
        check = await service.check_entity("0821234567", "phone")
        assert len(check.reports) == 2
        assert "2 adverse report(s) found" in check.assessment.risk_factors

    @pytest.mark.asyncio
    async def test_custom_assessor(self, store: InMemoryStore) -> None:
        service = CommunityService(
            store=store,
            identity=StaticIdentity("bob"),
            assessor=RiskAssessor(reference_domains=["mybank.co.za"]),
        )
        check = await service.check_entity("mybamk.co.za", "domain")
        assert check.assessment.risk_level == 5

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self) -> None:
        service = CommunityService(
            store=_BrokenReadStore(), identity=StaticIdentity("bob")
        )
        with pytest.raises(StorageError, match="connection reset"):
            await service.check_entity("0821234567", "phone")

    @pytest.mark.asyncio
    async def test_unknown_type(self, service: CommunityService) -> None:
        with pytest.raises(ValidationError):
            await service.check_entity("someone", "username")


# ---------------------------------------------------------------------------
# Business directory
# ---------------------------------------------------------------------------


class TestBusinessDirectory:
    """Tests for add_business_listing() and list_business_listings()."""

    @pytest.mark.asyncio
    async def test_add_listing(self, service: CommunityService) -> None:
        listing = await service.add_business_listing(
            "  Thandi's Braids ",
            "beauty",
            services=["braids", "wash"],
            is_student_business=True,
            location="Pretoria",
            social_links={"instagram": "@thandisbraids"},
        )
        assert listing.id.startswith("business_")
        assert listing.business_name == "Thandi's Braids"
        assert listing.user_id == "alice"
        assert listing.verification_status == "pending"
        assert listing.trust_score == 50
        assert listing.social_links.instagram == "@thandisbraids"

    @pytest.mark.asyncio
    async def test_filters(self, service: CommunityService) -> None:
        await service.add_business_listing("Campus Prints", "printing", is_student_business=True)
        await service.add_business_listing("Bolt Plumbing", "trades", is_sme=True, location="Cape Town")
        await service.add_business_listing(
            "Varsity Eats", "food", is_student_business=True,
            verification_status="verified", verified_by_org="UP Enactus",
        )

        students = await service.list_business_listings(is_student_business=True)
        assert {b.business_name for b in students} == {"Campus Prints", "Varsity Eats"}
        verified = await service.list_business_listings(verification_status="verified")
        assert [b.business_name for b in verified] == ["Varsity Eats"]
        by_org = await service.list_business_listings(verified_by_org="UP Enactus")
        assert len(by_org) == 1
        in_cpt = await service.list_business_listings(location="Cape Town")
        assert [b.business_name for b in in_cpt] == ["Bolt Plumbing"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"business_name": "   ", "category": "food"},
            {"business_name": "X", "category": "food", "verification_status": "approved"},
            {"business_name": "X", "category": "food", "owner": "me"},
            {"business_name": "X", "category": "food", "social_links": {"myspace": "x"}},
        ],
    )
    async def test_invalid_listing(self, service: CommunityService, kwargs: dict) -> None:
        with pytest.raises(ValidationError):
            await service.add_business_listing(**kwargs)
        assert await service.list_business_listings() == []


class TestGamificationLookup:
    """Tests for CommunityService.get_user_gamification()."""

    @pytest.mark.asyncio
    async def test_unknown_user(self, service: CommunityService) -> None:
        assert await service.get_user_gamification("nobody") is None
