"""Shared pytest fixtures for fraudshield test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from fraudshield.community import CommunityService
from fraudshield.identity import StaticIdentity
from fraudshield.models import (
    AdverseReport,
    EntityRef,
    EntityType,
    ReportSubmission,
    TrustRecord,
)
from fraudshield.store import InMemoryStore


@pytest.fixture()
def store() -> InMemoryStore:
    """Fresh in-memory store."""
    return InMemoryStore()


@pytest.fixture()
def service(store: InMemoryStore) -> CommunityService:
    """CommunityService acting as user 'alice' over the in-memory store."""
    return CommunityService(store=store, identity=StaticIdentity("alice"))


@pytest.fixture()
def make_submission() -> callable:
    """Factory fixture that returns ReportSubmission objects."""

    def _factory(**overrides: Any) -> ReportSubmission:
        defaults: dict[str, Any] = {
            "title": "Fake proof of payment",
            "description": "Buyer sent a doctored EFT notification and collected stock.",
            "scam_type": "fake_pop",
            "category": "payment",
            "risk_level": 5,
            "entity_refs": [EntityRef("scam@fake.co", EntityType.EMAIL)],
            "location": "Johannesburg",
        }
        defaults.update(overrides)
        return ReportSubmission(**defaults)

    return _factory


@pytest.fixture()
def make_record() -> callable:
    """Factory fixture that returns TrustRecord objects."""

    def _factory(**overrides: Any) -> TrustRecord:
        defaults: dict[str, Any] = {
            "entity_id": "info@acme.co.za",
            "entity_type": EntityType.EMAIL,
        }
        defaults.update(overrides)
        return TrustRecord(**defaults)

    return _factory


@pytest.fixture()
def make_report() -> callable:
    """Factory fixture that returns stored-shape AdverseReport objects."""
    counter = {"n": 0}

    def _factory(**overrides: Any) -> AdverseReport:
        counter["n"] += 1
        defaults: dict[str, Any] = {
            "id": f"scam_{counter['n']}",
            "user_id": "bob",
            "title": "WhatsApp deposit scam",
            "description": "Asked for a deposit on WhatsApp then vanished.",
            "scam_type": "whatsapp_scam",
            "category": "communication",
            "risk_level": 4,
            "entity_refs": [EntityRef("0821234567", EntityType.PHONE)],
            "created_at": f"2025-06-0{counter['n']}T10:00:00+00:00",
        }
        defaults.update(overrides)
        return AdverseReport(**defaults)

    return _factory


@pytest.fixture()
def store_path(tmp_path: Path) -> Path:
    """Path for a JSON store inside a temporary directory."""
    return tmp_path / "data" / "store.json"
