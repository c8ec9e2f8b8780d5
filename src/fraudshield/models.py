"""Data containers for the community trust ledger.

Trust records, adverse (scam) reports, risk assessments, business
listings and reporter gamification stats. Every container serializes to
a plain JSON-compatible dict and back so any store can persist it.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from .errors import ValidationError

NEW_ENTITY_SCORE = 50


def utc_now() -> str:
    """Current time as an ISO-8601 UTC string."""
    return datetime.now(timezone.utc).isoformat()


def new_id(prefix: str) -> str:
    """Generate a prefixed random identifier (e.g. ``scam_3f2a9c...``)."""
    return f"{prefix}_{uuid.uuid4().hex[:16]}"


class EntityType(str, Enum):
    """Kinds of entity tracked by the reputation ledger."""

    PHONE = "phone"
    EMAIL = "email"
    DOMAIN = "domain"
    COMPANY = "company"

    @classmethod
    def parse(cls, value: EntityType | str) -> EntityType:
        """Coerce a string to an EntityType.

        Raises:
            ValidationError: If the value is outside the closed set.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            allowed = ", ".join(t.value for t in cls)
            raise ValidationError(
                f"Unknown entity type '{value}'. Expected one of: {allowed}"
            ) from None


class Badge(str, Enum):
    """Coarse reputation label derived from the trust score."""

    VERIFIED = "verified"
    UNDER_WATCH = "under_watch"
    FLAGGED = "flagged"
    UNVERIFIED = "unverified"


SCAM_TYPES = ("fake_pop", "ghost_business", "whatsapp_scam", "fake_document", "other")
REPORT_CATEGORIES = ("payment", "document", "business", "communication")
REPORT_STATUSES = ("active", "resolved", "disputed")
VERIFICATION_KINDS = ("upvote", "happened_to_me", "dispute")
LISTING_STATUSES = ("verified", "pending", "rejected")

_URL_SCHEME = re.compile(r"^[a-z][a-z0-9+.-]*://")
_WHITESPACE = re.compile(r"\s+")


def normalize_entity_id(entity_id: str, entity_type: EntityType | str) -> str:
    """Normalize an entity identifier so lookups and writes agree.

    Phones lose all whitespace, emails are lower-cased, domains are
    lower-cased and stripped of scheme, ``www.``, path and trailing dot,
    company names have their whitespace collapsed.
    """
    kind = EntityType.parse(entity_type)
    value = (entity_id or "").strip()
    if kind is EntityType.PHONE:
        return _WHITESPACE.sub("", value)
    if kind is EntityType.EMAIL:
        return value.lower()
    if kind is EntityType.DOMAIN:
        value = _URL_SCHEME.sub("", value.lower())
        value = value.split("/", 1)[0]
        if value.startswith("www."):
            value = value[4:]
        return value.rstrip(".")
    return _WHITESPACE.sub(" ", value)


@dataclass(frozen=True)
class EntityRef:
    """Reference from a report to one tracked entity."""

    entity_id: str
    entity_type: EntityType

    def normalized(self) -> EntityRef:
        kind = EntityType.parse(self.entity_type)
        return EntityRef(normalize_entity_id(self.entity_id, kind), kind)

    def to_dict(self) -> dict[str, str]:
        return {"entity_id": self.entity_id, "entity_type": self.entity_type.value}

    @classmethod
    def from_dict(cls, data: dict) -> EntityRef:
        return cls(
            entity_id=data["entity_id"],
            entity_type=EntityType.parse(data["entity_type"]),
        )


@dataclass
class TrustRecord:
    """Persisted reputation entry for one entity."""

    entity_id: str
    entity_type: EntityType
    score: int = NEW_ENTITY_SCORE
    verification_count: int = 0
    report_count: int = 0
    successful_transaction_count: int = 0
    badge: Badge = Badge.UNVERIFIED
    last_updated: str = ""

    @property
    def key(self) -> tuple[str, str]:
        return (self.entity_type.value, self.entity_id)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dict."""
        return {
            "entity_id": self.entity_id,
            "entity_type": self.entity_type.value,
            "score": self.score,
            "verification_count": self.verification_count,
            "report_count": self.report_count,
            "successful_transaction_count": self.successful_transaction_count,
            "badge": self.badge.value,
            "last_updated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: dict) -> TrustRecord:
        """Deserialize from dict."""
        return cls(
            entity_id=data["entity_id"],
            entity_type=EntityType.parse(data["entity_type"]),
            score=int(data.get("score", NEW_ENTITY_SCORE)),
            verification_count=int(data.get("verification_count", 0)),
            report_count=int(data.get("report_count", 0)),
            successful_transaction_count=int(
                data.get("successful_transaction_count", 0)
            ),
            badge=Badge(data.get("badge", Badge.UNVERIFIED.value)),
            last_updated=data.get("last_updated", ""),
        )


@dataclass
class ReportSubmission:
    """Reporter-supplied fields of a new adverse report."""

    title: str
    description: str
    scam_type: str
    category: str
    risk_level: int
    entity_refs: list[EntityRef] = field(default_factory=list)
    location: str | None = None
    amount_lost: float | None = None
    evidence_urls: list[str] = field(default_factory=list)

    def validate(self) -> None:
        """Reject malformed submissions.

        Raises:
            ValidationError: On an out-of-range risk level, unknown scam
                type or category, or more than one reference per entity type.
        """
        if isinstance(self.risk_level, bool) or not isinstance(self.risk_level, int):
            raise ValidationError("risk_level must be an integer between 1 and 5")
        if not 1 <= self.risk_level <= 5:
            raise ValidationError(
                f"risk_level must be between 1 and 5, got {self.risk_level}"
            )
        if self.scam_type not in SCAM_TYPES:
            raise ValidationError(
                f"Unknown scam type '{self.scam_type}'. "
                f"Available: {', '.join(SCAM_TYPES)}"
            )
        if self.category not in REPORT_CATEGORIES:
            raise ValidationError(
                f"Unknown category '{self.category}'. "
                f"Available: {', '.join(REPORT_CATEGORIES)}"
            )
        seen: set[EntityType] = set()
        for ref in self.entity_refs:
            kind = EntityType.parse(ref.entity_type)
            if kind in seen:
                raise ValidationError(
                    f"A report may reference at most one {kind.value}"
                )
            seen.add(kind)


@dataclass
class AdverseReport:
    """A community-submitted scam report."""

    id: str
    user_id: str
    title: str
    description: str
    scam_type: str
    category: str
    risk_level: int
    entity_refs: list[EntityRef] = field(default_factory=list)
    location: str | None = None
    amount_lost: float | None = None
    evidence_urls: list[str] = field(default_factory=list)
    upvotes: int = 0
    corroborations: int = 0
    status: str = "active"
    created_at: str = ""
    updated_at: str = ""

    def references(self, ref: EntityRef) -> bool:
        """True if this report names the given entity."""
        return ref in self.entity_refs

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dict."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "description": self.description,
            "scam_type": self.scam_type,
            "category": self.category,
            "risk_level": self.risk_level,
            "entity_refs": [ref.to_dict() for ref in self.entity_refs],
            "location": self.location,
            "amount_lost": self.amount_lost,
            "evidence_urls": list(self.evidence_urls),
            "upvotes": self.upvotes,
            "corroborations": self.corroborations,
            "status": self.status,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> AdverseReport:
        """Deserialize from dict."""
        return cls(
            id=data["id"],
            user_id=data.get("user_id", ""),
            title=data.get("title", ""),
            description=data.get("description", ""),
            scam_type=data.get("scam_type", "other"),
            category=data.get("category", ""),
            risk_level=int(data.get("risk_level", 1)),
            entity_refs=[EntityRef.from_dict(r) for r in data.get("entity_refs", [])],
            location=data.get("location"),
            amount_lost=data.get("amount_lost"),
            evidence_urls=list(data.get("evidence_urls", [])),
            upvotes=int(data.get("upvotes", 0)),
            corroborations=int(data.get("corroborations", 0)),
            status=data.get("status", "active"),
            created_at=data.get("created_at", ""),
            updated_at=data.get("updated_at", ""),
        )


@dataclass
class ReportVerification:
    """One user's reaction to a scam report."""

    id: str
    report_id: str
    user_id: str
    kind: str
    comment: str | None = None
    created_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "report_id": self.report_id,
            "user_id": self.user_id,
            "kind": self.kind,
            "comment": self.comment,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> ReportVerification:
        return cls(
            id=data["id"],
            report_id=data["report_id"],
            user_id=data.get("user_id", ""),
            kind=data["kind"],
            comment=data.get("comment"),
            created_at=data.get("created_at", ""),
        )


@dataclass
class RiskAssessment:
    """Point-in-time risk verdict for one entity. Never persisted."""

    risk_level: int = 1
    risk_factors: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "risk_level": self.risk_level,
            "risk_factors": list(self.risk_factors),
            "recommendations": list(self.recommendations),
        }


@dataclass
class EntityCheck:
    """Result of looking an entity up: ledger entry, reports and verdict."""

    entity_id: str
    entity_type: EntityType
    trust_record: TrustRecord | None
    reports: list[AdverseReport]
    assessment: RiskAssessment

    def to_dict(self) -> dict[str, Any]:
        return {
            "entity_id": self.entity_id,
            "entity_type": self.entity_type.value,
            "trust_record": self.trust_record.to_dict() if self.trust_record else None,
            "reports": [r.to_dict() for r in self.reports],
            "assessment": self.assessment.to_dict(),
        }


@dataclass
class SocialMediaLinks:
    """Recognized social profiles for a business listing."""

    facebook: str | None = None
    instagram: str | None = None
    twitter: str | None = None
    linkedin: str | None = None
    tiktok: str | None = None
    whatsapp: str | None = None

    def to_dict(self) -> dict[str, str]:
        return {k: v for k, v in self.__dict__.items() if v}

    @classmethod
    def from_dict(cls, data: dict | None) -> SocialMediaLinks:
        """Build from a dict, rejecting unrecognized networks.

        Raises:
            ValidationError: If a key is not a recognized network.
        """
        data = data or {}
        unknown = sorted(set(data) - set(cls.__dataclass_fields__))
        if unknown:
            raise ValidationError(
                f"Unrecognized social networks: {', '.join(unknown)}"
            )
        return cls(**{k: v for k, v in data.items() if v})


@dataclass
class BusinessListing:
    """Entry in the community business directory."""

    id: str
    user_id: str
    business_name: str
    category: str
    services: list[str] = field(default_factory=list)
    verification_status: str = "pending"
    trust_score: int = NEW_ENTITY_SCORE
    review_count: int = 0
    average_rating: float = 0.0
    is_student_business: bool = False
    is_sme: bool = False
    description: str | None = None
    subcategory: str | None = None
    location: str | None = None
    contact_phone: str | None = None
    contact_email: str | None = None
    website: str | None = None
    verified_by_org: str | None = None
    social_links: SocialMediaLinks = field(default_factory=SocialMediaLinks)
    created_at: str = ""
    updated_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.__dict__)
        data["services"] = list(self.services)
        data["social_links"] = self.social_links.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> BusinessListing:
        values = dict(data)
        values["social_links"] = SocialMediaLinks.from_dict(values.get("social_links"))
        values["services"] = list(values.get("services", []))
        return cls(**values)


@dataclass
class UserGamification:
    """Per-user contribution counters and the rewards derived from them."""

    user_id: str
    scam_reports_submitted: int = 0
    verifications_made: int = 0
    businesses_verified: int = 0
    fraud_catches: int = 0
    points: int = 0
    level: int = 1
    badges: list[str] = field(default_factory=list)
    updated_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.__dict__)
        data["badges"] = list(self.badges)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> UserGamification:
        values = dict(data)
        values["badges"] = list(values.get("badges", []))
        return cls(**values)
