"""Community trust scores for phones, emails, domains and companies.

The score is a pure function of three cumulative counters, so replaying
the same counters always lands on the same score and badge:

    score = 50
          + min(verifications * 5, 25)
          + min(successful_transactions * 2, 20)
          - min(reports * 15, 40)

clamped to [0, 100].
"""

from __future__ import annotations

import structlog

from .errors import ValidationError
from .models import (
    Badge,
    EntityType,
    NEW_ENTITY_SCORE,
    TrustRecord,
    normalize_entity_id,
    utc_now,
)
from .store.interfaces import CommunityStore

logger = structlog.get_logger()

VERIFICATION_WEIGHT = 5
VERIFICATION_CAP = 25
TRANSACTION_WEIGHT = 2
TRANSACTION_CAP = 20
REPORT_PENALTY = 15
REPORT_PENALTY_CAP = 40


def compute_score(verifications: int, reports: int, transactions: int) -> int:
    """Compute the trust score from cumulative counters.

    Args:
        verifications: Total verification events for the entity.
        reports: Total adverse reports naming the entity.
        transactions: Total successful transactions.

    Returns:
        Integer score clamped to [0, 100].
    """
    score = NEW_ENTITY_SCORE
    score += min(verifications * VERIFICATION_WEIGHT, VERIFICATION_CAP)
    score += min(transactions * TRANSACTION_WEIGHT, TRANSACTION_CAP)
    score -= min(reports * REPORT_PENALTY, REPORT_PENALTY_CAP)
    return max(0, min(100, score))


def derive_badge(score: int, report_count: int, verification_count: int) -> Badge:
    """Map a score and report history to a badge (first match wins)."""
    if report_count > 2 or score < 20:
        return Badge.FLAGGED
    if report_count > 0 or score < 40:
        return Badge.UNDER_WATCH
    if score > 70 and verification_count > 2:
        return Badge.VERIFIED
    return Badge.UNVERIFIED


def _check_delta(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")


class TrustScoreEngine:
    """Reads and updates trust records through an injected store.

    Each mutation is one read plus one write with no locking; two
    concurrent writers on the same entity race and the last write wins.
    Store errors propagate unchanged.
    """

    def __init__(self, store: CommunityStore) -> None:
        self.store = store

    async def get(
        self, entity_id: str, entity_type: EntityType | str
    ) -> TrustRecord | None:
        """Return the stored record, or None if the entity is untracked."""
        kind = EntityType.parse(entity_type)
        return await self.store.get(normalize_entity_id(entity_id, kind), kind)

    async def get_or_create(
        self, entity_id: str, entity_type: EntityType | str
    ) -> TrustRecord:
        """Return the stored record or a fresh, unsaved one."""
        kind = EntityType.parse(entity_type)
        normalized = normalize_entity_id(entity_id, kind)
        record = await self.store.get(normalized, kind)
        if record is None:
            record = TrustRecord(entity_id=normalized, entity_type=kind)
        return record

    async def apply_delta(
        self,
        entity_id: str,
        entity_type: EntityType | str,
        verification_delta: int = 0,
        report_delta: int = 0,
        transaction_delta: int = 0,
    ) -> TrustRecord:
        """Increment counters, recompute score and badge, persist.

        Raises:
            ValidationError: If any delta is negative or not an integer.
            StorageError: If the store read or write fails.
        """
        _check_delta("verification_delta", verification_delta)
        _check_delta("report_delta", report_delta)
        _check_delta("transaction_delta", transaction_delta)

        record = await self.get_or_create(entity_id, entity_type)
        record.verification_count += verification_delta
        record.report_count += report_delta
        record.successful_transaction_count += transaction_delta
        record.score = compute_score(
            record.verification_count,
            record.report_count,
            record.successful_transaction_count,
        )
        record.badge = derive_badge(
            record.score, record.report_count, record.verification_count
        )
        record.last_updated = utc_now()

        await self.store.put(record)
        logger.info(
            "trust_record_updated",
            entity_id=record.entity_id,
            entity_type=record.entity_type.value,
            score=record.score,
            badge=record.badge.value,
        )
        return record
