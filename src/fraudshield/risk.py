"""Risk verdicts for tracked entities.

Combines an entity's trust record with the adverse reports that name it
and two string heuristics: typosquat detection for domains and a South
African number-format check for phones. The verdict level is the max of
every triggered rule, never a sum.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from .models import AdverseReport, EntityType, RiskAssessment, TrustRecord

TYPOSQUAT_MIN_SIMILARITY = 0.7

# Well-known South African domains that scammers imitate
DEFAULT_REFERENCE_DOMAINS = [
    "gov.za",
    "co.za",
    "org.za",
    "ac.za",
    "fnb.co.za",
    "standardbank.co.za",
    "absa.co.za",
    "capitecbank.co.za",
    "nedbank.co.za",
]

# +27 or a trunk 0, then a non-zero digit and 8 more
GENERAL_PHONE_PATTERN = re.compile(r"^(\+27|0)[1-9][0-9]{8}$")
MOBILE_PHONE_PATTERN = re.compile(r"^(\+27|0)[6-8][0-9]{8}$")
_WHITESPACE = re.compile(r"\s+")


def levenshtein(a: str, b: str) -> int:
    """Edit distance with unit-cost insert, delete and substitute."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, 1):
        current = [i]
        for j, cb in enumerate(b, 1):
            if ca == cb:
                current.append(previous[j - 1])
            else:
                current.append(
                    1 + min(previous[j - 1], previous[j], current[j - 1])
                )
        previous = current
    return previous[-1]


def string_similarity(a: str, b: str) -> float:
    """Normalized similarity in [0, 1]: ``(max_len - distance) / max_len``."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return (longest - levenshtein(a, b)) / longest


def is_typosquat(
    domain: str, reference_domains: Sequence[str] = DEFAULT_REFERENCE_DOMAINS
) -> bool:
    """True if ``domain`` is close to, but not equal to, a reference domain."""
    for reference in reference_domains:
        similarity = string_similarity(domain, reference)
        if TYPOSQUAT_MIN_SIMILARITY < similarity < 1.0:
            return True
    return False


def is_valid_regional_phone(phone: str) -> bool:
    """Check a number against the general and mobile national formats."""
    compact = _WHITESPACE.sub("", phone)
    return bool(
        GENERAL_PHONE_PATTERN.match(compact) or MOBILE_PHONE_PATTERN.match(compact)
    )


class RiskAssessor:
    """Produces a RiskAssessment from a record, its reports and heuristics.

    Stateless: the same inputs always yield the same verdict.
    """

    def __init__(
        self, reference_domains: Sequence[str] = DEFAULT_REFERENCE_DOMAINS
    ) -> None:
        self.reference_domains = tuple(reference_domains)

    def assess(
        self,
        entity_id: str,
        entity_type: EntityType | str,
        trust_record: TrustRecord | None,
        reports: Sequence[AdverseReport],
    ) -> RiskAssessment:
        """Assess one entity.

        Args:
            entity_id: Normalized entity identifier.
            entity_type: One of phone, email, domain, company.
            trust_record: The entity's ledger entry, or None if untracked.
            reports: Adverse reports referencing the entity.

        Returns:
            RiskAssessment with level 1-5, factors and recommendations.

        Raises:
            ValidationError: If entity_type is not a known entity type.
        """
        kind = EntityType.parse(entity_type)
        level = 1
        factors: list[str] = []
        recommendations: list[str] = []

        score = trust_record.score if trust_record is not None else None
        if score is None or score < 30:
            level = max(level, 4)
            factors.append("Low or no trust score")
            recommendations.append("Proceed with extreme caution")
        elif score < 50:
            level = max(level, 3)
            factors.append("Below-average trust score")
            recommendations.append("Verify through additional channels")

        if reports:
            level = max(level, 4)
            factors.append(f"{len(reports)} adverse report(s) found")
            recommendations.append("Avoid transaction - multiple fraud reports")

        if kind is EntityType.DOMAIN and is_typosquat(entity_id, self.reference_domains):
            level = 5
            factors.append("Potential typosquatting domain")
            recommendations.append("Verify official domain spelling")

        if kind is EntityType.PHONE and not is_valid_regional_phone(entity_id):
            level = max(level, 3)
            factors.append("Invalid or suspicious phone format")
            recommendations.append("Verify phone via official sources")

        if (
            level == 1
            and trust_record is not None
            and trust_record.score > 70
            and trust_record.verification_count > 2
        ):
            recommendations.append(
                "Entity appears trustworthy based on community data"
            )

        return RiskAssessment(
            risk_level=level,
            risk_factors=factors,
            recommendations=recommendations,
        )
