"""Contributor rewards for scam reporting and verification.

Points, level and badges are recomputed from the cumulative counters on
every update, so they never drift from the counters they summarize.
"""

from __future__ import annotations

from .models import UserGamification, utc_now

POINTS_PER_REPORT = 10
POINTS_PER_VERIFICATION = 5
POINTS_PER_BUSINESS_VERIFIED = 15
POINTS_PER_FRAUD_CATCH = 20
POINTS_PER_LEVEL = 100

# (badge, counter attribute, threshold)
BADGE_RULES = [
    ("Fraud Hunter", "fraud_catches", 10),
    ("Business Verifier", "businesses_verified", 5),
    ("Community Guardian", "scam_reports_submitted", 20),
    ("Trusted Scout", "verifications_made", 50),
]


def compute_rewards(stats: UserGamification) -> tuple[int, int, list[str]]:
    """Return ``(points, level, badges)`` for the given counters."""
    points = (
        stats.scam_reports_submitted * POINTS_PER_REPORT
        + stats.verifications_made * POINTS_PER_VERIFICATION
        + stats.businesses_verified * POINTS_PER_BUSINESS_VERIFIED
        + stats.fraud_catches * POINTS_PER_FRAUD_CATCH
    )
    level = points // POINTS_PER_LEVEL + 1
    badges = [
        name for name, attr, threshold in BADGE_RULES
        if getattr(stats, attr) >= threshold
    ]
    return points, level, badges


def apply_contribution(
    stats: UserGamification,
    scam_reports_submitted: int = 0,
    verifications_made: int = 0,
    businesses_verified: int = 0,
    fraud_catches: int = 0,
) -> UserGamification:
    """Add contributions to ``stats`` in place and refresh its rewards."""
    stats.scam_reports_submitted += scam_reports_submitted
    stats.verifications_made += verifications_made
    stats.businesses_verified += businesses_verified
    stats.fraud_catches += fraud_catches
    stats.points, stats.level, stats.badges = compute_rewards(stats)
    stats.updated_at = utc_now()
    return stats
