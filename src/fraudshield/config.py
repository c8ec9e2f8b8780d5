"""Configuration and environment management."""

import os
from dataclasses import dataclass, field
from dotenv import load_dotenv

from .risk import DEFAULT_REFERENCE_DOMAINS

load_dotenv()

DEFAULT_PAYMENT_PROVIDERS = ["stitch", "ozow", "payshap"]
DEFAULT_REGISTRY_PROVIDERS = ["cipc"]

KNOWN_PAYMENT_PROVIDERS = frozenset(DEFAULT_PAYMENT_PROVIDERS)
KNOWN_REGISTRY_PROVIDERS = frozenset(DEFAULT_REGISTRY_PROVIDERS)


@dataclass
class Config:
    """Application configuration loaded from environment."""

    # Storage
    store_path: str = field(
        default_factory=lambda: os.getenv(
            "FRAUDSHIELD_STORE", ".fraudshield/store.json"
        )
    )
    user_id: str = field(
        default_factory=lambda: os.getenv("FRAUDSHIELD_USER", "local-user")
    )

    # Risk heuristics
    reference_domains: list[str] = field(
        default_factory=lambda: _parse_list(
            "REFERENCE_DOMAINS", DEFAULT_REFERENCE_DOMAINS
        )
    )
    report_lookup_limit: int = field(
        default_factory=lambda: int(os.getenv("REPORT_LOOKUP_LIMIT", "10"))
    )

    # Third-party providers, tried in the listed order
    payment_providers: list[str] = field(
        default_factory=lambda: _parse_list(
            "PAYMENT_PROVIDERS", DEFAULT_PAYMENT_PROVIDERS
        )
    )
    registry_providers: list[str] = field(
        default_factory=lambda: _parse_list(
            "REGISTRY_PROVIDERS", DEFAULT_REGISTRY_PROVIDERS
        )
    )
    stitch_api_key: str = field(
        default_factory=lambda: os.getenv("STITCH_API_KEY", "{{stitch_api_key}}")
    )
    ozow_api_key: str = field(
        default_factory=lambda: os.getenv("OZOW_API_KEY", "{{ozow_api_key}}")
    )
    ozow_site_code: str = field(
        default_factory=lambda: os.getenv("OZOW_SITE_CODE", "{{ozow_site_code}}")
    )
    payshap_api_key: str = field(
        default_factory=lambda: os.getenv("PAYSHAP_API_KEY", "{{payshap_api_key}}")
    )
    cipc_api_key: str = field(
        default_factory=lambda: os.getenv("CIPC_API_KEY", "{{cipc_api_key}}")
    )
    http_timeout: float = field(
        default_factory=lambda: float(os.getenv("HTTP_TIMEOUT", "15.0"))
    )

    # Logging
    log_level: str = field(
        default_factory=lambda: os.getenv("LOG_LEVEL", "WARNING").upper()
    )

    def credentials(self) -> dict[str, dict[str, str]]:
        """Provider name -> keyword credentials for its constructor."""
        return {
            "stitch": {"api_key": self.stitch_api_key},
            "ozow": {"api_key": self.ozow_api_key, "site_code": self.ozow_site_code},
            "payshap": {"api_key": self.payshap_api_key},
            "cipc": {"api_key": self.cipc_api_key},
        }

    def validate(self) -> list[str]:
        """Validate configuration, return list of issues."""
        issues = []
        if not self.reference_domains:
            issues.append("REFERENCE_DOMAINS must list at least one domain")
        unknown = [p for p in self.payment_providers if p not in KNOWN_PAYMENT_PROVIDERS]
        if unknown:
            issues.append(
                f"Unknown payment providers: {', '.join(unknown)}. "
                f"Available: {', '.join(sorted(KNOWN_PAYMENT_PROVIDERS))}"
            )
        unknown = [p for p in self.registry_providers if p not in KNOWN_REGISTRY_PROVIDERS]
        if unknown:
            issues.append(
                f"Unknown registry providers: {', '.join(unknown)}. "
                f"Available: {', '.join(sorted(KNOWN_REGISTRY_PROVIDERS))}"
            )
        if self.report_lookup_limit < 1:
            issues.append(
                f"REPORT_LOOKUP_LIMIT must be positive, got {self.report_lookup_limit}"
            )
        if self.http_timeout <= 0:
            issues.append(f"HTTP_TIMEOUT must be positive, got {self.http_timeout}")
        return issues


def _parse_list(env_var: str, default: list[str]) -> list[str]:
    """Parse a comma-separated list from environment or use the default."""
    raw = os.getenv(env_var, "")
    if raw.strip():
        return [item.strip().lower() for item in raw.split(",") if item.strip()]
    return default.copy()
