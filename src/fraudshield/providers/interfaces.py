"""Capability protocols for third-party verification providers.

Payment gateways and company registries are modelled as interchangeable
providers so the fallback chain can try them in a configured order.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Protocol, runtime_checkable

PAYMENT_STATUSES = ("cleared", "pending", "failed", "not_found")
COMPANY_STATUSES = ("active", "deregistered", "suspended", "unknown")


@dataclass
class PaymentVerificationRequest:
    """An EFT payment a seller wants confirmed before releasing goods."""

    bank_name: str
    reference: str
    amount: float
    account_number: str | None = None
    beneficiary_name: str | None = None


@dataclass
class PaymentVerificationResult:
    """Outcome of asking a provider about a payment."""

    verified: bool
    status: str
    amount: float
    reference: str
    message: str
    confidence: int
    transaction_date: str | None = None
    beneficiary_name: str | None = None
    provider: str = ""

    @property
    def conclusive(self) -> bool:
        """True if the chain should stop at this result."""
        return self.verified or self.status != "not_found"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class CompanyInfo:
    """Registry record for a company."""

    registration_number: str
    name: str
    status: str
    verified: bool
    confidence: int
    source: str
    registration_date: str | None = None
    business_type: str | None = None
    directors: list[str] = field(default_factory=list)
    address: str | None = None

    @property
    def conclusive(self) -> bool:
        return self.verified or self.status != "unknown"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@runtime_checkable
class PaymentVerificationProvider(Protocol):
    """A payment gateway that can confirm an EFT by reference."""

    name: str

    async def verify(
        self, request: PaymentVerificationRequest
    ) -> PaymentVerificationResult:
        """Look the payment up.

        Returns a ``not_found`` result when the provider has no record.

        Raises:
            ProviderError: On transport, HTTP or payload failures.
        """
        ...


@runtime_checkable
class CompanyRegistryProvider(Protocol):
    """A registry that can resolve a company registration number."""

    name: str

    async def lookup(self, registration_number: str) -> CompanyInfo:
        """Resolve a registration number.

        Returns an ``unknown`` record when the registry has no match.

        Raises:
            ProviderError: On transport, HTTP or payload failures.
        """
        ...
