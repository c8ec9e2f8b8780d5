"""Exception hierarchy shared by the trust, risk and store layers."""

from __future__ import annotations


class FraudShieldError(Exception):
    """Base class for all errors raised by fraudshield."""


class StorageError(FraudShieldError):
    """A store operation failed.

    Raised by store implementations and propagated unchanged by the
    engine and service layers. Nothing in fraudshield retries it; the
    caller decides whether to retry, surface or degrade.
    """


class ValidationError(FraudShieldError, ValueError):
    """Input rejected before any state was touched."""


class ProviderError(FraudShieldError):
    """A third-party verification provider call failed."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
