"""Third-party verification providers and their fallback chains."""

from __future__ import annotations

from .chain import lookup_company_with_fallback, verify_payment_with_fallback
from .companies import CIPCProvider
from .interfaces import (
    CompanyInfo,
    CompanyRegistryProvider,
    PaymentVerificationProvider,
    PaymentVerificationRequest,
    PaymentVerificationResult,
)
from .payments import OzowProvider, PayShapProvider, StitchProvider
from .registry import PAYMENT, REGISTRY, ProviderRegistry

__all__ = [
    "CIPCProvider",
    "CompanyInfo",
    "CompanyRegistryProvider",
    "OzowProvider",
    "PAYMENT",
    "PayShapProvider",
    "PaymentVerificationProvider",
    "PaymentVerificationRequest",
    "PaymentVerificationResult",
    "ProviderRegistry",
    "REGISTRY",
    "StitchProvider",
    "lookup_company_with_fallback",
    "verify_payment_with_fallback",
]
