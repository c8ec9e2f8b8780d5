"""Fallback chains over verification providers.

Providers are tried in order. A result is accepted as soon as it is
conclusive (verified, or anything other than "not found"). A provider
that raises :class:`ProviderError` is logged and skipped. When every
provider has been tried without a conclusive answer, the chain returns
a conservative unverified result; it never defaults to verified.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from ..errors import ProviderError
from .companies import unknown_company
from .interfaces import (
    CompanyInfo,
    CompanyRegistryProvider,
    PaymentVerificationProvider,
    PaymentVerificationRequest,
    PaymentVerificationResult,
)
from .payments import unavailable_result

logger = structlog.get_logger()


async def verify_payment_with_fallback(
    providers: Sequence[PaymentVerificationProvider],
    request: PaymentVerificationRequest,
) -> PaymentVerificationResult:
    """Verify a payment against each provider until one is conclusive."""
    last_not_found: PaymentVerificationResult | None = None
    for provider in providers:
        try:
            result = await provider.verify(request)
        except ProviderError as e:
            logger.warning("provider_failed", provider=provider.name, error=str(e))
            continue
        if result.conclusive:
            return result
        last_not_found = result

    logger.warning(
        "provider_chain_exhausted",
        capability="payment",
        reference=request.reference,
    )
    return last_not_found or unavailable_result(request)


async def lookup_company_with_fallback(
    providers: Sequence[CompanyRegistryProvider],
    registration_number: str,
) -> CompanyInfo:
    """Resolve a company against each registry until one is conclusive."""
    for provider in providers:
        try:
            info = await provider.lookup(registration_number)
        except ProviderError as e:
            logger.warning("provider_failed", provider=provider.name, error=str(e))
            continue
        if info.conclusive:
            return info

    logger.warning("provider_chain_exhausted", capability="registry")
    return unknown_company(registration_number)
