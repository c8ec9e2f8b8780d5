"""Payment gateway providers (Stitch, Ozow, PayShap).

Illustrative integrations: endpoints and payload shapes follow each
gateway's public docs, credentials default to template placeholders and
nothing here is exercised against a live service.
"""

from __future__ import annotations

from typing import Any

import httpx

from ..errors import ProviderError
from .interfaces import PaymentVerificationRequest, PaymentVerificationResult

STITCH_API = "https://api.stitch.money/graphql"
OZOW_API = "https://api.ozow.com/GetTransaction"
PAYSHAP_API = "https://api.payshap.co.za/v1/payments/verify"

STITCH_PAYMENT_QUERY = """
query GetPayment($reference: String!) {
  payment(reference: $reference) {
    id
    amount
    status
    createdAt
    reference
    beneficiary {
      name
      accountNumber
    }
  }
}
"""

_STITCH_STATUS = {"COMPLETED": "cleared", "PENDING": "pending", "FAILED": "failed"}
_OZOW_STATUS = {
    "Complete": "cleared",
    "Pending": "pending",
    "Cancelled": "failed",
    "Error": "failed",
}


def _rand(amount: float) -> str:
    return f"R{amount:,.2f}"


def not_found_result(
    request: PaymentVerificationRequest, provider: str = ""
) -> PaymentVerificationResult:
    """Result for a payment the provider has no record of."""
    return PaymentVerificationResult(
        verified=False,
        status="not_found",
        amount=request.amount,
        reference=request.reference,
        message=(
            f"No cleared payment found for reference {request.reference}. "
            "Please wait until funds reflect before delivering."
        ),
        confidence=0,
        provider=provider,
    )


def unavailable_result(
    request: PaymentVerificationRequest,
) -> PaymentVerificationResult:
    """Conservative result when no provider could answer."""
    return PaymentVerificationResult(
        verified=False,
        status="failed",
        amount=request.amount,
        reference=request.reference,
        message=(
            "Unable to verify payment at this time. "
            "Please try again later or contact support."
        ),
        confidence=0,
    )


def _cents_to_rand(value: Any) -> float:
    """Convert a gateway amount in cents to rand."""
    return float(value) / 100


class _HttpProvider:
    """Shared POST-decode-parse plumbing for the gateway providers.

    Subclasses supply the endpoint, headers and request payload, and
    parse the decoded body in ``_parse``. Any shape error raised while
    parsing becomes a :class:`ProviderError` so the fallback chain can
    move on to the next provider.
    """

    name = ""
    url = ""

    def __init__(self, timeout: float = 15.0) -> None:
        self.timeout = timeout

    def _headers(self) -> dict[str, str]:
        raise NotImplementedError

    def _payload(self, request: PaymentVerificationRequest) -> dict[str, Any]:
        raise NotImplementedError

    def _parse(
        self, request: PaymentVerificationRequest, body: dict[str, Any] | None
    ) -> PaymentVerificationResult:
        raise NotImplementedError

    async def verify(
        self, request: PaymentVerificationRequest
    ) -> PaymentVerificationResult:
        """Look the payment up.

        Raises:
            ProviderError: On transport errors, HTTP errors or a body
                that is not shaped like the gateway's documented reply.
        """
        body = await self._post(self.url, self._headers(), self._payload(request))
        try:
            return self._parse(request, body)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ProviderError(self.name, f"malformed payment payload: {e}") from e

    async def _post(
        self, url: str, headers: dict[str, str], payload: dict[str, Any]
    ) -> dict[str, Any] | None:
        """POST JSON and return the decoded body, or None on a 404.

        Raises:
            ProviderError: On transport errors, other HTTP errors or a
                body that is not a JSON object.
        """
        try:
            async with httpx.AsyncClient(headers=headers, timeout=self.timeout) as client:
                resp = await client.post(url, json=payload)
                if resp.status_code == 404:
                    return None
                resp.raise_for_status()
                body = resp.json()
        except httpx.HTTPError as e:
            raise ProviderError(self.name, str(e)) from e
        except ValueError as e:
            raise ProviderError(self.name, f"invalid JSON response: {e}") from e
        if not isinstance(body, dict):
            raise ProviderError(self.name, "response body is not a JSON object")
        return body


class StitchProvider(_HttpProvider):
    """Stitch Money GraphQL payment lookup."""

    name = "stitch"
    url = STITCH_API

    def __init__(self, api_key: str, timeout: float = 15.0) -> None:
        super().__init__(timeout)
        self.api_key = api_key

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    def _payload(self, request: PaymentVerificationRequest) -> dict[str, Any]:
        return {
            "query": STITCH_PAYMENT_QUERY,
            "variables": {"reference": request.reference},
        }

    def _parse(
        self, request: PaymentVerificationRequest, body: dict[str, Any] | None
    ) -> PaymentVerificationResult:
        payment = ((body or {}).get("data") or {}).get("payment")
        if not payment:
            return not_found_result(request, self.name)

        raw_status = payment.get("status", "")
        completed = raw_status == "COMPLETED"
        amount = _cents_to_rand(payment["amount"])
        beneficiary = (payment.get("beneficiary") or {}).get("name")
        return PaymentVerificationResult(
            verified=completed,
            status=_STITCH_STATUS.get(raw_status, "not_found"),
            amount=amount,
            reference=payment.get("reference", request.reference),
            transaction_date=payment.get("createdAt"),
            beneficiary_name=beneficiary,
            message=(
                f"Payment verified: {_rand(amount)} cleared from {beneficiary or 'Unknown'}."
                if completed
                else f"Payment status: {raw_status}. Please wait for completion."
            ),
            confidence=95 if completed else 60,
            provider=self.name,
        )


class OzowProvider(_HttpProvider):
    """Ozow transaction lookup."""

    name = "ozow"
    url = OZOW_API

    def __init__(self, api_key: str, site_code: str, timeout: float = 15.0) -> None:
        super().__init__(timeout)
        self.api_key = api_key
        self.site_code = site_code

    def _headers(self) -> dict[str, str]:
        return {"ApiKey": self.api_key, "SiteCode": self.site_code}

    def _payload(self, request: PaymentVerificationRequest) -> dict[str, Any]:
        return {
            "TransactionReference": request.reference,
            "Amount": int(round(request.amount * 100)),
        }

    def _parse(
        self, request: PaymentVerificationRequest, body: dict[str, Any] | None
    ) -> PaymentVerificationResult:
        if not body or not body.get("IsSuccessful"):
            return not_found_result(request, self.name)

        raw_status = body.get("Status", "")
        completed = raw_status == "Complete"
        amount = _cents_to_rand(body["Amount"])
        customer = body.get("CustomerName")
        return PaymentVerificationResult(
            verified=completed,
            status=_OZOW_STATUS.get(raw_status, "not_found"),
            amount=amount,
            reference=body.get("TransactionReference", request.reference),
            transaction_date=body.get("TransactionDate"),
            beneficiary_name=customer,
            message=(
                f"Payment verified: {_rand(amount)} cleared from {customer or 'Unknown'}."
                if completed
                else f"Payment status: {raw_status}. {body.get('StatusMessage', '')}".strip()
            ),
            confidence=90 if completed else 50,
            provider=self.name,
        )


class PayShapProvider(_HttpProvider):
    """PayShap real-time payment lookup."""

    name = "payshap"
    url = PAYSHAP_API

    def __init__(self, api_key: str, timeout: float = 15.0) -> None:
        super().__init__(timeout)
        self.api_key = api_key

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    def _payload(self, request: PaymentVerificationRequest) -> dict[str, Any]:
        return {
            "reference": request.reference,
            "amount": request.amount,
            "bank_name": request.bank_name,
        }

    def _parse(
        self, request: PaymentVerificationRequest, body: dict[str, Any] | None
    ) -> PaymentVerificationResult:
        payment = (body or {}).get("data") if (body or {}).get("success") else None
        if not payment:
            return not_found_result(request, self.name)

        completed = payment.get("status") == "completed"
        # PayShap reports rand, not cents
        amount = float(payment.get("amount", request.amount))
        payer = payment.get("payer_name")
        return PaymentVerificationResult(
            verified=completed,
            status="cleared" if completed else "pending",
            amount=amount,
            reference=payment.get("reference", request.reference),
            transaction_date=payment.get("processed_at"),
            beneficiary_name=payer,
            message=(
                f"Real-time payment verified: {_rand(amount)} from {payer or 'Unknown'}."
                if completed
                else f"Payment processing: {payment.get('status_message', 'pending')}"
            ),
            confidence=98 if completed else 70,
            provider=self.name,
        )
