"""Company registry providers."""

from __future__ import annotations

import httpx

from ..errors import ProviderError
from .interfaces import CompanyInfo

CIPC_API = "https://eservices.cipc.co.za/api"


def unknown_company(registration_number: str, source: str = "manual") -> CompanyInfo:
    """Placeholder record for a company no registry could resolve."""
    return CompanyInfo(
        registration_number=registration_number,
        name="Unknown",
        status="unknown",
        verified=False,
        confidence=0,
        source=source,
    )


class CIPCProvider:
    """Companies and Intellectual Property Commission lookup."""

    name = "cipc"

    def __init__(self, api_key: str, timeout: float = 15.0) -> None:
        self.api_key = api_key
        self.timeout = timeout

    async def lookup(self, registration_number: str) -> CompanyInfo:
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            async with httpx.AsyncClient(headers=headers, timeout=self.timeout) as client:
                resp = await client.get(f"{CIPC_API}/company/{registration_number}")
                if resp.status_code == 404:
                    return unknown_company(registration_number, self.name)
                resp.raise_for_status()
                body = resp.json()
        except httpx.HTTPError as e:
            raise ProviderError(self.name, str(e)) from e
        except ValueError as e:
            raise ProviderError(self.name, f"invalid JSON response: {e}") from e

        if not isinstance(body, dict) or not body.get("success"):
            return unknown_company(registration_number, self.name)

        try:
            return self._parse(registration_number, body.get("data") or {})
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ProviderError(self.name, f"malformed registry payload: {e}") from e

    def _parse(self, registration_number: str, company: dict) -> CompanyInfo:
        raw_status = str(company.get("companyStatus", "unknown"))
        status = raw_status.lower()
        if status not in ("active", "deregistered", "suspended"):
            status = "unknown"
        active = raw_status == "Active"
        return CompanyInfo(
            registration_number=company.get("registrationNumber", registration_number),
            name=company.get("companyName", "Unknown"),
            status=status,
            verified=active,
            confidence=95 if active else 60,
            source=self.name,
            registration_date=company.get("registrationDate"),
            business_type=company.get("companyType"),
            directors=[
                d.get("fullName", "") for d in company.get("directors") or []
            ],
            address=company.get("registeredAddress"),
        )
