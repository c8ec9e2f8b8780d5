"""Tests for fraudshield.providers.companies."""

from __future__ import annotations

import httpx
import pytest
import respx

from fraudshield.errors import ProviderError
from fraudshield.providers.companies import CIPC_API, CIPCProvider, unknown_company
from fraudshield.providers.interfaces import CompanyRegistryProvider

REG = "2015/123456/07"


def test_unknown_company() -> None:
    info = unknown_company(REG)
    assert info.name == "Unknown"
    assert info.status == "unknown"
    assert info.verified is False
    assert info.source == "manual"
    assert info.conclusive is False


def test_satisfies_protocol() -> None:
    assert isinstance(CIPCProvider("k"), CompanyRegistryProvider)


class TestCIPCProvider:
    @pytest.mark.asyncio
    @respx.mock
    async def test_active_company(self) -> None:
        route = respx.get(f"{CIPC_API}/company/{REG}").mock(
            return_value=httpx.Response(200, json={
                "success": True,
                "data": {
                    "registrationNumber": REG,
                    "companyName": "Acme Trading (Pty) Ltd",
                    "companyStatus": "Active",
                    "registrationDate": "2015-03-01",
                    "companyType": "Private Company",
                    "directors": [{"fullName": "Thandi Mokoena"}, {"fullName": "Sipho Dlamini"}],
                    "registeredAddress": "1 Main Rd, Johannesburg",
                },
            })
        )
        info = await CIPCProvider("cipc-key").lookup(REG)

        assert route.calls.last.request.headers["Authorization"] == "Bearer cipc-key"
        assert info.name == "Acme Trading (Pty) Ltd"
        assert info.status == "active"
        assert info.verified is True
        assert info.confidence == 95
        assert info.source == "cipc"
        assert info.directors == ["Thandi Mokoena", "Sipho Dlamini"]

    @pytest.mark.asyncio
    @respx.mock
    async def test_deregistered_company(self) -> None:
        respx.get(f"{CIPC_API}/company/{REG}").mock(
            return_value=httpx.Response(200, json={
                "success": True,
                "data": {"companyName": "Old Co", "companyStatus": "Deregistered"},
            })
        )
        info = await CIPCProvider("k").lookup(REG)
        assert info.status == "deregistered"
        assert info.verified is False
        assert info.confidence == 60
        assert info.conclusive is True

    @pytest.mark.asyncio
    @respx.mock
    async def test_unexpected_status_is_unknown(self) -> None:
        respx.get(f"{CIPC_API}/company/{REG}").mock(
            return_value=httpx.Response(200, json={
                "success": True,
                "data": {"companyName": "X", "companyStatus": "In Business Rescue"},
            })
        )
        info = await CIPCProvider("k").lookup(REG)
        assert info.status == "unknown"

    @pytest.mark.asyncio
    @respx.mock
    async def test_not_found(self) -> None:
        respx.get(f"{CIPC_API}/company/{REG}").mock(return_value=httpx.Response(404))
        info = await CIPCProvider("k").lookup(REG)
        assert info.status == "unknown"
        assert info.source == "cipc"

    @pytest.mark.asyncio
    @respx.mock
    async def test_unsuccessful_body(self) -> None:
        respx.get(f"{CIPC_API}/company/{REG}").mock(
            return_value=httpx.Response(200, json={"success": False})
        )
        info = await CIPCProvider("k").lookup(REG)
        assert info.conclusive is False

    @pytest.mark.asyncio
    @respx.mock
    async def test_server_error(self) -> None:
        respx.get(f"{CIPC_API}/company/{REG}").mock(return_value=httpx.Response(500))
        with pytest.raises(ProviderError) as exc_info:
            await CIPCProvider("k").lookup(REG)
        assert exc_info.value.provider == "cipc"

    @pytest.mark.asyncio
    @respx.mock
    async def test_malformed_data_raises(self) -> None:
        respx.get(f"{CIPC_API}/company/{REG}").mock(
            return_value=httpx.Response(200, json={"success": True, "data": ["x"]})
        )
        with pytest.raises(ProviderError, match="malformed registry payload") as exc_info:
            await CIPCProvider("k").lookup(REG)
        assert exc_info.value.provider == "cipc"

    @pytest.mark.asyncio
    @respx.mock
    async def test_malformed_directors_raise(self) -> None:
        respx.get(f"{CIPC_API}/company/{REG}").mock(
            return_value=httpx.Response(200, json={
                "success": True,
                "data": {"companyName": "Acme", "companyStatus": "Active", "directors": ["x"]},
            })
        )
        with pytest.raises(ProviderError, match="malformed registry payload"):
            await CIPCProvider("k").lookup(REG)
