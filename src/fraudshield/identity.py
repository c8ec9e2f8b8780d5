"""Identity provider abstraction.

The service layer asks an injected provider who the acting user is
instead of reaching for a global auth client.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class IdentityProvider(Protocol):
    """Resolves the user on whose behalf an operation runs."""

    async def current_user_id(self) -> str:
        """Return the acting user's identifier."""
        ...


class StaticIdentity:
    """Identity provider that always answers with one fixed user."""

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id

    async def current_user_id(self) -> str:
        return self.user_id
