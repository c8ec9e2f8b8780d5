"""Provider registry for name-based discovery and chain building.

Maps provider names to their classes, split by capability, so the CLI
can turn the configured provider order into a ready-to-run chain.
"""

from __future__ import annotations

from typing import Any

from .companies import CIPCProvider
from .payments import OzowProvider, PayShapProvider, StitchProvider

PAYMENT = "payment"
REGISTRY = "registry"


class ProviderRegistry:
    """Class-level registry mapping (capability, name) to provider classes."""

    _registry: dict[str, dict[str, type]] = {PAYMENT: {}, REGISTRY: {}}

    @classmethod
    def register(cls, capability: str, name: str, provider_class: type) -> None:
        """Register a provider class under a capability.

        Args:
            capability: ``payment`` or ``registry``.
            name: Provider identifier (e.g., "stitch").
            provider_class: Class implementing the capability protocol.
        """
        cls._registry.setdefault(capability, {})[name] = provider_class

    @classmethod
    def get(cls, capability: str, name: str) -> type:
        """Look up a provider class.

        Raises:
            ValueError: If the provider is not registered.
        """
        providers = cls._registry.get(capability, {})
        if name not in providers:
            available = ", ".join(sorted(providers)) or "(none)"
            raise ValueError(
                f"Unknown {capability} provider '{name}'. Available: {available}"
            )
        return providers[name]

    @classmethod
    def list_providers(cls, capability: str) -> list[str]:
        """Return registered provider names for a capability, sorted."""
        return sorted(cls._registry.get(capability, {}))

    @classmethod
    def build_chain(
        cls,
        capability: str,
        names: list[str],
        credentials: dict[str, dict[str, str]],
        **kwargs: Any,
    ) -> list[Any]:
        """Instantiate providers in ``names`` order.

        Args:
            capability: ``payment`` or ``registry``.
            names: Provider names in fallback order.
            credentials: Provider name -> constructor credentials.
            **kwargs: Shared constructor options (e.g. ``timeout``).
        """
        return [
            cls.get(capability, name)(**credentials.get(name, {}), **kwargs)
            for name in names
        ]

    @classmethod
    def _clear(cls) -> None:
        """Clear the registry. Intended for testing only."""
        cls._registry = {PAYMENT: {}, REGISTRY: {}}


ProviderRegistry.register(PAYMENT, "stitch", StitchProvider)
ProviderRegistry.register(PAYMENT, "ozow", OzowProvider)
ProviderRegistry.register(PAYMENT, "payshap", PayShapProvider)
ProviderRegistry.register(REGISTRY, "cipc", CIPCProvider)
