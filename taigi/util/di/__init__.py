"""Dependency injection wiring for the community voting API."""

from typing import Type

from taigi.util.di.application import ProdApplicationProvider
from taigi.util.di.base import Component, ProviderBase
from taigi.util.di.core import ProdConfigProvider
from taigi.util.di.domain import ProdDomainProvider
from taigi.util.di.infrastructure import (
    PersistenceProvider,
    ProdPersistenceProvider,
    RealtimeProvider,
)

# Order is irrelevant to dishka; grouped for reading
PROVIDERS: list[Type[ProviderBase]] = [
    ProdConfigProvider,
    ProdDomainProvider,
    ProdApplicationProvider,
    RealtimeProvider,
    # Swapped for an in-memory double in tests
    PersistenceProvider,
]


def get_provider(
    base: Type[ProviderBase], use_mock: bool = False
) -> Type[ProviderBase]:
    """Resolve a provider entry to the class that should be instantiated.

    A provider without subclasses is used as-is. Otherwise the subclass whose
    ``__is_mock__`` flag matches ``use_mock`` is picked.

    Raises:
        ValueError: If the component has no implementation of that kind
    """
    implementations = base.__subclasses__()
    if not implementations:
        return base

    for candidate in implementations:
        if getattr(candidate, "__is_mock__", False) == use_mock:
            return candidate

    kind = "mock" if use_mock else "production"
    component = getattr(base, "__mock_component__", base.__name__)
    raise ValueError(f"No {kind} implementation for {component}")


__all__ = [
    "Component",
    "ProviderBase",
    "PROVIDERS",
    "get_provider",
    "ProdConfigProvider",
    "ProdDomainProvider",
    "ProdApplicationProvider",
    "RealtimeProvider",
    "PersistenceProvider",
    "ProdPersistenceProvider",
]
