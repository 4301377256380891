"""FastAPI dependencies shared by the routers.

Each provider can be replaced through ``app.dependency_overrides`` in tests.
"""
from typing import Callable

from fastapi import Depends

from app.cheqd.circuit import CircuitBreaker, get_circuit_breaker
from app.cheqd.client import CheqdStudioClient
from app.issuance.locks import DIDLockRegistry, get_did_lock_registry

CheqdClientFactory = Callable[[str], CheqdStudioClient]


def get_breaker() -> CircuitBreaker:
    """Circuit breaker shared by all outbound cheqd calls."""
    return get_circuit_breaker()


def get_did_locks() -> DIDLockRegistry:
    """Per-provider DID locks."""
    return get_did_lock_registry()


def get_cheqd_client_factory(
    breaker: CircuitBreaker = Depends(get_breaker),
) -> CheqdClientFactory:
    """Return a callable building a Studio client for a caller's API key."""

    def factory(api_key: str) -> CheqdStudioClient:
        return CheqdStudioClient(api_key, breaker=breaker)

    return factory
