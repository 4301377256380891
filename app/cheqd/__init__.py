"""cheqd Studio integration: DIDs and revocation status lists."""

from app.cheqd.circuit import CircuitBreaker, get_circuit_breaker, reset_circuit_breaker
from app.cheqd.client import CheqdStudioClient
from app.cheqd.identity import IdentityClient, IssuerIdentity
from app.cheqd.status_list import StatusList, StatusListClient

__all__ = [
    "CircuitBreaker",
    "get_circuit_breaker",
    "reset_circuit_breaker",
    "CheqdStudioClient",
    "IdentityClient",
    "IssuerIdentity",
    "StatusList",
    "StatusListClient",
]
