"""Per-provider locks serializing DID get-or-create."""

import asyncio
from typing import Optional


class DIDLockRegistry:
    """Hands out one asyncio.Lock per AI provider name.

    Two requests for the same never-before-seen provider would otherwise both
    observe "no DID yet" and mint two identities.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}

    def lock_for(self, provider_name: str) -> asyncio.Lock:
        """Return the lock for ``provider_name``, creating it on first use."""
        lock = self._locks.get(provider_name)
        if lock is None:
            lock = self._locks.setdefault(provider_name, asyncio.Lock())
        return lock


# Module-level singleton
_did_locks: Optional[DIDLockRegistry] = None


def get_did_lock_registry() -> DIDLockRegistry:
    """Get or create the process-wide lock registry."""
    global _did_locks
    if _did_locks is None:
        _did_locks = DIDLockRegistry()
    return _did_locks


def reset_did_lock_registry() -> None:
    """Reset the singleton (for testing)."""
    global _did_locks
    _did_locks = None
