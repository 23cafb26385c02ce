from abc import ABC, abstractmethod
from typing import Optional


class IDistributedLock(ABC):
    """Per-key mutual-exclusion lease. Advisory only, never a correctness boundary."""

    @abstractmethod
    async def acquire(self, *, key: str, ttl_ms: int) -> Optional[str]:
        """Return a fencing token when the lease was taken, None otherwise."""

    @abstractmethod
    async def release(self, *, key: str, token: str) -> bool:
        """Delete the lease only if it still holds `token`."""
