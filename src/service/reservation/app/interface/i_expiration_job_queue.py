from abc import ABC, abstractmethod


class IExpirationJobQueue(ABC):
    """Time-ordered (due_at, payment_session_id) jobs consumed by the reaper"""

    @abstractmethod
    async def schedule(self, *, session_id: str, due_at_ms: int) -> None:
        pass

    @abstractmethod
    async def get_due_session_ids(self, *, now_ms: int) -> list[str]:
        pass

    @abstractmethod
    async def remove(self, *, session_ids: list[str]) -> None:
        pass
