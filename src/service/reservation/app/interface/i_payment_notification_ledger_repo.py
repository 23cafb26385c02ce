from abc import ABC, abstractmethod

from src.service.reservation.domain.enum.payment_notification_type import LedgerEntryType


class IPaymentNotificationLedgerRepo(ABC):
    """
    Set of gateway notification ids whose effects are already applied.

    Always written in the same transaction as the effect it guards.
    """

    @abstractmethod
    async def exists(self, *, notification_id: str) -> bool:
        pass

    @abstractmethod
    async def record(
        self, *, notification_id: str, entry_type: LedgerEntryType, quantity: int
    ) -> None:
        pass
