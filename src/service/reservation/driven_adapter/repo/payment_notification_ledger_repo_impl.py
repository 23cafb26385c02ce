from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.reservation.app.interface.i_payment_notification_ledger_repo import (
    IPaymentNotificationLedgerRepo,
)
from src.service.reservation.domain.enum.payment_notification_type import LedgerEntryType
from src.service.reservation.driven_adapter.model.payment_notification_model import (
    PaymentNotificationModel,
)


class PaymentNotificationLedgerRepoImpl(IPaymentNotificationLedgerRepo):
    def __init__(self, session: AsyncSession):
        self.session = session

    @Logger.io
    async def exists(self, *, notification_id: str) -> bool:
        result = await self.session.execute(
            select(PaymentNotificationModel.id).where(
                PaymentNotificationModel.id == notification_id
            )
        )
        return result.scalar_one_or_none() is not None

    @Logger.io
    async def record(
        self, *, notification_id: str, entry_type: LedgerEntryType, quantity: int
    ) -> None:
        # Primary key on id: a concurrent duplicate fails the whole transaction
        self.session.add(
            PaymentNotificationModel(
                id=notification_id, entry_type=entry_type.value, quantity=quantity
            )
        )
        await self.session.flush()
