"""
Unit of Work Pattern - one authoritative store transaction per block

Architecture:
- UoW owns the session lifecycle
- UoW owns commit/rollback; leaving the block without commit rolls back
- Repositories share the UoW session
- Use cases coordinate several repositories through one UoW
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.platform.database.orm_db_setting import get_session_maker


if TYPE_CHECKING:
    from src.service.reservation.app.interface import (
        IAttendeeRepo,
        IEventRepo,
        IOrderRepo,
        IPaymentNotificationLedgerRepo,
    )


class AbstractUnitOfWork(abc.ABC):
    """
    Abstract Unit of Work for the Reservation Service

    Usage:
        async with uow_factory() as uow:
            event = await uow.event_repo.get_by_id(event_id=1, for_update=True)
            ...
            await uow.commit()
    """

    event_repo: IEventRepo
    order_repo: IOrderRepo
    attendee_repo: IAttendeeRepo
    notification_ledger_repo: IPaymentNotificationLedgerRepo

    async def __aenter__(self) -> AbstractUnitOfWork:
        return self

    async def __aexit__(self, *args) -> None:
        await self.rollback()

    async def commit(self) -> None:
        """Commit the transaction"""
        await self._commit()

    @abc.abstractmethod
    async def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def rollback(self) -> None:
        raise NotImplementedError


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    """
    SQLAlchemy implementation of Unit of Work

    A fresh session is opened on enter and closed on exit, so one instance
    maps to exactly one transaction.
    """

    def __init__(self, session_maker: Optional[async_sessionmaker[AsyncSession]] = None):
        self._session_maker = session_maker
        self.session: Optional[AsyncSession] = None

    async def __aenter__(self) -> AbstractUnitOfWork:
        from src.service.reservation.driven_adapter.repo.attendee_repo_impl import (
            AttendeeRepoImpl,
        )
        from src.service.reservation.driven_adapter.repo.event_repo_impl import EventRepoImpl
        from src.service.reservation.driven_adapter.repo.order_repo_impl import OrderRepoImpl
        from src.service.reservation.driven_adapter.repo.payment_notification_ledger_repo_impl import (
            PaymentNotificationLedgerRepoImpl,
        )

        session_maker = self._session_maker or get_session_maker()
        self.session = session_maker()

        self.event_repo = EventRepoImpl(self.session)
        self.order_repo = OrderRepoImpl(self.session)
        self.attendee_repo = AttendeeRepoImpl(self.session)
        self.notification_ledger_repo = PaymentNotificationLedgerRepoImpl(self.session)

        return await super().__aenter__()

    async def __aexit__(self, *args) -> None:
        try:
            await super().__aexit__(*args)
        finally:
            if self.session is not None:
                await self.session.close()
                self.session = None

    async def _commit(self) -> None:
        assert self.session is not None
        await self.session.commit()

    async def rollback(self) -> None:
        if self.session is not None:
            await self.session.rollback()
