"""
Test Configuration and Fixtures

This module provides:
- Environment setup (log dir, Kvrocks key prefix) before app modules import settings
- In-memory adapters for engine-level tests:
  - InMemoryReservationStore + FakeUnitOfWork: transactional store; `for_update`
    reads take a per-event asyncio lock held until the unit of work exits,
    staged writes are applied only on commit
  - FakeEventLockHandler, FakeEventCacheHandler, FakePaymentGateway,
    FakeExpirationJobQueue
- Use case fixtures wired against those fakes

Adapter unit tests (Kvrocks, Stripe) patch the client/SDK with AsyncMock/MagicMock instead.
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    worker_id = os.environ.get('PYTEST_XDIST_WORKER', 'master')
    if worker_id == 'master':
        os.environ['KVROCKS_KEY_PREFIX'] = 'test_'
    else:
        os.environ['KVROCKS_KEY_PREFIX'] = f'test_{worker_id}_'

    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    os.environ.setdefault('STRIPE_SECRET_KEY', 'sk_test_unit')
    os.environ.setdefault('CLIENT_URL', 'http://localhost:3000')


_early_setup_test_environment()

import asyncio  # noqa: E402
from collections import defaultdict  # noqa: E402
import copy  # noqa: E402
from typing import Awaitable, Callable, Optional  # noqa: E402
from uuid import uuid4  # noqa: E402

import pytest  # noqa: E402

from src.platform.database.unit_of_work import AbstractUnitOfWork  # noqa: E402
from src.platform.exception.exceptions import PaymentSessionGoneError  # noqa: E402
from src.service.reservation.app.command.cancel_reservation_use_case import (  # noqa: E402
    CancelReservationUseCase,
)
from src.service.reservation.app.command.confirm_seat_use_case import (  # noqa: E402
    ConfirmSeatUseCase,
)
from src.service.reservation.app.command.create_event_use_case import (  # noqa: E402
    CreateEventUseCase,
)
from src.service.reservation.app.command.expire_overdue_sessions_use_case import (  # noqa: E402
    ExpireOverdueSessionsUseCase,
)
from src.service.reservation.app.command.release_seat_use_case import (  # noqa: E402
    ReleaseSeatUseCase,
)
from src.service.reservation.app.command.reserve_seat_use_case import (  # noqa: E402
    ReserveSeatUseCase,
)
from src.service.reservation.app.dto import CheckoutSession  # noqa: E402
from src.service.reservation.app.interface import (  # noqa: E402
    IAttendeeRepo,
    IEventCacheHandler,
    IEventLockHandler,
    IEventRepo,
    IExpirationJobQueue,
    IOrderRepo,
    IPaymentGateway,
    IPaymentNotificationLedgerRepo,
)
from src.service.reservation.app.query.get_event_use_case import GetEventUseCase  # noqa: E402
from src.service.reservation.domain.entity.attendee_entity import Attendee  # noqa: E402
from src.service.reservation.domain.entity.event_entity import Event  # noqa: E402
from src.service.reservation.domain.entity.order_entity import Order  # noqa: E402
from src.service.reservation.domain.enum.order_status import OrderStatus  # noqa: E402
from src.service.reservation.domain.enum.payment_notification_type import (  # noqa: E402
    LedgerEntryType,
)
from src.service.reservation.domain.value_object.checkout_metadata import (  # noqa: E402
    CheckoutMetadata,
)
from src.service.reservation.driving_adapter.payment_notification_handler import (  # noqa: E402
    PaymentNotificationHandler,
)


OWNER_ID = 'owner-1'
BUYER_ID = 'buyer-1'


# =============================================================================
# In-memory authoritative store
# =============================================================================
class InMemoryReservationStore:
    def __init__(self) -> None:
        self.events: dict[int, Event] = {}
        self.orders: dict[str, Order] = {}
        self.attendees: dict[tuple[int, str], Attendee] = {}
        self.ledger: dict[str, tuple[LedgerEntryType, int]] = {}
        self.event_row_locks: defaultdict[int, asyncio.Lock] = defaultdict(asyncio.Lock)
        self.commits = 0
        self._next_event_id = 1

    def add_event(
        self,
        *,
        price: int = 100,
        total_seats: int = 10,
        available_seats: Optional[int] = None,
        owner_id: str = OWNER_ID,
        name: str = 'Rust Meetup',
    ) -> Event:
        event = Event(
            id=self._next_event_id,
            name=name,
            description='',
            location='Taipei',
            event_type='educational',
            price=price,
            total_seats=total_seats,
            available_seats=total_seats if available_seats is None else available_seats,
            owner_id=owner_id,
        )
        self.events[event.id] = event
        self._next_event_id += 1
        return copy.deepcopy(event)

    def next_event_id(self) -> int:
        event_id = self._next_event_id
        self._next_event_id += 1
        return event_id

    def add_order(
        self,
        *,
        event_id: int,
        buyer_id: str = BUYER_ID,
        quantity: int = 1,
        status: OrderStatus = OrderStatus.PENDING,
        payment_session_id: Optional[str] = None,
        seats_held: bool = True,
    ) -> Order:
        order = Order.create_pending(
            event_id=event_id, buyer_id=buyer_id, quantity=quantity, amount=100 * quantity
        )
        order.status = status
        order.payment_session_id = payment_session_id
        order.seats_held = seats_held
        self.orders[order.id] = order
        return copy.deepcopy(order)

    def available_seats(self, event_id: int) -> int:
        return self.events[event_id].available_seats


class _StagedRepo:
    def __init__(self, uow: 'FakeUnitOfWork') -> None:
        self.uow = uow
        self.store = uow.store


class FakeEventRepo(_StagedRepo, IEventRepo):
    async def create(self, *, event: Event) -> Event:
        await asyncio.sleep(0)
        created = copy.deepcopy(event)
        created.id = self.store.next_event_id()
        self.uow.staged_events[created.id] = created
        return copy.deepcopy(created)

    async def get_by_id(self, *, event_id: int, for_update: bool = False) -> Optional[Event]:
        if for_update:
            await self.uow.lock_event_row(event_id)
        await asyncio.sleep(0)
        event = self.uow.staged_events.get(event_id) or self.store.events.get(event_id)
        return copy.deepcopy(event)

    async def update_available_seats(self, *, event_id: int, available_seats: int) -> None:
        await asyncio.sleep(0)
        event = copy.deepcopy(
            self.uow.staged_events.get(event_id) or self.store.events[event_id]
        )
        event.available_seats = available_seats
        self.uow.staged_events[event_id] = event


class FakeOrderRepo(_StagedRepo, IOrderRepo):
    def _current(self, order_id: str) -> Optional[Order]:
        return self.uow.staged_orders.get(order_id) or self.store.orders.get(order_id)

    async def create(self, *, order: Order) -> Order:
        await asyncio.sleep(0)
        self.uow.staged_orders[order.id] = copy.deepcopy(order)
        return copy.deepcopy(order)

    async def get_by_id(self, *, order_id: str, for_update: bool = False) -> Optional[Order]:
        await asyncio.sleep(0)
        return copy.deepcopy(self._current(order_id))

    async def update_status(
        self, *, order_id: str, status: OrderStatus, error: Optional[str] = None
    ) -> None:
        await asyncio.sleep(0)
        order = copy.deepcopy(self._current(order_id))
        if order is None:
            return
        order.status = status
        if error is not None:
            order.error = error
        self.uow.staged_orders[order_id] = order

    async def set_payment_session(self, *, order_id: str, payment_session_id: str) -> None:
        await asyncio.sleep(0)
        order = copy.deepcopy(self._current(order_id))
        if order is None:
            return
        order.payment_session_id = payment_session_id
        self.uow.staged_orders[order_id] = order

    async def mark_seats_held(self, *, order_id: str) -> None:
        await asyncio.sleep(0)
        order = copy.deepcopy(self._current(order_id))
        if order is None:
            return
        order.seats_held = True
        self.uow.staged_orders[order_id] = order


class FakeAttendeeRepo(_StagedRepo, IAttendeeRepo):
    def _current(self, key: tuple[int, str]) -> Optional[Attendee]:
        if key in self.uow.staged_attendees:
            return self.uow.staged_attendees[key]
        return self.store.attendees.get(key)

    async def get(self, *, event_id: int, buyer_id: str) -> Optional[Attendee]:
        await asyncio.sleep(0)
        return copy.deepcopy(self._current((event_id, buyer_id)))

    async def exists(self, *, event_id: int, buyer_id: str) -> bool:
        await asyncio.sleep(0)
        return self._current((event_id, buyer_id)) is not None

    async def upsert(self, *, attendee: Attendee) -> None:
        await asyncio.sleep(0)
        key = (attendee.event_id, attendee.buyer_id)
        merged = copy.deepcopy(attendee)
        existing = self._current(key)
        if existing is not None:
            merged.order_id = attendee.order_id or existing.order_id
            merged.email = attendee.email or existing.email
            merged.payment_event_id = attendee.payment_event_id or existing.payment_event_id
            merged.joined_at = existing.joined_at
        self.uow.staged_attendees[key] = merged

    async def delete(self, *, event_id: int, buyer_id: str) -> None:
        await asyncio.sleep(0)
        self.uow.staged_attendees[(event_id, buyer_id)] = None


class FakeNotificationLedgerRepo(_StagedRepo, IPaymentNotificationLedgerRepo):
    async def exists(self, *, notification_id: str) -> bool:
        await asyncio.sleep(0)
        return notification_id in self.uow.staged_ledger or notification_id in self.store.ledger

    async def record(
        self, *, notification_id: str, entry_type: LedgerEntryType, quantity: int
    ) -> None:
        await asyncio.sleep(0)
        if notification_id in self.store.ledger or notification_id in self.uow.staged_ledger:
            raise RuntimeError(f'duplicate key payment_notification.id={notification_id}')
        self.uow.staged_ledger[notification_id] = (entry_type, quantity)


class FakeUnitOfWork(AbstractUnitOfWork):
    def __init__(self, store: InMemoryReservationStore) -> None:
        self.store = store
        self.staged_events: dict[int, Event] = {}
        self.staged_orders: dict[str, Order] = {}
        self.staged_attendees: dict[tuple[int, str], Optional[Attendee]] = {}
        self.staged_ledger: dict[str, tuple[LedgerEntryType, int]] = {}
        self._held_row_locks: list[asyncio.Lock] = []

        self.event_repo = FakeEventRepo(self)
        self.order_repo = FakeOrderRepo(self)
        self.attendee_repo = FakeAttendeeRepo(self)
        self.notification_ledger_repo = FakeNotificationLedgerRepo(self)

    async def lock_event_row(self, event_id: int) -> None:
        lock = self.store.event_row_locks[event_id]
        if lock in self._held_row_locks:
            return
        await lock.acquire()
        self._held_row_locks.append(lock)

    async def __aexit__(self, *args) -> None:
        try:
            await super().__aexit__(*args)
        finally:
            for lock in self._held_row_locks:
                lock.release()
            self._held_row_locks.clear()

    async def _commit(self) -> None:
        await asyncio.sleep(0)
        for event in self.staged_events.values():
            # CHECK (available_seats BETWEEN 0 AND total_seats)
            if not 0 <= event.available_seats <= event.total_seats:
                raise RuntimeError(f'check constraint violated for event {event.id}')
        self.store.events.update(self.staged_events)
        self.store.orders.update(self.staged_orders)
        for key, attendee in self.staged_attendees.items():
            if attendee is None:
                self.store.attendees.pop(key, None)
            else:
                self.store.attendees[key] = attendee
        self.store.ledger.update(self.staged_ledger)
        self.store.commits += 1
        self._clear()

    async def rollback(self) -> None:
        self._clear()

    def _clear(self) -> None:
        self.staged_events.clear()
        self.staged_orders.clear()
        self.staged_attendees.clear()
        self.staged_ledger.clear()


# =============================================================================
# In-memory Kvrocks / Stripe adapters
# =============================================================================
class FakeEventLockHandler(IEventLockHandler):
    def __init__(self) -> None:
        self.leases: dict[int, str] = {}
        self.always_grant = False
        self.unavailable = False
        self.released: list[int] = []

    async def acquire(self, *, event_id: int) -> Optional[str]:
        await asyncio.sleep(0)
        if self.unavailable:
            return None
        token = str(uuid4())
        if self.always_grant:
            return token
        if event_id in self.leases:
            return None
        self.leases[event_id] = token
        return token

    async def release(self, *, event_id: int, token: str) -> bool:
        self.released.append(event_id)
        if self.leases.get(event_id) == token:
            del self.leases[event_id]
            return True
        return False


class FakeEventCacheHandler(IEventCacheHandler):
    def __init__(self) -> None:
        self.snapshots: dict[int, dict] = {}
        self.invalidated: list[int] = []
        self.versions: dict[int, int] = {}

    async def get(self, *, event_id: int) -> Optional[Event]:
        snapshot = self.snapshots.get(event_id)
        return Event.from_snapshot(snapshot) if snapshot else None

    async def set(self, *, event: Event) -> None:
        if event.id is not None:
            self.snapshots[event.id] = event.to_snapshot()

    async def get_version(self, *, event_id: int) -> Optional[int]:
        return self.versions.get(event_id, 0)

    async def fill(self, *, event: Event, version: int) -> bool:
        if event.id is None or self.versions.get(event.id, 0) != version:
            return False
        self.snapshots[event.id] = event.to_snapshot()
        return True

    async def invalidate(self, *, event_id: int) -> None:
        self.snapshots.pop(event_id, None)
        self.versions[event_id] = self.versions.get(event_id, 0) + 1
        self.invalidated.append(event_id)


class FakePaymentGateway(IPaymentGateway):
    def __init__(self) -> None:
        self.sessions: dict[str, str] = {}  # session_id -> open | expired | complete
        self.created: list[dict] = []
        self.expire_calls: list[str] = []
        self.create_error: Optional[Exception] = None
        self.expire_error: Optional[Exception] = None
        # Gateway-side hook run once a session has expired, e.g. to deliver its notification
        self.on_expire: Optional[Callable[[str], Awaitable[None]]] = None

    async def create_checkout_session(
        self,
        *,
        product_name: str,
        unit_price: int,
        quantity: int,
        buyer_email: str,
        metadata: CheckoutMetadata,
    ) -> CheckoutSession:
        await asyncio.sleep(0)
        if self.create_error is not None:
            raise self.create_error
        session_id = f'cs_test_{len(self.created) + 1}'
        self.sessions[session_id] = 'open'
        self.created.append(
            {
                'session_id': session_id,
                'product_name': product_name,
                'unit_price': unit_price,
                'quantity': quantity,
                'buyer_email': buyer_email,
                'metadata': metadata,
            }
        )
        return CheckoutSession(session_id=session_id, url=f'https://checkout.test/{session_id}')

    async def expire_checkout_session(self, *, session_id: str) -> None:
        await asyncio.sleep(0)
        self.expire_calls.append(session_id)
        if self.expire_error is not None:
            raise self.expire_error
        if self.sessions.get(session_id) != 'open':
            raise PaymentSessionGoneError(f'No such checkout.session: {session_id}')
        self.sessions[session_id] = 'expired'
        if self.on_expire is not None:
            await self.on_expire(session_id)

    def close_session(self, session_id: str, *, status: str = 'expired') -> None:
        """Gateway-side natural expiry/completion, outside the engine"""
        self.sessions[session_id] = status


class FakeExpirationJobQueue(IExpirationJobQueue):
    def __init__(self) -> None:
        self.jobs: dict[str, int] = {}

    async def schedule(self, *, session_id: str, due_at_ms: int) -> None:
        self.jobs[session_id] = due_at_ms

    async def get_due_session_ids(self, *, now_ms: int) -> list[str]:
        return [sid for sid, due in sorted(self.jobs.items(), key=lambda kv: kv[1]) if due <= now_ms]

    async def remove(self, *, session_ids: list[str]) -> None:
        for session_id in session_ids:
            self.jobs.pop(session_id, None)


# =============================================================================
# Fixtures
# =============================================================================
@pytest.fixture
def store() -> InMemoryReservationStore:
    return InMemoryReservationStore()


@pytest.fixture
def uow_factory(store: InMemoryReservationStore) -> Callable[[], FakeUnitOfWork]:
    return lambda: FakeUnitOfWork(store)


@pytest.fixture
def event_lock_handler() -> FakeEventLockHandler:
    return FakeEventLockHandler()


@pytest.fixture
def event_cache_handler() -> FakeEventCacheHandler:
    return FakeEventCacheHandler()


@pytest.fixture
def payment_gateway() -> FakePaymentGateway:
    return FakePaymentGateway()


@pytest.fixture
def expiration_job_queue() -> FakeExpirationJobQueue:
    return FakeExpirationJobQueue()


@pytest.fixture
def get_event_use_case(uow_factory, event_cache_handler) -> GetEventUseCase:
    return GetEventUseCase(uow_factory=uow_factory, event_cache_handler=event_cache_handler)


@pytest.fixture
def create_event_use_case(uow_factory, event_cache_handler) -> CreateEventUseCase:
    return CreateEventUseCase(uow_factory=uow_factory, event_cache_handler=event_cache_handler)


@pytest.fixture
def reserve_seat_use_case(
    uow_factory,
    get_event_use_case,
    event_cache_handler,
    event_lock_handler,
    payment_gateway,
    expiration_job_queue,
) -> ReserveSeatUseCase:
    return ReserveSeatUseCase(
        uow_factory=uow_factory,
        get_event_use_case=get_event_use_case,
        event_cache_handler=event_cache_handler,
        event_lock_handler=event_lock_handler,
        payment_gateway=payment_gateway,
        expiration_job_queue=expiration_job_queue,
    )


@pytest.fixture
def confirm_seat_use_case(uow_factory, event_cache_handler, event_lock_handler) -> ConfirmSeatUseCase:
    return ConfirmSeatUseCase(
        uow_factory=uow_factory,
        event_cache_handler=event_cache_handler,
        event_lock_handler=event_lock_handler,
    )


@pytest.fixture
def release_seat_use_case(uow_factory, event_cache_handler, event_lock_handler) -> ReleaseSeatUseCase:
    return ReleaseSeatUseCase(
        uow_factory=uow_factory,
        event_cache_handler=event_cache_handler,
        event_lock_handler=event_lock_handler,
    )


@pytest.fixture
def cancel_reservation_use_case(
    uow_factory, event_cache_handler, payment_gateway
) -> CancelReservationUseCase:
    return CancelReservationUseCase(
        uow_factory=uow_factory,
        event_cache_handler=event_cache_handler,
        payment_gateway=payment_gateway,
    )


@pytest.fixture
def expire_overdue_sessions_use_case(
    expiration_job_queue, payment_gateway
) -> ExpireOverdueSessionsUseCase:
    return ExpireOverdueSessionsUseCase(
        expiration_job_queue=expiration_job_queue, payment_gateway=payment_gateway
    )


@pytest.fixture
def payment_notification_handler(
    confirm_seat_use_case, release_seat_use_case
) -> PaymentNotificationHandler:
    return PaymentNotificationHandler(
        confirm_seat_use_case=confirm_seat_use_case,
        release_seat_use_case=release_seat_use_case,
    )

