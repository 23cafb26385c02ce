import time
from typing import Optional

from src.platform.exception.exceptions import PaymentGatewayError, PaymentSessionGoneError
from src.platform.logging.loguru_io import Logger
from src.service.reservation.app.interface import IExpirationJobQueue, IPaymentGateway


class ExpireOverdueSessionsUseCase:
    """
    One reaper tick: force-expire every checkout session whose job is due.

    Seats are never touched here; the gateway's expiry notification drives the
    release path. A job whose expiry failed transiently stays queued.
    """

    def __init__(
        self,
        *,
        expiration_job_queue: IExpirationJobQueue,
        payment_gateway: IPaymentGateway,
    ) -> None:
        self.expiration_job_queue = expiration_job_queue
        self.payment_gateway = payment_gateway

    @Logger.io
    async def execute(self, *, now_ms: Optional[int] = None) -> int:
        if now_ms is None:
            now_ms = int(time.time() * 1000)

        due_session_ids = await self.expiration_job_queue.get_due_session_ids(now_ms=now_ms)
        if not due_session_ids:
            return 0

        Logger.base.info(f'🧹 [REAPER] {len(due_session_ids)} session(s) due for expiration')

        processed: list[str] = []
        for session_id in due_session_ids:
            try:
                await self.payment_gateway.expire_checkout_session(session_id=session_id)
                processed.append(session_id)
            except PaymentSessionGoneError:
                Logger.base.debug(f'⏭️ [REAPER] Session {session_id} already closed')
                processed.append(session_id)
            except PaymentGatewayError as e:
                Logger.base.warning(f'⚠️ [REAPER] Session {session_id} kept for retry: {e.message}')

        await self.expiration_job_queue.remove(session_ids=processed)
        return len(processed)
