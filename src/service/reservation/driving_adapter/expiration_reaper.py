"""
Expiration Reaper - periodic backstop for abandoned checkout sessions

Each tick runs ExpireOverdueSessionsUseCase. A failing tick is logged and the
loop keeps going; the jobs it could not handle stay queued for the next one.
"""

import anyio

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.service.reservation.app.command.expire_overdue_sessions_use_case import (
    ExpireOverdueSessionsUseCase,
)


class ExpirationReaper:
    def __init__(
        self,
        *,
        expire_overdue_sessions_use_case: ExpireOverdueSessionsUseCase,
        interval_seconds: float | None = None,
    ) -> None:
        self.expire_overdue_sessions_use_case = expire_overdue_sessions_use_case
        self.interval_seconds = interval_seconds or settings.REAPER_INTERVAL_SECONDS

    async def tick(self) -> int:
        try:
            return await self.expire_overdue_sessions_use_case.execute()
        except Exception as e:
            Logger.base.exception(f'❌ [REAPER] Tick failed: {e}')
            return 0

    async def run(self, shutdown_event: anyio.Event) -> None:
        Logger.base.info(f'⏱️ [REAPER] Running every {self.interval_seconds}s')
        while not shutdown_event.is_set():
            processed = await self.tick()
            if processed:
                Logger.base.info(f'🧹 [REAPER] Expired {processed} session(s)')

            with anyio.move_on_after(self.interval_seconds):
                await shutdown_event.wait()

        Logger.base.info('🛑 [REAPER] Stopped')
