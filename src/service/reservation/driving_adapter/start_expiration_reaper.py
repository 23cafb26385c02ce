"""
Standalone Expiration Reaper Entry Point (Async)

Usage:
    PYTHONPATH=$PWD python src/service/reservation/driving_adapter/start_expiration_reaper.py
"""

import signal

import anyio

from src.platform.bootstrap import close_infra, init_infra
from src.platform.config.di import container
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig
from src.service.reservation.driving_adapter.expiration_reaper import ExpirationReaper


async def main() -> None:
    """Main async entry point for the expiration reaper."""
    Logger.base.info('🚀 [Expiration Reaper] Starting...')

    tracing = TracingConfig(service_name='expiration-reaper')
    tracing.setup()

    await init_infra(create_tables=False, tracing=tracing)

    reaper = ExpirationReaper(
        expire_overdue_sessions_use_case=container.expire_overdue_sessions_use_case()
    )
    shutdown_event = anyio.Event()

    try:
        with anyio.open_signal_receiver(signal.SIGINT, signal.SIGTERM) as signals:

            async def signal_watcher() -> None:
                async for signum in signals:
                    Logger.base.info(f'🛑 [Expiration Reaper] Received signal {signum}')
                    shutdown_event.set()
                    break

            async with anyio.create_task_group() as tg:
                tg.start_soon(signal_watcher)
                await reaper.run(shutdown_event)
                tg.cancel_scope.cancel()
    finally:
        await close_infra()
        tracing.shutdown()
        Logger.base.info('👋 [Expiration Reaper] Shutdown complete')


def run() -> None:
    anyio.run(main)


if __name__ == '__main__':
    run()
