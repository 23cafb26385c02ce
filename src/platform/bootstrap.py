"""
Infrastructure startup/shutdown shared by every entry point

The HTTP layer (out of this package) calls these from its lifespan; the
expiration reaper calls them around its loop.
"""

from typing import Optional

from src.platform.database.orm_db_setting import create_db_and_tables, dispose_engine
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig
from src.platform.state.kvrocks_client import kvrocks_client


async def init_infra(
    *, create_tables: bool = True, tracing: Optional[TracingConfig] = None
) -> None:
    # Instrument before the first connection so every call is traced
    if tracing is not None:
        tracing.instrument_redis()
        tracing.instrument_database()

    # Fail-fast: ping before serving
    await kvrocks_client.initialize()
    Logger.base.info('📡 [Bootstrap] Kvrocks initialized')

    if create_tables:
        await create_db_and_tables()

    Logger.base.info('✅ [Bootstrap] Infrastructure ready')


async def close_infra() -> None:
    await kvrocks_client.disconnect()
    Logger.base.info('📡 [Bootstrap] Kvrocks disconnected')

    await dispose_engine()
    Logger.base.info('🗄️ [Bootstrap] Database engine disposed')
