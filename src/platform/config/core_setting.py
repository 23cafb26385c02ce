from pathlib import Path

from pydantic import SecretStr, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'Seat Reservation Engine'
    VERSION: str = '0.1.0'
    DEBUG: bool = True  # Set to False in production

    # PostgreSQL (authoritative store)
    POSTGRES_SERVER: str = 'localhost'
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = 'postgres'
    POSTGRES_PASSWORD: SecretStr = SecretStr('postgres')
    POSTGRES_DB: str = 'seat_reservation'

    # SQLAlchemy pool
    DB_POOL_SIZE: int = 10
    DB_POOL_MAX_OVERFLOW: int = 5
    DB_POOL_TIMEOUT: int = 30  # seconds
    DB_POOL_RECYCLE: int = 3600  # seconds
    DB_POOL_PRE_PING: bool = True

    @computed_field
    @property
    def DATABASE_URL_ASYNC(self) -> str:
        return (
            f'postgresql+asyncpg://{self.POSTGRES_USER}:'
            f'{self.POSTGRES_PASSWORD.get_secret_value()}@'
            f'{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}'
        )

    # Kvrocks Configuration (Redis protocol, holds cache / lock / expiration queue)
    KVROCKS_HOST: str = 'localhost'
    KVROCKS_PORT: int = 6666
    KVROCKS_DB: int = 0
    KVROCKS_PASSWORD: str = ''
    KVROCKS_KEY_PREFIX: str = ''  # per-worker prefix for test isolation
    REDIS_DECODE_RESPONSES: bool = True

    # Kvrocks Connection Pool Configuration
    KVROCKS_POOL_MAX_CONNECTIONS: int = 100
    KVROCKS_POOL_SOCKET_TIMEOUT: int = 5  # seconds
    KVROCKS_POOL_SOCKET_CONNECT_TIMEOUT: int = 5  # seconds
    KVROCKS_POOL_SOCKET_KEEPALIVE: bool = True
    KVROCKS_POOL_HEALTH_CHECK_INTERVAL: int = 30  # seconds

    # Reservation engine
    # Lock lease must outlive the slowest guarded section (Stripe session create + DB transaction)
    LOCK_TTL_MS: int = 10_000
    # Snapshot cache must outlive a checkout session
    EVENT_CACHE_TTL_SECONDS: int = 3600
    CHECKOUT_SESSION_TTL_SECONDS: int = 1800  # Stripe minimum is 30 minutes
    EXPIRATION_JOB_DELAY_SECONDS: int = 600
    REAPER_INTERVAL_SECONDS: float = 10.0
    MAX_SEATS_PER_ORDER: int = 4
    FREE_EVENT_MAX_SEATS: int = 1

    # Logging
    LOG_LEVEL: str = ''  # empty: DEBUG when DEBUG is on, otherwise INFO
    LOG_DIR: str = str(_PROJECT_ROOT / 'logs')
    LOG_RETENTION: str = '7 days'

    # Stripe
    STRIPE_SECRET_KEY: SecretStr = SecretStr('sk_test_change_me')
    STRIPE_CURRENCY: str = 'usd'
    CLIENT_URL: str = 'http://localhost:3000'

    @field_validator('CLIENT_URL', mode='before')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip('/') if isinstance(v, str) else v


settings = Settings()  # type: ignore
