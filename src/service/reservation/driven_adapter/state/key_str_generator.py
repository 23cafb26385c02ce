"""
Key String Generator

Helper functions for generating Kvrocks keys used across the reservation engine.
"""

from src.platform.state.kvrocks_client import make_key


EXPIRATION_QUEUE_KEY = 'scheduler:session_expiration'


def make_event_cache_key(*, event_id: int) -> str:
    """Generate event snapshot cache key"""
    return make_key(f'event:{event_id}')


def make_event_cache_version_key(*, event_id: int) -> str:
    """Generate the counter bumped on every snapshot invalidation"""
    return make_key(f'event:{event_id}:version')


def make_event_lock_key(*, event_id: int) -> str:
    """Generate per-event reservation lease key"""
    return make_key(f'lock:event:{event_id}')


def make_expiration_queue_key() -> str:
    """Generate the sorted set key holding checkout-session expiration jobs"""
    return make_key(EXPIRATION_QUEUE_KEY)
