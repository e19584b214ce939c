"""Factory for creating shared store instances."""

from ratelimitations.adapters.store.in_memory import InMemoryStore
from ratelimitations.adapters.store.redis_store import RedisStore
from ratelimitations.core.config import StoreSettings
from ratelimitations.core.errors import ConfigurationError


def create_store(store_settings: StoreSettings | None = None) -> InMemoryStore | RedisStore:
    """Instantiate the store back-end named by settings.

    Args:
        store_settings: Store settings; read from RATELIMIT_STORE_* when omitted.

    Returns:
        A store implementing both the access log and keyspace interfaces.

    Raises:
        ConfigurationError: If the back-end is unknown.
    """
    cfg = store_settings or StoreSettings()
    backend = cfg.backend.lower()

    if backend == "redis":
        return RedisStore.from_url(cfg.redis_url, socket_timeout=cfg.socket_timeout_seconds)

    if backend == "memory":
        return InMemoryStore()

    raise ConfigurationError(
        code="unknown_store_backend",
        message=f"Unknown store backend: '{cfg.backend}'. Supported backends: redis, memory",
    )
