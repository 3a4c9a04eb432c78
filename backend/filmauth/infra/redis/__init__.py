from .redis_blacklist_store import RedisBlacklistStore

__all__ = ["RedisBlacklistStore"]
