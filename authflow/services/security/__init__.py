from .storage import KeyValueStorage, MemoryStorage, RedisStorage
from .store import SecurityStore

__all__ = ['KeyValueStorage', 'MemoryStorage', 'RedisStorage', 'SecurityStore']
