from .api import AuthApiService, UserApiService
from .interface import (AuthServiceInterface, PinValidation,
                        SecurityStoreInterface, Session, TokenStatus,
                        UserServiceInterface)
from .security import MemoryStorage, RedisStorage, SecurityStore
from .side_effects import SideEffectExecutor

__all__ = [
    'AuthApiService',
    'UserApiService',
    'AuthServiceInterface',
    'UserServiceInterface',
    'SecurityStoreInterface',
    'PinValidation',
    'Session',
    'TokenStatus',
    'MemoryStorage',
    'RedisStorage',
    'SecurityStore',
    'SideEffectExecutor'
]
