"""Composition root for the auth flow engine"""
import logging
from typing import Any, Dict, Optional

from .config.settings import AuthFlowSettings
from .core.flow.orchestrator import FlowOrchestrator
from .core.flow.state_builder import FlowStateBuilder
from .services.api import AuthApiService, UserApiService
from .services.interface import (AuthServiceInterface, SecurityStoreInterface,
                                 UserServiceInterface)
from .services.security import (KeyValueStorage, MemoryStorage, RedisStorage,
                                SecurityStore)
from .services.side_effects import SideEffectExecutor

logger = logging.getLogger(__name__)


def create_storage(settings: AuthFlowSettings) -> KeyValueStorage:
    """Key-value backend selected by SECURITY_STORAGE"""
    if settings.security_storage == "redis":
        logger.info("Using Redis security storage")
        return RedisStorage.from_url(settings.redis_url)
    return MemoryStorage()


def create_flow_orchestrator(
    settings: Optional[AuthFlowSettings] = None,
    auth_service: Optional[AuthServiceInterface] = None,
    user_service: Optional[UserServiceInterface] = None,
    security_store: Optional[SecurityStoreInterface] = None,
    device_info: Optional[Dict[str, Any]] = None
) -> FlowOrchestrator:
    """Wire an orchestrator, building any collaborator not supplied"""
    settings = settings or AuthFlowSettings.from_env()
    security_store = security_store or SecurityStore(create_storage(settings), settings)
    auth_service = auth_service or AuthApiService(settings, security_store)
    user_service = user_service or UserApiService(settings, security_store)

    executor = SideEffectExecutor(
        auth_service=auth_service,
        user_service=user_service,
        security_store=security_store,
        settings=settings,
        device_info=device_info
    )
    state_builder = FlowStateBuilder(security_store, user_service)
    return FlowOrchestrator(executor, state_builder, settings)
