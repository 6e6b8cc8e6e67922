"""Condition-driven authentication flows (sign-up, sign-in, forgot-PIN)"""
from .config.settings import AuthFlowSettings, configure_logging
from .core.flow.constants import AuthStep, FlowType
from .core.flow.definitions import get_flow_steps, next_valid_index
from .core.flow.orchestrator import FlowOrchestrator
from .core.flow.state_builder import FlowStateBuilder
from .core.flow.types import FlowAdvanceResult, FlowInit, FlowState
from .core.utils.error_types import ErrorCode
from .factory import create_flow_orchestrator

__all__ = [
    'AuthFlowSettings',
    'configure_logging',
    'AuthStep',
    'FlowType',
    'get_flow_steps',
    'next_valid_index',
    'FlowOrchestrator',
    'FlowStateBuilder',
    'FlowAdvanceResult',
    'FlowInit',
    'FlowState',
    'ErrorCode',
    'create_flow_orchestrator'
]
