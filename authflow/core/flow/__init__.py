from .constants import AuthStep, FlowType, OtpChannel, OtpMedium
from .types import (FlowAdvanceResult, FlowInit, FlowState, FlowStep,
                    SideEffectResult, StepResult)

__all__ = [
    'AuthStep',
    'FlowType',
    'OtpChannel',
    'OtpMedium',
    'FlowAdvanceResult',
    'FlowInit',
    'FlowState',
    'FlowStep',
    'SideEffectResult',
    'StepResult'
]
