"""Flow step tables

Each flow is an ordered tuple of FlowStep variants drawn from one step pool.
The next step is always the first later step whose condition holds; position
alone never selects a step.
"""
import logging
from typing import Dict, Optional, Sequence, Tuple

from ...services.side_effects import SideEffectExecutor
from ..utils.exceptions import InvalidFlowTypeException
from . import conditions, handlers
from .constants import AuthStep, FlowType
from .types import FlowState, FlowStep

logger = logging.getLogger(__name__)


STEP_POOL: Dict[AuthStep, FlowStep] = {
    AuthStep.PHONE_ENTRY: FlowStep(
        step=AuthStep.PHONE_ENTRY,
        condition=conditions.phone_entry,
        handler=handlers.phone_entry,
        side_effect=SideEffectExecutor.phone_entry,
    ),
    AuthStep.PHONE_OTP_PENDING: FlowStep(
        step=AuthStep.PHONE_OTP_PENDING,
        condition=conditions.phone_otp_pending,
        handler=handlers.phone_otp,
        side_effect=SideEffectExecutor.phone_otp_pending,
    ),
    AuthStep.EMAIL_ENTRY_PENDING: FlowStep(
        step=AuthStep.EMAIL_ENTRY_PENDING,
        condition=conditions.email_entry,
        handler=handlers.email_entry,
        side_effect=SideEffectExecutor.email_entry_pending,
    ),
    AuthStep.EMAIL_OTP_PENDING: FlowStep(
        step=AuthStep.EMAIL_OTP_PENDING,
        condition=conditions.email_otp_pending,
        handler=handlers.email_otp,
        side_effect=SideEffectExecutor.email_otp_pending,
    ),
    AuthStep.TOKEN_ACQUISITION: FlowStep(
        step=AuthStep.TOKEN_ACQUISITION,
        condition=conditions.token_acquisition,
        handler=handlers.token_acquisition,
        side_effect=SideEffectExecutor.token_acquisition,
    ),
    AuthStep.USER_PROFILE_PENDING: FlowStep(
        step=AuthStep.USER_PROFILE_PENDING,
        condition=conditions.user_profile,
        handler=handlers.user_profile,
        side_effect=SideEffectExecutor.user_profile_pending,
    ),
    AuthStep.WALLET_CREATION_PENDING: FlowStep(
        step=AuthStep.WALLET_CREATION_PENDING,
        condition=conditions.wallet_creation,
        handler=handlers.wallet_creation,
        side_effect=SideEffectExecutor.wallet_creation_pending,
    ),
    AuthStep.PIN_SETUP_PENDING: FlowStep(
        step=AuthStep.PIN_SETUP_PENDING,
        condition=conditions.pin_setup,
        handler=handlers.pin_setup,
        side_effect=SideEffectExecutor.pin_setup_pending,
    ),
    AuthStep.PIN_ENTRY_PENDING: FlowStep(
        step=AuthStep.PIN_ENTRY_PENDING,
        condition=conditions.pin_entry,
        handler=handlers.pin_entry,
        side_effect=SideEffectExecutor.pin_entry_pending,
    ),
    AuthStep.AUTHENTICATED: FlowStep(
        step=AuthStep.AUTHENTICATED,
        condition=conditions.authenticated,
        handler=handlers.authenticated,
        side_effect=SideEffectExecutor.authenticated,
    ),
}

# Forgot-PIN replaces the configured PIN, so its setup step ignores pin_set
PIN_RESET_STEP = FlowStep(
    step=AuthStep.PIN_SETUP_PENDING,
    condition=conditions.pin_reset,
    handler=handlers.pin_setup,
    side_effect=SideEffectExecutor.pin_setup_pending,
)

VERIFICATION_STEPS = (
    AuthStep.PHONE_ENTRY,
    AuthStep.PHONE_OTP_PENDING,
    AuthStep.EMAIL_ENTRY_PENDING,
    AuthStep.EMAIL_OTP_PENDING,
    AuthStep.TOKEN_ACQUISITION,
)

SIGNUP_STEPS = VERIFICATION_STEPS + (
    AuthStep.USER_PROFILE_PENDING,
    AuthStep.WALLET_CREATION_PENDING,
    AuthStep.PIN_SETUP_PENDING,
    AuthStep.PIN_ENTRY_PENDING,
    AuthStep.AUTHENTICATED,
)

SIGNIN_STEPS = VERIFICATION_STEPS + (
    AuthStep.PIN_SETUP_PENDING,
    AuthStep.PIN_ENTRY_PENDING,
    AuthStep.AUTHENTICATED,
)


def get_flow_steps(flow_type: FlowType, include_wallet: bool = False) -> Tuple[FlowStep, ...]:
    """Build the ordered step table for a flow

    Args:
        flow_type: Journey to build
        include_wallet: Keep the wallet-creation step in sign-up

    Raises:
        InvalidFlowTypeException: If the flow type is unknown
    """
    try:
        flow_type = FlowType(flow_type)
    except ValueError:
        raise InvalidFlowTypeException(
            message=f"Unknown flow type: {flow_type}",
            step=None,
            action="get_flow_steps"
        )

    if flow_type == FlowType.SIGNUP:
        return tuple(
            STEP_POOL[step] for step in SIGNUP_STEPS
            if include_wallet or step != AuthStep.WALLET_CREATION_PENDING
        )

    if flow_type == FlowType.SIGNIN:
        return tuple(STEP_POOL[step] for step in SIGNIN_STEPS)

    return tuple(STEP_POOL[step] for step in VERIFICATION_STEPS) + (
        PIN_RESET_STEP,
        STEP_POOL[AuthStep.AUTHENTICATED],
    )


def find_step_index(steps: Sequence[FlowStep], step: AuthStep) -> Optional[int]:
    for index, flow_step in enumerate(steps):
        if flow_step.step == step:
            return index
    return None


def next_valid_index(steps: Sequence[FlowStep], from_index: int, state: FlowState) -> Optional[int]:
    """First index after `from_index` whose condition holds, None if none does"""
    for index in range(from_index + 1, len(steps)):
        if steps[index].condition(state):
            return index
    return None
