"""Flow orchestration

Each advance runs strictly in order: side effect, pure handler, next-step
resolution, state rebuild. A failure at any point returns the caller's
FlowState unchanged and leaves the flow on the same step.

Callers must not start a second advance for the same flow before the first
one completes.
"""
import logging
from typing import Any, Dict, Optional, Sequence, Union

from ...config.settings import AuthFlowSettings
from ...services.side_effects import SideEffectExecutor
from ..utils import timing
from ..utils.audit_logging import log_auth_event
from ..utils.error_handler import ErrorHandler
from ..utils.error_types import ErrorCode
from ..utils.exceptions import InvalidStepException, ValidationException
from .constants import AuthStep, FlowType, OtpMedium
from .definitions import find_step_index, get_flow_steps, next_valid_index
from .state_builder import FlowStateBuilder
from .types import FlowAdvanceResult, FlowInit, FlowState, FlowStep

logger = logging.getLogger(__name__)


def _identity(state: FlowState) -> Optional[str]:
    return state.phone or state.email


class FlowOrchestrator:
    """Starts and advances authentication flows"""

    def __init__(
        self,
        executor: SideEffectExecutor,
        state_builder: FlowStateBuilder,
        settings: Optional[AuthFlowSettings] = None
    ):
        self.executor = executor
        self.state_builder = state_builder
        self.settings = settings or AuthFlowSettings()

    async def initiate_flow(
        self,
        flow_type: Union[FlowType, str],
        seed: Optional[Dict[str, Any]] = None
    ) -> FlowInit:
        """Start a flow at its first step whose condition holds

        Args:
            flow_type: Journey to start
            seed: Optional initial FlowState fields

        Raises:
            InvalidFlowTypeException: If the flow type is unknown
            InvalidStepException: If no step of the flow applies
            ServiceException: If security state cannot be reconciled
        """
        steps = get_flow_steps(flow_type, include_wallet=self.settings.wallet_step_enabled)
        flow_type = FlowType(flow_type)

        state = await self.state_builder.build_flow_state(
            FlowState(flow_type=flow_type),
            {**(seed or {}), "flow_type": flow_type}
        )

        # Contact details of a known user are fixed during a PIN reset
        if flow_type == FlowType.FORGOT_PIN and state.user and state.token_valid:
            state = state.merge({
                "phone": state.user.get("phone") or state.phone,
                "email": state.user.get("email") or state.email,
                "phone_validated": True,
                "email_verified": True,
            })

        index = next_valid_index(steps, -1, state) if steps else None
        if index is None:
            logger.error(f"No initial step for flow {flow_type.value}")
            raise InvalidStepException(
                message=f"No valid initial step for {flow_type.value}",
                step=None,
                action="initiate_flow",
                data={"code": ErrorCode.FLOW_INIT_FAILED.value}
            )

        current_step = steps[index].step
        logger.info(f"Flow {flow_type.value} initiated at {current_step.value}")
        log_auth_event("flow_initiated", _identity(state), "success", {
            "flow_type": flow_type.value,
            "step": current_step.value,
        })

        return FlowInit(
            flow_type=flow_type,
            steps=steps,
            current_step=current_step,
            current_step_index=index,
            flow_state=state
        )

    async def advance_flow(
        self,
        current_step: Union[AuthStep, str],
        flow_state: FlowState,
        payload: Optional[Dict[str, Any]],
        steps: Sequence[FlowStep]
    ) -> FlowAdvanceResult:
        """Complete the current step and resolve the next one

        Raises:
            ServiceException: If security state cannot be reconciled
        """
        payload = payload or {}

        try:
            current_step = AuthStep(current_step)
        except ValueError:
            return self._flow_failure(
                str(current_step), flow_state, "Step not found in flow", ErrorCode.FLOW_STEP_NOT_FOUND
            )

        index = find_step_index(steps, current_step)
        if index is None:
            return self._flow_failure(
                current_step.value, flow_state, "Step not found in flow", ErrorCode.FLOW_STEP_NOT_FOUND
            )
        step = steps[index]

        if current_step == AuthStep.AUTHENTICATED:
            return await self._reenter_authenticated(step, index, flow_state, payload)

        try:
            effect = await step.side_effect(self.executor, flow_state, payload)
        except Exception as e:
            logger.exception(f"Side effect for {current_step.value} raised")
            error = ErrorHandler.handle_system_error(
                code=ErrorCode.UNKNOWN,
                service="side_effects",
                action=current_step.value,
                message=str(e),
                error=e
            )
            return FlowAdvanceResult(success=False, flow_state=flow_state, error_code=ErrorCode.UNKNOWN, error=error)

        if not effect.success:
            code = effect.error_code or ErrorCode.UNKNOWN
            error = ErrorHandler.handle_flow_error(
                step=current_step.value,
                action="side_effect",
                message=effect.message or ErrorHandler.get_error_message(code),
                code=code
            )
            return FlowAdvanceResult(success=False, flow_state=flow_state, error_code=code, error=error)

        working = flow_state.merge(effect.data)

        try:
            result = step.handler(working, payload)
        except ValidationException as e:
            error = ErrorHandler.handle_component_error(
                step=current_step.value,
                field=e.details.get("field"),
                message=e.message
            )
            return FlowAdvanceResult(
                success=False, flow_state=flow_state, error_code=ErrorCode.VALIDATION_ERROR, error=error
            )
        except Exception as e:
            logger.exception(f"Handler for {current_step.value} raised")
            error = ErrorHandler.handle_system_error(
                code=ErrorCode.UNKNOWN,
                service="handlers",
                action=current_step.value,
                message=str(e),
                error=e
            )
            return FlowAdvanceResult(success=False, flow_state=flow_state, error_code=ErrorCode.UNKNOWN, error=error)

        working = working.merge(result.next_data)

        if result.next_step is not None:
            next_step = AuthStep(result.next_step)
            next_index = find_step_index(steps, next_step)
        else:
            next_index = next_valid_index(steps, index, working)
            if next_index is None:
                return self._flow_failure(
                    current_step.value, flow_state, "No next step available", ErrorCode.FLOW_DEAD_END
                )
            next_step = steps[next_index].step

        final_state = await self.state_builder.build_flow_state(working)
        logger.info(f"Flow transition: {current_step.value} -> {next_step.value}")

        session = None
        if next_step == AuthStep.AUTHENTICATED:
            session = await self.executor.security_store.get_session()
            log_auth_event("flow_authenticated", _identity(final_state), "success", {
                "flow_type": getattr(final_state.flow_type, "value", None),
            })

        return FlowAdvanceResult(
            success=True,
            flow_state=final_state,
            next_step=next_step,
            next_step_index=next_index,
            session=session
        )

    async def _reenter_authenticated(
        self,
        step: FlowStep,
        index: int,
        flow_state: FlowState,
        payload: Dict[str, Any]
    ) -> FlowAdvanceResult:
        """Terminal step is idempotent while the session lasts

        The session is never recreated here. An expired or cleared session, or
        an expired token, fails with SESSION_EXPIRED; a new flow started from
        the stored state then routes to PIN entry or token acquisition.
        """
        try:
            effect = await step.side_effect(self.executor, flow_state, payload)
        except Exception as e:
            logger.exception("Side effect for authenticated raised")
            error = ErrorHandler.handle_system_error(
                code=ErrorCode.UNKNOWN,
                service="side_effects",
                action=step.step.value,
                message=str(e),
                error=e
            )
            return FlowAdvanceResult(success=False, flow_state=flow_state, error_code=ErrorCode.UNKNOWN, error=error)

        if not effect.success:
            code = effect.error_code or ErrorCode.UNKNOWN
            error = ErrorHandler.handle_flow_error(
                step=step.step.value,
                action="side_effect",
                message=effect.message or ErrorHandler.get_error_message(code),
                code=code
            )
            return FlowAdvanceResult(success=False, flow_state=flow_state, error_code=code, error=error)

        final_state = await self.state_builder.build_flow_state(flow_state, effect.data)
        if not step.condition(final_state):
            logger.info("Authenticated step no longer holds, session expired")
            error = ErrorHandler.handle_flow_error(
                step=step.step.value,
                action="reenter",
                message=ErrorHandler.get_error_message(ErrorCode.SESSION_EXPIRED),
                code=ErrorCode.SESSION_EXPIRED
            )
            return FlowAdvanceResult(
                success=False, flow_state=flow_state, error_code=ErrorCode.SESSION_EXPIRED, error=error
            )

        session = await self.executor.security_store.get_session()
        return FlowAdvanceResult(
            success=True,
            flow_state=final_state,
            next_step=AuthStep.AUTHENTICATED,
            next_step_index=index,
            session=session
        )

    def _flow_failure(
        self,
        step: str,
        flow_state: FlowState,
        message: str,
        detail_code: ErrorCode
    ) -> FlowAdvanceResult:
        """Orchestration defect, surfaced to callers as a validation error"""
        error = ErrorHandler.handle_flow_error(
            step=step,
            action="advance_flow",
            message=message,
            code=detail_code,
            flow_state={"flow_type": getattr(flow_state.flow_type, "value", None)}
        )
        return FlowAdvanceResult(
            success=False,
            flow_state=flow_state,
            error_code=ErrorCode.VALIDATION_ERROR,
            error=error
        )

    async def restart_step(
        self,
        flow_type: Union[FlowType, str],
        flow_state: FlowState,
        medium: Union[OtpMedium, str]
    ) -> FlowInit:
        """Go back to a contact entry step so a fresh OTP can be sent"""
        medium = OtpMedium(medium)
        validated_field = "phone_validated" if medium == OtpMedium.PHONE else "email_verified"
        seed = flow_state.to_dict()
        seed.update({
            f"{medium.value}_otp_expires": timing.now_ms() - 1,
            validated_field: False,
        })
        logger.info(f"Restarting {medium.value} entry for flow {FlowType(flow_type).value}")
        return await self.initiate_flow(flow_type, seed)

    def end_flow(self, flow_state: FlowState) -> FlowState:
        """Discard a flow instance"""
        logger.info(f"Flow {getattr(flow_state.flow_type, 'value', None)} ended")
        return FlowState()
