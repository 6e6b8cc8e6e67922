"""Side effects executed before each step's pure handler

Every method takes (state, payload) and returns a SideEffectResult. Expected
failures (validation, business-rule rejection, network) come back as
`SideEffectResult.failure(code)`; nothing here raises for them. Success data
uses FlowState field names and is merged before the handler runs.
"""
import logging
from typing import Any, Dict, Iterable, Optional

from ..config.settings import AuthFlowSettings
from ..core.flow.conditions import otp_pending
from ..core.flow.constants import (PROFILE_OPTIONAL_FIELDS,
                                   PROFILE_REQUIRED_FIELDS, FlowType,
                                   OtpMedium)
from ..core.flow.handlers import full_phone
from ..core.flow.types import FlowState, SideEffectResult
from ..core.utils import timing
from ..core.utils.audit_logging import log_auth_event
from ..core.utils.error_types import (OTP_SEND_CODES, OTP_VERIFY_CODES,
                                      ErrorCode)
from ..core.utils.exceptions import SystemException
from .device import get_device_info
from .interface import (AuthServiceInterface, SecurityStoreInterface,
                        UserServiceInterface)

logger = logging.getLogger(__name__)


def _text(payload: Dict[str, Any], field: str) -> Optional[str]:
    value = payload.get(field)
    if isinstance(value, str):
        value = value.strip()
    return value or None


def failure_from(
    data: Dict[str, Any],
    default: ErrorCode,
    passthrough: Iterable[ErrorCode] = (ErrorCode.NETWORK_ERROR,)
) -> SideEffectResult:
    """Map a collaborator failure onto a result, keeping known codes"""
    code = ErrorCode.parse(data.get("code"), default)
    if code not in passthrough:
        code = default
    return SideEffectResult.failure(code, data.get("error"))


class SideEffectExecutor:
    """One async effect per step, bound to its collaborators"""

    def __init__(
        self,
        auth_service: AuthServiceInterface,
        user_service: UserServiceInterface,
        security_store: SecurityStoreInterface,
        settings: Optional[AuthFlowSettings] = None,
        device_info: Optional[Dict[str, Any]] = None
    ):
        self.auth_service = auth_service
        self.user_service = user_service
        self.security_store = security_store
        self.settings = settings or AuthFlowSettings()
        self.device_info = device_info

    async def _send_otp(
        self,
        state: FlowState,
        medium: OtpMedium,
        value: str,
        channel: Optional[str] = None
    ) -> SideEffectResult:
        """Availability check (sign-up only) then send, returning the expiry"""
        if state.flow_type == FlowType.SIGNUP:
            success, data = await self.auth_service.check_availability(medium.value, value)
            if not success:
                return failure_from(data, ErrorCode.UNKNOWN, OTP_SEND_CODES)

        success, data = await self.auth_service.send_otp(medium.value, value, channel)
        if not success:
            return failure_from(data, ErrorCode.OTP_SEND_FAILED, OTP_SEND_CODES)

        # Fresh timer on every send, so a resend always moves the expiry forward
        expires = data.get("expires") or timing.seconds_from_now_ms(self.settings.otp_expiry_seconds)
        return SideEffectResult.ok({f"{medium.value}_otp_expires": int(expires)})

    async def _verify_otp(
        self,
        medium: OtpMedium,
        value: Optional[str],
        code: Optional[str],
        expires: Optional[int]
    ) -> SideEffectResult:
        if expires is not None and not otp_pending(expires):
            return SideEffectResult.failure(ErrorCode.OTP_EXPIRED, "Verification code expired")
        if not code:
            return SideEffectResult.failure(ErrorCode.VALIDATION_ERROR, "otp is required")

        success, data = await self.auth_service.verify_otp(medium.value, value, code)
        if not success:
            return failure_from(data, ErrorCode.OTP_VERIFY_FAILED, OTP_VERIFY_CODES)
        return SideEffectResult.ok()

    async def phone_entry(self, state: FlowState, payload: Dict[str, Any]) -> SideEffectResult:
        country_code = _text(payload, "countryCode")
        phone_number = _text(payload, "phoneNumber")
        if not country_code or not phone_number:
            return SideEffectResult.failure(ErrorCode.VALIDATION_ERROR, "countryCode and phoneNumber are required")

        phone = full_phone(country_code, phone_number)
        if len(phone) < 5:
            return SideEffectResult.failure(ErrorCode.PHONE_INVALID, "Invalid phone number")

        channel = payload.get("channel") or state.channel or self.settings.default_otp_channel
        return await self._send_otp(state, OtpMedium.PHONE, phone, channel)

    async def phone_otp_pending(self, state: FlowState, payload: Dict[str, Any]) -> SideEffectResult:
        return await self._verify_otp(OtpMedium.PHONE, state.phone, _text(payload, "otp"), state.phone_otp_expires)

    async def email_entry_pending(self, state: FlowState, payload: Dict[str, Any]) -> SideEffectResult:
        email = _text(payload, "email")
        if not email:
            return SideEffectResult.failure(ErrorCode.VALIDATION_ERROR, "email is required")
        return await self._send_otp(state, OtpMedium.EMAIL, email.lower())

    async def email_otp_pending(self, state: FlowState, payload: Dict[str, Any]) -> SideEffectResult:
        code = _text(payload, "emailCode") or _text(payload, "otp")
        return await self._verify_otp(OtpMedium.EMAIL, state.email, code, state.email_otp_expires)

    async def token_acquisition(self, state: FlowState, payload: Dict[str, Any]) -> SideEffectResult:
        device_info = self.device_info or get_device_info()
        success, data = await self.auth_service.acquire_auth_token(state.phone, state.email, device_info)
        if not success:
            log_auth_event("token_acquired", state.phone, "failure", {"code": data.get("code")})
            return failure_from(data, ErrorCode.TOKEN_ACQUISITION_FAILED)

        await self.security_store.save_tokens(data["accessToken"], data.get("refreshToken"))
        log_auth_event("token_acquired", state.phone, "success")

        success, data = await self.user_service.get_user_profile()
        if not success:
            logger.warning(f"User fetch after token acquisition failed: {data.get('error')}")
            return SideEffectResult.ok()
        return SideEffectResult.ok({"user": data.get("user")})

    async def user_profile_pending(self, state: FlowState, payload: Dict[str, Any]) -> SideEffectResult:
        fields = {name: _text(payload, name) for name in PROFILE_REQUIRED_FIELDS}
        missing = [name for name, value in fields.items() if not value]
        if missing:
            return SideEffectResult.failure(ErrorCode.VALIDATION_ERROR, f"Missing fields: {', '.join(missing)}")
        fields.update({name: payload[name] for name in PROFILE_OPTIONAL_FIELDS if payload.get(name)})

        success, data = await self.user_service.update_user_profile(fields)
        if not success:
            return failure_from(data, ErrorCode.USER_UPDATE_FAILED)
        return SideEffectResult.ok({"user": data.get("user")})

    async def wallet_creation_pending(self, state: FlowState, payload: Dict[str, Any]) -> SideEffectResult:
        success, data = await self.user_service.create_wallet(_text(payload, "walletAddress"))
        if not success:
            return failure_from(data, ErrorCode.WALLET_CREATION_FAILED)
        return SideEffectResult.ok({"wallet_address": data.get("walletAddress")})

    async def pin_setup_pending(self, state: FlowState, payload: Dict[str, Any]) -> SideEffectResult:
        pin = payload.get("pin")
        if not pin:
            return SideEffectResult.failure(ErrorCode.PIN_REQUIRED, "pin is required")

        try:
            await self.security_store.set_pin(str(pin))
        except ValueError as e:
            return SideEffectResult.failure(ErrorCode.VALIDATION_ERROR, str(e))
        except SystemException as e:
            logger.error(f"PIN setup failed: {e.message}")
            log_auth_event("pin_set", state.phone or state.email, "failure")
            return SideEffectResult.failure(ErrorCode.PIN_SETUP_FAILED, e.message)

        await self.security_store.start_session(pin_verified=True)
        log_auth_event("pin_set", state.phone or state.email, "success", {"flow_type": getattr(state.flow_type, "value", None)})
        return SideEffectResult.ok()

    async def pin_entry_pending(self, state: FlowState, payload: Dict[str, Any]) -> SideEffectResult:
        pin = payload.get("pin")
        if not pin:
            return SideEffectResult.failure(ErrorCode.PIN_REQUIRED, "pin is required")

        result = await self.security_store.validate_pin(str(pin))
        if result.locked:
            log_auth_event("pin_locked", state.phone or state.email, "failure", {"lock_until": result.lock_until})
            return SideEffectResult.failure(ErrorCode.PIN_LOCKED, "PIN locked")
        if not result.valid:
            log_auth_event(
                "pin_rejected", state.phone or state.email, "failure",
                {"attempts_remaining": result.attempts_remaining}
            )
            return SideEffectResult.failure(ErrorCode.PIN_INVALID, "Incorrect PIN")

        await self.security_store.start_session(pin_verified=True)
        return SideEffectResult.ok()

    async def authenticated(self, state: FlowState, payload: Dict[str, Any]) -> SideEffectResult:
        """Read-only: only a live PIN-verified session keeps the flow here"""
        session = await self.security_store.get_session()
        if session is None or not session.is_live() or not session.pin_verified:
            log_auth_event("session_expired", state.phone or state.email, "failure")
            return SideEffectResult.failure(ErrorCode.SESSION_EXPIRED, "Session expired")
        return SideEffectResult.ok()
