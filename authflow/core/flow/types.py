"""Flow data types

FlowState is an immutable snapshot: every transition returns a new instance
through `merge`, so a failed step can hand back the caller's snapshot untouched.
"""
import logging
from dataclasses import asdict, dataclass, field, fields, replace
from typing import (TYPE_CHECKING, Any, Awaitable, Callable, Dict, Optional,
                    Tuple)

from ..utils.error_types import ErrorCode
from .constants import PROFILE_REQUIRED_FIELDS, AuthStep, FlowType

if TYPE_CHECKING:
    from ...services.interface import Session
    from ...services.side_effects import SideEffectExecutor

logger = logging.getLogger(__name__)

# Wire-style keys accepted in seeds and updates
FIELD_ALIASES = {
    "flowType": "flow_type",
    "countryCode": "country_code",
    "phoneNumber": "phone_number",
    "phoneValidated": "phone_validated",
    "emailVerified": "email_verified",
    "pinSet": "pin_set",
    "pinVerified": "pin_verified",
    "registrationComplete": "registration_complete",
    "tokenExists": "token_exists",
    "tokenValid": "token_valid",
    "sessionActive": "session_active",
    "phoneOtpExpires": "phone_otp_expires",
    "emailOtpExpires": "email_otp_expires",
    "walletCreated": "wallet_created",
    "walletAddress": "wallet_address",
}


@dataclass(frozen=True)
class FlowState:
    """Everything learned or decided during one flow run"""
    flow_type: Optional[FlowType] = None

    # Identity/contact
    phone: Optional[str] = None
    country_code: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    channel: Optional[str] = None

    # Verification flags
    phone_validated: bool = False
    email_verified: bool = False
    pin_set: bool = False
    pin_verified: bool = False
    registration_complete: bool = False

    # Computed truth, overwritten on every rebuild
    token_exists: bool = False
    token_valid: bool = False
    session_active: bool = False

    # OTP timers (epoch ms)
    phone_otp_expires: Optional[int] = None
    email_otp_expires: Optional[int] = None

    # Profile and wallet
    user: Optional[Dict[str, Any]] = None
    wallet_created: bool = False
    wallet_address: Optional[str] = None

    @classmethod
    def field_names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    @classmethod
    def normalize(cls, updates: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Map wire-style keys to field names, dropping unknown keys"""
        if not updates:
            return {}
        names = set(cls.field_names())
        normalized = {}
        for key, value in updates.items():
            name = FIELD_ALIASES.get(key, key)
            if name not in names:
                logger.debug(f"Ignoring unknown flow state field: {key}")
                continue
            normalized[name] = value
        if normalized.get("flow_type") is not None:
            normalized["flow_type"] = FlowType(normalized["flow_type"])
        if isinstance(normalized.get("user"), dict):
            normalized["user"] = dict(normalized["user"])
        return normalized

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "FlowState":
        return cls().merge(data)

    def merge(self, updates: Optional[Dict[str, Any]]) -> "FlowState":
        """Return a new snapshot with `updates` applied (later values win)"""
        normalized = self.normalize(updates)
        if not normalized:
            return self
        return replace(self, **normalized)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        if self.flow_type is not None:
            data["flow_type"] = self.flow_type.value
        return data

    @property
    def has_profile(self) -> bool:
        """Cached user carries every required profile field"""
        if not self.user:
            return False
        return all(self.user.get(name) for name in PROFILE_REQUIRED_FIELDS)


@dataclass
class StepResult:
    """Pure handler outcome"""
    next_data: Dict[str, Any] = field(default_factory=dict)
    next_step: Optional[AuthStep] = None


@dataclass
class SideEffectResult:
    """The only channel through which external outcomes enter a flow"""
    success: bool
    error_code: Optional[ErrorCode] = None
    data: Dict[str, Any] = field(default_factory=dict)
    message: Optional[str] = None

    @classmethod
    def ok(cls, data: Optional[Dict[str, Any]] = None) -> "SideEffectResult":
        """Create successful side effect result"""
        return cls(success=True, data=data or {})

    @classmethod
    def failure(cls, error_code: ErrorCode, message: Optional[str] = None) -> "SideEffectResult":
        """Create failed side effect result"""
        return cls(success=False, error_code=error_code, message=message)


Condition = Callable[[FlowState], bool]
Handler = Callable[[FlowState, Dict[str, Any]], StepResult]
SideEffect = Callable[["SideEffectExecutor", FlowState, Dict[str, Any]], Awaitable[SideEffectResult]]


@dataclass(frozen=True)
class FlowStep:
    """One step variant: visitation condition, pure handler and side effect"""
    step: AuthStep
    condition: Condition
    handler: Handler
    side_effect: SideEffect


@dataclass
class FlowInit:
    """Result of starting a flow"""
    flow_type: FlowType
    steps: Tuple[FlowStep, ...]
    current_step: AuthStep
    current_step_index: int
    flow_state: FlowState


@dataclass
class FlowAdvanceResult:
    """Result of one step transition"""
    success: bool
    flow_state: FlowState
    next_step: Optional[AuthStep] = None
    next_step_index: Optional[int] = None
    error_code: Optional[ErrorCode] = None
    error: Optional[Dict[str, Any]] = None
    session: Optional["Session"] = None
