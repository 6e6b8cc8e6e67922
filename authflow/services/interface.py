"""Collaborator interfaces consumed by the flow engine

Remote services return Tuple[bool, Dict[str, Any]]: (True, data) on success,
(False, {"error": message, "code": ErrorCode}) on failure.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from ..core.utils import timing


@dataclass
class Session:
    """Local PIN session record (epoch ms timestamps)"""
    is_active: bool
    last_activity: int
    expires_at: int
    pin_verified: bool = False

    def is_live(self, now: Optional[int] = None) -> bool:
        """Active and not yet expired"""
        now = timing.now_ms() if now is None else now
        return self.is_active and self.expires_at > now

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isActive": self.is_active,
            "lastActivity": self.last_activity,
            "expiresAt": self.expires_at,
            "pinVerified": self.pin_verified,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Session":
        return cls(
            is_active=bool(data.get("isActive")),
            last_activity=int(data.get("lastActivity") or 0),
            expires_at=int(data.get("expiresAt") or 0),
            pin_verified=bool(data.get("pinVerified")),
        )


@dataclass
class TokenStatus:
    exists: bool
    is_expired: bool

    @property
    def is_valid(self) -> bool:
        return self.exists and not self.is_expired


@dataclass
class PinValidation:
    valid: bool
    attempts_remaining: Optional[int] = None
    locked: bool = False
    lock_until: Optional[int] = None


class AuthServiceInterface(ABC):
    """OTP, availability and token operations"""

    @abstractmethod
    async def send_otp(
        self, medium: str, value: str, channel: Optional[str] = None
    ) -> Tuple[bool, Dict[str, Any]]:
        """Send an OTP to a phone number or email

        Returns:
            Tuple of (success, {"expires": epoch_ms} or error)
        """
        pass

    @abstractmethod
    async def verify_otp(self, medium: str, value: str, code: str) -> Tuple[bool, Dict[str, Any]]:
        """Verify an OTP code

        Returns:
            Tuple of (success, {"valid": True} or error)
        """
        pass

    @abstractmethod
    async def check_availability(self, medium: str, value: str) -> Tuple[bool, Dict[str, Any]]:
        """Check a phone number or email is not registered yet

        Returns:
            Tuple of (success, {"available": bool} or error)
        """
        pass

    @abstractmethod
    async def acquire_auth_token(
        self, phone: str, email: Optional[str], device_info: Dict[str, Any]
    ) -> Tuple[bool, Dict[str, Any]]:
        """Exchange verified contact details for tokens

        Returns:
            Tuple of (success, {"accessToken": str, "refreshToken": str} or error)
        """
        pass


class UserServiceInterface(ABC):
    """Profile and wallet operations for the token holder"""

    @abstractmethod
    async def get_user_profile(self) -> Tuple[bool, Dict[str, Any]]:
        """Returns: Tuple of (success, {"user": {...}} or error)"""
        pass

    @abstractmethod
    async def update_user_profile(self, fields: Dict[str, Any]) -> Tuple[bool, Dict[str, Any]]:
        """Returns: Tuple of (success, {"user": {...}} or error)"""
        pass

    @abstractmethod
    async def create_wallet(self, wallet_address: Optional[str] = None) -> Tuple[bool, Dict[str, Any]]:
        """Create a wallet, or link a client-side one when an address is given

        Returns:
            Tuple of (success, {"walletAddress": str} or error)
        """
        pass


class SecurityStoreInterface(ABC):
    """Device-local session, token and PIN state

    Shared with other writers (logout, idle timers), so readers must never
    cache its answers.
    """

    @abstractmethod
    async def get_session(self) -> Optional[Session]:
        pass

    @abstractmethod
    async def start_session(self, pin_verified: bool = True) -> Session:
        pass

    @abstractmethod
    async def clear_session(self) -> None:
        pass

    @abstractmethod
    async def get_access_token(self) -> Optional[str]:
        pass

    @abstractmethod
    async def get_token_status(self) -> TokenStatus:
        pass

    @abstractmethod
    async def save_tokens(self, access_token: str, refresh_token: Optional[str] = None) -> None:
        pass

    @abstractmethod
    async def clear_tokens(self) -> None:
        pass

    @abstractmethod
    async def is_pin_configured(self) -> bool:
        pass

    @abstractmethod
    async def set_pin(self, pin: str) -> None:
        """Hash and store a new PIN

        Raises:
            ValueError: If the PIN format is invalid
        """
        pass

    @abstractmethod
    async def validate_pin(self, pin: str) -> PinValidation:
        pass

    @abstractmethod
    async def clear_pin(self) -> None:
        pass
