"""Device security store: tokens, PIN and session over a key-value backend"""
import json
import logging
from typing import Optional

from ...config.settings import AuthFlowSettings
from ...core.utils import timing
from ..interface import (PinValidation, SecurityStoreInterface, Session,
                         TokenStatus)
from .pin import hash_pin, validate_pin_format, verify_pin
from .storage import KeyValueStorage
from .tokens import is_token_expired

logger = logging.getLogger(__name__)

AUTH_TOKEN = "auth_token"
REFRESH_TOKEN = "refresh_token"
PIN_HASH = "pin_hash"
PIN_ATTEMPTS = "pin_attempts"
PIN_LOCK_UNTIL = "pin_lock_until"
SESSION = "session"


class SecurityStore(SecurityStoreInterface):
    """Reads always go to the backend; nothing is cached here"""

    def __init__(self, storage: KeyValueStorage, settings: Optional[AuthFlowSettings] = None):
        self.storage = storage
        self.settings = settings or AuthFlowSettings()

    # Session

    async def get_session(self) -> Optional[Session]:
        raw = await self.storage.get(SESSION)
        if not raw:
            return None
        try:
            return Session.from_dict(json.loads(raw))
        except (json.JSONDecodeError, TypeError, ValueError):
            logger.error("Corrupted session record, discarding")
            await self.storage.delete(SESSION)
            return None

    async def start_session(self, pin_verified: bool = True) -> Session:
        now = timing.now_ms()
        session = Session(
            is_active=True,
            last_activity=now,
            expires_at=now + self.settings.session_ttl_seconds * 1000,
            pin_verified=pin_verified,
        )
        await self.storage.set(SESSION, json.dumps(session.to_dict()), ttl=self.settings.session_ttl_seconds)
        logger.debug("Session started")
        return session

    async def clear_session(self) -> None:
        await self.storage.delete(SESSION)

    # Tokens

    async def get_access_token(self) -> Optional[str]:
        return await self.storage.get(AUTH_TOKEN)

    async def get_token_status(self) -> TokenStatus:
        token = await self.storage.get(AUTH_TOKEN)
        if not token:
            return TokenStatus(exists=False, is_expired=True)
        return TokenStatus(
            exists=True,
            is_expired=is_token_expired(token, self.settings.token_expiry_buffer_seconds),
        )

    async def save_tokens(self, access_token: str, refresh_token: Optional[str] = None) -> None:
        if not access_token:
            raise ValueError("Access token is required")
        await self.storage.set(AUTH_TOKEN, access_token)
        if refresh_token:
            await self.storage.set(REFRESH_TOKEN, refresh_token)
        logger.info("Tokens stored")

    async def clear_tokens(self) -> None:
        await self.storage.delete(AUTH_TOKEN, REFRESH_TOKEN)

    # PIN

    async def is_pin_configured(self) -> bool:
        return bool(await self.storage.get(PIN_HASH))

    async def set_pin(self, pin: str) -> None:
        validate_pin_format(pin, self.settings.pin_min_length, self.settings.pin_max_length)
        await self.storage.set(PIN_HASH, hash_pin(pin))
        await self.storage.delete(PIN_ATTEMPTS, PIN_LOCK_UNTIL)

    async def get_lock_until(self) -> Optional[int]:
        raw = await self.storage.get(PIN_LOCK_UNTIL)
        return int(raw) if raw else None

    async def validate_pin(self, pin: str) -> PinValidation:
        lock_until = await self.get_lock_until()
        if lock_until and lock_until > timing.now_ms():
            return PinValidation(valid=False, locked=True, lock_until=lock_until, attempts_remaining=0)

        stored_hash = await self.storage.get(PIN_HASH)
        if not stored_hash:
            return PinValidation(valid=False)

        if verify_pin(pin, stored_hash):
            await self.storage.delete(PIN_ATTEMPTS, PIN_LOCK_UNTIL)
            return PinValidation(valid=True)

        attempts = int(await self.storage.get(PIN_ATTEMPTS) or 0) + 1
        await self.storage.set(PIN_ATTEMPTS, str(attempts))

        max_attempts = self.settings.max_pin_attempts
        if attempts >= max_attempts:
            lock_until = timing.seconds_from_now_ms(self.settings.pin_lockout_seconds)
            await self.storage.set(PIN_LOCK_UNTIL, str(lock_until))
            await self.storage.delete(PIN_ATTEMPTS)
            logger.warning("PIN locked after too many attempts")
            return PinValidation(valid=False, locked=True, lock_until=lock_until, attempts_remaining=0)

        return PinValidation(valid=False, attempts_remaining=max_attempts - attempts)

    async def clear_pin(self) -> None:
        await self.storage.delete(PIN_HASH, PIN_ATTEMPTS, PIN_LOCK_UNTIL)
