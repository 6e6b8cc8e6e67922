"""Wallet API authentication service"""
import logging
import re
from typing import Any, Dict, Optional, Tuple

from ...core.flow.constants import OtpMedium
from ...core.utils.error_types import ErrorCode
from ..interface import AuthServiceInterface
from .base import BaseAPIClient, error_result

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")


def check_medium(medium: Optional[str], value: Optional[str]) -> Optional[Tuple[bool, Dict[str, Any]]]:
    """Client-side checks shared by send and verify, None when valid"""
    if not medium or not value:
        return error_result(f"Medium [{medium}] and value are required", ErrorCode.OTP_MISSING_MEDIUM)
    if medium == OtpMedium.EMAIL.value and not EMAIL_PATTERN.fullmatch(value):
        return error_result("Invalid email format", ErrorCode.EMAIL_INVALID)
    return None


class AuthApiService(BaseAPIClient, AuthServiceInterface):
    """OTP, availability and login endpoints"""

    service_name = "auth_api"

    async def check_availability(self, medium: str, value: str) -> Tuple[bool, Dict[str, Any]]:
        invalid = check_medium(medium, value)
        if invalid:
            return invalid

        success, data = await self.make_request('auth', 'check_availability', {"medium": medium, "value": value})
        if not success:
            return success, data

        if not data.get("available"):
            code = (
                ErrorCode.PHONE_ALREADY_REGISTERED
                if medium == OtpMedium.PHONE.value
                else ErrorCode.EMAIL_ALREADY_REGISTERED
            )
            return error_result(f"{medium} is not available", code)

        return True, {"available": True}

    async def send_otp(
        self, medium: str, value: str, channel: Optional[str] = None
    ) -> Tuple[bool, Dict[str, Any]]:
        invalid = check_medium(medium, value)
        if invalid:
            return invalid

        payload = {
            "medium": medium,
            "value": value,
            "channel": channel or self.settings.default_otp_channel,
        }
        success, data = await self.make_request('auth', 'send_otp', payload)
        if not success:
            return success, data

        logger.info(f"OTP sent via {medium}")
        expires = data.get("expires") or data.get("expiresAt")
        return True, {"expires": int(expires)} if expires else {}

    async def verify_otp(self, medium: str, value: str, code: str) -> Tuple[bool, Dict[str, Any]]:
        invalid = check_medium(medium, value)
        if invalid:
            return invalid
        if not code:
            return error_result("OTP is required", ErrorCode.OTP_REQUIRED)

        success, data = await self.make_request(
            'auth', 'verify_otp', {"medium": medium, "value": value, "otp": code}
        )
        if not success:
            return success, data

        if not data.get("valid"):
            return error_result("Invalid OTP", ErrorCode.OTP_INVALID)

        return True, {"valid": True}

    async def acquire_auth_token(
        self, phone: str, email: Optional[str], device_info: Dict[str, Any]
    ) -> Tuple[bool, Dict[str, Any]]:
        success, data = await self.make_request(
            'auth', 'login', {"phone": phone, "email": email, "deviceInfo": device_info}
        )
        if not success:
            return success, data

        if not data.get("accessToken") or not data.get("refreshToken"):
            return error_result("Failed to acquire token", ErrorCode.TOKEN_ACQUISITION_FAILED)

        return True, {"accessToken": data["accessToken"], "refreshToken": data["refreshToken"]}
