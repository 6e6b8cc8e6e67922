"""Error type definitions and constants

This module defines the error codes surfaced to callers of the flow engine.
Codes are plain strings on the wire so the UI layer can translate them.
"""

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    """Error codes returned by side effects and the orchestrator"""
    # Generic
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNKNOWN = "UNKNOWN"
    NETWORK_ERROR = "NETWORK_ERROR"

    # OTP
    OTP_SEND_FAILED = "OTP_SEND_FAILED"
    OTP_VERIFY_FAILED = "OTP_VERIFY_FAILED"
    OTP_INVALID = "OTP_INVALID"
    OTP_EXPIRED = "OTP_EXPIRED"
    OTP_LOCKED = "OTP_LOCKED"
    OTP_REQUIRED = "OTP_REQUIRED"
    OTP_MISSING_MEDIUM = "OTP_MISSING_MEDIUM"

    # Contact details
    PHONE_INVALID = "PHONE_INVALID"
    EMAIL_INVALID = "EMAIL_INVALID"
    PHONE_ALREADY_REGISTERED = "PHONE_ALREADY_REGISTERED"
    EMAIL_ALREADY_REGISTERED = "EMAIL_ALREADY_REGISTERED"

    # Token and profile
    TOKEN_ACQUISITION_FAILED = "TOKEN_ACQUISITION_FAILED"
    USER_FETCH_FAILED = "USER_FETCH_FAILED"
    USER_UPDATE_FAILED = "USER_UPDATE_FAILED"
    PROFILE_CREATE_FAILED = "PROFILE_CREATE_FAILED"
    WALLET_CREATION_FAILED = "WALLET_CREATION_FAILED"

    # PIN and session
    PIN_REQUIRED = "PIN_REQUIRED"
    PIN_INVALID = "PIN_INVALID"
    PIN_LOCKED = "PIN_LOCKED"
    PIN_SETUP_FAILED = "PIN_SETUP_FAILED"
    SESSION_EXPIRED = "SESSION_EXPIRED"

    # Orchestration
    FLOW_STEP_NOT_FOUND = "FLOW_STEP_NOT_FOUND"
    FLOW_DEAD_END = "FLOW_DEAD_END"
    FLOW_INIT_FAILED = "FLOW_INIT_FAILED"

    @classmethod
    def parse(cls, value: Optional[str], default: "ErrorCode") -> "ErrorCode":
        """Map a server-supplied code onto a known code"""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return default


# Codes a send-OTP failure may surface verbatim
OTP_SEND_CODES = {
    ErrorCode.PHONE_ALREADY_REGISTERED,
    ErrorCode.EMAIL_ALREADY_REGISTERED,
    ErrorCode.PHONE_INVALID,
    ErrorCode.EMAIL_INVALID,
    ErrorCode.OTP_MISSING_MEDIUM,
    ErrorCode.OTP_LOCKED,
    ErrorCode.NETWORK_ERROR,
}

# Codes a verify-OTP failure may surface verbatim
OTP_VERIFY_CODES = {
    ErrorCode.OTP_INVALID,
    ErrorCode.OTP_EXPIRED,
    ErrorCode.OTP_LOCKED,
    ErrorCode.OTP_REQUIRED,
    ErrorCode.NETWORK_ERROR,
}


# Default messages per code, the UI layer translates by code
ERROR_MESSAGES = {
    ErrorCode.VALIDATION_ERROR: "Required data missing or invalid",
    ErrorCode.UNKNOWN: "Unknown error occurred",
    ErrorCode.NETWORK_ERROR: "Network unavailable",
    ErrorCode.OTP_SEND_FAILED: "Could not send verification code",
    ErrorCode.OTP_VERIFY_FAILED: "Could not verify code",
    ErrorCode.OTP_INVALID: "Invalid verification code",
    ErrorCode.OTP_EXPIRED: "Verification code expired",
    ErrorCode.OTP_LOCKED: "Too many attempts",
    ErrorCode.PHONE_ALREADY_REGISTERED: "Phone number already registered",
    ErrorCode.EMAIL_ALREADY_REGISTERED: "Email already registered",
    ErrorCode.TOKEN_ACQUISITION_FAILED: "Authentication failed",
    ErrorCode.USER_UPDATE_FAILED: "Profile update failed",
    ErrorCode.PROFILE_CREATE_FAILED: "Profile update failed",
    ErrorCode.WALLET_CREATION_FAILED: "Wallet creation failed",
    ErrorCode.PIN_INVALID: "Incorrect PIN",
    ErrorCode.PIN_LOCKED: "PIN locked",
    ErrorCode.PIN_SETUP_FAILED: "PIN setup failed",
    ErrorCode.SESSION_EXPIRED: "Session expired, enter your PIN again",
    ErrorCode.FLOW_STEP_NOT_FOUND: "Invalid step in flow",
    ErrorCode.FLOW_DEAD_END: "No next step available",
    ErrorCode.FLOW_INIT_FAILED: "Flow could not be started",
}


def get_error_message(code: ErrorCode) -> str:
    return ERROR_MESSAGES.get(code, ERROR_MESSAGES[ErrorCode.UNKNOWN])
