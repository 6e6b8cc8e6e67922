"""Flow step identifiers and flow types"""
from enum import Enum


class AuthStep(str, Enum):
    """Steps of the authentication flows"""
    PHONE_ENTRY = "phone_entry"
    PHONE_OTP_PENDING = "phone_otp_pending"
    EMAIL_ENTRY_PENDING = "email_entry_pending"
    EMAIL_OTP_PENDING = "email_otp_pending"
    TOKEN_ACQUISITION = "token_acquisition"
    USER_PROFILE_PENDING = "user_profile_pending"
    WALLET_CREATION_PENDING = "wallet_creation_pending"
    PIN_SETUP_PENDING = "pin_setup_pending"
    PIN_ENTRY_PENDING = "pin_entry_pending"
    AUTHENTICATED = "authenticated"


class FlowType(str, Enum):
    """Authentication journeys"""
    SIGNUP = "signup"
    SIGNIN = "signin"
    FORGOT_PIN = "forgot_pin"


class OtpMedium(str, Enum):
    PHONE = "phone"
    EMAIL = "email"


class OtpChannel(str, Enum):
    SMS = "sms"
    WHATSAPP = "whatsapp"


# Profile fields required before the profile step is considered complete
PROFILE_REQUIRED_FIELDS = ("firstName", "lastName")

# Optional profile fields forwarded to the profile update
PROFILE_OPTIONAL_FIELDS = ("address", "dob", "country", "gender")

__all__ = [
    'AuthStep',
    'FlowType',
    'OtpMedium',
    'OtpChannel',
    'PROFILE_REQUIRED_FIELDS',
    'PROFILE_OPTIONAL_FIELDS'
]
