"""Auth flow configuration using environment variables"""
import logging.config
from dataclasses import dataclass

from decouple import config as env

from ..core.flow.constants import OtpChannel
from ..core.utils.exceptions import ConfigurationException

STORAGE_BACKENDS = ("memory", "redis")


@dataclass(frozen=True)
class AuthFlowSettings:
    """Settings for the auth flow engine and its collaborators"""
    api_url: str = "http://localhost:3000/api/v1/"
    client_api_key: str = ""
    api_timeout: int = 30

    # OTP lifetime used when the server omits an expiry
    otp_expiry_seconds: int = 300
    default_otp_channel: str = "whatsapp"

    session_ttl_seconds: int = 24 * 60 * 60
    max_pin_attempts: int = 3
    pin_lockout_seconds: int = 60
    pin_min_length: int = 4
    pin_max_length: int = 6

    # Tokens expiring within this window count as expired
    token_expiry_buffer_seconds: int = 300

    security_storage: str = "memory"
    redis_url: str = "redis://localhost:6379/0"

    wallet_step_enabled: bool = False

    def __post_init__(self):
        if self.security_storage not in STORAGE_BACKENDS:
            raise ConfigurationException(
                message=f"Invalid security storage backend: {self.security_storage}",
                code="INVALID_STORAGE_BACKEND",
                service="settings",
                action="validate"
            )
        if self.default_otp_channel not in {channel.value for channel in OtpChannel}:
            raise ConfigurationException(
                message=f"Invalid OTP channel: {self.default_otp_channel}",
                code="INVALID_SETTING",
                service="settings",
                action="validate"
            )
        for name in ("otp_expiry_seconds", "session_ttl_seconds", "pin_lockout_seconds", "max_pin_attempts"):
            if getattr(self, name) <= 0:
                raise ConfigurationException(
                    message=f"{name} must be positive",
                    code="INVALID_SETTING",
                    service="settings",
                    action="validate"
                )
        if self.pin_min_length > self.pin_max_length:
            raise ConfigurationException(
                message="PIN_MIN_LENGTH cannot exceed PIN_MAX_LENGTH",
                code="INVALID_SETTING",
                service="settings",
                action="validate"
            )

    @classmethod
    def from_env(cls) -> "AuthFlowSettings":
        """Create settings from environment variables"""
        return cls(
            api_url=env("WALLET_API_URL", default=cls.api_url),
            client_api_key=env("CLIENT_API_KEY", default=cls.client_api_key),
            api_timeout=env("API_TIMEOUT", default=cls.api_timeout, cast=int),
            otp_expiry_seconds=env("OTP_EXPIRY_SECONDS", default=cls.otp_expiry_seconds, cast=int),
            default_otp_channel=env("DEFAULT_OTP_CHANNEL", default=cls.default_otp_channel),
            session_ttl_seconds=env("SESSION_TTL_SECONDS", default=cls.session_ttl_seconds, cast=int),
            max_pin_attempts=env("MAX_PIN_ATTEMPTS", default=cls.max_pin_attempts, cast=int),
            pin_lockout_seconds=env("PIN_LOCKOUT_SECONDS", default=cls.pin_lockout_seconds, cast=int),
            pin_min_length=env("PIN_MIN_LENGTH", default=cls.pin_min_length, cast=int),
            pin_max_length=env("PIN_MAX_LENGTH", default=cls.pin_max_length, cast=int),
            token_expiry_buffer_seconds=env(
                "TOKEN_EXPIRY_BUFFER_SECONDS", default=cls.token_expiry_buffer_seconds, cast=int
            ),
            security_storage=env("SECURITY_STORAGE", default=cls.security_storage).lower(),
            redis_url=env("REDIS_URL", default=cls.redis_url),
            wallet_step_enabled=env("WALLET_STEP_ENABLED", default=cls.wallet_step_enabled, cast=bool),
        )


LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "[%(asctime)s] %(levelname)s [%(name)s] %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        },
    },
    "loggers": {
        # Flow engine logging
        "authflow": {
            "handlers": ["console"],
            "level": env("APP_LOG_LEVEL", default="INFO"),
            "propagate": False,
        },
        # Authentication audit trail
        "audit": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": False,
        },
        # Third party libraries
        "urllib3": {
            "handlers": ["console"],
            "level": "WARNING",
            "propagate": False,
        },
    },
}


def configure_logging() -> None:
    """Apply the LOGGING configuration"""
    logging.config.dictConfig(LOGGING)
