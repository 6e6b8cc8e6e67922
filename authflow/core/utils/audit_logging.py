"""Audit logging for authentication events

Events go to the "audit" logger; handlers are attached by the LOGGING
configuration in config.settings, never at import time.
"""
import logging
from typing import Any, Dict, Optional

logger = logging.getLogger("audit")


def mask_identifier(value: Optional[str]) -> str:
    """Mask a phone number or email for audit output"""
    if not value:
        return "unknown"
    if "@" in value:
        name, _, domain = value.partition("@")
        return f"{name[:1]}***@{domain}"
    return f"***{value[-4:]}"


def log_auth_event(
    event_type: str,
    user: Optional[str],
    status: str,
    details: Optional[Dict[str, Any]] = None
) -> None:
    """Log an authentication event

    Args:
        event_type: Type of the event (e.g., 'flow_initiated', 'pin_setup')
        user: Phone number or email associated with the event
        status: Status of the event (e.g., 'success', 'failure')
        details: Additional details about the event
    """
    message = f"Auth event: {event_type} - User: {mask_identifier(user)} - Status: {status}"
    if details:
        message += f" - Details: {details}"
    logger.info(message)
