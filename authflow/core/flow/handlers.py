"""Pure step handlers

Handlers receive the working state (already carrying whatever the step's side
effect fetched) and the caller's payload, and return the partial state to merge
plus an optional explicit next step. They never perform I/O. A missing payload
field raises ValidationException.
"""
from typing import Any, Dict

from ..utils.exceptions import ValidationException
from .constants import (PROFILE_OPTIONAL_FIELDS, PROFILE_REQUIRED_FIELDS,
                        AuthStep)
from .types import FlowState, StepResult


def require(payload: Dict[str, Any], field: str, step: AuthStep) -> str:
    """Get a required payload field, stripped"""
    value = payload.get(field)
    if isinstance(value, str):
        value = value.strip()
    if not value:
        raise ValidationException(
            message=f"{field} is required",
            step=step.value,
            field=field
        )
    return value


def full_phone(country_code: str, phone_number: str) -> str:
    """Dial code plus national number, digits only after the '+'"""
    dial = "+" + "".join(ch for ch in country_code if ch.isdigit())
    national = "".join(ch for ch in phone_number if ch.isdigit())
    return dial + national


def phone_entry(state: FlowState, payload: Dict[str, Any]) -> StepResult:
    country_code = require(payload, "countryCode", AuthStep.PHONE_ENTRY)
    phone_number = require(payload, "phoneNumber", AuthStep.PHONE_ENTRY)
    return StepResult(next_data={
        "country_code": country_code,
        "phone_number": phone_number,
        "phone": full_phone(country_code, phone_number),
        "channel": payload.get("channel") or state.channel,
        "phone_validated": False,  # awaiting OTP
    })


def phone_otp(state: FlowState, payload: Dict[str, Any]) -> StepResult:
    require(payload, "otp", AuthStep.PHONE_OTP_PENDING)
    return StepResult(next_data={
        "phone_validated": True,
        "phone_otp_expires": None,
    })


def email_entry(state: FlowState, payload: Dict[str, Any]) -> StepResult:
    email = require(payload, "email", AuthStep.EMAIL_ENTRY_PENDING)
    return StepResult(next_data={
        "email": email.lower(),
        "email_verified": False,  # awaiting OTP
    })


def email_otp(state: FlowState, payload: Dict[str, Any]) -> StepResult:
    if not payload.get("emailCode"):
        require(payload, "otp", AuthStep.EMAIL_OTP_PENDING)
    return StepResult(next_data={
        "email_verified": True,
        "email_otp_expires": None,
    })


def token_acquisition(state: FlowState, payload: Dict[str, Any]) -> StepResult:
    # Token already stored by the side effect
    return StepResult(next_data={"token_valid": True, "token_exists": True})


def user_profile(state: FlowState, payload: Dict[str, Any]) -> StepResult:
    profile = {name: require(payload, name, AuthStep.USER_PROFILE_PENDING) for name in PROFILE_REQUIRED_FIELDS}
    profile.update({name: payload[name] for name in PROFILE_OPTIONAL_FIELDS if payload.get(name)})

    # Server copy from the side effect wins for fields it returned
    user = dict(state.user or {})
    for name, value in profile.items():
        if not user.get(name):
            user[name] = value
    return StepResult(next_data={
        "user": user,
        "registration_complete": True,
    })


def wallet_creation(state: FlowState, payload: Dict[str, Any]) -> StepResult:
    address = state.wallet_address or payload.get("walletAddress")
    if not address:
        raise ValidationException(
            message="walletAddress is required",
            step=AuthStep.WALLET_CREATION_PENDING.value,
            field="walletAddress"
        )
    return StepResult(next_data={
        "wallet_address": address,
        "wallet_created": True,
    })


def pin_setup(state: FlowState, payload: Dict[str, Any]) -> StepResult:
    require(payload, "pin", AuthStep.PIN_SETUP_PENDING)
    return StepResult(
        next_data={"pin_set": True, "pin_verified": True},
        next_step=AuthStep.AUTHENTICATED
    )


def pin_entry(state: FlowState, payload: Dict[str, Any]) -> StepResult:
    require(payload, "pin", AuthStep.PIN_ENTRY_PENDING)
    return StepResult(
        next_data={"pin_set": True, "pin_verified": True},
        next_step=AuthStep.AUTHENTICATED
    )


def authenticated(state: FlowState, payload: Dict[str, Any]) -> StepResult:
    return StepResult(next_step=AuthStep.AUTHENTICATED)
