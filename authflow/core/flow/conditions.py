"""Step visitation conditions

Each condition decides whether its step should be visited against the current
FlowState. Conditions only read flags that steps set forward, so a flag flip
never re-enables an earlier step.

An outstanding OTP is tracked by its expiry timer: entry steps clear the
validated flag and set the timer, OTP steps set the flag and clear the timer.
An expired timer sends the user back to the entry step to re-send.
"""
from typing import Optional

from ..utils import timing
from .types import FlowState


def otp_pending(expires: Optional[int]) -> bool:
    """Timer present and not yet expired"""
    return expires is not None and expires > timing.now_ms()


def phone_entry(state: FlowState) -> bool:
    return (
        not state.token_valid
        and not state.phone_validated
        and not otp_pending(state.phone_otp_expires)
    )


def phone_otp_pending(state: FlowState) -> bool:
    return (
        not state.token_valid
        and not state.phone_validated
        and otp_pending(state.phone_otp_expires)
    )


def email_entry(state: FlowState) -> bool:
    return (
        not state.token_valid
        and state.phone_validated
        and not state.email_verified
        and not otp_pending(state.email_otp_expires)
    )


def email_otp_pending(state: FlowState) -> bool:
    return (
        not state.token_valid
        and state.phone_validated
        and not state.email_verified
        and otp_pending(state.email_otp_expires)
    )


def token_acquisition(state: FlowState) -> bool:
    return state.phone_validated and state.email_verified and not state.token_valid


def user_profile(state: FlowState) -> bool:
    return state.token_valid and not state.has_profile


def wallet_creation(state: FlowState) -> bool:
    return state.token_valid and state.has_profile and not state.wallet_created


def pin_setup(state: FlowState) -> bool:
    return state.token_valid and not state.pin_set


def pin_reset(state: FlowState) -> bool:
    """Forgot-PIN: replace the PIN whether or not one is configured"""
    return state.token_valid and not state.pin_verified


def pin_entry(state: FlowState) -> bool:
    return state.token_valid and state.pin_set and not state.pin_verified


def authenticated(state: FlowState) -> bool:
    return state.token_valid and state.pin_set and state.pin_verified
