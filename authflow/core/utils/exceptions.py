"""Core exceptions with clear error boundaries

This module defines the base exceptions used throughout the auth flow engine.
Each exception maps to a specific error type with clear boundaries:

- component: a pure step handler rejected its payload
- flow: the flow definition and the caller are out of sync
- system: a collaborator (API, storage, configuration) failed
"""

from typing import Dict, Optional


class AuthFlowException(Exception):
    """Base exception with error details"""
    def __init__(self, message: str, details: Optional[Dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ComponentException(AuthFlowException):
    """Step handler validation errors"""
    def __init__(
        self,
        message: str,
        step: str,
        field: str,
        value: Optional[str] = None
    ):
        details = {
            "step": step,
            "field": field,
            "value": value
        }
        super().__init__(message, details)


class FlowException(AuthFlowException):
    """Flow orchestration errors"""
    def __init__(
        self,
        message: str,
        step: Optional[str],
        action: str,
        data: Optional[Dict] = None
    ):
        details = {
            "step": step,
            "action": action,
            "data": data or {}
        }
        super().__init__(message, details)


class SystemException(AuthFlowException):
    """System technical errors"""
    def __init__(
        self,
        message: str,
        code: str,
        service: str,
        action: str
    ):
        details = {
            "code": code,
            "service": service,
            "action": action
        }
        super().__init__(message, details)


# Specific component exceptions
class ValidationException(ComponentException):
    """Missing or malformed payload field"""
    pass


# Specific flow exceptions
class InvalidStepException(FlowException):
    """Step missing from the flow table or no step resolvable"""
    pass


class InvalidFlowTypeException(FlowException):
    """Unknown flow type"""
    pass


# Specific system exceptions
class ConfigurationException(SystemException):
    """System configuration errors"""
    pass


class ServiceException(SystemException):
    """External service errors"""
    pass
