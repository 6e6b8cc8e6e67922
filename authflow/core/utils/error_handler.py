"""Centralized error handling with clear boundaries

All failures that leave the orchestrator as structured results are recorded
through the ErrorHandler class.

Error Types:
- component: Step handler payload validation errors
- flow: Flow orchestration errors
- system: Collaborator and configuration errors

Each error type has a specific structure and boundary.
"""

import logging
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .error_types import ErrorCode, get_error_message

logger = logging.getLogger(__name__)


class ErrorHandler:
    """Central error handling with clear boundaries"""

    @classmethod
    def _create_error_response(
        cls,
        error_type: str,
        message: str,
        details: Dict,
        context: Optional[Dict] = None
    ) -> Dict:
        """Create standardized error record with context

        Args:
            error_type: Type of error (component, flow, system)
            message: Error message
            details: Error details
            context: Optional execution context

        Returns:
            Dict with standardized error structure
        """
        error = {
            "type": error_type,
            "message": message,
            "details": details,
            "context": context or {},
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

        logger.error(
            f"Error handled: {error_type} - {message}",
            extra={"details": details}
        )

        return error

    @classmethod
    def handle_component_error(
        cls,
        step: str,
        field: str,
        message: str,
        code: ErrorCode = ErrorCode.VALIDATION_ERROR
    ) -> Dict:
        """Handle step payload validation error

        Args:
            step: Step whose handler rejected the payload
            field: Field with error
            message: Error message
            code: Error code surfaced to the caller

        Returns:
            Dict with standardized error structure
        """
        details = {
            "code": code.value,
            "step": step,
            "field": field
        }

        return cls._create_error_response(
            error_type="component",
            message=message,
            details=details
        )

    @classmethod
    def handle_flow_error(
        cls,
        step: Optional[str],
        action: str,
        message: str,
        code: ErrorCode,
        flow_state: Optional[Dict[str, Any]] = None
    ) -> Dict:
        """Handle flow orchestration error with state tracking

        Args:
            step: Current flow step
            action: Action being performed
            message: Error message
            code: Error code surfaced to the caller
            flow_state: Optional flow state summary for tracking

        Returns:
            Dict with standardized error structure
        """
        details = {
            "code": code.value,
            "step": step,
            "action": action
        }

        return cls._create_error_response(
            error_type="flow",
            message=message,
            details=details,
            context={"flow_state": flow_state} if flow_state else None
        )

    @classmethod
    def handle_system_error(
        cls,
        code: ErrorCode,
        service: str,
        action: str,
        message: str,
        error: Optional[Exception] = None
    ) -> Dict:
        """Handle system technical error with error tracking

        Args:
            code: Error code
            service: Service name
            action: Action being performed
            message: Error message
            error: Optional exception for tracking

        Returns:
            Dict with standardized error structure
        """
        details = {
            "code": code.value,
            "service": service,
            "action": action
        }

        if error:
            details.update({
                "error_type": error.__class__.__name__,
                "error_message": str(error)
            })

        return cls._create_error_response(
            error_type="system",
            message=message,
            details=details,
            context={
                "exception": repr(error) if error else None,
                "traceback": traceback.format_exc() if error else None
            }
        )

    @staticmethod
    def get_error_message(code: ErrorCode) -> str:
        """Get standardized user-facing message for a code"""
        return get_error_message(code)
