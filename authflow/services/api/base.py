"""Base wallet API client

Responses use the envelope {"data": ..., "error": str, "errorCode": str}.
Requests are blocking, so they run in a worker thread.
"""
import asyncio
import logging
from typing import Any, Dict, Optional, Tuple

import requests

from ...config.settings import AuthFlowSettings
from ...core.utils.error_types import ErrorCode
from ..interface import SecurityStoreInterface
from .config import ApiConfig, ApiEndpoints

logger = logging.getLogger(__name__)


def error_result(message: str, code: ErrorCode) -> Tuple[bool, Dict[str, Any]]:
    """Failure tuple in the collaborator convention"""
    return False, {"error": message, "code": code}


class BaseAPIClient:
    """Shared request handling for wallet API services"""

    service_name = "wallet_api"

    def __init__(
        self,
        settings: Optional[AuthFlowSettings] = None,
        security_store: Optional[SecurityStoreInterface] = None
    ):
        self.settings = settings or AuthFlowSettings()
        self.config = ApiConfig.from_settings(self.settings)
        self.security_store = security_store

    async def _get_auth_header(self) -> Optional[str]:
        if not self.security_store:
            return None
        token = await self.security_store.get_access_token()
        return f"Bearer {token}" if token else None

    async def make_request(
        self,
        group: str,
        action: str,
        payload: Optional[Dict[str, Any]] = None
    ) -> Tuple[bool, Dict[str, Any]]:
        """Make an HTTP request to the wallet API using endpoint groups"""
        path = ApiEndpoints.get_path(group, action)
        method = ApiEndpoints.get_method(group, action)
        url = self.config.get_url(path)
        headers = self.config.get_headers()

        if ApiEndpoints.requires_auth(group, action):
            auth_header = await self._get_auth_header()
            if not auth_header:
                logger.warning(f"No access token for {method} {path}")
                return error_result("Authentication required", ErrorCode.UNKNOWN)
            headers["Authorization"] = auth_header

        logger.debug(f"{method} {path}")
        try:
            response = await asyncio.to_thread(self._send, method, url, headers, payload)
        except requests.exceptions.RequestException as e:
            logger.error(f"Connection error for {method} {path}: {str(e)}")
            return error_result(f"Connection error: {str(e)}", ErrorCode.NETWORK_ERROR)

        return self._handle_response(response, f"{method}_{path}")

    def _send(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        payload: Optional[Dict[str, Any]]
    ) -> requests.Response:
        if method == "GET":
            return requests.request(method, url, headers=headers, params=payload, timeout=self.config.timeout)
        return requests.request(method, url, headers=headers, json=payload, timeout=self.config.timeout)

    def _handle_response(self, response: requests.Response, action: str) -> Tuple[bool, Dict[str, Any]]:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {"data": body}

        if not response.ok or body.get("error") or body.get("errorCode"):
            code = ErrorCode.parse(body.get("errorCode"), ErrorCode.UNKNOWN)
            message = body.get("error") or f"API request failed: {response.status_code}"
            logger.error(f"API error for {action}: {response.status_code} {code.value}")
            return error_result(message, code)

        data = body.get("data")
        return True, data if isinstance(data, dict) else {}
