"""Wallet API configuration"""
from dataclasses import dataclass
from typing import Dict
from urllib.parse import urljoin

from ...config.settings import AuthFlowSettings
from ...core.utils.exceptions import ConfigurationException


@dataclass
class ApiConfig:
    """Configuration for wallet API access"""
    base_url: str
    client_api_key: str
    timeout: int
    default_headers: Dict[str, str]

    @classmethod
    def from_settings(cls, settings: AuthFlowSettings) -> "ApiConfig":
        if not settings.api_url:
            raise ConfigurationException(
                message="WALLET_API_URL is not set",
                code="MISSING_API_URL",
                service="api_config",
                action="from_settings"
            )

        # Trailing slash keeps urljoin from dropping the last path segment
        base_url = settings.api_url if settings.api_url.endswith("/") else settings.api_url + "/"

        default_headers = {"Content-Type": "application/json"}
        if settings.client_api_key:
            default_headers["x-client-api-key"] = settings.client_api_key

        return cls(
            base_url=base_url,
            client_api_key=settings.client_api_key,
            timeout=settings.api_timeout,
            default_headers=default_headers
        )

    def get_url(self, endpoint: str) -> str:
        """Get full URL for endpoint"""
        if not endpoint:
            raise ConfigurationException(
                message="Endpoint is required",
                code="MISSING_ENDPOINT",
                service="api_config",
                action="get_url"
            )
        return urljoin(self.base_url, endpoint)

    def get_headers(self) -> Dict[str, str]:
        return self.default_headers.copy()


class ApiEndpoints:
    """Wallet API endpoint definitions"""

    ENDPOINTS = {
        'auth': {
            'check_availability': {'path': 'auth/check-availability', 'method': 'GET', 'requires_auth': False},
            'send_otp': {'path': 'auth/otp/send', 'method': 'POST', 'requires_auth': False},
            'verify_otp': {'path': 'auth/otp/verify', 'method': 'POST', 'requires_auth': False},
            'login': {'path': 'auth/login', 'method': 'POST', 'requires_auth': False},
        },
        'user': {
            'get': {'path': 'user', 'method': 'GET'},
            'update': {'path': 'user', 'method': 'PUT'},
        },
        'wallet': {
            'create': {'path': 'wallet', 'method': 'POST'},
        },
    }

    @classmethod
    def get(cls, group: str, action: str) -> Dict[str, object]:
        if group not in cls.ENDPOINTS:
            raise ConfigurationException(
                message=f"Invalid endpoint group: {group}",
                code="INVALID_ENDPOINT",
                service="api_endpoints",
                action="get"
            )
        if action not in cls.ENDPOINTS[group]:
            raise ConfigurationException(
                message=f"Invalid action '{action}' for group '{group}'",
                code="INVALID_ENDPOINT",
                service="api_endpoints",
                action="get"
            )
        return cls.ENDPOINTS[group][action]

    @classmethod
    def get_path(cls, group: str, action: str) -> str:
        return cls.get(group, action)['path']

    @classmethod
    def get_method(cls, group: str, action: str) -> str:
        return cls.get(group, action)['method']

    @classmethod
    def requires_auth(cls, group: str, action: str) -> bool:
        return cls.get(group, action).get('requires_auth', True)
