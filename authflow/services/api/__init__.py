from .auth import AuthApiService
from .base import BaseAPIClient
from .config import ApiConfig, ApiEndpoints
from .user import UserApiService

__all__ = ['AuthApiService', 'BaseAPIClient', 'ApiConfig', 'ApiEndpoints', 'UserApiService']
