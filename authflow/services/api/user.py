"""Wallet API user service"""
import logging
from typing import Any, Dict, Optional, Tuple

from ...core.utils.error_types import ErrorCode
from ..interface import UserServiceInterface
from .base import BaseAPIClient, error_result

logger = logging.getLogger(__name__)


class UserApiService(BaseAPIClient, UserServiceInterface):
    """Profile and wallet endpoints for the token holder"""

    service_name = "user_api"

    async def get_user_profile(self) -> Tuple[bool, Dict[str, Any]]:
        success, data = await self.make_request('user', 'get')
        if not success:
            return success, data
        user = data.get("user")
        if not user:
            return error_result("User not found", ErrorCode.USER_FETCH_FAILED)
        return True, {"user": user}

    async def update_user_profile(self, fields: Dict[str, Any]) -> Tuple[bool, Dict[str, Any]]:
        success, data = await self.make_request('user', 'update', fields)
        if not success:
            return success, data
        return True, {"user": data.get("user") or dict(fields)}

    async def create_wallet(self, wallet_address: Optional[str] = None) -> Tuple[bool, Dict[str, Any]]:
        payload = {"walletAddress": wallet_address} if wallet_address else {}
        success, data = await self.make_request('wallet', 'create', payload)
        if not success:
            return success, data

        address = data.get("walletAddress") or wallet_address
        if not address:
            return error_result("No wallet address returned", ErrorCode.WALLET_CREATION_FAILED)
        logger.info("Wallet created")
        return True, {"walletAddress": address}
