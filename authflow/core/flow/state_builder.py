"""Flow state reconciliation

Token validity, session activity and PIN presence are computed from the
security store on every build; values carried in the incoming state for those
fields are never trusted. A live PIN-verified session also marks the PIN as
verified, so a signed-in device does not have to enter its PIN again.
"""
import asyncio
import logging
from typing import Any, Dict, Optional, Union

from ...services.interface import SecurityStoreInterface, UserServiceInterface
from ..utils.exceptions import ServiceException
from .types import FlowState

logger = logging.getLogger(__name__)


class FlowStateBuilder:
    """Builds reconciled FlowState snapshots"""

    def __init__(self, security_store: SecurityStoreInterface, user_service: UserServiceInterface):
        self.security_store = security_store
        self.user_service = user_service

    async def _fetch_user(self) -> Optional[Dict[str, Any]]:
        """Optional fetch, failures degrade to None"""
        try:
            success, data = await self.user_service.get_user_profile()
        except Exception as e:
            logger.warning(f"User fetch raised during reconciliation: {str(e)}")
            return None
        if not success:
            logger.warning(f"User fetch failed during reconciliation: {data.get('error')}")
            return None
        return data.get("user")

    async def build_flow_state(
        self,
        current: Union[FlowState, Dict[str, Any], None],
        updates: Optional[Dict[str, Any]] = None
    ) -> FlowState:
        """Merge defaults, current state and updates, then reconcile

        Raises:
            ServiceException: If the session, token or PIN lookup fails
        """
        if current is None:
            current = FlowState()
        elif isinstance(current, dict):
            current = FlowState.from_dict(current)
        merged = current.merge(updates)

        try:
            session, token_status, pin_configured = await asyncio.gather(
                self.security_store.get_session(),
                self.security_store.get_token_status(),
                self.security_store.is_pin_configured(),
            )
        except Exception as e:
            logger.error(f"Security state reconciliation failed: {str(e)}")
            raise ServiceException(
                message=f"Failed to reconcile security state: {str(e)}",
                code="RECONCILIATION_ERROR",
                service="flow_state_builder",
                action="build_flow_state"
            ) from e

        token_valid = token_status.is_valid
        session_live = session is not None and session.is_live()

        user = merged.user
        if token_valid and not user:
            user = await self._fetch_user()

        wallet_address = (user or {}).get("walletAddress") or merged.wallet_address

        return merged.merge({
            "token_exists": token_status.exists,
            "token_valid": token_valid,
            "session_active": session_live,
            "pin_set": pin_configured or merged.pin_set,
            "pin_verified": merged.pin_verified or (session_live and session.pin_verified),
            "user": user,
            "wallet_address": wallet_address,
            "wallet_created": bool(wallet_address) or merged.wallet_created,
        })
