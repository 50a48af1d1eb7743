"""
Store owner authentication (phone OTP only).

A verified phone is not enough: the platform user must also have a row in
`owner_credentials`. Anyone else is signed straight back out.
"""

import logging

from wirebazaar.core.exceptions import AuthorizationError, COMMON_ERROR_MESSAGES
from wirebazaar.core.security import create_owner_token
from wirebazaar.models.storefront import AuthenticatedUser
from wirebazaar.services.platform_auth import (
    AuthResult,
    PlatformAuthService,
    session_tokens,
)

logger = logging.getLogger(__name__)


class OwnerAuthService(PlatformAuthService):

    async def verify_otp(self, phone: str, token: str) -> AuthResult:
        client = self._client()
        response = await self._verify_phone_otp(client, phone, token)
        user = response.user

        if not await self.db.check_is_owner(user.id):
            logger.warning(f"Non-owner {user.id} attempted owner login")
            try:
                await self._call(client.auth.sign_out)
            except Exception as e:
                logger.error(f"Sign-out of non-owner {user.id} failed: {e}")
            raise AuthorizationError(COMMON_ERROR_MESSAGES["OWNER_ACCESS_REQUIRED"])

        logger.info(f"Owner {user.id} logged in")
        return AuthResult(
            success=True,
            message="Owner logged in successfully!",
            user=AuthenticatedUser(id=user.id, phone=phone),
            token=create_owner_token(user.id, phone=phone),
            session=session_tokens(response.session),
        )

    async def restore_session(self, access_token: str) -> AuthResult:
        user = await self._session_user(access_token)
        if not await self.db.check_is_owner(user.id):
            raise AuthorizationError(COMMON_ERROR_MESSAGES["OWNER_ACCESS_REQUIRED"])

        return AuthResult(
            success=True,
            message="Session restored",
            user=AuthenticatedUser(id=user.id, phone=getattr(user, "phone", None)),
        )


owner_auth_service = OwnerAuthService()
