"""
Shared plumbing for the shopper and owner auth services.

Both flows talk to the hosted auth platform through a fresh, non-persistent
client per call, translate platform errors into storefront exceptions and
return an AuthResult.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from supabase import Client

from wirebazaar.core.exceptions import (
    AuthenticationError,
    COMMON_ERROR_MESSAGES,
    ConfigurationError,
    InvalidOTPError,
    StorefrontException,
)
from wirebazaar.core.supabase_client import new_auth_client
from wirebazaar.database.storefront_db import StorefrontDatabase, storefront_db
from wirebazaar.models.storefront import AuthenticatedUser

logger = logging.getLogger(__name__)

OTP_SENT_MESSAGE = "OTP sent successfully!"
LOGGED_OUT_MESSAGE = "You have been logged out."
LOGOUT_FAILED_MESSAGE = "Error logging out"


@dataclass
class AuthResult:
    """Outcome of an auth operation, shaped for the API response."""
    success: bool
    message: str
    user: Optional[AuthenticatedUser] = None
    profile: Optional[Dict[str, Any]] = None
    # API-issued JWT
    token: Optional[str] = None
    # Platform session, needed later for sign-out
    session: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = {"success": self.success, "message": self.message}
        if self.user is not None:
            data["user"] = self.user.model_dump()
        if self.profile is not None:
            data["profile"] = self.profile
        if self.token:
            data["token"] = self.token
        if self.session:
            data["session"] = self.session
        return data


def platform_error_message(error: Exception, fallback: str) -> str:
    """The platform's own message when it has one, else the fallback."""
    message = getattr(error, "message", None) or str(error)
    return message or fallback


def session_tokens(session: Any) -> Dict[str, Any]:
    if session is None:
        return {}
    return {
        "access_token": getattr(session, "access_token", None),
        "refresh_token": getattr(session, "refresh_token", None),
        "expires_in": getattr(session, "expires_in", None),
    }


class PlatformAuthService:
    def __init__(
        self,
        db: StorefrontDatabase = storefront_db,
        client_factory: Callable[[], Optional[Client]] = new_auth_client,
    ):
        self.db = db
        self._client_factory = client_factory

    def _client(self) -> Client:
        client = self._client_factory()
        if client is None:
            raise ConfigurationError(COMMON_ERROR_MESSAGES["NOT_CONFIGURED"])
        return client

    @property
    def is_configured(self) -> bool:
        return self._client_factory() is not None

    async def _call(self, func: Callable, *args):
        # the auth client is synchronous
        return await asyncio.to_thread(func, *args)

    async def request_otp(self, phone: str) -> AuthResult:
        """Ask the platform to text a one-time code to the phone."""
        client = self._client()
        try:
            await self._call(client.auth.sign_in_with_otp, {"phone": phone})
        except StorefrontException:
            raise
        except Exception as e:
            logger.error(f"OTP request error for {phone}: {e}")
            raise AuthenticationError(platform_error_message(e, "Failed to send OTP"))

        logger.info(f"OTP sent to {phone}")
        return AuthResult(success=True, message=OTP_SENT_MESSAGE)

    async def _verify_phone_otp(self, client: Client, phone: str, token: str):
        try:
            response = await self._call(
                client.auth.verify_otp,
                {"phone": phone, "token": token, "type": "sms"},
            )
        except Exception as e:
            logger.error(f"OTP verification error for {phone}: {e}")
            raise InvalidOTPError(platform_error_message(e, "Failed to verify OTP"))

        if response is None or response.user is None:
            raise InvalidOTPError("Failed to verify OTP")
        return response

    async def _session_user(self, access_token: str):
        """Resolve a platform access token to its user ("restore session")."""
        client = self._client()
        try:
            response = await self._call(client.auth.get_user, access_token)
        except Exception as e:
            logger.info(f"Session restore failed: {e}")
            raise AuthenticationError("Invalid or expired session")

        if response is None or response.user is None:
            raise AuthenticationError("Invalid or expired session")
        return response.user

    async def _sign_out(self, client: Client, access_token: Optional[str], refresh_token: Optional[str]) -> None:
        if access_token and refresh_token:
            await self._call(client.auth.set_session, access_token, refresh_token)
        await self._call(client.auth.sign_out)

    async def logout(
        self,
        access_token: Optional[str] = None,
        refresh_token: Optional[str] = None,
    ) -> AuthResult:
        """
        End the platform session. Without platform configuration or tokens
        this is a local logout. Failures are reported, never raised.
        """
        client = self._client_factory()
        if client is None or not (access_token and refresh_token):
            return AuthResult(success=True, message=LOGGED_OUT_MESSAGE)

        try:
            await self._sign_out(client, access_token, refresh_token)
        except Exception as e:
            logger.error(f"Logout error: {e}")
            return AuthResult(success=False, message=LOGOUT_FAILED_MESSAGE)

        return AuthResult(success=True, message=LOGGED_OUT_MESSAGE)
