"""
Shopper authentication.

Two ways in: phone OTP and email/password. After a platform login the
shopper's profile row is loaded (and created on first OTP login), the cart is
bound to the account and the API issues a customer token.
"""

import logging
from typing import Any, Dict, Optional

from wirebazaar.core.exceptions import AuthenticationError
from wirebazaar.core.security import create_customer_token
from wirebazaar.models.storefront import AuthenticatedUser
from wirebazaar.services.cart_storage import CartStorage
from wirebazaar.services.platform_auth import (
    AuthResult,
    PlatformAuthService,
    platform_error_message,
    session_tokens,
)

logger = logging.getLogger(__name__)


class UserAuthService(PlatformAuthService):

    async def _load_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        profile = await self.db.get_user_profile(user_id)
        return profile.model_dump() if profile else None

    async def _bind_cart(self, cart: Optional[CartStorage], user_id: str) -> None:
        """Attach the cart to the account and bring the guest lines along."""
        if cart is None:
            return
        cart.set_user_id(user_id)
        try:
            await cart.merge_guest_cart()
        except Exception as e:
            logger.error(f"Guest cart merge failed for user {user_id}: {e}")

    def _logged_in(self, user, profile, session, message: str, phone: Optional[str] = None) -> AuthResult:
        email = getattr(user, "email", None) or (profile or {}).get("email") or None
        phone = phone or getattr(user, "phone", None) or (profile or {}).get("phone")
        return AuthResult(
            success=True,
            message=message,
            user=AuthenticatedUser(id=user.id, email=email, phone=phone),
            profile=profile,
            token=create_customer_token(user.id, email=email, phone=phone),
            session=session_tokens(session),
        )

    async def verify_otp(self, phone: str, token: str, cart: Optional[CartStorage] = None) -> AuthResult:
        client = self._client()
        response = await self._verify_phone_otp(client, phone, token)
        user = response.user

        if await self.db.get_user_profile(user.id) is None:
            await self.db.create_user_row({"id": user.id, "phone_number": phone})

        profile = await self._load_profile(user.id)
        await self._bind_cart(cart, user.id)

        logger.info(f"Shopper {user.id} logged in with OTP")
        return self._logged_in(user, profile, response.session, "Logged in successfully!", phone=phone)

    async def sign_up(self, email: str, password: str, full_name: str) -> AuthResult:
        """Create a platform account and its profile row. Does not log in."""
        client = self._client()
        try:
            response = await self._call(client.auth.sign_up, {"email": email, "password": password})
        except Exception as e:
            logger.error(f"Sign up error for {email}: {e}")
            raise AuthenticationError(platform_error_message(e, "Failed to create account"))

        user = getattr(response, "user", None)
        if user is None:
            raise AuthenticationError("Failed to create account")

        await self.db.create_user_row({"id": user.id, "email": email, "full_name": full_name})
        logger.info(f"Shopper account created: {user.id}")
        return AuthResult(
            success=True,
            message="Account created successfully!",
            user=AuthenticatedUser(id=user.id, email=email),
        )

    async def sign_in(self, email: str, password: str, cart: Optional[CartStorage] = None) -> AuthResult:
        client = self._client()
        try:
            response = await self._call(
                client.auth.sign_in_with_password,
                {"email": email, "password": password},
            )
        except Exception as e:
            logger.info(f"Sign in failed for {email}: {e}")
            raise AuthenticationError(platform_error_message(e, "Failed to sign in"))

        user = getattr(response, "user", None)
        if user is None:
            raise AuthenticationError("Failed to sign in")

        profile = await self._load_profile(user.id)
        await self._bind_cart(cart, user.id)

        logger.info(f"Shopper {user.id} signed in with password")
        return self._logged_in(user, profile, response.session, "Signed in successfully!")

    async def restore_session(self, access_token: str) -> AuthResult:
        """Rebuild the shopper state from an existing platform session."""
        user = await self._session_user(access_token)
        profile = await self._load_profile(user.id)
        return AuthResult(
            success=True,
            message="Session restored",
            user=AuthenticatedUser(
                id=user.id,
                email=getattr(user, "email", None),
                phone=getattr(user, "phone", None),
            ),
            profile=profile,
        )

    async def logout(
        self,
        access_token: Optional[str] = None,
        refresh_token: Optional[str] = None,
        cart: Optional[CartStorage] = None,
    ) -> AuthResult:
        result = await super().logout(access_token, refresh_token)
        if result.success and cart is not None:
            cart.set_user_id(None)
        return result


user_auth_service = UserAuthService()
