"""Tenant Auth API Client

End-user authentication for applications built on Fluxez (``/tenant-auth``).

Handles:
- Registration, login, token refresh and logout
- Users, profiles, passwords and email verification
- Two-factor authentication and sessions
- Teams, invitations and roles
- Social (OAuth) sign-in

Tokens returned by ``login``/``refresh`` are never stored by the client.
User-scoped calls take an ``access_token`` which is sent as a per-call
``Authorization: Bearer`` header, leaving the client configuration untouched.
"""

import logging
from typing import Any

from ..constants import HeaderName
from .base_client import BaseAPIClient

logger = logging.getLogger(__name__)


def _bearer(access_token: str | None) -> dict[str, str] | None:
    if not access_token:
        return None
    return {HeaderName.AUTHORIZATION: f"Bearer {access_token}"}


class AuthClient(BaseAPIClient):
    """Client for the tenant auth API."""

    ENDPOINT = "/tenant-auth"

    # Account
    async def register(
        self, email: str, password: str, **profile: Any
    ) -> dict[str, Any]:
        """Register an end user. ``profile`` carries ``name``, ``metadata``..."""
        self._require(email, "email")
        self._require(password, "password")
        return await self._post(
            self._build_url("register"), {"email": email, "password": password, **profile}
        )

    async def login(self, email: str, password: str, **options: Any) -> dict[str, Any]:
        """Log a user in.

        Returns:
            ``{"user", "accessToken", "refreshToken", "expiresIn"}``
        """
        self._require(email, "email")
        self._require(password, "password")
        logger.debug("Logging in tenant user")
        return await self._post(
            self._build_url("login"), {"email": email, "password": password, **options}
        )

    async def refresh(self, refresh_token: str) -> dict[str, Any]:
        self._require(refresh_token, "refresh_token")
        return await self._post(
            self._build_url("refresh"), {"refreshToken": refresh_token}
        )

    async def logout(
        self, access_token: str | None = None, refresh_token: str | None = None
    ) -> None:
        await self._post(
            self._build_url("logout"),
            self._compact({"refreshToken": refresh_token}),
            headers=_bearer(access_token),
            idempotent=True,
        )

    async def me(self, access_token: str | None = None) -> dict[str, Any]:
        return await self._get(self._build_url("me"), headers=_bearer(access_token))

    # Users
    async def get_user(self, user_id: str) -> dict[str, Any]:
        self._require(user_id, "user_id")
        return await self._get(self._build_url("users", user_id))

    async def update_user(self, user_id: str, updates: dict[str, Any]) -> dict[str, Any]:
        self._require(user_id, "user_id")
        self._require(updates, "updates")
        return await self._patch(self._build_url("users", user_id), updates)

    async def delete_user(self, user_id: str) -> None:
        self._require(user_id, "user_id")
        await self._delete(self._build_url("users", user_id))

    async def list_users(
        self,
        page: int | None = None,
        limit: int | None = None,
        search: str | None = None,
        **filters: Any,
    ) -> Any:
        return await self._get(
            self._build_url("users"),
            {"page": page, "limit": limit, "search": search, **filters},
        )

    async def update_profile(
        self, updates: dict[str, Any], access_token: str | None = None
    ) -> dict[str, Any]:
        self._require(updates, "updates")
        return await self._patch(
            self._build_url("profile"), updates, headers=_bearer(access_token)
        )

    # Passwords
    async def forgot_password(self, email: str) -> dict[str, Any]:
        """Start a password reset; the backend emails a reset token."""
        self._require(email, "email")
        return await self._post(self._build_url("forgot-password"), {"email": email})

    async def reset_password(self, token: str, new_password: str) -> dict[str, Any]:
        self._require(token, "token")
        self._require(new_password, "new_password")
        return await self._post(
            self._build_url("reset-password"), {"token": token, "newPassword": new_password}
        )

    async def change_password(
        self, current_password: str, new_password: str, access_token: str | None = None
    ) -> None:
        self._require(current_password, "current_password")
        self._require(new_password, "new_password")
        await self._post(
            self._build_url("password", "change"),
            {"currentPassword": current_password, "newPassword": new_password},
            headers=_bearer(access_token),
        )

    # Email verification
    async def request_email_verification(self, access_token: str | None = None) -> None:
        await self._post(
            self._build_url("email", "verify", "request"), headers=_bearer(access_token)
        )

    async def verify_email(self, token: str) -> dict[str, Any]:
        self._require(token, "token")
        return await self._post(
            self._build_url("verify-email"), {"token": token}, idempotent=True
        )

    async def resend_verification(self, email: str) -> dict[str, Any]:
        self._require(email, "email")
        return await self._post(
            self._build_url("verify-email", "resend"), {"email": email}
        )

    # Two-factor authentication
    async def enable_2fa(self, access_token: str | None = None) -> dict[str, Any]:
        """Start 2FA enrolment.

        Returns:
            ``{"secret", "qrCode", "backupCodes"}``
        """
        return await self._post(
            self._build_url("2fa", "enable"), headers=_bearer(access_token)
        )

    async def disable_2fa(self, code: str, access_token: str | None = None) -> None:
        self._require(code, "code")
        await self._post(
            self._build_url("2fa", "disable"), {"code": code}, headers=_bearer(access_token)
        )

    async def verify_2fa(self, code: str, access_token: str | None = None) -> dict[str, Any]:
        self._require(code, "code")
        return await self._post(
            self._build_url("2fa", "verify"), {"code": code}, headers=_bearer(access_token)
        )

    # Sessions
    async def get_sessions(self, access_token: str | None = None) -> Any:
        return await self._get(self._build_url("sessions"), headers=_bearer(access_token))

    async def revoke_session(self, session_id: str, access_token: str | None = None) -> None:
        self._require(session_id, "session_id")
        await self._delete(
            self._build_url("sessions", session_id), headers=_bearer(access_token)
        )

    async def revoke_all_sessions(self, access_token: str | None = None) -> None:
        await self._delete(self._build_url("sessions"), headers=_bearer(access_token))

    # Teams
    async def create_team(self, name: str, **options: Any) -> dict[str, Any]:
        self._require(name, "name")
        return await self._post(self._build_url("teams"), {"name": name, **options})

    async def get_teams(self) -> Any:
        return await self._get(self._build_url("teams"))

    async def invite_member(
        self, team_id: str, email: str, role: str = "member"
    ) -> dict[str, Any]:
        self._require(team_id, "team_id")
        self._require(email, "email")
        return await self._post(
            self._build_url("teams", "invite"),
            {"teamId": team_id, "email": email, "role": role},
        )

    async def accept_invitation(self, token: str) -> dict[str, Any]:
        self._require(token, "token")
        return await self._post(
            self._build_url("teams", "accept-invitation"), {"token": token}
        )

    async def remove_member(self, team_id: str, user_id: str) -> dict[str, Any]:
        self._require(team_id, "team_id")
        self._require(user_id, "user_id")
        return await self._delete(
            self._build_url("teams", "member"), {"teamId": team_id, "userId": user_id}
        )

    async def update_member_role(
        self, team_id: str, user_id: str, role: str
    ) -> dict[str, Any]:
        self._require(team_id, "team_id")
        self._require(user_id, "user_id")
        self._require(role, "role")
        return await self._put(
            self._build_url("teams", "member", "role"),
            {"teamId": team_id, "userId": user_id, "role": role},
        )

    async def get_team_members(self, team_id: str) -> Any:
        self._require(team_id, "team_id")
        return await self._get(self._build_url("teams", team_id, "members"))

    async def get_roles(self) -> Any:
        return await self._get(self._build_url("roles"))

    # Social sign-in
    async def get_oauth_url(self, provider: str) -> dict[str, Any]:
        """Authorization URL the application should redirect the user to."""
        self._require(provider, "provider")
        return await self._get(self._build_url("social", provider, "url"))

    async def handle_oauth_callback(
        self, provider: str, code: str, state: str | None = None
    ) -> dict[str, Any]:
        self._require(provider, "provider")
        self._require(code, "code")
        return await self._get(
            self._build_url("social", provider, "callback"), {"code": code, "state": state}
        )

    async def link_social(
        self, provider: str, access_token: str | None = None, **data: Any
    ) -> dict[str, Any]:
        self._require(provider, "provider")
        return await self._post(
            self._build_url("social", "link"),
            {"provider": provider, **data},
            headers=_bearer(access_token),
        )

    async def get_social_providers(self) -> Any:
        return await self._get(self._build_url("social", "providers"))
