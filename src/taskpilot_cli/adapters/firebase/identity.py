"""Firebase Authentication (Identity Toolkit REST API) identity provider."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

import httpx

from taskpilot_cli.adapters.firebase.client import FirebaseClient, error_message, translate_error
from taskpilot_cli.models import AuthenticationError, AuthSession, BackendError, Identity
from taskpilot_cli.repositories import IdentityProvider
from taskpilot_cli.utils.logger import get_logger

logger = get_logger(__name__)

SESSION_EXPIRED = "Your session has expired. Please log in again."

# Identity Toolkit error codes shown to users in plain words
FRIENDLY_ERRORS = {
    "EMAIL_EXISTS": "An account with this email already exists.",
    "EMAIL_NOT_FOUND": "Invalid email or password.",
    "INVALID_PASSWORD": "Invalid email or password.",
    "INVALID_LOGIN_CREDENTIALS": "Invalid email or password.",
    "USER_DISABLED": "This account has been disabled.",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "Too many attempts. Try again later.",
    "TOKEN_EXPIRED": SESSION_EXPIRED,
    "INVALID_ID_TOKEN": SESSION_EXPIRED,
    "INVALID_REFRESH_TOKEN": SESSION_EXPIRED,
}


def _friendly(message: str) -> str:
    # Codes may carry a detail suffix, e.g. "WEAK_PASSWORD : Password should be ..."
    code = message.split(":", 1)[0].strip()
    return FRIENDLY_ERRORS.get(code, message)


def _expires_at(seconds: Any) -> datetime | None:
    if seconds in (None, ""):
        return None
    return datetime.now(UTC) + timedelta(seconds=int(seconds))


class FirebaseIdentityProvider(IdentityProvider):
    """Email/password accounts of a Firebase project."""

    def __init__(
        self,
        client: FirebaseClient,
        identity_endpoint: str = "https://identitytoolkit.googleapis.com/v1",
        token_endpoint: str = "https://securetoken.googleapis.com/v1",
    ):
        self.client = client
        self.identity_endpoint = identity_endpoint.rstrip("/")
        self.token_endpoint = token_endpoint.rstrip("/")

    async def _accounts(self, action: str, payload: dict[str, Any]) -> dict[str, Any]:
        if not self.client.api_key:
            raise AuthenticationError(
                "No Firebase API key configured. Set TASKPILOT_FIREBASE_API_KEY."
            )
        try:
            response = await self.client.request(
                "POST",
                f"{self.identity_endpoint}/accounts:{action}",
                json=payload,
                params={"key": self.client.api_key},
                skip_auth=True,
            )
        except httpx.HTTPStatusError as e:
            # Identity Toolkit reports every rejection as a 400 with a code
            if e.response.status_code < 500:
                raise AuthenticationError(_friendly(error_message(e.response))) from e
            raise translate_error(e, "Authentication failed") from e
        except httpx.RequestError as e:
            raise BackendError(f"Authentication service unreachable: {e}") from e
        return response.json()

    @staticmethod
    def _session(body: dict[str, Any]) -> AuthSession:
        return AuthSession(
            identity=Identity(
                external_id=body["localId"],
                display_name=body.get("displayName") or None,
                email=body.get("email"),
                photo_url=body.get("photoUrl") or None,
            ),
            id_token=body.get("idToken"),
            refresh_token=body.get("refreshToken"),
            expires_at=_expires_at(body.get("expiresIn")),
        )

    async def sign_in(self, email: str, password: str) -> AuthSession:
        body = await self._accounts(
            "signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        logger.info("signed in %s", email)
        return self._session(body)

    async def sign_up(
        self, email: str, password: str, display_name: str | None = None
    ) -> AuthSession:
        body = await self._accounts(
            "signUp",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        session = self._session(body)
        if display_name:
            await self.update_profile(session, display_name)
            session.identity.display_name = display_name
        logger.info("created account %s", email)
        return session

    async def lookup(self, session: AuthSession) -> Identity:
        if not session.id_token:
            raise AuthenticationError("Not logged in")
        body = await self._accounts("lookup", {"idToken": session.id_token})
        users = body.get("users") or []
        if not users:
            raise AuthenticationError("Account no longer exists")
        record = users[0]
        return Identity(
            external_id=record["localId"],
            display_name=record.get("displayName") or None,
            email=record.get("email"),
            photo_url=record.get("photoUrl") or None,
        )

    async def update_profile(self, session: AuthSession, display_name: str) -> None:
        if not session.id_token:
            raise AuthenticationError("Not logged in")
        await self._accounts(
            "update",
            {"idToken": session.id_token, "displayName": display_name, "returnSecureToken": False},
        )

    async def refresh(self, session: AuthSession) -> AuthSession:
        if not session.refresh_token:
            raise AuthenticationError(SESSION_EXPIRED)
        try:
            response = await self.client.request(
                "POST",
                f"{self.token_endpoint}/token",
                data={"grant_type": "refresh_token", "refresh_token": session.refresh_token},
                params={"key": self.client.api_key},
                skip_auth=True,
            )
        except httpx.HTTPStatusError as e:
            if e.response.status_code < 500:
                raise AuthenticationError(SESSION_EXPIRED) from e
            raise translate_error(e, "Token refresh failed") from e
        except httpx.RequestError as e:
            raise BackendError(f"Authentication service unreachable: {e}") from e
        body = response.json()
        return session.model_copy(
            update={
                "id_token": body["id_token"],
                "refresh_token": body.get("refresh_token", session.refresh_token),
                "expires_at": _expires_at(body.get("expires_in")),
            }
        )
