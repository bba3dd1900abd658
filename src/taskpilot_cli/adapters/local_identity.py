"""Identity provider for local vaults.

A local vault belongs to whoever runs the CLI, so no password is checked:
signing in merely chooses which email (and directory entry) acts.
"""

from __future__ import annotations

import getpass

from taskpilot_cli.models import AuthSession, Identity
from taskpilot_cli.repositories import IdentityProvider


def local_identity(email: str, display_name: str | None = None) -> Identity:
    return Identity(
        external_id=f"local-{email.lower()}",
        display_name=display_name,
        email=email,
    )


class LocalIdentityProvider(IdentityProvider):
    """Passwordless identities scoped to one machine."""

    requires_login = False

    def __init__(self, email: str | None = None):
        self.email = email

    def default_session(self) -> AuthSession:
        email = self.email
        if not email:
            email = f"{getpass.getuser()}@localhost"
        return AuthSession(identity=local_identity(email))

    async def sign_in(self, email: str, password: str) -> AuthSession:
        return AuthSession(identity=local_identity(email))

    async def sign_up(
        self, email: str, password: str, display_name: str | None = None
    ) -> AuthSession:
        return AuthSession(identity=local_identity(email, display_name))

    async def lookup(self, session: AuthSession) -> Identity:
        return session.identity

    async def update_profile(self, session: AuthSession, display_name: str) -> None:
        session.identity.display_name = display_name
