"""Signed session tokens carrying the caller's identities."""

import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from idlink.config import SessionConfig
from idlink.domain.link.model.value import CorporateIdentity, GitHubIdentity, LinkContext
from idlink.domain.shared.service import Service

SESSION_AUDIENCE = "idlink-session"


class SessionTokenService(Service):
    """Issues and reads the JWTs that stand in for the portal session.

    A token holds up to two identities: the GitHub account (claim "gh") and
    the corporate identity (claim "aad"). Either may be absent while the user
    is half-way through signing in.
    """

    _config: SessionConfig

    def create_session_token(
        self,
        github: GitHubIdentity | None = None,
        corporate: CorporateIdentity | None = None,
    ) -> str:
        """Create a signed session token for the given identities."""
        now = datetime.now(UTC)
        expires_at = now + timedelta(minutes=self._config.expire_minutes)

        payload: dict[str, Any] = {
            "aud": SESSION_AUDIENCE,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
            "jti": secrets.token_hex(16),
        }
        if github is not None:
            payload["gh"] = github.model_dump(exclude_none=True)
        if corporate is not None:
            payload["aad"] = corporate.model_dump(exclude_none=True)

        return jwt.encode(payload, self._config.secret, algorithm=self._config.algorithm)

    def validate_session_token(self, token: str) -> dict[str, Any]:
        """Validate and decode a session token.

        Raises:
            jwt.InvalidTokenError: If token is invalid or expired
        """
        return jwt.decode(
            token,
            self._config.secret,
            algorithms=[self._config.algorithm],
            audience=SESSION_AUDIENCE,
        )

    def read_context(self, token: str, correlation_id: str | None = None) -> LinkContext:
        """Decode a session token into a LinkContext.

        Raises:
            jwt.InvalidTokenError: If token is invalid or expired
        """
        payload = self.validate_session_token(token)
        github = payload.get("gh")
        corporate = payload.get("aad")
        return LinkContext(
            github=GitHubIdentity.model_validate(github) if github else None,
            corporate=CorporateIdentity.model_validate(corporate) if corporate else None,
            correlation_id=correlation_id,
        )
