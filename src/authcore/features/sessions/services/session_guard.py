"""Session authentication pipeline.

Each step is a plain call that either returns a typed result or raises one
taxonomy error: verify token -> resolve session -> stamp activity. Loading
the subject's business record and checking it is active stays with the
caller.
"""

import logging
import uuid
from typing import Optional, Tuple

from ....core.exceptions.auth import InvalidTokenError
from ...tokens.entities.claims import TokenClaims
from ...tokens.services.token_issuer import TokenIssuer
from ..entities.session_record import AuthenticatedSession, RequestContext, SessionRecord
from .session_store import SessionStore

logger = logging.getLogger(__name__)


class SessionGuard:
    """Composes the token issuer and the session store."""

    def __init__(self, issuer: TokenIssuer, sessions: SessionStore, session_ttl_minutes: int):
        self.issuer = issuer
        self.sessions = sessions
        self.session_ttl_minutes = session_ttl_minutes

    async def start_session(
        self,
        subject_id: str,
        context: Optional[RequestContext] = None,
    ) -> Tuple[str, SessionRecord]:
        """Open a new session for a subject, superseding any previous one.

        Returns:
            Tuple of (session token, stored record).
        """
        session_id = str(uuid.uuid4())
        record = await self.sessions.put(session_id, subject_id, context)
        token = self.issuer.issue_session_token(subject_id, session_id, self.session_ttl_minutes)
        return token, record

    async def authenticate(
        self,
        token: str,
        context: Optional[RequestContext] = None,
    ) -> AuthenticatedSession:
        """Authenticate a session token.

        Raises:
            InvalidTokenError: Token fails cryptographic or claim validation
            SessionRevokedError: Token is valid but its session is not live
        """
        claims = self.issuer.verify(token)
        record = await self.sessions.require(claims)
        if context is not None:
            record = await self.sessions.touch(claims.jti, context)
        return AuthenticatedSession(claims=claims, record=record)

    async def end_session(self, session: AuthenticatedSession) -> bool:
        """Log out the given session."""
        return await self.sessions.delete(session.session_id)

    async def start_step_up(self, subject_id: str) -> str:
        """Issue and register a step-up token after second-factor success."""
        token_id = uuid.uuid4().hex
        await self.sessions.put_step_up(token_id, subject_id)
        return self.issuer.issue_step_up_token(subject_id, token_id)

    async def authorize_step_up(self, session: AuthenticatedSession, step_up_token: str) -> TokenClaims:
        """Check a step-up token belongs to the session's subject and is live."""
        claims = self.issuer.verify_step_up(step_up_token)
        if claims.sub != session.subject_id:
            logger.warning(
                f"Step-up token for subject {claims.sub} presented with session of {session.subject_id}"
            )
            raise InvalidTokenError("Step-up token belongs to another subject")

        await self.sessions.require_step_up(claims)
        return claims
