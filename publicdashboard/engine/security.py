"""
PublicDashboard Security Tokens — Per-session, per-action CSRF tokens.

Each form view issues a token bound to the action it posts to
(``createDashboard``, ``modifyDashboard``, ...). The token is stored on the
admin session and consumed by the first validation attempt, so a replayed
form submission is rejected.
"""

from __future__ import annotations

import logging
import secrets
import time
from typing import Any, Dict, MutableMapping, Optional

from publicdashboard.engine.errors import SecurityTokenError

logger = logging.getLogger("publicdashboard.engine.security")

MARK_TOKEN = "token"


class SecurityTokenService:
    """
    Issue and validate action tokens held in a per-session mapping.

    The mapping is owned by the caller (the admin session); this service
    keeps no state of its own.
    """

    def __init__(self, token_ttl: int = 3600):
        self._token_ttl = token_ttl

    def get_token(self, tokens: MutableMapping[str, Dict[str, Any]], action: str) -> str:
        """Issue a fresh token for ``action``, replacing any previous one."""
        token = secrets.token_urlsafe(32)
        tokens[action] = {"token": token, "issued_at": time.time()}
        return token

    def validate(
        self,
        tokens: MutableMapping[str, Dict[str, Any]],
        action: str,
        token: Optional[str],
    ) -> bool:
        """
        Check ``token`` against the one issued for ``action``.

        The stored token is removed whatever the outcome.
        """
        issued = tokens.pop(action, None)
        if issued is None or not token:
            return False
        if time.time() - issued["issued_at"] > self._token_ttl:
            logger.info(f"Expired security token for action {action}")
            return False
        return secrets.compare_digest(str(issued["token"]), str(token))

    def require_valid(
        self,
        tokens: MutableMapping[str, Dict[str, Any]],
        action: str,
        token: Optional[str],
        session_id: Optional[str] = None,
    ) -> None:
        """Validate or raise SecurityTokenError."""
        if not self.validate(tokens, action, token):
            raise SecurityTokenError(
                "Invalid security token",
                action=action,
                session_id=session_id,
            )
