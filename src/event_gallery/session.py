"""Shared-key access gate."""

import logging
import secrets
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class SessionContext:
    """Per-session state, created once when the session starts."""

    authenticated: bool = False


class AccessGate:
    """Admits sessions that present the event's shared key.

    Once a session has presented the key it stays authenticated, so later
    requests in the same session need not repeat it.
    """

    def __init__(self, secret: str | None = None) -> None:
        """Initialize access gate.

        Args:
            secret: Shared key; if empty, every session is admitted
        """
        self.secret = secret or None

    def check(self, session: SessionContext, key: str | None = None) -> bool:
        """Check whether a session may access the gallery.

        Args:
            session: Session context, updated on a successful key match
            key: Key presented with this request, if any

        Returns:
            True if access is granted
        """
        if self.secret is None:
            return True

        if key and secrets.compare_digest(key.encode(), self.secret.encode()):
            session.authenticated = True
            return True

        if not session.authenticated:
            logger.warning("Access denied: missing or invalid key")
        return session.authenticated
