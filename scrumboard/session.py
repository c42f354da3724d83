"""Authentication state for the current user, as one tagged value."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from .gateway.interface import StoryGateway

logger = logging.getLogger(__name__)


class SessionStatus(Enum):
    UNAUTHENTICATED = "unauthenticated"
    LOADING = "loading"
    AUTHENTICATED = "authenticated"


@dataclass
class SessionContext:
    status: SessionStatus = SessionStatus.UNAUTHENTICATED
    user: dict | None = None
    _roles: list[str] = field(default_factory=list)

    @classmethod
    def authenticated(cls, roles: list[str], user: dict | None = None) -> SessionContext:
        return cls(status=SessionStatus.AUTHENTICATED, user=user, _roles=list(roles))

    @property
    def is_authenticated(self) -> bool:
        return self.status is SessionStatus.AUTHENTICATED

    @property
    def roles(self) -> list[str]:
        """Roles of an authenticated user; empty in every other state."""
        return list(self._roles) if self.is_authenticated else []

    @property
    def username(self) -> str | None:
        if not self.is_authenticated or not self.user:
            return None
        return self.user.get("username")

    async def refresh(self, gateway: StoryGateway) -> SessionContext:
        """Ask the backend who is logged in and update in place."""
        self.status = SessionStatus.LOADING
        user = await gateway.current_user()
        if user is None:
            self.status = SessionStatus.UNAUTHENTICATED
            self.user = None
            self._roles = []
            logger.info("No active session")
            return self

        self.status = SessionStatus.AUTHENTICATED
        self.user = user
        self._roles = [str(r) for r in user.get("roles") or []]
        logger.info("Session for %s with roles %s", user.get("username"), ", ".join(self._roles))
        return self
