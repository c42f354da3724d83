"""Exception types for the scrumboard client."""

from __future__ import annotations


class GatewayError(Exception):
    """Raised when a backend call fails: transport error or non-2xx response."""

    def __init__(self, method: str, path: str, status_code: int | None = None, detail: str = ""):
        self.method = method
        self.path = path
        self.status_code = status_code
        self.detail = detail
        reason = f"HTTP {status_code}" if status_code is not None else "transport error"
        message = f"{method} {path} failed: {reason}"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class InvalidTransitionError(Exception):
    """Raised when a drag operation attempts a state change it does not allow."""

    def __init__(self, story_id: int, from_state, to_state):
        self.story_id = story_id
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid drag transition for story #{story_id}: "
            f"{from_state.value} \u2192 {to_state.value}"
        )


class PermissionDeniedError(Exception):
    """Raised when the session's roles do not allow an action."""

    def __init__(self, action: str, roles: list[str] | None = None):
        self.action = action
        self.roles = list(roles or [])
        super().__init__(
            f"Action '{action}' not permitted for roles: {', '.join(self.roles) or '(none)'}"
        )


class ConfigError(Exception):
    """Raised when a configuration file cannot be read or parsed."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid config {path}: {reason}")
