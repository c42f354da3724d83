"""Role-based permission checks.

Each predicate is true when the user holds at least one role from its
allow-list. No network access, no state.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable


class UserRole(Enum):
    PRODUCT_OWNER = "PRODUCT_OWNER"
    SCRUM_MASTER = "SCRUM_MASTER"
    DEVELOPER = "DEVELOPER"
    SYSTEM_ADMIN = "SYSTEM_ADMIN"


ROLE_DISPLAY_NAMES: dict[str, str] = {
    UserRole.PRODUCT_OWNER.value: "Product Owner",
    UserRole.SCRUM_MASTER.value: "Scrum Master",
    UserRole.DEVELOPER.value: "Developer",
    UserRole.SYSTEM_ADMIN.value: "System Admin",
}

MANAGE_STORIES = frozenset({"PRODUCT_OWNER", "SYSTEM_ADMIN"})
ESTIMATE_STORIES = frozenset({"DEVELOPER", "SCRUM_MASTER", "PRODUCT_OWNER", "SYSTEM_ADMIN"})
UPDATE_STORY_STATUS = frozenset({"DEVELOPER", "SCRUM_MASTER", "PRODUCT_OWNER", "SYSTEM_ADMIN"})
MARK_SPRINT_READY = frozenset({"PRODUCT_OWNER", "SCRUM_MASTER", "SYSTEM_ADMIN"})
LINK_TO_RELEASE_PLAN = frozenset({"PRODUCT_OWNER", "SYSTEM_ADMIN"})


def has_any_role(user_roles: Iterable[str] | None, allowed_roles: Iterable[str]) -> bool:
    if not user_roles:
        return False
    held = set(user_roles)
    return any(role in held for role in allowed_roles)


def can_manage_stories(user_roles: Iterable[str] | None) -> bool:
    """Create, edit, and delete stories."""
    return has_any_role(user_roles, MANAGE_STORIES)


def can_estimate_stories(user_roles: Iterable[str] | None) -> bool:
    return has_any_role(user_roles, ESTIMATE_STORIES)


def can_update_story_status(user_roles: Iterable[str] | None) -> bool:
    """Move stories between board columns."""
    return has_any_role(user_roles, UPDATE_STORY_STATUS)


def can_mark_sprint_ready(user_roles: Iterable[str] | None) -> bool:
    return has_any_role(user_roles, MARK_SPRINT_READY)


def can_link_to_release_plan(user_roles: Iterable[str] | None) -> bool:
    return has_any_role(user_roles, LINK_TO_RELEASE_PLAN)


def role_display_name(role: str) -> str:
    return ROLE_DISPLAY_NAMES.get(role, role.replace("_", " ").title())
