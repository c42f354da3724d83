"""Backlog actions: sprint-ready, star, estimate and release plan link for a card."""

from __future__ import annotations

import logging

from .board.loader import release_plan_of
from .board.notifications import Notifier
from .board.store import BoardStateStore
from .exceptions import GatewayError, PermissionDeniedError
from .gateway.interface import StoryGateway
from .roles import can_estimate_stories, can_link_to_release_plan, can_mark_sprint_ready
from .session import SessionContext

logger = logging.getLogger(__name__)

ACCESS_DENIED_MESSAGE = "Access Denied"
SPRINT_READY_FAILED_MESSAGE = "Could not update sprint-ready"
ESTIMATE_FAILED_MESSAGE = "Could not update estimation"
INVALID_POINTS_MESSAGE = "Story points must be greater than zero"
STAR_FAILED_MESSAGE = "Could not update star"
RELEASE_PLAN_REQUIRED_MESSAGE = "Release Plan identifier is required"
LINK_FAILED_MESSAGE = "Could not link story to release plan"
LINKED_MESSAGE = "Story linked to release plan successfully"


def _confirmed_fields(updated) -> dict:
    """Backend echo of the written story; empty when the body is not an object."""
    return updated if isinstance(updated, dict) else {}


class BacklogActions:
    """Role-gated story edits made from the backlog view."""

    def __init__(
        self,
        store: BoardStateStore,
        gateway: StoryGateway,
        notifier: Notifier,
        session: SessionContext,
    ) -> None:
        self.store = store
        self.gateway = gateway
        self.notifier = notifier
        self.session = session

    async def toggle_sprint_ready(self, story_id: int) -> bool | None:
        """Flip the sprint-ready flag optimistically.

        Returns the flag now held by the store, or None if the story is
        unknown or the user may not change it.
        """
        if not can_mark_sprint_ready(self.session.roles):
            self.notifier.toast(ACCESS_DENIED_MESSAGE)
            return None

        story = self.store.get(story_id)
        if story is None:
            logger.warning("Sprint-ready toggle for unknown story #%s", story_id)
            return None

        wanted = not story.is_sprint_ready
        previous = self.store.set_sprint_ready(story_id, wanted)
        try:
            updated = await self.gateway.update_sprint_ready(story_id, wanted)
        except GatewayError as e:
            logger.warning("Sprint-ready update for #%s failed: %s", story_id, e)
            self.store.set_sprint_ready(story_id, previous)
            await self.notifier.alert(SPRINT_READY_FAILED_MESSAGE)
            return previous

        confirmed = bool(_confirmed_fields(updated).get("sprintReady", wanted))
        self.store.set_sprint_ready(story_id, confirmed)
        return confirmed

    async def estimate(self, story_id: int, points: int) -> int | None:
        """Persist a story point estimate, then apply what the backend stored.

        Raises ValueError for non-positive points and PermissionDeniedError
        when the session may not estimate.
        """
        if not can_estimate_stories(self.session.roles):
            raise PermissionDeniedError("estimate", self.session.roles)
        if points <= 0:
            raise ValueError(INVALID_POINTS_MESSAGE)
        if self.store.get(story_id) is None:
            logger.warning("Estimate for unknown story #%s", story_id)
            return None

        try:
            updated = await self.gateway.update_estimate(story_id, points)
        except GatewayError as e:
            logger.warning("Estimate for #%s failed: %s", story_id, e)
            await self.notifier.alert(ESTIMATE_FAILED_MESSAGE)
            return None

        stored = _confirmed_fields(updated).get("storyPoints")
        new_points = int(stored) if stored is not None else points
        self.store.set_points(story_id, new_points)
        return new_points

    async def toggle_star(self, story_id: int) -> bool | None:
        """Flip the starred flag optimistically. Any signed-in user may star."""
        if not self.session.is_authenticated:
            self.notifier.toast(ACCESS_DENIED_MESSAGE)
            return None

        story = self.store.get(story_id)
        if story is None:
            logger.warning("Star toggle for unknown story #%s", story_id)
            return None

        wanted = not story.is_starred
        previous = self.store.set_starred(story_id, wanted)
        try:
            updated = await self.gateway.update_star(story_id, wanted)
        except GatewayError as e:
            logger.warning("Star update for #%s failed: %s", story_id, e)
            self.store.set_starred(story_id, previous)
            await self.notifier.alert(STAR_FAILED_MESSAGE)
            return previous

        confirmed = bool(_confirmed_fields(updated).get("isStarred", wanted))
        self.store.set_starred(story_id, confirmed)
        return confirmed

    async def link_release_plan(self, story_id: int, identifier: str) -> str | None:
        """Attach a story to a release plan by numeric id or release key.

        The outcome is reported through alerts, as the backlog card does.
        Returns the linked release key, or None when nothing was linked.
        """
        if not can_link_to_release_plan(self.session.roles):
            raise PermissionDeniedError("link to release plan", self.session.roles)
        identifier = (identifier or "").strip()
        if not identifier:
            await self.notifier.alert(RELEASE_PLAN_REQUIRED_MESSAGE)
            return None
        if self.store.get(story_id) is None:
            logger.warning("Release plan link for unknown story #%s", story_id)
            return None

        try:
            updated = await self.gateway.link_release_plan(story_id, identifier)
        except GatewayError as e:
            logger.warning("Linking #%s to release plan %s failed: %s", story_id, identifier, e)
            await self.notifier.alert(e.detail or LINK_FAILED_MESSAGE)
            return None

        key, name = release_plan_of(_confirmed_fields(updated))
        self.store.set_release_plan(story_id, key or identifier, name)
        await self.notifier.alert(LINKED_MESSAGE)
        return key or identifier
