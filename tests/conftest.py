"""Shared test configuration."""

from __future__ import annotations

import asyncio

import pytest

from scrumboard.board.models import BoardColumn, Priority, Story
from scrumboard.board.notifications import RecordingNotifier
from scrumboard.board.store import BoardStateStore
from scrumboard.gateway.memory import InMemoryStoryGateway

PRODUCT_OWNER = {"id": 1, "username": "pat", "roles": ["PRODUCT_OWNER"]}


def make_story(story_id: int = 1, **overrides) -> Story:
    fields = {
        "id": story_id,
        "title": f"Story {story_id}",
        "priority": Priority.MEDIUM,
        "points": 3,
        "status": BoardColumn.BACKLOG,
        "is_sprint_ready": True,
    }
    fields.update(overrides)
    return Story(**fields)


async def settle(rounds: int = 5) -> None:
    """Let pending tasks run up to their next real suspension point."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def store():
    return BoardStateStore()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def gateway():
    return InMemoryStoryGateway(user=PRODUCT_OWNER)


@pytest.fixture
def seeded_gateway(gateway):
    """Project 1 with one story per backend status, plus a story in project 2."""
    gateway.add_story(id=1, title="Write docs", status="NEW", sprintReady=False, storyPoints=2)
    gateway.add_story(id=2, title="Fix flaky test", status="BLOCKED", sprintReady=True, storyPoints=1,
                      priority="HIGH")
    gateway.add_story(id=3, title="Checkout flow", status="IN_PROGRESS", sprintReady=True, storyPoints=5,
                      description="Pay with card")
    gateway.add_story(id=4, title="Review API", status="IN_REVIEW", sprintReady=True, storyPoints=3)
    gateway.add_story(id=5, title="Login page", status="DONE", sprintReady=True, storyPoints=8,
                      priority="CRITICAL")
    gateway.add_story(project_id=2, id=6, title="Other project", status="NEW")
    return gateway
