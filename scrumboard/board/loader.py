"""Fetch a project's stories and load them into the board store."""

from __future__ import annotations

import logging
from typing import Any

from ..gateway.interface import StoryGateway
from .models import Priority, Story
from .status_map import to_board_column
from .store import BoardStateStore

logger = logging.getLogger(__name__)


def _first_present(payload: dict, *keys: str, default: Any = None) -> Any:
    for key in keys:
        value = payload.get(key)
        if value is not None:
            return value
    return default


def _string_list(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


def release_plan_of(payload: dict) -> tuple[str | None, str | None]:
    """Release plan key and name, flat on the story or nested under releasePlan."""
    plan = payload.get("releasePlan")
    if isinstance(plan, dict):
        return plan.get("releaseKey"), plan.get("name")
    return payload.get("releasePlanKey"), payload.get("releasePlanName")


def story_from_payload(payload: dict) -> Story:
    """Translate a backend story object into a board Story.

    Points come from storyPoints, then businessValue, then 0. The backend
    status code is mapped into its board column.
    """
    points = _first_present(payload, "storyPoints", "businessValue", default=0)
    tags = _string_list(payload.get("tags"))
    if payload.get("isMvp") or payload.get("mvp"):
        if "MVP" not in tags:
            tags.append("MVP")
    release_key, release_name = release_plan_of(payload)
    return Story(
        id=int(payload["id"]),
        title=payload.get("title") or "",
        description=payload.get("description") or "",
        priority=Priority.parse(payload.get("priority")),
        points=max(int(points), 0),
        status=to_board_column(payload.get("status")),
        is_sprint_ready=bool(payload.get("sprintReady")),
        is_starred=bool(payload.get("isStarred")),
        tags=tags,
        labels=_string_list(payload.get("labels")),
        assignee=_first_present(payload, "assigneeName", "assignee", default="") or "",
        acceptance_criteria=payload.get("acceptanceCriteria"),
        business_value=payload.get("businessValue"),
        release_plan_key=release_key,
        release_plan_name=release_name,
    )


async def load_board(gateway: StoryGateway, store: BoardStateStore, project_id: int) -> list[Story]:
    """Replace the store contents with the project's stories.

    Raises GatewayError if the fetch fails; the store is left untouched.
    """
    payloads = await gateway.list_stories(project_id)
    stories = [story_from_payload(p) for p in payloads]
    store.load(stories)
    logger.info("Loaded %d stories for project %s", len(stories), project_id)
    return stories
