"""In-memory story gateway for testing and demos."""

from __future__ import annotations

import asyncio
import copy
from dataclasses import dataclass, field

from ..exceptions import GatewayError


@dataclass
class RecordedRequest:
    method: str
    path: str
    body: dict | None = None


@dataclass
class _StoryRecord:
    project_id: int
    payload: dict = field(default_factory=dict)


class InMemoryStoryGateway:
    """StoryGateway backed by dicts of backend-shaped payloads.

    Every call is recorded in ``requests``. ``fail_with`` makes the next
    write calls fail with the given HTTP status; ``gate`` lets a test hold
    writes open until it sets the event.
    """

    def __init__(self, user: dict | None = None) -> None:
        self._stories: dict[int, _StoryRecord] = {}
        self._next_id = 1
        self.user = user
        self.requests: list[RecordedRequest] = []
        self.fail_with: int | None = None
        self.gate: asyncio.Event | None = None
        self._release_plans: dict[str, dict] = {}

    def add_story(self, project_id: int = 1, **payload) -> dict:
        """Seed a story payload. Missing fields get backend defaults."""
        story_id = payload.pop("id", None) or self._next_id
        self._next_id = max(self._next_id, story_id) + 1
        record = {
            "id": story_id,
            "title": "",
            "description": "",
            "priority": "MEDIUM",
            "storyPoints": None,
            "businessValue": None,
            "status": "NEW",
            "sprintReady": False,
        }
        record.update(payload)
        self._stories[story_id] = _StoryRecord(project_id=project_id, payload=record)
        return copy.deepcopy(record)

    def add_release_plan(self, plan_id: int, release_key: str, name: str = "") -> dict:
        plan = {"id": plan_id, "releaseKey": release_key, "name": name}
        self._release_plans[str(plan_id)] = plan
        return dict(plan)

    def _find_release_plan(self, identifier: str) -> dict | None:
        if identifier in self._release_plans:
            return self._release_plans[identifier]
        for plan in self._release_plans.values():
            if plan["releaseKey"].lower() == identifier.lower():
                return plan
        return None

    def payload(self, story_id: int) -> dict:
        return copy.deepcopy(self._get(story_id, "GET", f"/api/stories/{story_id}").payload)

    def _get(self, story_id: int, method: str, path: str) -> _StoryRecord:
        if story_id not in self._stories:
            raise GatewayError(method, path, status_code=400, detail=f"Story not found: {story_id}")
        return self._stories[story_id]

    async def _write(
        self, method: str, path: str, story_id: int, body: dict, fields: dict | None = None
    ) -> dict:
        self.requests.append(RecordedRequest(method=method, path=path, body=body))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise GatewayError(method, path, status_code=self.fail_with)
        record = self._get(story_id, method, path)
        record.payload.update(body if fields is None else fields)
        return copy.deepcopy(record.payload)

    async def list_stories(self, project_id: int) -> list[dict]:
        self.requests.append(RecordedRequest(method="GET", path=f"/api/stories?projectId={project_id}"))
        return [
            copy.deepcopy(r.payload)
            for r in self._stories.values()
            if r.project_id == project_id
        ]

    async def update_status(self, story_id: int, status: str) -> dict:
        return await self._write("PUT", f"/api/stories/{story_id}/status", story_id, {"status": status})

    async def update_sprint_ready(self, story_id: int, sprint_ready: bool) -> dict:
        return await self._write(
            "PUT", f"/api/stories/{story_id}/sprint-ready", story_id, {"sprintReady": sprint_ready}
        )

    async def update_estimate(self, story_id: int, story_points: int) -> dict:
        return await self._write(
            "PUT", f"/api/stories/{story_id}/estimate", story_id, {"storyPoints": story_points}
        )

    async def update_star(self, story_id: int, starred: bool) -> dict:
        return await self._write(
            "PUT", f"/api/stories/{story_id}/star", story_id, {"starred": starred},
            fields={"isStarred": starred},
        )

    async def link_release_plan(self, story_id: int, release_plan_id: str) -> dict:
        path = f"/api/stories/{story_id}/release-plan"
        body = {"releasePlanId": release_plan_id}
        plan = self._find_release_plan(release_plan_id.strip())
        if plan is None:
            self.requests.append(RecordedRequest(method="POST", path=path, body=body))
            raise GatewayError(
                "POST", path, status_code=400,
                detail=f"Release plan not found with identifier: {release_plan_id}",
            )
        fields = {"releasePlanKey": plan["releaseKey"], "releasePlanName": plan["name"]}
        updated = await self._write("POST", path, story_id, body, fields=fields)
        updated["releasePlan"] = dict(plan)
        return updated

    async def current_user(self) -> dict | None:
        self.requests.append(RecordedRequest(method="GET", path="/api/users/me"))
        return copy.deepcopy(self.user)
