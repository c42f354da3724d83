"""Abstract story gateway protocol."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class StoryGateway(Protocol):
    """Backend calls the board consumes.

    Payloads are the backend's JSON objects, unmodified. Failures raise
    GatewayError; current_user() reports failure as None instead.
    """

    async def list_stories(self, project_id: int) -> list[dict]: ...

    async def update_status(self, story_id: int, status: str) -> dict: ...

    async def update_sprint_ready(self, story_id: int, sprint_ready: bool) -> dict: ...

    async def update_estimate(self, story_id: int, story_points: int) -> dict: ...

    async def update_star(self, story_id: int, starred: bool) -> dict: ...

    async def link_release_plan(self, story_id: int, release_plan_id: str) -> dict: ...

    async def current_user(self) -> dict | None: ...
