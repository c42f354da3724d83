"""REST gateway over httpx.

Talks to the Scrum backend with the session cookie attached to every
request, the way the browser client sends ``credentials: include``.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..config import ClientConfig
from ..exceptions import GatewayError

logger = logging.getLogger(__name__)


class HttpStoryGateway:
    """StoryGateway backed by an httpx.AsyncClient."""

    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        cookies = {}
        if config.session_cookie:
            cookies[config.cookie_name] = config.session_cookie
        kwargs: dict[str, Any] = {
            "base_url": config.base_url,
            "cookies": cookies,
            "headers": {"Accept": "application/json"},
        }
        if config.request_timeout is not None:
            kwargs["timeout"] = config.request_timeout
        if transport is not None:
            kwargs["transport"] = transport
        self._client = httpx.AsyncClient(**kwargs)

    async def __aenter__(self) -> HttpStoryGateway:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            r = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise GatewayError(method, path, detail=str(e)) from e
        if r.is_error:
            logger.warning("%s %s returned %s", method, path, r.status_code)
            raise GatewayError(method, path, status_code=r.status_code, detail=r.text)
        if not r.content:
            return {}
        try:
            return r.json()
        except ValueError:
            # Some endpoints answer 2xx with a plain-text message
            return {"message": r.text}

    async def list_stories(self, project_id: int) -> list[dict]:
        data = await self._request("GET", "/api/stories", params={"projectId": project_id})
        if not isinstance(data, list):
            raise GatewayError("GET", "/api/stories", detail="expected a JSON array of stories")
        return data

    async def update_status(self, story_id: int, status: str) -> dict:
        return await self._request("PUT", f"/api/stories/{story_id}/status", json={"status": status})

    async def update_sprint_ready(self, story_id: int, sprint_ready: bool) -> dict:
        return await self._request(
            "PUT", f"/api/stories/{story_id}/sprint-ready", json={"sprintReady": sprint_ready}
        )

    async def update_estimate(self, story_id: int, story_points: int) -> dict:
        return await self._request(
            "PUT", f"/api/stories/{story_id}/estimate", json={"storyPoints": story_points}
        )

    async def update_star(self, story_id: int, starred: bool) -> dict:
        return await self._request("PUT", f"/api/stories/{story_id}/star", json={"starred": starred})

    async def link_release_plan(self, story_id: int, release_plan_id: str) -> dict:
        """Attach a story to a release plan given its numeric id or release key."""
        return await self._request(
            "POST", f"/api/stories/{story_id}/release-plan", json={"releasePlanId": release_plan_id}
        )

    async def current_user(self) -> dict | None:
        try:
            data = await self._request("GET", "/api/users/me")
        except GatewayError:
            return None
        return data if isinstance(data, dict) else None
