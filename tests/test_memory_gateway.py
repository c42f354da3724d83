"""Unit tests for InMemoryStoryGateway."""

from __future__ import annotations

import pytest

from scrumboard.exceptions import GatewayError
from scrumboard.gateway.interface import StoryGateway
from scrumboard.gateway.memory import InMemoryStoryGateway, RecordedRequest


class TestSeeding:
    def test_defaults(self, gateway):
        payload = gateway.add_story(title="A")
        assert payload["id"] == 1
        assert payload["status"] == "NEW"
        assert payload["sprintReady"] is False
        assert payload["priority"] == "MEDIUM"

    def test_auto_increments_past_explicit_ids(self, gateway):
        gateway.add_story(id=10)
        assert gateway.add_story()["id"] == 11

    def test_payload_is_a_copy(self, gateway):
        gateway.add_story(id=1, tags=["x"])
        gateway.payload(1)["tags"].append("y")
        assert gateway.payload(1)["tags"] == ["x"]

    def test_satisfies_protocol(self, gateway):
        assert isinstance(gateway, StoryGateway)


class TestListStories:
    async def test_filters_by_project(self, seeded_gateway):
        stories = await seeded_gateway.list_stories(1)
        assert {s["id"] for s in stories} == {1, 2, 3, 4, 5}
        assert seeded_gateway.requests == [RecordedRequest("GET", "/api/stories?projectId=1")]

    async def test_unknown_project_is_empty(self, seeded_gateway):
        assert await seeded_gateway.list_stories(99) == []


class TestWrites:
    async def test_update_status_merges_body(self, seeded_gateway):
        result = await seeded_gateway.update_status(1, "DONE")
        assert result["status"] == "DONE"
        assert result["title"] == "Write docs"
        assert seeded_gateway.payload(1)["status"] == "DONE"

    async def test_update_sprint_ready(self, seeded_gateway):
        await seeded_gateway.update_sprint_ready(1, True)
        assert seeded_gateway.payload(1)["sprintReady"] is True

    async def test_update_estimate(self, seeded_gateway):
        await seeded_gateway.update_estimate(1, 13)
        assert seeded_gateway.payload(1)["storyPoints"] == 13
        assert seeded_gateway.requests[-1] == RecordedRequest(
            "PUT", "/api/stories/1/estimate", {"storyPoints": 13}
        )

    async def test_unknown_story_raises(self, gateway):
        with pytest.raises(GatewayError, match="Story not found"):
            await gateway.update_status(42, "DONE")

    async def test_fail_with_raises_and_leaves_payload(self, seeded_gateway):
        seeded_gateway.fail_with = 500
        with pytest.raises(GatewayError) as exc_info:
            await seeded_gateway.update_status(1, "DONE")
        assert exc_info.value.status_code == 500
        assert seeded_gateway.payload(1)["status"] == "NEW"
        assert seeded_gateway.requests[-1].body == {"status": "DONE"}

    async def test_update_star_stores_is_starred(self, seeded_gateway):
        result = await seeded_gateway.update_star(2, True)
        assert result["isStarred"] is True
        assert "starred" not in result
        assert seeded_gateway.requests[-1] == RecordedRequest("PUT", "/api/stories/2/star", {"starred": True})

    async def test_link_release_plan_by_key(self, seeded_gateway):
        seeded_gateway.add_release_plan(12, "REL-012", "Spring release")
        result = await seeded_gateway.link_release_plan(3, "rel-012")
        assert result["releasePlan"] == {"id": 12, "releaseKey": "REL-012", "name": "Spring release"}
        assert seeded_gateway.payload(3)["releasePlanKey"] == "REL-012"
        assert seeded_gateway.requests[-1].method == "POST"

    async def test_link_unknown_release_plan_raises(self, seeded_gateway):
        with pytest.raises(GatewayError) as exc_info:
            await seeded_gateway.link_release_plan(3, "REL-404")
        assert exc_info.value.detail == "Release plan not found with identifier: REL-404"
        assert "releasePlanKey" not in seeded_gateway.payload(3)


class TestCurrentUser:
    async def test_returns_copy(self):
        gw = InMemoryStoryGateway(user={"username": "pat", "roles": ["DEVELOPER"]})
        user = await gw.current_user()
        user["roles"].append("SYSTEM_ADMIN")
        assert (await gw.current_user())["roles"] == ["DEVELOPER"]

    async def test_no_user(self):
        assert await InMemoryStoryGateway().current_user() is None
