"""Tests for payload translation and board loading."""

from __future__ import annotations

import pytest

from scrumboard.board.loader import load_board, story_from_payload
from scrumboard.board.models import BoardColumn, Priority
from scrumboard.exceptions import GatewayError

from conftest import make_story


class TestStoryFromPayload:
    def test_full_payload(self):
        story = story_from_payload({
            "id": 9,
            "title": "Checkout",
            "description": "Pay with card",
            "priority": "HIGH",
            "storyPoints": 5,
            "status": "IN_REVIEW",
            "sprintReady": True,
            "tags": ["payments"],
            "labels": "backend",
            "assigneeName": "Sam",
            "acceptanceCriteria": "Given a cart",
            "releasePlanKey": "R1",
            "releasePlanName": "Spring",
        })
        assert story.id == 9
        assert story.priority is Priority.HIGH
        assert story.points == 5
        assert story.status is BoardColumn.IN_PROGRESS
        assert story.is_sprint_ready is True
        assert story.tags == ["payments"]
        assert story.labels == ["backend"]
        assert story.assignee == "Sam"
        assert story.acceptance_criteria == "Given a cart"
        assert story.release_plan_key == "R1"

    def test_points_fall_back_to_business_value(self):
        assert story_from_payload({"id": 1, "businessValue": 8}).points == 8
        assert story_from_payload({"id": 1, "storyPoints": 3, "businessValue": 8}).points == 3

    def test_points_default_to_zero(self):
        assert story_from_payload({"id": 1, "storyPoints": None}).points == 0

    def test_negative_points_clamped(self):
        assert story_from_payload({"id": 1, "storyPoints": -2}).points == 0

    def test_missing_fields_get_defaults(self):
        story = story_from_payload({"id": "4"})
        assert story.id == 4
        assert story.title == ""
        assert story.priority is Priority.MEDIUM
        assert story.status is BoardColumn.BACKLOG
        assert story.is_sprint_ready is False
        assert story.assignee == ""

    def test_unknown_status_and_priority(self):
        story = story_from_payload({"id": 1, "status": "ARCHIVED", "priority": "URGENT"})
        assert story.status is BoardColumn.BACKLOG
        assert story.priority is Priority.MEDIUM

    def test_mvp_flag_adds_tag_once(self):
        story = story_from_payload({"id": 1, "isMvp": True, "tags": ["MVP"]})
        assert story.tags == ["MVP"]
        assert story.is_mvp
        assert story_from_payload({"id": 2, "mvp": True}).is_mvp

    def test_starred_flag(self):
        assert story_from_payload({"id": 1, "isStarred": True}).is_starred
        assert not story_from_payload({"id": 1}).is_starred

    def test_nested_release_plan(self):
        story = story_from_payload(
            {"id": 1, "releasePlan": {"id": 12, "releaseKey": "REL-012", "name": "Spring release"}}
        )
        assert story.release_plan_key == "REL-012"
        assert story.release_plan_name == "Spring release"


class TestLoadBoard:
    async def test_replaces_store_contents(self, seeded_gateway, store):
        store.load([make_story(100)])
        stories = await load_board(seeded_gateway, store, 1)
        assert len(stories) == 5
        assert 100 not in store
        assert store.get(2).status is BoardColumn.BACKLOG
        assert store.get(4).status is BoardColumn.IN_PROGRESS
        assert store.get(5).priority is Priority.CRITICAL

    async def test_failure_leaves_store_untouched(self, gateway, store):
        async def _fail(project_id):
            raise GatewayError("GET", "/api/stories", status_code=500)

        gateway.list_stories = _fail
        store.load([make_story(1)])
        with pytest.raises(GatewayError):
            await load_board(gateway, store, 1)
        assert 1 in store
