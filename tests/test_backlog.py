"""Tests for role-gated backlog actions."""

from __future__ import annotations

import pytest

from scrumboard.backlog import (
    ACCESS_DENIED_MESSAGE,
    ESTIMATE_FAILED_MESSAGE,
    INVALID_POINTS_MESSAGE,
    LINK_FAILED_MESSAGE,
    LINKED_MESSAGE,
    RELEASE_PLAN_REQUIRED_MESSAGE,
    SPRINT_READY_FAILED_MESSAGE,
    STAR_FAILED_MESSAGE,
    BacklogActions,
)
from scrumboard.board.loader import load_board
from scrumboard.exceptions import PermissionDeniedError
from scrumboard.session import SessionContext


async def _actions(gateway, store, notifier, roles) -> BacklogActions:
    await load_board(gateway, store, 1)
    return BacklogActions(store, gateway, notifier, SessionContext.authenticated(roles))


class TestToggleSprintReady:
    async def test_flips_and_persists(self, seeded_gateway, store, notifier):
        actions = await _actions(seeded_gateway, store, notifier, ["PRODUCT_OWNER"])
        assert await actions.toggle_sprint_ready(1) is True
        assert store.get(1).is_sprint_ready is True
        assert seeded_gateway.payload(1)["sprintReady"] is True

    async def test_developer_is_denied(self, seeded_gateway, store, notifier):
        actions = await _actions(seeded_gateway, store, notifier, ["DEVELOPER"])
        assert await actions.toggle_sprint_ready(1) is None
        assert [t.message for t in notifier.toasts] == [ACCESS_DENIED_MESSAGE]
        assert store.get(1).is_sprint_ready is False
        assert not any(r.path.endswith("sprint-ready") for r in seeded_gateway.requests)

    async def test_unauthenticated_is_denied(self, seeded_gateway, store, notifier):
        await load_board(seeded_gateway, store, 1)
        actions = BacklogActions(store, seeded_gateway, notifier, SessionContext())
        assert await actions.toggle_sprint_ready(1) is None
        assert notifier.toasts

    async def test_failure_reverts(self, seeded_gateway, store, notifier):
        actions = await _actions(seeded_gateway, store, notifier, ["SCRUM_MASTER"])
        seeded_gateway.fail_with = 500
        assert await actions.toggle_sprint_ready(3) is True
        assert store.get(3).is_sprint_ready is True
        assert notifier.alerts == [SPRINT_READY_FAILED_MESSAGE]

    async def test_unknown_story(self, seeded_gateway, store, notifier):
        actions = await _actions(seeded_gateway, store, notifier, ["PRODUCT_OWNER"])
        assert await actions.toggle_sprint_ready(99) is None
        assert notifier.toasts == []


class TestEstimate:
    async def test_applies_stored_points(self, seeded_gateway, store, notifier):
        actions = await _actions(seeded_gateway, store, notifier, ["DEVELOPER"])
        assert await actions.estimate(1, 13) == 13
        assert store.get(1).points == 13

    async def test_rejects_non_positive_points(self, seeded_gateway, store, notifier):
        actions = await _actions(seeded_gateway, store, notifier, ["DEVELOPER"])
        with pytest.raises(ValueError, match=INVALID_POINTS_MESSAGE):
            await actions.estimate(1, 0)

    async def test_requires_role(self, seeded_gateway, store, notifier):
        actions = await _actions(seeded_gateway, store, notifier, ["STAKEHOLDER"])
        with pytest.raises(PermissionDeniedError, match="estimate"):
            await actions.estimate(1, 5)

    async def test_failure_keeps_points(self, seeded_gateway, store, notifier):
        actions = await _actions(seeded_gateway, store, notifier, ["DEVELOPER"])
        seeded_gateway.fail_with = 502
        assert await actions.estimate(1, 5) is None
        assert store.get(1).points == 2
        assert notifier.alerts == [ESTIMATE_FAILED_MESSAGE]

    async def test_unknown_story(self, seeded_gateway, store, notifier):
        actions = await _actions(seeded_gateway, store, notifier, ["DEVELOPER"])
        assert await actions.estimate(99, 5) is None


class TestNonObjectResponses:
    async def test_sprint_ready_list_response_keeps_wanted_flag(self, seeded_gateway, store, notifier):
        actions = await _actions(seeded_gateway, store, notifier, ["PRODUCT_OWNER"])

        async def _list_body(story_id, sprint_ready):
            return [{"id": story_id, "sprintReady": sprint_ready}]

        seeded_gateway.update_sprint_ready = _list_body
        assert await actions.toggle_sprint_ready(1) is True
        assert store.get(1).is_sprint_ready is True
        assert notifier.alerts == []

    async def test_estimate_empty_response_uses_requested_points(self, seeded_gateway, store, notifier):
        actions = await _actions(seeded_gateway, store, notifier, ["DEVELOPER"])

        async def _no_body(story_id, story_points):
            return None

        seeded_gateway.update_estimate = _no_body
        assert await actions.estimate(1, 8) == 8
        assert store.get(1).points == 8


class TestToggleStar:
    async def test_stars_and_persists(self, seeded_gateway, store, notifier):
        actions = await _actions(seeded_gateway, store, notifier, ["STAKEHOLDER"])
        assert await actions.toggle_star(4) is True
        assert store.get(4).is_starred is True
        assert seeded_gateway.payload(4)["isStarred"] is True
        assert seeded_gateway.requests[-1].body == {"starred": True}

    async def test_unstar(self, seeded_gateway, store, notifier):
        seeded_gateway.add_story(id=7, title="Starred", isStarred=True)
        actions = await _actions(seeded_gateway, store, notifier, ["DEVELOPER"])
        assert await actions.toggle_star(7) is False
        assert store.get(7).is_starred is False

    async def test_failure_reverts(self, seeded_gateway, store, notifier):
        actions = await _actions(seeded_gateway, store, notifier, ["DEVELOPER"])
        seeded_gateway.fail_with = 500
        assert await actions.toggle_star(3) is False
        assert store.get(3).is_starred is False
        assert notifier.alerts == [STAR_FAILED_MESSAGE]

    async def test_unauthenticated_is_denied(self, seeded_gateway, store, notifier):
        await load_board(seeded_gateway, store, 1)
        actions = BacklogActions(store, seeded_gateway, notifier, SessionContext())
        assert await actions.toggle_star(1) is None
        assert [t.message for t in notifier.toasts] == [ACCESS_DENIED_MESSAGE]
        assert not any(r.path.endswith("/star") for r in seeded_gateway.requests)


class TestLinkReleasePlan:
    async def test_link_by_id(self, seeded_gateway, store, notifier):
        seeded_gateway.add_release_plan(12, "REL-012", "Spring release")
        actions = await _actions(seeded_gateway, store, notifier, ["PRODUCT_OWNER"])

        assert await actions.link_release_plan(3, "12") == "REL-012"
        assert store.get(3).release_plan_key == "REL-012"
        assert store.get(3).release_plan_name == "Spring release"
        assert notifier.alerts == [LINKED_MESSAGE]
        assert seeded_gateway.requests[-1].body == {"releasePlanId": "12"}

    async def test_link_by_key_ignores_case(self, seeded_gateway, store, notifier):
        seeded_gateway.add_release_plan(12, "REL-012", "Spring release")
        actions = await _actions(seeded_gateway, store, notifier, ["SYSTEM_ADMIN"])
        assert await actions.link_release_plan(3, "  rel-012 ") == "REL-012"
        assert seeded_gateway.requests[-1].body == {"releasePlanId": "rel-012"}

    async def test_blank_identifier(self, seeded_gateway, store, notifier):
        actions = await _actions(seeded_gateway, store, notifier, ["PRODUCT_OWNER"])
        assert await actions.link_release_plan(3, "   ") is None
        assert notifier.alerts == [RELEASE_PLAN_REQUIRED_MESSAGE]
        assert not any(r.path.endswith("/release-plan") for r in seeded_gateway.requests)

    async def test_unknown_plan_alerts_backend_detail(self, seeded_gateway, store, notifier):
        actions = await _actions(seeded_gateway, store, notifier, ["PRODUCT_OWNER"])
        assert await actions.link_release_plan(3, "99") is None
        assert notifier.alerts == ["Release plan not found with identifier: 99"]
        assert store.get(3).release_plan_key is None

    async def test_failure_without_detail(self, seeded_gateway, store, notifier):
        seeded_gateway.add_release_plan(12, "REL-012")
        actions = await _actions(seeded_gateway, store, notifier, ["PRODUCT_OWNER"])
        seeded_gateway.fail_with = 500
        assert await actions.link_release_plan(3, "12") is None
        assert notifier.alerts == [LINK_FAILED_MESSAGE]

    async def test_requires_role(self, seeded_gateway, store, notifier):
        actions = await _actions(seeded_gateway, store, notifier, ["DEVELOPER"])
        with pytest.raises(PermissionDeniedError, match="release plan"):
            await actions.link_release_plan(3, "12")
