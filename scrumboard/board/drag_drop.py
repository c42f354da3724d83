"""Drag-and-drop status transitions with optimistic update and rollback.

One drop runs through a small state machine:

    IDLE -> VALIDATING -> REJECTED
                       -> COMMITTING -> CONFIRMED
                                     -> ROLLED_BACK

The store is updated before the backend call is dispatched and restored
from the captured previous column if the call fails.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from ..exceptions import GatewayError, InvalidTransitionError
from ..gateway.interface import StoryGateway
from .models import BoardColumn
from .notifications import TOAST_TIMEOUT, Notifier
from .status_map import parse_column, to_backend_status
from .store import BoardStateStore

logger = logging.getLogger(__name__)


class DragState(Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    REJECTED = "rejected"
    COMMITTING = "committing"
    CONFIRMED = "confirmed"
    ROLLED_BACK = "rolled_back"


VALID_TRANSITIONS: frozenset[tuple[DragState, DragState]] = frozenset(
    {
        (DragState.IDLE, DragState.VALIDATING),          # drop received
        (DragState.VALIDATING, DragState.REJECTED),      # unknown id or not sprint ready
        (DragState.VALIDATING, DragState.COMMITTING),    # gate passed, optimistic write
        (DragState.COMMITTING, DragState.CONFIRMED),     # backend acknowledged
        (DragState.COMMITTING, DragState.ROLLED_BACK),   # backend refused or unreachable
    }
)

TERMINAL_STATES = frozenset({DragState.REJECTED, DragState.CONFIRMED, DragState.ROLLED_BACK})

REASON_NOT_FOUND = "not_found"
REASON_NOT_SPRINT_READY = "not_sprint_ready"


def not_sprint_ready_message(story_id: int, title: str) -> str:
    return f"#{story_id} {title} has not been marked as Sprint Ready."


def rollback_message(story_id: int, title: str) -> str:
    return f"Could not update the status of #{story_id} {title}. The change has been reverted."


@dataclass
class DragOutcome:
    story_id: int
    target: BoardColumn
    state: DragState = DragState.IDLE
    previous: BoardColumn | None = None
    reason: str | None = None
    history: list[DragState] = field(default_factory=lambda: [DragState.IDLE])

    @property
    def succeeded(self) -> bool:
        return self.state is DragState.CONFIRMED

    def advance(self, to_state: DragState) -> None:
        if (self.state, to_state) not in VALID_TRANSITIONS:
            raise InvalidTransitionError(self.story_id, self.state, to_state)
        logger.debug("Story #%s drag: %s -> %s", self.story_id, self.state.value, to_state.value)
        self.state = to_state
        self.history.append(to_state)


class DragDropController:
    """Moves stories between board columns on behalf of the user.

    Each drop is an independent coroutine. Drops on different stories may
    settle in any order; nothing serialises drops on the same story.
    """

    def __init__(
        self,
        store: BoardStateStore,
        gateway: StoryGateway,
        notifier: Notifier,
        toast_timeout: float = TOAST_TIMEOUT,
    ) -> None:
        self.store = store
        self.gateway = gateway
        self.notifier = notifier
        self.toast_timeout = toast_timeout
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Detach from the view. Requests still in flight settle without side effects."""
        self._closed = True

    async def drop(self, story_id: int, target_column: str | BoardColumn) -> DragOutcome:
        """Handle a card dropped on a column.

        Column names are matched case-insensitively; unknown names resolve
        to Backlog. Any failure of the status update is absorbed into ROLLED_BACK.
        """
        target = parse_column(target_column) or BoardColumn.BACKLOG
        outcome = DragOutcome(story_id=story_id, target=target)
        outcome.advance(DragState.VALIDATING)

        story = self.store.get(story_id)
        if story is None:
            # No user-facing message for an id the board does not know
            logger.warning("Dropped story #%s is not on the board; ignoring", story_id)
            outcome.reason = REASON_NOT_FOUND
            outcome.advance(DragState.REJECTED)
            return outcome

        if not story.is_sprint_ready and story.status is not target:
            outcome.reason = REASON_NOT_SPRINT_READY
            outcome.advance(DragState.REJECTED)
            self.notifier.toast(not_sprint_ready_message(story.id, story.title), self.toast_timeout)
            return outcome

        outcome.advance(DragState.COMMITTING)
        outcome.previous = self.store.apply_optimistic_status(story_id, target)
        title = story.title

        try:
            await self.gateway.update_status(story_id, to_backend_status(target))
        except GatewayError as e:
            logger.warning("Status update for #%s failed: %s", story_id, e)
            return await self._roll_back(outcome, title)
        except Exception:
            # Anything else from the gateway still leaves the column unconfirmed
            logger.exception("Status update for #%s raised unexpectedly", story_id)
            return await self._roll_back(outcome, title)

        outcome.advance(DragState.CONFIRMED)
        return outcome

    async def _roll_back(self, outcome: DragOutcome, title: str) -> DragOutcome:
        outcome.advance(DragState.ROLLED_BACK)
        if self._closed:
            logger.info("Drop of #%s settled after close; leaving the store alone", outcome.story_id)
            return outcome
        logger.warning("Reverting #%s to %s", outcome.story_id, outcome.previous.value)
        self.store.revert_status(outcome.story_id, outcome.previous)
        await self.notifier.alert(rollback_message(outcome.story_id, title))
        return outcome
