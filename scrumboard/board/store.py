"""In-memory story collection for the board currently on screen."""

from __future__ import annotations

import dataclasses
import logging
from typing import Callable

from .models import COLUMN_ORDER, BoardColumn, ColumnSummary, Priority, Story
from .status_map import parse_column

logger = logging.getLogger(__name__)

StoreListener = Callable[[], None]


class BoardStateStore:
    """Stories keyed by id. Holds exactly one status per story at any time.

    Mutations are synchronous; optimistic writers get the prior value back
    and hand it to the matching revert method if the backend refuses.
    """

    def __init__(self, stories: list[Story] | None = None) -> None:
        self._stories: dict[int, Story] = {}
        self._listeners: list[StoreListener] = []
        if stories:
            self.load(stories)

    def __len__(self) -> int:
        return len(self._stories)

    def __contains__(self, story_id: object) -> bool:
        return story_id in self._stories

    # -- Listeners --

    def add_listener(self, listener: StoreListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: StoreListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    # -- Loading and lookup --

    def load(self, stories: list[Story]) -> None:
        """Replace the whole collection. No merge with what was there."""
        self._stories = {s.id: s for s in stories}
        logger.debug("Loaded %d stories", len(self._stories))
        self._notify()

    def get(self, story_id: int) -> Story | None:
        return self._stories.get(story_id)

    def all(self) -> list[Story]:
        return [dataclasses.replace(s) for s in self._stories.values()]

    # -- Status --

    def apply_optimistic_status(self, story_id: int, new_status: BoardColumn) -> BoardColumn | None:
        """Set a story's column before the backend confirms it.

        Returns the previous column, or None when the id is unknown (nothing
        is mutated in that case).
        """
        story = self._stories.get(story_id)
        if story is None:
            return None
        previous = story.status
        story.status = new_status
        self._notify()
        return previous

    def revert_status(self, story_id: int, previous_status: BoardColumn) -> None:
        """Restore a column captured by apply_optimistic_status."""
        story = self._stories.get(story_id)
        if story is None or story.status is previous_status:
            return
        story.status = previous_status
        self._notify()

    # -- Sprint readiness and estimates --

    def set_sprint_ready(self, story_id: int, sprint_ready: bool) -> bool | None:
        story = self._stories.get(story_id)
        if story is None:
            return None
        previous = story.is_sprint_ready
        story.is_sprint_ready = sprint_ready
        self._notify()
        return previous

    def set_points(self, story_id: int, points: int) -> int | None:
        story = self._stories.get(story_id)
        if story is None:
            return None
        previous = story.points
        story.points = points
        self._notify()
        return previous

    def set_starred(self, story_id: int, starred: bool) -> bool | None:
        story = self._stories.get(story_id)
        if story is None:
            return None
        previous = story.is_starred
        story.is_starred = starred
        self._notify()
        return previous

    def set_release_plan(self, story_id: int, key: str | None, name: str | None) -> bool:
        story = self._stories.get(story_id)
        if story is None:
            return False
        story.release_plan_key = key
        story.release_plan_name = name
        self._notify()
        return True

    # -- Views --

    def query(
        self,
        status: BoardColumn | str | None = None,
        priority: Priority | str | None = None,
        search_text: str | None = None,
    ) -> list[Story]:
        """Filtered copies of the stories. All given filters must match."""
        stories = list(self._stories.values())

        if status is not None:
            column = parse_column(status)
            stories = [s for s in stories if s.status is column]

        if priority is not None:
            if isinstance(priority, Priority):
                stories = [s for s in stories if s.priority is priority]
            else:
                wanted = str(priority).strip().lower()
                stories = [s for s in stories if s.priority.value == wanted]

        if search_text:
            needle = search_text.lower()
            stories = [
                s for s in stories
                if needle in s.title.lower() or needle in s.description.lower()
            ]

        return [dataclasses.replace(s) for s in stories]

    def columns(self) -> dict[BoardColumn, list[Story]]:
        """Stories grouped by column, in board order."""
        grouped: dict[BoardColumn, list[Story]] = {col: [] for col in COLUMN_ORDER}
        for story in self._stories.values():
            grouped[story.status].append(dataclasses.replace(story))
        return grouped

    def column_summary(self) -> list[ColumnSummary]:
        summaries = {col: ColumnSummary(column=col) for col in COLUMN_ORDER}
        for story in self._stories.values():
            summary = summaries[story.status]
            summary.count += 1
            summary.points += story.points
        return [summaries[col] for col in COLUMN_ORDER]

    def sprint_ready_count(self) -> int:
        return sum(1 for s in self._stories.values() if s.is_sprint_ready)
