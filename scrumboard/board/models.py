"""Domain models for the story board."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class BoardColumn(Enum):
    BACKLOG = "Backlog"
    TODO = "To Do"
    IN_PROGRESS = "In Progress"
    DONE = "Done"


class BackendStatus(Enum):
    NEW = "NEW"
    IN_PROGRESS = "IN_PROGRESS"
    IN_REVIEW = "IN_REVIEW"
    BLOCKED = "BLOCKED"
    DONE = "DONE"


class Priority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @classmethod
    def parse(cls, value: str | None) -> Priority:
        """Unknown priorities render as medium."""
        if isinstance(value, Priority):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.MEDIUM


# Column display order on the board
COLUMN_ORDER: list[BoardColumn] = [
    BoardColumn.BACKLOG,
    BoardColumn.TODO,
    BoardColumn.IN_PROGRESS,
    BoardColumn.DONE,
]


@dataclass
class Story:
    id: int
    title: str
    description: str = ""
    priority: Priority = Priority.MEDIUM
    points: int = 0
    status: BoardColumn = BoardColumn.BACKLOG
    is_sprint_ready: bool = False
    is_starred: bool = False
    tags: list[str] = field(default_factory=list)
    labels: list[str] = field(default_factory=list)
    assignee: str = ""
    acceptance_criteria: str | None = None
    business_value: int | None = None
    release_plan_key: str | None = None
    release_plan_name: str | None = None

    @property
    def is_mvp(self) -> bool:
        return "MVP" in self.tags


@dataclass
class ColumnSummary:
    column: BoardColumn
    count: int = 0
    points: int = 0
