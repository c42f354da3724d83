"""Backend status <-> board column mapping defined as data.

Five backend codes collapse into four board columns, so the pair of
functions is not a bijection: BLOCKED and IN_REVIEW do not survive a
round trip.
"""

from __future__ import annotations

from .models import BackendStatus, BoardColumn

BACKEND_TO_COLUMN: dict[str, BoardColumn] = {
    BackendStatus.NEW.value: BoardColumn.BACKLOG,
    BackendStatus.BLOCKED.value: BoardColumn.BACKLOG,
    BackendStatus.IN_PROGRESS.value: BoardColumn.IN_PROGRESS,
    BackendStatus.IN_REVIEW.value: BoardColumn.IN_PROGRESS,
    BackendStatus.DONE.value: BoardColumn.DONE,
}

COLUMN_TO_BACKEND: dict[BoardColumn, str] = {
    BoardColumn.BACKLOG: BackendStatus.NEW.value,
    BoardColumn.TODO: BackendStatus.NEW.value,
    BoardColumn.IN_PROGRESS: BackendStatus.IN_PROGRESS.value,
    BoardColumn.DONE: BackendStatus.DONE.value,
}

# Case-folded column names, e.g. "in progress" -> BoardColumn.IN_PROGRESS
_COLUMN_BY_NAME: dict[str, BoardColumn] = {c.value.lower(): c for c in BoardColumn}

DEFAULT_COLUMN = BoardColumn.BACKLOG
DEFAULT_BACKEND_STATUS = BackendStatus.NEW.value


def parse_column(name: str | BoardColumn | None) -> BoardColumn | None:
    """Resolve a board column name case-insensitively, or None."""
    if isinstance(name, BoardColumn):
        return name
    if not name:
        return None
    return _COLUMN_BY_NAME.get(str(name).strip().lower())


def to_board_column(backend_status: str | BoardColumn | None) -> BoardColumn:
    """Map a backend status code to the column it is displayed in.

    Values already in column space pass through unchanged. Anything
    unrecognised, including None, lands in Backlog.
    """
    column = parse_column(backend_status)
    if column is not None:
        return column
    if not backend_status:
        return DEFAULT_COLUMN
    return BACKEND_TO_COLUMN.get(str(backend_status).strip().upper(), DEFAULT_COLUMN)


def to_backend_status(board_column: str | BoardColumn | None) -> str:
    """Map a board column name to the backend code persisted for it."""
    column = parse_column(board_column)
    if column is None:
        return DEFAULT_BACKEND_STATUS
    return COLUMN_TO_BACKEND[column]
