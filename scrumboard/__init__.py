from .backlog import BacklogActions
from .board import (
    COLUMN_ORDER,
    BackendStatus,
    BoardColumn,
    BoardStateStore,
    Priority,
    Story,
    to_backend_status,
    to_board_column,
)
from .board.drag_drop import DragDropController, DragOutcome, DragState
from .board.loader import load_board, story_from_payload
from .config import ClientConfig, load_config
from .exceptions import ConfigError, GatewayError, PermissionDeniedError
from .session import SessionContext, SessionStatus

__all__ = [
    "Story",
    "Priority",
    "BoardColumn",
    "BackendStatus",
    "COLUMN_ORDER",
    "BoardStateStore",
    "to_board_column",
    "to_backend_status",
    "DragDropController",
    "DragOutcome",
    "DragState",
    "load_board",
    "story_from_payload",
    "BacklogActions",
    "SessionContext",
    "SessionStatus",
    "ClientConfig",
    "load_config",
    "GatewayError",
    "ConfigError",
    "PermissionDeniedError",
]
