from .models import COLUMN_ORDER, BackendStatus, BoardColumn, ColumnSummary, Priority, Story
from .notifications import Notifier, RecordingNotifier, SlotNotifier, Toast, ToastSlot
from .status_map import to_backend_status, to_board_column
from .store import BoardStateStore

__all__ = [
    "Story",
    "Priority",
    "BoardColumn",
    "BackendStatus",
    "ColumnSummary",
    "COLUMN_ORDER",
    "BoardStateStore",
    "to_board_column",
    "to_backend_status",
    "Notifier",
    "RecordingNotifier",
    "SlotNotifier",
    "Toast",
    "ToastSlot",
]
