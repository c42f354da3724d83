"""User-facing notifications: a single-slot timed toast and blocking alerts.

Toasts are transient and non-blocking; only one is visible at a time and
a new one replaces the old, cancelling its pending dismissal. Alerts
block the caller until the user acknowledges them.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Callable, Protocol, runtime_checkable

# Seconds a toast stays on screen
TOAST_TIMEOUT = 3.0


@dataclass
class Toast:
    message: str
    timeout: float


@runtime_checkable
class Notifier(Protocol):
    """What the board controllers need from the surrounding UI."""

    def toast(self, message: str, timeout: float | None = None) -> None: ...

    async def alert(self, message: str) -> None: ...


class ToastSlot:
    """Owns the single visible toast and its dismissal timer handle."""

    def __init__(
        self,
        on_change: Callable[[Toast | None], None] | None = None,
        default_timeout: float = TOAST_TIMEOUT,
    ) -> None:
        self._on_change = on_change
        self.default_timeout = default_timeout
        self.current: Toast | None = None
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def show(self, message: str, timeout: float | None = None) -> Toast:
        """Replace whatever toast is showing and schedule this one's dismissal."""
        self._cancel_timer()
        toast = Toast(message=message, timeout=self.default_timeout if timeout is None else timeout)
        self.current = toast
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(toast.timeout, self._expire, toast)
        self._changed()
        return toast

    def dismiss(self) -> None:
        self._cancel_timer()
        if self.current is not None:
            self.current = None
            self._changed()

    def close(self) -> None:
        """Release the timer without firing change callbacks."""
        self._cancel_timer()
        self.current = None
        self._on_change = None

    def _expire(self, toast: Toast) -> None:
        # A stale handle must not clear a newer toast
        if self.current is not toast:
            return
        self._handle = None
        self.current = None
        self._changed()

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change(self.current)


class SlotNotifier:
    """Notifier that routes toasts to a ToastSlot and alerts to a callback."""

    def __init__(self, slot: ToastSlot, alert_handler: Callable[[str], object] | None = None) -> None:
        self.slot = slot
        self._alert_handler = alert_handler

    def toast(self, message: str, timeout: float | None = None) -> None:
        self.slot.show(message, timeout)

    async def alert(self, message: str) -> None:
        if self._alert_handler is None:
            return
        result = self._alert_handler(message)
        if asyncio.iscoroutine(result) or isinstance(result, asyncio.Future):
            await result


@dataclass
class RecordingNotifier:
    """Notifier double that records what would have been shown."""

    toasts: list[Toast] = field(default_factory=list)
    alerts: list[str] = field(default_factory=list)

    def toast(self, message: str, timeout: float | None = None) -> None:
        self.toasts.append(Toast(message=message, timeout=TOAST_TIMEOUT if timeout is None else timeout))

    async def alert(self, message: str) -> None:
        self.alerts.append(message)
