"""
Warden - Alert Queue
======================
Process-wide notification queue for the management console.

Only one alert is visible at a time. Alerts pushed while another one is
visible wait in a FIFO backlog; urgent alerts skip the backlog and replace
whatever is visible. Each visible alert is dismissed automatically after its
duration, or earlier when the user dismisses it (consume).

Timer staleness:
    Every time an alert is shown the queue bumps a sequence counter and the
    dismissal timer captures the new value. When the timer fires it only acts
    if the counter still has that value. An alert shown in the meantime (by
    urgent() or an early consume()) therefore disarms the older timer without
    an explicit cancel.

Usage:
    queue = AlertQueue(LoopScheduler())
    notifier = Notifier(queue)
    notifier.notify("instance.created", "success")
    notifier.urgent("server.unreachable", "danger")
    queue.subscribe(lambda alert: print(alert))
"""

import dataclasses
import logging
from collections import deque
from enum import Enum
from typing import Any, Callable

from client.clock import LoopScheduler

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    """Visual style of an alert (Bootstrap contextual colours)."""

    PRIMARY = "primary"
    SECONDARY = "secondary"
    SUCCESS = "success"
    DANGER = "danger"
    WARNING = "warning"
    INFO = "info"
    LIGHT = "light"
    DARK = "dark"


@dataclasses.dataclass(frozen=True)
class AlertMessage:
    """
    A single notification.

    Attributes:
        message:  Lang key or literal text.
        typ:      Severity of the alert.
        duration: Seconds the alert stays visible once shown.
        id:       Sequence id, assigned when the alert is shown.
    """

    message: str
    typ: Severity = Severity.INFO
    duration: float = 30
    id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "message": self.message,
            "typ": self.typ.value,
            "duration": self.duration,
        }


Observer = Callable[[AlertMessage | None], None]


class AlertQueue:
    """
    Single-slot alert display with a FIFO backlog.

    All methods are synchronous and must be called from the thread that
    owns the scheduler (the event loop thread for LoopScheduler).

    Attributes:
        scheduler:      Timer source with call_later(delay, callback).
        current:        The visible alert, or None.
        next_id:        Last sequence id handed out.
        accepting_next: True when push() may show an alert immediately.
    """

    def __init__(self, scheduler=None):
        self.scheduler = scheduler or LoopScheduler()
        self.current: AlertMessage | None = None
        self.next_id = 0
        self.accepting_next = True
        self._backlog: deque[AlertMessage] = deque()
        self._observers: list[Observer] = []

    # -- Public API ------------------------------------------------------------

    def push(self, msg: AlertMessage) -> None:
        """Show the alert now if the queue is idle, otherwise queue it."""
        if self.accepting_next:
            self._show(msg)
        else:
            self._backlog.append(msg)
            logger.debug("Alert queued (%d waiting): %s", len(self._backlog), msg.message)

    def urgent(self, msg: AlertMessage) -> None:
        """Show the alert now, replacing the visible one. The backlog is kept."""
        self._show(msg)

    def consume(self) -> None:
        """
        Dismiss the visible alert and advance to the next queued one.

        With an empty backlog the queue goes back to idle. Calling this on an
        idle queue is a no-op.
        """
        if self._backlog:
            msg = self._backlog.popleft()
            try:
                self._show(msg)
            except Exception:
                self._backlog.appendleft(msg)
                raise
            return

        self.accepting_next = True
        if self.current is not None:
            self.current = None
            self._emit()

    def subscribe(self, callback: Observer) -> Callable[[], None]:
        """
        Register an observer of the visible alert.

        The callback receives the new alert (or None when cleared) on every
        change. Returns a function that removes the observer.
        """
        self._observers.append(callback)

        def unsubscribe() -> None:
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    @property
    def backlog(self) -> list[AlertMessage]:
        """Copy of the queued alerts, head first."""
        return list(self._backlog)

    def snapshot(self) -> dict[str, Any]:
        return {
            "current": self.current.to_dict() if self.current else None,
            "backlog": len(self._backlog),
            "accepting_next": self.accepting_next,
        }

    # -- Internal helpers ------------------------------------------------------

    def _show(self, msg: AlertMessage) -> None:
        # Arm the timer first: if the scheduler raises, the queue is untouched
        alert_id = self.next_id + 1
        self.scheduler.call_later(msg.duration, lambda: self._expire(alert_id))

        self.next_id = alert_id
        self.accepting_next = False
        self.current = dataclasses.replace(msg, id=alert_id)
        self._emit()

    def _expire(self, alert_id: int) -> None:
        # A newer alert was shown after this timer was armed
        if alert_id != self.next_id:
            return
        self.accepting_next = True
        self.consume()

    def _emit(self) -> None:
        for callback in list(self._observers):
            callback(self.current)


class Notifier:
    """
    Convenience front end for an AlertQueue.

    Default durations (seconds) come from the "alerts" config section.
    """

    def __init__(
        self,
        queue: AlertQueue,
        duration: float = 30,
        fast_duration: float = 10,
        urgent_duration: float = 10,
    ):
        self.queue = queue
        self.duration = duration
        self.fast_duration = fast_duration
        self.urgent_duration = urgent_duration

    def notify(self, message: str, typ: Severity | str = Severity.INFO, duration: float | None = None) -> None:
        """Queue a regular alert."""
        self.queue.push(AlertMessage(message, Severity(typ), self.duration if duration is None else duration))

    def notify_fast(self, message: str, typ: Severity | str = Severity.INFO, duration: float | None = None) -> None:
        """Queue a short-lived alert."""
        self.queue.push(AlertMessage(message, Severity(typ), self.fast_duration if duration is None else duration))

    def urgent(self, message: str, typ: Severity | str = Severity.WARNING, duration: float | None = None) -> None:
        """Show an alert immediately, pre-empting the visible one."""
        self.queue.urgent(AlertMessage(message, Severity(typ), self.urgent_duration if duration is None else duration))

    def consume(self) -> None:
        """Dismiss the visible alert."""
        self.queue.consume()
