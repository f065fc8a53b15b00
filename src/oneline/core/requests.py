"""
Single-slot request handles.

At most one request of a kind is "current" at a time: one for timeline
generation and, independently, one for event details. Starting a new
request replaces the slot's ticket without cancelling the old call. When the
old call finishes later its result is simply not accepted, and readers only
ever see the value stored for the key they ask about. That is what keeps a
slow detail answer from showing up under a different event's title.

Example
-------
>>> slot: RequestSlot[str] = RequestSlot()
>>> first = slot.begin("event-0")
>>> second = slot.begin("event-1")
>>> slot.complete(first, "stale")
False
>>> slot.complete(second, "fresh")
True
>>> slot.value_for("event-0") is None
True
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ticket:
    """Identifies one started request: what it is for, and which attempt."""

    key: str
    seq: int


class RequestSlot(Generic[T]):
    """Holds the current ticket of one request kind plus its latest outcome."""

    __slots__ = ("_lock", "_seq", "_current", "_in_flight", "_value", "_value_key", "_error")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._seq = 0
        self._current: Ticket | None = None
        self._in_flight = False
        self._value: T | None = None
        self._value_key: str | None = None
        self._error: str | None = None

    # ------------------------------- Lifecycle ------------------------------

    def begin(self, key: str) -> Ticket:
        """Start a request for ``key``; any earlier ticket becomes stale."""
        with self._lock:
            self._seq += 1
            ticket = Ticket(key=key, seq=self._seq)
            self._current = ticket
            self._in_flight = True
            self._value = None
            self._value_key = None
            self._error = None
            return ticket

    def is_current(self, ticket: Ticket) -> bool:
        with self._lock:
            return self._current == ticket

    def complete(self, ticket: Ticket, value: T) -> bool:
        """Store ``value`` if ``ticket`` is still current; return whether it was."""
        with self._lock:
            if self._current != ticket:
                return False
            self._value = value
            self._value_key = ticket.key
            self._error = None
            self._in_flight = False
            return True

    def fail(self, ticket: Ticket, error: str) -> bool:
        """Record ``error`` if ``ticket`` is still current; return whether it was."""
        with self._lock:
            if self._current != ticket:
                return False
            self._value = None
            self._value_key = ticket.key
            self._error = error
            self._in_flight = False
            return True

    def reset(self) -> None:
        """Forget the current ticket and outcome; in-flight results are dropped."""
        with self._lock:
            self._seq += 1
            self._current = None
            self._in_flight = False
            self._value = None
            self._value_key = None
            self._error = None

    # ------------------------------- Readers --------------------------------

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def current_key(self) -> str | None:
        current = self._current
        return current.key if current else None

    @property
    def value(self) -> T | None:
        return self._value

    @property
    def error(self) -> str | None:
        return self._error

    def value_for(self, key: str | None) -> T | None:
        """Return the stored value only if it was produced for ``key``."""
        with self._lock:
            if key is None or self._value_key != key:
                return None
            return self._value

    def error_for(self, key: str | None) -> str | None:
        """Return the stored error only if it belongs to ``key``."""
        with self._lock:
            if key is None or self._value_key != key:
                return None
            return self._error


__all__ = ["RequestSlot", "Ticket"]
