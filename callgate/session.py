"""
Session-scoped error channel.

The channel holds an error raised by an earlier request (e.g. a failed form
submit that redirected) so that the next dispatch can show it. The
dispatcher only reads and clears it; writing is the caller's business.
"""

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class ErrorChannel(Protocol):
    """Read/clear contract the dispatcher relies on."""

    def peek(self) -> Optional[str]:
        """Return the pending error message, or None."""
        ...

    def clear(self) -> None:
        """Drop the pending error message."""
        ...

    def clear_backlog(self) -> None:
        """Drop any older messages queued behind the pending one."""
        ...


class SessionErrorChannel:
    """
    In-memory ErrorChannel.

    The first pushed message is pending; later ones queue as backlog. When
    the pending slot has been cleared, the next peek() promotes the head of
    the backlog.
    """

    def __init__(self, message: Optional[str] = None) -> None:
        self._pending: Optional[str] = None
        self._backlog: list[str] = []
        if message:
            self.push(message)

    def push(self, message: str) -> None:
        """Record an error message for a later dispatch."""
        if not message:
            raise ValueError("Error message must not be empty")
        if self._pending is None and not self._backlog:
            self._pending = message
        else:
            self._backlog.append(message)

    def peek(self) -> Optional[str]:
        if self._pending is None and self._backlog:
            self._pending = self._backlog.pop(0)
        return self._pending

    def clear(self) -> None:
        self._pending = None

    def clear_backlog(self) -> None:
        self._backlog.clear()

    @property
    def backlog(self) -> list[str]:
        """Messages queued behind the pending one."""
        return list(self._backlog)

    def __repr__(self) -> str:
        return f"SessionErrorChannel(pending={self._pending!r}, backlog={len(self._backlog)})"
