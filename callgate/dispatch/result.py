"""
InvocationResult - the single value produced by every Dispatcher.invoke().

Holds three things:
- output: everything written to the capture scope during the lifecycle
- value: the handler's return value (opaque, never inspected)
- error_message: set exactly when eligibility failed or a fault occurred

Rule: ok() is True exactly when error_message is empty.
"""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class InvocationResult:
    """
    Outcome of one dispatch.

    Built once per invoke() call and never mutated afterwards; the caller
    owns it and decides how to render it.

    Attributes:
        output: Captured output text
        value: Return value of the requested method or function
        error_message: Human-readable failure reason, "" when ok
        error_kind: configuration, resolution, policy or runtime; None when ok
    """
    output: str = ""
    value: Any = None
    error_message: str = ""
    error_kind: Optional[str] = None

    def __post_init__(self):
        """Keep error_kind consistent with error_message."""
        if self.error_message == "" and self.error_kind is not None:
            raise ValueError("error_kind requires a non-empty error_message")

    def echo(self) -> str:
        """Get the captured output."""
        return self.output

    def return_value(self) -> Any:
        """Get the handler's return value."""
        return self.value

    def error(self) -> str:
        """Get the error message ("" when none)."""
        return self.error_message

    def ok(self) -> bool:
        """Did the dispatch complete without errors?"""
        return self.error_message == ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dict.

        Returns:
            Dict with ok, echo, return_value, and error/error_kind when set.
        """
        result: dict[str, Any] = {
            "ok": self.ok(),
            "echo": self.output,
            "return_value": self.value,
        }
        if not self.ok():
            result["error"] = self.error_message
            result["error_kind"] = self.error_kind
        return result
