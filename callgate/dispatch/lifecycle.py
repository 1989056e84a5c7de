"""
Lifecycle runner - calls a handler inside its hooks, capture scope and
fault boundary.

Class-method targets:
    construct -> set_app_config -> before_method -> <method> -> before_render
    -> inject error_message -> render -> after_render

Function targets:
    before_function -> <function> -> render_error(message) if an error is
    pending -> after_function

Every hook is optional and skipped when absent. Any exception raised after
the capture scope opens is turned into a HandlerFault, logged once to the
diagnostic sink, and followed by the render_error fallback. Faults never
leave the runner; they come back as part of the LifecycleOutcome.
"""

import logging
import traceback
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Sequence

from callgate.dispatch.capture import OutputCapture
from callgate.errors import HandlerFault
from callgate.handlers.base import (
    AFTER_FUNCTION,
    AFTER_RENDER,
    BEFORE_FUNCTION,
    BEFORE_METHOD,
    BEFORE_RENDER,
    ERROR_MESSAGE_FIELD,
    RENDER,
    RENDER_ERROR,
    SET_APP_CONFIG,
    SET_VALUE,
    Handler,
)
from callgate.session import ErrorChannel


@dataclass(frozen=True)
class LifecycleOutcome:
    """
    What one lifecycle run produced.

    Attributes:
        output: Captured output text
        value: Return value of the routed method/function (None if it never returned)
        fault: The fault that ended the run early, if any
    """
    output: str = ""
    value: Any = None
    fault: Optional[HandlerFault] = None

    @property
    def ok(self) -> bool:
        return self.fault is None


def _hook(target: Any, name: str) -> Optional[Callable[..., Any]]:
    fn = getattr(target, name, None)
    return fn if callable(fn) else None


def _location(exc: BaseException) -> Optional[str]:
    frames = traceback.extract_tb(exc.__traceback__)
    if not frames:
        return None
    frame = frames[-1]
    return f"{frame.filename}:{frame.lineno} in {frame.name}"


class LifecycleRunner:
    """
    Runs one handler invocation.

    Args:
        params: Positional arguments passed to the routed call and every hook
        logger: Diagnostic sink for faults
        error_channel: Session error channel to read/clear, if any
        app_config: Mapping handed to set_app_config()
    """

    def __init__(
        self,
        params: Sequence[Any],
        logger: logging.Logger,
        error_channel: Optional[ErrorChannel] = None,
        app_config: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.params = tuple(params)
        self.logger = logger
        self.error_channel = error_channel
        self.app_config = app_config if app_config is not None else {}

    def run_class_method(self, cls: type, method_name: str) -> LifecycleOutcome:
        """Instantiate cls and run the class-method lifecycle around method_name."""
        target = f"{cls.__name__}.{method_name}"
        instance = None
        value = None
        fault = None
        phase = "construct"

        with OutputCapture() as capture:
            try:
                instance = cls()
                if isinstance(instance, Handler):
                    instance.out = capture

                phase = SET_APP_CONFIG
                self._call_optional(instance, SET_APP_CONFIG, self.app_config)

                phase = BEFORE_METHOD
                self._call_optional(instance, BEFORE_METHOD, *self.params)

                phase = method_name
                value = getattr(instance, method_name)(*self.params)

                phase = BEFORE_RENDER
                self._call_optional(instance, BEFORE_RENDER, *self.params)

                phase = "inject_error"
                message = self._take_pending_error()
                if message is not None:
                    self._call_optional(instance, SET_VALUE, ERROR_MESSAGE_FIELD, message)

                phase = RENDER
                self._call_optional(instance, RENDER, *self.params)

                phase = AFTER_RENDER
                self._call_optional(instance, AFTER_RENDER, *self.params)
            except Exception as e:
                fault = self._record_fault(target, phase, e)
                self._fallback_class(target, instance, fault)

        return LifecycleOutcome(output=capture.getvalue(), value=value, fault=fault)

    def run_function(
        self,
        name: str,
        fn: Callable[..., Any],
        hooks: Mapping[str, Optional[Callable[..., Any]]],
    ) -> LifecycleOutcome:
        """Run the function lifecycle around fn using module-level hooks."""
        render_error = hooks.get(RENDER_ERROR)
        value = None
        fault = None
        phase = BEFORE_FUNCTION

        with OutputCapture() as capture:
            try:
                before = hooks.get(BEFORE_FUNCTION)
                if before is not None:
                    before(*self.params)

                phase = name
                value = fn(*self.params)

                phase = "inject_error"
                message = self._take_pending_error()
                if message is not None and render_error is not None:
                    render_error(message)

                phase = AFTER_FUNCTION
                after = hooks.get(AFTER_FUNCTION)
                if after is not None:
                    after(*self.params)
            except Exception as e:
                fault = self._record_fault(name, phase, e)
                self._fallback_function(name, render_error, fault)

        return LifecycleOutcome(output=capture.getvalue(), value=value, fault=fault)

    def _call_optional(self, instance: Any, name: str, *args: Any) -> None:
        fn = _hook(instance, name)
        if fn is not None:
            fn(*args)

    def _take_pending_error(self) -> Optional[str]:
        """Read the pending session error, clearing it and its backlog."""
        if self.error_channel is None:
            return None
        message = self.error_channel.peek()
        if not message:
            return None
        self.error_channel.clear()
        self.error_channel.clear_backlog()
        return message

    def _record_fault(self, target: str, phase: str, exc: Exception) -> HandlerFault:
        fault = HandlerFault(phase, exc, location=_location(exc))
        self.logger.error(
            "Handler %s raised %s during %s: %s (at %s)",
            target,
            type(exc).__name__,
            phase,
            exc,
            fault.location or "unknown location",
            exc_info=exc,
            extra={
                "stage": phase,
                "event": "handler_fault",
                "metadata": {"target": target, "location": fault.location},
            },
        )
        return fault

    def _fallback_class(self, target: str, instance: Any, fault: HandlerFault) -> None:
        message = self._take_pending_error() or str(fault)
        if instance is None:
            return
        try:
            self._call_optional(instance, SET_VALUE, ERROR_MESSAGE_FIELD, message)
            self._call_optional(instance, RENDER_ERROR)
        except Exception:
            self.logger.exception("render_error fallback failed for %s", target)

    def _fallback_function(
        self,
        name: str,
        render_error: Optional[Callable[..., Any]],
        fault: HandlerFault,
    ) -> None:
        message = self._take_pending_error() or str(fault)
        if render_error is None:
            return
        try:
            render_error(message)
        except Exception:
            self.logger.exception("render_error fallback failed for %s", name)
