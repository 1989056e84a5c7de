"""
Dispatcher - turns a routing decision into exactly one InvocationResult.

A Dispatcher is configured once per request with one target, the route
parameters, and optional collaborators, then invoked once:

    dispatcher = Dispatcher()
    dispatcher.set_route_class_method("Greeter", "hello")
    dispatcher.set_parameters(["World"])
    result = dispatcher.invoke()

invoke() picks the first configured branch:
1. class-method target -> eligibility gate -> class lifecycle
2. function target -> resolve -> function lifecycle
3. nothing configured -> "No target configured." error

invoke() does not raise for any Exception. Gate failures, missing targets and
handler faults all come back as a not-ok InvocationResult. KeyboardInterrupt
and SystemExit (e.g. a handler calling sys.exit()) propagate to the caller,
and the capture scope is still closed on the way out.
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from callgate.dispatch.eligibility import (
    FunctionRef,
    check_class_method,
    function_name,
    resolve_function,
)
from callgate.dispatch.lifecycle import LifecycleOutcome, LifecycleRunner
from callgate.dispatch.result import InvocationResult
from callgate.errors import CallgateError, ConfigurationError
from callgate.handlers.base import FUNCTION_HOOKS
from callgate.handlers.registry import HandlerRegistry, get_registry
from callgate.session import ErrorChannel

logger = logging.getLogger(__name__)

NO_TARGET_MESSAGE = "No target configured."


@dataclass(frozen=True)
class ClassMethodTarget:
    """A registered class name plus the method to call on a fresh instance."""
    type_name: str
    method_name: str

    def __str__(self) -> str:
        return f"{self.type_name}.{self.method_name}"


@dataclass(frozen=True)
class FunctionTarget:
    """A registered function name, or a callable used directly."""
    ref: FunctionRef

    def __str__(self) -> str:
        return function_name(self.ref)


class Dispatcher:
    """
    Calls the requested class method or function.

    Args:
        registry: Where class/function names are looked up (default registry if None)
        logger: Diagnostic sink for faults and rejections
        error_channel: Session error channel read before render
        app_config: Mapping passed to the handler's set_app_config()
    """

    def __init__(
        self,
        registry: Optional[HandlerRegistry] = None,
        logger: Optional[logging.Logger] = None,
        error_channel: Optional[ErrorChannel] = None,
        app_config: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._registry = registry
        self._logger = logger
        self._error_channel = error_channel
        self._app_config = app_config
        self._class_target: Optional[ClassMethodTarget] = None
        self._function_target: Optional[FunctionTarget] = None
        self._parameters: list[Any] = []

    def set_route_class_method(self, type_name: str, method_name: str) -> None:
        """Set the class and method to call."""
        self._class_target = ClassMethodTarget(type_name, method_name)

    def set_route_function(self, ref: FunctionRef) -> None:
        """Set the function (registered name or callable) to call."""
        self._function_target = FunctionTarget(ref)

    def set_parameters(self, parameters: Sequence[Any]) -> None:
        """Set the route parameters passed positionally to every call."""
        self._parameters = list(parameters)

    def set_logger(self, logger: logging.Logger) -> None:
        """Set the diagnostic sink."""
        self._logger = logger

    def set_error_channel(self, channel: ErrorChannel) -> None:
        """Set the session error channel."""
        self._error_channel = channel

    def set_app_config(self, config: Mapping[str, Any]) -> None:
        """Set the app config handed to handlers."""
        self._app_config = config

    @property
    def registry(self) -> HandlerRegistry:
        return self._registry if self._registry is not None else get_registry()

    @property
    def logger(self) -> logging.Logger:
        return self._logger if self._logger is not None else logger

    @property
    def parameters(self) -> list[Any]:
        return list(self._parameters)

    @property
    def target(self) -> "ClassMethodTarget | FunctionTarget | None":
        """The target invoke() would run, or None."""
        if (
            self._class_target is not None
            and self._class_target.type_name
            and self._class_target.method_name
        ):
            return self._class_target
        if self._function_target is not None and self._function_target.ref:
            return self._function_target
        return None

    def invoke(self) -> InvocationResult:
        """
        Run the configured target.

        Returns:
            InvocationResult for every Exception raised along the way

        Raises:
            BaseException: Only non-Exception signals such as SystemExit
                and KeyboardInterrupt, which are never swallowed
        """
        target = self.target
        try:
            outcome = self._dispatch(target)
        except CallgateError as e:
            self.logger.warning(
                "Rejected dispatch to %s: %s",
                target if target is not None else "<none>",
                e,
                extra={"event": "dispatch_rejected", "metadata": {"kind": e.kind}},
            )
            return InvocationResult(error_message=str(e), error_kind=e.kind)
        except Exception as e:
            self.logger.exception("Dispatch to %s failed unexpectedly", target)
            return InvocationResult(
                error_message=f"Dispatch failed: {type(e).__name__}: {e}",
                error_kind="runtime",
            )

        if outcome.fault is not None:
            return InvocationResult(
                output=outcome.output,
                value=outcome.value,
                error_message=str(outcome.fault),
                error_kind=outcome.fault.kind,
            )
        return InvocationResult(output=outcome.output, value=outcome.value)

    def _runner(self) -> LifecycleRunner:
        return LifecycleRunner(
            self._parameters,
            self.logger,
            error_channel=self._error_channel,
            app_config=self._app_config,
        )

    def _dispatch(self, target: "ClassMethodTarget | FunctionTarget | None") -> LifecycleOutcome:
        if isinstance(target, ClassMethodTarget):
            cls = check_class_method(self.registry, target.type_name, target.method_name)
            self.logger.debug("Dispatching %s", target)
            return self._runner().run_class_method(cls, target.method_name)

        if isinstance(target, FunctionTarget):
            registry = self.registry
            fn = resolve_function(registry, target.ref)
            hooks = {name: registry.get_hook(name) for name in FUNCTION_HOOKS}
            self.logger.debug("Dispatching function %s", target)
            return self._runner().run_function(str(target), fn, hooks)

        raise ConfigurationError(NO_TARGET_MESSAGE)
