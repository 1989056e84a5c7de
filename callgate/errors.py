"""
Error classes for callgate dispatch.

These error types classify why a dispatch did not run (or did not finish):
- ConfigurationError: no target was configured
- ResolutionError: the named class, method or function does not exist
- PolicyViolation: the target exists but is not eligible to be invoked
- HandlerFault: handler code raised while the lifecycle was running

The gate and the lifecycle raise these internally. The Dispatcher catches
them at its boundary and folds them into an InvocationResult.

Error handling contract:
- Dispatcher.invoke() never raises an Exception (SystemExit and
  KeyboardInterrupt still propagate)
- Errors are exceptions inside the core, values at its edge
- Each error carries the stable, human-readable message shown to callers
"""

from typing import Optional


class CallgateError(Exception):
    """Base exception for callgate."""

    #: Short classification stored on InvocationResult.error_kind
    kind = "error"


class ConfigurationError(CallgateError):
    """
    No usable target was configured on the Dispatcher.

    Nothing is invoked when this is raised.
    """

    kind = "configuration"


class ResolutionError(CallgateError):
    """
    The requested target does not exist.

    Examples:
    - Class name not registered
    - Method not defined on the class
    - Function name not registered
    """

    kind = "resolution"


class PolicyViolation(CallgateError):
    """
    The requested target exists but fails an eligibility rule.

    Examples:
    - Magic/reserved method name
    - Abstract or built-in class
    - Private, abstract, constructor or destructor method
    """

    kind = "policy"


class HandlerFault(CallgateError):
    """
    Handler code raised during the lifecycle.

    Wraps the original exception together with the phase it was raised in
    and the source location of the raising frame.
    """

    kind = "runtime"

    def __init__(
        self,
        phase: str,
        cause: BaseException,
        location: Optional[str] = None,
    ):
        self.phase = phase
        self.cause = cause
        self.location = location
        super().__init__(f"{type(cause).__name__} in {phase}: {cause}")


class ConfigError(CallgateError):
    """Configuration file validation error."""
    pass
