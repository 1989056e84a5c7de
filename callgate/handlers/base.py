"""
Base handler class and lifecycle hook names.

Handlers are the classes a Dispatcher instantiates and calls. Deriving from
Handler is optional: the dispatcher calls any hook a class exposes and
skips the ones it does not. Handler just supplies no-op defaults and a
place for the capture writer, error message and app config to land.
"""

from types import MappingProxyType
from typing import Any, Mapping, Optional, TextIO


# Hooks run around the requested method, in call order
BEFORE_METHOD = "before_method"
BEFORE_RENDER = "before_render"
RENDER = "render"
AFTER_RENDER = "after_render"
RENDER_ERROR = "render_error"
SET_VALUE = "set"
SET_APP_CONFIG = "set_app_config"

# Module-level hooks for function targets, registered on the HandlerRegistry
BEFORE_FUNCTION = "before_function"
AFTER_FUNCTION = "after_function"

FUNCTION_HOOKS = frozenset({BEFORE_FUNCTION, AFTER_FUNCTION, RENDER_ERROR})

# Hook names that are never routable as the requested method
LIFECYCLE_HOOKS = frozenset({
    BEFORE_METHOD,
    BEFORE_RENDER,
    RENDER,
    AFTER_RENDER,
    RENDER_ERROR,
    SET_VALUE,
    SET_APP_CONFIG,
})

# Name of the value injected before render when an error is pending
ERROR_MESSAGE_FIELD = "error_message"


class Handler:
    """
    Base class for dispatchable handlers.

    Subclasses add public methods to be routed to, and override whichever
    lifecycle hooks they need:

        class Greeter(Handler):
            def hello(self, name):
                self.out.write(f"Hi {name}")
                return 42

            def render(self, name):
                if self.error_message:
                    self.out.write(f" ({self.error_message})")

    Every hook receives the same positional parameters as the routed method,
    except render_error() which takes none.
    """

    out: Optional[TextIO] = None
    error_message: Optional[str] = None
    app_config: Mapping[str, Any] = MappingProxyType({})

    def set_app_config(self, config: Mapping[str, Any]) -> None:
        """Receive the application config right after construction."""
        self.app_config = config

    def set(self, name: str, value: Any) -> None:
        """Expose a named value (e.g. error_message) to the render phase."""
        setattr(self, name, value)

    def before_method(self, *params: Any) -> None:
        pass

    def before_render(self, *params: Any) -> None:
        pass

    def render(self, *params: Any) -> None:
        pass

    def after_render(self, *params: Any) -> None:
        pass

    def render_error(self) -> None:
        pass
