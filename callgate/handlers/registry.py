"""
Handler Registry - the only place routing names become code.

Routing input is untrusted, so name lookups never reach into the module
namespace or sys.modules. Only classes and functions that were explicitly
registered (at startup, usually via the @handler / @function decorators
in modules listed under handler_modules) can be dispatched.

The registry holds three maps:
- classes: name -> handler class (class-method targets)
- functions: name -> callable (function targets)
- hooks: before_function / after_function / render_error for function targets
"""

import importlib
import inspect
import logging
from typing import Any, Callable, Iterable, Optional, TypeVar

from callgate.handlers.base import FUNCTION_HOOKS

logger = logging.getLogger(__name__)

T = TypeVar("T")


class HandlerRegistry:
    """
    Name-keyed registry of dispatchable classes and functions.

    Usage:
        registry = HandlerRegistry()
        registry.register_class("Greeter", Greeter)
        registry.register_function("ping", ping)
        registry.register_hook("render_error", show_error)

        registry.get_class("Greeter")   # Greeter
        registry.get_function("pong")   # None
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._classes: dict[str, type] = {}
        self._functions: dict[str, Callable[..., Any]] = {}
        self._hooks: dict[str, Callable[..., Any]] = {}

    def register_class(self, name: str, cls: type) -> None:
        """
        Register a handler class under a routing name.

        Args:
            name: Name the router will use (e.g. "Greeter")
            cls: The class to instantiate on dispatch

        Raises:
            TypeError: If cls is not a class
            ValueError: If name is empty
        """
        if not name:
            raise ValueError("Handler name must not be empty")
        if not inspect.isclass(cls):
            raise TypeError(f"Can only register classes as handlers, got {cls!r}")
        if name in self._classes and self._classes[name] is not cls:
            logger.warning("Replacing handler class %s: %r -> %r", name, self._classes[name], cls)
        self._classes[name] = cls

    def register_function(self, name: str, fn: Callable[..., Any]) -> None:
        """
        Register a free function under a routing name.

        Raises:
            TypeError: If fn is not callable
            ValueError: If name is empty
        """
        if not name:
            raise ValueError("Function name must not be empty")
        if not callable(fn):
            raise TypeError(f"Can only register callables as functions, got {fn!r}")
        self._functions[name] = fn

    def register_hook(self, name: str, fn: Callable[..., Any]) -> None:
        """
        Register a module-level hook for function targets.

        Args:
            name: One of before_function, after_function, render_error
            fn: The hook

        Raises:
            ValueError: If name is not a known function hook
        """
        if name not in FUNCTION_HOOKS:
            raise ValueError(
                f"Unknown function hook: {name}. "
                f"Expected one of: {sorted(FUNCTION_HOOKS)}"
            )
        if not callable(fn):
            raise TypeError(f"Hook {name} must be callable, got {fn!r}")
        self._hooks[name] = fn

    def get_class(self, name: str) -> Optional[type]:
        """Get a registered class, or None."""
        return self._classes.get(name)

    def get_function(self, name: str) -> Optional[Callable[..., Any]]:
        """Get a registered function, or None."""
        return self._functions.get(name)

    def get_hook(self, name: str) -> Optional[Callable[..., Any]]:
        """Get a registered function hook, or None."""
        return self._hooks.get(name)

    def list_classes(self) -> list[str]:
        """List registered class names."""
        return sorted(self._classes)

    def list_functions(self) -> list[str]:
        """List registered function names."""
        return sorted(self._functions)

    def load_modules(self, module_names: Iterable[str]) -> list[str]:
        """
        Import modules so their decorators register handlers.

        Args:
            module_names: Dotted module paths (from handler_modules config)

        Returns:
            Names of the modules that were imported

        Raises:
            ImportError: If a module cannot be imported
        """
        loaded = []
        for module_name in module_names:
            importlib.import_module(module_name)
            logger.debug("Loaded handler module %s", module_name)
            loaded.append(module_name)
        return loaded

    def clear(self) -> None:
        """Remove every registration (used by tests)."""
        self._classes.clear()
        self._functions.clear()
        self._hooks.clear()


# Process-wide registry used by the decorators and by default Dispatchers
_REGISTRY: Optional[HandlerRegistry] = None


def get_registry() -> HandlerRegistry:
    """Get the default registry, creating it if needed."""
    global _REGISTRY
    if _REGISTRY is None:
        _REGISTRY = HandlerRegistry()
    return _REGISTRY


def handler(name: Optional[str] = None) -> Callable[[T], T]:
    """
    Class decorator registering a handler in the default registry.

        @handler()
        class Greeter(Handler): ...

        @handler("greet")
        class Greeter(Handler): ...
    """
    def decorator(cls: T) -> T:
        get_registry().register_class(name or cls.__name__, cls)
        return cls
    return decorator


def function(name: Optional[str] = None) -> Callable[[T], T]:
    """
    Decorator registering a free function (or a function hook, when the
    name is one of before_function / after_function / render_error) in the
    default registry.
    """
    def decorator(fn: T) -> T:
        key = name or fn.__name__
        if key in FUNCTION_HOOKS:
            get_registry().register_hook(key, fn)
        else:
            get_registry().register_function(key, fn)
        return fn
    return decorator
