"""
Handlers module for callgate.

Handlers are the classes and functions a Dispatcher is allowed to call.
Only what is registered here is reachable from routing input.

Usage:
    from callgate.handlers import Handler, handler

    @handler()
    class Greeter(Handler):
        def hello(self, name):
            print(f"Hi {name}")
"""

from callgate.handlers.base import Handler
from callgate.handlers.registry import HandlerRegistry, function, get_registry, handler

__all__ = [
    "Handler",
    "HandlerRegistry",
    "function",
    "get_registry",
    "handler",
]
