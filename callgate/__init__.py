"""
callgate - Safe handler dispatch

Resolves a routing decision into a handler call, gates which handlers may
be called, runs the before/render/after lifecycle with output captured,
and reports everything as one InvocationResult.
"""

__version__ = "0.1.0"


__all__ = [
    "Dispatcher",
    "Handler",
    "HandlerRegistry",
    "InvocationResult",
    "SessionErrorChannel",
    "function",
    "handler",
]

from .dispatch import Dispatcher, InvocationResult
from .handlers import Handler, HandlerRegistry, function, handler
from .session import SessionErrorChannel
