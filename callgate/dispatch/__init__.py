"""
Dispatch module for callgate.

This module provides the invocation pipeline that:
1. Checks that the requested class method or function may be called
2. Runs it inside the before/render/after lifecycle with output captured
3. Returns one InvocationResult, never raising to the caller
"""

from callgate.dispatch.capture import OutputCapture
from callgate.dispatch.dispatcher import ClassMethodTarget, Dispatcher, FunctionTarget
from callgate.dispatch.result import InvocationResult

__all__ = [
    "ClassMethodTarget",
    "Dispatcher",
    "FunctionTarget",
    "InvocationResult",
    "OutputCapture",
]
