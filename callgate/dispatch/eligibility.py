"""
Eligibility gate - decides whether a target may be invoked at all.

The (class, method) pair usually comes straight from request data, so the
gate fails closed: every check must pass before anything is instantiated,
and anything it cannot inspect cleanly counts as ineligible.

Checks for class-method targets, in order (first failure wins):
1. class is registered
2. method name is not reserved (dunder/mangled names, lifecycle hooks)
3. method exists on the class
4. class is instantiable (not abstract, not a Protocol)
5. class is user defined (not a built-in static type)
6. method is public
7. method is not abstract
8. method is not the constructor or destructor, even under another name

Members are looked up in the class MRO dicts directly, so probing never
runs descriptors or __getattr__ and never sees metaclass attributes.
"""

import inspect
from typing import Any, Callable, Optional, Union

from callgate.errors import PolicyViolation, ResolutionError
from callgate.handlers.base import LIFECYCLE_HOOKS
from callgate.handlers.registry import HandlerRegistry

# Py_TPFLAGS_HEAPTYPE: set for classes created by class statements
_HEAPTYPE_FLAG = 1 << 9

_MISSING = object()

FunctionRef = Union[str, Callable[..., Any]]


def _unwrap(member: Any) -> Any:
    if isinstance(member, (staticmethod, classmethod)):
        return member.__func__
    return member


def _static_member(cls: type, name: str) -> Any:
    # Class MRO only; metaclass attributes (type.mro, ABCMeta.register)
    # are not reachable from an instance
    for klass in cls.__mro__:
        if name in klass.__dict__:
            return _unwrap(klass.__dict__[name])
    return _MISSING


def _is_method(member: Any) -> bool:
    return member is not _MISSING and inspect.isroutine(member)


def _is_instantiable(cls: type) -> bool:
    if inspect.isabstract(cls):
        return False
    # typing.Protocol classes refuse instantiation
    return not getattr(cls, "_is_protocol", False)


def _is_user_defined(cls: type) -> bool:
    if cls.__module__ == "builtins":
        return False
    return bool(cls.__flags__ & _HEAPTYPE_FLAG)


def _lifecycle_role(cls: type, member: Any) -> Optional[str]:
    """Return "constructor" or "destructor" if member is one of them."""
    for name in ("__init__", "__new__"):
        if member is _static_member(cls, name):
            return "constructor"
    destructor = _static_member(cls, "__del__")
    if destructor is not _MISSING and member is destructor:
        return "destructor"
    return None


def check_class_method(
    registry: HandlerRegistry,
    type_name: str,
    method_name: str,
) -> type:
    """
    Run the gate for a class-method target.

    Args:
        registry: Registry the class name is resolved in
        type_name: Registered class name
        method_name: Method to call on a fresh instance

    Returns:
        The resolved handler class

    Raises:
        ResolutionError: Class or method does not exist
        PolicyViolation: Target exists but is not eligible
    """
    cls = registry.get_class(type_name)
    if cls is None:
        raise ResolutionError(f"Requested class does not exist: {type_name}")

    if "__" in method_name:
        raise PolicyViolation("Requested method must not be a magic method.")
    if method_name in LIFECYCLE_HOOKS:
        raise PolicyViolation("Requested method must not be a lifecycle hook.")

    try:
        member = _static_member(cls, method_name)
        if not _is_method(member):
            raise ResolutionError(f"Requested method does not exist: {method_name}")

        if not _is_instantiable(cls):
            raise PolicyViolation("Requested class must be instantiable.")
        if not _is_user_defined(cls):
            raise PolicyViolation("Requested class must be user defined.")
        if method_name.startswith("_"):
            raise PolicyViolation("Requested method must be public.")
        if getattr(member, "__isabstractmethod__", False):
            raise PolicyViolation("Requested method cannot be abstract.")

        role = _lifecycle_role(cls, member)
        if role is not None:
            raise PolicyViolation(f"Requested method cannot be a {role}.")
    except (ResolutionError, PolicyViolation):
        raise
    except Exception as e:
        raise PolicyViolation(
            f"Requested class could not be inspected: {type_name}.{method_name}"
        ) from e

    return cls


def function_name(ref: FunctionRef) -> str:
    """Readable name of a function reference."""
    if isinstance(ref, str):
        return ref
    return getattr(ref, "__qualname__", None) or repr(ref)


def resolve_function(registry: HandlerRegistry, ref: FunctionRef) -> Callable[..., Any]:
    """
    Resolve a function target.

    Args:
        registry: Registry string references are resolved in
        ref: Registered function name, or a callable used as-is

    Returns:
        The callable to invoke

    Raises:
        ResolutionError: Name not registered, or ref not callable
    """
    if isinstance(ref, str):
        fn = registry.get_function(ref)
    else:
        fn = ref
    if fn is None or not callable(fn):
        raise ResolutionError(f"The function, {function_name(ref)}, cannot be found.")
    return fn
