"""
Registrar utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the descriptor, scanning and registry layers.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", survives copying, non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/"".

- @rename("name")
  • Assign a stable __name__/__qualname__ to generated accessors for clean tracebacks.

- mirror("attr")
  • Read-only property over a private backing field (self._attr) that hands out immutable
    snapshots of containers, so registry state cannot be mutated from outside.

Quick examples
    >>> coalesce(Unset, sys.stderr) is sys.stderr
    True
    >>> coalesce(None, sys.stderr) is None   # a sink of None silences output
    True
"""
import functools
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Sentinel type for parameters where None is itself meaningful.

    A descriptor sink of None means “write nothing”, a File default path of None is a
    real (if useless) argument; Unset marks the parameter as simply not given.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __reduce__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Return `object`, or `default` when `object` is the Unset sentinel.

    Only the sentinel is replaced; None, 0 and "" pass through untouched.
    """
    return default if object is Unset else object


def rename(name, /):
    """
    Decorator setting __name__ and __qualname__ of the decorated callable to `name`.
    """
    if not isinstance(name, str):
        raise TypeError("@rename() argument must be a string")

    def decorator(callable):
        callable.__name__ = callable.__qualname__ = name
        return callable

    return decorator


def _freeze(object):
    # sequences become tuples, mappings read-only proxies over a copy, sets frozensets
    if isinstance(object, Sequence) and not isinstance(object, (str, bytes, bytearray)):
        return tuple(object)
    if isinstance(object, Mapping):
        return MappingProxyType(dict(object))
    if isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors a private backing attribute.

    The property reads "_{name}" from the instance and returns a frozen snapshot for
    container types, so callers may hold on to `registry.anonymous` while later reads
    keep appending to the registry's own list.

    Example
    - Given self._anonymous, declare anonymous = mirror("anonymous").
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


Unset = UnsetType()


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
