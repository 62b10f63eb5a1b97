"""
Registrar value-readers.

A value-reader turns raw text (an operand, or the full contents of a file) into a
typed value. The contract is deliberately tiny:

    reader(text) -> value        # raises ValueError, TypeError or ArithmeticError on bad input

Built-ins
- str      → the text unchanged
- int      → base-10 integer, surrounding whitespace ignored
- float    → float, surrounding whitespace ignored
- complex  → complex, surrounding whitespace ignored
- bool     → 1/0, true/false, yes/no, on/off (case-insensitive), whitespace ignored
- Path     → pathlib.Path over the stripped text (empty text is rejected)

Any other callable passed to reader() is returned untouched, so a class with a
string constructor (decimal.Decimal, uuid.UUID, ipaddress.ip_address, ...) works
as a reader out of the box (decimal.InvalidOperation is an ArithmeticError).

Notes
- Numeric readers strip whitespace because file contents usually end with a
  newline; operands themselves never carry it.
- zero(type) gives the “zero value” used as the initial value of a descriptor
  when no explicit default is configured.
"""
import builtins
from pathlib import Path

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off"})


def read_str(text, /):
    if not isinstance(text, str):
        raise TypeError("reader argument must be a string")
    return text


def read_int(text, /):
    return int(read_str(text).strip(), 10)


def read_float(text, /):
    return float(read_str(text).strip())


def read_complex(text, /):
    return complex(read_str(text).strip())


def read_bool(text, /):
    """
    Parse a boolean word.

    Accepted spellings are matched case-insensitively after trimming; anything
    else raises ValueError (so “maybe” is a parse error, not False).
    """
    if (word := read_str(text).strip().lower()) in _TRUTHY:
        return True
    if word in _FALSY:
        return False
    raise ValueError("invalid boolean literal: %r" % text)


def read_path(text, /):
    if not (text := read_str(text).strip()):
        raise ValueError("path cannot be empty")
    return Path(text)


_BUILTINS = {
    str: read_str,
    int: read_int,
    float: read_float,
    complex: read_complex,
    bool: read_bool,
    Path: read_path,
}


def reader(type, /):
    """
    Return the value-reader for the given type.

    Parameters
    - type: a built-in key (str, int, float, complex, bool, Path) or any callable.

    Raises
    - TypeError: when `type` is neither a known key nor callable.
    """
    try:
        return _BUILTINS[type]
    except (KeyError, TypeError):
        pass
    if not callable(type):
        raise TypeError("reader() argument must be a type or a callable")
    return type


def zero(type, /):
    """
    Best-effort zero value for a type: type() when it is a class that can be
    instantiated without arguments (0, "", 0.0, False, ...), None otherwise.
    Plain reader functions are never called.
    """
    if not isinstance(type, builtins.type) or type is Path:
        return None
    try:
        return type()
    except (TypeError, ValueError):
        return None


__all__ = (
    "reader",
    "zero",
    "read_str",
    "read_int",
    "read_float",
    "read_complex",
    "read_bool",
    "read_path",
)
