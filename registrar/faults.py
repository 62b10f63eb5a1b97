"""
Registrar faults (recorded parse problems) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every problem a read pass can
  record. Codes are grouped by domain to keep copy consistent and make logs/searches
  predictable.
- ArgumentFault: base type that carries message + options and knows how to render
  itself in a friendly, actionable way.
- ReadExit: groups every fault of a read pass into one reportable exception.
- trigger(): central entry point to surface a fault (raise it, or print it in shell mode).
- getdoc(): optional description lookup for a code from the host application.

Recording, not raising
- A read pass never raises for bad user input. Descriptors and the registry build
  fault objects and store them; the caller decides what to do with them afterwards
  (print them via Registry.report(), raise them via trigger() or Registry.verify(),
  or simply inspect them).

Integration
- Styles can be overridden with a __styles__ mapping in __main__.
- Codes can be relabelled with a __codes__ mapping in __main__.
- The program name shown in headers comes from __prog__ in __main__, else from the
  "prog" option attached by the registry (basename of argv[0]).
"""
import copy
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes recorded by a read pass (stable identifiers).

    grouping (by high-level domain)
    - descriptor values (2110x)
      • PARSE_ERROR, MISSING_OPERAND
    - files (2111x)
      • FILE_ERROR
    - tokens (2112x)
      • UNRECOGNIZED_OPTION
    """
    # --- descriptor value errors (211xx) ---
    PARSE_ERROR             = 21101
    MISSING_OPERAND         = 21102

    # --- file errors (211xx) ---
    FILE_ERROR              = 21111

    # --- token errors (211xx) ---
    UNRECOGNIZED_OPTION     = 21121

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _styles(defaults):
    return defaultdict(str, defaults | getattr(__import__("__main__"), "__styles__", {}))


def _prog(options):
    return getattr(__import__("__main__"), "__prog__", options.get("prog") or "registrar")


class ArgumentFault(Exception):
    """
    A recorded problem from a read pass.

    Attributes
    - message: the human-readable text written to the error sink.
    - options: read-only mapping of context. Common keys:
      code (FaultCode), title, hint, descriptor, token, path, prog,
      and rendering switches colorful (default True), fancy (default False),
      shell (default False).
    """

    def __init__(self, message=Unset, /, **options):
        assert message is Unset or isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message).strip() if self.message else ""

    @property
    def code(self):
        return self.options.get("code")

    @property
    def descriptor(self):
        return self.options.get("descriptor")

    def __rich__(self):
        styles = _styles({
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        })
        colorful = self.options.get("colorful", True)

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), styles[style])

        code = self.code.normalize() if isinstance(self.code, FaultCode) else "?"
        header = Text.assemble(
            "[ ",
            text(_prog(self.options), "prog-name"),
            " — ",
            text(code, "code"),
            " | ",
            text(str(self.options.get("title", type(self).__name__)).title(), "error-title"),
            " ]"
        )
        message = text(str(self), "error-message")
        parts = [message]
        if hint := self.options.get("hint"):
            parts.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

        if self.options.get("fancy", False):
            return Panel(Group(*parts), title=header, title_align="left")
        return Group(header, *parts)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ParseFault(ArgumentFault): ...
class MissingOperandFault(ArgumentFault): ...
class FileFault(ArgumentFault): ...
class UnrecognizedOptionFault(ArgumentFault): ...


class ReadExit(ExceptionGroup):
    def __new__(cls, exceptions, **options):
        return super().__new__(cls, "bad read", tuple(exceptions))

    def __init__(self, exceptions, **options):
        super().__init__("bad read", self.exceptions)
        self.options = MappingProxyType(options)

    def __rich__(self):
        styles = _styles({
            "prog-name": "bold #E6E6F0",  # near-white program name
            "title": "bold #FF4DA6",  # friendly pinky group title
        })
        colorful = self.options.get("colorful", True)

        prog = Text(_prog(self.options), styles["prog-name"] if colorful else "")
        header = Text.assemble("[ ", prog, " — ", Text(self.message.title(), styles["title"] if colorful else ""), " ]")
        renders = [copy.replace(exception, colorful=colorful, fancy=False) for exception in self.exceptions]

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")
        return Group(header, *renders)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        if not self.options.get("soft", False):
            sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.exceptions, **{**self.options, **overrides})


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via the rich console; otherwise the fault is raised.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "ArgumentFault",
    "ParseFault",
    "MissingOperandFault",
    "FileFault",
    "UnrecognizedOptionFault",
    "ReadExit",
    "trigger",
    "getdoc",
)
