r"""
Registrar option descriptors.

Overview
- Descriptors
  • Descriptor: abstract base carrying identity (short option character, optional long
    alias) and presentation metadata (description, usage hint).
  • Flag: presence-only switch, e.g. -v/--verbose. False unless present.
  • Value[_T]: single typed value read from an operand, e.g. -n 42, -n42, --count=42.
  • File[_T]: the operand names a file whose *contents* are read into the typed value.

- Chaining
  Every mutator returns the descriptor itself so declarations read top-down:
    >>> registry = Registry()
    >>> count = registry.value("n", int).alternate("count").default(1).description("Repetitions")

- Reading
  Each descriptor implements read(argv, sink, /, table=...) -> bool. It scans argv on its
  own (with the registry's option table when given one, so operands bound to other options
  are respected), converts what it finds and, on failure, writes its configured message to
  the sink, keeps the corresponding fault in `fault`, and returns False. A descriptor never
  raises for bad user input.

Value semantics
- Flag: absence is not an error; a flag never fails.
- Value: absence leaves the default untouched. A failed conversion leaves the stored
  value untouched as well (the reader output is only committed on success).
- File: absence is *not* a skip. The configured default path is opened and read, so a
  missing default file is itself a failure. Only when no path is known at all is the
  read a no-op.

Introspection & representation
- ArgumentType metaclass provides stable __repr__/__rich_repr__ and exposes the fields
  listed in __introspectable__ as read-only properties.

Public API
- Classes: Descriptor, Flag, Value, File
"""
import abc
import functools
import logging
import operator
import os
import re
import sys

from . import readers
from .faults import *
from .scanning import OptionTable, prog, scan, valid_alias
from .utils import *

logger = logging.getLogger(__name__)


class ArgumentType(abc.ABCMeta):
    """
    Metaclass that turns descriptor classes into introspectable specs.

    Responsibilities
    - Derive __typename__ from the class name (camel-case split with hyphens), used in
      messages and representations.
    - Expose selected fields as read-only properties using mirror() for all names listed
      in __introspectable__.
    - Provide stable, readable __repr__/__rich_repr__ implementations.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
            **options
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - value(opt='n', alias='count', hint='<arg>', descr='Repetitions', value=1)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
            yield "value", self.value
        self.__rich_repr__ = __rich_repr__

        return self


def _message(message, kind, /):
    if not isinstance(message, str):
        raise TypeError("%s message must be a string" % kind)
    return message


class Descriptor(metaclass=ArgumentType):
    """
    Abstract option descriptor.

    Identity
    - opt: one printable, non-space, non-dash character; the registry key.
    - alias: long option name without dashes, "" when none.

    Presentation
    - descr: free-text description (defaults to "???" until set).
    - hint: usage hint shown after the option names (defaults to "???" until set).

    Subclasses set `operand` (whether the option consumes an operand) and implement
    read(). Construction does not register anything; use the Registry factories (or
    Registry.register) to make a descriptor part of a parse.
    """

    __introspectable__ = (
        "opt",
        "alias",
        "hint",
        "descr",
    )

    operand = False

    def __init__(self, opt, /):
        if not isinstance(opt, str):
            raise TypeError("%s option must be a single character string" % type(self).__typename__)
        if len(opt) != 1 or opt == "-" or opt.isspace() or not opt.isprintable():
            raise ValueError("%s option must be a single printable character other than '-'" % type(self).__typename__)
        self._opt = opt
        self._alias = ""
        self._descr = "???"
        self._hint = "???"
        self._fault = None
        self._owners = []

    def description(self, text, /):
        if not isinstance(text, str):
            raise TypeError("%s description must be a string" % type(self).__typename__)
        self._descr = text
        return self

    def alternate(self, name, /):
        """
        Set (or clear, with "") the long alias, given without leading dashes.

        Raises ValueError when a registry holding this descriptor already has the alias.
        """
        if not isinstance(name, str):
            raise TypeError("%s alias must be a string" % type(self).__typename__)
        if name and not valid_alias(name):
            raise ValueError("%s alias %r is not a valid long option name" % (type(self).__typename__, name))
        for owner in self._owners:
            owner._claim(self, name)
        self._alias = name
        return self

    def usage(self, hint, /):
        if not isinstance(hint, str):
            raise TypeError("%s usage hint must be a string" % type(self).__typename__)
        self._hint = hint
        return self

    @property
    def fault(self):
        """
        The fault recorded by the last read(), or None if it succeeded.
        """
        return self._fault

    @property
    @abc.abstractmethod
    def value(self):
        raise NotImplementedError

    def width(self):
        """
        Width of the rendered usage line without indent and fill: "-c ", "--alias "
        (only when an alias is set) and "hint ".
        """
        width = 3
        if self._alias:
            width += 2 + len(self._alias) + 1
        width += len(self._hint) + 1
        return width

    @abc.abstractmethod
    def read(self, argv, sink=Unset, /, table=Unset):
        """
        Extract and convert this option from argv.

        Parameters
        - argv: sequence of str, argv[0] being the program name.
        - sink: object with write(str) receiving failure messages; defaults to
          sys.stderr, None silences it.
        - table: OptionTable to scan with; defaults to a table holding only this
          descriptor.

        Returns
        - True on success (including absence, where the variant allows it), False on
          failure. The failure is also available as `fault`.
        """
        raise NotImplementedError

    def _locate(self, argv, table):
        if table is Unset:
            table = OptionTable.of(self)
        return scan(argv, table).find(self._opt)

    def _fail(self, sink, fault):
        self._fault = fault
        sink = coalesce(sink, sys.stderr)
        if sink is not None:
            sink.write(fault.message)
        logger.debug("-%s failed: %s", self._opt, fault)
        return False

    def _missing(self, argv, occurrence, message):
        return MissingOperandFault(
            message,
            code=FaultCode.MISSING_OPERAND,
            title="missing operand",
            hint="pass a value after %s (for example: %s %s)" % (occurrence.input, occurrence.input, self._hint),
            descriptor=self,
            token=occurrence.input,
            prog=prog(argv),
        )


class Flag(Descriptor):
    """
    Presence-only switch. True iff -c (or --alias) appears in argv as an option token.
    """

    operand = False

    def __init__(self, opt, /):
        super().__init__(opt)
        self._value = False
        self.usage("")
        self.description("Flag Arg")

    @property
    def value(self):
        return self._value

    def __bool__(self):
        return self._value

    def read(self, argv, sink=Unset, /, table=Unset):
        self._fault = None
        if self._locate(argv, table) is not None:
            self._value = True
        return True


class Value[_T](Descriptor):
    """
    Single typed value read from an operand.

    Parameters
    - opt: short option character.
    - type: target type; selects the built-in reader (see registrar.readers) and the
      zero value used until a default is configured.
    - reader: explicit value-reader overriding the one derived from `type`.

    Messages
    - parse error: "Error (-c): Unable to parse input value!\\n"
    - missing operand: "Error (-c): Missing input value!\\n"
    """

    __introspectable__ = Descriptor.__introspectable__ + ("type",)

    operand = True

    def __init__(self, opt, type=str, /, reader=Unset):
        super().__init__(opt)
        self._type = type
        self._reader = readers.reader(coalesce(reader, type))
        self._value = readers.zero(type)
        self._parse = "Error (-%s): Unable to parse input value!\n" % opt
        self._missing_message = "Error (-%s): Missing input value!\n" % opt
        self.usage("<arg>")
        self.description("Value Arg")

    @property
    def value(self):
        return self._value

    def default(self, value, /):
        self._value = value
        return self

    def parse_error(self, message, /):
        self._parse = _message(message, "parse error")
        return self

    def missing_error(self, message, /):
        self._missing_message = _message(message, "missing operand")
        return self

    def read(self, argv, sink=Unset, /, table=Unset):
        self._fault = None
        if (occurrence := self._locate(argv, table)) is None:
            return True
        if occurrence.operand is None:
            return self._fail(sink, self._missing(argv, occurrence, self._missing_message))

        try:
            value = self._reader(occurrence.operand)
        except (ValueError, TypeError, ArithmeticError) as exception:
            return self._fail(sink, ParseFault(
                self._parse,
                code=FaultCode.PARSE_ERROR,
                title="unable to parse value",
                hint="%s expects %s but got %r (%s)" % (occurrence.input, self._hint or "a value", occurrence.operand, exception),
                descriptor=self,
                token=occurrence.operand,
                prog=prog(argv),
            ))

        self._value = value
        return True


class File[_T](Descriptor):
    """
    Typed value read from the contents of a file.

    The operand (or, when the option is absent, the configured default path) names the
    file. Its full contents, decoded as UTF-8, are handed to the reader.

    Failures are told apart:
    - the file cannot be opened or read → file error ("Unable to read input file!")
    - the contents cannot be converted → parse error ("Unable to read input value!")
    """

    __introspectable__ = Descriptor.__introspectable__ + ("type", "location")

    operand = True

    def __init__(self, opt, type=str, /, reader=Unset):
        super().__init__(opt)
        self._type = type
        self._reader = readers.reader(coalesce(reader, type))
        self._value = readers.zero(type)
        self._path = Unset
        self._location = None
        self._parse = "Error (-%s): Unable to read input value!\n" % opt
        self._file = "Error (-%s): Unable to read input file!\n" % opt
        self._missing_message = "Error (-%s): Missing input file!\n" % opt
        self.usage("<path>")
        self.description("File Arg")

    @property
    def value(self):
        return self._value

    def path(self, path, /):
        """
        Configure the default path, read whenever the option is absent from argv.
        """
        if not isinstance(path, str | os.PathLike):
            raise TypeError("%s path must be a string or a path-like object" % type(self).__typename__)
        self._path = path
        if self._location is None:
            self._location = path
        return self

    def default(self, value, /):
        self._value = value
        return self

    def parse_error(self, message, /):
        self._parse = _message(message, "parse error")
        return self

    def file_error(self, message, /):
        self._file = _message(message, "file error")
        return self

    def missing_error(self, message, /):
        self._missing_message = _message(message, "missing operand")
        return self

    def read(self, argv, sink=Unset, /, table=Unset):
        self._fault = None
        if (occurrence := self._locate(argv, table)) is not None:
            if occurrence.operand is None:
                return self._fail(sink, self._missing(argv, occurrence, self._missing_message))
            path = occurrence.operand
        elif self._path is not Unset:
            path = self._path
        else:
            return True

        self._location = path
        try:
            with open(path, encoding="utf-8") as file:
                contents = file.read()
        except UnicodeDecodeError as exception:
            return self._fail(sink, self._unparsable(argv, path, exception))
        except OSError as exception:
            return self._fail(sink, FileFault(
                self._file,
                code=FaultCode.FILE_ERROR,
                title="unable to read file",
                hint="check that %r exists and is readable (%s)" % (os.fspath(path), exception.strerror or exception),
                descriptor=self,
                path=path,
                prog=prog(argv),
            ))

        try:
            value = self._reader(contents)
        except (ValueError, TypeError, ArithmeticError) as exception:
            return self._fail(sink, self._unparsable(argv, path, exception))

        self._value = value
        return True

    def _unparsable(self, argv, path, exception):
        return ParseFault(
            self._parse,
            code=FaultCode.PARSE_ERROR,
            title="unable to parse file contents",
            hint="the contents of %r could not be read as a value (%s)" % (os.fspath(path), exception),
            descriptor=self,
            path=path,
            prog=prog(argv),
        )


__all__ = (
    "Descriptor",
    "Flag",
    "Value",
    "File",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del ArgumentType
