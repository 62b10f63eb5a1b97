"""
Registrar registry: own descriptors, drive the read pass, render usage.

What this module provides
- Registry: an explicit (never implicit/global) collection of option descriptors keyed
  by their short option character, plus the accumulated results of read passes:
  • errors: descriptors whose read failed, in registration order per pass.
  • faults: fault objects for every recorded problem (unrecognized tokens first, then
    descriptor failures, per pass).
  • unrecognized_tokens: option-looking tokens no descriptor claimed.
  • anonymous: bare positional tokens not consumed as an operand.

Two phases
- registration: build descriptors through the factories (flag/value/file) or register
  ready-made ones. Duplicate short options or aliases are rejected with ValueError.
- parse: one read(argv) call. The registry classifies argv once with its cached option
  table, then lets every descriptor, in registration order, read its own value.

Caveat (accumulation)
- read() appends to the result sequences; it never clears them. Calling it twice on the
  same registry reports every problem twice. Build a fresh Registry per parse instead.

Quick start
    from registrar import Registry

    registry = Registry()
    verbose = registry.flag("v").alternate("verbose").description("Chatty output")
    count = registry.value("n", int).alternate("count").default(1).description("Repetitions")
    config = registry.file("c", str).path("settings.txt").description("Settings file")

    if not registry.read(sys.argv):
        print(registry.usage(), file=sys.stderr)
        sys.exit(1)
"""
import copy
import difflib
import logging
import threading
from collections import defaultdict

from rich.console import Console
from rich.table import Table
from rich.text import Text

from .arguments import Descriptor, Flag, Value, File
from .faults import *
from .scanning import OptionTable, prog, scan
from .utils import *

logger = logging.getLogger(__name__)


class Registry:
    """
    Explicit option registry.

    Parameters
    - fill: single character used to pad usage lines up to the description column.
    - colorful: style rich renderings (usage table, fault reports).
    - fancy: wrap fault reports in a panel.

    Thread-safety
    - registration and read() are serialized with a re-entrant lock, so a registry may
      be shared across threads; results are still cumulative (see module caveat).
    """

    errors = mirror("errors")
    faults = mirror("faults")
    unrecognized_tokens = mirror("unrecognized_tokens")
    anonymous = mirror("anonymous")

    def __init__(self, *, fill=".", colorful=True, fancy=False):
        if not isinstance(fill, str) or len(fill) != 1:
            raise TypeError("registry 'fill' must be a single character string")
        self._fill = fill
        self._colorful = bool(colorful)
        self._fancy = bool(fancy)

        self._descriptors = {}
        self._errors = []
        self._faults = []
        self._unrecognized_tokens = []
        self._anonymous = []

        self._table = None
        self._signature = None
        self._prog = Unset
        self._lock = threading.RLock()

    # --- registration ---

    def register(self, descriptor, /):
        """
        Add a descriptor to the registry and return it.

        Raises
        - TypeError: when `descriptor` is not a Descriptor.
        - ValueError: when its short option or alias is already taken.
        """
        if not isinstance(descriptor, Descriptor):
            raise TypeError("register() argument must be a descriptor")
        with self._lock:
            if descriptor.opt in self._descriptors:
                raise ValueError("option '-%s' is already registered" % descriptor.opt)
            self._claim(descriptor, descriptor.alias)
            self._descriptors[descriptor.opt] = descriptor
            descriptor._owners.append(self)
            self._table = None
        logger.debug("registered %r", descriptor)
        return descriptor

    def _claim(self, descriptor, alias, /):
        # also consulted by Descriptor.alternate() once the descriptor is registered
        with self._lock:
            for other in self._descriptors.values():
                if alias and other is not descriptor and other.alias == alias:
                    raise ValueError("option '--%s' is already registered" % alias)

    def flag(self, opt, /):
        return self.register(Flag(opt))

    def value(self, opt, type=str, /, reader=Unset):
        return self.register(Value(opt, type, reader=reader))

    def file(self, opt, type=str, /, reader=Unset):
        return self.register(File(opt, type, reader=reader))

    @property
    def table(self):
        """
        The option table for the registered descriptors.

        Cached; rebuilt only when a descriptor was registered or an alias changed since
        the last build.
        """
        with self._lock:
            signature = tuple((opt, descriptor.alias) for opt, descriptor in self._descriptors.items())
            if self._table is None or signature != self._signature:
                self._table = OptionTable.of(*self._descriptors.values())
                self._signature = signature
                logger.debug("rebuilt option table for %d option(s)", len(self._table))
            return self._table

    # --- parse ---

    def read(self, argv, sink=Unset, /):
        """
        Parse argv (argv[0] is the program name) against every registered descriptor.

        Steps
        - classify argv once: unrecognized and anonymous tokens are appended to their
          sequences (operands bound to a registered option are never classified);
        - call read() on every descriptor in registration order; failures are appended
          to `errors` and their faults to `faults`, and their messages were written to
          `sink` (defaults to sys.stderr, None silences it).

        The pass always completes; nothing is raised for bad user input.

        Returns
        - good(): True when no descriptor failed and no token was unrecognized, across
          every read so far.
        """
        argv = list(argv)
        with self._lock:
            table = self.table
            result = scan(argv, table)
            self._prog = argv[0] if argv else Unset

            for token in result.unrecognized:
                self._unrecognized_tokens.append(token)
                self._faults.append(self._unrecognized(token, argv))
            self._anonymous.extend(result.anonymous)

            for descriptor in self._descriptors.values():
                if not descriptor.read(argv, sink, table=table):
                    self._errors.append(descriptor)
                    self._faults.append(descriptor.fault)

            logger.info(
                "read %d token(s): %d error(s), %d unrecognized, %d anonymous",
                max(len(argv) - 1, 0), len(self._errors), len(self._unrecognized_tokens), len(self._anonymous)
            )
            return self.good()

    def _unrecognized(self, token, argv):
        name = token.partition("=")[0]
        known = ["-" + opt for opt in self._descriptors]
        known += ["--" + descriptor.alias for descriptor in self._descriptors.values() if descriptor.alias]
        suggestions = difflib.get_close_matches(name, known, 5)
        try:
            hint = "did you mean %r?" % suggestions[0]
        except IndexError:
            hint = "see the usage text for the available options"
        return UnrecognizedOptionFault(
            "unrecognized option %r" % token,
            code=FaultCode.UNRECOGNIZED_OPTION,
            title="unrecognized option",
            hint=hint,
            token=token,
            suggestions=tuple(suggestions),
            prog=prog(argv),
        )

    # --- state queries ---

    def error(self):
        return bool(self._errors)

    def unrecognized(self):
        return bool(self._unrecognized_tokens)

    def good(self):
        return not self.error() and not self.unrecognized()

    def fail(self):
        return not self.good()

    # --- rendering ---

    def usage(self, indent=2):
        """
        Render one aligned line per descriptor, in registration order.

        Line layout
            <indent>-c --alias hint <fill...>... description

        Every line starts with exactly `indent` spaces; the fill run pads each line to the
        widest descriptor so all descriptions start at the same column
        (indent + widest + 4). Lines are joined with newlines, without a trailing one.
        """
        if not isinstance(indent, int) or isinstance(indent, bool):
            raise TypeError("usage() indent must be an integer")
        if indent < 0:
            raise ValueError("usage() indent cannot be negative")

        with self._lock:
            descriptors = list(self._descriptors.values())

        widest = max((descriptor.width() for descriptor in descriptors), default=0)
        lines = []
        for descriptor in descriptors:
            line = " " * indent + "-" + descriptor.opt + " "
            if descriptor.alias:
                line += "--" + descriptor.alias + " "
            line += descriptor.hint + " "
            line += self._fill * (widest - descriptor.width())
            line += "... " + descriptor.descr
            lines.append(line)
        return "\n".join(lines)

    def __rich__(self):
        styles = defaultdict(str, {
            "option-name": "bold #00E6FF",  # CYAN for options
            "flag-name": "bold #22C55E",  # GREEN for flags
            "metavar": "bold #FFD600",  # AMBER for hints
            "argument-description": "#9CA3AF",  # Muted gray
        } | getattr(__import__("__main__"), "__styles__", {}))

        def styler(style):
            return styles[style] if self._colorful else ""

        grid = Table.grid(padding=(0, 2))
        grid.add_column(no_wrap=True)
        grid.add_column(no_wrap=True)
        grid.add_column()

        for descriptor in self:
            style = "flag-name" if isinstance(descriptor, Flag) else "option-name"
            names = Text("-" + descriptor.opt, styler(style))
            if descriptor.alias:
                names.append(", ").append("--" + descriptor.alias, styler(style))
            grid.add_row(
                names,
                Text(descriptor.hint, styler("metavar")),
                Text(descriptor.descr, styler("argument-description")),
            )
        return grid

    def report(self, console=Unset, /):
        """
        Print every recorded fault through rich (nothing when there are none).

        Returns the number of faults printed.
        """
        with self._lock:
            faults = list(self._faults)
        if not faults:
            return 0
        console = coalesce(console, Console(stderr=True))
        console.print(self._exit(faults))
        return len(faults)

    def verify(self):
        """
        Raise a ReadExit grouping every recorded fault, if any; return self otherwise.
        """
        with self._lock:
            faults = list(self._faults)
        if faults:
            trigger(self._exit(faults), shell=False)
        return self

    def _exit(self, faults):
        return ReadExit(
            [copy.replace(fault, colorful=self._colorful) for fault in faults],
            prog=prog([self._prog]) if self._prog else None,
            colorful=self._colorful,
            fancy=self._fancy,
        )

    # --- container protocol ---

    def __iter__(self):
        with self._lock:
            return iter(list(self._descriptors.values()))

    def __len__(self):
        return len(self._descriptors)

    def __contains__(self, item, /):
        if isinstance(item, Descriptor):
            return self._descriptors.get(item.opt) is item
        return item in self._descriptors

    def __getitem__(self, opt, /):
        try:
            return self._descriptors[opt]
        except (KeyError, TypeError):
            raise KeyError("option '-%s' is not registered" % (opt,)) from None

    def __repr__(self):
        return "registry(options=%r, errors=%d, unrecognized=%d, anonymous=%d)" % (
            "".join(self._descriptors), len(self._errors), len(self._unrecognized_tokens), len(self._anonymous)
        )


__all__ = (
    "Registry",
)
