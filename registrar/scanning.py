r"""
Registrar argv scanning.

Overview
- OptionTable: the short/long lookup built from a set of descriptors.
  • shorts: opt character → whether the option takes an operand.
  • longs: alias → opt character.
- scan(argv, table): one left-to-right pass over argv[1:] that sorts every token
  into exactly one of three buckets:
  • occurrences: a registered option (with its operand, when it takes one).
  • unrecognized: option-looking tokens that no registered option claims.
  • anonymous: bare positional tokens not consumed as an operand.

Accepted spellings
    -c                flag, or value option whose operand is the next token
    -cVALUE           value option with an attached operand
    --alias           flag, or value option whose operand is the next token
    --alias=VALUE     value option with an inline operand
    --                end of options; everything after it is anonymous
    -                 a lone dash is a positional (conventionally stdin)

Rules
- The first token of argv is the program name and is never classified.
- Operand consumption wins: once a token is bound as an operand it is not
  looked at again, even if it starts with a dash.
- No clustering: for a flag “c”, “-cx” is unrecognized rather than “-c -x”.
- A flag alias given an inline value (“--verbose=1”) is unrecognized.
- An operand-taking option at the very end of argv is still an occurrence; its
  operand is None so the descriptor can report the missing operand.
"""
import logging
import os.path
import re
from typing import NamedTuple

logger = logging.getLogger(__name__)

_ALIAS = re.compile(r"[^\W_](-?[^\W_]+)*")


class Occurrence(NamedTuple):
    """
    One registered option found in argv.

    - opt: the short option character the token resolved to.
    - input: the option token as written (“-n”, “-n42”, “--count=3”, ...).
    - operand: the bound operand text, None for flags and missing operands.
    - index: position of the option token in argv.
    """
    opt: str
    input: str
    operand: str | None
    index: int


class Scan(NamedTuple):
    occurrences: tuple[Occurrence, ...]
    unrecognized: tuple[str, ...]
    anonymous: tuple[str, ...]

    def find(self, opt, /):
        """
        Return the first occurrence of `opt`, or None when it is absent.
        """
        for occurrence in self.occurrences:
            if occurrence.opt == opt:
                return occurrence
        return None


def valid_alias(alias, /):
    """
    Return True when `alias` is usable as a long option name (without dashes).
    """
    return isinstance(alias, str) and _ALIAS.fullmatch(alias) is not None


def prog(argv, /):
    """
    Program name (basename of argv[0]) for fault headers, or None when argv is empty.
    """
    try:
        return os.path.basename(argv[0]) or None
    except (IndexError, TypeError):
        return None


class OptionTable:
    """
    Immutable short/long option lookup.

    Tables are cheap to build but the registry still caches its own and only
    rebuilds it when the set of descriptors (or one of their aliases) changes.
    """
    __slots__ = ("_shorts", "_longs")

    def __init__(self, shorts=(), longs=(), /):
        self._shorts = dict(shorts)
        self._longs = dict(longs)

    @classmethod
    def of(cls, *descriptors):
        """
        Build a table from descriptors (anything exposing opt/alias/operand).

        Raises
        - ValueError: when two descriptors share an option character or an alias.
        """
        shorts = {}
        longs = {}
        for descriptor in descriptors:
            if descriptor.opt in shorts:
                raise ValueError("option '-%s' is already registered" % descriptor.opt)
            shorts[descriptor.opt] = descriptor.operand
            if descriptor.alias:
                if descriptor.alias in longs:
                    raise ValueError("option '--%s' is already registered" % descriptor.alias)
                longs[descriptor.alias] = descriptor.opt
        return cls(shorts, longs)

    @property
    def shorts(self):
        return dict(self._shorts)

    @property
    def longs(self):
        return dict(self._longs)

    def __contains__(self, opt, /):
        return opt in self._shorts

    def __len__(self):
        return len(self._shorts)

    def __repr__(self):
        return "OptionTable(shorts=%r, longs=%r)" % (self._shorts, self._longs)


def scan(argv, table, /):
    """
    Classify argv against an option table.

    Parameters
    - argv: sequence of str, argv[0] being the program name.
    - table: OptionTable.

    Returns
    - Scan(occurrences, unrecognized, anonymous), each in encounter order.
    """
    if not isinstance(table, OptionTable):
        raise TypeError("scan() second argument must be an option table")

    tokens = list(argv)
    occurrences = []
    unrecognized = []
    anonymous = []

    index = 1
    while index < len(tokens):
        token = tokens[index]
        if not isinstance(token, str):
            raise TypeError("argv must contain only strings")

        if token == "--":
            anonymous.extend(tokens[index + 1:])
            break

        if token.startswith("--"):
            name, equals, inline = token[2:].partition("=")
            try:
                opt = table._longs[name]
            except KeyError:
                unrecognized.append(token)
                index += 1
                continue
            if not table._shorts[opt]:
                if equals:
                    unrecognized.append(token)
                else:
                    occurrences.append(Occurrence(opt, token, None, index))
                index += 1
                continue
            if equals:
                occurrences.append(Occurrence(opt, token, inline, index))
                index += 1
                continue
            operand = tokens[index + 1] if index + 1 < len(tokens) else None
            occurrences.append(Occurrence(opt, token, operand, index))
            index += 2
            continue

        if token.startswith("-") and len(token) > 1:
            opt, rest = token[1], token[2:]
            if opt not in table._shorts:
                unrecognized.append(token)
                index += 1
                continue
            if not table._shorts[opt]:
                if rest:
                    unrecognized.append(token)
                else:
                    occurrences.append(Occurrence(opt, token, None, index))
                index += 1
                continue
            if rest:
                occurrences.append(Occurrence(opt, token, rest, index))
                index += 1
                continue
            operand = tokens[index + 1] if index + 1 < len(tokens) else None
            occurrences.append(Occurrence(opt, token, operand, index))
            index += 2
            continue

        anonymous.append(token)
        index += 1

    result = Scan(tuple(occurrences), tuple(unrecognized), tuple(anonymous))
    logger.debug(
        "scanned %d token(s): %d occurrence(s), %d unrecognized, %d anonymous",
        max(len(tokens) - 1, 0), len(result.occurrences), len(result.unrecognized), len(result.anonymous)
    )
    return result


__all__ = (
    "Occurrence",
    "Scan",
    "OptionTable",
    "scan",
    "valid_alias",
    "prog",
)
