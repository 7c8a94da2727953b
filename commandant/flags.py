r"""
Commandant flag set: typed flag registry and argv parser.

What this module provides
- Cell: a mutable view over one attribute of one object (the flag's target).
- Flag: one registered flag (name, kind, target cell, default, usage).
- FlagSet: the registry. Flags are defined once, argv is parsed into their
  cells, and the leftover positionals are exposed as FlagSet.args.

Syntax (classic single-dash flags)
- -flag / --flag           bool flags only (sets true)
- -flag=value / --flag=value
- -flag value              non-bool flags only
- "--" terminates flag parsing; so does "-" or the first token that does not
  start with "-". Everything after that point is positional.
- -h / -help, when not defined by the caller, print the usage listing and raise
  HelpRequestedError.

Flag names are stored lowercased and looked up case-insensitively.

Quick example
    >>> from commandant.flags import Cell, FlagSet
    >>> from commandant.kinds import KINDS
    >>> flagset = FlagSet("tool")
    >>> flagset.define("verbose", KINDS[bool], Cell(options, "verbose"), False, "chatty output")
    >>> flagset.parse(["-verbose", "Build:Run"])
    >>> flagset.args
    ('Build:Run',)
"""
import difflib
import json
import logging
import os.path
import re
import sys
from collections import defaultdict, deque
from collections.abc import Iterable
from types import MappingProxyType

from rich.console import Console, Group
from rich.text import Text

from .faults import *
from .kinds import KINDS
from .utils import *

logger = logging.getLogger(__name__)

_TOKEN = re.compile(r"--?(?P<name>[^-=][^=]*)(=(?P<value>.*))?", re.DOTALL)


class Cell:
    """
    mutable view over `object.attribute`.

    the cell never owns the object; it reads and writes through getattr/setattr
    so record validation (frozen dataclasses, descriptors) still applies.
    """
    __slots__ = ("object", "attribute")

    def __init__(self, object, attribute, /):
        self.object = object
        self.attribute = attribute

    def get(self):
        return getattr(self.object, self.attribute)

    def set(self, value):
        setattr(self.object, self.attribute, value)

    def __repr__(self):
        return f"cell({type(self.object).__name__}.{self.attribute})"


class Flag:
    """
    one registered flag.

    `default` is the value the target held when the flag was defined; it is
    kept for the defaults listing and never written back.
    """
    __slots__ = ("name", "kind", "cell", "default", "usage")

    def __init__(self, name, kind, cell, default, usage=""):
        self.name = name
        self.kind = kind
        self.cell = cell
        self.default = default
        self.usage = usage

    @property
    def value(self):
        return self.cell.get()

    def set(self, text, /):
        """
        parse `text` with the flag's kind and store it in the target cell.

        raises ValueError (from the kind parser) when the text is not valid.
        """
        self.cell.set(self.kind.parse(text))

    def unquote_usage(self):
        """
        return (type label, usage) for the defaults listing.

        a back-quoted word in the usage becomes the type label and loses its
        quotes ("a `path` to load" → ("path", "a path to load")); otherwise
        the kind's own label is used.
        """
        usage = str(self.usage)
        if match := re.search(r"`([^`]*)`", usage):
            return match[1], usage[:match.start()] + match[1] + usage[match.end():]
        return self.kind.name, usage

    def __rich_repr__(self):
        yield "name", self.name
        yield "kind", self.kind
        yield "default", self.default
        yield "usage", self.usage

    def __repr__(self):
        return f"flag(name={self.name!r}, kind={self.kind!r}, default={self.default!r}, usage={self.usage!r})"


class FlagSet:
    """
    Typed flag registry and argv parser.

    Parameters
    - name: program name used by usage(); defaults to the basename of sys.argv[0].
    - console: rich Console receiving usage output; defaults to stderr.
    - colorful: when False, usage output carries no styles.

    Attributes
    - args: positionals left after parse() (tuple).
    - parsed: whether parse() has been called.
    - actual: read-only mapping of flags that were set on the command line.
    """

    def __init__(self, name=Unset, /, *, console=Unset, colorful=True):
        self.name = coalesce(name, os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "commandant")
        self.console = coalesce(console, Console(stderr=True))
        self.colorful = colorful
        self._formal = {}
        self._actual = {}
        self._args = ()
        self._parsed = False

    @property
    def args(self):
        return self._args

    @property
    def parsed(self):
        return self._parsed

    @property
    def actual(self):
        return MappingProxyType(self._actual)

    def __iter__(self):
        return iter(sorted(self._formal.values(), key=lambda flag: flag.name))

    def __len__(self):
        return len(self._formal)

    def __contains__(self, name):
        return isinstance(name, str) and name.lower() in self._formal

    def lookup(self, name, /):
        """
        return the Flag registered under `name` (case-insensitive) or None.
        """
        return self._formal.get(name.lower())

    def define(self, name, kind, cell, default, usage="", /):
        """
        register a flag and return it.

        raises DuplicatedFlagError when the (lowercased) name is already taken;
        flags are never replaced.
        """
        if not isinstance(name, str) or not name:
            raise TypeError("define() name must be a non-empty string")
        if (name := name.lower()) in self._formal:
            raise DuplicatedFlagError(
                "flag redefined: %s" % name,
                title="flag redefined",
                code=FaultCode.DUPLICATED_FLAG,
                hint="enable namespacing so each record prefixes its flags with its own name",
                name=name,
                docs=getdoc(FaultCode.DUPLICATED_FLAG),
            )
        self._formal[name] = flag = Flag(name, kind, cell, default, usage)
        logger.debug("defined flag -%s (%r, default %r)", name, kind, default)
        return flag

    def parse(self, arguments, /):
        """
        parse `arguments` (argv without the program name) into the defined flags.

        stops at the first positional, "-" or "--"; the rest is kept in self.args.
        raises MalformedFlagError, UnknownFlagError, MissingFlagValueError,
        InvalidFlagValueError or HelpRequestedError.
        """
        if isinstance(arguments, str) or not isinstance(arguments, Iterable):
            raise TypeError("parse() argument must be an iterable of strings")
        self._parsed = True
        tokens = deque(arguments)

        while tokens:
            token = tokens[0]
            if not isinstance(token, str):
                raise TypeError("parse() argument must be an iterable of strings")
            if len(token) < 2 or token[0] != "-":
                break
            tokens.popleft()
            if token == "--":
                break
            self._parse_one(token, tokens)

        self._args = tuple(tokens)

    def _parse_one(self, token, tokens):
        if not (match := _TOKEN.fullmatch(token)):
            raise MalformedFlagError(
                "bad flag syntax: %s" % token,
                title="malformed flag",
                code=FaultCode.MALFORMED_FLAG,
                hint="spell flags as -name or -name=value",
                token=token,
                docs=getdoc(FaultCode.MALFORMED_FLAG),
            )

        name = match["name"]
        value = match["value"]  # None if no '=...' was present

        if (flag := self.lookup(name)) is None:
            if name in ("h", "help"):
                self.usage()
                raise HelpRequestedError(
                    "help requested",
                    title="help requested",
                    code=FaultCode.HELP_REQUESTED,
                    docs=getdoc(FaultCode.HELP_REQUESTED),
                )
            suggestions = difflib.get_close_matches(name.lower(), self._formal.keys(), 5)
            try:
                hint = "did you mean -%s? run with -help to see all flags" % suggestions[0]
            except IndexError:
                hint = "run with -help to see all flags"
            raise UnknownFlagError(
                "flag provided but not defined: -%s" % name,
                title="unknown flag",
                code=FaultCode.UNKNOWN_FLAG,
                hint=hint,
                name=name,
                suggestions=suggestions,
                docs=getdoc(FaultCode.UNKNOWN_FLAG),
            )

        if flag.kind.boolean:
            try:
                flag.set("true" if value is None else value)
            except ValueError as error:
                raise InvalidFlagValueError(
                    "invalid boolean value %r for -%s: %s" % (value, flag.name, error),
                    title="invalid flag value",
                    code=FaultCode.INVALID_FLAG_VALUE,
                    hint="use -%s, -%s=true or -%s=false" % ((flag.name,) * 3),
                    flag=flag,
                    value=value,
                    docs=getdoc(FaultCode.INVALID_FLAG_VALUE),
                ) from None
        else:
            if value is None:
                if not tokens:
                    raise MissingFlagValueError(
                        "flag needs an argument: -%s" % flag.name,
                        title="missing flag value",
                        code=FaultCode.MISSING_FLAG_VALUE,
                        hint="pass a value as -%s=<%s>" % (flag.name, flag.kind.name or "value"),
                        flag=flag,
                        docs=getdoc(FaultCode.MISSING_FLAG_VALUE),
                    )
                value = tokens.popleft()
            try:
                flag.set(value)
            except ValueError as error:
                raise InvalidFlagValueError(
                    "invalid value %r for flag -%s: %s" % (value, flag.name, error),
                    title="invalid flag value",
                    code=FaultCode.INVALID_FLAG_VALUE,
                    hint="-%s expects a %s value" % (flag.name, flag.kind.name),
                    flag=flag,
                    value=value,
                    docs=getdoc(FaultCode.INVALID_FLAG_VALUE),
                ) from None

        self._actual[flag.name] = flag

    def _styles(self):
        """
        palette for usage output.

        Palette keys
        - usage-label, program-name, flag-name, metavar, flag-description,
          default-label, default-value
        - define a mapping named __styles__ in __main__ to override any entry.
        """
        styles = defaultdict(str, {
            "usage-label": "bold #00E6FF",  # CYAN → signature info color
            "program-name": "bold #FF4D94",  # MAGENTA-PINK → brand pop
            "flag-name": "bold #22C55E",  # GREEN for flags
            "metavar": "bold #FFD600",  # AMBER for value types
            "flag-description": "#9CA3AF",  # Muted gray
            "default-label": "#737373",  # Dim gray
            "default-value": "#36C5F0",  # SKY-BLUE
        } | getattr(__import__("__main__"), "__styles__", {}))

        def text(fragment, style):
            return Text(str(fragment), styles[style] if self.colorful else "")

        return text

    def _renders(self):
        """
        build the defaults listing, one entry per flag sorted by name.
        """
        text = self._styles()
        renders = []
        for flag in self:
            label, usage = flag.unquote_usage()
            line = Text.assemble("  ", text("-" + flag.name, "flag-name"))
            if label:
                line.append(" ")
                line.append_text(text(label, "metavar"))
            # single-letter flags without a label keep their usage on the same line
            if len(flag.name) == 1 and not label:
                line.append("\t")
            else:
                line.append("\n    \t")
            line.append_text(text(usage.replace("\n", "\n    \t"), "flag-description"))
            if flag.default is not None and flag.default != flag.kind.zero:
                try:
                    shown = flag.kind.format(flag.default)
                except (TypeError, ValueError, AttributeError):
                    shown = str(flag.default)
                if flag.kind is KINDS[str]:
                    shown = json.dumps(shown, ensure_ascii=False)
                line.append_text(Text.assemble(
                    text(" (default ", "default-label"),
                    text(shown, "default-value"),
                    text(")", "default-label"),
                ))
            renders.append(line)
        return renders

    def print_defaults(self):
        """
        print every flag with its type label, usage and non-zero default.
        """
        self.console.print(Group(*self._renders()), highlight=False)

    def usage(self):
        """
        print the usage header followed by the defaults listing.
        """
        text = self._styles()
        prog = getattr(__import__("__main__"), "__prog__", self.name)
        header = Text.assemble(text("Usage of ", "usage-label"), text(prog, "program-name"), ":")
        self.console.print(Group(header, *self._renders()), highlight=False)

    def __rich_repr__(self):
        yield "name", self.name
        yield "flags", list(self)
        yield "args", self._args

    def __repr__(self):
        return f"flagset(name={self.name!r}, flags={sorted(self._formal)!r}, args={self._args!r})"


__all__ = (
    "Cell",
    "Flag",
    "FlagSet",
)
