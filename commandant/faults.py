"""
Commandant faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue,
  grouped by domain so logs and searches stay predictable.
- CommandException / CommandWarning: base types that carry message + options and
  know how to render themselves in a friendly, lowercased, and actionable way.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

Integration
- Engine code raises faults with their code, title and hint already attached.
- The orchestrator catches them and calls trigger(fault, phase=..., shell=...):
  outside shell mode the fault is re-raised, in shell mode it is rendered via
  rich on stderr and the process exits.

Host hooks (read from __main__)
- __prog__: program name shown in headers.
- __styles__: palette overrides.
- __codes__: FaultCode → label remapping.
- __docs__: FaultCode → documentation string.
"""
import os.path
import sys
import warnings
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
    canonical fault codes used across the engine (stable identifiers).

    grouping (by high-level domain)
    - records (2110x)
      • NOT_A_RECORD
    - binding (2111x)
      • UNSUPPORTED_FIELD_TYPE, UNSET_FIELD
    - command token (2112x)
      • MISSING_COMMAND_ARGUMENT, MALFORMED_COMMAND_TOKEN, UNPARSED_ARGUMENTS
    - dispatch (2113x)
      • COMMAND_NOT_FOUND, METHOD_NOT_FOUND
    - flag set (2114x)
      • DUPLICATED_FLAG, MALFORMED_FLAG, UNKNOWN_FLAG, MISSING_FLAG_VALUE,
        INVALID_FLAG_VALUE, HELP_REQUESTED
    - warnings (2211x)
      • AMBIGUOUS_BEHAVIOR
    """
    # --- record errors (21xxx) ---
    NOT_A_RECORD                = 21101

    # --- binding errors (21xxx) ---
    UNSUPPORTED_FIELD_TYPE      = 21111
    UNSET_FIELD                 = 21112

    # --- command token errors (21xxx) ---
    MISSING_COMMAND_ARGUMENT    = 21121
    MALFORMED_COMMAND_TOKEN     = 21122
    UNPARSED_ARGUMENTS          = 21123

    # --- dispatch errors (21xxx) ---
    COMMAND_NOT_FOUND           = 21131
    METHOD_NOT_FOUND            = 21132

    # --- flag set errors (21xxx) ---
    DUPLICATED_FLAG             = 21141
    MALFORMED_FLAG              = 21142
    UNKNOWN_FLAG                = 21143
    MISSING_FLAG_VALUE          = 21144
    INVALID_FLAG_VALUE          = 21145
    HELP_REQUESTED              = 21146

    # --- warnings (22xxx) ---
    AMBIGUOUS_BEHAVIOR          = 22111

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class _Rendered:
    """
    rich rendering shared by errors and warnings.

    subclasses provide __palette__ (default styles) and __kind__ (the style-key
    prefix for title and message, "error" or "warning").
    """
    __palette__ = {}
    __kind__ = "error"

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", True)
        fancy = self.options.get("fancy", False)

        styles = defaultdict(str, self.__palette__ | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        prog = getattr(main, "__prog__", self.options.get("prog") or os.path.basename(sys.argv[0]))
        code = self.options.get("code")

        header = Text.assemble(
            "[ ",
            text(prog, styler("prog-name")),
            " — ",
            text(code.normalize() if code is not None else "?", styler("code")),
            " | ",
            text(str(self.options.get("title", type(self).__name__)).title(), styler(self.__kind__ + "-title")),
            " ]"
        )
        message = text(self.message, styler(self.__kind__ + "-message"))
        parts = [message]
        if hint := self.options.get("hint"):
            parts.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

        if fancy:
            return Panel(Group(*parts), title=header, title_align="left", width=console.width - 4)

        return Group(header, *parts)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class CommandException(_Rendered, Exception):
    __palette__ = {
        # header parts
        "prog-name": "bold #E6E6F0",  # near-white program name
        "code": "bold #00E5FF",  # neon cyan fault code
        "error-title": "bold #FF4DA6",  # friendly pinky title

        # body
        "error-message": "#C8C8D0",  # soft light gray message
        "hint-arrow": "#9CE19C dim",  # gentle green arrow
        "hint": "italic #9CE19C",  # gentle green hint text
    }
    __status__ = 1

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType(options)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(self.__status__)


class NotARecordError(CommandException): ...
class UnsupportedFieldTypeError(CommandException): ...
class UnsetFieldError(CommandException): ...
class MissingCommandArgumentError(CommandException): ...
class MalformedCommandTokenError(CommandException): ...
class UnparsedArgumentsError(CommandException): ...
class CommandNotFoundError(CommandException): ...
class MethodNotFoundError(CommandException): ...
class DuplicatedFlagError(CommandException): ...
class MalformedFlagError(CommandException): ...
class UnknownFlagError(CommandException): ...
class MissingFlagValueError(CommandException): ...
class InvalidFlagValueError(CommandException): ...


class HelpRequestedError(CommandException):
    """
    raised after the usage listing was printed for -h/-help.

    in shell mode nothing more is rendered and the process exits successfully.
    """
    __status__ = 0

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        sys.exit(self.__status__)


class CommandWarning(_Rendered, Warning):
    __palette__ = {
        # header parts
        "prog-name": "bold #E6E6F0",  # near-white program name
        "code": "bold #FFB400",  # amber fault code for warnings
        "warning-title": "bold #FFC2E0",  # softer pinky title for warnings

        # body
        "warning-message": "#D6D6DE",  # slightly lighter gray body
        "hint-arrow": "#B8EFAF dim",  # softer green arrow
        "hint": "italic #B8EFAF",  # softer green hint text
    }
    __kind__ = "warning"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType(options)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=self.options.get("stacklevel", 3))
        console.print(self)


class AmbiguousBehaviorWarning(CommandWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via rich console; otherwise, exceptions are
      raised and warnings go through the warnings module.

    typical options
    - shell, fancy, colorful, prog, phase, and any other context the reporter may
      want to show.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings. when
    not found, returns None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "CommandException",
    "NotARecordError",
    "UnsupportedFieldTypeError",
    "UnsetFieldError",
    "MissingCommandArgumentError",
    "MalformedCommandTokenError",
    "UnparsedArgumentsError",
    "CommandNotFoundError",
    "MethodNotFoundError",
    "DuplicatedFlagError",
    "MalformedFlagError",
    "UnknownFlagError",
    "MissingFlagValueError",
    "InvalidFlagValueError",
    "HelpRequestedError",
    "CommandWarning",
    "AmbiguousBehaviorWarning",
    "FaultCode",
    "trigger",
    "getdoc",
)
