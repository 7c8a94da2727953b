"""
Commandant orchestrator: records in, one behavior out.

commanderize() is the public entry point. Given binding options and any number
of record instances it:
1. builds a Command for each record, in order (CONSTRUCTING);
2. binds every command's fields into one FlagSet (BINDING);
3. parses the prompt into those flags (PARSING);
4. requires exactly one positional, the command token "Name:Method";
5. finds the named record (MATCHING) and calls the method (DISPATCHING).

The first fault in any phase aborts the run; it is surfaced through trigger()
with the failing phase attached as `phase`. Outside shell mode the fault is
raised; in shell mode it is rendered on stderr and the process exits.

Quick start
    from dataclasses import dataclass, field
    from commandant import commanderize

    @dataclass
    class Deploy:
        target: str = field(default="staging", metadata={"cmd": "environment to deploy"})
        dry: bool = field(default=False, metadata={"cmd": "print the plan only"})

        def run(self):
            print("deploying to", self.target, "(dry)" if self.dry else "")

    if __name__ == "__main__":
        commanderize(Deploy(), shell=True)   # prog -target=prod Deploy:Run
"""
import logging
import shlex
import sys
from collections.abc import Iterable
from enum import IntEnum

from .binding import DEFAULT, BindingOptions, bind_flags
from .dispatch import find_command, resolve, split_token
from .faults import *
from .flags import FlagSet
from .records import new_command
from .utils import *

logger = logging.getLogger(__name__)


class Phase(IntEnum):
    """
    orchestrator states, in the order a run walks through them.
    """
    IDLE = 0
    CONSTRUCTING = 1
    BINDING = 2
    PARSING = 3
    MATCHING = 4
    DISPATCHING = 5
    DONE = 6
    FAILED = 7


def _tokenize(prompt):
    """
    normalize a prompt into a list of argv tokens.

    - Unset: sys.argv[1:].
    - str: shell-like string, split via shlex.split.
    - Iterable[str]: used as given (items are not trimmed; empty strings are positionals).
    """
    if prompt is Unset:
        return sys.argv[1:]
    if isinstance(prompt, str):
        return shlex.split(prompt)
    if isinstance(prompt, Iterable):
        tokens = list(prompt)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("commanderize() prompt must be a string or an iterable of strings")
        return tokens
    raise TypeError("commanderize() prompt must be a string or an iterable of strings")


def commanderize(options=DEFAULT, /, *values, prompt=Unset, flagset=Unset, shell=False, fancy=False, colorful=True):
    """
    bind `values` to flags, parse the prompt and dispatch its command token.

    Parameters
    - options: BindingOptions (positional-only; DEFAULT when omitted). A record
      instance given first is treated as a value, so commanderize(record) works.
    - values: record instances, registered in the given order.
    - prompt: Unset (sys.argv[1:]), a shell-like string, or an iterable of tokens.
    - flagset: FlagSet to bind into; a fresh one is created when Unset.
    - shell/fancy/colorful: fault rendering (see commandant.faults).

    Returns None once the behavior returned (DONE).

    Raises (outside shell mode)
    - NotARecordError, UnsupportedFieldTypeError, UnsetFieldError, DuplicatedFlagError
    - flag set faults (MalformedFlagError, UnknownFlagError, MissingFlagValueError,
      InvalidFlagValueError, HelpRequestedError)
    - MissingCommandArgumentError (after printing the defaults listing),
      UnparsedArgumentsError, MalformedCommandTokenError
    - CommandNotFoundError, MethodNotFoundError
    Anything the behavior raises propagates unchanged.
    """
    if not isinstance(options, BindingOptions):
        options, values = DEFAULT, (options, *values)
    rendering = dict(shell=shell, fancy=fancy, colorful=colorful)
    flagset = FlagSet(colorful=colorful) if flagset is Unset else flagset
    if not isinstance(flagset, FlagSet):
        raise TypeError("commanderize() flagset must be a FlagSet")

    phase = Phase.IDLE

    def enter(next):
        logger.debug("%s -> %s", phase.name.lower(), next.name.lower())
        return next

    try:
        phase = enter(Phase.CONSTRUCTING)
        commands = [new_command(value) for value in values]

        phase = enter(Phase.BINDING)
        for command in commands:
            bind_flags(command, flagset, options)

        phase = enter(Phase.PARSING)
        flagset.parse(_tokenize(prompt))

        if not flagset.args:
            flagset.print_defaults()
            raise MissingCommandArgumentError(
                "usage: <record>:<method> (no command given)",
                title="missing command",
                code=FaultCode.MISSING_COMMAND_ARGUMENT,
                hint="append a command token such as %s" % (
                    "%s:<method>" % commands[0].name if commands else "<record>:<method>"
                ),
                docs=getdoc(FaultCode.MISSING_COMMAND_ARGUMENT),
            )
        if len(flagset.args) > 1:
            raise UnparsedArgumentsError(
                "unexpected arguments after %s: %s" % (flagset.args[0], " ".join(flagset.args[1:])),
                title="unparsed arguments",
                code=FaultCode.UNPARSED_ARGUMENTS,
                hint="flags must come before the command token; exactly one token is accepted",
                leftover=flagset.args[1:],
                docs=getdoc(FaultCode.UNPARSED_ARGUMENTS),
            )

        phase = enter(Phase.MATCHING)
        name, method = split_token(flagset.args[0])
        command = find_command(commands, name)

        phase = enter(Phase.DISPATCHING)
        behavior = resolve(command, method)
    except CommandException as fault:
        enter(Phase.FAILED)
        logger.debug("%s", fault)
        trigger(fault, phase=phase, prog=flagset.name, **rendering)
        return

    # faults raised by the behavior itself are not translated
    behavior()
    enter(Phase.DONE)


__all__ = (
    "Phase",
    "commanderize",
)
