"""
Commandant dispatch: command token → behavior.

- split_token("Deploy:Run") → ("Deploy", "Run"); anything not shaped like
  <name>:<method> (both parts non-empty, a single colon) is malformed.
- find_command(commands, name) scans every registered command and returns
  the first whose name matches case-insensitively.
- resolve(command, method) returns the bound zero-argument behavior;
  execute(command, method) resolves and calls it. Exceptions raised by the
  behavior itself are never caught here.
"""
import difflib
import logging
import re

from .faults import *

logger = logging.getLogger(__name__)

_TOKEN = re.compile(r"(?P<name>[^:]+):(?P<method>[^:]+)")


def split_token(token, /):
    """
    split a command token into (name, method).
    """
    if not isinstance(token, str) or not (match := _TOKEN.fullmatch(token)):
        raise MalformedCommandTokenError(
            "usage: <record>:<method> (got: %s)" % token,
            title="malformed command",
            code=FaultCode.MALFORMED_COMMAND_TOKEN,
            hint="name the record and the method separated by a colon, e.g. Deploy:Run",
            token=token,
            docs=getdoc(FaultCode.MALFORMED_COMMAND_TOKEN),
        )
    return match["name"], match["method"]


def find_command(commands, name, /):
    """
    return the first command whose name matches `name` (case-insensitive).

    every command is considered before giving up with CommandNotFoundError.
    """
    for command in commands:
        if command.matches(name):
            return command
    names = [command.name for command in commands]
    suggestions = difflib.get_close_matches(name, names, 5)
    try:
        hint = "did you mean %r? registered records are: %s" % (suggestions[0], ", ".join(names))
    except IndexError:
        hint = "registered records are: %s" % (", ".join(names) or "(none)")
    raise CommandNotFoundError(
        "command <%s> not found" % name,
        title="unknown command",
        code=FaultCode.COMMAND_NOT_FOUND,
        hint=hint,
        name=name,
        suggestions=suggestions,
        docs=getdoc(FaultCode.COMMAND_NOT_FOUND),
    )


def resolve(command, method, /):
    """
    return the behavior of `command` named `method` (case-insensitive).
    """
    try:
        return command.behaviors[method.lower()]
    except KeyError:
        suggestions = difflib.get_close_matches(method.lower(), command.behaviors.keys(), 5)
        try:
            hint = "did you mean %s:%s?" % (command.name, suggestions[0])
        except IndexError:
            hint = "%s provides: %s" % (command.name, ", ".join(command.behaviors) or "(no behaviors)")
        raise MethodNotFoundError(
            "method <%s> not found" % method,
            title="unknown method",
            code=FaultCode.METHOD_NOT_FOUND,
            hint=hint,
            command=command,
            method=method,
            suggestions=suggestions,
            docs=getdoc(FaultCode.METHOD_NOT_FOUND),
        ) from None


def execute(command, method, /):
    """
    call the behavior of `command` named `method`; its return value is discarded.
    """
    behavior = resolve(command, method)
    logger.debug("executing %s:%s", command.name, behavior.__name__)
    behavior()


__all__ = (
    "split_token",
    "find_command",
    "resolve",
    "execute",
)
