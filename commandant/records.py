"""
Commandant records: inspection and command descriptors.

A record is an instance of a dataclass. Registering one produces a Command that
carries everything later phases need, computed once:
- name: the record class name, case preserved (matched case-insensitively).
- instance: the caller's object, never copied and never owned.
- fields: one FieldSpec per dataclass field, in declaration order.
- behaviors: public zero-argument methods keyed by lowercase name, bound to
  the instance.

Field annotation contract
- dataclasses.field(metadata={"cmd": "..."}): "-" excludes the field from flag
  binding; any other string is the flag's help text; a missing key means "".
- fields whose name starts with "_" are private and never bound.
- annotations are evaluated one field at a time, and only for fields that
  are bound; an excluded field may name a type that exists for type checkers
  only.

Quick example
    >>> @dataclass
    ... class Deploy:
    ...     target: str = field(default="staging", metadata={"cmd": "environment to deploy"})
    ...     token: str = field(default="", metadata={"cmd": "-"})
    ...     def run(self): ...
    >>> command = new_command(Deploy())
    >>> command.name, list(command.behaviors)
    ('Deploy', ['run'])
"""
import dataclasses
import inspect
import logging
import sys
import typing
from inspect import Parameter
from types import FunctionType, MappingProxyType
from typing import NamedTuple

from . import kinds
from .faults import *

logger = logging.getLogger(__name__)

EXCLUDE = "-"
"""metadata value that keeps a field out of flag binding."""

METADATA_KEY = "cmd"
"""field metadata key holding the exclude marker or the help text."""


class FieldSpec(NamedTuple):
    """
    declarative description of one record field.

    kind is None when the annotation is outside the supported set or cannot
    be evaluated; binding reports it only if the field is otherwise eligible.
    annotations of private and excluded fields are never evaluated.
    """
    name: str
    kind: kinds.Kind | None
    annotation: typing.Any
    usage: str = ""

    @property
    def public(self):
        return not self.name.startswith("_")

    @property
    def excluded(self):
        return self.usage == EXCLUDE

    @property
    def resolved(self):
        """
        False when the annotation is still source text that could not be evaluated.
        """
        return not isinstance(self.annotation, str | typing.ForwardRef)

    @property
    def typename(self):
        if isinstance(self.annotation, typing.ForwardRef):
            return self.annotation.__forward_arg__
        if isinstance(self.annotation, str):
            return self.annotation
        return getattr(self.annotation, "__name__", None) or repr(self.annotation)


class Command:
    """
    Registered record: name, instance handle, field table and behavior table.

    Instances are built by new_command(); the tables are read-only and never
    change after construction.
    """
    __slots__ = ("_name", "_instance", "_fields", "_behaviors")

    def __init__(self, name, instance, fields, behaviors, /):
        self._name = name
        self._instance = instance
        self._fields = tuple(fields)
        self._behaviors = MappingProxyType(dict(behaviors))

    @property
    def name(self):
        return self._name

    @property
    def instance(self):
        return self._instance

    @property
    def fields(self):
        return self._fields

    @property
    def behaviors(self):
        return self._behaviors

    def matches(self, name, /):
        """
        case-insensitive comparison of `name` against this command's name.
        """
        return self._name.lower() == name.lower()

    def __rich_repr__(self):
        yield "name", self._name
        yield "fields", [field.name for field in self._fields]
        yield "behaviors", list(self._behaviors)

    def __repr__(self):
        return f"command(name={self._name!r}, fields={[field.name for field in self._fields]!r}, behaviors={list(self._behaviors)!r})"


def check_record(value, /):
    """
    ensure `value` is a record (a dataclass instance).

    raises NotARecordError naming the offending type otherwise; dataclass
    classes themselves are rejected too since they have no field values.
    """
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return
    if isinstance(value, type):
        typename = value.__name__
        hint = "pass an instance, e.g. %s(), not the class itself" % typename
    else:
        typename = type(value).__name__
        hint = "decorate the class with @dataclass and pass an instance of it"
    raise NotARecordError(
        "type %s is not a record" % typename,
        title="not a record",
        code=FaultCode.NOT_A_RECORD,
        hint=hint,
        value=value,
        docs=getdoc(FaultCode.NOT_A_RECORD),
    )


def _owner(cls, name):
    """
    the class in `cls.__mro__` that declares the annotation of field `name`.
    """
    for klass in cls.__mro__:
        if name in vars(klass).get("__annotations__", {}):
            return klass
    return cls


def _annotation(cls, field):
    """
    evaluate the annotation of one field, the way typing.get_type_hints does.

    string annotations are evaluated in the namespace of the declaring class
    and its module; Annotated metadata is kept. raises NameError (and the
    like) when the annotation names something that is not defined at runtime.
    """
    annotation = field.type
    if isinstance(annotation, typing.ForwardRef):
        annotation = annotation.__forward_arg__
    if not isinstance(annotation, str):
        return annotation
    owner = _owner(cls, field.name)
    module = sys.modules.get(owner.__module__)
    return eval(annotation, dict(vars(module)) if module else {}, dict(vars(owner)))


def _fields(instance):
    cls = type(instance)
    for field in dataclasses.fields(instance):
        spec = FieldSpec(field.name, None, field.type, field.metadata.get(METADATA_KEY, ""))
        # fields that are never bound keep their raw annotation
        if not spec.public or spec.excluded:
            yield spec
            continue
        try:
            annotation = _annotation(cls, field)
        except (NameError, AttributeError, TypeError, SyntaxError) as error:
            logger.debug("cannot resolve %s.%s: %s", cls.__name__, field.name, error)
            yield spec
            continue
        yield spec._replace(kind=kinds.resolve(annotation), annotation=annotation)


def _nullary(behavior):
    """
    whether `behavior` can be called without arguments.
    """
    try:
        signature = inspect.signature(behavior)
    except (TypeError, ValueError):
        return False
    return all(
        parameter.default is not Parameter.empty or parameter.kind in (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD)
        for parameter in signature.parameters.values()
    )


def _behaviors(instance):
    behaviors = {}
    for name, member in inspect.getmembers_static(type(instance)):
        if name.startswith("_") or not isinstance(member, FunctionType | staticmethod | classmethod):
            continue
        behavior = getattr(instance, name)
        if not _nullary(behavior):
            logger.debug("skipping %s.%s: it requires arguments", type(instance).__name__, name)
            continue
        if (key := name.lower()) in behaviors:
            trigger(AmbiguousBehaviorWarning(
                "behavior %r of %s is shadowed by %r" % (name, type(instance).__name__, behaviors[key].__name__),
                title="ambiguous behavior",
                code=FaultCode.AMBIGUOUS_BEHAVIOR,
                hint="rename one of them; behavior names are matched case-insensitively",
                docs=getdoc(FaultCode.AMBIGUOUS_BEHAVIOR),
                stacklevel=4,
            ))
            continue
        behaviors[key] = behavior
    return behaviors


def new_command(value, /):
    """
    build a Command from a record instance.

    raises NotARecordError (from check_record) unchanged; no other validation
    happens here, unsupported field types are reported at binding time.
    """
    check_record(value)
    command = Command(type(value).__name__, value, _fields(value), _behaviors(value))
    logger.debug("registered %r", command)
    return command


__all__ = (
    "EXCLUDE",
    "METADATA_KEY",
    "FieldSpec",
    "Command",
    "check_record",
    "new_command",
)
