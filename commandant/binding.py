"""
Commandant binding: record fields → typed flags.

bind_flags() walks a Command's field table in declaration order and defines
one flag per eligible field in the given FlagSet:
- private fields (leading "_") and excluded fields (metadata "-") are skipped;
- the flag name is the lowercased field name, or "<record>.<field>" lowercased
  when BindingOptions.namespaced is set;
- the field's current value becomes the flag default, its metadata string the
  help text;
- the first field of an unsupported type raises UnsupportedFieldTypeError.
  Flags defined before it stay registered. A field with no value at all
  (init=False without a default) raises UnsetFieldError.
"""
import dataclasses
import logging

from .faults import *
from .flags import Cell

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class BindingOptions:
    """
    read-only binding configuration.

    namespaced: prefix every flag with its record name ("deploy.target") so
    same-named fields of different records do not collide.
    """
    namespaced: bool = False


DEFAULT = BindingOptions()


def flagname(command, field, options=DEFAULT, /):
    """
    the flag name a field of `command` is exposed under.
    """
    if options.namespaced:
        return (command.name + "." + field.name).lower()
    return field.name.lower()


def bind_flags(command, flagset, options=DEFAULT, /):
    """
    define one flag per eligible field of `command` in `flagset`.

    returns the defined flags, in field order.
    raises UnsupportedFieldTypeError on the first unsupported field,
    UnsetFieldError on a field that holds no value, and lets
    DuplicatedFlagError from the flag set propagate.
    """
    if not isinstance(options, BindingOptions):
        raise TypeError("bind_flags() options must be a BindingOptions")
    flags = []
    for field in command.fields:
        if not field.public or field.excluded:
            continue
        if field.kind is None:
            if field.resolved:
                hint = ("use bool, int, float, str, timedelta or a commandant.kinds width marker, "
                        "or exclude the field with metadata={'cmd': '-'}")
            else:
                hint = ("the annotation %r names something undefined at runtime; "
                        "import it outside TYPE_CHECKING or exclude the field" % field.typename)
            raise UnsupportedFieldTypeError(
                "unsupported type: %s of type %s cannot be parsed as flag" % (field.name, field.typename),
                title="unsupported field type",
                code=FaultCode.UNSUPPORTED_FIELD_TYPE,
                hint=hint,
                command=command,
                field=field,
                docs=getdoc(FaultCode.UNSUPPORTED_FIELD_TYPE),
            )
        try:
            default = getattr(command.instance, field.name)
        except AttributeError:
            raise UnsetFieldError(
                "field %s of %s has no value to use as default" % (field.name, command.name),
                title="unset field",
                code=FaultCode.UNSET_FIELD,
                hint="give the field a default, assign it in __post_init__, "
                     "or exclude it with metadata={'cmd': '-'}",
                command=command,
                field=field,
                docs=getdoc(FaultCode.UNSET_FIELD),
            ) from None
        flags.append(flagset.define(
            flagname(command, field, options),
            field.kind,
            Cell(command.instance, field.name),
            default,
            field.usage,
        ))
    logger.debug("bound %d flag(s) for %s", len(flags), command.name)
    return tuple(flags)


__all__ = (
    "BindingOptions",
    "DEFAULT",
    "flagname",
    "bind_flags",
)
