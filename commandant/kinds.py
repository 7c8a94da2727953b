r"""
Primitive kinds a record field may carry as a flag.

Overview
- Width markers
  • int32, int64, uint32, uint64, float64: typing.NewType markers used as field
    annotations. Plain int maps to int64 and plain float to float64.
- Kind
  • One supported field type: display name (used by the defaults listing),
    text parser, text formatter and zero value.
- resolve(annotation)
  • Map a (possibly Annotated) field annotation to its Kind, or None when the
    type is outside the supported set.

Parsing semantics (classic flag package)
- bool: 1, t, T, TRUE, true, True, 0, f, F, FALSE, false, False.
- integers: base prefixes 0x/0o/0b, a leading 0 means octal, underscores are
  allowed between digits; values are range-checked against the kind's width.
  Only ASCII digits are accepted, here and in floats and durations.
  Unsigned kinds reject any sign.
- float64: Python float syntax; finite literals that overflow are rejected.
- str: verbatim.
- duration: signed sequence of <decimal><unit> with units ns, us (µs), ms, s,
  m, h, e.g. "300ms", "-1.5h" or "2h45m"; a bare "0" is accepted.

Every parser raises ValueError with a short reason ("invalid syntax",
"value out of range") that the flag set embeds in its own fault.
"""
import datetime
import math
import re
from decimal import Decimal
from types import MappingProxyType
from typing import Annotated, NewType, final, get_args, get_origin

from .utils import rename

int32 = NewType("int32", int)
int64 = NewType("int64", int)
uint32 = NewType("uint32", int)
uint64 = NewType("uint64", int)
float64 = NewType("float64", float)

_NANOSECONDS = MappingProxyType({
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,  # U+00B5 micro sign
    "μs": 1_000,  # U+03BC greek mu
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
})

# Longer units first so "ms" is never read as "m" followed by garbage.
_SEGMENT = re.compile(r"([0-9]+\.?[0-9]*|\.[0-9]+)(ns|us|µs|μs|ms|s|m|h)")
_OCTAL = re.compile(r"[+-]?0[0-7_]+")
_INT64_MAX = (1 << 63) - 1


@final
class Kind:
    """
    A supported flag value type.

    Attributes
    - name: type label shown in the defaults listing ("" for bool, which takes no value).
    - parse: str -> value, raises ValueError on bad input.
    - format: value -> str, used to display defaults.
    - zero: the zero value; defaults equal to it are not displayed.
    - boolean: True only for bool, whose flag may be given without a value.
    """
    __slots__ = ("name", "parse", "format", "zero", "boolean")

    def __init__(self, name, parse, format, zero, *, boolean=False):
        self.name = name
        self.parse = parse
        self.format = format
        self.zero = zero
        self.boolean = boolean

    def __repr__(self):
        return f"kind({self.parse.__name__.removeprefix('parse_')!r})"


def parse_bool(text, /):
    if text in ("1", "t", "T", "TRUE", "true", "True"):
        return True
    if text in ("0", "f", "F", "FALSE", "false", "False"):
        return False
    raise ValueError("invalid syntax")


def _integer(name, bits, signed):
    """
    build a range-checked integer parser for the given width and signedness.
    """
    if signed:
        low, high = -(1 << bits - 1), (1 << bits - 1) - 1
    else:
        low, high = 0, (1 << bits) - 1

    @rename("parse_" + name)
    def parse(text, /):
        if not text or text != text.strip() or not text.isascii():
            raise ValueError("invalid syntax")
        if not signed and text[0] in "+-":
            raise ValueError("invalid syntax")
        try:
            if _OCTAL.fullmatch(text):
                value = int(text.replace("_", ""), 8)
            else:
                value = int(text, 0)
        except ValueError:
            raise ValueError("invalid syntax") from None
        if not low <= value <= high:
            raise ValueError("value out of range")
        return value

    return parse


def parse_float64(text, /):
    if not text or text != text.strip() or not text.isascii():
        raise ValueError("invalid syntax")
    try:
        value = float(text)
    except ValueError:
        raise ValueError("invalid syntax") from None
    if math.isinf(value) and "inf" not in text.lower():
        raise ValueError("value out of range")
    return value


def parse_str(text, /):
    return text


def parse_duration(text, /):
    """
    parse a duration string such as "300ms", "-1.5h" or "2h45m".

    the result is a datetime.timedelta; sub-microsecond remainders are truncated.
    magnitudes beyond the signed 64-bit nanosecond range are rejected.
    """
    body = text
    negative = False
    if body[:1] in ("+", "-"):
        negative = body[0] == "-"
        body = body[1:]
    if body == "0":
        return datetime.timedelta(0)
    if not body:
        raise ValueError("invalid duration %r" % text)

    total = Decimal(0)
    position = 0
    while position < len(body):
        if not (match := _SEGMENT.match(body, position)):
            if re.match(r"[0-9]+\.?[0-9]*|\.[0-9]+", body[position:]):
                raise ValueError("missing unit in duration %r" % text)
            raise ValueError("invalid duration %r" % text)
        number, unit = match.groups()
        total += Decimal(number) * _NANOSECONDS[unit]
        position = match.end()

    nanoseconds = int(total)
    if nanoseconds > _INT64_MAX + negative:
        raise ValueError("invalid duration %r" % text)
    microseconds = nanoseconds // 1000
    return datetime.timedelta(microseconds=-microseconds if negative else microseconds)


def _fraction(value, size):
    quotient, remainder = divmod(value, size)
    if not remainder:
        return str(quotient)
    digits = len(str(size)) - 1
    return "%d.%s" % (quotient, str(remainder).rjust(digits, "0").rstrip("0"))


def format_duration(value, /):
    """
    render a timedelta the way duration flags print their defaults ("1h30m0s", "1.5s", "300ms").
    """
    nanoseconds = ((value.days * 86400 + value.seconds) * 1_000_000 + value.microseconds) * 1000
    sign = "-" if nanoseconds < 0 else ""
    nanoseconds = abs(nanoseconds)
    if not nanoseconds:
        return "0s"
    if nanoseconds < 1_000_000_000:
        if nanoseconds < 1_000:
            return sign + _fraction(nanoseconds, 1) + "ns"
        if nanoseconds < 1_000_000:
            return sign + _fraction(nanoseconds, 1_000) + "µs"
        return sign + _fraction(nanoseconds, 1_000_000) + "ms"
    hours, rest = divmod(nanoseconds, _NANOSECONDS["h"])
    minutes, rest = divmod(rest, _NANOSECONDS["m"])
    seconds = _fraction(rest, _NANOSECONDS["s"]) + "s"
    if hours:
        return "%s%dh%dm%s" % (sign, hours, minutes, seconds)
    if minutes:
        return "%s%dm%s" % (sign, minutes, seconds)
    return sign + seconds


def format_float64(value, /):
    """
    render a float the way float flags print their defaults ("10.5", "1e+06").

    shortest round-trip digits, switching to exponent form below 1e-4 and from
    1e6 on, as the classic flag package's %v does.
    """
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    number = Decimal(repr(value)).normalize()
    exponent = number.adjusted()
    if -4 <= exponent < 6:
        return format(number, "f")
    sign, digits, _ = number.as_tuple()
    mantissa = str(digits[0]) + ("." + "".join(map(str, digits[1:])) if len(digits) > 1 else "")
    return "%s%se%s%02d" % ("-" if sign else "", mantissa, "+" if exponent >= 0 else "-", abs(exponent))


BOOL = Kind("", parse_bool, lambda value: "true" if value else "false", False, boolean=True)
INT32 = Kind("int", _integer("int32", 32, True), str, 0)
INT64 = Kind("int", _integer("int64", 64, True), str, 0)
UINT32 = Kind("uint", _integer("uint32", 32, False), str, 0)
UINT64 = Kind("uint", _integer("uint64", 64, False), str, 0)
FLOAT64 = Kind("float", parse_float64, format_float64, 0.0)
STRING = Kind("string", parse_str, str, "")
DURATION = Kind("duration", parse_duration, format_duration, datetime.timedelta(0))

KINDS = MappingProxyType({
    bool: BOOL,
    int: INT64,
    int32: INT32,
    int64: INT64,
    uint32: UINT32,
    uint64: UINT64,
    float: FLOAT64,
    float64: FLOAT64,
    str: STRING,
    datetime.timedelta: DURATION,
})


def resolve(annotation, /):
    """
    return the Kind for a field annotation, or None when it is not supported.

    Annotated[T, ...] is reduced to T; anything else is looked up as-is, so
    Optional[T], unions and containers all resolve to None.
    """
    if get_origin(annotation) is Annotated:
        annotation = get_args(annotation)[0]
    try:
        return KINDS.get(annotation)
    except TypeError:
        # unhashable annotation objects
        return None


__all__ = (
    "int32",
    "int64",
    "uint32",
    "uint64",
    "float64",
    "Kind",
    "KINDS",
    "resolve",
    "parse_duration",
    "format_duration",
)
