"""
DeepFlags value conversion registry.

Scope
- Per-kind conversion from raw argument text into a typed value.
- Kinds are either Python builtins (bool, int, float, str) or the sized markers
  exported here (Int8…UInt64, Float32/Float64, Char).
- A converter returns the typed value or raises (ValueError by convention);
  any exception counts as a conversion failure for the flag that asked.

Extending
- @register(kind) installs a converter for a kind (replacing a previous one).
- Any other callable is accepted as its own converter (type=pathlib.Path works).

Notes
- Integers parse the whole text with base prefixes (0x/0o/0b); a leading zero
  without prefix reads as decimal ("010" → 10).
- Sized kinds are range-checked against their width; negative values never fit
  an unsigned kind.
- Floats must be finite and within the largest magnitude of their width;
  Float32 values are rounded to single precision.
"""
import math
import struct
import sys
from types import MappingProxyType
from typing import NewType

Int8 = NewType("Int8", int)
Int16 = NewType("Int16", int)
Int32 = NewType("Int32", int)
Int64 = NewType("Int64", int)
UInt8 = NewType("UInt8", int)
UInt16 = NewType("UInt16", int)
UInt32 = NewType("UInt32", int)
UInt64 = NewType("UInt64", int)
Float32 = NewType("Float32", float)
Float64 = NewType("Float64", float)
Char = NewType("Char", str)

BOOLEANS = MappingProxyType({
    "1": True,
    "on": True,
    "yes": True,
    "true": True,
    "0": False,
    "off": False,
    "no": False,
    "false": False,
})
"""
Case-insensitive spellings accepted for bool flags.
"""

_registry = {}


def register(kind, /):
    """
    Decorator registering the decorated callable as the converter of a kind.

    Example
        >>> @register(complex)
        ... def _(raw):
        ...     return complex(raw.replace(" ", ""))
    """
    if kind is None:
        raise TypeError("register() argument must be a kind, not None")

    def wrapper(converter):
        if not callable(converter):
            raise TypeError("@register() must be applied to a callable")
        _registry[kind] = converter
        return converter

    return wrapper


def lookup(kind, /):
    """
    Return the converter for a kind.

    Registered kinds win; an unregistered callable is its own converter.
    Anything else raises TypeError.
    """
    try:
        return _registry[kind]
    except (KeyError, TypeError):
        pass
    if callable(kind):
        return kind
    raise TypeError("no converter registered for %r" % (kind,))


def convert(kind, raw, /):
    """
    Convert raw text with the converter of the given kind.
    """
    if not isinstance(raw, str):
        raise TypeError("convert() second argument must be a string")
    return lookup(kind)(raw)


def _plain(raw):
    # ASCII only, no digit separators
    return raw.isascii() and "_" not in raw


def _integer(raw):
    text = raw.strip()
    if text != raw or not text or not _plain(text):
        raise ValueError("invalid integer %r" % raw)
    try:
        return int(text, 0)
    except ValueError:
        # int(..., 0) refuses "010"; plain decimal still applies
        return int(text, 10)


def _ranged(kind, lower, upper):
    @register(kind)
    def converter(raw):
        value = _integer(raw)
        if not lower <= value <= upper:
            raise ValueError("%s out of range [%d, %d]" % (raw, lower, upper))
        return value

    converter.__name__ = converter.__qualname__ = kind.__name__.lower()
    return converter


for _bits in (8, 16, 32, 64):
    _ranged(globals()["Int%d" % _bits], -(1 << (_bits - 1)), (1 << (_bits - 1)) - 1)
    _ranged(globals()["UInt%d" % _bits], 0, (1 << _bits) - 1)
del _bits

FLOAT32_MAX = struct.unpack("<f", b"\xff\xff\x7f\x7f")[0]
FLOAT64_MAX = sys.float_info.max


def _real(raw, maximum):
    text = raw.strip()
    if text != raw or not text or not _plain(text):
        raise ValueError("invalid number %r" % raw)
    value = float(text)
    if not math.isfinite(value) or abs(value) > maximum:
        raise ValueError("%s out of range" % raw)
    return value


@register(bool)
def boolean(raw):
    try:
        return BOOLEANS[raw.lower()]
    except KeyError:
        raise ValueError("invalid boolean %r (expected one of %s)" % (raw, ", ".join(BOOLEANS))) from None


@register(int)
def integer(raw):
    return _integer(raw)


@register(float)
@register(Float64)
def float64(raw):
    return _real(raw, FLOAT64_MAX)


@register(Float32)
def float32(raw):
    value = _real(raw, FLOAT32_MAX)
    return struct.unpack("<f", struct.pack("<f", value))[0]


@register(Char)
def char(raw):
    if len(raw) != 1:
        raise ValueError("expected a single character, got %r" % raw)
    return raw


@register(str)
def string(raw):
    return raw


__all__ = (
    # Functions
    "register",
    "lookup",
    "convert",

    # Kinds
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "Float32",
    "Float64",
    "Char",

    # Constants
    "BOOLEANS",
)
