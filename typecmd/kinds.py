r"""
typecmd positional kinds: declaration, validation and decoding.

Overview
- Declarations
  • Positional arguments are declared with ordinary Python annotations:
      str, int, float, bool, a width-bounded NewType (Int8 … UInt64, Float32, Float64),
      X | None (or Optional[X]), list[X], or a custom class.
  • resolve(annotation) turns a declaration into a slot; slots are what commands store.

- Slots (a small closed tagged union)
  • Scalar: consumes exactly one token and converts it.
  • Maybe: consumes one token when one is left, otherwise decodes to None.
  • Variadic: consumes every remaining token, decoding each as its element kind.

- Conversion rules
  • str: the token itself.
  • bool: True iff the token is one of "true", "yes", "1", "on" (case-insensitive);
    anything else is False. Never fails.
  • int / IntN / UIntN: an optional sign and ASCII digits only (no underscores, no
    whitespace), then checked against the width bounds.
  • float / Float64: float(token). Float32 is rounded to IEEE single precision and
    rejects values that overflow it.
  • custom classes: cls(token). A custom kind must be callable without arguments
    (its default state) and with a single string.
  Conversion failures raise ConversionError (a ValueError) naming the token, its
  position and the expected kind.

- Shape rules (validate)
  • mandatory kinds come first; once an optional or variadic kind appears, no
    mandatory kind may follow;
  • at most one variadic kind, and it is the last one;
  • optional and variadic kinds are never mixed in one signature.
  Violations raise SignatureError (a TypeError) when the signature is declared.

Quick example:
    >>> from typecmd.kinds import resolve, Int32
    >>> resolve(Int32 | None).name
    'Int32 | None'
"""
import inspect
import math
import re
import struct
import types
import typing
from typing import NewType

from .faults import ConversionError, FaultCode, SignatureError, getdoc, trigger
from .utils import IntrospectiveType, ordinal

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

# Inclusive bounds of the width-bounded integer kinds; plain int is unbounded.
_BOUNDS = {
    Int8: (-2 ** 7, 2 ** 7 - 1),
    Int16: (-2 ** 15, 2 ** 15 - 1),
    Int32: (-2 ** 31, 2 ** 31 - 1),
    Int64: (-2 ** 63, 2 ** 63 - 1),
    UInt8: (0, 2 ** 8 - 1),
    UInt16: (0, 2 ** 16 - 1),
    UInt32: (0, 2 ** 32 - 1),
    UInt64: (0, 2 ** 64 - 1),
}

_TRUTHY = frozenset({"true", "yes", "1", "on"})


def truthy(token, /):
    """
    Lenient boolean grammar: True iff the token is one of true/yes/1/on, ignoring case.
    """
    return token.lower() in _TRUTHY


_DECIMAL = re.compile(r"[+-]?[0-9]+")


def _integer(bounds):
    lower, upper = bounds

    def convert(token):
        if not _DECIMAL.fullmatch(token):
            raise ValueError("%r is not a base-10 integer" % token)
        value = int(token, 10)
        if lower is not None and not lower <= value <= upper:
            raise OverflowError("%d is out of range [%d, %d]" % (value, lower, upper))
        return value

    return convert


def _single(token):
    value = float(token)
    try:
        single = struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError:
        single = math.copysign(math.inf, value)
    if math.isinf(single) and not math.isinf(value):
        raise OverflowError("%r does not fit in single precision" % token)
    return single


def _constructible(cls):
    """
    Whether a custom kind can be built from nothing (default state) and from one string.

    Classes without an introspectable signature (builtin subclasses such as
    class Port(int)) are built once each way instead; a ValueError on the empty
    string only rejects the content, so it still counts as accepting a string.
    """
    if cls is typing.Any or cls is types.NoneType:
        return False
    try:
        signature = inspect.signature(cls)
    except (TypeError, ValueError):
        signature = None
    if signature is not None:
        try:
            signature.bind()
            signature.bind("")
        except TypeError:
            return False
        return True
    try:
        cls()
    except Exception:
        return False
    try:
        cls("")
    except ValueError:
        pass
    except Exception:
        return False
    return True


class Slot(metaclass=IntrospectiveType):
    """
    Base of the positional slots. Slots are immutable and compare by value.
    """
    optional = False
    variadic = False

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash((type(self), self._key()))

    def __str__(self):
        return self._name


class Scalar(Slot):
    """
    A mandatory slot holding exactly one converted token.
    """
    __introspectable__ = ("type", "name")

    def __init__(self, type, name, convert, /):
        self._type = type
        self._name = name
        self._convert = convert

    def _key(self):
        return self._type,

    def default(self):
        """
        The default state of this kind: what its type builds with no argument.
        """
        return getattr(self._type, "__supertype__", self._type)()

    def convert(self, token, /, position=1):
        """
        Convert one token, raising ConversionError when the token does not fit.
        """
        try:
            return self._convert(token)
        except (ValueError, TypeError, ArithmeticError) as exception:
            trigger(ConversionError(
                "positional argument %r at %s position is not a valid %s" % (token, ordinal(position), self._name),
                title="unconvertible argument",
                code=FaultCode.UNCONVERTIBLE_ARGUMENT,
                hint=str(exception) or "expected a value of kind %s" % self._name,
                docs=getdoc(FaultCode.UNCONVERTIBLE_ARGUMENT),
                token=token,
                position=position,
                kind=self,
                exception=exception,
            ), shell=False)

    def decode(self, tokens, /):
        """
        Consume one (position, token) pair from the deque; the default state when empty.
        """
        if not tokens:
            return self.default()
        position, token = tokens.popleft()
        return self.convert(token, position)


class Maybe(Slot):
    """
    An optional slot: the element value when a token is left, None otherwise.
    """
    __introspectable__ = ("element", "name")
    optional = True

    def __init__(self, element, /):
        self._element = element
        self._name = "%s | None" % element.name

    def _key(self):
        return self._element,

    def default(self):
        return None

    def decode(self, tokens, /):
        if not tokens:
            return None
        return self._element.decode(tokens)


class Variadic(Slot):
    """
    A variadic tail: every remaining token, decoded as the element kind, in order.
    """
    __introspectable__ = ("element", "name")
    variadic = True

    def __init__(self, element, /):
        self._element = element
        self._name = "list[%s]" % element.name

    def _key(self):
        return self._element,

    def default(self):
        return []

    def decode(self, tokens, /):
        values = []
        while tokens:
            values.append(self._element.decode(tokens))
        return values


def _scalar(annotation, within=None):
    """
    Resolve a non-optional, non-variadic annotation into a Scalar slot.
    """
    origin = typing.get_origin(annotation)
    if origin in (typing.Union, types.UnionType) or origin is list or annotation is list:
        raise SignatureError(
            "%s kinds cannot nest optional or list kinds (got %r)" % (within, annotation)
            if within else
            "kind %r is not allowed here" % (annotation,)
        )

    if annotation is str:
        return Scalar(str, "str", str)
    if annotation is bool:
        return Scalar(bool, "bool", truthy)
    if annotation is int:
        return Scalar(int, "int", _integer((None, None)))
    if annotation is float or annotation is Float64:
        return Scalar(annotation, annotation.__name__, float)
    if annotation is Float32:
        return Scalar(Float32, "Float32", _single)
    if isinstance(annotation, NewType) and annotation in _BOUNDS:
        return Scalar(annotation, annotation.__name__, _integer(_BOUNDS[annotation]))
    if isinstance(annotation, type) and _constructible(annotation):
        return Scalar(annotation, annotation.__qualname__, annotation)

    raise SignatureError(
        "kind %r is not allowed; use str, int, float, bool, a sized numeric kind, "
        "X | None, list[X], or a class that can be built with no argument and from a single string" % (annotation,)
    )


def resolve(annotation, /):
    """
    Resolve one positional declaration into a slot.

    Accepts slots (returned unchanged), plain kinds, X | None, Optional[X] and list[X].

    Raises
    - SignatureError: the declaration is not an allowed kind.
    """
    if isinstance(annotation, Slot):
        return annotation

    origin = typing.get_origin(annotation)
    arguments = typing.get_args(annotation)

    if origin in (typing.Union, types.UnionType):
        others = [argument for argument in arguments if argument is not types.NoneType]
        if len(others) != 1 or len(arguments) != 2:
            raise SignatureError("optional kinds must wrap exactly one kind (got %r)" % (annotation,))
        return Maybe(_scalar(others[0], "optional"))

    if origin is list:
        if len(arguments) != 1:
            raise SignatureError("list kinds must have exactly one element kind (got %r)" % (annotation,))
        return Variadic(_scalar(arguments[0], "list"))

    if annotation is list:
        raise SignatureError("list kinds must specify their element kind, e.g. list[str]")

    return _scalar(annotation)


def validate(slots, /):
    """
    Check the shape rules over a full slot sequence.

    Raises
    - SignatureError on a mandatory kind after an optional/variadic one, more than one
      variadic kind, or optional and variadic kinds mixed.
    """
    trailing = None
    for slot in slots:
        if slot.optional or slot.variadic:
            trailing = trailing or slot
        elif trailing is not None:
            raise SignatureError(
                "mandatory kind %s cannot follow %s kind %s; optional and list kinds must be placed last" % (
                    slot.name, "list" if trailing.variadic else "optional", trailing.name
                )
            )

    if sum(slot.variadic for slot in slots) > 1:
        raise SignatureError("at most one list kind is allowed")

    if any(slot.variadic for slot in slots) and any(slot.optional for slot in slots):
        raise SignatureError("cannot expect both optional and list kinds")


__all__ = (
    # Sized numeric kinds
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

    # Slots
    "Slot",
    "Scalar",
    "Maybe",
    "Variadic",

    # Functions
    "resolve",
    "validate",
    "truthy",
)
