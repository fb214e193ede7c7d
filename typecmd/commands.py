"""
typecmd command layer: immutable, typed command descriptors.

What this module provides
- Command: the description of one parseable command:
  • identity: id + aliases (matched case-sensitively and exactly);
  • documentation: description + usage (display only, used by the help listing);
  • positional signature: an ordered tuple of kinds (see typecmd.kinds);
  • flag vocabulary: option names with their dashes stripped; the one-character
    names double as short options eligible for compound expansion (-abc).
- command(...): the factory most callers use.

Staged construction
- Every with_* call returns a new Command; the receiver is never touched:

    get = (
        command("get", "Get configuration key", "<key> [-xyz]")
        .with_args(str, str | None)
        .with_options("x", "y", "--zap")
        .with_aliases("g")
    )

- with_args appends to the existing signature, so a signature may be declared in
  segments. The full signature is validated on every call; a malformed one raises
  SignatureError and never produces a Command.

Design notes
- Commands are value objects: they hash and compare by all of their fields, so
  they can be stored in sets, reused across any number of parses, and shared
  between threads.
- Decoding lives on the command (decode), next to the signature it depends on;
  the parser only decides which command decodes which tokens.
"""
import math
from collections import deque

from .kinds import resolve, validate
from .utils import IntrospectiveType, Unset, coalesce
from .void import void

# Replaceable fields, in construction order.
_FIELDS = ("id", "aliases", "description", "usage", "kinds", "options")


def _sanitize_identity(cls, metadata, /):
    """
    Internal: validate id/description/usage in place.

    - id: required non-empty string without surrounding whitespace.
    - description / usage: strings, trimmed; usage may be empty.

    Raises
    - TypeError: on non-string values.
    - ValueError: on an empty or padded id.
    """
    if not isinstance(id := metadata["id"], str):
        raise TypeError(f"{cls.__typename__} 'id' must be a string")
    elif not id:
        raise ValueError(f"{cls.__typename__} 'id' cannot be empty")
    elif id != id.strip():
        raise ValueError(f"{cls.__typename__} 'id' cannot start or end with whitespace")

    for name in ("description", "usage"):
        if not isinstance(value := metadata[name], str):
            raise TypeError(f"{cls.__typename__} '{name}' must be a string")
        metadata[name] = value.strip()


def _sanitize_names(cls, metadata, name, /, *, dashes):
    """
    Internal: normalize a collection of names into a frozenset.

    - every name must be a string;
    - when dashes is True, leading dashes are stripped first ("--verbose" -> "verbose");
    - names cannot be empty (after stripping).

    Raises
    - TypeError: on non-string names.
    - ValueError: on empty names.
    """
    names = set()
    for item in metadata[name]:
        if not isinstance(item, str):
            raise TypeError(f"{cls.__typename__} {name} must be strings")
        if dashes:
            item = item.lstrip("-")
        if not item:
            raise ValueError(f"{cls.__typename__} {name} cannot be empty{' or only dashes' * dashes}")
        names.add(item)
    metadata[name] = frozenset(names)


def _sanitize_kinds(cls, metadata, /):
    """
    Internal: resolve declarations into slots, dropping the void placeholder, and
    validate the whole signature.
    """
    metadata["kinds"] = tuple(
        resolve(kind) for kind in metadata["kinds"] if kind is not void and kind is not None
    )
    validate(metadata["kinds"])


class Command[*_Ts](metaclass=IntrospectiveType):
    """
    Immutable description of one command.

    Properties
    - id, description, usage: identity and documentation strings.
    - aliases: alternate names (frozenset).
    - kinds: positional slots, in declaration order (tuple).
    - options: recognized flag names without dashes (frozenset).
    - short_options: the options that are one character long (frozenset).
    - required_arg_count / max_arg_count: cardinality bounds; max_arg_count is
      math.inf when the signature ends with a list kind.
    - signature: display form of the positional kinds, e.g. "(str, int | None)".
    """

    __introspectable__ = (
        "id",
        "aliases",
        "description",
        "usage",
        "kinds",
        "options",
        "short_options",
    )

    __displayable__ = (
        "id",
        "aliases",
        "description",
        "usage",
        "signature",
        "options",
    )

    def __new__(cls, id, description, usage="", /):
        """
        Construct a command with no positional kinds, no options and no aliases.

        Parameters
        - id: str
          Primary name, the token users type right after the program name.
        - description: str
          One-line description shown by the help listing.
        - usage: str
          Argument synopsis shown next to the id (e.g. "<key> [value]").
        """
        return cls._assemble({
            "id": id,
            "aliases": (),
            "description": description,
            "usage": usage,
            "kinds": (),
            "options": (),
        })

    @classmethod
    def _assemble(cls, metadata, /):
        _sanitize_identity(cls, metadata)
        _sanitize_names(cls, metadata, "aliases", dashes=False)
        _sanitize_names(cls, metadata, "options", dashes=True)
        _sanitize_kinds(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._short_options = frozenset(option for option in self._options if len(option) == 1)
        return self

    def __replace__(self, /, **changes):
        """
        Return a new command with some fields replaced (copy.replace protocol).

        Replaceable fields: id, aliases, description, usage, kinds, options.
        """
        if unknown := changes.keys() - set(_FIELDS):
            raise TypeError(f"{type(self).__typename__} cannot replace {', '.join(sorted(unknown))}")
        return type(self)._assemble(self._metadata() | changes)

    def __reduce__(self):
        return type(self)._assemble, (self._metadata(),)

    def _metadata(self):
        return {name: getattr(self, "_" + name) for name in _FIELDS}

    def with_args(self, *kinds):
        """
        Return a new command whose signature is this one followed by kinds.

        Raises
        - SignatureError: the resulting signature breaks the shape rules or uses a
          kind that is not allowed.
        """
        return self.__replace__(kinds=self._kinds + kinds)

    def with_options(self, *names):
        """
        Return a new command that also recognizes the given flag names.

        Leading dashes are stripped, so "-v", "--v" and "v" declare the same flag.
        """
        return self.__replace__(options=self._options | set(names))

    def with_aliases(self, *names):
        """
        Return a new command that also answers to the given names.
        """
        return self.__replace__(aliases=self._aliases | set(names))

    def matches(self, candidate, /):
        """
        True iff candidate is exactly the id or one of the aliases.
        """
        return candidate == self._id or candidate in self._aliases

    @property
    def names(self):
        """
        The id followed by the aliases in sorted order.
        """
        return (self._id, *sorted(self._aliases))

    @property
    def required_arg_count(self):
        return sum(not (kind.optional or kind.variadic) for kind in self._kinds)

    @property
    def max_arg_count(self):
        if any(kind.variadic for kind in self._kinds):
            return math.inf
        return len(self._kinds)

    @property
    def signature(self):
        return "(%s)" % ", ".join(kind.name for kind in self._kinds)

    def decode(self, tokens, /):
        """
        Decode positional tokens against the signature into a tuple, one value per kind.

        Tokens are consumed left to right: scalars take one token, optional kinds take
        one when available (None otherwise), a list kind takes all the rest. Kinds left
        without tokens keep their default state.

        Raises
        - ConversionError: a token does not convert to its kind.
        """
        queue = deque(enumerate(tokens, start=1))
        return tuple(kind.decode(queue) for kind in self._kinds)

    def __eq__(self, other):
        if not isinstance(other, Command):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    def _key(self):
        return self._id, self._aliases, self._description, self._usage, self._kinds, self._options

    def __setattr__(self, name, value, /):
        if not name.startswith("_") or hasattr(self, "_short_options"):
            raise AttributeError(f"{type(self).__typename__} objects are immutable")
        super().__setattr__(name, value)


def command(id, description, usage=Unset, /):
    """
    Create a command (see Command).

    Example
        put = command("put", "Store key value", "<key> <value>").with_args(str, str)
    """
    return Command(id, description, coalesce(usage, ""))


__all__ = (
    "Command",
    "command",
)
