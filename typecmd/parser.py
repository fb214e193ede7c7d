"""
typecmd parser: one-shot classification of a process argument vector.

Flow of parse(argv, commands)
1) normalize argv (sequence, shell-like string or sys.argv) and the command catalog;
2) build the help listing for every registered command;
3) warn about names claimed by more than one command (first registration wins);
4) resolve argv[1] against the catalog (ids and aliases, exact match);
5) split the remaining tokens into flags and positionals, check the positional
   count against the matched command's bounds;
6) resolve flags against the matched command's vocabulary and decode positionals.

Resolution failures (steps 4 and 5) are reported on stderr and recorded on the
Result; conversion failures raise ConversionError out of parse.
"""
import difflib
import os.path
import shlex
import sys

from rich.cells import cell_len

from .commands import Command
from .faults import *
from .utils import IntrospectiveType, Unset, ordinal
from .void import void


def is_option(token, /):
    """
    Whether a raw token is a flag.

    A flag is at least two characters long, starts with a dash, is not a negative
    number ("-1", "-2.5"), has no embedded space, and, when it starts with two
    dashes, has an alphanumeric third character ("--" and "---x" are positional).
    """
    if len(token) < 2 or token[0] != "-" or token[1] in "0123456789" or " " in token:
        return False
    if token.startswith("--"):
        return len(token) >= 3 and token[2].isascii() and token[2].isalnum()
    return True


def _listing(commands):
    """
    Format the help listing: one " <id> <usage><pad><description>" line per command,
    descriptions aligned one column past the widest id and usage pair.
    """
    if not commands:
        return ""
    width = max(cell_len(command.id) + cell_len(command.usage) + 1 for command in commands)
    return "".join(
        " %s %s%s%s\n" % (
            command.id,
            command.usage,
            " " * (width - cell_len(command.id) - cell_len(command.usage)),
            command.description,
        )
        for command in commands
    )


class Result(metaclass=IntrospectiveType):
    """
    Read-only outcome of one parse call.

    Properties
    - prog: argv[0] as given, or None for an empty vector.
    - index / id / command: the matched command's registration index, id and
      descriptor; None when nothing matched or the match failed its count check.
    - candidate: the command whose name matched, even when its count check failed.
    - options: recognized flag names (dashes stripped).
    - unknown_options: flag tokens the matched command does not declare.
    - help: the listing of every registered command.
    - fault: the resolution fault that stopped the parse, or None.

    Queries
    - is_(command), get_args(command), has_option(name); bool(result) is True iff
      a command matched.
    """

    __introspectable__ = (
        "prog",
        "index",
        "id",
        "command",
        "candidate",
        "options",
        "unknown_options",
        "help",
        "fault",
    )

    __displayable__ = (
        "prog",
        "index",
        "id",
        "options",
        "unknown_options",
        "fault",
    )

    def __new__(cls, argv, commands, /, *, colorful=False, fancy=False, quiet=False):
        self = super().__new__(cls)

        if argv is Unset:
            argv = sys.argv
        elif isinstance(argv, str):
            argv = shlex.split(argv)
        argv = list(argv)
        if not all(isinstance(token, str) for token in argv):
            raise TypeError("parse() argv must only contain strings")

        commands = tuple(commands)
        if not all(isinstance(command, Command) for command in commands):
            raise TypeError("parse() commands must be Command instances")

        self._commands = commands
        self._arguments = [void] * len(commands)
        self._prog = argv[0] if argv else None
        self._index = None
        self._id = None
        self._command = None
        self._candidate = None
        self._options = frozenset()
        self._unknown_options = frozenset()
        self._help = _listing(commands)
        self._fault = None

        # fault options shared by every diagnostic of this call
        self._context = {
            "prog": os.path.basename(self._prog) if self._prog else None,
            "colorful": colorful,
            "fancy": fancy,
            "quiet": quiet,
        }

        self._shadowing()

        if len(argv) < 2:
            self._report(NoCommandError(
                "no command passed",
                title="no command",
                code=FaultCode.NO_COMMAND,
                hint="pass one of: %s" % ", ".join(command.id for command in commands) if commands else None,
                docs=getdoc(FaultCode.NO_COMMAND),
            ))
            return self

        token, rest = argv[1], argv[2:]
        flags = [item.lstrip("-") for item in rest if is_option(item)]
        tokens = [item for item in rest if not is_option(item)]

        for index, command in enumerate(commands):
            if command.matches(token):
                break
        else:
            self._unknown(token)
            return self

        self._candidate = command
        if not self._cardinality(command, tokens):
            return self

        self._index = index
        self._id = command.id
        self._command = command
        self._resolve(command, flags)
        self._arguments[index] = command.decode(tokens)
        return self

    def _report(self, fault, /):
        """
        Record a resolution fault and render it on stderr unless quiet.
        """
        self._fault = fault.__replace__(**self._context)
        if not self._context["quiet"]:
            trigger(self._fault, shell=True, deferred=True)

    def _shadowing(self):
        owners = {}
        for index, command in enumerate(self._commands):
            for name in command.names:
                owner = owners.setdefault(name, index)
                if owner == index:
                    continue
                trigger(ShadowedCommandWarning(
                    "command name %r of the %s command is already claimed by the %s command" % (
                        name, ordinal(index + 1), ordinal(owner + 1)
                    ),
                    title="shadowed command",
                    code=FaultCode.SHADOWED_COMMAND,
                    hint="rename or remove it; the %s command always wins" % ordinal(owner + 1),
                    docs=getdoc(FaultCode.SHADOWED_COMMAND),
                    name=name,
                    command=command,
                    **self._context,
                ), shell=False)

    def _unknown(self, token):
        names = [name for command in self._commands for name in command.names]
        suggestions = difflib.get_close_matches(token, names, 5)
        try:
            hint = "did you mean %r? available commands are listed by the help" % suggestions[0]
        except IndexError:
            if self._commands:
                hint = "available commands: %s" % ", ".join(command.id for command in self._commands)
            else:
                hint = "no command is registered"
        self._report(UnknownCommandError(
            "unrecognized command %r" % token,
            title="unknown command",
            code=FaultCode.UNKNOWN_COMMAND,
            hint=hint,
            docs=getdoc(FaultCode.UNKNOWN_COMMAND),
            token=token,
            suggestions=suggestions,
        ))

    def _cardinality(self, command, tokens):
        """
        Check the positional count; report and return False when it is out of bounds.
        """
        count = len(tokens)
        if count < command.required_arg_count:
            bound, code, title = "at least %d" % command.required_arg_count, FaultCode.TOO_FEW_ARGUMENTS, "too few arguments"
        elif count > command.max_arg_count:
            bound, code, title = "at most %d" % command.max_arg_count, FaultCode.TOO_MANY_ARGUMENTS, "too many arguments"
        else:
            return True

        self._report(WrongArgumentCountError(
            "wrong number of arguments for command %r: expected %s, got %d instead%s" % (
                command.id, bound, count, ": %s" % " ".join("%r" % token for token in tokens) if tokens else ""
            ),
            title=title,
            code=code,
            hint="usage: %s (%s)" % (" ".join(filter(None, (command.id, command.usage))), command.description),
            docs=getdoc(code),
            command=command,
            tokens=tuple(tokens),
            expected=(command.required_arg_count, command.max_arg_count),
        ))
        return False

    def _resolve(self, command, flags):
        """
        Classify flags against the command's vocabulary.

        An exact name is recognized as is; otherwise a token made only of declared
        short options expands into them; otherwise the whole token is unknown.
        """
        recognized, unknown = set(), set()
        for flag in flags:
            if flag in command.options:
                recognized.add(flag)
            elif all(character in command.short_options for character in flag):
                recognized.update(flag)
            else:
                unknown.add(flag)
        self._options = frozenset(recognized)
        self._unknown_options = frozenset(unknown)

    def _slot(self, command):
        for index, registered in enumerate(self._commands):
            if registered is command:
                return index
        for index, registered in enumerate(self._commands):
            if registered == command:
                return index
        return None

    def is_(self, command, /):
        """
        Whether the given command is the one that matched (compared by id).
        """
        return self._id is not None and command.id == self._id

    def get_args(self, command, /):
        """
        Return the decoded positional values of the matched command, one per kind.

        Raises
        - UnmatchedCommandError: the command was not registered with this parse,
          or it is not the one that matched.
        """
        index = self._slot(command)
        if index is None:
            raise UnmatchedCommandError("command %r was not registered with this parse" % command.id)
        if index != self._index:
            raise UnmatchedCommandError(
                "command %r did not match; check result.is_(command) before get_args" % command.id
            )
        return tuple(list(value) if isinstance(value, list) else value for value in self._arguments[index])

    def has_option(self, name, /):
        """
        Whether the flag was passed and recognized; leading dashes in name are ignored.
        """
        return name.lstrip("-") in self._options

    def __bool__(self):
        return self._index is not None


def parse(argv=Unset, /, commands=(), *, colorful=False, fancy=False, quiet=False):
    """
    Parse a process argument vector against an ordered command catalog.

    Parameters
    - argv: Sequence[str] | str | Unset
      The full vector, program name first. A string is split like a shell would;
      Unset reads sys.argv.
    - commands: Iterable[Command]
      The catalog; on a name conflict the first registered command wins.
    - colorful / fancy: diagnostic styling (colors, panel chrome).
    - quiet: record resolution faults without printing them.

    Returns
    - Result

    Raises
    - ConversionError: a positional token does not convert to its declared kind.
    - TypeError: argv holds non-strings or commands holds non-commands.

    Example
        put = command("put", "Store key value", "<key> <value>").with_args(str, str)
        result = parse(["bin", "put", "k", "v"], [put])
        assert result.is_(put) and result.get_args(put) == ("k", "v")
    """
    return Result(argv, commands, colorful=colorful, fancy=fancy, quiet=quiet)


__all__ = (
    "Result",
    "is_option",
    "parse",
)
