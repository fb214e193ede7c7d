"""
typecmd faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue
  raised or reported while parsing a command line.
- CommandException / CommandWarning: base types that carry message + options and
  know how to render themselves (rich) and how to fire (print or raise/warn).
- SignatureError / UnmatchedCommandError: programming errors. They are never
  rendered; they surface as plain exceptions at the faulty call site.
- trigger(): central entry point to surface any fault.
- getdoc(): optional description lookup for a code from the host application.

Integration
- The parser reports resolution faults (no command, unknown command, wrong
  argument count) in shell mode: rendered on stderr, recorded on the result,
  never raised.
- Conversion faults are triggered outside shell mode, so they propagate out
  of the parse call.
"""
import inspect
import sys
import warnings
from abc import ABC
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
    canonical fault codes (stable identifiers).

    grouping
    - routing (1110x)
      • NO_COMMAND, UNKNOWN_COMMAND
    - positionals (1112x)
      • TOO_FEW_ARGUMENTS, TOO_MANY_ARGUMENTS
    - conversions (1113x)
      • UNCONVERTIBLE_ARGUMENT
    - warnings (12xxx)
      • SHADOWED_COMMAND

    normalize() allows host remapping to custom labels while keeping code-stability.
    """
    # --- routing errors (11xxx) ---
    NO_COMMAND                  = 11100
    UNKNOWN_COMMAND             = 11101

    # --- positional errors (11xxx) ---
    TOO_FEW_ARGUMENTS           = 11121
    TOO_MANY_ARGUMENTS          = 11122

    # --- conversion errors (11xxx) ---
    UNCONVERTIBLE_ARGUMENT      = 11131

    # --- warnings (12xxx) ---
    SHADOWED_COMMAND            = 12101

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, styles, kind):
    """
    shared rich rendering for exceptions and warnings.

    layout
    - header: "[ prog — code | Title ]"
    - body: the message, then the hint behind an arrow.
    - fancy: the body is wrapped in a Panel titled with the header.
    """
    main = __import__("__main__")
    options = fault.options
    colorful = options.get("colorful", False)

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

    prog = text(getattr(main, "__prog__", options.get("prog") or "typecmd"), styler("prog-name"))

    code = options.get("code")
    header = Text.assemble(
        "[ ",
        prog,
        " — ",
        text(code.normalize() if code is not None else "", styler("code")),
        " | ",
        text(options.get("title", kind).title(), styler(kind + "-title")),
        " ]"
    )
    message = text(fault.message, styler(kind + "-message"))
    renders = [message]
    if hint := options.get("hint"):
        renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

    if options.get("fancy", False):
        return Panel(Group(*renders), title=header, title_align="left")

    return Group(header, *renders)


class CommandException(Exception):
    """
    base class of every rendered, user-facing parse failure.

    options (all optional)
    - code: FaultCode, title: str, hint: str, docs: str | None
    - prog: program label for the header (overridden by __main__.__prog__)
    - colorful / fancy: rendering switches
    - shell: print instead of raising; deferred: return after printing instead of exiting
    - any extra context (token, tokens, position, command, ...)
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(__import__("__main__"), "__styles__", {}))
        return _render(self, styles, "error")

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from self.options.get("exception")
        console.print(self)
        if self.options.get("deferred", False):
            return
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class NoCommandError(CommandException): ...
class UnknownCommandError(CommandException): ...
class WrongArgumentCountError(CommandException): ...
class ConversionError(CommandException, ValueError): ...


class CommandWarning(ABC, Warning):
    """
    base class of rendered, user-facing warnings.

    outside shell mode they go through warnings.warn, so the usual filters apply.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #FFB400",  # amber fault code for warnings
            "warning-title": "bold #FFC2E0",  # softer pinky title for warnings

            # body
            "warning-message": "#D6D6DE",  # slightly lighter gray body
            "hint-arrow": "#B8EFAF dim",  # softer green arrow
            "hint": "italic #B8EFAF",  # softer green hint text
        } | getattr(__import__("__main__"), "__styles__", {}))
        return _render(self, styles, "warning")

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=self.options.get("stacklevel", len(inspect.stack())))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ShadowedCommandWarning(CommandWarning): ...


class SignatureError(TypeError):
    """
    a positional signature breaks the shape rules (ordering, allowed kinds,
    single variadic tail, no optional and variadic mix).
    """


class UnmatchedCommandError(AssertionError):
    """
    decoded arguments were requested for a command that is not the matched one,
    or that was never registered with the parse call.
    """


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via rich console; otherwise, exceptions are
      raised and warnings are emitted through the warnings module.
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
    are FaultCode instances and values are short documentation strings.
    when not found, returns None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "CommandException",
    "NoCommandError",
    "UnknownCommandError",
    "WrongArgumentCountError",
    "ConversionError",
    "CommandWarning",
    "ShadowedCommandWarning",
    "SignatureError",
    "UnmatchedCommandError",
    "FaultCode",
    "trigger",
    "getdoc",
)
