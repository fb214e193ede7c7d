# python
"""
The “no kind” placeholder.

This module exposes a single instance: `void`. It plays two roles:

- As a positional kind, it stands for “no argument at all”. ``with_args(void)``
  declares nothing, and ``with_args`` drops it wherever it appears, so
  ``command(...).with_args(void).with_args(str)`` is the same as ``with_args(str)``.
- As a value, it fills the decoded-argument slot of every registered command that
  was not matched by a parse, so an untouched slot is never mistaken for a real
  (possibly empty) tuple of arguments.

It is falsy, prints as "(void)", and renders with colors in Rich.
"""
from rich.text import Text

void = type("void-type", (), {
    "__module__": None,
    "__slots__": (),
    "__rich__": lambda self: Text.assemble(("(", "yellow"), ("void", "red"), (")", "yellow")),
    "__repr__": lambda self: "(void)",
    "__bool__": lambda self: False,
    "__doc__": "placeholder for an absent positional kind or an unmatched argument slot",
    # Cache the singleton creation so repeated instantiation returns the same object.
    "__new__": __import__("functools").cache(lambda cls: super(type, cls).__new__(cls)),
})()


__all__ = ("void",)
