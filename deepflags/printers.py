"""
DeepFlags help rendering.

Scope
- FlagProperties: identity and arity of one flag, as handed to a help printer.
- synopsis(): the one-line header of a flag ("--name, -n VALUE (can be repeated)").
- HelpPrinter: the three-call capability the flag tree drives while describing
  itself (enter_flag / write_block / leave_flag).
- BasicHelpPrinter: the stock rich-based renderer.

Layout (BasicHelpPrinter)
- A named flag prints its synopsis (bold) and a blank line, then everything it
  writes is indented two more columns; leave_flag() steps back out.
- The first anonymous scope (the root group) does not indent.
- Blocks are word-wrapped to the console width minus the current indent and
  followed by a blank line.
- Width comes from the COLUMNS environment variable (leading digits), or 80.

Palette keys
- flag-synopsis, flag-description
- Define a mapping named __styles__ in __main__ to override any entry.
- When colorful is False, styling is suppressed.
"""
import os
import re
import sys
from abc import ABC, abstractmethod
from collections import defaultdict, namedtuple

from rich.console import Console
from rich.text import Text

from .utils import Unset, coalesce


class FlagProperties(namedtuple("FlagProperties", ("long", "short", "metavar", "greedy", "reentrant"))):
    """
    Identity and arity of a flag: long/short are bare names (or None), metavar
    is the value placeholder (or None), greedy/reentrant describe how many
    values and occurrences it takes.
    """
    __slots__ = ()

    @property
    def anonymous(self):
        return not (self.long or self.short)

    def listing(self):
        """
        Flag names as written on the command line: "--long, -s", "--long" or "-s".
        """
        return ", ".join(spelling for spelling in (
            "--" + self.long if self.long else None,
            "-" + self.short if self.short else None,
        ) if spelling)


def synopsis(properties, /):
    """
    One-line header for a flag.

    Examples
    - ("file", "f", "FILE", False, False) → "--file, -f FILE"
    - ("bookmark", "b", "N", True, True)  → "--bookmark, -b N [N [N...]] (can also be repeated)"
    - ("display", "d", None, False, True) → "--display, -d [repeatable]"
    - (None, None, "N", True, False)      → "[N [N [N...]]]"
    """
    if not isinstance(properties, FlagProperties):
        raise TypeError("synopsis() argument must be a FlagProperties")
    parts = []
    if not properties.anonymous:
        parts.append(properties.listing())

    if properties.metavar:
        value = properties.metavar
        if properties.greedy:
            value += " [%s [%s...]]" % (properties.metavar, properties.metavar)
        parts.append(value if parts else "[%s]" % value)
        if properties.reentrant:
            parts.append("(can %s repeated)" % ("also be" if properties.greedy else "be"))
    else:
        if properties.reentrant:
            parts.append("[repeatable]")
        if properties.greedy:
            parts.append("[accepts multiple values]")
    return " ".join(parts)


class HelpPrinter(ABC):
    """
    Help rendering capability.

    The flag tree calls enter_flag() when it starts describing a node,
    write_block() for each paragraph of prose, and leave_flag() when the node
    is done. Calls nest exactly like the tree does.
    """

    @abstractmethod
    def enter_flag(self, properties, /):
        raise NotImplementedError

    @abstractmethod
    def write_block(self, text, /):
        raise NotImplementedError

    @abstractmethod
    def leave_flag(self):
        raise NotImplementedError


def _columns():
    match = re.match(r"\d+", os.environ.get("COLUMNS", ""))
    return int(match.group()) if match and int(match.group()) else 80


class BasicHelpPrinter(HelpPrinter):
    """
    Rich renderer writing indented, word-wrapped help to a file (stdout by default).
    """

    def __init__(self, file=Unset, /, *, width=Unset, colorful=True):
        width = coalesce(width, None)
        if width is not None and (not isinstance(width, int) or isinstance(width, bool) or width < 1):
            raise ValueError("width must be a positive integer")
        self._width = width if width is not None else _columns()
        self._colorful = bool(colorful)
        self._console = Console(
            file=coalesce(file, sys.stdout),
            width=self._width,
            highlight=False,
            emoji=False,
            markup=False,
        )
        self._styles = defaultdict(str, {
            "flag-synopsis": "bold",
            "flag-description": "",
        } | getattr(__import__("__main__"), "__styles__", {}))
        self._indent = 0
        self._inflag = False

    @property
    def width(self):
        return self._width

    @property
    def indent(self):
        return self._indent

    def _style(self, name):
        return self._styles[name] if self._colorful else ""

    def _emit(self, line=""):
        self._console.print(Text.assemble(" " * self._indent, line), soft_wrap=True)

    def enter_flag(self, properties, /):
        if not isinstance(properties, FlagProperties):
            raise TypeError("enter_flag() argument must be a FlagProperties")
        if not properties.anonymous:
            self._emit(Text(synopsis(properties), self._style("flag-synopsis")))
            self._console.print()
            self._inflag = True
        if self._inflag:
            self._indent += 2
        else:
            self._inflag = True

    def write_block(self, text, /):
        if not isinstance(text, str | Text):
            raise TypeError("write_block() argument must be a string")
        block = text.copy() if isinstance(text, Text) else Text(text, self._style("flag-description"))
        for line in block.wrap(self._console, max(self._width - self._indent, 1)):
            self._emit(line)
        self._console.print()

    def leave_flag(self):
        self._indent = self._indent - 2 if self._indent > 2 else 0


__all__ = (
    "FlagProperties",
    "HelpPrinter",
    "BasicHelpPrinter",
    "synopsis",
)
