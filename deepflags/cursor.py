"""
DeepFlags argument cursor (tokenizer).

Scope
- Walks a raw argument vector (program name at index 0) one token at a time.
- Classifies every raw argument into a token and keeps the single-character
  queue of short-flag clusters ("-abc" → a, b, c).

Tokens
- LongFlag(name, value, index)   "--name" or "--name=value" (split at the first '=';
                                 value is None without '=' and "" for "--name=").
- ShortFlag(name, pending, index) one character of a short cluster; pending holds
                                 the characters still queued behind it.
- Value(text, index)             an argument not starting with '-', or exactly "-".
- EndOfInput(index)              the vector is used up.

Every token remembers the raw-argument index it came from (1 = first argument
after the program name) and renders its spelling for diagnostics.

Cursor contract
- advance(): move to the next token; queued short characters come first.
- force_value(): claim the next raw argument verbatim as a Value, whatever it
  looks like (that is how "--offset -5" reaches its flag).
- has_more(): whether force_value() would succeed.
- mark(): progress marker; it differs after any input was consumed.
- exhausted: set once advance() ran past the last argument; stays set.
"""
from collections import namedtuple
from collections.abc import Sequence

from .utils import Unset


class LongFlag(namedtuple("LongFlag", ("name", "value", "index"))):
    __slots__ = ()

    @property
    def spelling(self):
        return "--" + self.name


class ShortFlag(namedtuple("ShortFlag", ("name", "pending", "index"))):
    __slots__ = ()

    @property
    def spelling(self):
        return "-" + self.name


class Value(namedtuple("Value", ("text", "index"))):
    __slots__ = ()

    @property
    def spelling(self):
        return self.text


class EndOfInput(namedtuple("EndOfInput", ("index",))):
    __slots__ = ()

    @property
    def spelling(self):
        return "<end>"


class ArgumentCursor:
    """
    Single-pass, forward-only reader over an argument vector.

    The cursor starts before the first argument: token is Unset until the first
    advance(). It is not resumable and not thread-safe; one parse owns it.
    """

    def __init__(self, argv, /):
        if isinstance(argv, str | bytes) or not isinstance(argv, Sequence):
            raise TypeError("ArgumentCursor() argument must be a sequence of strings")
        if not all(isinstance(argument, str) for argument in argv):
            raise TypeError("ArgumentCursor() argument must contain only strings")
        self._argv = tuple(argv)
        self._position = 0
        self._pending = ""
        self._cluster = 0
        self._token = Unset
        self._exhausted = False

    @property
    def argv(self):
        return self._argv

    @property
    def position(self):
        """
        Index of the raw argument most recently claimed (len(argv) once exhausted).
        """
        return self._position

    @property
    def token(self):
        return self._token

    @property
    def exhausted(self):
        return self._exhausted

    def advance(self):
        """
        Move to the next token and return it.
        """
        if self._pending:
            name, self._pending = self._pending[0], self._pending[1:]
            self._token = ShortFlag(name, self._pending, self._cluster)
            return self._token

        if self._position + 1 >= len(self._argv):
            self._position = len(self._argv)
            self._exhausted = True
            self._token = EndOfInput(self._position)
            return self._token

        self._position += 1
        self._token = self._classify(self._argv[self._position], self._position)
        return self._token

    def _classify(self, argument, index):
        if not argument.startswith("-") or argument == "-":
            return Value(argument, index)
        if argument.startswith("--"):
            name, separator, value = argument[2:].partition("=")
            return LongFlag(name, value if separator else None, index)
        self._pending = argument[2:]
        self._cluster = index
        return ShortFlag(argument[1], self._pending, index)

    def force_value(self):
        """
        Claim the next raw argument as a Value token, bypassing classification.

        Raises IndexError when no raw argument is left. Queued short characters
        stay queued and are served by the next advance().
        """
        if not self.has_more():
            raise IndexError("no argument left to claim")
        self._position += 1
        self._token = Value(self._argv[self._position], self._position)
        return self._token

    def has_more(self):
        return self._position + 1 < len(self._argv)

    def mark(self):
        return self._position, len(self._pending)

    def __repr__(self):
        return "%s(%r, position=%d, token=%r)" % (type(self).__name__, list(self._argv), self._position, self._token)


__all__ = (
    "ArgumentCursor",
    "LongFlag",
    "ShortFlag",
    "Value",
    "EndOfInput",
)
