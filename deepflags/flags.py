r"""
DeepFlags flag tree: declarations, recursive dispatch and the parse entry point.

Overview
- Nodes
  • Scalar[_T]: named flag carrying exactly one typed value (--param 20, --param=20).
  • Switch: named presence flag (--toggle, -x); rejects inline values.
  • Vector[_T]: collection flag; every occurrence spawns a fresh element (a Scalar of
    the same kind, or a FlagGroup record) and appends what it produced.
      - greedy: keep collecting while the next token is a value (--ind 14 15 16).
      - reentrant: the flag may be matched again (--ind 14 --ind 15).
    Presets: Repeated (reentrant, one value per occurrence) and Sequential
    (greedy, single occurrence).
  • FlagGroup: composite node owning an ordered list of members plus long/short name
    indices; nests inside other groups, or inside a Vector to model repeatable records.

- Dispatch (FlagGroup.parse)
  • The triggering token must be a flag; a group addressed by its own name skips it.
  • Members are looked up by exact name (long tokens in the long index, short tokens
    in the short index). No match, an exhausted member, a value or the end of input
    stops the group successfully: the current token is left for the enclosing scope.
  • A delegation that consumed nothing also stops the loop.

- Entry point (FlagGroup.parse_args)
  • Fewer than two arguments succeed with no effect (argv[0] is the program name).
  • A token nobody claimed surfaces as UnrecognizedFlagError/UnexpectedOperandError.
  • Faults are triggered through deepflags.faults: rendered with rich in shell mode,
    raised otherwise.

Declaration
- Imperative: FlagGroup().add_flag(Scalar("--param")), or Scalar("--param", parent=group).
- Declarative: class attributes of a FlagGroup subclass; each instance receives fresh
  copies in declaration order, reachable under the same attribute names.

Quick example:
    >>> class Entity(FlagGroup):
    ...     id = Scalar("--id", type=Int64)
    ...     x = Scalar("--x", "-x", type=float)
    ...
    >>> class Root(FlagGroup):
    ...     alive = Scalar("--alive", type=bool)
    ...     entities = Vector("--entity", type=Entity)
    ...
    >>> root = Root()
    >>> root.parse_args(["prog", "--alive=yes", "--entity", "--id", "7", "-x", "1.5"])
    True
    >>> root.entities.value[0].id.value
    7
"""
import builtins
import copy
import difflib
import functools
import operator
import os
import re
import sys
from abc import ABCMeta, abstractmethod
from collections import namedtuple

from rich.text import Text

from .converters import lookup, convert
from .cursor import ArgumentCursor, LongFlag, ShortFlag, Value
from .faults import *
from .printers import BasicHelpPrinter, FlagProperties
from .utils import *


class FlagType(ABCMeta):
    """
    Metaclass of every flag node.

    Responsibilities
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in declaration errors.
    - Names listed in __introspectable__ become read-only properties mirroring
      the sanitized "_<name>" fields.
    - Stable, readable __repr__/__rich_repr__ implementations for diagnostics.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
            **options
        )

        if "__repr__" not in namespace:
            @rename("__repr__")
            def __repr__(self):
                """
                Example
                - scalar(names=('--param', '-p'), descr=None, required=False, ...)
                """
                return f"{type(self).__typename__}({
                    ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
                })"
            self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


class FlagIdentity(namedtuple("FlagIdentity", ("long", "short", "metavar", "descr"))):
    """
    Immutable identity of a node: bare long name, short character, value
    placeholder and description (each None when absent).
    """
    __slots__ = ()

    @property
    def anonymous(self):
        return not (self.long or self.short)

    def matches(self, token, /):
        """
        Exact name equality: long tokens against the long name, short tokens
        against the short name.
        """
        match token:
            case LongFlag(name=name):
                return self.long is not None and name == self.long
            case ShortFlag(name=name):
                return self.short is not None and name == self.short
            case _:
                return False

    def spellings(self):
        return tuple(spelling for spelling in (
            "--" + self.long if self.long else None,
            "-" + self.short if self.short else None,
        ) if spelling)

    def properties(self, greedy=False, reentrant=False):
        return FlagProperties(self.long, self.short, self.metavar, greedy, reentrant)

    def listing(self):
        return self.properties().listing()


def _sanitize_names(cls, metadata, /):
    r"""
    Internal: validate flag spellings.

    - At most one long name (r"--[^\W\d_](-?[^\W_]+)*") and one short name
      (r"-[^\W\d_]"); unicode letters are allowed.
    - Names are trimmed; order is kept for display.
    - No names at all is fine: the node is anonymous (root groups, records).
    """
    names = []
    long = short = None
    for name in metadata["names"]:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} names must be strings")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} names cannot be empty-strings")
        elif re.fullmatch(r"--[^\W\d_](-?[^\W_]+)*", name):
            if long is not None:
                raise ValueError(f"{cls.__typename__} cannot have more than one long name")
            long = name[2:]
        elif re.fullmatch(r"-[^\W\d_]", name):
            if short is not None:
                raise ValueError(f"{cls.__typename__} cannot have more than one short name")
            short = name[1:]
        else:
            raise ValueError(f"{cls.__typename__} names must be valid shell-style flag names (e.g. '--name' or '-n')")
        names.append(name)

    metadata["names"] = tuple(names)
    metadata["long"] = long
    metadata["short"] = short


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize descr/metavar (non-empty after trimming, None when Unset)
    and required (bool).
    """
    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)

    if not isinstance(metavar := metadata.get("metavar", Unset), str | Unset):
        raise TypeError(f"{cls.__typename__} 'metavar' must be a string")
    elif isinstance(metavar, str) and not (metavar := metavar.strip()):
        raise ValueError(f"{cls.__typename__} 'metavar' cannot be empty")
    metadata["metavar"] = coalesce(metavar)

    metadata["required"] = bool(metadata["required"])


def _sanitize_kind(cls, kind, /):
    """
    Internal: a value kind must resolve to a converter and must not be a flag node type.
    """
    if isinstance(kind, FlagType):
        raise TypeError(f"{cls.__typename__} 'type' cannot be a flag type")
    try:
        lookup(kind)
    except TypeError:
        raise TypeError(f"{cls.__typename__} 'type' must be a registered kind or a callable") from None


class FlagNode(metaclass=FlagType):
    """
    Abstract flag node.

    Every node answers four questions for its parent group:
    - parse(cursor): consume the tokens that belong to it (raises a FlagException on failure).
    - at_capacity(): has it accepted all the input it ever will?
    - matches(token): does the token name it (or, for groups, one of its members)?
    - describe(printer): drive a HelpPrinter.

    Construction
    - names: at most one long and one short spelling.
    - descr: help prose; metavar: value placeholder shown in help.
    - required: checked by enforce() after parsing, never by the dispatcher.
    - parent: a FlagGroup to register into immediately.
    """
    __introspectable__ = (
        "names",
        "descr",
        "required",
    )

    def __init__(self, *names, descr=Unset, required=False, parent=Unset, **metadata):
        metadata |= {
            "names": names,
            "descr": descr,
            "required": required,
        }
        _sanitize_names(type(self), metadata)
        _sanitize_metadata(type(self), metadata)

        self._identity = FlagIdentity(metadata.pop("long"), metadata.pop("short"), metadata["metavar"], metadata["descr"])
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._present = False

        if parent is not Unset:
            if not isinstance(parent, FlagGroup):
                raise TypeError(f"{type(self).__typename__} 'parent' must be a flag group")
            parent.add_flag(self)

    @property
    def identity(self):
        return self._identity

    @property
    def present(self):
        """
        Whether the node was matched during the parse.
        """
        return self._present

    @abstractmethod
    def parse(self, cursor, /):
        raise NotImplementedError

    @abstractmethod
    def at_capacity(self):
        raise NotImplementedError

    def matches(self, token, /):
        return self._identity.matches(token)

    def spellings(self):
        """
        Every flag spelling reachable from this node.
        """
        return self._identity.spellings()

    def describe(self, printer, /):
        printer.enter_flag(self._identity.properties())
        if self._identity.descr:
            printer.write_block(self._identity.descr)
        printer.leave_flag()

    def enforce(self):
        """
        Post-parse presence check; leaves have nothing below them to check.
        """


class Scalar[_T](FlagNode):
    """
    Named flag carrying exactly one typed value.

    The raw text comes from, in order: the current token when it is a value
    (greedy continuation inside a Vector), the inline "--name=value" part, or
    the next raw argument claimed verbatim. The text is converted with the
    registry converter of 'type'; 'default' is reported until then.
    """
    __introspectable__ = (
        "names",
        "metavar",
        "type",
        "default",
        "descr",
        "required",
    )

    def __init__(self, *names, type=str, default=None, metavar=Unset, descr=Unset, required=False, parent=Unset):
        _sanitize_kind(builtins.type(self), type)
        self._value = Unset
        super().__init__(
            *names,
            descr=descr,
            required=required,
            parent=parent,
            metavar=metavar,
            type=type,
            default=default,
        )

    @property
    def value(self):
        return coalesce(self._value, self._default)

    def at_capacity(self):
        return self._present

    def parse(self, cursor, /):
        token = cursor.token
        match token:
            case Value(text=raw):
                pass
            case LongFlag(value=str() as raw):
                pass
            case _:
                if not cursor.has_more():
                    raise MissingValueError(
                        "flag %r at %s position requires a value" % (token.spelling, ordinal(token.index)),
                        title="missing value",
                        code=FaultCode.MISSING_VALUE,
                        hint="pass it as '%s VALUE' or '--%s=VALUE'" % (
                            token.spelling, self._identity.long
                        ) if self._identity.long else "pass it as '%s VALUE'" % token.spelling,
                        token=token,
                        index=token.index,
                        flag=self,
                        docs=getdoc(FaultCode.MISSING_VALUE),
                    )
                raw = cursor.force_value().text

        index = cursor.token.index
        try:
            value = convert(self._type, raw)
        except Exception as exception:
            raise TypeMismatchError(
                "invalid value %r for flag %r at %s position" % (raw, self._identity.listing(), ordinal(index)),
                title="invalid value",
                code=FaultCode.TYPE_MISMATCH,
                hint=str(exception) or "expected a value of kind %r" % getattr(self._type, "__name__", self._type),
                token=cursor.token,
                index=index,
                flag=self,
                exception=exception,
                docs=getdoc(FaultCode.TYPE_MISMATCH),
            ) from exception

        self._value = value
        self._present = True
        cursor.advance()


class Switch(FlagNode):
    """
    Named presence flag; it takes no value.
    """

    def __init__(self, *names, descr=Unset, required=False, parent=Unset):
        super().__init__(*names, descr=descr, required=required, parent=parent)

    @property
    def value(self):
        return self._present

    def at_capacity(self):
        return self._present

    def parse(self, cursor, /):
        token = cursor.token
        if isinstance(token, LongFlag) and token.value is not None:
            raise UnexpectedValueError(
                "flag %r at %s position does not take a value" % (token.spelling, ordinal(token.index)),
                title="unexpected value",
                code=FaultCode.UNEXPECTED_VALUE,
                hint="drop '=%s' and pass '%s' alone" % (token.value, token.spelling),
                token=token,
                index=token.index,
                flag=self,
                docs=getdoc(FaultCode.UNEXPECTED_VALUE),
            )
        self._present = True
        cursor.advance()


class Vector[_T](FlagNode):
    """
    Collection flag.

    Each dispatch spawns a fresh element carrying the vector's own names: a
    Scalar of 'type', or an instance of 'type' when it is a FlagGroup subclass
    (one record per element). The produced values (or records) are appended in
    order and exposed as 'value'.

    - greedy: after an element, keep going while the current token is a value,
      or a flag the element answers to (when reentrant).
    - reentrant: the enclosing group may dispatch to it again later.

    An element that consumed nothing ends the occurrence without being kept.
    """
    __introspectable__ = (
        "names",
        "metavar",
        "type",
        "greedy",
        "reentrant",
        "descr",
        "required",
    )

    def __init__(self, *names, type=str, greedy=True, reentrant=True, metavar=Unset, descr=Unset, required=False, parent=Unset):
        if not (isinstance(type, FlagType) and issubclass(type, FlagGroup)):
            _sanitize_kind(builtins.type(self), type)
        self._values = []
        self._entered = False
        self._template = Unset
        super().__init__(
            *names,
            descr=descr,
            required=required,
            parent=parent,
            metavar=metavar,
            type=type,
            greedy=bool(greedy),
            reentrant=bool(reentrant),
        )

    @property
    def records(self):
        """
        Whether elements are FlagGroup records rather than converted values.
        """
        return isinstance(self._type, FlagType) and issubclass(self._type, FlagGroup)

    @property
    def value(self):
        return list(self._values)

    @property
    def present(self):
        return self._entered

    def _spawn(self):
        if self.records:
            return self._type(*self._names)
        return Scalar(*self._names, type=self._type)

    def _element(self):
        if self._template is Unset:
            self._template = self._spawn()
        return self._template

    def at_capacity(self):
        return self._entered and not self._reentrant

    def matches(self, token, /):
        return self._element().matches(token)

    def spellings(self):
        return self._element().spellings()

    def parse(self, cursor, /):
        self._entered = True
        while True:
            element = self._spawn()
            mark = cursor.mark()
            element.parse(cursor)
            if cursor.mark() == mark:
                return
            self._values.append(element if self.records else element.value)

            if not self._greedy:
                return
            token = cursor.token
            if isinstance(token, Value):
                continue
            if self._reentrant and element.matches(token):
                continue
            return

    def enforce(self):
        if self.records:
            for record in self._values:
                record.enforce()

    def describe(self, printer, /):
        """
        Record members are listed directly under the vector, one level deep,
        instead of under a nameless record scope of their own.
        """
        printer.enter_flag(self._identity.properties(self._greedy, self._reentrant))
        if self._identity.descr:
            printer.write_block(self._identity.descr)
        if self.records:
            for member in self._element().members:
                member.describe(printer)
        printer.leave_flag()


class Repeated[_T](Vector[_T]):
    """
    Vector taking one value per occurrence: --tag a --tag b.
    """

    def __init__(self, *names, type=str, metavar=Unset, descr=Unset, required=False, parent=Unset):
        super().__init__(
            *names,
            type=type,
            greedy=False,
            reentrant=True,
            metavar=metavar,
            descr=descr,
            required=required,
            parent=parent,
        )


class Sequential[_T](Vector[_T]):
    """
    Vector taking a run of values in a single occurrence: --weights 1 2 3.
    """

    def __init__(self, *names, type=str, metavar=Unset, descr=Unset, required=False, parent=Unset):
        super().__init__(
            *names,
            type=type,
            greedy=True,
            reentrant=False,
            metavar=metavar,
            descr=descr,
            required=required,
            parent=parent,
        )


class FlagGroup(FlagNode):
    """
    Composite node: an ordered set of member flags with long/short indices.

    The root of a flag tree is a nameless FlagGroup (usually a subclass with
    declared members); named groups nest inside it, and FlagGroup subclasses
    passed as a Vector 'type' become repeatable records.

    Class-level members
    - Attributes holding flag nodes are collected per subclass, inherited ones
      first, and copied into every instance under the same attribute name.
    - Attribute names that would hide the FlagGroup API are rejected.
    """
    __introspectable__ = (
        "names",
        "descr",
        "required",
        "members",
    )
    __declarations__ = ()

    def __init_subclass__(cls, **options):
        super().__init_subclass__(**options)
        declarations = dict(cls.__declarations__)
        for name, object in vars(cls).items():
            if not isinstance(object, FlagNode):
                continue
            if hasattr(FlagGroup, name):
                raise TypeError(f"flag attribute {name!r} of {cls.__name__!r} shadows the flag-group interface")
            declarations[name] = object
        cls.__declarations__ = tuple(declarations.items())

    def __init__(self, *names, descr=Unset, required=False, parent=Unset):
        self._members = []
        self._longs = {}
        self._shorts = {}
        self._entered = False
        super().__init__(*names, descr=descr, required=required, parent=parent)
        for name, prototype in type(self).__declarations__:
            setattr(self, name, self.add_flag(copy.deepcopy(prototype)))

    @property
    def present(self):
        return self._entered

    def add_flag(self, flag, /):
        """
        Register a member flag and return it.

        Raises
        - TypeError: the flag is not a node, or is anonymous.
        - ValueError: one of its names is already taken in this group.
        """
        if not isinstance(flag, FlagNode):
            raise TypeError("add_flag() argument must be a flag node")
        if flag is self:
            raise ValueError("a flag group cannot contain itself")
        identity = flag.identity
        if identity.anonymous:
            raise TypeError("add_flag() argument must have a long or a short name")
        if identity.long is not None and identity.long in self._longs:
            raise ValueError("flag name '--%s' is already registered in this group" % identity.long)
        if identity.short is not None and identity.short in self._shorts:
            raise ValueError("flag name '-%s' is already registered in this group" % identity.short)

        self._members.append(flag)
        if identity.long is not None:
            self._longs[identity.long] = flag
        if identity.short is not None:
            self._shorts[identity.short] = flag
        return flag

    def at_capacity(self):
        return self._entered and all(member.at_capacity() for member in self._members)

    def matches(self, token, /):
        return self._identity.matches(token) or any(member.matches(token) for member in self._members)

    def spellings(self):
        spellings = list(self._identity.spellings())
        for member in self._members:
            spellings.extend(spelling for spelling in member.spellings() if spelling not in spellings)
        return tuple(spellings)

    def parse(self, cursor, /):
        token = cursor.token
        match token:
            case LongFlag() | ShortFlag():
                pass
            case Value():
                raise UnexpectedOperandError(
                    "expected a flag name at %s position, got %r" % (ordinal(token.index), token.text),
                    title="unexpected operand",
                    code=FaultCode.UNEXPECTED_OPERAND,
                    hint="values must follow the flag they belong to",
                    token=token,
                    index=token.index,
                    docs=getdoc(FaultCode.UNEXPECTED_OPERAND),
                )
            case _:
                raise MalformedInvocationError(
                    "flag group %r was entered without a flag token (got %r)" % (
                        self._identity.listing() or "<root>", token
                    ),
                    title="malformed invocation",
                    code=FaultCode.MALFORMED_INVOCATION,
                    hint="this is an internal error of the flag parser",
                    token=token,
                    docs=getdoc(FaultCode.MALFORMED_INVOCATION),
                )

        self._entered = True
        if self._identity.matches(token):
            cursor.advance()

        while not cursor.exhausted:
            match cursor.token:
                case LongFlag(name=name):
                    member = self._longs.get(name)
                case ShortFlag(name=name):
                    member = self._shorts.get(name)
                case _:
                    return
            if member is None or member.at_capacity():
                return
            mark = cursor.mark()
            member.parse(cursor)
            if cursor.mark() == mark:
                return

    def enforce(self):
        """
        Check that every required member of every group that took part in
        the parse was given; raises MissingFlagError for the first one missing.
        """
        for member in self._members:
            if member.required and not member.present:
                scope = self._identity.listing()
                raise MissingFlagError(
                    "required flag %r is missing%s" % (
                        member.identity.listing(), " from %r" % scope if scope else ""
                    ),
                    title="missing flag",
                    code=FaultCode.MISSING_FLAG,
                    hint="add '%s'%s" % (
                        member.identity.spellings()[0], " after '%s'" % self._identity.spellings()[0] if scope else ""
                    ),
                    flag=member,
                    docs=getdoc(FaultCode.MISSING_FLAG),
                )
            if member.present:
                member.enforce()

    def describe(self, printer, /):
        printer.enter_flag(self._identity.properties())
        if self._identity.descr:
            printer.write_block(self._identity.descr)
        for member in self._members:
            member.describe(printer)
        printer.leave_flag()

    def print_help(self, file=Unset, /, *, width=Unset, colorful=True):
        """
        Render the help of the whole tree (stdout by default).
        """
        self.describe(BasicHelpPrinter(file, width=width, colorful=colorful))

    def _reject(self, token):
        """
        Internal: build the fault for a token the tree left unconsumed.
        """
        match token:
            case LongFlag() | ShortFlag():
                spellings = self.spellings()
                suggestions = difflib.get_close_matches(token.spelling, spellings, 5)
                if token.spelling in spellings:
                    hint = "%r cannot be given again here, or only belongs inside its group" % token.spelling
                elif suggestions:
                    hint = "did you mean %r?" % suggestions[0]
                else:
                    hint = "print the help to see all available flags"
                return UnrecognizedFlagError(
                    "unrecognized flag %r at %s position" % (token.spelling, ordinal(token.index)),
                    title="unrecognized flag",
                    code=FaultCode.UNRECOGNIZED_FLAG,
                    hint=hint,
                    token=token,
                    index=token.index,
                    suggestions=tuple(suggestions),
                    docs=getdoc(FaultCode.UNRECOGNIZED_FLAG),
                )
            case Value():
                return UnexpectedOperandError(
                    "unexpected value %r at %s position" % (token.text, ordinal(token.index)),
                    title="unexpected operand",
                    code=FaultCode.UNEXPECTED_OPERAND,
                    hint="values must follow the flag they belong to",
                    token=token,
                    index=token.index,
                    docs=getdoc(FaultCode.UNEXPECTED_OPERAND),
                )
            case _:
                return MalformedInvocationError(
                    "parsing stopped on %r before the input ended" % (token,),
                    title="malformed invocation",
                    code=FaultCode.MALFORMED_INVOCATION,
                    hint="this is an internal error of the flag parser",
                    token=token,
                    docs=getdoc(FaultCode.MALFORMED_INVOCATION),
                )

    def parse_args(self, argv=Unset, /, *, shell=True, colorful=True, fancy=False, strict=False):
        """
        Parse an argument vector into this tree.

        Parameters
        - argv: sequence of strings, program name first (defaults to sys.argv).
        - shell: render faults to stderr and return False; otherwise raise them.
        - colorful/fancy: fault rendering options (see deepflags.faults).
        - strict: run enforce() after a successful parse.

        Returns
        - True on success (always when argv has fewer than two elements).
        - False when a fault was rendered in shell mode.
        """
        cursor = ArgumentCursor(coalesce(argv, sys.argv))
        if len(cursor.argv) < 2:
            return True

        cursor.advance()
        try:
            self.parse(cursor)
            if not cursor.exhausted:
                raise self._reject(cursor.token)
            if strict:
                self.enforce()
        except FlagException as fault:
            trigger(
                fault,
                shell=shell,
                colorful=colorful,
                fancy=fancy,
                program=os.path.basename(cursor.argv[0]) or Unset,
            )
            return False
        return True


__all__ = (
    # Types
    "FlagType",
    "FlagIdentity",
    "FlagNode",
    "Scalar",
    "Switch",
    "Vector",
    "Repeated",
    "Sequential",
    "FlagGroup",
)
