"""Deserializer for Valve KeyValues.

Decoding is pull-based: the requested Python type decides which shape is
expected at each node, and the :class:`Decoder` checks the node against
that expectation.

=========================  ==========  ====================================
Requested type             Node        Rule
=========================  ==========  ====================================
int, float                 scalar      standard numeric text
str                        scalar      verbatim
Char                       scalar      exactly one character
bool                       scalar      ``"0"`` or ``"1"`` only
Optional[T]                scalar      ``""`` is None, else decode as T
None                       scalar      must be ``""``
Enum subclass              scalar      member name
list, tuple, set, bytes    section     elements in sorted key order
dict, Mapping              section     entries in source order
dataclass, NamedTuple      section     fields by key, source order
NewType                    --          as its supertype
Any                        either      str or dict
=========================  ==========  ====================================
"""

import collections.abc
import dataclasses
import enum
import re
import types
from typing import (
    Any, Callable, Dict, Iterator, List, Optional, Tuple, Type, TypeVar, Union,
    get_args, get_origin, get_type_hints,
)

from valvekv.config import KvConfig
from valvekv.errors import (
    CharLengthError, DuplicateFieldError, ExpectedScalarError, ExpectedSectionError,
    LiteralParseError, MissingFieldError, SequenceLengthError, UnitMismatchError,
    UnknownVariantError, UnsupportedTypeError,
)
from valvekv.model import KeyValue, KeyValueFile, Scalar, Section, Value, shape_name
from valvekv.parser import parse
from valvekv.resolver import parse_file
from valvekv.types import Char
from valvekv.utils import FileOrPath, ensure_config

T = TypeVar("T")
NoneType = type(None)
_UNION_ORIGINS = tuple(u for u in (Union, getattr(types, "UnionType", None)) if u is not None)

_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE,
)

_LIST_ORIGINS = (list, collections.abc.Sequence, collections.abc.MutableSequence)
_SET_ORIGINS = (set, collections.abc.Set, collections.abc.MutableSet)
_MAP_ORIGINS = (dict, collections.abc.Mapping, collections.abc.MutableMapping)


def loads(text: str, tp: Any = Any, config: Optional[KvConfig] = None) -> Any:
    """Parse KeyValues text and decode it as ``tp``.

    ``#base`` directives in the text are ignored; use :func:`load` to
    follow them.

    Args:
        text: KeyValues text
        tp: Type to decode into. Defaults to ``Any``, which yields plain
            nested dicts of strings.
        config: Optional KeyValues configuration

    Raises:
        KvSyntaxError: If the text fails to parse
        KvDecodeError: If the tree does not fit ``tp``

    Example:
        >>> @dataclasses.dataclass
        ... class Player:
        ...     name: str
        ...     score: int
        >>> loads('"name" "gordon" "score" "3"', Player)
        Player(name='gordon', score=3)
    """
    config = ensure_config(config, KvConfig)
    return from_tree(parse(text, config), tp, config)


def load(file_or_path: FileOrPath, tp: Any = Any, config: Optional[KvConfig] = None) -> Any:
    """Load a KeyValues file, following its ``#base`` imports, and decode it as ``tp``."""
    config = ensure_config(config, KvConfig)
    return from_tree(parse_file(file_or_path, config), tp, config)


def from_tree(tree: Union[Value, KeyValueFile], tp: Any = Any, config: Optional[KvConfig] = None) -> Any:
    """Decode an already-built tree as ``tp``."""
    if isinstance(tree, KeyValueFile):
        tree = tree.kvs
    return Decoder(tree, ensure_config(config, KvConfig)).decode(tp)


class Decoder:
    """Reads one tree node as whatever shape the caller asks for.

    Custom types can implement a ``__kv_decode__`` classmethod that receives
    a Decoder and pulls from it with :meth:`expect_scalar`,
    :meth:`sequence`, :meth:`entries` and :meth:`decode`.
    """

    def __init__(self, node: Value, config: Optional[KvConfig] = None, path: Tuple[str, ...] = ()):
        self.node = node
        self.config = ensure_config(config, KvConfig)
        self.path = path

    @property
    def location(self) -> str:
        return ".".join(self.path)

    def _child(self, node: Value, key: str) -> "Decoder":
        return Decoder(node, self.config, self.path + (key,))

    # -- structural access -------------------------------------------------

    def expect_scalar(self) -> str:
        """Text of the current node, which must be a scalar."""
        if not isinstance(self.node, Scalar):
            raise ExpectedScalarError(
                f"Expected scalar, found {shape_name(self.node)}", self.location, self.node
            )
        return self.node.text

    def expect_section(self) -> Section:
        """The current node, which must be a section."""
        if not isinstance(self.node, Section):
            raise ExpectedSectionError(
                f"Expected section, found {shape_name(self.node)} '{self.node.text}'",
                self.location,
                self.node,
            )
        return self.node

    def sequence(self) -> Iterator["Decoder"]:
        """Element decoders in sequence order; keys are only used for sorting."""
        section = self.expect_section()
        ordered = sorted(section, key=_sequence_sort_key(self.config.sequence_order))
        for kv in ordered:
            yield self._child(kv.value, kv.key)

    def entries(self) -> Iterator[Tuple["Decoder", "Decoder"]]:
        """(key, value) decoders in source order."""
        section = self.expect_section()
        for kv in section:
            yield self._child(Scalar(kv.key), kv.key), self._child(kv.value, kv.key)

    # -- scalars -------------------------------------------------------------

    def decode_bool(self) -> bool:
        text = self.expect_scalar()
        if text == "0":
            return False
        if text == "1":
            return True
        raise LiteralParseError(f"Cannot parse '{text}' as bool, expected '0' or '1'", self.location, text)

    def decode_int(self, tp: Type[int] = int) -> int:
        text = self.expect_scalar()
        if not _INT_RE.fullmatch(text):
            raise LiteralParseError(f"Cannot parse '{text}' as {tp.__name__}", self.location, text)
        return tp(int(text))

    def decode_float(self, tp: Type[float] = float) -> float:
        text = self.expect_scalar()
        if not _FLOAT_RE.fullmatch(text):
            raise LiteralParseError(f"Cannot parse '{text}' as {tp.__name__}", self.location, text)
        return tp(float(text))

    def decode_str(self, tp: Type[str] = str) -> str:
        text = self.expect_scalar()
        return text if tp is str else tp(text)

    def decode_char(self) -> Char:
        text = self.expect_scalar()
        if len(text) != 1:
            raise CharLengthError(
                f"Expected a single character, got {len(text)} characters", self.location, text
            )
        return Char(text)

    def decode_unit(self) -> None:
        text = self.expect_scalar()
        if text:
            raise UnitMismatchError(f"Expected empty value for unit, got '{text}'", self.location, text)
        return None

    def decode_byte(self) -> int:
        value = self.decode_int()
        if not 0 <= value <= 255:
            raise LiteralParseError(f"Byte value {value} out of range", self.location, value)
        return value

    def decode_enum(self, tp: Type[enum.Enum]) -> enum.Enum:
        name = self.expect_scalar()
        try:
            return tp[name]
        except KeyError:
            choices = ", ".join(member.name for member in tp)
            raise UnknownVariantError(
                f"Unknown variant '{name}' for {tp.__name__}, expected one of {choices}",
                self.location,
                name,
            ) from None

    # -- compound ------------------------------------------------------------

    def decode_option(self, inner: Any) -> Any:
        # A section can only hold a present value; scalars follow the "" rule.
        if isinstance(self.node, Scalar) and self.node.text == "":
            return None
        return self.decode(inner)

    def decode_list(self, item_type: Any = Any) -> List[Any]:
        return [element.decode(item_type) for element in self.sequence()]

    def decode_tuple(self, item_types: Tuple[Any, ...]) -> Tuple[Any, ...]:
        elements = list(self.sequence())
        if len(elements) != len(item_types):
            raise SequenceLengthError(
                f"Expected {len(item_types)} elements, found {len(elements)}", self.location
            )
        return tuple(element.decode(t) for element, t in zip(elements, item_types))

    def decode_map(self, key_type: Any = Any, value_type: Any = Any, factory: Callable = dict) -> Any:
        result = {}
        for key, value in self.entries():
            result[key.decode(key_type)] = value.decode(value_type)
        return result if factory is dict else factory(result)

    def decode_struct(self, tp: Type[T]) -> T:
        self.expect_section()
        fields = _struct_fields(tp)
        values: Dict[str, Any] = {}

        for key, value in self.entries():
            name = key.expect_scalar()
            if name not in fields:
                continue
            if name in values:
                raise DuplicateFieldError(
                    f"Duplicate field '{name}' for {tp.__name__}", value.location, name
                )
            values[name] = value.decode(fields[name][0])

        for name, (field_type, required) in fields.items():
            if name in values or not required:
                continue
            if _optional_inner(field_type) is not None:
                values[name] = None
            else:
                raise MissingFieldError(
                    f"Missing field '{name}' for {tp.__name__}", self.location, name
                )

        return tp(**values)

    def decode_any(self) -> Any:
        if isinstance(self.node, Scalar):
            return self.node.text
        return self.decode_map(str, Any)

    # -- dispatch ------------------------------------------------------------

    def decode(self, tp: Any) -> Any:
        """Decode the current node as ``tp``."""
        if tp is Any or tp is object:
            return self.decode_any()

        supertype = getattr(tp, "__supertype__", None)
        if supertype is not None:
            return self.decode(supertype)

        inner = _optional_inner(tp)
        if inner is not None:
            return self.decode_option(inner)

        if tp is None or tp is NoneType:
            return self.decode_unit()

        origin = get_origin(tp)
        if origin is not None:
            return self._decode_generic(tp, origin, get_args(tp))

        if not isinstance(tp, type):
            raise UnsupportedTypeError(f"Cannot decode into {tp!r}", self.location)

        hook = getattr(tp, "__kv_decode__", None)
        if hook is not None:
            return hook(self)

        if issubclass(tp, enum.Enum):
            return self.decode_enum(tp)
        if issubclass(tp, bool):
            return self.decode_bool()
        if issubclass(tp, int):
            return self.decode_int(tp)
        if issubclass(tp, float):
            return self.decode_float(tp)
        if issubclass(tp, Char):
            return self.decode_char()
        if issubclass(tp, str):
            return self.decode_str(tp)
        if issubclass(tp, (bytes, bytearray)):
            return tp(element.decode_byte() for element in self.sequence())
        if dataclasses.is_dataclass(tp) or _is_namedtuple(tp):
            return self.decode_struct(tp)
        if issubclass(tp, tuple):
            return tuple(self.decode_list())
        if issubclass(tp, (set, frozenset)):
            return tp(self.decode_list())
        if issubclass(tp, list):
            return self.decode_list()
        if issubclass(tp, dict):
            return self.decode_map(factory=tp)

        raise UnsupportedTypeError(f"Cannot decode into {tp.__name__}", self.location)

    def _decode_generic(self, tp: Any, origin: Any, args: Tuple[Any, ...]) -> Any:
        if origin in _UNION_ORIGINS:
            raise UnsupportedTypeError(f"Cannot decode into {tp!r}; only Optional unions are supported", self.location)
        if origin is tuple:
            # Bare Tuple has no args; so does Tuple[()] on Python 3.11+.
            if tp is Tuple or (len(args) == 2 and args[1] is Ellipsis):
                item_type = args[0] if args else Any
                return tuple(self.decode_list(item_type))
            if not args or args == ((),):
                return self.decode_tuple(())
            return self.decode_tuple(args)
        if origin in _LIST_ORIGINS:
            return self.decode_list(args[0] if args else Any)
        if origin is frozenset:
            return frozenset(self.decode_list(args[0] if args else Any))
        if origin in _SET_ORIGINS:
            return set(self.decode_list(args[0] if args else Any))
        if origin in _MAP_ORIGINS:
            key_type, value_type = args if args else (Any, Any)
            return self.decode_map(key_type, value_type)
        raise UnsupportedTypeError(f"Cannot decode into {tp!r}", self.location)


def _sequence_sort_key(order: str) -> Callable[[KeyValue], Any]:
    if order == "lexicographic":
        return lambda kv: kv.key

    def numeric(kv: KeyValue) -> Tuple[int, int, str]:
        if _INT_RE.fullmatch(kv.key):
            return (0, int(kv.key), "")
        return (1, 0, kv.key)

    return numeric


def _optional_inner(tp: Any) -> Any:
    """``T`` for ``Optional[T]``, else None."""
    if get_origin(tp) not in _UNION_ORIGINS:
        return None
    args = get_args(tp)
    if len(args) != 2 or NoneType not in args:
        return None
    return args[0] if args[1] is NoneType else args[1]


def _is_namedtuple(tp: type) -> bool:
    return issubclass(tp, tuple) and hasattr(tp, "_fields")


def _struct_fields(tp: type) -> Dict[str, Tuple[Any, bool]]:
    """Field name -> (type, required) in declaration order."""
    hints = get_type_hints(tp)
    if dataclasses.is_dataclass(tp):
        return {
            f.name: (
                hints.get(f.name, Any),
                f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING,
            )
            for f in dataclasses.fields(tp)
            if f.init
        }
    defaults = getattr(tp, "_field_defaults", {})
    return {name: (hints.get(name, Any), name not in defaults) for name in tp._fields}
