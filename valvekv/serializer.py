"""Serializer for Valve KeyValues.

Values are written straight to text in one depth-first pass; no tree is
built. Output is then re-indented by :mod:`valvekv.formatter`.
"""

import dataclasses
import enum
import math
from collections.abc import Mapping
from typing import Any, Iterable, List, Optional, Tuple

from valvekv.config import KvConfig
from valvekv.errors import (
    FloatKeyMustBeFiniteError, KeyMustBeStringError, QuoteInStringError, UnsupportedTypeError,
)
from valvekv.formatter import format_text, trim_root
from valvekv.model import KeyValue, KeyValueFile, Scalar, Section
from valvekv.types import KvEncodable
from valvekv.utils import FileOrPath, ensure_config, handle_write


def dumps(value: Any, config: Optional[KvConfig] = None, wrap_root: Optional[bool] = None) -> str:
    """
    Serialize a value to KeyValues text.

    Args:
        value: Value to serialize. Structs (dataclasses, NamedTuples) and
            mappings become sections; lists, tuples, sets and bytes become
            sections keyed ``"0"``, ``"1"``, ...; everything else becomes a
            quoted scalar.
        config: KeyValues configuration with indent and root style.
        wrap_root: Keep the outermost brace pair (an embeddable fragment)
            instead of writing a bare document. Overrides
            ``config.wrap_root`` when given.

    Returns:
        Formatted text, without a trailing newline.

    Raises:
        KvEncodeError: If the value cannot be serialized.
        UnsupportedTypeError: If a bare document is requested for a value
            that is not written as a section.

    Example:
        >>> print(dumps({"a": 42, "b": ["x", "y"]}))
        "a" "42"
        "b"
        {
          "0" "x"
          "1" "y"
        }
    """
    config = ensure_config(config, KvConfig)
    wrap = config.wrap_root if wrap_root is None else wrap_root

    encoder = Encoder(config)
    encoder.encode(value)
    if not wrap and encoder.lines[:1] != ["{"]:
        # A bare document is a list of key-value pairs; a lone scalar has no key.
        raise UnsupportedTypeError(
            "Top-level value must be a struct, map or sequence; use wrap_root=True for a scalar fragment",
            None,
            value,
        )
    text = format_text(encoder.getvalue(), config.indent)
    return text if wrap else trim_root(text, config.indent)


def dump(
    value: Any, file_or_path: FileOrPath, config: Optional[KvConfig] = None, wrap_root: Optional[bool] = None
) -> None:
    """
    Serialize a value to KeyValues text and write it to a file.

    A trailing newline is added.

    Raises:
        KvEncodeError: If the value cannot be serialized.
        IOError: If the file cannot be written.
    """
    serialized = dumps(value, config=config, wrap_root=wrap_root)
    handle_write(file_or_path, serialized + "\n")


def tree_to_text(tree: Any, config: Optional[KvConfig] = None) -> str:
    """Write a parsed tree back out as canonical text.

    Accepts a :class:`Section`, a single :class:`KeyValue`, or a
    :class:`KeyValueFile`, whose imports are written first as ``#base``
    lines. Duplicate keys are kept.
    """
    config = ensure_config(config, KvConfig)
    if isinstance(tree, KeyValueFile):
        header = [f'{config.base_marker} "{path}"' for path in tree.imports]
        body = dumps(tree.kvs, config, wrap_root=False) if tree.kvs else ""
        return "\n".join(header + ([body] if body else []))
    if isinstance(tree, KeyValue):
        tree = Section((tree,))
    return dumps(tree, config, wrap_root=False)


class Encoder:
    """Writes values as flat KeyValues text, one token group per line.

    Custom types can implement ``__kv_encode__(self, encoder)`` and drive
    the encoder through :meth:`scalar`, :meth:`begin_section`,
    :meth:`entry`, :meth:`element` and :meth:`end_section`.
    """

    def __init__(self, config: Optional[KvConfig] = None):
        self.config = ensure_config(config, KvConfig)
        self.lines: List[str] = []
        self._pending_key: Optional[str] = None
        self._path: List[str] = []

    def getvalue(self) -> str:
        return "\n".join(self.lines)

    @property
    def location(self) -> str:
        return ".".join(self._path)

    # -- shape primitives ----------------------------------------------------

    def scalar(self, text: str) -> None:
        """Write a quoted scalar, on the same line as its key if any."""
        quoted = self._quote(text)
        key = self._take_key()
        self.lines.append(quoted if key is None else f"{key} {quoted}")

    def begin_section(self) -> None:
        key = self._take_key()
        if key is not None:
            self.lines.append(key)
        self.lines.append("{")

    def end_section(self) -> None:
        self.lines.append("}")

    def entry(self, key: Any, value: Any) -> None:
        """Write one keyed child of the open section."""
        text = self._key_text(key)
        self._pending_key = self._quote(text)
        self._path.append(text)
        self.encode(value)
        self._path.pop()

    def element(self, index: int, value: Any) -> None:
        """Write one positional child of the open section."""
        self.entry(str(index), value)

    def none(self) -> None:
        self.scalar("")

    def variant(self, member: enum.Enum) -> None:
        self.scalar(member.name)

    def sequence(self, items: Iterable[Any]) -> None:
        self.begin_section()
        for index, item in enumerate(items):
            self.element(index, item)
        self.end_section()

    def mapping(self, items: Iterable[Tuple[Any, Any]]) -> None:
        self.begin_section()
        for key, item in items:
            self.entry(key, item)
        self.end_section()

    # -- dispatch ------------------------------------------------------------

    def encode(self, value: Any) -> None:
        """Write any supported value."""
        if isinstance(value, KvEncodable) and not isinstance(value, type):
            value.__kv_encode__(self)
        elif value is None:
            self.none()
        elif isinstance(value, Scalar):
            self.scalar(value.text)
        elif isinstance(value, Section):
            self.mapping((kv.key, kv.value) for kv in value)
        elif isinstance(value, enum.Enum):
            self.variant(value)
        elif isinstance(value, bool):
            self.scalar("1" if value else "0")
        elif isinstance(value, int):
            self.scalar(str(int(value)))
        elif isinstance(value, float):
            self.scalar(repr(float(value)))
        elif isinstance(value, str):
            self.scalar(str(value))
        elif isinstance(value, (bytes, bytearray)):
            self.sequence(value)
        elif dataclasses.is_dataclass(value) and not isinstance(value, type):
            self.mapping((f.name, getattr(value, f.name)) for f in dataclasses.fields(value))
        elif isinstance(value, tuple) and hasattr(value, "_asdict"):
            self.mapping(value._asdict().items())
        elif isinstance(value, Mapping):
            self.mapping(value.items())
        elif isinstance(value, (list, tuple, set, frozenset)):
            self.sequence(value)
        else:
            raise UnsupportedTypeError(
                f"Unsupported value type: {type(value).__name__}", self.location, value
            )

    # -- helpers -------------------------------------------------------------

    def _take_key(self) -> Optional[str]:
        key, self._pending_key = self._pending_key, None
        return key

    def _quote(self, text: str) -> str:
        if '"' in text:
            raise QuoteInStringError(
                f"Cannot write string containing a quote character: {text!r}", self.location, text
            )
        return f'"{text}"'

    def _key_text(self, key: Any) -> str:
        """Canonical string form of a map key."""
        if isinstance(key, enum.Enum):
            return key.name
        if isinstance(key, bool):
            return "1" if key else "0"
        if isinstance(key, int):
            return str(int(key))
        if isinstance(key, float):
            if not math.isfinite(key):
                raise FloatKeyMustBeFiniteError(
                    f"Float map key must be finite, got {key!r}", self.location, key
                )
            return repr(float(key))
        if isinstance(key, str):
            return str(key)
        raise KeyMustBeStringError(
            f"Keys must be strings, got {type(key).__name__}", self.location, key
        )
