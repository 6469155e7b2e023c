"""In-memory KeyValues tree.

A section is an ordered sequence of key/value pairs, not a mapping: keys
may repeat and every occurrence is kept in source order.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union


@dataclass(frozen=True)
class Scalar:
    """Leaf node holding literal text."""

    text: str = ""

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Section:
    """Compound node holding ordered key/value children."""

    items: Tuple["KeyValue", ...] = ()

    def __post_init__(self):
        if not isinstance(self.items, tuple):
            object.__setattr__(self, "items", tuple(self.items))

    def __iter__(self) -> Iterator["KeyValue"]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __bool__(self) -> bool:
        return bool(self.items)

    def keys(self) -> List[str]:
        """Keys in source order, duplicates included."""
        return [kv.key for kv in self.items]

    def get(self, key: str, default: Optional["Value"] = None) -> Optional["Value"]:
        """Value of the first child named ``key``."""
        for kv in self.items:
            if kv.key == key:
                return kv.value
        return default

    def get_all(self, key: str) -> List["Value"]:
        """Values of every child named ``key``, in source order."""
        return [kv.value for kv in self.items if kv.key == key]

    def extend(self, other: "Section") -> "Section":
        """New section with ``other``'s children appended."""
        return Section(self.items + tuple(other.items))

    def to_dict(self) -> Dict[str, Any]:
        """Plain nested dicts; a repeated key keeps its last value."""
        return {kv.key: _plain(kv.value) for kv in self.items}


Value = Union[Scalar, Section]


@dataclass(frozen=True)
class KeyValue:
    """A key paired with a scalar or a nested section."""

    key: str
    value: Value = field(default_factory=Scalar)


@dataclass(frozen=True)
class KeyValueFile:
    """Result of parsing one document: its root entries and its imports."""

    kvs: Section = field(default_factory=Section)
    imports: Tuple[str, ...] = ()


def _plain(value: Value) -> Any:
    if isinstance(value, Section):
        return value.to_dict()
    return value.text


def shape_name(value: Value) -> str:
    """Human-readable node kind for error messages."""
    return "section" if isinstance(value, Section) else "scalar"
