"""Marker types and hook protocols for the typed codec."""

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from valvekv.deserializer import Decoder
    from valvekv.serializer import Encoder


class Char(str):
    """A string of exactly one character.

    Declaring a field as ``Char`` makes the decoder reject scalars of any
    other length with :class:`~valvekv.errors.CharLengthError`.
    """

    def __new__(cls, value: str = "") -> "Char":
        if len(value) != 1:
            raise ValueError(f"Char must be exactly one character, got {len(value)}")
        return super().__new__(cls, value)

    def __repr__(self) -> str:
        return f"Char({str.__repr__(self)})"


@runtime_checkable
class KvEncodable(Protocol):
    """Values that write themselves through an :class:`Encoder`."""

    def __kv_encode__(self, encoder: "Encoder") -> None:
        ...


@runtime_checkable
class KvDecodable(Protocol):
    """Types that build themselves from a :class:`Decoder`.

    ``__kv_decode__`` is looked up on the class and must be a classmethod.
    """

    @classmethod
    def __kv_decode__(cls, decoder: "Decoder") -> Any:
        ...
