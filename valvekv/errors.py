"""Custom exceptions for KeyValues processing."""

from typing import Any, FrozenSet, Iterable, Optional, Sequence


class KvError(Exception):
    """Base exception for KeyValues errors."""


class KvReadError(KvError, OSError):
    """A KeyValues file could not be read."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        self.path = path
        location = f" '{path}'" if path is not None else ""
        super().__init__(f"{message}{location}")


class KvEncodingError(KvError, UnicodeError):
    """A KeyValues file is not valid UTF-8 text."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        self.path = path
        location = f" in '{path}'" if path is not None else ""
        super().__init__(f"{message}{location}")


class KvSyntaxError(KvError):
    """Error during tokenizing KeyValues text."""

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
        expected: Iterable[str] = (),
    ) -> None:
        self.line = line
        self.column = column
        self.expected: FrozenSet[str] = frozenset(expected)
        error_location = ""
        if line is not None:
            error_location = f" at line {line}"
            if column is not None:
                error_location += f", column {column}"
        if self.expected:
            error_location += f" (expected {', '.join(sorted(self.expected))})"
        super().__init__(f"{message}{error_location}")


class CyclicImportError(KvError):
    """A file is imported a second time, through a cycle or a repeated import."""

    def __init__(self, path: str, chain: Sequence[str]) -> None:
        self.path = path
        self.chain = tuple(chain)
        cycle = " -> ".join(list(self.chain) + [path])
        super().__init__(f"Cyclic or repeated #base import: {cycle}")


class KvPathError(KvError):
    """Base for errors that point at a location inside a value tree."""

    def __init__(self, message: str, path: Optional[str] = None, value: Optional[Any] = None) -> None:
        self.path = path
        self.value = value
        location_info = ""
        if path:
            location_info = f" at path '{path}'"
        super().__init__(f"{message}{location_info}")


class KvDecodeError(KvPathError):
    """Error during converting a KeyValues tree into a typed value."""


class KvEncodeError(KvPathError):
    """Error during converting a typed value into KeyValues text."""


class ExpectedScalarError(KvDecodeError):
    """A section was found where a scalar value was requested."""


class ExpectedSectionError(KvDecodeError):
    """A scalar was found where a section was requested."""


class LiteralParseError(KvDecodeError):
    """Scalar text could not be parsed as the requested primitive."""


class CharLengthError(KvDecodeError):
    """A char was requested but the scalar is not exactly one character."""


class UnitMismatchError(KvDecodeError):
    """A unit was requested but the scalar is not empty."""


class UnknownVariantError(KvDecodeError):
    """Scalar text names no member of the requested enum."""


class SequenceLengthError(KvDecodeError):
    """A fixed-length tuple got the wrong number of elements."""


class UnsupportedTypeError(KvDecodeError, KvEncodeError):
    """The requested type or the given value has no KeyValues shape."""


class KeyMustBeStringError(KvEncodeError):
    """A map key cannot be rendered as a string."""


class FloatKeyMustBeFiniteError(KvEncodeError):
    """A float map key is NaN or infinite."""


class QuoteInStringError(KvEncodeError):
    """A string contains a quote character and cannot be written."""


class CustomError(KvDecodeError, KvEncodeError):
    """Error raised by user decode/encode hooks."""


class MissingFieldError(CustomError):
    """A struct field is absent and has no default."""


class DuplicateFieldError(CustomError):
    """A struct field appears more than once in a section."""
