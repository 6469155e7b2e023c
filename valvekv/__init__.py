"""Valve KeyValues implementation in Python.

Reads and writes the quoted, brace-delimited KeyValues text format and maps
it to and from typed Python values (dataclasses, NamedTuples, enums and the
``typing`` generics) by the shape each type declares.
"""

__version__ = "0.1.0"

from valvekv.errors import (
    KvError,
    KvReadError,
    KvEncodingError,
    KvSyntaxError,
    CyclicImportError,
    KvDecodeError,
    KvEncodeError,
    ExpectedScalarError,
    ExpectedSectionError,
    LiteralParseError,
    CharLengthError,
    UnitMismatchError,
    UnknownVariantError,
    SequenceLengthError,
    UnsupportedTypeError,
    KeyMustBeStringError,
    FloatKeyMustBeFiniteError,
    QuoteInStringError,
    CustomError,
    MissingFieldError,
    DuplicateFieldError,
)
from valvekv.config import KvConfig
from valvekv.model import KeyValue, KeyValueFile, Scalar, Section
from valvekv.parser import parse, parse_text
from valvekv.resolver import parse_file
from valvekv.deserializer import Decoder, from_tree, load, loads
from valvekv.serializer import Encoder, dump, dumps, tree_to_text
from valvekv.formatter import format_text, trim_root
from valvekv.types import Char

__all__ = [
    "parse",
    "parse_text",
    "parse_file",
    "load",
    "loads",
    "from_tree",
    "dump",
    "dumps",
    "tree_to_text",
    "format_text",
    "trim_root",
    "Decoder",
    "Encoder",
    "KvConfig",
    "KeyValue",
    "KeyValueFile",
    "Scalar",
    "Section",
    "Char",
    "KvError",
    "KvReadError",
    "KvEncodingError",
    "KvSyntaxError",
    "CyclicImportError",
    "KvDecodeError",
    "KvEncodeError",
    "ExpectedScalarError",
    "ExpectedSectionError",
    "LiteralParseError",
    "CharLengthError",
    "UnitMismatchError",
    "UnknownVariantError",
    "SequenceLengthError",
    "UnsupportedTypeError",
    "KeyMustBeStringError",
    "FloatKeyMustBeFiniteError",
    "QuoteInStringError",
    "CustomError",
    "MissingFieldError",
    "DuplicateFieldError",
]
