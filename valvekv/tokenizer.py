"""Tokenizer for KeyValues text.

Turns raw text into a positional parse tree of :class:`ParseNode` objects
tagged ``file``, ``import``, ``keyvalue``, ``key``, ``value`` and
``section``. Grammar::

    file          := (import | keyvalue)*
    import        := "#base" quoted-string
    keyvalue      := key (value | section)
    key           := quoted-string
    value         := quoted-string
    section       := "{" keyvalue* "}"
    quoted-string := '"' characters-without-quote '"'

Whitespace and ``//`` line comments between tokens are ignored.
"""

from bisect import bisect_right
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from valvekv.config import KvConfig
from valvekv.errors import KvSyntaxError
from valvekv.utils import ensure_config

# Security limits to prevent DoS attacks
MAX_INPUT_SIZE = 10 * 1024 * 1024  # maximum input size in characters

FILE = "file"
IMPORT = "import"
KEYVALUE = "keyvalue"
KEY = "key"
VALUE = "value"
SECTION = "section"

_QUOTED = "quoted string"
_END = "end of input"


@dataclass
class ParseNode:
    """A node of the positional parse tree."""

    kind: str
    text: str
    line: int
    column: int
    children: List["ParseNode"] = field(default_factory=list)

    def child(self, kind: str) -> Optional["ParseNode"]:
        for node in self.children:
            if node.kind == kind:
                return node
        return None


def tokenize(text: str, config: Optional[KvConfig] = None) -> ParseNode:
    """Tokenize KeyValues text into a ``file`` parse node.

    Raises:
        KvSyntaxError: If the text does not match the grammar
    """
    config = ensure_config(config, KvConfig)
    if len(text) > MAX_INPUT_SIZE:
        raise KvSyntaxError(f"Input exceeds maximum size of {MAX_INPUT_SIZE} characters")
    return _Scanner(text, config).scan_file()


class _Scanner:
    def __init__(self, text: str, config: KvConfig):
        self.text = text
        self.pos = 0
        self.config = config
        self.marker = config.base_marker
        self._line_starts = [0]
        for i, ch in enumerate(text):
            if ch == "\n":
                self._line_starts.append(i + 1)

    def position(self, index: int) -> Tuple[int, int]:
        """1-based (line, column) of a text index."""
        line = bisect_right(self._line_starts, index)
        return line, index - self._line_starts[line - 1] + 1

    def error(self, message: str, index: int, expected=()) -> KvSyntaxError:
        line, column = self.position(index)
        return KvSyntaxError(message, line, column, expected)

    def node(self, kind: str, start: int, children=None) -> ParseNode:
        line, column = self.position(start)
        return ParseNode(kind, self.text[start:self.pos], line, column, children or [])

    def skip_ignored(self) -> None:
        text = self.text
        while self.pos < len(text):
            ch = text[self.pos]
            if ch.isspace():
                self.pos += 1
            elif text.startswith("//", self.pos):
                end = text.find("\n", self.pos)
                self.pos = len(text) if end == -1 else end + 1
            else:
                break

    def peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def describe(self) -> str:
        ch = self.peek()
        return f"unexpected {ch!r}" if ch else "unexpected end of input"

    def scan_file(self) -> ParseNode:
        start = self.pos
        children = []
        while True:
            self.skip_ignored()
            if self.pos >= len(self.text):
                break
            if self.text.startswith(self.marker, self.pos):
                children.append(self.scan_import())
            elif self.peek() == '"':
                children.append(self.scan_keyvalue(0))
            else:
                raise self.error(
                    f"Syntax error: {self.describe()}",
                    self.pos,
                    {self.marker, _QUOTED, _END},
                )
        self.pos = len(self.text)
        return self.node(FILE, start, children)

    def scan_import(self) -> ParseNode:
        start = self.pos
        self.pos += len(self.marker)
        self.skip_ignored()
        if self.peek() != '"':
            raise self.error(f"Syntax error: {self.describe()}", self.pos, {_QUOTED})
        self.scan_quoted()
        return self.node(IMPORT, start)

    def scan_keyvalue(self, depth: int) -> ParseNode:
        start = self.pos
        key = self.scan_quoted(KEY)
        self.skip_ignored()
        ch = self.peek()
        if ch == '"':
            value = self.scan_quoted(VALUE)
        elif ch == "{":
            value = self.scan_section(depth + 1)
        else:
            raise self.error(f"Syntax error: {self.describe()}", self.pos, {_QUOTED, "{"})
        return self.node(KEYVALUE, start, [key, value])

    def scan_section(self, depth: int) -> ParseNode:
        if depth > self.config.max_depth:
            raise self.error(
                f"Maximum nesting depth of {self.config.max_depth} exceeded", self.pos
            )
        start = self.pos
        self.pos += 1
        children = []
        while True:
            self.skip_ignored()
            ch = self.peek()
            if ch == "}":
                self.pos += 1
                return self.node(SECTION, start, children)
            if ch == '"':
                children.append(self.scan_keyvalue(depth))
            elif not ch:
                raise self.error("Unterminated section", start, {_QUOTED, "}"})
            else:
                raise self.error(f"Syntax error: {self.describe()}", self.pos, {_QUOTED, "}"})

    def scan_quoted(self, kind: str = VALUE) -> ParseNode:
        start = self.pos
        end = self.text.find('"', start + 1)
        if end == -1:
            raise self.error("Unterminated quoted string", start, {'"'})
        self.pos = end + 1
        return self.node(kind, start)
