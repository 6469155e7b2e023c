"""Parser for Valve KeyValues text.

Builds the :mod:`valvekv.model` tree from the tokenizer's parse nodes.
Import directives are collected but not followed here; see
:mod:`valvekv.resolver` for multi-file loading.
"""

from typing import List, Optional

from valvekv.config import KvConfig
from valvekv.model import KeyValue, KeyValueFile, Scalar, Section
from valvekv.tokenizer import IMPORT, KEY, KEYVALUE, SECTION, VALUE, ParseNode, tokenize
from valvekv.utils import ensure_config


def parse(text: str, config: Optional[KvConfig] = None) -> KeyValueFile:
    """Parse KeyValues text into its root section and import list.

    Args:
        text: KeyValues text to parse
        config: Optional KeyValues configuration

    Returns:
        KeyValueFile whose ``kvs`` holds the root entries in source order
        and whose ``imports`` holds every ``#base`` path in source order.

    Raises:
        KvSyntaxError: If the text does not match the grammar

    Example:
        >>> parse('#base "common.kv"\\n"name" "value"')
        KeyValueFile(kvs=Section(items=(KeyValue(key='name', value=Scalar(text='value')),)), imports=('common.kv',))
    """
    config = ensure_config(config, KvConfig)
    root = tokenize(text, config)
    return build_file(root, config)


parse_text = parse


def build_file(root: ParseNode, config: Optional[KvConfig] = None) -> KeyValueFile:
    """Convert a ``file`` parse node into a KeyValueFile."""
    config = ensure_config(config, KvConfig)
    kvs: List[KeyValue] = []
    imports: List[str] = []

    for node in root.children:
        if node.kind == KEYVALUE:
            kvs.append(_build_keyvalue(node))
        elif node.kind == IMPORT:
            imports.append(_import_path(node.text, config.base_marker))

    return KeyValueFile(kvs=Section(tuple(kvs)), imports=tuple(imports))


def _build_section(node: ParseNode) -> Section:
    return Section(tuple(_build_keyvalue(child) for child in node.children if child.kind == KEYVALUE))


def _build_keyvalue(node: ParseNode) -> KeyValue:
    key = ""
    value = Scalar()
    for child in node.children:
        if child.kind == KEY:
            key = _strip_quotes(child.text)
        elif child.kind == VALUE:
            value = Scalar(_strip_quotes(child.text))
        elif child.kind == SECTION:
            value = _build_section(child)
    return KeyValue(key, value)


def _strip_quotes(text: str) -> str:
    """Drop the first and last characters of a quoted token."""
    return text[1:-1]


def _import_path(text: str, marker: str) -> str:
    """Extract the path from ``#base "path"``."""
    if text.startswith(marker):
        text = text[len(marker):]
    return text.strip().strip('"').strip()
