"""Multi-file loading through ``#base`` imports.

Files are merged breadth-first: the primary file's own entries come first,
followed by each imported file's entries in the order the imports were
discovered. An imported file is never spliced in at the position of its
``#base`` line. Each file is read at most once; reaching a file a second
time, whether through a cycle or through two import branches, is an error.
"""

import logging
import os
from collections import deque
from pathlib import Path
from typing import Deque, List, Optional, Tuple

from valvekv.config import KvConfig
from valvekv.errors import CyclicImportError
from valvekv.model import KeyValue, KeyValueFile, Section
from valvekv.parser import parse
from valvekv.utils import FileOrPath, ensure_config, handle_read, is_path, origin_dir, read_text_file

logger = logging.getLogger(__name__)


def parse_file(file_or_path: FileOrPath, config: Optional[KvConfig] = None) -> Section:
    """Parse a KeyValues file and every file it imports into one section.

    Args:
        file_or_path: Path of the primary file, or an open file object.
            Imports of a file object resolve against the directory of its
            ``name`` attribute, or the working directory without one.
        config: Optional KeyValues configuration

    Returns:
        Flattened root section.

    Raises:
        KvReadError: If any file cannot be read
        KvEncodingError: If any file is not valid UTF-8
        KvSyntaxError: If any file fails to parse
        CyclicImportError: If a file is imported more than once, including by itself
    """
    config = ensure_config(config, KvConfig)

    if is_path(file_or_path):
        primary = _canonical(Path(file_or_path))
        parsed = parse(read_text_file(file_or_path), config)
    else:
        name = getattr(file_or_path, "name", None)
        primary = _canonical(Path(name)) if isinstance(name, str) and name else "<stream>"
        parsed = parse(handle_read(file_or_path), config)

    return resolve_imports(parsed, origin_dir(file_or_path), config, origin=primary)


def resolve_imports(
    parsed: KeyValueFile,
    base_dir: Path,
    config: Optional[KvConfig] = None,
    origin: str = "<text>",
) -> Section:
    """Merge an already-parsed document with its transitive imports.

    Args:
        parsed: The primary document
        base_dir: Directory its relative imports resolve against
        config: Optional KeyValues configuration
        origin: Identity of the primary document, the first visited path

    Returns:
        Flattened root section.

    Raises:
        CyclicImportError: If any file is reached a second time
    """
    config = ensure_config(config, KvConfig)
    visited = {origin}
    merged: List[KeyValue] = list(parsed.kvs)
    pending: Deque[Tuple[Path, Tuple[str, ...]]] = deque()
    _enqueue(pending, parsed.imports, base_dir, (origin,))

    while pending:
        path, chain = pending.popleft()
        canonical = _canonical(path)
        if canonical in visited:
            raise CyclicImportError(canonical, chain)
        visited.add(canonical)

        current = parse(read_text_file(path), config)
        logger.debug("Merging %d entries from %s", len(current.kvs), path)
        merged.extend(current.kvs)
        _enqueue(pending, current.imports, path.parent, chain + (canonical,))

    return Section(tuple(merged))


def _enqueue(pending: Deque, imports, directory: Path, chain: Tuple[str, ...]) -> None:
    for import_path in imports:
        pending.append((directory / import_path, chain))


def _canonical(path: Path) -> str:
    return os.path.normcase(os.path.realpath(path))
