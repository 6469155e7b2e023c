"""Utility functions for KeyValues processing."""

import logging
import os
from pathlib import Path
from typing import BinaryIO, Callable, Optional, TextIO, TypeVar, Union

from valvekv.errors import KvEncodingError, KvReadError

logger = logging.getLogger(__name__)

# Type definitions
FileOrPath = Union[str, "os.PathLike[str]", TextIO, BinaryIO]
T = TypeVar('T')


def is_path(file_or_path: FileOrPath) -> bool:
    """Return True if the argument names a file rather than being one."""
    return isinstance(file_or_path, (str, os.PathLike))


def read_text_file(path: Union[str, "os.PathLike[str]"]) -> str:
    """
    Read a whole file and decode it as UTF-8.

    The handle is released before the text is returned.

    Raises:
        KvReadError: If the file cannot be read
        KvEncodingError: If the bytes are not valid UTF-8
    """
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise KvReadError(f"Cannot read file ({e.strerror or e})", os.fspath(path)) from e

    logger.debug("Read %d bytes from %s", len(data), path)
    return decode_bytes(data, os.fspath(path))


def decode_bytes(data: bytes, origin: Optional[str] = None) -> str:
    """Decode raw bytes as UTF-8 text."""
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise KvEncodingError(f"Invalid UTF-8 at byte {e.start}", origin) from e


def handle_read(file_or_path: FileOrPath) -> str:
    """
    Read content from a file path or file-like object.

    Args:
        file_or_path: File path string, Path object, or file-like object

    Returns:
        String content of the file

    Raises:
        KvReadError: If the file cannot be read
        KvEncodingError: If the file is not valid UTF-8
    """
    if is_path(file_or_path):
        return read_text_file(file_or_path)

    name = getattr(file_or_path, "name", None)
    try:
        content = file_or_path.read()
    except OSError as e:
        raise KvReadError(f"Cannot read stream ({e})", name if isinstance(name, str) else None) from e
    if isinstance(content, (bytes, bytearray)):
        return decode_bytes(bytes(content), name)
    return content


def handle_write(file_or_path: FileOrPath, content: str) -> None:
    """
    Write content to a file path or file-like object.

    Args:
        file_or_path: File path string, Path object, or file-like object
        content: String content to write

    Raises:
        IOError: If the file cannot be written
    """
    if is_path(file_or_path):
        with open(file_or_path, "w", encoding="utf-8") as f:
            f.write(content)
    else:
        file_or_path.write(content)


def origin_dir(file_or_path: FileOrPath) -> Path:
    """Directory that relative imports of this source resolve against."""
    if is_path(file_or_path):
        return Path(file_or_path).parent
    name = getattr(file_or_path, "name", None)
    if isinstance(name, str) and name and not name.startswith("<"):
        return Path(name).parent
    return Path(".")


def ensure_config(config: Optional[T], default_factory: Callable[[], T]) -> T:
    """Ensure config is not None, creating default if needed."""
    return config if config is not None else default_factory()
