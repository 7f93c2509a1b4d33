"""
File-source adapters for csvinfer.

The parsers only ever see text. This module turns files into text:

- ``read_text()`` reads a whole file (or file-like object) for the batch
  parser.
- ``iter_text_chunks()`` is an async generator yielding decoded
  fragments of a file for the streaming parser. Decoding is incremental
  (``TextIOWrapper``), so a multi-byte character split across a read
  boundary is handled before the parser sees it.

Every read failure (missing file, permission error, bad encoding name,
closed file object, undecodable bytes) is reported as
``SourceReadError``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from pathlib import Path
from typing import IO, Union

from csvinfer.exceptions import SourceReadError

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024

Source = Union[str, Path, IO[str], IO[bytes]]


def read_text(source: Source, encoding: str = "utf-8") -> str:
    """Read an entire file or file-like object as text.

    Args:
        source: A path, or an object with a ``read()`` method returning
            ``str`` or ``bytes``.
        encoding: Used to open paths and to decode ``bytes`` reads.

    Raises:
        SourceReadError: If the source cannot be read or decoded.
    """
    try:
        if hasattr(source, "read"):
            content = source.read()  # type: ignore[union-attr]
            if isinstance(content, (bytes, bytearray)):
                content = bytes(content).decode(encoding)
        else:
            with open(source, "r", encoding=encoding, newline="") as f:
                content = f.read()
    except (OSError, ValueError, LookupError) as exc:
        raise SourceReadError(f"Failed to read {_describe(source)}: {exc}") from exc

    logger.debug("Read %d characters from %s", len(content), _describe(source))
    return content


async def iter_text_chunks(
    path: str | Path,
    encoding: str = "utf-8",
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> AsyncIterator[str]:
    """Yield decoded text fragments of a file.

    Reads run in a worker thread so the event loop is not blocked. The
    file handle is closed on every exit path, including when the
    consumer stops iterating early.

    Raises:
        SourceReadError: If the file cannot be opened, read or decoded.
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    try:
        f = open(path, "r", encoding=encoding, newline="")
    except (OSError, LookupError) as exc:
        raise SourceReadError(f"Failed to open {path}: {exc}") from exc

    try:
        while True:
            try:
                chunk = await asyncio.to_thread(f.read, chunk_size)
            except (OSError, ValueError) as exc:
                raise SourceReadError(f"Failed to read {path}: {exc}") from exc
            if not chunk:
                break
            yield chunk
    finally:
        f.close()
        logger.debug("Closed %s", path)


def _describe(source: Source) -> str:
    if isinstance(source, (str, Path)):
        return str(source)
    return getattr(source, "name", type(source).__name__)
