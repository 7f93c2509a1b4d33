"""
csvinfer: typed CSV parsing for complete texts and chunked streams.

Public API surface:

- ``parse(text, ...)`` -- parse a complete CSV text into a
  ``ParseResult`` (columns with inferred types, header, typed rows).

- ``parse_file(source, ...)`` -- same, reading a path or file-like
  object with the configured encoding.

- ``stream(source, ...)`` -- **incremental** parse of text fragments
  (any iterable or async iterable of ``str``). Returns an async
  iterator of cumulative ``ParseResult`` snapshots.

- ``stream_file(path, ...)`` -- stream a file in fixed-size fragments.

Every function accepts a ``ParserOptions`` instance and/or keyword
overrides of its fields::

    result = csvinfer.parse("a;b\\n1;2", delimiter=";")

    async for snapshot in csvinfer.stream(fragments, max_rows=100):
        render(snapshot.rows)
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Any

from csvinfer.config import (
    DEFAULT_DATE_FORMATS,
    DateFormats,
    ParserOptions,
    load_options,
    save_options,
)
from csvinfer.detect import TypedCell, detect_type
from csvinfer.parsers import BatchParser, ParseResult, StreamParser, StreamSession
from csvinfer.reader import DEFAULT_CHUNK_SIZE, Source
from csvinfer.schema import ColumnDescriptor
from csvinfer.tokenizer import tokenize_row

__all__ = [
    "parse",
    "parse_file",
    "stream",
    "stream_file",
    "BatchParser",
    "StreamParser",
    "StreamSession",
    "ParseResult",
    "ColumnDescriptor",
    "TypedCell",
    "ParserOptions",
    "DateFormats",
    "DEFAULT_DATE_FORMATS",
    "detect_type",
    "tokenize_row",
    "load_options",
    "save_options",
]

__version__ = "0.1.0"

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------

def _resolve_options(options: ParserOptions | None, overrides: dict[str, Any]) -> ParserOptions:
    """Merge keyword overrides into *options* (re-validating the result)."""
    base = options or ParserOptions()
    if not overrides:
        return base
    return ParserOptions.model_validate({**base.model_dump(), **overrides})


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def parse(text: str, options: ParserOptions | None = None, **overrides: Any) -> ParseResult:
    """Parse a complete CSV text.

    Args:
        text: The CSV content.
        options: Parser options; defaults to ``ParserOptions()``.
        **overrides: Individual option fields, e.g. ``header=False``.

    Returns:
        The typed ``ParseResult``. Empty text yields an empty result.
    """
    return BatchParser(_resolve_options(options, overrides)).parse(text)


def parse_file(
    source: Source,
    options: ParserOptions | None = None,
    **overrides: Any,
) -> ParseResult:
    """Read and parse a CSV file.

    Raises:
        SourceReadError: If the file cannot be read or decoded.
    """
    return BatchParser(_resolve_options(options, overrides)).parse_file(source)


def stream(
    source: Any,
    options: ParserOptions | None = None,
    **overrides: Any,
) -> AsyncIterator[ParseResult]:
    """Incrementally parse text fragments.

    Args:
        source: Iterable or async iterable of ``str`` fragments.
        options: Parser options; defaults to ``ParserOptions()``.
        **overrides: Individual option fields, e.g. ``max_rows=10``.

    Returns:
        An async iterator of cumulative ``ParseResult`` snapshots.
    """
    return StreamParser(_resolve_options(options, overrides)).stream(source)


def stream_file(
    path: str | Path,
    options: ParserOptions | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    **overrides: Any,
) -> AsyncIterator[ParseResult]:
    """Incrementally parse a file read in *chunk_size* fragments."""
    return StreamParser(_resolve_options(options, overrides)).stream_file(path, chunk_size)
