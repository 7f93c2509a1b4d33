"""
Shared parser building blocks for csvinfer.

Defines the ``ParseResult`` returned by every parser and the
``BaseParser`` that owns the options and the line -> typed row
pipeline. Subclasses decide when the schema is established and how
rows are accumulated.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from csvinfer.config import ParserOptions
from csvinfer.detect import TypedCell, detect_type
from csvinfer.schema import ColumnDescriptor
from csvinfer.tokenizer import is_skippable, split_lines, tokenize_row


@dataclass
class ParseResult:
    """Typed output of a parse, or one snapshot of a stream.

    Attributes:
        columns: Column descriptors in positional order.
        header: Header names; empty when the input has no header row.
        rows: Data rows, as tuples (array mode) or read-only name -> value
            mappings (object mode). Rows are immutable once assembled.
    """

    columns: list[ColumnDescriptor] = field(default_factory=list)
    header: list[str] = field(default_factory=list)
    rows: list[Any] = field(default_factory=list)

    def snapshot(self) -> ParseResult:
        """Copy that shares no mutable state with this result.

        Only the containers are copied; the immutable rows are shared, so a
        snapshot costs time proportional to the row count, not the cell count.
        """
        return ParseResult(
            columns=list(self.columns),
            header=list(self.header),
            rows=list(self.rows),
        )

    def to_dict(self) -> dict[str, Any]:
        """Plain ``{"format", "header", "values"}`` representation."""
        return {
            "format": [c.to_dict() for c in self.columns],
            "header": list(self.header),
            "values": [
                dict(row) if isinstance(row, Mapping) else list(row) for row in self.rows
            ],
        }


class BaseParser:
    """Holds parser options and the per-line typing pipeline."""

    def __init__(self, options: ParserOptions | None = None) -> None:
        self.options = options or ParserOptions()

    def _data_lines(self, text: str) -> list[str]:
        """Physical lines of *text* that are neither blank nor comments."""
        marker = self.options.comment_marker
        return [line for line in split_lines(text) if not is_skippable(line, marker)]

    def _tokenize(self, line: str) -> list[str]:
        return tokenize_row(line, self.options.delimiter, self.options.quote_char)

    def _type_row(self, line: str) -> list[TypedCell]:
        date_formats = self.options.date_formats
        return [detect_type(raw, date_formats) for raw in self._tokenize(line)]
