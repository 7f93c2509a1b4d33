"""
Cell type detection for csvinfer.

Classifies a single cell's text into one of the column types the schema
tracker understands. The rules are applied in a fixed order and the
first match wins:

1. ``None`` -> null; empty / whitespace-only -> empty string.
2. ``true`` / ``false`` (any case) -> boolean.
3. ASCII numeric literal (incl. exponent notation) -> number,
   sub-format ``integer`` or ``decimal``. Other scripts' digits are text.
4. No date formats configured -> string.
5. Time templates (pattern match) -> time.
6. Date templates (pattern match) -> date.
7. Datetime templates, only when the text is also a real calendar
   value according to ``pandas.to_datetime`` -> datetime.
8. Anything else -> string.

Number sub-format policy:
  A literal is ``integer`` when its text has no ``.`` and the value has
  no fractional part, so ``1e3`` is an integer (1000) while ``0.0`` is
  a decimal. Columns are never rescanned to refine this.

Date-like values are returned as the original (trimmed) text; no
timezone or calendar normalisation is performed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal, Union

import pandas as pd

from csvinfer.config import DateFormats

CellKind = Literal["null", "string", "number", "boolean", "date", "time", "datetime"]
SubFormat = Literal["integer", "decimal"]
CellValue = Union[str, int, float, bool, None]

_NUMBER_PATTERN = re.compile(
    r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|[+-]?Infinity",
    re.ASCII,
)

# Longest tokens first so "SSS" is not eaten by "ss".
_FORMAT_TOKENS = (
    ("YYYY", r"[0-9]{4}"),
    ("SSS", r"[0-9]{3}"),
    ("MM", r"[0-9]{2}"),
    ("DD", r"[0-9]{2}"),
    ("HH", r"[0-9]{2}"),
    ("mm", r"[0-9]{2}"),
    ("ss", r"[0-9]{2}"),
)


@dataclass(frozen=True)
class TypedCell:
    """A cell value tagged with its detected kind.

    Attributes:
        kind: Detected type tag. ``null`` only appears for a missing
            (``None``) input, never for text read from a file.
        sub_format: ``integer`` / ``decimal`` for numbers, else ``None``.
        value: The decoded value: ``int``/``float`` for numbers,
            ``bool`` for booleans, the trimmed text otherwise.
    """

    kind: CellKind
    value: CellValue
    sub_format: SubFormat | None = None

    @property
    def is_evidence(self) -> bool:
        """True when the cell says more about its column than "some text"."""
        return self.kind not in ("string", "null")


@lru_cache(maxsize=None)
def format_to_regex(fmt: str) -> re.Pattern[str]:
    """Build an anchored regex for a date/time template.

    The template is escaped literally and then each token is replaced
    with an ASCII digit class. Whitespace in the template matches any single
    whitespace character. Results are cached per template string.
    """
    pattern: list[str] = []
    i = 0
    while i < len(fmt):
        for token, replacement in _FORMAT_TOKENS:
            if fmt.startswith(token, i):
                pattern.append(replacement)
                i += len(token)
                break
        else:
            char = fmt[i]
            pattern.append(r"\s" if char.isspace() else re.escape(char))
            i += 1
    return re.compile("".join(pattern))


def _matches_any(value: str, formats: list[str]) -> bool:
    return any(format_to_regex(fmt).fullmatch(value) for fmt in formats)


def _is_calendar_value(value: str) -> bool:
    """Check that the text denotes a real date/time (e.g. not month 13)."""
    return not pd.isna(pd.to_datetime(value, errors="coerce"))


def _detect_number(text: str) -> TypedCell | None:
    if not _NUMBER_PATTERN.fullmatch(text):
        return None
    if "." not in text and "e" not in text.lower() and "Infinity" not in text:
        return TypedCell("number", int(text), "integer")
    number = float(text)
    if "." not in text and number.is_integer():
        return TypedCell("number", int(number), "integer")
    return TypedCell("number", number, "decimal")


def detect_type(raw: str | None, date_formats: DateFormats | None = None) -> TypedCell:
    """Classify one cell.

    Args:
        raw: Cell text as produced by the tokenizer, or ``None`` for an
            explicitly missing value.
        date_formats: Templates for date/time/datetime detection. When
            ``None``, such values are classified as strings.

    Returns:
        A ``TypedCell``. Never raises; unrecognised text is a string.
    """
    if raw is None:
        return TypedCell("null", None)

    text = raw.strip()
    if not text:
        return TypedCell("string", "")

    lowered = text.lower()
    if lowered in ("true", "false"):
        return TypedCell("boolean", lowered == "true")

    number = _detect_number(text)
    if number is not None:
        return number

    if date_formats is None:
        return TypedCell("string", text)

    if _matches_any(text, date_formats.time):
        return TypedCell("time", text)
    if _matches_any(text, date_formats.date):
        return TypedCell("date", text)
    if _matches_any(text, date_formats.datetime) and _is_calendar_value(text):
        return TypedCell("datetime", text)

    return TypedCell("string", text)
