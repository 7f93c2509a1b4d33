"""
Tabular export for csvinfer results.

Converts a ``ParseResult`` into pandas / Arrow structures whose dtypes
follow the inferred column types, and writes it to CSV or Parquet.

dtype mapping:
  number (integer) -> ``Int64`` (nullable), or ``float64`` when a value
                      in the column is fractional, infinite or outside
                      the int64 range
  number (decimal) -> ``float64``
  boolean          -> ``boolean`` (nullable)
  string / date / time / datetime -> ``string``

Values that do not fit the column type (e.g. text that was seen before
the column was widened to number, or ``""`` padding) become missing
values, the same way ``pd.to_numeric(errors="coerce")`` treats them.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

import pandas as pd
import pyarrow as pa

from csvinfer.exceptions import ExportError
from csvinfer.parsers.base import ParseResult
from csvinfer.schema import ColumnDescriptor, extra_column_name

logger = logging.getLogger(__name__)

_SUPPORTED_FORMATS = {"csv", "parquet"}
_INT64_LIMIT = 2 ** 63


def _column_names(result: ParseResult) -> list[str]:
    """Descriptor names plus ``column_N`` for cells beyond the known columns."""
    names = [c.name for c in result.columns]
    taken = set(names).union(result.header)
    for row in result.rows:
        if isinstance(row, Mapping):
            extra = [k for k in row if k not in taken]
        else:
            extra = []
            for i in range(len(names), len(row)):
                extra.append(extra_column_name(i, taken))
                taken.add(extra[-1])
        taken.update(extra)
        names.extend(extra)
    return names


def _records(result: ParseResult, names: list[str]) -> list[dict[str, Any]]:
    records: list[dict[str, Any]] = []
    for row in result.rows:
        if isinstance(row, Mapping):
            records.append(dict(row))
        else:
            records.append(dict(zip(names, row)))
    return records


def _fits_int64(values: pd.Series) -> bool:
    """Whole, finite and inside the int64 range (so ``Int64`` is lossless)."""
    as_float = values.astype("float64")
    return bool(
        (as_float == as_float.round()).all() and (as_float.abs() < _INT64_LIMIT).all()
    )


def _coerce(series: pd.Series, column: ColumnDescriptor | None) -> pd.Series:
    col_type = column.type if column is not None else "string"

    if col_type == "number":
        numeric = pd.to_numeric(series, errors="coerce")
        present = numeric.dropna()
        if column.sub_format == "integer" and _fits_int64(present):
            return numeric.astype("Int64")
        return numeric.astype("float64")

    if col_type == "boolean":
        return series.map(lambda v: v if isinstance(v, bool) else pd.NA).astype("boolean")

    return series.map(lambda v: pd.NA if pd.isna(v) else str(v)).astype("string")


def to_dataframe(result: ParseResult) -> pd.DataFrame:
    """Build a DataFrame with one column per descriptor (plus extras).

    Rows that do not reach an extra column get a missing value there.
    """
    names = _column_names(result)
    df = pd.DataFrame(_records(result, names), columns=names)
    by_name = {c.name: c for c in result.columns}
    for name in names:
        df[name] = _coerce(df[name], by_name.get(name))
    return df


def to_arrow(result: ParseResult) -> pa.Table:
    """Build an Arrow table; the schema follows ``to_dataframe()`` dtypes."""
    return pa.Table.from_pandas(to_dataframe(result), preserve_index=False)


def export_result(
    result: ParseResult,
    path: str | Path,
    output_format: Literal["csv", "parquet"] = "csv",
) -> str:
    """Write a parse result to *path*.

    The parent directory is created if needed.

    Returns:
        The written path as a string.

    Raises:
        ExportError: If *output_format* is unsupported or writing fails.
    """
    if output_format not in _SUPPORTED_FORMATS:
        raise ExportError(
            f"Unsupported output format: '{output_format}'. "
            f"Supported formats: {sorted(_SUPPORTED_FORMATS)}"
        )

    path = Path(path)
    try:
        df = to_dataframe(result)
        path.parent.mkdir(parents=True, exist_ok=True)
        if output_format == "csv":
            df.to_csv(path, index=False, encoding="utf-8")
        else:  # parquet
            df.to_parquet(path, index=False, engine="pyarrow")
    except (OSError, ValueError, TypeError, pa.ArrowException) as exc:
        raise ExportError(f"Failed to write {path.name} as {output_format}: {exc}") from exc

    logger.info(
        "Exported %s (%d rows, %d cols)", path.name, len(df), len(df.columns)
    )
    return str(path)
