"""
Column schema tracking for csvinfer.

Maintains the ordered list of ``ColumnDescriptor`` objects for a parse
and turns typed cells into output rows.

Establishment (once per parse):
  Column names come from the header row (empty header cells become
  ``column_N``, 1-based) or are all synthesized when there is no header.
  Without a header the column count is the width of the first data row.
  A column's initial type is taken from the first data row that has a
  cell at that position. A present but empty cell counts and yields
  ``string``; rows that are too short are skipped.

Widening (every later batch, streaming only):
  A ``string`` column upgrades to the type of the first cell that
  carries real evidence (number, boolean, date, time, datetime). It
  never goes back to ``string`` and never moves between two non-string
  types. Cells beyond the known columns append new ``column_N``
  descriptors.

Row assembly:
  Rows shorter than the header are padded with ``""``. Extra cells are
  kept and, in object mode, keyed ``column_N`` (``column_N.1`` if a
  header cell already has that name). Synthesized columns are never
  back-filled into earlier rows. Assembled rows are tuples or read-only
  mappings and are never modified afterwards.
"""

from __future__ import annotations

from collections.abc import Collection, Mapping
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Any, Literal

from csvinfer.detect import SubFormat, TypedCell

ColumnType = Literal["string", "number", "boolean", "date", "time", "datetime"]
RowMode = Literal["array", "object"]


@dataclass(frozen=True)
class ColumnDescriptor:
    """Inferred description of one column.

    Attributes:
        name: Header name or synthesized ``column_N``. Never renamed.
        type: Best type known so far.
        sub_format: ``integer`` / ``decimal`` for number columns.
        index: Zero-based position, equal to the position in the list.
    """

    name: str
    type: ColumnType
    index: int
    sub_format: SubFormat | None = None

    def to_dict(self) -> dict[str, Any]:
        """Render as ``{"name", "type", "format"?, "index"}``."""
        out: dict[str, Any] = {"name": self.name, "type": self.type}
        if self.sub_format is not None:
            out["format"] = self.sub_format
        out["index"] = self.index
        return out


def synthesized_name(index: int) -> str:
    """Column name used when no header name exists at *index* (0-based)."""
    return f"column_{index + 1}"


def _type_of(cell: TypedCell) -> tuple[ColumnType, SubFormat | None]:
    if cell.kind == "null":
        return "string", None
    return cell.kind, cell.sub_format


def unique_name(name: str, taken: Collection[str]) -> str:
    """Return *name*, or the first ``name.1``, ``name.2`` ... not in *taken*."""
    if name not in taken:
        return name
    suffix = 1
    while f"{name}.{suffix}" in taken:
        suffix += 1
    return f"{name}.{suffix}"


def extra_column_name(index: int, taken: Collection[str]) -> str:
    """Name for a cell at *index* beyond the known columns.

    ``column_N``, suffixed when a header cell already uses that name.
    """
    return unique_name(synthesized_name(index), taken)


def header_names(header_row: list[str]) -> list[str]:
    """Resolve header cells into unique column names.

    Cells are trimmed; empty cells become ``column_N``. Repeated names
    get a ``.1``, ``.2`` ... suffix, skipping suffixes that are already
    taken, the same convention pandas uses (``a,a.1,a`` gives
    ``a, a.1, a.2``).
    """
    names: list[str] = []
    taken: set[str] = set()
    for i, cell in enumerate(header_row):
        name = unique_name(cell.strip() or synthesized_name(i), taken)
        taken.add(name)
        names.append(name)
    return names


def establish(
    typed_rows: list[list[TypedCell]],
    header_row: list[str] | None,
) -> tuple[list[str], list[ColumnDescriptor]]:
    """Build the initial header and column descriptors.

    Args:
        typed_rows: Data rows of the first batch (header excluded).
        header_row: Raw header cells, or ``None`` when the input has no
            header.

    Returns:
        ``(header, columns)``. ``header`` is empty without a header row.
    """
    if header_row is not None:
        header = header_names(header_row)
        names = list(header)
    else:
        header = []
        width = len(typed_rows[0]) if typed_rows else 0
        names = [synthesized_name(i) for i in range(width)]

    columns: list[ColumnDescriptor] = []
    for index, name in enumerate(names):
        col_type: ColumnType = "string"
        sub_format: SubFormat | None = None
        for row in typed_rows:
            if index < len(row):
                col_type, sub_format = _type_of(row[index])
                break
        columns.append(
            ColumnDescriptor(name=name, type=col_type, index=index, sub_format=sub_format)
        )
    return header, columns


def merge(
    columns: list[ColumnDescriptor],
    typed_rows: list[list[TypedCell]],
) -> list[ColumnDescriptor]:
    """Apply the widening rule for a new batch of rows.

    Pure: the input list and its descriptors are left untouched.
    """
    merged = list(columns)
    for row in typed_rows:
        for index, cell in enumerate(row):
            col_type, sub_format = _type_of(cell)
            if index >= len(merged):
                merged.append(
                    ColumnDescriptor(
                        name=extra_column_name(index, {c.name for c in merged}),
                        type=col_type,
                        index=index,
                        sub_format=sub_format,
                    )
                )
            elif merged[index].type == "string" and cell.is_evidence:
                merged[index] = replace(merged[index], type=col_type, sub_format=sub_format)
    return merged


def _object_keys(width: int, header: list[str], columns: list[ColumnDescriptor]) -> list[str]:
    keys = [c.name for c in columns[:width]]
    taken = set(header).union(c.name for c in columns)
    for index in range(len(keys), width):
        name = extra_column_name(index, taken)
        taken.add(name)
        keys.append(name)
    return keys


def assemble_row(
    cells: list[TypedCell],
    header: list[str],
    columns: list[ColumnDescriptor],
    row_mode: RowMode = "array",
) -> tuple[Any, ...] | Mapping[str, Any]:
    """Turn typed cells into an output row.

    Array rows are tuples padded with ``""`` up to the header width.
    Object rows are read-only mappings from column names to values, with
    ``""`` for every header name that the row does not reach. Rows are
    immutable, so snapshots can share them instead of copying.
    """
    if row_mode == "array":
        values: list[Any] = [cell.value for cell in cells]
        if len(values) < len(header):
            values.extend([""] * (len(header) - len(values)))
        return tuple(values)

    keys = _object_keys(len(cells), header, columns)
    record: dict[str, Any] = {key: cell.value for key, cell in zip(keys, cells)}
    for name in header:
        record.setdefault(name, "")
    return MappingProxyType(record)
