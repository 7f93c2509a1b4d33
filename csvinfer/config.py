"""
Parser options and YAML I/O for csvinfer.

This module defines the Pydantic models that configure both the batch
and the streaming parser, plus helpers to load and save them as YAML.

Key models:
- ParserOptions: delimiter, quoting, comments, header handling,
  encoding, date detection, row cap and row representation.
- DateFormats: the date / time / datetime templates used by the type
  detector (``YYYY-MM-DD``, ``HH:mm:ss`` ...).

Key functions:
- load_options(path) -> ParserOptions: Load and validate from YAML.
- save_options(options, path): Serialize to YAML.

The same ``ParserOptions`` instance is safe to share between parsers
and sessions because the model is frozen.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from csvinfer.exceptions import OptionsValidationError

logger = logging.getLogger(__name__)


class DateFormats(BaseModel):
    """Templates used to recognise date, time and datetime cells.

    Tokens: ``YYYY`` (4 digits), ``MM``/``DD``/``HH``/``mm``/``ss``
    (2 digits), ``SSS`` (3 digits). Everything else is matched literally.
    """

    model_config = ConfigDict(frozen=True)

    date: list[str] = Field(default_factory=list)
    time: list[str] = Field(default_factory=list)
    datetime: list[str] = Field(default_factory=list)


DEFAULT_DATE_FORMATS = DateFormats(
    date=["YYYY-MM-DD", "MM/DD/YYYY", "DD.MM.YYYY"],
    time=["HH:mm:ss", "HH:mm", "HH:mm:ss.SSS"],
    datetime=["YYYY-MM-DD HH:mm:ss", "YYYY-MM-DDTHH:mm:ssZ", "YYYY-MM-DDTHH:mm:ss.SSSZ"],
)


class ParserOptions(BaseModel):
    """Options shared by ``BatchParser`` and ``StreamParser``.

    ``date_formats=None`` disables date/time/datetime detection so such
    values are classified as strings. ``comment_marker=None`` disables
    comment skipping.
    """

    model_config = ConfigDict(frozen=True)

    delimiter: str = Field(",", description="Field separator (one character)")
    quote_char: str = Field('"', description="Quote character (one character)")
    comment_marker: str | None = Field(
        "#", description="Lines starting with this prefix (after trimming) are skipped"
    )
    header: bool = Field(True, description="Treat the first non-skipped line as the header")
    encoding: str = Field("utf-8", description="Text encoding used when reading files")
    date_formats: DateFormats | None = Field(
        default_factory=lambda: DEFAULT_DATE_FORMATS,
        description="Date/time templates; None disables date detection",
    )
    max_rows: int | None = Field(
        None, ge=1, description="Maximum number of data rows (header excluded)"
    )
    row_mode: Literal["array", "object"] = Field(
        "array", description="Emit rows as lists or as name -> value mappings"
    )

    @field_validator("delimiter", "quote_char")
    @classmethod
    def _single_character(cls, value: str) -> str:
        if len(value) != 1:
            raise ValueError(f"must be exactly one character, got {value!r}")
        if value in ("\n", "\r"):
            raise ValueError("line terminators cannot be used as delimiter or quote")
        return value

    @field_validator("comment_marker")
    @classmethod
    def _non_empty_marker(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            raise ValueError("comment_marker must be a non-blank string or None")
        return value

    @model_validator(mode="after")
    def _check_distinct_delimiter(self) -> ParserOptions:
        if self.delimiter == self.quote_char:
            raise ValueError(
                f"delimiter and quote_char must differ (both are {self.delimiter!r})"
            )
        return self


def load_options(path: str | Path) -> ParserOptions:
    """Load and validate a YAML options file into ``ParserOptions``.

    Raises:
        FileNotFoundError: If the file does not exist.
        OptionsValidationError: If the file is empty or not valid YAML.
        pydantic.ValidationError: If a field fails validation.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Options file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise OptionsValidationError(f"Options file is not valid YAML: {path}: {exc}") from exc
    if raw is None:
        raise OptionsValidationError(f"Options file is empty: {path}")
    if not isinstance(raw, dict):
        raise OptionsValidationError(
            f"Options file must contain a mapping, got {type(raw).__name__}: {path}"
        )
    logger.info("Loaded parser options from %s", path)
    return ParserOptions.model_validate(raw)


def save_options(options: ParserOptions, path: str | Path) -> None:
    """Serialize ``ParserOptions`` to a human-editable YAML file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = options.model_dump(mode="json")
    with open(path, "w", encoding="utf-8") as f:
        f.write("# csvinfer parser options\n\n")
        yaml.dump(
            data,
            f,
            allow_unicode=True,
            default_flow_style=False,
            sort_keys=False,
        )
    logger.info("Saved parser options to %s", path)
