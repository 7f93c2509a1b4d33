"""
Custom exception hierarchy for csvinfer.

Only source failures are raised during parsing. Malformed quoting,
ragged rows and ambiguous numbers are absorbed into the typed result,
so callers normally only need to handle ``SourceReadError``.
"""


class CsvInferError(Exception):
    """Base exception for all csvinfer errors."""


class SourceReadError(CsvInferError):
    """Raised when an input file cannot be opened, read or decoded.

    The batch parser returns no partial result in this case, and a
    stream ends without emitting further snapshots.
    """


class OptionsValidationError(CsvInferError):
    """Raised when a parser options YAML file is empty or malformed.

    Field-level problems (e.g. a two-character delimiter) surface as
    ``pydantic.ValidationError`` from the model itself.
    """


class SessionError(CsvInferError):
    """Raised when a streaming session is used after it has finished."""


class ExportError(CsvInferError):
    """Raised when a parse result cannot be written to disk.

    For example, an unsupported output format or a permission error.
    """
