"""
Column contracts and error types for epoch-time CSV conversion.

**Conceptual**: This module defines the "data contract" for every converted
file and the exceptions raised when an input cannot honour it:
  - Every output CSV leads with `EpochTime`, then the timestamp column, then
    all other input columns in their original order.
  - Every input must have at least one row and must contain the timestamp
    column; otherwise the whole file is skipped.

**Error philosophy**:
  - File-level problems raise a subclass of EpochSortError with the source
    path as context, so the batch runner can skip the file and keep going.
  - Row-level problems (one bad timestamp) never raise; they are recorded as
    RowParseWarning values and the row is kept.
"""

from dataclasses import dataclass

import pandas as pd


EPOCH_TIME_COLUMN = "EpochTime"


class EpochSortError(Exception):
    """Base class for all file-level conversion failures."""
    pass


class FileAccessError(EpochSortError):
    """
    Raised when a directory is missing or a file cannot be opened or decoded as CSV.

    **Usage**: The batch runner catches this per file and moves on. A missing
    *input directory* is the one case where it propagates to the CLI and
    ends the run.
    """
    pass


class EmptyInputError(EpochSortError):
    """Raised when a decoded file has zero data rows."""
    pass


class MissingColumnError(EpochSortError):
    """Raised when the timestamp column is absent from a file's header."""
    pass


class WriteError(EpochSortError):
    """Raised when an output CSV cannot be encoded or written."""
    pass


@dataclass(frozen=True)
class RowParseWarning:
    """
    One row whose timestamp could not be parsed.

    The row is kept with EpochTime = 0; this record lets the caller report
    which file and which raw value were at fault.

    Attributes:
        context: Source description (usually the input path), or None.
        row_number: 1-based data row number in the *input* order (header excluded).
        raw_value: The timestamp cell exactly as read.
    """
    context: str | None
    row_number: int
    raw_value: str

    @property
    def message(self) -> str:
        ctx = f"{self.context}: " if self.context else ""
        return (
            f"{ctx}row {self.row_number}: could not parse timestamp "
            f"{self.raw_value!r}; EpochTime set to 0"
        )


def build_output_columns(input_columns: list[str], timestamp_col: str) -> list[str]:
    """
    Build the output column order for a converted file.

    The result is `[EpochTime, timestamp_col, ...rest]`, where `rest` keeps
    the input order and drops any existing EpochTime column and the timestamp
    column itself, so each appears exactly once.

    Args:
        input_columns: Column names in the order they were read.
        timestamp_col: Name of the timestamp column.

    Returns:
        Ordered list of output column names.

    Example:
        >>> build_output_columns(['User', 'TimeCreated', 'Id'], 'TimeCreated')
        ['EpochTime', 'TimeCreated', 'User', 'Id']
    """
    rest = [c for c in input_columns if c not in (EPOCH_TIME_COLUMN, timestamp_col)]
    return [EPOCH_TIME_COLUMN, timestamp_col] + rest


def validate_convertible(
    df: pd.DataFrame,
    timestamp_col: str,
    context: str | None = None,
) -> None:
    """
    Check that a decoded file can be converted.

    **Functionally**:
      - Zero rows -> EmptyInputError (checked first: a zero-byte file has no
        header either, and "empty" is the more useful message).
      - Timestamp column absent from the header -> MissingColumnError.

    The column check runs once against the header; every row of a CSV shares it.

    Args:
        df: Decoded file contents.
        timestamp_col: Column that must be present.
        context: Optional source description included in error messages.

    Raises:
        EmptyInputError: If df has no rows.
        MissingColumnError: If timestamp_col is not a column of df.
    """
    ctx = f"{context}: " if context else ""

    if df.empty:
        raise EmptyInputError(f"{ctx}File has no data rows.")

    if timestamp_col not in df.columns:
        raise MissingColumnError(
            f"{ctx}Timestamp column '{timestamp_col}' not found. "
            f"Found columns: {list(df.columns)}."
        )
