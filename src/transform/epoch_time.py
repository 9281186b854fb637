"""
Epoch-time column injection and chronological sorting.

**Conceptual**: This is the core transformation of the converter. Given the
rows of one CSV file, it derives a millisecond Unix-epoch integer from the
timestamp column, puts it in a new leading `EpochTime` column, and sorts the
rows oldest-first by that integer. Everything else (finding files, reading
and writing CSV, printing) lives outside this module.

**Guarantees**:
  - Row count is preserved: a row whose timestamp can't be parsed is kept,
    with EpochTime = 0, and reported as a RowParseWarning.
  - Column order is `[EpochTime, <timestamp column>, ...other columns in
    input order]`.
  - The sort is stable and numeric: rows with equal EpochTime (including all
    the 0-valued fallbacks) keep their input order; -5 sorts before 10.
  - Inputs are never modified; a new DataFrame is returned.

**Why pandas?** The whole file is one vectorised pass: parse the column,
assign the new column, reorder columns, sort once. No per-row Python loop
and no repeated appends.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

import numpy as np
import pandas as pd

from src.config.settings import DEFAULT_FALLBACK_FORMATS, DEFAULT_TIMESTAMP_FIELD
from src.data.schemas import (
    EPOCH_TIME_COLUMN,
    EmptyInputError,
    RowParseWarning,
    build_output_columns,
    validate_convertible,
)
from src.utils.time import parse_epoch_millis


@dataclass(frozen=True)
class EpochTransformResult:
    """
    Output of one file's transformation.

    Attributes:
        frame: Converted rows, sorted ascending by EpochTime, columns in output order.
        warnings: One RowParseWarning per row that fell back to EpochTime = 0,
                  in input row order.
    """
    frame: pd.DataFrame
    warnings: list[RowParseWarning] = field(default_factory=list)

    @property
    def fields(self) -> list[str]:
        """Output column names, in order."""
        return list(self.frame.columns)

    @property
    def rows(self) -> list[dict[str, Any]]:
        """Output rows as ordered dicts, in sorted order."""
        return self.frame.to_dict(orient="records")


def add_epoch_time_column(
    df: pd.DataFrame,
    timestamp_col: str = DEFAULT_TIMESTAMP_FIELD,
    context: str | None = None,
    fallback_formats: tuple[str, ...] = DEFAULT_FALLBACK_FORMATS,
) -> EpochTransformResult:
    """
    Add an EpochTime column derived from a timestamp column and sort by it.

    **Functionally**:
      1. Rejects files that can't be converted (no rows, or no timestamp column).
      2. Parses every timestamp to epoch milliseconds (see src.utils.time for
         the accepted layouts); unparseable values become 0 and are reported.
      3. Assigns the integers as `EpochTime` (replacing any existing column of
         that name) and leaves the original timestamp strings untouched.
      4. Reorders columns to `[EpochTime, timestamp_col, ...rest]`.
      5. Stable-sorts rows ascending by EpochTime.

    Args:
        df: Rows of one file; every cell a string as read from disk.
        timestamp_col: Column to convert (default "TimeCreated").
        context: Source description (usually the file path) used in error
                 messages and warnings.
        fallback_formats: strftime formats tried after ISO 8601.

    Returns:
        EpochTransformResult with the converted frame and any row warnings.

    Raises:
        EmptyInputError: If df has no rows.
        MissingColumnError: If timestamp_col is not a column of df.

    Example:
        >>> df = pd.DataFrame({
        ...     'TimeCreated': ['2021-01-01 00:00:01', '1970-01-01 00:00:00'],
        ...     'User': ['a', 'b'],
        ... })
        >>> result = add_epoch_time_column(df)
        >>> result.fields
        ['EpochTime', 'TimeCreated', 'User']
        >>> result.frame['EpochTime'].tolist()
        [0, 1609459201000]
    """
    validate_convertible(df, timestamp_col, context=context)

    # Work on a positional copy so warnings and the stable sort refer to input order
    converted = df.reset_index(drop=True)

    raw_values = converted[timestamp_col]
    epoch_ms, parsed_ok = parse_epoch_millis(raw_values, fallback_formats)

    warnings = []
    for position in np.flatnonzero(~parsed_ok.to_numpy()):
        raw = raw_values.iloc[position]
        warnings.append(
            RowParseWarning(
                context=context,
                row_number=int(position) + 1,
                raw_value=raw if isinstance(raw, str) else "",
            )
        )

    output_columns = build_output_columns(list(converted.columns), timestamp_col)
    converted = converted.assign(**{EPOCH_TIME_COLUMN: epoch_ms.to_numpy()})[output_columns]

    # kind="stable": equal EpochTime values keep input order
    converted = converted.sort_values(EPOCH_TIME_COLUMN, kind="stable").reset_index(drop=True)

    return EpochTransformResult(frame=converted, warnings=warnings)


def transform_rows(
    rows: Sequence[Mapping[str, Any]],
    timestamp_field: str = DEFAULT_TIMESTAMP_FIELD,
    context: str | None = None,
    fallback_formats: tuple[str, ...] = DEFAULT_FALLBACK_FORMATS,
) -> EpochTransformResult:
    """
    Row-oriented entry point: the same transformation over a list of mappings.

    The first row's keys define the input column order; every row is assumed
    to share it. Use `.fields` and `.rows` on the result for plain-Python output.

    Raises:
        EmptyInputError: If rows is empty.
        MissingColumnError: If the first row has no `timestamp_field` key.
    """
    if not rows:
        ctx = f"{context}: " if context else ""
        raise EmptyInputError(f"{ctx}File has no data rows.")

    columns = list(rows[0].keys())
    df = pd.DataFrame.from_records(list(rows), columns=columns)

    return add_epoch_time_column(
        df,
        timestamp_col=timestamp_field,
        context=context,
        fallback_formats=fallback_formats,
    )
