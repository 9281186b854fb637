"""
CSV readers and writers for epoch-time conversion.

**Conceptual**: This module is the *only* I/O boundary for CSV data in the
system. Every input file is decoded here and every converted file is encoded
here. This centralization provides:
  - Lossless reads: every cell comes back as the exact string on disk
    (no numeric coercion, no "NA" -> NaN surprises).
  - One place that maps low-level failures (missing file, bad encoding,
    malformed CSV, unwritable path) onto the domain error types.
  - Consistent dialect: comma-delimited, UTF-8, header row, no index column.

**Rule**: Never use pd.read_csv or df.to_csv directly in the transformer or
the batch runner. Always import and use these functions instead.
"""

import pandas as pd
from pathlib import Path

from src.data.schemas import FileAccessError, WriteError


def find_csv_files(
    input_dir: Path | str,
    pattern: str = "*.csv",
) -> list[Path]:
    """
    Recursively list input files under a directory.

    **Functionally**:
      - Matches `pattern` against file names at every depth (Path.rglob).
      - Skips directories that happen to match the pattern.
      - Returns paths sorted, so batch order is deterministic across runs.

    Args:
        input_dir: Directory to search.
        pattern: Glob for file names (default "*.csv").

    Returns:
        Sorted list of matching file paths (possibly empty).

    Raises:
        FileAccessError: If input_dir does not exist or is not a directory.
    """
    input_dir = Path(input_dir)

    if not input_dir.is_dir():
        raise FileAccessError(
            f"Input directory not found: {input_dir}. "
            f"Ensure the directory exists and the path is correct."
        )

    return sorted(p for p in input_dir.rglob(pattern) if p.is_file())


def read_csv_rows(
    path: Path | str,
    delimiter: str = ",",
    encoding: str = "utf-8",
) -> pd.DataFrame:
    """
    Decode a CSV file into a DataFrame of string cells.

    **Functionally**:
      - First line is the header and defines column names and order.
      - Every cell is read as a string exactly as written; empty cells are "".
      - A zero-byte (or blank) file yields an empty DataFrame with no columns,
        which callers treat the same as a header-only file: no rows.
      - A UTF-8 byte-order mark before the header is dropped by pandas.

    Args:
        path: Path to the CSV file.
        delimiter: Field delimiter (default ",").
        encoding: Text encoding (default "utf-8").

    Returns:
        DataFrame whose columns are the header fields and whose rows are the
        records, in file order.

    Raises:
        FileAccessError: If the file doesn't exist, can't be decoded with
                         `encoding`, or isn't well-formed CSV.

    Example:
        >>> df = read_csv_rows("logs/security.csv")
        >>> df.columns.tolist()
        ['TimeCreated', 'Id', 'Message']
        >>> df['Id'].iloc[0]
        '4624'
    """
    path = Path(path)
    context = str(path)

    if not path.is_file():
        raise FileAccessError(
            f"CSV not found: {path}. "
            f"Ensure the file exists and the path is correct."
        )

    try:
        return pd.read_csv(
            path,
            sep=delimiter,
            encoding=encoding,
            dtype=str,
            keep_default_na=False,
            index_col=False,
        )
    except pd.errors.EmptyDataError:
        # No header at all: nothing to convert
        return pd.DataFrame()
    except Exception as e:
        raise FileAccessError(
            f"{context}: Failed to read CSV. Error: {e}"
        ) from e


def write_csv_rows(
    df: pd.DataFrame,
    path: Path | str,
    delimiter: str = ",",
    encoding: str = "utf-8",
) -> None:
    """
    Encode a DataFrame as CSV.

    Writes the header row then one line per row, in DataFrame order, with
    index=False (no row-number column). The parent directory must already
    exist; the batch runner creates the output directory once per run.

    Args:
        df: Rows to write; column order is the output column order.
        path: Destination file. Overwritten if it exists.
        delimiter: Field delimiter (default ",").
        encoding: Text encoding (default "utf-8").

    Raises:
        WriteError: If the file can't be written (missing directory,
                    permissions, disk full, unencodable characters).
    """
    path = Path(path)
    context = str(path)

    try:
        df.to_csv(path, index=False, sep=delimiter, encoding=encoding)
    except Exception as e:
        raise WriteError(
            f"{context}: Failed to write CSV. Error: {e}"
        ) from e
