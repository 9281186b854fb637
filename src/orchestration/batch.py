"""
Directory-level conversion: find input CSVs, convert each, write outputs.

**Conceptual**: The batch runner is the orchestrator that ties the CSV codec
(src.data.io) to the transformer (src.transform.epoch_time). Each file is
handled independently and to completion before the next one starts:

    read -> add EpochTime + sort -> write <output_dir>/<same file name>

**Failure isolation**: No per-file problem stops the batch. Unreadable files,
empty files, files without the timestamp column, unexpected conversion
errors and failed writes all become a FileOutcome with a status and a
message; the runner then moves on. Only a missing input directory (or an
output directory that can't be created) raises, because then no file can
be processed at all.

**Known limitation**: Output names use the input's base name only. Two inputs
with the same name in different subdirectories write to the same output path;
the later one wins. The runner does not rename anything, it marks the later
outcome with `overwrote_previous=True` so the caller can report it.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from src.config.settings import EpochSortSettings, get_settings
from src.data.io import find_csv_files, read_csv_rows, write_csv_rows
from src.data.schemas import (
    EmptyInputError,
    FileAccessError,
    MissingColumnError,
    RowParseWarning,
    WriteError,
)
from src.transform.epoch_time import add_epoch_time_column


class FileStatus(str, Enum):
    """What happened to one input file."""
    CONVERTED = "converted"
    SKIPPED_EMPTY = "skipped_empty"
    SKIPPED_MISSING_COLUMN = "skipped_missing_column"
    FAILED_READ = "failed_read"
    FAILED_CONVERT = "failed_convert"
    FAILED_WRITE = "failed_write"


@dataclass(frozen=True)
class FileOutcome:
    """
    Result of processing one input file.

    Attributes:
        input_path: File that was read.
        status: FileStatus for this file.
        output_path: File that was written (None unless a write was attempted).
        row_count: Rows in the converted output (0 if not converted).
        warnings: Row-level timestamp warnings, in input row order.
        error: Error message for skipped/failed files, None otherwise.
        overwrote_previous: True if an earlier file in the same run had
                            already been written to output_path.
    """
    input_path: Path
    status: FileStatus
    output_path: Optional[Path] = None
    row_count: int = 0
    warnings: list[RowParseWarning] = field(default_factory=list)
    error: Optional[str] = None
    overwrote_previous: bool = False

    @property
    def converted(self) -> bool:
        return self.status == FileStatus.CONVERTED


@dataclass
class BatchSummary:
    """Aggregate of every FileOutcome from one run, in processing order."""
    input_dir: Path
    output_dir: Path
    outcomes: list[FileOutcome] = field(default_factory=list)

    @property
    def files_found(self) -> int:
        return len(self.outcomes)

    @property
    def converted_count(self) -> int:
        return sum(1 for o in self.outcomes if o.converted)

    @property
    def skipped_count(self) -> int:
        return sum(
            1 for o in self.outcomes
            if o.status in (FileStatus.SKIPPED_EMPTY, FileStatus.SKIPPED_MISSING_COLUMN)
        )

    @property
    def failed_count(self) -> int:
        return sum(
            1 for o in self.outcomes
            if o.status in (
                FileStatus.FAILED_READ,
                FileStatus.FAILED_CONVERT,
                FileStatus.FAILED_WRITE,
            )
        )

    @property
    def total_rows(self) -> int:
        return sum(o.row_count for o in self.outcomes)

    @property
    def warning_count(self) -> int:
        return sum(len(o.warnings) for o in self.outcomes)


def process_csv_file(
    path: Path | str,
    output_dir: Path | str,
    settings: EpochSortSettings,
) -> FileOutcome:
    """
    Convert a single CSV file into output_dir.

    **Process**:
      1. Read the file as string rows.
      2. Add EpochTime and sort (skip the file if it's empty or lacks the
         timestamp column).
      3. Write `output_dir / path.name`.

    Never raises for file-local problems; the returned FileOutcome carries
    the status and message instead.

    Args:
        path: Input CSV file.
        output_dir: Existing directory to write into.
        settings: Timestamp column, CSV dialect and fallback formats.

    Returns:
        FileOutcome describing what happened.
    """
    path = Path(path)
    output_dir = Path(output_dir)
    context = str(path)

    try:
        df = read_csv_rows(path, delimiter=settings.delimiter, encoding=settings.encoding)
    except FileAccessError as e:
        return FileOutcome(input_path=path, status=FileStatus.FAILED_READ, error=str(e))

    try:
        result = add_epoch_time_column(
            df,
            timestamp_col=settings.timestamp_field,
            context=context,
            fallback_formats=settings.fallback_formats,
        )
    except EmptyInputError as e:
        return FileOutcome(input_path=path, status=FileStatus.SKIPPED_EMPTY, error=str(e))
    except MissingColumnError as e:
        return FileOutcome(input_path=path, status=FileStatus.SKIPPED_MISSING_COLUMN, error=str(e))
    except Exception as e:
        # Any other transform error is local to this file
        return FileOutcome(
            input_path=path,
            status=FileStatus.FAILED_CONVERT,
            error=f"{context}: Failed to convert timestamps. Error: {e}",
        )

    output_path = output_dir / path.name

    try:
        write_csv_rows(
            result.frame,
            output_path,
            delimiter=settings.delimiter,
            encoding=settings.encoding,
        )
    except WriteError as e:
        return FileOutcome(
            input_path=path,
            status=FileStatus.FAILED_WRITE,
            output_path=output_path,
            warnings=result.warnings,
            error=str(e),
        )

    return FileOutcome(
        input_path=path,
        status=FileStatus.CONVERTED,
        output_path=output_path,
        row_count=len(result.frame),
        warnings=result.warnings,
    )


def run_batch(
    input_dir: Path | str,
    output_dir: Path | str,
    settings: Optional[EpochSortSettings] = None,
    on_file: Optional[Callable[[FileOutcome], None]] = None,
) -> BatchSummary:
    """
    Convert every matching CSV under input_dir into output_dir.

    **Steps**:
      1. Find input files recursively (sorted, so runs are reproducible).
      2. Create output_dir if needed.
      3. Process each file with process_csv_file().
      4. Flag outputs that overwrite an earlier output from this run.
      5. Call `on_file` with each outcome as soon as it's known, so a CLI
         can report progress while the batch runs.

    Args:
        input_dir: Directory searched recursively with settings.file_pattern.
        output_dir: Directory receiving converted files (created if absent).
        settings: Run configuration. Defaults to get_settings().
        on_file: Optional callback invoked once per file, in order.

    Returns:
        BatchSummary with one outcome per input file (empty if none matched).

    Raises:
        FileAccessError: If input_dir doesn't exist.
        WriteError: If output_dir can't be created.
    """
    settings = settings or get_settings()
    input_dir = Path(input_dir)
    output_dir = Path(output_dir)

    csv_files = find_csv_files(input_dir, pattern=settings.file_pattern)

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise WriteError(
            f"{output_dir}: Failed to create output directory. Error: {e}"
        ) from e

    summary = BatchSummary(input_dir=input_dir, output_dir=output_dir)
    written: set[Path] = set()

    for csv_file in csv_files:
        outcome = process_csv_file(csv_file, output_dir, settings)

        if outcome.converted:
            if outcome.output_path in written:
                outcome = replace(outcome, overwrote_previous=True)
            written.add(outcome.output_path)

        summary.outcomes.append(outcome)

        if on_file is not None:
            on_file(outcome)

    return summary
