#!/usr/bin/env python3
"""
Add an EpochTime column to every CSV under a directory and sort rows by it.

**Purpose**: Event exports (e.g. Windows event logs saved as CSV) carry a
human-readable timestamp column that sorts badly as text and can't be joined
numerically. This script derives a millisecond Unix-epoch integer from that
column, puts it first, and writes each file back out sorted oldest-first.

**What it does**:
  1. Scans --input-dir recursively for *.csv files
  2. For each file with a TimeCreated column (or --timestamp-field):
     - Reads every row as strings
     - Adds EpochTime (ms since 1970-01-01 UTC; 0 if the timestamp can't be parsed)
     - Orders columns as EpochTime, TimeCreated, then the rest as they were
     - Sorts rows ascending by EpochTime (ties keep their input order)
     - Writes <output-dir>/<same file name>
  3. Prints one line per file, one line per unparseable timestamp, and a summary

**Usage**:
    From project root:
    ```bash
    python actions/convert_csv_epoch_time.py --input-dir exports/ --output-dir converted/
    python actions/convert_csv_epoch_time.py --input-dir exports/ --output-dir converted/ \\
        --timestamp-field EventTime
    ```

**Exit codes**:
  - 0: Run completed (even if some files were skipped or failed; see output)
  - 2: Bad arguments, missing input directory, or output directory not creatable

**Notes**:
  - Files that are empty or lack the timestamp column are skipped, not written.
  - Output names use the base file name only; same-named files in different
    subdirectories overwrite each other (reported with "!").
"""

import argparse
import sys
from dataclasses import replace
from pathlib import Path

# Ensure project root is on path for imports
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from src.config.settings import get_settings
from src.data.schemas import EpochSortError
from src.orchestration.batch import FileOutcome, FileStatus, run_batch


STATUS_LABELS = {
    FileStatus.SKIPPED_EMPTY: "skipped (no rows)",
    FileStatus.SKIPPED_MISSING_COLUMN: "skipped (no timestamp column)",
    FileStatus.FAILED_READ: "read failed",
    FileStatus.FAILED_CONVERT: "conversion failed",
    FileStatus.FAILED_WRITE: "write failed",
}


def print_outcome(outcome: FileOutcome) -> None:
    """Print the per-file line plus any row warnings for one outcome."""
    if outcome.converted:
        print(f"  ✓ {str(outcome.input_path):50s} {outcome.row_count:6d} rows  "
              f"-> {outcome.output_path}")
        if outcome.overwrote_previous:
            print(f"    ! {outcome.output_path.name} overwrote an earlier output with the same name")
    else:
        print(f"  ✗ {str(outcome.input_path):50s} {STATUS_LABELS[outcome.status]}")
        print(f"    {outcome.error}")

    for warning in outcome.warnings:
        print(f"    WARNING: {warning.message}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Add an EpochTime column to CSV files and sort rows by it.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "--input-dir",
        type=str,
        required=True,
        help="Directory searched recursively for CSV files.",
    )

    parser.add_argument(
        "--output-dir",
        type=str,
        required=True,
        help="Directory for converted files (created if missing).",
    )

    parser.add_argument(
        "--timestamp-field",
        type=str,
        default=None,
        help="Column to convert. Default: EPOCH_SORT_TIMESTAMP_FIELD or TimeCreated.",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Main entrypoint for the epoch-time conversion.

    Steps:
      1. Parse arguments (argparse exits 2 with usage if one is missing)
      2. Load settings from environment, apply --timestamp-field
      3. Run the batch, printing each file as it completes
      4. Print summary

    Returns:
        Process exit status (0 or 2).
    """
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
        if args.timestamp_field is not None:
            settings = replace(settings, timestamp_field=args.timestamp_field)
    except ValueError as e:
        print(f"ERROR: Invalid configuration: {e}")
        return 2

    input_dir = Path(args.input_dir)
    output_dir = Path(args.output_dir)

    if not input_dir.is_dir():
        print(f"ERROR: Input directory not found: {input_dir}")
        return 2

    print("=" * 80)
    print("CSV EpochTime Conversion")
    print("=" * 80)
    print(f"Input directory:  {input_dir}")
    print(f"Output directory: {output_dir}")
    print(f"Timestamp column: {settings.timestamp_field}")
    print(f"File pattern:     {settings.file_pattern}")
    print("=" * 80)
    print()

    print("Processing files...")
    print("-" * 80)

    try:
        summary = run_batch(input_dir, output_dir, settings=settings, on_file=print_outcome)
    except EpochSortError as e:
        print(f"ERROR: {e}")
        return 2

    if summary.files_found == 0:
        print(f"  No files matching {settings.file_pattern} found under {input_dir}")

    print("-" * 80)
    print()

    print("=" * 80)
    print("Conversion Complete")
    print("=" * 80)
    print(f"Files found:        {summary.files_found}")
    print(f"Files converted:    {summary.converted_count}")
    print(f"Files skipped:      {summary.skipped_count} (empty or no timestamp column)")
    print(f"Files failed:       {summary.failed_count}")
    print(f"Total rows written: {summary.total_rows:,}")
    print(f"Row warnings:       {summary.warning_count} (EpochTime set to 0)")
    print()

    return 0


if __name__ == "__main__":
    sys.exit(main())
