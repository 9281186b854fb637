"""
Configuration settings for the epoch-time CSV converter.

**Conceptual**: This module provides a strongly-typed configuration object that
loads from environment variables (via .env files). Settings are validated at
startup, ensuring fail-fast behavior if configuration is invalid.

**Why centralized config?**
  - Single source of truth for the timestamp column, file pattern and CSV dialect.
  - Easy to test (inject fake settings instead of reading from environment).
  - Fail-fast validation (bad delimiter -> clear error at startup, not mid-batch).

This module uses python-dotenv to load .env files and dataclasses for type safety.
"""

import codecs
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env from project root (no-op if the file does not exist)
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


DEFAULT_TIMESTAMP_FIELD = "TimeCreated"
DEFAULT_FILE_PATTERN = "*.csv"
DEFAULT_ENCODING = "utf-8"
DEFAULT_DELIMITER = ","

# Tried in order for values that are not ISO 8601.
# First entry is the invariant-culture layout written by most Windows exporters.
DEFAULT_FALLBACK_FORMATS = (
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%Y",
)


@dataclass(frozen=True)
class EpochSortSettings:
    """
    Configuration for a conversion run.

    **Conceptual**: Every knob that changes how an input file is interpreted
    lives here, so the transformer and the batch runner take one object
    instead of a growing list of keyword arguments.

    Attributes:
        timestamp_field: Column whose values are converted to epoch milliseconds
                         (default "TimeCreated").
        file_pattern: Glob matched recursively under the input directory
                      (default "*.csv").
        encoding: Text encoding for both reading and writing (default "utf-8").
        delimiter: Single-character field delimiter (default ",").
        fallback_formats: strftime formats tried, in order, for timestamps that
                          are not ISO 8601.
    """
    timestamp_field: str = DEFAULT_TIMESTAMP_FIELD
    file_pattern: str = DEFAULT_FILE_PATTERN
    encoding: str = DEFAULT_ENCODING
    delimiter: str = DEFAULT_DELIMITER
    fallback_formats: tuple[str, ...] = field(default=DEFAULT_FALLBACK_FORMATS)

    def __post_init__(self):
        """Validate settings after initialization."""
        if not self.timestamp_field or not self.timestamp_field.strip():
            raise ValueError(
                "EPOCH_SORT_TIMESTAMP_FIELD must be a non-empty column name."
            )
        if len(self.delimiter) != 1:
            raise ValueError(
                f"EPOCH_SORT_DELIMITER must be exactly one character, got: {self.delimiter!r}"
            )
        if not self.file_pattern:
            raise ValueError(
                "EPOCH_SORT_FILE_PATTERN must be a non-empty glob pattern."
            )
        if not self.encoding:
            raise ValueError(
                "EPOCH_SORT_ENCODING must be a non-empty encoding name."
            )
        try:
            codecs.lookup(self.encoding)
        except LookupError as e:
            raise ValueError(
                f"EPOCH_SORT_ENCODING is not a known encoding: {self.encoding!r}"
            ) from e

    @classmethod
    def from_env(cls) -> "EpochSortSettings":
        """
        Load settings from environment variables.

        **Environment variables** (all optional):
          - EPOCH_SORT_TIMESTAMP_FIELD: Column to convert. Default "TimeCreated".
          - EPOCH_SORT_FILE_PATTERN: Recursive glob for inputs. Default "*.csv".
          - EPOCH_SORT_ENCODING: Read/write encoding. Default "utf-8".
          - EPOCH_SORT_DELIMITER: Field delimiter. Default ",".
          - EPOCH_SORT_FALLBACK_FORMATS: ';'-separated strftime formats tried
            after ISO 8601. Default: see DEFAULT_FALLBACK_FORMATS.

        Returns:
            EpochSortSettings object with values loaded from environment.

        Raises:
            ValueError: If any value fails validation.

        Usage example:
            >>> # In .env file:
            >>> # EPOCH_SORT_TIMESTAMP_FIELD=EventTime
            >>>
            >>> settings = EpochSortSettings.from_env()
            >>> print(settings.timestamp_field)  # "EventTime"
        """
        timestamp_field = os.getenv("EPOCH_SORT_TIMESTAMP_FIELD", DEFAULT_TIMESTAMP_FIELD)
        file_pattern = os.getenv("EPOCH_SORT_FILE_PATTERN", DEFAULT_FILE_PATTERN)
        encoding = os.getenv("EPOCH_SORT_ENCODING", DEFAULT_ENCODING)
        delimiter = os.getenv("EPOCH_SORT_DELIMITER", DEFAULT_DELIMITER)
        formats_str = os.getenv("EPOCH_SORT_FALLBACK_FORMATS")

        if formats_str is None:
            fallback_formats = DEFAULT_FALLBACK_FORMATS
        else:
            fallback_formats = tuple(f.strip() for f in formats_str.split(";") if f.strip())

        return cls(
            timestamp_field=timestamp_field,
            file_pattern=file_pattern,
            encoding=encoding,
            delimiter=delimiter,
            fallback_formats=fallback_formats,
        )


# Lazily-loaded singleton. Tests can construct EpochSortSettings directly instead.
_default_settings: Optional[EpochSortSettings] = None


def get_settings() -> EpochSortSettings:
    """
    Get the global settings singleton.

    Settings are loaded from environment on first call, then cached for reuse.
    Call reset_settings() to force a reload (tests do this after changing
    environment variables).

    Returns:
        Global EpochSortSettings singleton.

    Raises:
        ValueError: If the environment holds an invalid value.
    """
    global _default_settings

    if _default_settings is None:
        _default_settings = EpochSortSettings.from_env()

    return _default_settings


def reset_settings():
    """
    Reset the global settings singleton (for testing).

    **Testing pattern**:
      ```python
      def test_something(monkeypatch):
          reset_settings()
          monkeypatch.setenv("EPOCH_SORT_TIMESTAMP_FIELD", "EventTime")
          assert get_settings().timestamp_field == "EventTime"
      ```
    """
    global _default_settings
    _default_settings = None
