"""
Timestamp parsing and epoch-millisecond conversion.

**Conceptual**: Turning free-form timestamp strings into integers is the one
step where a CSV conversion can silently go wrong. This module pins down the
exact set of accepted layouts so that "which rows fall back to EpochTime 0"
is predictable and documented, rather than depending on machine locale.

**Accepted layouts** (tried in this order):
  1. ISO 8601 via pd.to_datetime(format='ISO8601'):
     - "YYYY-MM-DD"
     - "YYYY-MM-DD HH:MM:SS" and "YYYY-MM-DDTHH:MM:SS"
     - optional fractional seconds ("...:SS.fff")
     - optional offset ("Z", "+02:00", "-0500")
  2. Each configured fallback strftime format (defaults live in
     src.config.settings.DEFAULT_FALLBACK_FORMATS), e.g. "01/31/2021 13:45:00".

**Rules**:
  - Values without an offset are treated as UTC.
  - Surrounding whitespace and a leading BOM are ignored.
  - Empty values and relative words ("now", "today", ...) count as unparseable.
  - Any four-digit year converts, including years before 1677 or after 2262
    (pandas keeps those at a coarser resolution than nanoseconds). A value
    whose millisecond offset still cannot be computed counts as unparseable.
  - Epoch milliseconds are floored, so 1969-12-31T23:59:59.999Z -> -1.

**Entry points**: parse_epoch_millis() is the vectorised path the transformer
uses. to_epoch_millis() is a scalar convenience wrapper for tests and
interactive checks.
"""

import pandas as pd
from pandas.errors import OutOfBoundsDatetime

from src.config.settings import DEFAULT_FALLBACK_FORMATS


EPOCH_ORIGIN = pd.Timestamp(0, tz="UTC")
# Millisecond unit so floor division never widens a coarse timedelta to nanoseconds
ONE_MILLISECOND = pd.Timedelta(milliseconds=1).as_unit("ms")

# pandas resolves these against the wall clock; a file's content must not.
RELATIVE_KEYWORDS = frozenset({"now", "today", "tomorrow", "yesterday"})


def _clean_value(value) -> str:
    if not isinstance(value, str):
        return ""
    cleaned = value.lstrip("\ufeff").strip()
    if cleaned.lower() in RELATIVE_KEYWORDS:
        return ""
    return cleaned


def _scalar_epoch_millis(ts) -> float:
    if pd.isna(ts):
        return float("nan")
    try:
        return float((ts - EPOCH_ORIGIN.as_unit(ts.unit)) // ONE_MILLISECOND)
    except (OutOfBoundsDatetime, OverflowError):
        return float("nan")


def _to_epoch_millis(parsed: pd.Series) -> pd.Series:
    # Subtract in the parsed resolution. NaT stays NaN so later passes can fill it
    origin = EPOCH_ORIGIN.as_unit(parsed.dt.unit)
    try:
        return ((parsed - origin) // ONE_MILLISECOND).astype("float64")
    except (OutOfBoundsDatetime, OverflowError):
        return parsed.map(_scalar_epoch_millis).astype("float64")


def parse_epoch_millis(
    values: pd.Series,
    fallback_formats: tuple[str, ...] = DEFAULT_FALLBACK_FORMATS,
) -> tuple[pd.Series, pd.Series]:
    """
    Convert a column of timestamp strings to epoch milliseconds.

    **Functionally**:
      - Cleans every value (strip, drop BOM, blank out relative keywords).
      - Parses everything it can as ISO 8601, converting offsets to UTC.
      - Retries only the still-unparsed, non-empty values with each fallback
        format in turn.
      - Returns 0 for every value that no pass could parse, together with a
        boolean mask telling the caller which values those were.

    Args:
        values: Series of raw timestamp cells (strings; NaN/None are treated as empty).
        fallback_formats: strftime formats tried after ISO 8601, in order.

    Returns:
        (epoch_ms, parsed_ok):
          - epoch_ms: int64 Series aligned with `values`, 0 where unparsed.
          - parsed_ok: bool Series, False where the value fell back to 0.

    Example:
        >>> epoch_ms, ok = parse_epoch_millis(pd.Series([
        ...     '2021-01-01 00:00:01', '1970-01-01T02:00:00+02:00', 'not-a-date'
        ... ]))
        >>> epoch_ms.tolist()
        [1609459201000, 0, 0]
        >>> ok.tolist()
        [True, True, False]
    """
    cleaned = values.map(_clean_value)

    millis = _to_epoch_millis(
        pd.to_datetime(cleaned, format="ISO8601", utc=True, errors="coerce")
    )

    for fmt in fallback_formats:
        missing = millis.isna() & (cleaned != "")
        if not missing.any():
            break
        candidate = pd.to_datetime(cleaned[missing], format=fmt, utc=True, errors="coerce")
        millis = millis.fillna(_to_epoch_millis(candidate))

    parsed_ok = millis.notna()
    return millis.fillna(0).astype("int64"), parsed_ok


def to_epoch_millis(
    value: str,
    fallback_formats: tuple[str, ...] = DEFAULT_FALLBACK_FORMATS,
) -> int | None:
    """
    Convert a single timestamp string to epoch milliseconds.

    Scalar convenience over parse_epoch_millis(); returns None instead of 0
    when the value cannot be parsed, so callers can tell the two apart.
    """
    epoch_ms, parsed_ok = parse_epoch_millis(pd.Series([value], dtype=object), fallback_formats)
    if not parsed_ok.iloc[0]:
        return None
    return int(epoch_ms.iloc[0])
