"""
Tests for EpochTime injection and chronological sorting.

**Purpose**: Verify the conversion guarantees every output file relies on:
  - Output columns always start with EpochTime, then the timestamp column
  - Row count is preserved, including rows with unparseable timestamps
  - Sorting is numeric and stable
  - Empty input and a missing timestamp column are rejected

**Coverage**:
  - add_epoch_time_column()
  - transform_rows()
  - EpochTransformResult.fields / .rows
"""

import pandas as pd
import pytest

from src.data.schemas import EmptyInputError, MissingColumnError, RowParseWarning
from src.transform.epoch_time import add_epoch_time_column, transform_rows


# ============================================================================
# End-to-end example
# ============================================================================

def test_transform_rows_reference_example():
    """Test the two-row example: epoch origin sorts before 2021."""
    rows = [
        {'TimeCreated': '2021-01-01 00:00:01', 'User': 'a'},
        {'TimeCreated': '1970-01-01 00:00:00', 'User': 'b'},
    ]

    result = transform_rows(rows, 'TimeCreated')

    assert result.fields == ['EpochTime', 'TimeCreated', 'User']
    assert result.rows == [
        {'EpochTime': 0, 'TimeCreated': '1970-01-01 00:00:00', 'User': 'b'},
        {'EpochTime': 1609459201000, 'TimeCreated': '2021-01-01 00:00:01', 'User': 'a'},
    ]
    assert result.warnings == []


# ============================================================================
# Column order
# ============================================================================

def test_add_epoch_time_column_leads_with_epoch_and_timestamp():
    """Test that EpochTime and the timestamp column lead regardless of input position."""
    df = pd.DataFrame({
        'Id': ['4624', '4625'],
        'Message': ['logon', 'failed'],
        'TimeCreated': ['2021-01-01 00:00:00', '2021-01-02 00:00:00'],
        'Level': ['Info', 'Warning'],
    })

    result = add_epoch_time_column(df)

    assert result.fields == ['EpochTime', 'TimeCreated', 'Id', 'Message', 'Level']


def test_add_epoch_time_column_replaces_existing_epoch_column():
    """Test that an existing EpochTime column is replaced, not duplicated."""
    df = pd.DataFrame({
        'User': ['a'],
        'EpochTime': ['999'],
        'TimeCreated': ['1970-01-01 00:00:01'],
    })

    result = add_epoch_time_column(df)

    assert result.fields == ['EpochTime', 'TimeCreated', 'User']
    assert result.frame['EpochTime'].tolist() == [1000]


def test_add_epoch_time_column_custom_timestamp_column():
    """Test conversion of a column other than TimeCreated."""
    df = pd.DataFrame({
        'Host': ['h1', 'h2'],
        'EventTime': ['2021-01-02', '2021-01-01'],
    })

    result = add_epoch_time_column(df, timestamp_col='EventTime')

    assert result.fields == ['EpochTime', 'EventTime', 'Host']
    assert result.frame['Host'].tolist() == ['h2', 'h1']


def test_add_epoch_time_column_keeps_original_timestamp_text():
    """Test that the timestamp column is carried through unmodified."""
    df = pd.DataFrame({
        'TimeCreated': ['2021-01-01T02:00:00+02:00'],
        'User': ['a'],
    })

    result = add_epoch_time_column(df)

    assert result.frame['TimeCreated'].iloc[0] == '2021-01-01T02:00:00+02:00'
    assert result.frame['EpochTime'].iloc[0] == 1609459200000


# ============================================================================
# Sorting
# ============================================================================

def test_add_epoch_time_column_sorts_numerically():
    """Test numeric (not lexical) ordering across negative and differently sized values."""
    df = pd.DataFrame({
        'TimeCreated': [
            '1970-01-01 00:00:05',      # 5000
            '1969-12-31 23:59:59',      # -1000
            '1970-01-01 00:00:00.500',  # 500
            '2021-01-01 00:00:00',      # 1609459200000
        ],
        'User': ['five', 'minus', 'half', 'late'],
    })

    result = add_epoch_time_column(df)

    assert result.frame['EpochTime'].tolist() == [-1000, 500, 5000, 1609459200000]
    assert result.frame['User'].tolist() == ['minus', 'half', 'five', 'late']


def test_add_epoch_time_column_sort_is_stable():
    """Test that rows with equal EpochTime keep their input order."""
    df = pd.DataFrame({
        'TimeCreated': [
            'bad-1',
            '2000-01-01 00:00:00',
            'bad-2',
            '1970-01-01 00:00:00',
            '2000-01-01 00:00:00',
            '1960-01-01 00:00:00',
            '',
        ],
        'User': ['u1', 'u2', 'u3', 'u4', 'u5', 'u6', 'u7'],
    })

    result = add_epoch_time_column(df)

    # u1, u3, u4, u7 all have EpochTime 0; u2 and u5 tie in 2000
    assert result.frame['User'].tolist() == ['u6', 'u1', 'u3', 'u4', 'u7', 'u2', 'u5']


def test_add_epoch_time_column_sorts_extreme_years():
    """Test that years before 1677 and after 2262 convert and sort with the rest."""
    df = pd.DataFrame({
        'TimeCreated': ['2021-01-01', '9999-12-31', '1600-01-01 00:00:00', 'bad'],
        'Id': ['now', 'far', 'old', 'bad'],
    })

    result = add_epoch_time_column(df, context='archive.csv')

    assert result.frame['Id'].tolist() == ['old', 'bad', 'now', 'far']
    assert result.frame['EpochTime'].tolist() == [
        -11676096000000, 0, 1609459200000, 253402214400000,
    ]
    assert [w.raw_value for w in result.warnings] == ['bad']


def test_add_epoch_time_column_resets_index():
    """Test that the output has a clean 0..n-1 index after sorting."""
    df = pd.DataFrame(
        {'TimeCreated': ['2021-01-02', '2021-01-01'], 'User': ['a', 'b']},
        index=[7, 3],
    )

    result = add_epoch_time_column(df)

    assert list(result.frame.index) == [0, 1]
    assert result.frame['User'].tolist() == ['b', 'a']


# ============================================================================
# Unparseable timestamps
# ============================================================================

def test_add_epoch_time_column_malformed_timestamp_falls_back_to_zero():
    """Test that "not-a-date" yields EpochTime 0 and the row is kept."""
    df = pd.DataFrame({
        'TimeCreated': ['2021-01-01 00:00:00', 'not-a-date'],
        'User': ['a', 'b'],
    })

    result = add_epoch_time_column(df, context='events.csv')

    assert len(result.frame) == 2
    row_b = result.frame[result.frame['User'] == 'b'].iloc[0]
    assert row_b['EpochTime'] == 0
    assert row_b['TimeCreated'] == 'not-a-date'


def test_add_epoch_time_column_reports_row_warnings():
    """Test that each unparseable value produces one warning with file, row and raw value."""
    df = pd.DataFrame({
        'TimeCreated': ['garbage', '2021-01-01', ''],
        'User': ['a', 'b', 'c'],
    })

    result = add_epoch_time_column(df, context='logs/events.csv')

    assert result.warnings == [
        RowParseWarning(context='logs/events.csv', row_number=1, raw_value='garbage'),
        RowParseWarning(context='logs/events.csv', row_number=3, raw_value=''),
    ]
    assert 'logs/events.csv' in result.warnings[0].message
    assert "'garbage'" in result.warnings[0].message


def test_add_epoch_time_column_preserves_row_count():
    """Test that no row is dropped, whatever its timestamp."""
    df = pd.DataFrame({
        'TimeCreated': ['2021-01-01', 'x', '', '1900-01-01', '2099-12-31 23:59:59', 'now'],
        'Id': [str(i) for i in range(6)],
    })

    result = add_epoch_time_column(df)

    assert len(result.frame) == len(df)
    assert sorted(result.frame['Id'].tolist()) == sorted(df['Id'].tolist())


def test_add_epoch_time_column_does_not_modify_input():
    """Test that the caller's DataFrame is left untouched."""
    df = pd.DataFrame({
        'User': ['a', 'b'],
        'TimeCreated': ['2021-01-02', '2021-01-01'],
    })
    original = df.copy()

    add_epoch_time_column(df)

    pd.testing.assert_frame_equal(df, original)


# ============================================================================
# Rejected inputs
# ============================================================================

def test_add_epoch_time_column_empty_frame_raises():
    """Test that a header-only file (zero rows) is rejected."""
    df = pd.DataFrame({'TimeCreated': [], 'User': []})

    with pytest.raises(EmptyInputError):
        add_epoch_time_column(df)


def test_transform_rows_empty_list_raises():
    """Test that an empty row list is rejected."""
    with pytest.raises(EmptyInputError):
        transform_rows([], 'TimeCreated')


def test_add_epoch_time_column_missing_column_raises():
    """Test that a file without the timestamp column is rejected with context."""
    df = pd.DataFrame({'Date': ['2021-01-01'], 'User': ['a']})

    with pytest.raises(MissingColumnError) as exc_info:
        add_epoch_time_column(df, context='events.csv')

    assert 'TimeCreated' in str(exc_info.value)
    assert 'events.csv' in str(exc_info.value)


def test_transform_rows_uses_first_row_schema():
    """Test that the first row's keys define the input column order."""
    rows = [
        {'User': 'a', 'TimeCreated': '2021-01-02', 'Id': '1'},
        {'User': 'b', 'TimeCreated': '2021-01-01', 'Id': '2'},
    ]

    result = transform_rows(rows)

    assert result.fields == ['EpochTime', 'TimeCreated', 'User', 'Id']
    assert [r['Id'] for r in result.rows] == ['2', '1']
