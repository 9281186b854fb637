"""
Row transformations applied to decoded CSV files.

Currently: deriving an EpochTime column from a timestamp column and sorting
rows chronologically by it.
"""
