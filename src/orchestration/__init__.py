"""
Batch workflows over directories of input files.

Coordinates file discovery, per-file conversion and output writing, with
per-file failure isolation and a run summary.
"""
