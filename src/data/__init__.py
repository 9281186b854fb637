"""
CSV I/O, column contracts and file-level error types.

Handles decoding input CSVs into string-valued rows and encoding converted
rows back to disk, with clear errors when a file cannot be used.
"""
