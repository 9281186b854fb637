"""
Configuration loading and validation.

Provides a strongly typed settings object for the timestamp column, input
file pattern and CSV dialect, with upfront validation.
"""
