"""
Generic utility functions shared across modules.

Includes timestamp parsing and epoch-millisecond conversion helpers.
"""
