"""
pushel_core package.

Holds process-level helpers for the pushel reminder daemon.
"""

__all__ = [
    "logger",
]
