"""Common utility functions for bibmerge.

This module consolidates shared hashing and timestamp helpers used by the
audit subsystem and the file API.
"""

from bibmerge.utils.hashing import (
    calculate_file_sha256,
    calculate_string_sha256,
    format_sha256,
)
from bibmerge.utils.timestamps import get_iso_timestamp

__all__ = [
    "get_iso_timestamp",
    "calculate_file_sha256",
    "calculate_string_sha256",
    "format_sha256",
]
