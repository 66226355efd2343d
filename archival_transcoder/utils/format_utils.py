"""
This module contains helper functions for formatting data into human-readable strings,
mostly for log lines and the end-of-run summary.
"""

from datetime import timedelta
from typing import Union


def format_timedelta(td_object: Union[timedelta, float, int]) -> str:
    """
    Formats a duration into a "HH:MM:SS" string.

    Args:
        td_object: A timedelta, or a number of seconds.

    Returns:
        A string such as "02:01:01" for 7261 seconds. Returns "00:00:00" for
        anything else.
    """
    if isinstance(td_object, (int, float)) and not isinstance(td_object, bool):
        td_object = timedelta(seconds=td_object)
    if not isinstance(td_object, timedelta):
        return "00:00:00"

    total_seconds = int(td_object.total_seconds())
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02}:{minutes:02}:{seconds:02}"


def formatted_size(size_bytes: float) -> str:
    """
    Converts a size in bytes to a human-readable string (e.g., B, KB, MB, GB, TB).

    Args:
        size_bytes: The size in bytes. Negative values are shown with a minus sign,
                    which happens when an encode grew the file.

    Returns:
        A formatted string with the appropriate unit.
        For example, 1536 becomes "1.50 KB", and 2097152 becomes "2 MB".
    """
    sign = "-" if size_bytes < 0 else ""
    size_bytes = abs(size_bytes)

    units = ["B", "KB", "MB", "GB", "TB", "PB"]
    factor = 1024.0

    if size_bytes == 0:
        return "0 B"

    for unit in units:
        if size_bytes < factor:
            if unit == "B":
                return f"{sign}{int(size_bytes)} {unit}"
            # "2.00 MB" -> "2 MB"
            return f"{sign}{size_bytes:.2f} {unit}".replace(".00", "")
        size_bytes /= factor

    return f"{sign}{size_bytes:.2f} {units[-1]}".replace(".00", "")
