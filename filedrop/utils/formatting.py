"""Human-readable formatting helpers."""

import math

SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


def format_size(num_bytes: int) -> str:
    """Format a byte count using 1024-based units.

    The largest unit whose scaled value is at least 1 is chosen and the value
    is rounded half-up to a whole number.

    Args:
        num_bytes: Size in bytes

    Returns:
        Human-readable size string (e.g., "2 KB")
    """
    if num_bytes <= 0:
        return "0 Bytes"

    scaled = float(num_bytes)
    unit = SIZE_UNITS[0]
    for unit in SIZE_UNITS:
        if scaled < 1024 or unit == SIZE_UNITS[-1]:
            break
        scaled = scaled / 1024
    return f"{math.floor(scaled + 0.5)} {unit}"
