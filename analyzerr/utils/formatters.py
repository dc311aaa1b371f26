"""
Human readable formatting helpers
"""

_SIZE_UNITS = ["Bytes", "KB", "MB", "GB", "TB", "PB"]


def format_bytes(num_bytes: int | float, decimals: int = 2) -> str:
    """Format a byte count, e.g. 1536 -> '1.5 KB'"""
    if not num_bytes or num_bytes <= 0:
        return "0 Bytes"

    value = float(num_bytes)
    index = 0
    while value >= 1024 and index < len(_SIZE_UNITS) - 1:
        value /= 1024
        index += 1

    decimals = max(decimals, 0)
    text = f"{value:.{decimals}f}"
    if decimals:
        # 1.50 reads as 1.5
        text = text.rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[index]}"


def format_bitrate(kbps: float) -> str:
    """Format a kbps value, switching to Mbps above 1000"""
    if kbps >= 1000:
        return f"{kbps / 1000:.1f} Mbps"
    return f"{round(kbps)} kbps"


def parse_time_left(time_left: str | None) -> dict[str, int | str] | None:
    """Parse an 'HH:MM:SS' (optionally 'D.HH:MM:SS') queue estimate"""
    if not time_left:
        return None

    days = 0
    clock = time_left
    if "." in time_left.split(":")[0]:
        day_part, clock = time_left.split(".", 1)
        days = int(day_part) if day_part.isdigit() else 0

    parts = clock.split(":")
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        return None

    hours, minutes, _seconds = (int(p) for p in parts)
    hours += days * 24
    total_minutes = hours * 60 + minutes
    formatted = f"{hours}h {minutes}m" if hours > 0 else f"{minutes}m"
    return {"total_minutes": total_minutes, "formatted": formatted}
