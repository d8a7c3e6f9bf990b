"""Duration formatting helpers (milliseconds to display strings)"""


def _split(ms: int):
    total_seconds = max(0, int(ms)) // 1000
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60
    return hours, minutes, seconds


def format_clock(ms: int) -> str:
    """
    Live timer display.

    Returns:
        str: "HH:MM:SS", hours grow past two digits when needed
    """
    hours, minutes, seconds = _split(ms)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_duration(ms: int) -> str:
    """
    Compact duration for activity lists and exports.

    Returns:
        str: "2h 5m", "42m", or "< 1m" below one minute
    """
    hours, minutes, _ = _split(ms)
    if hours > 0:
        return f"{hours}h {minutes}m"
    if minutes > 0:
        return f"{minutes}m"
    return "< 1m"
