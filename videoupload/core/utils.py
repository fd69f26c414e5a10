"""Formatting helpers shared by the upload engine and the CLI."""


def format_size(size: float) -> str:
    """Formats a byte count as a human-readable string (e.g. '1.50 GB')."""
    for unit in ('B', 'KB', 'MB', 'GB'):
        if abs(size) < 1024:
            return f"{size:.2f} {unit}" if unit != 'B' else f"{int(size)} B"
        size /= 1024
    return f"{size:.2f} TB"


def format_duration(seconds: float) -> str:
    """Formats seconds as '45s', '3m 20s' or '1h 5m'."""
    seconds = int(max(seconds, 0))
    if seconds < 60:
        return f"{seconds}s"
    minutes, secs = divmod(seconds, 60)
    if minutes < 60:
        return f"{minutes}m {secs}s"
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes}m"
