"""
Helper functions for formatting data into human-readable strings.
"""

from typing import Optional


def format_duration(seconds: float) -> str:
    """
    Formats a duration in seconds into a human-readable string (e.g., '2h 34m 12s').
    """
    s = int(seconds)
    hours, remainder = divmod(s, 3600)
    minutes, secs = divmod(remainder, 60)
    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if secs > 0 or not parts:
        parts.append(f"{secs}s")
    return " ".join(parts)


def format_percentage(done: int, total: int) -> str:
    """Formats a progress ratio truncated to two decimals (e.g., '33.33%')."""
    if total <= 0:
        return "0%"
    return f"{int(done / total * 10000) / 100:g}%"


def episode_label(season_index: Optional[int], episode_index: Optional[int]) -> str:
    """Builds an 'S01E02' style label, tolerating missing indexes."""
    season = f"S{season_index:02}" if season_index is not None else "S??"
    episode = f"E{episode_index:02}" if episode_index is not None else "E??"
    return season + episode


def mask_secret(value: str, visible: int = 4) -> str:
    """Hides all but the last few characters of a secret."""
    if len(value) <= visible:
        return "*" * len(value)
    return "*" * (len(value) - visible) + value[-visible:]
