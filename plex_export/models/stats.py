"""
Dataclass for tracking export session statistics.
"""

import time
from dataclasses import dataclass, field


@dataclass
class ExportStats:
    """Tracks statistics for an export session."""

    sections_exported: int = 0
    sections_skipped: int = 0
    sections_failed: int = 0
    items_exported: int = 0
    items_failed: int = 0
    documents_written: int = 0
    documents_failed: int = 0
    assets_written: int = 0
    assets_failed: int = 0
    seasons_without_episodes: int = 0

    _start_time: float = field(default_factory=time.monotonic, repr=False)

    @property
    def elapsed_seconds(self) -> float:
        return time.monotonic() - self._start_time

    @property
    def has_failures(self) -> bool:
        """True if any node, document or asset was left out of the export."""
        return bool(
            self.sections_failed
            or self.items_failed
            or self.documents_failed
            or self.assets_failed
        )
