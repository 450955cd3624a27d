"""
liveness.errors

Error taxonomy
- HeartbeatConfigError: bad interval values, raised when configured
- StoreError: record store I/O failure other than "file missing"
"""

from __future__ import annotations

from pathlib import Path


class HeartbeatConfigError(ValueError):
    pass


class StoreError(OSError):
    """
    Store failure with the path it happened on

    Raised `from` the underlying OSError / JSON error.
    """

    def __init__(self, message: str, path: Path) -> None:
        super().__init__(f"{message}: {path}")
        self.path = path
