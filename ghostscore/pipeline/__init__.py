"""Pipeline orchestration for the GhostScore sync."""

from .models import EmployerRunStats, SyncRunResult
from .runner import SyncPipeline

__all__ = [
    "SyncPipeline",
    "SyncRunResult",
    "EmployerRunStats",
]
