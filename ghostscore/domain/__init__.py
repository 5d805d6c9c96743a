"""Domain models."""

from .models import DataQuality, OutputRecord, ReconcileAction, ReconcileResult, TargetRow

__all__ = ["DataQuality", "OutputRecord", "ReconcileAction", "ReconcileResult", "TargetRow"]
