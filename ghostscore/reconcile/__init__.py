"""Reconciliation of scored employers into the target table."""

from .reconciler import Reconciler
from .snapshot import TargetSnapshot, get_row_id, row_company_key

__all__ = ["Reconciler", "TargetSnapshot", "get_row_id", "row_company_key"]
