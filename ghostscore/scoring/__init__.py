"""Turning free-text survey reports into employer GhostScores.

- fields: tolerant access to report columns
- keys: EmployerKey normalization
- rules: per-report increment rule table
- aggregator: grouping and per-employer statistics
- calculator: GhostScore, percentages, confidence and top-N summaries
"""

from .aggregator import EmployerAggregate, group_reports, resolve_display_name
from .calculator import calculate_confidence, mask_recruiter, pct, summarize, top_n
from .fields import ReportField, get_field, get_text
from .keys import UNKNOWN_KEY, normalize_company_key
from .rules import INCREMENT_RULES, STAGE_WEIGHTS, IncrementRule, report_increment

__all__ = [
    "EmployerAggregate",
    "group_reports",
    "resolve_display_name",
    "calculate_confidence",
    "mask_recruiter",
    "pct",
    "summarize",
    "top_n",
    "ReportField",
    "get_field",
    "get_text",
    "UNKNOWN_KEY",
    "normalize_company_key",
    "INCREMENT_RULES",
    "STAGE_WEIGHTS",
    "IncrementRule",
    "report_increment",
]
