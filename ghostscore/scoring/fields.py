"""Tolerant field access for survey report rows.

NocoDB rows arrive either flat or with their columns nested under ``fields``,
and column titles drift in casing between table versions. Every lookup here
is total: a missing field, a ``None`` value, or a row that is not a mapping at
all yields ``""`` so downstream pattern matching never has to special-case
absence.

The question strings below are the survey's column titles. They are an
external contract: renaming a question in the survey is a schema change.
"""

from collections.abc import Mapping
from typing import Any


class ReportField:
    """Column titles of the survey report table."""

    COMPANY_NAME = "Company Name"
    TITLE = "Title"

    STAGE = "Where in the Hiring Process Did Ghosting Happen?"
    ASSIGNMENT_TYPE = "What Type of Assignment Was Given?"
    OTHER_ASSIGNMENT_TYPE = "Other Assignment Type"
    ASSIGNMENT_DURATION = "How Long Did It Take You to Complete the Assignment?"
    ASSIGNMENT_PAID = "Was the interview assignment paid?"
    FEEDBACK = "Did You Receive Any Feedback on Your Work?"
    RECEIPT = "Did They Confirm Receipt of Your Work?"
    FOLLOW_UP = "Did You Follow Up After They Stopped Responding?"
    WAIT = "How Long Did You Wait Before Realizing You Were Ghosted?"
    REJECTION = "Did You Receive an Official Rejection?"
    AI_SCREENING = "Did the Company Require AI Screening Before Any Interview?"
    APPLY_AGAIN = "Would You Apply to This Company Again?"
    RECOMMEND = "Would You Recommend This Employer?"
    ROLE = "Job Role Applied For"
    OTHER_ROLE = "Other Role"
    RECRUITER = "Recruiter Name or Email (Optional)"
    LOCATION = "Company Location"
    OTHER_LOCATION = "Other Location"
    IMPACT = "How Did This Ghosting Experience Affect You?"

    # Row metadata, spelled differently across NocoDB versions
    CREATED_AT_VARIANTS = ("_created_at", "CreatedAt", "created_at", "created")


NESTED_FIELDS_KEY = "fields"


def _nested(report: Mapping) -> Mapping:
    nested = report.get(NESTED_FIELDS_KEY)
    return nested if isinstance(nested, Mapping) else {}


def get_field(report: Any, name: str) -> Any:
    """Look up ``name`` on a report row.

    Resolution order: exact key on the row, exact key inside the nested
    ``fields`` mapping, then a case-insensitive match across both (top-level
    keys win over nested ones).

    Returns:
        The stored value, or ``""`` when the field is absent or ``None``
    """
    if not isinstance(report, Mapping) or not isinstance(name, str):
        return ""

    value = report.get(name)
    if value is not None:
        return value

    nested = _nested(report)
    value = nested.get(name)
    if value is not None:
        return value

    wanted = name.lower()
    for source in (report, nested):
        for key, candidate in source.items():
            if isinstance(key, str) and key.lower() == wanted and candidate is not None:
                return candidate

    return ""


def get_text(report: Any, *names: str) -> str:
    """Return the first non-blank field among ``names`` as a string.

    Used for question/fallback pairs such as ``Job Role Applied For`` then
    ``Other Role``. The returned text is not stripped, so free-text answers
    are counted exactly as submitted.
    """
    for name in names:
        value = get_field(report, name)
        if isinstance(value, (list, tuple)):
            # Multi-select columns come back as lists from some API versions
            value = ", ".join(str(item) for item in value if item is not None)
        text = str(value) if value != "" else ""
        if text.strip():
            return text
    return ""
