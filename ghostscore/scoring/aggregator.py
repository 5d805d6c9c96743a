"""Group reports by employer and fold them into per-employer statistics."""

import re
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ghostscore.utils.timestamps import parse_timestamp

from .fields import ReportField, get_field, get_text
from .keys import UNKNOWN_KEY, normalize_company_key
from .rules import canonical_stage, is_assignment, report_increment

_YES = re.compile(r"^\s*yes\b", re.IGNORECASE)
_NO = re.compile(r"^\s*no\b", re.IGNORECASE)
_NO_FEEDBACK = re.compile(r"no feedback", re.IGNORECASE)
_ANY_YES = re.compile(r"yes", re.IGNORECASE)
_VAGUE = re.compile(r"vague", re.IGNORECASE)
_NO_RESPONSE = re.compile(r"no response", re.IGNORECASE)
_FORMAL_EMAIL = re.compile(r"formal email", re.IGNORECASE)


def _count_if(pattern: re.Pattern, text: str) -> int:
    return 1 if pattern.search(text) else 0


@dataclass
class EmployerAggregate:
    """Running statistics for one employer.

    Owned by a single grouping pass and updated report by report via :meth:`fold`.
    Every counter is monotonically non-decreasing and ``report_count`` equals
    the number of folded reports.
    """

    company_key: str
    company_name: str
    report_count: int = 0
    sum_increments: int = 0
    stage_counts: Counter = field(default_factory=Counter)
    assignment_given_count: int = 0
    unpaid_count: int = 0
    receipt_yes_count: int = 0
    feedback_yes_count: int = 0
    feedback_no_count: int = 0
    followup_no_response_count: int = 0
    followup_vague_count: int = 0
    official_rejection_count: int = 0
    ai_screening_count: int = 0
    apply_again_yes_count: int = 0
    recommend_yes_count: int = 0
    role_counts: Counter = field(default_factory=Counter)
    recruiter_counts: Counter = field(default_factory=Counter)
    assignment_type_counts: Counter = field(default_factory=Counter)
    location_counts: Counter = field(default_factory=Counter)
    impact_counts: Counter = field(default_factory=Counter)
    first_report_at: Optional[datetime] = None
    last_report_at: Optional[datetime] = None
    display_names: List[str] = field(default_factory=list)

    def fold(self, report: Mapping[str, Any]) -> int:
        """Absorb one report and return its increment."""
        increment = report_increment(report)
        self.report_count += 1
        self.sum_increments += increment

        self.stage_counts[canonical_stage(get_text(report, ReportField.STAGE))] += 1

        assignment = get_text(report, ReportField.ASSIGNMENT_TYPE, ReportField.OTHER_ASSIGNMENT_TYPE)
        if is_assignment(assignment):
            self.assignment_given_count += 1

        self.unpaid_count += _count_if(_NO, get_text(report, ReportField.ASSIGNMENT_PAID))
        self.receipt_yes_count += _count_if(_YES, get_text(report, ReportField.RECEIPT))
        self._fold_feedback(get_text(report, ReportField.FEEDBACK))

        follow_up = get_text(report, ReportField.FOLLOW_UP)
        if _NO_RESPONSE.search(follow_up):
            self.followup_no_response_count += 1
        elif _VAGUE.search(follow_up):
            self.followup_vague_count += 1

        rejection = get_text(report, ReportField.REJECTION)
        if _YES.search(rejection) or _FORMAL_EMAIL.search(rejection):
            self.official_rejection_count += 1

        self.ai_screening_count += _count_if(_YES, get_text(report, ReportField.AI_SCREENING))
        self.apply_again_yes_count += _count_if(_YES, get_text(report, ReportField.APPLY_AGAIN))
        self.recommend_yes_count += _count_if(_YES, get_text(report, ReportField.RECOMMEND))

        self._tally(self.role_counts, get_text(report, ReportField.ROLE, ReportField.OTHER_ROLE))
        self._tally(self.recruiter_counts, get_text(report, ReportField.RECRUITER))
        self._tally(self.assignment_type_counts, assignment)
        self._tally(
            self.location_counts,
            get_text(report, ReportField.LOCATION, ReportField.OTHER_LOCATION),
        )

        impact = get_text(report, ReportField.IMPACT)
        for tag in impact.split(","):
            self._tally(self.impact_counts, tag.strip())

        self._expand_dates(report)

        return increment

    def _fold_feedback(self, feedback: str) -> None:
        if _NO.search(feedback) or _NO_FEEDBACK.search(feedback):
            self.feedback_no_count += 1
        elif _ANY_YES.search(feedback) and not _VAGUE.search(feedback):
            # Vague feedback is neither received nor missing
            self.feedback_yes_count += 1

    @staticmethod
    def _tally(counts: Counter, value: str) -> None:
        if value:
            counts[value] += 1

    def _expand_dates(self, report: Mapping[str, Any]) -> None:
        created = None
        for name in ReportField.CREATED_AT_VARIANTS:
            created = parse_timestamp(get_field(report, name))
            if created is not None:
                break

        if created is None:
            return

        if self.first_report_at is None or created < self.first_report_at:
            self.first_report_at = created
        if self.last_report_at is None or created > self.last_report_at:
            self.last_report_at = created

    def add_display_name(self, name: str) -> None:
        if name not in self.display_names:
            self.display_names.append(name)

    @property
    def merged_names(self) -> bool:
        """True when distinct display names collapsed into this key."""
        return len(self.display_names) > 1


def resolve_display_name(report: Mapping[str, Any]) -> str:
    """Employer display name: Company Name, else Title, else "unknown"."""
    return get_text(report, ReportField.COMPANY_NAME, ReportField.TITLE).strip() or UNKNOWN_KEY


def group_reports(reports: Iterable[Mapping[str, Any]]) -> Dict[str, EmployerAggregate]:
    """Group reports by EmployerKey and fold each into its aggregate.

    Single pass; employers keep first-seen order and the first display name
    seen for a key is the one reported.
    """
    aggregates: Dict[str, EmployerAggregate] = {}

    for report in reports:
        display_name = resolve_display_name(report)
        key = normalize_company_key(display_name)

        aggregate = aggregates.get(key)
        if aggregate is None:
            aggregate = EmployerAggregate(company_key=key, company_name=display_name)
            aggregates[key] = aggregate

        aggregate.add_display_name(display_name)
        aggregate.fold(report)

    return aggregates
