"""Derive the GhostScore and summary statistics from an EmployerAggregate.

Formulas:

- ``damping = N / (N + 1)``: a single report moves the score half as far as
  its raw increment, and the factor approaches 1 as corroborating reports
  accumulate.
- ``GhostScore = clamp(round(500 + sum * damping), 0, 999)``
- ``pct = round(count / N * 1000) / 10``; 0 when N is 0
- ``confidence = clamp(log10(N + 1) / log10(11), 0, 1)``; 0 at N=0, 1 at N=10

Rounding is half-up so x.5 values land where the published scores put them.
"""

import math
from collections import Counter
from typing import List

from ghostscore.domain.models import DataQuality, OutputRecord
from ghostscore.utils.timestamps import format_timestamp

from .aggregator import EmployerAggregate

BASELINE_SCORE = 500
MIN_SCORE = 0
MAX_SCORE = 999
CONFIDENCE_SATURATION_REPORTS = 10
TOP_N = 3
RECRUITER_VISIBLE_CHARS = 4
RECRUITER_MASK = "****"

NO_RESPONSE_STAGES = ("No Response After Application", "No Response After Initial Inquiry")
ASSIGNMENT_STAGES = ("Ghosted After Completing an Assignment",)
INTERVIEW_STAGES = ("Ghosted After First Interview", "Ghosted After Multiple Interviews")
OFFER_STAGES = ("Ghosted After Verbal Offer",)


def round_half_up(value: float, digits: int = 0) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def damping(report_count: int) -> float:
    return report_count / (report_count + 1)


def ghost_score(sum_increments: float, report_count: int) -> int:
    raw_score = BASELINE_SCORE + sum_increments * damping(report_count)
    return int(clamp(round_half_up(raw_score), MIN_SCORE, MAX_SCORE))


def pct(count: int, total: int) -> float:
    """Share of ``total`` as a percentage with one decimal; 0 for an empty total."""
    if not total:
        return 0.0
    return math.floor((count / total) * 1000 + 0.5) / 10


def calculate_confidence(report_count: int) -> float:
    """Trust in an employer's score given its number of reports, in [0, 1]."""
    if report_count <= 0:
        return 0.0
    value = math.log10(report_count + 1) / math.log10(CONFIDENCE_SATURATION_REPORTS + 1)
    return clamp(value, 0.0, 1.0)


def top_n(counts: Counter, n: int = TOP_N) -> List[str]:
    """Most frequent non-blank keys, ties kept in first-seen order."""
    ranked = sorted(
        ((key, count) for key, count in counts.items() if key and count > 0),
        key=lambda item: item[1],
        reverse=True,
    )
    return [key for key, _ in ranked[:n]]


def mask_recruiter(name: str) -> str:
    """Reveal at most the first four characters of a recruiter name or email."""
    if not name:
        return ""
    if len(name) <= RECRUITER_VISIBLE_CHARS:
        return name
    return name[:RECRUITER_VISIBLE_CHARS] + RECRUITER_MASK


def _stage_total(aggregate: EmployerAggregate, stages) -> int:
    return sum(aggregate.stage_counts.get(stage, 0) for stage in stages)


def summarize(aggregate: EmployerAggregate) -> OutputRecord:
    """Build the OutputRecord for one employer."""
    n = aggregate.report_count
    total = aggregate.sum_increments

    return OutputRecord(
        company_key=aggregate.company_key,
        company_name=aggregate.company_name,
        reports_count=n,
        sum_increments=int(round_half_up(total)),
        avg_report_increment=round_half_up(total / n, 1) if n else 0.0,
        ghost_score=ghost_score(total, n),
        first_report_date=format_timestamp(aggregate.first_report_at),
        last_report_date=format_timestamp(aggregate.last_report_at),
        no_response_pct=pct(_stage_total(aggregate, NO_RESPONSE_STAGES), n),
        ghosted_after_assignment_pct=pct(_stage_total(aggregate, ASSIGNMENT_STAGES), n),
        ghosted_after_interview_pct=pct(_stage_total(aggregate, INTERVIEW_STAGES), n),
        ghosted_after_offer_pct=pct(_stage_total(aggregate, OFFER_STAGES), n),
        assignments_given_pct=pct(aggregate.assignment_given_count, n),
        unpaid_assignment_pct=pct(aggregate.unpaid_count, n),
        confirmed_receipt_pct=pct(aggregate.receipt_yes_count, n),
        feedback_received_pct=pct(aggregate.feedback_yes_count, n),
        no_feedback_pct=pct(aggregate.feedback_no_count, n),
        followup_no_response_pct=pct(aggregate.followup_no_response_count, n),
        official_rejection_pct=pct(aggregate.official_rejection_count, n),
        ai_screening_pct=pct(aggregate.ai_screening_count, n),
        would_apply_again_pct=pct(aggregate.apply_again_yes_count, n),
        would_recommend_pct=pct(aggregate.recommend_yes_count, n),
        top_roles=", ".join(top_n(aggregate.role_counts)),
        top_recruiters=", ".join(mask_recruiter(r) for r in top_n(aggregate.recruiter_counts)),
        top_assignment_types=", ".join(top_n(aggregate.assignment_type_counts)),
        top_locations=", ".join(top_n(aggregate.location_counts)),
        common_impact=", ".join(top_n(aggregate.impact_counts, 1)),
        data_quality_flag=DataQuality.LOW_EVIDENCE if n == 1 else DataQuality.OK,
        confidence_score=round_half_up(calculate_confidence(n), 3),
    )
