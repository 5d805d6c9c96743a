"""Per-report increment rules.

Each survey report is scored by an ordered table of independent rules. A rule
reads one survey answer and holds ordered buckets of ``(matcher, weight)``;
the first bucket whose matcher accepts the answer contributes its weight, and
the report's increment is the sum over all rules. Rules never look at each
other's outcome, except that a rule may carry a precondition on the report
(assignment duration only counts when an assignment was given).

Answers are free text from an uncontrolled survey, so matchers are
case-insensitive pattern searches rather than equality checks. An empty or
unrecognised answer contributes nothing.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from .fields import ReportField, get_text

Matcher = Callable[[str], bool]


@dataclass(frozen=True)
class PatternMatcher:
    """Accepts text when any of its patterns is found (case-insensitive)."""

    patterns: Tuple[str, ...]
    _compiled: Tuple[re.Pattern, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        compiled = tuple(re.compile(p, re.IGNORECASE) for p in self.patterns)
        object.__setattr__(self, "_compiled", compiled)

    def __call__(self, text: str) -> bool:
        return any(pattern.search(text) for pattern in self._compiled)


def any_of(*patterns: str) -> PatternMatcher:
    return PatternMatcher(tuple(patterns))


def answered(prefix: str) -> PatternMatcher:
    """Match answers that start with ``prefix`` as a whole word ("No, ...")."""
    return any_of(rf"^\s*{prefix}\b")


def whole_value(value: str) -> PatternMatcher:
    """Match an enumerated answer exactly, ignoring case and outer whitespace."""
    return any_of(rf"^\s*{re.escape(value)}\s*$")


@dataclass(frozen=True)
class IncrementRule:
    """One scored survey question."""

    name: str
    question: str
    buckets: Tuple[Tuple[Matcher, int], ...]
    when: Optional[Callable[[Mapping[str, Any]], bool]] = None

    def evaluate(self, report: Mapping[str, Any]) -> int:
        """Return this rule's contribution for ``report`` (0 when nothing matches)."""
        if self.when is not None and not self.when(report):
            return 0

        answer = get_text(report, self.question)
        if not answer.strip():
            return 0

        for matcher, weight in self.buckets:
            if matcher(answer):
                return weight
        return 0


STAGE_WEIGHTS: Dict[str, int] = {
    "No Response After Application": 5,
    "No Response After Initial Inquiry": 5,
    "Ghosted After First Interview": 20,
    "Ghosted After Multiple Interviews": 50,
    "Ghosted After Completing an Assignment": 25,
    "Ghosted After Verbal Offer": 60,
}

NO_ASSIGNMENT = any_of(r"no assignments required")


def canonical_stage(answer: str) -> str:
    """Map a stage answer onto its STAGE_WEIGHTS spelling, or return it stripped."""
    stripped = answer.strip()
    for stage in STAGE_WEIGHTS:
        if stripped.lower() == stage.lower():
            return stage
    return stripped


def is_assignment(answer: str) -> bool:
    """True for a non-blank assignment type other than "No assignments required"."""
    return bool(answer.strip()) and not NO_ASSIGNMENT(answer)


def assignment_given(report: Mapping[str, Any]) -> bool:
    return is_assignment(get_text(report, ReportField.ASSIGNMENT_TYPE))


INCREMENT_RULES: Tuple[IncrementRule, ...] = (
    IncrementRule(
        name="stage",
        question=ReportField.STAGE,
        buckets=tuple((whole_value(stage), weight) for stage, weight in STAGE_WEIGHTS.items()),
    ),
    IncrementRule(
        name="assignment_given",
        question=ReportField.ASSIGNMENT_TYPE,
        buckets=((is_assignment, 25),),
    ),
    IncrementRule(
        name="assignment_duration",
        question=ReportField.ASSIGNMENT_DURATION,
        when=assignment_given,
        buckets=(
            (any_of(r"<\s*2", r"less than 2"), 20),
            (any_of(r"2.?[\-–—]?5", r"2\s*–\s*5"), 30),
            (any_of(r"5.?[\-–—]?10", r"5\s*–\s*10"), 50),
            (any_of(r"more than 10", r">\s?10", r"10\+"), 75),
        ),
    ),
    IncrementRule(
        name="unpaid_assignment",
        question=ReportField.ASSIGNMENT_PAID,
        buckets=((answered("no"), 30),),
    ),
    IncrementRule(
        name="feedback",
        question=ReportField.FEEDBACK,
        buckets=(
            (any_of(r"no[, ]*no feedback", r"no feedback"), 30),
            (any_of(r"vague"), 10),
        ),
    ),
    IncrementRule(
        name="receipt_unconfirmed",
        question=ReportField.RECEIPT,
        buckets=((answered("no"), 10),),
    ),
    IncrementRule(
        name="follow_up",
        question=ReportField.FOLLOW_UP,
        buckets=(
            (any_of(r"no response"), 15),
            (any_of(r"vague excuse", r"vague"), 8),
        ),
    ),
    IncrementRule(
        name="wait",
        question=ReportField.WAIT,
        buckets=(
            (any_of(r"<\s*1", r"less than 1"), 15),
            (any_of(r"1.?[\-–—]?2", r"1\s*–\s*2"), 25),
            (any_of(r"2.?[\-–—]?4", r"2\s*–\s*4"), 40),
            (any_of(r"more than 1 month", r">\s?1 month"), 60),
        ),
    ),
    IncrementRule(
        name="no_official_rejection",
        question=ReportField.REJECTION,
        buckets=((any_of(r"no[, ]*complete silence", r"^\s*no\b"), 40),),
    ),
)


def report_increment(report: Mapping[str, Any], rules: Tuple[IncrementRule, ...] = INCREMENT_RULES) -> int:
    """Score one report: the sum of every rule's contribution, always >= 0."""
    return sum(rule.evaluate(report) for rule in rules)

