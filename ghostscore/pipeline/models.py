"""Data models for sync run tracking and reporting."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class EmployerRunStats:
    """
    Outcome for one employer within a sync run.

    Attributes:
        company_key: EmployerKey of the employer
        report_count: Number of reports folded for this employer
        ghost_score: Computed GhostScore (None if scoring failed)
        action: "created" or "updated" (the intended action in dry-run mode)
        dry_run: Whether the write was skipped
        error_message: Set when the employer's write failed
    """

    company_key: str
    report_count: int = 0
    ghost_score: Optional[int] = None
    action: Optional[str] = None
    dry_run: bool = False
    error_message: Optional[str] = None

    @property
    def had_errors(self) -> bool:
        return self.error_message is not None


@dataclass
class SyncRunResult:
    """
    Aggregate results of one sync run.

    Attributes:
        run_id: Identifier stamped on every log line of the run
        run_started_at: UTC timestamp when the run began
        run_finished_at: UTC timestamp when the run completed
        dry_run: Whether writes were skipped
        total_reports: Rows read from the source table
        total_target_rows: Rows read from the target table
        employer_stats: Per-employer outcomes, in processing order
    """

    run_id: str
    run_started_at: datetime
    run_finished_at: datetime
    dry_run: bool = True
    total_reports: int = 0
    total_target_rows: int = 0
    employer_stats: List[EmployerRunStats] = field(default_factory=list)

    @property
    def total_duration_seconds(self) -> float:
        return (self.run_finished_at - self.run_started_at).total_seconds()

    @property
    def total_employers(self) -> int:
        return len(self.employer_stats)

    def _count_action(self, action: str) -> int:
        return sum(1 for s in self.employer_stats if s.action == action and not s.had_errors)

    @property
    def created_count(self) -> int:
        return self._count_action("created")

    @property
    def updated_count(self) -> int:
        return self._count_action("updated")

    @property
    def error_count(self) -> int:
        return sum(1 for s in self.employer_stats if s.had_errors)

    @property
    def had_errors(self) -> bool:
        return self.error_count > 0
