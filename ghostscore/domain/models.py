"""Core domain models for scored employers and target-table rows.

- OutputRecord: the derived payload written to the target table per employer
- TargetRow: an existing target-table row, as matched by EmployerKey
- ReconcileAction / ReconcileResult: what the reconciler did (or would do)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class DataQuality(str, Enum):
    """Evidence level of an employer's score."""

    LOW_EVIDENCE = "low-evidence"
    OK = "ok"


class OutputRecord(BaseModel):
    """Scored statistics for one employer.

    Field aliases are the target table's column titles; :meth:`to_payload`
    produces the row body sent to NocoDB. Percentages are in [0, 100] with one
    decimal, ``confidence_score`` in [0, 1] with three decimals.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, use_enum_values=True)

    company_key: str = Field(..., alias="Company Key")
    company_name: str = Field(..., alias="Company Name")
    reports_count: int = Field(..., ge=0, alias="Reports Count")
    sum_increments: int = Field(..., ge=0, alias="Sum Increments")
    avg_report_increment: float = Field(..., ge=0, alias="Avg Report Increment")
    ghost_score: int = Field(..., ge=0, le=999, alias="GhostScore")
    first_report_date: Optional[str] = Field(None, alias="First Report Date")
    last_report_date: Optional[str] = Field(None, alias="Last Report Date")

    no_response_pct: float = Field(0.0, ge=0, le=100, alias="No Response %")
    ghosted_after_assignment_pct: float = Field(0.0, ge=0, le=100, alias="Ghosted After Assignment %")
    ghosted_after_interview_pct: float = Field(0.0, ge=0, le=100, alias="Ghosted After Interview %")
    ghosted_after_offer_pct: float = Field(0.0, ge=0, le=100, alias="Ghosted After Offer %")
    assignments_given_pct: float = Field(0.0, ge=0, le=100, alias="Assignments Given %")
    unpaid_assignment_pct: float = Field(0.0, ge=0, le=100, alias="Unpaid Assignment %")
    confirmed_receipt_pct: float = Field(0.0, ge=0, le=100, alias="Confirmed Receipt %")
    feedback_received_pct: float = Field(0.0, ge=0, le=100, alias="Feedback Received %")
    no_feedback_pct: float = Field(0.0, ge=0, le=100, alias="No Feedback %")
    followup_no_response_pct: float = Field(0.0, ge=0, le=100, alias="Follow-up No Response %")
    official_rejection_pct: float = Field(0.0, ge=0, le=100, alias="Official Rejection %")
    ai_screening_pct: float = Field(0.0, ge=0, le=100, alias="AI Screening Required %")
    would_apply_again_pct: float = Field(0.0, ge=0, le=100, alias="Would Apply Again %")
    would_recommend_pct: float = Field(0.0, ge=0, le=100, alias="Would Recommend %")

    top_roles: str = Field("", alias="Top 3 Roles")
    top_recruiters: str = Field("", alias="Top 3 Recruiters")
    top_assignment_types: str = Field("", alias="Top 3 Assignment Types")
    top_locations: str = Field("", alias="Top 3 Locations")
    common_impact: str = Field("", alias="Common Impact")

    data_quality_flag: DataQuality = Field(..., alias="Data Quality Flag")
    confidence_score: float = Field(..., ge=0, le=1, alias="Confidence Score")
    notes: str = Field("", alias="Notes")

    def to_payload(self) -> Dict[str, Any]:
        """Row body keyed by target column titles."""
        return self.model_dump(by_alias=True, mode="json")


@dataclass(frozen=True)
class TargetRow:
    """An existing target-table row matched by EmployerKey."""

    company_key: str
    row_id: Optional[Any]
    content: Dict[str, Any]


class ReconcileAction(str, Enum):
    CREATED = "created"
    UPDATED = "updated"


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of reconciling one employer.

    ``dry_run`` results carry the same action a live run would have taken.
    """

    company_key: str
    action: ReconcileAction
    row_id: Optional[Any] = None
    dry_run: bool = False
