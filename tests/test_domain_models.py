"""Unit tests for domain models."""

import pytest
from pydantic import ValidationError

from ghostscore.domain.models import (
    DataQuality,
    OutputRecord,
    ReconcileAction,
    ReconcileResult,
    TargetRow,
)


def make_record(**overrides):
    values = {
        "company_key": "acme",
        "company_name": "Acme",
        "reports_count": 1,
        "sum_increments": 60,
        "avg_report_increment": 60.0,
        "ghost_score": 530,
        "data_quality_flag": DataQuality.LOW_EVIDENCE,
        "confidence_score": 0.289,
    }
    values.update(overrides)
    return OutputRecord(**values)


class TestOutputRecord:
    """Tests for OutputRecord."""

    def test_defaults(self):
        record = make_record()

        assert record.no_response_pct == 0.0
        assert record.top_roles == ""
        assert record.notes == ""
        assert record.first_report_date is None
        assert record.data_quality_flag == "low-evidence"

    def test_populate_by_column_title(self):
        record = OutputRecord.model_validate(
            {
                "Company Key": "acme",
                "Company Name": "Acme",
                "Reports Count": 2,
                "Sum Increments": 80,
                "Avg Report Increment": 40.0,
                "GhostScore": 553,
                "Data Quality Flag": "ok",
                "Confidence Score": 0.458,
            }
        )
        assert record.ghost_score == 553

    def test_payload_has_every_column(self):
        payload = make_record().to_payload()

        assert len(payload) == len(OutputRecord.model_fields)
        assert payload["AI Screening Required %"] == 0.0
        assert payload["Confidence Score"] == 0.289
        assert payload["Notes"] == ""

    def test_frozen(self):
        record = make_record()
        with pytest.raises(ValidationError):
            record.ghost_score = 1

    @pytest.mark.parametrize(
        "field,value",
        [
            ("ghost_score", 1000),
            ("ghost_score", -1),
            ("no_response_pct", 100.1),
            ("confidence_score", 1.5),
            ("reports_count", -1),
        ],
    )
    def test_bounds(self, field, value):
        with pytest.raises(ValidationError):
            make_record(**{field: value})


class TestReconcileModels:
    """Tests for TargetRow and ReconcileResult."""

    def test_target_row(self):
        row = TargetRow(company_key="acme", row_id=3, content={"Id": 3})
        assert row.row_id == 3

    def test_reconcile_result_defaults(self):
        result = ReconcileResult(company_key="acme", action=ReconcileAction.CREATED)

        assert result.row_id is None
        assert result.dry_run is False
        assert result.action.value == "created"
