"""Unit tests for grouping reports into employer aggregates."""

from datetime import datetime, timezone

from ghostscore.scoring.aggregator import (
    EmployerAggregate,
    group_reports,
    resolve_display_name,
)
from ghostscore.scoring.fields import ReportField


def make_report(company="Acme", **answers):
    report = {ReportField.COMPANY_NAME: company}
    report.update(answers)
    return report


class TestResolveDisplayName:
    """Tests for resolve_display_name."""

    def test_company_name_preferred(self):
        report = {ReportField.COMPANY_NAME: " Acme ", ReportField.TITLE: "Other"}
        assert resolve_display_name(report) == "Acme"

    def test_title_fallback(self):
        assert resolve_display_name({ReportField.TITLE: "Globex"}) == "Globex"

    def test_unknown_when_blank(self):
        assert resolve_display_name({ReportField.COMPANY_NAME: "  "}) == "unknown"


class TestGroupReports:
    """Tests for group_reports."""

    def test_groups_by_normalized_key(self):
        reports = [
            make_report("Acme Inc."),
            make_report("ACME"),
            make_report("Globex"),
        ]

        aggregates = group_reports(reports)

        assert list(aggregates) == ["acme", "globex"]
        assert aggregates["acme"].report_count == 2
        assert aggregates["globex"].report_count == 1

    def test_first_display_name_wins(self):
        aggregates = group_reports([make_report("Acme Inc."), make_report("ACME")])

        acme = aggregates["acme"]
        assert acme.company_name == "Acme Inc."
        assert acme.display_names == ["Acme Inc.", "ACME"]
        assert acme.merged_names is True

    def test_single_spelling_not_merged(self):
        aggregates = group_reports([make_report("Acme"), make_report("Acme")])
        assert aggregates["acme"].merged_names is False

    def test_blank_company_grouped_as_unknown(self):
        aggregates = group_reports([make_report(""), {}])
        assert list(aggregates) == ["unknown"]
        assert aggregates["unknown"].report_count == 2

    def test_sum_of_increments(self):
        reports = [
            make_report(**{ReportField.STAGE: "Ghosted After Verbal Offer"}),
            make_report(**{ReportField.STAGE: "Ghosted After First Interview"}),
        ]
        aggregate = group_reports(reports)["acme"]
        assert aggregate.sum_increments == 80

    def test_empty_input(self):
        assert group_reports([]) == {}


class TestFold:
    """Tests for EmployerAggregate.fold counters."""

    def test_fold_returns_increment(self):
        aggregate = EmployerAggregate(company_key="acme", company_name="Acme")
        increment = aggregate.fold(make_report(**{ReportField.STAGE: "Ghosted After Verbal Offer"}))

        assert increment == 60
        assert aggregate.report_count == 1
        assert aggregate.sum_increments == 60
        assert aggregate.stage_counts["Ghosted After Verbal Offer"] == 1

    def test_outcome_counters(self):
        aggregate = EmployerAggregate(company_key="acme", company_name="Acme")
        aggregate.fold(
            make_report(
                **{
                    ReportField.ASSIGNMENT_TYPE: "Take-home",
                    ReportField.ASSIGNMENT_PAID: "No",
                    ReportField.RECEIPT: "Yes",
                    ReportField.FEEDBACK: "No feedback",
                    ReportField.FOLLOW_UP: "Yes, but got no response",
                    ReportField.REJECTION: "Yes, a formal email",
                    ReportField.AI_SCREENING: "Yes",
                    ReportField.APPLY_AGAIN: "No",
                    ReportField.RECOMMEND: "Yes",
                }
            )
        )

        assert aggregate.assignment_given_count == 1
        assert aggregate.unpaid_count == 1
        assert aggregate.receipt_yes_count == 1
        assert aggregate.feedback_no_count == 1
        assert aggregate.feedback_yes_count == 0
        assert aggregate.followup_no_response_count == 1
        assert aggregate.followup_vague_count == 0
        assert aggregate.official_rejection_count == 1
        assert aggregate.ai_screening_count == 1
        assert aggregate.apply_again_yes_count == 0
        assert aggregate.recommend_yes_count == 1

    def test_vague_feedback_counts_neither_way(self):
        aggregate = EmployerAggregate(company_key="acme", company_name="Acme")
        aggregate.fold(make_report(**{ReportField.FEEDBACK: "Yes, but vague"}))

        assert aggregate.feedback_yes_count == 0
        assert aggregate.feedback_no_count == 0

    def test_other_assignment_type_fallback(self):
        aggregate = EmployerAggregate(company_key="acme", company_name="Acme")
        aggregate.fold(make_report(**{ReportField.OTHER_ASSIGNMENT_TYPE: "Presentation"}))

        assert aggregate.assignment_given_count == 1
        assert aggregate.assignment_type_counts["Presentation"] == 1

    def test_frequency_tables(self):
        aggregate = EmployerAggregate(company_key="acme", company_name="Acme")
        aggregate.fold(
            make_report(
                **{
                    ReportField.ROLE: "",
                    ReportField.OTHER_ROLE: "Data Engineer",
                    ReportField.RECRUITER: "jane@acme.com",
                    ReportField.LOCATION: "Berlin",
                    ReportField.IMPACT: "Stress, Lost time,  ",
                }
            )
        )

        assert aggregate.role_counts == {"Data Engineer": 1}
        assert aggregate.recruiter_counts == {"jane@acme.com": 1}
        assert aggregate.location_counts == {"Berlin": 1}
        assert aggregate.impact_counts == {"Stress": 1, "Lost time": 1}

    def test_report_dates_expand(self):
        aggregate = EmployerAggregate(company_key="acme", company_name="Acme")
        aggregate.fold(make_report(CreatedAt="2024-03-05 10:00:00+00:00"))
        aggregate.fold(make_report(created_at="2024-01-01T00:00:00.000Z"))
        aggregate.fold(make_report(CreatedAt="2024-02-01T00:00:00Z"))
        aggregate.fold(make_report())

        assert aggregate.first_report_at == datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert aggregate.last_report_at == datetime(2024, 3, 5, 10, tzinfo=timezone.utc)
        assert aggregate.report_count == 4

    def test_counters_never_decrease(self):
        aggregate = EmployerAggregate(company_key="acme", company_name="Acme")
        previous = 0
        for stage in ["Ghosted After Verbal Offer", "", "nonsense", "No Response After Application"]:
            aggregate.fold(make_report(**{ReportField.STAGE: stage}))
            assert aggregate.sum_increments >= previous
            previous = aggregate.sum_increments
        assert aggregate.report_count == 4
