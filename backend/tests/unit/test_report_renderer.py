"""
Unit tests for the PDF report renderer and the assessment summary it draws.
"""

import re
from datetime import date, datetime, timedelta, timezone

import pytest
from reportlab import rl_config

from impact_engine.models.enums import ImpactLevel, InsightSeverity, TileColor
from impact_engine.models.impact import DepartmentImpact
from impact_engine.models.insight import AIInsight, InsightItem
from impact_engine.models.project import ProjectRecord
from impact_engine.models.report import ReportConfig
from impact_engine.models.schedule import SCHEDULE_FIELD_PAIRS
from impact_engine.models.variance import Variance
from impact_engine.services.assessment_summary import (
    delay_tile_color,
    department_tile_color,
    summarize_assessment,
    variance_tile_color,
)
from impact_engine.services.impact_rules import derive_impacts
from impact_engine.services.report_renderer import FOOTER_HEIGHT, ReportRenderer, report_filename
from impact_engine.services.variance_calculator import compute_variances

GENERATED_AT = datetime(2024, 3, 15, 9, 30, tzinfo=timezone.utc)


def make_project(**fields) -> ProjectRecord:
    return ProjectRecord.model_validate(
        {"id": 42, "name": "Command Vehicle", "projectNumber": "804512", "status": "Active", **fields}
    )


def make_variance(field: str, days: int) -> Variance:
    baseline = date(2024, 3, 1)
    return Variance(
        field=field,
        display_name=field,
        baseline_date=baseline,
        current_date=baseline + timedelta(days=days),
        days_difference=days,
        is_delayed=days > 0,
    )


def make_insight() -> AIInsight:
    return AIInsight(
        insights=[
            InsightItem(severity=InsightSeverity.DANGER, text="Fabrication slip", detail="Bay 3 overbooked"),
            InsightItem(severity=InsightSeverity.SUCCESS, text="Paint on track"),
        ],
        confidence=0.72,
        summary="Recoverable with overtime.",
    )


class TestSummary:
    """Tests for the summary statistics and tile colors."""

    def test_tile_thresholds(self):
        assert variance_tile_color(0) == TileColor.GREEN
        assert variance_tile_color(1) == TileColor.RED
        assert department_tile_color(1, 0) == TileColor.RED
        assert department_tile_color(0, 2) == TileColor.AMBER
        assert department_tile_color(0, 0) == TileColor.BLUE
        assert delay_tile_color(11) == TileColor.RED
        assert delay_tile_color(10) == TileColor.AMBER
        assert delay_tile_color(6) == TileColor.AMBER
        assert delay_tile_color(5) == TileColor.GREEN

    def test_summarize_assessment(self):
        variances = [make_variance("fabricationStart", 9), make_variance("chassisETA", -4)]
        impacts = derive_impacts(variances)

        summary = summarize_assessment(variances, impacts)

        assert summary.variance_count == 2
        assert summary.delayed_count == 1
        assert summary.advanced_count == 1
        assert summary.department_count == len(impacts)
        assert summary.critical_department_count == 1
        assert summary.high_department_count == 1
        assert summary.max_delay_days == 9
        assert summary.average_variance_days == 6
        assert summary.variance_tile == TileColor.RED
        assert summary.department_tile == TileColor.RED
        assert summary.delay_tile == TileColor.AMBER

    def test_no_drift_summary_is_zero(self):
        summary = summarize_assessment([], [])

        assert summary.variance_count == 0
        assert summary.department_count == 0
        assert summary.max_delay_days == 0
        assert summary.variance_tile == TileColor.GREEN
        assert summary.delay_tile == TileColor.GREEN


class TestReportFilename:
    """Tests for report_filename."""

    def test_uses_project_number_and_date(self):
        assert report_filename("804512", GENERATED_AT) == "Impact-Assessment-804512-2024-03-15.pdf"

    def test_missing_project_number(self):
        assert report_filename(None, GENERATED_AT) == "Impact-Assessment-UNKNOWN-2024-03-15.pdf"


class TestReportRenderer:
    """Tests for ReportRenderer.render."""

    def test_section_order(self):
        variances = [make_variance("fabricationStart", 9), make_variance("shipDate", -3)]
        impacts = derive_impacts(variances)

        document = ReportRenderer().render(
            make_project(), variances, impacts, ai_insights=make_insight(), generated_at=GENERATED_AT
        )

        assert document.sections == [
            "title",
            "project_details",
            "metric_tiles",
            "executive_summary",
            "variance_table",
            "department_impacts",
            "ai_insights",
            "footer",
        ]
        assert document.content.startswith(b"%PDF")
        assert document.filename == "Impact-Assessment-804512-2024-03-15.pdf"
        assert document.page_count >= 1

    def test_no_drift_project_still_renders(self):
        fields = {}
        for pair in SCHEDULE_FIELD_PAIRS:
            fields[pair.baseline_key] = "2024-05-01"
            fields[pair.current_key] = "2024-05-01"
        project = make_project(**fields)
        variances = compute_variances(project)
        impacts = derive_impacts(variances)

        document = ReportRenderer().render(project, variances, impacts, generated_at=GENERATED_AT)

        assert variances == []
        assert impacts == []
        assert document.content.startswith(b"%PDF")
        assert "department_impacts" not in document.sections
        assert "variance_table" not in document.sections
        assert "ai_insights" not in document.sections
        assert document.sections[:4] == ["title", "project_details", "metric_tiles", "executive_summary"]

    def test_empty_insights_are_skipped(self):
        variances = [make_variance("paintStart", 2)]

        document = ReportRenderer().render(
            make_project(),
            variances,
            derive_impacts(variances),
            ai_insights=AIInsight(insights=[], confidence=0.5),
            generated_at=GENERATED_AT,
        )

        assert "ai_insights" not in document.sections

    def test_future_projects_section_follows_ai_insights(self):
        variances = [make_variance("productionStart", 12)]

        document = ReportRenderer().render(
            make_project(),
            variances,
            derive_impacts(variances),
            ai_insights=make_insight(),
            generated_at=GENERATED_AT,
            future_insights=make_insight(),
        )

        assert document.sections[-3:] == ["ai_insights", "future_projects", "footer"]

    def test_long_report_paginates(self):
        variances = [
            make_variance(pair.current_key, 5 + index) for index, pair in enumerate(SCHEDULE_FIELD_PAIRS)
        ]
        impacts = derive_impacts(variances)

        document = ReportRenderer().render(
            make_project(), variances, impacts, ai_insights=make_insight(), generated_at=GENERATED_AT
        )

        assert len(impacts) == 11
        assert document.page_count > 1

    def test_long_bullet_lists_do_not_overflow(self):
        """Every bullet is checked against the page end, so huge lists just add pages."""
        impact = DepartmentImpact(
            department="Production",
            impact_level=ImpactLevel.CRITICAL,
            description="Long list",
            specific_impacts=tuple(f"Impact {i}" for i in range(120)),
            mitigation_actions=tuple(f"Action {i}" for i in range(120)),
        )

        document = ReportRenderer().render(
            make_project(), [make_variance("productionStart", 3)], [impact], generated_at=GENERATED_AT
        )

        assert document.page_count >= 3

    def test_config_is_explicit(self):
        config = ReportConfig(product_name="ACME FLEET", page_width_mm=216, page_height_mm=279)

        document = ReportRenderer(config).render(make_project(), [], [], generated_at=GENERATED_AT)

        assert document.content.startswith(b"%PDF")
        assert document.sections[-1] == "footer"

    @pytest.mark.parametrize("generated_at", [None, GENERATED_AT])
    def test_renderer_is_reusable(self, generated_at):
        renderer = ReportRenderer()
        first = renderer.render(make_project(), [], [], generated_at=generated_at)
        second = renderer.render(make_project(), [], [], generated_at=generated_at)

        assert first.sections == second.sections
        assert first.page_count == second.page_count


class TestFooterAndPageBounds:
    """Tests for the footer and the page-end checks."""

    def long_report(self, renderer: ReportRenderer):
        impact = DepartmentImpact(
            department="Production",
            impact_level=ImpactLevel.CRITICAL,
            description="Line stoppage risk across both final assembly shifts. " * 30,
            specific_impacts=tuple(f"Impact {i}" for i in range(60)),
            mitigation_actions=tuple(f"Action {i}" for i in range(60)),
            estimated_cost="$20,000 - $100,000",
            timeline_impact="12 days",
        )
        insights = AIInsight(
            insights=[
                InsightItem(
                    severity=InsightSeverity.WARNING,
                    text=f"Bay {i} contention with downstream paint and QC bookings. " * 8,
                    detail="Rebalance the bay plan before the next production meeting. " * 3,
                )
                for i in range(25)
            ],
            confidence=0.6,
            summary="Several bays are overcommitted.",
        )
        return renderer.render(
            make_project(),
            [make_variance("productionStart", 12)],
            [impact],
            ai_insights=insights,
            generated_at=GENERATED_AT,
        )

    def test_every_page_has_a_numbered_footer(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(rl_config, "pageCompression", 0)

        document = self.long_report(ReportRenderer())
        content = document.content.decode("latin-1")

        pages = re.findall(r"Page (\d+) of (\d+)", content)
        assert document.page_count > 2
        assert pages == [(str(i), str(document.page_count)) for i in range(1, document.page_count + 1)]
        assert content.count("TIER IV PRO - Impact Assessment Report") == document.page_count
        assert content.count("Generated: 2024-03-15 09:30") == document.page_count

    def test_nothing_is_drawn_into_the_footer(self, monkeypatch: pytest.MonkeyPatch):
        renderer = ReportRenderer()
        limit = renderer.config.page_height_mm - renderer.config.margin_mm - FOOTER_HEIGHT
        text_positions: list[float] = []
        box_bottoms: list[float] = []
        original_text = ReportRenderer._text
        original_box = ReportRenderer._box

        def recording_text(self, text, x, y, *args, **kwargs):
            text_positions.append(y)
            return original_text(self, text, x, y, *args, **kwargs)

        def recording_box(self, x, y, width, height, color):
            box_bottoms.append(y + height)
            return original_box(self, x, y, width, height, color)

        monkeypatch.setattr(ReportRenderer, "_text", recording_text)
        monkeypatch.setattr(ReportRenderer, "_box", recording_box)

        document = self.long_report(renderer)

        assert document.page_count > 2
        assert text_positions and max(text_positions) <= limit
        assert box_bottoms and max(box_bottoms) <= limit
