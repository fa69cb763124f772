"""
Unit tests for the assessment service.
"""

import asyncio
import os
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from impact_engine.core.config import Settings
from impact_engine.core.exceptions import (
    NotFoundError,
    ReportGenerationError,
    ReportInProgressError,
)
from impact_engine.models.capacity import ManufacturingBay, ManufacturingSchedule
from impact_engine.models.enums import AnalysisType
from impact_engine.models.insight import AIInsight
from impact_engine.models.project import ProjectRecord
from impact_engine.models.report import ReportDocument
from impact_engine.services import assessment_service
from impact_engine.services.assessment_service import AssessmentService
from impact_engine.services.insight_adapter import fallback_insight

GENERATED_AT = datetime(2024, 3, 15, 9, 30, tzinfo=timezone.utc)


def make_project(project_id: int = 1, **fields) -> ProjectRecord:
    return ProjectRecord.model_validate(
        {"id": project_id, "projectNumber": f"80{project_id:04d}", "name": f"Unit {project_id}", **fields}
    )


def delayed_project() -> ProjectRecord:
    return make_project(1, opFabricationStart="2024-03-01", fabricationStart="2024-03-10")


def make_service(project=None, insight_adapter=None, tmp_path=None):
    data_source = AsyncMock()
    data_source.get_project.return_value = project
    settings = Settings(REPORT_OUTPUT_DIR=str(tmp_path or "."), REPORT_PRODUCT_NAME="TEST PRO")
    service = AssessmentService(data_source, insight_adapter=insight_adapter, settings=settings)
    return service, data_source


def make_adapter():
    adapter = AsyncMock()
    adapter.fetch_insights.return_value = fallback_insight()
    return adapter


class TestBuildAssessment:
    """Tests for AssessmentService.build_assessment."""

    @pytest.mark.asyncio
    async def test_assessment_contents(self):
        adapter = make_adapter()
        service, data_source = make_service(delayed_project(), adapter)

        assessment = await service.build_assessment(1, generated_at=GENERATED_AT)

        data_source.get_project.assert_awaited_once_with(1)
        assert [v.days_difference for v in assessment.variances] == [9]
        assert "Fabrication" in [i.department for i in assessment.department_impacts]
        assert assessment.summary.variance_count == 1
        assert assessment.critical_path == assessment.variances
        assert assessment.ai_insights.confidence == 0.8
        assert assessment.generated_at == GENERATED_AT

        payload = adapter.fetch_insights.await_args.args[0]
        assert payload.project.id == 1
        assert payload.analysis_type is None

    @pytest.mark.asyncio
    async def test_no_variances_skips_insights(self):
        adapter = make_adapter()
        service, _ = make_service(make_project(1), adapter)

        assessment = await service.build_assessment(1)

        adapter.fetch_insights.assert_not_awaited()
        assert assessment.variances == []
        assert assessment.department_impacts == []
        assert assessment.ai_insights is None

    @pytest.mark.asyncio
    async def test_insights_can_be_skipped(self):
        adapter = make_adapter()
        service, _ = make_service(delayed_project(), adapter)

        assessment = await service.build_assessment(1, include_insights=False)

        adapter.fetch_insights.assert_not_awaited()
        assert assessment.ai_insights is None

    @pytest.mark.asyncio
    async def test_missing_project(self):
        service, _ = make_service(None)

        with pytest.raises(NotFoundError):
            await service.build_assessment(404)


class TestGenerateReport:
    """Tests for AssessmentService.generate_report."""

    @pytest.mark.asyncio
    async def test_renders_pdf(self):
        service, _ = make_service(delayed_project(), make_adapter())

        document = await service.generate_report(1, generated_at=GENERATED_AT)

        assert document.filename == "Impact-Assessment-800001-2024-03-15.pdf"
        assert document.content.startswith(b"%PDF")
        assert document.sections[-2:] == ["ai_insights", "footer"]

    @pytest.mark.asyncio
    async def test_second_request_while_in_flight_is_rejected(self):
        gate = asyncio.Event()
        service, data_source = make_service()

        async def slow_get_project(project_id):
            await gate.wait()
            return delayed_project()

        data_source.get_project.side_effect = slow_get_project

        first = asyncio.create_task(service.generate_report(1))
        await asyncio.sleep(0)

        with pytest.raises(ReportInProgressError):
            await service.generate_report(1)

        gate.set()
        document = await first
        assert document.content.startswith(b"%PDF")

        # Released once finished
        second = await service.generate_report(1)
        assert second.filename == document.filename

    @pytest.mark.asyncio
    async def test_other_projects_are_not_blocked(self):
        gate = asyncio.Event()
        service, data_source = make_service()

        async def get_project(project_id):
            if project_id == 1:
                await gate.wait()
            return make_project(project_id)

        data_source.get_project.side_effect = get_project

        first = asyncio.create_task(service.generate_report(1))
        await asyncio.sleep(0)
        other = await service.generate_report(2)
        gate.set()
        await first

        assert other.filename.startswith("Impact-Assessment-800002-")

    @pytest.mark.asyncio
    async def test_render_failure_is_wrapped(self, monkeypatch: pytest.MonkeyPatch):
        class BrokenRenderer:
            def __init__(self, config):
                pass

            def render(self, *args, **kwargs):
                raise RuntimeError("font missing")

        monkeypatch.setattr(assessment_service, "ReportRenderer", BrokenRenderer)
        service, _ = make_service(delayed_project())

        with pytest.raises(ReportGenerationError):
            await service.generate_report(1)

        # The in-flight marker is cleared after a failure
        monkeypatch.undo()
        document = await service.generate_report(1)
        assert document.page_count >= 1

    @pytest.mark.asyncio
    async def test_missing_project_releases_lock(self):
        service, data_source = make_service(None)

        with pytest.raises(NotFoundError):
            await service.generate_report(5)
        with pytest.raises(NotFoundError):
            await service.generate_report(5)

    @pytest.mark.asyncio
    async def test_future_projects_section(self):
        now = datetime.now(timezone.utc)
        adapter = make_adapter()
        future = AIInsight.model_validate(
            {"insights": [{"severity": "warning", "text": "Unit 2 ship date at risk"}], "confidence": 0.6}
        )
        adapter.fetch_insights.side_effect = [fallback_insight(), future]
        service, data_source = make_service(delayed_project(), adapter)
        data_source.list_bays.return_value = [ManufacturingBay(id=1, name="Bay 1", team="Chavez")]
        data_source.list_projects.return_value = [delayed_project(), make_project(2)]
        data_source.list_schedules.return_value = [
            ManufacturingSchedule(
                id=1, project_id=1, bay_id=1, start_date=now, end_date=now + timedelta(days=30)
            ),
            ManufacturingSchedule(
                id=2, project_id=2, bay_id=1, start_date=now, end_date=now + timedelta(days=60)
            ),
        ]

        document = await service.generate_report(1, include_future_projects=True)

        assert document.sections[-3:] == ["ai_insights", "future_projects", "footer"]
        payload = adapter.fetch_insights.await_args_list[1].args[0]
        assert payload.analysis_type == AnalysisType.FUTURE_PROJECTS
        assert payload.affected_teams == ["Chavez"]
        assert [p.id for p in payload.team_projects["Chavez"]] == [2]


class TestTeamExposure:
    """Tests for AssessmentService.get_team_exposure."""

    @pytest.mark.asyncio
    async def test_missing_project(self):
        service, data_source = make_service(None)

        with pytest.raises(NotFoundError):
            await service.get_team_exposure(3)
        data_source.list_bays.assert_not_awaited()


class TestSaveReport:
    """Tests for AssessmentService.save_report."""

    def make_document(self, content: bytes = b"%PDF-1.4 first") -> ReportDocument:
        return ReportDocument(
            filename="Impact-Assessment-800001-2024-03-15.pdf", content=content, page_count=1
        )

    def test_writes_file(self, tmp_path):
        service, _ = make_service(tmp_path=tmp_path)

        path = service.save_report(self.make_document())

        assert path == tmp_path / "Impact-Assessment-800001-2024-03-15.pdf"
        assert path.read_bytes() == b"%PDF-1.4 first"

    def test_repeated_save_replaces_file(self, tmp_path):
        service, _ = make_service(tmp_path=tmp_path)

        service.save_report(self.make_document(b"%PDF-1.4 first"), tmp_path)
        path = service.save_report(self.make_document(b"%PDF-1.4 second"), tmp_path)

        assert path.read_bytes() == b"%PDF-1.4 second"
        assert sorted(os.listdir(tmp_path)) == ["Impact-Assessment-800001-2024-03-15.pdf"]

    def test_failed_write_leaves_nothing_behind(self, tmp_path, monkeypatch: pytest.MonkeyPatch):
        service, _ = make_service(tmp_path=tmp_path)
        target = tmp_path / "reports"

        def failing_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(assessment_service.os, "replace", failing_replace)

        with pytest.raises(ReportGenerationError):
            service.save_report(self.make_document(), target)

        assert os.listdir(target) == []
