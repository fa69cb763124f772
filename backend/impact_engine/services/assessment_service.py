"""
Impact assessment orchestration.

Loads a project from the operations data source, runs the variance and
department-impact engines, fetches narrative insights and renders the PDF
report. Report generation is single-flight per project.
"""

from __future__ import annotations

import asyncio
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from impact_engine.core.config import Settings, get_settings
from impact_engine.core.exceptions import (
    NotFoundError,
    ReportGenerationError,
    ReportInProgressError,
)
from impact_engine.core.logger import logger
from impact_engine.interfaces.ops_data_source import IOpsDataSource
from impact_engine.models.capacity import TeamExposure
from impact_engine.models.enums import AnalysisType
from impact_engine.models.impact import ImpactAssessment
from impact_engine.models.insight import AIInsight
from impact_engine.models.project import ProjectRecord
from impact_engine.models.report import ReportConfig, ReportDocument
from impact_engine.services.assessment_summary import summarize_assessment
from impact_engine.services.capacity_estimator import find_team_exposure
from impact_engine.services.impact_rules import derive_impacts
from impact_engine.services.insight_adapter import InsightAdapter, build_insight_request
from impact_engine.services.report_renderer import ReportRenderer
from impact_engine.services.variance_calculator import compute_variances, critical_path
from impact_engine.utils.datetime_utils import now_utc


class AssessmentService:
    """Builds assessments and reports for single projects."""

    def __init__(
        self,
        data_source: IOpsDataSource,
        insight_adapter: Optional[InsightAdapter] = None,
        renderer_config: Optional[ReportConfig] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Args:
            data_source: Operations data source
            insight_adapter: Insight client; insights are skipped when None
            renderer_config: Report layout (product name defaults from settings)
            settings: Application settings (defaults to ``get_settings()``)
        """
        self._settings = settings or get_settings()
        self._data_source = data_source
        self._insight_adapter = insight_adapter
        self._renderer_config = renderer_config or ReportConfig(
            product_name=self._settings.REPORT_PRODUCT_NAME
        )
        self._reports_in_flight: set[int] = set()

    async def _load_project(self, project_id: int) -> ProjectRecord:
        project = await self._data_source.get_project(project_id)
        if project is None:
            raise NotFoundError(f"Project {project_id} not found")
        return project

    async def build_assessment(
        self,
        project_id: int,
        include_insights: bool = True,
        generated_at: Optional[datetime] = None,
    ) -> ImpactAssessment:
        """
        Derive variances, impacts, summary and insights for a project.

        Insights are only requested when at least one variance exists.

        Raises:
            NotFoundError: Project does not exist upstream
        """
        project = await self._load_project(project_id)
        variances = compute_variances(project)
        impacts = derive_impacts(variances)

        ai_insights: Optional[AIInsight] = None
        if include_insights and variances and self._insight_adapter is not None:
            payload = build_insight_request(project, variances, impacts)
            ai_insights = await self._insight_adapter.fetch_insights(payload)

        return ImpactAssessment(
            project=project,
            variances=variances,
            critical_path=critical_path(variances),
            department_impacts=impacts,
            summary=summarize_assessment(variances, impacts),
            ai_insights=ai_insights,
            generated_at=generated_at or now_utc(),
        )

    async def get_team_exposure(self, project_id: int) -> list[TeamExposure]:
        """Other projects booked into the bays this project uses."""
        await self._load_project(project_id)
        bays, schedules, projects = await asyncio.gather(
            self._data_source.list_bays(),
            self._data_source.list_schedules(),
            self._data_source.list_projects(),
        )
        return find_team_exposure(project_id, bays, schedules, projects)

    async def _future_projects_insight(self, assessment: ImpactAssessment) -> Optional[AIInsight]:
        if self._insight_adapter is None or not assessment.variances:
            return None

        exposures = await self.get_team_exposure(assessment.project.id)
        projects = {p.id: p for p in await self._data_source.list_projects()}
        team_projects: dict[str, list[ProjectRecord]] = {}
        for exposure in exposures:
            team = exposure.team or exposure.bay_name
            bucket = team_projects.setdefault(team, [])
            for scheduled in exposure.projects:
                record = projects.get(scheduled.project_id)
                if record is not None and record not in bucket:
                    bucket.append(record)

        if not any(team_projects.values()):
            return None

        payload = build_insight_request(
            assessment.project,
            assessment.variances,
            assessment.department_impacts,
            analysis_type=AnalysisType.FUTURE_PROJECTS,
            affected_teams=list(team_projects),
            team_projects=team_projects,
        )
        return await self._insight_adapter.fetch_insights(payload)

    async def generate_report(
        self,
        project_id: int,
        include_future_projects: bool = False,
        generated_at: Optional[datetime] = None,
    ) -> ReportDocument:
        """
        Render the PDF report for a project.

        Args:
            project_id: Upstream project id
            include_future_projects: Add the section on projects sharing the bays
            generated_at: Report timestamp (defaults to now)

        Raises:
            NotFoundError: Project does not exist upstream
            ReportInProgressError: A report for this project is already being generated
            ReportGenerationError: Rendering failed
        """
        if project_id in self._reports_in_flight:
            raise ReportInProgressError(
                f"A report for project {project_id} is already being generated",
                details={"project_id": project_id},
            )
        self._reports_in_flight.add(project_id)
        try:
            assessment = await self.build_assessment(project_id, generated_at=generated_at)
            future_insights = None
            if include_future_projects:
                future_insights = await self._future_projects_insight(assessment)

            renderer = ReportRenderer(self._renderer_config)
            try:
                document = await asyncio.to_thread(
                    renderer.render,
                    assessment.project,
                    assessment.variances,
                    assessment.department_impacts,
                    ai_insights=assessment.ai_insights,
                    generated_at=assessment.generated_at,
                    summary=assessment.summary,
                    future_insights=future_insights,
                )
            except Exception as exc:
                logger.error(f"Report rendering failed for project {project_id}: {exc}")
                raise ReportGenerationError(
                    "Failed to generate PDF report. Please try again.",
                    details={"project_id": project_id},
                ) from exc

            logger.info(
                f"Rendered report {document.filename} ({document.page_count} pages) "
                f"for project {project_id}"
            )
            return document
        finally:
            self._reports_in_flight.discard(project_id)

    def save_report(
        self,
        document: ReportDocument,
        directory: Optional[Union[str, Path]] = None,
    ) -> Path:
        """
        Write a report atomically and return its path.

        The document is written to a temporary file in the target directory
        and moved into place, so an existing report with the same name is
        replaced whole and a failed write leaves nothing behind.
        """
        target_dir = Path(directory or self._settings.REPORT_OUTPUT_DIR)
        target = target_dir / document.filename
        tmp_path: Optional[str] = None
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                dir=target_dir, prefix=".report-", suffix=".pdf.tmp", delete=False
            ) as handle:
                tmp_path = handle.name
                handle.write(document.content)
            os.replace(tmp_path, target)
            tmp_path = None
        except OSError as exc:
            logger.error(f"Failed to save report {document.filename}: {exc}")
            raise ReportGenerationError(
                f"Failed to save report {document.filename}",
                details={"path": str(target)},
            ) from exc
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
        return target
