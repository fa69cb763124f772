"""
AI insight adapter.

Posts an assessment to the insight service and returns its narrative. Any
failure (network, timeout, status, malformed payload) degrades to a fixed
fallback so a report can always be produced. Cancellation is not a failure
and propagates to the caller.
"""

from __future__ import annotations

from typing import Optional, Sequence

import httpx

from impact_engine.core.config import Settings, get_settings
from impact_engine.core.logger import logger
from impact_engine.models.enums import AnalysisType, InsightSeverity
from impact_engine.models.impact import DepartmentImpact
from impact_engine.models.insight import (
    AIInsight,
    DateVariancePayload,
    DepartmentImpactPayload,
    InsightItem,
    InsightRequest,
    ProjectSummary,
    TeamProjectPayload,
)
from impact_engine.models.project import ProjectRecord
from impact_engine.models.variance import Variance

FALLBACK_INSIGHT = AIInsight(
    insights=[
        InsightItem(
            severity=InsightSeverity.WARNING,
            text="Multiple schedule variances detected requiring immediate attention",
            detail="The cumulative impact of date changes may cause significant project delays",
        ),
        InsightItem(
            severity=InsightSeverity.DANGER,
            text="Critical path analysis needed for downstream activities",
            detail="Manufacturing and delivery phases are at risk of cascading delays",
        ),
    ],
    confidence=0.8,
    summary="AI analysis suggests immediate intervention required to minimize project impact",
)


FUTURE_PROJECTS_FALLBACK_INSIGHT = AIInsight(
    insights=[
        InsightItem(
            severity=InsightSeverity.WARNING,
            text="Unable to generate detailed team impact analysis",
            detail="Please review affected teams manually to assess potential impacts",
        ),
    ],
    confidence=0.5,
    summary="Manual review recommended for comprehensive team impact assessment",
)


def fallback_insight(analysis_type: Optional[AnalysisType] = None) -> AIInsight:
    """A fresh copy of the fixed fallback payload for the analysis type."""
    if analysis_type == AnalysisType.FUTURE_PROJECTS:
        return FUTURE_PROJECTS_FALLBACK_INSIGHT.model_copy(deep=True)
    return FALLBACK_INSIGHT.model_copy(deep=True)


def build_insight_request(
    project: ProjectRecord,
    variances: Sequence[Variance],
    impacts: Sequence[DepartmentImpact],
    analysis_type: Optional[AnalysisType] = None,
    affected_teams: Optional[list[str]] = None,
    team_projects: Optional[dict[str, list[ProjectRecord]]] = None,
) -> InsightRequest:
    """Assemble the insight request body for an assessment."""
    return InsightRequest(
        project=ProjectSummary.model_validate(project.to_summary()),
        date_variances=[
            DateVariancePayload(
                field=v.field,
                display_name=v.display_name,
                op_date=v.baseline_date.isoformat(),
                current_date=v.current_date.isoformat(),
                days_difference=v.days_difference,
                is_delayed=v.is_delayed,
            )
            for v in variances
        ],
        department_impacts=[
            DepartmentImpactPayload(
                department=i.department,
                impact_level=i.impact_level,
                description=i.description,
                estimated_cost=i.estimated_cost,
            )
            for i in impacts
        ],
        analysis_type=analysis_type,
        affected_teams=affected_teams,
        team_projects=(
            {
                team: [
                    TeamProjectPayload(
                        id=p.id,
                        name=p.name,
                        project_number=p.project_number,
                        status=p.status,
                        production_start=p.production_start,
                        ship_date=p.ship_date,
                    )
                    for p in projects
                ]
                for team, projects in team_projects.items()
            }
            if team_projects is not None
            else None
        ),
    )


class InsightAdapter:
    """Client for the insight endpoint."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            settings: Application settings (defaults to ``get_settings()``)
            client: Shared HTTP client; one is opened per call when omitted
        """
        self._settings = settings or get_settings()
        self._client = client

    async def fetch_insights(self, payload: InsightRequest) -> AIInsight:
        """
        Request insights for an assessment.

        Never raises for service failures; returns ``fallback_insight()`` for the
        request's analysis type instead.
        """
        try:
            if self._client is not None:
                response = await self._post(self._client, payload)
            else:
                async with httpx.AsyncClient(timeout=self._settings.INSIGHTS_TIMEOUT_SECONDS) as client:
                    response = await self._post(client, payload)
            response.raise_for_status()
            return AIInsight.model_validate(response.json())
        except Exception as exc:
            logger.warning(
                f"Insight request for project {payload.project.id} failed, using fallback: {exc}"
            )
            return fallback_insight(payload.analysis_type)

    async def _post(self, client: httpx.AsyncClient, payload: InsightRequest) -> httpx.Response:
        return await client.post(
            self._settings.INSIGHTS_API_URL,
            json=payload.to_wire(),
            timeout=self._settings.INSIGHTS_TIMEOUT_SECONDS,
        )
