"""
AI insight models.

Wire names follow the insight endpoint's camelCase JSON; Python code uses
the snake_case attributes.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from impact_engine.models.enums import AnalysisType, ImpactLevel, InsightSeverity


class InsightItem(BaseModel):
    """One narrative finding."""

    severity: InsightSeverity
    text: str = Field(..., min_length=1)
    detail: Optional[str] = None


class AIInsight(BaseModel):
    """Narrative payload returned by the insight service. Treated as untrusted."""

    insights: list[InsightItem] = Field(default_factory=list)
    confidence: float = Field(..., ge=0.0, le=1.0)
    summary: str = ""


# ===========================================
# Request payload
# ===========================================


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ProjectSummary(_WireModel):
    id: int
    name: Optional[str] = None
    project_number: Optional[str] = Field(None, alias="projectNumber")
    percent_complete: Optional[float] = Field(None, alias="percentComplete")
    status: Optional[str] = None


class DateVariancePayload(_WireModel):
    """A variance as it travels to the insight endpoint."""

    field: Optional[str] = None
    display_name: str = Field(..., alias="displayName")
    op_date: str = Field(..., alias="opDate")
    current_date: str = Field(..., alias="currentDate")
    days_difference: int = Field(..., alias="daysDifference")
    is_delayed: bool = Field(..., alias="isDelayed")


class DepartmentImpactPayload(_WireModel):
    department: str
    impact_level: ImpactLevel = Field(..., alias="impactLevel")
    description: str = ""
    estimated_cost: Optional[str] = Field(None, alias="estimatedCost")


class TeamProjectPayload(_WireModel):
    id: int
    name: Optional[str] = None
    project_number: Optional[str] = Field(None, alias="projectNumber")
    status: Optional[str] = None
    production_start: Optional[str] = Field(None, alias="productionStart")
    ship_date: Optional[str] = Field(None, alias="shipDate")


class InsightRequest(_WireModel):
    """Body of ``POST /api/ai/impact-assessment``."""

    project: ProjectSummary
    date_variances: list[DateVariancePayload] = Field(default_factory=list, alias="dateVariances")
    department_impacts: list[DepartmentImpactPayload] = Field(
        default_factory=list, alias="departmentImpacts"
    )
    analysis_type: Optional[AnalysisType] = Field(None, alias="analysisType")
    affected_teams: Optional[list[str]] = Field(None, alias="affectedTeams")
    team_projects: Optional[dict[str, list[TeamProjectPayload]]] = Field(None, alias="teamProjects")

    def to_wire(self) -> dict:
        """JSON-ready dict with camelCase keys; unset optional sections are omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
