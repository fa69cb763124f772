"""
Department impact and assessment models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from impact_engine.models.enums import ImpactLevel, TileColor
from impact_engine.models.insight import AIInsight
from impact_engine.models.project import ProjectRecord
from impact_engine.models.variance import Variance


class DepartmentImpact(BaseModel):
    """A rule-derived statement that one department is affected by schedule variances."""

    model_config = ConfigDict(frozen=True)

    department: str
    impact_level: ImpactLevel
    description: str
    specific_impacts: tuple[str, ...] = ()
    mitigation_actions: tuple[str, ...] = ()
    estimated_cost: Optional[str] = None
    timeline_impact: Optional[str] = None


class AssessmentSummary(BaseModel):
    """Headline numbers shared by the report tiles and the JSON API."""

    variance_count: int = 0
    delayed_count: int = 0
    advanced_count: int = 0
    department_count: int = 0
    critical_department_count: int = 0
    high_department_count: int = 0
    max_delay_days: int = Field(0, description="Largest absolute variance in days")
    average_variance_days: int = Field(0, description="Mean absolute variance, rounded")
    variance_tile: TileColor = TileColor.GREEN
    department_tile: TileColor = TileColor.BLUE
    delay_tile: TileColor = TileColor.GREEN


class ImpactAssessment(BaseModel):
    """Everything derived for one project in one request."""

    project: ProjectRecord
    variances: list[Variance] = Field(default_factory=list)
    critical_path: list[Variance] = Field(default_factory=list)
    department_impacts: list[DepartmentImpact] = Field(default_factory=list)
    summary: AssessmentSummary = Field(default_factory=AssessmentSummary)
    ai_insights: Optional[AIInsight] = None
    generated_at: datetime
