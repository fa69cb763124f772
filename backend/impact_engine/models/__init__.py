"""Pydantic models (schemas) for the application."""

from impact_engine.models.enums import (
    AnalysisType,
    DepartmentType,
    ImpactLevel,
    InsightSeverity,
    ProjectStatus,
    TileColor,
)
from impact_engine.models.schedule import SCHEDULE_FIELD_PAIRS, ScheduleFieldPair
from impact_engine.models.project import ProjectRecord
from impact_engine.models.variance import Variance
from impact_engine.models.insight import AIInsight, InsightItem, InsightRequest
from impact_engine.models.impact import AssessmentSummary, DepartmentImpact, ImpactAssessment
from impact_engine.models.capacity import (
    CapacityOverview,
    CapacityRecord,
    DepartmentCapacity,
    DepartmentWorkload,
    ManufacturingBay,
    ManufacturingSchedule,
    TeamExposure,
    TeamMember,
    TeamUtilization,
)
from impact_engine.models.report import ReportConfig, ReportDocument, ReportTheme

__all__ = [
    # Enums
    "AnalysisType",
    "DepartmentType",
    "ImpactLevel",
    "InsightSeverity",
    "ProjectStatus",
    "TileColor",
    # Schedule / project
    "SCHEDULE_FIELD_PAIRS",
    "ScheduleFieldPair",
    "ProjectRecord",
    "Variance",
    # Impact
    "AssessmentSummary",
    "DepartmentImpact",
    "ImpactAssessment",
    # Insight
    "AIInsight",
    "InsightItem",
    "InsightRequest",
    # Capacity
    "CapacityOverview",
    "CapacityRecord",
    "DepartmentCapacity",
    "DepartmentWorkload",
    "ManufacturingBay",
    "ManufacturingSchedule",
    "TeamExposure",
    "TeamMember",
    "TeamUtilization",
    # Report
    "ReportConfig",
    "ReportDocument",
    "ReportTheme",
]
