"""
Enum definitions for the application.

These enums are used across models and provide type-safe severity/status values.
"""

from enum import Enum


class ImpactLevel(str, Enum):
    """Severity of a department impact."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class InsightSeverity(str, Enum):
    """Severity of a single AI insight entry."""

    DANGER = "danger"
    WARNING = "warning"
    SUCCESS = "success"
    INFO = "info"


class TileColor(str, Enum):
    """Color coding of a report summary tile."""

    RED = "red"
    AMBER = "amber"
    GREEN = "green"
    BLUE = "blue"


class ProjectStatus(str, Enum):
    """Project statuses that matter to capacity estimation."""

    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class DepartmentType(str, Enum):
    """
    Department types tracked by capacity planning.

    Each type maps to the project phase window it works in.
    """

    FABRICATION = "fabrication"
    PAINT = "paint"
    IT = "it"
    NTC = "ntc"
    QA = "qa"


class AnalysisType(str, Enum):
    """Kind of narrative requested from the insight service."""

    IMPACT = "impact"
    FUTURE_PROJECTS = "future-projects"
