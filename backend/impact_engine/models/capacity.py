"""
Capacity model definitions.

Upstream records (bays, schedules, team members, departments) mirror the
operations API JSON. Computed records are rebuilt on every read.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class _UpstreamModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ManufacturingBay(_UpstreamModel):
    """A production bay; bays sharing a ``team`` form one crew."""

    id: int
    name: str = ""
    team: Optional[str] = None
    location: Optional[str] = None


class ManufacturingSchedule(_UpstreamModel):
    """A project's booking in a bay."""

    id: int
    project_id: int = Field(..., alias="projectId")
    bay_id: int = Field(..., alias="bayId")
    start_date: datetime = Field(..., alias="startDate")
    end_date: datetime = Field(..., alias="endDate")
    total_hours: Optional[float] = Field(None, alias="totalHours")


class TeamMember(_UpstreamModel):
    """A person assigned to a bay (production) or a department."""

    id: int
    name: str = ""
    bay_id: Optional[int] = Field(None, alias="bayId")
    department_id: Optional[int] = Field(None, alias="departmentId")
    role: Optional[str] = None
    hours_per_week: Optional[float] = Field(None, alias="hoursPerWeek")
    efficiency_rate: Optional[float] = Field(None, alias="efficiencyRate")
    is_active: bool = Field(True, alias="isActive")


class DepartmentCapacity(_UpstreamModel):
    """Configured capacity of a support department."""

    id: int
    department_name: str = Field(..., alias="departmentName")
    department_type: Optional[str] = Field(
        None,
        alias="departmentType",
        description="fabrication, paint, it, ntc or qa; other values have no phase window",
    )
    weekly_capacity_hours: float = Field(0, alias="weeklyCapacityHours")
    utilization_target: Optional[float] = Field(None, alias="utilizationTarget")


# ===========================================
# Computed records
# ===========================================


class CapacityRecord(BaseModel):
    """Stepped utilization of a team or department."""

    member_count: int = 0
    total_capacity_hours: float = 0
    active_project_count: int = 0
    utilization_percent: int = Field(0, description="0, 75, 100 or 120")


class TeamUtilization(BaseModel):
    team: str
    bay_ids: list[int] = Field(default_factory=list)
    capacity: CapacityRecord


class DepartmentWorkload(BaseModel):
    """Department-card variant: member hours against configured capacity."""

    department_id: int
    department_name: str
    member_count: int = 0
    total_capacity_hours: float = 0
    utilization_percent: float = 0
    utilization_target: Optional[float] = None


class BayCapacity(BaseModel):
    bay_id: int
    bay_name: str
    team: Optional[str] = None
    assembly_count: int = 0
    electrical_count: int = 0
    total_members: int = 0
    weekly_capacity_hours: float = 0
    active_projects: int = 0
    utilization_percent: float = 0


class DepartmentLoad(BaseModel):
    department_id: int
    department_name: str
    department_type: Optional[str] = None
    total_members: int = 0
    weekly_capacity_hours: float = 0
    utilization_target: Optional[float] = None
    active_projects: int = 0
    utilization_percent: float = 0


class CapacitySummary(BaseModel):
    total_production_capacity: float = 0
    total_department_capacity: float = 0
    average_utilization: float = 0


class CapacityOverview(BaseModel):
    """Bay and department capacity as seen today."""

    production_capacity: list[BayCapacity] = Field(default_factory=list)
    department_capacity: list[DepartmentLoad] = Field(default_factory=list)
    total_team_members: int = 0
    summary: CapacitySummary = Field(default_factory=CapacitySummary)


class ScheduledProject(BaseModel):
    project_id: int
    project_number: Optional[str] = None
    name: Optional[str] = None
    status: Optional[str] = None
    start_date: datetime
    end_date: datetime


class TeamExposure(BaseModel):
    """Other projects booked into a bay that a given project also uses."""

    bay_id: int
    bay_name: str
    team: Optional[str] = None
    projects: list[ScheduledProject] = Field(default_factory=list)
