"""
Capacity and utilization estimation.

Three independent estimators live here and are never mixed:

- ``estimate_utilization``: stepped utilization of a bay team from its count
  of concurrent active projects (0, 75, 100, 120 percent).
- ``estimate_department_workload``: member hours against configured
  department capacity.
- ``build_capacity_overview``: per-bay and per-department load as of today.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Iterable, Optional, Sequence

from impact_engine.models.capacity import (
    BayCapacity,
    CapacityOverview,
    CapacityRecord,
    CapacitySummary,
    DepartmentCapacity,
    DepartmentLoad,
    DepartmentWorkload,
    ManufacturingBay,
    ManufacturingSchedule,
    ScheduledProject,
    TeamExposure,
    TeamMember,
    TeamUtilization,
)
from impact_engine.models.enums import DepartmentType, ProjectStatus
from impact_engine.models.project import ProjectRecord
from impact_engine.utils.datetime_utils import ensure_utc, now_utc, parse_optional_instant

DEFAULT_HOURS_PER_WEEK = 40
DEFAULT_EFFICIENCY_RATE = 100

# Active project count -> utilization percent. Three or more means overloaded.
UTILIZATION_STEPS: tuple[int, ...] = (0, 75, 100)
OVERLOAD_UTILIZATION = 120

# Bay utilization: two concurrent bookings fill a bay.
BAY_FULL_SCHEDULE_COUNT = 2
ASSEMBLY_ROLE = "Assembly"
ELECTRICAL_ROLE = "Electrical"

_INACTIVE_STATUSES = {ProjectStatus.DELIVERED.value.lower(), ProjectStatus.CANCELLED.value.lower()}


def stepped_utilization(active_project_count: int) -> int:
    """Map a concurrent active-project count to the stepped utilization percent."""
    if active_project_count < 0:
        return 0
    if active_project_count < len(UTILIZATION_STEPS):
        return UTILIZATION_STEPS[active_project_count]
    return OVERLOAD_UTILIZATION


def member_capacity_hours(member: TeamMember) -> float:
    """Weekly hours of one member scaled by efficiency (defaults 40h / 100%)."""
    hours = member.hours_per_week or DEFAULT_HOURS_PER_WEEK
    efficiency = member.efficiency_rate or DEFAULT_EFFICIENCY_RATE
    return hours * efficiency / 100


def _is_open_project(project: ProjectRecord) -> bool:
    return (project.status or "").strip().lower() not in _INACTIVE_STATUSES


def estimate_utilization(
    team_bay_ids: Iterable[int],
    members: Sequence[TeamMember],
    schedules: Sequence[ManufacturingSchedule],
    projects: Sequence[ProjectRecord],
    now: Optional[datetime] = None,
) -> CapacityRecord:
    """
    Estimate stepped utilization for a team of bays.

    Projects count as active when they are booked in one of the bays with a
    schedule that has not ended yet and are neither delivered nor cancelled.
    A team without bays yields an all-zero record.
    """
    bay_ids = set(team_bay_ids)
    if not bay_ids:
        return CapacityRecord()

    current = ensure_utc(now) if now else now_utc()

    booked_ids = {
        s.project_id
        for s in schedules
        if s.bay_id in bay_ids and ensure_utc(s.end_date) >= current
    }
    projects_by_id = {p.id: p for p in projects}
    active_count = sum(
        1 for pid in booked_ids if pid in projects_by_id and _is_open_project(projects_by_id[pid])
    )

    team_members = [m for m in members if m.is_active and m.bay_id in bay_ids]

    return CapacityRecord(
        member_count=len(team_members),
        total_capacity_hours=sum(member_capacity_hours(m) for m in team_members),
        active_project_count=active_count,
        utilization_percent=stepped_utilization(active_count),
    )


def group_team_bays(bays: Iterable[ManufacturingBay]) -> dict[str, list[int]]:
    """Group bay ids by team name, in first-seen order. Bays without a team are left out."""
    teams: dict[str, list[int]] = {}
    for bay in bays:
        if not bay.team:
            continue
        teams.setdefault(bay.team, []).append(bay.id)
    return teams


def estimate_team_utilizations(
    bays: Sequence[ManufacturingBay],
    members: Sequence[TeamMember],
    schedules: Sequence[ManufacturingSchedule],
    projects: Sequence[ProjectRecord],
    now: Optional[datetime] = None,
) -> list[TeamUtilization]:
    """Stepped utilization for every named team."""
    return [
        TeamUtilization(
            team=team,
            bay_ids=bay_ids,
            capacity=estimate_utilization(bay_ids, members, schedules, projects, now=now),
        )
        for team, bay_ids in group_team_bays(bays).items()
    ]


def estimate_department_workload(
    department: DepartmentCapacity,
    members: Sequence[TeamMember],
) -> DepartmentWorkload:
    """
    Department-card workload.

    Capacity is the members' efficiency-scaled hours, or the department's
    configured weekly hours when that sum is zero. Utilization compares a
    nominal 40 hours per member against that capacity, capped at 100.
    """
    dept_members = [m for m in members if m.is_active and m.department_id == department.id]
    capacity = sum(member_capacity_hours(m) for m in dept_members) or department.weekly_capacity_hours
    utilization = (
        min(100.0, len(dept_members) * DEFAULT_HOURS_PER_WEEK / capacity * 100) if capacity > 0 else 0.0
    )
    return DepartmentWorkload(
        department_id=department.id,
        department_name=department.department_name,
        member_count=len(dept_members),
        total_capacity_hours=capacity,
        utilization_percent=utilization,
        utilization_target=department.utilization_target,
    )


# ===========================================
# Capacity overview
# ===========================================

PhaseWindow = Callable[[ProjectRecord, datetime], bool]


def _window(start_attr: str, end_attr: Optional[str], end_required: bool) -> PhaseWindow:
    """A project is in the window when start <= now and (end is later than now)."""

    def contains(project: ProjectRecord, now: datetime) -> bool:
        start = parse_optional_instant(getattr(project, start_attr))
        if start is None or start > now:
            return False
        if end_attr is None:
            return True
        end = parse_optional_instant(getattr(project, end_attr))
        if end is None:
            return not end_required
        return end > now

    return contains


# Department type -> phase window on the project's current dates.
PHASE_WINDOWS: dict[str, PhaseWindow] = {
    DepartmentType.FABRICATION.value: _window("fabrication_start", "production_start", end_required=False),
    DepartmentType.PAINT.value: _window("paint_start", "production_start", end_required=True),
    DepartmentType.IT.value: _window("it_start", "ntc_testing_date", end_required=True),
    DepartmentType.NTC.value: _window("ntc_testing_date", "qc_start_date", end_required=True),
    DepartmentType.QA.value: _window("qc_start_date", None, end_required=False),
}


def _is_delivered(project: ProjectRecord) -> bool:
    return (project.status or "").strip().lower() == ProjectStatus.DELIVERED.value.lower()


def _bay_capacity(
    bay: ManufacturingBay,
    members: Sequence[TeamMember],
    schedules: Sequence[ManufacturingSchedule],
    now: datetime,
) -> BayCapacity:
    bay_members = [m for m in members if m.bay_id == bay.id]
    active = [
        s
        for s in schedules
        if s.bay_id == bay.id and ensure_utc(s.start_date) <= now <= ensure_utc(s.end_date)
    ]
    return BayCapacity(
        bay_id=bay.id,
        bay_name=bay.name,
        team=bay.team,
        assembly_count=sum(1 for m in bay_members if m.role == ASSEMBLY_ROLE),
        electrical_count=sum(1 for m in bay_members if m.role == ELECTRICAL_ROLE),
        total_members=len(bay_members),
        weekly_capacity_hours=sum(member_capacity_hours(m) for m in bay_members),
        active_projects=len(active),
        utilization_percent=min(100.0, len(active) / BAY_FULL_SCHEDULE_COUNT * 100),
    )


def _department_load(
    department: DepartmentCapacity,
    members: Sequence[TeamMember],
    projects: Sequence[ProjectRecord],
    now: datetime,
) -> DepartmentLoad:
    dept_members = [m for m in members if m.department_id == department.id]
    hours = sum(member_capacity_hours(m) for m in dept_members)

    window = PHASE_WINDOWS.get((department.department_type or "").strip().lower())
    active = 0
    if window is not None:
        active = sum(1 for p in projects if not _is_delivered(p) and window(p, now))

    return DepartmentLoad(
        department_id=department.id,
        department_name=department.department_name,
        department_type=department.department_type,
        total_members=len(dept_members),
        weekly_capacity_hours=hours or department.weekly_capacity_hours,
        utilization_target=department.utilization_target,
        active_projects=active,
        utilization_percent=(
            min(100.0, active * DEFAULT_HOURS_PER_WEEK / hours * 100) if hours > 0 else 0.0
        ),
    )


def build_capacity_overview(
    bays: Sequence[ManufacturingBay],
    members: Sequence[TeamMember],
    departments: Sequence[DepartmentCapacity],
    schedules: Sequence[ManufacturingSchedule],
    projects: Sequence[ProjectRecord],
    now: Optional[datetime] = None,
) -> CapacityOverview:
    """Per-bay and per-department capacity as of ``now``, over active members only."""
    current = ensure_utc(now) if now else now_utc()
    active_members = [m for m in members if m.is_active]

    production = [_bay_capacity(bay, active_members, schedules, current) for bay in bays]
    department_loads = [
        _department_load(dept, active_members, projects, current) for dept in departments
    ]

    utilizations = [b.utilization_percent for b in production] + [
        d.utilization_percent for d in department_loads
    ]
    return CapacityOverview(
        production_capacity=production,
        department_capacity=department_loads,
        total_team_members=len(active_members),
        summary=CapacitySummary(
            total_production_capacity=sum(b.weekly_capacity_hours for b in production),
            total_department_capacity=sum(d.weekly_capacity_hours for d in department_loads),
            average_utilization=sum(utilizations) / len(utilizations) if utilizations else 0.0,
        ),
    )


# ===========================================
# Team exposure
# ===========================================


def find_team_exposure(
    project_id: int,
    bays: Sequence[ManufacturingBay],
    schedules: Sequence[ManufacturingSchedule],
    projects: Sequence[ProjectRecord],
) -> list[TeamExposure]:
    """
    For each bay the project is booked in, list the other projects booked there.

    Bays are returned in bay order; unknown project ids are skipped.
    """
    project_bay_ids = {s.bay_id for s in schedules if s.project_id == project_id}
    projects_by_id = {p.id: p for p in projects}

    exposures: list[TeamExposure] = []
    for bay in bays:
        if bay.id not in project_bay_ids:
            continue
        others: list[ScheduledProject] = []
        for schedule in schedules:
            if schedule.bay_id != bay.id or schedule.project_id == project_id:
                continue
            other = projects_by_id.get(schedule.project_id)
            if other is None:
                continue
            others.append(
                ScheduledProject(
                    project_id=other.id,
                    project_number=other.project_number,
                    name=other.name,
                    status=other.status,
                    start_date=schedule.start_date,
                    end_date=schedule.end_date,
                )
            )
        exposures.append(TeamExposure(bay_id=bay.id, bay_name=bay.name, team=bay.team, projects=others))
    return exposures
