"""
Capacity API endpoints.

Estimated team utilization, the capacity overview and per-department
workload, computed from the operations data on every request.
"""

import asyncio

from fastapi import APIRouter, HTTPException, status

from impact_engine.api.deps import OpsDataSource
from impact_engine.core.exceptions import InfrastructureError
from impact_engine.models.capacity import CapacityOverview, DepartmentWorkload, TeamUtilization
from impact_engine.services.capacity_estimator import (
    build_capacity_overview,
    estimate_department_workload,
    estimate_team_utilizations,
)

router = APIRouter()


@router.get("/teams", response_model=list[TeamUtilization])
async def list_team_utilization(data_source: OpsDataSource):
    """Stepped utilization per production team."""
    try:
        bays, members, schedules, projects = await asyncio.gather(
            data_source.list_bays(),
            data_source.list_team_members(),
            data_source.list_schedules(),
            data_source.list_projects(),
        )
    except InfrastructureError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.message) from exc
    return estimate_team_utilizations(bays, members, schedules, projects)


@router.get("/calculations", response_model=CapacityOverview)
async def get_capacity_overview(data_source: OpsDataSource):
    """Per-bay and per-department capacity with totals."""
    try:
        bays, members, departments, schedules, projects = await asyncio.gather(
            data_source.list_bays(),
            data_source.list_team_members(),
            data_source.list_departments(),
            data_source.list_schedules(),
            data_source.list_projects(),
        )
    except InfrastructureError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.message) from exc
    return build_capacity_overview(bays, members, departments, schedules, projects)


@router.get("/departments/{department_id}/workload", response_model=DepartmentWorkload)
async def get_department_workload(department_id: int, data_source: OpsDataSource):
    """Workload card for one department."""
    try:
        department = await data_source.get_department(department_id)
        members = await data_source.list_team_members() if department else []
    except InfrastructureError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.message) from exc

    if not department:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Department {department_id} not found",
        )
    return estimate_department_workload(department, members)
