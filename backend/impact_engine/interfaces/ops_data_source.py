"""
Operations data source interface.

Defines the read-only contract for the upstream operations system that owns
projects, manufacturing bays, bay schedules, team members and departments.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from impact_engine.models.capacity import (
    DepartmentCapacity,
    ManufacturingBay,
    ManufacturingSchedule,
    TeamMember,
)
from impact_engine.models.project import ProjectRecord


class IOpsDataSource(ABC):
    """Abstract interface for reading operations records."""

    @abstractmethod
    async def get_project(self, project_id: int) -> Optional[ProjectRecord]:
        """
        Get a project by ID.

        Args:
            project_id: Project ID

        Returns:
            Project if found, None otherwise
        """
        pass

    @abstractmethod
    async def list_projects(self) -> list[ProjectRecord]:
        """List every project."""
        pass

    @abstractmethod
    async def list_bays(self) -> list[ManufacturingBay]:
        """List manufacturing bays."""
        pass

    @abstractmethod
    async def list_schedules(self) -> list[ManufacturingSchedule]:
        """List bay schedules (project bookings)."""
        pass

    @abstractmethod
    async def list_team_members(self) -> list[TeamMember]:
        """List team members, active and inactive."""
        pass

    @abstractmethod
    async def list_departments(self) -> list[DepartmentCapacity]:
        """List department capacity configurations."""
        pass

    async def get_department(self, department_id: int) -> Optional[DepartmentCapacity]:
        """
        Get a department by ID.

        Default implementation scans ``list_departments``.
        """
        for department in await self.list_departments():
            if department.id == department_id:
                return department
        return None
