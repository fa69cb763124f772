"""
Operations REST API data source.

Reads projects, bays, schedules, team members and departments from the
operations system over HTTP. Records that fail validation are logged and
skipped so one bad row cannot hide the rest of a collection.
"""

from __future__ import annotations

from typing import Any, Optional, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from impact_engine.core.config import Settings, get_settings
from impact_engine.core.exceptions import InfrastructureError
from impact_engine.core.logger import logger
from impact_engine.interfaces.ops_data_source import IOpsDataSource
from impact_engine.models.capacity import (
    DepartmentCapacity,
    ManufacturingBay,
    ManufacturingSchedule,
    TeamMember,
)
from impact_engine.models.project import ProjectRecord

TModel = TypeVar("TModel", bound=BaseModel)

PROJECTS_PATH = "/api/projects"
BAYS_PATH = "/api/manufacturing-bays"
SCHEDULES_PATH = "/api/manufacturing-schedules"
TEAM_MEMBERS_PATH = "/api/capacity/team-members"
DEPARTMENTS_PATH = "/api/capacity/departments"


class HttpOpsDataSource(IOpsDataSource):
    """IOpsDataSource backed by the operations REST API."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            settings: Application settings (defaults to ``get_settings()``)
            client: Preconfigured client; built from settings when omitted
        """
        self._settings = settings or get_settings()
        headers: dict[str, str] = {"Accept": "application/json"}
        if self._settings.OPS_API_TOKEN:
            headers["Authorization"] = f"Bearer {self._settings.OPS_API_TOKEN}"
        self._client = client or httpx.AsyncClient(
            base_url=self._settings.OPS_API_BASE_URL,
            headers=headers,
            timeout=self._settings.OPS_API_TIMEOUT_SECONDS,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get_json(self, path: str) -> Optional[Any]:
        """GET a resource; None on 404, InfrastructureError on any other failure."""
        try:
            response = await self._client.get(path)
        except httpx.HTTPError as exc:
            raise InfrastructureError(
                f"Operations API request failed: GET {path}", details={"error": str(exc)}
            ) from exc

        if response.status_code == 404:
            return None
        if response.is_error:
            raise InfrastructureError(
                f"Operations API returned {response.status_code} for GET {path}",
                details={"status_code": response.status_code},
            )
        try:
            return response.json()
        except ValueError as exc:
            raise InfrastructureError(f"Operations API returned invalid JSON for GET {path}") from exc

    async def _list(self, path: str, model: type[TModel]) -> list[TModel]:
        data = await self._get_json(path)
        if data is None:
            return []
        if not isinstance(data, list):
            raise InfrastructureError(f"Expected a JSON array from GET {path}")

        items: list[TModel] = []
        for raw in data:
            try:
                items.append(model.model_validate(raw))
            except PydanticValidationError as exc:
                record_id = raw.get("id") if isinstance(raw, dict) else None
                logger.warning(f"Skipping invalid {model.__name__} {record_id} from {path}: {exc}")
        return items

    async def get_project(self, project_id: int) -> Optional[ProjectRecord]:
        data = await self._get_json(f"{PROJECTS_PATH}/{project_id}")
        if data is None:
            return None
        try:
            return ProjectRecord.model_validate(data)
        except PydanticValidationError as exc:
            raise InfrastructureError(f"Invalid project payload for project {project_id}") from exc

    async def list_projects(self) -> list[ProjectRecord]:
        return await self._list(PROJECTS_PATH, ProjectRecord)

    async def list_bays(self) -> list[ManufacturingBay]:
        return await self._list(BAYS_PATH, ManufacturingBay)

    async def list_schedules(self) -> list[ManufacturingSchedule]:
        return await self._list(SCHEDULES_PATH, ManufacturingSchedule)

    async def list_team_members(self) -> list[TeamMember]:
        return await self._list(TEAM_MEMBERS_PATH, TeamMember)

    async def list_departments(self) -> list[DepartmentCapacity]:
        return await self._list(DEPARTMENTS_PATH, DepartmentCapacity)
