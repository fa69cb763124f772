from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import HTTPException

from impact_engine.api import assessments as assessments_api
from impact_engine.api import capacity as capacity_api
from impact_engine.api.insights import generate_impact_assessment
from impact_engine.core.exceptions import (
    InfrastructureError,
    NotFoundError,
    ReportGenerationError,
    ReportInProgressError,
)
from impact_engine.models.capacity import (
    DepartmentCapacity,
    ManufacturingBay,
    ManufacturingSchedule,
    TeamMember,
)
from impact_engine.models.insight import InsightRequest
from impact_engine.models.project import ProjectRecord
from impact_engine.models.report import ReportDocument
from impact_engine.services.insight_generator import InsightGenerator


def _report() -> ReportDocument:
    return ReportDocument(
        filename="Impact-Assessment-800001-2024-03-15.pdf",
        content=b"%PDF-1.4 test",
        page_count=2,
        sections=["title", "footer"],
    )


@pytest.mark.asyncio
async def test_download_report_returns_pdf_attachment() -> None:
    service = AsyncMock()
    service.generate_report.return_value = _report()

    response = await assessments_api.download_report(1, service, include_future_projects=False, save=False)

    assert response.media_type == "application/pdf"
    assert response.body == b"%PDF-1.4 test"
    assert response.headers["content-disposition"] == (
        'attachment; filename="Impact-Assessment-800001-2024-03-15.pdf"'
    )
    assert response.headers["x-page-count"] == "2"
    service.generate_report.assert_awaited_once_with(1, include_future_projects=False)
    service.save_report.assert_not_called()


@pytest.mark.asyncio
async def test_download_report_can_save_a_copy() -> None:
    service = AsyncMock()
    service.generate_report.return_value = _report()
    service.save_report = MagicMock()

    await assessments_api.download_report(1, service, include_future_projects=True, save=True)

    service.save_report.assert_called_once_with(service.generate_report.return_value)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error, status_code",
    [
        (NotFoundError("Project 1 not found"), 404),
        (ReportInProgressError("busy"), 409),
        (ReportGenerationError("Failed to generate PDF report. Please try again."), 500),
        (InfrastructureError("Operations API returned 503"), 502),
    ],
)
async def test_download_report_error_mapping(error, status_code) -> None:
    service = AsyncMock()
    service.generate_report.side_effect = error

    with pytest.raises(HTTPException) as exc_info:
        await assessments_api.download_report(1, service, include_future_projects=False, save=False)

    assert exc_info.value.status_code == status_code
    assert exc_info.value.detail == error.message


@pytest.mark.asyncio
async def test_get_assessment_not_found() -> None:
    service = AsyncMock()
    service.build_assessment.side_effect = NotFoundError("Project 9 not found")

    with pytest.raises(HTTPException) as exc_info:
        await assessments_api.get_assessment(9, service, include_insights=True)

    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_get_team_exposure_passes_through() -> None:
    service = AsyncMock()
    service.get_team_exposure.return_value = []

    assert await assessments_api.get_team_exposure(3, service) == []
    service.get_team_exposure.assert_awaited_once_with(3)


@pytest.mark.asyncio
async def test_team_utilization_endpoint() -> None:
    now = datetime.now(timezone.utc)
    data_source = AsyncMock()
    data_source.list_bays.return_value = [ManufacturingBay(id=1, name="Bay 1", team="Chavez")]
    data_source.list_team_members.return_value = [TeamMember(id=1, name="Ana", bay_id=1)]
    data_source.list_schedules.return_value = [
        ManufacturingSchedule(
            id=1, project_id=1, bay_id=1, start_date=now - timedelta(days=1), end_date=now + timedelta(days=9)
        )
    ]
    data_source.list_projects.return_value = [ProjectRecord(id=1, status="Active")]

    [team] = await capacity_api.list_team_utilization(data_source)

    assert team.team == "Chavez"
    assert team.capacity.utilization_percent == 75
    assert team.capacity.total_capacity_hours == 40


@pytest.mark.asyncio
async def test_capacity_overview_upstream_failure() -> None:
    data_source = AsyncMock()
    data_source.list_bays.side_effect = InfrastructureError("Operations API request failed")

    with pytest.raises(HTTPException) as exc_info:
        await capacity_api.get_capacity_overview(data_source)

    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_department_workload_endpoint() -> None:
    data_source = AsyncMock()
    data_source.get_department.return_value = DepartmentCapacity(
        id=4, department_name="QA", weekly_capacity_hours=80
    )
    data_source.list_team_members.return_value = [TeamMember(id=1, name="Ana", department_id=4)]

    workload = await capacity_api.get_department_workload(4, data_source)

    assert workload.member_count == 1
    assert workload.total_capacity_hours == 40


@pytest.mark.asyncio
async def test_department_workload_not_found() -> None:
    data_source = AsyncMock()
    data_source.get_department.return_value = None

    with pytest.raises(HTTPException) as exc_info:
        await capacity_api.get_department_workload(4, data_source)

    assert exc_info.value.status_code == 404
    data_source.list_team_members.assert_not_awaited()


@pytest.mark.asyncio
async def test_insight_endpoint_without_llm() -> None:
    request = InsightRequest.model_validate(
        {
            "project": {"id": 1},
            "dateVariances": [
                {
                    "displayName": "Fabrication Start",
                    "opDate": "2024-03-01",
                    "currentDate": "2024-03-10",
                    "daysDifference": 9,
                    "isDelayed": True,
                }
            ],
            "departmentImpacts": [{"department": "Fabrication", "impactLevel": "critical"}],
        }
    )

    insight = await generate_impact_assessment(request, InsightGenerator())

    assert insight.confidence == 0.85
    assert len(insight.insights) == 3
