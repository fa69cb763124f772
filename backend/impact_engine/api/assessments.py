"""
Impact assessment API endpoints.

Read-only views of a project's schedule variances and department impacts,
plus the PDF report download.
"""

import asyncio

from fastapi import APIRouter, HTTPException, Query, Response, status

from impact_engine.api.deps import AssessmentSvc
from impact_engine.core.exceptions import (
    InfrastructureError,
    NotFoundError,
    ReportGenerationError,
    ReportInProgressError,
)
from impact_engine.models.capacity import TeamExposure
from impact_engine.models.impact import ImpactAssessment

router = APIRouter()


def _upstream_unavailable(exc: InfrastructureError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=exc.message,
    )


@router.get("/{project_id}", response_model=ImpactAssessment)
async def get_assessment(
    project_id: int,
    service: AssessmentSvc,
    include_insights: bool = Query(True, description="Request narrative insights"),
):
    """Variances, department impacts, summary and insights for a project."""
    try:
        return await service.build_assessment(project_id, include_insights=include_insights)
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except InfrastructureError as exc:
        raise _upstream_unavailable(exc) from exc


@router.get("/{project_id}/report")
async def download_report(
    project_id: int,
    service: AssessmentSvc,
    include_future_projects: bool = Query(
        False, description="Add insights on other projects sharing the same bays"
    ),
    save: bool = Query(False, description="Also write the PDF to REPORT_OUTPUT_DIR"),
):
    """Render the impact assessment PDF and return it as a download."""
    try:
        document = await service.generate_report(
            project_id, include_future_projects=include_future_projects
        )
        if save:
            await asyncio.to_thread(service.save_report, document)
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except ReportInProgressError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc
    except ReportGenerationError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc
    except InfrastructureError as exc:
        raise _upstream_unavailable(exc) from exc

    return Response(
        content=document.content,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{document.filename}"',
            "X-Page-Count": str(document.page_count),
        },
    )


@router.get("/{project_id}/team-exposure", response_model=list[TeamExposure])
async def get_team_exposure(project_id: int, service: AssessmentSvc):
    """Other projects booked into the bays this project uses."""
    try:
        return await service.get_team_exposure(project_id)
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except InfrastructureError as exc:
        raise _upstream_unavailable(exc) from exc
