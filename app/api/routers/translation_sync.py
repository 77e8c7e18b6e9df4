"""
Translation sync trigger and status endpoints.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status

from app.connectors.base import AuthError, RemoteServiceError
from app.schemas.translation_sync import (
    RemoteProjectResponse,
    SyncRunAcceptedResponse,
    SyncRunListResponse,
    SyncRunRequest,
    SyncRunStatusResponse,
)
from app.services.translation_sync_service import (
    SyncAlreadyRunningError,
    TranslationSyncService,
    get_translation_sync_service,
)
from db.models.sync_run import SyncRunTrigger, TranslationSyncRun
from translation_sync.errors import MissingConfigurationError

router = APIRouter(prefix="/translation-sync", tags=["translation-sync"])


@router.get("/projects", response_model=list[RemoteProjectResponse])
async def list_projects(
    service: TranslationSyncService = Depends(get_translation_sync_service),
) -> list[RemoteProjectResponse]:
    """
    List the remote projects visible to the configured credential.
    """

    try:
        projects = await service.list_projects()
    except AuthError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except RemoteServiceError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc

    return [RemoteProjectResponse(id=project.id, name=project.name) for project in projects]


@router.post(
    "/runs",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=SyncRunAcceptedResponse,
)
async def start_run(
    request: SyncRunRequest | None = Body(default=None),
    service: TranslationSyncService = Depends(get_translation_sync_service),
) -> SyncRunAcceptedResponse:
    """
    Start a sync run on the server's event loop and return immediately.
    """

    locales = request.locales if request is not None else None
    try:
        service.ensure_configured()
        run = service.start_in_host_loop(trigger=SyncRunTrigger.API, locale_filter=locales)
    except MissingConfigurationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except SyncAlreadyRunningError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    return SyncRunAcceptedResponse(
        run_id=run.id,
        status=run.status,
        created_at=run.created_at,
    )


@router.get("/runs", response_model=SyncRunListResponse)
def list_runs(
    status_filter: str | None = Query(default=None, alias="status", description="Optional status filter"),
    limit: int = Query(default=100, ge=1, le=500, description="Max runs returned"),
    service: TranslationSyncService = Depends(get_translation_sync_service),
) -> SyncRunListResponse:
    runs = service.list_runs(limit=limit, status=status_filter)
    return SyncRunListResponse(runs=[_to_status_response(run) for run in runs])


@router.get("/runs/{run_id}", response_model=SyncRunStatusResponse)
def get_run(
    run_id: UUID,
    service: TranslationSyncService = Depends(get_translation_sync_service),
) -> SyncRunStatusResponse:
    run = service.get_run(run_id)
    if run is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Translation sync run not found: {run_id}",
        )
    return _to_status_response(run)


def _to_status_response(run: TranslationSyncRun) -> SyncRunStatusResponse:
    return SyncRunStatusResponse(
        run_id=run.id,
        status=run.status,
        trigger=run.trigger,
        created_at=run.created_at,
        updated_at=run.updated_at,
        started_at=run.started_at,
        completed_at=run.completed_at,
        request_payload=run.request_payload,
        result_payload=run.result_payload,
        error_message=run.error_message,
    )
