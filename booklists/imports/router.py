"""API endpoints for importing book lists."""

import logging
from typing import Annotated

from fastapi import APIRouter, File, HTTPException, UploadFile, status

from booklists.dependencies import AppSettings, CatalogStoreDep
from booklists.imports.parsers import ImportParseError
from booklists.imports.schemas import (
    ExportPayload,
    ImportExecuteRequest,
    ImportPreview,
    ImportResult,
    ImportSnapshot,
    RestoreSummary,
    UnresolvedCount,
)
from booklists.imports.service import ListImportService, UnresolvedConflictsError

logger = logging.getLogger(__name__)

router = APIRouter()


def _parse_error(e: ImportParseError) -> HTTPException:
    logger.warning(f"Rejected list import file ({e.code.value}): {e.detail}")
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"code": e.code.value, "message": e.detail},
    )


def _validate(service: ListImportService, data: dict) -> ExportPayload:
    try:
        return service.validate(data)
    except ImportParseError as e:
        raise _parse_error(e)


@router.post("/preview", response_model=ImportPreview)
async def preview_import(
    store: CatalogStoreDep,
    settings: AppSettings,
    file: Annotated[UploadFile, File(description="Book list export JSON file")],
) -> ImportPreview:
    """Parse an export file and report its conflicts with the catalog.

    Nothing is written; the preview can be requested any number of times.

    Args:
        store: Catalog store.
        settings: Application settings.
        file: Uploaded export file.

    Returns:
        ImportPreview with a payload summary and detected conflicts.

    Raises:
        HTTPException: 400 if the file is not a supported export.
    """
    content = await file.read()
    service = ListImportService(store, settings)
    try:
        payload = service.parse(content)
    except ImportParseError as e:
        raise _parse_error(e)

    return service.preview(payload)


@router.post("/unresolved", response_model=UnresolvedCount)
async def count_unresolved(
    request: ImportExecuteRequest,
    store: CatalogStoreDep,
    settings: AppSettings,
) -> UnresolvedCount:
    """Count detailed-mode field conflicts the strategy leaves unresolved.

    Args:
        request: Payload and strategy.
        store: Catalog store.
        settings: Application settings.

    Returns:
        UnresolvedCount; ``can_execute`` is False while any remain.
    """
    service = ListImportService(store, settings)
    payload = _validate(service, request.payload)
    unresolved = service.count_unresolved(payload, request.strategy)
    return UnresolvedCount(unresolved=unresolved, can_execute=unresolved == 0)


@router.post("/execute", response_model=ImportResult)
async def execute_import(
    request: ImportExecuteRequest,
    store: CatalogStoreDep,
    settings: AppSettings,
) -> ImportResult:
    """Import book lists using the given strategy.

    The response always carries the snapshot needed by ``/restore``, also
    when the import stopped part way (``success`` false).

    Args:
        request: Payload and strategy.
        store: Catalog store.
        settings: Application settings.

    Returns:
        ImportResult with counts, errors and the undo snapshot.

    Raises:
        HTTPException: 400 for an invalid payload, 409 while detailed-mode
            field conflicts are unresolved.
    """
    service = ListImportService(store, settings)
    payload = _validate(service, request.payload)

    try:
        result = service.run_import(payload, request.strategy)
    except UnresolvedConflictsError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": str(e), "unresolved": e.unresolved},
        )

    if result.success:
        logger.info(f"Imported {len(payload.lists)} list(s): {result.imported.model_dump()}")
    return result


@router.post("/restore", response_model=RestoreSummary)
async def restore_import(
    snapshot: ImportSnapshot,
    store: CatalogStoreDep,
    settings: AppSettings,
) -> RestoreSummary:
    """Undo an import using the snapshot returned by ``/execute``.

    Send each snapshot at most once.

    Args:
        snapshot: Snapshot from a previous import.
        store: Catalog store.
        settings: Application settings.

    Returns:
        RestoreSummary of what was reverted.
    """
    service = ListImportService(store, settings)
    return service.restore_snapshot(snapshot)
