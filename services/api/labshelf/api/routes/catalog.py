from __future__ import annotations

from datetime import datetime, timezone

from labshelf.api.deps import get_store
from labshelf.core.config import settings
from labshelf.ingestion.encoder import CSV_MEDIA_TYPE
from labshelf.ingestion.errors import CatalogImportError, MalformedHeader
from labshelf.schemas.catalog import ImportSummaryOut
from labshelf.services.catalog_import import export_csv, import_csv
from labshelf.services.catalog_store import CatalogStore
from labshelf.services.merge import MergePolicy
from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile

router = APIRouter(prefix="/v1/catalog", tags=["catalog"])


@router.post("/import", response_model=ImportSummaryOut)
def import_catalog(
    file: UploadFile = File(...),
    policy: MergePolicy | None = None,
    store: CatalogStore = Depends(get_store),
):
    raw = file.file.read()
    chosen = policy or settings.merge_policy

    try:
        outcome = import_csv(
            store, raw, policy=chosen, isbn_fallback=settings.isbn_fallback
        )
    except MalformedHeader as e:
        raise HTTPException(
            status_code=422,
            detail={"error": "malformed_header", "message": str(e), "accepted": e.accepted},
        )
    except CatalogImportError as e:
        raise HTTPException(
            status_code=422,
            detail={"error": type(e).__name__, "message": str(e)},
        )

    r = outcome.report
    return ImportSummaryOut(
        variant=outcome.variant,
        policy=chosen,
        added=r.added,
        updated=r.updated,
        skipped=r.skipped,
        id_conflicts=r.id_conflicts,
        rejected_rows=outcome.rejected_rows,
        message=outcome.message,
    )


@router.get("/export")
def export_catalog(store: CatalogStore = Depends(get_store)):
    today = datetime.now(timezone.utc).date()
    filename, text = export_csv(store, prefix=settings.export_filename_prefix, today=today)
    return Response(
        content=text.encode("utf-8"),
        media_type=f"{CSV_MEDIA_TYPE}; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
