from fastapi import APIRouter, HTTPException, Query, Response, status

from research_metadata.core.url_utils import validate_source_url
from research_metadata.schemas.metadata import LinkPreview, MetadataPreviewRequest, ResolvedMetadata
from research_metadata.services.metadata_service import build_link_preview, resolve_metadata

router = APIRouter(tags=["metadata"])

LINK_PREVIEW_CACHE_CONTROL = "s-maxage=86400, stale-while-revalidate"
FALLBACK_PREVIEW_CACHE_CONTROL = "s-maxage=3600, stale-while-revalidate"


@router.post("/metadata-preview", response_model=ResolvedMetadata)
def metadata_preview(payload: MetadataPreviewRequest):
    source_url = _validated_url(payload.url)
    return resolve_metadata(source_url)


@router.get("/link-preview", response_model=LinkPreview)
def link_preview(response: Response, url: str | None = Query(default=None)):
    if not url:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="URL parameter is required")
    source_url = _validated_url(url)
    metadata = resolve_metadata(source_url)
    response.headers["Cache-Control"] = (
        FALLBACK_PREVIEW_CACHE_CONTROL if metadata.type == "other" else LINK_PREVIEW_CACHE_CONTROL
    )
    return build_link_preview(metadata)


def _validated_url(raw_url: str) -> str:
    try:
        return validate_source_url(raw_url)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
