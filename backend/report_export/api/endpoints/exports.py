"""Report export endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ...core.errors import ExportFailure
from ...exporters.registry import ExporterRegistry
from ...schemas.export import ExportPayload, FormatInfo

router = APIRouter()
exporters = ExporterRegistry()


def get_registry() -> ExporterRegistry:
    return exporters


@router.get("/formats", response_model=list[FormatInfo], summary="List export formats")
def list_formats(registry: ExporterRegistry = Depends(get_registry)) -> list[FormatInfo]:
    return [
        FormatInfo(format=fmt, extension=fmt.extension, media_type=fmt.media_type)
        for fmt in registry.formats
    ]


@router.post(
    "/",
    summary="Export a research report",
    responses={204: {"description": "No report content, nothing exported"}},
)
def export_report(payload: ExportPayload, registry: ExporterRegistry = Depends(get_registry)) -> Response:
    try:
        result = registry.export(payload.format, payload.content, payload.title)
    except ExportFailure:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Export failed")
    if result is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    headers = {"Content-Disposition": f'attachment; filename="{result.filename}"'}
    return Response(content=result.content, media_type=result.media_type, headers=headers)
