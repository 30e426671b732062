"""
Export endpoints.

Downloads the selected columns of the preview table as CSV, XLSX or PDF.
"""

from fastapi import APIRouter, Response

from reportbuilder.api.deps import Dataset, Exporter, Registry
from reportbuilder.services.preview import build_export_rows, export_headers, materialize

router = APIRouter()


@router.get("/{export_format}")
async def export_table(
    export_format: str,
    registry: Registry,
    dataset: Dataset,
    exporter: Exporter,
) -> Response:
    """
    Export the preview table.

    Only selected fields are exported, in field-list order, with their
    labels as column headers.
    """
    visible = registry.selected_fields
    rows = build_export_rows(materialize(dataset, registry.fields), visible)
    result = exporter.export(export_format, export_headers(visible), rows)

    return Response(
        content=result.content,
        media_type=result.media_type,
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )
