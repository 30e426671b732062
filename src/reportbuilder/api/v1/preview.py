"""
Preview endpoint.

Materializes the dataset with every field and returns the selected
columns formatted for display.
"""

from fastapi import APIRouter

from reportbuilder.api.deps import Dataset, Registry
from reportbuilder.schemas.preview import PreviewColumn, PreviewResponse
from reportbuilder.services.preview import materialize, render_table

router = APIRouter()


@router.get("", response_model=PreviewResponse)
async def get_preview(registry: Registry, dataset: Dataset) -> PreviewResponse:
    """Return the live preview table."""
    preview_rows = materialize(dataset, registry.fields)
    visible = registry.selected_fields
    _, rows = render_table(preview_rows, visible)

    columns = [
        PreviewColumn(key=f.key, label=f.label, kind=f.kind, data_type=f.data_type)
        for f in visible
    ]
    return PreviewResponse(columns=columns, rows=rows, total=len(rows))
