"""Services for Report Builder."""

from reportbuilder.services.export_service import ExportResult, ExportService
from reportbuilder.services.field_registry import FieldRegistry
from reportbuilder.services.field_store import FieldStore, InMemoryFieldStore, JsonFileFieldStore
from reportbuilder.services.orders import ORDER_FIELDS, generate_orders
from reportbuilder.services.preview import (
    build_export_rows,
    export_headers,
    materialize,
    render_table,
)

__all__ = [
    "ExportResult",
    "ExportService",
    "FieldRegistry",
    "FieldStore",
    "InMemoryFieldStore",
    "JsonFileFieldStore",
    "ORDER_FIELDS",
    "generate_orders",
    "build_export_rows",
    "export_headers",
    "materialize",
    "render_table",
]
