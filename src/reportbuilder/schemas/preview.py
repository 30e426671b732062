"""Preview table schemas."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from reportbuilder.schemas.field import DataType, FieldKind


class PreviewColumn(BaseModel):
    """One visible column of the preview table."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    key: str
    label: str
    kind: FieldKind
    data_type: DataType


class PreviewResponse(BaseModel):
    """Selected columns and formatted cells of every row."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    columns: list[PreviewColumn]
    rows: list[list[str]]
    total: int
