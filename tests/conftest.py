"""
Pytest configuration and fixtures for Report Builder tests.
"""

from collections.abc import Generator
from typing import Any

import pytest
from fastapi.testclient import TestClient

from reportbuilder.core.config import Settings
from reportbuilder.main import create_app
from reportbuilder.schemas.field import FieldDefinition
from reportbuilder.services.export_service import ExportService
from reportbuilder.services.field_registry import FieldRegistry
from reportbuilder.services.field_store import InMemoryFieldStore
from reportbuilder.services.orders import ORDER_FIELDS


@pytest.fixture
def orders() -> list[dict[str, Any]]:
    """Small fixed orders dataset."""
    return [
        {
            "orderId": "ORD-1000",
            "buyerName": "Zara",
            "orderDate": "2024-01-01",
            "dispatchDate": "2024-01-10",
            "leadTimeDays": 9,
            "status": "Dispatched",
            "awbNumber": "AWB100000",
            "exFactory": "2024-01-05",
            "style": "STY-1",
        },
        {
            "orderId": "ORD-1001",
            "buyerName": "Gap",
            "orderDate": "2024-02-01",
            "dispatchDate": "2024-02-04",
            "leadTimeDays": 3,
            "status": "Open",
            "awbNumber": "",
            "exFactory": "2024-02-02",
            "style": "STY-2",
        },
    ]


@pytest.fixture
def store() -> InMemoryFieldStore:
    return InMemoryFieldStore()


@pytest.fixture
def registry(store: InMemoryFieldStore) -> FieldRegistry:
    """Registry with the built-in order fields and an in-memory store."""
    return FieldRegistry(ORDER_FIELDS, store=store)


@pytest.fixture
def export_service() -> ExportService:
    return ExportService(
        basename="orders",
        sheet_title="Orders",
        pdf_title="Orders Report",
        pdf_font_size=8,
    )


@pytest.fixture
def lead_time_field() -> FieldDefinition:
    """Calculated day difference between order and dispatch."""
    return FieldDefinition.model_validate(
        {
            "key": "leadTime",
            "label": "Lead Time",
            "kind": "calculated",
            "dataType": "number",
            "calc": {
                "op": "DATE_DIFF",
                "fromField": "orderDate",
                "toField": "dispatchDate",
                "unit": "days",
            },
        }
    )


@pytest.fixture
def app_settings() -> Settings:
    """Settings without a field store file."""
    return Settings(
        environment="testing",
        debug=True,
        log_level="WARNING",
        field_store_path=None,
    )


@pytest.fixture
def app(app_settings: Settings, store: InMemoryFieldStore, orders: list[dict[str, Any]]):
    return create_app(app_settings, store=store, dataset=orders)


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    """Create synchronous test client."""
    with TestClient(app) as test_client:
        yield test_client
