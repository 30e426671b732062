"""Built-in order fields and the demo orders dataset."""

import random
from datetime import date, timedelta
from typing import Any

from reportbuilder.schemas.field import DataType, FieldDefinition, FieldKind, FieldSource


def _builtin(key: str, label: str, data_type: DataType) -> FieldDefinition:
    return FieldDefinition(
        key=key,
        label=label,
        kind=FieldKind.RAW,
        data_type=data_type,
        source=FieldSource.SYSTEM,
    )


ORDER_FIELDS: tuple[FieldDefinition, ...] = (
    _builtin("orderId", "Order ID", DataType.STRING),
    _builtin("buyerName", "Buyer Name", DataType.STRING),
    _builtin("orderDate", "Order Date", DataType.DATE),
    _builtin("dispatchDate", "Dispatch Date", DataType.DATE),
    _builtin("leadTimeDays", "Lead Time (days)", DataType.NUMBER),
    _builtin("status", "Status", DataType.STRING),
    _builtin("awbNumber", "AWB Number", DataType.STRING),
    _builtin("exFactory", "Ex-Factory", DataType.DATE),
    _builtin("style", "Style", DataType.STRING),
)

BUYERS = ("Zara", "Ann Taylor", "H&M", "Uniqlo", "Gap", "Target")
STATUSES = ("Open", "In Production", "Ready", "Dispatched", "Closed")


def generate_orders(
    count: int = 28,
    seed: int | None = None,
    today: date | None = None,
) -> list[dict[str, Any]]:
    """
    Generate demo order rows.

    Order dates fall within the 60 days before ``today``; dispatch
    follows after a 1-30 day lead time and about 40% of orders carry
    an AWB number.

    Args:
        count: Number of rows
        seed: Random seed for reproducible datasets
        today: Reference date (defaults to the current date)

    Returns:
        Rows keyed by the built-in order field keys, dates as ISO strings
    """
    rng = random.Random(seed)
    base = today or date.today()
    rows: list[dict[str, Any]] = []

    for i in range(count):
        order_date = base - timedelta(days=rng.randrange(60))
        lead = rng.randint(1, 30)
        rows.append(
            {
                "orderId": f"ORD-{1000 + i}",
                "buyerName": rng.choice(BUYERS),
                "orderDate": order_date.isoformat(),
                "dispatchDate": (order_date + timedelta(days=lead)).isoformat(),
                "leadTimeDays": lead,
                "status": rng.choice(STATUSES),
                "awbNumber": f"AWB{100000 + i}" if rng.random() > 0.6 else "",
                "exFactory": (order_date + timedelta(days=rng.randrange(20))).isoformat(),
                "style": f"STY-{10 + i % 7}",
            }
        )

    return rows
