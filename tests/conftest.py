from __future__ import annotations

import copy
from typing import Any

import pytest


def _courier(name: str, total: int, success: int, cancelled: int, ratio: float) -> dict[str, Any]:
    return {
        "name": name,
        "logo": f"https://example.invalid/{name.lower()}.png",
        "total_parcel": total,
        "success_parcel": success,
        "cancelled_parcel": cancelled,
        "success_ratio": ratio,
    }


_COURIER_CHECK_BODY: dict[str, Any] = {
    "status": "success",
    "data": {
        "pathao": _courier("Pathao", 4, 3, 1, 75.0),
        "steadfast": _courier("Steadfast", 10, 9, 1, 90.0),
        "redx": _courier("RedX", 4, 4, 0, 100.0),
        "parceldex": _courier("Parceldex", 0, 0, 0, 0.0),
        "paperfly": _courier("Paperfly", 2, 1, 1, 50.0),
        "carrybee": _courier("CarryBee", 0, 0, 0, 0.0),
        "summary": {
            "total_parcel": 20,
            "success_parcel": 17,
            "cancelled_parcel": 3,
            "success_ratio": 85.0,
        },
    },
    "reports": [],
}


@pytest.fixture
def courier_check_body() -> dict[str, Any]:
    """A successful upstream courier-check body (fresh copy per test)."""
    return copy.deepcopy(_COURIER_CHECK_BODY)
