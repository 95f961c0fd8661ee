"""Upstream bdcourier API access and payload schemas."""

from __future__ import annotations

from .client import (
    BASE_URL,
    GatewayOutcome,
    MissingApiKeyError,
    UpstreamDecodeError,
    UpstreamGateway,
    decode_courier_check,
    decode_plan,
    error_outcome,
    failure_status,
)
from .models import COURIER_KEYS, CourierCheckData, CourierStat, PlanStatus, SummaryStat

__all__ = [
    "BASE_URL",
    "GatewayOutcome",
    "MissingApiKeyError",
    "UpstreamDecodeError",
    "UpstreamGateway",
    "decode_courier_check",
    "decode_plan",
    "error_outcome",
    "failure_status",
    "COURIER_KEYS",
    "CourierCheckData",
    "CourierStat",
    "PlanStatus",
    "SummaryStat",
]
