# file: courierratio/gateway/models.py
"""
Typed views of the upstream payloads.

Upstream bodies are validated here before anything downstream reads them, so a
malformed body becomes a distinct decode failure instead of a missing-key error
somewhere in the risk engine.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, NonNegativeInt, model_validator
from pydantic import ConfigDict as PydanticConfigDict

# Fixed enumeration order; also the tie-break order when ranking.
COURIER_KEYS: tuple[str, ...] = (
    "pathao",
    "steadfast",
    "redx",
    "parceldex",
    "paperfly",
    "carrybee",
)


class SummaryStat(BaseModel):
    model_config = PydanticConfigDict(extra="ignore", frozen=True)

    total_parcel: NonNegativeInt
    success_parcel: NonNegativeInt
    cancelled_parcel: NonNegativeInt
    # Upstream's number is authoritative; it is not recomputed from the counts.
    success_ratio: float = Field(ge=0, le=100)

    @model_validator(mode="after")
    def _counts_within_total(self) -> "SummaryStat":
        if self.success_parcel > self.total_parcel:
            raise ValueError("success_parcel exceeds total_parcel")
        if self.cancelled_parcel > self.total_parcel:
            raise ValueError("cancelled_parcel exceeds total_parcel")
        return self


class CourierStat(SummaryStat):
    name: str
    logo: str | None = None


class CourierCheckData(BaseModel):
    """The `data` object of a successful courier check."""

    model_config = PydanticConfigDict(extra="ignore", frozen=True)

    pathao: CourierStat | None = None
    steadfast: CourierStat | None = None
    redx: CourierStat | None = None
    parceldex: CourierStat | None = None
    paperfly: CourierStat | None = None
    carrybee: CourierStat | None = None
    summary: SummaryStat

    def couriers(self) -> dict[str, CourierStat | None]:
        return {key: getattr(self, key) for key in COURIER_KEYS}


class CourierCheckPayload(BaseModel):
    model_config = PydanticConfigDict(extra="ignore", frozen=True)

    status: Literal["success"]
    data: CourierCheckData
    reports: list[Any] = Field(default_factory=list)


class PlanStatus(BaseModel):
    model_config = PydanticConfigDict(extra="ignore", frozen=True)

    remaining_paid_calls: NonNegativeInt | None = None
    remaining_free_calls: NonNegativeInt | None = None
    has_subscription: bool = False

    @property
    def remaining_calls(self) -> int:
        return (self.remaining_paid_calls or 0) + (self.remaining_free_calls or 0)
