# file: courierratio/risk/score.py
"""
Fraud-risk classification and courier ranking.

The tier is derived from the aggregate success ratio exactly as upstream
reports it. Bands are inclusive at their lower bound:

    no parcels          -> unknown
    ratio >= 80         -> low
    ratio >= 50         -> medium
    otherwise           -> high
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Mapping

from courierratio.gateway.models import COURIER_KEYS, CourierCheckData, CourierStat, SummaryStat

logger = logging.getLogger(__name__)

RiskLevel = Literal["unknown", "low", "medium", "high"]
CourierTone = Literal["success", "warning", "empty", "error"]

LOW_RISK_MIN_RATIO = 80.0
MEDIUM_RISK_MIN_RATIO = 50.0

# Upstream ratios are rounded; anything past this is worth a log line.
_DRIFT_TOLERANCE = 1.0


@dataclass(frozen=True, slots=True)
class RiskTier:
    level: RiskLevel
    label: str
    emoji: str


RISK_TIERS: dict[RiskLevel, RiskTier] = {
    "unknown": RiskTier("unknown", "No History", "❓"),
    "low": RiskTier("low", "Trusted", "✅"),
    "medium": RiskTier("medium", "Moderate Risk", "⚠️"),
    "high": RiskTier("high", "High Risk", "🚫"),
}


def classify(summary: SummaryStat) -> RiskLevel:
    """Classify a summary (or a single courier) into a risk tier."""

    if summary.total_parcel == 0:
        return "unknown"
    if summary.success_ratio >= LOW_RISK_MIN_RATIO:
        return "low"
    if summary.success_ratio >= MEDIUM_RISK_MIN_RATIO:
        return "medium"
    return "high"


def rank(stats: Mapping[str, CourierStat | None]) -> list[CourierStat]:
    """
    Present couriers ordered by `total_parcel`, busiest first.

    `sorted` is stable and the input is walked in `COURIER_KEYS` order, so ties
    keep the fixed enumeration order regardless of the mapping's own order.
    """

    present: list[CourierStat] = []
    for key in COURIER_KEYS:
        stat = stats.get(key)
        if stat is not None:
            present.append(stat)
    return sorted(present, key=lambda s: s.total_parcel, reverse=True)


def courier_tone(stat: SummaryStat) -> CourierTone:
    if stat.success_ratio >= LOW_RISK_MIN_RATIO:
        return "success"
    if stat.success_ratio >= MEDIUM_RISK_MIN_RATIO:
        return "warning"
    if stat.total_parcel == 0:
        return "empty"
    return "error"


def ratio_drift(stat: SummaryStat) -> float | None:
    """Distance between upstream's ratio and the one implied by the counts."""

    if stat.total_parcel == 0:
        return None
    local = 100.0 * stat.success_parcel / stat.total_parcel
    return abs(stat.success_ratio - local)


@dataclass(frozen=True, slots=True)
class RiskAssessment:
    tier: RiskTier
    summary: SummaryStat
    couriers: list[CourierStat]

    @property
    def level(self) -> RiskLevel:
        return self.tier.level

    def to_dict(self) -> dict[str, object]:
        return {
            "risk": self.tier.level,
            "label": self.tier.label,
            "emoji": self.tier.emoji,
            "summary": self.summary.model_dump(),
            "couriers": [
                {**c.model_dump(), "tone": courier_tone(c)} for c in self.couriers
            ],
        }


def assess(data: CourierCheckData) -> RiskAssessment:
    """Classify the aggregate and rank the per-courier breakdown."""

    summary = data.summary
    drift = ratio_drift(summary)
    if drift is not None and drift > _DRIFT_TOLERANCE:
        logger.debug(
            "summary success_ratio %.2f differs from counts by %.2f points",
            summary.success_ratio,
            drift,
        )

    level = classify(summary)
    return RiskAssessment(tier=RISK_TIERS[level], summary=summary, couriers=rank(data.couriers()))
