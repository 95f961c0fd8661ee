# file: courierratio/io/report.py
"""
Report building and export helpers.

Reports are plain dictionaries (JSON-serializable) so the CLI and the API can
share them, and a saved JSON report can be re-exported later.
"""

from __future__ import annotations

import csv
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Mapping

from courierratio import __version__
from courierratio.core.enrich import Enrichment
from courierratio.core.phone import BdPhoneNumber
from courierratio.risk.score import RiskAssessment


def utc_now_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


def build_report(
    *,
    raw: str,
    phone: BdPhoneNumber,
    enrichment: Enrichment,
    assessment: RiskAssessment,
    upstream_reports: list[Any] | None = None,
) -> dict[str, Any]:
    return {
        "metadata": {
            "tool": "courierratio",
            "version": __version__,
            "generated_at": utc_now_iso(),
        },
        "query": {"raw": raw},
        "normalized": {"phone": phone, **enrichment.to_dict()},
        "assessment": assessment.to_dict(),
        "upstream_reports": list(upstream_reports or []),
    }


def human_text(report: Mapping[str, Any]) -> str:
    n = report.get("normalized", {}) or {}
    a = report.get("assessment", {}) or {}
    s = a.get("summary", {}) or {}

    lines: list[str] = []
    lines.append(f"Phone: {n.get('phone', '')} ({n.get('e164', '')})")
    if n.get("operator"):
        lines.append(f"Operator: {n.get('operator')}")
    lines.append("")
    lines.append(f"Risk: {a.get('emoji', '')} {a.get('label', '')}")
    lines.append(f"  Success ratio: {s.get('success_ratio', '')}%")
    lines.append(f"  Total parcels: {s.get('total_parcel', '')}")
    lines.append(f"  Delivered: {s.get('success_parcel', '')}")
    lines.append(f"  Cancelled: {s.get('cancelled_parcel', '')}")

    couriers = a.get("couriers", [])
    if isinstance(couriers, list) and couriers:
        lines.append("")
        lines.append("Couriers:")
        for c in couriers:
            if not isinstance(c, dict):
                continue
            lines.append(
                f"  - {c.get('name', '')}: {c.get('success_parcel', 0)}/{c.get('total_parcel', 0)}"
                f" delivered, {c.get('cancelled_parcel', 0)} cancelled"
                f" ({c.get('success_ratio', 0)}%)"
            )

    return "\n".join(lines) + "\n"


def export_json(report: Mapping[str, Any], path: Path) -> None:
    """Write a report to disk as pretty-printed JSON."""

    path.write_text(json.dumps(report, indent=2, sort_keys=True, ensure_ascii=False), encoding="utf-8")


_CSV_FIELDS = [
    "row_index",
    "row_type",
    "section",
    "key",
    "value",
    "courier",
    "total_parcel",
    "success_parcel",
    "cancelled_parcel",
    "success_ratio",
    "tone",
]


def _safe_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (str, int, float, bool)):
        return str(value)
    return json.dumps(value, ensure_ascii=False)


def _kv_rows(section: str, data: Any) -> Iterable[dict[str, str]]:
    if not isinstance(data, dict):
        return []
    return [
        {"row_type": "kv", "section": section, "key": _safe_str(k), "value": _safe_str(data[k])}
        for k in sorted(data)
    ]


def _courier_rows(report: Mapping[str, Any]) -> Iterable[dict[str, str]]:
    assessment = report.get("assessment")
    if not isinstance(assessment, dict):
        return []
    couriers = assessment.get("couriers")
    if not isinstance(couriers, list):
        return []
    rows: list[dict[str, str]] = []
    for c in couriers:
        if not isinstance(c, dict):
            continue
        rows.append(
            {
                "row_type": "courier",
                "section": "couriers",
                "courier": _safe_str(c.get("name")),
                "total_parcel": _safe_str(c.get("total_parcel")),
                "success_parcel": _safe_str(c.get("success_parcel")),
                "cancelled_parcel": _safe_str(c.get("cancelled_parcel")),
                "success_ratio": _safe_str(c.get("success_ratio")),
                "tone": _safe_str(c.get("tone")),
            }
        )
    return rows


def export_csv(report: Mapping[str, Any], path: Path) -> None:
    """
    Export a report as CSV: key/value rows for the header sections, then one
    row per courier in ranked order.
    """

    assessment = report.get("assessment")
    risk: dict[str, Any] = {}
    if isinstance(assessment, dict):
        risk = {k: assessment.get(k) for k in ("risk", "label")}
        summary = assessment.get("summary")
        if isinstance(summary, dict):
            risk.update(summary)

    rows: list[dict[str, str]] = []
    rows.extend(_kv_rows("metadata", report.get("metadata")))
    rows.extend(_kv_rows("query", report.get("query")))
    rows.extend(_kv_rows("normalized", report.get("normalized")))
    rows.extend(_kv_rows("risk", risk))
    rows.extend(_courier_rows(report))

    with path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=_CSV_FIELDS, restval="")
        writer.writeheader()
        for i, row in enumerate(rows):
            writer.writerow({"row_index": str(i), **row})
