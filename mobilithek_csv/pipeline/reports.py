"""Run status and summary reporting."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from mobilithek_csv.common.fs import write_json
from mobilithek_csv.common.models import DecodedItem, ExtractionResult
from mobilithek_csv.pipeline.export import station_summaries


def status_message(item_count: int, extraction: ExtractionResult) -> str:
    fuel = len(extraction.fuel_rows)
    overrides = len(extraction.override_rows)
    if fuel or overrides:
        return f"Fuel rows: {fuel} · Overrides: {overrides} · Parsed XML: {extraction.parsed_xml_binaries}/{item_count}"
    return f"Decoded {item_count} binary item(s)."


def item_counts(items: Sequence[DecodedItem]) -> dict[str, int]:
    return {
        "items": len(items),
        "failed": sum(1 for item in items if item.error),
        "gunzipped": sum(1 for item in items if item.was_gunzipped),
        "gunzip_failed": sum(1 for item in items if item.gunzip_error),
    }


def write_run_summary(
    data_dir: Path,
    *,
    run_id: str,
    items: Sequence[DecodedItem],
    extraction: ExtractionResult,
    artifacts: list[str],
) -> Path:
    counts = item_counts(items)
    counts.update(
        {
            "fuel_rows": len(extraction.fuel_rows),
            "override_rows": len(extraction.override_rows),
            "parsed_xml_binaries": extraction.parsed_xml_binaries,
            "fuel_binaries": extraction.fuel_binaries,
        }
    )

    status = "success"
    if counts["failed"] or counts["gunzip_failed"]:
        status = "partial"

    summary_path = data_dir / "out" / "reports" / "run_summary.json"
    payload = {
        "run_id": run_id,
        "status": status,
        "message": status_message(len(items), extraction),
        "counts": counts,
        "items": [
            {
                "id": item.id,
                "type": item.type,
                "error": item.error,
                "gunzip_error": item.gunzip_error,
                "decoded_ext": item.decoded_info.extension if item.decoded_info else None,
            }
            for item in items
        ],
        "stations": station_summaries(extraction.fuel_rows),
        "artifacts": sorted(artifacts),
    }
    write_json(summary_path, payload)
    return summary_path
