"""Decode stage: decode a response, extract rows and write every artifact."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path

from mobilithek_csv.common.config_loader import Settings
from mobilithek_csv.common.fs import write_bytes, write_text
from mobilithek_csv.common.logging import log_event
from mobilithek_csv.common.models import DecodedItem, DecodeSession, ExtractionResult
from mobilithek_csv.decode.orchestrator import safe_file_name
from mobilithek_csv.decode.session import SessionState
from mobilithek_csv.pipeline.decoded_export import decoded_items_json, decoded_items_xml
from mobilithek_csv.pipeline.export import (
    fuel_rows_long_csv,
    group_by_station,
    override_rows_csv,
    station_wide_csv,
)
from mobilithek_csv.pipeline.records import extract_records
from mobilithek_csv.pipeline.reports import status_message, write_run_summary


@dataclass(frozen=True)
class DecodeStageResult:
    session: DecodeSession
    extraction: ExtractionResult
    status_message: str
    summary_path: Path
    artifacts: list[str]

    @property
    def had_item_failures(self) -> bool:
        return any(item.error or item.gunzip_error for item in self.session.items)


def _log_item(logger: logging.Logger, run_id: str, item: DecodedItem) -> None:
    if item.error:
        log_event(
            logger,
            item.error,
            level=logging.WARNING,
            run_id=run_id,
            stage="decode",
            binary_id=item.binary_id,
            event="ITEM_FAIL",
            status="error",
        )
        return
    log_event(
        logger,
        item.gunzip_error or f"decoded {item.decoded_filename}",
        level=logging.WARNING if item.gunzip_error else logging.INFO,
        run_id=run_id,
        stage="decode",
        binary_id=item.binary_id,
        event="ITEM_DECODED",
        status="partial" if item.gunzip_error else "ok",
    )


def _unique_path(path: Path, used: set[Path], index: int) -> Path:
    candidate = path
    suffix = index + 1
    while candidate in used:
        candidate = path.with_name(f"{path.stem}-{suffix}{path.suffix}")
        suffix += 1
    used.add(candidate)
    return candidate


def _unique_slug(slug: str, used: set[str], index: int) -> str:
    candidate = slug
    suffix = index + 1
    while candidate in used:
        candidate = f"{slug}-{suffix}"
        suffix += 1
    used.add(candidate)
    return candidate


def write_binary_files(out_dir: Path, items: tuple[DecodedItem, ...]) -> list[Path]:
    written = []
    used: set[Path] = set()
    for item in items:
        if item.error or not item.raw_bytes or item.raw_filename is None:
            continue
        raw_path = _unique_path(out_dir / "binaries" / item.raw_filename, used, item.index)
        write_bytes(raw_path, item.raw_bytes)
        written.append(raw_path)
        if item.was_gunzipped and item.decoded_bytes and item.decoded_filename is not None:
            decoded_path = _unique_path(out_dir / "binaries" / "decoded" / item.decoded_filename, used, item.index)
            write_bytes(decoded_path, item.decoded_bytes)
            written.append(decoded_path)
    return written


def write_row_exports(out_dir: Path, extraction: ExtractionResult, settings: Settings) -> list[Path]:
    written = []
    if extraction.fuel_rows:
        path = out_dir / settings.output.fuel_long_filename
        write_text(path, fuel_rows_long_csv(extraction.fuel_rows))
        written.append(path)
        used_slugs: set[str] = set()
        for position, (station_id, rows) in enumerate(group_by_station(extraction.fuel_rows).items()):
            slug = _unique_slug(safe_file_name(station_id, settings.decode.filename_max_length), used_slugs, position)
            long_path = out_dir / "stations" / f"fuel_prices_{slug}_long.csv"
            wide_path = out_dir / "stations" / f"fuel_prices_{slug}_wide.csv"
            write_text(long_path, fuel_rows_long_csv(rows))
            write_text(wide_path, station_wide_csv(rows))
            written.extend([long_path, wide_path])
    if extraction.override_rows:
        path = out_dir / settings.output.override_filename
        write_text(path, override_rows_csv(extraction.override_rows))
        written.append(path)
    return written


def run_decode_stage(
    state: SessionState,
    xml_text: str,
    settings: Settings,
    data_dir: Path,
    run_id: str,
    logger: logging.Logger,
) -> DecodeStageResult:
    started = time.monotonic()
    session = state.decode(xml_text, settings.decode)
    for item in session.items:
        _log_item(logger, run_id, item)

    extraction = extract_records(session.items)
    message = status_message(len(session.items), extraction)

    out_dir = data_dir / "out"
    written: list[Path] = []
    response_path = out_dir / settings.output.response_filename
    write_text(response_path, session.source_text)
    written.append(response_path)
    written.extend(write_binary_files(out_dir, session.items))
    written.extend(write_row_exports(out_dir, extraction, settings))

    if session.items:
        exported = state.require_fresh(xml_text)
        json_path = out_dir / settings.output.decoded_json_filename
        xml_path = out_dir / settings.output.decoded_xml_filename
        write_text(json_path, decoded_items_json(exported) + "\n")
        write_text(xml_path, decoded_items_xml(exported))
        written.extend([json_path, xml_path])

    artifacts = [path.relative_to(data_dir).as_posix() for path in written]
    summary_path = write_run_summary(
        data_dir,
        run_id=run_id,
        items=session.items,
        extraction=extraction,
        artifacts=artifacts,
    )
    log_event(
        logger,
        message,
        run_id=run_id,
        stage="decode",
        event="DECODE_SUMMARY",
        status="ok",
        items=len(session.items),
        rows_out=len(extraction.fuel_rows) + len(extraction.override_rows),
        duration_ms=int((time.monotonic() - started) * 1000),
    )
    return DecodeStageResult(
        session=session,
        extraction=extraction,
        status_message=message,
        summary_path=summary_path,
        artifacts=artifacts,
    )
