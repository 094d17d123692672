"""CLI entrypoint for decoding Mobilithek binary payloads into CSV time series."""

from __future__ import annotations

import argparse
import os
import sys
from dataclasses import replace
from pathlib import Path

from mobilithek_csv.common.config_loader import Settings, load_settings
from mobilithek_csv.common.constants import (
    COMMANDS,
    DEFAULT_CONFIG_PATH,
    EXIT_HARD_FAIL,
    EXIT_PARTIAL,
    EXIT_SUCCESS,
    PASSPHRASE_ENV,
)
from mobilithek_csv.common.errors import PipelineError, StageError
from mobilithek_csv.common.fs import read_text, write_text
from mobilithek_csv.common.logging import build_logger, close_logger, log_event
from mobilithek_csv.common.time_utils import generate_run_id
from mobilithek_csv.decode.session import SessionState
from mobilithek_csv.fetch.endpoint import fetch_response
from mobilithek_csv.pipeline.decode_stage import run_decode_stage


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("command", choices=[*COMMANDS, "all"])
    parser.add_argument("--input", default=None, help="response XML file (default: <data-dir>/in/response.xml)")
    parser.add_argument("--endpoint", default=None)
    parser.add_argument("--p12", default=None, help="client certificate; routes the fetch through the helper server")
    parser.add_argument("--passphrase", default=os.environ.get(PASSPHRASE_ENV, ""))
    parser.add_argument("--helper-url", default=None)
    parser.add_argument("--config", default=None, help=f"settings YAML (default: {DEFAULT_CONFIG_PATH} when present)")
    parser.add_argument("--overlay-config", default=None)
    parser.add_argument("--data-dir", default="./data")
    parser.add_argument("--run-id", default=None)
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARN", "ERROR"])
    parser.add_argument("--strict", action="store_true")
    return parser.parse_args(argv)


def _config_path(args: argparse.Namespace) -> Path | None:
    if args.config:
        return Path(args.config)
    default = Path(DEFAULT_CONFIG_PATH)
    return default if default.exists() else None


def _load_settings(args: argparse.Namespace) -> Settings:
    settings = load_settings(
        _config_path(args),
        overlay_path=Path(args.overlay_config) if args.overlay_config else None,
    )
    if args.helper_url:
        settings = replace(settings, fetch=replace(settings.fetch, helper_url=args.helper_url))
    return settings


def _input_path(args: argparse.Namespace, data_dir: Path) -> Path:
    if args.input:
        return Path(args.input)
    return data_dir / "in" / "response.xml"


def run_fetch(args: argparse.Namespace, settings: Settings, data_dir: Path) -> str:
    text = fetch_response(
        args.endpoint,
        settings=settings.fetch,
        p12_path=Path(args.p12) if args.p12 else None,
        passphrase=args.passphrase or "",
    )
    write_text(_input_path(args, data_dir), text)
    return text


def run_command(args: argparse.Namespace) -> int:
    run_id = args.run_id or generate_run_id()
    data_dir = Path(args.data_dir)
    logger = build_logger(run_id, data_dir=data_dir, level=args.log_level)
    try:
        return _run_stages(args, run_id, data_dir, logger)
    finally:
        close_logger(logger)


def _run_stages(args: argparse.Namespace, run_id: str, data_dir: Path, logger) -> int:
    settings = _load_settings(args)
    stages = COMMANDS if args.command == "all" else (args.command,)
    state = SessionState()
    xml_text: str | None = None
    had_partial_failure = False

    for stage in stages:
        log_event(logger, "stage start", run_id=run_id, stage=stage, event="STAGE_START", status="ok")
        try:
            if stage == "fetch":
                xml_text = run_fetch(args, settings, data_dir)
            elif stage == "decode":
                if xml_text is None:
                    path = _input_path(args, data_dir)
                    if not path.exists():
                        raise StageError(f"Missing response XML: {path}")
                    xml_text = read_text(path)
                result = run_decode_stage(state, xml_text, settings, data_dir, run_id, logger)
                had_partial_failure = result.had_item_failures
            else:
                raise ValueError(f"Unknown stage: {stage}")
        except PipelineError as exc:
            log_event(
                logger,
                str(exc) or f"stage {stage} failed",
                run_id=run_id,
                stage=stage,
                event="STAGE_FAIL",
                status="error",
                error_code=exc.error_code,
            )
            return EXIT_HARD_FAIL
        except Exception:
            logger.exception(
                f"unexpected failure in stage {stage}",
                extra={
                    "run_id": run_id,
                    "stage": stage,
                    "event": "STAGE_FAIL",
                    "status": "error",
                    "error_code": "UNEXPECTED_ERROR",
                },
            )
            return EXIT_HARD_FAIL
        log_event(logger, "stage end", run_id=run_id, stage=stage, event="STAGE_END", status="ok")

    if had_partial_failure:
        return EXIT_HARD_FAIL if args.strict else EXIT_PARTIAL
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    try:
        return run_command(args)
    except PipelineError:
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
