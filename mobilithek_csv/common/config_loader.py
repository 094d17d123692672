"""Configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from mobilithek_csv.common.constants import DEFAULT_HELPER_URL
from mobilithek_csv.common.errors import ConfigError
from mobilithek_csv.common.fs import read_yaml
from mobilithek_csv.common.schema import validate_settings_config


@dataclass(frozen=True)
class SniffOptions:
    """Content classification thresholds, tuned to observed payloads."""

    sample_bytes: int = 2048
    control_ratio: float = 0.05
    text_window_bytes: int = 64 * 1024
    preview_hex_bytes: int = 64
    preview_text_bytes: int = 48 * 1024
    preview_max_chars: int = 4000


@dataclass(frozen=True)
class DecodeOptions:
    base64_chunk_size: int = 32768
    filename_max_length: int = 180
    sniff: SniffOptions = field(default_factory=SniffOptions)


@dataclass(frozen=True)
class FetchSettings:
    helper_url: str = DEFAULT_HELPER_URL
    connect_timeout: float = 20.0
    read_timeout: float = 120.0
    max_attempts: int = 1
    error_snippet_chars: int = 220


@dataclass(frozen=True)
class OutputSettings:
    response_filename: str = "response.xml"
    fuel_long_filename: str = "fuel_prices_long.csv"
    override_filename: str = "override_open.csv"
    decoded_json_filename: str = "decoded_binaries.json"
    decoded_xml_filename: str = "decoded_binaries.xml"


@dataclass(frozen=True)
class Settings:
    decode: DecodeOptions = field(default_factory=DecodeOptions)
    fetch: FetchSettings = field(default_factory=FetchSettings)
    output: OutputSettings = field(default_factory=OutputSettings)


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _load_yaml_with_overlay(path: Path, overlay_path: Path | None) -> dict:
    if not path.exists():
        raise ConfigError(f"Missing config file: {path}")
    base = read_yaml(path) or {}
    if overlay_path is None or not overlay_path.exists():
        return base
    overlay = read_yaml(overlay_path) or {}
    return _deep_merge(base, overlay)


def _known(cls, values: dict) -> dict:
    names = {f.name for f in fields(cls)}
    return {key: value for key, value in values.items() if key in names}


def settings_from_dict(cfg: dict) -> Settings:
    sniff = SniffOptions(**_known(SniffOptions, cfg.get("sniff") or {}))
    decode_values = _known(DecodeOptions, cfg.get("decode") or {})
    decode_values.pop("sniff", None)
    decode = DecodeOptions(sniff=sniff, **decode_values)
    return Settings(
        decode=decode,
        fetch=FetchSettings(**_known(FetchSettings, cfg.get("fetch") or {})),
        output=OutputSettings(**_known(OutputSettings, cfg.get("output") or {})),
    )


def load_settings(
    config_path: Path | None = None,
    *,
    allow_unknown: bool = False,
    overlay_path: Path | None = None,
) -> Settings:
    if config_path is None:
        if overlay_path is None or not overlay_path.exists():
            return Settings()
        cfg = read_yaml(overlay_path) or {}
    else:
        cfg = _load_yaml_with_overlay(config_path, overlay_path)
    return settings_from_dict(validate_settings_config(cfg, allow_unknown=allow_unknown))
