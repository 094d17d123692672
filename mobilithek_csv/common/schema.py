"""Minimal strict schemas for YAML config validation."""

from __future__ import annotations

from mobilithek_csv.common.errors import ConfigError

SECTION_KEYS: dict[str, dict[str, tuple[type, ...]]] = {
    "sniff": {
        "sample_bytes": (int,),
        "control_ratio": (int, float),
        "text_window_bytes": (int,),
        "preview_hex_bytes": (int,),
        "preview_text_bytes": (int,),
        "preview_max_chars": (int,),
    },
    "decode": {
        "base64_chunk_size": (int,),
        "filename_max_length": (int,),
    },
    "fetch": {
        "helper_url": (str,),
        "connect_timeout": (int, float),
        "read_timeout": (int, float),
        "max_attempts": (int,),
        "error_snippet_chars": (int,),
    },
    "output": {
        "response_filename": (str,),
        "fuel_long_filename": (str,),
        "override_filename": (str,),
        "decoded_json_filename": (str,),
        "decoded_xml_filename": (str,),
    },
}


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _assert_types(obj: dict, types: dict[str, tuple[type, ...]], ctx: str) -> None:
    for key, value in obj.items():
        expected = types.get(key)
        if expected is None:
            continue
        # bool is an int subclass but never a valid size or ratio
        if isinstance(value, bool) or not isinstance(value, expected):
            names = "/".join(t.__name__ for t in expected)
            raise ConfigError(f"{ctx}.{key} must be {names}, got {type(value).__name__}")


def validate_settings_config(cfg: dict | None, *, allow_unknown: bool = False) -> dict:
    if cfg is None:
        return {}
    if not isinstance(cfg, dict):
        raise ConfigError("decoder config must be a mapping")
    _assert_no_unknown_keys(cfg, set(SECTION_KEYS), "decoder config", allow_unknown)

    for section, types in SECTION_KEYS.items():
        if section not in cfg:
            continue
        body = cfg[section]
        if not isinstance(body, dict):
            raise ConfigError(f"{section} must be a mapping")
        _assert_no_unknown_keys(body, set(types), section, allow_unknown)
        _assert_types(body, types, section)

    chunk = (cfg.get("decode") or {}).get("base64_chunk_size")
    if chunk is not None and (chunk <= 0 or chunk % 4):
        raise ConfigError("decode.base64_chunk_size must be a positive multiple of 4")
    ratio = (cfg.get("sniff") or {}).get("control_ratio")
    if ratio is not None and not 0 < ratio <= 1:
        raise ConfigError("sniff.control_ratio must be in (0, 1]")
    attempts = (cfg.get("fetch") or {}).get("max_attempts")
    if attempts is not None and attempts < 1:
        raise ConfigError("fetch.max_attempts must be at least 1")

    return cfg
