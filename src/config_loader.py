"""Configuration loader that parses and validates user-provided TOML."""

from __future__ import annotations

import logging
import math
import tomllib
from dataclasses import fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple

from .datatypes import (
    FORMAT_CONFIGS,
    CenterCrop,
    ColorName,
    ConversionConfig,
    ICOConfig,
    OutputFormat,
)
from .image_convert.render.geometry import MAX_DIMENSION

logger = logging.getLogger(__name__)

__all__ = ["ConfigError", "load_config", "parse_config", "parse_crop"]


class ConfigError(ValueError):
    """Raised when the configuration file is malformed or fails validation."""


ICO_MAX_SIZE = 256


def _coerce_bool(value: Any, dotted_key: str) -> bool:
    """Return a bool, coercing simple 0/1 representations when necessary."""

    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"0", "1"}:
            return normalized == "1"
        if normalized in {"true", "false"}:
            return normalized == "true"
    raise ConfigError(f"{dotted_key} must be a boolean (use true/false).")


def _coerce_enum(value: Any, dotted_key: str, enum_type: type[Enum]) -> Enum:
    """Return an enum member, coercing string values case-insensitively."""

    if isinstance(value, enum_type):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        for member in enum_type:
            member_value = str(member.value).lower()
            if normalized == member_value:
                return member
    raise ConfigError(
        f"{dotted_key} must be one of: {', '.join(str(member.value) for member in enum_type)}"
    )


def _coerce_int(value: Any, dotted_key: str, *, minimum: int, maximum: int) -> int:
    """Return ``value`` as an integer inside ``[minimum, maximum]``."""

    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{dotted_key} must be an integer")
    if value < minimum or value > maximum:
        raise ConfigError(f"{dotted_key} must be between {minimum} and {maximum}")
    return value


def _normalize_float(value: Any, dotted_key: str) -> float:
    """Return ``value`` as a finite float, raising ConfigError otherwise."""

    if isinstance(value, bool):
        raise ConfigError(f"{dotted_key} must be a number")
    try:
        numeric = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{dotted_key} must be a number") from exc
    if not math.isfinite(numeric):
        raise ConfigError(f"{dotted_key} must be a finite number")
    return numeric


def parse_crop(raw: Any, dotted_key: str) -> CenterCrop:
    """Accept ``{ratio = [w, h]}`` or a ``"w:h"`` string."""

    if isinstance(raw, dict):
        unknown = set(raw) - {"ratio"}
        if unknown:
            raise ConfigError(f"Invalid keys in [{dotted_key}]: {', '.join(sorted(unknown))}")
        ratio = raw.get("ratio")
        dotted_key = f"{dotted_key}.ratio"
    else:
        ratio = raw
    if isinstance(ratio, str):
        ratio = ratio.split(":")
    if not isinstance(ratio, (list, tuple)) or len(ratio) != 2:
        raise ConfigError(f"{dotted_key} must be a [width, height] pair or 'W:H'")
    ratio_w = _normalize_float(ratio[0], dotted_key)
    ratio_h = _normalize_float(ratio[1], dotted_key)
    if ratio_w <= 0 or ratio_h <= 0:
        raise ConfigError(f"{dotted_key} values must be > 0")
    return CenterCrop(ratio_w, ratio_h)


def _parse_icon_sizes(raw: Any, dotted_key: str) -> List[Tuple[int, int]]:
    if not isinstance(raw, list) or not raw:
        raise ConfigError(f"{dotted_key} must be a non-empty list of [width, height] pairs")
    sizes: List[Tuple[int, int]] = []
    for index, entry in enumerate(raw):
        entry_key = f"{dotted_key}[{index}]"
        if isinstance(entry, int) and not isinstance(entry, bool):
            entry = [entry, entry]
        if not isinstance(entry, list) or len(entry) != 2:
            raise ConfigError(f"{entry_key} must be a [width, height] pair")
        width = _coerce_int(entry[0], entry_key, minimum=1, maximum=ICO_MAX_SIZE)
        height = _coerce_int(entry[1], entry_key, minimum=1, maximum=ICO_MAX_SIZE)
        sizes.append((width, height))
    return sizes


def _clean_value(key: str, value: Any, dotted_key: str, cls: type) -> Any:
    if key == "crop":
        return parse_crop(value, dotted_key)
    if key == "sizes" and cls is ICOConfig:
        return _parse_icon_sizes(value, dotted_key)
    if key == "background_color":
        return _coerce_enum(value, dotted_key, ColorName)
    if key in {"width", "height"}:
        dimension = _coerce_int(value, dotted_key, minimum=0, maximum=MAX_DIMENSION)
        return dimension or None
    if key == "quality":
        return _coerce_int(value, dotted_key, minimum=0, maximum=100)
    if key == "compression_level":
        return _coerce_int(value, dotted_key, minimum=0, maximum=2)
    if key == "ppi":
        ppi = _normalize_float(value, dotted_key)
        if ppi < 0:
            raise ConfigError(f"{dotted_key} must be >= 0")
        return ppi
    if key == "sharpen":
        # Negative values request the automatic amount.
        sharpen = _normalize_float(value, dotted_key)
        return None if sharpen < 0 else sharpen
    return value


def _sanitize_section(raw: Mapping[str, Any], name: str, cls):
    """
    Coerce a raw TOML table into an instance of ``cls``.

    Parameters:
        raw (Mapping[str, Any]): Raw TOML section data.
        name (str): Section name used when reporting validation errors.
        cls: Config dataclass for the selected output format.

    Returns:
        Any: Instantiated dataclass populated with values from ``raw``.

    Raises:
        ConfigError: If the section is not a table or contains invalid keys or values.
    """
    if not isinstance(raw, dict):
        raise ConfigError(f"[{name}] must be a table")
    cls_fields = {field.name: field for field in fields(cls)}
    bool_fields = {field_name for field_name, field in cls_fields.items() if field.type is bool}
    unknown = sorted(set(raw) - set(cls_fields))
    if unknown:
        raise ConfigError(f"Invalid keys in [{name}]: {', '.join(unknown)}")
    cleaned: Dict[str, Any] = {}
    for key, value in raw.items():
        dotted_key = f"{name}.{key}"
        if key in bool_fields:
            cleaned[key] = _coerce_bool(value, dotted_key)
        else:
            cleaned[key] = _clean_value(key, value, dotted_key, cls)
    try:
        return cls(**cleaned)
    except TypeError as exc:
        raise ConfigError(f"Invalid keys in [{name}]: {exc}") from exc


def parse_config(raw: Mapping[str, Any]) -> ConversionConfig:
    """
    Build a :class:`ConversionConfig` from an already parsed TOML document.

    ``[output].format`` picks the options class; ``[options]`` is validated
    against it. Both tables are optional and default to PNG output.
    """

    output_section = raw.get("output", {})
    if not isinstance(output_section, dict):
        raise ConfigError("[output] must be a table")
    unknown = sorted(set(output_section) - {"format"})
    if unknown:
        raise ConfigError(f"Invalid keys in [output]: {', '.join(unknown)}")
    fmt = OutputFormat.PNG
    if "format" in output_section:
        fmt = _coerce_enum(output_section["format"], "output.format", OutputFormat)

    options_cls = FORMAT_CONFIGS[fmt]
    options = _sanitize_section(raw.get("options", {}), "options", options_cls)
    if isinstance(options, ICOConfig) and not options.sizes:
        raise ConfigError("options.sizes must list at least one icon size for ico output")
    logger.debug("Loaded %s options: %s", fmt.value, options)
    return ConversionConfig(format=fmt, options=options)


def load_config(path: str | Path) -> ConversionConfig:
    """
    Load and validate a conversion configuration from a TOML file.

    Reads the file at `path`, parses it as UTF-8 TOML (BOM is accepted) and
    validates the `[output]` and `[options]` tables.

    Returns:
        ConversionConfig: The selected output format and its validated options.

    Raises:
        ConfigError: If the file is missing, not UTF-8, TOML parsing fails, or any validation rule is violated.
    """

    try:
        with open(path, "rb") as handle:
            raw_bytes = handle.read()
    except OSError as exc:
        raise ConfigError(f"Failed to read configuration file {path}: {exc}") from exc
    if raw_bytes.startswith(b"\xef\xbb\xbf"):
        raw_bytes = raw_bytes[3:]
    try:
        raw = tomllib.loads(raw_bytes.decode("utf-8"))
    except UnicodeDecodeError as exc:
        raise ConfigError("Configuration file must be UTF-8 encoded") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to parse TOML: {exc}") from exc
    return parse_config(raw)
