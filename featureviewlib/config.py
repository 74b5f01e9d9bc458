from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any

PRESET_SCHEMA_VERSION = "1.0"
_PRESET_META_KEYS = ("schema_version", "_description")


class ConfigError(Exception):
    """Invalid sampler configuration or unreadable preset."""


@dataclass
class ConfigFieldError:
    """One rejected configuration value.

    Attributes:
        key:     Flat (or section-prefixed) parameter key.
        value:   The rejected value.
        message: Explanation suitable for showing next to the field.
    """
    key: str
    value: Any
    message: str


@dataclass(frozen=True)
class ParamSpec:
    """Describes one parameter a sampler reads from the flat config.

    ``type`` may be a single type or a tuple of accepted types.  Numeric
    bounds are inclusive unless the matching ``*_exclusive`` flag is set;
    ``choices`` restricts string values.
    """
    key: str
    type: type | tuple
    default: Any
    label: str
    description: str = ""
    min: float | int | None = None
    max: float | int | None = None
    min_exclusive: bool = False
    max_exclusive: bool = False
    choices: list | None = None
    nullable: bool = False


# ---------------------------------------------------------------------------
# Shared sampling section
# ---------------------------------------------------------------------------

SAMPLING_PARAMS: list[ParamSpec] = [
    ParamSpec(
        key="analysis_profile", type=str, default=None, nullable=True,
        label="Analysis profile",
        description="Analysis profile id passed to the feature source. "
                    "Empty uses the source's default profile.",
    ),
    ParamSpec(
        key="fallback_sample_rate", type=(int, float), default=44100.0,
        min=0.0, min_exclusive=True,
        label="Fallback sample rate (Hz)",
        description="Used when neither frame metadata nor the descriptor "
                    "carries a sample rate.",
    ),
]


def _sampler_sections() -> list[tuple[str, list[ParamSpec]]]:
    from .samplers import default_samplers

    return [(s.id, s.config_params()) for s in default_samplers()]


def _all_param_specs() -> list[ParamSpec]:
    specs = list(SAMPLING_PARAMS)
    for _, params in _sampler_sections():
        specs.extend(params)
    return specs


def default_config() -> dict[str, Any]:
    """Flat dict of every known key mapped to its default."""
    return {spec.key: spec.default for spec in _all_param_specs()}


def merge_configs(*configs: dict[str, Any] | None) -> dict[str, Any]:
    """Left-to-right overlay of config dicts; empty or ``None`` entries are
    skipped."""
    merged: dict[str, Any] = {}
    for overlay in configs:
        if overlay:
            merged.update(overlay)
    return merged


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------

def load_preset(path: str) -> dict[str, Any]:
    """Read a JSON preset and return its (partial, flat) config values.

    Raises :class:`ConfigError` for a missing, unreadable or malformed file.
    """
    if not os.path.isfile(path):
        raise ConfigError(f"Preset not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as fh:
            payload = json.load(fh)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in preset {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Cannot read preset {path}: {exc}") from exc

    if not isinstance(payload, dict):
        raise ConfigError(
            f"Preset {path} must hold a JSON object, not {type(payload).__name__}"
        )
    return {k: v for k, v in payload.items() if k not in _PRESET_META_KEYS}


def save_preset(config: dict[str, Any], path: str, *,
                description: str | None = None) -> None:
    """Write *config* as a JSON preset, keeping only non-default values.

    Keys starting with an underscore are runtime-only and never written.
    """
    defaults = default_config()
    payload: dict[str, Any] = {"schema_version": PRESET_SCHEMA_VERSION}
    if description:
        payload["_description"] = description
    payload.update(
        (key, value) for key, value in config.items()
        if not key.startswith("_") and not (key in defaults and defaults[key] == value)
    )

    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=4, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _type_label(t) -> str:
    names = t if isinstance(t, tuple) else (t,)
    return " or ".join(n.__name__ for n in names)


def _range_error(spec: ParamSpec, value: float) -> str | None:
    lo, hi = spec.min, spec.max
    if lo is not None:
        if spec.min_exclusive and value <= lo:
            return f"{spec.label} must be greater than {lo}."
        if not spec.min_exclusive and value < lo:
            return f"{spec.label} must be at least {lo}."
    if hi is not None:
        if spec.max_exclusive and value >= hi:
            return f"{spec.label} must be less than {hi}."
        if not spec.max_exclusive and value > hi:
            return f"{spec.label} must be at most {hi}."
    return None


def _value_error(spec: ParamSpec, value: Any) -> str | None:
    if value is None:
        return None if spec.nullable else f"{spec.label} must not be empty."

    accepted = spec.type if isinstance(spec.type, tuple) else (spec.type,)
    # bool passes isinstance(int) checks
    if isinstance(value, bool) and bool not in accepted:
        return f"{spec.label} must be {_type_label(spec.type)}, got boolean."
    if not isinstance(value, accepted):
        return f"{spec.label} must be {_type_label(spec.type)}, got {type(value).__name__}."

    if spec.choices is not None and value not in spec.choices:
        allowed = ", ".join(repr(c) for c in spec.choices)
        return f"{spec.label} must be one of {allowed}."
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return _range_error(spec, value)
    return None


def validate_param_values(params: list[ParamSpec],
                          values: dict[str, Any]) -> list[ConfigFieldError]:
    """Check the keys of *values* that *params* describe.

    Absent keys are fine (the default applies) and unknown keys are ignored.
    Never raises.
    """
    errors = []
    for spec in params:
        if spec.key in values:
            message = _value_error(spec, values[spec.key])
            if message is not None:
                errors.append(ConfigFieldError(spec.key, values[spec.key], message))
    return errors


def validate_config_fields(config: dict[str, Any]) -> list[ConfigFieldError]:
    return validate_param_values(_all_param_specs(), config)


def validate_config(config: dict[str, Any]) -> None:
    """Raise :class:`ConfigError` if any value in the flat *config* is invalid."""
    errors = validate_config_fields(config)
    if errors:
        details = "\n".join(f"  - {e.key}: {e.message}" for e in errors)
        raise ConfigError(f"Invalid sampler configuration:\n{details}")


# ---------------------------------------------------------------------------
# Sectioned config
# ---------------------------------------------------------------------------

def build_structured_defaults() -> dict[str, Any]:
    """Defaults grouped as ``{"sampling": {...}, "samplers": {id: {...}}}``."""
    return {
        "sampling": {spec.key: spec.default for spec in SAMPLING_PARAMS},
        "samplers": {
            sampler_id: {spec.key: spec.default for spec in params}
            for sampler_id, params in _sampler_sections() if params
        },
    }


def flatten_structured_config(structured: dict[str, Any]) -> dict[str, Any]:
    """Collapse a sectioned config into the flat dict samplers read."""
    sections = [structured.get("sampling", {})]
    sections.extend(s for s in structured.get("samplers", {}).values()
                    if isinstance(s, dict))
    return merge_configs(*sections)


def validate_structured_config(structured: dict[str, Any]) -> list[ConfigFieldError]:
    """Validate a sectioned config; error keys carry their section path,
    e.g. ``samplers.waveform.density``.  Unknown sampler sections are
    ignored."""
    errors = [
        ConfigFieldError(f"sampling.{e.key}", e.value, e.message)
        for e in validate_param_values(SAMPLING_PARAMS, structured.get("sampling", {}))
    ]
    known = dict(_sampler_sections())
    for sampler_id, section in structured.get("samplers", {}).items():
        params = known.get(sampler_id)
        if params is None or not isinstance(section, dict):
            continue
        errors.extend(
            ConfigFieldError(f"samplers.{sampler_id}.{e.key}", e.value, e.message)
            for e in validate_param_values(params, section)
        )
    return errors
