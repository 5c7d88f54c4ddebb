"""Application settings management for the adaptive news extractor."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


DEFAULT_SETTINGS_PATH = Path(__file__).resolve().parent.parent.parent / "config" / "settings.yaml"
ENV_SETTINGS_PATH = "ADAPTIVE_NEWS_SETTINGS"


@dataclass
class DetectionSettings:
    """Limits applied to candidate detection."""

    max_scan_depth: Optional[int] = None
    max_candidates: Optional[int] = 50


@dataclass
class ExtractionSettings:
    """Gating and capping rules for extracted records."""

    max_items: int = 0
    strict_filtering: bool = True
    min_title_length: int = 20
    readability_fallback: bool = True
    listing_extractors: bool = True


@dataclass
class AppSettings:
    """Top-level application settings loaded from YAML."""

    detection: DetectionSettings = field(default_factory=DetectionSettings)
    extraction: ExtractionSettings = field(default_factory=ExtractionSettings)
    request_timeout: int = 10
    user_agent: str = "AdaptiveNewsBot/0.1"


class SettingsError(RuntimeError):
    """Raised when there is an issue loading settings."""


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise SettingsError(f"Settings file not found at {path}")
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise SettingsError("Settings file must define a mapping at the root level")
    return data


def _optional_int(value: Any, name: str) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return max(0, int(value))
    except (TypeError, ValueError) as exc:
        raise SettingsError(f"'{name}' must be an integer") from exc


def _optional_bool(value: Any, name: str, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise SettingsError(f"'{name}' must be true or false")
    return value


def _parse_detection(entry: Dict[str, Any]) -> DetectionSettings:
    if not isinstance(entry, dict):
        raise SettingsError("'detection' must be a mapping of configuration values")

    return DetectionSettings(
        max_scan_depth=_optional_int(entry.get("max_scan_depth"), "max_scan_depth"),
        max_candidates=_optional_int(entry.get("max_candidates", 50), "max_candidates"),
    )


def _parse_extraction(entry: Dict[str, Any]) -> ExtractionSettings:
    if not isinstance(entry, dict):
        raise SettingsError("'extraction' must be a mapping of configuration values")

    return ExtractionSettings(
        max_items=_optional_int(entry.get("max_items"), "max_items") or 0,
        strict_filtering=_optional_bool(entry.get("strict_filtering"), "strict_filtering", True),
        min_title_length=_optional_int(entry.get("min_title_length", 20), "min_title_length") or 0,
        readability_fallback=_optional_bool(entry.get("readability_fallback"), "readability_fallback", True),
        listing_extractors=_optional_bool(entry.get("listing_extractors"), "listing_extractors", True),
    )


def load_settings(path: Optional[Path] = None) -> AppSettings:
    """Load application settings from YAML into ``AppSettings``.

    ``path`` defaults to the value of the ``ADAPTIVE_NEWS_SETTINGS`` environment
    variable and falls back to ``config/settings.yaml`` relative to the project root.
    """

    if path is None:
        env_path = os.environ.get(ENV_SETTINGS_PATH)
        if env_path:
            path = Path(env_path)
        else:
            path = DEFAULT_SETTINGS_PATH

    data = _load_yaml(path)

    detection_raw = data.get("detection", {})
    detection_settings = _parse_detection(detection_raw) if detection_raw else DetectionSettings()

    extraction_raw = data.get("extraction", {})
    extraction_settings = _parse_extraction(extraction_raw) if extraction_raw else ExtractionSettings()

    try:
        request_timeout = int(data.get("request_timeout", 10))
    except (TypeError, ValueError) as exc:
        raise SettingsError("'request_timeout' must be an integer") from exc
    user_agent = str(data.get("user_agent", "AdaptiveNewsBot/0.1"))

    return AppSettings(
        detection=detection_settings,
        extraction=extraction_settings,
        request_timeout=request_timeout,
        user_agent=user_agent,
    )


__all__ = [
    "AppSettings",
    "DetectionSettings",
    "ExtractionSettings",
    "SettingsError",
    "load_settings",
]
