"""Configuration loading for the adaptive news extractor."""

from .settings import AppSettings, DetectionSettings, ExtractionSettings, SettingsError, load_settings

__all__ = ["AppSettings", "DetectionSettings", "ExtractionSettings", "SettingsError", "load_settings"]
