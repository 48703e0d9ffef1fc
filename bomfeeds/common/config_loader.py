"""Configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from bomfeeds.common.fs import read_yaml
from bomfeeds.common.http import RetryConfig, TimeoutConfig
from bomfeeds.common.schema import validate_settings_config

SETTINGS_FILENAME = "settings.yml"


@dataclass(frozen=True)
class Settings:
    base_url: str
    timeout: TimeoutConfig
    retry: RetryConfig
    forecast_towns_path: Path
    bulletin_stations_path: Path
    name_cutoff: float
    max_workers: int
    precis_filename: str
    bulletin_filename: str


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
    base = read_yaml(path)
    if overlay_path is None or not overlay_path.exists():
        return base
    overlay = read_yaml(overlay_path)
    return _deep_merge(base, overlay)


def _resolve(config_dir: Path, value: str) -> Path:
    path = Path(value)
    if path.is_absolute():
        return path
    return config_dir / path


def load_settings(
    config_dir: Path,
    *,
    allow_unknown: bool = False,
    overlay_config_dir: Path | None = None,
) -> Settings:
    overlay_path = None
    if overlay_config_dir is not None:
        overlay_path = overlay_config_dir / SETTINGS_FILENAME
    cfg = validate_settings_config(
        _load_yaml_with_overlay(config_dir / SETTINGS_FILENAME, overlay_path),
        allow_unknown=allow_unknown,
    )

    source = cfg["source"]
    retry = source["retry"]
    return Settings(
        base_url=str(source["base_url"]),
        timeout=TimeoutConfig(
            connect=float(source["timeout"]["connect"]),
            read=float(source["timeout"]["read"]),
        ),
        retry=RetryConfig(
            max_attempts=int(retry["max_attempts"]),
            multiplier=float(retry.get("multiplier", 1.0)),
            max_wait=float(retry.get("max_wait", 30.0)),
        ),
        forecast_towns_path=_resolve(config_dir, cfg["locations"]["forecast_towns"]),
        bulletin_stations_path=_resolve(config_dir, cfg["locations"]["bulletin_stations"]),
        name_cutoff=float(cfg["stations"]["name_cutoff"]),
        max_workers=int(cfg["orchestration"]["max_workers"]),
        precis_filename=str(cfg["output"]["precis_filename"]),
        bulletin_filename=str(cfg["output"]["bulletin_filename"]),
    )
