"""Configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from manifest_reconciler.common.errors import ConfigError
from manifest_reconciler.common.fs import read_yaml
from manifest_reconciler.common.schema import validate_reconciler_config

CONFIG_FILENAME = "reconciler.yml"


@dataclass(frozen=True)
class ConfigBundle:
    manifest: dict
    postal: dict
    geocoding: dict
    http: dict
    report: dict
    inbox: dict

    @property
    def fields(self) -> dict[str, str]:
        return self.manifest["fields"]


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
    overlay = read_yaml(overlay_path)
    if not overlay:
        return base
    return _deep_merge(base, overlay)


def load_config(
    config_dir: Path,
    *,
    allow_unknown: bool = False,
    overlay_config_dir: Path | None = None,
) -> ConfigBundle:
    overlay_path = overlay_config_dir / CONFIG_FILENAME if overlay_config_dir is not None else None
    raw = _load_yaml_with_overlay(config_dir / CONFIG_FILENAME, overlay_path)
    cfg = validate_reconciler_config(raw, allow_unknown=allow_unknown)
    return ConfigBundle(
        manifest=cfg["manifest"],
        postal=cfg["postal"],
        geocoding=cfg["geocoding"],
        http=cfg["http"],
        report=cfg["report"],
        inbox=cfg["inbox"],
    )
