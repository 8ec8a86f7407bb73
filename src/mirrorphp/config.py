"""Project configuration: composer.json discovery, loading, validation."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

log = logging.getLogger(__name__)

COMPOSER_CONFIG_NAME = "composer.json"
INCLUDE_DEV_ENV = "MIRRORPHP_INCLUDE_DEV"

_AUTOLOAD_KINDS = ("psr-4", "psr-0", "classmap")


def find_project_root(start: str | Path = ".") -> Path | None:
    """Walk up from *start* looking for a composer.json file.

    Returns the directory containing it, or None.
    """
    current = Path(start).resolve()
    while True:
        if (current / COMPOSER_CONFIG_NAME).is_file():
            return current
        if current == current.parent:
            return None
        current = current.parent


def load_composer_config(root: str | Path) -> dict[str, Any]:
    """Read and validate composer.json from *root*.

    Raises FileNotFoundError or ValueError on problems.
    """
    config_path = Path(root) / COMPOSER_CONFIG_NAME
    if not config_path.exists():
        raise FileNotFoundError(f"No composer config at {config_path}")
    try:
        cfg = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"{config_path} is not valid JSON: {exc}") from exc
    _validate_config(cfg)
    log.info("Loaded composer config from %s", config_path)
    return cfg


def include_dev_autoload() -> bool:
    """Whether ``autoload-dev`` mappings are honoured (``MIRRORPHP_INCLUDE_DEV``)."""
    return os.environ.get(INCLUDE_DEV_ENV, "").strip().lower() in ("1", "true", "yes", "on")


def get_autoload_mappings(cfg: dict[str, Any], include_dev: bool | None = None) -> dict[str, Any]:
    """Merge the ``autoload`` (and optionally ``autoload-dev``) sections.

    Returns ``{"psr-4": {prefix: [dirs]}, "psr-0": {prefix: [dirs]}, "classmap": [paths]}``.
    """
    if include_dev is None:
        include_dev = include_dev_autoload()
    sections = ["autoload"] + (["autoload-dev"] if include_dev else [])
    merged: dict[str, Any] = {"psr-4": {}, "psr-0": {}, "classmap": []}
    for section_name in sections:
        section = cfg.get(section_name) or {}
        for kind in ("psr-4", "psr-0"):
            for prefix, dirs in (section.get(kind) or {}).items():
                if isinstance(dirs, str):
                    dirs = [dirs]
                merged[kind].setdefault(prefix, []).extend(dirs)
        merged["classmap"].extend(section.get("classmap") or [])
    return merged


def _validate_config(cfg: Any) -> None:
    """Raise ValueError if the autoload sections are structurally invalid."""
    if not isinstance(cfg, dict):
        raise ValueError("composer.json must be a JSON object")
    for section_name in ("autoload", "autoload-dev"):
        section = cfg.get(section_name)
        if section is None:
            continue
        if not isinstance(section, dict):
            raise ValueError(f"'{section_name}' must be an object")
        for kind in ("psr-4", "psr-0"):
            mapping = section.get(kind)
            if mapping is None:
                continue
            if not isinstance(mapping, dict):
                raise ValueError(f"'{section_name}.{kind}' must be an object")
            for prefix, dirs in mapping.items():
                if not isinstance(dirs, (str, list)):
                    raise ValueError(f"'{section_name}.{kind}.{prefix}' must be a path or list of paths")
        classmap = section.get("classmap")
        if classmap is not None and not isinstance(classmap, list):
            raise ValueError(f"'{section_name}.classmap' must be a list")
        unknown = set(section) - set(_AUTOLOAD_KINDS) - {"files", "exclude-from-classmap"}
        if unknown:
            log.debug("Ignoring unsupported autoload keys in %s: %s", section_name, sorted(unknown))
