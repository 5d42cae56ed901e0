"""
Load and validate the looper YAML configuration.

Lookup order:

1. ``--config PATH`` passed by the CLI.
2. ``$GCODE_LOOPER_CONFIG``.
3. ``gcode_looper/resources/default_config.yaml`` from the installed package.

Callers receive a frozen :class:`ConfigSchema`; no other module reads YAML.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import yaml
from importlib.resources import as_file, files
from pydantic import ValidationError

from .schema import ConfigSchema

ENV_VAR = "GCODE_LOOPER_CONFIG"

# --------------------------------------------------------------------------- #
# Packaged default                                                            #
# --------------------------------------------------------------------------- #
try:
    _DEFAULT_CONFIG = files("gcode_looper.resources") / "default_config.yaml"
except ModuleNotFoundError:
    _DEFAULT_CONFIG = Path(__file__).resolve().parent.parent / "resources" / "default_config.yaml"


def _from_env() -> Optional[Path]:
    """Return the path named by :data:`ENV_VAR`, or ``None`` when unset."""
    value = os.environ.get(ENV_VAR)
    return Path(value).expanduser() if value else None


def _first_existing(*candidates: Optional[Path]) -> Optional[Path]:
    """Return the first path in *candidates* that exists on disk."""
    for p in candidates:
        if p is not None and p.exists():
            return p
    return None


def _load_yaml(path: Path) -> dict:
    """Read a YAML mapping; an empty document yields an empty dict."""
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise RuntimeError(f"Invalid configuration – {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise RuntimeError(f"Invalid configuration – {path} is not a mapping")
    return data


def _resolve_yaml(explicit: Optional[Path]) -> Optional[Path]:
    """Return the user-supplied configuration file, or ``None`` for the default.

    Raises:
        FileNotFoundError: When *explicit* is given but does not exist.
    """
    if explicit is not None and not explicit.exists():
        raise FileNotFoundError(f"Configuration file not found: {explicit}")
    return _first_existing(explicit, _from_env())


# --------------------------------------------------------------------------- #
# Public API                                                                  #
# --------------------------------------------------------------------------- #
def load_config(*, config_path: Optional[str | Path] = None) -> ConfigSchema:
    """Return a fully validated :class:`ConfigSchema`.

    Args:
        config_path: YAML file to use instead of the lookup order above.

    Returns:
        The validated, immutable configuration.

    Raises:
        RuntimeError: When the YAML is malformed or fails validation.
        FileNotFoundError: When *config_path* does not exist.
    """
    explicit = Path(config_path).expanduser().resolve() if config_path else None
    resolved = _resolve_yaml(explicit)
    if resolved is None:
        with as_file(_DEFAULT_CONFIG) as p:
            data = _load_yaml(p)
    else:
        data = _load_yaml(resolved)

    try:
        return ConfigSchema(**data)
    except (ValidationError, TypeError) as exc:
        raise RuntimeError(f"Invalid configuration – {exc}") from exc
