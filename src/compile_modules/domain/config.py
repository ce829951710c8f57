from __future__ import annotations

"""
Configuration Domain Management.

Handles the dictionary-based run configuration: built-in defaults and an
optional JSON project file that is merged over them before CLI overrides
are applied.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

from compile_modules.domain.constants import CONFIG_FILENAME, DEFAULT_FORMAT

logger = logging.getLogger(__name__)

# Keys accepted from persisted configuration files
CONFIG_KEYS = (
    "type", "to", "imports", "graph", "infer_name",
    "module_name", "global_name", "workers", "compiler",
)


# -----------------------------------------------------------------------------
# Configuration Models (Dict-based)
# -----------------------------------------------------------------------------
def get_default_config() -> Dict[str, Any]:
    """
    Generate the default runtime configuration.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        "type": DEFAULT_FORMAT,
        "to": None,
        "imports": {},
        "graph": False,
        "infer_name": False,
        "module_name": None,
        "global_name": None,
        "workers": None,
        "compiler": None,
    }


def get_default_config_path() -> str:
    """Project configuration file looked up in the working directory."""
    return os.path.join(os.getcwd(), CONFIG_FILENAME)


# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from a JSON file merged over the defaults.

    A missing default file is not an error. A corrupt file, or one that is
    not a JSON object, is reported and ignored.

    Args:
        path: Explicit configuration file. Defaults to compile-modules.json
            in the working directory.

    Returns:
        Dict[str, Any]: The merged configuration.
    """
    config = get_default_config()
    config_path = path or get_default_config_path()

    if not os.path.exists(config_path):
        if path:
            logger.warning(f"Config file not found: {config_path}. Using defaults.")
        else:
            logger.debug("Config file not found. Returning defaults.")
        return config

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load config '{config_path}': {e}. Using defaults.")
        return config

    if not isinstance(data, dict):
        logger.warning(f"Corrupted config file '{config_path}'. Using defaults.")
        return config

    unknown = sorted(set(data) - set(CONFIG_KEYS))
    if unknown:
        logger.warning(f"Ignoring unknown config keys: {', '.join(unknown)}")

    for key in CONFIG_KEYS:
        if key in data:
            config[key] = data[key]

    logger.debug(f"Configuration loaded from {config_path}")
    return config


def merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Shallow-merge override values into the base configuration.

    Only known keys are merged and None means "not given".
    """
    out = dict(base)
    for k in CONFIG_KEYS:
        if k in overrides and overrides[k] is not None:
            out[k] = overrides[k]
    return out
