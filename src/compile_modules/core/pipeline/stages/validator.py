from __future__ import annotations

"""
Configuration Validation Service.

Acts as the gatekeeper between raw configuration (defaults, project file,
CLI overrides) and the engine. Coerces field types, then enforces the
option-combination rules. Any rule violation raises UsageValidationError
before a single path is touched.
"""

import logging
import os
from typing import Any, Dict, List, Optional, Tuple

from compile_modules.domain.config import get_default_config
from compile_modules.domain.constants import (
    FORMAT_GLOBALS,
    FORMAT_YUI,
    NAMED_STDIO_FORMATS,
    SUPPORTED_FORMATS,
)
from compile_modules.domain.errors import UsageValidationError
from compile_modules.domain.pipeline_models import CompileOptions
from compile_modules.infra.fs import normalize_path

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        stdio: bool = False,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize a raw configuration dictionary.

    Type problems are coerced with a warning (or raise TypeError when
    strict). Usage rules always raise.

    Args:
        config: Raw configuration data.
        stdio: Whether the run reads stdin and writes stdout.
        strict: If True, raise on type mismatch instead of coercing.

    Returns:
        Tuple[Dict[str, Any], List[str]]: Normalized configuration and warnings.

    Raises:
        UsageValidationError: An invalid option combination.
    """
    warnings: List[str] = []
    defaults = get_default_config()

    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        config = {}

    merged: Dict[str, Any] = dict(defaults)
    merged.update(config)

    for field in ("type", "to", "module_name", "global_name", "compiler"):
        merged[field] = _as_opt_str(merged.get(field), defaults[field], field, warnings, strict)

    for field in ("graph", "infer_name"):
        merged[field] = _as_bool(merged.get(field), defaults[field], field, warnings, strict)

    merged["type"] = (merged["type"] or defaults["type"]).lower()
    merged["imports"] = parse_imports(merged.get("imports"))
    merged["workers"] = _as_workers(merged.get("workers"), warnings, strict)

    _check_usage(merged, stdio, warnings)
    return merged, warnings


def build_compile_options(cfg: Dict[str, Any], *, stdio: bool = False) -> CompileOptions:
    """Freeze a validated configuration into the run's CompileOptions."""
    destination = cfg.get("to")
    return CompileOptions(
        format=cfg["type"],
        imports=dict(cfg.get("imports") or {}),
        module_name=cfg.get("module_name"),
        infer_name=bool(cfg.get("infer_name")) and not stdio,
        graph=bool(cfg.get("graph")),
        global_name=cfg.get("global_name"),
        destination=normalize_path(destination, os.getcwd()) if destination else None,
    )


def parse_imports(value: Any) -> Dict[str, str]:
    """
    Normalize the import mapping.

    Accepts a dict, or the CLI's "path:global,path:global" string. The split
    happens on the last colon, so paths may themselves contain colons.

    Raises:
        UsageValidationError: A malformed pair.
    """
    if not value:
        return {}

    if isinstance(value, dict):
        pairs = [(str(k), str(v)) for k, v in value.items()]
    elif isinstance(value, str):
        pairs = []
        for item in (x.strip() for x in value.split(",")):
            if not item:
                continue
            path, sep, global_name = item.rpartition(":")
            pairs.append((path.strip() if sep else "", global_name.strip()))
    else:
        raise UsageValidationError(
            f"Invalid imports: expected 'path:global' pairs, received {type(value).__name__}."
        )

    imports: Dict[str, str] = {}
    for path, global_name in pairs:
        if not path or not global_name:
            raise UsageValidationError(
                f"Invalid import mapping '{path}:{global_name}': expected PATH:GLOBAL."
            )
        imports[path] = global_name
    return imports


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: USAGE RULES
# -----------------------------------------------------------------------------

def _check_usage(cfg: Dict[str, Any], stdio: bool, warnings: List[str]) -> None:
    """Enforce option combination rules."""
    fmt = cfg["type"]

    if fmt not in SUPPORTED_FORMATS:
        raise UsageValidationError(
            f"Invalid type '{fmt}': expected one of {', '.join(SUPPORTED_FORMATS)}."
        )

    if cfg["infer_name"] and cfg["module_name"]:
        raise UsageValidationError("--infer-name and --module-name are mutually exclusive.")

    if stdio and cfg["infer_name"]:
        if fmt in NAMED_STDIO_FORMATS:
            raise UsageValidationError(
                f"--infer-name cannot be used with --stdio for type '{fmt}'; use --module-name."
            )
        warnings.append("--infer-name has no effect with --stdio.")

    if not stdio and not cfg["to"]:
        raise UsageValidationError("An output directory (--to) is required unless --stdio is used.")

    if cfg["imports"] and fmt != FORMAT_GLOBALS:
        raise UsageValidationError("--imports is only valid with --type globals.")
    if fmt == FORMAT_GLOBALS and not cfg["imports"]:
        raise UsageValidationError("--type globals requires --imports PATH:GLOBAL.")

    if fmt == FORMAT_YUI and not (cfg["module_name"] or (cfg["infer_name"] and not stdio)):
        raise UsageValidationError(
            "--type yui needs a module name: use --infer-name or --module-name."
        )

    if stdio and cfg["graph"]:
        if not cfg["to"]:
            raise UsageValidationError("--graph with --stdio requires --to for graph.json.")
        if not cfg["module_name"]:
            raise UsageValidationError("--graph with --stdio requires --module-name.")

    if cfg["global_name"] and fmt != FORMAT_GLOBALS:
        warnings.append("--global only applies to --type globals and is ignored.")


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _as_opt_str(
        value: Any, fallback: Optional[str], field: str, warnings: List[str], strict: bool
) -> Optional[str]:
    """Validate optional string inputs; blank strings count as unset."""
    if value is None:
        return fallback
    if isinstance(value, str):
        v = value.strip()
        return v if v else fallback

    msg = f"Invalid field '{field}': expected str, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_bool(value: Any, fallback: bool, field: str, warnings: List[str], strict: bool) -> bool:
    """Coerce various input types into native booleans."""
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback

    if not strict:
        if isinstance(value, (int, float)) and value in (0, 1):
            warnings.append(f"Field '{field}' converted from number {value} to bool.")
            return bool(value)
        if isinstance(value, str):
            s = value.strip().lower()
            if s in ("true", "1", "yes", "y"):
                warnings.append(f"Field '{field}' converted from '{value}' to True.")
                return True
            if s in ("false", "0", "no", "n"):
                warnings.append(f"Field '{field}' converted from '{value}' to False.")
                return False

    msg = f"Invalid field '{field}': expected bool, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_workers(value: Any, warnings: List[str], strict: bool) -> Optional[int]:
    """Worker count: a positive int, or None for the executor default."""
    if value is None:
        return None

    workers: Optional[int] = None
    if not isinstance(value, bool):
        try:
            workers = int(value)
        except (TypeError, ValueError):
            workers = None

    if workers is None or workers < 1:
        msg = f"Invalid field 'workers': expected a positive integer, received {value!r}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using executor default.")
        return None
    return workers
