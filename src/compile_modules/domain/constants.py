from __future__ import annotations

"""
Domain Constants.

Provides centralized access to application-wide constants: supported
output formats, persisted artifact names and versioning.
"""

from typing import Dict, Tuple

APP_NAME = "compile-modules"
APP_VERSION = "0.1.0"

# -----------------------------------------------------------------------------
# OUTPUT FORMATS
# -----------------------------------------------------------------------------
FORMAT_AMD = "amd"
FORMAT_CJS = "cjs"
FORMAT_YUI = "yui"
FORMAT_GLOBALS = "globals"

SUPPORTED_FORMATS: Tuple[str, ...] = (FORMAT_AMD, FORMAT_YUI, FORMAT_CJS, FORMAT_GLOBALS)
DEFAULT_FORMAT = FORMAT_AMD

# Format selector -> renderer method on a compiled module
FORMAT_METHODS: Dict[str, str] = {
    FORMAT_AMD: "to_amd",
    FORMAT_CJS: "to_cjs",
    FORMAT_YUI: "to_yui",
    FORMAT_GLOBALS: "to_globals",
}

# Formats whose stdio mode cannot infer a name (there is no path to infer from)
NAMED_STDIO_FORMATS: Tuple[str, ...] = (FORMAT_AMD, FORMAT_YUI)

# -----------------------------------------------------------------------------
# ARTIFACTS
# -----------------------------------------------------------------------------
GRAPH_FILENAME = "graph.json"
CONFIG_FILENAME = "compile-modules.json"
HIDDEN_PREFIX = "."
