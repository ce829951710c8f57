from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line interface schema, including help messages,
argument types, and defaults. Provides logic to translate raw argparse
namespaces into configuration overrides.
"""

import argparse
from typing import Any, Dict

from compile_modules.domain.constants import APP_NAME, APP_VERSION, SUPPORTED_FORMATS

USAGE = """compile-modules usage:

  Using files:
    compile-modules INPUT [INPUT ...] --to DIR [--infer-name] [--type TYPE] [--imports PATH:GLOBAL]

  Using stdio:
    compile-modules --stdio [--type TYPE] [--imports PATH:GLOBAL] [--module-name MOD]"""

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the compile-modules CLI.

    Option defaults are None so that unset flags do not override values
    coming from a configuration file.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog=APP_NAME,
        usage=USAGE,
        description="Compile ES modules into AMD, CommonJS, YUI or browser globals.",
    )

    # --- Inputs and Outputs ---
    p.add_argument(
        "inputs",
        nargs="*",
        metavar="INPUT",
        help="Files or directories to compile (hidden entries are skipped).",
    )
    p.add_argument(
        "--to",
        dest="to",
        default=None,
        help="A directory in which to write the resulting files.",
    )
    p.add_argument(
        "-s", "--stdio",
        action="store_true",
        help="Use stdin and stdout to process a file.",
    )

    # --- Output Format ---
    p.add_argument(
        "--type",
        dest="type",
        default=None,
        help=f"The type of output (one of {', '.join(repr(f) for f in SUPPORTED_FORMATS)}). Default: amd.",
    )
    p.add_argument(
        "--imports",
        default=None,
        help="A list of path:global pairs, comma separated (e.g. jquery:$,ember:Ember).",
    )
    p.add_argument(
        "--global",
        dest="global_name",
        default=None,
        help="When the type is `globals`, the name of the global to export into.",
    )

    # --- Module Naming ---
    p.add_argument(
        "--infer-name",
        dest="infer_name",
        action="store_true",
        default=None,
        help="Automatically generate names for AMD and YUI modules.",
    )
    p.add_argument(
        "-m", "--module-name",
        dest="module_name",
        default=None,
        help="The name of the outputted module.",
    )

    # --- Dependency Graph ---
    p.add_argument(
        "--graph",
        action="store_true",
        default=None,
        help="Generate a json file containing the dependency graph.",
    )

    # --- Runtime ---
    p.add_argument(
        "--compiler",
        default=None,
        help="Compiler factory as 'module:attribute' (default: built-in compiler).",
    )
    p.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of parallel compile workers.",
    )
    p.add_argument(
        "--dry-run",
        action="store_true",
        help="List the files that would be compiled without writing anything.",
    )

    # --- Configuration and Diagnostic Tools ---
    p.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Read options from this JSON file (default: ./compile-modules.json).",
    )
    p.add_argument(
        "--use-defaults",
        action="store_true",
        help="Ignore configuration files and start from built-in defaults.",
    )
    p.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the effective configuration as JSON and exit.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )
    p.add_argument(
        "--log-file",
        dest="log_file",
        default=None,
        help="Also write diagnostics to this rotating log file.",
    )
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print the run result as JSON instead of a human summary.",
    )
    p.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {APP_VERSION}",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into configuration overrides.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset (None = not given).
    """
    return {
        "type": args.type,
        "to": args.to,
        "imports": args.imports,
        "graph": args.graph,
        "infer_name": args.infer_name,
        "module_name": args.module_name,
        "global_name": args.global_name,
        "workers": args.workers,
        "compiler": args.compiler,
    }
