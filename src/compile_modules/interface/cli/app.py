from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: initialization of logging, loading and
merging of configuration sources (defaults, project file, CLI overrides),
usage validation, compiler resolution, engine execution and result
rendering.
"""

import json
import sys
from dataclasses import asdict
from typing import List, Optional, TextIO

from compile_modules.core.compiler.loader import load_compiler
from compile_modules.core.pipeline.engine import run_pipeline, run_stdio
from compile_modules.core.pipeline.stages.validator import build_compile_options, validate_config
from compile_modules.domain.config import get_default_config, load_config, merge_config
from compile_modules.domain.errors import (
    CompileModulesError,
    DirectoryReadError,
    FatalIOError,
    UsageValidationError,
)
from compile_modules.domain.pipeline_models import PipelineResult
from compile_modules.infra.logging import (
    LoggingConfig,
    configure_logging,
    get_logger,
    shutdown_logging,
)
from compile_modules.interface.cli import args as cli_args

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(
        argv: Optional[List[str]] = None,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.
        stdin: Input stream for --stdio (defaults to sys.stdin).
        stdout: Output stream for --stdio and reports (defaults to sys.stdout).

    Returns:
        int: Process exit code (0 success, 1 failure, 2 usage error).

    Raises:
        FatalIOError: A path could not be stat'ed; left to the supervisor.
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8")

    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Logging bootstrap (stderr only; stdout belongs to compiled output)
    log_level = "DEBUG" if args.debug else "INFO"
    configure_logging(LoggingConfig(level=log_level, console=True, log_file=args.log_file))

    try:
        return _run(args, stdin, stdout)
    finally:
        shutdown_logging()


def _run(args, stdin: TextIO, stdout: TextIO) -> int:
    logger.debug("CLI execution initiated. Resolving configuration hierarchy...")

    # 3. Resolve base configuration (defaults vs project file)
    base_conf = get_default_config() if args.use_defaults else load_config(args.config_path)

    # 4. Merge command-line overrides
    raw_conf = merge_config(base_conf, cli_args.args_to_overrides(args))

    # 5. Usage validation and normalization
    try:
        clean_conf, warnings = validate_config(raw_conf, stdio=args.stdio)
        if not args.stdio and not args.inputs and not args.dump_config:
            raise UsageValidationError("At least one INPUT path is required unless --stdio is used.")
        options = build_compile_options(clean_conf, stdio=args.stdio)
        compiler = load_compiler(clean_conf.get("compiler"))
    except UsageValidationError as e:
        logger.error(str(e))
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_USAGE

    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if args.dump_config:
        print(json.dumps(clean_conf, ensure_ascii=False, indent=2), file=stdout)
        return EXIT_OK

    # 6. Engine execution phase
    try:
        if args.stdio:
            if args.inputs:
                logger.warning("Input paths are ignored with --stdio.")
            run_stdio(options, compiler, stdin, stdout)
            return EXIT_OK

        result = run_pipeline(
            args.inputs,
            options,
            compiler,
            max_workers=clean_conf.get("workers"),
            dry_run=bool(args.dry_run),
        )
    except KeyboardInterrupt:
        logger.warning("Interrupted by user.")
        return EXIT_INTERRUPTED
    except FatalIOError as e:
        # Handlers are detached before the supervisor sees this
        logger.critical(f"Fatal I/O failure, aborting run: {e}")
        raise
    except DirectoryReadError as e:
        logger.error(str(e))
        return EXIT_FAILURE
    except CompileModulesError as e:
        logger.error(f"Compilation failed: {e}")
        return EXIT_FAILURE
    except Exception as e:
        logger.critical(f"Unexpected failure: {e}", exc_info=True)
        return EXIT_FAILURE

    # 7. Output rendering phase
    if args.json_output:
        print(json.dumps(asdict(result), ensure_ascii=False, indent=2), file=stdout)
    else:
        _print_human_summary(result, stdout)
    return EXIT_OK if result.ok else EXIT_FAILURE

# -----------------------------------------------------------------------------
# VIEW RENDERING (HUMAN READABLE)
# -----------------------------------------------------------------------------

def _print_human_summary(result: PipelineResult, stream: TextIO) -> None:
    """Render a PipelineResult as a short terminal report."""
    if not result.ok:
        print(f"ERROR: {result.error}", file=sys.stderr)
        return

    if result.dry_run:
        planned = result.summary.get("planned", [])
        print(f"Dry run: {len(planned)} file(s) would be compiled into {result.destination}", file=stream)
        for path in planned:
            print(f"  - {path}", file=stream)
        return

    print(f"Compiled {result.processed} file(s) into {result.destination}", file=stream)
    if result.graph_path:
        print(f"Dependency graph: {result.graph_path}", file=stream)

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
