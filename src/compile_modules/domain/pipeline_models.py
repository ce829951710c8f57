from __future__ import annotations

"""
Pipeline Domain Data Models.

Defines the core data structures and factory functions used to communicate
between the discovery service, the compile workers, the aggregating engine
and the interface layer (CLI).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from compile_modules.domain.constants import DEFAULT_FORMAT

# -----------------------------------------------------------------------------
# CORE DATA MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class CompileOptions:
    """
    Immutable compile settings derived once from the invocation.

    Attributes:
        format: Output wrapping format ("amd", "cjs", "yui" or "globals").
        imports: External import path -> global identifier (globals only).
        module_name: Explicit module name override.
        infer_name: Derive module names from input paths.
        graph: Emit graph.json after all files are compiled.
        global_name: Global object to export into (globals only).
        destination: Absolute output root, None in stdio mode.
    """
    format: str = DEFAULT_FORMAT
    imports: Mapping[str, str] = field(default_factory=dict)
    module_name: Optional[str] = None
    infer_name: bool = False
    graph: bool = False
    global_name: Optional[str] = None
    destination: Optional[str] = None


@dataclass(frozen=True)
class FileTask:
    """
    One unit of compile work, produced by discovery and consumed once.

    Attributes:
        input_path: Absolute path of the source file.
        rel_path: Path relative to its input root, forward slashes.
        output_path: Absolute destination path of the compiled file.
        module_name: Name handed to the compiler (may be None).
        graph_name: Key under which the module is recorded in the graph.
        options: Run-wide compile options.
    """
    input_path: str
    rel_path: str
    output_path: str
    module_name: Optional[str]
    graph_name: str
    options: CompileOptions


@dataclass(frozen=True)
class CompileRecord:
    """Completion message a worker hands back to the aggregator."""
    rel_path: str
    output_path: str
    graph_name: str
    module_name: Optional[str] = None
    dependency_names: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PipelineResult:
    """
    Unified result object of a complete file-mode run.

    Attributes:
        ok: Flag indicating success or failure.
        error: Descriptive message in case of failure.
        destination: Output root directory.
        processed: Number of compiled files.
        outputs: Absolute paths of the written files.
        graph_path: Path of graph.json, empty when not generated.
        dry_run: Whether compilation was only simulated.
        summary: Execution statistics for reporting.
    """
    ok: bool
    error: str
    destination: str
    processed: int = 0
    outputs: List[str] = field(default_factory=list)
    graph_path: str = ""
    dry_run: bool = False
    summary: Dict[str, Any] = field(default_factory=dict)

# -----------------------------------------------------------------------------
# FACTORY FUNCTIONS
# -----------------------------------------------------------------------------

def create_error_result(
        error: str,
        destination: str,
        summary_extra: Optional[Dict[str, Any]] = None
) -> PipelineResult:
    """Create a failed pipeline result instance."""
    return PipelineResult(
        ok=False,
        error=error,
        destination=destination,
        summary=summary_extra or {},
    )


def create_success_result(
        destination: str,
        records: List[CompileRecord],
        graph_path: str = "",
        dry_run: bool = False,
        summary_extra: Optional[Dict[str, Any]] = None
) -> PipelineResult:
    """
    Create a successful pipeline result instance.

    Args:
        destination: Output root directory.
        records: Completion records gathered by the aggregator.
        graph_path: Path of the persisted graph, if any.
        dry_run: Whether the run was simulated.
        summary_extra: Additional metadata for the summary payload.

    Returns:
        PipelineResult: An immutable success result object.
    """
    outputs = sorted(r.output_path for r in records)
    return PipelineResult(
        ok=True,
        error="",
        destination=destination,
        processed=len(outputs),
        outputs=outputs,
        graph_path=graph_path,
        dry_run=dry_run,
        summary=summary_extra or {},
    )
