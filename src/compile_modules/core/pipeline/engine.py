from __future__ import annotations

"""
Core orchestration pipeline.

This module coordinates a compile run:
1. Discovers input files in a single lazy pass and dispatches each one to a
   worker thread as soon as it is found.
2. Seeds the completion barrier with the number of tasks actually enqueued.
3. Aggregates worker completion records on the calling thread, which alone
   owns the dependency graph and the barrier.
4. Persists graph.json exactly once, when the barrier reaches zero.

Stdio mode bypasses discovery and the barrier: one stream in, one stream
out, one compile call.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Iterable, List, Optional, TextIO

from compile_modules.core.compiler.base import CompilerFactory
from compile_modules.core.pipeline.stages.barrier import CompletionBarrier
from compile_modules.core.pipeline.stages.graph import GraphAccumulator
from compile_modules.core.pipeline.stages.worker import (
    CompiledOutput,
    compile_stream,
    process_file_task,
)
from compile_modules.core.services.scanner import count_files, yield_file_tasks
from compile_modules.domain.pipeline_models import (
    CompileOptions,
    CompileRecord,
    PipelineResult,
    create_error_result,
    create_success_result,
)

logger = logging.getLogger(__name__)


def run_pipeline(
        root_paths: Iterable[str],
        options: CompileOptions,
        compiler: CompilerFactory,
        *,
        max_workers: Optional[int] = None,
        dry_run: bool = False,
) -> PipelineResult:
    """
    Compile every eligible file under the roots into the destination tree.

    Discovery errors and compile errors propagate: the first one aborts
    the run. Work already running is allowed to finish but its results
    are discarded, and the graph is not written.

    Args:
        root_paths: Input files or directories.
        options: Frozen compile options; destination must be set.
        compiler: Injected compiler factory.
        max_workers: Thread pool size (executor default when None).
        dry_run: If True, only report what would be compiled.

    Returns:
        PipelineResult: Object containing status, outputs, and summary.
    """
    roots = list(root_paths)
    destination = options.destination
    if not destination:
        msg = "No destination directory configured."
        logger.error(msg)
        return create_error_result(msg, "")

    logger.info(f"Compile run started: {len(roots)} root(s) -> {destination} ({options.format})")

    if dry_run:
        return _simulate(roots, options)

    graph: Optional[GraphAccumulator] = GraphAccumulator() if options.graph else None
    graph_paths: List[str] = []

    def flush_graph() -> None:
        if graph is not None:
            graph_paths.append(graph.flush(destination))

    records: List[CompileRecord] = []
    futures: List[Future[CompileRecord]] = []

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="CompileWorker") as executor:
        try:
            for task in yield_file_tasks(roots, options):
                futures.append(executor.submit(process_file_task, task, compiler))

            barrier = CompletionBarrier(len(futures), on_zero=flush_graph)
            logger.info(f"Discovered {len(futures)} file(s).")

            for future in as_completed(futures):
                record = future.result()
                if graph is not None:
                    graph.append_node(record.graph_name, record.dependency_names)
                records.append(record)
                barrier.decrement()
        except BaseException:
            # Queued tasks never start; only the ones already running finish
            executor.shutdown(wait=True, cancel_futures=True)
            raise

    if not futures:
        logger.warning("No eligible input files found.")
        flush_graph()

    graph_path = graph_paths[0] if graph_paths else ""
    logger.info(f"Compile run completed: {len(records)} file(s) written.")

    return create_success_result(
        destination,
        records,
        graph_path=graph_path,
        summary_extra={
            "processed": len(records),
            "format": options.format,
            "graph": graph_path or None,
        },
    )


def run_stdio(
        options: CompileOptions,
        compiler: CompilerFactory,
        input_stream: TextIO,
        output_stream: TextIO,
) -> CompiledOutput:
    """
    Compile a single module from input_stream to output_stream.

    Nothing but the compiler's output is written to output_stream. When
    graph generation is requested, the single node is registered before
    the output is written and graph.json is flushed afterwards.
    """
    graph: Optional[GraphAccumulator] = GraphAccumulator() if options.graph else None

    def register(compiled: CompiledOutput) -> None:
        if graph is not None and compiled.module_name:
            graph.append_node(compiled.module_name, compiled.dependency_names)

    compiled = compile_stream(
        input_stream,
        output_stream,
        options.module_name,
        options,
        compiler,
        on_compiled=register,
    )

    if graph is not None and options.destination:
        graph.flush(options.destination)

    return compiled


def _simulate(roots: List[str], options: CompileOptions) -> PipelineResult:
    """Dry run: pre-count and list the planned outputs without compiling."""
    expected = count_files(roots)
    planned = [task.output_path for task in yield_file_tasks(roots, options)]

    if expected != len(planned):
        logger.warning(
            f"Input tree changed during dry run: counted {expected}, discovered {len(planned)}."
        )

    logger.info(f"Dry run: {len(planned)} file(s) would be compiled.")
    return create_success_result(
        options.destination or "",
        [],
        dry_run=True,
        summary_extra={"expected": expected, "planned": planned},
    )
