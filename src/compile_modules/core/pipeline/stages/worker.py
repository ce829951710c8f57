from __future__ import annotations

"""
Stream Compilation Worker.

Encapsulates the processing of a single input unit: the whole input stream
is buffered, handed to the compiler once, and the compiled text is written
as one chunk. process_file_task is designed to run inside a
ThreadPoolExecutor and touches no shared state: it reports back to the
aggregating engine with a CompileRecord.
"""

import logging
import os
from dataclasses import dataclass
from typing import Callable, Optional, TextIO, Tuple

from compile_modules.core.compiler.base import CompilerFactory
from compile_modules.domain.pipeline_models import CompileOptions, CompileRecord, FileTask
from compile_modules.infra.fs import ensure_dir, strip_extension, to_posix

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompiledOutput:
    """Result of one compile call."""
    text: str
    module_name: Optional[str]
    dependency_names: Tuple[str, ...]


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def resolve_module_name(path: str, options: CompileOptions) -> Optional[str]:
    """
    Decide the module name handed to the compiler.

    Explicit override wins, then the name inferred from the path (extension
    stripped, separators normalized to '/'), otherwise None.
    """
    if options.module_name:
        return options.module_name
    if options.infer_name:
        return to_posix(strip_extension(path))
    return None


def compile_source(
        source: str,
        module_name: Optional[str],
        options: CompileOptions,
        compiler: CompilerFactory,
) -> CompiledOutput:
    """
    Run the compiler capability once over a fully buffered source.

    Args:
        source: Complete module text.
        module_name: Name passed to the compiler (may be None).
        options: Run-wide compile options, including the target format.
        compiler: Factory building the compiled unit.

    Returns:
        CompiledOutput: Rendered text plus the unit's declared dependencies.
    """
    unit = compiler(source, module_name, options)
    text = unit.render(options.format)
    return CompiledOutput(
        text=text,
        module_name=module_name,
        dependency_names=tuple(unit.dependency_names),
    )


def compile_stream(
        input_stream: TextIO,
        output_stream: TextIO,
        module_name: Optional[str],
        options: CompileOptions,
        compiler: CompilerFactory,
        on_compiled: Optional[Callable[[CompiledOutput], None]] = None,
) -> CompiledOutput:
    """
    Buffer an input stream, compile it, and write exactly one output chunk.

    on_compiled runs after compilation succeeded and before anything is
    written, so a registered module always has produced output.

    Args:
        input_stream: Readable text stream (a file or stdin).
        output_stream: Writable text stream (a file or stdout).
        module_name: Name passed to the compiler.
        options: Run-wide compile options.
        compiler: Factory building the compiled unit.
        on_compiled: Optional hook receiving the compile result.

    Returns:
        CompiledOutput: The result that was written.
    """
    source = input_stream.read()
    compiled = compile_source(source, module_name, options, compiler)

    if on_compiled:
        on_compiled(compiled)

    output_stream.write(compiled.text)
    output_stream.flush()
    return compiled


def process_file_task(task: FileTask, compiler: CompilerFactory) -> CompileRecord:
    """
    Compile one discovered file into its mirrored output location.

    Compile and I/O errors propagate: a failing file is fatal to the run.

    Args:
        task: The unit of work produced by discovery.
        compiler: Factory building the compiled unit.

    Returns:
        CompileRecord: Completion message for the aggregator.
    """
    ensure_dir(os.path.dirname(task.output_path))

    with open(task.input_path, "r", encoding="utf-8", newline="") as src, \
            open(task.output_path, "w", encoding="utf-8", newline="") as out:
        compiled = compile_stream(src, out, task.module_name, task.options, compiler)

    logger.debug(f"Compiled: {task.rel_path} -> {task.output_path}")

    return CompileRecord(
        rel_path=task.rel_path,
        output_path=task.output_path,
        graph_name=task.graph_name,
        module_name=compiled.module_name,
        dependency_names=compiled.dependency_names,
    )
