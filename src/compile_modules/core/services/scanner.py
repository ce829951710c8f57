from __future__ import annotations

"""
File Discovery Service.

Walks the input roots and turns every eligible (non-hidden) file into a
FileTask for the compile workers. Discovery is a single lazy pass over an
explicit worklist, so the number of tasks is known exactly once the
generator is exhausted.
"""

import logging
import os
import stat
from typing import Iterable, Iterator, List, Optional, Set

from compile_modules.core.pipeline.stages.worker import resolve_module_name
from compile_modules.domain.constants import HIDDEN_PREFIX
from compile_modules.domain.errors import DirectoryReadError, FatalIOError
from compile_modules.domain.pipeline_models import CompileOptions, FileTask
from compile_modules.infra.fs import strip_extension, to_posix

logger = logging.getLogger(__name__)


# ==============================================================================
# PUBLIC API (DISCOVERY SERVICES)
# ==============================================================================

def is_hidden(name: str) -> bool:
    """Return True for entry names starting with a dot ('.' and '..' excluded)."""
    return name.startswith(HIDDEN_PREFIX) and name not in (".", "..")


def count_files(root_paths: Iterable[str]) -> int:
    """
    Synchronously count the non-hidden files reachable from the roots.

    Directories are traversed depth-first. This is a separate pass from
    yield_file_tasks: if the tree changes in between, the two disagree.
    The engine therefore never sizes its completion barrier from this
    count; it is used for pre-flight reporting only.

    Args:
        root_paths: Files or directories given on the command line.

    Returns:
        int: Number of files discovery would produce right now.

    Raises:
        FatalIOError: A path cannot be stat'ed.
        DirectoryReadError: A directory cannot be listed.
    """
    count = 0
    for root in root_paths:
        if _is_hidden_root(root):
            continue
        count += _count_path(os.path.abspath(root))
    return count


def yield_file_tasks(
        root_paths: Iterable[str],
        options: CompileOptions,
) -> Iterator[FileTask]:
    """
    Traverse the roots and yield one FileTask per eligible file.

    A file root yields a single task relative to its own directory. A
    directory root is walked depth-first with an explicit stack; children
    are sorted so the discovery order is deterministic. Hidden entries are
    never descended into nor yielded.

    Args:
        root_paths: Files or directories to compile.
        options: Run-wide compile options (destination, naming rules).

    Yields:
        FileTask: One task per discovered file.

    Raises:
        FatalIOError: A path cannot be stat'ed.
        DirectoryReadError: A directory cannot be listed.
    """
    for root in root_paths:
        if _is_hidden_root(root):
            logger.debug(f"Skipping hidden root: {root}")
            continue

        root_abs = os.path.abspath(root)
        if _is_dir(_stat(root_abs)):
            yield from _walk_directory(root_abs, options)
        else:
            yield build_file_task(root_abs, os.path.dirname(root_abs), options)


def build_file_task(input_path: str, base_dir: str, options: CompileOptions) -> FileTask:
    """
    Create the FileTask for one input file.

    Args:
        input_path: Absolute path of the source file.
        base_dir: Input root the output path is made relative to.
        options: Run-wide compile options.

    Returns:
        FileTask: The task describing where and under which name to compile.
    """
    rel_path = to_posix(os.path.relpath(input_path, base_dir))
    destination = options.destination or ""
    output_path = os.path.join(destination, *rel_path.split("/")) if destination else ""
    module_name = resolve_module_name(rel_path, options)

    return FileTask(
        input_path=input_path,
        rel_path=rel_path,
        output_path=output_path,
        module_name=module_name,
        graph_name=module_name or strip_extension(rel_path),
        options=options,
    )


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _walk_directory(root_abs: str, options: CompileOptions) -> Iterator[FileTask]:
    """Depth-first worklist traversal of one directory root."""
    stack: List[str] = [root_abs]
    visited: Set[str] = set()

    while stack:
        current = stack.pop()

        real = os.path.realpath(current)
        if real in visited:
            logger.warning(f"Directory cycle detected, skipping: {current}")
            continue
        visited.add(real)

        subdirs: List[str] = []
        for name in _list_visible(current):
            child = os.path.join(current, name)
            if _is_dir(_stat(child)):
                subdirs.append(child)
            else:
                yield build_file_task(child, root_abs, options)

        # Reversed so the alphabetically first subdirectory is popped first
        stack.extend(reversed(subdirs))


def _count_path(path: str, visited: Optional[Set[str]] = None) -> int:
    """Recursive counterpart of _walk_directory used by count_files."""
    if not _is_dir(_stat(path)):
        return 1

    visited = visited if visited is not None else set()
    real = os.path.realpath(path)
    if real in visited:
        return 0
    visited.add(real)

    return sum(
        _count_path(os.path.join(path, name), visited)
        for name in _list_visible(path)
    )


def _list_visible(directory: str) -> List[str]:
    """List the non-hidden children of a directory, sorted by name."""
    try:
        children = os.listdir(directory)
    except OSError as e:
        raise DirectoryReadError(directory, e) from e
    return sorted(name for name in children if not is_hidden(name))


def _stat(path: str) -> os.stat_result:
    try:
        return os.stat(path)
    except OSError as e:
        raise FatalIOError(path, e) from e


def _is_dir(st: os.stat_result) -> bool:
    return stat.S_ISDIR(st.st_mode)


def _is_hidden_root(root: Optional[str]) -> bool:
    """A root is hidden when its own base name is (e.g. '.git', not './src')."""
    if not root:
        return False
    return is_hidden(os.path.basename(os.path.normpath(root)))
