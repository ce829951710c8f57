from __future__ import annotations

"""
Dependency Graph Accumulation.

Collects, per compiled module, the ordered list of modules it requires and
persists the whole mapping once as graph.json under the destination root.
"""

import json
import logging
import os
import threading
from typing import Dict, Iterable, List

from compile_modules.domain.constants import GRAPH_FILENAME
from compile_modules.domain.errors import ModuleNameCollisionError
from compile_modules.infra.fs import ensure_dir

logger = logging.getLogger(__name__)


class GraphAccumulator:
    """
    Mapping of module name -> {"requires": [dependency names]}.

    Safe to share between threads, although the engine only touches it
    from its aggregating thread. A module name may be registered once per
    run, and the graph may be flushed once.
    """

    def __init__(self) -> None:
        self._nodes: Dict[str, List[str]] = {}
        self._lock = threading.Lock()
        self._flushed = False

    def append_node(self, module_name: str, dependency_names: Iterable[str]) -> None:
        """
        Record a compiled module and its dependencies.

        Raises:
            ModuleNameCollisionError: The name was already registered.
            RuntimeError: The graph was already flushed.
        """
        with self._lock:
            if self._flushed:
                raise RuntimeError("Dependency graph already flushed.")
            if module_name in self._nodes:
                raise ModuleNameCollisionError(module_name)
            self._nodes[module_name] = list(dependency_names)

    def to_dict(self) -> Dict[str, Dict[str, List[str]]]:
        with self._lock:
            return {name: {"requires": list(deps)} for name, deps in self._nodes.items()}

    def serialize(self) -> str:
        """Human-readable JSON with sorted keys and a trailing newline."""
        return json.dumps(self.to_dict(), indent=2, sort_keys=True, ensure_ascii=False) + "\n"

    def flush(self, destination_root: str) -> str:
        """
        Write graph.json directly under the destination root.

        Args:
            destination_root: Output root of the run.

        Returns:
            str: Path of the written file.

        Raises:
            RuntimeError: Called more than once.
        """
        with self._lock:
            if self._flushed:
                raise RuntimeError("Dependency graph already flushed.")
            self._flushed = True

        ensure_dir(destination_root)
        graph_path = os.path.join(destination_root, GRAPH_FILENAME)
        with open(graph_path, "w", encoding="utf-8") as f:
            f.write(self.serialize())

        logger.info(f"Dependency graph written: {graph_path} ({len(self)} modules)")
        return graph_path

    @property
    def flushed(self) -> bool:
        return self._flushed

    def __len__(self) -> int:
        with self._lock:
            return len(self._nodes)

    def __contains__(self, module_name: object) -> bool:
        with self._lock:
            return module_name in self._nodes
