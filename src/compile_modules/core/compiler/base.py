from __future__ import annotations

"""
Base Definitions for Module Compilers.

Provides the abstract interface the orchestration engine consumes. The
engine never constructs a concrete compiler itself: a factory is injected
by the caller (see loader.load_compiler for the CLI side).
"""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from compile_modules.domain.constants import FORMAT_METHODS
from compile_modules.domain.errors import CompileError
from compile_modules.domain.pipeline_models import CompileOptions


class ModuleCompiler(ABC):
    """
    One compiled source module.

    Construction receives the full source text; the instance then exposes
    the module's declared dependencies and one renderer per output format.
    """

    def __init__(
            self,
            source: str,
            module_name: Optional[str] = None,
            options: Optional[CompileOptions] = None,
    ) -> None:
        self.source = source
        self.module_name = module_name
        self.options = options or CompileOptions()

    @property
    @abstractmethod
    def dependency_names(self) -> List[str]:
        """Ordered, de-duplicated list of module names this module requires."""

    @abstractmethod
    def to_amd(self) -> str:
        pass

    @abstractmethod
    def to_cjs(self) -> str:
        pass

    @abstractmethod
    def to_yui(self) -> str:
        pass

    @abstractmethod
    def to_globals(self) -> str:
        pass

    def render(self, output_format: str) -> str:
        """
        Produce the compiled text for the requested format.

        Args:
            output_format: One of the supported format selectors.

        Returns:
            str: The transformed module.

        Raises:
            CompileError: Unknown format selector.
        """
        method_name = FORMAT_METHODS.get(output_format)
        if method_name is None:
            raise CompileError(f"Unsupported output format: {output_format!r}")
        return getattr(self, method_name)()


# A class deriving from ModuleCompiler satisfies this signature
CompilerFactory = Callable[[str, Optional[str], CompileOptions], ModuleCompiler]
