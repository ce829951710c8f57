from __future__ import annotations

"""
Domain Exception Hierarchy.

Every failure the orchestration layer raises on purpose derives from
CompileModulesError so interface layers can map them to exit codes.
"""

from typing import Optional


class CompileModulesError(Exception):
    """Base class for all expected failures of a compile run."""


class UsageValidationError(CompileModulesError):
    """Invalid option combination, detected before any traversal begins."""


class FatalIOError(CompileModulesError):
    """
    A path could not be stat'ed during discovery.

    Aborts the whole run; the CLI does not handle it and lets the
    global supervisor report it.
    """

    def __init__(self, path: str, cause: Optional[BaseException] = None) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Cannot stat '{path}': {cause}")


class DirectoryReadError(CompileModulesError):
    """A directory listing failed. Reported to the operator, exit non-zero."""

    def __init__(self, path: str, cause: Optional[BaseException] = None) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Cannot read directory '{path}': {cause}")


class CompileError(CompileModulesError):
    """The compiler capability rejected a module."""


class ModuleNameCollisionError(CompileModulesError):
    """Two distinct inputs resolved to the same module name in one graph."""

    def __init__(self, module_name: str) -> None:
        self.module_name = module_name
        super().__init__(
            f"Module name '{module_name}' is produced by more than one input file."
        )
