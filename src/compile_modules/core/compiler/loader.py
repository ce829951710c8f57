from __future__ import annotations

"""
Compiler Resolution.

Turns the CLI's --compiler "package.module:attribute" reference into a
compiler factory. Only the interface layer calls this; the engine receives
the resulting factory as a parameter.
"""

import importlib
import logging
from typing import Optional

from compile_modules.core.compiler.base import CompilerFactory
from compile_modules.core.compiler.simple import SimpleModuleCompiler
from compile_modules.domain.errors import UsageValidationError

logger = logging.getLogger(__name__)


def load_compiler(reference: Optional[str] = None) -> CompilerFactory:
    """
    Resolve a compiler factory from an import reference.

    Args:
        reference: "module.path:attr" (attr may be dotted). None selects
            the built-in SimpleModuleCompiler.

    Returns:
        CompilerFactory: Callable building a ModuleCompiler.

    Raises:
        UsageValidationError: Malformed reference, missing module or
            attribute, or a non-callable target.
    """
    if not reference:
        return SimpleModuleCompiler

    module_path, sep, attr_path = reference.strip().partition(":")
    if not sep or not module_path or not attr_path:
        raise UsageValidationError(
            f"Invalid compiler reference '{reference}': expected 'module:attribute'."
        )

    try:
        target = importlib.import_module(module_path)
    except ImportError as e:
        raise UsageValidationError(f"Cannot import compiler module '{module_path}': {e}") from e

    for part in attr_path.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as e:
            raise UsageValidationError(
                f"Compiler '{attr_path}' not found in module '{module_path}'."
            ) from e

    if not callable(target):
        raise UsageValidationError(f"Compiler reference '{reference}' is not callable.")

    logger.debug(f"Using compiler {reference}")
    return target
