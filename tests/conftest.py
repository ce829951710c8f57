from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Shared fixtures for configuration dictionaries and module trees used
   across unit, integration and e2e tests.
"""

import os
import sys
from pathlib import Path
from typing import Any, Dict

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def mock_config_dict() -> Dict[str, Any]:
    """
    Return a valid, complete configuration dictionary for testing.

    Reflects the structure defined in 'compile_modules.domain.config'.

    Returns:
        Dict[str, Any]: A sample configuration dictionary.
    """
    return {
        "type": "amd",
        "to": "/tmp/test_output",
        "imports": {},
        "graph": False,
        "infer_name": False,
        "module_name": None,
        "global_name": None,
        "workers": None,
        "compiler": None,
    }


@pytest.fixture
def module_tree(tmp_path: Path) -> Path:
    """
    Create a small tree of ES modules.

    Structure:
    /lib
      a.js          (imports "b")
      b.js
      .hidden.js
      /.git
        config.js
      /sub
        c.js        (imports "a" and "b")
    """
    root = tmp_path / "lib"
    root.mkdir()

    (root / "a.js").write_text('import b from "b";\nexport default b;\n', encoding="utf-8")
    (root / "b.js").write_text("export default 42;\n", encoding="utf-8")
    (root / ".hidden.js").write_text("export default 0;\n", encoding="utf-8")

    git_dir = root / ".git"
    git_dir.mkdir()
    (git_dir / "config.js").write_text("export default 1;\n", encoding="utf-8")

    sub_dir = root / "sub"
    sub_dir.mkdir()
    (sub_dir / "c.js").write_text(
        'import a from "a";\nimport { x } from "b";\nexport var c = a + x;\n',
        encoding="utf-8",
    )

    return root
