from __future__ import annotations

"""
End-to-End (E2E) CLI Tests.

Verifies the application's external behavior by invoking the entry point
script via subprocess. These tests validate argument parsing, exit codes,
stream output (stdout/stderr), and file system side effects (compiled
tree and graph.json).
"""

import json
import os
import subprocess
import sys
from pathlib import Path
from typing import List, Optional

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
SRC_DIR = PROJECT_ROOT / "src"
ENTRY_POINT = SRC_DIR / "compile_modules" / "main.py"


def run_cli(
        args: List[str],
        cwd: Optional[Path] = None,
        stdin: Optional[str] = None,
) -> subprocess.CompletedProcess[str]:
    """
    Helper to execute the CLI in a separate process.

    Injects the 'src' directory into PYTHONPATH to ensure the package
    is resolvable without being installed in site-packages.

    Args:
        args: List of command line arguments (excluding 'python' and script path).
        cwd: Optional working directory for the subprocess.
        stdin: Optional text fed to the process's standard input.

    Returns:
        subprocess.CompletedProcess: The result object containing returncode, stdout, and stderr.
    """
    env = os.environ.copy()
    env["PYTHONPATH"] = str(SRC_DIR) + os.pathsep + env.get("PYTHONPATH", "")

    cmd = [sys.executable, str(ENTRY_POINT)] + args

    return subprocess.run(
        cmd,
        cwd=cwd,
        env=env,
        input=stdin if stdin is not None else "",
        capture_output=True,
        text=True,
        encoding="utf-8"
    )


def test_cli_compiles_tree_with_graph(tmp_path: Path, module_tree: Path) -> None:
    """A standard file-mode run mirrors the tree and writes graph.json."""
    output_dir = tmp_path / "output"

    result = run_cli(
        [str(module_tree), "--to", str(output_dir), "--infer-name", "--graph"],
        cwd=tmp_path,
    )

    assert result.returncode == 0, f"CLI failed: {result.stderr}"
    assert (output_dir / "a.js").exists()
    assert (output_dir / "sub" / "c.js").exists()
    assert not (output_dir / ".hidden.js").exists()

    graph = json.loads((output_dir / "graph.json").read_text(encoding="utf-8"))
    assert graph == {
        "a": {"requires": ["b"]},
        "b": {"requires": []},
        "sub/c": {"requires": ["a", "b"]},
    }


def test_cli_stdio_keeps_stdout_clean(tmp_path: Path) -> None:
    """Diagnostics go to stderr; stdout carries only compiled code."""
    result = run_cli(
        ["--stdio", "--type", "cjs", "--debug"],
        cwd=tmp_path,
        stdin='import $ from "jquery";\nexport default $;\n',
    )

    assert result.returncode == 0, result.stderr
    assert result.stdout == (
        '"use strict";\n'
        'var __dependency1__ = require("jquery");\n'
        'var $ = __dependency1__["default"];\n'
        'var __default__ = $;\n'
        'exports["default"] = __default__;\n'
    )


def test_cli_globals_stdio(tmp_path: Path) -> None:
    result = run_cli(
        ["-s", "--type", "globals", "--imports", "jquery:$", "--global", "App"],
        cwd=tmp_path,
        stdin='import $ from "jquery";\n',
    )

    assert result.returncode == 0, result.stderr
    assert result.stdout.endswith("})(window.App = window.App || {}, window.$);\n")


def test_cli_usage_error_exit_code(tmp_path: Path) -> None:
    result = run_cli(["lib"], cwd=tmp_path)

    assert result.returncode == 2
    assert "--to" in result.stderr
    assert result.stdout == ""


def test_cli_missing_input_is_fatal(tmp_path: Path) -> None:
    """An unstat-able input path is reported by the global supervisor."""
    result = run_cli([str(tmp_path / "missing"), "--to", str(tmp_path / "out")], cwd=tmp_path)

    assert result.returncode == 1
    assert "CRITICAL ERROR" in result.stderr
    assert "FatalIOError" in result.stderr


def test_cli_compile_error_exit_code(tmp_path: Path) -> None:
    src = tmp_path / "src"
    src.mkdir()
    (src / "bad.js").write_text('import { 1x } from "y";\n', encoding="utf-8")

    result = run_cli([str(src), "--to", str(tmp_path / "out")], cwd=tmp_path)

    assert result.returncode == 1
    assert "Compilation failed" in result.stderr


def test_cli_version(tmp_path: Path) -> None:
    result = run_cli(["--version"], cwd=tmp_path)

    assert result.returncode == 0
    assert "compile-modules 0.1.0" in result.stdout
