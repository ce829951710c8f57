from __future__ import annotations

"""
Unit tests for the CLI Application Controller.

Drives main() in-process with explicit streams and verifies exit codes,
stdout hygiene in stdio mode, result rendering and error mapping.
"""

import io
import json
from pathlib import Path
from unittest.mock import patch

import pytest

from compile_modules.domain.errors import FatalIOError
from compile_modules.interface.cli.app import main


def run_main(argv, stdin_text=""):
    out = io.StringIO()
    code = main(argv, stdin=io.StringIO(stdin_text), stdout=out)
    return code, out.getvalue()


def test_stdio_writes_only_compiled_output():
    code, out = run_main(["--use-defaults", "--stdio", "--type", "cjs"], 'import b from "b";\n')

    assert code == 0
    assert out == (
        '"use strict";\n'
        'var __dependency1__ = require("b");\n'
        'var b = __dependency1__["default"];\n'
    )


def test_stdio_named_amd():
    code, out = run_main(["--use-defaults", "-s", "-m", "app"], "export default 1;\n")

    assert code == 0
    assert out.startswith('define("app", ["exports"], function(__exports__) {')


def test_stdio_graph_written_to_destination(tmp_path: Path):
    dest = tmp_path / "out"
    code, _ = run_main(
        ["--use-defaults", "-s", "-m", "app", "--graph", "--to", str(dest)],
        'import "dep";\n',
    )

    assert code == 0
    assert json.loads((dest / "graph.json").read_text(encoding="utf-8")) == {"app": {"requires": ["dep"]}}


def test_file_mode_human_summary(module_tree: Path, tmp_path: Path):
    dest = tmp_path / "out"
    code, out = run_main(["--use-defaults", str(module_tree), "--to", str(dest), "--type", "cjs"])

    assert code == 0
    assert "Compiled 3 file(s)" in out
    assert (dest / "sub" / "c.js").exists()


def test_file_mode_json_output(module_tree: Path, tmp_path: Path):
    dest = tmp_path / "out"
    code, out = run_main([
        "--use-defaults", str(module_tree), "--to", str(dest),
        "--type", "cjs", "--graph", "--json",
    ])

    payload = json.loads(out)
    assert code == 0
    assert payload["ok"] is True
    assert payload["processed"] == 3
    assert payload["graph_path"] == str(dest / "graph.json")


def test_dry_run_writes_nothing(module_tree: Path, tmp_path: Path):
    dest = tmp_path / "out"
    code, out = run_main(["--use-defaults", str(module_tree), "--to", str(dest), "--dry-run"])

    assert code == 0
    assert "Dry run: 3 file(s)" in out
    assert not dest.exists()


@pytest.mark.parametrize(
    "argv",
    [
        ["--use-defaults", "lib"],
        ["--use-defaults", "--to", "out"],
        ["--use-defaults", "lib", "--to", "out", "--type", "umd"],
        ["--use-defaults", "lib", "--to", "out", "--imports", "jquery:$"],
        ["--use-defaults", "-s", "--infer-name"],
        ["--use-defaults", "lib", "--to", "out", "--compiler", "not-a-reference"],
    ],
)
def test_usage_errors_exit_2(argv, capsys):
    code, out = run_main(argv)

    assert code == 2
    assert out == ""
    assert "ERROR:" in capsys.readouterr().err


def test_dump_config(tmp_path: Path):
    code, out = run_main(["--use-defaults", "--dump-config", "--to", str(tmp_path), "--type", "cjs"])

    cfg = json.loads(out)
    assert code == 0
    assert cfg["type"] == "cjs"
    assert cfg["to"] == str(tmp_path)


def test_project_config_file_is_used(module_tree: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    dest = tmp_path / "from_config"
    (tmp_path / "compile-modules.json").write_text(
        json.dumps({"type": "cjs", "to": str(dest)}), encoding="utf-8"
    )
    monkeypatch.chdir(tmp_path)

    code, _ = run_main([str(module_tree)])

    assert code == 0
    assert (dest / "a.js").read_text(encoding="utf-8").startswith('"use strict";')


def test_compile_error_exits_1(tmp_path: Path):
    src = tmp_path / "bad"
    src.mkdir()
    (src / "x.js").write_text("export default 1;\nexport default 2;\n", encoding="utf-8")

    code, _ = run_main(["--use-defaults", str(src), "--to", str(tmp_path / "out")])
    assert code == 1


def test_directory_read_error_exits_1(module_tree: Path, tmp_path: Path):
    with patch("compile_modules.core.services.scanner.os.listdir", side_effect=PermissionError("denied")):
        code, _ = run_main(["--use-defaults", str(module_tree), "--to", str(tmp_path / "out")])
    assert code == 1


def test_fatal_io_error_is_not_handled(tmp_path: Path):
    with pytest.raises(FatalIOError):
        run_main(["--use-defaults", str(tmp_path / "missing"), "--to", str(tmp_path / "out")])


def test_fatal_io_error_reaches_log_file(tmp_path: Path):
    log_file = tmp_path / "run.log"
    missing = tmp_path / "missing"

    with pytest.raises(FatalIOError):
        run_main([
            "--use-defaults", str(missing), "--to", str(tmp_path / "out"), "--log-file", str(log_file),
        ])

    content = log_file.read_text(encoding="utf-8")
    assert "CRITICAL" in content
    assert "Fatal I/O failure" in content
    assert str(missing) in content


def test_keyboard_interrupt_exits_130(module_tree: Path, tmp_path: Path):
    with patch("compile_modules.interface.cli.app.run_pipeline", side_effect=KeyboardInterrupt):
        code, _ = run_main(["--use-defaults", str(module_tree), "--to", str(tmp_path / "out")])
    assert code == 130
