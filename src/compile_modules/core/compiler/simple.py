from __future__ import annotations

"""
Reference Module Compiler.

A small, line-oriented rewriter for the common ES module forms. It is not
a JavaScript parser: statements are recognized with anchored regular
expressions, so imports and exports must start on their own line.

Supported forms:
    import "x";
    import a from "x";
    import { a, b as c } from "x";
    import * as ns from "x";
    import a, { b } from "x";
    export default <expression>;
    export var|let|const|function|class name ...
    export { a, b as c };
    export { a, b as c } from "x";
"""

import json
import re
from typing import List, Match, Optional, Tuple

from compile_modules.core.compiler.base import ModuleCompiler
from compile_modules.domain.errors import CompileError
from compile_modules.domain.pipeline_models import CompileOptions

_IMPORT_RX = re.compile(
    r"""^[ \t]*import\s+(?:(?P<clause>[^'";]+?)\s+from\s+)?["'](?P<source>[^"']+)["'][ \t]*;?[ \t]*$""",
    re.MULTILINE,
)
_EXPORT_FROM_RX = re.compile(
    r"""^[ \t]*export\s*\{(?P<specs>[^}]*)\}\s*from\s*["'](?P<source>[^"']+)["'][ \t]*;?[ \t]*$""",
    re.MULTILINE,
)
_EXPORT_LIST_RX = re.compile(r"^[ \t]*export\s*\{(?P<specs>[^}]*)\}[ \t]*;?[ \t]*$", re.MULTILINE)
_EXPORT_DEFAULT_RX = re.compile(r"^([ \t]*)export\s+default\s+", re.MULTILINE)
_EXPORT_DECL_RX = re.compile(
    r"^([ \t]*)export\s+(?P<kind>var|let|const|function\*?|class)\s+(?P<name>[\w$]+)",
    re.MULTILINE,
)
_IDENTIFIER_RX = re.compile(r"^[A-Za-z_$][\w$]*$")

DEFAULT_LOCAL = "__default__"


class SimpleModuleCompiler(ModuleCompiler):
    """Regex-driven compiler producing AMD, CJS, YUI and globals output."""

    def __init__(
            self,
            source: str,
            module_name: Optional[str] = None,
            options: Optional[CompileOptions] = None,
    ) -> None:
        super().__init__(source, module_name, options)
        self._dependencies: List[str] = []
        # (source, imported name or "*", local name)
        self._bindings: List[Tuple[str, str, str]] = []
        # (exported name, expression)
        self._exports: List[Tuple[str, str]] = []
        self._body = self._parse(source)

    @property
    def dependency_names(self) -> List[str]:
        return list(self._dependencies)

    # -------------------------------------------------------------------------
    # Renderers
    # -------------------------------------------------------------------------

    def to_amd(self) -> str:
        deps = [json.dumps(d) for d in self._dependencies] + ['"exports"']
        params = [self._dependency_ref(d) for d in self._dependencies] + ["__exports__"]
        name = f"{json.dumps(self.module_name)}, " if self.module_name else ""
        head = f"define({name}[{', '.join(deps)}], function({', '.join(params)}) {{"
        return f"{head}\n{self._wrap_body([], '__exports__', '  ')}\n}});\n"

    def to_cjs(self) -> str:
        preamble = [
            f"var {self._dependency_ref(d)} = require({json.dumps(d)});"
            for d in self._dependencies
        ]
        return self._wrap_body(preamble, "exports", "") + "\n"

    def to_yui(self) -> str:
        if not self.module_name:
            raise CompileError("YUI output requires a module name.")

        preamble = [
            f"var {self._dependency_ref(d)} = __imports__[{json.dumps(d)}];"
            for d in self._dependencies
        ]
        body = self._wrap_body(preamble, "__exports__", "  ")
        meta = json.dumps({"es": True, "requires": self._dependencies})
        return (
            f"YUI.add({json.dumps(self.module_name)}, function(Y, NAME, __imports__, __exports__) {{\n"
            f"{body}\n"
            f"  return __exports__;\n"
            f"}}, \"@VERSION@\", {meta});\n"
        )

    def to_globals(self) -> str:
        imports = self.options.imports or {}
        missing = [d for d in self._dependencies if d not in imports]
        if missing:
            raise CompileError(
                f"No global mapping for import(s): {', '.join(missing)}. Use --imports PATH:GLOBAL."
            )

        into = self.options.global_name
        target = f"window.{into} = window.{into} || {{}}" if into else "window"
        params = ["__exports__"] + [self._dependency_ref(d) for d in self._dependencies]
        args = [target] + [f"window.{imports[d]}" for d in self._dependencies]
        body = self._wrap_body([], "__exports__", "  ")
        return f"(function({', '.join(params)}) {{\n{body}\n}})({', '.join(args)});\n"

    # -------------------------------------------------------------------------
    # Parsing
    # -------------------------------------------------------------------------

    def _parse(self, source: str) -> str:
        """Collect imports/exports and return the remaining module body."""
        statements = sorted(
            [(m.start(), m, False) for m in _IMPORT_RX.finditer(source)]
            + [(m.start(), m, True) for m in _EXPORT_FROM_RX.finditer(source)],
            key=lambda item: item[0],
        )
        for _, match, reexport in statements:
            dep = match.group("source")
            self._add_dependency(dep)
            if reexport:
                ref = self._dependency_ref(dep)
                for imported, exported in _parse_specifiers(match.group("specs")):
                    self._exports.append((exported, f"{ref}{_member(imported)}"))
            else:
                self._parse_import_clause(dep, match.group("clause"))

        body = _IMPORT_RX.sub("", source)
        body = _EXPORT_FROM_RX.sub("", body)
        body = _EXPORT_LIST_RX.sub(self._collect_export_list, body)

        if len(_EXPORT_DEFAULT_RX.findall(body)) > 1:
            raise CompileError("A module may only have one default export.")
        body, defaults = _EXPORT_DEFAULT_RX.subn(
            lambda m: f"{m.group(1)}var {DEFAULT_LOCAL} = ", body
        )
        if defaults:
            self._exports.append(("default", DEFAULT_LOCAL))

        body = _EXPORT_DECL_RX.sub(self._collect_declaration, body)
        return body.strip("\n")

    def _parse_import_clause(self, dep: str, clause: Optional[str]) -> None:
        if not clause:
            return

        clause = " ".join(clause.split())
        named = ""
        if "{" in clause:
            clause, _, rest = clause.partition("{")
            named, _, _ = rest.partition("}")

        for part in (p.strip() for p in clause.split(",")):
            if not part:
                continue
            if part.startswith("*"):
                _, sep, local = part.partition(" as ")
                if not sep:
                    raise CompileError(f"Namespace import of '{dep}' needs a local name.")
                self._bindings.append((dep, "*", _identifier(local.strip())))
            else:
                self._bindings.append((dep, "default", _identifier(part)))

        for imported, local in _parse_specifiers(named):
            self._bindings.append((dep, imported, local))

    def _collect_export_list(self, match: Match[str]) -> str:
        for local, exported in _parse_specifiers(match.group("specs")):
            self._exports.append((exported, local))
        return ""

    def _collect_declaration(self, match: Match[str]) -> str:
        name = match.group("name")
        self._exports.append((name, name))
        return f"{match.group(1)}{match.group('kind')} {name}"

    # -------------------------------------------------------------------------
    # Rendering helpers
    # -------------------------------------------------------------------------

    def _add_dependency(self, dep: str) -> None:
        if dep not in self._dependencies:
            self._dependencies.append(dep)

    def _dependency_ref(self, dep: str) -> str:
        return f"__dependency{self._dependencies.index(dep) + 1}__"

    def _wrap_body(self, preamble: List[str], target: str, indent: str) -> str:
        lines = ['"use strict";'] + preamble
        for dep, imported, local in self._bindings:
            ref = self._dependency_ref(dep)
            member = "" if imported == "*" else _member(imported)
            lines.append(f"var {local} = {ref}{member};")
        if self._body:
            lines.extend(self._body.split("\n"))
        for exported, expression in self._exports:
            lines.append(f"{target}{_member(exported)} = {expression};")
        return "\n".join(indent + line if line.strip() else line for line in lines)


def _parse_specifiers(specs: str) -> List[Tuple[str, str]]:
    """Split "a, b as c" into [("a", "a"), ("b", "c")]."""
    pairs: List[Tuple[str, str]] = []
    for item in specs.split(","):
        item = " ".join(item.split())
        if not item:
            continue
        left, sep, right = item.partition(" as ")
        left = _identifier(left)
        pairs.append((left, _identifier(right) if sep else left))
    return pairs


def _identifier(name: str) -> str:
    if not _IDENTIFIER_RX.match(name):
        raise CompileError(f"Invalid identifier in import/export: {name!r}")
    return name


def _member(name: str) -> str:
    # "default" is a reserved word in older engines
    return '["default"]' if name == "default" else f".{name}"
