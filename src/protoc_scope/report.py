from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

from jinja2 import Environment, FileSystemLoader

from protoc_scope.protoc import CompileResult
from protoc_scope.scoping import Scope
from protoc_scope.scoping.qualified_names import fully_qualified_name


def _get_template_env() -> Environment:
    template_dir = Path(__file__).parent / "templates"
    return Environment(
        loader=FileSystemLoader(str(template_dir)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def _build_candidates(scope: Scope, name: Optional[str]) -> List[Dict]:
    """One row per (name, declaration) pair, restricted to ``name`` when given."""
    wanted = None
    if name is not None:
        wanted = {id(e) for e in scope.lookup(name)}
    rows = []
    for match in scope:
        if wanted is not None and (match.name != name.lstrip(".") or id(match.element) not in wanted):
            continue
        rows.append({
            "name": match.name,
            "kind": type(match.element).__name__.replace("Proto", "").lower(),
            "full_name": fully_qualified_name(match.element),
            "uri": match.uri,
        })
    return rows


def render_report(
    proto_path: str,
    site: str,
    kind: str,
    scope: Scope,
    name: Optional[str] = None,
    compile_result: Optional[CompileResult] = None,
) -> str:
    """Render the candidates of a scope, and protoc markers if any, as text."""
    env = _get_template_env()
    template = env.get_template("candidates.txt.j2")
    return template.render(
        proto_path=proto_path,
        site=site or "<file>",
        kind=kind,
        name=name,
        candidates=_build_candidates(scope, name),
        compile_result=compile_result,
    )
