from __future__ import annotations

import argparse
import sys
from typing import List, Optional

import structlog

from protoc_scope.config import DEFAULT_SUPPORTED_SYNTAXES, ScopeConfig
from protoc_scope.errors import ProtocError, ScopingError
from protoc_scope.logging_config import configure_logging
from protoc_scope.parser.proto_ast import SCOPE_TYPES, ProtoDocument, ProtoEnum, ProtoField, ProtoNode
from protoc_scope.protoc import CompileResult, compile_proto
from protoc_scope.report import render_report
from protoc_scope.scoping import ANY_ENUM, OptionType, Scope, ScopeProvider, element_at

log = structlog.get_logger()

KINDS = ("type", "extension", "option", "literal")


def _reference_site(node: ProtoNode) -> ProtoNode:
    """A node standing for a reference made directly inside ``node``.

    The finder searches the containers of its start node, so a reference
    "inside" a message or file is modelled as a detached field under it.
    """
    if isinstance(node, SCOPE_TYPES) or isinstance(node, ProtoDocument):
        site = ProtoField()
        site.parent = node
        return site
    return node


def _build_scope(provider: ScopeProvider, node: ProtoNode, args: argparse.Namespace) -> Scope:
    site = _reference_site(node)
    if args.kind == "type":
        return provider.scope_for_type(site)
    if args.kind == "extension":
        return provider.scope_for_extension(site, args.extends)
    if args.kind == "option":
        return provider.scope_for_custom_option(site, OptionType.of(node))
    enum = ANY_ENUM
    if args.enum:
        resolved = provider.resolve_type(site, args.enum)
        if not isinstance(resolved, ProtoEnum):
            raise ScopingError(f"'{args.enum}' does not name an enum visible from {args.site or 'the file'}")
        enum = resolved
    return provider.scope_for_literal(site, enum)


def run(args: argparse.Namespace) -> int:
    """Resolve one reference site and print its candidates. Returns the exit code."""
    configure_logging(level=args.log_level, json_format=args.json_logs)
    config = ScopeConfig(
        include_paths=list(args.include or []),
        supported_syntaxes=tuple(args.syntax) if args.syntax else DEFAULT_SUPPORTED_SYNTAXES,
        strict_reexports=not args.protoc_reexports,
        log_level=args.log_level,
    )
    provider = ScopeProvider(config=config)

    document = provider.document(args.proto)
    if document is None:
        print(f"Could not load {args.proto}", file=sys.stderr)
        return 1
    node = element_at(document, args.site or "")
    if node is None:
        print(f"No declaration named '{args.site}' in {args.proto}", file=sys.stderr)
        return 1

    try:
        scope = _build_scope(provider, node, args)
    except ScopingError as e:
        print(f"FATAL: {e}", file=sys.stderr)
        return 1
    log.debug("scope_built", kind=args.kind, site=args.site, candidates=len(scope))

    compile_result: Optional[CompileResult] = None
    if args.compile:
        try:
            compile_result = compile_proto(args.proto, include_paths=config.include_paths)
        except ProtocError as e:
            print(f"FATAL: {e}", file=sys.stderr)
            return 1

    print(render_report(args.proto, args.site, args.kind, scope, name=args.name, compile_result=compile_result), end="")

    if args.name is not None and not scope.lookup(args.name):
        return 1
    if compile_result is not None and not compile_result.ok:
        return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="protoc-scope",
        description="Show which declarations a reference in a .proto file can resolve to",
    )
    parser.add_argument("--proto", required=True, help="Path to the .proto file containing the reference")
    parser.add_argument("--name", help="Name to resolve (omit to list every visible candidate)")
    parser.add_argument("--kind", choices=KINDS, default="type", help="Kind of reference (default: type)")
    parser.add_argument(
        "--site",
        default="",
        help="Dotted name, relative to the file's package, of the element the reference is made in (default: the file)",
    )
    parser.add_argument("--extends", help="Extended message for --kind extension")
    parser.add_argument("--enum", help="Restrict --kind literal to the values of this enum")
    parser.add_argument("--include", action="append", metavar="DIR", help="Import root (repeatable)")
    parser.add_argument(
        "--syntax",
        action="append",
        help=f"Syntax taking part in cross-file resolution (repeatable, default: {', '.join(DEFAULT_SUPPORTED_SYNTAXES)})",
    )
    parser.add_argument(
        "--protoc-reexports",
        action="store_true",
        help="Follow public imports of every imported file, not only of publicly imported ones",
    )
    parser.add_argument("--compile", action="store_true", help="Also run protoc and print its diagnostics")
    parser.add_argument("--log-level", default="WARNING", help="Log level (default: WARNING)")
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON lines")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.kind == "extension" and not args.extends:
        parser.error("--kind extension requires --extends")
    sys.exit(run(args))


if __name__ == "__main__":
    main()
