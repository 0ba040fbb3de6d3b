from __future__ import annotations

from pathlib import Path

from .proto_ast import ProtoDocument
from .proto_ast_parser import ProtoParser
from .proto_tokenizer import tokenize_proto


def parse_proto_text(text: str, uri: str = "") -> ProtoDocument:
    """Parse .proto source text into a ProtoDocument rooted at ``uri``."""
    return ProtoParser(tokenize_proto(text), uri=uri).parse()


def parse_proto_file(file_path: str) -> ProtoDocument:
    """Parse a .proto file from disk."""
    path = Path(file_path)
    text = path.read_text(encoding="utf-8")
    return parse_proto_text(text, uri=str(path.resolve()))
