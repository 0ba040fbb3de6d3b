"""Recursive descent parser for protobuf (.proto) files.

Consumes a token stream from proto_tokenizer and produces proto AST nodes.
"""

from __future__ import annotations

from typing import List, Optional, Union

from protoc_scope.conversion import to_double, to_int, to_number
from protoc_scope.errors import ProtoParseError, ValueConverterError

from .proto_ast import (
    ProtoDocument,
    ProtoEnum,
    ProtoEnumValue,
    ProtoExtend,
    ProtoField,
    ProtoGroup,
    ProtoImport,
    ProtoMessage,
    ProtoNode,
    ProtoOption,
    ProtoPackage,
    ProtoRpc,
    ProtoService,
    link_parents,
)
from .proto_tokenizer import KEYWORD_TYPES, ProtoToken, ProtoTokenType

_LABELS = (ProtoTokenType.OPTIONAL, ProtoTokenType.REQUIRED, ProtoTokenType.REPEATED)

OptionValue = Union[str, int, float, bool, None]


class ProtoParser:
    """Recursive descent parser for .proto files."""

    def __init__(self, tokens: List[ProtoToken], uri: str = ""):
        self._tokens = tokens
        self._pos = 0
        self._uri = uri

    # -- public API --

    def parse(self) -> ProtoDocument:
        """Parse the full token stream into a ProtoDocument AST."""
        document = ProtoDocument(uri=self._uri)

        while not self._at_end():
            tok = self._peek()
            tt = tok.type

            if tt == ProtoTokenType.SYNTAX:
                document.syntax = self._parse_syntax()
            elif tt == ProtoTokenType.IDENT and tok.value == "edition":
                self._advance()
                self._expect(ProtoTokenType.EQUALS)
                self._expect(ProtoTokenType.STRING_LIT)
                self._expect(ProtoTokenType.SEMICOLON)
                document.syntax = "editions"
            elif tt == ProtoTokenType.PACKAGE:
                if document.package is not None:
                    raise ProtoParseError("Multiple package definitions", tok.line, tok.col)
                document.statements.append(self._parse_package())
            elif tt == ProtoTokenType.IMPORT:
                document.statements.append(self._parse_import())
            elif tt == ProtoTokenType.OPTION:
                document.statements.append(self._parse_option_statement())
            elif tt == ProtoTokenType.MESSAGE:
                document.statements.append(self._parse_message())
            elif tt == ProtoTokenType.ENUM:
                document.statements.append(self._parse_enum())
            elif tt == ProtoTokenType.EXTEND:
                document.statements.append(self._parse_extend())
            elif tt == ProtoTokenType.SERVICE:
                document.statements.append(self._parse_service())
            elif tt == ProtoTokenType.SEMICOLON:
                self._advance()
            else:
                raise ProtoParseError(
                    f"Unexpected {tt.name} ({tok.value!r}) at top level", tok.line, tok.col
                )

        link_parents(document)
        return document

    # -- file-level statements --

    def _parse_syntax(self) -> str:
        """Parse: SYNTAX EQUALS STRING_LIT SEMICOLON"""
        self._expect(ProtoTokenType.SYNTAX)
        self._expect(ProtoTokenType.EQUALS)
        value = self._expect(ProtoTokenType.STRING_LIT)
        self._expect(ProtoTokenType.SEMICOLON)
        return value.value

    def _parse_package(self) -> ProtoPackage:
        self._expect(ProtoTokenType.PACKAGE)
        name = self._parse_dotted_name()
        self._expect(ProtoTokenType.SEMICOLON)
        return ProtoPackage(name=name)

    def _parse_import(self) -> ProtoImport:
        """Parse: IMPORT [PUBLIC|WEAK] STRING_LIT SEMICOLON"""
        self._expect(ProtoTokenType.IMPORT)
        is_public = self._match(ProtoTokenType.PUBLIC)
        is_weak = not is_public and self._match(ProtoTokenType.WEAK)
        path = self._expect(ProtoTokenType.STRING_LIT)
        self._expect(ProtoTokenType.SEMICOLON)
        return ProtoImport(path=path.value, is_public=is_public, is_weak=is_weak)

    def _parse_option_statement(self) -> ProtoOption:
        """Parse: OPTION option_name EQUALS constant SEMICOLON"""
        self._expect(ProtoTokenType.OPTION)
        option = self._parse_option_body()
        self._expect(ProtoTokenType.SEMICOLON)
        return option

    def _parse_option_body(self) -> ProtoOption:
        name = self._parse_option_name()
        self._expect(ProtoTokenType.EQUALS)
        return ProtoOption(name=name, value=self._parse_constant())

    def _parse_option_name(self) -> str:
        """Simple (java_package) or custom ((my.opt).field) option names."""
        parts: List[str] = []
        if self._match(ProtoTokenType.LPAREN):
            parts.append(f"({self._parse_dotted_name()})")
            self._expect(ProtoTokenType.RPAREN)
        else:
            parts.append(self._expect_name().value)
        while self._match(ProtoTokenType.DOT):
            if self._match(ProtoTokenType.LPAREN):
                parts.append(f"({self._parse_dotted_name()})")
                self._expect(ProtoTokenType.RPAREN)
            else:
                parts.append(self._expect_name().value)
        return ".".join(parts)

    def _parse_constant(self) -> OptionValue:
        tok = self._peek()
        if tok.type == ProtoTokenType.STRING_LIT:
            # adjacent string literals are concatenated
            chunks = []
            while self._peek().type == ProtoTokenType.STRING_LIT:
                chunks.append(self._advance().value)
            return "".join(chunks)
        if tok.type == ProtoTokenType.LBRACE:
            return self._skip_aggregate()
        negative = self._match(ProtoTokenType.MINUS)
        tok = self._peek()
        if tok.type == ProtoTokenType.NUMBER:
            self._advance()
            try:
                value = to_number(tok.value)
            except ValueConverterError as e:
                raise ProtoParseError(str(e), tok.line, tok.col) from e
            return -value if negative else value
        name = self._parse_dotted_name()
        if name in ("inf", "nan"):
            value = to_double(name)
            return -value if negative else value
        if negative:
            raise ProtoParseError(f"Unexpected '-' before {name!r}", tok.line, tok.col)
        if name == "true":
            return True
        if name == "false":
            return False
        return name

    # -- message parsing --

    def _parse_message(self) -> ProtoMessage:
        """Parse: MESSAGE IDENT LBRACE body RBRACE"""
        self._expect(ProtoTokenType.MESSAGE)
        name_tok = self._expect_name()
        elements = self._parse_message_body()
        return ProtoMessage(name=name_tok.value, elements=elements)

    def _parse_message_body(self) -> List[ProtoNode]:
        """Parse the contents between { and } of a message or group."""
        self._expect(ProtoTokenType.LBRACE)
        elements: List[ProtoNode] = []

        while not self._at_end() and self._peek().type != ProtoTokenType.RBRACE:
            tt = self._peek().type

            if tt == ProtoTokenType.MESSAGE:
                elements.append(self._parse_message())
            elif tt == ProtoTokenType.ENUM:
                elements.append(self._parse_enum())
            elif tt == ProtoTokenType.EXTEND:
                elements.append(self._parse_extend())
            elif tt == ProtoTokenType.OPTION:
                elements.append(self._parse_option_statement())
            elif tt == ProtoTokenType.ONEOF:
                elements.extend(self._parse_oneof())
            elif tt in (ProtoTokenType.RESERVED, ProtoTokenType.EXTENSIONS):
                self._skip_statement()
            elif tt == ProtoTokenType.SEMICOLON:
                self._advance()
            else:
                elements.append(self._parse_field_or_group())

        self._expect(ProtoTokenType.RBRACE)
        return elements

    def _parse_oneof(self) -> List[ProtoNode]:
        """Oneof members belong to the enclosing message; they are tagged, not nested."""
        self._expect(ProtoTokenType.ONEOF)
        oneof_name = self._expect_name().value
        self._expect(ProtoTokenType.LBRACE)
        members: List[ProtoNode] = []
        while not self._at_end() and self._peek().type != ProtoTokenType.RBRACE:
            tt = self._peek().type
            if tt == ProtoTokenType.OPTION:
                self._skip_statement()
            elif tt == ProtoTokenType.SEMICOLON:
                self._advance()
            else:
                member = self._parse_field_or_group()
                if isinstance(member, ProtoField):
                    member.oneof = oneof_name
                members.append(member)
        self._expect(ProtoTokenType.RBRACE)
        return members

    def _parse_field_or_group(self) -> Union[ProtoField, ProtoGroup]:
        """Parse: [label] (GROUP group_rest | MAP map_rest | type IDENT EQUALS NUMBER opts SEMICOLON)"""
        modifier: Optional[str] = None
        if self._peek().type in _LABELS:
            modifier = self._advance().value

        if self._peek().type == ProtoTokenType.GROUP:
            return self._parse_group(modifier)

        map_key_type: Optional[str] = None
        if self._peek().type == ProtoTokenType.MAP and self._peek_next().type == ProtoTokenType.LANGLE:
            self._advance()
            self._expect(ProtoTokenType.LANGLE)
            map_key_type = self._parse_dotted_name()
            self._expect(ProtoTokenType.COMMA)
            type_name = self._parse_dotted_name()
            self._expect(ProtoTokenType.RANGLE)
        else:
            type_name = self._parse_dotted_name()

        name_tok = self._expect_name()
        self._expect(ProtoTokenType.EQUALS)
        number = self._parse_int()
        options = self._parse_field_options()
        self._expect(ProtoTokenType.SEMICOLON)

        return ProtoField(
            type_name=type_name,
            name=name_tok.value,
            number=number,
            modifier=modifier,
            map_key_type=map_key_type,
            options=options,
        )

    def _parse_group(self, modifier: Optional[str]) -> ProtoGroup:
        self._expect(ProtoTokenType.GROUP)
        name_tok = self._expect_name()
        self._expect(ProtoTokenType.EQUALS)
        number = self._parse_int()
        self._parse_field_options()
        elements = self._parse_message_body()
        return ProtoGroup(name=name_tok.value, number=number, modifier=modifier, elements=elements)

    def _parse_field_options(self) -> List[ProtoOption]:
        options: List[ProtoOption] = []
        if not self._match(ProtoTokenType.LBRACKET):
            return options
        options.append(self._parse_option_body())
        while self._match(ProtoTokenType.COMMA):
            options.append(self._parse_option_body())
        self._expect(ProtoTokenType.RBRACKET)
        return options

    # -- enum parsing --

    def _parse_enum(self) -> ProtoEnum:
        self._expect(ProtoTokenType.ENUM)
        name_tok = self._expect_name()
        self._expect(ProtoTokenType.LBRACE)
        elements: List[ProtoNode] = []
        while not self._at_end() and self._peek().type != ProtoTokenType.RBRACE:
            tt = self._peek().type
            if tt == ProtoTokenType.OPTION:
                elements.append(self._parse_option_statement())
            elif tt == ProtoTokenType.RESERVED:
                self._skip_statement()
            elif tt == ProtoTokenType.SEMICOLON:
                self._advance()
            else:
                value_tok = self._expect_name()
                self._expect(ProtoTokenType.EQUALS)
                number = self._parse_int()
                self._parse_field_options()
                self._expect(ProtoTokenType.SEMICOLON)
                elements.append(ProtoEnumValue(name=value_tok.value, number=number))
        self._expect(ProtoTokenType.RBRACE)
        return ProtoEnum(name=name_tok.value, elements=elements)

    # -- extend / service parsing --

    def _parse_extend(self) -> ProtoExtend:
        self._expect(ProtoTokenType.EXTEND)
        target = self._parse_dotted_name()
        self._expect(ProtoTokenType.LBRACE)
        elements: List[ProtoNode] = []
        while not self._at_end() and self._peek().type != ProtoTokenType.RBRACE:
            if self._match(ProtoTokenType.SEMICOLON):
                continue
            elements.append(self._parse_field_or_group())
        self._expect(ProtoTokenType.RBRACE)
        return ProtoExtend(target=target, elements=elements)

    def _parse_service(self) -> ProtoService:
        self._expect(ProtoTokenType.SERVICE)
        name_tok = self._expect_name()
        self._expect(ProtoTokenType.LBRACE)
        elements: List[ProtoNode] = []
        while not self._at_end() and self._peek().type != ProtoTokenType.RBRACE:
            tt = self._peek().type
            if tt == ProtoTokenType.RPC:
                elements.append(self._parse_rpc())
            elif tt == ProtoTokenType.OPTION:
                elements.append(self._parse_option_statement())
            elif tt == ProtoTokenType.SEMICOLON:
                self._advance()
            else:
                tok = self._peek()
                raise ProtoParseError(f"Unexpected {tt.name} ({tok.value!r}) in service", tok.line, tok.col)
        self._expect(ProtoTokenType.RBRACE)
        return ProtoService(name=name_tok.value, elements=elements)

    def _parse_rpc(self) -> ProtoRpc:
        """Parse: RPC IDENT ( [STREAM] type ) RETURNS ( [STREAM] type ) (; | { options })"""
        self._expect(ProtoTokenType.RPC)
        name_tok = self._expect_name()
        self._expect(ProtoTokenType.LPAREN)
        client_streaming = self._match(ProtoTokenType.STREAM)
        input_type = self._parse_dotted_name()
        self._expect(ProtoTokenType.RPAREN)
        self._expect(ProtoTokenType.RETURNS)
        self._expect(ProtoTokenType.LPAREN)
        server_streaming = self._match(ProtoTokenType.STREAM)
        output_type = self._parse_dotted_name()
        self._expect(ProtoTokenType.RPAREN)
        if self._peek().type == ProtoTokenType.LBRACE:
            self._skip_block()
        else:
            self._expect(ProtoTokenType.SEMICOLON)
        return ProtoRpc(
            name=name_tok.value,
            input_type=input_type,
            output_type=output_type,
            client_streaming=client_streaming,
            server_streaming=server_streaming,
        )

    # -- names and numbers --

    def _parse_dotted_name(self) -> str:
        """Parse: [DOT] name (DOT name)*"""
        parts: List[str] = []
        if self._match(ProtoTokenType.DOT):
            parts.append("")
        parts.append(self._expect_name().value)
        while self._peek().type == ProtoTokenType.DOT:
            self._advance()
            parts.append(self._expect_name().value)
        return ".".join(parts)

    def _parse_int(self) -> int:
        negative = self._match(ProtoTokenType.MINUS)
        tok = self._expect(ProtoTokenType.NUMBER)
        try:
            value = to_int(tok.value)
        except ValueConverterError as e:
            raise ProtoParseError(str(e), tok.line, tok.col) from e
        return -value if negative else value

    # -- skip helpers --

    def _skip_statement(self) -> None:
        """Skip tokens until (and including) the next semicolon."""
        while not self._at_end():
            tok = self._advance()
            if tok.type == ProtoTokenType.SEMICOLON:
                return

    def _skip_block(self) -> None:
        """Skip a braced block, starting at its opening brace."""
        self._expect(ProtoTokenType.LBRACE)
        depth = 1
        while not self._at_end() and depth > 0:
            tok = self._advance()
            if tok.type == ProtoTokenType.LBRACE:
                depth += 1
            elif tok.type == ProtoTokenType.RBRACE:
                depth -= 1

    def _skip_aggregate(self) -> str:
        """Skip a text-format aggregate value, returning its raw tokens."""
        start = self._pos
        self._skip_block()
        return " ".join(t.value for t in self._tokens[start:self._pos])

    # -- token helpers --

    def _peek(self) -> ProtoToken:
        return self._tokens[self._pos]

    def _peek_next(self) -> ProtoToken:
        return self._tokens[min(self._pos + 1, len(self._tokens) - 1)]

    def _advance(self) -> ProtoToken:
        tok = self._tokens[self._pos]
        if tok.type != ProtoTokenType.EOF:
            self._pos += 1
        return tok

    def _match(self, expected: ProtoTokenType) -> bool:
        if self._peek().type == expected:
            self._advance()
            return True
        return False

    def _expect(self, expected: ProtoTokenType) -> ProtoToken:
        tok = self._peek()
        if tok.type != expected:
            raise ProtoParseError(
                f"Expected {expected.name}, got {tok.type.name} ({tok.value!r})",
                tok.line,
                tok.col,
            )
        return self._advance()

    def _expect_name(self) -> ProtoToken:
        """Identifiers; keywords are valid names outside their keyword position."""
        tok = self._peek()
        if tok.type != ProtoTokenType.IDENT and tok.type not in KEYWORD_TYPES:
            raise ProtoParseError(
                f"Expected identifier, got {tok.type.name} ({tok.value!r})",
                tok.line,
                tok.col,
            )
        return self._advance()

    def _at_end(self) -> bool:
        return self._tokens[self._pos].type == ProtoTokenType.EOF
