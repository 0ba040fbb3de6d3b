import pytest

from protoc_scope.errors import InvalidCriteriaError
from protoc_scope.parser.proto_ast import ProtoEnum, ProtoField, ProtoGroup, ProtoMessage, ProtoOption
from protoc_scope.parser.proto_parser import parse_proto_text
from protoc_scope.scoping import (
    ANY_ENUM,
    CustomOptionFinderDelegate,
    ExtensionFinderDelegate,
    LiteralFinderDelegate,
    OptionType,
    TypeFinderDelegate,
    element_at,
)
from protoc_scope.scoping.qualified_names import (
    fully_qualified_name,
    imported_names,
    local_names,
    relative_segments,
)


class TestQualifiedNames:
    PROTO = """\
package a.b;
message Outer {
    message Inner {}
    enum Mode { FAST = 0; }
    extend Other { optional int32 ext = 100; }
}
"""

    def test_fully_qualified_names(self):
        doc = parse_proto_text(self.PROTO)
        assert fully_qualified_name(element_at(doc, "Outer.Inner")) == "a.b.Outer.Inner"
        assert fully_qualified_name(element_at(doc, "Outer.Mode")) == "a.b.Outer.Mode"

    def test_enum_values_are_siblings_of_their_enum(self):
        doc = parse_proto_text(self.PROTO)
        fast = element_at(doc, "Outer.FAST")
        assert fast.name == "FAST"
        assert relative_segments(fast) == ["Outer", "FAST"]
        assert fully_qualified_name(fast) == "a.b.Outer.FAST"

    def test_extend_blocks_add_no_segment(self):
        doc = parse_proto_text(self.PROTO)
        assert fully_qualified_name(element_at(doc, "Outer.ext")) == "a.b.Outer.ext"

    def test_local_names_start_at_level(self):
        doc = parse_proto_text(self.PROTO)
        inner = element_at(doc, "Outer.Inner")
        assert local_names(inner, 0) == ["Inner", "Outer.Inner", "b.Outer.Inner", "a.b.Outer.Inner"]
        assert local_names(inner, 1) == ["Outer.Inner", "b.Outer.Inner", "a.b.Outer.Inner"]

    def test_imported_names_drop_shared_segments(self):
        doc = parse_proto_text(self.PROTO)
        inner = element_at(doc, "Outer.Inner")
        assert imported_names(inner, "a.x", "a.b") == ["b.Outer.Inner", "a.b.Outer.Inner"]
        assert imported_names(inner, "zzz", "a.b") == ["a.b.Outer.Inner"]


class TestTypeFinderDelegate:
    def test_accepts_kinds_and_tuples(self):
        delegate = TypeFinderDelegate()
        delegate.check_criteria(ProtoMessage)
        delegate.check_criteria((ProtoMessage, ProtoEnum))

    @pytest.mark.parametrize("criteria", [None, ProtoField, (), "message", (ProtoMessage, int)])
    def test_rejects_other_criteria(self, criteria):
        with pytest.raises(InvalidCriteriaError):
            TypeFinderDelegate().check_criteria(criteria)

    def test_targets(self):
        doc = parse_proto_text("message M {}\nenum E { X = 0; }\n")
        message, enum = doc.statements
        delegate = TypeFinderDelegate()
        assert delegate.targets(message, ProtoMessage) == [message]
        assert delegate.targets(enum, ProtoMessage) == []


class TestExtensionFinderDelegate:
    PROTO = """\
package p;
message Target {
    extensions 100 to 200;
}
extend Target {
    optional int32 plain = 100;
    optional group Grouped = 101 {
        optional int32 x = 1;
    }
}
extend p.Other {
    optional int32 elsewhere = 100;
}
"""

    def test_matches_by_element_and_name(self):
        doc = parse_proto_text(self.PROTO)
        delegate = ExtensionFinderDelegate()
        target = element_at(doc, "Target")
        extend = doc.statements[2]
        by_element = delegate.targets(extend, target)
        by_name = delegate.targets(extend, "p.Target")
        assert [e.name for e in by_element] == ["plain", "Grouped"]
        assert by_name == by_element
        assert isinstance(by_element[1], ProtoGroup)

    def test_suffix_matching(self):
        doc = parse_proto_text(self.PROTO)
        delegate = ExtensionFinderDelegate()
        assert delegate.extends(doc.statements[3], ".p.Other")
        assert delegate.extends(doc.statements[3], "Other")
        assert not delegate.extends(doc.statements[3], "Another")

    @pytest.mark.parametrize("criteria", [None, "", ".", 3, ProtoEnum()])
    def test_rejects_other_criteria(self, criteria):
        with pytest.raises(InvalidCriteriaError):
            ExtensionFinderDelegate().check_criteria(criteria)


class TestCustomOptionFinderDelegate:
    PROTO = """\
import "google/protobuf/descriptor.proto";
extend google.protobuf.FieldOptions {
    optional string label = 50000;
}
extend google.protobuf.MessageOptions {
    optional bool tracked = 50001;
}
message M {
    option (tracked) = true;
    optional int32 id = 1 [(label) = "x"];
}
"""

    def test_option_type_of_container(self):
        doc = parse_proto_text(self.PROTO)
        message = element_at(doc, "M")
        field = element_at(doc, "M.id")
        assert OptionType.of(doc) is OptionType.FILE
        assert OptionType.of(message) is OptionType.MESSAGE
        assert OptionType.of(field) is OptionType.FIELD
        assert OptionType.FIELD.message_name == "google.protobuf.FieldOptions"

    def test_every_option_type_has_a_container(self):
        doc = parse_proto_text(
            """\
message M {
    oneof choice {
        int32 a = 1;
    }
}
enum E { X = 0; }
service S {
    rpc Call (M) returns (M);
}
"""
        )
        containers = [
            doc,
            element_at(doc, "M"),
            element_at(doc, "M.a"),
            element_at(doc, "E"),
            element_at(doc, "X"),
            element_at(doc, "S"),
            element_at(doc, "S.Call"),
        ]
        assert {OptionType.of(c) for c in containers} == set(OptionType)

    def test_oneof_members_take_field_options(self):
        doc = parse_proto_text("message M {\n    oneof choice {\n        int32 a = 1;\n    }\n}\n")
        member = element_at(doc, "M.a")
        assert member.oneof == "choice"
        assert OptionType.of(member) is OptionType.FIELD
        assert OptionType.of(member.parent) is OptionType.MESSAGE

    def test_option_type_of_unsupported_container(self):
        doc = parse_proto_text(self.PROTO)
        with pytest.raises(InvalidCriteriaError):
            OptionType.of(doc.statements[1])

    def test_targets_follow_option_type(self):
        doc = parse_proto_text(self.PROTO)
        delegate = CustomOptionFinderDelegate()
        field_extend, message_extend = doc.statements[1], doc.statements[2]
        assert [e.name for e in delegate.targets(field_extend, OptionType.FIELD)] == ["label"]
        assert delegate.targets(message_extend, OptionType.FIELD) == []
        assert [e.name for e in delegate.targets(message_extend, OptionType.MESSAGE)] == ["tracked"]

    def test_rejects_other_criteria(self):
        with pytest.raises(InvalidCriteriaError):
            CustomOptionFinderDelegate().check_criteria("FieldOptions")

    def test_option_parent(self):
        doc = parse_proto_text(self.PROTO)
        option = element_at(doc, "M").elements[0]
        assert isinstance(option, ProtoOption)
        assert OptionType.of(option.parent) is OptionType.MESSAGE


class TestLiteralFinderDelegate:
    def test_values_of_one_or_any_enum(self):
        doc = parse_proto_text("enum A { A1 = 0; A2 = 1; }\nenum B { B1 = 0; }\n")
        a, b = doc.statements
        delegate = LiteralFinderDelegate()
        assert [v.name for v in delegate.targets(a, ANY_ENUM)] == ["A1", "A2"]
        assert [v.name for v in delegate.targets(a, a)] == ["A1", "A2"]
        assert delegate.targets(a, b) == []

    def test_rejects_other_criteria(self):
        with pytest.raises(InvalidCriteriaError):
            LiteralFinderDelegate().check_criteria("A")
