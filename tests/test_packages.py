from protoc_scope.packages import are_related, common_prefix, package_of, segments_of
from protoc_scope.parser.proto_ast import ProtoPackage
from protoc_scope.parser.proto_parser import parse_proto_text


class TestSegments:
    def test_segments(self):
        assert segments_of("foo.bar") == ["foo", "bar"]
        assert segments_of(ProtoPackage(name="a.b.c")) == ["a", "b", "c"]
        assert segments_of(None) == []
        assert segments_of("") == []

    def test_package_of(self):
        doc = parse_proto_text("package x.y;\n")
        assert package_of(doc).name == "x.y"
        assert package_of(parse_proto_text("")) is None


class TestRelation:
    def test_prefix_either_way(self):
        assert are_related("foo", "foo.bar")
        assert are_related("foo.bar", "foo")
        assert are_related("foo.bar", "foo.bar")

    def test_unrelated(self):
        assert not are_related("foo", "baz")
        assert not are_related("foo.bar", "foo.baz")
        # segment-wise, not character-wise
        assert not are_related("foo", "foobar")

    def test_empty_package_is_related_to_everything(self):
        assert are_related(None, "foo.bar")
        assert are_related("foo", None)
        assert are_related(None, None)

    def test_symmetry(self):
        pairs = [("a", "a.b"), ("a.b", "a.c"), (None, "x"), ("p.q.r", "p")]
        for p1, p2 in pairs:
            assert are_related(p1, p2) == are_related(p2, p1)

    def test_common_prefix(self):
        assert common_prefix("a.b.c", "a.b.d") == ["a", "b"]
        assert common_prefix("a", "b") == []
        assert common_prefix(None, "a") == []
