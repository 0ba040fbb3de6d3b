import threading
from pathlib import Path

from protoc_scope.config import ScopeConfig
from protoc_scope.parser.proto_parser import parse_proto_file, parse_proto_text
from protoc_scope.resources import ImportResolver, ResourceSet, syntax_of


def _write(root: Path, name: str, content: str) -> str:
    path = root / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return str(path)


class TestResourceSet:
    def test_loads_once_and_caches(self, tmp_path):
        path = _write(tmp_path, "a.proto", "package a;\nmessage A {}\n")
        resources = ResourceSet()
        first = resources.get_document(path)
        second = resources.get_document(path)
        assert first is second
        assert resources.load_count == 1
        assert path in resources
        assert len(resources) == 1

    def test_missing_file_gives_none(self, tmp_path):
        resources = ResourceSet()
        assert resources.get_document(str(tmp_path / "nope.proto")) is None
        assert resources.load_count == 0

    def test_overlong_file_name_gives_none(self, tmp_path):
        resources = ResourceSet()
        assert resources.get_document(str(tmp_path / ("a" * 300 + ".proto"))) is None
        assert resources.load_count == 0

    def test_wrong_extension_gives_none(self, tmp_path):
        path = _write(tmp_path, "a.txt", "message A {}\n")
        assert ResourceSet().get_document(path) is None

    def test_parse_error_gives_none(self, tmp_path):
        path = _write(tmp_path, "bad.proto", "message {\n")
        assert ResourceSet().get_document(path) is None

    def test_overlay_wins_until_invalidated(self, tmp_path):
        path = _write(tmp_path, "a.proto", "message OnDisk {}\n")
        resources = ResourceSet()
        overlay = resources.add_document(path, "message InMemory {}\n")
        assert resources.get_document(path) is overlay
        assert overlay.statements[0].name == "InMemory"

        resources.invalidate(path)
        assert path not in resources
        reloaded = resources.get_document(path)
        assert reloaded.statements[0].name == "OnDisk"

    def test_concurrent_loads_share_one_document(self, tmp_path):
        path = _write(tmp_path, "a.proto", "message A {}\n")
        calls = []

        def loader(p):
            calls.append(p)
            return parse_proto_file(p)

        resources = ResourceSet(loader=loader)
        results = []
        threads = [threading.Thread(target=lambda: results.append(resources.get_document(path))) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(calls) == 1
        assert all(r is results[0] for r in results)


class TestImportResolver:
    def test_resolves_relative_to_importer_first(self, tmp_path):
        _write(tmp_path, "dep.proto", "message Near {}\n")
        include = tmp_path / "include"
        _write(include, "dep.proto", "message Far {}\n")
        importer = _write(tmp_path, "main.proto", 'import "dep.proto";\n')

        resources = ResourceSet()
        resolver = ImportResolver(resources, ScopeConfig(include_paths=[str(include)]))
        doc = resources.get_document(importer)
        resolved = resolver.resolve(doc.imports[0])
        assert resolved.statements[0].name == "Near"

    def test_falls_back_to_include_paths(self, tmp_path):
        include = tmp_path / "include"
        _write(include, "lib/dep.proto", "message Far {}\n")
        importer = _write(tmp_path / "src", "main.proto", 'import "lib/dep.proto";\n')

        resources = ResourceSet()
        resolver = ImportResolver(resources, ScopeConfig(include_paths=[str(include)]))
        resolved = resolver.resolve(resources.get_document(importer).imports[0])
        assert resolved.statements[0].name == "Far"

    def test_unresolvable_import_is_none(self, tmp_path):
        importer = _write(tmp_path, "main.proto", 'import "missing.proto";\n')
        resources = ResourceSet()
        resolver = ImportResolver(resources)
        assert resolver.resolve(resources.get_document(importer).imports[0]) is None

    def test_descriptor_imports(self):
        resolver = ImportResolver(ResourceSet())
        doc = parse_proto_text('import "google/protobuf/descriptor.proto";\nimport "other.proto";\n')
        descriptor_import, other = doc.imports
        assert resolver.is_importing_descriptor(descriptor_import)
        assert not resolver.is_importing_descriptor(other)

    def test_dialects(self):
        resolver = ImportResolver(ResourceSet())
        assert resolver.is_supported_dialect(parse_proto_text("message A {}\n"))
        assert resolver.is_supported_dialect(parse_proto_text('syntax = "proto2";\n'))
        assert not resolver.is_supported_dialect(parse_proto_text('syntax = "proto3";\n'))

        lenient = ImportResolver(ResourceSet(), ScopeConfig(supported_syntaxes=("proto2", "proto3")))
        assert lenient.is_supported_dialect(parse_proto_text('syntax = "proto3";\n'))

    def test_syntax_of_defaults_to_proto2(self):
        assert syntax_of(parse_proto_text("")) == "proto2"
