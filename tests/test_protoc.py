import pytest

from protoc_scope import protoc
from protoc_scope.errors import ProtocNotFoundError
from protoc_scope.protoc import MarkerSet, ProtocMarker, build_command, compile_proto, parse_protoc_line


class TestParseProtocLine:
    def test_line_and_column(self):
        marker = parse_protoc_line('a.proto:12:5: Expected ";".')
        assert marker == ProtocMarker(file="a.proto", line=12, column=5, message='Expected ";".')
        assert marker.severity == "error"

    def test_line_only(self):
        marker = parse_protoc_line('a.proto:3: "Foo" is not defined.')
        assert marker.line == 3
        assert marker.column is None

    def test_file_level(self):
        marker = parse_protoc_line("missing.proto: File not found.")
        assert marker.file == "missing.proto"
        assert marker.line == 0
        assert marker.message == "File not found."

    def test_warning(self):
        marker = parse_protoc_line("a.proto:1:1: warning: Import b.proto is unused.")
        assert marker.severity == "warning"
        assert marker.message == "Import b.proto is unused."

    def test_not_a_diagnostic(self):
        assert parse_protoc_line("plain text") is None


class TestMarkerSet:
    def test_duplicates_are_skipped(self):
        markers = MarkerSet()
        first = ProtocMarker(file="a.proto", line=3, message="boom")
        assert markers.create_error_if_necessary(first)
        assert not markers.create_error_if_necessary(ProtocMarker(file="a.proto", line=3, message="boom", column=7))
        assert markers.create_error_if_necessary(ProtocMarker(file="a.proto", line=4, message="boom"))
        assert len(markers) == 2

    def test_existing_markers_count(self):
        markers = MarkerSet([ProtocMarker(file="a.proto", line=1, message="old")])
        assert markers.contains("old", 1)
        assert markers.parse_and_add("a.proto:1: old") is not None
        assert len(markers) == 1

    def test_errors_exclude_warnings(self):
        markers = MarkerSet()
        markers.parse_and_add("a.proto:1:1: warning: unused")
        assert len(markers) == 1
        assert markers.errors == []


class _Completed:
    def __init__(self, returncode=0, stderr=""):
        self.returncode = returncode
        self.stderr = stderr


class TestCompileProto:
    def test_validation_only(self, tmp_path, monkeypatch):
        calls = []

        def fake_run(cmd, **kwargs):
            calls.append((cmd, kwargs))
            return _Completed()

        monkeypatch.setattr(protoc.subprocess, "run", fake_run)
        proto = tmp_path / "a.proto"
        proto.write_text("message A {}\n")
        result = compile_proto(str(proto), include_paths=["/inc"])

        assert result.ok
        cmd, kwargs = calls[0]
        assert cmd[0] == "protoc"
        assert cmd[-1] == str(proto)
        assert ["-I", str(tmp_path)] == cmd[1:3]
        assert "/inc" in cmd
        assert any(arg.startswith("--descriptor_set_out=") for arg in cmd)
        assert kwargs["capture_output"] is True

    def test_code_generation(self, tmp_path, monkeypatch):
        monkeypatch.setattr(protoc.subprocess, "run", lambda cmd, **kwargs: _Completed())
        proto = tmp_path / "a.proto"
        proto.write_text("message A {}\n")
        result = compile_proto(str(proto), out_dir="/out", languages=("python", "java"))
        assert "--python_out=/out" in result.command
        assert "--java_out=/out" in result.command

    def test_diagnostics_become_markers(self, tmp_path, monkeypatch):
        stderr = "a.proto:2:1: Expected top-level statement.\na.proto:2:1: Expected top-level statement.\n"
        monkeypatch.setattr(protoc.subprocess, "run", lambda cmd, **kwargs: _Completed(1, stderr))
        proto = tmp_path / "a.proto"
        proto.write_text("oops\n")
        result = compile_proto(str(proto))
        assert not result.ok
        assert result.returncode == 1
        assert [m.line for m in result.markers] == [2]

    def test_non_proto_files_are_not_compiled(self, monkeypatch):
        def fail(*args, **kwargs):
            raise AssertionError("protoc should not run")

        monkeypatch.setattr(protoc.subprocess, "run", fail)
        result = compile_proto("notes.txt")
        assert result.ok
        assert len(result.markers) == 0

    def test_missing_protoc(self, tmp_path, monkeypatch):
        def missing(*args, **kwargs):
            raise FileNotFoundError("protoc")

        monkeypatch.setattr(protoc.subprocess, "run", missing)
        proto = tmp_path / "a.proto"
        proto.write_text("message A {}\n")
        with pytest.raises(ProtocNotFoundError) as exc:
            compile_proto(str(proto))
        assert isinstance(exc.value, RuntimeError)
        assert "'protoc' not found" in str(exc.value)


def test_build_command_dedupes_includes(tmp_path):
    proto = str(tmp_path / "a.proto")
    cmd = build_command(proto, [str(tmp_path), "/other"], ["--x_out=."])
    assert cmd.count("-I") == 2
    assert cmd == ["protoc", "-I", str(tmp_path), "-I", "/other", "--x_out=.", proto]
