import pytest

from luna.fs import (
    ReplaceAll,
    ReplaceLines,
    UnifiedDiff,
    detect_visibility,
    edit_file,
    list_dir,
    read_file,
    read_file_by_lines,
)


@pytest.fixture
def sample(tmp_path):
    path = tmp_path / "sample.txt"
    path.write_bytes(b"a\nb\nc\nd\n")
    return path


def test_read_whole_file_keeps_raw_content(tmp_path):
    path = tmp_path / "crlf.txt"
    path.write_bytes(b"one\r\ntwo\r\n")
    assert read_file(path) == "one\r\ntwo\r\n"


def test_read_range(sample):
    assert read_file(sample, (1, 2)) == "b\nc\n"


def test_read_range_start_after_end_is_empty(sample):
    assert read_file(sample, (3, 1)) == ""


def test_read_range_past_end_is_truncated(sample):
    assert read_file(sample, (2, 100)) == "c\nd\n"


def test_read_range_strips_carriage_returns(tmp_path):
    path = tmp_path / "crlf.txt"
    path.write_bytes(b"one\r\ntwo\r\n")
    assert read_file(path, (0, 0)) == "one\n"


def test_read_file_by_lines(sample):
    assert read_file_by_lines(sample.parent, sample.name, 0, 0) == "a\n"


def test_read_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_file(tmp_path / "missing.txt")


def test_list_dir_orders_directories_first(tmp_path):
    (tmp_path / "b.txt").write_text("hello")
    (tmp_path / "a.txt").write_text("x")
    (tmp_path / "zdir").mkdir()
    entries = list_dir(tmp_path)
    assert [e.name for e in entries] == ["zdir", "a.txt", "b.txt"]
    assert entries[0].is_dir and not entries[0].is_file
    assert entries[0].size is None
    assert entries[2].size == len("hello")
    assert entries[1].path.endswith("a.txt")


def test_list_dir_missing_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        list_dir(tmp_path / "nope")


def test_replace_lines_with_backup(sample):
    result = edit_file(sample, ReplaceLines(1, 2, "X\nY\nZ"), create_backup=True)
    assert result.success
    assert result.lines_changed == 2
    assert read_file(sample) == "a\nX\nY\nZ\nd\n"
    assert result.backup_path == f"{sample}.backup"
    assert read_file(result.backup_path) == "a\nb\nc\nd\n"


def test_replace_lines_invalid_range_leaves_file(sample):
    result = edit_file(sample, ReplaceLines(2, 10, "Q"))
    assert not result.success
    assert result.error.startswith("Invalid line range")
    assert result.backup_path is None
    assert read_file(sample) == "a\nb\nc\nd\n"


def test_replace_lines_reversed_range_fails(sample):
    result = edit_file(sample, ReplaceLines(2, 1, "Q"))
    assert not result.success


def test_replace_all(sample):
    result = edit_file(sample, ReplaceAll("p\nq\n"))
    assert result.success
    assert result.lines_changed == 2
    assert read_file(sample) == "p\nq\n"


def test_unified_diff_is_reported_as_failure(sample):
    result = edit_file(sample, UnifiedDiff("--- a\n+++ b\n"))
    assert not result.success
    assert result.error == "UnifiedDiff not yet implemented"
    assert read_file(sample) == "a\nb\nc\nd\n"


def test_edit_rejects_unknown_op(sample):
    with pytest.raises(TypeError):
        edit_file(sample, "not an op")


def _span(src, name):
    start = src.index(name)
    return start, start + len(name)


def test_rust_visibility():
    src = "struct A;\npub(crate) fn foo() {}\n"
    assert detect_visibility(src, *_span(src, "foo"), "rust") == "pub(crate)"
    src = "pub fn bar() {}"
    assert detect_visibility(src, *_span(src, "bar"), "rust") == "pub"
    src = "fn baz() {}"
    assert detect_visibility(src, *_span(src, "baz"), "rust") == "private"


def test_javascript_visibility():
    src = "export function f() {}\nfunction g() {}\n"
    assert detect_visibility(src, *_span(src, "f()"), "javascript") == "public"
    assert detect_visibility(src, *_span(src, "g()"), "typescript") == "private"


def test_go_visibility():
    src = "func Exported() {}\nfunc local() {}\n"
    assert detect_visibility(src, *_span(src, "Exported"), "go") == "public"
    assert detect_visibility(src, *_span(src, "local"), "go") == "private"
    assert detect_visibility(src, 0, 0, "go") == "unknown"


def test_java_and_c_visibility():
    src = "public class A {}"
    assert detect_visibility(src, *_span(src, "A"), "java") == "public"
    src = "class B {}"
    assert detect_visibility(src, *_span(src, "B"), "kotlin") == "package"
    src = "static int counter;"
    assert detect_visibility(src, *_span(src, "counter"), "c") == "internal"
    src = "int total;"
    assert detect_visibility(src, *_span(src, "total"), "cpp") == "public"


def test_unknown_language_visibility():
    src = "thing"
    assert detect_visibility(src, 0, 5, "cobol") == "unknown"