import pytest

from helmkit.golden import GoldenAssertion, GoldenMismatch, assert_golden, yaml_diff


def test_update_writes_file(tmp_path):
    path = tmp_path / "golden.txt"
    assert_golden(GoldenAssertion.TEXT, path, "hello", update=True)
    assert path.read_text() == "hello"


def test_text_match_and_mismatch(tmp_path):
    path = tmp_path / "golden.txt"
    path.write_text("hello")
    assert assert_golden(GoldenAssertion.TEXT, path, "hello") is None
    with pytest.raises(GoldenMismatch):
        assert_golden(GoldenAssertion.TEXT, path, "goodbye")
    assert path.read_text() == "hello"


def test_bytes_mismatch(tmp_path):
    path = tmp_path / "golden.bin"
    path.write_bytes(b"\x00\x01")
    with pytest.raises(GoldenMismatch):
        assert_golden(GoldenAssertion.BYTES, path, b"\x00\x02")


def test_json_ignores_formatting(tmp_path):
    path = tmp_path / "golden.json"
    path.write_text('{"a": 1, "b": [1, 2]}')
    assert assert_golden(GoldenAssertion.JSON, path, '{"b":[1,2],"a":1}') is None
    with pytest.raises(GoldenMismatch):
        assert_golden(GoldenAssertion.JSON, path, '{"a": 2, "b": [1, 2]}')


def test_yaml_mismatch_reports_path(tmp_path):
    path = tmp_path / "golden.yaml"
    path.write_text("a:\n  b: 1\n---\nc: 2\n")
    with pytest.raises(GoldenMismatch) as info:
        assert_golden(GoldenAssertion.YAML, path, "a:\n  b: 5\n---\nc: 2\n")
    assert "a/b" in str(info.value)


def test_missing_golden_fails(tmp_path):
    with pytest.raises(GoldenMismatch):
        assert_golden(GoldenAssertion.YAML, tmp_path / "absent.yaml", "a: 1\n")


def test_yaml_diff_equal_documents_is_empty():
    assert yaml_diff("a: 1\nb: [x, y]\n", "b: [x, y]\na: 1\n") == []


def test_yaml_diff_detects_changes():
    diffs = yaml_diff("a: 1\nlist: [1, 2]\n", "a: true\nlist: [1]\nnew: x\n")
    assert len(diffs) == 3
    assert any("list/1" in d for d in diffs)
    assert any("new" in d for d in diffs)


def test_yaml_diff_document_count():
    diffs = yaml_diff("a: 1\n", "a: 1\n---\nb: 2\n")
    assert len(diffs) == 1
    assert "document 1" in diffs[0]