"""Tests for llm.txt discovery."""

import pytest

from llmtxt_check.utils.file_scanner import FileScanner, discover_llm_txt


@pytest.fixture
def tree(tmp_path):
    for relative in [
        "llm.txt",
        "docs/llms.txt",
        "docs/guide.md",
        "pkg/LLM.txt",
        "node_modules/dep/llm.txt",
        ".hidden/llm.txt",
        "build/llm.txt",
    ]:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("# doc\n")
    return tmp_path


class TestFileScanner:

    def test_scan(self, tree):
        found = FileScanner(tree).scan()
        assert [p.relative_to(tree.resolve()).as_posix() for p in found] == [
            "docs/llms.txt",
            "llm.txt",
            "pkg/LLM.txt",
        ]

    def test_custom_filenames(self, tree):
        found = FileScanner(tree, filenames={"guide.md"}).scan()
        assert [p.name for p in found] == ["guide.md"]

    def test_custom_excludes(self, tree):
        found = FileScanner(tree, exclude_dirs={"docs"}).scan()
        assert "docs/llms.txt" not in [p.relative_to(tree.resolve()).as_posix() for p in found]
        assert "build/llm.txt" in [p.relative_to(tree.resolve()).as_posix() for p in found]

    def test_missing_directory(self, tmp_path):
        with pytest.raises(ValueError, match="does not exist"):
            FileScanner(tmp_path / "missing")

    def test_file_is_not_a_directory(self, tree):
        with pytest.raises(ValueError, match="not a directory"):
            FileScanner(tree / "llm.txt")

    def test_empty_directory(self, tmp_path):
        assert FileScanner(tmp_path).scan() == []


class TestDiscover:

    def test_files_are_kept_whatever_their_name(self, tree):
        assert discover_llm_txt([tree / "docs" / "guide.md"]) == [(tree / "docs" / "guide.md").resolve()]

    def test_directories_and_duplicates(self, tree):
        found = discover_llm_txt([tree / "llm.txt", tree])
        assert found[0] == (tree / "llm.txt").resolve()
        assert len(found) == 3
        assert len(set(found)) == 3

    def test_missing_path(self, tmp_path):
        with pytest.raises(ValueError, match="does not exist"):
            discover_llm_txt([tmp_path / "nope.txt"])
