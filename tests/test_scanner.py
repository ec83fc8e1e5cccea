"""Tests for dupclean.scanner — directory traversal."""

import os
import pathlib

import pytest

from dupclean.errors import ConfigurationError
from dupclean.scanner import FileRecord, walk


def _paths(records: list[FileRecord]) -> set[pathlib.Path]:
    return {r.path for r in records}


class TestWalk:
    """Test which files the walker reports."""

    def test_no_roots_raises(self):
        with pytest.raises(ConfigurationError, match="no roots specified"):
            walk([])

    def test_empty_directory(self, tmp_source: pathlib.Path):
        assert walk([tmp_source]) == []

    def test_finds_nested_files(self, scenario: dict[str, pathlib.Path], tmp_source: pathlib.Path):
        records = walk([tmp_source])
        assert _paths(records) == set(scenario.values())

    def test_records_size_and_no_hash(self, scenario: dict[str, pathlib.Path], tmp_source: pathlib.Path):
        by_path = {r.path: r for r in walk([tmp_source])}
        assert by_path[scenario["a"]].size == 10
        assert by_path[scenario["d"]].size == 20
        assert all(r.hash is None for r in by_path.values())

    def test_paths_are_absolute(self, tmp_source: pathlib.Path, monkeypatch):
        (tmp_source / "f.bin").write_bytes(b"data")
        monkeypatch.chdir(tmp_source.parent)
        records = walk([pathlib.Path(tmp_source.name)])
        assert len(records) == 1
        assert records[0].path.is_absolute()
        assert records[0].path == tmp_source / "f.bin"

    def test_skips_empty_files(self, tmp_source: pathlib.Path):
        (tmp_source / "empty").write_bytes(b"")
        (tmp_source / "full").write_bytes(b"1")
        assert _paths(walk([tmp_source])) == {tmp_source / "full"}

    def test_prunes_vcs_dirs_case_insensitive(self, tmp_source: pathlib.Path):
        for name in (".git", ".SVN", ".Git"):
            d = tmp_source / name
            d.mkdir()
            (d / "objects").write_bytes(b"blob")
        (tmp_source / "kept.txt").write_bytes(b"blob")
        assert _paths(walk([tmp_source])) == {tmp_source / "kept.txt"}

    def test_vcs_root_is_pruned(self, tmp_path: pathlib.Path):
        root = tmp_path / ".git"
        root.mkdir()
        (root / "a").write_bytes(b"same")
        (root / "b").write_bytes(b"same")
        assert walk([root]) == []

    def test_excluded_root_is_pruned(self, tmp_path: pathlib.Path):
        cache = tmp_path / "Cache-7"
        cache.mkdir()
        (cache / "blob").write_bytes(b"cached")
        kept = tmp_path / "src"
        kept.mkdir()
        (kept / "main.js").write_bytes(b"js")
        records = walk([cache, kept], exclude_dir=["cache-*"])
        assert _paths(records) == {kept / "main.js"}

    def test_vcs_named_file_is_not_pruned(self, tmp_source: pathlib.Path):
        (tmp_source / ".git").write_bytes(b"gitdir: elsewhere")
        assert _paths(walk([tmp_source])) == {tmp_source / ".git"}

    def test_exclude_dir_patterns(self, tmp_source: pathlib.Path):
        (tmp_source / "node_modules").mkdir()
        (tmp_source / "node_modules" / "lib.js").write_bytes(b"js")
        (tmp_source / "Cache-1").mkdir()
        (tmp_source / "Cache-1" / "blob").write_bytes(b"js")
        (tmp_source / "src").mkdir()
        (tmp_source / "src" / "main.js").write_bytes(b"js")
        records = walk([tmp_source], exclude_dir=["node_modules", "cache-*"])
        assert _paths(records) == {tmp_source / "src" / "main.js"}

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
    def test_skips_symlinks(self, tmp_source: pathlib.Path, tmp_path: pathlib.Path):
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "target.txt").write_bytes(b"linked")
        (tmp_source / "real.txt").write_bytes(b"real")
        (tmp_source / "file_link").symlink_to(outside / "target.txt")
        (tmp_source / "dir_link").symlink_to(outside, target_is_directory=True)
        assert _paths(walk([tmp_source])) == {tmp_source / "real.txt"}

    @pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="FIFOs not supported")
    def test_skips_special_files(self, tmp_source: pathlib.Path):
        os.mkfifo(tmp_source / "pipe")
        (tmp_source / "real.txt").write_bytes(b"real")
        assert _paths(walk([tmp_source])) == {tmp_source / "real.txt"}

    def test_missing_root_is_skipped(self, tmp_source: pathlib.Path, tmp_path: pathlib.Path, caplog):
        (tmp_source / "f.txt").write_bytes(b"data")
        records = walk([tmp_path / "missing", tmp_source])
        assert _paths(records) == {tmp_source / "f.txt"}
        assert "not found" in caplog.text

    def test_file_root_is_reported(self, tmp_source: pathlib.Path):
        f = tmp_source / "single.bin"
        f.write_bytes(b"single")
        assert _paths(walk([f])) == {f}

    def test_multiple_roots(self, tmp_path: pathlib.Path):
        r1 = tmp_path / "r1"
        r2 = tmp_path / "r2"
        r1.mkdir()
        r2.mkdir()
        (r1 / "a").write_bytes(b"1")
        (r2 / "b").write_bytes(b"2")
        assert _paths(walk([r1, str(r2)])) == {r1 / "a", r2 / "b"}

    @pytest.mark.skipif(os.name != "posix" or os.geteuid() == 0, reason="needs POSIX permissions as non-root")
    def test_unreadable_directory_is_skipped(self, tmp_source: pathlib.Path):
        locked = tmp_source / "locked"
        locked.mkdir()
        (locked / "hidden.txt").write_bytes(b"secret")
        (tmp_source / "open.txt").write_bytes(b"public")
        locked.chmod(0)
        try:
            assert _paths(walk([tmp_source])) == {tmp_source / "open.txt"}
        finally:
            locked.chmod(0o755)


class TestWalkProgress:
    """Test progress reporting during traversal."""

    def test_reports_visited_entries(self, scenario, tmp_source: pathlib.Path):
        updates = []

        class Bar:
            def update(self, n=1):
                updates.append(n)

            def close(self):
                pass

        opened = []

        def factory(description, total):
            opened.append((description, total))
            return Bar()

        walk([tmp_source], progress=factory)
        assert opened == [("Scanning", None)]
        # 4 directories (source, one, two, nested) + 4 files
        assert sum(updates) == 8

    def test_broken_sink_does_not_change_result(self, scenario, tmp_source: pathlib.Path):
        class BrokenBar:
            def update(self, n=1):
                raise RuntimeError("terminal gone")

            def close(self):
                raise RuntimeError("terminal gone")

        records = walk([tmp_source], progress=lambda d, t: BrokenBar())
        assert _paths(records) == set(scenario.values())
