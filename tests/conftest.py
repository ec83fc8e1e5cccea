"""Shared fixtures for dupclean tests."""

import pathlib

import pytest


@pytest.fixture
def tmp_source(tmp_path: pathlib.Path) -> pathlib.Path:
    """Create an empty temporary directory to scan."""
    source = tmp_path / "source"
    source.mkdir()
    return source


@pytest.fixture
def scenario(tmp_source: pathlib.Path) -> dict[str, pathlib.Path]:
    """Four files spread over two directories.

    a and b are identical (10 bytes), c has the same size but other content,
    d has a size no other file shares.
    """
    one = tmp_source / "one"
    two = tmp_source / "two" / "nested"
    one.mkdir()
    two.mkdir(parents=True)
    files = {
        "a": one / "a.txt",
        "b": two / "b.txt",
        "c": one / "c.txt",
        "d": two / "d.txt",
    }
    files["a"].write_bytes(b"x" * 10)
    files["b"].write_bytes(b"x" * 10)
    files["c"].write_bytes(b"y" * 10)
    files["d"].write_bytes(b"z" * 20)
    return files


@pytest.fixture
def no_config(tmp_path: pathlib.Path, monkeypatch) -> pathlib.Path:
    """Point XDG_CONFIG_HOME at an empty directory."""
    cfg = tmp_path / "cfg"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(cfg))
    return cfg
