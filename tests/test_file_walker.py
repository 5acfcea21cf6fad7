"""Tests for the directory-tree target source."""
import os
from pathlib import Path
from unittest import mock

import pytest

from entroscan.collectors.file_walker import walk_regular_files
from entroscan.core.errors import MalformedTargetError


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    root = tmp_path / "root"
    (root / "b" / "deep").mkdir(parents=True)
    (root / "a").mkdir()
    (root / "z.bin").write_bytes(b"z")
    (root / "a" / "one").write_bytes(b"1")
    (root / "b" / "two").write_bytes(b"2")
    (root / "b" / "deep" / "three").write_bytes(b"3")
    return root


def test_lexical_order(tree: Path) -> None:
    paths = [os.path.relpath(p, tree) for p in walk_regular_files(str(tree))]
    assert paths == ["a/one", "b/deep/three", "b/two", "z.bin"]


def test_skips_fifos_and_symlinks(tree: Path) -> None:
    os.mkfifo(tree / "pipe")
    os.symlink(tree / "z.bin", tree / "link")
    os.symlink(tree / "b", tree / "dirlink")
    paths = {os.path.relpath(p, tree) for p in walk_regular_files(str(tree))}
    assert paths == {"a/one", "b/deep/three", "b/two", "z.bin"}


def test_root_file_yields_itself(tree: Path) -> None:
    target = str(tree / "z.bin")
    assert list(walk_regular_files(target)) == [target]


def test_missing_root_is_malformed(tmp_path: Path) -> None:
    with pytest.raises(MalformedTargetError):
        list(walk_regular_files(str(tmp_path / "missing")))


def test_empty_root_path_is_malformed() -> None:
    with pytest.raises(MalformedTargetError):
        list(walk_regular_files(""))


def test_unlistable_directory_reported(tree: Path) -> None:
    real_scandir = os.scandir
    blocked = str(tree / "b")

    def scandir(path):
        if str(path) == blocked:
            raise PermissionError(13, "Permission denied", blocked)
        return real_scandir(path)

    errors: list[OSError] = []
    with mock.patch("entroscan.collectors.file_walker.os.scandir", side_effect=scandir):
        paths = [os.path.relpath(p, tree) for p in walk_regular_files(str(tree), errors.append)]

    assert paths == ["a/one", "z.bin"]
    assert len(errors) == 1
    assert errors[0].filename == blocked


def test_vanished_directory_skipped_silently(tree: Path) -> None:
    real_scandir = os.scandir
    gone = str(tree / "a")

    def scandir(path):
        if str(path) == gone:
            raise FileNotFoundError(2, "No such file or directory", gone)
        return real_scandir(path)

    errors: list[OSError] = []
    with mock.patch("entroscan.collectors.file_walker.os.scandir", side_effect=scandir):
        paths = [os.path.relpath(p, tree) for p in walk_regular_files(str(tree), errors.append)]

    assert paths == ["b/deep/three", "b/two", "z.bin"]
    assert errors == []


def test_onerror_may_stop_walk(tree: Path) -> None:
    real_scandir = os.scandir

    def scandir(path):
        if str(path) == str(tree / "a"):
            raise PermissionError(13, "Permission denied", str(path))
        return real_scandir(path)

    def abort(exc: OSError) -> None:
        raise RuntimeError("stop") from exc

    with mock.patch("entroscan.collectors.file_walker.os.scandir", side_effect=scandir):
        with pytest.raises(RuntimeError):
            list(walk_regular_files(str(tree), abort))
