# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import os
from pathlib import Path

import pytest

from cargonuget.errors import DirectoryNotWritable, DiskWriteError
from cargonuget.nuget.buf import Buf
from cargonuget.nuget.pack import Nupkg
from cargonuget.nuget.save import SaveArgs, save


def _nupkg(data: bytes) -> Nupkg:
	return Nupkg(name="foo-1.2.3.nupkg", buf=Buf(data))


def test_resolve_defaults_to_current_directory() -> None:
	args = SaveArgs.resolve(None, _nupkg(b"x"))
	assert args.directory == Path(".")
	assert args.path == Path(".") / "foo-1.2.3.nupkg"


def test_save_without_dir_writes_to_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
	monkeypatch.chdir(tmp_path)
	path = save(None, _nupkg(b"payload"))
	assert (tmp_path / "foo-1.2.3.nupkg").read_bytes() == b"payload"
	assert path == Path(".") / "foo-1.2.3.nupkg"


def test_save_creates_missing_directory(tmp_path: Path) -> None:
	out_dir = tmp_path / "out" / "nested"
	path = save(out_dir, _nupkg(b"payload"))
	assert path == out_dir / "foo-1.2.3.nupkg"
	assert path.read_bytes() == b"payload"


def test_save_twice_keeps_last_write(tmp_path: Path) -> None:
	save(tmp_path, _nupkg(b"first"))
	save(tmp_path, _nupkg(b"second"))
	assert sorted(p.name for p in tmp_path.iterdir()) == ["foo-1.2.3.nupkg"]
	assert (tmp_path / "foo-1.2.3.nupkg").read_bytes() == b"second"


def test_save_into_a_file_is_not_a_directory(tmp_path: Path) -> None:
	blocker = tmp_path / "blocker"
	blocker.write_text("not a dir", encoding="utf-8")
	with pytest.raises(DirectoryNotWritable):
		save(blocker, _nupkg(b"payload"))
	with pytest.raises(DirectoryNotWritable):
		save(blocker / "sub", _nupkg(b"payload"))


def test_failed_write_leaves_nothing_behind(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
	def _disk_full(src, dst):
		raise OSError(28, "No space left on device")

	monkeypatch.setattr(os, "replace", _disk_full)
	with pytest.raises(DiskWriteError, match="No space left") as exc:
		save(tmp_path, _nupkg(b"payload"))
	assert exc.value.path == str(tmp_path / "foo-1.2.3.nupkg")
	assert list(tmp_path.iterdir()) == []


def test_failed_overwrite_keeps_previous_archive(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
	save(tmp_path, _nupkg(b"old"))

	def _disk_full(self, data):
		raise OSError(28, "No space left on device")

	monkeypatch.setattr(Path, "write_bytes", _disk_full)
	with pytest.raises(DiskWriteError):
		save(tmp_path, _nupkg(b"new"))
	assert sorted(p.name for p in tmp_path.iterdir()) == ["foo-1.2.3.nupkg"]
	assert (tmp_path / "foo-1.2.3.nupkg").read_bytes() == b"old"
