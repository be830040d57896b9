# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import json
from pathlib import Path

import pytest

from cargonuget import cli
from cargonuget.pipeline import run_pack


@pytest.fixture
def patched_pack(monkeypatch: pytest.MonkeyPatch, fake_builder):
	"""Route the CLI's pipeline through the fake builder; records PackOptions."""
	seen = []

	def _run(opts):
		seen.append(opts)
		return run_pack(opts, builder=fake_builder)

	monkeypatch.setattr(cli, "run_pack", _run)
	return seen


def test_pack_success(crate_dir: Path, tmp_path: Path, patched_pack, capsys: pytest.CaptureFixture[str]) -> None:
	out_dir = tmp_path / "nupkgs"
	rc = cli.main(["pack", "--cargo-dir", str(crate_dir), "--nupkg-dir", str(out_dir), "--release"])
	assert rc == 0
	assert (out_dir / "foo-1.2.3.nupkg").exists()
	captured = capsys.readouterr()
	assert "The build finished successfully" in captured.out
	assert str(out_dir / "foo-1.2.3.nupkg") in captured.out
	assert patched_pack[0].profile.value == "release"
	assert patched_pack[0].nupkg_dir == out_dir


def test_pack_without_dir_writes_cwd(
	crate_dir: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, patched_pack
) -> None:
	cwd = tmp_path / "cwd"
	cwd.mkdir()
	monkeypatch.chdir(cwd)
	assert cli.main(["pack", "--cargo-dir", str(crate_dir)]) == 0
	assert (cwd / "foo-1.2.3.nupkg").exists()
	assert patched_pack[0].nupkg_dir is None


def test_pack_failure_prints_stage_and_banner(
	tmp_path: Path, patched_pack, capsys: pytest.CaptureFixture[str]
) -> None:
	rc = cli.main(["pack", "--cargo-dir", str(tmp_path / "nowhere")])
	assert rc != 0
	captured = capsys.readouterr()
	assert "error reading cargo manifest" in captured.err
	assert "[MANIFEST_NOT_FOUND]" in captured.err
	assert "caused by:" in captured.err
	assert "The build did not finish successfully" in captured.err
	assert "finished successfully" not in captured.out


def test_pack_json_report(crate_dir: Path, tmp_path: Path, patched_pack, capsys: pytest.CaptureFixture[str]) -> None:
	out_dir = tmp_path / "out"
	assert cli.main(["pack", "--cargo-dir", str(crate_dir), "--nupkg-dir", str(out_dir), "--json"]) == 0
	report = json.loads(capsys.readouterr().out)
	assert report == {"ok": True, "path": str(out_dir / "foo-1.2.3.nupkg"), "error": None}

	(crate_dir / "Cargo.toml").write_text("[package]\nname = 'foo'\n", encoding="utf-8")
	assert cli.main(["pack", "--cargo-dir", str(crate_dir), "--nupkg-dir", str(out_dir), "--json"]) == 1
	report = json.loads(capsys.readouterr().out)
	assert report["ok"] is False
	assert report["error"]["stage"] == "manifest"
	assert report["error"]["cause"]["reason_code"] == "MANIFEST_FIELD_MISSING"
	assert report["error"]["cause"]["field"] == "version"


def test_no_command_prints_help(capsys: pytest.CaptureFixture[str]) -> None:
	assert cli.main([]) == 2
	assert "pack" in capsys.readouterr().out


def test_pack_accepts_verbose_flag(crate_dir: Path, tmp_path: Path, patched_pack) -> None:
	out_dir = tmp_path / "out"
	assert cli.main(["pack", "--cargo-dir", str(crate_dir), "--nupkg-dir", str(out_dir), "-v"]) == 0
	assert (out_dir / "foo-1.2.3.nupkg").exists()


def test_pack_builder_crash_prints_banner(
	crate_dir: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
	def _crashing(config):
		raise RuntimeError("toolchain crashed")

	monkeypatch.setattr(cli, "run_pack", lambda opts: run_pack(opts, builder=_crashing))
	assert cli.main(["pack", "--cargo-dir", str(crate_dir), "--nupkg-dir", str(tmp_path / "out")]) == 1
	err = capsys.readouterr().err
	assert "error building Rust lib" in err
	assert "caused by: toolchain crashed" in err
	assert "The build did not finish successfully" in err
