# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from cargonuget.cargo.build import BuildOutput, BuildTarget, dylib_file_name
from cargonuget.cargo.manifest import ProjectConfig
from cargonuget.tests.crate_helpers import CARGO_TOML_FOO, LIB_BYTES


@pytest.fixture
def crate_dir(tmp_path: Path) -> Path:
	"""A crate directory holding the `foo 1.2.3` manifest."""
	root = tmp_path / "crate"
	root.mkdir()
	(root / "Cargo.toml").write_text(CARGO_TOML_FOO, encoding="utf-8")
	return root


@pytest.fixture
def fake_builder(tmp_path: Path) -> Callable[[ProjectConfig], BuildOutput]:
	"""
	Stand-in for `cargo build`: writes a fixed lib file and records calls.

	`fake_builder.calls` lists the configs it was invoked with.
	"""
	calls: list[ProjectConfig] = []

	def _build(config: ProjectConfig) -> BuildOutput:
		calls.append(config)
		out = tmp_path / "target" / "debug" / dylib_file_name(config.name)
		out.parent.mkdir(parents=True, exist_ok=True)
		out.write_bytes(LIB_BYTES)
		return BuildOutput(target=BuildTarget.LOCAL, path=out)

	_build.calls = calls  # type: ignore[attr-defined]
	return _build
