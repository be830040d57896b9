# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Building the native library with cargo.

The rest of the pipeline only sees the typed `BuildOutput`; how the binary is
produced stays behind `build_lib` (or any callable with the `Builder` shape).
"""

from __future__ import annotations

import enum
import logging
import os
import shutil
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping

from cargonuget.cargo.manifest import CARGO_TOML, ProjectConfig
from cargonuget.errors import BuildError

log = logging.getLogger(__name__)


class BuildTarget(enum.Enum):
	"""Compilation target of a built artifact. Only the host is supported."""

	LOCAL = "local"


class BuildProfile(enum.Enum):
	DEBUG = "debug"
	RELEASE = "release"


@dataclass(frozen=True)
class BuildOutput:
	target: BuildTarget
	path: Path


@dataclass(frozen=True)
class CargoBuildOptions:
	crate_dir: Path = Path(".")
	profile: BuildProfile = BuildProfile.DEBUG
	cargo: str | None = None
	target_dir: Path | None = None


Builder = Callable[[ProjectConfig], BuildOutput]


def dylib_file_name(crate_name: str, *, platform: str | None = None) -> str:
	"""
	Return the file name cargo gives a `cdylib` for `crate_name` on `platform`.

	Cargo replaces '-' with '_' in library names.
	"""
	plat = platform or sys.platform
	lib = crate_name.replace("-", "_")
	if plat.startswith("win"):
		return f"{lib}.dll"
	if plat == "darwin":
		return f"lib{lib}.dylib"
	return f"lib{lib}.so"


def _resolve_cargo(opts: CargoBuildOptions, env: Mapping[str, str]) -> str:
	cargo = opts.cargo or env.get("CARGO") or shutil.which("cargo")
	if not cargo:
		raise BuildError(message="cargo not available; install a Rust toolchain or pass --cargo")
	return cargo


def _target_dir(opts: CargoBuildOptions, env: Mapping[str, str]) -> Path:
	if opts.target_dir is not None:
		return opts.target_dir
	env_dir = env.get("CARGO_TARGET_DIR")
	if env_dir:
		path = Path(env_dir)
		return path if path.is_absolute() else opts.crate_dir / path
	return opts.crate_dir / "target"


def build_lib(config: ProjectConfig, opts: CargoBuildOptions, *, env: Mapping[str, str] | None = None) -> BuildOutput:
	"""Run `cargo build --lib` for the crate and locate the produced binary."""
	env = os.environ if env is None else env
	cargo = _resolve_cargo(opts, env)
	manifest = opts.crate_dir / CARGO_TOML

	cmd = [cargo, "build", "--lib", "--manifest-path", str(manifest)]
	if opts.profile is BuildProfile.RELEASE:
		cmd.append("--release")
	if opts.target_dir is not None:
		cmd.extend(["--target-dir", str(opts.target_dir)])

	log.info("running %s", " ".join(cmd))
	try:
		res = subprocess.run(cmd, capture_output=True, text=True, cwd=opts.crate_dir, env=dict(env))
	except OSError as err:
		raise BuildError(message=f"failed to run cargo: {err}", path=cargo) from err
	if res.returncode != 0:
		raise BuildError(message=f"cargo failed: {res.stderr.strip()}", path=str(manifest))

	artifact = _target_dir(opts, env) / opts.profile.value / dylib_file_name(config.name)
	if not artifact.is_file():
		raise BuildError(
			message="cargo finished but produced no library; is crate-type = [\"cdylib\"] set?",
			path=str(artifact),
		)
	log.debug("built %s", artifact)
	return BuildOutput(target=BuildTarget.LOCAL, path=artifact)


def cargo_builder(opts: CargoBuildOptions) -> Builder:
	"""Bind build options, returning a `Builder` for the pipeline."""

	def _build(config: ProjectConfig) -> BuildOutput:
		return build_lib(config, opts)

	return _build
