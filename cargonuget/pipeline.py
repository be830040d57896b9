# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
The pack pipeline: Cargo.toml -> cargo build -> nuspec -> nupkg -> disk.

Stages run strictly in order and each consumes only the previous stage's
value. Any error is annotated with the failing stage and re-raised as
`StageError`; nothing is retried, and nothing is written unless every stage
before `save` succeeded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, TypeVar

from cargonuget.cargo.build import BuildOutput, BuildProfile, Builder, CargoBuildOptions, cargo_builder
from cargonuget.cargo.manifest import ProjectConfig, manifest_path_for, read_manifest
from cargonuget.errors import BuildError, CargoNugetError, StageError
from cargonuget.nuget import pack as nuget_pack
from cargonuget.nuget import save as nuget_save
from cargonuget.nuget import spec as nuget_spec

log = logging.getLogger(__name__)

T = TypeVar("T")

STAGE_MANIFEST = "manifest"
STAGE_BUILD = "build"
STAGE_SPEC = "spec"
STAGE_PACK = "pack"
STAGE_SAVE = "save"

STAGE_LABELS: dict[str, str] = {
	STAGE_MANIFEST: "reading cargo manifest",
	STAGE_BUILD: "building Rust lib",
	STAGE_SPEC: "building nuspec",
	STAGE_PACK: "building nupkg",
	STAGE_SAVE: "saving nupkg",
}


@dataclass(frozen=True)
class PackOptions:
	crate_dir: Path = Path(".")
	nupkg_dir: Path | None = None
	profile: BuildProfile = BuildProfile.DEBUG
	cargo: str | None = None


@dataclass(frozen=True)
class PackResult:
	config: ProjectConfig
	build: BuildOutput
	nuspec: nuget_spec.Nuspec
	nupkg: nuget_pack.Nupkg
	path: Path


def _stage(stage: str, fn: Callable[..., T], *args: object) -> T:
	label = STAGE_LABELS[stage]
	log.info("%s", label)
	try:
		return fn(*args)
	except CargoNugetError as err:
		log.debug("stage %s failed: %s", stage, err.reason_code)
		raise StageError(stage=stage, label=label, cause=err) from err


def _run_builder(builder: Builder, config: ProjectConfig) -> BuildOutput:
	try:
		return builder(config)
	except CargoNugetError:
		raise
	except Exception as err:
		# Any failure of an injected builder is a build failure.
		raise BuildError(message=f"builder failed: {err}") from err


def run_pack(opts: PackOptions, *, builder: Builder | None = None) -> PackResult:
	"""
	Run the whole pipeline for the crate in `opts.crate_dir`.

	`builder` replaces the cargo invocation; by default `cargo build --lib` is
	run with the profile and cargo executable from `opts`.
	"""
	if builder is None:
		crate_dir = manifest_path_for(opts.crate_dir).parent
		builder = cargo_builder(CargoBuildOptions(crate_dir=crate_dir, profile=opts.profile, cargo=opts.cargo))

	config = _stage(STAGE_MANIFEST, read_manifest, opts.crate_dir)
	build = _stage(STAGE_BUILD, _run_builder, builder, config)
	nuspec = _stage(STAGE_SPEC, nuget_spec.generate, config)
	nupkg = _stage(STAGE_PACK, nuget_pack.pack, nuspec, build)
	path = _stage(STAGE_SAVE, nuget_save.save, opts.nupkg_dir, nupkg)
	return PackResult(config=config, build=build, nuspec=nuspec, nupkg=nupkg, path=path)
