# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Reading `Cargo.toml` into the project configuration used by the pipeline.

Only the `[package]` table is consulted. Required keys:
- name
- version (SemVer)
- authors (non-empty array of strings)
- description
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from cargonuget.errors import (
	ManifestFieldMissing,
	ManifestNotFound,
	ManifestParseError,
	ManifestVersionInvalid,
)
from cargonuget.semver import SemVer

log = logging.getLogger(__name__)

CARGO_TOML = "Cargo.toml"


@dataclass(frozen=True)
class ProjectConfig:
	"""Crate metadata needed to describe the package."""

	name: str
	version: SemVer
	authors: tuple[str, ...]
	description: str


def manifest_path_for(path: Path) -> Path:
	"""
	Accept either a `Cargo.toml` path or the crate directory holding it.

	Any other path names a crate directory, so `some/Other.toml` resolves to
	`some/Other.toml/Cargo.toml` and is reported as not found.
	"""
	if path.name == CARGO_TOML and not path.is_dir():
		return path
	return path / CARGO_TOML


def _required_str(package: dict[str, Any], key: str, *, path: Path) -> str:
	value = package.get(key)
	if value is None:
		raise ManifestFieldMissing(message=f"missing required field '{key}'", path=str(path), field=key)
	if not isinstance(value, str):
		raise ManifestParseError(message=f"field '{key}' must be a string", path=str(path))
	if not value.strip():
		raise ManifestFieldMissing(message=f"required field '{key}' is empty", path=str(path), field=key)
	return value


def _required_authors(package: dict[str, Any], *, path: Path) -> tuple[str, ...]:
	value = package.get("authors")
	if value is None:
		raise ManifestFieldMissing(message="missing required field 'authors'", path=str(path), field="authors")
	if not isinstance(value, list) or any(not isinstance(a, str) for a in value):
		raise ManifestParseError(message="field 'authors' must be an array of strings", path=str(path))
	authors = tuple(a for a in value if a.strip())
	if not authors:
		raise ManifestFieldMissing(message="field 'authors' needs at least one author", path=str(path), field="authors")
	return authors


def parse_manifest(text: str, *, path: Path) -> ProjectConfig:
	"""Parse manifest `text`; `path` is only used in error reports."""
	try:
		data = tomllib.loads(text)
	except tomllib.TOMLDecodeError as err:
		raise ManifestParseError(message=f"invalid TOML: {err}", path=str(path)) from err

	package = data.get("package")
	if package is None:
		raise ManifestParseError(message="manifest has no [package] table", path=str(path))
	if not isinstance(package, dict):
		raise ManifestParseError(message="[package] must be a table", path=str(path))

	# Field order matches the order errors are reported in.
	name = _required_str(package, "name", path=path)
	version_text = _required_str(package, "version", path=path)
	authors = _required_authors(package, path=path)
	description = _required_str(package, "description", path=path)

	try:
		version = SemVer.parse(version_text)
	except ValueError as err:
		raise ManifestVersionInvalid(message=str(err), path=str(path)) from err

	return ProjectConfig(name=name, version=version, authors=authors, description=description)


def read_manifest(path: Path) -> ProjectConfig:
	"""Read and validate a cargo manifest from disk."""
	toml_path = manifest_path_for(path)
	try:
		text = toml_path.read_text(encoding="utf-8")
	except FileNotFoundError as err:
		raise ManifestNotFound(message="cargo manifest not found", path=str(toml_path)) from err
	except UnicodeDecodeError as err:
		raise ManifestParseError(message="cargo manifest is not valid UTF-8", path=str(toml_path)) from err
	except OSError as err:
		raise ManifestNotFound(message=f"cargo manifest unreadable: {err.strerror or err}", path=str(toml_path)) from err

	config = parse_manifest(text, path=toml_path)
	log.debug("read cargo manifest %s: %s %s", toml_path, config.name, config.version)
	return config
