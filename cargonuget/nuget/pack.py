# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Packing a nuspec and built native libs into a nupkg (a zip container).

Layout:
- `<id>.nuspec` at the archive root,
- `runtimes/<rid>/native/<lib file name>` per build target.

The archive is deterministic for a fixed input:
- entries are written in sorted order,
- entries use fixed timestamps and permissions.
"""

from __future__ import annotations

import io
import logging
import platform
import zipfile
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Mapping

from cargonuget.cargo.build import BuildOutput, BuildTarget
from cargonuget.errors import ArchiveReadError, ArchiveWriteError, BuildArtifactUnreadable, NuspecParseError
from cargonuget.nuget.buf import Buf
from cargonuget.nuget.spec import Nuspec, parse_nuspec

log = logging.getLogger(__name__)

NUPKG_EXT = "nupkg"
NUSPEC_EXT = "nuspec"
RUNTIMES_DIR = "runtimes"

_ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)
_FILE_MODE = 0o644


def host_rid(system: str | None = None, machine: str | None = None) -> str:
	"""
	Return the NuGet runtime identifier (RID) for a host.

	Defaults to the running interpreter's host; unknown systems fall back to
	the portable `any` RID.
	"""
	sys_lower = (system if system is not None else platform.system()).lower()
	mach_lower = (machine if machine is not None else platform.machine()).lower()

	os_part = None
	if sys_lower in ("darwin", "macos"):
		os_part = "osx"
	elif sys_lower == "linux":
		os_part = "linux"
	elif sys_lower.startswith(("windows", "win", "cygwin", "msys")):
		os_part = "win"

	arch_part = None
	if mach_lower in ("aarch64", "arm64"):
		arch_part = "arm64"
	elif mach_lower in ("x86_64", "amd64", "x64"):
		arch_part = "x64"
	elif mach_lower in ("i386", "i686", "x86"):
		arch_part = "x86"
	elif mach_lower.startswith("arm"):
		arch_part = "arm"

	if os_part and arch_part:
		return f"{os_part}-{arch_part}"
	return "any"


def nuget_rid(target: BuildTarget) -> str:
	"""Map a build target onto the RID its binary is packed under."""
	if target is BuildTarget.LOCAL:
		return host_rid()
	raise ValueError(f"unsupported build target: {target}")


def nupkg_file_name(package_id: str, version: str) -> str:
	return f"{package_id}-{version}.{NUPKG_EXT}"


def nuspec_entry_name(package_id: str) -> str:
	return f"{package_id}.{NUSPEC_EXT}"


def native_entry_name(rid: str, lib_path: Path) -> str:
	return str(PurePosixPath(RUNTIMES_DIR) / rid / "native" / lib_path.name)


@dataclass(frozen=True)
class PackArgs:
	id: str
	version: str
	spec: str
	libs: Mapping[str, Path] = field(default_factory=dict)

	@classmethod
	def from_build(cls, nuspec: Nuspec, build: BuildOutput) -> "PackArgs":
		return cls(
			id=nuspec.id,
			version=nuspec.version,
			spec=nuspec.xml,
			libs={nuget_rid(build.target): build.path},
		)


@dataclass(frozen=True)
class Nupkg:
	"""A packed archive held in memory, ready to be saved."""

	name: str
	buf: Buf


@dataclass(frozen=True)
class LoadedNupkg:
	"""A nupkg read back from bytes: its nuspec and native libs by RID."""

	nuspec: Nuspec
	libs: dict[str, Buf]
	lib_names: dict[str, str]


def _zipinfo(name: str) -> zipfile.ZipInfo:
	zi = zipfile.ZipInfo(filename=name, date_time=_ZIP_EPOCH)
	zi.compress_type = zipfile.ZIP_DEFLATED
	zi.external_attr = _FILE_MODE << 16
	return zi


def pack_nupkg(args: PackArgs) -> Nupkg:
	"""Write the nuspec and libs into an in-memory zip."""
	# Read every lib before touching the zip so a missing artifact never
	# leaves a half-written buffer behind.
	entries: dict[str, bytes] = {}
	for rid in sorted(args.libs.keys()):
		lib_path = args.libs[rid]
		try:
			data = lib_path.read_bytes()
		except OSError as err:
			raise BuildArtifactUnreadable(
				message=f"cannot read built library for {rid}: {err.strerror or err}",
				path=str(lib_path),
			) from err
		entries[native_entry_name(rid, lib_path)] = data

	out = io.BytesIO()
	try:
		with zipfile.ZipFile(out, mode="w") as zf:
			# Manifest first, then libs.
			zf.writestr(_zipinfo(nuspec_entry_name(args.id)), args.spec.encode("utf-8"))
			for name in sorted(entries.keys()):
				zf.writestr(_zipinfo(name), entries[name])
	except (OSError, ValueError, RuntimeError, zipfile.LargeZipFile) as err:
		raise ArchiveWriteError(message=f"failed to write nupkg archive: {err}") from err

	nupkg = Nupkg(name=nupkg_file_name(args.id, args.version), buf=Buf(out.getvalue()))
	log.debug("packed %s: %d entries, %d bytes", nupkg.name, len(entries) + 1, len(nupkg.buf))
	return nupkg


def pack(nuspec: Nuspec, build: BuildOutput) -> Nupkg:
	"""Pack a nuspec and a build output into a nupkg."""
	return pack_nupkg(PackArgs.from_build(nuspec, build))


def read_nupkg(data: bytes) -> LoadedNupkg:
	"""
	Read a nupkg back from bytes.

	The archive must hold exactly one root-level `.nuspec`; native libs are
	collected from `runtimes/<rid>/native/`. Other entries are ignored.
	"""
	try:
		zf = zipfile.ZipFile(io.BytesIO(data))
	except zipfile.BadZipFile as err:
		raise ArchiveReadError(message=f"not a zip archive: {err}") from err

	with zf:
		names = zf.namelist()
		specs = [n for n in names if "/" not in n and n.endswith(f".{NUSPEC_EXT}")]
		if len(specs) != 1:
			raise ArchiveReadError(message=f"expected exactly one nuspec entry, found {len(specs)}")

		try:
			nuspec = parse_nuspec(zf.read(specs[0]))
			libs: dict[str, Buf] = {}
			lib_names: dict[str, str] = {}
			for name in sorted(names):
				parts = PurePosixPath(name).parts
				if len(parts) != 4 or parts[0] != RUNTIMES_DIR or parts[2] != "native":
					continue
				rid = parts[1]
				if rid in libs:
					raise ArchiveReadError(message=f"more than one native lib for {rid}")
				libs[rid] = Buf(zf.read(name))
				lib_names[rid] = parts[3]
		except NuspecParseError as err:
			raise ArchiveReadError(message=f"nuspec entry is invalid: {err.message}") from err
		except (zipfile.BadZipFile, OSError) as err:
			raise ArchiveReadError(message=f"corrupt archive entry: {err}") from err

	return LoadedNupkg(nuspec=nuspec, libs=libs, lib_names=lib_names)
