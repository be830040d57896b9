# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Saving a packed nupkg to disk.

Policy: the destination is always overwritten (last write wins). The bytes go
to a temporary sibling first and are moved into place with `os.replace`, so a
failed save never leaves a partial archive at the destination.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from cargonuget.errors import DirectoryNotWritable, DiskWriteError
from cargonuget.nuget.buf import Buf
from cargonuget.nuget.pack import Nupkg

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SaveArgs:
	directory: Path
	path: Path
	nupkg: Buf

	@classmethod
	def resolve(cls, output_dir: Path | None, nupkg: Nupkg) -> "SaveArgs":
		directory = output_dir if output_dir is not None else Path(".")
		return cls(directory=directory, path=directory / nupkg.name, nupkg=nupkg.buf)


def _ensure_directory(directory: Path) -> None:
	try:
		directory.mkdir(parents=True, exist_ok=True)
	except OSError as err:
		raise DirectoryNotWritable(
			message=f"cannot create output directory: {err.strerror or err}",
			path=str(directory),
		) from err
	if not directory.is_dir():
		raise DirectoryNotWritable(message="output path is not a directory", path=str(directory))
	if not os.access(directory, os.W_OK | os.X_OK):
		raise DirectoryNotWritable(message="output directory is not writable", path=str(directory))


def save_nupkg(args: SaveArgs) -> Path:
	"""Write `args.nupkg` to `args.path`, replacing any existing file."""
	_ensure_directory(args.directory)

	tmp = args.path.with_name(args.path.name + f".tmp.{os.getpid()}")
	try:
		tmp.write_bytes(args.nupkg)
		os.replace(tmp, args.path)
	except OSError as err:
		tmp.unlink(missing_ok=True)
		raise DiskWriteError(message=f"failed to write nupkg: {err.strerror or err}", path=str(args.path)) from err

	log.info("saved %s (%d bytes)", args.path, len(args.nupkg))
	return args.path


def save(output_dir: Path | None, nupkg: Nupkg) -> Path:
	"""Save `nupkg` under `output_dir` (default: the current directory)."""
	return save_nupkg(SaveArgs.resolve(output_dir, nupkg))
