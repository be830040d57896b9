# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Structured errors for the cargo -> nupkg pipeline.

Every error carries a stable `reason_code` so CLI/JSON consumers can match on
it without parsing messages. Errors are grouped by the pipeline stage that
raises them; `StageError` is the driver-level annotation naming that stage.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar


@dataclass(frozen=True)
class CargoNugetError(Exception):
	"""Base class for every error surfaced by cargonuget."""

	message: str
	path: str | None = None

	reason_code: ClassVar[str] = "CARGONUGET_ERROR"

	def __str__(self) -> str:
		return self.format_human()

	def to_dict(self) -> dict[str, Any]:
		return {
			"reason_code": self.reason_code,
			"message": self.message,
			"path": self.path,
		}

	def format_human(self) -> str:
		parts: list[str] = [f"[{self.reason_code}] {self.message}"]
		if self.path:
			parts.append(f"path={self.path}")
		return " ".join(parts)


# Stage: reading cargo manifest.


@dataclass(frozen=True)
class ManifestReadError(CargoNugetError):
	reason_code: ClassVar[str] = "MANIFEST_ERROR"


@dataclass(frozen=True)
class ManifestNotFound(ManifestReadError):
	reason_code: ClassVar[str] = "MANIFEST_NOT_FOUND"


@dataclass(frozen=True)
class ManifestParseError(ManifestReadError):
	reason_code: ClassVar[str] = "MANIFEST_PARSE_ERROR"


@dataclass(frozen=True)
class ManifestFieldMissing(ManifestReadError):
	field: str = ""

	reason_code: ClassVar[str] = "MANIFEST_FIELD_MISSING"

	def to_dict(self) -> dict[str, Any]:
		out = super().to_dict()
		out["field"] = self.field
		return out


@dataclass(frozen=True)
class ManifestVersionInvalid(ManifestReadError):
	reason_code: ClassVar[str] = "MANIFEST_VERSION_INVALID"


# Stage: building the native lib.


@dataclass(frozen=True)
class BuildError(CargoNugetError):
	"""The external build failed; the pipeline does not look inside it."""

	reason_code: ClassVar[str] = "BUILD_FAILED"


# Stage: building the nuspec.


@dataclass(frozen=True)
class SerializationError(CargoNugetError):
	reason_code: ClassVar[str] = "NUSPEC_SERIALIZATION_ERROR"


@dataclass(frozen=True)
class NuspecParseError(CargoNugetError):
	reason_code: ClassVar[str] = "NUSPEC_PARSE_ERROR"


# Stage: building the nupkg.


@dataclass(frozen=True)
class BuildArtifactUnreadable(CargoNugetError):
	reason_code: ClassVar[str] = "BUILD_ARTIFACT_UNREADABLE"


@dataclass(frozen=True)
class ArchiveWriteError(CargoNugetError):
	reason_code: ClassVar[str] = "ARCHIVE_WRITE_ERROR"


@dataclass(frozen=True)
class ArchiveReadError(CargoNugetError):
	reason_code: ClassVar[str] = "ARCHIVE_READ_ERROR"


# Stage: saving the nupkg.


@dataclass(frozen=True)
class DirectoryNotWritable(CargoNugetError):
	reason_code: ClassVar[str] = "DIRECTORY_NOT_WRITABLE"


@dataclass(frozen=True)
class DiskWriteError(CargoNugetError):
	reason_code: ClassVar[str] = "DISK_WRITE_ERROR"


@dataclass(frozen=True)
class StageError(Exception):
	"""
	A pipeline failure annotated with the stage that raised it.

	`stage` is the short stage id (e.g. "save"); `label` is the progress text
	shown to users (e.g. "saving nupkg").
	"""

	stage: str
	label: str
	cause: CargoNugetError

	def __str__(self) -> str:
		return self.format_human()

	@property
	def reason_code(self) -> str:
		return self.cause.reason_code

	def to_dict(self) -> dict[str, Any]:
		return {"stage": self.stage, "label": self.label, "cause": self.cause.to_dict()}

	def format_human(self) -> str:
		return f"error {self.label}: {self.cause.format_human()}"
