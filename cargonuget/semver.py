# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Semantic versions (SemVer 2.0) as used by Cargo and NuGet.

Only parsing and rendering are needed: the pipeline copies the crate version
into the nuspec verbatim, it never compares versions.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_PRE_ID = r"(?:0|[1-9]\d*|\d*[A-Za-z-][0-9A-Za-z-]*)"

SEMVER_RE = re.compile(
	r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
	rf"(?:-({_PRE_ID}(?:\.{_PRE_ID})*))?"
	r"(?:\+([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$",
	re.ASCII,
)


@dataclass(frozen=True)
class SemVer:
	major: int
	minor: int
	patch: int
	pre: str | None = None
	build: str | None = None

	@classmethod
	def parse(cls, text: str) -> "SemVer":
		"""Parse `text`; raises ValueError when it is not a SemVer string."""
		m = SEMVER_RE.fullmatch(text)
		if m is None:
			raise ValueError(f"invalid semantic version: {text!r}")
		major, minor, patch, pre, build = m.groups()
		return cls(major=int(major), minor=int(minor), patch=int(patch), pre=pre, build=build)

	def __str__(self) -> str:
		out = f"{self.major}.{self.minor}.{self.patch}"
		if self.pre:
			out += f"-{self.pre}"
		if self.build:
			out += f"+{self.build}"
		return out
