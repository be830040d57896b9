# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Nuspec generation and parsing.

A nuspec is the XML manifest embedded at the root of every nupkg. We emit the
minimal metadata NuGet requires (id, version, authors, description) plus a
dependency list:

	<package xmlns="http://schemas.microsoft.com/packaging/2013/05/nuspec.xsd">
	  <metadata>
	    <id/> <version/> <authors/> <description/>
	    <dependencies><dependency id="..." version="..."/></dependencies>
	  </metadata>
	</package>

`parse_nuspec(format_nuspec(args).xml)` always yields the structure that was
formatted; the XML text itself is not part of equality.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Mapping

from cargonuget.cargo.manifest import ProjectConfig
from cargonuget.errors import NuspecParseError, SerializationError

log = logging.getLogger(__name__)

NUSPEC_NS = "http://schemas.microsoft.com/packaging/2013/05/nuspec.xsd"

# Characters XML 1.0 cannot carry at all, escaped or not.
_XML_INVALID_RE = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff\ud800-\udfff]")


@dataclass(frozen=True)
class NugetDependencies:
	"""Dependency id -> version constraint. Empty until crates declare any."""

	by_id: Mapping[str, str] = field(default_factory=dict)

	def items(self) -> list[tuple[str, str]]:
		return sorted(self.by_id.items())

	def __eq__(self, other: object) -> bool:
		if not isinstance(other, NugetDependencies):
			return NotImplemented
		return dict(self.by_id) == dict(other.by_id)

	def __hash__(self) -> int:
		return hash(tuple(self.items()))

	def __len__(self) -> int:
		return len(self.by_id)


@dataclass(frozen=True)
class NuspecArgs:
	id: str
	version: str
	authors: str
	description: str
	dependencies: NugetDependencies = field(default_factory=NugetDependencies)

	@classmethod
	def from_config(cls, config: ProjectConfig) -> "NuspecArgs":
		return cls(
			id=config.name,
			version=str(config.version),
			authors=", ".join(config.authors),
			description=config.description,
			dependencies=NugetDependencies(),
		)


@dataclass(frozen=True)
class Nuspec:
	"""A formatted nuspec: structured metadata plus its XML rendering."""

	id: str
	version: str
	authors: str
	description: str
	dependencies: NugetDependencies
	xml: str = field(default="", compare=False, repr=False)


def _q(tag: str) -> str:
	return f"{{{NUSPEC_NS}}}{tag}"


def _check_text(what: str, value: str) -> None:
	m = _XML_INVALID_RE.search(value)
	if m is not None:
		raise SerializationError(
			message=f"nuspec {what} contains a character XML cannot represent: U+{ord(m.group()):04X}",
		)


def format_nuspec(args: NuspecArgs) -> Nuspec:
	"""Serialize `args` to nuspec XML."""
	_check_text("id", args.id)
	_check_text("version", args.version)
	_check_text("authors", args.authors)
	_check_text("description", args.description)
	for dep_id, dep_version in args.dependencies.items():
		_check_text("dependency id", dep_id)
		_check_text("dependency version", dep_version)

	# Children inherit the default namespace declared on the root.
	root = ET.Element("package", {"xmlns": NUSPEC_NS})
	metadata = ET.SubElement(root, "metadata")
	ET.SubElement(metadata, "id").text = args.id
	ET.SubElement(metadata, "version").text = args.version
	ET.SubElement(metadata, "authors").text = args.authors
	ET.SubElement(metadata, "description").text = args.description
	deps = ET.SubElement(metadata, "dependencies")
	for dep_id, dep_version in args.dependencies.items():
		ET.SubElement(deps, "dependency", {"id": dep_id, "version": dep_version})

	ET.indent(root, space="  ")
	# Parsers normalize a literal CR in text to LF; keep it as a char reference.
	body = ET.tostring(root, encoding="unicode").replace("\r", "&#13;")
	xml = '<?xml version="1.0" encoding="utf-8"?>\n' + body + "\n"

	return Nuspec(
		id=args.id,
		version=args.version,
		authors=args.authors,
		description=args.description,
		dependencies=args.dependencies,
		xml=xml,
	)


def generate(config: ProjectConfig) -> Nuspec:
	"""Derive the nuspec for a crate."""
	nuspec = format_nuspec(NuspecArgs.from_config(config))
	log.debug("formatted nuspec for %s %s (%d chars)", nuspec.id, nuspec.version, len(nuspec.xml))
	return nuspec


def _required_text(metadata: ET.Element, tag: str) -> str:
	el = metadata.find(_q(tag))
	if el is None:
		raise NuspecParseError(message=f"nuspec metadata is missing <{tag}>")
	return el.text or ""


def parse_nuspec(xml: str | bytes) -> Nuspec:
	"""Parse nuspec XML produced by `format_nuspec` (or NuGet's own dialect)."""
	try:
		root = ET.fromstring(xml)
	except ET.ParseError as err:
		raise NuspecParseError(message=f"malformed nuspec XML: {err}") from err
	if root.tag != _q("package"):
		raise NuspecParseError(message=f"unexpected nuspec root element: {root.tag}")
	metadata = root.find(_q("metadata"))
	if metadata is None:
		raise NuspecParseError(message="nuspec has no <metadata> element")

	deps: dict[str, str] = {}
	deps_el = metadata.find(_q("dependencies"))
	if deps_el is not None:
		for dep in deps_el.iter(_q("dependency")):
			dep_id = dep.get("id")
			if not dep_id:
				raise NuspecParseError(message="nuspec <dependency> is missing its id")
			if dep_id in deps:
				raise NuspecParseError(message=f"duplicate nuspec dependency '{dep_id}'")
			deps[dep_id] = dep.get("version", "")

	text = xml.decode("utf-8") if isinstance(xml, bytes) else xml
	return Nuspec(
		id=_required_text(metadata, "id"),
		version=_required_text(metadata, "version"),
		authors=_required_text(metadata, "authors"),
		description=_required_text(metadata, "description"),
		dependencies=NugetDependencies(deps),
		xml=text,
	)
