# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
NuGet side of the pipeline: nuspec generation, nupkg packing and saving.

Stages (each a plain function over frozen values):
  spec: ProjectConfig -> Nuspec
  pack: (Nuspec, BuildOutput) -> Nupkg
  save: (output dir, Nupkg) -> path on disk
"""

from __future__ import annotations

__all__ = [
	"buf",
	"pack",
	"save",
	"spec",
]
