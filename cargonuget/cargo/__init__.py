# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Cargo side of the pipeline: reading `Cargo.toml` and building the lib.
"""

from __future__ import annotations

__all__ = [
	"build",
	"manifest",
]
