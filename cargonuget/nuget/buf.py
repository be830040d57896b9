# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations


class Buf(bytes):
	"""
	Raw package bytes whose repr/str never render the contents.

	Archive buffers can be large and binary; diagnostics show the size only.
	"""

	def __repr__(self) -> str:
		return f"Buf(<{len(self)} bytes>)"

	__str__ = __repr__
