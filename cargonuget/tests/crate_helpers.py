# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

CARGO_TOML_FOO = """
[package]
name = "foo"
version = "1.2.3"
authors = ["A B"]
description = "d"

[lib]
crate-type = ["cdylib"]
""".lstrip()

LIB_BYTES = b"\x7fELF\x02\x01\x01\x00not-really-a-lib\x00\xff"
