# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from rich.console import Console

from cargonuget.cargo.build import BuildProfile
from cargonuget.errors import StageError
from cargonuget.pipeline import PackOptions, run_pack

PACK_CMD = "pack"
NUPKG_DIR_ARG = "--nupkg-dir"


def _build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(prog="cargonuget", description="Pack a Rust cdylib crate into a NuGet package")
	sub = p.add_subparsers(dest="cmd")

	pack = sub.add_parser(PACK_CMD, help="Build the crate and write <id>-<version>.nupkg")
	pack.add_argument(
		"--cargo-dir",
		type=Path,
		default=Path("."),
		help="Crate directory containing Cargo.toml (default: .)",
	)
	pack.add_argument(
		NUPKG_DIR_ARG,
		dest="nupkg_dir",
		type=Path,
		default=None,
		help="Directory to write the nupkg to (default: current directory)",
	)
	pack.add_argument("--release", action="store_true", help="Build with the release profile")
	pack.add_argument("--cargo", type=str, default=None, help="cargo executable (default: $CARGO, then PATH)")
	pack.add_argument("--json", action="store_true", help="Emit a machine-readable JSON report")
	pack.add_argument("-v", "--verbose", action="store_true", help="Log pipeline progress to stderr")
	return p


def _error_chain(err: BaseException) -> list[str]:
	lines = [str(err)]
	cur = err.cause if isinstance(err, StageError) else err
	cur = cur.__cause__
	while cur is not None:
		lines.append(f"caused by: {cur}")
		cur = cur.__cause__
	return lines


def _run_pack_cmd(args: argparse.Namespace, out: Console, err_out: Console) -> int:
	opts = PackOptions(
		crate_dir=args.cargo_dir,
		nupkg_dir=args.nupkg_dir,
		profile=BuildProfile.RELEASE if args.release else BuildProfile.DEBUG,
		cargo=args.cargo,
	)
	try:
		result = run_pack(opts)
	except StageError as err:
		if args.json:
			print(json.dumps({"ok": False, "path": None, "error": err.to_dict()}, sort_keys=True, separators=(",", ":")))
			return 1
		for line in _error_chain(err):
			err_out.print(line, style="red", markup=False, highlight=False)
		err_out.print()
		err_out.print("The build did not finish successfully", style="bold red")
		return 1

	if args.json:
		print(json.dumps({"ok": True, "path": str(result.path), "error": None}, sort_keys=True, separators=(",", ":")))
		return 0
	out.print(f"wrote {result.path}", markup=False, highlight=False)
	out.print("The build finished successfully", style="green")
	return 0


def main(argv: list[str] | None = None) -> int:
	p = _build_parser()
	args = p.parse_args(argv)

	logging.basicConfig(
		level=logging.DEBUG if getattr(args, "verbose", False) else logging.WARNING,
		format="%(levelname)s %(name)s: %(message)s",
	)
	out = Console(soft_wrap=True)
	err_out = Console(stderr=True, soft_wrap=True)

	if args.cmd == PACK_CMD:
		return _run_pack_cmd(args, out, err_out)

	p.print_help()
	return 2
