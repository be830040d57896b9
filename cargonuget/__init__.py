# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
cargonuget: pack a Rust cdylib crate into a NuGet package.

Pipeline:
  cargo.manifest: Cargo.toml -> ProjectConfig
  cargo.build:    ProjectConfig -> BuildOutput (runs `cargo build --lib`)
  nuget.spec:     ProjectConfig -> Nuspec
  nuget.pack:     (Nuspec, BuildOutput) -> Nupkg
  nuget.save:     Nupkg -> <dir>/<id>-<version>.nupkg
"""

__all__ = ["cargo", "nuget", "pipeline"]
