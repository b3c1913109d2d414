"""Discovery of the trusted pgrx crate version from the cargo workspace."""

from __future__ import annotations

import os
import subprocess

from plrustkit.errors import PlRustError


def parse_cargo_tree_version(output: str) -> str:
    """Extract ``1.0.0`` from a line like ``plrust-trusted-pgrx v1.0.0 (/path)``."""
    parts = output.split()
    if len(parts) < 2:
        raise PlRustError("unexpected `cargo tree` output")
    return parts[1][1:]


def find_trusted_pgrx_version(cwd: str | os.PathLike[str] | None = None) -> str:
    """Ask ``cargo tree`` for the version of the trusted pgrx crate."""
    result = subprocess.run(
        ["cargo", "tree", "-p", "plrust-trusted-pgrx", "--depth", "0"],
        capture_output=True,
        cwd=cwd,
        check=False,
    )
    return parse_cargo_tree_version(result.stdout.decode("utf-8", errors="replace"))