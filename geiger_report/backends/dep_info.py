"""Compiled-file resolution from rustc dep-info (``*.d``) files."""

from __future__ import annotations

import json
import logging
import re
import subprocess
import tempfile
from pathlib import Path
from typing import Iterable

from geiger_report.backends.base import FileResolver
from geiger_report.exceptions import ResolutionError
from geiger_report.models.scan import ScanConfig, Workspace

logger = logging.getLogger(__name__)

# Whitespace not preceded by a backslash separates dependency paths.
_UNESCAPED_SPACE = re.compile(r"(?<!\\)\s+")


def parse_dep_info(content: str) -> list[str]:
    """Return every dependency path listed in a makefile-style dep-info file."""
    deps: list[str] = []
    for raw in content.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if ": " in line:
            _, rhs = line.split(": ", 1)
        elif line.endswith(":"):
            rhs = line[:-1]
        else:
            continue
        for token in _UNESCAPED_SPACE.split(rhs.strip()):
            if token:
                deps.append(token.replace("\\ ", " "))
    return deps


def read_dep_info_files(dep_files: Iterable[Path], base_dir: Path) -> set[Path]:
    """Collect the ``.rs`` sources named by the given dep-info files.

    Relative paths are resolved against ``base_dir`` (the directory cargo ran rustc in).
    """
    files: set[Path] = set()
    for dep_file in sorted(dep_files):
        try:
            content = dep_file.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise ResolutionError(f"Cannot read dep-info file {dep_file}: {e}") from e
        for dep in parse_dep_info(content):
            if not dep.endswith(".rs"):
                continue
            path = Path(dep)
            if not path.is_absolute():
                path = base_dir / path
            files.add(path.resolve())
    return files


def read_dep_info_dir(target_dir: Path, base_dir: Path) -> set[Path]:
    """Collect the ``.rs`` sources named by every dep-info file under ``target_dir``."""
    return read_dep_info_files(target_dir.rglob("*.d"), base_dir)


def artifact_dep_info_files(messages: str) -> set[Path]:
    """Dep-info files of the units listed in ``cargo --message-format=json`` output.

    Cargo reports every unit of the build, fresh or rebuilt, as a
    ``compiler-artifact`` message. The unit's ``.d`` file sits next to its
    artifacts: ``deps/libfoo-<hash>.rmeta`` -> ``deps/foo-<hash>.d``,
    ``build/foo-<hash>/build_script_build-<hash>`` -> same name + ``.d``.
    Only candidates that exist on disk are returned.
    """
    dep_files: set[Path] = set()
    for line in messages.splitlines():
        line = line.strip()
        if not line.startswith("{"):
            continue
        try:
            message = json.loads(line)
        except json.JSONDecodeError:
            logger.debug("Skipping non-JSON cargo output line: %s", line[:200])
            continue
        if message.get("reason") != "compiler-artifact":
            continue
        for filename in message.get("filenames") or []:
            artifact = Path(filename)
            stem = artifact.name.split(".", 1)[0]
            candidates = [artifact.parent / f"{stem}.d"]
            if stem.startswith("lib"):
                candidates.append(artifact.parent / f"{stem[3:]}.d")
            dep_files.update(c for c in candidates if c.is_file())
    return dep_files


class DepInfoResolver(FileResolver):
    """
    Resolve compiled files by running ``cargo check`` and reading dep-info.

    Only the dep-info files of units the build reports are read, so ``.d``
    files left in ``workspace.target_dir`` by builds with other feature sets
    are ignored. Without a target dir cargo builds into a fresh temporary
    directory.

    With ``run_cargo=False`` no build is started and every dep-info file
    already present in ``workspace.target_dir`` is read; that directory must
    hold a single build.
    """

    def __init__(self, cargo: str = "cargo", run_cargo: bool = True) -> None:
        self.cargo = cargo
        self.run_cargo = run_cargo

    def resolve(self, config: ScanConfig, workspace: Workspace) -> set[Path]:
        if not self.run_cargo:
            if workspace.target_dir is None or not workspace.target_dir.is_dir():
                raise ResolutionError(
                    f"No dep-info directory to read: {workspace.target_dir}"
                )
            return read_dep_info_dir(workspace.target_dir, workspace.root)

        if workspace.target_dir is not None:
            return self._check(config, workspace, workspace.target_dir)

        with tempfile.TemporaryDirectory(prefix="geiger-report-") as tmpdir:
            return self._check(config, workspace, Path(tmpdir))

    def _check(self, config: ScanConfig, workspace: Workspace, target_dir: Path) -> set[Path]:
        cmd = [
            self.cargo,
            "check",
            "--message-format=json",
            "--manifest-path",
            str(workspace.manifest_path),
            "--target-dir",
            str(target_dir),
            *config.cargo_args(),
        ]
        logger.info("Running %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                cwd=str(workspace.root),
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as e:
            raise ResolutionError(f"cargo executable not found: {self.cargo}") from e
        if result.returncode != 0:
            stderr_tail = result.stderr.strip().splitlines()[-20:]
            raise ResolutionError(
                f"cargo check failed (exit {result.returncode}):\n" + "\n".join(stderr_tail)
            )
        dep_files = artifact_dep_info_files(result.stdout)
        logger.debug("cargo check reported %d dep-info files", len(dep_files))
        return read_dep_info_files(dep_files, workspace.root)
