"""Plain-text dependency tree with unsafe counts (table output mode)."""

from __future__ import annotations

import sys
from typing import TextIO

import click

from geiger_report.backends.base import PackageGraph, TableRenderer, UnsafeFinder
from geiger_report.models.metrics import CounterBlock, MetricsUnavailable
from geiger_report.models.package import PackageId, PackageInfo
from geiger_report.models.scan import ScanMode, Workspace

SYMBOL_FORBIDS = ":)"
SYMBOL_UNSAFE = "!"
SYMBOL_CLEAN = "?"


class TreeTableRenderer(TableRenderer):
    """Renders ``<functions> <exprs> <impls> <traits> <methods> <symbol> <tree>`` rows.

    Runs its own workspace scan; nothing is shared with the report pipeline.
    """

    def __init__(self, finder: UnsafeFinder, stream: TextIO | None = None) -> None:
        self.finder = finder
        self._stream = stream

    def render(self, graph: PackageGraph, root_package_id: PackageId, workspace: Workspace) -> None:
        findings = self.finder.find(workspace, ScanMode.FULL)
        packages = {info.id: info for info in graph.walk(root_package_id)}

        rows: list[str] = []
        seen: set[PackageId] = set()

        def visit(pid: PackageId, depth: int) -> None:
            info: PackageInfo = packages[pid]
            lookup = graph.package_metrics(pid, findings)
            if isinstance(lookup, MetricsUnavailable):
                counters, symbol = CounterBlock(), SYMBOL_CLEAN
            else:
                counters = CounterBlock()
                for m in lookup.files.values():
                    counters = counters + m.counters
                entry_points = [m for m in lookup.files.values() if m.is_crate_entry_point]
                if entry_points and all(m.forbids_unsafe for m in entry_points):
                    symbol = SYMBOL_FORBIDS
                elif counters.unsafe_total:
                    symbol = SYMBOL_UNSAFE
                else:
                    symbol = SYMBOL_CLEAN
            repeat = " (*)" if pid in seen else ""
            rows.append(
                f"{counters.functions.unsafe:>5} {counters.exprs.unsafe:>6} "
                f"{counters.item_impls.unsafe:>5} {counters.item_traits.unsafe:>6} "
                f"{counters.methods.unsafe:>7} {symbol:>2} {'    ' * depth}{pid.name} {pid.version}{repeat}"
            )
            if repeat:
                return
            seen.add(pid)
            for dep in sorted(info.all_dependencies()):
                if dep in packages:
                    visit(dep, depth + 1)

        visit(root_package_id, 0)
        out = self._stream if self._stream is not None else sys.stdout
        click.echo("Functions  Expressions  Impls  Traits  Methods  Dependency", file=out)
        for row in rows:
            click.echo(row, file=out)
        click.echo(
            f"\nSymbols: {SYMBOL_FORBIDS} forbids unsafe, {SYMBOL_UNSAFE} uses unsafe, "
            f"{SYMBOL_CLEAN} no unsafe found",
            file=out,
        )
