"""Tests for TreeTableRenderer."""

from __future__ import annotations

import io

from geiger_report.backends.table import SYMBOL_CLEAN, SYMBOL_FORBIDS, SYMBOL_UNSAFE, TreeTableRenderer
from geiger_report.models.scan import ScanMode
from geiger_report.testing import StaticFinder, StaticGraph


class TestTreeTableRenderer:
    def test_renders_tree_with_symbols(self, workspace, fm):
        graph = StaticGraph()
        shared = graph.add("shared", files=["/ws/shared/lib.rs"])
        ffi = graph.add("ffi", deps=[shared], files=["/ws/ffi/lib.rs"])
        safe = graph.add("safe", deps=[shared], files=["/ws/safe/lib.rs"])
        root = graph.add("app", deps=[ffi, safe])
        finder = StaticFinder(
            {
                "/ws/ffi/lib.rs": fm(unsafe_fns=2, unsafe_exprs=9),
                "/ws/safe/lib.rs": fm(entry_point=True, forbids=True),
                "/ws/shared/lib.rs": fm(),
            }
        )
        out = io.StringIO()

        TreeTableRenderer(finder, stream=out).render(graph, root, workspace)

        lines = out.getvalue().splitlines()
        assert lines[0].startswith("Functions")
        rows = {line.split()[-2] if "(*)" not in line else line.split()[-3]: line for line in lines[1:6]}
        assert rows["app"].split()[5:7] == [SYMBOL_CLEAN, "app"]
        assert SYMBOL_UNSAFE in rows["ffi"].split()
        assert rows["ffi"].split()[:2] == ["2", "9"]
        assert SYMBOL_FORBIDS in rows["safe"].split()
        assert SYMBOL_CLEAN in rows["shared"].split()
        assert sum("(*)" in line for line in lines) == 1
        assert finder.modes == [ScanMode.FULL]

    def test_indentation_follows_depth(self, workspace):
        graph = StaticGraph()
        leaf = graph.add("leaf")
        root = graph.add("app", deps=[leaf])
        out = io.StringIO()

        TreeTableRenderer(StaticFinder(), stream=out).render(graph, root, workspace)

        lines = out.getvalue().splitlines()
        app_line = next(line for line in lines if "app 0.1.0" in line)
        leaf_line = next(line for line in lines if "leaf 0.1.0" in line)
        assert leaf_line.index("leaf") - app_line.index("app") == 4
