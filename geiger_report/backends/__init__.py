"""Default collaborators: dep-info resolver, JSON findings finder, tree table."""

from geiger_report.backends.base import FileResolver, PackageGraph, TableRenderer, UnsafeFinder
from geiger_report.backends.dep_info import DepInfoResolver
from geiger_report.backends.findings import JsonFindingsFinder
from geiger_report.backends.table import TreeTableRenderer

__all__ = [
    "DepInfoResolver",
    "FileResolver",
    "JsonFindingsFinder",
    "PackageGraph",
    "TableRenderer",
    "TreeTableRenderer",
    "UnsafeFinder",
]
