"""Top-level package for go-import-sorter.

This package exposes the core API for sorting Go import declarations into
standard library, third-party and local groups.
"""

from go_import_sorter.config import DEFAULT_ORDER
from go_import_sorter.config import find_module_name
from go_import_sorter.config import parse_order
from go_import_sorter.config import resolve_local_prefixes
from go_import_sorter.config import resolve_order
from go_import_sorter.core import BatchResult
from go_import_sorter.core import FileResult
from go_import_sorter.core import iter_go_files
from go_import_sorter.core import process
from go_import_sorter.core import process_file
from go_import_sorter.core import process_paths
from go_import_sorter.core import render_import_block
from go_import_sorter.core import replace_imports
from go_import_sorter.core import sort_imports
from go_import_sorter.exceptions import ClassificationLoadError
from go_import_sorter.exceptions import ConfigError
from go_import_sorter.exceptions import ParseError
from go_import_sorter.parser import parse_source
from go_import_sorter.rules import Category
from go_import_sorter.rules import ClassificationPolicy
from go_import_sorter.rules import ImportRecord
from go_import_sorter.rules import StandardPackageLoader
from go_import_sorter.rules import classify_import
from go_import_sorter.rules import extract_imports
from go_import_sorter.rules import list_standard_packages
from go_import_sorter.rules import split_imports


__all__ = [
    "DEFAULT_ORDER",
    "parse_order",
    "resolve_order",
    "find_module_name",
    "resolve_local_prefixes",
    "parse_source",
    "Category",
    "ImportRecord",
    "ClassificationPolicy",
    "StandardPackageLoader",
    "list_standard_packages",
    "extract_imports",
    "classify_import",
    "split_imports",
    "sort_imports",
    "render_import_block",
    "replace_imports",
    "process",
    "process_file",
    "process_paths",
    "iter_go_files",
    "FileResult",
    "BatchResult",
    "ParseError",
    "ConfigError",
    "ClassificationLoadError",
]
