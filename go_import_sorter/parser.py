"""Parser module for go-import-sorter.

This module wraps tree-sitter's Go grammar and exposes the parts of a parsed
file the import pipeline needs: the package clause, the top-level
declarations and the import specs.
"""

import threading
from typing import Iterator
from typing import List
from typing import Optional

import tree_sitter_go
from tree_sitter import Language
from tree_sitter import Node
from tree_sitter import Parser
from tree_sitter import Tree

from go_import_sorter.exceptions import ParseError


GO_LANGUAGE = Language(tree_sitter_go.language())

_local = threading.local()


def get_parser() -> Parser:
    """Return the tree-sitter parser of the calling thread."""
    parser = getattr(_local, "parser", None)
    if parser is None:
        parser = Parser(GO_LANGUAGE)
        _local.parser = parser
    return parser


def _first_error(node: Node) -> Optional[Node]:
    if node.type == "ERROR" or node.is_missing:
        return node
    if not node.has_error:
        return None
    for child in node.children:
        found = _first_error(child)
        if found is not None:
            return found
    return node


class GoSource:
    """A parsed Go file.

    Offsets handed out by this class are byte offsets into ``src``.
    """

    def __init__(self, src: bytes, tree: Tree, filename: str = "<source>"):
        self.src = src
        self.tree = tree
        self.filename = filename
        self.package_clause = self._find_package_clause()

    def _find_package_clause(self) -> Node:
        for node in self.tree.root_node.named_children:
            if node.type == "package_clause":
                return node
        raise ParseError("expected 'package' clause", self.filename)

    @property
    def package_name(self) -> str:
        for child in self.package_clause.named_children:
            if child.type == "package_identifier":
                return self.text(child).decode("utf-8")
        return ""

    @property
    def declarations(self) -> List[Node]:
        """Top-level named nodes in source order, comments included."""
        return list(self.tree.root_node.named_children)

    @property
    def import_declarations(self) -> List[Node]:
        return [node for node in self.declarations if node.type == "import_declaration"]

    def import_specs(self) -> Iterator[Node]:
        """Yield every import spec of the file in source order."""
        for decl in self.import_declarations:
            for child in decl.named_children:
                if child.type == "import_spec":
                    yield child
                elif child.type == "import_spec_list":
                    for spec in child.named_children:
                        if spec.type == "import_spec":
                            yield spec

    def text(self, node: Node) -> bytes:
        return self.src[node.start_byte:node.end_byte]

    def line_start(self, offset: int) -> int:
        """Return the offset of the first byte of the line holding ``offset``."""
        return self.src.rfind(b"\n", 0, offset) + 1


def parse_source(src: bytes, filename: str = "<source>") -> GoSource:
    """Parse Go source bytes.

    Args:
        src: Raw file contents.
        filename: Name used in error messages.

    Returns:
        A GoSource wrapping the syntax tree.

    Raises:
        ParseError: If the source contains syntax errors or has no package clause.
    """
    tree = get_parser().parse(src)
    error = _first_error(tree.root_node)
    if error is not None:
        row, column = error.start_point[0], error.start_point[1]
        message = f"missing {error.type}" if error.is_missing else "syntax error"
        raise ParseError(message, filename, row + 1, column + 1)
    return GoSource(src, tree, filename)
