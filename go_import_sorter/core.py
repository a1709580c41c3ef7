#!/usr/bin/env python3
"""Core utilities for go-import-sorter. This module
sorts categorised imports, renders the canonical import block and splices it
back into the source in place of the original import declarations. It also
runs the pipeline over single files and, concurrently, over whole directories.
"""
from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from dataclasses import field
import logging
from pathlib import Path
import re
from typing import Dict
from typing import Iterable
from typing import Iterator
from typing import List
from typing import Optional
from typing import Tuple

from tree_sitter import Node

from go_import_sorter.config import CategoryOrder
from go_import_sorter.config import DEFAULT_ORDER
from go_import_sorter.config import parse_order
from go_import_sorter.parser import GoSource
from go_import_sorter.parser import parse_source
from go_import_sorter.rules import Category
from go_import_sorter.rules import ClassificationPolicy
from go_import_sorter.rules import ImportRecord
from go_import_sorter.rules import count_imports
from go_import_sorter.rules import extract_imports
from go_import_sorter.rules import split_imports

LOG = logging.getLogger(__name__)

_LINE_TAIL = re.compile(rb"\A[ \t;]*")
_BLANK_LINES = re.compile(rb"\A(?:[ \t]*\r?\n)+")


def sort_imports(buckets: Dict[Category, List[ImportRecord]], order: CategoryOrder) -> List[List[ImportRecord]]:
    """Return the buckets in the given order, each sorted by path then alias."""
    return [sorted(buckets.get(category, []), key=lambda r: r.sort_key) for category in order]


def render_import_block(groups: Iterable[List[ImportRecord]]) -> bytes:
    """Render sorted groups as one parenthesised import declaration.

    Empty groups are skipped and a single blank line separates the others.
    """
    rendered = ["".join(f"\t{record.render()}\n" for record in group) for group in groups if group]
    return ("import (\n" + "\n".join(rendered) + ")").encode("utf-8")


def _is_import(node: Node) -> bool:
    return node.type == "import_declaration"


def _comment_runs(nodes: List[Node]) -> Iterator[List[int]]:
    """Yield index lists of comments on consecutive lines."""
    run: List[int] = []
    for i, node in enumerate(nodes):
        if node.type == "comment" and run and node.start_point[0] <= nodes[run[-1]].end_point[0] + 1:
            run.append(i)
            continue
        if run:
            yield run
        run = [i] if node.type == "comment" else []
    if run:
        yield run


def _removed_nodes(nodes: List[Node]) -> List[bool]:
    """Mark import declarations and the comments attached to them.

    A comment belongs to an import declaration when it sits on the same line,
    directly above it, or directly below it unless it is the doc comment of
    the declaration that follows.
    """
    removed = [_is_import(node) for node in nodes]
    for run in _comment_runs(nodes):
        before = nodes[run[0] - 1] if run[0] > 0 else None
        after = nodes[run[-1] + 1] if run[-1] + 1 < len(nodes) else None

        # comments on the closing line of an import
        while run and before is not None and removed[run[0] - 1] and \
                nodes[run[0]].start_point[0] == before.end_point[0]:
            removed[run[0]] = True
            before = nodes[run[0]]
            run = run[1:]
        if not run:
            continue

        last_row = nodes[run[-1]].end_point[0]
        adjacent_after = after is not None and after.start_point[0] == last_row + 1
        if adjacent_after and _is_import(after):
            attached = True
        elif before is not None and removed[run[0] - 1] and \
                nodes[run[0]].start_point[0] == before.end_point[0] + 1:
            attached = not adjacent_after
        else:
            attached = False
        if attached:
            for i in run:
                removed[i] = True
    return removed


def _strip_leading_blank_lines(text: bytes) -> bytes:
    text = _LINE_TAIL.sub(b"", text, count=1)
    return _BLANK_LINES.sub(b"", text, count=1)


def replace_imports(source: GoSource, new_imports: bytes) -> bytes:
    """Replace every import declaration of ``source`` with ``new_imports``.

    The block is placed right after the package clause line, followed by a
    blank line. Comments attached to the removed declarations are dropped;
    other comments from the import region follow the new block.
    """
    src = source.src
    nodes = source.declarations
    package = source.package_clause
    start = next(i for i, node in enumerate(nodes) if node.start_byte == package.start_byte) + 1

    head_end = package.end_byte
    while start < len(nodes) and nodes[start].type == "comment" and \
            nodes[start].start_point[0] == package.end_point[0]:
        head_end = max(head_end, nodes[start].end_byte)
        start += 1

    body = nodes[start:]
    removed = _removed_nodes(body)
    last = max((i for i, flag in enumerate(removed) if flag), default=-1)
    region_end = body[last].end_byte if last >= 0 else head_end

    # kept nodes of the import region, copied verbatim in runs
    pieces: List[bytes] = []
    group: List[Node] = []
    for node, flag in zip(body[:last + 1], removed):
        if not flag:
            group.append(node)
        elif group:
            group_start = max(source.line_start(group[0].start_byte), head_end)
            pieces.append(src[group_start:group[-1].end_byte].rstrip(b"\r"))
            group = []

    rest = _strip_leading_blank_lines(src[region_end:])
    if rest.strip():
        pieces.append(rest)

    # follow the line ending of the package line
    newline_at = src.find(b"\n", head_end)
    eol = b"\r\n" if newline_at > 0 and src[newline_at - 1:newline_at] == b"\r" else b"\n"
    blank = eol + eol

    output = src[:head_end].rstrip(b"\r") + blank + new_imports.replace(b"\n", eol)
    if pieces:
        output += blank + blank.join(pieces)
    if not output.endswith(b"\n"):
        output += eol
    return output


def process(src: bytes, policy: ClassificationPolicy, order: Optional[CategoryOrder] = None,
            filename: str = "<source>") -> bytes:
    """Sort the imports of a Go source file.

    Returns the rewritten source, or ``src`` itself when the file has no imports.

    Raises:
        ParseError: If ``src`` is not valid Go.
    """
    order = order or parse_order(DEFAULT_ORDER)
    source = parse_source(src, filename)
    buckets = split_imports(extract_imports(source), policy)
    total = count_imports(buckets)
    if total == 0:
        LOG.debug("[%s] No import statements found.", filename)
        return src

    LOG.debug("[%s] Found %d imports: %s", filename, total,
              ", ".join(f"{c.name.lower()}={len(buckets[c])}" for c in order))
    groups = sort_imports(buckets, order)
    return replace_imports(source, render_import_block(groups))


@dataclass
class FileResult:
    path: Path
    source: bytes
    output: bytes

    @property
    def changed(self) -> bool:
        return self.source != self.output


def process_file(file_path: str, policy: ClassificationPolicy, order: Optional[CategoryOrder] = None) -> FileResult:
    """Read a single Go file and sort its imports. The file is not written."""
    path = Path(file_path)
    LOG.debug("Processing %s", path)
    src = path.read_bytes()
    return FileResult(path, src, process(src, policy, order, filename=str(path)))


def iter_go_files(root: str) -> Iterator[Path]:
    """Yield Go files under the given root directory, skipping dotfiles."""
    for path in sorted(Path(root).rglob('*.go')):
        if not path.is_file() or path.name.startswith('.'):
            continue
        yield path


def collect_files(paths: Iterable[str]) -> List[Path]:
    """Expand directories into the Go files they contain; files are kept as given."""
    files: List[Path] = []
    for p in paths:
        path = Path(p)
        if path.is_dir():
            files.extend(iter_go_files(str(path)))
        else:
            files.append(path)
    return files


@dataclass
class BatchResult:
    results: List[FileResult] = field(default_factory=list)
    errors: List[Tuple[Path, Exception]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> None:
        """Raise all per-file failures at once as an ExceptionGroup."""
        if self.errors:
            raise ExceptionGroup(f"{len(self.errors)} file(s) failed",
                                 [exc for _, exc in self.errors])


def process_paths(paths: Iterable[str], policy: ClassificationPolicy, order: Optional[CategoryOrder] = None,
                  max_workers: Optional[int] = None) -> BatchResult:
    """Process files and directories concurrently, one task per file.

    A failing file never stops the others; its error is recorded in the
    returned BatchResult. Results keep the order of the expanded file list.
    """
    files = collect_files(paths)
    batch = BatchResult()
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [(path, executor.submit(process_file, str(path), policy, order)) for path in files]
        for path, future in futures:
            try:
                batch.results.append(future.result())
            except Exception as exc:
                LOG.debug("[%s] failed: %s", path, exc)
                batch.errors.append((path, exc))
    return batch
