#!/usr/bin/env python3
"""Command-line interface for go-import-sorter using Click."""

from importlib import metadata
import logging
import sys
from typing import Optional
from typing import Tuple

import click
from go_import_sorter import config
from go_import_sorter import core
from go_import_sorter.exceptions import ClassificationLoadError
from go_import_sorter.rules import ClassificationPolicy


try:
    VERSION = f"go-import-sorter {metadata.version('go_import_sorter')}"
except metadata.PackageNotFoundError:
    VERSION = "go-import-sorter"


def _handle_files(paths: Tuple[str, ...], policy: ClassificationPolicy, order: config.CategoryOrder,
                  list_changes: bool, write: bool, jobs: Optional[int]) -> int:
    """Sort imports of the given files and directories and report the results.

    Args:
        paths: Files or directories to process.
        policy: Classification policy shared by all files.
        order: Category order of the generated import block.
        list_changes: If True, print changed sources to stdout.
        write: If True, write changed sources back to their files.
        jobs: Maximum number of concurrent file tasks.
    Returns:
        0 if nothing is left to do, 1 if changes are required, 2 if an error occurred.
    """
    batch = core.process_paths(paths, policy, order, max_workers=jobs)
    exit_code = 0

    for file_path, exc in batch.errors:
        logging.error("[%s] ERROR: %s", file_path, exc)
        exit_code = 2

    for result in batch.results:
        if not result.changed:
            continue
        if list_changes:
            click.echo(result.output.decode("utf-8"), nl=False)
        if write:
            try:
                result.path.write_bytes(result.output)
            except OSError as exc:
                logging.error("[%s] ERROR: %s", result.path, exc)
                exit_code = 2
                continue
            logging.info("[%s] file updated.", result.path)
        elif not list_changes:
            logging.info("[%s] imports would be reordered.", result.path)
            exit_code = max(exit_code, 1)

    return exit_code


@click.command(help="Sort Go imports into standard, third-party and local groups.")
@click.argument("paths", nargs=-1, type=click.Path(exists=True, file_okay=True, dir_okay=True))
@click.option("-l", "--list", "list_changes", is_flag=True, help="Write results to stdout.")
@click.option("-w", "--write", is_flag=True, help="Write result to (source) file instead of stdout.")
@click.option("--local", default="",
              help="Put imports containing this string after 3rd-party packages; comma-separated list.")
@click.option("-o", "--order", default=config.DEFAULT_ORDER, show_default=True,
              help="Order of the import sections, e.g. 'lei' means local, external, inbuilt.")
@click.option("-j", "--jobs", type=click.IntRange(min=1), default=None, help="Number of files processed in parallel.")
@click.option("-v", "--verbose", is_flag=True, help="Increase verbosity.")
@click.option("-q", "--quiet", is_flag=True, help="Suppress non-error output.")
@click.version_option(version=VERSION, prog_name="go-import-sorter CLI")
def cli(paths: Tuple[str, ...], list_changes: bool, write: bool, local: str, order: str,
        jobs: Optional[int], verbose: bool, quiet: bool) -> None:
    # Configure logging only once
    if not logging.getLogger().handlers:
        if quiet:
            logging.basicConfig(level=logging.ERROR, format="%(message)s")
        elif verbose:
            logging.basicConfig(level=logging.DEBUG, format="%(asctime)s.%(msecs)03d %(message)s",
                                datefmt="%Y/%m/%d %H:%M:%S")
        else:
            logging.basicConfig(level=logging.INFO, format="%(message)s")

    if not paths:
        logging.error("please enter a path to fix")
        sys.exit(2)

    category_order = config.resolve_order(order)
    try:
        policy = ClassificationPolicy.build(config.resolve_local_prefixes(local))
    except ClassificationLoadError as exc:
        logging.error("ERROR: %s", exc)
        sys.exit(2)

    sys.exit(_handle_files(paths, policy, category_order, list_changes, write, jobs))


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    cli()
