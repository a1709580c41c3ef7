import logging
from pathlib import Path
import re
from typing import Optional
from typing import Tuple

from go_import_sorter.exceptions import ConfigError
from go_import_sorter.rules import Category

LOG = logging.getLogger(__name__)

DEFAULT_ORDER = "iel"

CategoryOrder = Tuple[Category, ...]

_MODULE_RE = re.compile(r'^\s*module\s+("(?:[^"\\]|\\.)*"|`[^`]*`|\S+)')


def parse_order(value: str) -> CategoryOrder:
    """Turn an order string such as 'iel' into a tuple of categories."""
    if sorted(value) != sorted(DEFAULT_ORDER):
        raise ConfigError(f"cannot parse the order argument given: {value!r}")
    return tuple(Category(char) for char in value)


def resolve_order(value: Optional[str]) -> CategoryOrder:
    """Like parse_order, but fall back to the default order with a warning."""
    try:
        return parse_order(value or "")
    except ConfigError as exc:
        LOG.warning("%s; using default order %r", exc, DEFAULT_ORDER)
        return parse_order(DEFAULT_ORDER)


def find_module_name(root: str) -> str:
    """Return the module path declared in root/go.mod, or '' if there is none."""
    go_mod = Path(root) / "go.mod"
    try:
        content = go_mod.read_text(encoding="utf-8")
    except OSError as exc:
        LOG.debug("Could not read %s: %s", go_mod, exc)
        return ""

    for line in content.splitlines():
        m = _MODULE_RE.match(line)
        if m:
            name = m.group(1)
            if name[0] in "\"`":
                name = name[1:-1]
            return name
    LOG.debug("No module line found in %s", go_mod)
    return ""


def resolve_local_prefixes(value: str, root: str = ".") -> Tuple[str, ...]:
    """Split a comma-separated prefix list, deriving it from go.mod when empty."""
    prefixes = tuple(p.strip() for p in value.split(",") if p.strip())
    if prefixes:
        return prefixes

    LOG.debug("No local prefix given, using module name")
    name = find_module_name(root)
    if not name:
        LOG.debug("Module name not found, local imports will not be grouped")
        return ()
    return (name,)
