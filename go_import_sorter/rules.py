"""Rules module for go-import-sorter.

This module defines how Go imports are extracted from a parsed file and
classified into standard library, third-party and local categories.
"""

from dataclasses import dataclass
import enum
import logging
import subprocess
import threading
from typing import Dict
from typing import FrozenSet
from typing import Iterable
from typing import List
from typing import Optional
from typing import Tuple

from go_import_sorter.exceptions import ClassificationLoadError
from go_import_sorter.parser import GoSource

LOG = logging.getLogger(__name__)


class Category(enum.Enum):
    """Import categories, keyed by their character in an order string."""

    STANDARD = "i"
    THIRD_PARTY = "e"
    LOCAL = "l"


@dataclass(frozen=True)
class ImportRecord:
    """A single import spec."""

    path: str
    alias: str = ""

    @property
    def unquoted(self) -> str:
        return self.path.strip('"`')

    @property
    def sort_key(self) -> Tuple[str, str]:
        return self.path, self.alias

    def render(self) -> str:
        if not self.alias:
            return self.path
        return f"{self.alias} {self.path}"


def list_standard_packages(go_binary: str = "go") -> FrozenSet[str]:
    """Return the import paths of all Go standard library packages.

    Raises:
        ClassificationLoadError: If the go tool is missing or fails.
    """
    cmd = [go_binary, "list", "std"]
    try:
        proc = subprocess.run(cmd, capture_output=True, text=True, check=True)
    except FileNotFoundError as exc:
        raise ClassificationLoadError(f"{go_binary} not found; it is required to list standard packages") from exc
    except subprocess.CalledProcessError as exc:
        raise ClassificationLoadError(f"'{' '.join(cmd)}' failed: {(exc.stderr or '').strip()}") from exc

    packages = frozenset(line.strip() for line in proc.stdout.splitlines() if line.strip())
    if not packages:
        raise ClassificationLoadError(f"'{' '.join(cmd)}' returned no packages")
    LOG.debug("Loaded %d standard packages", len(packages))
    return packages


class StandardPackageLoader:
    """Lists standard packages once; safe to call from several threads."""

    def __init__(self, go_binary: str = "go"):
        self.go_binary = go_binary
        self._lock = threading.Lock()
        self._packages: Optional[FrozenSet[str]] = None

    def load(self) -> FrozenSet[str]:
        with self._lock:
            if self._packages is None:
                self._packages = list_standard_packages(self.go_binary)
            return self._packages


@dataclass(frozen=True)
class ClassificationPolicy:
    """Standard package set plus local prefixes, immutable once built."""

    standard_packages: FrozenSet[str]
    local_prefixes: Tuple[str, ...] = ()

    @classmethod
    def build(cls, local_prefixes: Iterable[str] = (),
              loader: Optional[StandardPackageLoader] = None) -> "ClassificationPolicy":
        loader = loader or StandardPackageLoader()
        return cls(loader.load(), tuple(p for p in local_prefixes if p))


def extract_imports(source: GoSource) -> List[ImportRecord]:
    """Return one ImportRecord per import spec, in source order."""
    records: List[ImportRecord] = []
    for spec in source.import_specs():
        path = spec.child_by_field_name("path")
        name = spec.child_by_field_name("name")
        alias = source.text(name).decode("utf-8") if name is not None else ""
        records.append(ImportRecord(source.text(path).decode("utf-8"), alias))
    return records


def classify_import(record: ImportRecord, policy: ClassificationPolicy) -> Category:
    """Classify an import as local, standard or third-party, first match wins."""
    if any(prefix in record.path for prefix in policy.local_prefixes):
        return Category.LOCAL
    if record.unquoted in policy.standard_packages:
        return Category.STANDARD
    return Category.THIRD_PARTY


def split_imports(records: Iterable[ImportRecord], policy: ClassificationPolicy) -> Dict[Category, List[ImportRecord]]:
    """Split import records into one bucket per category.

    Returns:
        A dictionary holding all three categories, empty or not.
    """
    grouped: Dict[Category, List[ImportRecord]] = {category: [] for category in Category}
    for record in records:
        grouped[classify_import(record, policy)].append(record)
    return grouped


def count_imports(buckets: Dict[Category, List[ImportRecord]]) -> int:
    return sum(len(records) for records in buckets.values())
