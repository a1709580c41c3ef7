import subprocess
from concurrent.futures import ThreadPoolExecutor

import pytest

from go_import_sorter.exceptions import ClassificationLoadError
from go_import_sorter.exceptions import ParseError
from go_import_sorter.parser import parse_source
from go_import_sorter.rules import Category
from go_import_sorter.rules import ClassificationPolicy
from go_import_sorter.rules import ImportRecord
from go_import_sorter.rules import StandardPackageLoader
from go_import_sorter.rules import classify_import
from go_import_sorter.rules import count_imports
from go_import_sorter.rules import extract_imports
from go_import_sorter.rules import list_standard_packages
from go_import_sorter.rules import split_imports


SOURCE = b'''package demo

import "fmt"

import (
\t"os" // files
\tx "github.com/acme/lib"
\t. "strings"
\t_ "net/http/pprof"
)

import `path/filepath`

func main() {}
'''


def test_parse_source_exposes_package_and_imports():
    source = parse_source(SOURCE)
    assert source.package_name == "demo"
    assert len(source.import_declarations) == 3
    assert len(list(source.import_specs())) == 6
    assert source.text(source.package_clause) == b"package demo"


def test_extract_imports_keeps_source_order_and_aliases():
    records = extract_imports(parse_source(SOURCE))
    assert records == [
        ImportRecord('"fmt"'),
        ImportRecord('"os"'),
        ImportRecord('"github.com/acme/lib"', "x"),
        ImportRecord('"strings"', "."),
        ImportRecord('"net/http/pprof"', "_"),
        ImportRecord("`path/filepath`"),
    ]


def test_parse_error_carries_position():
    with pytest.raises(ParseError) as excinfo:
        parse_source(b'package main\n\nimport (\n\t"fmt"\n\nfunc main() {}\n', filename="broken.go")
    err = excinfo.value
    assert err.filename == "broken.go"
    assert err.line is not None and err.line >= 1
    assert "broken.go:" in str(err)


def test_parse_error_without_package_clause():
    with pytest.raises(ParseError):
        parse_source(b"func main() {}\n")


def test_import_record_render_and_unquoted():
    assert ImportRecord('"fmt"').render() == '"fmt"'
    assert ImportRecord('"github.com/acme/lib"', "lib2").render() == 'lib2 "github.com/acme/lib"'
    assert ImportRecord("`os`").unquoted == "os"


def test_classify_imports(policy):
    assert classify_import(ImportRecord('"fmt"'), policy) is Category.STANDARD
    assert classify_import(ImportRecord('"net/http/httptest"'), policy) is Category.STANDARD
    assert classify_import(ImportRecord('"github.com/stretchr/testify"'), policy) is Category.THIRD_PARTY
    assert classify_import(ImportRecord('"github.com/bonsai-oss/goimportssort/package1"'), policy) is Category.LOCAL


def test_local_prefix_is_a_substring_match():
    policy = ClassificationPolicy(frozenset({"fmt"}), ("github.com/acme/proj",))
    assert classify_import(ImportRecord('"github.com/acme/proj/internal/x"'), policy) is Category.LOCAL
    assert classify_import(ImportRecord('"example.org/mirror/github.com/acme/proj"'), policy) is Category.LOCAL
    assert classify_import(ImportRecord('"github.com/acme/other"'), policy) is Category.THIRD_PARTY


def test_local_prefix_takes_precedence_over_standard_library():
    policy = ClassificationPolicy(frozenset({"fmt"}), ("fmt",))
    assert classify_import(ImportRecord('"fmt"'), policy) is Category.LOCAL


def test_no_local_prefixes_disables_local_category():
    policy = ClassificationPolicy(frozenset({"fmt"}))
    assert classify_import(ImportRecord('"github.com/acme/proj"'), policy) is Category.THIRD_PARTY


def test_split_imports_partitions_records(policy):
    records = extract_imports(parse_source(SOURCE))
    buckets = split_imports(records, policy)
    assert set(buckets) == set(Category)
    assert count_imports(buckets) == len(records)
    flattened = [r for bucket in buckets.values() for r in bucket]
    assert sorted(flattened, key=lambda r: r.sort_key) == sorted(records, key=lambda r: r.sort_key)
    assert buckets[Category.THIRD_PARTY] == [
        ImportRecord('"github.com/acme/lib"', "x"),
        ImportRecord('"net/http/pprof"', "_"),
    ]


def _fake_go_list(calls, stdout="fmt\nos\nnet/http\n"):
    def fake_run(cmd, capture_output, text, check):
        calls.append(cmd)
        return subprocess.CompletedProcess(cmd, 0, stdout=stdout, stderr="")
    return fake_run


def test_list_standard_packages(monkeypatch):
    calls = []
    monkeypatch.setattr("subprocess.run", _fake_go_list(calls))
    assert list_standard_packages() == frozenset({"fmt", "os", "net/http"})
    assert calls == [["go", "list", "std"]]


def test_list_standard_packages_without_go(monkeypatch):
    def fake_run(cmd, capture_output, text, check):
        raise FileNotFoundError(cmd[0])
    monkeypatch.setattr("subprocess.run", fake_run)
    with pytest.raises(ClassificationLoadError):
        list_standard_packages()


def test_list_standard_packages_command_failure(monkeypatch):
    def fake_run(cmd, capture_output, text, check):
        raise subprocess.CalledProcessError(1, cmd, stderr="go: boom")
    monkeypatch.setattr("subprocess.run", fake_run)
    with pytest.raises(ClassificationLoadError, match="boom"):
        list_standard_packages()


def test_list_standard_packages_empty_output(monkeypatch):
    monkeypatch.setattr("subprocess.run", _fake_go_list([], stdout="\n"))
    with pytest.raises(ClassificationLoadError):
        list_standard_packages()


def test_loader_lists_packages_once_across_threads(monkeypatch):
    calls = []
    monkeypatch.setattr("subprocess.run", _fake_go_list(calls))
    loader = StandardPackageLoader()
    with ThreadPoolExecutor(max_workers=8) as executor:
        results = list(executor.map(lambda _: loader.load(), range(16)))
    assert len(calls) == 1
    assert all(r == frozenset({"fmt", "os", "net/http"}) for r in results)


def test_policy_build_uses_loader(monkeypatch):
    monkeypatch.setattr("subprocess.run", _fake_go_list([]))
    policy = ClassificationPolicy.build(["github.com/acme/proj", ""])
    assert policy.local_prefixes == ("github.com/acme/proj",)
    assert "fmt" in policy.standard_packages
