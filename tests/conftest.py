import pytest

from go_import_sorter.rules import ClassificationPolicy


STD_PACKAGES = frozenset({
    "bytes",
    "database/sql/driver",
    "errors",
    "fmt",
    "io",
    "log",
    "net/http",
    "net/http/httptest",
    "os",
    "path/filepath",
    "sort",
    "strings",
    "sync",
})

LOCAL_PREFIX = "github.com/bonsai-oss/goimportssort"


@pytest.fixture
def policy():
    return ClassificationPolicy(STD_PACKAGES, (LOCAL_PREFIX,))
