"""Exceptions raised by go-import-sorter."""

from typing import Optional


class GoImportSorterError(Exception):
    """Base class for all errors raised by this package."""


class ParseError(GoImportSorterError):
    """The source is not valid Go; aborts processing of that file only."""

    def __init__(self, message: str, filename: str = "<source>", line: Optional[int] = None,
                 column: Optional[int] = None):
        self.message = message
        self.filename = filename
        self.line = line
        self.column = column
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.line is None:
            return f"{self.filename}: {self.message}"
        return f"{self.filename}:{self.line}:{self.column}: {self.message}"


class ConfigError(GoImportSorterError):
    """Invalid category order string."""


class ClassificationLoadError(GoImportSorterError):
    """The list of standard library packages could not be resolved."""
