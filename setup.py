#!/usr/bin/env python3
import setuptools

setuptools.setup(
    name="go-import-sorter",
    version="0.1.0",
    packages=["go_import_sorter"],
    python_requires=">=3.11",
    install_requires=[
        "click>=8.0",
        "tree-sitter>=0.23",
        "tree-sitter-go>=0.23",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "gis = go_import_sorter.cli:main",
        ],
    },
    author="",
    description="Command-line tool to sort Go imports into standard library, third-party and local groups",
    license="MIT",
)
