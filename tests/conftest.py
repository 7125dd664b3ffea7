"""
Pytest configuration for the solgraph test suite.

This conftest.py provides:
- Machine-mode logging (suppresses console output)
- Fixtures writing Solidity projects into temporary directories
- A helper building call graphs from inline sources
"""

import os
import textwrap
from pathlib import Path
from typing import Dict

import pytest

from solgraph.logging_config import setup_logging
from solgraph.resolution import build_call_graph
from solgraph.schemas import GraphOptions


def pytest_configure(config):
    """Run tests in machine mode."""
    os.environ.setdefault("SOLGRAPH_MACHINE_MODE", "1")


@pytest.fixture(autouse=True)
def setup_test_logging():
    """
    Machine mode by default - suppress console logs for clean test output.
    """
    setup_logging(level="DEBUG", suppress_console=True)


@pytest.fixture
def write_project(tmp_path):
    """
    Write a Solidity project below tmp_path.

    Usage:
        def test_something(write_project):
            root = write_project({"src/A.sol": "contract A {}"})
    """
    def write(files: Dict[str, str]) -> Path:
        for relative, content in files.items():
            path = tmp_path / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(content))
        return tmp_path

    return write


@pytest.fixture
def build_graph():
    """
    Build a call graph from inline Solidity sources.

    Usage:
        def test_something(build_graph):
            result = build_graph("contract A { ... }", enable_modifier_edges=True)
    """
    def build(*sources: str, **options):
        return build_call_graph(
            [textwrap.dedent(source) for source in sources],
            GraphOptions(source_strings=True, **options),
        )

    return build
