"""
Tests for the solgraph command line interface.
"""

import json

from typer.testing import CliRunner

from solgraph import __version__
from solgraph.main import app

runner = CliRunner()


def _project(write_project):
    return write_project({
        "src/A.sol": "contract A { function foo() internal {} }",
        "src/B.sol": 'import "./A.sol";\ncontract B is A { function bar() public { foo(); } }',
    })


class TestGraphCommand:
    """solgraph graph"""

    def test_prints_dot(self, write_project):
        root = _project(write_project)

        result = runner.invoke(app, ["graph", str(root / "src/A.sol"), str(root / "src/B.sol"), "--root", str(root)])

        assert result.exit_code == 0
        assert result.stdout.startswith("digraph G {")
        assert '"B.bar" -> "A.foo"' in result.stdout

    def test_follows_imports(self, write_project):
        root = _project(write_project)

        result = runner.invoke(app, ["graph", "src/B.sol", "--imports", "--root", str(root)])

        assert result.exit_code == 0
        assert '"B.bar" -> "A.foo"' in result.stdout

    def test_writes_output_file(self, write_project):
        root = _project(write_project)
        output = root / "graph.dot"

        result = runner.invoke(
            app, ["graph", str(root / "src/A.sol"), "--root", str(root), "--dark", "-o", str(output)]
        )

        assert result.exit_code == 0
        assert "#2e3e56" in output.read_text()

    def test_syntax_error_exits_nonzero(self, write_project):
        root = write_project({"Broken.sol": "contract A { function f( }"})

        result = runner.invoke(app, ["graph", str(root / "Broken.sol"), "--root", str(root)])

        assert result.exit_code == 1


class TestImportsCommand:
    """solgraph imports"""

    def test_lists_closure(self, write_project):
        root = _project(write_project)

        result = runner.invoke(app, ["imports", "src/B.sol", "--root", str(root)])

        assert result.exit_code == 0
        assert result.stdout.splitlines() == [
            str((root / "src/B.sol").resolve()),
            str((root / "src/A.sol").resolve()),
        ]

    def test_json_output(self, write_project):
        root = _project(write_project)

        result = runner.invoke(app, ["imports", "src", "src/B.sol", "--root", str(root), "--json"])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert len(payload["files"]) == 2
        assert payload["skipped"] == [str((root / "src").resolve())]

    def test_unresolved_import_exits_nonzero(self, write_project):
        root = write_project({"A.sol": 'import "./Missing.sol";\ncontract A {}'})

        result = runner.invoke(app, ["imports", "A.sol", "--root", str(root)])

        assert result.exit_code == 1


class TestLinearizeCommand:
    """solgraph linearize"""

    SOURCE = """
        contract A {}
        contract B is A {}
        contract C is B {}
    """

    def test_text_output(self, write_project):
        root = write_project({"C.sol": self.SOURCE})

        result = runner.invoke(app, ["linearize", str(root / "C.sol")])

        assert result.exit_code == 0
        assert "C: C -> B -> A -> 0_global" in result.stdout.splitlines()

    def test_json_output(self, write_project):
        root = write_project({"C.sol": self.SOURCE})

        result = runner.invoke(app, ["linearize", str(root / "C.sol"), "--json"])

        entries = json.loads(result.stdout)
        assert entries[0] == {"contract": "A", "kind": "contract", "linearization": ["A", "0_global"]}
        assert [entry["contract"] for entry in entries] == ["A", "B", "C"]


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.stdout
