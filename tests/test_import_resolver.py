"""
Tests for import closure resolution.
"""

import pytest

from solgraph.exceptions import (
    AmbiguousRemapping,
    EmptyInputError,
    InvalidImportPath,
    UnresolvedImport,
    UnresolvedRemapping,
)
from solgraph.resolution import ImportResolver, resolve_imports


def _abs(root, relative):
    return str((root / relative).resolve())


class TestRelativeImports:
    """Relative imports and traversal order"""

    def test_depth_first_discovery_order(self, write_project):
        root = write_project({
            "src/A.sol": 'import "./B.sol";\nimport "./C.sol";\ncontract A {}',
            "src/B.sol": 'import "./lib/D.sol";\ncontract B {}',
            "src/C.sol": "contract C {}",
            "src/lib/D.sol": 'import "../C.sol";\ncontract D {}',
        })

        closure = ImportResolver(root).profile(["src/A.sol"])

        assert closure == [
            _abs(root, "src/A.sol"),
            _abs(root, "src/B.sol"),
            _abs(root, "src/lib/D.sol"),
            _abs(root, "src/C.sol"),
        ]

    def test_import_cycle_terminates(self, write_project):
        root = write_project({
            "A.sol": 'import "./B.sol";\ncontract A {}',
            "B.sol": 'import "./A.sol";\ncontract B {}',
        })

        closure = ImportResolver(root).profile(["A.sol"])

        assert closure == [_abs(root, "A.sol"), _abs(root, "B.sol")]

    def test_result_independent_of_cwd(self, write_project, tmp_path_factory, monkeypatch):
        root = write_project({
            "src/A.sol": 'import "./B.sol";\ncontract A {}',
            "src/B.sol": "contract B {}",
        })
        expected = ImportResolver(root).profile(["src/A.sol"])

        monkeypatch.chdir(tmp_path_factory.mktemp("elsewhere"))

        assert ImportResolver(root).profile(["src/A.sol"]) == expected

    def test_seeds_are_deduplicated(self, write_project):
        root = write_project({
            "A.sol": 'import "./B.sol";\ncontract A {}',
            "B.sol": "contract B {}",
        })

        closure = ImportResolver(root).profile(["A.sol", "B.sol", "A.sol"])

        assert closure == [_abs(root, "A.sol"), _abs(root, "B.sol")]


class TestRemappedImports:
    """remappings.txt and node_modules lookups"""

    def test_remapping_prefix_is_replaced(self, write_project):
        root = write_project({
            "remappings.txt": "forge-std/=lib/forge-std/src/\n@oz/=lib/openzeppelin/\n",
            "src/A.sol": 'import "@oz/token/ERC20.sol";\ncontract A {}',
            "lib/openzeppelin/token/ERC20.sol": "contract ERC20 {}",
        })

        closure = ImportResolver(root).profile(["src/A.sol"])

        assert closure == [_abs(root, "src/A.sol"), _abs(root, "lib/openzeppelin/token/ERC20.sol")]

    def test_nearest_manifest_wins(self, write_project):
        root = write_project({
            "remappings.txt": "@oz/=lib/wrong/\n",
            "packages/core/remappings.txt": "@oz/=deps/oz/\n",
            "packages/core/src/A.sol": 'import "@oz/Token.sol";\ncontract A {}',
            "packages/core/deps/oz/Token.sol": "contract Token {}",
        })

        closure = ImportResolver(root).profile(["packages/core/src/A.sol"])

        assert closure[1] == _abs(root, "packages/core/deps/oz/Token.sol")

    def test_node_modules_fallback(self, write_project):
        root = write_project({
            "contracts/A.sol": 'import "pkg/Lib.sol";\ncontract A {}',
            "node_modules/pkg/Lib.sol": "library Lib {}",
        })

        closure = ImportResolver(root).profile(["contracts/A.sol"])

        assert closure[1] == _abs(root, "node_modules/pkg/Lib.sol")

    def test_ambiguous_remapping_line(self, write_project):
        root = write_project({
            "remappings.txt": "a=b=c\n",
            "A.sol": 'import "@oz/Token.sol";\ncontract A {}',
        })

        with pytest.raises(AmbiguousRemapping):
            ImportResolver(root).profile(["A.sol"])

    def test_missing_manifest(self, write_project):
        root = write_project({"A.sol": 'import "@oz/Token.sol";\ncontract A {}'})

        with pytest.raises(UnresolvedRemapping):
            ImportResolver(root).profile(["A.sol"])


class TestInvalidInputs:
    """Errors and diagnostics"""

    def test_missing_import_target(self, write_project):
        root = write_project({"A.sol": 'import "./Missing.sol";\ncontract A {}'})

        with pytest.raises(UnresolvedImport):
            ImportResolver(root).profile(["A.sol"])

    def test_import_outside_root(self, write_project, tmp_path):
        write_project({
            "project/src/A.sol": 'import "../../Outside.sol";\ncontract A {}',
            "Outside.sol": "contract Outside {}",
        })

        with pytest.raises(InvalidImportPath):
            ImportResolver(tmp_path / "project").profile(["src/A.sol"])

    def test_non_solidity_seed(self, write_project):
        root = write_project({"notes.txt": "not solidity"})

        with pytest.raises(InvalidImportPath):
            ImportResolver(root).profile(["notes.txt"])

    def test_directory_seed_is_skipped(self, write_project):
        root = write_project({"src/A.sol": "contract A {}"})

        resolver = ImportResolver(root)
        closure = resolver.profile(["src", "src/A.sol"])

        assert closure == [_abs(root, "src/A.sol")]
        assert [d.path for d in resolver.skipped] == [_abs(root, "src")]

    def test_empty_input(self):
        with pytest.raises(EmptyInputError):
            resolve_imports([])
