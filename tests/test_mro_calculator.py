"""
Tests for C3 inheritance linearization.
"""

import pytest

from solgraph.exceptions import InconsistentInheritance
from solgraph.resolution import GLOBAL_CONTRACT, MROCalculator, linearize

G = GLOBAL_CONTRACT


class TestLinearization:
    """Ancestor orders"""

    def test_single_contract(self):
        assert linearize({"A": [G]}) == {"A": ["A", G]}

    def test_rightmost_base_comes_first(self):
        result = linearize({"A": [G], "B": [G], "C": [G, "A", "B"]})

        assert result["C"] == ["C", "B", "A", G]

    def test_chain(self):
        result = linearize({"A": [G], "B": [G, "A"], "C": [G, "B"]})

        assert result["C"] == ["C", "B", "A", G]

    def test_diamond(self):
        result = linearize({
            "A": [G],
            "B": [G, "A"],
            "C": [G, "A"],
            "D": [G, "B", "C"],
        })

        assert result["D"] == ["D", "C", "B", "A", G]

    def test_undeclared_base(self):
        result = linearize({"Token": [G, "IERC20"]})

        assert result["Token"] == ["Token", "IERC20", G]

    def test_only_declared_contracts_are_reported(self):
        result = linearize({"Token": [G, "IERC20"]})

        assert list(result) == ["Token"]

    def test_compute_mro_uses_construction_map(self):
        calculator = MROCalculator({"A": [G], "B": [G, "A"]})

        assert calculator.compute_mro("B") == ["B", "A", G]


class TestInconsistentInheritance:
    """Hierarchies without a linearization"""

    def test_base_order_conflict(self):
        # C lists B before its own base A
        with pytest.raises(InconsistentInheritance) as exc_info:
            linearize({"A": [G], "B": [G, "A"], "C": [G, "B", "A"]})

        assert exc_info.value.contract == "C"

    def test_cycle(self):
        with pytest.raises(InconsistentInheritance) as exc_info:
            linearize({"A": [G, "B"], "B": [G, "A"]})

        assert "cyclic" in str(exc_info.value)
