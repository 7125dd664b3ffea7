"""
Inheritance linearization.

Computes the ancestor order of every contract with the C3 algorithm.
Solidity lists bases from "most base-like" to "most derived", so base lists
are reversed before merging.
"""

from typing import Dict, List, Optional

from solgraph.exceptions import InconsistentInheritance
from solgraph.logging_config import logger
from solgraph.tracing import trace
from .config import GLOBAL_CONTRACT, INHERITANCE_CONFIG


class MROCalculator:
    """
    Calculates the linearization (method resolution order) of contracts.

    Every linearization starts with the contract itself and ends with the
    global pseudo-contract. Bases without a declaration linearize to
    ``[name, GLOBAL_CONTRACT]``.
    """

    def __init__(self, dependencies: Optional[Dict[str, List[str]]] = None):
        """
        Initialize the MRO calculator.

        Args:
            dependencies: Raw inheritance map, contract -> [GLOBAL_CONTRACT, *bases]
        """
        self.config = INHERITANCE_CONFIG
        self.dependencies: Dict[str, List[str]] = dependencies or {}
        self._cache: Dict[str, List[str]] = {}

    @trace
    def linearize(self, dependencies: Optional[Dict[str, List[str]]] = None) -> Dict[str, List[str]]:
        """
        Linearize every contract of an inheritance map.

        Args:
            dependencies: Raw inheritance map; replaces the one given at construction

        Returns:
            Dict of contract name -> ancestor order (self first, GLOBAL_CONTRACT last)

        Raises:
            InconsistentInheritance: A contract has cyclic bases or no C3 order exists
        """
        if dependencies is not None:
            self.dependencies = dependencies
        self._cache = {}

        linearization = {name: self.compute_mro(name) for name in self.dependencies}
        logger.debug(f"Linearized {len(linearization)} contract(s)")
        return linearization

    def compute_mro(self, contract: str) -> List[str]:
        """
        Compute the linearization of a single contract.

        Args:
            contract: Contract name

        Returns:
            Ancestor order, self first
        """
        return list(self._build_mro(contract, []))

    def _build_mro(self, contract: str, chain: List[str]) -> List[str]:
        if contract == GLOBAL_CONTRACT:
            return [GLOBAL_CONTRACT]
        if contract in self._cache:
            return self._cache[contract]

        if contract in chain:
            cycle = " -> ".join(chain[chain.index(contract):] + [contract])
            raise InconsistentInheritance(contract, f"cyclic inheritance {cycle}")
        if len(chain) > self.config["max_mro_depth"]:
            raise InconsistentInheritance(
                contract, f"inheritance deeper than {self.config['max_mro_depth']} levels"
            )

        bases = self.dependencies.get(contract)
        if bases is None:
            # Referenced but never declared
            return [contract, GLOBAL_CONTRACT]

        ordered_bases = list(reversed(bases))
        sequences = [self._build_mro(base, chain + [contract]) for base in ordered_bases]
        sequences.append(ordered_bases)

        mro = [contract] + self._merge(contract, sequences)
        self._cache[contract] = mro
        logger.debug(f"MRO for {contract}: {mro}")
        return mro

    def _merge(self, contract: str, sequences: List[List[str]]) -> List[str]:
        """C3 merge: repeatedly take the first head that is in no other tail."""
        pending = [list(sequence) for sequence in sequences if sequence]
        merged: List[str] = []

        while pending:
            for sequence in pending:
                head = sequence[0]
                if not any(head in other[1:] for other in pending):
                    break
            else:
                heads = ", ".join(sequence[0] for sequence in pending)
                raise InconsistentInheritance(contract, f"no consistent order among bases ({heads})")

            merged.append(head)
            for sequence in pending:
                if sequence[0] == head:
                    del sequence[0]
            pending = [sequence for sequence in pending if sequence]

        return merged


def linearize(dependencies: Dict[str, List[str]]) -> Dict[str, List[str]]:
    """Linearize an inheritance map with a fresh calculator."""
    return MROCalculator().linearize(dependencies)
