"""
Resolution package: import closure, declaration collection, inheritance
linearization and call graph construction.
"""

from .facade import (
    build_call_graph,
    graph,
    linearize_units,
    parse_inputs,
    resolve_imports,
    CallGraphResult,
    ParsedInputs,
)
from .import_resolver import ImportResolver
from .declaration_collector import (
    ContractDeclaration,
    DeclarationCollector,
    DeclarationTable,
    collect_declarations,
)
from .mro_calculator import MROCalculator, linearize
from .call_graph_builder import CallGraphBuilder, CallTarget, ContractContext, Scope
from .config import GLOBAL_CONTRACT, INHERITANCE_CONFIG

__all__ = [
    "build_call_graph",
    "graph",
    "linearize_units",
    "parse_inputs",
    "resolve_imports",
    "CallGraphResult",
    "ParsedInputs",
    "ImportResolver",
    "ContractDeclaration",
    "DeclarationCollector",
    "DeclarationTable",
    "collect_declarations",
    "MROCalculator",
    "linearize",
    "CallGraphBuilder",
    "CallTarget",
    "ContractContext",
    "Scope",
    "GLOBAL_CONTRACT",
    "INHERITANCE_CONFIG",
]
