"""
solgraph - Solidity call graph resolver

Resolves import closures, contract linearizations and calls across
Solidity contracts, and renders the result as a clustered DOT graph.
"""

__version__ = "0.3.0"

# Core exports
from solgraph.resolution import build_call_graph, resolve_imports, CallGraphResult
from solgraph.graph import CallGraphModel, EdgeKind
from solgraph.schemas import GraphOptions
from solgraph.colorscheme import ColorScheme, DEFAULT_COLOR_SCHEME, DARK_COLOR_SCHEME

__all__ = [
    "__version__",
    "build_call_graph",
    "resolve_imports",
    "CallGraphResult",
    "CallGraphModel",
    "EdgeKind",
    "GraphOptions",
    "ColorScheme",
    "DEFAULT_COLOR_SCHEME",
    "DARK_COLOR_SCHEME",
]
