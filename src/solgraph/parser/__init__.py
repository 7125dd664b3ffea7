"""
This facade exposes the public API for the parser module.
"""
from .solidity_parser import parse
from .syntax import SyntaxNode, SyntaxVisitor, visit

__all__ = ["parse", "visit", "SyntaxNode", "SyntaxVisitor"]
