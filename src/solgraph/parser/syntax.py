"""
Syntax tree model for Solidity source units.

The parser adapter lowers the concrete tree-sitter tree into this closed set
of node variants. Only what the resolution passes consume is modelled;
everything else is kept as a ``Fragment`` so nested calls stay reachable.

Traversal is a depth-first walk with an enter hook (``"Kind"``) and an exit
hook (``"Kind:exit"``) per node kind.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Dict, Iterator, List, Optional, Tuple, Union
from typing import Mapping as MappingType


class SyntaxNode:
    """Base class for all node variants."""

    # Names of the dataclass fields holding child nodes, in traversal order
    child_fields: ClassVar[Tuple[str, ...]] = ()

    @property
    def kind(self) -> str:
        return type(self).__name__

    def children(self) -> Iterator["SyntaxNode"]:
        for name in self.child_fields:
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, list):
                for item in value:
                    if isinstance(item, SyntaxNode):
                        yield item
            elif isinstance(value, SyntaxNode):
                yield value


# ---------------------------------------------------------------------------
# Type names
# ---------------------------------------------------------------------------

@dataclass
class ElementaryTypeName(SyntaxNode):
    name: str


@dataclass
class UserDefinedTypeName(SyntaxNode):
    name_path: str


@dataclass
class ArrayTypeName(SyntaxNode):
    base_type_name: "TypeName"


@dataclass
class Mapping(SyntaxNode):
    key_type: "TypeName"
    value_type: "TypeName"


@dataclass
class FunctionTypeName(SyntaxNode):
    text: str = ""


TypeName = Union[ElementaryTypeName, UserDefinedTypeName, ArrayTypeName, Mapping, FunctionTypeName]


def element_type_name(type_name: Optional[TypeName]) -> Optional[str]:
    """
    Reduce a type to the name recorded in symbol tables.

    Arrays reduce to their element type and mappings to their value type,
    recursively. Function types have no usable name.
    """
    if isinstance(type_name, ElementaryTypeName):
        return type_name.name
    if isinstance(type_name, UserDefinedTypeName):
        return type_name.name_path
    if isinstance(type_name, ArrayTypeName):
        return element_type_name(type_name.base_type_name)
    if isinstance(type_name, Mapping):
        return element_type_name(type_name.value_type)
    return None


def is_array_type(type_name: Optional[TypeName]) -> bool:
    """Whether values of the type carry the built-in ``push`` and ``pop`` members."""
    if isinstance(type_name, ArrayTypeName):
        return True
    return isinstance(type_name, ElementaryTypeName) and type_name.name == "bytes"


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------

@dataclass
class Identifier(SyntaxNode):
    name: str
    text: str = field(default="", repr=False, compare=False)


@dataclass
class NumberLiteral(SyntaxNode):
    number: str
    text: str = field(default="", repr=False, compare=False)


@dataclass
class StringLiteral(SyntaxNode):
    value: str
    text: str = field(default="", repr=False, compare=False)


@dataclass
class ElementaryTypeNameExpression(SyntaxNode):
    type_name: str
    text: str = field(default="", repr=False, compare=False)


@dataclass
class MemberAccess(SyntaxNode):
    expression: SyntaxNode
    member_name: str
    text: str = field(default="", repr=False, compare=False)

    child_fields = ("expression",)


@dataclass
class FunctionCallOptions(SyntaxNode):
    """``target{value: v, gas: g}`` wrapped around a call target."""
    expression: SyntaxNode
    options: List[SyntaxNode] = field(default_factory=list)
    text: str = field(default="", repr=False, compare=False)

    child_fields = ("expression", "options")


@dataclass
class FunctionCall(SyntaxNode):
    expression: SyntaxNode
    arguments: List[SyntaxNode] = field(default_factory=list)
    text: str = field(default="", repr=False, compare=False)

    child_fields = ("expression", "arguments")


@dataclass
class Fragment(SyntaxNode):
    """Any statement or expression without a dedicated variant."""
    label: str
    nodes: List[SyntaxNode] = field(default_factory=list)
    text: str = field(default="", repr=False, compare=False)

    child_fields = ("nodes",)


# ---------------------------------------------------------------------------
# Statements and declarations
# ---------------------------------------------------------------------------

@dataclass
class VariableDeclaration(SyntaxNode):
    name: Optional[str]
    type_name: Optional[TypeName]


@dataclass
class ParameterList(SyntaxNode):
    parameters: List[VariableDeclaration] = field(default_factory=list)

    child_fields = ("parameters",)


@dataclass
class VariableDeclarationStatement(SyntaxNode):
    variables: List[VariableDeclaration] = field(default_factory=list)
    initial_value: Optional[SyntaxNode] = None

    child_fields = ("variables", "initial_value")


@dataclass
class Block(SyntaxNode):
    statements: List[SyntaxNode] = field(default_factory=list)

    child_fields = ("statements",)


@dataclass
class StateVariableDeclaration(SyntaxNode):
    variables: List[VariableDeclaration] = field(default_factory=list)
    initial_value: Optional[SyntaxNode] = None

    child_fields = ("variables", "initial_value")


@dataclass
class ModifierInvocation(SyntaxNode):
    name: str
    arguments: List[SyntaxNode] = field(default_factory=list)

    child_fields = ("arguments",)


@dataclass
class FunctionDefinition(SyntaxNode):
    name: Optional[str]
    # One of "function", "constructor", "fallback", "receive"
    function_kind: str = "function"
    visibility: str = "default"
    state_mutability: Optional[str] = None
    parameters: ParameterList = field(default_factory=ParameterList)
    return_parameters: Optional[ParameterList] = None
    modifiers: List[ModifierInvocation] = field(default_factory=list)
    body: Optional[Block] = None

    child_fields = ("parameters", "return_parameters", "modifiers", "body")

    @property
    def is_constructor(self) -> bool:
        return self.function_kind == "constructor"

    @property
    def is_fallback(self) -> bool:
        return self.function_kind == "fallback"

    @property
    def is_receive_ether(self) -> bool:
        return self.function_kind == "receive"


@dataclass
class ModifierDefinition(SyntaxNode):
    name: str
    parameters: Optional[ParameterList] = None
    body: Optional[Block] = None

    child_fields = ("parameters", "body")


@dataclass
class EventDefinition(SyntaxNode):
    name: str


@dataclass
class CustomErrorDefinition(SyntaxNode):
    name: str


@dataclass
class StructDefinition(SyntaxNode):
    name: str


@dataclass
class UsingForDeclaration(SyntaxNode):
    library_names: List[str]
    # None means "for *"
    type_name: Optional[TypeName] = None
    is_global: bool = False


@dataclass
class ImportDirective(SyntaxNode):
    path: str


@dataclass
class ContractDefinition(SyntaxNode):
    name: str
    # One of "contract", "interface", "library"
    contract_kind: str = "contract"
    base_contracts: List[str] = field(default_factory=list)
    sub_nodes: List[SyntaxNode] = field(default_factory=list)

    child_fields = ("sub_nodes",)


@dataclass
class SourceUnit(SyntaxNode):
    nodes: List[SyntaxNode] = field(default_factory=list)
    path: Optional[str] = None

    child_fields = ("nodes",)


NODE_TYPES = (
    SourceUnit, ImportDirective, ContractDefinition,
    ElementaryTypeName, UserDefinedTypeName, ArrayTypeName, Mapping, FunctionTypeName,
    Identifier, NumberLiteral, StringLiteral, ElementaryTypeNameExpression,
    MemberAccess, FunctionCallOptions, FunctionCall, Fragment,
    VariableDeclaration, ParameterList, VariableDeclarationStatement, Block,
    StateVariableDeclaration, ModifierInvocation, FunctionDefinition,
    ModifierDefinition, EventDefinition, CustomErrorDefinition,
    StructDefinition, UsingForDeclaration,
)

NODE_KINDS = tuple(node_type.__name__ for node_type in NODE_TYPES)

Handler = Callable[[SyntaxNode], Any]


def visit(node: Optional[SyntaxNode], handlers: MappingType[str, Handler]) -> None:
    """
    Depth-first traversal invoking ``handlers[kind]`` on entry and
    ``handlers[kind + ":exit"]`` after all children were visited.

    An entry handler returning ``False`` prunes the node's children; the
    exit handler still runs.
    """
    if node is None:
        return

    kind = node.kind
    enter = handlers.get(kind)
    descend = True
    if enter is not None:
        descend = enter(node) is not False

    if descend:
        for child in node.children():
            visit(child, handlers)

    leave = handlers.get(f"{kind}:exit")
    if leave is not None:
        leave(node)


class SyntaxVisitor:
    """
    Method-based front end for ``visit``.

    Subclasses define ``visit_<Kind>(node)`` for entry hooks and
    ``leave_<Kind>(node)`` for exit hooks, e.g. ``visit_ContractDefinition``.
    """

    def handlers(self) -> Dict[str, Handler]:
        table: Dict[str, Handler] = {}
        for kind in NODE_KINDS:
            enter = getattr(self, f"visit_{kind}", None)
            if enter is not None:
                table[kind] = enter
            leave = getattr(self, f"leave_{kind}", None)
            if leave is not None:
                table[f"{kind}:exit"] = leave
        return table

    def walk(self, tree: SyntaxNode) -> None:
        visit(tree, self.handlers())
