"""
Scope-aware call graph construction.

Registers a node for every function and modifier, then resolves the call
expressions inside function and modifier bodies to qualified callee nodes
using declaration tables, linearizations and local scopes. Resolution is
heuristic: a call site that cannot be attributed is dropped.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple

from solgraph.colorscheme import ColorScheme, DEFAULT_COLOR_SCHEME
from solgraph.graph import CallGraphModel, Cluster, EdgeKind
from solgraph.logging_config import logger
from solgraph.parser.syntax import (
    ContractDefinition,
    ElementaryTypeNameExpression,
    FunctionCall,
    FunctionCallOptions,
    FunctionDefinition,
    Identifier,
    MemberAccess,
    ModifierDefinition,
    ModifierInvocation,
    NumberLiteral,
    SourceUnit,
    StateVariableDeclaration,
    SyntaxNode,
    SyntaxVisitor,
    UserDefinedTypeName,
    VariableDeclaration,
    element_type_name,
    is_array_type,
)
from solgraph.tracing import trace
from .config import (
    ABI_MEMBERS,
    ABI_OBJECT,
    ADDRESS_CASTS,
    ANY_TYPE,
    ARRAY_MEMBERS,
    CONSTRUCTOR_NAME,
    CONTRACT_KIND_SUFFIX,
    FALLBACK_NAME,
    GLOBAL_CONTRACT,
    RECEIVE_NAME,
    SPECIAL_VARIABLE_TYPES,
    SYNTHETIC_MEMBERS,
    canonical_type,
)
from .declaration_collector import DeclarationTable


@dataclass
class ContractContext:
    """Merged view of the contract whose body is being resolved."""
    name: str
    linearization: List[str]
    state_vars: Dict[str, str] = field(default_factory=dict)
    user_defined_state_vars: Dict[str, str] = field(default_factory=dict)
    array_state_vars: Set[str] = field(default_factory=set)
    using_for: Dict[str, Dict[str, None]] = field(default_factory=dict)

    def libraries_for(self, type_name: Optional[str]) -> List[str]:
        """Libraries attached to a type, then those attached to all types."""
        libraries: Dict[str, None] = {}
        if type_name is not None:
            libraries.update(self.using_for.get(type_name, {}))
        libraries.update(self.using_for.get(ANY_TYPE, {}))
        return list(libraries)


@dataclass
class Scope:
    """Local variables of the function or modifier body being resolved."""
    node: str
    local_vars: Dict[str, str] = field(default_factory=dict)
    user_defined_local_vars: Dict[str, str] = field(default_factory=dict)
    array_local_vars: Set[str] = field(default_factory=set)

    def declares(self, name: str) -> bool:
        return name in self.local_vars or name in self.user_defined_local_vars

    def bind(self, variable: VariableDeclaration) -> None:
        if variable.name is None or variable.type_name is None:
            return
        if is_array_type(variable.type_name):
            self.array_local_vars.add(variable.name)
        if isinstance(variable.type_name, UserDefinedTypeName):
            self.user_defined_local_vars[variable.name] = variable.type_name.name_path
        else:
            resolved = element_type_name(variable.type_name)
            if resolved is not None:
                self.local_vars[variable.name] = canonical_type(resolved)


@dataclass
class CallTarget:
    """Resolved callee of one call site."""
    contract: str
    member: str
    kind: EdgeKind


def member_name(node: FunctionDefinition) -> str:
    """Member name of a function, with synthetic names for unnamed kinds."""
    if node.is_constructor:
        return CONSTRUCTOR_NAME
    if node.is_fallback:
        return FALLBACK_NAME
    if node.is_receive_ether:
        return RECEIVE_NAME
    return node.name


class CallGraphBuilder:
    """
    Builds a clustered call graph from parsed source units.

    All units are registered before any call is resolved, so a call may
    target a function declared in a later file.
    """

    def __init__(
        self,
        table: DeclarationTable,
        linearization: Dict[str, List[str]],
        color_scheme: Optional[ColorScheme] = None,
        enable_modifier_edges: bool = False,
        resolve_library_dispatch: bool = True,
    ):
        """
        Initialize the builder.

        Args:
            table: Declarations of all analyzed contracts
            linearization: Contract name -> ancestor order, self first
            color_scheme: Styling of nodes, edges and clusters
            enable_modifier_edges: Add edges from functions to invoked modifiers
            resolve_library_dispatch: Attribute using-for member calls to the library
        """
        self.table = table
        self.linearization = linearization
        self.color_scheme = color_scheme or DEFAULT_COLOR_SCHEME
        self.enable_modifier_edges = enable_modifier_edges
        self.resolve_library_dispatch = resolve_library_dispatch
        self.model = CallGraphModel(self.color_scheme)
        # (contract, function) pairs kept out of the node collapse
        self.super_chain: Set[Tuple[str, str]] = set()

    @trace
    def build(self, units: Iterable[SourceUnit]) -> CallGraphModel:
        """
        Build the call graph of the given source units.

        Args:
            units: Parsed source units, in input order

        Returns:
            The populated CallGraphModel
        """
        units = list(units)

        for name in self.table.contract_names:
            declaration = self.table.contracts[name]
            label = name + CONTRACT_KIND_SUFFIX.get(declaration.kind, "")
            self.model.ensure_cluster(name, label=label, defined=True)

        for unit in units:
            _SuperCalls(self).walk(unit)

        for unit in units:
            _NodeRegistration(self).walk(unit)
        logger.debug(f"Registered {len(self.model.nodes)} node(s) in {len(self.model.clusters)} cluster(s)")

        for unit in units:
            _CallResolution(self).walk(unit)
        logger.debug(f"Resolved {len(self.model.edges)} edge(s)")

        return self.model

    # -- naming -------------------------------------------------------------

    def node_name(self, member: str, contract: str) -> str:
        """
        Qualified node name of a member as seen from a contract.

        Reuses the node of the nearest contract in the linearization (self
        first) that already registered the member. Synthetic members never
        merge.
        """
        if member not in SYNTHETIC_MEMBERS:
            for ancestor in self.linearization.get(contract, []):
                candidate = f"{ancestor}.{member}"
                if self.model.get_node(candidate) is not None:
                    return candidate
        return f"{contract}.{member}"

    def function_node(self, member: str, contract: str) -> str:
        """
        Node name of a function body.

        Functions reached through `super` and functions calling `super`
        keep their own node.
        """
        if (contract, member) in self.super_chain:
            return f"{contract}.{member}"
        return self.node_name(member, contract)

    def super_target(self, contract: str, member: str) -> Optional[str]:
        """Nearest ancestor of a contract, excluding itself, implementing a function."""
        for ancestor in self.linearization.get(contract, [contract])[1:]:
            declaration = self.table.get(ancestor)
            if declaration is not None and member in declaration.functions:
                return ancestor
        return None

    def cluster_for(self, contract: str) -> Cluster:
        """Cluster of a contract, created with undefined styling for unknown names."""
        cluster = self.model.get_cluster(contract)
        if cluster is None:
            cluster = self.model.ensure_cluster(contract, defined=contract in self.table.contracts)
        return cluster

    # -- contexts -----------------------------------------------------------

    def contract_context(self, contract: str) -> ContractContext:
        """
        Merged state-variable and using-for tables of a contract.

        Nearer declarations shadow inherited ones. Using-for registrations
        of the contract come before file-level ones.
        """
        if contract == GLOBAL_CONTRACT:
            linearization = [GLOBAL_CONTRACT]
        else:
            linearization = self.linearization.get(contract, [contract, GLOBAL_CONTRACT])

        context = ContractContext(name=contract, linearization=linearization)
        for ancestor in reversed(linearization):
            declaration = self.table.get(ancestor)
            if declaration is None:
                continue
            context.state_vars.update(declaration.state_vars)
            context.user_defined_state_vars.update(declaration.user_defined_state_vars)
            # A redeclaration in a nearer contract replaces the inherited variable
            context.array_state_vars -= set(declaration.state_vars) | set(declaration.user_defined_state_vars)
            context.array_state_vars |= declaration.array_state_vars

        for source in dict.fromkeys([contract, GLOBAL_CONTRACT]):
            declaration = self.table.get(source)
            if declaration is None:
                continue
            for type_name, libraries in declaration.using_for.items():
                context.using_for.setdefault(type_name, {}).update(libraries)

        return context

    # -- resolution ---------------------------------------------------------

    def resolve_call(self, call: FunctionCall, context: ContractContext, scope: Scope) -> Optional[CallTarget]:
        """
        Resolve one call expression.

        Args:
            call: The call expression
            context: Context of the enclosing contract
            scope: Scope of the enclosing function or modifier

        Returns:
            The call target, or None when the call cannot be attributed
        """
        expression = call.expression
        if isinstance(expression, FunctionCallOptions):
            expression = expression.expression

        if isinstance(expression, Identifier):
            return self._resolve_plain_call(expression.name, context)
        if isinstance(expression, MemberAccess):
            return self._resolve_member_call(call, expression, context, scope)
        return None

    def _resolve_plain_call(self, name: str, context: ContractContext) -> Optional[CallTarget]:
        for ancestor in context.linearization:
            declaration = self.table.get(ancestor)
            if declaration is not None and declaration.declares_callable(name):
                kind = EdgeKind.ERROR if name in declaration.errors else EdgeKind.REGULAR
                return CallTarget(ancestor, name, kind)

        owner = self.table.custom_errors.get(name)
        if owner is not None:
            return CallTarget(owner, name, EdgeKind.ERROR)
        return None

    def _resolve_member_call(
        self,
        call: FunctionCall,
        access: MemberAccess,
        context: ContractContext,
        scope: Scope,
    ) -> Optional[CallTarget]:
        member = access.member_name
        target = access.expression
        if member in ABI_MEMBERS and isinstance(target, Identifier) and target.name == ABI_OBJECT:
            return None
        obj: Optional[str] = None
        variable_type: Optional[str] = None

        if isinstance(target, Identifier):
            obj = target.name
        elif self._is_address_cast(target):
            if not target.arguments:
                return None
            if member == "call":
                member = _argument_text(call.arguments[0]) if call.arguments else FALLBACK_NAME
            obj = _address_object(target.arguments[0])
        elif self._is_contract_cast(target):
            obj = target.expression.name

        if _is_special_variable(target):
            variable_type = SPECIAL_VARIABLE_TYPES[_special_variable_key(target)]
        elif _is_elementary_cast(target):
            variable_type = target.expression.type_name
        elif obj is not None:
            variable_type = (
                scope.local_vars.get(obj)
                or scope.user_defined_local_vars.get(obj)
                or context.user_defined_state_vars.get(obj)
                or context.state_vars.get(obj)
            )

        if member in ARRAY_MEMBERS and obj is not None and _is_array_variable(obj, context, scope):
            return None

        if obj == "this":
            return CallTarget(context.name, member, EdgeKind.THIS)
        if obj == "super":
            ancestor = self.super_target(context.name, member)
            if ancestor is None:
                return None
            return CallTarget(ancestor, member, EdgeKind.SUPER)

        if variable_type is not None:
            variable_type = canonical_type(variable_type)

        for library in context.libraries_for(variable_type):
            declaration = self.table.get(library)
            if declaration is not None and member in declaration.functions:
                if self.resolve_library_dispatch:
                    return CallTarget(library, member, EdgeKind.EXTERNAL)
                break

        if obj is None:
            return None

        # Locals shadow state variables
        if obj in scope.local_vars:
            contract = obj
        elif obj in scope.user_defined_local_vars:
            contract = scope.user_defined_local_vars[obj]
        else:
            contract = context.user_defined_state_vars.get(obj, obj)
        return CallTarget(contract, member, EdgeKind.EXTERNAL)

    def _is_address_cast(self, node: SyntaxNode) -> bool:
        return (
            isinstance(node, FunctionCall)
            and isinstance(node.expression, ElementaryTypeNameExpression)
            and node.expression.type_name in ADDRESS_CASTS
        )

    def _is_contract_cast(self, node: SyntaxNode) -> bool:
        return (
            isinstance(node, FunctionCall)
            and isinstance(node.expression, Identifier)
            and node.expression.name in self.table.contract_names
        )

    # -- graph updates ------------------------------------------------------

    def add_call(self, scope: Scope, target: CallTarget) -> None:
        """Ensure the callee's cluster and node exist and add the edge."""
        cluster = self.cluster_for(target.contract)
        name = self.node_name(target.member, target.contract)

        if self.model.get_node(name) is None:
            self.model.add_node(cluster, name, self._callee_attributes(target))
        self.model.add_edge(scope.node, name, target.kind)

    def _callee_attributes(self, target: CallTarget) -> Dict[str, str]:
        scheme = self.color_scheme
        declaration = self.table.get(target.contract)

        if target.kind == EdgeKind.ERROR:
            return scheme.error_attributes(target.member)
        if declaration is not None and target.member in declaration.functions:
            function = declaration.functions[target.member]
            return scheme.function_attributes(target.member, function.visibility, function.state_mutability)
        if self.table.is_event(target.member):
            return scheme.event_attributes(target.member)
        return {"label": target.member}


def _strip_quotes(text: str) -> str:
    return text.replace('"', "").replace("'", "")


def _argument_text(argument: SyntaxNode) -> str:
    return _strip_quotes(getattr(argument, "text", "") or argument.kind)


def _address_object(argument: SyntaxNode) -> str:
    if isinstance(argument, Identifier):
        return argument.name
    if isinstance(argument, NumberLiteral):
        return f"address({argument.number})"
    return _argument_text(argument)


def _is_array_variable(name: str, context: ContractContext, scope: Scope) -> bool:
    if scope.declares(name):
        return name in scope.array_local_vars
    return name in context.array_state_vars


def _special_variable_key(node: SyntaxNode) -> Optional[str]:
    if isinstance(node, Identifier):
        return node.name
    if isinstance(node, MemberAccess) and isinstance(node.expression, Identifier):
        return f"{node.expression.name}.{node.member_name}"
    return None


def _is_special_variable(node: SyntaxNode) -> bool:
    return _special_variable_key(node) in SPECIAL_VARIABLE_TYPES


def _is_elementary_cast(node: SyntaxNode) -> bool:
    return isinstance(node, FunctionCall) and isinstance(node.expression, ElementaryTypeNameExpression)


class _SuperCalls(SyntaxVisitor):
    """Pre-pass: functions on either side of a `super` call."""

    def __init__(self, builder: CallGraphBuilder):
        self.builder = builder
        self.contract = GLOBAL_CONTRACT
        self.function: Optional[str] = None

    def visit_ContractDefinition(self, node: ContractDefinition):
        self.contract = node.name

    def leave_ContractDefinition(self, node: ContractDefinition):
        self.contract = GLOBAL_CONTRACT

    def visit_FunctionDefinition(self, node: FunctionDefinition):
        self.function = member_name(node)

    def leave_FunctionDefinition(self, node: FunctionDefinition):
        self.function = None

    def visit_MemberAccess(self, node: MemberAccess):
        if not (isinstance(node.expression, Identifier) and node.expression.name == "super"):
            return
        ancestor = self.builder.super_target(self.contract, node.member_name)
        if ancestor is None:
            return
        self.builder.super_chain.add((ancestor, node.member_name))
        if self.function is not None:
            self.builder.super_chain.add((self.contract, self.function))


class _NodeRegistration(SyntaxVisitor):
    """First pass: one node per function and modifier."""

    def __init__(self, builder: CallGraphBuilder):
        self.builder = builder
        self.contract = GLOBAL_CONTRACT

    def visit_ContractDefinition(self, node: ContractDefinition):
        self.contract = node.name

    def leave_ContractDefinition(self, node: ContractDefinition):
        self.contract = GLOBAL_CONTRACT

    def visit_FunctionDefinition(self, node: FunctionDefinition):
        name = member_name(node)
        attributes = self.builder.color_scheme.function_attributes(name, node.visibility, node.state_mutability)
        self._register(self.builder.function_node(name, self.contract), attributes)
        return False

    def visit_ModifierDefinition(self, node: ModifierDefinition):
        name = self.builder.node_name(node.name, self.contract)
        self._register(name, self.builder.color_scheme.modifier_attributes(node.name))
        return False

    def _register(self, name: str, attributes: Dict[str, str]) -> None:
        self.builder.model.add_node(self.builder.cluster_for(self.contract), name, attributes)


class _CallResolution(SyntaxVisitor):
    """Second pass: edges for the calls inside function and modifier bodies."""

    def __init__(self, builder: CallGraphBuilder):
        self.builder = builder
        self.contract = GLOBAL_CONTRACT
        self.context = builder.contract_context(GLOBAL_CONTRACT)
        self.scope: Optional[Scope] = None

    def visit_ContractDefinition(self, node: ContractDefinition):
        self.contract = node.name
        self.context = self.builder.contract_context(node.name)

    def leave_ContractDefinition(self, node: ContractDefinition):
        self.contract = GLOBAL_CONTRACT
        self.context = self.builder.contract_context(GLOBAL_CONTRACT)

    def visit_StateVariableDeclaration(self, node: StateVariableDeclaration):
        # Initializer calls are outside any scope
        return False

    def visit_FunctionDefinition(self, node: FunctionDefinition):
        self.scope = Scope(self.builder.function_node(member_name(node), self.contract))

    def leave_FunctionDefinition(self, node: FunctionDefinition):
        self.scope = None

    def visit_ModifierDefinition(self, node: ModifierDefinition):
        self.scope = Scope(self.builder.node_name(node.name, self.contract))

    def leave_ModifierDefinition(self, node: ModifierDefinition):
        self.scope = None

    def visit_VariableDeclaration(self, node: VariableDeclaration):
        if self.scope is not None:
            self.scope.bind(node)

    def visit_ModifierInvocation(self, node: ModifierInvocation):
        builder = self.builder
        if not builder.enable_modifier_edges or self.scope is None:
            return
        # Base constructor arguments, e.g. `constructor() ERC20("T", "T")`
        if node.name in builder.table.contracts:
            return

        target = builder.node_name(node.name, self.contract)
        if builder.model.get_node(target) is None:
            cluster = builder.cluster_for(self.contract)
            builder.model.add_node(cluster, target, builder.color_scheme.modifier_attributes(node.name))
        builder.model.add_edge(self.scope.node, target, EdgeKind.MODIFIER)

    def visit_FunctionCall(self, node: FunctionCall):
        if self.scope is None:
            return
        target = self.builder.resolve_call(node, self.context, self.scope)
        if target is not None:
            self.builder.add_call(self.scope, target)
