"""
Declaration collection.

Builds per-contract declaration tables from parsed source units: state
variables by resolved type, functions, modifiers, events, structs, custom
errors, using-for registrations and the raw inheritance dependency map.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set

from solgraph.logging_config import logger
from solgraph.parser.syntax import (
    ContractDefinition,
    CustomErrorDefinition,
    EventDefinition,
    FunctionDefinition,
    ModifierDefinition,
    SourceUnit,
    StateVariableDeclaration,
    StructDefinition,
    SyntaxVisitor,
    UserDefinedTypeName,
    UsingForDeclaration,
    element_type_name,
    is_array_type,
)
from .config import ANY_TYPE, GLOBAL_CONTRACT, canonical_type


@dataclass
class ContractDeclaration:
    """Declarations of one contract, interface, library or the global scope."""
    name: str
    kind: str
    # Direct bases with the global pseudo-contract first
    bases: List[str] = field(default_factory=list)
    state_vars: Dict[str, str] = field(default_factory=dict)
    user_defined_state_vars: Dict[str, str] = field(default_factory=dict)
    # State variables of array or `bytes` type
    array_state_vars: Set[str] = field(default_factory=set)
    functions: Dict[str, FunctionDefinition] = field(default_factory=dict)
    modifiers: Dict[str, ModifierDefinition] = field(default_factory=dict)
    events: Dict[str, EventDefinition] = field(default_factory=dict)
    structs: Dict[str, StructDefinition] = field(default_factory=dict)
    errors: Dict[str, CustomErrorDefinition] = field(default_factory=dict)
    # Type name (or "*") -> library names; dict keys keep declaration order
    using_for: Dict[str, Dict[str, None]] = field(default_factory=dict)

    def declares_callable(self, name: str) -> bool:
        """Whether `name(...)` inside this contract refers to one of its own members."""
        return (
            name in self.functions
            or name in self.events
            or name in self.structs
            or name in self.errors
        )


@dataclass
class DeclarationTable:
    """Declarations of every analyzed contract."""
    contracts: Dict[str, ContractDeclaration] = field(default_factory=dict)
    # Custom error name -> first declaring contract
    custom_errors: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if GLOBAL_CONTRACT not in self.contracts:
            self.contracts[GLOBAL_CONTRACT] = ContractDeclaration(GLOBAL_CONTRACT, "global")

    def get(self, name: str) -> Optional[ContractDeclaration]:
        return self.contracts.get(name)

    @property
    def contract_names(self) -> List[str]:
        """Declared contract names, excluding the global pseudo-contract."""
        return [name for name in self.contracts if name != GLOBAL_CONTRACT]

    def dependencies(self) -> Dict[str, List[str]]:
        """Raw inheritance map: contract -> [global pseudo-contract, *direct bases]."""
        return {
            name: list(declaration.bases)
            for name, declaration in self.contracts.items()
            if name != GLOBAL_CONTRACT
        }

    def is_event(self, name: str) -> bool:
        return any(name in declaration.events for declaration in self.contracts.values())


class DeclarationCollector(SyntaxVisitor):
    """
    Single forward pass over source units filling a DeclarationTable.

    Declarations outside any contract body belong to the global
    pseudo-contract.
    """

    def __init__(self, table: Optional[DeclarationTable] = None):
        self.table = table or DeclarationTable()
        self._current = self.table.contracts[GLOBAL_CONTRACT]

    def collect(self, units: Iterable[SourceUnit]) -> DeclarationTable:
        """
        Collect declarations from all source units.

        Args:
            units: Parsed source units

        Returns:
            The filled DeclarationTable
        """
        for unit in units:
            self.walk(unit)
        logger.debug(
            f"Collected {len(self.table.contract_names)} contract(s), "
            f"{len(self.table.custom_errors)} custom error(s)"
        )
        return self.table

    def visit_ContractDefinition(self, node: ContractDefinition):
        if node.name in self.table.contracts:
            logger.warning(f"Contract '{node.name}' declared more than once; keeping the last declaration")

        self._current = ContractDeclaration(
            name=node.name,
            kind=node.contract_kind,
            bases=[GLOBAL_CONTRACT] + list(node.base_contracts),
        )
        self.table.contracts[node.name] = self._current

    def leave_ContractDefinition(self, node: ContractDefinition):
        self._current = self.table.contracts[GLOBAL_CONTRACT]

    def visit_StateVariableDeclaration(self, node: StateVariableDeclaration):
        for variable in node.variables:
            if variable.name is None or variable.type_name is None:
                continue
            if is_array_type(variable.type_name):
                self._current.array_state_vars.add(variable.name)
            if isinstance(variable.type_name, UserDefinedTypeName):
                self._current.user_defined_state_vars[variable.name] = variable.type_name.name_path
            else:
                resolved = element_type_name(variable.type_name)
                if resolved is not None:
                    self._current.state_vars[variable.name] = canonical_type(resolved)
        # Initializer calls have no enclosing scope
        return False

    def visit_FunctionDefinition(self, node: FunctionDefinition):
        if node.name:
            self._current.functions[node.name] = node
        return False

    def visit_ModifierDefinition(self, node: ModifierDefinition):
        self._current.modifiers[node.name] = node
        return False

    def visit_EventDefinition(self, node: EventDefinition):
        self._current.events[node.name] = node

    def visit_StructDefinition(self, node: StructDefinition):
        self._current.structs[node.name] = node

    def visit_CustomErrorDefinition(self, node: CustomErrorDefinition):
        self._current.errors[node.name] = node
        self.table.custom_errors.setdefault(node.name, self._current.name)

    def visit_UsingForDeclaration(self, node: UsingForDeclaration):
        type_name = using_for_key(node)
        libraries = self._current.using_for.setdefault(type_name, {})
        for library in node.library_names:
            libraries.setdefault(library, None)


def using_for_key(node: UsingForDeclaration) -> str:
    """Table key of a using-for target: the canonical type name or "*"."""
    if node.type_name is None:
        return ANY_TYPE
    resolved = element_type_name(node.type_name)
    return canonical_type(resolved) if resolved else "function"


def collect_declarations(units: Iterable[SourceUnit]) -> DeclarationTable:
    """Collect declarations of the given source units into a new table."""
    return DeclarationCollector().collect(units)
