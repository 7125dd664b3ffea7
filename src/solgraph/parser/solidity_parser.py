"""
Solidity parser adapter.

Parses source text with tree-sitter and the tree-sitter-solidity grammar,
then lowers the concrete syntax tree into the node variants of
``solgraph.parser.syntax``.

Lookups go through grammar field names first and fall back to child node
types, so small grammar revisions do not change the lowered tree.
"""

import re
from typing import Dict, List, Optional

import tree_sitter_solidity
from tree_sitter import Language, Node, Parser

from solgraph.exceptions import ParseError
from solgraph.logging_config import logger
from . import syntax

# Global cache for the loaded grammar and parser
_parser_cache: Dict[str, Parser] = {}

IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
PRIMITIVE_TYPE_RE = re.compile(
    r"^(address(\s+payable)?|bool|string|byte|bytes\d*|u?int\d*|u?fixed(\d+x\d+)?)$"
)
IMPORT_PATH_RE = re.compile(r"""["']([^"']+)["']""")
USING_RE = re.compile(
    r"^using\s+(?P<libraries>\{[^}]*\}|[\w$.]+)\s+for\s+(?P<target>.+?)\s*(?P<global>\bglobal)?\s*;?\s*$",
    re.DOTALL,
)

VISIBILITIES = ("public", "external", "internal", "private")

# Node types that never contribute declarations or calls
SKIPPED_TYPES = {
    "comment",
    "pragma_directive",
    "assembly_statement",
    "enum_declaration",
    "user_defined_type_definition",
}

STRING_TYPES = {"string", "string_literal", "hex_string_literal", "unicode_string_literal"}
NUMBER_TYPES = {"number_literal", "decimal_number", "hex_number"}


def get_parser() -> Parser:
    """Return the shared tree-sitter parser for Solidity."""
    if "solidity" not in _parser_cache:
        language = Language(tree_sitter_solidity.language())
        _parser_cache["solidity"] = Parser(language)
        logger.debug("Loaded tree-sitter Solidity grammar")
    return _parser_cache["solidity"]


def parse(source: str, tolerant: bool = False, path: Optional[str] = None) -> syntax.SourceUnit:
    """
    Parse Solidity source text into a SourceUnit.

    Args:
        source: Solidity source text
        tolerant: Accept recoverable syntax errors and lower what was recognised.
            Only a source without any recognisable top-level structure fails.
        path: File the source was read from, used in error messages

    Returns:
        The lowered SourceUnit

    Raises:
        ParseError: If the source has syntax errors (strict mode) or
            nothing could be recovered from it (tolerant mode).
    """
    label = path or "<source>"
    tree = get_parser().parse(source.encode("utf-8"))
    root = tree.root_node

    if root.has_error:
        error = _first_error(root)
        location = "unknown location"
        if error is not None:
            row, column = error.start_point[0], error.start_point[1]
            location = f"line {row + 1}, column {column + 1}"

        recovered = any(child.type != "ERROR" for child in root.named_children)
        if not tolerant or not recovered:
            raise ParseError(label, f"syntax error at {location}")
        logger.debug(f"Tolerating syntax error in {label} at {location}")

    return _Lowering(label).source_unit(root, path)


def _first_error(root: Node) -> Optional[Node]:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        stack.extend(reversed(node.children))
    return None


def _text(node: Optional[Node]) -> str:
    if node is None:
        return ""
    return node.text.decode("utf-8")


def _compact(text: str) -> str:
    return re.sub(r"\s+", "", text)


def _named(node: Node, *types: str) -> List[Node]:
    return [child for child in node.named_children if child.type in types]


def _first_named(node: Node, *types: str) -> Optional[Node]:
    for child in node.named_children:
        if child.type in types:
            return child
    return None


def _same(a: Optional[Node], b: Optional[Node]) -> bool:
    if a is None or b is None:
        return False
    return (a.start_byte, a.end_byte, a.type) == (b.start_byte, b.end_byte, b.type)


def _name(node: Node) -> Optional[str]:
    name = node.child_by_field_name("name")
    if name is None:
        name = _first_named(node, "identifier")
    return _text(name) if name is not None else None


def type_from_text(text: str) -> syntax.TypeName:
    """Build a type name from its source spelling, e.g. ``uint256[]``."""
    text = text.strip()
    if text.endswith("]") and "[" in text:
        return syntax.ArrayTypeName(type_from_text(text[:text.rindex("[")]))
    if PRIMITIVE_TYPE_RE.match(text):
        return syntax.ElementaryTypeName(" ".join(text.split()))
    return syntax.UserDefinedTypeName(_compact(text))


class _Lowering:
    """Converts one tree-sitter tree into syntax nodes."""

    def __init__(self, label: str):
        self.label = label
        self._dispatch = {
            "import_directive": self._import_directive,
            "contract_declaration": lambda n: self._contract(n, "contract"),
            "interface_declaration": lambda n: self._contract(n, "interface"),
            "library_declaration": lambda n: self._contract(n, "library"),
            "function_definition": self._function_definition,
            "constructor_definition": self._constructor_definition,
            "fallback_receive_definition": self._fallback_receive_definition,
            "modifier_definition": self._modifier_definition,
            "state_variable_declaration": self._state_variable_declaration,
            "event_definition": lambda n: syntax.EventDefinition(_name(n)),
            "error_declaration": lambda n: syntax.CustomErrorDefinition(_name(n)),
            "struct_declaration": lambda n: syntax.StructDefinition(_name(n)),
            "using_directive": self._using_directive,
            "variable_declaration_statement": self._variable_declaration_statement,
            "variable_declaration": self._variable,
            "parameter": self._variable,
            "emit_statement": self._emit_statement,
            "revert_statement": self._revert_statement,
            "call_expression": self._call_expression,
            "struct_expression": self._call_options,
            "member_expression": self._member_expression,
            "type_cast_expression": self._type_cast_expression,
            "payable_conversion_expression": self._payable_conversion,
            "identifier": lambda n: syntax.Identifier(_text(n), text=_text(n)),
            "primitive_type": lambda n: syntax.ElementaryTypeNameExpression(
                " ".join(_text(n).split()), text=_text(n)
            ),
        }

    # -- entry points -------------------------------------------------------

    def source_unit(self, root: Node, path: Optional[str]) -> syntax.SourceUnit:
        return syntax.SourceUnit(nodes=self._lower_all(root.named_children), path=path)

    def lower(self, node: Optional[Node]) -> Optional[syntax.SyntaxNode]:
        if node is None or node.type in SKIPPED_TYPES:
            return None

        if not node.is_named:
            # Keyword-like tokens such as `this` or `super`
            text = _text(node)
            return syntax.Identifier(text, text=text) if IDENTIFIER_RE.match(text) else None

        handler = self._dispatch.get(node.type)
        if handler is not None:
            return handler(node)

        if node.type in ("expression", "parenthesized_expression", "call_argument") \
                and node.named_child_count == 1:
            return self.lower(node.named_children[0])
        if node.type in NUMBER_TYPES:
            return syntax.NumberLiteral(_text(node), text=_text(node))
        if node.type in STRING_TYPES:
            return syntax.StringLiteral(_text(node), text=_text(node))

        return syntax.Fragment(node.type, self._lower_all(node.named_children), text=_text(node))

    def _lower_all(self, nodes: List[Node]) -> List[syntax.SyntaxNode]:
        lowered = []
        for node in nodes:
            item = self.lower(node)
            if item is not None:
                lowered.append(item)
        return lowered

    # -- declarations -------------------------------------------------------

    def _import_directive(self, node: Node) -> Optional[syntax.ImportDirective]:
        source = node.child_by_field_name("source")
        match = IMPORT_PATH_RE.search(_text(source) if source is not None else _text(node))
        if match is None:
            logger.debug(f"Import directive without a path in {self.label}: {_text(node)!r}")
            return None
        return syntax.ImportDirective(match.group(1))

    def _contract(self, node: Node, contract_kind: str) -> syntax.ContractDefinition:
        bases = []
        for spec in _named(node, "inheritance_specifier"):
            ancestor = spec.child_by_field_name("ancestor")
            if ancestor is not None:
                bases.append(_compact(_text(ancestor)))
            else:
                bases.append(_compact(_text(spec).split("(")[0]))

        body = node.child_by_field_name("body") or _first_named(node, "contract_body")
        members = self._lower_all(body.named_children) if body is not None else []

        return syntax.ContractDefinition(
            name=_name(node),
            contract_kind=contract_kind,
            base_contracts=bases,
            sub_nodes=members,
        )

    def _function_definition(self, node: Node) -> syntax.FunctionDefinition:
        return self._function(node, _name(node), "function")

    def _constructor_definition(self, node: Node) -> syntax.FunctionDefinition:
        return self._function(node, None, "constructor")

    def _fallback_receive_definition(self, node: Node) -> syntax.FunctionDefinition:
        function_kind = "fallback"
        for child in node.children:
            if child.type == "(":
                break
            if child.type == "receive":
                function_kind = "receive"
        return self._function(node, None, function_kind)

    def _function(self, node: Node, name: Optional[str], function_kind: str) -> syntax.FunctionDefinition:
        returns = _first_named(node, "return_type_definition")
        return syntax.FunctionDefinition(
            name=name,
            function_kind=function_kind,
            visibility=self._visibility(node),
            state_mutability=self._mutability(node),
            parameters=self._parameter_list(node),
            return_parameters=self._parameter_list(returns) if returns is not None else None,
            modifiers=[self._modifier_invocation(m) for m in _named(node, "modifier_invocation")],
            body=self._body(node),
        )

    def _modifier_definition(self, node: Node) -> syntax.ModifierDefinition:
        return syntax.ModifierDefinition(
            name=_name(node),
            parameters=self._parameter_list(node),
            body=self._body(node),
        )

    def _visibility(self, node: Node) -> str:
        visibility = _first_named(node, "visibility")
        if visibility is not None:
            return _text(visibility).strip()
        for child in node.children:
            if child.type in VISIBILITIES:
                return child.type
        return "default"

    def _mutability(self, node: Node) -> Optional[str]:
        mutability = _first_named(node, "state_mutability")
        if mutability is not None:
            return _text(mutability).strip()
        if any(child.type == "payable" for child in node.children):
            return "payable"
        return None

    def _parameter_list(self, node: Node) -> syntax.ParameterList:
        return syntax.ParameterList([self._variable(p) for p in _named(node, "parameter")])

    def _modifier_invocation(self, node: Node) -> syntax.ModifierInvocation:
        name = _compact(_text(node).split("(")[0])
        arguments = self._lower_all(_named(node, "call_argument"))
        return syntax.ModifierInvocation(name, arguments)

    def _body(self, node: Node) -> Optional[syntax.Block]:
        body = node.child_by_field_name("body") or _first_named(node, "function_body")
        if body is None:
            return None
        return syntax.Block(self._lower_all(body.named_children))

    def _state_variable_declaration(self, node: Node) -> syntax.StateVariableDeclaration:
        type_node = node.child_by_field_name("type") or _first_named(node, "type_name")
        name = node.child_by_field_name("name") or _first_named(node, "identifier")
        value = node.child_by_field_name("value")
        variable = syntax.VariableDeclaration(
            name=_text(name) if name is not None else None,
            type_name=self.type_name(type_node),
        )
        return syntax.StateVariableDeclaration([variable], self.lower(value))

    def _using_directive(self, node: Node) -> Optional[syntax.UsingForDeclaration]:
        text = " ".join(_text(node).split())
        match = USING_RE.match(text)
        if match is None:
            logger.debug(f"Unrecognised using directive in {self.label}: {text!r}")
            return None

        libraries = match.group("libraries")
        if libraries.startswith("{"):
            names = []
            for part in libraries.strip("{}").split(","):
                part = part.split(" as ")[0].strip()
                if part:
                    names.append(part)
        else:
            names = [libraries]

        target = match.group("target").strip()
        type_name = None if target == "*" else type_from_text(target)
        return syntax.UsingForDeclaration(names, type_name, is_global=match.group("global") is not None)

    # -- types --------------------------------------------------------------

    def type_name(self, node: Optional[Node]) -> Optional[syntax.TypeName]:
        if node is None:
            return None
        if node.type == "primitive_type":
            return syntax.ElementaryTypeName(" ".join(_text(node).split()))
        if node.type in ("user_defined_type", "identifier"):
            return syntax.UserDefinedTypeName(_compact(_text(node)))

        tokens = [child.type for child in node.children]
        if "mapping" in tokens:
            nested = _named(node, "type_name")
            key = node.child_by_field_name("key_type") or (node.named_children[0] if node.named_children else None)
            value = node.child_by_field_name("value_type") or (nested[-1] if nested else None)
            return syntax.Mapping(self.type_name(key), self.type_name(value))
        if tokens and tokens[-1] == "]" and node.named_children:
            return syntax.ArrayTypeName(self.type_name(node.named_children[0]))
        if "function" in tokens:
            return syntax.FunctionTypeName(_text(node))
        if node.named_child_count == 1:
            return self.type_name(node.named_children[0])
        return type_from_text(_text(node))

    # -- statements ---------------------------------------------------------

    def _variable(self, node: Node) -> syntax.VariableDeclaration:
        type_node = node.child_by_field_name("type") or _first_named(node, "type_name")
        name = node.child_by_field_name("name")
        if name is None:
            identifiers = _named(node, "identifier")
            name = identifiers[-1] if identifiers else None
        return syntax.VariableDeclaration(
            name=_text(name) if name is not None else None,
            type_name=self.type_name(type_node),
        )

    def _variable_declaration_statement(self, node: Node) -> syntax.VariableDeclarationStatement:
        variables = []
        others = []
        for child in node.named_children:
            if child.type == "variable_declaration":
                variables.append(self._variable(child))
            elif child.type == "variable_declaration_tuple":
                variables.extend(self._variable(d) for d in _named(child, "variable_declaration"))
            else:
                others.append(child)

        value = node.child_by_field_name("value")
        if value is None and others:
            value = others[-1]
        return syntax.VariableDeclarationStatement(variables, self.lower(value))

    def _emit_statement(self, node: Node) -> Optional[syntax.SyntaxNode]:
        name = node.child_by_field_name("name")
        if name is None:
            candidates = [c for c in node.named_children if c.type != "call_argument"]
            name = candidates[0] if candidates else None
        if name is None:
            return None
        return syntax.FunctionCall(
            self.lower(name),
            self._lower_all(self._argument_nodes(node, exclude=name)),
            text=_text(node),
        )

    def _revert_statement(self, node: Node) -> syntax.SyntaxNode:
        error = node.child_by_field_name("error")
        if error is None:
            candidates = [
                c for c in node.named_children
                if c.type not in ("revert_arguments", "call_argument", "comment")
            ]
            error = candidates[0] if candidates else None

        arguments = self._lower_all(self._argument_nodes(node, exclude=error))
        if error is None:
            return syntax.Fragment(node.type, arguments, text=_text(node))
        return syntax.FunctionCall(self.lower(error), arguments, text=_text(node))

    # -- expressions --------------------------------------------------------

    def _argument_nodes(self, node: Node, exclude: Optional[Node] = None) -> List[Node]:
        arguments = []
        for child in node.named_children:
            if _same(child, exclude) or child.type == "comment":
                continue
            if child.type in ("revert_arguments", "call_arguments"):
                arguments.extend(self._argument_nodes(child))
            else:
                arguments.append(child)
        return arguments

    def _call_expression(self, node: Node) -> syntax.FunctionCall:
        function = node.child_by_field_name("function") or node.children[0]
        options = []
        arguments = []
        for child in self._argument_nodes(node, exclude=function):
            if child.type == "call_struct_argument":
                options.append(child)
            else:
                arguments.append(child)

        callee = self.lower(function)
        if options:
            callee = syntax.FunctionCallOptions(callee, self._lower_all(options), text=_text(function))
        return syntax.FunctionCall(callee, self._lower_all(arguments), text=_text(node))

    def _call_options(self, node: Node) -> syntax.FunctionCallOptions:
        target = node.child_by_field_name("type") or node.named_children[0]
        options = [child for child in node.named_children if not _same(child, target)]
        return syntax.FunctionCallOptions(self.lower(target), self._lower_all(options), text=_text(node))

    def _member_expression(self, node: Node) -> syntax.MemberAccess:
        target = node.child_by_field_name("object") or node.children[0]
        member = node.child_by_field_name("property") or node.children[-1]
        return syntax.MemberAccess(self.lower(target), _text(member), text=_text(node))

    def _type_cast_expression(self, node: Node) -> syntax.FunctionCall:
        type_node = _first_named(node, "primitive_type")
        arguments = [child for child in node.named_children if not _same(child, type_node)]
        type_text = " ".join(_text(type_node).split()) if type_node is not None else _text(node).split("(")[0].strip()
        return syntax.FunctionCall(
            syntax.ElementaryTypeNameExpression(type_text, text=type_text),
            self._lower_all(arguments),
            text=_text(node),
        )

    def _payable_conversion(self, node: Node) -> syntax.FunctionCall:
        return syntax.FunctionCall(
            syntax.ElementaryTypeNameExpression("payable", text="payable"),
            self._lower_all(self._argument_nodes(node)),
            text=_text(node),
        )
