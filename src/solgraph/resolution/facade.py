"""
Public API of the resolution pipeline.

Provides high-level functions for computing import closures, contract
linearizations and call graphs.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

from solgraph.exceptions import DirectorySkipped, EmptyInputError, ParseError
from solgraph.graph import CallGraphModel
from solgraph.logging_config import logger
from solgraph.parser import parse
from solgraph.parser.syntax import SourceUnit
from solgraph.schemas import GraphOptions
from .call_graph_builder import CallGraphBuilder
from .declaration_collector import DeclarationTable, collect_declarations
from .import_resolver import ImportResolver
from .mro_calculator import MROCalculator

InputItem = Union[str, Path]


@dataclass
class ParsedInputs:
    """Parsed source units with the files they came from."""
    units: List[SourceUnit] = field(default_factory=list)
    files: List[str] = field(default_factory=list)
    skipped: List[DirectorySkipped] = field(default_factory=list)


@dataclass
class CallGraphResult:
    """Outcome of a call graph run."""
    graph: CallGraphModel
    files: List[str]
    skipped: List[DirectorySkipped]
    declarations: DeclarationTable
    linearization: Dict[str, List[str]]

    def to_dot(self) -> str:
        return self.graph.to_dot()


def resolve_imports(
    files: Sequence[InputItem],
    project_root: Optional[InputItem] = None,
) -> Tuple[List[str], List[DirectorySkipped]]:
    """
    Compute the import closure of seed files.

    Args:
        files: Seed file paths
        project_root: Highest directory files may be read from (default: cwd)

    Returns:
        Tuple of (absolute file paths in discovery order, skipped directories)
    """
    if not files:
        raise EmptyInputError()

    resolver = ImportResolver(project_root)
    closure = resolver.profile(list(files))
    logger.info(f"Import closure of {len(files)} seed(s): {len(closure)} file(s)")
    return closure, resolver.skipped


def parse_inputs(inputs: Sequence[InputItem], options: Optional[GraphOptions] = None) -> ParsedInputs:
    """
    Read and strictly parse every input.

    Inputs are deduplicated preserving order, or expanded to their import
    closure when ``options.expand_imports`` is set. Directories are skipped
    with a diagnostic.

    Args:
        inputs: File paths, or source texts when ``options.source_strings`` is set
        options: Run options

    Returns:
        ParsedInputs with one unit per readable input

    Raises:
        EmptyInputError: No inputs were given
        ParseError: An input has a syntax error
    """
    options = options or GraphOptions()
    if not inputs:
        raise EmptyInputError()

    parsed = ParsedInputs()

    if options.source_strings:
        for index, source in enumerate(dict.fromkeys(str(item) for item in inputs)):
            label = f"<source {index}>"
            parsed.units.append(_parse_source(source, label))
            parsed.files.append(label)
        return parsed

    if options.expand_imports:
        files, parsed.skipped = resolve_imports(inputs, options.project_root)
    else:
        files = list(dict.fromkeys(str(item) for item in inputs))

    for file in files:
        path = Path(file)
        if not path.is_absolute() and options.project_root is not None:
            path = Path(options.project_root) / path

        try:
            source = path.read_text(encoding="utf-8")
        except IsADirectoryError:
            diagnostic = DirectorySkipped(str(path))
            logger.warning(str(diagnostic))
            parsed.skipped.append(diagnostic)
            continue

        parsed.units.append(_parse_source(source, str(path)))
        parsed.files.append(str(path))

    logger.debug(f"Parsed {len(parsed.units)} source unit(s), skipped {len(parsed.skipped)}")
    return parsed


def _parse_source(source: str, label: str) -> SourceUnit:
    try:
        return parse(source, path=label)
    except ParseError:
        logger.error(f"Error found while parsing {label}")
        raise


def linearize_units(units: Sequence[SourceUnit]) -> Tuple[DeclarationTable, Dict[str, List[str]]]:
    """
    Collect declarations and linearize every contract.

    Returns:
        Tuple of (declaration table, contract -> ancestor order)
    """
    table = collect_declarations(units)
    linearization = MROCalculator().linearize(table.dependencies())
    return table, linearization


def build_call_graph(inputs: Sequence[InputItem], options: Optional[GraphOptions] = None) -> CallGraphResult:
    """
    Run the full pipeline: parse, collect declarations, linearize, resolve calls.

    Args:
        inputs: File paths, or source texts when ``options.source_strings`` is set
        options: Run options

    Returns:
        CallGraphResult holding the graph model and intermediate tables

    Raises:
        SolgraphError: Empty input, syntax errors, unresolvable imports or
            inconsistent inheritance
    """
    options = options or GraphOptions()
    logger.info(f"Building call graph for {len(inputs)} input(s)")

    parsed = parse_inputs(inputs, options)
    table, linearization = linearize_units(parsed.units)

    builder = CallGraphBuilder(
        table,
        linearization,
        color_scheme=options.color_scheme,
        enable_modifier_edges=options.enable_modifier_edges,
        resolve_library_dispatch=options.resolve_library_dispatch,
    )
    model = builder.build(parsed.units)

    logger.info(
        f"Call graph: {len(model.clusters)} cluster(s), {len(model.nodes)} node(s), {len(model.edges)} edge(s)"
    )
    return CallGraphResult(
        graph=model,
        files=parsed.files,
        skipped=parsed.skipped,
        declarations=table,
        linearization=linearization,
    )


def graph(inputs: Sequence[InputItem], options: Optional[GraphOptions] = None) -> str:
    """
    Build the call graph of the inputs and render it as DOT text.

    Args:
        inputs: File paths, or source texts when ``options.source_strings`` is set
        options: Run options

    Returns:
        DOT source of a ``digraph G`` with one cluster per contract and a legend
    """
    return build_call_graph(inputs, options).to_dot()
