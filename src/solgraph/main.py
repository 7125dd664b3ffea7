import json
from pathlib import Path
from typing import List, NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape

from solgraph import __version__
from solgraph.colorscheme import DARK_COLOR_SCHEME
from solgraph.exceptions import SolgraphError
from solgraph.logging_config import logger, setup_logging
from solgraph.resolution import build_call_graph, linearize_units, parse_inputs, resolve_imports
from solgraph.schemas import GraphOptions, LinearizationEntry
from solgraph.user_config import UserConfig

app = typer.Typer(help="Call graphs for Solidity sources.")
err_console = Console(stderr=True)


def _fail(error: Exception) -> NoReturn:
    err_console.print(f"[bold red]Error:[/bold red] {escape(str(error))}")
    raise typer.Exit(code=1)


@app.callback()
def global_options(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log resolution progress at DEBUG level",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress console logging (also via SOLGRAPH_MACHINE_MODE env var)",
    ),
):
    """
    solgraph: resolve calls across Solidity contracts and render them as DOT.
    """
    if verbose or quiet:
        setup_logging(level="DEBUG" if verbose else "INFO", suppress_console=quiet or None)


@app.command()
def graph(
    files: List[Path] = typer.Argument(..., help="Solidity files to analyze"),
    modifiers: Optional[bool] = typer.Option(
        None, "--modifiers/--no-modifiers", help="Draw edges from functions to the modifiers they invoke"
    ),
    libraries: Optional[bool] = typer.Option(
        None, "--libraries/--no-libraries", help="Attribute using-for member calls to the library"
    ),
    imports: Optional[bool] = typer.Option(
        None, "--imports/--no-imports", help="Also analyze every file reachable through imports"
    ),
    root: Optional[Path] = typer.Option(None, "--root", help="Project root (default: current directory)"),
    dark: bool = typer.Option(False, "--dark", help="Use the dark color scheme"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write DOT to a file instead of stdout"),
):
    """
    Build the call graph of FILES and print it as DOT.
    """
    try:
        defaults = UserConfig(root).graph_defaults()
        options = GraphOptions(
            enable_modifier_edges=defaults["enable_modifier_edges"] if modifiers is None else modifiers,
            resolve_library_dispatch=defaults["resolve_library_dispatch"] if libraries is None else libraries,
            expand_imports=defaults["expand_imports"] if imports is None else imports,
            project_root=root,
            color_scheme=DARK_COLOR_SCHEME if dark else defaults["color_scheme"],
        )
        result = build_call_graph([str(f) for f in files], options)
    except SolgraphError as e:
        _fail(e)

    dot = result.to_dot()
    if output is not None:
        output.write_text(dot, encoding="utf-8")
        logger.info(f"Wrote call graph to {output}")
    else:
        typer.echo(dot)


@app.command()
def imports(
    files: List[Path] = typer.Argument(..., help="Seed Solidity files"),
    root: Optional[Path] = typer.Option(None, "--root", help="Project root (default: current directory)"),
    json_output: bool = typer.Option(False, "--json", help="Print the closure as JSON"),
):
    """
    Print the import closure of FILES, one absolute path per line.
    """
    try:
        closure, skipped = resolve_imports([str(f) for f in files], root)
    except SolgraphError as e:
        _fail(e)

    if json_output:
        payload = {"files": closure, "skipped": [d.path for d in skipped]}
        typer.echo(json.dumps(payload, indent=2))
        return

    for path in closure:
        typer.echo(path)


@app.command()
def linearize(
    files: List[Path] = typer.Argument(..., help="Solidity files to analyze"),
    json_output: bool = typer.Option(False, "--json", help="Print linearizations as JSON"),
):
    """
    Print the inheritance linearization of every contract in FILES.
    """
    try:
        parsed = parse_inputs([str(f) for f in files])
        table, linearization = linearize_units(parsed.units)
    except SolgraphError as e:
        _fail(e)

    entries = [
        LinearizationEntry(contract=name, kind=table.contracts[name].kind, linearization=order)
        for name, order in linearization.items()
    ]

    if json_output:
        typer.echo(json.dumps([entry.model_dump() for entry in entries], indent=2))
        return

    for entry in entries:
        typer.echo(f"{entry.contract}: {' -> '.join(entry.linearization)}")


@app.command()
def version():
    """
    Prints the current version of solgraph.
    """
    typer.echo(f"solgraph v{__version__}")


if __name__ == "__main__":
    app()
