"""Command-line interface for stategen code generation."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from stategen.generator import python
from stategen.generator.extractor import DataclassMetadataProvider, MetadataError
from stategen.generator.output import DirectorySink
from stategen.generator.processor import build_schema, find_definitions, process
from stategen.generator.signature import ParseError, parse, render
from stategen.log import set_verbose

if TYPE_CHECKING:
    from stategen.generator.types import Schema, TypeDescriptor


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Show debug diagnostics")
def cli(verbose: bool) -> None:
    """stategen reactive state container generator."""
    set_verbose(verbose)


def _definitions(modules: tuple[str, ...]) -> list[type]:
    definitions: list[type] = []
    for module in modules:
        found = find_definitions(module)
        if not found:
            print(f"No @state definitions in {module}")
        definitions.extend(found)
    return definitions


@cli.command()
@click.option(
    "--module", "-m", "modules", required=True, multiple=True, help="Module with @state classes"
)
@click.option("--output", "-o", "output_dir", required=True, help="Output directory")
@click.option(
    "--runtime-import",
    "runtime_import",
    default="stategen.runtime",
    show_default=True,
    help="Import path of the runtime used by generated code",
)
@click.option("--flat", is_flag=True, default=False, help="Do not create package directories")
def gen(modules: tuple[str, ...], output_dir: str, runtime_import: str, flat: bool) -> None:
    """Generate state containers for every @state class in the given modules."""
    sink = DirectorySink(output_dir, flat=flat)
    report = process(_definitions(modules), sink, runtime_import=runtime_import)

    for path in sink.written:
        print(f"Generated {path}")
    if not report.ok:
        print(f"{len(report.failures)} definition(s) failed: {', '.join(report.failures)}")
        sys.exit(1)


@cli.command()
@click.option("--output", "-o", "output_path", default=".", help="Output directory")
@click.option("--name", default="stategen_runtime", help="Runtime folder name")
def runtime(output_path: str, name: str) -> None:
    """Generate runtime support code for use without stategen installed."""
    runtime_dir = Path(output_path) / name
    runtime_dir.mkdir(parents=True, exist_ok=True)
    for filename, content in python.runtime().items():
        (runtime_dir / filename).write_text(content)
    print(f"Generated Python runtime in {runtime_dir}")


@cli.command()
@click.option(
    "--module", "-m", "modules", required=True, multiple=True, help="Module with @state classes"
)
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def info(modules: tuple[str, ...], output_json: bool) -> None:
    """Display the classified properties of state definitions."""
    provider = DataclassMetadataProvider()
    try:
        schemas = [build_schema(d, provider) for d in _definitions(modules)]
    except (ParseError, MetadataError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    if output_json:
        print(json.dumps([s.to_dict(encode_json=True) for s in schemas], indent=2))
    else:
        console = Console()
        for schema in schemas:
            _output_plain(console, schema)


def _marker(value: bool) -> str:
    return "[green]yes[/green]" if value else ""


def _output_plain(console: Console, schema: Schema) -> None:
    """Output one schema using rich text formatting."""
    definition = schema.definition
    console.print(f"[bold cyan]{definition.name}[/bold cyan] [dim]{definition.module}[/dim]")

    table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
    table.add_column("Field", style="white")
    table.add_column("Type", style="yellow")
    table.add_column("Single", justify="center")
    table.add_column("Persist", justify="center")
    table.add_column("Input", justify="center")

    for prop in schema.properties:
        table.add_row(
            prop.name,
            escape(python.annotation(prop.declared_type)),
            _marker(prop.single_read),
            _marker(prop.persisted),
            _marker(prop.input_only),
        )

    console.print(table)
    if definition.view_model:
        console.print(f"[dim]View model:[/dim] {definition.view_model}")
    console.print()


def _type_tree(descriptor: TypeDescriptor, tree: Tree) -> None:
    for argument in descriptor.type_arguments:
        label = argument.qualified_name + ("?" if argument.nullable else "")
        _type_tree(argument, tree.add(escape(label)))


@cli.command("parse-type")
@click.argument("signature")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def parse_type(signature: str, output_json: bool) -> None:
    """Parse a type signature and show its structure."""
    try:
        descriptor = parse(signature)
    except ParseError as e:
        print(f"Parse error: {e}")
        sys.exit(1)

    if output_json:
        print(descriptor.to_json(indent=2))
        return

    console = Console()
    label = descriptor.qualified_name + ("?" if descriptor.nullable else "")
    tree = Tree(f"[bold]{escape(label)}[/bold]")
    _type_tree(descriptor, tree)
    console.print(tree)
    summary = f"{render(descriptor)} -> {python.annotation(descriptor)}"
    console.print(f"[dim]{escape(summary)}[/dim]")


def main() -> None:
    """Main entry point."""
    cli(auto_envvar_prefix="STATEGEN")


if __name__ == "__main__":
    main()
