"""CLI for credit-calculator."""

import json
from pathlib import Path

import click
import yaml
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from credit_calculator.config import CalculatorConfig
from credit_calculator.dictionary import duplicate_paths, merge_dictionaries, read_document
from credit_calculator.eligibility import CreditInputs, Summary, evaluate as evaluate_graph
from credit_calculator.engine import ReplayFactGraph
from credit_calculator.errors import CreditCalculatorError
from credit_calculator.session import CalculatorSession

console = Console()


@click.group()
def cli():
    """Estimate EITC and CTC eligibility from fact dictionaries."""
    pass


@cli.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", type=click.Path(), help="Write the combined dictionary here")
def merge(files, output):
    """Merge fact dictionary modules into one FactDictionary."""
    documents = [Path(f).read_text(encoding="utf-8") for f in files]
    try:
        combined = merge_dictionaries(*documents)
        duplicates = duplicate_paths(*documents)
    except CreditCalculatorError as e:
        raise click.ClickException(str(e))

    for path, count in sorted(duplicates.items()):
        console.print(f"[yellow]Duplicate fact path {path} ({count} definitions)[/yellow]")

    if output:
        Path(output).write_text(combined, encoding="utf-8")
        console.print(f"[green]Combined dictionary saved to {output}[/green]")
    else:
        click.echo(combined)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def inspect(file):
    """List the facts in a dictionary document."""
    try:
        document = read_document(Path(file).read_text(encoding="utf-8"))
    except CreditCalculatorError as e:
        raise click.ClickException(str(e))

    table = Table(title=f"{document.root_tag} (version {document.version or 'n/a'})")
    table.add_column("Path", style="cyan")
    table.add_column("Name")
    for fact in document.facts:
        table.add_row(fact.path or "-", fact.name or "")
    console.print(table)
    console.print(f"{len(document.facts)} facts")


def display_summary(summary: Summary):
    """Display an evaluation summary."""
    table = Table(title="Eligibility Checks")
    table.add_column("Credit", style="cyan")
    table.add_column("ID check", justify="center")
    for check in summary.checks:
        color = {"Eligible ✓": "green", "Ineligible ✗": "red"}.get(check.status, "yellow")
        table.add_row(check.label, f"[{color}]{check.status}[/{color}]")
    console.print(table)

    if summary.qualifies:
        body = "\n".join(f"{line.label}: {line.formatted}" for line in summary.lines)
        if len(summary.lines) > 1:
            body += f"\n\n[bold]Total: {summary.formatted_total}[/bold]"
        title = "[bold green]You may qualify[/bold green]"
        border = "green"
    else:
        body = summary.formatted_total
        title = "[bold red]Not eligible[/bold red]"
        border = "red"

    if summary.notes:
        body += "\n\n" + " ".join(summary.notes)
    console.print(Panel(body.strip(), title=title, border_style=border))


@cli.command()
@click.option("--state", "filing_state", required=True, help="Filing state (e.g., CO, MD)")
@click.option("--status", "filing_status", required=True, help="Filing status (e.g., Single)")
@click.option("--primary-id", required=True, help="Primary filer tax ID: SSN, ITIN or Neither")
@click.option("--secondary-id", help="Spouse tax ID for joint filers")
@click.option("--children", default=0, type=int, help="Number of qualifying children")
@click.option("--results", type=click.Path(exists=True), help="Recorded fact graph results (YAML/JSON)")
@click.option("--engine", help="Engine factory as module:callable")
@click.option("--facts", help="Directory or base URL of the fact dictionaries")
@click.option("--config", "config_file", type=click.Path(exists=True), help="YAML config file")
@click.option("--json", "as_json", is_flag=True, help="Print the summary as JSON")
@click.option("--show-graph", is_flag=True, help="Print the fact graph state")
def evaluate(
    filing_state, filing_status, primary_id, secondary_id, children,
    results, engine, facts, config_file, as_json, show_graph,
):
    """Check credit eligibility for one household."""
    inputs = CreditInputs(
        filing_state=filing_state,
        filing_status=filing_status,
        primary_tax_id=primary_id,
        secondary_tax_id=secondary_id,
        num_qualifying_children=children,
    )

    try:
        if results:
            graph = ReplayFactGraph.from_file(results)
            summary = evaluate_graph(graph, inputs)
            graph_json = graph.to_json()
        else:
            config = CalculatorConfig.from_yaml(config_file) if config_file else CalculatorConfig()
            config = CalculatorConfig.from_env(config)
            if engine:
                config.engine = engine
            if facts:
                config.facts_location = facts
            session = CalculatorSession.from_config(config)
            summary = session.evaluate(inputs)
            graph_json = session.graph_json()
    except (CreditCalculatorError, ValueError, ImportError, yaml.YAMLError) as e:
        raise click.ClickException(str(e))

    if as_json:
        click.echo(json.dumps(summary.to_dict(), indent=2))
    else:
        display_summary(summary)

    if show_graph:
        console.print(Panel(graph_json, title="Fact Graph", border_style="blue"))


if __name__ == "__main__":
    cli()
