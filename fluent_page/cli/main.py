"""
CLI entrypoint.

doctor: print effective settings.
validate: offline check of a page script (JSON array of ActionSpec).
run: execute a page script in a fresh browser page, stopping at the first failure.
html: print the outer HTML of a URL.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
from pydantic import TypeAdapter, ValidationError
from rich.console import Console
from rich.table import Table

from ..core.settings import settings
from ..core.action import ActionSpec
from ..core import registry
from ..core.errors import FluentPageError
from ..core.logging import setup_logging
from ..core.controller.runner import Runner, StepOutcome
from ..core.page import Page


app = typer.Typer(help="fluent-page CLI")
console = Console()


@app.callback()
def _configure(
    log_level: str = typer.Option(settings.log_level, "--log-level", help="Logging level"),
) -> None:
    setup_logging(log_level)


def _load_specs(script: Path, command: str) -> list[ActionSpec]:
    if not script.exists():
        typer.secho(f"[{command}] file not found: {script}", fg=typer.colors.RED)
        raise typer.Exit(code=2)
    try:
        data = json.loads(script.read_text(encoding="utf-8"))
        specs = TypeAdapter(list[ActionSpec]).validate_python(data)
    except json.JSONDecodeError as je:
        typer.secho(f"[{command}] invalid JSON: {je}", fg=typer.colors.RED)
        raise typer.Exit(code=2)
    except ValidationError as ve:
        typer.secho(f"[{command}] invalid file format for ActionSpec[]", fg=typer.colors.RED)
        console.print(ve)
        raise typer.Exit(code=2)

    # importing registers the actions
    import fluent_page.actions.impl  # noqa: F401

    return specs


@app.command("doctor")
def doctor() -> None:
    """Environment check: print key settings to confirm CLI is usable."""
    console.print("[bold green]fluent-page[/] environment")
    console.print(f"- browser:  {settings.browser}")
    console.print(f"- headless: {settings.headless}")
    console.print(f"- proxy:    {settings.proxy or '-'}")
    console.print(f"- timeout:  {settings.default_timeout_ms}ms")
    actions = _actions()
    page_actions = sorted(n for n, m in actions.items() if not m.targets_element)
    element_actions = sorted(n for n, m in actions.items() if m.targets_element)
    console.print(f"- page actions:    {', '.join(page_actions)}")
    console.print(f"- element actions: {', '.join(element_actions)}")


def _actions() -> dict[str, registry.ActionMeta]:
    import fluent_page.actions.impl  # noqa: F401

    return registry.list_actions()


@app.command("validate")
def validate(script: Path = typer.Argument(..., help="Path to JSON file of ActionSpec[]")) -> None:
    """
    Offline validation: check each step's name is registered and its args
    fit the bound params model. Exit non-zero on any failure.
    """
    specs = _load_specs(script, "validate")

    table = Table(title="Validation Results", show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("name")
    table.add_column("result")
    table.add_column("detail")

    failures = 0
    for i, spec in enumerate(specs, start=1):
        try:
            registry.validate_spec(spec)
            table.add_row(str(i), spec.name, "[green]OK[/]", "-")
        except KeyError as ke:
            failures += 1
            table.add_row(str(i), spec.name, "[red]Not Registered[/]", str(ke))
        except ValidationError as ve:
            failures += 1
            msg = ve.errors()[0].get("msg", "invalid args")
            table.add_row(str(i), spec.name, "[red]Invalid Args[/]", msg)

    console.print(table)
    if failures:
        raise typer.Exit(code=1)
    typer.secho("[validate] all specs passed", fg=typer.colors.GREEN)


@app.command("run")
def run(
    script: Path = typer.Argument(..., help="Path to JSON file of ActionSpec[]"),
    headless: bool = typer.Option(
        settings.headless, "--headless/--no-headless", help="Run browser headless"
    ),
    proxy: Optional[str] = typer.Option(None, "--proxy", help="Proxy server, e.g. http://host:3128"),
    artifacts_dir: Optional[Path] = typer.Option(
        None, "--artifacts-dir", help="Where to save failure screenshots"
    ),
) -> None:
    """
    Execute a page script: read JSON -> structure check -> run steps in one page.
    Prints a table of results; returns non-zero on any failure.
    """
    specs = _load_specs(script, "run")

    try:
        page = Page.new(headless, proxy)
    except FluentPageError as e:
        typer.secho(f"[run] {e}", fg=typer.colors.RED)
        raise typer.Exit(code=2)

    with page:
        rows: list[StepOutcome] = Runner(artifacts_dir=artifacts_dir).run(page, specs)

    table = Table(title="Run Results", show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("name")
    table.add_column("result")
    table.add_column("detail")

    failures = 0
    for r in rows:
        if r.skipped:
            result = "[yellow]SKIP[/]"
        elif r.ok:
            result = "[green]OK[/]"
        else:
            result = "[red]FAIL[/]"
            failures += 1
        detail = r.detail
        if r.artifact_path:
            detail = f"{detail} (artifact: {r.artifact_path})"
        table.add_row(str(r.index), r.name, result, detail)

    console.print(table)
    if failures:
        raise typer.Exit(code=1)
    typer.secho("[run] completed successfully", fg=typer.colors.GREEN)


@app.command("html")
def html(
    url: str = typer.Argument(..., help="Page to load"),
    headless: bool = typer.Option(settings.headless, "--headless/--no-headless"),
    proxy: Optional[str] = typer.Option(None, "--proxy"),
) -> None:
    """Print the outer HTML of `url`."""
    try:
        with Page.new(headless, proxy) as page:
            page.navigate(url)
            content = page.html()
    except FluentPageError as e:
        typer.secho(f"[html] {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    typer.echo(content)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
