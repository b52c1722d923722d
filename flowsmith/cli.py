#!/usr/bin/env python3
# flowsmith/cli.py

from pathlib import Path
from typing import Optional

import typer

from flowsmith.builder.scenarios import SCENARIOS, build
from flowsmith.errors import FlowsmithError
from flowsmith.snippets.library import get_snippet, list_snippets
from flowsmith.utils.io import dump_json, dump_yaml, slugify_filename, write_json, write_text, write_yaml
from flowsmith.utils.logger import get_logger

app = typer.Typer(help="flowsmith CLI - Generate n8n workflow documents for fixed automation scenarios")
logger = get_logger("cli")

FORMATS = ("json", "yaml")


def _fail(err: Exception) -> None:
    typer.echo(f"[error] {err}", err=True)
    raise typer.Exit(code=2)


@app.command()
def scenarios():
    """List the scenario categories that `generate` accepts."""
    for info in SCENARIOS:
        print(f"{info.category.value:<10} {info.title:<20} {info.summary}")


@app.command()
def generate(
    category: str = typer.Argument(..., help="Scenario category: sync | approval | payroll"),
    name: str = typer.Option("My Workflow", "--name", "-n", help="Workflow display name (copied verbatim)"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write the document to this path"),
    out_dir: Optional[Path] = typer.Option(
        None, "--out-dir", help="Write to <out-dir>/<slugified name>.<format>"
    ),
    indent: int = typer.Option(2, "--indent", min=0, help="JSON indentation"),
    fmt: str = typer.Option("json", "--format", "-f", help="Output format: json | yaml"),
):
    """
    Build the workflow document for CATEGORY and print it, or write it to a file.
    """
    fmt = fmt.lower()
    if fmt not in FORMATS:
        raise typer.BadParameter(f"Invalid format '{fmt}'. Choose one of: {', '.join(FORMATS)}")
    if out is not None and out_dir is not None:
        raise typer.BadParameter("Use either --out or --out-dir, not both")

    try:
        document = build(category, name)
    except FlowsmithError as e:
        _fail(e)

    payload = document.to_dict()

    target = out
    if out_dir is not None:
        target = out_dir / slugify_filename(name, suffix=f".{fmt}")

    if target is None:
        text = dump_json(payload, indent=indent) + "\n" if fmt == "json" else dump_yaml(payload)
        print(text, end="")
        return

    if fmt == "json":
        write_json(target, payload, indent=indent)
    else:
        write_yaml(target, payload)
    logger.info("wrote %s workflow to %s", category, target)
    print(f"[ok] wrote {target}")


@app.command("snippets")
def snippets_cmd():
    """List the static integration snippets."""
    for s in list_snippets():
        print(f"{s.key:<10} {s.title:<28} {s.filename}")


@app.command()
def snippet(
    key: str = typer.Argument(..., help="Snippet key (see `snippets`)"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write the snippet to this path"),
):
    """Print one integration snippet, or write it to a file."""
    try:
        s = get_snippet(key)
    except FlowsmithError as e:
        _fail(e)

    if out is None:
        print(f"# {s.filename}: {s.description}")
        print(s.code, end="")
        return

    write_text(out, s.code)
    print(f"[ok] wrote {out}")


if __name__ == "__main__":
    app()
