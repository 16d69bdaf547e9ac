from __future__ import annotations

import logging
import pathlib
from typing import List, Optional

import typer

from .core.aliases import AliasTable, DEFAULT_ALIASES_PATH, load_aliases
from .core.errors import AliasTableError
from .core.present import SortKey, build_table, render_text, sort_rows
from .parse.documents import Document, process_documents


app = typer.Typer(add_completion=False, help="Compare standardized scores across HTML result tables")


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_table(path: Optional[pathlib.Path]) -> AliasTable:
    try:
        return load_aliases(path or DEFAULT_ALIASES_PATH)
    except (AliasTableError, OSError) as exc:
        typer.echo(f"cannot load alias table: {exc}", err=True)
        raise typer.Exit(2)


@app.command("compare")
def compare(
    files: List[pathlib.Path] = typer.Argument(..., help="HTML result files"),
    aliases: Optional[pathlib.Path] = typer.Option(
        None, "--aliases", envvar="STD_SCORE_ALIASES", help="YAML alias table"
    ),
    precision: int = typer.Option(2, "--precision", min=0, max=6, help="decimal places"),
    sort: str = typer.Option("avg", "--sort", help="name|avg|std|raw"),
    file: Optional[str] = typer.Option(None, "--file", help="file label for --sort std|raw"),
    ascending: bool = typer.Option(False, "--ascending", help="lowest first (default for scores is highest first)"),
    descending: bool = typer.Option(False, "--descending", help="highest first (default for names is A-Z)"),
    workers: Optional[int] = typer.Option(None, "--workers", min=1, help="parser threads"),
    show_diagnostics: bool = typer.Option(False, "--show-diagnostics", help="list skipped rows and other issues"),
    log_level: str = typer.Option("WARNING", "--log-level", envvar="STD_SCORE_LOG_LEVEL"),
):
    """Print every competitor's standardized score per file and their average."""
    _setup_logging(log_level)
    sort = sort.lower().strip()
    if sort not in {k.value for k in SortKey}:
        typer.echo("--sort must be one of name, avg, std, raw", err=True)
        raise typer.Exit(2)
    key = SortKey(sort)
    if key in (SortKey.STD, SortKey.RAW) and file is None:
        typer.echo(f"--sort {sort} needs --file LABEL", err=True)
        raise typer.Exit(2)

    if ascending and descending:
        typer.echo("--ascending and --descending are exclusive", err=True)
        raise typer.Exit(2)
    order: Optional[bool] = None  # default per sort key
    if ascending:
        order = False
    elif descending:
        order = True

    table = _load_table(aliases)
    docs: List[Document] = []
    failed_reads = []
    for path in files:
        # Label by file name, like a dropped file
        try:
            docs.append(Document(source_label=path.name, content=path.read_bytes()))
        except OSError as exc:
            failed_reads.append(f"Loading failed {path}: {exc}")

    agg = process_documents(docs, table, max_workers=workers)
    if key in (SortKey.STD, SortKey.RAW) and file not in agg.file_order:
        typer.echo(f"--file {file!r} is not one of the loaded files", err=True)
        raise typer.Exit(2)

    if agg.rows:
        rows = sort_rows(agg.rows, key, file_label=file, descending=order)
        header, body = build_table(agg, precision, rows)
        typer.echo(render_text(header, body))

    for message in failed_reads:
        typer.echo(message, err=True)
    for failure in agg.failures:
        typer.echo(f"Parsing failed {failure.source_label}: {failure.reason}", err=True)
    if show_diagnostics:
        for d in agg.diagnostics:
            where = f" row {d.row_index}" if d.row_index is not None else ""
            typer.echo(f"[{d.kind.value}] {d.source_label}{where}: {d.message}", err=True)

    if not agg.file_order:
        raise typer.Exit(1)


@app.command("aliases")
def show_aliases(
    aliases: Optional[pathlib.Path] = typer.Option(
        None, "--aliases", envvar="STD_SCORE_ALIASES", help="YAML alias table"
    ),
):
    """Print the effective alias table."""
    table = _load_table(aliases)
    for key, value in table.items():
        typer.echo(f"{key} -> {value}")


if __name__ == "__main__":
    app()
