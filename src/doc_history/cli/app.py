"""
Main CLI application for doc-history.

Provides a Typer-based command-line interface for committing text documents,
browsing their history, comparing versions and restoring old ones.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..config import get_config_manager, load_config
from ..errors import (
    ConflictError,
    DocHistoryError,
    InvalidInputError,
    NotFoundError,
    SizeExceededError,
)
from ..history import VersionHistory
from ..version.diff_engine import DiffOptions, DiffResult
from ..version.hunks import Change, ChangeKind

# Initialize Typer app
app = typer.Typer(
    name="doc-history",
    help="Version history and diffs for text documents",
    add_completion=False,
    rich_markup_mode="rich"
)

# Global console for rich output
console = Console()

_history: Optional[VersionHistory] = None

_STYLES = {
    ChangeKind.CONTEXT: "",
    ChangeKind.ADDED: "green",
    ChangeKind.DELETED: "red",
}
_PREFIXES = {
    ChangeKind.CONTEXT: " ",
    ChangeKind.ADDED: "+",
    ChangeKind.DELETED: "-",
}


def get_history() -> VersionHistory:
    """Get or create the history service for the configured storage."""
    global _history
    if _history is None:
        _history = VersionHistory.from_config(load_config())
    return _history


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """
    Track versions of text documents and compare them.
    """
    level = "DEBUG" if verbose else load_config().log_level
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _fail(error: DocHistoryError) -> NoReturn:
    """Print a user-facing message for an error and exit."""
    if isinstance(error, ConflictError):
        message = f"Someone else changed this document, retry (head is now {error.actual})"
    elif isinstance(error, SizeExceededError):
        message = f"Document too large to diff ({error.actual} {error.unit}, limit {error.limit})"
    elif isinstance(error, NotFoundError):
        message = f"Version no longer exists: {error}"
    elif isinstance(error, InvalidInputError):
        message = f"Invalid input: {error}"
    else:
        message = str(error)
    console.print(f"[red]Error: {message}[/red]")
    raise typer.Exit(1)


@app.command()
def commit(
    document_id: str = typer.Argument(..., help="Document to commit to"),
    file_path: Path = typer.Argument(..., help="Text file holding the new content"),
    message: str = typer.Option("", "--message", "-m", help="Commit message"),
    author: Optional[str] = typer.Option(None, "--author", "-a", help="Author (default: configured actor)"),
    parent: Optional[int] = typer.Option(None, "--parent", "-p", help="Expected parent version (default: current head)"),
) -> None:
    """
    Commit the contents of a file as a new version.
    """
    if not file_path.exists():
        console.print(f"[red]Error: File not found: {file_path}[/red]")
        raise typer.Exit(1)

    history = get_history()
    actor = author or load_config().store.default_actor
    expected = parent if parent is not None else history.head(document_id)

    try:
        content = file_path.read_text(encoding="utf-8")
        snapshot = history.new_snapshot(content, author=actor, message=message)
        version = history.commit_version(document_id, snapshot, expected, actor)
    except UnicodeDecodeError:
        console.print(f"[red]Error: {file_path} is not a UTF-8 text file[/red]")
        raise typer.Exit(1)
    except DocHistoryError as e:
        _fail(e)

    console.print(f"[green]Committed {document_id} as version {version.sequence}[/green]")


@app.command()
def history(
    document_id: str = typer.Argument(..., help="Document to show history for"),
    max_count: int = typer.Option(20, "--count", "-n", help="Maximum number of versions to show"),
) -> None:
    """
    Show a document's version history.
    """
    try:
        versions = get_history().list_versions(document_id)
    except DocHistoryError as e:
        _fail(e)

    history_table = Table(title=f"Document History ({document_id})")
    history_table.add_column("Version", style="cyan")
    history_table.add_column("Message", style="white")
    history_table.add_column("Author", style="yellow")
    history_table.add_column("Date", style="blue")

    head = versions[-1].sequence
    for version in reversed(versions[-max_count:]):
        marker = "→ " if version.sequence == head else "  "
        history_table.add_row(
            f"{marker}{version.sequence}",
            version.message,
            version.author,
            version.created_at.strftime("%Y-%m-%d %H:%M:%S"),
        )

    console.print(history_table)


@app.command()
def show(
    document_id: str = typer.Argument(..., help="Document id"),
    sequence: int = typer.Argument(..., help="Version to print"),
    output_file: Optional[Path] = typer.Option(None, "--output", "-o", help="Write content to file"),
) -> None:
    """
    Print the content of a version.
    """
    try:
        version = get_history().get_version(document_id, sequence)
    except DocHistoryError as e:
        _fail(e)

    if output_file:
        output_file.write_text(version.content, encoding="utf-8")
        console.print(f"[green]Version {sequence} written to {output_file}[/green]")
    else:
        console.print(version.content, markup=False, highlight=False, end="")


def _render_change(change: Change) -> Text:
    line = Text(_PREFIXES[change.kind], style=_STYLES[change.kind])
    if change.word_diff is None:
        line.append(change.text, style=_STYLES[change.kind])
        return line

    # Deleted lines show context + deleted segments, added lines context + added.
    for segment in change.word_diff:
        if segment.kind is ChangeKind.CONTEXT:
            line.append(segment.text, style=_STYLES[change.kind])
        elif segment.kind is change.kind:
            line.append(segment.text, style=f"bold {_STYLES[change.kind]} reverse")
    return line


def _render_diff(result: DiffResult) -> Text:
    elided = {e.hunk_index: e for e in result.elided}
    output = Text()

    for index, hunk in enumerate(result.hunks):
        if index in elided:
            e = elided[index]
            output.append(f"⋯ {e.line_count} unchanged lines ({e.old_start}-{e.old_end})\n", style="dim")
        output.append(hunk.header + "\n", style="cyan")
        for change in hunk.changes:
            output.append_text(_render_change(change))
            output.append("\n")

    trailing = elided.get(len(result.hunks))
    if trailing:
        output.append(
            f"⋯ {trailing.line_count} unchanged lines ({trailing.old_start}-{trailing.old_end})\n",
            style="dim",
        )
    return output


@app.command()
def diff(
    document_id: str = typer.Argument(..., help="Document id"),
    version1: int = typer.Argument(..., help="First version"),
    version2: int = typer.Argument(..., help="Second version"),
    context: Optional[int] = typer.Option(None, "--context", "-U", help="Context lines around changes"),
    word_diff: bool = typer.Option(True, "--word-diff/--no-word-diff", help="Highlight changed words"),
    collapse: bool = typer.Option(True, "--collapse/--no-collapse", help="Elide long unchanged runs"),
    output_format: str = typer.Option("text", "--format", "-f", help="Output format: text, json"),
    output_file: Optional[Path] = typer.Option(None, "--output", "-o", help="Save diff to file"),
) -> None:
    """
    Show differences between two versions of a document.
    """
    history = get_history()
    options = DiffOptions(
        context_lines=context if context is not None else history.default_options.context_lines,
        word_diff=word_diff,
        collapse_unchanged=collapse,
    )

    try:
        result = history.compare_versions(document_id, version1, version2, options)
    except DocHistoryError as e:
        _fail(e)

    if output_format == "json":
        json_diff = json.dumps(result.to_dict(), indent=2)
        if output_file:
            output_file.write_text(json_diff)
            console.print(f"[green]JSON diff saved to {output_file}[/green]")
        else:
            console.print_json(json_diff)
        return

    if output_format != "text":
        console.print(f"[red]Error: Unknown format {output_format}[/red]")
        raise typer.Exit(1)

    if result.is_empty:
        console.print("[yellow]No differences found[/yellow]")
        return

    rendered = _render_diff(result)
    if output_file:
        output_file.write_text(rendered.plain)
        console.print(f"[green]Diff saved to {output_file}[/green]")
    else:
        console.print(Panel(
            rendered,
            title=f"Diff: {result.old_version_seq} → {result.new_version_seq}",
            border_style="blue"
        ))

    summary = history.engine.summarize_changes(result)
    console.print(Panel.fit(
        f"[bold]{summary['overview']}[/bold]\n"
        + ("\n".join(f"• {change}" for change in summary['content_changes']) or "None"),
        title="Change Summary",
        border_style="green"
    ))


@app.command()
def expand(
    document_id: str = typer.Argument(..., help="Document id"),
    version1: int = typer.Argument(..., help="First version"),
    version2: int = typer.Argument(..., help="Second version"),
    start: int = typer.Argument(..., help="First old-side line of the elided range"),
    end: int = typer.Argument(..., help="Last old-side line of the elided range"),
) -> None:
    """
    Show the lines of an elided range.
    """
    try:
        changes = get_history().expand_elided_range(document_id, version1, version2, start, end)
    except DocHistoryError as e:
        _fail(e)

    for change in changes:
        console.print(_render_change(change))


@app.command()
def restore(
    document_id: str = typer.Argument(..., help="Document id"),
    sequence: int = typer.Argument(..., help="Version to restore"),
    author: Optional[str] = typer.Option(None, "--author", "-a", help="Actor performing the restore"),
    expected_head: Optional[int] = typer.Option(None, "--expected-head", help="Fail unless this is still the head"),
) -> None:
    """
    Restore an old version by committing its content as a new version.
    """
    actor = author or load_config().store.default_actor
    try:
        version = get_history().restore_version(document_id, sequence, actor, expected_head)
    except DocHistoryError as e:
        _fail(e)

    console.print(f"[green]Restored version {sequence} as version {version.sequence}[/green]")


@app.command()
def config(
    show: bool = typer.Option(False, "--show", help="Show current configuration"),
    create_default: bool = typer.Option(False, "--create-default", help="Create default config file"),
) -> None:
    """
    Manage doc-history configuration.
    """
    config_manager = get_config_manager()

    if create_default:
        path = config_manager.create_default_config()
        console.print(f"[green]Created default configuration at {path}[/green]")
        return

    if show:
        config_info = config_manager.get_config_info()
        current_config = load_config()

        config_display = f"""[bold]doc-history Configuration[/bold]

[bold cyan]Diff Settings:[/bold cyan]
• Context Lines: {current_config.diff.context_lines}
• Word Diff: {current_config.diff.word_diff}
• Collapse Unchanged: {current_config.diff.collapse_unchanged}
• Max Lines: {current_config.diff.max_lines}
• Max Bytes: {current_config.diff.max_bytes}
• Max Edit Distance: {current_config.diff.max_edit_distance}
• Compare Workers: {current_config.diff.compare_workers}

[bold yellow]Store Settings:[/bold yellow]
• Storage Path: {config_info['storage_path']}
• Default Actor: {current_config.store.default_actor}

[bold magenta]Files:[/bold magenta]
• Config File: {config_info['config_file']}
• Exists: {'Yes' if config_info['config_exists'] else 'No'}"""

        console.print(Panel(config_display, border_style="green"))
        return

    console.print("Use [cyan]doc-history config --show[/cyan] to see full configuration")
    console.print("Use [cyan]doc-history config --create-default[/cyan] to create a default config file")


if __name__ == "__main__":
    app()
