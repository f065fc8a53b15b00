# src/oneline/cli.py
"""
OneLine Command Line Interface (CLI).

This module implements the user-facing terminal interface using `typer` and `rich`.

Features
--------
- **Status Spinners**: Visual feedback while the model writes the timeline.
- **Rich Rendering**: Summary panel, one block per event, actors shown in
  their own colors, event details rendered as Markdown.
- **Date Range & Order**: ``--range``/``--start``/``--end`` drive both the
  hint sent to the model and the local filter; ``--desc`` lists newest first.
- **Flight Recorder**: Every raw answer is saved to `artifacts/runs/` and can
  be re-parsed later with `replay`, without calling the model again.
- **Local Config**: `config show/set/clear` manages the stored API settings.

Usage
-----
    # Build a timeline (Record Mode)
    $ oneline timeline "OpenAI 董事会风波" --range year --desc

    # Re-render a past run (Replay Mode)
    $ oneline replay artifacts/runs/20250301_101500_OpenAI.json --range custom --start 2023-11-01
"""

from __future__ import annotations

import json
import re
import time
import traceback
from datetime import date, datetime
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.prompt import Prompt
from rich.table import Table
from rich.text import Text

from oneline.core.config import (
    AccessDenied,
    ConfigurationError,
    clear_user_api_config,
    env_api_config,
    has_access_password,
    require_access,
    resolve_api_config,
    save_user_api_config,
)
from oneline.core.contracts.filters import DateFilterConfig, SortDirection
from oneline.core.contracts.timeline import Actor, TimelineEvent
from oneline.core.settings import Settings, load_settings
from oneline.core.storage import KeyValueStore
from oneline.export import write_export
from oneline.pipelines.timeline_session import TimelineSession

# Ensure env vars (like ONELINE_API_KEY) are loaded before any logic runs
load_dotenv()

# Initialize Typer app and Rich console
app = typer.Typer(
    help="OneLine: turn any topic into an AI-generated event timeline.",
    rich_markup_mode="markdown",
)
config_app = typer.Typer(help="Show or change the locally stored API configuration.")
app.add_typer(config_app, name="config")
console = Console()

RANGE_CHOICES = ("all", "month", "halfYear", "year", "custom")
DEFAULT_RUNS_DIR = Path("artifacts/runs")

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")


# --------------------------------------------------------------------------- #
# Helpers: Options & Access
# --------------------------------------------------------------------------- #


def _parse_day(value: str | None, flag: str) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise typer.BadParameter(f"expected YYYY-MM-DD, got {value!r}", param_hint=flag) from exc


def _build_date_filter(range_: str, start: str | None, end: str | None) -> DateFilterConfig:
    """Helper: Translate CLI flags into a :class:`DateFilterConfig`.

    Giving ``--start`` or ``--end`` implies ``--range custom``.
    """
    if range_ not in RANGE_CHOICES:
        raise typer.BadParameter(
            f"must be one of: {', '.join(RANGE_CHOICES)}", param_hint="--range"
        )
    start_day = _parse_day(start, "--start")
    end_day = _parse_day(end, "--end")
    if start_day or end_day or range_ == "custom":
        return DateFilterConfig.custom(start_day, end_day)
    return DateFilterConfig(option=range_)  # type: ignore[arg-type]


def _check_access(settings: Settings, password: str | None) -> None:
    """Helper: Enforce the shared access password, prompting if needed."""
    if not has_access_password(settings):
        return
    if password is None:
        password = typer.prompt("Access password", hide_input=True)
    try:
        require_access(settings, password)
    except AccessDenied as e:
        console.print(f"[bold red]❌ {e}[/bold red]")
        raise typer.Exit(code=1) from e


# --------------------------------------------------------------------------- #
# Helpers: Rendering
# --------------------------------------------------------------------------- #


def _actor_badge(actor: Actor) -> Text:
    color = actor.color if _HEX_COLOR.match(actor.color) else "cyan"
    badge = Text("● ", style=color)
    badge.append(actor.name, style=f"bold {color}")
    if actor.role:
        badge.append(f" - {actor.role}", style="dim")
    return badge


def _render_event(number: int, event: TimelineEvent) -> None:
    header = Text(f"{number:>2}. ", style="bold")
    header.append(event.date or "????", style="bold magenta")
    header.append("  ")
    header.append(event.title or "(untitled)", style="bold")
    console.print(header)

    if event.description:
        console.print(Text(event.description), style="default")
    if event.people:
        line = Text("    ")
        for idx, actor in enumerate(event.people):
            if idx:
                line.append("   ")
            line.append(_actor_badge(actor))
        console.print(line)
    if event.source:
        console.print(f"    [dim]来源：{event.source}[/dim]")
    console.print("")


def _render_session(session: TimelineSession) -> list[TimelineEvent]:
    """
    Helper: Render summary and visible events; return what was shown.

    Used by both `timeline` (live) and `replay` (cached) so the output
    looks the same either way.
    """
    console.rule(f"[bold]{session.query}[/bold]")
    if session.result.summary:
        console.print(Panel(Markdown(session.result.summary), title="总结", border_style="cyan"))

    if session.warning:
        console.print(f"[bold yellow]⚠️ {session.warning}[/bold yellow]")

    events = session.visible_events
    total = len(session.result.events)
    order = "从远到近" if session.sort_direction is SortDirection.ASC else "从近到远"
    console.print(
        f"[dim]{len(events)} of {total} event(s) · range={session.date_filter.option} · {order}[/dim]\n"
    )
    for number, event in enumerate(events, start=1):
        _render_event(number, event)
    return events


def _render_detail(session: TimelineSession) -> None:
    detail = session.current_detail
    event = session.selected_event
    if detail is None or event is None:
        return
    console.rule(f"[bold]{event.title}[/bold] [dim]({event.date})[/dim]")
    for section in detail.sections:
        if section.title:
            console.print(f"[bold yellow]## {section.title}[/bold yellow]")
        console.print(Markdown(section.content))
        console.print("")


def _details_loop(session: TimelineSession, events: list[TimelineEvent]) -> None:
    """Helper: Interactively fetch details for events picked by number."""
    while events:
        choice = Prompt.ask("Event number for details (blank to finish)", default="")
        if not choice.strip():
            return
        if not choice.strip().isdigit() or not 1 <= int(choice) <= len(events):
            console.print(f"[yellow]Pick a number between 1 and {len(events)}.[/yellow]")
            continue

        event = events[int(choice) - 1]
        session.select_event(event.id)
        try:
            with console.status(f"[cyan]Analysing “{event.title}”..."):
                session.request_detail()
        except Exception as e:
            console.print(f"[bold red]❌ Detail Error:[/bold red] {e}")
            continue
        _render_detail(session)


# --------------------------------------------------------------------------- #
# Helpers: State Management (Record & Replay)
# --------------------------------------------------------------------------- #


def _save_run_state(session: TimelineSession, runs_dir: Path) -> Path:
    """
    Helper: Serialize the raw answer and its request context for replay.

    The raw text (not the parsed events) is stored so that replays go through
    the current parser.
    """
    runs_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    safe_name = re.sub(r"[\s\\/]+", "_", session.query)[:40] or "timeline"
    save_path = runs_dir / f"{timestamp}_{safe_name}.json"

    payload: dict[str, Any] = {
        "meta": {
            "query": session.query,
            "timestamp": timestamp,
            "model": session.api_config.model,
            "date_filter": session.date_filter.model_dump(mode="json"),
        },
        "raw": session.raw,
    }

    with open(save_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)

    return save_path


def _load_run_state(json_path: Path) -> tuple[str, str]:
    """Helper: Return ``(query, raw)`` from a saved run file."""
    with open(json_path, encoding="utf-8") as f:
        data = json.load(f)
    meta = data.get("meta", {})
    return str(meta.get("query", json_path.stem)), str(data.get("raw", ""))


# --------------------------------------------------------------------------- #
# Commands
# --------------------------------------------------------------------------- #


@app.command()  # type: ignore[misc]
def timeline(
    query: Annotated[str, typer.Argument(help="Topic to build a timeline for.")],
    range_: Annotated[
        str,
        typer.Option("--range", "-r", help="all | month | halfYear | year | custom"),
    ] = "all",
    start: Annotated[
        str | None, typer.Option("--start", help="Custom range start (YYYY-MM-DD).")
    ] = None,
    end: Annotated[str | None, typer.Option("--end", help="Custom range end (YYYY-MM-DD).")] = None,
    desc: Annotated[bool, typer.Option("--desc", help="List newest events first.")] = False,
    model: Annotated[
        str | None,
        typer.Option("--model", "-m", help="Override the model name for this run."),
    ] = None,
    export: Annotated[
        Path | None,
        typer.Option("--export", "-o", help="Write the shown timeline as Markdown (file or dir)."),
    ] = None,
    details: Annotated[
        bool,
        typer.Option("--details/--no-details", "-d", help="Ask for event details afterwards."),
    ] = False,
    save: Annotated[
        bool, typer.Option("--save/--no-save", help="Record the raw answer for replay.")
    ] = True,
    runs_dir: Annotated[
        Path, typer.Option("--runs-dir", help="Where run records are written.")
    ] = DEFAULT_RUNS_DIR,
    password: Annotated[
        str | None, typer.Option("--password", "-p", help="Access password, if one is set.")
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show full error tracebacks for debugging."),
    ] = False,
) -> None:
    """
    Ask the model for a timeline of QUERY and render it (Record Mode).
    """
    settings = load_settings()
    _check_access(settings, password)
    date_filter = _build_date_filter(range_, start, end)

    store = KeyValueStore.from_settings(settings)
    if model and not settings.allow_user_config:
        console.print(
            "[dim yellow]Warning: --model ignored; user configuration is disabled "
            "(ONELINE_ALLOW_USER_CONFIG).[/dim yellow]"
        )
    api_config = resolve_api_config(settings, store, {"model": model} if model else None)
    try:
        api_config.require()
    except ConfigurationError as e:
        console.print(f"[bold red]❌ {e}[/bold red]")
        console.print("[dim]Set ONELINE_API_ENDPOINT / ONELINE_API_KEY or use `oneline config set`.[/dim]")
        raise typer.Exit(code=1) from e

    session = TimelineSession(api_config, timeout_seconds=settings.request_timeout)
    session.set_date_filter(date_filter)
    session.set_sort_direction(SortDirection.DESC if desc else SortDirection.ASC)

    console.print(
        Panel.fit(
            f"[bold cyan]OneLine CLI[/bold cyan]\nTopic: [u]{query}[/u]",
            border_style="cyan",
        )
    )
    start_time = time.time()

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task(f"[yellow]{api_config.model} is writing the timeline...", total=None)
            session.generate(query)
    except Exception as e:
        console.print(f"\n[bold red]❌ Request Error:[/bold red] {e}")
        if verbose:
            traceback.print_exc()
        raise typer.Exit(code=1) from e

    duration = time.time() - start_time
    console.print(f"\n[bold green]✅ Complete![/bold green] (took {duration:.1f}s)\n")

    shown = _render_session(session)

    if save:
        try:
            saved_json = _save_run_state(session, runs_dir)
            console.print(f"[dim]Run state saved to: {saved_json}[/dim]")
        except OSError as e:
            console.print(f"[dim yellow]Warning: Could not save run state: {e}[/dim yellow]")

    if export is not None:
        path = write_export(export, session.query, session.result.summary, shown)
        console.print(Panel(f"Saved to: {path}", title="Export", border_style="green"))

    if details:
        _details_loop(session, shown)


@app.command()  # type: ignore[misc]
def replay(
    run_file: Annotated[
        Path,
        typer.Argument(
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            help="Path to the JSON run artifact (in artifacts/runs/).",
        ),
    ],
    range_: Annotated[
        str,
        typer.Option("--range", "-r", help="all | month | halfYear | year | custom"),
    ] = "all",
    start: Annotated[str | None, typer.Option("--start", help="Custom range start.")] = None,
    end: Annotated[str | None, typer.Option("--end", help="Custom range end.")] = None,
    desc: Annotated[bool, typer.Option("--desc", help="List newest events first.")] = False,
    export: Annotated[
        Path | None, typer.Option("--export", "-o", help="Write the shown timeline as Markdown.")
    ] = None,
) -> None:
    """
    Re-parse and render a saved run without calling the model.
    """
    console.print(
        Panel.fit(
            f"[bold magenta]OneLine Replay[/bold magenta]\nLoading: [u]{run_file.name}[/u]",
            border_style="magenta",
        )
    )
    date_filter = _build_date_filter(range_, start, end)

    try:
        query, raw = _load_run_state(run_file)
    except (OSError, ValueError) as e:
        console.print(f"\n[bold red]❌ Replay Error:[/bold red] {e}")
        raise typer.Exit(code=1) from e

    session = TimelineSession(env_api_config(load_settings()))
    session.set_date_filter(date_filter)
    session.set_sort_direction(SortDirection.DESC if desc else SortDirection.ASC)
    session.load_raw(query, raw)

    shown = _render_session(session)
    if export is not None:
        path = write_export(export, session.query, session.result.summary, shown)
        console.print(Panel(f"Saved to: {path}", title="Export", border_style="green"))


@config_app.command("show")  # type: ignore[misc]
def config_show() -> None:
    """Print the effective API configuration (key masked)."""
    settings = load_settings()
    store = KeyValueStore.from_settings(settings)
    resolved = resolve_api_config(settings, store)

    table = Table(title="API configuration", show_header=True, header_style="bold")
    table.add_column("Setting")
    table.add_column("Value")
    for name, value in resolved.masked().items():
        table.add_row(name, value or "[dim](unset)[/dim]")
    table.add_row("allow_user_config", str(settings.allow_user_config))
    table.add_row("password_required", str(has_access_password(settings)))
    table.add_row("storage_dir", str(settings.storage_dir))
    console.print(table)

    if not resolved.is_configured:
        console.print("[yellow]Endpoint and API key are required before requesting a timeline.[/yellow]")


@config_app.command("set")  # type: ignore[misc]
def config_set(
    endpoint: Annotated[str | None, typer.Option("--endpoint", help="Chat endpoint URL.")] = None,
    model: Annotated[str | None, typer.Option("--model", help="Model name.")] = None,
    api_key: Annotated[str | None, typer.Option("--api-key", help="API key.")] = None,
    password: Annotated[
        str | None, typer.Option("--password", "-p", help="Access password, if one is set.")
    ] = None,
) -> None:
    """Store API settings locally; they override the environment."""
    settings = load_settings()
    _check_access(settings, password)
    store = KeyValueStore.from_settings(settings)
    try:
        save_user_api_config(settings, store, endpoint=endpoint, model=model, api_key=api_key)
    except ConfigurationError as e:
        console.print(f"[bold red]❌ {e}[/bold red]")
        raise typer.Exit(code=1) from e
    console.print("[green]Saved.[/green]")
    config_show()


@config_app.command("clear")  # type: ignore[misc]
def config_clear(
    password: Annotated[
        str | None, typer.Option("--password", "-p", help="Access password, if one is set.")
    ] = None,
) -> None:
    """Remove the locally stored API settings."""
    settings = load_settings()
    _check_access(settings, password)
    try:
        removed = clear_user_api_config(settings, KeyValueStore.from_settings(settings))
    except ConfigurationError as e:
        console.print(f"[bold red]❌ {e}[/bold red]")
        raise typer.Exit(code=1) from e
    console.print("[green]Cleared.[/green]" if removed else "[dim]Nothing stored.[/dim]")


if __name__ == "__main__":
    app()
