from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from steadyload.core.config import SteadyloadConfig
from steadyload.core.credentials import Credentials
from steadyload.core.exceptions import (
    ConfigurationError,
    CredentialError,
    SlotOverrunError,
    SteadyloadError,
    UnknownBrowserError,
)
from steadyload.core.logging import configure_logging, get_logger
from steadyload.core.metrics import ensure_metrics_server
from steadyload.core.schemas import RunPlan, RunTimeline, SlotRecord
from steadyload.runner.scheduler import FixedDurationScheduler, execute_plan
from steadyload.scenarios import default_registry
from steadyload.session.driver import SUPPORTED_BROWSERS, launch_spec_for, validate_browser
from steadyload.store.timeline import write_timeline


app = typer.Typer(help="Fixed-duration browser workloads for power measurement.")
log = get_logger("cli")
console = Console()


def _validate_browser(value: str) -> str:
    try:
        return validate_browser(value)
    except UnknownBrowserError as exc:
        raise typer.BadParameter(
            f"{exc.message}. Expected one of: {', '.join(SUPPORTED_BROWSERS)}"
        ) from exc


def _print_slot(record: SlotRecord) -> None:
    tab = "new tab" if record.new_tab else "first tab"
    console.print(
        f"[green]✓[/green] loop {record.loop + 1} [bold]{record.scenario}[/bold] "
        f"[dim]{record.work_seconds:.1f}s work / {record.duration:g}s slot ({tab})[/dim]"
    )


def _summary_table(timeline: RunTimeline) -> Table:
    table = Table(show_header=True, header_style="bold cyan", box=None)
    table.add_column("Loop", justify="right", style="dim")
    table.add_column("Scenario")
    table.add_column("Start", justify="right")
    table.add_column("Work", justify="right")
    table.add_column("Idle", justify="right")
    table.add_column("Slot", justify="right", style="bold")
    for slot in timeline.slots:
        table.add_row(
            str(slot.loop + 1),
            slot.scenario,
            f"{slot.started_at:.1f}s",
            f"{slot.work_seconds:.1f}s",
            f"{slot.idle_seconds:.1f}s",
            f"{slot.duration:g}s",
        )
    return table


def _save_timeline(timeline_path: Optional[Path], timeline: Optional[RunTimeline]) -> None:
    if timeline_path is None or timeline is None:
        return
    write_timeline(timeline_path, timeline)
    console.print(f"[bold cyan]📄 Timeline:[/bold cyan] {timeline_path}")
    log.info("timeline_saved", path=str(timeline_path), slots=len(timeline.slots))


def _header(plan: RunPlan, browser: str) -> Panel:
    names = ", ".join(s.name for s in plan.scenarios)
    return Panel.fit(
        f"[bold cyan]Steadyload[/bold cyan] - [dim]fixed-duration browser workload[/dim]\n"
        f"[bold]Browser:[/bold] {browser} | [bold]Loops:[/bold] {plan.loops}\n"
        f"[bold]Scenarios:[/bold] {names}\n"
        f"[bold]Planned length:[/bold] {plan.planned_seconds:g}s",
        border_style="cyan",
        padding=(1, 2),
    )


@app.command()
def run(
    scenarios: List[str] = typer.Argument(..., help="'all' for the curated workload, or scenario names in run order"),
    browser: str = typer.Option(
        ...,
        "--browser",
        "-b",
        callback=_validate_browser,
        help=f"Browser to drive: {'|'.join(SUPPORTED_BROWSERS)}",
    ),
    loops: int = typer.Option(1, "--loops", "-l", min=1, help="Repeat the whole scenario list this many times"),
    credentials_file: Optional[Path] = typer.Option(
        None, "--credentials", help="Login records (JSON or YAML); default from config"
    ),
    timeline_path: Optional[Path] = typer.Option(
        None, "--timeline", help="Write per-slot timings as JSON to this path"
    ),
    config_path: Optional[Path] = typer.Option(
        None, "--config", help="YAML config (default: $STEADYLOAD_CONFIG or configs/config.yaml)"
    ),
) -> None:
    """Run scenarios in fixed-length slots on one browser."""
    try:
        cfg = SteadyloadConfig.load(config_path)
        configure_logging(cfg.logging.level, cfg.logging.json_output)
        plan = default_registry().build_plan(scenarios, loops)
        launch_spec_for(browser, cfg.browsers)
        credentials = Credentials.from_file(credentials_file or Path(cfg.credentials_file))
    except (ConfigurationError, CredentialError) as exc:
        console.print(f"[red]✖ {exc}[/red]")
        raise typer.Exit(code=2)

    if cfg.metrics.enabled:
        ensure_metrics_server(cfg.metrics.prometheus_port)

    console.print(_header(plan, browser))
    scheduler = FixedDurationScheduler(on_slot=_print_slot)

    try:
        timeline = asyncio.run(execute_plan(plan, browser, credentials, cfg, scheduler))
    except SlotOverrunError as exc:
        console.print(f"\n[red]❌ {exc}[/red]")
        console.print("[dim]The run was stopped; its timings are no longer comparable.[/dim]")
        _save_timeline(timeline_path, scheduler.timeline)
        raise typer.Exit(code=1)
    except SteadyloadError as exc:
        console.print(f"\n[red]❌ Run aborted: {exc}[/red]")
        _save_timeline(timeline_path, scheduler.timeline)
        raise typer.Exit(code=1)

    console.print(
        Panel(
            _summary_table(timeline),
            title="[bold green]✓ Workload Complete[/bold green]",
            border_style="green",
        )
    )
    console.print(f"Total: [bold]{timeline.elapsed_seconds:.1f}s[/bold] for {len(timeline.slots)} slots")
    _save_timeline(timeline_path, timeline)


@app.command("list")
def list_scenarios() -> None:
    """List the registered scenarios."""
    registry = default_registry()
    curated = list(registry.curated_order)

    table = Table(show_header=True, header_style="bold cyan", box=None)
    table.add_column("Scenario")
    table.add_column("Slot", justify="right")
    table.add_column("In 'all'", justify="center")
    for name in registry.names():
        scenario = registry.get(name)
        position = str(curated.index(name) + 1) if name in curated else "-"
        table.add_row(name, f"{scenario.duration:g}s", position)
    console.print(table)


if __name__ == "__main__":
    app()
