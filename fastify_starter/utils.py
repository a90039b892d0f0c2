"""Shared utility functions for fastify-starter.

Provides async command execution, JSON manifest I/O, duration formatting
and the Rich-based presentation helpers used by the pipeline.  Nothing here
makes a pipeline decision; output helpers only render what they are given.
"""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from fastify_starter.errors import RecoveryPlan

console = Console()

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: str | list[str],
    cwd: str | Path | None = None,
    timeout: int = 120,
    env: dict[str, str] | None = None,
) -> tuple[int, str, str]:
    """Run a command asynchronously.

    Args:
        cmd: Shell command string or list of arguments.
        cwd: Working directory for the child process.
        timeout: Maximum wall-clock seconds before the process is killed.
        env: Optional extra environment variables merged on top of ``os.environ``.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple.  A timeout yields ``-1`` and
        a missing executable yields ``127`` with a ``command not found``
        message, mirroring what a shell would report.
    """
    merged_env: dict[str, str] | None = None
    if env:
        merged_env = {**os.environ, **env}

    try:
        if isinstance(cmd, list):
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(cwd) if cwd else None,
                env=merged_env,
            )
        else:
            process = await asyncio.create_subprocess_shell(
                cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(cwd) if cwd else None,
                env=merged_env,
            )
    except FileNotFoundError:
        program = cmd[0] if isinstance(cmd, list) else cmd.split()[0]
        return (127, "", f"{program}: command not found")

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return (
            -1,
            "",
            f"Command timed out after {timeout}s: {cmd if isinstance(cmd, str) else ' '.join(cmd)}",
        )

    stdout_str = (stdout_bytes or b"").decode("utf-8", errors="replace").strip()
    stderr_str = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()
    return (process.returncode or 0, stdout_str, stderr_str)


def command_output(stdout: str, stderr: str) -> str:
    """Join the interesting parts of a failed command's output for classification."""
    return "\n".join(part for part in (stderr, stdout) if part) or "command failed"


# ---------------------------------------------------------------------------
# JSON manifest I/O
# ---------------------------------------------------------------------------


def load_json(path: str | Path) -> dict[str, Any]:
    """Load and parse a JSON object file.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        ValueError: If the top-level value is not an object.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path} does not contain a JSON object")
    return data


def dump_json(data: dict[str, Any]) -> str:
    """Serialise a manifest the way the template stores them (tab indented)."""
    return json.dumps(data, indent="\t", ensure_ascii=False) + "\n"


def write_json(data: dict[str, Any], path: str | Path) -> None:
    """Write *data* as a tab-indented JSON manifest."""
    Path(path).write_text(dump_json(data), encoding="utf-8")


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples::

        format_duration(3.7)    -> "3.7s"
        format_duration(65.2)   -> "1m 5s"
    """
    if seconds < 0:
        return "0.0s"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = seconds % 60

    parts: list[str] = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")

    if hours > 0 or minutes > 0:
        parts.append(f"{int(secs)}s")
    else:
        parts.append(f"{secs:.1f}s")

    return " ".join(parts)


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_title(text: str) -> None:
    console.print()
    console.print(f"[bold bright_cyan]{text}[/bold bright_cyan]")
    console.print()


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")


def print_info(message: str) -> None:
    """Print a blue informational message."""
    console.print(f"[blue]{message}[/blue]")


def print_steps(steps: list[str], style: str = "cyan") -> None:
    for index, step in enumerate(steps, start=1):
        console.print(f"   [{style}]{index}. {step}[/{style}]")


def print_recovery_plan(plan: RecoveryPlan) -> None:
    """Render a recovery plan: what failed, why, and how to finish by hand."""
    lines: list[str] = [f"[bold red]{plan.headline}[/bold red]"]
    if plan.context is not None:
        lines.insert(0, f"[red]{plan.context.operation} failed:[/red]")
        if plan.context.details:
            lines.append(f"[dim]Details: {escape(plan.context.details)}[/dim]")
    lines.append("")
    lines.append(f"[yellow]{plan.message}[/yellow]")
    for index, step in enumerate(plan.steps, start=1):
        lines.append(f"  [cyan]{index}. {step}[/cyan]")
    if plan.help_url:
        lines.append("")
        lines.append(f"[dim]More help: {plan.help_url}[/dim]")

    console.print(Panel("\n".join(lines), border_style="red"))


def create_progress() -> Progress:
    """Create a Rich progress spinner configured for pipeline steps.

    Returns:
        A ``Progress`` instance suitable for use as a context manager.
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )
