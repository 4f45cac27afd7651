"""Shared utility functions for the Outerspace CLI.

Provides async command execution, JSON I/O, manifest merging, file-system
helpers and Rich-based console reporting.  Output helpers are the only way
the rest of the package talks to the terminal.
"""

from __future__ import annotations

import asyncio
import json
import os
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

console = Console()
error_console = Console(stderr=True)

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: list[str],
    cwd: str | Path | None = None,
    timeout: float | None = 120,
    env: dict[str, str] | None = None,
) -> tuple[int, str, str]:
    """Run a command asynchronously and capture its output.

    Args:
        cmd: Program and arguments.
        cwd: Working directory for the child process.
        timeout: Maximum wall-clock seconds before the process is killed;
            ``None`` waits forever.
        env: Optional extra environment variables merged on top of ``os.environ``.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple.  A timeout yields
        returncode ``-1`` with an explanatory stderr.
    """
    merged_env: dict[str, str] | None = None
    if env:
        merged_env = {**os.environ, **env}

    process = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=str(cwd) if cwd else None,
        env=merged_env,
    )

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return (-1, "", f"Command timed out after {timeout}s: {' '.join(cmd)}")

    stdout_str = (stdout_bytes or b"").decode("utf-8", errors="replace").strip()
    stderr_str = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()
    return (process.returncode or 0, stdout_str, stderr_str)


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


def load_json(path: str | Path) -> dict[str, Any]:
    """Load a JSON file whose top level is an object.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        ValueError: If the top-level value is not an object.
    """
    file_path = Path(path)
    data = json.loads(file_path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object in {file_path}")
    return data


async def save_json(data: dict[str, Any] | list[Any], path: str | Path) -> None:
    """Save data as JSON with a 2-space indent and a trailing newline.

    Parent directories are created automatically.
    """
    file_path = Path(path)
    content = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    await asyncio.to_thread(write_file, file_path, content)


async def merge_dependencies(
    manifest_path: str | Path,
    dependencies: Mapping[str, str],
    section: str = "dependencies",
) -> dict[str, Any]:
    """Merge *dependencies* into a ``package.json`` and rewrite it.

    Same-named entries are overwritten, every other entry is preserved.

    Returns:
        The updated manifest.
    """
    manifest = await asyncio.to_thread(load_json, manifest_path)
    manifest[section] = {**(manifest.get(section) or {}), **dependencies}
    await save_json(manifest, manifest_path)
    return manifest


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def ensure_dir(path: str | Path) -> Path:
    """Create a directory (and parents) if it does not exist."""
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def write_file(path: Path, content: str) -> None:
    """Create parent dirs and write *content*."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def read_file(path: Path) -> str:
    return path.read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_banner(title: str, subtitle: str = "") -> None:
    """Print the CLI banner panel shown at the start of ``init``."""
    console.print()
    console.print(
        Panel.fit(
            f"[bold yellow]{title}[/bold yellow]\n[magenta]{subtitle}[/magenta]",
            border_style="bright_green",
        )
    )


def print_summary_table(rows: Iterable[tuple[str, str, str]], title: str = "Summary") -> None:
    """Print a three-column table of ``(generator, step, status)`` rows."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Generator", style="dim", no_wrap=True)
    table.add_column("Step")
    table.add_column("Status")

    for generator, step, status in rows:
        table.add_row(escape(generator), escape(step), status)

    console.print(table)
    console.print()


def print_info(message: str) -> None:
    """Print a blue section message."""
    console.print(f"[bold blue]{escape(message)}[/bold blue]")


def print_detail(message: str) -> None:
    """Print a dim progress detail."""
    console.print(f"[dim]{escape(message)}[/dim]")


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{escape(message)}[/bold green]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{escape(message)}[/bold yellow]")


def print_error(message: str) -> None:
    """Print a red error message to stderr."""
    error_console.print(f"[bold red]{escape(message)}[/bold red]")
