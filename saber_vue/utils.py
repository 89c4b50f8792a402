"""Shared utility functions for saber-vue-app.

Provides async command execution, JSON manifest I/O, dictionary merging,
Rich-based console reporting and a registry reachability probe.
"""

from __future__ import annotations

import asyncio
import copy
import json
import os
import socket
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape

console = Console()

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: list[str],
    cwd: str | Path | None = None,
    timeout: float | None = None,
    capture: bool = True,
    env: dict[str, str] | None = None,
) -> tuple[int, str, str]:
    """Run a command asynchronously.

    Args:
        cmd: Program and arguments.
        cwd: Working directory for the child process.
        timeout: Maximum wall-clock seconds before the process is killed.
            ``None`` waits for as long as the child runs.
        capture: Whether to capture stdout/stderr (if ``False`` they inherit
            the parent's streams so the child's progress output is live).
        env: Optional extra environment variables merged on top of ``os.environ``.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple.  If *capture* is ``False``
        the stdout/stderr strings will be empty.

    Raises:
        FileNotFoundError: If the program does not exist.
    """
    merged_env: dict[str, str] | None = None
    if env:
        merged_env = {**os.environ, **env}

    stdout_pipe = asyncio.subprocess.PIPE if capture else None
    stderr_pipe = asyncio.subprocess.PIPE if capture else None

    process = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=stdout_pipe,
        stderr=stderr_pipe,
        cwd=str(cwd) if cwd else None,
        env=merged_env,
    )

    try:
        if timeout is None:
            stdout_bytes, stderr_bytes = await process.communicate()
        else:
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
    """Load and parse a JSON object file.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        ValueError: If the top-level value is not an object.
    """
    raw = Path(path).read_text(encoding="utf-8")
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError(f"{path} does not contain a JSON object")
    return data


def save_json(data: dict[str, Any], path: str | Path) -> Path:
    """Save data as JSON indented with two spaces, the way npm writes manifests.

    Parent directories are created automatically.
    """
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    return file_path


# ---------------------------------------------------------------------------
# Mapping helpers
# ---------------------------------------------------------------------------


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge *override* on top of *base* and return a new dict.

    Nested mappings merge key by key; any other value in *override*
    (including lists) replaces the one in *base*.  Neither input is modified.

    Examples::

        deep_merge({"dev": {"port": 8080, "env": {}}}, {"dev": {"port": 3000}})
        -> {"dev": {"port": 3000, "env": {}}}
    """
    merged: dict[str, Any] = copy.deepcopy(dict(base))
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


# ---------------------------------------------------------------------------
# Network helpers
# ---------------------------------------------------------------------------


async def check_host_resolves(host: str) -> bool:
    """Return ``True`` if *host* resolves through DNS.

    The lookup runs in the default executor so the event loop is not blocked.
    """
    loop = asyncio.get_running_loop()
    try:
        await loop.getaddrinfo(host, None)
    except (socket.gaierror, OSError):
        return False
    return True


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


#
# Messages are printed literally: paths and error text may contain square
# brackets that Rich would otherwise read as markup.


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(escape(message), style="bold green")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(escape(message), style="bold red")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(escape(message), style="yellow")


def print_info(message: str = "") -> None:
    console.print(escape(message))


def print_debug(message: str, verbose: bool) -> None:
    """Print a dimmed diagnostic line when *verbose* is set."""
    if verbose:
        console.print(escape(message), style="dim")
