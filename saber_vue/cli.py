"""Command line entry point for ``saber-vue-app``.

Usage::

    saber-vue-app my-vue-app
    saber-vue-app my-vue-app --scripts-version 1.2.3 --verbose
    python -m saber_vue my-vue-app
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Sequence
from pathlib import Path

from rich.markup import escape

from saber_vue import __version__
from saber_vue.config import CreateAppConfig
from saber_vue.creator import CreateAppError, ProjectCreator
from saber_vue.utils import console, print_info

PROG = "saber-vue-app"

EPILOG = """\
    Only <project-directory> is required.

    A custom --scripts-version can be one of:
      - a specific npm version: 0.0.1
      - a custom fork published on npm: my-vue-scripts
      - a .tgz archive: https://mysite.com/my-vue-scripts-0.0.1.tgz
    It is not needed unless you specifically want to use a fork.
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        usage=f"{PROG} <project-directory> [options]",
        description="Create a new Saber Vue application",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EPILOG,
    )
    parser.add_argument(
        "project_directory",
        nargs="?",
        metavar="<project-directory>",
        help="Directory to create the app in; its name becomes the package name",
    )
    parser.add_argument("-V", "--version", action="version", version=__version__)
    parser.add_argument("--verbose", action="store_true", help="print additional logs")
    parser.add_argument(
        "--scripts-version",
        metavar="<alternative-package>",
        default=None,
        help="use a non-standard version of saber-vue-scripts",
    )
    # internal usage only, do not rely on this
    parser.add_argument(
        "--internal-testing-template",
        metavar="<path-to-template>",
        default=None,
        help=argparse.SUPPRESS,
    )
    return parser


def _print_missing_directory() -> None:
    console.print("[red]Please specify the project directory:[/red]")
    console.print(f"  [cyan]{PROG}[/cyan] [green]<project-directory>[/green]")
    print_info()
    print_info("For example:")
    console.print(f"  [cyan]{PROG}[/cyan] [green]my-vue-app[/green]")
    print_info()
    console.print(f"Run [cyan]{PROG} --help[/cyan] to see all options.")


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point for ``saber-vue-app``."""
    parser = build_parser()
    # unknown options are ignored rather than rejected
    args, _unknown = parser.parse_known_args(argv)

    if not args.project_directory:
        _print_missing_directory()
        sys.exit(1)

    try:
        config = CreateAppConfig.from_env()
    except ValueError as exc:
        console.print(f"[bold red]Error:[/bold red] Invalid configuration: {escape(str(exc))}")
        sys.exit(1)

    creator = ProjectCreator(config)
    try:
        asyncio.run(
            creator.create(
                args.project_directory,
                verbose=args.verbose,
                scripts_version=args.scripts_version,
                template=args.internal_testing_template,
                original_directory=Path.cwd(),
            )
        )
    except CreateAppError as exc:
        console.print("[bold red]Aborting installation.[/bold red]")
        if exc.command:
            console.print(f"  [cyan]{escape(exc.command)}[/cyan] has failed.")
        else:
            console.print(str(exc), markup=False, style="red")
        sys.exit(1)
