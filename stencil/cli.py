"""Command line entry point.

Usage::

    stencil new acme/widget my-widget
    stencil new gl:acme/widget#v2 --no-delete
    stencil run ./my-widget
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from rich.markup import escape

from stencil.actions.prompts import RichPromptSurface
from stencil.config import Config
from stencil.document.nodes import DocumentError
from stencil.engine import RunResult, execute_document
from stencil.source.fetcher import ArchiveFetcher, ArchiveUnpacker, FetchError, UnpackError
from stencil.source.repository import RepositoryError, parse_repository
from stencil.utils import console, err_console


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stencil",
        description="stencil -- declarative project scaffolding",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  stencil new acme/widget\n"
            "  stencil new gh:acme/widget#main ./widget --no-delete\n"
            "  stencil run ./widget\n"
        ),
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    new = subparsers.add_parser("new", help="Download a template and run its actions")
    new.add_argument("repository", help="Template repository: [host:]user/repo[#ref]")
    new.add_argument("path", nargs="?", default=None, help="Destination (default: repo name)")
    new.add_argument("--ref", default=None, help="Branch, tag or commit to download")
    new.add_argument(
        "--ignore", action="store_true", help="Do not run the template's actions"
    )

    run = subparsers.add_parser("run", help="Run the action document of an existing directory")
    run.add_argument("path", nargs="?", default=".", help="Project directory (default: .)")

    for sub in (new, run):
        sub.add_argument(
            "--delete",
            action=argparse.BooleanOptionalAction,
            default=None,
            help="Delete the document after a successful run (overrides the document)",
        )
        sub.add_argument("--document", default=None, help="Document file name")

    return parser


def _config_from_args(args: argparse.Namespace) -> Config:
    config = Config.from_env()
    updates: dict[str, object] = {}
    if args.delete is not None:
        updates["delete"] = args.delete
    if args.document:
        updates["document_name"] = args.document
    if getattr(args, "ignore", False):
        updates["ignore_actions"] = True
    return config.model_copy(update=updates)


async def _new(args: argparse.Namespace, config: Config) -> RunResult | None:
    repository = parse_repository(args.repository)
    if args.ref:
        repository = repository.model_copy(update={"ref": args.ref})
    destination = Path(args.path or repository.repo)

    with console.status(f"Downloading [bold]{repository}[/bold]..."):
        data = await ArchiveFetcher(timeout=config.request_timeout).fetch(repository)
    written = await asyncio.to_thread(ArchiveUnpacker().unpack, data, destination)
    console.print(f"[green]+[/green] Unpacked {len(written)} entries into {destination}")

    if config.ignore_actions:
        return None
    return await _run(destination, config)


async def _run(path: Path, config: Config) -> RunResult | None:
    return await execute_document(
        path,
        document_name=config.document_name,
        overrides=config.overrides(),
        prompt_surface=RichPromptSurface(console=console, editor=config.editor),
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``stencil``."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = _config_from_args(args)
        if args.command == "new":
            result = asyncio.run(_new(args, config))
        else:
            result = asyncio.run(_run(Path(args.path), config))
    except (RepositoryError, FetchError, UnpackError, DocumentError, ValueError) as exc:
        err_console.print(
            f"[bold red]Error:[/bold red] {escape(str(exc))}", highlight=False, soft_wrap=True
        )
        sys.exit(1)
    except KeyboardInterrupt:
        err_console.print("[red]<interrupted>[/red]")
        sys.exit(1)

    if result is not None and not result.success:
        sys.exit(1)


if __name__ == "__main__":
    main()
