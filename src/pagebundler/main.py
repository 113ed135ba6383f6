"""PageBundler command line interface."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer

from pagebundler.config import settings
from pagebundler.core.bundler import bundle_directories
from pagebundler.core.errors import BundlerError
from pagebundler.core.models import RenderMode
from pagebundler.core.storage import FileStorage, PageWriter, shorten_path

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="pagebundler",
    help="Bundle directories of Markdown pages into JSON for a web front end.",
)


def setup_logging(level: str) -> None:
    """Configure root logging for command line runs."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def bundle(
    directories: Optional[list[Path]] = typer.Argument(
        None, help="Directories to bundle. Defaults to PAGEBUNDLER_DIRECTORIES."
    ),
    mode: Optional[RenderMode] = typer.Option(
        None, "--mode", "-m", help="Store content as plain Markdown or rendered html."
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),  # noqa: FBT001, FBT003
    isolate_errors: bool = typer.Option(
        False, "--isolate-errors", help="Skip directories with invalid pages instead of stopping"
    ),
    require_title_match: bool = typer.Option(
        False, "--require-title-match", help="Titles must equal their file names"
    ),
) -> None:
    """Reconcile each directory's Markdown pages with its JSON bundle."""
    setup_logging(settings.log_level)

    try:
        results = asyncio.run(
            bundle_directories(
                directories or settings.directories,
                mode or settings.render_mode,
                quiet=quiet or settings.quiet,
                isolate_errors=isolate_errors or settings.isolate_errors,
                require_title_match=require_title_match or settings.require_title_match,
            )
        )
    except BundlerError as e:
        logger.error("%s", e)
        raise typer.Exit(code=1) from e

    failed = False
    for result in results:
        name = shorten_path(result.directory)
        if result.error:
            failed = True
            typer.echo(f"{name}: failed ({result.error})")
            continue
        status = "saved" if result.saved else "up to date"
        typer.echo(
            f"{name}: +{len(result.added)} ~{len(result.changed)} "
            f"-{len(result.deleted)} ({status})"
        )
    if failed:
        raise typer.Exit(code=1)


@app.command()
def export(
    bundle_file: Path = typer.Argument(..., help="Bundle JSON file to export."),
    out_dir: Path = typer.Argument(..., help="Directory to write Markdown files into."),
) -> None:
    """Write the pages of a bundle back out as Markdown documents."""
    setup_logging(settings.log_level)

    async def _export() -> list[Path]:
        pages = await FileStorage().load_bundle(bundle_file)
        return await PageWriter(out_dir).write_pages(pages)

    try:
        paths = asyncio.run(_export())
    except BundlerError as e:
        logger.error("%s", e)
        raise typer.Exit(code=1) from e

    typer.echo(f"Wrote {len(paths)} page(s) to {out_dir}")


if __name__ == "__main__":
    app()
