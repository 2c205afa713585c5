"""Command-line interface for the event photo gallery."""

import asyncio
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from event_gallery.gallery import GalleryStore, GalleryView
from event_gallery.layout import layout_grid
from event_gallery.lightbox import LightboxController
from event_gallery.models import UploadBatchState, UploadOutcome
from event_gallery.session import AccessGate, SessionContext
from event_gallery.storage_client import StorageClient
from event_gallery.uploader import DEFAULT_DISPLAY_DELAY, UploadPipeline
from event_gallery.utils import scan_files

app = typer.Typer(
    name="event-gallery",
    help="Share event photos in a common gallery",
    add_completion=False,
)
console = Console()

DEFAULT_BUCKET = "event-photos"


def setup_logging(verbose: bool) -> None:
    """Configure logging with Rich handler.

    Args:
        verbose: Enable verbose (DEBUG) logging
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, console=console)],
    )


def require_access(key: str | None, secret: str | None) -> SessionContext:
    """Run the access gate for this invocation, exiting if access is denied."""
    session = SessionContext()
    if not AccessGate(secret).check(session, key):
        console.print(
            "[red]Access required: please use the key from your invitation "
            "(--key or EVENT_GALLERY_KEY).[/red]"
        )
        raise typer.Exit(1)
    return session


def print_progress(state: UploadBatchState) -> None:
    if state.message:
        console.print(state.message)


def render_gallery(gallery: GalleryStore) -> None:
    """Print the gallery grid, or its loading/empty state."""
    if gallery.view_state is GalleryView.LOADING:
        console.print("Loading photos...")
        return

    if gallery.view_state is GalleryView.EMPTY:
        console.print("[bold]No photos yet![/bold]")
        console.print("Be the first to share a memory from the event")
        return

    table = Table(title=f"Gallery ({len(gallery.photos)} photos)")
    table.add_column("#", justify="right", no_wrap=True)
    table.add_column("Name", no_wrap=True)
    table.add_column("Cell", no_wrap=True)
    table.add_column("URL", overflow="fold")
    for cell in layout_grid(gallery.photos):
        table.add_row(str(cell.index), cell.photo.name, cell.hint.value, cell.photo.url)
    console.print(table)


def render_lightbox(lightbox: LightboxController) -> None:
    photo = lightbox.current_photo
    if photo is None:
        console.print("[yellow]No photo at that position[/yellow]")
        return

    console.print(f"\n[bold]{lightbox.counter}[/bold]  {photo.name}")
    console.print(photo.url)
    affordances = []
    if lightbox.show_previous:
        affordances.append("< previous")
    if lightbox.show_next:
        affordances.append("next >")
    if affordances:
        console.print("  ".join(affordances))


async def async_upload(
    paths: list[Path],
    storage_url: str,
    api_key: str,
    bucket: str,
    dry_run: bool,
    display_delay: float,
) -> int:
    """Async upload implementation.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    logger = logging.getLogger(__name__)

    try:
        files = scan_files(paths)
        if not files:
            logger.warning("No files found to upload")
            return 0

        async with StorageClient(storage_url, api_key, bucket) as storage:
            gallery = GalleryStore(storage)
            pipeline = UploadPipeline(
                storage,
                on_progress=print_progress,
                on_complete=None if dry_run else gallery.refresh,
                display_delay=display_delay,
                dry_run=dry_run,
            )
            items = await pipeline.submit(files)

        if not items:
            logger.warning("No photos to upload")
            return 0

        succeeded = sum(1 for item in items if item.outcome is UploadOutcome.SUCCEEDED)
        failed = len(items) - succeeded

        console.print("\n[bold]Upload Summary:[/bold]")
        console.print(f"  Total photos: {len(items)}")
        console.print(f"  [green]Successful: {succeeded}[/green]")
        console.print(f"  [red]Failed: {failed}[/red]")

        if not dry_run:
            console.print()
            render_gallery(gallery)

        if failed > 0:
            console.print("\n[bold red]Failed uploads:[/bold red]")
            for item in items:
                if item.outcome is UploadOutcome.FAILED:
                    console.print(f"  - {item.original_filename}: {item.error_message}")
            return 1

        return 0

    except Exception as e:
        logger.error(f"Upload failed: {e}", exc_info=True)
        return 1


async def async_gallery(
    storage_url: str,
    api_key: str,
    bucket: str,
    open_index: int | None,
) -> int:
    """Async gallery implementation.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    logger = logging.getLogger(__name__)

    try:
        async with StorageClient(storage_url, api_key, bucket) as storage:
            gallery = GalleryStore(storage)
            with LightboxController(gallery) as lightbox:
                await gallery.refresh()
                render_gallery(gallery)

                if open_index is not None:
                    lightbox.select(open_index)
                    render_lightbox(lightbox)
                    if not lightbox.is_open:
                        return 1
        return 0

    except Exception as e:
        logger.error(f"Gallery failed: {e}", exc_info=True)
        return 1


def check_storage_options(storage_url: str | None, api_key: str | None) -> None:
    if not storage_url or not api_key:
        console.print(
            "[red]Error: storage URL and API key are required. "
            "Provide via --storage-url/--api-key or SUPABASE_URL/SUPABASE_KEY "
            "environment variables.[/red]"
        )
        raise typer.Exit(1)


@app.command()
def upload(
    paths: list[Path] = typer.Argument(
        ...,
        help="Photos, or directories of photos, to upload",
        exists=True,
        readable=True,
    ),
    storage_url: str = typer.Option(
        None,
        "--storage-url",
        "-u",
        envvar="SUPABASE_URL",
        help="Storage project URL (or set SUPABASE_URL env var)",
    ),
    api_key: str = typer.Option(
        None,
        "--api-key",
        "-k",
        envvar="SUPABASE_KEY",
        help="Storage API key (or set SUPABASE_KEY env var)",
    ),
    bucket: str = typer.Option(
        DEFAULT_BUCKET,
        "--bucket",
        "-b",
        envvar="EVENT_GALLERY_BUCKET",
        help="Bucket holding the event photos",
    ),
    key: str = typer.Option(
        None,
        "--key",
        envvar="EVENT_GALLERY_KEY",
        help="Invitation key (or set EVENT_GALLERY_KEY env var)",
    ),
    access_secret: str = typer.Option(
        None,
        "--access-secret",
        envvar="EVENT_GALLERY_SECRET",
        help="Shared key guests must present (or set EVENT_GALLERY_SECRET env var)",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Simulate uploads without making API calls",
    ),
    display_delay: float = typer.Option(
        DEFAULT_DISPLAY_DELAY,
        "--display-delay",
        min=0.0,
        help="Seconds to show the upload summary before refreshing the gallery",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging",
    ),
) -> None:
    """Upload photos to the event gallery.

    Directories contribute the files they contain. Files that are not
    images are skipped. Photos are uploaded one at a time and the gallery
    is shown once the batch is done.
    """
    setup_logging(verbose)
    require_access(key, access_secret)

    if not dry_run:
        check_storage_options(storage_url, api_key)

    # Placeholders for dry run; no request is ever sent
    if dry_run:
        storage_url = storage_url or "http://localhost"
        api_key = api_key or "dry_run_key"

    exit_code = asyncio.run(
        async_upload(paths, storage_url, api_key, bucket, dry_run, display_delay)
    )
    raise typer.Exit(exit_code)


@app.command()
def gallery(
    storage_url: str = typer.Option(
        None,
        "--storage-url",
        "-u",
        envvar="SUPABASE_URL",
        help="Storage project URL (or set SUPABASE_URL env var)",
    ),
    api_key: str = typer.Option(
        None,
        "--api-key",
        "-k",
        envvar="SUPABASE_KEY",
        help="Storage API key (or set SUPABASE_KEY env var)",
    ),
    bucket: str = typer.Option(
        DEFAULT_BUCKET,
        "--bucket",
        "-b",
        envvar="EVENT_GALLERY_BUCKET",
        help="Bucket holding the event photos",
    ),
    key: str = typer.Option(
        None,
        "--key",
        envvar="EVENT_GALLERY_KEY",
        help="Invitation key (or set EVENT_GALLERY_KEY env var)",
    ),
    access_secret: str = typer.Option(
        None,
        "--access-secret",
        envvar="EVENT_GALLERY_SECRET",
        help="Shared key guests must present (or set EVENT_GALLERY_SECRET env var)",
    ),
    open_index: int = typer.Option(
        None,
        "--open",
        "-o",
        min=0,
        help="Show the photo at this position full-screen",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging",
    ),
) -> None:
    """Show the event gallery, newest photos first."""
    setup_logging(verbose)
    require_access(key, access_secret)
    check_storage_options(storage_url, api_key)

    exit_code = asyncio.run(async_gallery(storage_url, api_key, bucket, open_index))
    raise typer.Exit(exit_code)


if __name__ == "__main__":
    app()
