"""
coursereader CLI entry point.

Commands:
    sync     Mirror the catalog into the local store
    status   Schema version and row counts
    courses  Library with progress
    import   Import one course from the catalog
    progress Overall progress, where to continue and orphaned records
    remove   Delete a course and its learner data
    seed     Write the demo course
    serve    Run the catalog endpoint
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from coursereader import __version__
from coursereader.application.container import Container
from coursereader.domain.errors import CatalogUnavailable, ImportWriteFailure
from coursereader.infrastructure.catalog import FilesystemCatalogReader
from coursereader.infrastructure.logging_config import setup_logging
from coursereader.infrastructure.sqlite import DEMO_COURSE_ID, populate_demo_course

logger = logging.getLogger(__name__)

console = Console()

app = typer.Typer(
    name="coursereader",
    help="📚 Offline course reader - catalog sync and local store",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


def _container(ctx: typer.Context) -> Container:
    return ctx.obj


@app.callback()
def main(
    ctx: typer.Context,
    config_dir: Path = typer.Option(
        Path("config"), "--config-dir", help="Directory holding coursereader.json"
    ),
    db: Optional[Path] = typer.Option(None, "--db", help="SQLite database file"),
    content_dir: Optional[Path] = typer.Option(
        None, "--content-dir", help="Authored course directory"
    ),
    catalog_url: Optional[str] = typer.Option(
        None, "--catalog-url", help="Catalog endpoint to sync from"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Offline course reader - catalog sync and local store."""
    container = Container(
        config_dir,
        overrides={
            "database_path": db,
            "content_dir": content_dir,
            "catalog_url": catalog_url,
        },
    )

    try:
        settings = container.settings
    except ValueError as e:
        console.print(f"[red]❌ Error:[/red] {e}")
        raise typer.Exit(1)

    setup_logging(
        logging.DEBUG if verbose else settings.numeric_log_level, settings.log_file
    )
    ctx.obj = container
    ctx.call_on_close(container.close)


@app.command()
def sync(ctx: typer.Context):
    """
    Sync the local store with the course catalog.

    New courses are imported and re-versioned courses replaced; progress and
    notes are never touched.
    """
    container = _container(ctx)
    report = container.sync_engine.sync()

    table = Table(title="Sync Report")
    table.add_column("Result")
    table.add_column("Count", justify="right")
    table.add_row("New courses imported", str(report.new_courses_imported))
    table.add_row("Courses updated", str(report.courses_updated))
    table.add_row("Courses unchanged", str(report.courses_unchanged))
    table.add_row("Failed", str(len(report.failed_courses)))
    console.print(table)

    if report.error:
        console.print(f"[red]❌ Sync error:[/red] {report.error}")
        raise typer.Exit(1)

    console.print(f"[green]✅ Sync complete at {report.timestamp:%Y-%m-%d %H:%M:%S} UTC[/green]")


@app.command()
def status(ctx: typer.Context):
    """Show the local store's schema version and row counts."""
    container = _container(ctx)
    settings = container.settings

    try:
        store = container.store
        counts = store.table_counts()
        version = store.schema_version()
    except Exception as e:
        logger.error("Status failed: %s", e)
        console.print(f"[red]❌ Error:[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[blue]📊 coursereader {__version__}[/blue]")
    console.print(f"Database: {settings.database_path} (schema v{version})")
    console.print(f"Catalog: {settings.catalog_url or settings.content_dir}")

    table = Table(title="Local Store")
    table.add_column("Table")
    table.add_column("Rows", justify="right")
    for name, count in counts.items():
        table.add_row(name, str(count))
    console.print(table)


@app.command()
def courses(ctx: typer.Context):
    """List the library with progress."""
    library = _container(ctx).library_service.list_library()

    if not library:
        console.print("[yellow]⚠️  No courses yet. Run 'coursereader sync'.[/yellow]")
        return

    table = Table(title=f"Library ({len(library)} courses)")
    table.add_column("ID")
    table.add_column("Title")
    table.add_column("Version")
    table.add_column("Chapters", justify="right")
    table.add_column("Progress", justify="right")
    for summary in library:
        table.add_row(
            summary.course.id,
            summary.course.title,
            summary.course.version or "-",
            str(summary.chapter_count),
            f"{summary.progress}%",
        )
    console.print(table)


@app.command("import")
def import_course(
    ctx: typer.Context,
    course_id: str = typer.Argument(..., help="Catalog course to import"),
):
    """Import (or re-import) a single course from the catalog."""
    library = _container(ctx).library_service

    try:
        action = library.import_from_catalog(course_id)
    except KeyError:
        console.print(f"[red]❌ Course not in catalog:[/red] {course_id}")
        raise typer.Exit(1)
    except (CatalogUnavailable, ImportWriteFailure) as e:
        console.print(f"[red]❌ Import failed:[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[green]✅ Imported course {course_id} ({action.value})[/green]")


@app.command()
def progress(ctx: typer.Context):
    """Show overall progress, the course to continue and orphaned records."""
    container = _container(ctx)
    service = container.progress_service

    stats = service.overall_stats()
    console.print(
        f"[blue]📊 {stats.completed} completed, {stats.in_progress} in progress, "
        f"{stats.total} total[/blue]"
    )

    current = service.continue_learning()
    if current:
        console.print(f"Continue learning: {current.title} ({current.id})")

    orphans = [
        service.find_orphans(course.id) for course in container.store.list_courses()
    ]
    orphans = [report for report in orphans if report.count]
    if not orphans:
        return

    table = Table(title="Records pointing at removed content")
    table.add_column("Course")
    table.add_column("Progress", justify="right")
    table.add_column("Notes", justify="right")
    for report in orphans:
        table.add_row(report.course_id, str(len(report.progress)), str(len(report.notes)))
    console.print(table)


@app.command()
def remove(
    ctx: typer.Context,
    course_id: str = typer.Argument(..., help="Course to remove"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Remove a course together with its progress and notes."""
    if not yes:
        typer.confirm(
            f"Remove course '{course_id}' and all its progress and notes?", abort=True
        )

    if not _container(ctx).library_service.remove_course(course_id):
        console.print(f"[red]❌ Course not found:[/red] {course_id}")
        raise typer.Exit(1)

    console.print(f"[green]✅ Removed course {course_id}[/green]")


@app.command()
def seed(ctx: typer.Context):
    """Write the demo course if it is not already stored."""
    if populate_demo_course(_container(ctx).store):
        console.print(f"[green]✅ Seeded demo course {DEMO_COURSE_ID}[/green]")
    else:
        console.print(f"[yellow]⚠️  Course {DEMO_COURSE_ID} already exists[/yellow]")


@app.command()
def serve(
    ctx: typer.Context,
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", help="Port"),
):
    """Serve GET /api/courses/available from the content directory."""
    import uvicorn

    from coursereader.interface.api import create_app

    settings = _container(ctx).settings
    api = create_app(FilesystemCatalogReader(settings.content_dir))

    console.print(
        f"[blue]🌐 Serving {settings.content_dir} on "
        f"http://{host or settings.api_host}:{port or settings.api_port}[/blue]"
    )
    uvicorn.run(api, host=host or settings.api_host, port=port or settings.api_port)
