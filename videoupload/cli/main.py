"""videoupload CLI - Main commands."""
import asyncio
import signal
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn
from rich.table import Table

app = typer.Typer(
    name="videoupload",
    help="Large video uploads to Supabase Storage",
    add_completion=False
)
console = Console()


def open_session_store(sessions: Optional[Path], config):
    """Local SQLite file when given, else the Supabase sessions table."""
    from videoupload import SQLiteSessionStore, RestSessionStore

    if sessions:
        return SQLiteSessionStore(sessions)
    return RestSessionStore(config)


def load_config(**overrides):
    """Supabase settings from the environment; exits when they are missing."""
    from videoupload import SupabaseConfig

    try:
        return SupabaseConfig.from_env(**overrides)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


def run_async(coro):
    """Run async function."""
    return asyncio.run(coro)


@app.command()
def validate(
    file_path: Path = typer.Argument(..., help="Local video file", exists=True, dir_okay=False),
):
    """Check a video against the size and format policy."""
    from videoupload import SourceFile
    from videoupload.core.upload.services import FileValidator

    result = FileValidator().validate(SourceFile.from_path(file_path))
    if not result.valid:
        console.print(f"[red]{result.error}[/red]")
        raise typer.Exit(1)
    if result.warning:
        console.print(f"[yellow]{result.warning}[/yellow]")
    console.print(f"[green]{file_path.name} is ready to upload[/green]")


@app.command()
def upload(
    file_path: Path = typer.Argument(..., help="Local video file", exists=True, dir_okay=False),
    target: str = typer.Argument(..., help="Object path inside the bucket"),
    bucket: str = typer.Option(None, "--bucket", "-b", help="Storage bucket (default: VIDEOUPLOAD_BUCKET or intro-videos)"),
    sessions: Path = typer.Option(None, "--sessions", "-s", help="Local SQLite session file (default: Supabase table)"),
    resume: str = typer.Option(None, "--resume", "-r", help="Session id of an interrupted upload"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
):
    """Upload a video and print its public URL."""
    import logging
    from videoupload import (
        LargeVideoUploader, UploadFailed, ProgressSample,
        setup_logging,
    )

    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    setup_logging(logging.DEBUG if verbose else logging.WARNING)

    overrides = {'bucket': bucket} if bucket else {}
    config = load_config(**overrides)

    async def do_upload():
        store = open_session_store(sessions, config)
        async with LargeVideoUploader.from_config(config, session_store=store) as uploader:
            check = uploader.validate_file(file_path)
            if not check.valid:
                console.print(f"[red]{check.error}[/red]")
                raise typer.Exit(1)
            if check.warning:
                console.print(f"[yellow]{check.warning}[/yellow]")

            loop = asyncio.get_running_loop()
            try:
                loop.add_signal_handler(signal.SIGINT, uploader.cancel_upload)
            except (NotImplementedError, RuntimeError):
                pass

            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                TaskProgressColumn(),
                TextColumn("{task.fields[speed]} ETA {task.fields[eta]}"),
                console=console
            ) as progress:
                task = progress.add_task(
                    f"Uploading {file_path.name}", total=100, speed="-", eta="-"
                )

                def on_progress(p: ProgressSample):
                    progress.update(
                        task,
                        completed=p.percentage,
                        speed=p.speed_text,
                        eta=p.eta_text
                    )

                try:
                    url = await uploader.upload_large_video(
                        file_path, target, on_progress=on_progress, resume_session_id=resume
                    )
                except UploadFailed as e:
                    console.print(f"[red]Upload failed: {e}[/red]")
                    session = uploader.coordinator.last_session
                    if session is not None and session.is_persisted:
                        console.print(f"Resume with: --resume {session.id}")
                    raise typer.Exit(1)

            console.print(f"[green]Uploaded:[/green] {file_path.name}")
            console.print(f"URL: {url}")
            session = uploader.coordinator.last_session
            if session is not None and not session.is_persisted:
                console.print("[yellow]Upload session was not recorded; resume was unavailable[/yellow]")

    run_async(do_upload())


@app.command()
def session(
    session_id: str = typer.Argument(..., help="Upload session id"),
    sessions: Path = typer.Option(None, "--sessions", "-s", help="Local SQLite session file (default: Supabase table)"),
):
    """Show a recorded upload session."""
    from videoupload import SessionStoreError
    from videoupload.core.utils import format_size

    config = None if sessions else load_config()

    async def show_session():
        store = open_session_store(sessions, config)
        try:
            record = await store.get(session_id)
        except SessionStoreError as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)
        finally:
            await store.close()

        if record is None:
            console.print(f"[red]Session not found: {session_id}[/red]")
            raise typer.Exit(1)

        table = Table(title=f"Session {session_id}")
        table.add_column("Field", style="bold")
        table.add_column("Value")
        table.add_row("File", record.file_name)
        table.add_row("Size", format_size(record.file_size))
        table.add_row("Status", record.status)
        table.add_row("Chunks", f"{len(record.uploaded_chunk_indices)}/{record.total_chunks}")
        table.add_row("Created", record.created_at.isoformat())
        table.add_row("Updated", record.updated_at.isoformat())
        console.print(table)

    run_async(show_session())


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
