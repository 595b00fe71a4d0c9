"""chunkup CLI - Main commands."""
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn
from rich.table import Table

from ..core.exceptions import ChunkupError
from ..core.logging import get_logger, setup_logging

app = typer.Typer(
    name="chunkup",
    help="Chunked HTTP upload CLI",
    add_completion=False
)
console = Console()
logger = get_logger('chunkup.cli')


def run_async(coro):
    """Run async function."""
    return asyncio.run(coro)


def format_size(size: int) -> str:
    """Format a byte count for display."""
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} PB"


def configure_cli_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)]
    )
    setup_logging(level)


@app.command()
def upload(
    path: Path = typer.Argument(..., help="File to upload"),
    endpoint: str = typer.Option(..., "--endpoint", "-e", envvar="CHUNKUP_ENDPOINT", help="URL chunks are POSTed to"),
    token: Optional[str] = typer.Option(None, "--token", "-t", envvar="CHUNKUP_TOKEN", help="Upload token"),
    token_endpoint: Optional[str] = typer.Option(
        None, "--token-endpoint", envvar="CHUNKUP_TOKEN_ENDPOINT", help="URL returning an upload token"
    ),
    chunk_size: int = typer.Option(1000000, "--chunk-size", "-s", help="Chunk size in bytes"),
    connections: int = typer.Option(3, "--connections", "-c", help="Maximum parallel uploads"),
    retries: int = typer.Option(3, "--retries", "-r", help="Maximum attempts per chunk"),
    backoff: bool = typer.Option(False, "--backoff", help="Exponential backoff between attempts"),
    checksum: Optional[str] = typer.Option(None, "--checksum", help="Checksum algorithm (md5, sha1, sha256, sha512)"),
    incremental: bool = typer.Option(False, "--incremental", help="Send one checksum per chunk"),
    public_key: Optional[Path] = typer.Option(None, "--encrypt-key", help="Encrypt chunks for this RSA public key (PEM)"),
    insecure: bool = typer.Option(False, "--insecure", help="Disable SSL verification"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Debug logging"),
):
    """Upload a file in chunks."""
    from ..core.transfer import TransferConfig
    from ..core.upload import ChunkedUploader, UploadOptions, request_upload_token

    configure_cli_logging(verbose)

    if not path.is_file():
        console.print(f"[red]File not found: {path}[/red]")
        raise typer.Exit(1)
    if not token and not token_endpoint:
        console.print("[red]Specify --token or --token-endpoint[/red]")
        raise typer.Exit(1)

    logger.debug(f"Uploading {path} to {endpoint} in {chunk_size}-byte chunks")

    async def do_upload():
        upload_token = token or await request_upload_token(token_endpoint)

        options = UploadOptions(
            endpoint=endpoint,
            token=upload_token,
            chunk_size=chunk_size,
            max_concurrent_connections=connections,
            max_retries_per_connection=retries,
            retry_backoff=backoff,
            checksum=checksum is not None,
            checksum_incremental=incremental,
            checksum_algorithm=checksum or 'md5',
            encrypt=public_key is not None,
            encryption_public_key=public_key.read_bytes() if public_key else None,
            transfer=TransferConfig.insecure() if insecure else TransferConfig.default()
        )

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console
        ) as progress:
            task = progress.add_task(f"Uploading {path.name}", total=path.stat().st_size)

            def on_progress(state):
                progress.update(task, completed=state.uploaded_bytes)

            async with ChunkedUploader(options, progress_callback=on_progress) as uploader:
                return await uploader.upload(path)

    try:
        outcome = run_async(do_upload())
    except ChunkupError as e:
        console.print(f"[red]Upload failed: {e.message}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Uploaded {path.name}[/green] ({outcome.chunks_uploaded} chunks, {format_size(path.stat().st_size)})")


@app.command()
def chunks(
    path: Path = typer.Argument(..., help="File to inspect"),
    chunk_size: int = typer.Option(1000000, "--chunk-size", "-s", help="Chunk size in bytes"),
):
    """Show how a file would be split into chunks."""
    from ..core.blob import FileBlob
    from ..core.upload import Chunker

    try:
        chunker = Chunker(FileBlob(path), chunk_size)
    except ChunkupError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"{path.name} ({chunker.chunk_count()} chunks)")
    table.add_column("Chunk", justify="right")
    table.add_column("Offset", justify="right")
    table.add_column("Size", justify="right")

    for chunk in chunker:
        table.add_row(str(chunk.index), str(chunk.offset), format_size(chunk.byte_length))

    console.print(table)


@app.command()
def token(
    url: str = typer.Argument(..., help="URL returning an upload token"),
    field: str = typer.Option("token", "--field", "-f", help="JSON field holding the token"),
):
    """Fetch an upload token."""
    from ..core.upload import request_upload_token

    try:
        upload_token = run_async(request_upload_token(url, field=field))
    except ChunkupError as e:
        console.print(f"[red]Could not get a token: {e.message}[/red]")
        raise typer.Exit(1)

    console.print(upload_token)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
