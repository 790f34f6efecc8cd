"""Command-line interface for bucket-tools.

Commands:
    - list: List directories and files under a prefix
    - download: Download one object
    - download-dir: Download every object under a prefix
    - delete: Delete one object
    - delete-dir: Delete every object under a prefix
    - upload: Upload a local file
    - presign: Issue a presigned GET or PUT URL
    - security-check: Check that the bucket rejects anonymous access

Store credentials are read from AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY,
AWS_DEFAULT_REGION, AWS_BUCKET and AWS_URL (or a .env file).
"""

from pathlib import Path
from typing import Annotated, Optional

import typer

from . import __version__
from .cli_params import (
    content_type_option,
    download_root_option,
    expires_option,
    max_keys_option,
    max_size_option,
    method_option,
    name_postfix_option,
    name_prefix_option,
    probe_key_option,
    workers_option,
)
from .core.exceptions import BucketToolsError
from .schemas import FilterSpec, ProgressEvent, TransferOutcome
from .unified import (
    check_security,
    delete_directory,
    delete_object,
    download_object,
    download_prefix,
    list_bucket_directory,
    presign_object,
    upload_object,
)

app = typer.Typer(
    name="bucket-tools",
    help="Upload, download, list and delete objects in an S3-compatible bucket.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Display version information."""
    if value:
        typer.echo(f"bucket-tools {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, help="Show version."),
    ] = None,
) -> None:
    """
    Bucket-Tools: bulk transfers and housekeeping for one S3-compatible bucket.
    """
    pass


def _fail(message: str) -> None:
    typer.echo(message, err=True)
    raise typer.Exit(1)


def _format_megabytes(size: int) -> str:
    return f"{size / (1024 * 1024):.2f} MB"


def _print_progress(event: ProgressEvent) -> None:
    typer.echo(
        f"Progress: {event.percent:5.1f}% ({event.processed}/{event.total} files) "
        f"- {event.outcome.value}: {event.key}"
    )


@app.command("list")
def list_cmd(
    prefix: Annotated[str, typer.Argument(help="Prefix to list")] = "",
    max_keys: Annotated[int, max_keys_option()] = 1000,
) -> None:
    """
    List directories, then files with size and last-modified time.

    Examples:
        bucket-tools list videos/ --max-keys 100
    """
    try:
        listing = list_bucket_directory(prefix=prefix, max_keys=max_keys)
    except BucketToolsError as e:
        _fail(f"Error: Failed to list directory contents: {e}")
        return

    typer.echo("\nDirectories:")
    for directory in listing.directories:
        typer.echo(f"  {directory}")

    typer.echo("\nFiles:")
    for listed in listing.files:
        modified = (
            listed.last_modified.strftime("%Y-%m-%d %H:%M:%S")
            if listed.last_modified
            else "unknown"
        )
        details = f"{_format_megabytes(listed.size)}, {modified}"
        if listed.content_type:
            details += f", {listed.content_type}"
        typer.echo(f"  {listed.key} ({details})")

    if listing.has_more:
        typer.echo("\nMore items available. Use --max-keys N to see more.")


@app.command("download")
def download_cmd(
    key: Annotated[str, typer.Argument(help="Object key to download")],
    local_path: Annotated[
        Optional[str],
        typer.Argument(help="Destination relative to the download root"),
    ] = None,
    download_root: Annotated[Optional[str], download_root_option()] = None,
) -> None:
    """
    Download one object. Existing local files are left untouched.

    Examples:
        bucket-tools download videos/intro.mp4 local/intro.mp4
    """
    try:
        result = download_object(key, local_path, download_root=download_root)
    except BucketToolsError as e:
        _fail(f"Error: {e}")
        return

    if result.outcome is TransferOutcome.FAILED:
        _fail(f"Download failed: {result.error}")
    elif result.outcome is TransferOutcome.SKIPPED:
        typer.echo(f"Skipped (already exists): {result.destination}")
    else:
        typer.echo(f"Download completed successfully: {result.destination}")


@app.command("download-dir")
def download_dir_cmd(
    prefix: Annotated[str, typer.Argument(help="Prefix to download")],
    local_path: Annotated[
        Optional[str],
        typer.Argument(help="Destination relative to the download root"),
    ] = None,
    name_prefix: Annotated[Optional[str], name_prefix_option()] = None,
    name_postfix: Annotated[Optional[str], name_postfix_option()] = None,
    workers: Annotated[Optional[int], workers_option()] = None,
    download_root: Annotated[Optional[str], download_root_option()] = None,
) -> None:
    """
    Download every object under a prefix, optionally filtered by filename.

    Files that already exist locally are skipped, so an interrupted run can
    simply be repeated.

    Examples:
        bucket-tools download-dir videos/2024/ archive --postfix .mp4
    """
    filter_spec = FilterSpec(name_prefix=name_prefix, name_postfix=name_postfix)
    try:
        result = download_prefix(
            prefix,
            local_path=local_path,
            filter_spec=filter_spec,
            workers=workers,
            progress=_print_progress,
            download_root=download_root,
        )
    except BucketToolsError as e:
        _fail(f"Error: {e}")
        return

    summary = result.summary
    if summary.total_matched == 0:
        typer.echo("No matching files found in directory.")
        return

    typer.echo("\nDownload Summary:")
    typer.echo(f"Total matching files: {summary.total_matched}")
    typer.echo(f"Successfully downloaded: {summary.succeeded}")
    typer.echo(f"Skipped (already exists): {summary.skipped}")
    typer.echo(f"Failed: {summary.failed}")

    if not result.success:
        _fail("Directory download failed. Check error logs for details.")
    typer.echo("Directory download completed successfully.")


@app.command("delete")
def delete_cmd(
    key: Annotated[str, typer.Argument(help="Object key to delete")],
) -> None:
    """Delete one object."""
    try:
        deleted = delete_object(key)
    except BucketToolsError as e:
        _fail(f"Error: {e}")
        return

    if not deleted:
        _fail("Delete failed. Check error logs for details.")
    typer.echo(f"Successfully deleted file: {key}")


@app.command("delete-dir")
def delete_dir_cmd(
    prefix: Annotated[str, typer.Argument(help="Prefix to delete")],
) -> None:
    """
    Delete every object under a prefix, in batches of up to 1000 keys.
    """
    if not prefix:
        _fail("Error: Refusing to delete with an empty prefix")

    try:
        summary = delete_directory(prefix)
    except BucketToolsError as e:
        _fail(f"Error: {e}")
        return

    if summary.batches == 0:
        typer.echo("No files found in directory.")
        return

    typer.echo("Delete Summary:")
    typer.echo(f"Successfully deleted: {summary.deleted} files")
    typer.echo(f"Failed to delete: {summary.failed} files")

    if not summary.success:
        _fail("Directory delete failed. Check error logs for details.")


@app.command("upload")
def upload_cmd(
    source: Annotated[
        Path,
        typer.Argument(
            help="Local file to upload", exists=True, dir_okay=False, readable=True
        ),
    ],
    key: Annotated[str, typer.Argument(help="Destination object key")],
    content_type: Annotated[Optional[str], content_type_option()] = None,
    max_size: Annotated[Optional[int], max_size_option()] = None,
) -> None:
    """
    Upload a local file, replacing any object already stored at the key.

    Examples:
        bucket-tools upload ./intro.mp4 videos/intro.mp4 --max-size 104857600
    """
    try:
        result = upload_object(
            source, key, content_type=content_type, size_limit=max_size
        )
    except BucketToolsError as e:
        _fail(f"Error: {e}")
        return

    if result.outcome is TransferOutcome.FAILED:
        _fail(f"Upload failed: {result.error}")
    typer.echo(f"File uploaded to: {result.url}")


@app.command("presign")
def presign_cmd(
    key: Annotated[str, typer.Argument(help="Object key")],
    expires: Annotated[Optional[int], expires_option()] = None,
    method: Annotated[str, method_option()] = "get",
) -> None:
    """
    Print a time-limited URL granting GET or PUT access to one object.
    """
    try:
        url = presign_object(key, expires_in=expires, method=method)
    except BucketToolsError as e:
        _fail(f"Error: {e}")
        return

    typer.echo(url)


@app.command("security-check")
def security_check_cmd(
    probe_key: Annotated[
        str, probe_key_option()
    ] = "security_test/unauthorized_upload.txt",
) -> None:
    """
    Check that the bucket denies access without valid credentials.

    Exits with status 1 if any probe succeeds.
    """
    try:
        report = check_security(probe_key=probe_key)
    except BucketToolsError as e:
        _fail(f"Error: {e}")
        return

    typer.echo(f"S3 BUCKET SECURITY TEST RESULTS ({report.bucket})")
    for result in report.results:
        status = "✓ PASSED" if result.passed else "✗ FAILED"
        typer.echo(f"Test {result.number}: {result.name}")
        typer.echo(f"Status: {status}")
        typer.echo(f"Message: {result.message}")

    typer.echo("\nSUMMARY")
    typer.echo(f"Total Tests: {report.total}")
    typer.echo(f"Passed: {report.passed}")
    typer.echo(f"Failed: {report.total - report.passed}")
    typer.echo(f"Success Rate: {report.success_rate}%")

    if not report.secure:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
