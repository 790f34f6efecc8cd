"""Shared CLI parameter definitions.

Reusable Typer option declarations so that option names and help text stay
consistent across commands.

Usage:
    @app.command()
    def my_command(
        max_keys: Annotated[int, max_keys_option()] = 1000,
    ):
        pass
"""

from typing import Annotated, Optional

import typer


def max_keys_option() -> Annotated[int, typer.Option]:
    """Page size option."""
    return typer.Option("--max-keys", help="Maximum number of keys to list", min=1)


def name_prefix_option() -> Annotated[Optional[str], typer.Option]:
    """Filename prefix filter option."""
    return typer.Option(
        "--prefix", help="Only download files whose name starts with this"
    )


def name_postfix_option() -> Annotated[Optional[str], typer.Option]:
    """Filename postfix filter option."""
    return typer.Option(
        "--postfix", help="Only download files whose name ends with this"
    )


def workers_option() -> Annotated[Optional[int], typer.Option]:
    """Concurrent download workers option."""
    return typer.Option(
        "--workers", "-w", help="Number of concurrent downloads", min=1
    )


def download_root_option() -> Annotated[Optional[str], typer.Option]:
    """Local download root option."""
    return typer.Option(
        "--download-root",
        help="Local directory all downloads are written under",
        envvar="BUCKET_TOOLS_DOWNLOAD_ROOT",
    )


def content_type_option() -> Annotated[Optional[str], typer.Option]:
    """Upload content type option."""
    return typer.Option(
        "--content-type", help="MIME type, inferred from the key when omitted"
    )


def max_size_option() -> Annotated[Optional[int], typer.Option]:
    """Upload size limit option."""
    return typer.Option(
        "--max-size", help="Reject sources larger than this many bytes", min=0
    )


def expires_option() -> Annotated[Optional[int], typer.Option]:
    """Presigned URL lifetime option."""
    return typer.Option("--expires", help="URL lifetime in seconds", min=1)


def method_option() -> Annotated[str, typer.Option]:
    """Presigned URL method option."""
    return typer.Option("--method", help="HTTP method the URL grants: get or put")


def probe_key_option() -> Annotated[str, typer.Option]:
    """Security probe key option."""
    return typer.Option(
        "--probe-key", help="Key used by the upload, download and delete probes"
    )
