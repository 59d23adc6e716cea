"""CLI implementation for byteserve."""

import json
import logging
import sys
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import typer

from .config import DEFAULT_CONFIG
from .core.model import EmitError, InvalidRangeError
from .core.util import response_asdict
from .core.wire import write_response
from .files import guess_mime_type, serve_source
from .io import open_source, RangeNotSupportedError, StreamBodyWriter

app = typer.Typer(add_completion=False, help="Render the HTTP response for a file or URL, optionally by byte range.")


def _mime_for(source: str) -> str:
    """Guess the MIME type from a local path or the path part of a URL."""
    parsed = urlparse(source)
    if parsed.scheme and parsed.netloc:
        return guess_mime_type(parsed.path)
    return guess_mime_type(source)


@app.command()
def main(
    source: str = typer.Argument(..., help="Local path or http(s) URL to serve"),
    range_: Optional[str] = typer.Option(None, "--range", "-r", help="Range header value, e.g. 'bytes=0-99,200-299'"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Write to PATH instead of stdout"),
    as_json: bool = typer.Option(False, "--json", help="Print status and headers as JSON instead of wire bytes"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Log debug output to stderr"),
):
    """Write the exact HTTP/1.1 response a server would send for SOURCE."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        byte_source = open_source(source)
    except (IOError, OSError, RangeNotSupportedError) as e:
        typer.echo(f"Cannot open {source}: {e}", err=True)
        raise typer.Exit(code=1)

    try:
        response = serve_source(byte_source, _mime_for(source), range_, DEFAULT_CONFIG)
    except InvalidRangeError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)

    sink_file = None
    handed_off = False
    try:
        sink_file = open(output, "wb") if output else None
        if as_json:
            text = json.dumps(response_asdict(response), indent=2) + "\n"
            if sink_file is not None:
                sink_file.write(text.encode("utf-8"))
            else:
                typer.echo(text, nl=False)
        else:
            writer = StreamBodyWriter(sink_file if sink_file is not None else sys.stdout.buffer)
            # from here write_response and the body close the source
            handed_off = True
            write_response(response, writer)
            writer.flush()
    except (EmitError, RangeNotSupportedError) as e:
        typer.echo(f"Response aborted: {e}", err=True)
        raise typer.Exit(code=1)
    except OSError as e:
        # output could not be opened or written before the body started
        typer.echo(f"Cannot write {output}: {e}", err=True)
        raise typer.Exit(code=1)
    finally:
        if not handed_off:
            response.release()
        if sink_file is not None:
            sink_file.close()


if __name__ == "__main__":
    app()
