"""Serving stored objects over HTTP."""

from collections.abc import Iterator
from typing import BinaryIO

import structlog
from fastapi import status
from fastapi.responses import JSONResponse, Response, StreamingResponse

from application.ports.object_store import LocalObject, ObjectStore

logger = structlog.get_logger()

DEFAULT_CACHE_TTL_SECONDS = 3600
CHUNK_SIZE = 64 * 1024


def _iter_file(stream: BinaryIO, object_file: LocalObject) -> Iterator[bytes]:
    # Headers are already on the wire here, so a failure can only end the body early.
    try:
        with stream:
            while True:
                chunk = stream.read(CHUNK_SIZE)
                if not chunk:
                    break
                yield chunk
    except OSError:
        logger.exception("object_stream_failed", path=str(object_file.path))


def download_object(
    object_store: ObjectStore,
    object_file: LocalObject,
    cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS,
) -> Response:
    """Build a streaming response for ``object_file``.

    If the file cannot be opened, nothing has been sent yet and a 500 JSON
    error is returned instead.
    """
    try:
        stream = object_store.open_object(object_file)
    except OSError:
        logger.exception("object_stream_open_failed", path=str(object_file.path))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Error streaming file"},
        )

    return StreamingResponse(
        _iter_file(stream, object_file),
        media_type=object_file.content_type,
        headers={
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Methods": "GET, HEAD, OPTIONS",
            "Access-Control-Allow-Headers": "Content-Type",
            "Content-Length": str(object_file.size),
            "Cache-Control": f"public, max-age={cache_ttl_seconds}",
        },
    )
