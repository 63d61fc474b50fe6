from pathlib import PurePosixPath

DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Keys are matched exactly, so ".PNG" does not hit ".png".
CONTENT_TYPES: dict[str, str] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".pdf": "application/pdf",
    ".txt": "text/plain",
    ".json": "application/json",
}


def guess_content_type(filename: str) -> str:
    """Infer a content type from the extension of ``filename``.

    The file content is never inspected, so a mislabeled extension yields a
    mislabeled content type.
    """
    return CONTENT_TYPES.get(PurePosixPath(filename).suffix, DEFAULT_CONTENT_TYPE)
