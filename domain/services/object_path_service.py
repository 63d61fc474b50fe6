"""Pure mapping between object URLs and storage-relative locations.

An object's identity is its path: the URL handed out on save is enough to
find the file again, with no index in between. Everything here is a pure
function of its inputs and the configured base URL.
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

from domain.exceptions import ObjectNotFoundError, ValidationError
from domain.value_objects.visibility import Visibility

DEFAULT_BASE_URL = "/storage"
DEFAULT_EXTENSION = ".bin"


@dataclass(frozen=True)
class ObjectLocation:
    """A parsed object URL: visibility class plus the segments below its root."""

    visibility: Visibility
    segments: tuple[str, ...]


def _strip_base_url(object_path: str, base_url: str) -> str:
    base = base_url.rstrip("/")
    if base and (object_path == base or object_path.startswith(base + "/")):
        return object_path[len(base) :]
    return object_path


def parse_object_path(object_path: str, base_url: str = DEFAULT_BASE_URL) -> ObjectLocation:
    """Split an object URL into its visibility class and relative segments.

    The base URL prefix is optional. A well-formed path has at least three
    segments counting the base, so at least two once the base is removed.

    Raises:
        ObjectNotFoundError: If the path is too short or the visibility
            segment is neither ``public`` nor ``private``.

    """
    segments = [part for part in _strip_base_url(object_path, base_url).split("/") if part]
    if len(segments) < 2:  # noqa: PLR2004
        msg = f"Invalid object path: {object_path}"
        raise ObjectNotFoundError(msg)

    try:
        visibility = Visibility(segments[0])
    except ValueError:
        msg = f"Invalid storage type: {segments[0]} (expected public or private)"
        raise ObjectNotFoundError(msg) from None

    return ObjectLocation(visibility=visibility, segments=tuple(segments[1:]))


def normalize_object_path(raw_path: str, base_url: str = DEFAULT_BASE_URL) -> str:
    """Best-effort canonicalization of ``raw_path`` into an object URL.

    Never raises. Paths already under the base URL come back unchanged,
    absolute http(s) URLs are reduced to their path, and anything else is
    taken to be a bare public filename. Unparsable URLs are returned as-is.
    """
    if raw_path.startswith(base_url):
        return raw_path

    if raw_path.startswith(("http://", "https://")):
        try:
            return urlsplit(raw_path).path or "/"
        except ValueError:
            return raw_path

    return f"{base_url}/{Visibility.PUBLIC.value}/{raw_path.lstrip('/')}"


def split_prefix(prefix: str | None) -> list[str]:
    """Turn a ``a/b/c`` style prefix into path segments.

    Backslashes count as separators and empty segments are dropped.
    """
    if not prefix:
        return []
    return [part for part in prefix.replace("\\", "/").split("/") if part]


def object_sub_path(bucket: str | None = None, prefix: str | None = None) -> list[str]:
    """Segments placed between the visibility root and the object file name."""
    parts = [bucket] if bucket else []
    parts.extend(split_prefix(prefix))
    return parts


def validate_path_segment(segment: str, *, field: str) -> None:
    """Reject segments that would escape or restructure the storage tree.

    Raises:
        ValidationError: If the segment is empty, a dot segment, or contains
            a path separator.

    """
    if not segment or segment in {".", ".."} or "/" in segment or "\\" in segment:
        msg = f"Invalid {field}: {segment!r}"
        raise ValidationError(msg)


def object_file_name(object_id: str, extension: str) -> str:
    return f"{object_id}{extension or DEFAULT_EXTENSION}"


def build_object_url(
    base_url: str,
    visibility: Visibility,
    file_name: str,
    *,
    owner_id: str | None = None,
    sub_path: list[str] | None = None,
) -> str:
    """Build the externally visible URL for a stored object."""
    parts = [base_url.rstrip("/"), visibility.value]
    if visibility is Visibility.PRIVATE:
        parts.append(owner_id or "")
    parts.extend(sub_path or [])
    parts.append(file_name)
    return "/".join(parts)
