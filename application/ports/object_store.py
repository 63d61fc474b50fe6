from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, BinaryIO, Protocol

if TYPE_CHECKING:
    from pathlib import Path

    from domain.value_objects.acl_policy import AclPolicy
    from domain.value_objects.object_permission import ObjectPermission
    from domain.value_objects.visibility import Visibility


@dataclass(frozen=True)
class LocalObject:
    path: Path
    size: int
    content_type: str


class ObjectStore(Protocol):
    def ensure_directories(self) -> None:
        """Create the storage directories that are missing. Safe to repeat."""
        ...

    def get_upload_url(self, bucket: str | None = None, prefix: str | None = None) -> str: ...
    def save_uploaded_file(
        self,
        data: bytes,
        original_name: str | None,
        owner_id: str,
        visibility: Visibility = ...,
        *,
        bucket: str | None = None,
        prefix: str | None = None,
    ) -> str:
        """Persist ``data`` under a fresh name and return its object URL."""
        ...

    def get_object_file(self, object_path: str) -> LocalObject:
        """Resolve an object URL to a stored file.

        Raises ObjectNotFoundError when the path is malformed or the file is missing.
        """
        ...

    def search_public_object(self, file_path: str) -> LocalObject | None: ...
    def open_object(self, object_file: LocalObject) -> BinaryIO: ...
    def normalize_object_path(self, raw_path: str) -> str: ...
    def try_set_acl_policy(self, raw_path: str, policy: AclPolicy) -> str: ...
    def can_access(
        self,
        *,
        user_id: str | None,
        object_file: LocalObject,
        requested_permission: ObjectPermission = ...,
    ) -> bool: ...
