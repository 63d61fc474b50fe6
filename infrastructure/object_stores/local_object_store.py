from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, BinaryIO
from urllib.parse import urlencode
from uuid import uuid4

import fsspec
import structlog

from application.ports.object_store import LocalObject
from domain.exceptions import ObjectNotFoundError
from domain.services.object_path_service import (
    DEFAULT_BASE_URL,
    build_object_url,
    normalize_object_path,
    object_file_name,
    object_sub_path,
    parse_object_path,
)
from domain.value_objects.content_type import guess_content_type
from domain.value_objects.object_permission import ObjectPermission
from domain.value_objects.visibility import Visibility

if TYPE_CHECKING:
    from fsspec import AbstractFileSystem

    from domain.value_objects.acl_policy import AclPolicy
    from infrastructure.config import Settings

logger = structlog.get_logger()

UPLOAD_ENDPOINT = "/api/upload/direct"


@dataclass(frozen=True)
class LocalStorageConfig:
    """Storage root configuration, fixed for the lifetime of a store."""

    storage_dir: Path
    public_dir: Path
    base_url: str = DEFAULT_BASE_URL

    @classmethod
    def from_settings(cls, settings: Settings) -> LocalStorageConfig:
        storage_dir = Path(settings.local_storage_dir)
        return cls(
            storage_dir=storage_dir,
            public_dir=Path(settings.public_storage_dir or storage_dir / "public"),
            base_url=settings.storage_base_url.rstrip("/") or DEFAULT_BASE_URL,
        )

    @property
    def uploads_dir(self) -> Path:
        return self.storage_dir / "uploads"

    @property
    def private_dir(self) -> Path:
        return self.storage_dir / "private"


def _is_stored_file(fs: AbstractFileSystem, path: Path, root: Path) -> bool:
    # Paths the OS cannot represent (embedded NUL, too long) are simply absent
    try:
        return path.resolve().is_relative_to(root.resolve()) and fs.isfile(str(path))
    except (OSError, ValueError):
        return False


class LocalObjectStore:
    """Object store backed by a local directory tree.

    Public objects live under ``public_dir``; private objects live under
    ``<storage_dir>/private/<owner_id>``. An object's URL is derived from its
    location, so nothing besides the file itself is ever recorded.
    """

    def __init__(self, config: LocalStorageConfig) -> None:
        self.config = config
        self.fs = fsspec.filesystem("file")
        self.ensure_directories()

    @property
    def base_url(self) -> str:
        return self.config.base_url

    def ensure_directories(self) -> None:
        for directory in (
            self.config.storage_dir,
            self.config.public_dir,
            self.config.uploads_dir,
            self.config.private_dir,
        ):
            if self.fs.exists(str(directory)):
                continue
            try:
                self.fs.makedirs(str(directory), exist_ok=True)
            except OSError as e:
                # Writes will surface the problem; startup must not fail here
                logger.error(  # noqa: TRY400
                    "storage_directory_create_failed",
                    directory=str(directory),
                    error=str(e),
                )

    def get_upload_url(self, bucket: str | None = None, prefix: str | None = None) -> str:
        params = {"uploadId": str(uuid4())}
        if bucket:
            params["bucket"] = bucket
        if prefix:
            params["prefix"] = prefix
        return f"{UPLOAD_ENDPOINT}?{urlencode(params)}"

    def _target_dir(self, owner_id: str, visibility: Visibility, sub_path: list[str]) -> Path:
        if visibility is Visibility.PUBLIC:
            return self.config.public_dir.joinpath(*sub_path)
        return self.config.private_dir.joinpath(owner_id, *sub_path)

    def save_uploaded_file(
        self,
        data: bytes,
        original_name: str | None,
        owner_id: str,
        visibility: Visibility = Visibility.PUBLIC,
        *,
        bucket: str | None = None,
        prefix: str | None = None,
    ) -> str:
        """Write ``data`` to a freshly named file and return its object URL.

        The extension comes from ``original_name`` (``.bin`` when there is
        none). The content is written with a single write call, so a crash
        mid-write can leave a truncated file. Filesystem errors propagate.
        """
        sub_path = object_sub_path(bucket, prefix)
        extension = PurePosixPath(original_name).suffix if original_name else ""
        file_name = object_file_name(str(uuid4()), extension)

        target_dir = self._target_dir(owner_id, visibility, sub_path)
        self.fs.makedirs(str(target_dir), exist_ok=True)

        with self.fs.open(str(target_dir / file_name), "wb") as out:
            out.write(data)

        return build_object_url(
            self.base_url,
            visibility,
            file_name,
            owner_id=owner_id,
            sub_path=sub_path,
        )

    def _describe(self, path: Path) -> LocalObject:
        return LocalObject(
            path=path,
            size=self.fs.size(str(path)),
            content_type=guess_content_type(path.name),
        )

    def get_object_file(self, object_path: str) -> LocalObject:
        location = parse_object_path(object_path, self.base_url)

        if location.visibility is Visibility.PUBLIC:
            root = self.config.public_dir
        else:
            root = self.config.private_dir
        file_path = root.joinpath(*location.segments)

        if not _is_stored_file(self.fs, file_path, root):
            msg = f"File does not exist: {object_path}"
            raise ObjectNotFoundError(msg)

        return self._describe(file_path)

    def search_public_object(self, file_path: str) -> LocalObject | None:
        full_path = self.config.public_dir / file_path.lstrip("/")
        if not _is_stored_file(self.fs, full_path, self.config.public_dir):
            return None
        return self._describe(full_path)

    def open_object(self, object_file: LocalObject) -> BinaryIO:
        return self.fs.open(str(object_file.path), "rb")

    def normalize_object_path(self, raw_path: str) -> str:
        return normalize_object_path(raw_path, self.base_url)

    def try_set_acl_policy(self, raw_path: str, policy: AclPolicy) -> str:  # noqa: ARG002
        # Nothing to persist locally; files already sit where their visibility says
        return self.normalize_object_path(raw_path)

    def can_access(
        self,
        *,
        user_id: str | None,  # noqa: ARG002
        object_file: LocalObject,  # noqa: ARG002
        requested_permission: ObjectPermission = ObjectPermission.READ,  # noqa: ARG002
    ) -> bool:
        # Authorization happens in the HTTP layer before the store is reached
        return True
