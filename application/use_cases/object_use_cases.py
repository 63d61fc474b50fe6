import structlog
from returns.result import Failure, Result, Success

from application.dtos.errors import AppError
from application.dtos.object_dtos import (
    ApplyAclPolicyRequest,
    ApplyAclPolicyResponse,
    SaveObjectRequest,
    SaveObjectResponse,
    UploadHandleResponse,
)
from application.ports.object_store import LocalObject, ObjectStore
from domain.exceptions import ObjectNotFoundError, ValidationError
from domain.services.object_path_service import split_prefix, validate_path_segment
from domain.value_objects.acl_policy import AclPolicy
from domain.value_objects.content_type import guess_content_type
from domain.value_objects.object_permission import ObjectPermission
from domain.value_objects.visibility import Visibility

logger = structlog.get_logger()


class RequestUploadHandleUseCase:
    """Issue an upload URL for a future direct upload."""

    def __init__(self, object_store: ObjectStore) -> None:
        self.object_store = object_store

    async def execute(
        self,
        bucket: str | None = None,
        prefix: str | None = None,
    ) -> Result[UploadHandleResponse, AppError]:
        upload_url = self.object_store.get_upload_url(bucket=bucket, prefix=prefix)
        return Success(UploadHandleResponse(upload_url=upload_url))


class SaveUploadedObjectUseCase:
    """Validate uploaded content and persist it in the object store."""

    def __init__(self, object_store: ObjectStore, max_size_bytes: int | None = None) -> None:
        self.object_store = object_store
        self.max_size_bytes = max_size_bytes

    def size_limit_error(self, size: int) -> AppError | None:
        if self.max_size_bytes is not None and size > self.max_size_bytes:
            return AppError(
                "payload_too_large",
                f"Upload of {size} bytes exceeds the {self.max_size_bytes} byte limit",
            )
        return None

    def _validate(self, data: bytes, cmd: SaveObjectRequest) -> None:
        if not data:
            msg = "File buffer is empty"
            raise ValidationError(msg)
        if cmd.visibility is Visibility.PRIVATE:
            validate_path_segment(cmd.owner_id, field="owner id")
        if cmd.bucket is not None:
            validate_path_segment(cmd.bucket, field="bucket")
        for segment in split_prefix(cmd.prefix):
            validate_path_segment(segment, field="prefix")

    async def execute(
        self,
        data: bytes,
        cmd: SaveObjectRequest,
    ) -> Result[SaveObjectResponse, AppError]:
        """Store ``data`` and describe the resulting object.

        Args:
            data: Raw content of the upload
            cmd: Upload metadata (filename, owner, visibility, placement)

        Returns:
            Result containing the stored object description or an error

        """
        if (error := self.size_limit_error(len(data))) is not None:
            return Failure(error)

        try:
            self._validate(data, cmd)
            url = self.object_store.save_uploaded_file(
                data,
                cmd.filename,
                cmd.owner_id,
                cmd.visibility,
                bucket=cmd.bucket,
                prefix=cmd.prefix,
            )
        except ValidationError as e:
            return Failure(AppError("validation", f"Validation error: {e!s}"))
        except OSError as e:
            logger.exception(
                "object_upload_failed",
                owner_id=cmd.owner_id,
                visibility=cmd.visibility.value,
                upload_id=cmd.upload_id,
            )
            return Failure(AppError("storage_error", f"Failed to save file: {e!s}"))

        return Success(
            SaveObjectResponse(
                url=url,
                size_bytes=len(data),
                content_type=guess_content_type(url),
                visibility=cmd.visibility,
                filename=cmd.filename,
                upload_id=cmd.upload_id,
            ),
        )


class ResolveObjectUseCase:
    """Resolve an object URL to a stored file the caller may read."""

    def __init__(self, object_store: ObjectStore) -> None:
        self.object_store = object_store

    async def execute(
        self,
        object_path: str,
        user_id: str | None = None,
    ) -> Result[LocalObject, AppError]:
        try:
            object_file = self.object_store.get_object_file(object_path)
        except ObjectNotFoundError as e:
            return Failure(AppError("not_found", f"Object not found: {e!s}"))

        if not self.object_store.can_access(
            user_id=user_id,
            object_file=object_file,
            requested_permission=ObjectPermission.READ,
        ):
            return Failure(AppError("forbidden", "Access to object denied"))

        return Success(object_file)


class FindPublicObjectUseCase:
    """Look up a public file; absence is a normal outcome, not an error."""

    def __init__(self, object_store: ObjectStore) -> None:
        self.object_store = object_store

    async def execute(self, file_path: str) -> Result[LocalObject | None, AppError]:
        return Success(self.object_store.search_public_object(file_path))


class ApplyAclPolicyUseCase:
    """Assign an access policy to a batch of uploaded object URLs."""

    def __init__(self, object_store: ObjectStore) -> None:
        self.object_store = object_store

    async def execute(
        self,
        request: ApplyAclPolicyRequest,
    ) -> Result[ApplyAclPolicyResponse, AppError]:
        policy = AclPolicy(owner=request.owner, visibility=request.visibility)
        paths: list[str] = []
        for url in request.urls:
            try:
                paths.append(self.object_store.try_set_acl_policy(url, policy))
            except Exception:  # noqa: BLE001
                # Keep the raw URL so one bad entry doesn't drop the rest
                logger.warning("object_acl_policy_failed", url=url, owner=request.owner)
                paths.append(url)
        return Success(ApplyAclPolicyResponse(paths=paths))
