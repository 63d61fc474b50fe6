from collections.abc import Container
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, File, Form, Header, Query, UploadFile, status
from fastapi.responses import JSONResponse, Response
from returns.result import Failure

from application.dtos.object_dtos import (
    ApplyAclPolicyRequest,
    ApplyAclPolicyResponse,
    SaveObjectRequest,
    SaveObjectResponse,
    UploadHandleResponse,
)
from application.ports.object_store import ObjectStore
from application.use_cases.object_use_cases import (
    ApplyAclPolicyUseCase,
    FindPublicObjectUseCase,
    RequestUploadHandleUseCase,
    ResolveObjectUseCase,
    SaveUploadedObjectUseCase,
)
from domain.value_objects.visibility import Visibility
from infrastructure.config import settings
from interfaces.api.downloads import download_object
from interfaces.api.middleware import handle_use_case_errors
from interfaces.api.routes.helpers import _map_app_error_to_http_exception
from interfaces.dependencies import get_container

logger = structlog.get_logger()

router = APIRouter(tags=["objects"])

# Mounted under STORAGE_BASE_URL so the URLs handed out on upload resolve directly
storage_router = APIRouter(tags=["storage"])


@router.post("/api/objects/upload", status_code=status.HTTP_200_OK)
@handle_use_case_errors
async def request_upload_url(
    container: Annotated[Container, Depends(get_container)],
    bucket: Annotated[str | None, Query()] = None,
    prefix: Annotated[str | None, Query()] = None,
) -> UploadHandleResponse:
    """Issue a direct-upload URL."""
    use_case = container[RequestUploadHandleUseCase]
    return await use_case.execute(bucket=bucket, prefix=prefix)


@router.post("/api/upload/direct", status_code=status.HTTP_201_CREATED)
@handle_use_case_errors
async def upload_direct(
    container: Annotated[Container, Depends(get_container)],
    file: Annotated[UploadFile, File()],
    owner_id: Annotated[str, Form()],
    visibility: Annotated[Visibility, Form()] = Visibility.PUBLIC,
    upload_id: Annotated[str | None, Query(alias="uploadId")] = None,
    bucket: Annotated[str | None, Query()] = None,
    prefix: Annotated[str | None, Query()] = None,
) -> SaveObjectResponse:
    """Store uploaded content and return its object URL.

    Returns:
        201 Created: Object stored
        400 Bad Request: Empty file or invalid owner/bucket/prefix
        413 Request Entity Too Large: Upload above the configured limit
        500 Internal Server Error: Filesystem failure

    """
    use_case = container[SaveUploadedObjectUseCase]

    # The multipart parser has already counted the bytes; reject before reading them into memory
    if file.size is not None and (error := use_case.size_limit_error(file.size)) is not None:
        return Failure(error)

    limit = use_case.max_size_bytes
    data = await file.read(-1 if limit is None else limit + 1)
    return await use_case.execute(
        data,
        SaveObjectRequest(
            filename=file.filename,
            owner_id=owner_id,
            visibility=visibility,
            bucket=bucket,
            prefix=prefix,
            upload_id=upload_id,
        ),
    )


@router.post("/api/objects/acl", status_code=status.HTTP_200_OK)
@handle_use_case_errors
async def apply_acl_policy(
    request: ApplyAclPolicyRequest,
    container: Annotated[Container, Depends(get_container)],
) -> ApplyAclPolicyResponse:
    """Normalize uploaded object URLs and assign them an access policy."""
    use_case = container[ApplyAclPolicyUseCase]
    return await use_case.execute(request)


async def _serve_object(
    object_path: str,
    container: Container,
    user_id: str | None,
) -> Response:
    use_case = container[ResolveObjectUseCase]
    result = await use_case.execute(object_path, user_id=user_id)

    if isinstance(result, Failure):
        error = result.failure()
        logger.warning("object_lookup_failed", object_path=object_path, reason=error.message)
        raise _map_app_error_to_http_exception(error)

    return download_object(
        container[ObjectStore],
        result.unwrap(),
        cache_ttl_seconds=settings.storage_cache_ttl_seconds,
    )


@router.api_route("/objects/{object_path:path}", methods=["GET", "HEAD"])
async def get_object(
    object_path: str,
    container: Annotated[Container, Depends(get_container)],
    x_user_id: Annotated[str | None, Header()] = None,
) -> Response:
    """Serve a stored object addressed by its object path."""
    return await _serve_object(object_path, container, x_user_id)


@storage_router.api_route("/{object_path:path}", methods=["GET", "HEAD"])
async def get_storage_object(
    object_path: str,
    container: Annotated[Container, Depends(get_container)],
    x_user_id: Annotated[str | None, Header()] = None,
) -> Response:
    """Serve a stored object addressed by the URL returned on upload."""
    return await _serve_object(object_path, container, x_user_id)


@router.api_route("/public-objects/{file_path:path}", methods=["GET", "HEAD"])
async def get_public_object(
    file_path: str,
    container: Annotated[Container, Depends(get_container)],
) -> Response:
    """Serve a public object, or 404 when it does not exist."""
    use_case = container[FindPublicObjectUseCase]
    object_file = (await use_case.execute(file_path)).unwrap()

    if object_file is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": "File not found"},
        )

    return download_object(
        container[ObjectStore],
        object_file,
        cache_ttl_seconds=settings.storage_cache_ttl_seconds,
    )
