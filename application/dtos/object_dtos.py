from pydantic import BaseModel, ConfigDict, Field

from domain.value_objects.visibility import Visibility


class UploadHandleResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    upload_url: str = Field(
        ...,
        alias="uploadURL",
        description="URL the client posts the file content to",
    )


class SaveObjectRequest(BaseModel):
    """Request DTO for persisting uploaded content."""

    filename: str | None = Field(None, description="Original filename of the upload")
    owner_id: str = Field(..., description="Identifier of the uploading user")
    visibility: Visibility = Field(Visibility.PUBLIC, description="Visibility class")
    bucket: str | None = Field(None, description="Optional bucket directory")
    prefix: str | None = Field(None, description="Optional slash-separated sub-path")
    upload_id: str | None = Field(None, description="Upload handle the content was sent to")


class SaveObjectResponse(BaseModel):
    """Response DTO describing a stored object."""

    url: str = Field(..., description="Externally addressable URL of the object")
    size_bytes: int = Field(..., description="Size of the object in bytes")
    content_type: str = Field(..., description="Content type inferred from the extension")
    visibility: Visibility = Field(..., description="Visibility class")
    filename: str | None = Field(None, description="Original filename of the upload")
    upload_id: str | None = Field(None, description="Upload handle the content was sent to")


class ApplyAclPolicyRequest(BaseModel):
    urls: list[str] = Field(..., description="Raw object URLs or paths")
    owner: str = Field(..., description="Identifier of the owning user")
    visibility: Visibility = Field(Visibility.PUBLIC, description="Requested visibility class")


class ApplyAclPolicyResponse(BaseModel):
    paths: list[str] = Field(..., description="Normalized object paths, in request order")
