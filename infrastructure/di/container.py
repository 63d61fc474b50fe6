from lagom import Container

from application.ports.object_store import ObjectStore
from application.use_cases.object_use_cases import (
    ApplyAclPolicyUseCase,
    FindPublicObjectUseCase,
    RequestUploadHandleUseCase,
    ResolveObjectUseCase,
    SaveUploadedObjectUseCase,
)
from infrastructure.config import Settings, settings
from infrastructure.object_stores.local_object_store import LocalObjectStore, LocalStorageConfig


def create_container(app_settings: Settings = settings) -> Container:
    container = Container()

    # Object storage (local filesystem via fsspec); directories are created here
    container[LocalStorageConfig] = LocalStorageConfig.from_settings(app_settings)
    object_store_instance = LocalObjectStore(config=container[LocalStorageConfig])
    container[ObjectStore] = object_store_instance

    # Register Use Cases
    container[RequestUploadHandleUseCase] = lambda c: RequestUploadHandleUseCase(
        object_store=c[ObjectStore],
    )
    container[SaveUploadedObjectUseCase] = lambda c: SaveUploadedObjectUseCase(
        object_store=c[ObjectStore],
        max_size_bytes=app_settings.max_upload_size_bytes,
    )
    container[ResolveObjectUseCase] = lambda c: ResolveObjectUseCase(
        object_store=c[ObjectStore],
    )
    container[FindPublicObjectUseCase] = lambda c: FindPublicObjectUseCase(
        object_store=c[ObjectStore],
    )
    container[ApplyAclPolicyUseCase] = lambda c: ApplyAclPolicyUseCase(
        object_store=c[ObjectStore],
    )

    return container
