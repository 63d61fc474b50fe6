from .acl_policy import AclPolicy
from .content_type import CONTENT_TYPES, DEFAULT_CONTENT_TYPE, guess_content_type
from .object_permission import ObjectPermission
from .visibility import Visibility

__all__ = [
    "CONTENT_TYPES",
    "DEFAULT_CONTENT_TYPE",
    "AclPolicy",
    "ObjectPermission",
    "Visibility",
    "guess_content_type",
]
