from pydantic import BaseModel, ConfigDict, Field

from domain.value_objects.visibility import Visibility


class AclPolicy(BaseModel):
    """Access policy requested for an object.

    The local store does not persist it; it only exists so callers written
    against a cloud bucket ACL keep working.
    """

    model_config = ConfigDict(frozen=True)

    owner: str = Field(..., description="Identifier of the owning user")
    visibility: Visibility = Field(..., description="Requested visibility class")
