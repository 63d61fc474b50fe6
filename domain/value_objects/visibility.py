from enum import Enum


class Visibility(str, Enum):
    """Visibility class of a stored object.

    Public objects live under the public directory and are served without
    authorization. Private objects are partitioned by owner id.
    """

    PUBLIC = "public"
    PRIVATE = "private"
