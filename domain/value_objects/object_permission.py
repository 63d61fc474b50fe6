from enum import Enum


class ObjectPermission(str, Enum):
    READ = "read"
    WRITE = "write"
    DELETE = "delete"
