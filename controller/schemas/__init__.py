"""Pydantic schemas for API requests and responses."""

from controller.schemas.namespace import (
    EntryResponse,
    ChildrenResponse,
    ReplicaSchema,
    BlockSchema,
    FileRecordResponse,
    RenameRequest,
    PathRequest,
    OperationResponse,
    CorruptFilesResponse
)
from controller.schemas.common import ErrorResponse

__all__ = [
    "EntryResponse",
    "ChildrenResponse",
    "ReplicaSchema",
    "BlockSchema",
    "FileRecordResponse",
    "RenameRequest",
    "PathRequest",
    "OperationResponse",
    "CorruptFilesResponse",
    "ErrorResponse"
]
