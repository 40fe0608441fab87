"""Pydantic schemas for namespace query endpoints."""

from typing import List

from pydantic import BaseModel

from common.types import BlockRecord, EntryKind, FileRecord, NamespaceEntry, ReplicaLocation


class EntryResponse(BaseModel):
    """Response model for a single namespace entry."""
    path: str
    kind: EntryKind

    @classmethod
    def from_entry(cls, entry: NamespaceEntry) -> "EntryResponse":
        return cls(path=entry.path, kind=entry.kind)

    def to_entry(self) -> NamespaceEntry:
        return NamespaceEntry(path=self.path, kind=self.kind)


class ChildrenResponse(BaseModel):
    """Response model for a directory listing."""
    path: str
    children: List[EntryResponse]


class ReplicaSchema(BaseModel):
    """One replica of a block."""
    node_id: str
    length: int
    live: bool = True
    corrupt: bool = False


class BlockSchema(BaseModel):
    """One block with its replica locations."""
    block_id: str
    length: int
    replicas: List[ReplicaSchema] = []
    corrupt: bool = False


class FileRecordResponse(BaseModel):
    """Response model for a file's block locations and lease state."""
    path: str
    length: int
    replication: int
    blocks: List[BlockSchema] = []
    open_for_write: bool = False
    modification_time: float = 0.0

    @classmethod
    def from_record(cls, record: FileRecord) -> "FileRecordResponse":
        return cls(
            path=record.path,
            length=record.length,
            replication=record.replication,
            blocks=[
                BlockSchema(
                    block_id=block.block_id,
                    length=block.length,
                    corrupt=block.corrupt,
                    replicas=[
                        ReplicaSchema(
                            node_id=r.node_id, length=r.length, live=r.live, corrupt=r.corrupt
                        )
                        for r in block.replicas
                    ],
                )
                for block in record.blocks
            ],
            open_for_write=record.open_for_write,
            modification_time=record.modification_time,
        )

    def to_record(self) -> FileRecord:
        return FileRecord(
            path=self.path,
            length=self.length,
            replication=self.replication,
            blocks=tuple(
                BlockRecord(
                    block_id=block.block_id,
                    length=block.length,
                    corrupt=block.corrupt,
                    replicas=tuple(
                        ReplicaLocation(
                            node_id=r.node_id, length=r.length, live=r.live, corrupt=r.corrupt
                        )
                        for r in block.replicas
                    ),
                )
                for block in self.blocks
            ),
            open_for_write=self.open_for_write,
            modification_time=self.modification_time,
        )


class RenameRequest(BaseModel):
    """Request model for renaming an entry."""
    src: str
    dst: str


class PathRequest(BaseModel):
    """Request model for operations taking a single path."""
    path: str


class OperationResponse(BaseModel):
    """Response model for namespace mutations."""
    success: bool


class CorruptFilesResponse(BaseModel):
    """Response model for the corrupt-file index."""
    files: List[str]
