"""Metadata query API routes consumed by the fsck client."""

from fastapi import APIRouter, Depends, Query

from controller.exceptions import EntryNotFoundError
from controller.namespace import Namespace
from controller.schemas.namespace import (
    ChildrenResponse,
    CorruptFilesResponse,
    EntryResponse,
    FileRecordResponse,
    OperationResponse,
    PathRequest,
    RenameRequest,
)
from controller.service_locator import get_namespace

router = APIRouter(prefix="/namespace", tags=["Namespace"])


@router.get("/entry", response_model=EntryResponse)
def resolve_entry(
    path: str = Query(..., description="Absolute path to resolve"),
    namespace: Namespace = Depends(get_namespace)
):
    """
    Resolve a path to a file or directory entry.

    Raises:
        - 400: Invalid path
        - 404: Entry does not exist
    """
    entry = namespace.resolve(path)
    if entry is None:
        raise EntryNotFoundError(path)
    return EntryResponse.from_entry(entry)


@router.get("/children", response_model=ChildrenResponse)
def list_children(
    path: str = Query(..., description="Absolute directory path"),
    namespace: Namespace = Depends(get_namespace)
):
    """
    List the children of a directory in name order.

    Raises:
        - 400: Invalid path or not a directory
        - 404: Directory does not exist
    """
    children = namespace.list_children(path)
    return ChildrenResponse(
        path=path,
        children=[EntryResponse.from_entry(child) for child in children]
    )


@router.get("/blocks", response_model=FileRecordResponse)
def get_block_locations(
    path: str = Query(..., description="Absolute file path"),
    namespace: Namespace = Depends(get_namespace)
):
    """
    Return a file's blocks, replica locations and lease state.

    Raises:
        - 400: Invalid path or path is a directory
        - 404: File does not exist
    """
    return FileRecordResponse.from_record(namespace.get_block_locations(path))


@router.post("/rename", response_model=OperationResponse)
def rename_entry(request: RenameRequest, namespace: Namespace = Depends(get_namespace)):
    """Atomically rename one entry."""
    return OperationResponse(success=namespace.rename(request.src, request.dst))


@router.post("/mkdirs", response_model=OperationResponse)
def make_directories(request: PathRequest, namespace: Namespace = Depends(get_namespace)):
    """Create a directory and its missing parents."""
    return OperationResponse(success=namespace.mkdirs(request.path))


@router.delete("/entry", response_model=OperationResponse)
def delete_entry(
    path: str = Query(..., description="Absolute path to delete"),
    recursive: bool = Query(False),
    namespace: Namespace = Depends(get_namespace)
):
    """Remove a file, or a directory when empty or ``recursive`` is set."""
    return OperationResponse(success=namespace.delete(path, recursive=recursive))


@router.get("/corrupt-files", response_model=CorruptFilesResponse)
def list_corrupt_files(namespace: Namespace = Depends(get_namespace)):
    """Return the service's index of files with corrupt blocks."""
    return CorruptFilesResponse(files=namespace.list_corrupt_files())
