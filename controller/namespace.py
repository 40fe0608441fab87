"""In-memory namespace: directory tree, block map, replica state and leases."""

import itertools
import threading
import time
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from common.logging_config import get_logger
from common.paths import child_path, join_path, split_path
from common.types import BlockRecord, EntryKind, FileRecord, NamespaceEntry, ReplicaLocation
from controller.config import DEFAULT_BLOCK_SIZE, DEFAULT_FILE_REPLICATION
from controller.exceptions import (
    EntryExistsError,
    EntryIsDirectoryError,
    EntryNotDirectoryError,
    EntryNotFoundError,
    InvalidPathError,
    UnknownBlockError,
    UnknownNodeError,
)

logger = get_logger(__name__)


@dataclass
class _Replica:
    node_id: str
    length: int
    corrupt: bool = False


@dataclass
class _Block:
    block_id: str
    length: int
    replicas: Dict[str, _Replica] = field(default_factory=dict)


@dataclass
class _Inode:
    kind: EntryKind
    children: Dict[str, "_Inode"] = field(default_factory=dict)
    replication: int = 1
    blocks: List[_Block] = field(default_factory=list)
    lease_holder: Optional[str] = None
    modification_time: float = 0.0

    @property
    def length(self) -> int:
        return sum(block.length for block in self.blocks)


class Namespace:
    """
    Authoritative in-memory namespace.

    Implements the metadata query interface used by the checker plus the
    administrative mutators that storage nodes and clients drive (file
    creation, leases, replica loss and corruption reports). All state is
    guarded by one re-entrant lock, so every operation, including rename,
    is atomic.
    """

    def __init__(self, block_size: int = DEFAULT_BLOCK_SIZE, default_replication: int = DEFAULT_FILE_REPLICATION):
        self.block_size = block_size
        self.default_replication = default_replication
        self.lock = threading.RLock()
        self._root = _Inode(kind=EntryKind.DIRECTORY)
        self._nodes: Dict[str, bool] = {}
        self._blocks: Dict[str, _Block] = {}
        self._block_ids = itertools.count(1)

    def _segments(self, path: str) -> List[str]:
        try:
            return split_path(path)
        except ValueError as e:
            raise InvalidPathError(str(e)) from e

    def _lookup(self, path: str) -> Optional[_Inode]:
        node = self._root
        for segment in self._segments(path):
            if node.kind != EntryKind.DIRECTORY:
                return None
            node = node.children.get(segment)
            if node is None:
                return None
        return node

    def _require(self, path: str) -> _Inode:
        node = self._lookup(path)
        if node is None:
            raise EntryNotFoundError(path)
        return node

    def _require_file(self, path: str) -> _Inode:
        node = self._require(path)
        if node.kind != EntryKind.FILE:
            raise EntryIsDirectoryError(f"Not a file: {path}")
        return node

    def _require_block(self, block_id: str) -> _Block:
        block = self._blocks.get(block_id)
        if block is None:
            raise UnknownBlockError(f"Unknown block {block_id}")
        return block

    # Metadata query interface

    def resolve(self, path: str) -> Optional[NamespaceEntry]:
        with self.lock:
            node = self._lookup(path)
            if node is None:
                return None
            return NamespaceEntry(path=join_path(self._segments(path)), kind=node.kind)

    def list_children(self, path: str) -> List[NamespaceEntry]:
        with self.lock:
            node = self._require(path)
            if node.kind != EntryKind.DIRECTORY:
                raise EntryNotDirectoryError(f"Not a directory: {path}")
            base = join_path(self._segments(path))
            return [
                NamespaceEntry(path=child_path(base, name), kind=child.kind)
                for name, child in sorted(node.children.items())
            ]

    def get_block_locations(self, path: str) -> FileRecord:
        with self.lock:
            node = self._require_file(path)
            blocks = tuple(self._block_record(block) for block in node.blocks)
            return FileRecord(
                path=join_path(self._segments(path)),
                length=node.length,
                replication=node.replication,
                blocks=blocks,
                open_for_write=node.lease_holder is not None,
                modification_time=node.modification_time,
            )

    def _block_record(self, block: _Block) -> BlockRecord:
        replicas = tuple(
            ReplicaLocation(
                node_id=replica.node_id,
                length=replica.length,
                live=self._nodes.get(replica.node_id, False),
                corrupt=replica.corrupt,
            )
            for replica in sorted(block.replicas.values(), key=lambda r: r.node_id)
        )
        all_corrupt = bool(replicas) and all(r.corrupt for r in replicas)
        return BlockRecord(
            block_id=block.block_id,
            length=block.length,
            replicas=replicas,
            corrupt=all_corrupt,
        )

    def rename(self, src: str, dst: str) -> bool:
        """
        Move one entry to a new path.

        Returns False (without changing anything) if the source is missing,
        the destination exists, the destination's parent is not a directory,
        or the destination lies inside the source.
        """
        with self.lock:
            src_segments = self._segments(src)
            dst_segments = self._segments(dst)
            if not src_segments or not dst_segments:
                return False
            if dst_segments[:len(src_segments)] == src_segments:
                return False

            src_parent = self._lookup(join_path(src_segments[:-1]))
            dst_parent = self._lookup(join_path(dst_segments[:-1]))
            if src_parent is None or src_segments[-1] not in src_parent.children:
                return False
            if dst_parent is None or dst_parent.kind != EntryKind.DIRECTORY:
                return False
            if dst_segments[-1] in dst_parent.children:
                return False

            node = src_parent.children.pop(src_segments[-1])
            dst_parent.children[dst_segments[-1]] = node
            logger.info(f"Renamed {join_path(src_segments)} to {join_path(dst_segments)}")
            return True

    def mkdirs(self, path: str) -> bool:
        """Create a directory and its missing parents; False if a file is in the way."""
        with self.lock:
            node = self._root
            for segment in self._segments(path):
                child = node.children.get(segment)
                if child is None:
                    child = _Inode(kind=EntryKind.DIRECTORY, modification_time=time.time())
                    node.children[segment] = child
                elif child.kind != EntryKind.DIRECTORY:
                    return False
                node = child
            return True

    def delete(self, path: str, recursive: bool = False) -> bool:
        """Remove an entry; non-empty directories need ``recursive``."""
        with self.lock:
            segments = self._segments(path)
            if not segments:
                return False
            parent = self._lookup(join_path(segments[:-1]))
            if parent is None or parent.kind != EntryKind.DIRECTORY:
                return False
            node = parent.children.get(segments[-1])
            if node is None:
                return False
            if node.kind == EntryKind.DIRECTORY and node.children and not recursive:
                return False
            del parent.children[segments[-1]]
            for block in self._iter_blocks(node):
                self._blocks.pop(block.block_id, None)
            logger.info(f"Deleted {join_path(segments)}")
            return True

    def list_corrupt_files(self) -> List[str]:
        """
        Return paths of files with at least one block whose replicas are all corrupt.
        """
        with self.lock:
            corrupt = []
            for path, node in self._iter_files(self._root, "/"):
                for block in node.blocks:
                    replicas = block.replicas.values()
                    if replicas and all(r.corrupt for r in replicas):
                        corrupt.append(path)
                        break
            return sorted(corrupt)

    def _iter_files(self, node: _Inode, path: str) -> Iterable[Tuple[str, _Inode]]:
        for name, child in node.children.items():
            child_p = child_path(path, name)
            if child.kind == EntryKind.FILE:
                yield child_p, child
            else:
                yield from self._iter_files(child, child_p)

    def _iter_blocks(self, node: _Inode) -> Iterable[_Block]:
        if node.kind == EntryKind.FILE:
            yield from node.blocks
            return
        for child in node.children.values():
            yield from self._iter_blocks(child)

    # Storage node registry

    def register_node(self, node_id: str, live: bool = True) -> None:
        with self.lock:
            self._nodes[node_id] = live
            logger.info(f"Registered storage node {node_id} (live={live})")

    def set_node_live(self, node_id: str, live: bool) -> None:
        with self.lock:
            if node_id not in self._nodes:
                raise UnknownNodeError(f"Unknown storage node {node_id}")
            self._nodes[node_id] = live
            if not live:
                logger.warning(f"Storage node {node_id} marked dead")

    def live_nodes(self) -> List[str]:
        with self.lock:
            return sorted(node_id for node_id, live in self._nodes.items() if live)

    # File lifecycle

    def create_file(
        self,
        path: str,
        length: int,
        replication: Optional[int] = None,
        nodes: Optional[List[str]] = None,
        lease_holder: Optional[str] = None,
    ) -> FileRecord:
        """
        Create a file and place its blocks.

        Blocks are cut at ``block_size`` and each is placed on the first
        ``replication`` nodes of ``nodes`` (default: all live nodes,
        rotated per block).

        Raises:
            EntryExistsError: If the path is taken
            EntryNotDirectoryError: If a parent is a file
        """
        replication = replication or self.default_replication
        with self.lock:
            segments = self._segments(path)
            if not segments:
                raise EntryExistsError("Cannot create the root directory")
            parent_p = join_path(segments[:-1])
            if not self.mkdirs(parent_p):
                raise EntryNotDirectoryError(f"Parent of {path} is not a directory")
            parent = self._lookup(parent_p)
            if segments[-1] in parent.children:
                raise EntryExistsError(f"Path already exists: {path}")

            candidates = list(nodes) if nodes is not None else self.live_nodes()
            inode = _Inode(
                kind=EntryKind.FILE,
                replication=replication,
                lease_holder=lease_holder,
                modification_time=time.time(),
            )
            remaining = length
            index = 0
            while remaining > 0:
                size = min(remaining, self.block_size)
                inode.blocks.append(self._allocate_block(size, candidates, replication, index))
                remaining -= size
                index += 1
            parent.children[segments[-1]] = inode
            logger.info(
                f"Created {join_path(segments)} ({length} bytes, {len(inode.blocks)} blocks, "
                f"replication={replication})"
            )
            return self.get_block_locations(path)

    def _allocate_block(self, size: int, candidates: List[str], replication: int, index: int) -> _Block:
        block = _Block(block_id=f"blk_{next(self._block_ids)}", length=size)
        if candidates:
            offset = index % len(candidates)
            rotated = candidates[offset:] + candidates[:offset]
            for node_id in rotated[:replication]:
                block.replicas[node_id] = _Replica(node_id=node_id, length=size)
        self._blocks[block.block_id] = block
        return block

    def append(self, path: str, length: int, nodes: Optional[List[str]] = None) -> FileRecord:
        """
        Append bytes to a file held open for write.

        The last block is filled first; its replicas follow the new length.

        Raises:
            EntryNotFoundError: If the file does not exist
            EntryExistsError: If the file has no active lease
        """
        with self.lock:
            inode = self._require_file(path)
            if inode.lease_holder is None:
                raise EntryExistsError(f"File is not open for write: {path}")
            candidates = list(nodes) if nodes is not None else self.live_nodes()
            remaining = length
            if inode.blocks and inode.blocks[-1].length < self.block_size:
                last = inode.blocks[-1]
                grow = min(remaining, self.block_size - last.length)
                last.length += grow
                for replica in last.replicas.values():
                    replica.length = last.length
                remaining -= grow
            while remaining > 0:
                size = min(remaining, self.block_size)
                inode.blocks.append(
                    self._allocate_block(size, candidates, inode.replication, len(inode.blocks))
                )
                remaining -= size
            inode.modification_time = time.time()
            return self.get_block_locations(path)

    def open_for_write(self, path: str, holder: str) -> None:
        with self.lock:
            inode = self._require_file(path)
            if inode.lease_holder is not None and inode.lease_holder != holder:
                raise EntryExistsError(f"{path} is already leased by {inode.lease_holder}")
            inode.lease_holder = holder

    def close_file(self, path: str) -> None:
        """Release the write lease on a file."""
        with self.lock:
            inode = self._require_file(path)
            inode.lease_holder = None
            inode.modification_time = time.time()

    # Replica state reported by storage nodes and clients

    def block_ids(self, path: str) -> List[str]:
        with self.lock:
            return [block.block_id for block in self._require_file(path).blocks]

    def remove_replica(self, block_id: str, node_id: str) -> None:
        """Forget a replica (the node reported the block file gone)."""
        with self.lock:
            block = self._require_block(block_id)
            if block.replicas.pop(node_id, None) is not None:
                logger.warning(f"Replica of {block_id} on {node_id} removed")

    def add_replica(self, block_id: str, node_id: str) -> None:
        with self.lock:
            block = self._require_block(block_id)
            if node_id not in self._nodes:
                raise UnknownNodeError(f"Unknown storage node {node_id}")
            block.replicas[node_id] = _Replica(node_id=node_id, length=block.length)

    def report_bad_replica(self, block_id: str, node_id: str) -> None:
        """Mark one replica corrupt (checksum mismatch seen by a reader or scanner)."""
        with self.lock:
            block = self._require_block(block_id)
            replica = block.replicas.get(node_id)
            if replica is None:
                raise UnknownNodeError(f"Block {block_id} has no replica on {node_id}")
            replica.corrupt = True
            logger.warning(f"Replica of {block_id} on {node_id} reported corrupt")

    def set_block_length(self, block_id: str, length: int) -> None:
        """Overwrite a block's declared length (metadata repair and fault injection)."""
        with self.lock:
            self._require_block(block_id).length = length
