"""Tests for quarantine moves and corrupt-file deletion."""

import pytest
from unittest.mock import Mock

from common.paths import parent_path
from common.types import EntryKind, NamespaceEntry
from conftest import remove_all_replicas
from fsck.checker import FsckOptions, NamespaceChecker
from fsck.exceptions import QuarantineError
from fsck.quarantine import CorruptFileDeleter, QuarantineMover, compute_destination
from fsck.report import FsckStatus


def _lookup(*files):
    """Build a lookup over the given files and their parent directories."""
    entries = {}
    for path in files:
        entries[path] = NamespaceEntry(path, EntryKind.FILE)
        parent = parent_path(path)
        while parent != '/':
            entries.setdefault(parent, NamespaceEntry(parent, EntryKind.DIRECTORY))
            parent = parent_path(parent)
    return entries.get


def test_destination_keeps_original_path():
    assert compute_destination('/a/b/f', _lookup()) == '/lost+found/a/b/f'


def test_destination_under_custom_quarantine_dir():
    assert compute_destination('/f', _lookup(), quarantine_dir='/quarantine/') == '/quarantine/f'


def test_colliding_destination_gets_suffix():
    lookup = _lookup('/lost+found/a/f', '/lost+found/a/f.1')

    assert compute_destination('/a/f', lookup) == '/lost+found/a/f.2'


def test_file_in_place_of_parent_gets_suffix():
    lookup = _lookup('/lost+found/a')

    assert compute_destination('/a/b/f', lookup) == '/lost+found/a.1/b/f'


def test_suffixed_parent_that_is_taken_is_skipped():
    lookup = _lookup('/lost+found/a', '/lost+found/a.1/f')

    assert compute_destination('/a/f', lookup) == '/lost+found/a.2/f'


def test_existing_parent_directory_is_reused():
    lookup = _lookup('/lost+found/a/other')

    assert compute_destination('/a/f', lookup) == '/lost+found/a/f'


def test_exhausted_suffixes_raise():
    lookup = _lookup('/lost+found/f', '/lost+found/f.1', '/lost+found/f.2')

    with pytest.raises(QuarantineError):
        compute_destination('/f', lookup, max_suffix=2)


def test_quarantined_file_is_not_moved_again():
    with pytest.raises(QuarantineError):
        compute_destination('/lost+found/a/f', _lookup())


def test_move_creates_parent_and_renames():
    metadata = Mock()
    metadata.resolve.return_value = None
    metadata.mkdirs.return_value = True
    metadata.rename.return_value = True
    mover = QuarantineMover(metadata)

    assert mover.move('/a/b/f') == '/lost+found/a/b/f'
    metadata.mkdirs.assert_called_once_with('/lost+found/a/b')
    metadata.rename.assert_called_once_with('/a/b/f', '/lost+found/a/b/f')


def test_refused_rename_raises():
    metadata = Mock()
    metadata.resolve.return_value = None
    metadata.mkdirs.return_value = True
    metadata.rename.return_value = False
    mover = QuarantineMover(metadata)

    with pytest.raises(QuarantineError):
        mover.move('/a/f')


def test_refused_mkdirs_raises_without_renaming():
    metadata = Mock()
    metadata.resolve.return_value = None
    metadata.mkdirs.return_value = False
    mover = QuarantineMover(metadata)

    with pytest.raises(QuarantineError):
        mover.move('/a/f')
    metadata.rename.assert_not_called()


def test_move_against_namespace_resolves_collision(namespace):
    namespace.create_file('/lost+found/docs/readme', 5)
    mover = QuarantineMover(namespace)

    destination = mover.move('/docs/readme')

    assert destination == '/lost+found/docs/readme.1'
    assert namespace.resolve('/docs/readme') is None
    assert namespace.get_block_locations(destination).length == 10


def test_delete_removes_file(namespace):
    CorruptFileDeleter(namespace).delete('/docs/readme')

    assert namespace.resolve('/docs/readme') is None


def test_refused_delete_raises():
    metadata = Mock()
    metadata.delete.return_value = False

    with pytest.raises(QuarantineError):
        CorruptFileDeleter(metadata).delete('/a')


def test_repeated_moves_under_a_quarantined_file(namespace):
    namespace.create_file('/a', 10)
    remove_all_replicas(namespace, '/a')
    first = NamespaceChecker(namespace, FsckOptions(path='/', move=True)).run()
    assert first.status == FsckStatus.CORRUPT
    assert namespace.resolve('/lost+found/a') is not None

    namespace.create_file('/a/f', 10)
    remove_all_replicas(namespace, '/a/f')
    second = NamespaceChecker(namespace, FsckOptions(path='/', move=True)).run()

    assert second.status == FsckStatus.CORRUPT
    assert 'Moved /a/f to /lost+found/a.1/f' in second.output
    assert namespace.resolve('/lost+found/a.1/f') is not None
