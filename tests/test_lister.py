"""Tests for the corrupt-file listing mode."""

import pytest
from unittest.mock import Mock

from conftest import corrupt_all_replicas, remove_all_replicas
from fsck.exceptions import InvalidArgumentError, PathNotFoundError
from fsck.lister import CorruptFileLister, build_summary_for_corrupt_files, summarize


def test_summary_for_no_corrupt_files():
    assert build_summary_for_corrupt_files(0, '/') == (
        "Unable to locate any corrupt files under '/'.\n\n"
        "Please run a complete fsck to confirm if '/' is HEALTHY"
    )


def test_summary_for_one_corrupt_file():
    assert build_summary_for_corrupt_files(1, '/') == (
        "There is at least 1 corrupt file under '/', which is CORRUPT"
    )


def test_summary_for_many_corrupt_files():
    assert build_summary_for_corrupt_files(100, '/') == (
        "There are at least 100 corrupt files under '/', which is CORRUPT"
    )


def test_summary_rejects_negative_count():
    with pytest.raises(InvalidArgumentError):
        build_summary_for_corrupt_files(-1, '/')
    with pytest.raises(ValueError):
        summarize(-5, '/')


def test_lists_corrupt_files_sorted(namespace):
    remove_all_replicas(namespace, '/docs/readme')
    remove_all_replicas(namespace, '/audio/audio2')
    lister = CorruptFileLister(namespace)

    assert lister.list_corrupt('/') == ['/audio/audio2', '/docs/readme']


def test_healthy_tree_lists_nothing(namespace):
    lister = CorruptFileLister(namespace)

    files = lister.list_corrupt('/')

    assert files == []
    assert lister.render('/', files) == (
        "Unable to locate any corrupt files under '/'.\n\n"
        "Please run a complete fsck to confirm if '/' is HEALTHY\n"
    )


def test_render_lists_paths_before_summary(namespace):
    remove_all_replicas(namespace, '/audio/audio1', block_index=1)
    lister = CorruptFileLister(namespace)

    output = lister.render('/audio', lister.list_corrupt('/audio'))

    assert output == (
        "/audio/audio1\n"
        "\n"
        "There is at least 1 corrupt file under '/audio', which is CORRUPT\n"
    )


def test_listing_respects_segment_prefixes(namespace):
    remove_all_replicas(namespace, '/audiobook/book1')
    lister = CorruptFileLister(namespace)

    assert lister.list_corrupt('/audio') == []
    assert lister.list_corrupt('/audiobook') == ['/audiobook/book1']


def test_index_only_entries_are_included(namespace):
    metadata = Mock(wraps=namespace)
    metadata.list_corrupt_files.return_value = ['/docs/readme']
    lister = CorruptFileLister(metadata)

    assert lister.list_corrupt('/') == ['/docs/readme']


def test_stale_and_out_of_scope_index_entries_are_ignored(namespace):
    namespace.create_file('/lost+found/old', 10)
    metadata = Mock(wraps=namespace)
    metadata.list_corrupt_files.return_value = [
        '/docs/gone',
        '/audiobook/book1',
        '/lost+found/old',
    ]
    lister = CorruptFileLister(metadata)

    assert lister.list_corrupt('/audio') == []
    assert lister.list_corrupt('/docs') == []
    assert lister.list_corrupt('/') == ['/audiobook/book1']


def test_open_files_are_not_listed_by_default(namespace):
    namespace.create_file('/logs/current', 10, lease_holder='writer-1')
    remove_all_replicas(namespace, '/logs/current')
    lister = CorruptFileLister(namespace)

    assert lister.list_corrupt('/logs') == []


def test_malformed_files_are_collected(namespace):
    namespace.set_block_length(namespace.block_ids('/docs/readme')[0], -1)
    lister = CorruptFileLister(namespace)

    assert lister.list_corrupt('/') == []
    assert lister.malformed == ['/docs/readme']


def test_missing_path_raises(namespace):
    lister = CorruptFileLister(namespace)

    with pytest.raises(PathNotFoundError):
        lister.list_corrupt('/nope')


def test_corrupt_open_file_in_index_is_not_listed_by_default(namespace):
    namespace.create_file('/logs/current', 1500, lease_holder='writer-1')
    corrupt_all_replicas(namespace, '/logs/current')
    metadata = Mock(wraps=namespace)
    metadata.list_corrupt_files.return_value = ['/logs/current']
    lister = CorruptFileLister(metadata)

    assert lister.list_corrupt('/') == []
    assert lister.open_files == set()


def test_corrupt_open_file_is_listed_when_requested(namespace):
    namespace.create_file('/logs/current', 1500, lease_holder='writer-1')
    corrupt_all_replicas(namespace, '/logs/current')
    lister = CorruptFileLister(namespace, open_for_write_visible=True)

    assert lister.list_corrupt('/') == ['/logs/current']
    assert lister.open_files == {'/logs/current'}


def test_file_removed_during_listing_is_skipped(namespace):
    remove_all_replicas(namespace, '/audio/audio2')
    metadata = Mock(wraps=namespace)

    def remove_then_read(path):
        if path == '/audio/audio2':
            namespace.delete(path)
        return namespace.get_block_locations(path)

    metadata.get_block_locations.side_effect = remove_then_read
    lister = CorruptFileLister(metadata)

    assert lister.list_corrupt('/') == []
