import json
import threading

import pytest

from weight_tracker.app import create_app
from weight_tracker.models.weight import add_entry, get_entries
from weight_tracker.storage.document_store import DocumentStore, ENTRIES, SETTINGS, USERS, WATER
from weight_tracker.storage.filesystem import MemoryFileSystem


@pytest.fixture
def memory_store():
    return DocumentStore(root='/data', fs=MemoryFileSystem())


def test_path_for_maps_domain_and_key(memory_store):
    assert memory_store.path_for(ENTRIES, 'alice') == '/data/entries/alice.json'
    assert memory_store.path_for(SETTINGS, 'alice') == '/data/settings/alice.json'
    assert memory_store.path_for(WATER, 'alice') == '/data/water/alice.json'
    assert memory_store.path_for(USERS, 'users') == '/data/users/users.json'


def test_path_for_does_no_io(memory_store):
    memory_store.path_for(ENTRIES, 'alice')
    assert memory_store.fs.files == {}
    assert memory_store.fs.dirs == set()


@pytest.mark.parametrize('key', ['', '.', '..', '../alice', 'a/b', 'a\\b'])
def test_path_for_rejects_unsafe_keys(memory_store, key):
    with pytest.raises(ValueError):
        memory_store.path_for(ENTRIES, key)


def test_path_for_rejects_unknown_domain(memory_store):
    with pytest.raises(ValueError):
        memory_store.path_for('photos', 'alice')


def test_legacy_paths(memory_store):
    assert memory_store.legacy_path_for(USERS, 'users') == '/data/users.json'
    assert memory_store.legacy_path_for(ENTRIES, 'alice') == '/data/entries-alice.json'
    assert memory_store.legacy_path_for(SETTINGS, 'alice') == '/data/settings-alice.json'
    assert memory_store.legacy_path_for(WATER, 'alice') is None


def test_store_without_root_refuses_to_work():
    store = DocumentStore(fs=MemoryFileSystem())
    with pytest.raises(RuntimeError):
        store.ensure_directories()


def test_ensure_directories_is_repeatable(tmp_path):
    store = DocumentStore(root=str(tmp_path / 'config'))

    store.ensure_directories()
    store.ensure_directories()

    for domain in ('users', 'entries', 'settings', 'water'):
        assert (tmp_path / 'config' / domain).is_dir()


def test_get_missing_document_returns_none(memory_store):
    memory_store.ensure_directories()
    assert memory_store.get(ENTRIES, 'alice') is None


def test_put_then_get(memory_store):
    memory_store.ensure_directories()
    memory_store.put(SETTINGS, 'alice', {'unit': 'lb'})

    assert memory_store.get(SETTINGS, 'alice') == {'unit': 'lb'}
    assert memory_store.exists(SETTINGS, 'alice')


def test_put_writes_two_space_indented_json(tmp_path):
    store = DocumentStore(root=str(tmp_path))
    store.ensure_directories()

    store.put(ENTRIES, 'alice', [{'id': '1'}])

    text = (tmp_path / 'entries' / 'alice.json').read_text(encoding='utf-8')
    assert text == json.dumps([{'id': '1'}], indent=2)


def test_put_leaves_no_temp_files(tmp_path):
    store = DocumentStore(root=str(tmp_path))
    store.ensure_directories()

    store.put(WATER, 'alice', [])
    store.put(WATER, 'alice', [{'date': '2024-01-01'}])

    assert [p.name for p in (tmp_path / 'water').iterdir()] == ['alice.json']


def test_corrupt_json_propagates(memory_store):
    memory_store.ensure_directories()
    memory_store.fs.write_text('/data/entries/alice.json', '{not json')

    with pytest.raises(json.JSONDecodeError):
        memory_store.get(ENTRIES, 'alice')


def test_write_into_missing_directory_fails(memory_store):
    with pytest.raises(FileNotFoundError):
        memory_store.put(ENTRIES, 'alice', [])


def test_locked_serializes_writers(memory_store):
    memory_store.ensure_directories()
    memory_store.put(WATER, 'alice', {'count': 0})

    def increment():
        for _ in range(50):
            with memory_store.locked(WATER, 'alice'):
                doc = memory_store.get(WATER, 'alice')
                doc['count'] += 1
                memory_store.put(WATER, 'alice', doc)

    threads = [threading.Thread(target=increment) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert memory_store.get(WATER, 'alice') == {'count': 200}


def test_locked_is_reentrant(memory_store):
    with memory_store.locked(ENTRIES, 'alice'):
        with memory_store.locked(ENTRIES, 'alice'):
            pass


def test_put_refuses_non_finite_numbers(memory_store):
    memory_store.ensure_directories()

    with pytest.raises(ValueError):
        memory_store.put(ENTRIES, 'alice', [{'weight': float('nan')}])
    assert not memory_store.exists(ENTRIES, 'alice')


def test_apps_keep_their_own_data_directory(tmp_path):
    """Two apps sharing the store extension must not write into each other's directory"""
    first = create_app('testing', config_path=tmp_path / 'first')
    second = create_app('testing', config_path=tmp_path / 'second')
    entry = {'weight': 80.0, 'training': 'rest', 'sleep': 0, 'timestamp': '2024-01-01T08:00:00.000Z'}

    with first.app_context():
        add_entry(entry, 'alice')
    with second.app_context():
        assert get_entries('alice') == []
        add_entry(dict(entry, weight=70.0), 'alice')
    with first.app_context():
        assert [e.weight for e in get_entries('alice')] == [80.0]

    assert (tmp_path / 'first' / 'entries' / 'alice.json').exists()
    assert (tmp_path / 'second' / 'entries' / 'alice.json').exists()
