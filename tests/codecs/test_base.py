from datetime import datetime, timezone
import os
import stat
import pytest

from notecli.codecs.base import atomic_write_text, note_from_doc, store_from_doc


def test_atomic_write_creates_parents(tmp_path):
    path = tmp_path / 'deeper' / 'notes.json'
    atomic_write_text(str(path), 'hello')
    assert path.read_text() == 'hello'
    assert os.listdir(path.parent) == ['notes.json']


def test_atomic_write_replaces_existing(tmp_path):
    path = tmp_path / 'notes.json'
    path.write_text('old contents')
    os.chmod(path, 0o640)
    atomic_write_text(str(path), 'new contents')
    assert path.read_text() == 'new contents'
    assert stat.S_IMODE(os.stat(path).st_mode) == 0o640
    assert os.listdir(tmp_path) == ['notes.json']


def test_atomic_write_failure_keeps_old_file(tmp_path, mocker):
    path = tmp_path / 'notes.json'
    path.write_text('old contents')
    mocker.patch('os.fsync', side_effect=OSError(28, 'No space left on device'))
    with pytest.raises(OSError):
        atomic_write_text(str(path), 'new contents')
    assert path.read_text() == 'old contents'
    assert os.listdir(tmp_path) == ['notes.json']


def test_atomic_write_failure_on_rename(tmp_path, mocker):
    path = tmp_path / 'notes.json'
    path.write_text('old contents')
    mocker.patch('os.replace', side_effect=PermissionError(13, 'Permission denied'))
    with pytest.raises(PermissionError):
        atomic_write_text(str(path), 'new contents')
    assert path.read_text() == 'old contents'
    assert os.listdir(tmp_path) == ['notes.json']


def test_note_from_doc_defaults():
    note = note_from_doc({'id': 4, 'content': 'bare', 'color': 'ignored'})
    assert note.id == 4
    assert note.content == 'bare'
    assert len(note.tags) == 0
    assert note.created_at.tzinfo is not None
    assert note.updated_at == note.created_at


def test_note_from_doc_timestamps():
    note = note_from_doc({'id': 0, 'content': 'x',
                          'created_at': '2025-01-05T10:00:00.123456789Z',
                          'updated_at': datetime(2025, 1, 6, 8, 30)})
    assert note.created_at == datetime(2025, 1, 5, 10, 0, 0, 123456, tzinfo=timezone.utc)
    assert note.updated_at == datetime(2025, 1, 6, 8, 30, tzinfo=timezone.utc)


def test_note_from_doc_missing_created_uses_updated():
    note = note_from_doc({'id': 0, 'content': 'x', 'updated_at': '2025-01-06T08:30:00+02:00'})
    assert note.created_at == datetime(2025, 1, 6, 6, 30, tzinfo=timezone.utc)
    assert note.updated_at == note.created_at


@pytest.mark.parametrize('item, message', [
    ('just a string', 'must be a mapping'),
    ({'content': 'no id'}, 'missing `id`'),
    ({'id': 1}, 'missing `content`'),
    ({'id': '1', 'content': 'x'}, 'non-negative integer'),
    ({'id': -1, 'content': 'x'}, 'non-negative integer'),
    ({'id': True, 'content': 'x'}, 'non-negative integer'),
    ({'id': 1, 'content': 5}, '`content`'),
    ({'id': 1, 'content': 'x', 'tags': 'home'}, '`tags`'),
    ({'id': 1, 'content': 'x', 'tags': ['ok', 3]}, '`tags`'),
    ({'id': 1, 'content': 'x', 'created_at': 'yesterday'}, 'ISO-8601'),
    ({'id': 1, 'content': 'x', 'created_at': 12}, 'must be a timestamp'),
    ({'id': 1, 'content': 'x', 'created_at': '2025-01-02T00:00:00Z', 'updated_at': '2025-01-01T00:00:00Z'},
     'updated before it was created'),
])
def test_note_from_doc_rejects(item, message):
    with pytest.raises(ValueError, match=message):
        note_from_doc(item)


def test_store_from_doc():
    store = store_from_doc({'notes': [{'id': 2, 'content': 'b'}, {'id': 0, 'content': 'a'}], 'free_ids': [1]})
    assert [n.id for n in store.list()] == [0, 2]
    assert store.next_id() == 1
    assert len(store_from_doc({})) == 0


@pytest.mark.parametrize('doc, message', [
    ([], 'mapping at the top level'),
    ({'notes': {'id': 0}}, '`notes` must be a list'),
    ({'notes': [{'id': 0, 'content': 'a'}, {'id': 0, 'content': 'b'}]}, 'duplicate note id: 0'),
])
def test_store_from_doc_rejects(doc, message):
    with pytest.raises(ValueError, match=message):
        store_from_doc(doc)
