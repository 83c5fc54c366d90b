import json
from pathlib import Path
import pytest

from notecli.api import Notecli
from notecli.codecs.base import CorruptDataError
from notecli.conf import NotecliConf
from notecli.models import NoteSortField
from notecli.store import NotFoundError, ValidationError


def saved_ids(path='/notes/cwd/notes.json'):
    return [n['id'] for n in json.loads(Path(path).read_text())['notes']]


def test_mutations_are_saved(notes_cwd):
    with Notecli.for_user() as nc:
        assert nc.add('Buy milk', ['home']) == 0
        assert nc.add('Write report') == 1
        assert saved_ids() == [0, 1]
        nc.remove(0)
        assert saved_ids() == [1]
    with Notecli.for_user() as nc:
        assert nc.add('Call mom') == 0
        nc.edit(1, 'Write report v2')
        nc.add_tags(1, ['work', 'urgent'])
    with Notecli.for_user() as nc:
        note = nc.store.get(1)
        assert note.content == 'Write report v2'
        assert list(note.tags) == ['work', 'urgent']
        assert nc.clear() == 2
    assert saved_ids() == []


def test_for_user_with_path(notes_cwd):
    with Notecli.for_user('elsewhere/notes.yaml') as nc:
        nc.add('yaml please')
    assert Path('/notes/cwd/elsewhere/notes.yaml').read_text().startswith('notes:')
    assert not Path('/notes/cwd/notes.json').exists()


def test_failed_operation_does_not_save(notes_cwd):
    nc = Notecli.for_user()
    with pytest.raises(NotFoundError):
        nc.remove(3)
    with pytest.raises(ValidationError):
        nc.add('')
    assert not Path('/notes/cwd/notes.json').exists()


def test_add_tags_validates_first(notes_cwd):
    nc = Notecli.for_user()
    nc.add('note', ['a'])
    with pytest.raises(ValidationError, match='No tags given'):
        nc.add_tags(0, [])
    with pytest.raises(ValidationError):
        nc.add_tags(0, ['b', ''])
    assert list(nc.store.get(0).tags) == ['a']
    with pytest.raises(NotFoundError):
        nc.add_tags(9, ['b'])


def test_remove_tags_only_saves_changes(notes_cwd, mocker):
    nc = Notecli.for_user()
    nc.add('note', ['a', 'b'])
    save = mocker.spy(nc, 'save')
    assert nc.remove_tags(0, ['zzz']) == []
    assert save.call_count == 0
    assert nc.remove_tags(0, ['b', 'zzz']) == ['b']
    assert save.call_count == 1
    with pytest.raises(ValidationError):
        nc.remove_tags(0, [])


def test_default_sort_from_conf(notes_cwd):
    nc = NotecliConf(default_sort=NoteSortField.CONTENT).instantiate()
    nc.add('pear')
    nc.add('apple')
    nc.add('fig')
    assert [n.content for n in nc.list()] == ['apple', 'fig', 'pear']
    assert [n.content for n in nc.list(reverse=True)] == ['pear', 'fig', 'apple']
    assert [n.content for n in nc.list('id')] == ['pear', 'apple', 'fig']
    assert [n.content for n in nc.search('p')] == ['apple', 'pear']
    assert nc.tag_counts() == {}


def test_corrupt_file_is_not_replaced(notes_cwd):
    Path('/notes/cwd/notes.json').write_text('{"notes": 12}')
    with pytest.raises(CorruptDataError):
        Notecli.for_user()
    assert Path('/notes/cwd/notes.json').read_text() == '{"notes": 12}'


def test_context_manager_does_not_swallow_errors(notes_cwd):
    with pytest.raises(NotFoundError):
        with Notecli.for_user() as nc:
            assert isinstance(nc, Notecli)
            nc.remove(0)
