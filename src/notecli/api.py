"""Provides the main entry point for using the library, :class:`Notecli`"""

from __future__ import annotations
from typing import Dict, Iterable, List, Optional

from notecli.codecs.delegating import DelegatingCodec
from notecli.conf import NotecliConf
from notecli.models import Note, NoteSort, NoteSortIsh
from notecli.store import ValidationError, parse_sort


class Notecli:
    """Main entry point for working programmatically with your notes file.

    Generally, you should get an instance using the :meth:`Notecli.for_user` method. The store is loaded from
    :attr:`notecli.conf.NotecliConf.notes_path` when the instance is created, and every method that changes notes
    saves the file before returning. If a method raises, nothing is saved.

    .. attribute:: conf
       :type: notecli.conf.NotecliConf

    .. attribute:: store
       :type: notecli.store.NoteStore

    Here's an example of how to use this class. This would add the tag "errand" to every note that mentions milk.

    .. code-block:: python

       from notecli.api import Notecli
       with Notecli.for_user() as nc:
           for note in nc.search('milk'):
               nc.add_tags(note.id, ['errand'])
    """

    @staticmethod
    def for_user(notes_path: Optional[str] = None) -> Notecli:
        """Creates an instance using the user's ``~/.notecli.conf.py`` file, if any.

        If notes_path is given, it replaces the path from the config.
        """
        conf = NotecliConf.for_user()
        if notes_path:
            conf.notes_path = notes_path
        return conf.instantiate()

    def __init__(self, conf: NotecliConf):
        self.conf = conf
        self.codec = DelegatingCodec(conf.notes_path)
        self.store = self.codec.load()

    def save(self) -> None:
        """Writes the store to the notes file. Mutating methods call this for you."""
        self.codec.save(self.store)

    def _sort(self, sort: Optional[NoteSortIsh], reverse: bool) -> NoteSort:
        if sort is None:
            sort = self.conf.default_sort
        sort = parse_sort(sort)
        if reverse:
            sort = NoteSort(sort.field, reverse=not sort.reverse)
        return sort

    def add(self, content: str, tags: Iterable[str] = ()) -> int:
        """Adds a note and returns its id."""
        note_id = self.store.add(content, tags)
        self.save()
        return note_id

    def remove(self, note_id: int) -> Note:
        note = self.store.remove(note_id)
        self.save()
        return note

    def clear(self) -> int:
        """Deletes every note. Returns how many were deleted."""
        count = self.store.clear()
        self.save()
        return count

    def edit(self, note_id: int, content: Optional[str] = None) -> Note:
        note = self.store.edit(note_id, content)
        self.save()
        return note

    def add_tags(self, note_id: int, tags: Iterable[str]) -> Note:
        """Adds each of the tags to the note.

        Raises :exc:`notecli.store.ValidationError` if no tags are given.
        """
        tags = list(tags)
        if not tags:
            raise ValidationError('No tags given')
        if not all(t and t.strip() for t in tags):
            raise ValidationError('Tags must not be empty')
        note = self.store.get(note_id)
        for tag in tags:
            self.store.add_tag(note_id, tag)
        self.save()
        return note

    def remove_tags(self, note_id: int, tags: Iterable[str]) -> List[str]:
        """Removes each of the tags from the note, if present. Returns the tags that were actually removed.

        The file is only rewritten if something was removed.
        """
        tags = list(tags)
        if not tags:
            raise ValidationError('No tags given')
        self.store.get(note_id)
        removed = [t for t in tags if self.store.remove_tag(note_id, t)]
        if removed:
            self.save()
        return removed

    def list(self, sort: Optional[NoteSortIsh] = None, reverse: bool = False) -> List[Note]:
        """Returns every note. If sort is omitted, :attr:`notecli.conf.NotecliConf.default_sort` is used."""
        return self.store.list(self._sort(sort, reverse))

    def search(self, keyword: str, sort: Optional[NoteSortIsh] = None, reverse: bool = False) -> List[Note]:
        """Returns notes whose content or tags contain the keyword, ignoring case."""
        return self.store.search(keyword, self._sort(sort, reverse))

    def tag_counts(self) -> Dict[str, int]:
        return self.store.tag_counts()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        pass
