"""Provides the :class:`NoteStore` class, which owns a collection of notes and is the only thing that changes it."""

from __future__ import annotations
from collections import defaultdict
from datetime import datetime, timedelta, timezone
import logging
from typing import Dict, Iterable, Iterator, List, Optional

from notecli import Error
from notecli.models import Note, NoteSort, NoteSortIsh, TagSet


logger = logging.getLogger(__name__)


class NotFoundError(Error):
    """Raised when an operation refers to a note id that is not in the store."""
    def __init__(self, note_id: int):
        super().__init__(f'Note {note_id} not found')
        self.note_id = note_id


class ValidationError(Error):
    """Raised when a caller-supplied value is not acceptable. The store is left unchanged."""
    pass


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _clean_content(content: str) -> str:
    if not content or not content.strip():
        raise ValidationError('Note content must not be empty')
    return content


def _clean_tag(tag: str) -> str:
    tag = (tag or '').strip()
    if not tag:
        raise ValidationError('Tags must not be empty')
    return tag


def parse_sort(sort: NoteSortIsh) -> NoteSort:
    """Like :meth:`notecli.models.NoteSort.parse`, but raises :exc:`ValidationError` for bad input."""
    try:
        return NoteSort.parse(sort)
    except (ValueError, AttributeError):
        raise ValidationError(f'Unknown sort key: {sort!r}')


class NoteStore:
    """Holds notes keyed by id.

    New notes always get the smallest non-negative integer that is not currently in use, so the id of a removed
    note is handed out again by the next :meth:`add`.

    Every method validates its arguments before changing anything, so an operation that raises leaves the store
    as it was.

    Here's an example:

    .. code-block:: python

       store = NoteStore()
       store.add('Buy milk', ['home'])   # 0
       store.add('Write report')         # 1
       store.remove(0)
       store.add('Call mom')             # 0 again
    """

    def __init__(self, notes: Iterable[Note] = ()):
        self._notes: Dict[int, Note] = {}
        for note in notes:
            if note.id in self._notes:
                raise ValueError(f'Duplicate note id: {note.id}')
            self._notes[note.id] = note

    def __len__(self) -> int:
        return len(self._notes)

    def __contains__(self, note_id) -> bool:
        return note_id in self._notes

    def __iter__(self) -> Iterator[Note]:
        return iter(self.list())

    def next_id(self) -> int:
        """Returns the id the next call to :meth:`add` would assign."""
        candidate = 0
        while candidate in self._notes:
            candidate += 1
        return candidate

    def get(self, note_id: int) -> Note:
        """Returns the note with the given id, or raises :exc:`NotFoundError`."""
        try:
            return self._notes[note_id]
        except KeyError:
            raise NotFoundError(note_id)

    def add(self, content: str, tags: Iterable[str] = ()) -> int:
        """Creates a note and returns its id.

        Raises :exc:`ValidationError` if the content is empty (or only whitespace) or if any tag is empty.
        """
        content = _clean_content(content)
        tagset = TagSet(_clean_tag(t) for t in tags)
        now = _now()
        note_id = self.next_id()
        self._notes[note_id] = Note(note_id, content, created_at=now, updated_at=now, tags=tagset)
        logger.debug('added note %d', note_id)
        return note_id

    def remove(self, note_id: int) -> Note:
        """Deletes the note with the given id and returns it. Its id becomes available again."""
        note = self.get(note_id)
        del self._notes[note_id]
        logger.debug('removed note %d', note_id)
        return note

    def clear(self) -> int:
        """Deletes every note. Returns how many were deleted."""
        count = len(self._notes)
        self._notes.clear()
        logger.debug('cleared %d notes', count)
        return count

    def edit(self, note_id: int, content: Optional[str] = None) -> Note:
        """Replaces the content of a note, if content is given, and refreshes its :attr:`updated_at`.

        Passing ``None`` keeps the current content. An empty string raises :exc:`ValidationError`.
        """
        note = self.get(note_id)
        if content is not None:
            note.content = _clean_content(content)
        self._touch(note)
        logger.debug('edited note %d', note_id)
        return note

    def add_tag(self, note_id: int, tag: str) -> Note:
        """Adds a tag to a note and refreshes its :attr:`updated_at`. Adding a tag it already has changes nothing else."""
        note = self.get(note_id)
        tag = _clean_tag(tag)
        note.tags.add(tag)
        self._touch(note)
        logger.debug('tagged note %d with %r', note_id, tag)
        return note

    def remove_tag(self, note_id: int, tag: str) -> bool:
        """Removes a tag from a note, if it has it.

        Returns True if the tag was removed. :attr:`updated_at` is only refreshed in that case; removing a tag the
        note doesn't have is a no-op.
        """
        note = self.get(note_id)
        removed = note.tags.discard((tag or '').strip())
        if removed:
            self._touch(note)
            logger.debug('untagged note %d from %r', note_id, tag)
        return removed

    def list(self, sort: NoteSortIsh = 'id') -> List[Note]:
        """Returns all notes in the requested order."""
        return parse_sort(sort).apply(self._notes.values())

    def search(self, keyword: str, sort: NoteSortIsh = 'id') -> List[Note]:
        """Returns the notes whose content or tags contain the keyword (ignoring case), in the requested order.

        An empty keyword matches every note.
        """
        sort = parse_sort(sort)
        return sort.apply(n for n in self._notes.values() if n.matches(keyword))

    def tag_counts(self) -> Dict[str, int]:
        """Returns a map of tag names to the number of notes which possess that tag."""
        result = defaultdict(int)
        for note in self._notes.values():
            for tag in note.tags:
                result[tag] += 1
        return dict(result)

    @staticmethod
    def _touch(note: Note) -> None:
        now = _now()
        if now <= note.updated_at:
            now = note.updated_at + timedelta(microseconds=1)
        note.updated_at = now
