"""Defines classes for representing notes and how to order them.

The most important classes are :class:`Note` and :class:`NoteSort`.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable, Iterator, Tuple, Union


class TagSet:
    """An ordered set of tag strings.

    Membership and equality follow set semantics, so two TagSets holding the same tags in a different order are
    equal. Iteration yields tags in the order they were first added, which is the order they are displayed in.
    """

    def __init__(self, tags: Iterable[str] = ()):
        self._tags = dict.fromkeys(tags)

    def add(self, tag: str) -> bool:
        """Adds the tag if it is not already present. Returns True if it was added."""
        if tag in self._tags:
            return False
        self._tags[tag] = None
        return True

    def discard(self, tag: str) -> bool:
        """Removes the tag if it is present. Returns True if it was removed."""
        if tag not in self._tags:
            return False
        del self._tags[tag]
        return True

    def copy(self) -> TagSet:
        return TagSet(self._tags)

    def __contains__(self, tag) -> bool:
        return tag in self._tags

    def __iter__(self) -> Iterator[str]:
        return iter(self._tags)

    def __len__(self) -> int:
        return len(self._tags)

    def __eq__(self, other) -> bool:
        if isinstance(other, TagSet):
            return self._tags.keys() == other._tags.keys()
        if isinstance(other, (set, frozenset)):
            return self._tags.keys() == other
        return NotImplemented

    __hash__ = None

    def __repr__(self) -> str:
        return f'TagSet({list(self._tags)!r})'


@dataclass
class Note:
    """A single stored text entry and its metadata.

    Instances are owned by a :class:`notecli.store.NoteStore`; change them through the store's methods so that
    :attr:`updated_at` is maintained.
    """

    id: int
    """Unique within the store. Always the smallest unused non-negative integer at the time the note was added."""

    content: str
    """The text of the note."""

    created_at: datetime
    """When the note was added. Timezone-aware (UTC); never changes."""

    updated_at: datetime
    """When the note was last edited or tagged. Never earlier than :attr:`created_at`."""

    tags: TagSet = field(default_factory=TagSet)
    """Labels attached to the note, in the order they were added."""

    def matches(self, keyword: str) -> bool:
        """Returns True if the keyword occurs in the content or in any tag, ignoring case."""
        needle = keyword.lower()
        if needle in self.content.lower():
            return True
        return any(needle in tag.lower() for tag in self.tags)

    def as_json(self) -> dict:
        """Returns a dict representing the instance, suitable for serializing as json."""
        return {
            'id': self.id,
            'content': self.content,
            'tags': list(self.tags),
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat(),
        }


class NoteSortField(Enum):
    ID = 'id'
    DATE = 'date'
    UPDATE = 'update'
    CONTENT = 'content'


@dataclass
class NoteSort:
    """Describes the order in which to return notes.

    Notes whose keys are equal are ordered by id, so the result is the same on every call.
    """

    field: NoteSortField = NoteSortField.ID

    reverse: bool = False
    """If True, the whole order is reversed (including the id tiebreak)."""

    @classmethod
    def parse(cls, val: NoteSortIsh) -> NoteSort:
        """Converts the parameter to a NoteSort, if it isn't one already.

        Strings are field names such as ``"date"``; a leading minus sign (``"-date"``) sorts descending.

        Raises :exc:`ValueError` for unrecognized field names.
        """
        if isinstance(val, NoteSort):
            return val
        if isinstance(val, NoteSortField):
            return cls(val)
        val = val.strip().lower()
        if val.startswith('-'):
            return cls(NoteSortField(val[1:]), reverse=True)
        return cls(NoteSortField(val))

    def key(self, note: Note) -> Tuple:
        """Returns the sort key for the given note, ignoring :attr:`reverse`."""
        if self.field == NoteSortField.DATE:
            return note.created_at, note.id
        elif self.field == NoteSortField.UPDATE:
            return note.updated_at, note.id
        elif self.field == NoteSortField.CONTENT:
            return note.content, note.id
        return (note.id,)

    def apply(self, notes: Iterable[Note]) -> list:
        """Returns a sorted copy of the given notes."""
        return sorted(notes, key=self.key, reverse=self.reverse)


NoteSortIsh = Union[str, NoteSortField, NoteSort]
