"""Defines the API for reading and writing a :class:`notecli.store.NoteStore` to a file.

The most important class is :class:`Codec`.
"""

from datetime import datetime, timezone
import logging
import os
import os.path
import re
import stat
from tempfile import mkstemp
from typing import Any, Dict, Optional

from notecli import Error
from notecli.models import Note, TagSet
from notecli.store import NoteStore


logger = logging.getLogger(__name__)

# fromisoformat before Python 3.11 accepts at most six fractional digits
_EXCESS_FRACTION_RE = re.compile(r'(\.\d{6})\d+')


class CorruptDataError(Error):
    """Raised when a notes file exists but cannot be read as a collection of notes."""
    def __init__(self, message: str, path: str, cause: BaseException = None):
        super().__init__(f'{path}: {message}')
        self.message = message
        self.path = path
        self.cause = cause


def atomic_write_text(path: str, text: str) -> None:
    """Replaces the contents of the file at path with text.

    The text is written to a temporary file in the same directory, which is then renamed over the target. If
    anything fails before the rename, the temporary file is deleted and the target is untouched.
    """
    parent, basename = os.path.split(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)
    fd, tmp = mkstemp(prefix=f'.{basename}.', suffix='.tmp', dir=parent)
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as file:
            file.write(text)
            file.flush()
            os.fsync(file.fileno())
        if os.path.exists(path):
            os.chmod(tmp, stat.S_IMODE(os.stat(path).st_mode))
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.remove(tmp)
        raise


def _timestamp(raw: Any, name: str) -> Optional[datetime]:
    if raw is None:
        return None
    if isinstance(raw, datetime):
        value = raw
    elif isinstance(raw, str):
        try:
            value = datetime.fromisoformat(_EXCESS_FRACTION_RE.sub(r'\1', raw.replace('Z', '+00:00')))
        except ValueError:
            raise ValueError(f'`{name}` is not an ISO-8601 timestamp: {raw!r}')
    else:
        raise ValueError(f'`{name}` must be a timestamp, not {type(raw).__name__}')
    if not value.tzinfo:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def note_from_doc(item: Any) -> Note:
    """Builds a Note from one entry of a decoded document's ``notes`` list.

    Raises :exc:`ValueError` describing the first problem found. Unknown keys are ignored.
    """
    if not isinstance(item, dict):
        raise ValueError(f'each note must be a mapping, not {type(item).__name__}')
    for key in ('id', 'content'):
        if key not in item:
            raise ValueError(f'note is missing `{key}`')
    note_id = item['id']
    if isinstance(note_id, bool) or not isinstance(note_id, int) or note_id < 0:
        raise ValueError(f'`id` must be a non-negative integer, not {note_id!r}')
    if not isinstance(item['content'], str):
        raise ValueError(f'`content` of note {note_id} must be a string')
    tags = item.get('tags') or []
    if not (isinstance(tags, list) and all(isinstance(t, str) for t in tags)):
        raise ValueError(f'`tags` of note {note_id} must be a list of strings')
    created = _timestamp(item.get('created_at'), 'created_at')
    updated = _timestamp(item.get('updated_at'), 'updated_at')
    if not created:
        created = updated or datetime.now(timezone.utc)
    if not updated:
        updated = created
    if updated < created:
        raise ValueError(f'note {note_id} was updated before it was created')
    return Note(note_id, item['content'], created_at=created, updated_at=updated, tags=TagSet(tags))


def store_from_doc(doc: Any) -> NoteStore:
    """Builds a NoteStore from a decoded document. Raises :exc:`ValueError` if the document has the wrong shape."""
    if not isinstance(doc, dict):
        raise ValueError(f'expected a mapping at the top level, not {type(doc).__name__}')
    items = doc.get('notes', [])
    if not isinstance(items, list):
        raise ValueError('`notes` must be a list')
    notes = []
    seen = set()
    for item in items:
        note = note_from_doc(item)
        if note.id in seen:
            raise ValueError(f'duplicate note id: {note.id}')
        seen.add(note.id)
        notes.append(note)
    return NoteStore(notes)


class Codec:
    """Base class for codecs, which are responsible for translating a NoteStore to and from a file format.

    Subclasses only need to implement :meth:`_decode` and :meth:`_encode`, which convert between text and a plain
    document of dicts and lists:

    .. code-block:: python

       {'notes': [{'id': 0, 'content': 'Buy milk', 'tags': ['home'],
                   'created_at': datetime(...), 'updated_at': datetime(...)}]}
    """

    decode_errors = (ValueError, RecursionError)
    """Exceptions raised by :meth:`_decode` that mean the text is malformed."""

    def load(self, path: str) -> NoteStore:
        """Reads the store saved at path.

        Returns an empty store if there is no file at path, or if the file is blank.
        Raises :exc:`CorruptDataError` if the file cannot be parsed or does not describe a valid set of notes,
        and an IO-related exception if it cannot be read.
        """
        try:
            with open(path, 'r', encoding='utf-8') as file:
                text = file.read()
        except FileNotFoundError:
            logger.debug('no notes file at %s, starting empty', path)
            return NoteStore()
        except UnicodeDecodeError as e:
            raise CorruptDataError('file is not valid UTF-8 text', path, e)
        if not text.strip():
            return NoteStore()
        try:
            doc = self._decode(text)
        except self.decode_errors as e:
            raise CorruptDataError(f'could not parse file ({e})', path, e)
        try:
            store = store_from_doc(doc)
        except ValueError as e:
            raise CorruptDataError(str(e), path, e)
        logger.debug('loaded %d notes from %s', len(store), path)
        return store

    def save(self, store: NoteStore, path: str) -> None:
        """Writes the store to path, replacing any existing file atomically.

        Raises an IO-related exception if the file cannot be written; in that case the old file is left as it was.
        """
        doc = {'notes': [self._note_doc(note) for note in store.list()]}
        atomic_write_text(path, self._encode(doc))
        logger.debug('saved %d notes to %s', len(store), path)

    def _note_doc(self, note: Note) -> Dict[str, Any]:
        return {
            'id': note.id,
            'content': note.content,
            'tags': list(note.tags),
            'created_at': note.created_at,
            'updated_at': note.updated_at,
        }

    def _decode(self, text: str) -> Any:
        """Subclasses should override this to parse file contents into a document."""
        raise NotImplementedError()

    def _encode(self, doc: Dict[str, Any]) -> str:
        """Subclasses should override this to render a document as file contents."""
        raise NotImplementedError()
