"""Command-line interface for notecli."""


import argparse
import json
import logging
import sys
from typing import Iterable, List
from terminaltables import AsciiTable
from notecli import Error
from notecli.api import Notecli
from notecli.conf import NotecliConf
from notecli.models import Note, NoteSortField


def _print_notes(notes: List[Note], args, nc: Notecli, empty_message: str) -> None:
    if args.json:
        print(json.dumps([n.as_json() for n in notes]))
        return
    if not notes:
        print(empty_message)
        return
    date_format = nc.conf.date_format
    data = [('ID', 'Content', 'Tags', 'Created at', 'Updated at')]
    for note in notes:
        data.append((str(note.id),
                     note.content,
                     ', '.join(note.tags) or '-',
                     note.created_at.strftime(date_format),
                     note.updated_at.strftime(date_format)))
    table = AsciiTable(data)
    table.justify_columns[0] = 'right'
    print(table.table)


def _tag_list(tags: Iterable[str]) -> List[str]:
    return list(tags or [])


def _add(args, nc: Notecli) -> int:
    note_id = nc.add(args.content, _tag_list(args.tags))
    print(f'Added note {note_id}')
    return 0


def _list(args, nc: Notecli) -> int:
    notes = nc.list(args.sort, reverse=args.reverse)
    _print_notes(notes, args, nc, 'No notes saved.')
    return 0


def _remove(args, nc: Notecli) -> int:
    nc.remove(args.id)
    print(f'Removed note {args.id}')
    return 0


def _add_tag(args, nc: Notecli) -> int:
    nc.add_tags(args.id, _tag_list(args.tags))
    return 0


def _remove_tag(args, nc: Notecli) -> int:
    removed = nc.remove_tags(args.id, _tag_list(args.tags))
    if not removed:
        print(f'Note {args.id} has none of those tags')
    return 0


def _edit(args, nc: Notecli) -> int:
    nc.edit(args.id, args.content)
    return 0


def _search(args, nc: Notecli) -> int:
    notes = nc.search(args.keyword, args.sort, reverse=args.reverse)
    _print_notes(notes, args, nc, 'No notes matched.')
    return 0


def _tags(args, nc: Notecli) -> int:
    counts = nc.tag_counts()
    if args.json:
        print(json.dumps(counts))
    else:
        tags = sorted(counts.keys())
        data = [('Tag', 'Count')] + [(t, str(counts[t])) for t in tags]
        table = AsciiTable(data)
        table.justify_columns[1] = 'right'
        print(table.table)
    return 0


def _clear(args, nc: Notecli) -> int:
    count = nc.clear()
    print(f'Removed {count} notes')
    return 0


def argparser() -> argparse.ArgumentParser:
    sort_choices = [f.value for f in NoteSortField]

    def add_sort_args(sub: argparse.ArgumentParser):
        sub.add_argument('-s', '--sort', choices=sort_choices,
                         help='Field to sort by. Notes with equal values are ordered by id. '
                              'Defaults to the default_sort in your config file, which defaults to id.')
        sub.add_argument('-r', '--reverse', action='store_true', help='Sort descending.')
        sub.add_argument('-j', '--json', action='store_true', help='Output as JSON.')

    parser = argparse.ArgumentParser(prog='notecli', description='Minimal note manager.')
    parser.set_defaults(func=None)
    parser.add_argument('-f', '--file',
                        help='Notes file to use. Files ending in .yaml or .yml are stored as YAML, others as JSON. '
                             'Overrides notes_path from ~/.notecli.conf.py, which defaults to notes.json '
                             'in the current directory.')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log debugging information to stderr.')

    subs = parser.add_subparsers(title='Commands')

    p_add = subs.add_parser('add', help='Add a new note. Prints the id it was given.')
    p_add.add_argument('content', help='Text of the note.')
    p_add.add_argument('-t', '--tag', dest='tags', action='append', help='Tag for the note (repeatable).')
    p_add.set_defaults(func=_add)

    p_list = subs.add_parser('list', help='List all notes.')
    add_sort_args(p_list)
    p_list.set_defaults(func=_list)

    p_rm = subs.add_parser('remove', help='Remove a note. Its id will be reused by the next note added.')
    p_rm.add_argument('id', type=int)
    p_rm.set_defaults(func=_remove)

    p_at = subs.add_parser('add-tag', help='Add tags to an existing note. Tags it already has are left alone.')
    p_at.add_argument('id', type=int)
    p_at.add_argument('-t', '--tag', dest='tags', action='append', help='Tag to add (repeatable).')
    p_at.set_defaults(func=_add_tag)

    p_rt = subs.add_parser('remove-tag', help='Remove tags from an existing note, if present.')
    p_rt.add_argument('id', type=int)
    p_rt.add_argument('-t', '--tag', dest='tags', action='append', help='Tag to remove (repeatable).')
    p_rt.set_defaults(func=_remove_tag)

    p_edit = subs.add_parser('edit', help='Edit a note. Its update time is refreshed even if the content is omitted.')
    p_edit.add_argument('id', type=int)
    p_edit.add_argument('-c', '--content', help='New content for the note.')
    p_edit.set_defaults(func=_edit)

    p_search = subs.add_parser('search',
                               help='Show notes whose content or tags contain the keyword, ignoring case.')
    p_search.add_argument('keyword')
    add_sort_args(p_search)
    p_search.set_defaults(func=_search)

    p_tags = subs.add_parser('tags', help='Show a list of tags and the number of notes that have each tag.')
    p_tags.add_argument('-j', '--json', action='store_true',
                        help='Output as JSON. The output is an object whose keys are tags and whose values '
                             'are the number of notes that possess that tag.')
    p_tags.set_defaults(func=_tags)

    p_clear = subs.add_parser('clear', help='Remove every note.')
    p_clear.set_defaults(func=_clear)

    return parser


def main(args=None) -> int:
    """Runs the tool and returns its exit code.

    args may be an array of string command-line arguments; if absent,
    the process's arguments are used.
    """
    parser = argparser()
    args = parser.parse_args(args)
    if not args.func:
        parser.print_help()
        return 1
    try:
        conf = NotecliConf.for_user()
        if args.file:
            conf.notes_path = args.file
        conf = conf.standardize()
        logging.basicConfig(stream=sys.stderr,
                            level=logging.DEBUG if args.verbose else conf.log_level,
                            format='%(levelname)s %(name)s: %(message)s')
        with conf.instantiate() as nc:
            return args.func(args, nc)
    except (Error, OSError) as e:
        print(f'{parser.prog}: error: {e}', file=sys.stderr)
        return 1
