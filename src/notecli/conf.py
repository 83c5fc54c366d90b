from __future__ import annotations
from dataclasses import dataclass, replace
import logging
import os.path

from notecli import Error
from notecli.models import NoteSortField


class ConfigError(Error):
    """Raised when the user's config file exists but does not define usable configuration."""
    def __init__(self, message: str, path: str):
        super().__init__(message)
        self.path = path


@dataclass
class NotecliConf:
    notes_path: str = 'notes.json'
    """Where notes are saved. Relative paths are resolved against the current directory.

    The format is chosen from the file extension: ``.yaml`` or ``.yml`` files are written as YAML, and anything
    else as JSON. See :class:`notecli.codecs.delegating.DelegatingCodec`.

    The ``--file`` command-line argument takes precedence over this setting.
    """

    default_sort: NoteSortField = NoteSortField.ID
    """Order used by the ``list`` and ``search`` commands when ``--sort`` is not given."""

    date_format: str = '%d/%m/%Y - %H:%M'
    """strftime format for the timestamp columns of table output."""

    log_level: str = 'WARNING'
    """Level name for log messages written to stderr by the CLI. The ``-v`` argument overrides it with DEBUG."""

    @classmethod
    def user_config_path(cls) -> str:
        """Returns the path to the user's config file, ~/.notecli.conf.py"""
        return os.path.expanduser(os.path.join('~', '.notecli.conf.py'))

    @classmethod
    def for_user(cls) -> NotecliConf:
        """Loads the config defined by the variable ``conf`` in :meth:`user_config_path`.

        The file is optional; if it does not exist, the defaults are returned. For example:

        .. code-block:: python

           from notecli.conf import *
           conf = NotecliConf(notes_path='~/Documents/notes.yaml', default_sort=NoteSortField.UPDATE)

        Raises :exc:`ConfigError` if the file exists but does not assign a NotecliConf instance to ``conf``.
        """
        path = cls.user_config_path()
        if not os.path.exists(path):
            return cls()
        with open(path, 'r') as file:
            conf_script = file.read()
        context = {}
        exec(conf_script, context)
        if 'conf' not in context or not isinstance(context['conf'], cls):
            raise ConfigError('You need to assign an instance of NotecliConf to the variable `conf` '
                              f'in your config file: {path}', path)
        return context['conf']

    def standardize(self):
        """Returns a copy with an absolute notes_path and validated settings.

        Raises :exc:`ConfigError` if ``default_sort`` or ``log_level`` is not recognized.
        """
        try:
            default_sort = NoteSortField(self.default_sort)
        except ValueError:
            choices = ', '.join(f.value for f in NoteSortField)
            raise ConfigError(f'Unknown default_sort {self.default_sort!r} (expected one of: {choices})',
                              self.user_config_path())
        log_level = str(self.log_level).upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ConfigError(f'Unknown log_level {self.log_level!r}', self.user_config_path())
        return replace(
            self,
            notes_path=os.path.realpath(os.path.expanduser(self.notes_path)),
            default_sort=default_sort,
            log_level=log_level
        )

    def instantiate(self):
        from notecli.api import Notecli
        return Notecli(self.standardize())
