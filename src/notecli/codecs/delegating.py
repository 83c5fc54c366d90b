"""Provides the :class:`DelegatingCodec` class."""

from notecli.codecs.base import Codec
from notecli.codecs.jsonfile import JsonCodec
from notecli.codecs.yamlfile import YamlCodec
from notecli.store import NoteStore


class DelegatingCodec(Codec):
    """Responsible for choosing what :class:`notecli.codecs.base.Codec` subclass to use for a given file.

    This selects a codec based on the path's file extension, and delegates method calls to that codec.

    Currently, the mapping is hardcoded:

    * ``.yaml`` or ``.yml`` -> :class:`YamlCodec`
    * anything else -> :class:`JsonCodec`
    """
    def __init__(self, path: str):
        self.path = path
        if path.lower().endswith(('.yaml', '.yml')):
            self.codec = YamlCodec()
        else:
            self.codec = JsonCodec()

    def load(self, path: str = None) -> NoteStore:
        return self.codec.load(path or self.path)

    def save(self, store: NoteStore, path: str = None) -> None:
        self.codec.save(store, path or self.path)
