"""Provides the :class:`JsonCodec` class."""

from datetime import datetime
import json
from typing import Any, Dict

from notecli.codecs.base import Codec


def _json_default(val):
    if isinstance(val, datetime):
        return val.isoformat()
    raise TypeError(f'Object of type {type(val).__name__} is not JSON serializable')


class JsonCodec(Codec):
    """Stores notes as an indented JSON document. Timestamps are written as ISO-8601 strings."""

    def _decode(self, text: str) -> Any:
        return json.loads(text)

    def _encode(self, doc: Dict[str, Any]) -> str:
        return json.dumps(doc, indent=2, ensure_ascii=False, default=_json_default) + '\n'
