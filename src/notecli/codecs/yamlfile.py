"""Provides the :class:`YamlCodec` class."""

from typing import Any, Dict

import yaml

from notecli.codecs.base import Codec


class YamlCodec(Codec):
    """Stores notes as a YAML document.

    Timestamps are written as native YAML timestamps, and only the safe subset of YAML is read or written.
    """

    decode_errors = (yaml.YAMLError, ValueError, RecursionError)

    def _decode(self, text: str) -> Any:
        return yaml.safe_load(text)

    def _encode(self, doc: Dict[str, Any]) -> str:
        return yaml.safe_dump(doc, sort_keys=False, allow_unicode=True, default_flow_style=False)
