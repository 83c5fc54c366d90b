"""Manages short personal notes stored in a single local file.

If you installed via ``pip``, run ``notecli -h`` to get help.

To use the Python API, look at :class:`notecli.api.Notecli`, or work with a
:class:`notecli.store.NoteStore` directly.
"""


class Error(Exception):
    """Base class for the errors notecli reports to its caller."""
    pass
