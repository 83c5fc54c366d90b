"""Support for the file formats a collection of notes can be saved in.

:class:`notecli.codecs.base.Codec` is the API that must be implemented to add support for a format.
The other modules in this package provide implementations for specific formats.
"""
