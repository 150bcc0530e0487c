"""
Exceptions raised by the QOI codec.

Everything derives from :class:`QOIError`, which is a ``ValueError`` so code
written against plain ``ValueError`` keeps working.
"""


class QOIError(ValueError):
    """Base class for all codec errors."""


class FormatError(QOIError):
    """The byte stream is not a well formed QOI file."""


class BadMagic(FormatError):
    pass


class UnsupportedChannels(FormatError):
    pass


class UnsupportedColorspace(FormatError):
    pass


class InvalidDimension(FormatError):
    pass


class UnexpectedEof(FormatError):
    pass


class BadEndMarker(FormatError):
    pass


class TrailingData(FormatError):
    pass


class RunOverflow(FormatError):
    pass


class EncodeError(QOIError):
    """The image cannot be represented as a QOI file."""


class OutOfMemory(QOIError, MemoryError):
    """A pixel or output buffer is too large to allocate."""
