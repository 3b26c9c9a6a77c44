"""
Error taxonomy for the conversion pipeline.

Every failure raised by the core derives from ``ConversionError`` so the
conversion boundary can catch them in one place while logs and tests can
still tell them apart.
"""

from __future__ import annotations


class ConversionError(Exception):
    """Base class for all conversion failures."""


class UnsupportedTypeError(ConversionError):
    """The uploaded file's media type is not one we can convert."""


class FileTooLargeError(ConversionError):
    """The uploaded file exceeds the configured size limit."""


class FileReadError(ConversionError):
    """Reading the uploaded file's bytes failed."""


class ParseError(ConversionError):
    """The local CSV / workbook input is not well-formed."""


class ConfigurationError(ConversionError):
    """A required setting (usually an API key) is missing."""


class TransportError(ConversionError):
    """The extraction service could not be reached or returned an error."""


class ResponseFormatError(ConversionError):
    """The extraction service answered, but not with the expected JSON shape."""


class AssemblyError(ConversionError):
    """The spreadsheet backend failed to produce the output workbook."""


class ConversionCancelled(ConversionError):
    """The conversion was abandoned; its result must be discarded."""
