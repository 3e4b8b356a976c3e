"""Exceptions raised by scanbind."""

from __future__ import annotations


class ScanBindError(Exception):
    """Base exception for scanbind errors."""


class InvalidSettingError(ScanBindError):
    """Raised when a resolution or divisor is not a positive finite number."""


class ValidationError(ScanBindError):
    """Raised by pre-flight checks.  Aborts the whole batch."""


class DirectoryNotFoundError(ValidationError):
    """Raised when an input path is not an existing directory."""


class TooFewImagesError(ValidationError):
    """Raised when a directory holds fewer than two supported images."""


class ConversionError(ScanBindError):
    """Raised while converting one directory.  Abandons that directory only."""


class DecodeError(ConversionError):
    """Raised when a file cannot be decoded as an image."""


class ResizeError(ConversionError):
    """Raised when the computed output dimensions are not positive."""


class WriteError(ConversionError):
    """Raised when the output PDF cannot be created or written."""
