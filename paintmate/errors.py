# paintmate/errors.py
from __future__ import annotations


class PaintMateError(Exception):
    """Base class for paintmate errors."""


class ImageIOError(PaintMateError):
    """Decode/encode failure or a bad path. Recoverable: document and history are untouched."""


class InvariantError(PaintMateError):
    """A document or history invariant is broken. Programming error, never expected."""


class ConfigError(PaintMateError):
    """Configuration file could not be read or holds values of the wrong type."""
