# Copyright (c) 2025 takotime808
"""Exceptions raised by the conversion engine."""

from __future__ import annotations

from typing import List, Optional, Tuple


class XmlCsvError(Exception):
    """Base class for xmlcsv errors."""


class ParseError(XmlCsvError):
    """Raised when an input document is not well-formed XML.

    The offending file name, when known, is available as ``file_name`` and is
    prefixed to the message so callers never lose track of which file failed.
    """

    def __init__(self, message: str, *, file_name: Optional[str] = None) -> None:
        self.file_name = file_name
        self.reason = message
        if file_name:
            message = f"{file_name}: {message}"
        super().__init__(message)


class BatchConversionError(ParseError):
    """Raised when any file of a combined batch fails.

    Parameters
    ----------
    message:
        Human readable summary for the whole batch.
    failures:
        ``(file_name, reason)`` pairs, one per failed file, in input order.
    """

    def __init__(self, message: str, *, failures: List[Tuple[str, str]]) -> None:
        super().__init__(message)
        self.failures = list(failures)
