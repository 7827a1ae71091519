# Copyright (c) 2025 takotime808

from __future__ import annotations

import io
from pathlib import Path
from typing import Tuple, Union

Source = Union[str, Path, Tuple[str, Union[bytes, str, io.BytesIO]]]


def read_source(item: Source) -> Tuple[str, bytes]:
    """
    Resolve an input file to ``(name, data)``.

    Parameters
    ----------
    item
        A filesystem path, or a ``(name, content)`` pair where content is
        bytes, text or a binary stream (e.g. an upload held in memory).

    Returns
    -------
    tuple[str, bytes]
        The file's basename and raw bytes.

    Raises
    ------
    FileNotFoundError
        If a path does not point to an existing file.

    Examples
    --------
    >>> read_source(("a.xml", "<a/>"))
    ('a.xml', b'<a/>')
    """
    if isinstance(item, tuple):
        name, data = item
        if isinstance(data, str):
            data = data.encode("utf-8")
        elif not isinstance(data, (bytes, bytearray)):
            # assume file-like
            data = data.read()
        return Path(name).name, bytes(data)
    path = Path(item)
    if not path.exists() or not path.is_file():
        raise FileNotFoundError(f"Not a file: {path}")
    return path.name, path.read_bytes()


def csv_name(name: str) -> str:
    """
    Output name for a single converted file.

    Examples
    --------
    >>> csv_name("order_0001.xml")
    'order_0001.csv'
    >>> csv_name("noext")
    'noext.csv'
    """
    return f"{Path(name).stem}.csv"


def norm_ext(p: Union[str, Path]) -> str:
    """
    Normalize a file's extension to lowercase without the leading dot.

    Examples
    --------
    >>> norm_ext("file.XML")
    'xml'
    >>> norm_ext("noext")
    ''
    """
    return Path(p).suffix.lower().lstrip(".")
