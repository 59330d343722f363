"""
Portable form of handles.

A handle value is only meaningful inside the table epoch that minted it, so every external
representation carries the resolved string instead, and loading re-interns it into the current epoch.
The decoded handle may therefore hold a different value than the encoded one; it still resolves
to the same string.
"""

import json
from collections.abc import Iterable, Iterator
from typing import Any

from . import LOGGER
from ..base.intern_table import Handle, InternTable, TABLE

LOGGER = LOGGER.getChild('Portable')

__all__ = ['encode', 'decode', 'encode_many', 'decode_many', 'HandleJSONEncoder', 'dumps', 'loads']


def _get_table(table: InternTable | None) -> InternTable:
    return TABLE if table is None else table


def encode(handle: Handle) -> str:
    """Resolve the handle, raising InvalidHandleError exactly as its table would."""
    if not isinstance(handle, Handle):
        raise TypeError(f'Can only encode {Handle.__name__}, got {type(handle).__name__}.')

    return str(handle)


def decode(string: str, table: InternTable = None) -> Handle:
    """Re-intern the string into the current epoch of the table, default is TABLE."""
    return _get_table(table).assign(string)


def encode_many(handles: Iterable[Handle]) -> list[str]:
    return [encode(handle) for handle in handles]


def decode_many(strings: Iterable[str], table: InternTable = None) -> list[Handle]:
    return _get_table(table).assign_batch(strings)


class HandleJSONEncoder(json.JSONEncoder):
    """JSONEncoder writing every handle as its string. Handles are not supported as object keys."""

    def default(self, o):
        if isinstance(o, Handle):
            return encode(o)

        return super().default(o)


def dumps(obj: Any, **kwargs) -> str:
    kwargs.setdefault('cls', HandleJSONEncoder)
    return json.dumps(obj, **kwargs)


def _collect(node: Any, strings: list[str]) -> None:
    if isinstance(node, str):
        strings.append(node)
    elif isinstance(node, list):
        for item in node:
            _collect(item, strings)
    elif isinstance(node, dict):
        for item in node.values():
            _collect(item, strings)
    else:
        raise TypeError(f'JSON value {node!r} can not be decoded into a {Handle.__name__}.')


def _rebuild(node: Any, handles: Iterator[Handle]) -> Any:
    if isinstance(node, str):
        return next(handles)
    elif isinstance(node, list):
        return [_rebuild(item, handles) for item in node]

    return {key: _rebuild(item, handles) for key, item in node.items()}


def loads(text: str | bytes, table: InternTable = None, **kwargs) -> Any:
    """
    Load a JSON document whose strings are encoded handles.

    Strings become handles of the table (default is TABLE), arrays become lists and objects become dicts
    keyed by plain str. Any other JSON value raises TypeError. All strings are interned under one lock acquisition.
    """
    data = json.loads(text, **kwargs)
    strings = []
    _collect(data, strings)
    handles = decode_many(strings, table=table)
    LOGGER.debug(f'{len(handles)} handles decoded from json.')
    return _rebuild(data, iter(handles))
