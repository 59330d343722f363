"""
numpy interop for handle collections.

Encoded arrays use object dtype: fixed-width unicode arrays silently drop trailing NUL characters,
which would break the exact round trip.
"""

from collections.abc import Iterable

import numpy as np

from . import LOGGER
from .portable import encode_many, decode_many
from ..base.intern_table import Handle, InternTable

LOGGER = LOGGER.getChild('Array')

__all__ = ['encode_array', 'decode_array']


def encode_array(handles: np.ndarray | Iterable[Handle]) -> np.ndarray:
    """Encode an array (or sequence) of handles into an object array of str with the same shape."""
    arr = np.asarray(handles if isinstance(handles, np.ndarray) else list(handles), dtype=object)
    strings = encode_many(arr.ravel().tolist())
    return np.array(strings, dtype=object).reshape(arr.shape)


def decode_array(array: np.ndarray | Iterable[str], table: InternTable = None) -> np.ndarray:
    """Intern an array (or sequence) of str into an object array of handles with the same shape."""
    arr = np.asarray(array if isinstance(array, np.ndarray) else list(array), dtype=object)
    handles: list[Handle] = decode_many(arr.ravel().tolist(), table=table)

    LOGGER.debug(f'{len(handles)} handles decoded from array of shape {arr.shape}.')
    out = np.empty(len(handles), dtype=object)
    for i, handle in enumerate(handles):
        out[i] = handle

    return out.reshape(arr.shape)
