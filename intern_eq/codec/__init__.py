import logging

from .. import LOGGER

LOGGER = LOGGER.getChild('Codec')


def set_logger(logger: logging.Logger):
    global LOGGER
    LOGGER = logger

    portable.LOGGER = logger.getChild('Portable')
    array.LOGGER = logger.getChild('Array')


from . import portable
from . import array
from .portable import encode, decode, encode_many, decode_many, HandleJSONEncoder, dumps, loads
from .array import encode_array, decode_array

__all__ = [
    'encode', 'decode', 'encode_many', 'decode_many',
    'HandleJSONEncoder', 'dumps', 'loads',
    'encode_array', 'decode_array'
]
