__version__ = "0.1.0"

import logging

from .base.telemetrics import LOGGER


def set_logger(logger: logging.Logger):
    from . import base
    from . import codec

    base.set_logger(logger=logger)
    codec.set_logger(logger=logger.getChild('Codec'))


LOGGER.info(f'InternEq version {__version__}')

from .base import (
    CONFIG, EnvConfigContext,
    InvalidHandleError, StaleHandleError, HandleOverflowError, InternalInconsistencyError,
    Handle, InternTable, TABLE, get_table, new_eq, new_eq_multi, forget_all_eqs
)
from .codec import encode, decode, encode_many, decode_many

__all__ = [
    'base', 'codec',
    'CONFIG', 'EnvConfigContext',
    'InvalidHandleError', 'StaleHandleError', 'HandleOverflowError', 'InternalInconsistencyError',
    'Handle', 'InternTable', 'TABLE', 'get_table', 'new_eq', 'new_eq_multi', 'forget_all_eqs',
    'encode', 'decode', 'encode_many', 'decode_many',
    'LOGGER'
]
