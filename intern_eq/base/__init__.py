import logging

from .telemetrics import LOGGER


def set_logger(logger: logging.Logger):
    global LOGGER
    LOGGER = logger

    config.LOGGER = logger.getChild('Config')
    intern_table.LOGGER = logger.getChild('InternTable')


from . import config
from . import intern_table
from .config import CONFIG, ConfigViewer, EnvConfigContext
from .intern_table import (
    InvalidHandleError, StaleHandleError, HandleOverflowError, InternalInconsistencyError,
    Handle, InternTable, TABLE, get_table, new_eq, new_eq_multi, forget_all_eqs
)

__all__ = [
    'CONFIG', 'ConfigViewer', 'EnvConfigContext',
    'InvalidHandleError', 'StaleHandleError', 'HandleOverflowError', 'InternalInconsistencyError',
    'Handle', 'InternTable', 'TABLE', 'get_table', 'new_eq', 'new_eq_multi', 'forget_all_eqs'
]
