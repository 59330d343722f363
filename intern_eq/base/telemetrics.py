import logging
import os
import sys
import time

LOGGER: logging.Logger | None = None


def _resolve_level(level: str) -> int:
    level = level.strip()

    if level.isdecimal():
        return int(level)

    mapping = logging.getLevelNamesMapping()
    if level.upper() not in mapping:
        raise ValueError(f'Invalid INTERN_EQ_LOG_LEVEL {level!r}, expect a number or one of {list(mapping)}.')

    return mapping[level.upper()]


LOG_LEVEL = _resolve_level(os.environ.get('INTERN_EQ_LOG_LEVEL', 'INFO'))

# ansi sgr codes, keyed by the highest level they apply to
_LEVEL_COLORS = (
    (logging.NOTSET, None),
    (logging.DEBUG, '34;1'),
    (logging.INFO, '32;1'),
    (logging.WARNING, '33;1'),
    (logging.ERROR, '31;1'),
)
_CRITICAL_COLOR = '31;1;3;4'


class ColoredFormatter(logging.Formatter):
    """Logging Formatter to colorize records by level"""

    def __init__(self, fmt=None, datefmt=None, style='{', validate=True):
        self.format_str = '[{asctime} {name} - {threadName} - {module}:{lineno} - {levelname}] {message}' if fmt is None else fmt
        self.date_fmt = '%Y-%m-%d %H:%M:%S' if datefmt is None else datefmt
        self.style = style
        self._formatters: dict[int, logging.Formatter] = {}

        super().__init__(fmt=self.format_str, datefmt=self.date_fmt, style=style, validate=validate)

    def _get_format(self, level: int) -> str:
        for threshold, color in _LEVEL_COLORS:
            if level <= threshold:
                break
        else:
            color = _CRITICAL_COLOR

        if color is None:
            return self.format_str

        return f'\33[{color}m{self.format_str}\33[0m'

    def format(self, record):
        formatter = self._formatters.get(record.levelno)

        if formatter is None:
            formatter = self._formatters[record.levelno] = logging.Formatter(self._get_format(level=record.levelno), datefmt=self.date_fmt, style=self.style)

        return formatter.format(record)


def get_logger(**kwargs) -> logging.Logger:
    """Build the package logger once and return it on every later call.

    :keyword level: logging level, default is LOG_LEVEL (env INTERN_EQ_LOG_LEVEL)
    :keyword stream_io: stream for the console handler, default is sys.stdout; a falsy value attaches no handler
    :keyword formatter: formatter of the console handler, default is ColoredFormatter()
    """
    global LOGGER

    if LOGGER is not None:
        return LOGGER

    level = kwargs.get('level', LOG_LEVEL)
    stream_io = kwargs.get('stream_io', sys.stdout)
    formatter = kwargs.get('formatter', None)

    LOGGER = logging.getLogger('InternEq')
    LOGGER.setLevel(level)
    logging.Formatter.converter = time.gmtime

    if stream_io:
        for handler in LOGGER.handlers:
            # noinspection PyUnresolvedReferences
            if type(handler) is logging.StreamHandler and handler.stream is stream_io:
                break
        else:
            handler = logging.StreamHandler(stream=stream_io)
            handler.setLevel(level=level)
            handler.setFormatter(fmt=ColoredFormatter() if formatter is None else formatter)
            LOGGER.addHandler(handler)

    return LOGGER


_ = get_logger()
