"""
Runtime configuration of the intern tables.

The values are module globals seeded from the environment at import time.
Read them through ``CONFIG``; override them temporarily with ``EnvConfigContext``.
Overrides are process-wide, not thread-local.
"""

import functools
import os
from collections.abc import Callable
from typing import Any, Self

from . import LOGGER

LOGGER = LOGGER.getChild('Config')

__all__ = ['CONFIG', 'ConfigViewer', 'EnvConfigContext']


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)

    if value is None:
        return default

    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _validate_handle_bits(bits: int) -> int:
    if type(bits) is not int:
        raise ValueError(f'handle_bits must be an integer, got {bits!r}.')
    elif not 1 <= bits <= 64:
        raise ValueError(f'handle_bits must be within [1, 64], got {bits}.')
    return bits


DEBUG: bool = _env_flag('INTERN_EQ_DEBUG', False)
IT_CFG_STRICT_EPOCH: bool = _env_flag('INTERN_EQ_STRICT_EPOCH', True)
IT_CFG_HANDLE_BITS: int = _validate_handle_bits(int(os.environ.get('INTERN_EQ_HANDLE_BITS', 64)))

# keyword of EnvConfigContext -> (module global, validator)
_KEYS: dict[str, tuple[str, Callable[[Any], Any]]] = {
    'debug': ('DEBUG', bool),
    'strict_epoch': ('IT_CFG_STRICT_EPOCH', bool),
    'handle_bits': ('IT_CFG_HANDLE_BITS', _validate_handle_bits),
}


class ConfigViewer(object):
    """Read-only view of the current configuration globals."""

    def __repr__(self):
        return f'<{self.__class__.__name__}>(DEBUG={self.DEBUG}, IT_CFG_STRICT_EPOCH={self.IT_CFG_STRICT_EPOCH}, IT_CFG_HANDLE_BITS={self.IT_CFG_HANDLE_BITS})'

    @property
    def DEBUG(self) -> bool:
        return DEBUG

    @property
    def IT_CFG_STRICT_EPOCH(self) -> bool:
        return IT_CFG_STRICT_EPOCH

    @property
    def IT_CFG_HANDLE_BITS(self) -> int:
        return IT_CFG_HANDLE_BITS

    @property
    def MAX_HANDLE(self) -> int:
        """The largest handle value an intern table may assign."""
        return (1 << IT_CFG_HANDLE_BITS) - 1


CONFIG = ConfigViewer()


class EnvConfigContext(object):
    """Context manager for temporary configuration changes.

    Usage::

        with EnvConfigContext(strict_epoch=False):
            ...

        @EnvConfigContext(debug=True)
        def audited():
            ...

    ``ctx_a | ctx_b`` merges two overrides (``ctx_b`` wins on conflicts),
    ``~ctx`` flips every boolean override.
    """

    def __init__(self, **kwargs: Any):
        self.overrides: dict[str, Any] = {}

        for key, value in kwargs.items():
            if key not in _KEYS:
                raise ValueError(f'Invalid config {key}, expect one of {list(_KEYS)}.')
            _, validator = _KEYS[key]
            self.overrides[key] = validator(value)

        self._originals: list[dict[str, Any]] = []

    def __repr__(self):
        return f'<{self.__class__.__name__}>({", ".join(f"{key}={value}" for key, value in self.overrides.items())})'

    def __enter__(self) -> Self:
        g = globals()
        self._originals.append({_KEYS[key][0]: g[_KEYS[key][0]] for key in self.overrides})

        for key, value in self.overrides.items():
            g[_KEYS[key][0]] = value

        LOGGER.debug(f'{self} applied.')
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        globals().update(self._originals.pop())

    def __call__(self, func: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with self:
                return func(*args, **kwargs)

        return wrapper

    def __or__(self, other: Self) -> Self:
        if not isinstance(other, EnvConfigContext):
            return NotImplemented

        return self.__class__(**(self.overrides | other.overrides))

    def __invert__(self) -> Self:
        return self.__class__(**{key: (not value) if type(value) is bool else value for key, value in self.overrides.items()})
