import itertools
import pickle
import threading
from collections.abc import Iterable, Iterator

from . import LOGGER
from . import config

LOGGER = LOGGER.getChild('InternTable')

__all__ = [
    'InvalidHandleError', 'StaleHandleError', 'HandleOverflowError', 'InternalInconsistencyError',
    'Handle', 'InternTable', 'TABLE',
    'get_table', 'new_eq', 'new_eq_multi', 'forget_all_eqs'
]


class InvalidHandleError(LookupError):
    """The handle is zero, foreign to the table, or beyond the strings of the current epoch."""


class StaleHandleError(InvalidHandleError):
    """The handle was minted before the last reset of its table."""


class HandleOverflowError(OverflowError):
    """The table has used up every value of the configured handle width."""


class InternalInconsistencyError(RuntimeError):
    """The forward and reverse index disagree. This is a bug, never a usage error."""


# epoch 0 belongs to the zero handle; every table epoch in the process is unique
_EPOCH_COUNTER = itertools.count(1)
_EPOCH_LOCK = threading.Lock()
# slot 0 of every reverse index, never returned
_RESERVED = ''
_REGISTRY: dict[str, 'InternTable'] = {}
_REGISTRY_LOCK = threading.RLock()


def _next_epoch() -> int:
    with _EPOCH_LOCK:
        return next(_EPOCH_COUNTER)


def _check_string(string: str) -> str:
    if type(string) is str:
        return string
    elif isinstance(string, str):
        # numpy.str_ and friends are stored as plain str
        return str.__str__(string)

    raise TypeError(f'Can only intern str, got {type(string).__name__}.')


def _restore(table_name: str, string: str) -> 'Handle':
    return get_table(table_name).assign(string)


class Handle(object):
    """An interned string, comparable for equality only.

    A handle is minted by an ``InternTable`` and holds a dense unsigned integer ``value``
    (1 for the first string, 2 for the second, ...) together with the ``epoch`` of the table at minting.
    ``Handle()`` is the zero handle, which is never valid.

    Two handles are equal if they share value and epoch. Since epochs are unique in the process,
    handles of different tables or of different epochs never compare equal.
    Ordering comparisons raise ``TypeError``.

    ``str(handle)`` resolves the handle with its table. Pickling stores the resolved string
    and re-interns it on load, so the loaded handle may carry another value.
    """

    __slots__ = ('_value', '_epoch', '_table')

    def __init__(self, value: int = 0, epoch: int = 0, table: 'InternTable' = None):
        if type(value) is not int or value < 0:
            raise ValueError(f'value of {self.__class__.__name__} must be a non-negative integer, got {value!r}.')

        self._value = value
        self._epoch = epoch
        self._table = table

    def __repr__(self):
        return f'<{self.__class__.__name__}>(value={self._value}, epoch={self._epoch})'

    def __str__(self):
        if self._table is None:
            raise InvalidHandleError(f'{self!r} is not bound to any intern table.')

        return self._table.resolve(self)

    def __eq__(self, other):
        if isinstance(other, Handle):
            return self._value == other._value and self._epoch == other._epoch

        return NotImplemented

    def __hash__(self):
        return hash((self._value, self._epoch))

    def _unordered(self, other):
        raise TypeError(f'{self.__class__.__name__} supports equality comparison only.')

    __lt__ = __le__ = __gt__ = __ge__ = _unordered

    def __bool__(self):
        return self._value != 0

    def __int__(self):
        return self._value

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        if not self._value:
            return self.__class__, ()

        table = self._table
        if table is None or table.name is None:
            raise pickle.PicklingError(f'{self!r} is not bound to a named intern table and can not be pickled.')

        return _restore, (table.name, table.resolve(self))

    @property
    def value(self) -> int:
        return self._value

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def table(self) -> 'InternTable | None':
        return self._table


class InternTable(object):
    def __init__(self, name: str = None):
        """ Bidirectional registry of string <-> Handle

        Every operation runs under one exclusive lock, so at most one handle is ever created
        for a string within an epoch, however many threads race to intern it.

        :param name: register the table under this name, required to pickle its handles.
            Use ``get_table`` to fetch a registered table.
        """
        self._name = name
        self._lock = threading.Lock()
        self._forward: dict[str, int] = {}
        self._reverse: list[str] = [_RESERVED]
        self._epoch = _next_epoch()

        if name is not None:
            with _REGISTRY_LOCK:
                if name in _REGISTRY:
                    raise ValueError(f'Intern table {name!r} already exists, use get_table({name!r}) instead.')
                _REGISTRY[name] = self

        LOGGER.debug(f'{self} created.')

    def __repr__(self):
        with self._lock:
            return self._label()

    def __len__(self):
        with self._lock:
            return len(self._reverse) - 1

    def __contains__(self, string):
        if not isinstance(string, str):
            return False

        with self._lock:
            return string in self._forward

    def _label(self) -> str:
        # lock must be held
        return f'<{self.__class__.__name__}>(name={self._name!r}, epoch={self._epoch}, size={len(self._reverse) - 1})'

    def _assign(self, string: str) -> int:
        # lock must be held
        forward, reverse = self._forward, self._reverse
        value = forward.get(string)

        if value is not None:
            if config.DEBUG and reverse[value] != string:
                raise InternalInconsistencyError(f'{self._label()} maps {string!r} to {value}, but slot {value} holds {reverse[value]!r}.')
            return value

        value = len(reverse)

        if value >> config.IT_CFG_HANDLE_BITS:
            raise HandleOverflowError(f'{self._label()} exhausted the {config.IT_CFG_HANDLE_BITS}-bit handle space.')

        reverse.append(string)
        forward[string] = value

        if len(forward) != value:
            raise InternalInconsistencyError(f'{self._label()} forward index holds {len(forward)} strings, reverse index holds {value}.')

        return value

    def assign(self, string: str) -> Handle:
        """Intern the string, return the existing handle if it is already interned in the current epoch."""
        string = _check_string(string)

        with self._lock:
            return Handle(self._assign(string), self._epoch, self)

    def assign_batch(self, strings: Iterable[str]) -> list[Handle]:
        """
        Intern every string under a single lock acquisition.

        The result equals ``[self.assign(s) for s in strings]``: same length, same order, duplicates share a handle.
        All elements are type-checked before the table is touched.
        """
        strings = [_check_string(string) for string in strings]

        with self._lock:
            epoch = self._epoch
            values = [self._assign(string) for string in strings]

        return [Handle(value, epoch, self) for value in values]

    def lookup(self, string: str) -> Handle:
        """Return the handle of an interned string without interning it, or the zero handle."""
        string = _check_string(string)

        with self._lock:
            value = self._forward.get(string)

            if value is None:
                return Handle()

            return Handle(value, self._epoch, self)

    def resolve(self, handle: Handle) -> str:
        """
        Return the string a handle was minted for.

        :raises InvalidHandleError: zero handle, handle of another table, forged handle without epoch, or value beyond the current epoch.
        :raises StaleHandleError: handle minted before the last reset, unless CONFIG.IT_CFG_STRICT_EPOCH is off.
        """
        if not isinstance(handle, Handle):
            raise TypeError(f'Can only resolve {Handle.__name__}, got {type(handle).__name__}.')

        value, table = handle.value, handle.table

        if not value:
            raise InvalidHandleError(f'{handle!r} is the zero handle.')
        elif table is not None and table is not self:
            raise InvalidHandleError(f'{handle!r} belongs to another intern table.')

        with self._lock:
            if config.IT_CFG_STRICT_EPOCH and not handle.epoch:
                raise InvalidHandleError(f'{handle!r} was not minted by any intern table.')
            elif config.IT_CFG_STRICT_EPOCH and handle.epoch != self._epoch:
                raise StaleHandleError(f'{handle!r} was minted before {self._label()} was reset.')
            elif value >= len(self._reverse):
                raise InvalidHandleError(f'{handle!r} is beyond {self._label()}.')

            return self._reverse[value]

    def reset(self) -> None:
        """
        Forget every interned string so the memory can be reclaimed.

        Handles minted before the reset must not be used afterward. Under strict epochs resolving them
        raises ``StaleHandleError``; otherwise their values may be reassigned to other strings.
        """
        with self._lock:
            released = len(self._reverse) - 1
            epoch_0 = self._epoch
            self._forward = {}
            self._reverse = [_RESERVED]
            epoch_1 = self._epoch = _next_epoch()
            label = self._label()

        LOGGER.info(f'{label} reset, {released} strings released, epoch {epoch_0} -> {epoch_1}.')

    def internalized(self) -> Iterator[tuple[Handle, str]]:
        """Iterate over a snapshot of (handle, string) pairs of the current epoch, in handle order."""
        with self._lock:
            epoch = self._epoch
            strings = self._reverse[1:]

        return ((Handle(value, epoch, self), string) for value, string in enumerate(strings, start=1))

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def epoch(self) -> int:
        with self._lock:
            return self._epoch

    @property
    def size(self) -> int:
        return len(self)


def get_table(name: str) -> InternTable:
    """Return the intern table registered under the name, creating it on first use."""
    with _REGISTRY_LOCK:
        table = _REGISTRY.get(name)

        if table is None:
            table = InternTable(name=name)

        return table


TABLE = get_table('default')


def new_eq(string: str) -> Handle:
    """Intern a string into the default table."""
    return TABLE.assign(string)


def new_eq_multi(strings: Iterable[str]) -> list[Handle]:
    """Intern many strings into the default table under one lock acquisition."""
    return TABLE.assign_batch(strings)


def forget_all_eqs() -> None:
    """Reset the default table. Use it only when no previously minted handle will be used again."""
    TABLE.reset()
