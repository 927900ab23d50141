"""Event wrappers delivered on generated state channels.

Every value pushed to a state channel is wrapped in a fresh event. A
``MultiEvent`` can be read any number of times; a ``SingleEvent`` hands its
value to the first reader only and returns ``None`` afterwards.
"""

from threading import Lock
from typing import Generic, TypeVar

T = TypeVar("T")


class Event(Generic[T]):
    """Base class for channel values."""

    __slots__ = ("_item",)

    single: bool = False

    def __init__(self, item: T) -> None:
        self._item = item

    def get(self) -> T | None:
        """Read the value. Generated code always uses a concrete subclass."""
        raise NotImplementedError("get() must be implemented by a subclass")

    def peek(self) -> T:
        """Return the value without consuming it."""
        return self._item

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._item!r})"


class MultiEvent(Event[T]):
    """Event readable by every observer, every time."""

    __slots__ = ()

    def get(self) -> T | None:
        return self._item


class SingleEvent(Event[T]):
    """Event whose value is handed out once.

    Example:
        event = SingleEvent("saved")
        event.get()  # "saved"
        event.get()  # None
    """

    __slots__ = ("_consumed", "_lock")

    single = True

    def __init__(self, item: T) -> None:
        super().__init__(item)
        self._consumed = False
        self._lock = Lock()

    @property
    def consumed(self) -> bool:
        return self._consumed

    def get(self) -> T | None:
        with self._lock:
            if self._consumed:
                return None
            self._consumed = True
        return self._item


def wrap(value: T, single: bool) -> Event[T]:
    """Wrap a value in the event variant matching a field's delivery marker."""
    return SingleEvent(value) if single else MultiEvent(value)
