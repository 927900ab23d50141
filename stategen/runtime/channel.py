"""State-holding broadcast channels backing generated delegates."""

import itertools
import logging
from collections import deque
from collections.abc import Callable
from threading import RLock
from typing import Generic, TypeVar

T = TypeVar("T")

Observer = Callable[[T], object]

logger = logging.getLogger(__name__)


class Subscription:
    """Registration of one observer on a channel.

    Can be used as a context manager; leaving the block detaches the observer.
    """

    def __init__(self, channel: "StateChannel", token: int) -> None:
        self._channel: StateChannel | None = channel
        self._token = token

    @property
    def disposed(self) -> bool:
        return self._channel is None

    def dispose(self) -> None:
        """Detach the observer. Calling it twice is a no-op."""
        channel, self._channel = self._channel, None
        if channel is not None:
            channel._detach(self._token)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.dispose()


class Observable(Generic[T]):
    """Read-only view of a channel handed out to observers."""

    __slots__ = ("_channel",)

    def __init__(self, channel: "StateChannel[T]") -> None:
        self._channel = channel

    def subscribe(self, on_next: Observer) -> Subscription:
        """Attach an observer. The latest value is replayed immediately."""
        return self._channel.subscribe(on_next)

    @property
    def value(self) -> T:
        return self._channel.value


class StateChannel(Generic[T]):
    """Channel that retains its latest value and replays it to new observers.

    Pushes are delivered in push order to every observer attached at the time
    of the push. Delivery happens while holding the channel lock, so a value
    pushed from another thread is never observed out of order. The lock is
    re-entrant, which lets an observer push back onto the same channel.

    Example:
        channel = StateChannel(MultiEvent("a"))
        with channel.hide().subscribe(print):  # prints MultiEvent('a')
            channel.push(MultiEvent("b"))      # prints MultiEvent('b')
    """

    def __init__(self, initial: T) -> None:
        self._value = initial
        self._observers: dict[int, Observer] = {}
        self._tokens = itertools.count()
        self._lock = RLock()
        self._pending: deque[T] = deque()
        self._delivering = False

    @property
    def value(self) -> T:
        """Latest pushed value."""
        with self._lock:
            return self._value

    @property
    def observer_count(self) -> int:
        with self._lock:
            return len(self._observers)

    def push(self, value: T) -> None:
        """Replace the retained value and deliver it to current observers.

        A value pushed by an observer during delivery is queued until the
        current value has reached every observer. An observer that raises
        does not stop delivery to the others; the first error is raised once
        the queue is drained.
        """
        error: Exception | None = None
        with self._lock:
            self._pending.append(value)
            if self._delivering:
                return
            self._delivering = True
            try:
                while self._pending:
                    current = self._pending.popleft()
                    self._value = current
                    for observer in list(self._observers.values()):
                        try:
                            observer(current)
                        except Exception as e:
                            if error is None:
                                error = e
                            else:
                                logger.error("Observer failed: %r", e)
            finally:
                self._delivering = False
        if error is not None:
            raise error

    def subscribe(self, on_next: Observer) -> Subscription:
        """Attach an observer and replay the latest value to it."""
        with self._lock:
            on_next(self._value)
            token = next(self._tokens)
            self._observers[token] = on_next
        return Subscription(self, token)

    def hide(self) -> Observable[T]:
        """Return a view that can observe but not push."""
        return Observable(self)

    def _detach(self, token: int) -> None:
        with self._lock:
            self._observers.pop(token, None)
