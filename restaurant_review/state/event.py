"""One-shot events delivered through observable state.

``ObservableState`` replays its latest value to every new observer. That is
right for persistent state but wrong for side effects such as showing an
error message: a view rebuilt after the message was shown would show it
again. Wrapping the payload in a ``ConsumableEvent`` makes the side effect
single-use, because the replayed instance has already been consumed.
"""

from collections.abc import Callable
from typing import Generic, TypeVar

T = TypeVar("T")


class ConsumableEvent(Generic[T]):
    """A value that can be acted upon at most once."""

    def __init__(self, value: T) -> None:
        self._value = value
        self._consumed = False

    @property
    def consumed(self) -> bool:
        """Whether ``consume`` has already handed out the value."""
        return self._consumed

    def consume(self) -> T | None:
        """Return the value the first time, None on every later call."""
        if self._consumed:
            return None
        self._consumed = True
        return self._value

    def peek(self) -> T:
        """Return the value without consuming it."""
        return self._value

    def __repr__(self) -> str:
        return f"ConsumableEvent({self._value!r}, consumed={self._consumed})"


def consuming(handler: Callable[[T], None]) -> Callable[[ConsumableEvent[T]], None]:
    """Wrap ``handler`` into an observer that only sees unconsumed events.

    Args:
        handler: Called with the event value when this observer wins the
            consumption

    Returns:
        Observer suitable for ``ObservableState[ConsumableEvent[T]].attach``
    """

    def observer(event: ConsumableEvent[T]) -> None:
        if event.consumed:
            return
        handler(event.consume())

    return observer
