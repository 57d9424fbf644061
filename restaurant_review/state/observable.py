"""Observable state holder with replay-on-subscribe.

An ``ObservableState`` keeps the latest published value and pushes every new
value to the attached observers. An observer that attaches after a value was
published receives that value immediately, so a view that is torn down and
rebuilt resynchronises without asking for the state again.

Instances are owned by a single thread (the asyncio event loop thread in this
package). ``set``, ``attach`` and ``detach`` must not be called concurrently
from other threads.
"""

from collections.abc import Callable
from typing import Any, Generic, TypeVar

T = TypeVar("T")

Observer = Callable[[T], None]

_UNSET: Any = object()


class Subscription(Generic[T]):
    """Handle returned by ``ObservableState.attach``."""

    def __init__(self, state: "ObservableState[T]", observer: Observer) -> None:
        self._state = state
        self.observer = observer

    @property
    def active(self) -> bool:
        """Whether the observer still receives values."""
        return self._state._is_attached(self)

    def detach(self) -> None:
        """Stop delivering values to the observer. Safe to call twice."""
        self._state.detach(self)


class ObservableState(Generic[T]):
    """Mutable observable value, held by the component that publishes it."""

    def __init__(self, initial: T = _UNSET) -> None:
        self._value: Any = initial
        self._version = 0 if initial is _UNSET else 1
        # Subscriptions hash by identity; dict keeps attachment order.
        self._subscriptions: dict[Subscription[T], None] = {}
        self._dispatching = False
        self._dispatch_invalidated = False
        self._view: ReadOnlyState[T] | None = None

    @property
    def has_value(self) -> bool:
        """Whether a value has been published yet."""
        return self._value is not _UNSET

    @property
    def version(self) -> int:
        """Number of values published so far."""
        return self._version

    @property
    def observer_count(self) -> int:
        return len(self._subscriptions)

    def get(self, default: T | None = None) -> T | None:
        """Return the current value, or ``default`` when nothing was published."""
        if self._value is _UNSET:
            return default
        return self._value

    def attach(self, observer: Observer) -> Subscription[T]:
        """Register ``observer`` and replay the current value to it.

        If the replay raises, the observer is not registered.

        Args:
            observer: Callable invoked with each published value

        Returns:
            Subscription handle used to detach the observer
        """
        subscription = Subscription(self, observer)
        self._subscriptions[subscription] = None
        if self.has_value:
            try:
                observer(self._value)
            except BaseException:
                self._subscriptions.pop(subscription, None)
                raise
        return subscription

    def detach(self, subscription: Subscription[T]) -> None:
        """Remove a subscription. No-op if it was already removed."""
        self._subscriptions.pop(subscription, None)

    def set(self, value: T) -> None:
        """Publish ``value`` to every attached observer, in attachment order.

        Observers detached by an earlier observer during the same pass are
        skipped. Observers attached during the pass already got the value
        through replay. When an observer publishes again from inside the
        pass, the pass stops and restarts with the newest value, so every
        observer ends on the value returned by ``get``.
        """
        self._value = value
        self._version += 1

        if self._dispatching:
            self._dispatch_invalidated = True
            return

        self._dispatching = True
        try:
            while True:
                self._dispatch_invalidated = False
                current = self._value
                for subscription in list(self._subscriptions):
                    if subscription in self._subscriptions:
                        subscription.observer(current)
                    if self._dispatch_invalidated:
                        break
                if not self._dispatch_invalidated:
                    break
        finally:
            self._dispatching = False
            self._dispatch_invalidated = False

    def read_only(self) -> "ReadOnlyState[T]":
        """Return the consumer view of this state."""
        if self._view is None:
            self._view = ReadOnlyState(self)
        return self._view

    def _is_attached(self, subscription: Subscription[T]) -> bool:
        return subscription in self._subscriptions


class ReadOnlyState(Generic[T]):
    """Consumer side of an observable value: read, attach and detach."""

    def __init__(self, state: ObservableState[T]) -> None:
        self._state = state

    @property
    def has_value(self) -> bool:
        return self._state.has_value

    @property
    def version(self) -> int:
        return self._state.version

    @property
    def observer_count(self) -> int:
        return self._state.observer_count

    def get(self, default: T | None = None) -> T | None:
        return self._state.get(default)

    def attach(self, observer: Observer) -> Subscription[T]:
        return self._state.attach(observer)

    def detach(self, subscription: Subscription[T]) -> None:
        self._state.detach(subscription)
