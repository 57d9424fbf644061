"""Observable state primitives."""

from restaurant_review.state.event import ConsumableEvent, consuming
from restaurant_review.state.observable import (
    ObservableState,
    ReadOnlyState,
    Subscription,
)

__all__ = [
    "ConsumableEvent",
    "ObservableState",
    "ReadOnlyState",
    "Subscription",
    "consuming",
]
