"""Tests for observable state and consumable events."""

import pytest

from restaurant_review.state import ConsumableEvent, ObservableState, consuming


class TestObservableState:
    """Test ObservableState delivery rules."""

    @pytest.fixture
    def state(self):
        """Create an empty observable state."""
        return ObservableState()

    def test_unset_state(self, state):
        """Test a state that has never been set."""
        assert state.has_value is False
        assert state.get() is None
        assert state.get("fallback") == "fallback"
        assert state.version == 0

    def test_initial_value(self):
        """Test a state created with an initial value."""
        state = ObservableState(False)

        assert state.has_value is True
        assert state.get() is False
        assert state.version == 1

    def test_set_notifies_in_attachment_order(self, state):
        """Test that set calls every observer in attachment order."""
        calls = []
        state.attach(lambda v: calls.append(("first", v)))
        state.attach(lambda v: calls.append(("second", v)))

        state.set(1)

        assert calls == [("first", 1), ("second", 1)]
        assert state.get() == 1
        assert state.version == 1

    def test_attach_to_unset_state_does_not_deliver(self, state):
        """Test that nothing is replayed before the first set."""
        received = []
        state.attach(received.append)

        assert received == []

    def test_replay_on_subscribe(self, state):
        """Test that a late observer gets the latest value exactly once."""
        state.set("a")
        state.set("b")

        received = []
        state.attach(received.append)
        assert received == ["b"]

        state.set("c")
        assert received == ["b", "c"]

    def test_stored_none_is_replayed(self, state):
        """Test that None is a value, not the unset marker."""
        state.set(None)
        received = []
        state.attach(received.append)

        assert state.has_value is True
        assert received == [None]

    def test_detach_stops_delivery(self, state):
        """Test detaching through the subscription handle."""
        received = []
        subscription = state.attach(received.append)

        state.set(1)
        subscription.detach()
        state.set(2)

        assert received == [1]
        assert subscription.active is False
        assert state.observer_count == 0

    def test_detach_is_idempotent(self, state):
        """Test that detaching twice is a no-op."""
        subscription = state.attach(lambda v: None)

        state.detach(subscription)
        state.detach(subscription)
        subscription.detach()

        assert state.observer_count == 0

    def test_same_callable_attached_twice(self, state):
        """Test that subscriptions are keyed by handle, not by callable."""
        received = []
        first = state.attach(received.append)
        state.attach(received.append)

        state.set(1)
        first.detach()
        state.set(2)

        assert received == [1, 1, 2]

    def test_detach_during_notification(self, state):
        """Test that an observer detached mid-pass is not called."""
        received = []
        handles = {}

        def detach_second(value):
            handles["second"].detach()

        state.attach(detach_second)
        handles["second"] = state.attach(received.append)

        state.set(1)

        assert received == []

    def test_attach_during_notification(self, state):
        """Test that an observer attached mid-pass is delivered once."""
        late = []

        def attach_late(value):
            if not late:
                state.attach(late.append)

        state.attach(attach_late)
        state.set(1)

        assert late == [1]

    def test_read_only_view(self, state):
        """Test that the read-only view shares value and observers."""
        view = state.read_only()
        received = []
        view.attach(received.append)

        state.set(5)

        assert view.get() == 5
        assert view.version == 1
        assert view.has_value is True
        assert view.observer_count == 1
        assert received == [5]

    def test_read_only_view_cannot_publish(self, state):
        """Test that the consumer view exposes no way to set a value."""
        view = state.read_only()

        assert not hasattr(view, "set")
        assert state.read_only() is view

    def test_set_from_observer_delivers_latest_value(self, state):
        """Test that a value published from an observer supersedes the outer one."""
        seen = []

        def clamp(value):
            if value > 10:
                state.set(10)

        state.attach(clamp)
        state.attach(seen.append)

        state.set(99)

        assert state.get() == 10
        assert seen == [10]
        assert state.version == 2

    def test_set_from_observer_reaches_earlier_observers(self, state):
        """Test that observers before the publishing one also end on the latest value."""
        first, last = [], []
        state.attach(first.append)
        state.attach(lambda v: state.set("normalized") if v == "raw" else None)
        state.attach(last.append)

        state.set("raw")

        assert first == ["raw", "normalized"]
        assert last == ["normalized"]

    def test_observer_error_does_not_block_later_sets(self, state):
        """Test that a raising observer leaves the state usable."""
        received = []

        def fail_once(value):
            if value == 1:
                raise ValueError("bad value")

        state.attach(fail_once)
        state.attach(received.append)

        with pytest.raises(ValueError):
            state.set(1)
        state.set(2)

        assert state.get() == 2
        assert received == [2]

    def test_failed_replay_does_not_register(self, state):
        """Test that an observer raising during replay is not left attached."""
        state.set("value")

        def broken(value):
            raise RuntimeError("render failed")

        with pytest.raises(RuntimeError):
            state.attach(broken)

        assert state.observer_count == 0
        state.set("next")


class TestConsumableEvent:
    """Test ConsumableEvent single-use semantics."""

    def test_consume_once(self):
        """Test that only the first consume returns the value."""
        event = ConsumableEvent("saved")

        assert event.consumed is False
        assert event.consume() == "saved"
        assert event.consumed is True
        assert event.consume() is None
        assert event.consume() is None

    def test_peek_never_consumes(self):
        """Test that peek leaves the consumption state alone."""
        event = ConsumableEvent("saved")

        assert event.peek() == "saved"
        assert event.peek() == "saved"
        assert event.consumed is False
        assert event.consume() == "saved"
        assert event.peek() == "saved"

    def test_consume_across_callers(self):
        """Test that exactly one of many callers wins."""
        event = ConsumableEvent(42)

        results = [event.consume() for _ in range(10)]

        assert results.count(42) == 1
        assert results.count(None) == 9


class TestEventChannel:
    """Test ObservableState carrying ConsumableEvent payloads."""

    @pytest.fixture
    def channel(self):
        """Create an event channel."""
        return ObservableState()

    def test_late_observer_does_not_repeat_side_effect(self, channel):
        """Test that a replayed, consumed event is not handled again."""
        shown = []
        subscription = channel.attach(consuming(shown.append))
        channel.set(ConsumableEvent("Network error"))
        subscription.detach()

        channel.attach(consuming(shown.append))

        assert shown == ["Network error"]

    def test_late_observer_handles_unconsumed_event(self, channel):
        """Test that an event published with no observer is handled on attach."""
        channel.set(ConsumableEvent("Network error"))
        shown = []

        channel.attach(consuming(shown.append))

        assert shown == ["Network error"]

    def test_new_event_resets_consumability(self, channel):
        """Test that a new instance is consumable while the old stays consumed."""
        shown = []
        channel.attach(consuming(shown.append))

        first = ConsumableEvent("first")
        channel.set(first)
        second = ConsumableEvent("second")
        channel.set(second)

        assert shown == ["first", "second"]
        assert first.consume() is None
        assert second.consumed is True

    def test_only_first_observer_handles(self, channel):
        """Test that two consuming observers share one consumption."""
        first, second = [], []
        channel.attach(consuming(first.append))
        channel.attach(consuming(second.append))

        channel.set(ConsumableEvent("once"))

        assert first == ["once"]
        assert second == []

    def test_peeking_observer_sees_every_replay(self, channel):
        """Test that a peeking observer still sees consumed events."""
        channel.attach(consuming(lambda v: None))
        channel.set(ConsumableEvent("logged"))

        peeked = []
        channel.attach(lambda event: peeked.append(event.peek()))

        assert peeked == ["logged"]
