"""
Tests for multi-step navigation.
"""
import logging

from optin.services.step_navigator import NavigationEvent, StepNavigator


def make_navigator(count=3):
    events = []
    navigator = StepNavigator(list(range(1, count + 1)), on_navigate=events.append)
    return navigator, events


class TestStepNavigator:
    """Tests for next/previous/go_to bounds."""

    def test_starts_at_first_step(self):
        navigator, _ = make_navigator()

        assert navigator.step == 0
        assert navigator.is_first
        assert not navigator.is_last
        assert navigator.total_steps == 3

    def test_next_and_previous(self):
        navigator, _ = make_navigator()

        assert navigator.next() is True
        assert navigator.step == 1
        assert navigator.previous() is True
        assert navigator.step == 0

    def test_next_clamped_at_last_step(self):
        """next never leaves the last step."""
        navigator, _ = make_navigator()
        navigator.next()
        navigator.next()

        assert navigator.is_last
        assert navigator.next() is False
        assert navigator.step == 2

    def test_previous_clamped_at_first_step(self):
        navigator, _ = make_navigator()

        assert navigator.previous() is False
        assert navigator.step == 0

    def test_go_to_in_range(self):
        navigator, _ = make_navigator()

        assert navigator.go_to(2) is True
        assert navigator.step == 2

    def test_go_to_out_of_range_ignored(self):
        """Jumps outside [0, N) leave the step unchanged."""
        navigator, _ = make_navigator()
        navigator.go_to(1)

        for bad in (-1, 3, 99, '2', None, 1.0, True):
            assert navigator.go_to(bad) is False
            assert navigator.step == 1

    def test_single_section(self):
        navigator, _ = make_navigator(count=1)

        assert navigator.is_first and navigator.is_last
        assert navigator.next() is False
        assert navigator.previous() is False


class TestReset:
    """Tests for reset, open and sync."""

    def test_open_resets(self):
        """Every showing starts at the first step."""
        navigator, _ = make_navigator()
        navigator.go_to(2)

        navigator.open()

        assert navigator.step == 0

    def test_sync_multi_step_off_resets(self):
        navigator, _ = make_navigator()
        navigator.go_to(1)

        navigator.sync([1, 2, 3], is_multi_step=False)

        assert navigator.step == 0

    def test_sync_shrunk_list_resets(self):
        navigator, _ = make_navigator()
        navigator.go_to(2)

        navigator.sync([1, 2])

        assert navigator.step == 0
        assert navigator.total_steps == 2

    def test_sync_keeps_step_when_still_valid(self):
        navigator, _ = make_navigator()
        navigator.go_to(1)

        navigator.sync([1, 2, 4, 5])

        assert navigator.step == 1


class TestNavigationEvents:
    """Tests for analytics events."""

    def test_events_emitted(self):
        navigator, events = make_navigator()

        navigator.next()
        navigator.previous()

        assert events == [
            NavigationEvent('next', 0, 1, 1),
            NavigationEvent('previous', 1, 0, 2),
        ]

    def test_no_event_for_noop_or_jump(self):
        navigator, events = make_navigator()

        navigator.previous()
        navigator.go_to(2)
        navigator.next()

        assert events == []

    def test_event_to_dict(self):
        event = NavigationEvent('next', 0, 1, 'abc')

        assert event.to_dict() == {'action': 'next', 'fromStep': 0, 'toStep': 1, 'sectionId': 'abc'}

    def test_default_sink_logs(self, caplog):
        """Without a callback, events go to the analytics logger."""
        navigator = StepNavigator([1, 2])

        with caplog.at_level(logging.INFO, logger='optin.analytics'):
            navigator.next()

        assert 'Popup step next: 0 -> 1' in caplog.text
