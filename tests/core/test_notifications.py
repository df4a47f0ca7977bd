"""Unit tests for notification planning.

Pure function tests - no mocks needed. The dispatcher state must advance
on every call whether or not a channel is enabled.
"""

import pytest

from quakewatch.core.alerts import AlertNotification
from quakewatch.core.config import Settings
from quakewatch.core.event import SeismicEvent
from quakewatch.core.notifications import (
    AlertNotificationPlan,
    DispatcherState,
    plan_alert_notifications,
    plan_latest_event_notification,
)


def _alert(n):
    return AlertNotification(
        id=f"e{n}-z1",
        event_id=f"e{n}",
        zone_id="z1",
        zone_name="Dhaka",
        event_place="Near Dhaka",
        magnitude=4.0,
        occurred_at=1_700_000_000_000,
    )


def _event(event_id, magnitude):
    return SeismicEvent(
        id=event_id,
        magnitude=magnitude,
        place="Somewhere",
        occurred_at=1_700_000_000_000,
        latitude=0.0,
        longitude=0.0,
        depth_km=10.0,
    )


@pytest.fixture
def settings():
    return Settings()


class TestAlertNotificationPlan:
    """Tests for AlertNotificationPlan."""

    def test_default_is_empty(self):
        assert AlertNotificationPlan().is_empty is True
        assert AlertNotificationPlan(play_siren=True).is_empty is False


class TestPlanAlertNotifications:
    """Tests for plan_alert_notifications() (count increased trigger)."""

    def test_increase_fires_siren_and_voice(self, settings):
        alerts = (_alert(2), _alert(1))
        plan, state = plan_alert_notifications(DispatcherState(), alerts, settings)

        assert plan.play_siren is True
        assert plan.announce == alerts[0]
        assert state.previous_alert_count == 2

    def test_one_utterance_for_many_alerts(self, settings):
        """Voice announces only the head alert."""
        alerts = tuple(_alert(n) for n in range(5))
        plan, _ = plan_alert_notifications(DispatcherState(), alerts, settings)

        assert plan.announce.id == "e0-z1"

    def test_no_change_is_silent(self, settings):
        alerts = (_alert(1),)
        plan, state = plan_alert_notifications(DispatcherState(previous_alert_count=1), alerts, settings)

        assert plan.is_empty
        assert state.previous_alert_count == 1

    def test_decrease_is_silent_and_updates_count(self, settings):
        """Dismissal lowers the count without firing."""
        plan, state = plan_alert_notifications(DispatcherState(previous_alert_count=3), (_alert(1),), settings)

        assert plan.is_empty
        assert state.previous_alert_count == 1

    def test_consecutive_increases_each_fire_once(self, settings):
        """Two cycles that both add alerts fire once each."""
        state = DispatcherState()
        plan1, state = plan_alert_notifications(state, (_alert(1),), settings)
        plan2, state = plan_alert_notifications(state, (_alert(3), _alert(2), _alert(1)), settings)

        assert plan1.play_siren and plan2.play_siren
        assert plan1.announce.id == "e1-z1"
        assert plan2.announce.id == "e3-z1"

    def test_master_toggle_mutes_siren_not_voice(self, settings):
        """Voice is gated only by its own toggle."""
        muted = settings.with_changes(sound_enabled=False)
        plan, _ = plan_alert_notifications(DispatcherState(), (_alert(1),), muted)

        assert plan.play_siren is False
        assert plan.announce is not None

    def test_siren_toggle(self, settings):
        plan, _ = plan_alert_notifications(
            DispatcherState(), (_alert(1),), settings.with_changes(siren_enabled=False),
        )
        assert plan.play_siren is False

    def test_voice_toggle(self, settings):
        plan, _ = plan_alert_notifications(
            DispatcherState(), (_alert(1),), settings.with_changes(voice_alert_enabled=False),
        )
        assert plan.announce is None

    def test_state_advances_with_channels_off(self, settings):
        """Turning channels back on does not replay a backlog."""
        off = settings.with_changes(sound_enabled=False, voice_alert_enabled=False)
        plan, state = plan_alert_notifications(DispatcherState(), (_alert(2), _alert(1)), off)
        assert plan.is_empty
        assert state.previous_alert_count == 2

        plan, _ = plan_alert_notifications(state, (_alert(2), _alert(1)), settings)
        assert plan.is_empty

    def test_keeps_latest_event_id(self, settings):
        state = DispatcherState(previous_latest_event_id="x")
        _, new_state = plan_alert_notifications(state, (_alert(1),), settings)
        assert new_state.previous_latest_event_id == "x"


class TestPlanLatestEventNotification:
    """Tests for plan_latest_event_notification() (significant event trigger)."""

    def test_first_load_never_fires(self, settings):
        """No previous latest id means first load."""
        play, state = plan_latest_event_notification(DispatcherState(), [_event("a", 7.0)], settings)

        assert play is False
        assert state.previous_latest_event_id == "a"

    def test_new_significant_event_fires(self, settings):
        state = DispatcherState(previous_latest_event_id="a")
        play, state = plan_latest_event_notification(state, [_event("b", 5.5)], settings)

        assert play is True
        assert state.previous_latest_event_id == "b"

    def test_below_threshold(self, settings):
        state = DispatcherState(previous_latest_event_id="a")
        play, state = plan_latest_event_notification(state, [_event("b", 5.4)], settings)

        assert play is False
        assert state.previous_latest_event_id == "b"

    def test_same_latest_event_does_not_refire(self, settings):
        """A refresh with the same head stays silent."""
        state = DispatcherState(previous_latest_event_id="b")
        play, _ = plan_latest_event_notification(state, [_event("b", 6.0)], settings)
        assert play is False

    def test_empty_snapshot_keeps_state(self, settings):
        state = DispatcherState(previous_alert_count=2, previous_latest_event_id="a")
        play, new_state = plan_latest_event_notification(state, [], settings)

        assert play is False
        assert new_state == state

    def test_toggles(self, settings):
        state = DispatcherState(previous_latest_event_id="a")
        events = [_event("b", 6.0)]

        play, _ = plan_latest_event_notification(state, events, settings.with_changes(sound_enabled=False))
        assert play is False
        play, new_state = plan_latest_event_notification(
            state, events, settings.with_changes(quake_sound_enabled=False),
        )
        assert play is False
        assert new_state.previous_latest_event_id == "b"

    def test_custom_significant_magnitude(self, settings):
        state = DispatcherState(previous_latest_event_id="a")
        play, _ = plan_latest_event_notification(
            state, [_event("b", 4.6)], settings, significant_magnitude=4.5,
        )
        assert play is True
