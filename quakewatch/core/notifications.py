"""Notification planning - Pure functions.

Decides which notification channels fire after the active alert collection
or the event snapshot changes. The dispatcher executes the resulting plans;
nothing here touches audio or speech.

Two triggers are tracked with state carried between calls:

- Alert count increased: siren tone and one voice announcement for the
  head (most recently raised) alert.
- New latest event at or above the significant magnitude: quake tone.
  Never fires on the first snapshot.

State is always advanced, whether or not a channel is enabled, so turning
a channel back on never replays a backlog.
"""

from dataclasses import dataclass

from quakewatch.core.alerts import AlertNotification
from quakewatch.core.config import DEFAULT_SIGNIFICANT_MAGNITUDE, Settings
from quakewatch.core.event import SeismicEvent


@dataclass(frozen=True)
class DispatcherState:
    """What the dispatcher saw last time.

    Attributes:
        previous_alert_count: Size of the active alert collection
        previous_latest_event_id: ID of the head of the last event snapshot
    """
    previous_alert_count: int = 0
    previous_latest_event_id: str | None = None


@dataclass(frozen=True)
class AlertNotificationPlan:
    """Channels to fire for an alert count increase.

    Attributes:
        play_siren: Play the siren tone
        announce: Alert to speak, None for no utterance
    """
    play_siren: bool = False
    announce: AlertNotification | None = None

    @property
    def is_empty(self) -> bool:
        """True if no channel fires."""
        return not self.play_siren and self.announce is None


def plan_alert_notifications(
    state: DispatcherState,
    active_alerts: tuple[AlertNotification, ...] | list[AlertNotification],
    settings: Settings,
) -> tuple[AlertNotificationPlan, DispatcherState]:
    """Plan notifications for a change of the active alert collection.

    Pure function. At most one siren and one utterance per call, however
    many alerts were added.

    Args:
        state: Dispatcher state from the previous call
        active_alerts: Current active alerts, newest first
        settings: Current settings

    Returns:
        (plan, new_state)
    """
    count = len(active_alerts)
    new_state = DispatcherState(
        previous_alert_count=count,
        previous_latest_event_id=state.previous_latest_event_id,
    )

    if count <= state.previous_alert_count:
        return AlertNotificationPlan(), new_state

    plan = AlertNotificationPlan(
        play_siren=settings.sound_enabled and settings.siren_enabled,
        announce=active_alerts[0] if settings.voice_alert_enabled else None,
    )
    return plan, new_state


def plan_latest_event_notification(
    state: DispatcherState,
    events: list[SeismicEvent],
    settings: Settings,
    significant_magnitude: float = DEFAULT_SIGNIFICANT_MAGNITUDE,
) -> tuple[bool, DispatcherState]:
    """Plan the quake tone for a new event snapshot.

    Pure function. The latest event is the head of the snapshot (feed order
    is newest first). An empty snapshot leaves the state unchanged.

    Args:
        state: Dispatcher state from the previous call
        events: Current event snapshot, newest first
        settings: Current settings
        significant_magnitude: Severity floor (inclusive)

    Returns:
        (play_quake_tone, new_state)
    """
    if not events:
        return False, state

    latest = events[0]
    new_state = DispatcherState(
        previous_alert_count=state.previous_alert_count,
        previous_latest_event_id=latest.id,
    )

    is_new = (
        state.previous_latest_event_id is not None
        and latest.id != state.previous_latest_event_id
    )
    if not is_new or latest.magnitude < significant_magnitude:
        return False, new_state

    return settings.sound_enabled and settings.quake_sound_enabled, new_state
