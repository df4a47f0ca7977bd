"""Active alert deduplication and merging - Pure functions.

This module handles logic for the active alert collection: which alert IDs
have already been raised, how new alerts are merged in, and dismissal.
All functions are pure and return new collections.

Note: The collection itself is owned by the monitor. This module only
contains the pure logic.
"""

from quakewatch.core.alerts import AlertNotification


class AlertNotFoundError(KeyError):
    """Raised when dismissing an alert id that is not active."""


def get_alert_ids(alerts: tuple[AlertNotification, ...] | list[AlertNotification]) -> set[str]:
    """Extract IDs from a collection of alerts.

    Pure function.

    Args:
        alerts: Active alerts

    Returns:
        Set of alert IDs
    """
    return {a.id for a in alerts}


def filter_already_active(
    new_alerts: list[AlertNotification],
    active_ids: set[str],
) -> list[AlertNotification]:
    """Filter out alerts whose ID is already active.

    Pure function.

    Args:
        new_alerts: Candidate alerts
        active_ids: IDs already in the active collection

    Returns:
        Alerts that are not active yet
    """
    return [a for a in new_alerts if a.id not in active_ids]


def merge_alerts(
    active: tuple[AlertNotification, ...],
    new_alerts: list[AlertNotification],
) -> tuple[AlertNotification, ...]:
    """Prepend new alerts to the active collection.

    Pure function - returns a new tuple without modifying input. The head
    of the result is the most recently raised alert, which is what the
    voice channel announces.

    Args:
        active: Current active alerts (newest first)
        new_alerts: Alerts returned by the evaluator

    Returns:
        New active collection with unique IDs
    """
    fresh = filter_already_active(new_alerts, get_alert_ids(active))
    if not fresh:
        return active
    return tuple(fresh) + active


def dismiss_alert(
    active: tuple[AlertNotification, ...],
    alert_id: str,
) -> tuple[AlertNotification, ...]:
    """Remove an alert by explicit user dismissal.

    Pure function.

    Raises:
        AlertNotFoundError: If no active alert has alert_id
    """
    if alert_id not in get_alert_ids(active):
        raise AlertNotFoundError(alert_id)
    return tuple(a for a in active if a.id != alert_id)
