"""Well-known event type constants.

Defined centrally so publishers and subscribers reference the same strings.
"""

# --- Automation controller -> observers -----------------------------------

STATUS_UPDATED = "automation.status.updated"
STATE_CHANGED = "automation.state.changed"
THEME_APPLIED = "automation.theme.applied"
THEME_APPLY_FAILED = "automation.theme.apply_failed"
LOCATION_UPDATED = "automation.location.updated"

# --- User-facing notifications --------------------------------------------

NOTIFICATION_REQUESTED = "notification.requested"
