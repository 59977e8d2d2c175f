"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# Hour values are decimal floats; deltas and stored values within this
# tolerance are treated as equal.
RECONCILIATION_EPSILON = 1e-4

# ArbZG §4: more than six hours -> 30 min, more than nine hours -> 45 min.
LEGAL_PAUSE_THRESHOLD_SHORT_HOURS = 6.0
LEGAL_PAUSE_THRESHOLD_LONG_HOURS = 9.0
LEGAL_PAUSE_SHORT_HOURS = 0.5
LEGAL_PAUSE_LONG_HOURS = 0.75

MAX_DECLARED_PAUSE_MINUTES = 180

DEFAULT_PAUSE_TOKEN = "Keine"
DEFAULT_HISTORY_LIMIT = 60
DEFAULT_CLOSING_HISTORY_LIMIT = 12
DEFAULT_PAYOUT_REQUEST_LIMIT = 5

# Tolerance used when comparing user-entered hours against plan hours.
ENTRY_HOURS_TOLERANCE = 0.01

MAX_LEAVE_REQUEST_DAYS = 31
MAX_LEAVE_REASON_LENGTH = 500
DEFAULT_LEAVE_REQUEST_LIMIT = 50
