"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# Error code carried by DataAccessError when a single-row lookup returns nothing.
ROW_NOT_FOUND = "ROW_NOT_FOUND"

ZERO_ELAPSED = "00:00:00"
TICK_INTERVAL_SECONDS = 1.0

DEFAULT_HISTORY_LIMIT = 30
DEFAULT_DEVICE_INFO = "python-client"
