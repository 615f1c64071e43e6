"""Constants for the CSV import service."""

# Maximum data rows per import (safety limit; larger files are blocked)
MAX_ROWS = 5000

# How many errors are shown to a user before "...and N more"
DEFAULT_DISPLAYED_ERRORS = 50

# Only .csv uploads are accepted
ALLOWED_EXTENSIONS = frozenset({".csv"})
