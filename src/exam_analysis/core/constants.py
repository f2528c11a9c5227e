# Encoded value for an unanswered question in integer answer matrices
MISSING_VALUE = -1
# Character marking an unanswered question in scanned answer strings
MISSING_CHAR = "*"

# Upper bound on the number of variants a single generation call produces
DEFAULT_VARIATION_CAP = 100

DEFAULT_TRUE_FALSE_OPTIONS = ("True", "False")
