"""Process exit codes for gypsum-index."""

SUCCESS = 0
GENERAL_ERROR = 1
USAGE_ERROR = 2
EXECUTION_FAILURE = 4
