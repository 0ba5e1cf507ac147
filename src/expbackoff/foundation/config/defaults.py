"""Default backoff policy values.

Shared by BackoffConfiguration and BackoffSettings so both start from the
same numbers.
"""

# The default initial interval value in milliseconds (0.5 seconds).
DEFAULT_INITIAL_INTERVAL_MILLIS: int = 500

# The default maximum back off time in milliseconds (1 minute).
# Once the current interval reaches this value it stops increasing.
DEFAULT_MAX_INTERVAL_MILLIS: int = 60000

# The default maximum elapsed time after which the backoff stops (15 minutes).
DEFAULT_MAX_ELAPSED_TIME_MILLIS: int = 900000

# The default multiplier value (1.5 which is 50% increase per back off).
DEFAULT_MULTIPLIER: float = 1.5

# The default randomization factor (0.5: a random period ranging between
# 50% below and 50% above the retry interval).
DEFAULT_RANDOMIZATION_FACTOR: float = 0.5
