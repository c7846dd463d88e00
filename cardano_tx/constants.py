"""Default values used when a caller does not pass its own."""

# Lovelace
MIN_UTXO_DEFAULT_VALUE = 1_000_000
DEFAULT_POTENTIAL_FEE = 300_000

# Width of the single-UTxO fit window above the minimum selection target
DEFAULT_SELECTION_WINDOW = MIN_UTXO_DEFAULT_VALUE

# Slots added to the current tip when setting time-to-live
DEFAULT_TTL_SLOT_INCREMENT = 200

# Retry policy for provider calls
DEFAULT_RETRY_COUNT = 10
DEFAULT_RETRY_WAIT_TIME = 5.0  # seconds

# Inclusion polling
DEFAULT_WAIT_RETRY_COUNT = 60
DEFAULT_WAIT_RETRY_TIME = 5.0  # seconds

KEY_HASH_SIZE = 28
KEY_SIZE = 32
SIGNATURE_SIZE = 64
TX_HASH_SIZE = 32

# Metadata strings and byte strings are limited to 64 bytes per value
METADATA_MAX_VALUE_SIZE = 64

MAX_UINT64 = 2**64 - 1
