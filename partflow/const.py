"""Constants for partflow."""

BYTES_PER_MIB = 1024 * 1024

# Smallest part size object stores accept for every part but the last.
MIN_PART_SIZE = 5 * BYTES_PER_MIB
MAXIMUM_UPLOAD_PARTS = 10000

DEFAULT_NUM_WORKERS = 4

# Log every Nth part at debug level (first and last part always logged)
PART_LOG_INTERVAL = 100

# Read size used when streaming a part body in pieces
DEFAULT_READ_CHUNK_SIZE = 1024 * 1024
