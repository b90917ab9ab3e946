"""
Configuration constants for the PUT/GET load harness.

This module contains all configuration parameters including:
- Storage credentials and endpoint defaults
- Workload parameters (payload size bounds, key naming)
- Worker and listing behaviour (backoff, timeouts)
- File size constants and conversion factors
"""

import os

# =============================================================================
# OBJECT STORAGE CONFIGURATION
# =============================================================================

# Defaults for the positional CLI arguments (the CLI always wins)
DEFAULT_ENDPOINT: str = os.getenv("S3_ENDPOINT", "")
DEFAULT_BUCKET: str = os.getenv("BUCKET_NAME", "")

# S3-compatible credentials
AWS_ACCESS_KEY_ID: str = os.getenv("AWS_ACCESS_KEY_ID", "")
AWS_SECRET_ACCESS_KEY: str = os.getenv("AWS_SECRET_ACCESS_KEY", "")
AWS_REGION: str = os.getenv("AWS_REGION", "us-east-2")

# =============================================================================
# WORKLOAD PARAMETERS
# =============================================================================

BYTES_PER_KB: int = 1024
BYTES_PER_MB: int = 1024 * 1024

# Payload size is drawn from [MIN_OBJECT_SIZE_BYTES, MAX_OBJECT_SIZE_BYTES)
MIN_OBJECT_SIZE_BYTES: int = BYTES_PER_KB
MAX_OBJECT_SIZE_BYTES: int = 100 * BYTES_PER_MB

# =============================================================================
# WORKER PARAMETERS
# =============================================================================

EMPTY_LISTING_BACKOFF_SECONDS: float = 1.0  # Sleep before re-listing an empty prefix
MAX_EMPTY_LISTINGS: int = 30  # Consecutive empty listings before a get attempt is skipped
PROGRESS_INTERVAL: int = 50  # Log progress every N successful requests
PAYLOAD_THREADS_MIN: int = 4  # Lower bound for the payload generation executor

# =============================================================================
# TIMEOUTS AND CONNECTION POOL
# =============================================================================

# 100MB bodies need a generous request timeout
REQUEST_TIMEOUT_SECONDS: int = 120
CONNECT_TIMEOUT_SECONDS: int = 5
READ_TIMEOUT_SECONDS: int = 60
MAX_POOL_CONNECTIONS: int = 1000  # Upper bound on the botocore connection pool

# =============================================================================
# METRICS
# =============================================================================

METRICS_NAMESPACE: str = "putget_bench"

# =============================================================================
# CONVERSION FACTORS
# =============================================================================

MS_PER_SECOND: int = 1000
BITS_PER_BYTE: int = 8
BITS_PER_MEGABIT: int = 1_000_000
