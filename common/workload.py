"""
Random workload generation: payload sizes, payload bytes and object keys.
"""

import logging
import random
from typing import Sequence, Tuple

from configuration import MAX_OBJECT_SIZE_BYTES, MIN_OBJECT_SIZE_BYTES
from persistence.record import OperationType

logger = logging.getLogger(__name__)


def generate_key(prefix: str, operation_kind: OperationType, discriminator) -> str:
    """Build an object key of the form ``{prefix}/{kind}_{discriminator}``.

    Args:
        prefix: Root prefix of the run (may be empty)
        operation_kind: Operation type whose segment names the key
        discriminator: Value that distinguishes keys, usually the payload size

    Returns:
        Object key
    """
    name = f"{operation_kind.value}_{discriminator}"
    prefix = prefix.rstrip("/")
    return f"{prefix}/{name}" if prefix else name


class WorkloadGenerator:
    """Per-worker source of random payloads and keys.

    Each worker owns one generator; the underlying ``random.Random`` is not
    shared, so runs can be made reproducible by seeding it.
    """

    def __init__(
        self,
        rng: random.Random = None,
        min_size: int = MIN_OBJECT_SIZE_BYTES,
        max_size: int = MAX_OBJECT_SIZE_BYTES,
    ):
        if max_size <= min_size:
            raise ValueError(f"empty size range [{min_size}, {max_size})")
        self.rng = rng or random.Random()
        self.min_size = min_size
        self.max_size = max_size

    def random_size(self) -> int:
        """Draw a payload size uniformly from [min_size, max_size)."""
        return self.rng.randrange(self.min_size, self.max_size)

    def generate_payload(self) -> Tuple[int, bytes]:
        """Return ``(size, body)`` where body holds ``size`` random bytes."""
        size = self.random_size()
        return size, self.rng.randbytes(size)

    def generate_key(self, prefix: str, operation_kind: OperationType, discriminator) -> str:
        return generate_key(prefix, operation_kind, discriminator)

    def choose(self, keys: Sequence[str]) -> str:
        """Pick one key uniformly at random."""
        return keys[self.rng.randrange(len(keys))]
