"""Key distribution strategy for agent stat rows.

Consecutive samples of an agent share a key prefix and would land on the
same store partition. Prefixing each key with a one-byte hash bucket spreads
them over several partitions; reads then fan out over every bucket.
"""

import zlib


class RowKeyDistributorByHashPrefix:
    """Prefix row keys with one byte derived from a hash of the key.

    Args:
        buckets: Number of partitions, between 1 and 256.
    """

    def __init__(self, buckets: int = 8) -> None:
        if not 1 <= buckets <= 256:
            raise ValueError(f"buckets must be between 1 and 256, got {buckets}")
        self._buckets = buckets

    @property
    def buckets(self) -> int:
        return self._buckets

    def get_distributed_key(self, original_key: bytes) -> bytes:
        """Return the key as stored, with its bucket prefix."""
        prefix = zlib.crc32(original_key) % self._buckets
        return bytes([prefix]) + original_key

    def get_original_key(self, distributed_key: bytes) -> bytes:
        """Strip the bucket prefix."""
        return distributed_key[1:]

    def get_all_distributed_keys(self, original_key: bytes) -> list[bytes]:
        """Return the key under every bucket prefix, in bucket order."""
        return [bytes([prefix]) + original_key for prefix in range(self._buckets)]
