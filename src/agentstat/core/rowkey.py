"""Row key encoding for agent stat rows.

A row key is the agent id padded to a fixed width followed by the
reversed timestamp (``MAX_LONG - timestamp``) as a big-endian long.
Ascending byte order of keys is therefore descending time order, so a
forward scan returns the most recent samples first.
"""

import struct
from dataclasses import dataclass

from agentstat.core.errors import InvalidArgumentError
from agentstat.core.models import TimeRange

AGENT_ID_MAX_LEN = 24
MAX_LONG = 2**63 - 1
ROW_KEY_LEN = AGENT_ID_MAX_LEN + 8

_LONG = struct.Struct(">q")


@dataclass(frozen=True)
class ScanBounds:
    """Byte range of a scan, half-open: start inclusive, stop exclusive."""

    start: bytes
    stop: bytes


def _agent_id_bytes(agent_id: str | None) -> bytes:
    if not agent_id:
        raise InvalidArgumentError("agentId must not be empty")
    encoded = agent_id.encode("utf-8")
    if len(encoded) > AGENT_ID_MAX_LEN:
        raise InvalidArgumentError(
            f"agentId too long: {len(encoded)} bytes, max {AGENT_ID_MAX_LEN}"
        )
    if b"\x00" in encoded:
        raise InvalidArgumentError("agentId must not contain NUL characters")
    return encoded.ljust(AGENT_ID_MAX_LEN, b"\x00")


def reverse_time_millis(timestamp: int) -> int:
    """Invert a timestamp so larger times sort first."""
    if timestamp < 0 or timestamp > MAX_LONG:
        raise InvalidArgumentError(f"timestamp out of range: {timestamp}")
    return MAX_LONG - timestamp


def encode_row_key(agent_id: str | None, timestamp: int) -> bytes:
    """Build the row key of a sample.

    Args:
        agent_id: Agent identifier, at most AGENT_ID_MAX_LEN bytes in UTF-8.
        timestamp: Epoch milliseconds.

    Returns:
        ROW_KEY_LEN bytes; larger timestamps produce smaller keys.

    Raises:
        InvalidArgumentError: If the agent id is empty, too long or contains
            NUL, or the timestamp is negative.
    """
    return _agent_id_bytes(agent_id) + _LONG.pack(reverse_time_millis(timestamp))


def decode_row_key(key: bytes) -> tuple[str, int]:
    """Split a row key back into agent id and timestamp."""
    if len(key) != ROW_KEY_LEN:
        raise InvalidArgumentError(
            f"row key must be {ROW_KEY_LEN} bytes, got {len(key)}"
        )
    agent_id = key[:AGENT_ID_MAX_LEN].rstrip(b"\x00").decode("utf-8")
    (reversed_time,) = _LONG.unpack(key[AGENT_ID_MAX_LEN:])
    return agent_id, MAX_LONG - reversed_time


def scan_bounds(agent_id: str | None, time_range: TimeRange | None) -> ScanBounds:
    """Compute the scan bounds selecting ``(from_, to]`` of an agent.

    Because time is inverted, the start key is built from ``to`` and the
    stop key from ``from_``. The stop key is exclusive, so a sample exactly
    at ``from_`` is not selected, except for a zero-span range: there the
    stop is moved just past the start key and the scan becomes a point
    lookup of the samples at that timestamp.

    Raises:
        InvalidArgumentError: If either argument is missing or the agent id
            cannot be encoded.
    """
    if time_range is None:
        raise InvalidArgumentError("range must not be None")
    start = encode_row_key(agent_id, time_range.to)
    stop = encode_row_key(agent_id, time_range.from_)
    if start == stop:
        stop = start + b"\x00"
    return ScanBounds(start=start, stop=stop)
