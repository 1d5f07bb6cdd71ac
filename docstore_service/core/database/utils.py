"""Identifier helpers.

Example:
    from docstore_service.core.database.utils import generate_uuid7

    id1 = generate_uuid7()
    id2 = generate_uuid7()
    assert str(id1) < str(id2)  # Creation ordered, even within one millisecond
"""
from __future__ import annotations

import os
import secrets
import threading
import time
import uuid

_uuid7_lock = threading.Lock()
_last_timestamp_ms = 0
_counter = 0

# 12-bit rand_a field is used as a per-millisecond counter
_COUNTER_MAX = 0x0FFF


def generate_uuid7() -> uuid.UUID:
    """Generate a UUID v7 (time-sortable).

    UUID v7 encodes the Unix timestamp in milliseconds in the first 48 bits.
    The following 12 bits hold a counter seeded randomly each millisecond,
    so identifiers generated in one process are strictly increasing even
    when the wall clock stalls or steps backwards.

    Returns:
        UUID v7 instance

    Example:
        >>> id1 = generate_uuid7()
        >>> id2 = generate_uuid7()
        >>> str(id1) < str(id2)
        True
    """
    global _last_timestamp_ms, _counter

    with _uuid7_lock:
        timestamp_ms = int(time.time() * 1000)
        if timestamp_ms > _last_timestamp_ms:
            _last_timestamp_ms = timestamp_ms
            # Leave headroom so the counter rarely overflows
            _counter = int.from_bytes(os.urandom(2), "big") & 0x07FF
        else:
            _counter += 1
            if _counter > _COUNTER_MAX:
                _last_timestamp_ms += 1
                _counter = 0
        timestamp_ms = _last_timestamp_ms
        counter = _counter

    random_bytes = os.urandom(8)

    # RFC 9562 layout:
    # - Bits 0-47: Unix timestamp in milliseconds (big-endian)
    # - Bits 48-51: Version (7)
    # - Bits 52-63: Counter
    # - Bits 64-65: Variant (10)
    # - Bits 66-127: Random
    uuid_bytes = bytearray(16)
    uuid_bytes[0:6] = timestamp_ms.to_bytes(6, byteorder="big")
    uuid_bytes[6] = 0x70 | (counter >> 8)
    uuid_bytes[7] = counter & 0xFF
    uuid_bytes[8] = (random_bytes[0] & 0x3F) | 0x80
    uuid_bytes[9:16] = random_bytes[1:8]

    return uuid.UUID(bytes=bytes(uuid_bytes))


def generate_token(nbytes: int = 24) -> str:
    """Generate an opaque URL-safe token for user authentication."""
    return secrets.token_urlsafe(nbytes)
