"""ULID generation and conversion helpers.

ULIDs identify sagas, audit rows, and operation ids. The canonical string form
is 26 Crockford Base32 characters encoding 128 bits: a 48-bit millisecond
timestamp followed by 80 bits of entropy. Generation is monotonic within a
process so ids created in the same millisecond still sort in creation order.
"""

from __future__ import annotations

import secrets
import threading
import time

ULID_BYTES_LENGTH = 16
ULID_STR_LENGTH = 26

_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
_DECODE = {char: index for index, char in enumerate(_ALPHABET)}
_MAX_VALUE = (1 << 128) - 1
_ENTROPY_BITS = 80
_MAX_ENTROPY = (1 << _ENTROPY_BITS) - 1

_lock = threading.Lock()
_last_ms = -1
_last_entropy = 0


def new_ulid() -> str:
    """Return a fresh monotonic ULID string."""
    return ulid_from_bytes(new_ulid_bytes())


def new_ulid_bytes(*, timestamp_ms: int | None = None) -> bytes:
    """Return a fresh monotonic ULID in 16-byte big-endian form."""
    global _last_ms, _last_entropy
    ts_ms = int(time.time() * 1000) if timestamp_ms is None else int(timestamp_ms)
    if ts_ms < 0 or ts_ms >= (1 << 48):
        raise ValueError("timestamp_ms out of ULID 48-bit range")

    with _lock:
        if ts_ms <= _last_ms:
            # Same (or regressed) clock tick: bump the previous entropy.
            ts_ms = _last_ms
            entropy = _last_entropy + 1
            if entropy > _MAX_ENTROPY:
                ts_ms += 1
                entropy = secrets.randbits(_ENTROPY_BITS - 1)
        else:
            entropy = secrets.randbits(_ENTROPY_BITS - 1)
        _last_ms = ts_ms
        _last_entropy = entropy

    return ((ts_ms << _ENTROPY_BITS) | entropy).to_bytes(
        ULID_BYTES_LENGTH, byteorder="big", signed=False
    )


def ulid_to_bytes(value: str) -> bytes:
    """Decode a 26-char ULID string into its 16-byte form."""
    candidate = value.strip().upper()
    if len(candidate) != ULID_STR_LENGTH:
        raise ValueError(f"ULID string must be exactly {ULID_STR_LENGTH} characters")

    number = 0
    for char in candidate:
        digit = _DECODE.get(char)
        if digit is None:
            raise ValueError(f"Invalid ULID character: {char!r}")
        number = (number << 5) | digit

    if number > _MAX_VALUE:
        raise ValueError("ULID value exceeds 128-bit range")
    return number.to_bytes(ULID_BYTES_LENGTH, byteorder="big", signed=False)


def ulid_from_bytes(value: bytes) -> str:
    """Encode a 16-byte ULID into its 26-char string form."""
    if len(value) != ULID_BYTES_LENGTH:
        raise ValueError(f"ULID bytes must be exactly {ULID_BYTES_LENGTH} bytes")

    number = int.from_bytes(value, byteorder="big", signed=False)
    chars = []
    for _ in range(ULID_STR_LENGTH):
        number, remainder = divmod(number, 32)
        chars.append(_ALPHABET[remainder])
    return "".join(reversed(chars))


def is_ulid(value: object) -> bool:
    """Return True when ``value`` is a well-formed ULID string."""
    if not isinstance(value, str):
        return False
    try:
        ulid_to_bytes(value)
    except ValueError:
        return False
    return True


def ulid_timestamp_ms(value: str) -> int:
    """Return the millisecond timestamp embedded in a ULID string."""
    return int.from_bytes(ulid_to_bytes(value)[:6], byteorder="big", signed=False)
