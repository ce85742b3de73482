#!/usr/bin/env python3
"""
otp_core.py — Core library for HOTP / TOTP pin generation.

Goals:
- Pure functions only: no file I/O, no argparse, no clock access except in
  current_interval(), which reads the clock exactly once.
- Fixed Google Authenticator profile: HMAC-SHA1, 30 s interval, 6 digits
  (RFC 4226 / RFC 6238).

Security notes:
- Compare pins with pins_equal() (constant time), never with ==.
- Never log secrets or pins.
"""

import hashlib
import hmac
import logging
import struct
import unicodedata
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from core.errors import CounterOutOfRange, EmptySecret, NaiveTimestamp

logger = logging.getLogger("otp_toolkit.engine")

# --- Config / constants ----------------------------------------------------
INTERVAL_LENGTH = 30        # TOTP step (seconds)
PIN_LENGTH = 6              # standard: 6 digits
PIN_MODULO = 10 ** PIN_LENGTH
MAX_COUNTER = (1 << 64) - 1
UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_STEP = timedelta(seconds=INTERVAL_LENGTH)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# --- Time helpers -----------------------------------------------------------
def _as_utc(timestamp: datetime) -> datetime:
    if timestamp.tzinfo is None or timestamp.utcoffset() is None:
        raise NaiveTimestamp()
    return timestamp.astimezone(timezone.utc)


def interval(timestamp: datetime) -> int:
    """
    Number of whole 30-second intervals elapsed since the Unix epoch.

    - ``timestamp`` must be timezone-aware; it is normalised to UTC first, so
      an aware local time gives the same counter as the equivalent UTC instant.
    - Floors: 00:00:29 -> 0, 00:00:30 -> 1.

    Raises:
        NaiveTimestamp: if ``timestamp`` has no tzinfo
        CounterOutOfRange: for instants before the epoch
    """
    elapsed = _as_utc(timestamp) - UNIX_EPOCH
    counter = elapsed // _STEP
    if counter < 0:
        raise CounterOutOfRange(counter)
    return counter


def seconds_remaining(timestamp: datetime) -> int:
    """Whole seconds until the pin for ``timestamp`` rolls over (1..30)."""
    elapsed = _as_utc(timestamp) - UNIX_EPOCH
    return INTERVAL_LENGTH - int((elapsed % _STEP).total_seconds())


def current_interval(clock: Optional[Clock] = None) -> int:
    """Read the clock once and return its interval."""
    return interval((clock or utc_now)())


# --- RFC helpers -----------------------------------------------------------
def int_to_bytes(counter: int) -> bytes:
    """
    Counter as the 8-byte big-endian unsigned integer RFC 4226 requires.

    Example: int_to_bytes(1) -> b'\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x01'
    """
    if not 0 <= counter <= MAX_COUNTER:
        raise CounterOutOfRange(counter)
    return struct.pack(">Q", counter)


def hmac_sha1(key: bytes, message: bytes) -> bytes:
    return hmac.new(key, message, hashlib.sha1).digest()


def dynamic_truncate(hmac_digest: bytes) -> int:
    """
    RFC 4226 dynamic truncation.

    - offset = low nibble of the last digest byte (0..15)
    - read 4 bytes at offset as a big-endian unsigned 32-bit integer
    - clear the most significant bit -> 31-bit value
    """
    offset = hmac_digest[-1] & 0x0F
    (selected,) = struct.unpack(">I", hmac_digest[offset:offset + 4])
    return selected & 0x7FFFFFFF


def generate_pin(secret: bytes, counter: int) -> str:
    """
    HOTP pin for ``counter``.

    Steps:
    1. message = 8-byte big-endian counter
    2. HMAC-SHA1(key=secret, message)
    3. dynamic truncation -> 31-bit integer
    4. modulo 10^6, zero-padded to 6 digits

    Raises:
        EmptySecret: if ``secret`` is empty
        CounterOutOfRange: if ``counter`` is not a uint64
    """
    if not secret:
        raise EmptySecret()
    message = int_to_bytes(counter)
    truncated = dynamic_truncate(hmac_sha1(bytes(secret), message))
    logger.debug("Generated pin for counter=%d", counter)
    return str(truncated % PIN_MODULO).zfill(PIN_LENGTH)


# --- Verification -----------------------------------------------------------
def pins_equal(expected: str, supplied: str) -> bool:
    """
    Timing-attack resistant pin comparison.

    Both sides are NFKC-normalised first so full-width digits typed on some
    keyboards compare equal to ASCII ones. The comparison still reveals whether
    the lengths differ.
    """
    expected = unicodedata.normalize("NFKC", str(expected))
    supplied = unicodedata.normalize("NFKC", str(supplied).strip())
    return hmac.compare_digest(expected.encode("utf-8"), supplied.encode("utf-8"))


def verify_pin(secret: bytes, pin: str, timestamp: datetime) -> bool:
    """Check ``pin`` against the single interval containing ``timestamp``."""
    counter = interval(timestamp)
    valid = pins_equal(generate_pin(secret, counter), pin)
    logger.debug("Pin check for counter=%d: %s", counter, "valid" if valid else "invalid")
    return valid
