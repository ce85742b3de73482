"""
core package
============

TOTP pin generation (RFC 4226 / RFC 6238, HMAC-SHA1, 30 s, 6 digits) and the
RFC 4648 Base32 codec used to exchange secrets with authenticator apps.

Algorithm
---------
- Counter  = floor((now - 1970-01-01T00:00:00Z) / 30 s)
- Pin      = Truncate(HMAC-SHA1(key=secret, msg=counter as 8 bytes BE)) mod 10^6
- Truncate = 4 bytes at offset (last digest byte & 0x0F), top bit cleared

Quick example
-------------
>>> from datetime import datetime, timezone
>>> from core import base32, otp_core
>>> secret = base32.decode("GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ")
>>> otp_core.generate_pin(secret, 0)
'755224'
>>> otp_core.interval(datetime(1970, 1, 1, 0, 0, 30, tzinfo=timezone.utc))
1
"""

from core.base32 import DecodePolicy, decode, encode
from core.errors import (
    CounterOutOfRange,
    EmptySecret,
    InputTooLarge,
    InvalidCharacter,
    NaiveTimestamp,
    OtpError,
    TrailingBitsError,
)
from core.otp_core import generate_pin, interval, pins_equal, verify_pin

__all__ = [
    "DecodePolicy",
    "decode",
    "encode",
    "generate_pin",
    "interval",
    "pins_equal",
    "verify_pin",
    "OtpError",
    "InvalidCharacter",
    "TrailingBitsError",
    "InputTooLarge",
    "EmptySecret",
    "CounterOutOfRange",
    "NaiveTimestamp",
]
