"""
errors.py — Exception types raised by the Base32 codec and the OTP engine.

Every error derives from OtpError, which is itself a ValueError, so callers
that already guard OTP calls with ``except ValueError`` keep working.
"""


class OtpError(ValueError):
    """Base class for all codec / engine errors."""


class InvalidCharacter(OtpError):
    """A Base32 string contains a symbol outside A-Z / 2-7."""

    def __init__(self, character: str):
        self.character = character
        super().__init__(f"Illegal character: {character!r}")


class TrailingBitsError(OtpError):
    """Strict decode found leftover bits that encode() would never produce."""

    def __init__(self, bits_left: int, value: int):
        self.bits_left = bits_left
        self.value = value
        super().__init__(f"Non-canonical Base32 tail: {bits_left} bits left (value {value})")


class InputTooLarge(OtpError):
    """Input is too long to be Base32 encoded safely."""

    def __init__(self, length: int, limit: int):
        self.length = length
        self.limit = limit
        super().__init__(f"Input of {length} bytes exceeds the {limit} byte limit")


class EmptySecret(OtpError):
    def __init__(self):
        super().__init__("Secret must be at least 1 byte long")


class CounterOutOfRange(OtpError):
    def __init__(self, counter: int):
        self.counter = counter
        super().__init__(f"Counter {counter} is outside the unsigned 64-bit range")


class NaiveTimestamp(OtpError):
    def __init__(self):
        super().__init__("Timestamp must be timezone-aware (use datetime.now(timezone.utc))")
