"""
base32.py — RFC 4648 §6 Base32 codec used to exchange OTP secrets.

- encode(): bytes -> uppercase Base32, unpadded by default (otpauth URIs and
  authenticator apps do not expect '=' padding).
- decode(): tolerant of lowercase, '-' separators, surrounding whitespace and
  trailing '=' padding.

The bit stream is read most-significant bit first, 5 bits per symbol.
"""

import enum
import logging
from types import MappingProxyType
from typing import Union

from core.errors import InputTooLarge, InvalidCharacter, TrailingBitsError

logger = logging.getLogger("otp_toolkit.base32")

# --- Config / constants ----------------------------------------------------
ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"
SHIFT = 5                       # bits per symbol
MASK = len(ALPHABET) - 1        # 0b11111
PAD = "="
SEPARATOR = "-"
MAX_ENCODE_LENGTH = 1 << 28     # input bytes; keeps len * 8 inside 32 bits

# symbol -> value, both cases; read-only after import
_CHAR_MAP = {}
for _index, _symbol in enumerate(ALPHABET):
    _CHAR_MAP[_symbol] = _index
    _CHAR_MAP[_symbol.lower()] = _index
CHAR_MAP = MappingProxyType(_CHAR_MAP)
del _index, _symbol


class DecodePolicy(str, enum.Enum):
    """What decode() does with bits left over after the last full byte."""

    LENIENT = "lenient"  # discard them, like the common authenticator apps
    STRICT = "strict"    # reject anything encode() could not have produced


def encoded_length(num_bytes: int, padded: bool = False) -> int:
    """Number of characters encode() produces for ``num_bytes`` of input."""
    length = (num_bytes * 8 + SHIFT - 1) // SHIFT
    if padded and length:
        length += -length % 8
    return length


def encode(data: Union[bytes, bytearray, memoryview], padded: bool = False) -> str:
    """
    Encode raw bytes as Base32.

    The last symbol is zero-filled on the right when fewer than 5 bits remain;
    this is bit padding, not '=' padding. With ``padded=True`` '=' is appended
    until the length is a multiple of 8. Empty input always gives "".

    Raises:
        InputTooLarge: if len(data) >= 2**28
    """
    data = bytes(data)
    if len(data) >= MAX_ENCODE_LENGTH:
        raise InputTooLarge(len(data), MAX_ENCODE_LENGTH)
    if not data:
        return ""

    result = []
    buffer = 0
    bits_left = 0
    for byte in data:
        buffer = (buffer << 8) | byte
        bits_left += 8
        while bits_left >= SHIFT:
            result.append(ALPHABET[(buffer >> (bits_left - SHIFT)) & MASK])
            bits_left -= SHIFT
        buffer &= (1 << bits_left) - 1

    if bits_left:
        result.append(ALPHABET[(buffer << (SHIFT - bits_left)) & MASK])

    if padded:
        result.append(PAD * (-len(result) % 8))
    return "".join(result)


def normalize(text: str) -> str:
    """
    Strip the formatting noise decode() tolerates: surrounding whitespace,
    '-' separators and trailing '=' padding. Case is left alone; the symbol
    table accepts both.

    str.upper() is deliberately not used: it maps some non-ASCII letters
    onto the alphabet ('ı' -> 'I', 'ſ' -> 'S'), and those must stay invalid.
    """
    return text.strip().replace(SEPARATOR, "").rstrip(PAD)


def decode(text: str, policy: DecodePolicy = DecodePolicy.LENIENT) -> bytes:
    """
    Decode Base32 text into raw bytes.

    Output length is floor(len(clean) * 5 / 8). Leftover bits (fewer than a
    byte) are dropped under LENIENT and must be zero-valued and shorter than one
    symbol under STRICT.

    Raises:
        InvalidCharacter: on any symbol outside the alphabet, including
            non-ASCII letters that str.upper() would fold into it
        TrailingBitsError: STRICT only, when the tail is not canonical
    """
    policy = DecodePolicy(policy)
    encoded = normalize(text)
    if not encoded:
        return b""

    result = bytearray()
    buffer = 0
    bits_left = 0
    for char in encoded:
        try:
            value = CHAR_MAP[char]
        except KeyError:
            raise InvalidCharacter(char) from None
        buffer = (buffer << SHIFT) | value
        bits_left += SHIFT
        if bits_left >= 8:
            result.append((buffer >> (bits_left - 8)) & 0xFF)
            bits_left -= 8
            buffer &= (1 << bits_left) - 1

    if bits_left:
        if policy is DecodePolicy.STRICT and (bits_left >= SHIFT or buffer):
            raise TrailingBitsError(bits_left, buffer)
        logger.debug("Discarding %d trailing bits", bits_left)
    return bytes(result)
