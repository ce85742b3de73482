"""
authenticator.py — Secret-key helpers that sit on top of the codec and engine.

An authenticator secret is usually handled as a short, human-typable string.
Its UTF-8 bytes are the HMAC key; the Base32 form of those bytes is what the
user types into (or scans with) an authenticator app.

    key = generate_secret_key()            # "q7HkP2mXwa"
    encoded = encode_secret_key(key)       # enter this in the app
    pin = get_current_pin(key)
    check_pin(key, user_input)
"""

import io
import logging
import secrets
from datetime import datetime
from typing import Optional
from urllib.parse import quote

import qrcode

from core import base32
from core.errors import EmptySecret
from core.otp_core import Clock, generate_pin, interval, pins_equal, utc_now

logger = logging.getLogger("otp_toolkit.authenticator")

# Letters that survive being read aloud or copied by hand (no I/l/o/O/8/9).
SECRET_KEY_LETTERS = "ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz01234567"
DEFAULT_SECRET_KEY_LENGTH = 10
MAX_SECRET_KEY_LENGTH = 1024
SECRET_BYTES = 20           # 160-bit raw secret (RFC 4226 recommendation)


# --- Secret generation ------------------------------------------------------
def generate_secret_key(length: int = DEFAULT_SECRET_KEY_LENGTH) -> str:
    """Random human-typable secret key drawn with the CSPRNG."""
    if length < 1:
        raise ValueError("Secret key length must be at least 1")
    if length > MAX_SECRET_KEY_LENGTH:
        raise ValueError(f"Secret key length must be at most {MAX_SECRET_KEY_LENGTH}")
    return "".join(secrets.choice(SECRET_KEY_LETTERS) for _ in range(length))


def generate_secret_bytes(num_bytes: int = SECRET_BYTES) -> bytes:
    if num_bytes < 1:
        raise ValueError("Secret must be at least 1 byte long")
    return secrets.token_bytes(num_bytes)


# --- Encoding ---------------------------------------------------------------
def encode_secret_key(secret_key: str, padded: bool = False) -> str:
    return base32.encode(secret_key.encode("utf-8"), padded=padded)


def decode_secret_key(encoded: str, policy=base32.DecodePolicy.LENIENT) -> str:
    """
    Inverse of encode_secret_key().

    Raises:
        InvalidCharacter / TrailingBitsError: from the codec
        ValueError: if the decoded bytes are not valid UTF-8
    """
    raw = base32.decode(encoded, policy)
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ValueError("Decoded secret is not valid UTF-8 text") from e


def secret_from_base32(encoded: str, policy=base32.DecodePolicy.LENIENT) -> bytes:
    """Base32 text -> raw HMAC key; an empty result is an EmptySecret."""
    secret = base32.decode(encoded, policy)
    if not secret:
        raise EmptySecret()
    return secret


# --- Pins -------------------------------------------------------------------
def get_pin(secret_key: str, timestamp: datetime) -> str:
    return generate_pin(secret_key.encode("utf-8"), interval(timestamp))


def get_current_pin(secret_key: str, clock: Optional[Clock] = None) -> str:
    return get_pin(secret_key, (clock or utc_now)())


def check_pin(secret_key: str, pin: str, clock: Optional[Clock] = None) -> bool:
    """Compare ``pin`` with the current pin for ``secret_key`` in constant time."""
    return pins_equal(get_current_pin(secret_key, clock), pin)


# --- Provisioning -----------------------------------------------------------
def format_otpauth_uri(label: str, secret_b32: str, issuer: Optional[str] = None) -> str:
    """
    otpauth:// URI that authenticator apps import from a QR code.

        otpauth://totp/{label}?secret={secret}&issuer={issuer}

    Label and issuer are percent-encoded; the secret is already URI-safe.
    """
    uri = f"otpauth://totp/{quote(label)}?secret={secret_b32}"
    if issuer:
        uri += f"&issuer={quote(issuer)}"
    return uri


def qr_png_bytes(uri: str) -> bytes:
    """Render ``uri`` as a PNG QR code."""
    qr = qrcode.QRCode(version=None, box_size=10, border=4)
    qr.add_data(uri)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    logger.debug("Rendered %d-byte QR PNG", buffer.tell())
    return buffer.getvalue()


def qr_ascii(uri: str) -> str:
    """Render ``uri`` as a terminal-printable QR code."""
    qr = qrcode.QRCode(border=1)
    qr.add_data(uri)
    qr.make(fit=True)
    out = io.StringIO()
    qr.print_ascii(out=out, invert=True)
    return out.getvalue()
