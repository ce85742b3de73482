"""
OTP BACKEND API ROUTES - FLASK BLUEPRINT

JSON endpoints over the Base32 codec and the TOTP engine.

Secrets are passed either as `secret` (secret key text, UTF-8 bytes are the
HMAC key) or as `base32` (the encoded form an authenticator app shows).

EXAMPLES:
curl -X POST http://localhost:5000/generate_secret -H "Content-Type: application/json" -d "{}"
curl -X POST http://localhost:5000/pin -H "Content-Type: application/json" -d '{"secret": "q7HkP2mXwa"}'
"""

import base64
import binascii
import logging
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify, request

from core import authenticator, base32, otp_core
from core.base32 import DecodePolicy

log = logging.getLogger("otp_toolkit.backend")

otp_bp = Blueprint('otp', __name__)


class InvalidRequest(Exception):
    pass


@otp_bp.errorhandler(InvalidRequest)
def handle_bad_request(e):
    return jsonify({"error": str(e)}), 400


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidRequest("JSON object body required")
    return data


_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off", ""}


def _flag(data: dict, name: str) -> bool:
    value = data[name]
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in _TRUE_STRINGS | _FALSE_STRINGS:
        return value.strip().lower() in _TRUE_STRINGS
    raise InvalidRequest(f"'{name}' must be a boolean")


def _policy(data: dict) -> DecodePolicy:
    if "strict" in data:
        return DecodePolicy.STRICT if _flag(data, "strict") else DecodePolicy.LENIENT
    return current_app.config["DECODE_POLICY"]


def _secret_from(data: dict) -> bytes:
    """Raw HMAC key from a `secret` (text) or `base32` field."""
    if data.get("base32") is not None:
        return authenticator.secret_from_base32(str(data["base32"]), _policy(data))
    if data.get("secret") is not None:
        return str(data["secret"]).encode("utf-8")
    raise InvalidRequest("Either 'secret' or 'base32' is required")


def _timestamp_from(data: dict) -> datetime:
    """`timestamp` as epoch seconds or ISO 8601 with offset; defaults to now."""
    value = data.get("timestamp")
    if value is None:
        return otp_core.utc_now()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value, timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise InvalidRequest(f"Invalid timestamp: {value}") from e
    try:
        return datetime.fromisoformat(str(value))
    except ValueError as e:
        raise InvalidRequest(f"Invalid timestamp: {value}") from e


@otp_bp.route('/encode', methods=['POST'])
def encode_route():
    """
    BASE32 ENCODE

    Input:  {"text": "foobar"} or {"hex": "666f6f626172"}, optional "padded": true
    Output: {"encoded": "MZXW6YTBOI"}
    """
    data = _json_body()
    if "hex" in data:
        try:
            raw = binascii.unhexlify(str(data["hex"]))
        except binascii.Error as e:
            raise InvalidRequest(f"Invalid hex: {e}") from e
    elif "text" in data:
        raw = str(data["text"]).encode("utf-8")
    else:
        raise InvalidRequest("Either 'text' or 'hex' is required")

    padded = _flag(data, "padded") if "padded" in data else False
    return jsonify({"encoded": base32.encode(raw, padded=padded)})


@otp_bp.route('/decode', methods=['POST'])
def decode_route():
    """
    BASE32 DECODE

    Input:  {"encoded": "mzxw-6ytb-oi==", "strict": false}
    Output: {"hex": "666f6f626172", "text": "foobar"}   ("text" only when valid UTF-8)
    """
    data = _json_body()
    if "encoded" not in data:
        raise InvalidRequest("'encoded' is required")

    raw = base32.decode(str(data["encoded"]), _policy(data))
    result = {"hex": raw.hex()}
    try:
        result["text"] = raw.decode("utf-8")
    except UnicodeDecodeError:
        pass
    return jsonify(result)


@otp_bp.route('/generate_secret', methods=['POST'])
def generate_secret():
    """
    NEW SECRET KEY

    Input:  {"length": 16}   (optional, default 10, at most 1024)
    Output: {"secret": "...", "encoded": "..."}
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        raise InvalidRequest("JSON object body required")
    try:
        length = int(data.get("length", authenticator.DEFAULT_SECRET_KEY_LENGTH))
        secret_key = authenticator.generate_secret_key(length)
    except (TypeError, ValueError) as e:
        raise InvalidRequest(str(e)) from e

    log.info("Generated %d-letter secret key", length)
    return jsonify({
        "secret": secret_key,
        "encoded": authenticator.encode_secret_key(secret_key),
    })


@otp_bp.route('/pin', methods=['POST'])
def pin_route():
    """
    PIN FOR A SECRET

    Input:  {"secret": "..."} or {"base32": "..."}, optional "timestamp"
    Output: {"pin": "755224", "counter": 0, "remaining": 30}
    """
    data = _json_body()
    secret = _secret_from(data)
    when = _timestamp_from(data)

    counter = otp_core.interval(when)
    return jsonify({
        "pin": otp_core.generate_pin(secret, counter),
        "counter": counter,
        "remaining": otp_core.seconds_remaining(when),
    })


@otp_bp.route('/verify', methods=['POST'])
def verify_route():
    """
    VERIFY A PIN (current interval only)

    Input:  {"secret": "...", "pin": "123456"}
    Output: {"valid": true}
    """
    data = _json_body()
    if "pin" not in data:
        raise InvalidRequest("'pin' is required")

    valid = otp_core.verify_pin(_secret_from(data), str(data["pin"]), _timestamp_from(data))
    log.info("Pin verification %s", "succeeded" if valid else "failed")
    return jsonify({"valid": valid})


def _uri_from_args() -> str:
    label = request.args.get('label')
    secret_key = request.args.get('secret')
    if not label or not secret_key:
        raise InvalidRequest("'label' and 'secret' query parameters are required")
    issuer = request.args.get('issuer', current_app.config["ISSUER"])
    return authenticator.format_otpauth_uri(label, authenticator.encode_secret_key(secret_key), issuer)


@otp_bp.route('/otpauth_uri', methods=['GET'])
def otpauth_uri():
    """
    PROVISIONING URI

      curl "http://localhost:5000/otpauth_uri?label=alice@example.com&secret=q7HkP2mXwa&issuer=MyApp"
    """
    return jsonify({"uri": _uri_from_args()})


@otp_bp.route('/qr_code', methods=['GET'])
def qr_code():
    """
    PROVISIONING QR CODE (PNG data URI), same query parameters as /otpauth_uri
    """
    uri = _uri_from_args()
    png = authenticator.qr_png_bytes(uri)
    return jsonify({
        "qr_code": f"data:image/png;base64,{base64.b64encode(png).decode()}",
        "uri": uri,
    })
