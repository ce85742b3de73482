#!/usr/bin/env python3
"""
otp_cli.py — CLI wrapper around otp_core / base32 / authenticator.

Subcommands:
- secret : generate a new secret key and print its Base32 form
- encode : Base32-encode text (or hex bytes)
- decode : Base32-decode to text (or hex when not UTF-8)
- pin    : print the current (or a given instant's) pin
- verify : check a pin against a secret key; prompts for missing values
- uri    : print the otpauth:// provisioning URI, optionally as a QR code
"""

import argparse
import binascii
import logging
import sys
from datetime import datetime

from core import authenticator, base32, otp_core
from core.errors import OtpError
from core.log_handler import configure

log = logging.getLogger("otp_toolkit.cli")

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INVALID_PIN = 2


# --- CLI command handlers ---
def cmd_secret(args):
    secret_key = authenticator.generate_secret_key(args.length)
    print(f"Secret key: {secret_key}")
    print(f"Base32:     {authenticator.encode_secret_key(secret_key)}")
    return EXIT_OK


def cmd_encode(args):
    if args.hex:
        try:
            data = binascii.unhexlify(args.text)
        except binascii.Error as e:
            raise ValueError(f"Invalid hex input: {e}") from e
    else:
        data = args.text.encode("utf-8")
    print(base32.encode(data, padded=args.padded))
    return EXIT_OK


def cmd_decode(args):
    policy = base32.DecodePolicy.STRICT if args.strict else base32.DecodePolicy.LENIENT
    data = base32.decode(args.encoded, policy)
    try:
        print(data.decode("utf-8"))
    except UnicodeDecodeError:
        print(data.hex())
    return EXIT_OK


def _parse_instant(value):
    if value is None:
        return otp_core.utc_now()
    return datetime.fromisoformat(value)


def _secret_bytes(args) -> bytes:
    if args.base32 is not None:
        return authenticator.secret_from_base32(args.base32)
    return args.secret.encode("utf-8")


def cmd_pin(args):
    when = _parse_instant(args.at)
    counter = otp_core.interval(when)
    pin = otp_core.generate_pin(_secret_bytes(args), counter)
    remaining = otp_core.seconds_remaining(when)
    log.debug("counter=%d remaining=%ds", counter, remaining)
    print(f"PIN: {pin}  (valid ~{remaining:2d}s)")
    return EXIT_OK


def cmd_verify(args):
    secret_key = args.secret if args.secret is not None else input("Input SecretKey: ")
    pin = args.pin if args.pin is not None else input("Input Pin: ")
    valid = authenticator.check_pin(secret_key, pin)
    print(f"\nDoes secret key {secret_key} have current PIN {pin.strip()}?")
    print(f"Result: {valid}")
    return EXIT_OK if valid else EXIT_INVALID_PIN


def cmd_uri(args):
    encoded = authenticator.encode_secret_key(args.secret)
    uri = authenticator.format_otpauth_uri(args.label, encoded, args.issuer)
    print(uri)
    if args.qr:
        print(authenticator.qr_ascii(uri))
    return EXIT_OK


def cmd_help(args):
    print("'otp-toolkit -h' for help.")
    return EXIT_OK


# --- Argparse builder ---
def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="otp-toolkit", description="TOTP (HMAC-SHA1) pin and Base32 secret tool")
    sub = p.add_subparsers(dest="cmd")
    p.set_defaults(func=cmd_help, verbose=False)

    # secret
    ps = sub.add_parser("secret", help="Generate a new secret key")
    ps.add_argument("--length", type=int, default=authenticator.DEFAULT_SECRET_KEY_LENGTH,
                    help="Number of letters in the secret key")
    ps.add_argument("--verbose", action="store_true", help="Verbose output")
    ps.set_defaults(func=cmd_secret)

    # encode
    pe = sub.add_parser("encode", help="Base32-encode text")
    pe.add_argument("text", help="Text to encode (UTF-8)")
    pe.add_argument("--hex", action="store_true", help="Treat TEXT as hex bytes")
    pe.add_argument("--padded", action="store_true", help="Append '=' padding")
    pe.add_argument("--verbose", action="store_true", help="Verbose output")
    pe.set_defaults(func=cmd_encode)

    # decode
    pd = sub.add_parser("decode", help="Base32-decode a string")
    pd.add_argument("encoded", help="Base32 text (case, '-' and '=' are ignored)")
    pd.add_argument("--strict", action="store_true", help="Reject non-canonical trailing bits")
    pd.add_argument("--verbose", action="store_true", help="Verbose output")
    pd.set_defaults(func=cmd_decode)

    # pin
    pp = sub.add_parser("pin", help="Print the pin for a secret")
    src = pp.add_mutually_exclusive_group(required=True)
    src.add_argument("--secret", help="Secret key (UTF-8 text)")
    src.add_argument("--base32", help="Secret as Base32")
    pp.add_argument("--at", help="ISO 8601 instant with UTC offset (default: now)")
    pp.add_argument("--verbose", action="store_true", help="Verbose output")
    pp.set_defaults(func=cmd_pin)

    # verify
    pv = sub.add_parser("verify", help="Check a pin against a secret key")
    pv.add_argument("--secret", help="Secret key (prompted when omitted)")
    pv.add_argument("--pin", help="Pin to check (prompted when omitted)")
    pv.add_argument("--verbose", action="store_true", help="Verbose output")
    pv.set_defaults(func=cmd_verify)

    # uri
    pu = sub.add_parser("uri", help="Print the otpauth:// provisioning URI")
    pu.add_argument("--label", required=True, help="Account label, e.g. alice@example.com")
    pu.add_argument("--secret", required=True, help="Secret key (UTF-8 text)")
    pu.add_argument("--issuer", help="Issuer shown in the authenticator app")
    pu.add_argument("--qr", action="store_true", help="Also print an ASCII QR code")
    pu.add_argument("--verbose", action="store_true", help="Verbose output")
    pu.set_defaults(func=cmd_uri)

    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure(logging.DEBUG if args.verbose else None)
    try:
        return args.func(args)
    except (OtpError, ValueError) as e:
        print(f"[!] {e}")
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
