"""
Backend configuration, read from OTP_* environment variables.
"""

import os


class Config:
    ISSUER = os.environ.get("OTP_ISSUER", "otp-toolkit")
    # "lenient" (drop trailing bits) or "strict" (reject non-canonical input)
    DECODE_POLICY = os.environ.get("OTP_DECODE_POLICY", "lenient")
    LOG_LEVEL = os.environ.get("OTP_LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.environ.get("OTP_CORS_ORIGINS", "*")
