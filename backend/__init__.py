"""
Backend package: Flask JSON API over the core codec and TOTP engine.
"""

from backend.app import create_app

__all__ = ['create_app']
