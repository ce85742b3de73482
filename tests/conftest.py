from datetime import datetime, timedelta, timezone

import pytest

from backend.app import create_app

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def app():
    return create_app({"TESTING": True, "ISSUER": "TestIssuer"})


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def frozen_time(monkeypatch):
    """Pin the engine's clock to EPOCH + ``seconds``."""
    from core import authenticator, otp_core

    def freeze(seconds):
        now = EPOCH + timedelta(seconds=seconds)
        monkeypatch.setattr(otp_core, "utc_now", lambda: now)
        monkeypatch.setattr(authenticator, "utc_now", lambda: now)
        return now

    return freeze
