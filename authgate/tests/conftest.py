import asyncio
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from authgate import create_app
from authgate.core.signin.identity_provider import IdentityProviderError


# ==================== Pytest Markers ====================
def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (Flask app, HTTP)")


class FakeCredentialCheck:
    """Records calls and resolves, rejects, or blocks on demand."""

    def __init__(self, error_code=None, error=None):
        self.calls = []
        self.error_code = error_code
        self.error = error
        self.release = None

    def hold(self):
        """Make the next calls wait until `release` is set."""
        self.release = asyncio.Event()
        return self.release

    async def __call__(self, email, password):
        self.calls.append((email, password))
        if self.release is not None:
            await self.release.wait()
        if self.error is not None:
            raise self.error
        if self.error_code is not None:
            raise IdentityProviderError(self.error_code)
        return {"localId": "uid-1", "email": email}


@pytest.fixture()
def credential_check():
    return FakeCredentialCheck()


@pytest.fixture()
def app(credential_check):
    app = create_app("testing")
    app.extensions["credential_check"] = credential_check
    ctx = app.app_context()
    ctx.push()
    try:
        yield app
    finally:
        ctx.pop()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def fake_check():
    """Factory for FakeCredentialCheck instances."""
    return FakeCredentialCheck
