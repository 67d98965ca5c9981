"""Root pytest configuration.

Test Structure:
    tests/
    ├── lockbox_config/        # Settings loading and validation
    └── lockbox_identity/      # Account credential and token lifecycle
        ├── unit/              # Fast, isolated tests with mocks
        └── integration/       # Tests against in-memory SQLite
"""

import pytest


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch, tmp_path):
    """Keep developer .env files and shell variables out of the tests."""
    monkeypatch.setenv("LOCKBOX_ENV_FILE", str(tmp_path / "missing.env"))
    monkeypatch.delenv("JWT_SECRET", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("SMTP_ENABLED", raising=False)
