"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from pathlib import Path

# Minimal environment for Settings; integration tests build their own engines
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test_secret")
os.environ.setdefault("ADMIN_DASHBOARD_PASSWORD", "test-admin-password")
os.environ.setdefault("SITE_URL", "https://example.test")

# Add project root to PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from unittest.mock import AsyncMock, MagicMock

import pytest


@pytest.fixture
def mock_session():
    """Mock AsyncSession for tests without a database."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    session.refresh = AsyncMock()
    return session


@pytest.fixture
def mock_email_client():
    """Mock EmailClient that records sent messages."""
    client = AsyncMock()
    client.send = AsyncMock(return_value="msg_test")
    client.send_safely = AsyncMock(return_value=True)
    client.close = AsyncMock()
    client.is_configured = True
    return client


@pytest.fixture
def mock_partner_tracker():
    """Mock PartnerTracker."""
    tracker = AsyncMock()
    tracker.track_conversion = AsyncMock(return_value=True)
    tracker.close = AsyncMock()
    return tracker


@pytest.fixture
def sample_email():
    return "coach@example.com"
