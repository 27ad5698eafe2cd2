"""
Shared fixtures: a test ClientConfig and a fake requests session.

No test touches the network. ``session.request`` is a MagicMock whose
side_effect is the list of responses (or exceptions) each attempt receives.
"""

import pytest
from unittest.mock import MagicMock

from openrouter_client import ClientConfig, OpenRouterClient, RetryConfig


@pytest.fixture
def config():
    return ClientConfig(
        api_key="sk-or-test",
        base_url="https://openrouter.test/api/v1",
        referer="https://example.com",
        app_name="Test App",
        default_model="openai/gpt-4o-mini",
        retry=RetryConfig(max_attempts=3, base_delay=0.01, max_delay=0.05),
    )


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def session_manager(session):
    manager = MagicMock()
    manager.get_session.return_value = session
    return manager


@pytest.fixture
def events():
    """Collects lifecycle events; pass ``events.append`` as on_event."""
    return []


@pytest.fixture
def client(config, session_manager, events):
    return OpenRouterClient(config, session_manager=session_manager, on_event=events.append)
