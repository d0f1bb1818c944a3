"""Shared test fixtures for posthog-provider tests."""

import sys
from pathlib import Path
from typing import Any

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from posthog_provider.client import PostHogClient
from posthog_provider.resources import ActionResource, ProjectResource

# Constants for use in tests - pytest makes conftest.py fixtures available,
# but these constants need to be imported directly from tests
MOCK_POSTHOG_URL = "https://posthog.example.com"
MOCK_API_URL = f"{MOCK_POSTHOG_URL}/api"


@pytest.fixture
def mock_client():
    """PostHogClient pointing at mock server."""
    return PostHogClient(MOCK_POSTHOG_URL, "test-key")


@pytest.fixture
def action_resource(mock_client):
    return ActionResource(mock_client)


@pytest.fixture
def project_resource(mock_client):
    return ProjectResource(mock_client)


@pytest.fixture
def sample_action() -> dict[str, Any]:
    """Sample action API response, steps in remote order."""
    return {
        "id": 7,
        "name": "Signed up",
        "description": "Someone signed up",
        "tags": ["growth", "acquisition"],
        "post_to_slack": True,
        "slack_message_format": "[user] signed up",
        "steps": [
            {
                "id": "101",
                "event": "$autocapture",
                "selector": "button.signup",
                "text": "Sign up",
                "text_matching": "exact",
            },
            {"id": "102", "event": "user signed up"},
            {"id": "103", "event": "$pageview", "url": "/welcome", "url_matching": "contains"},
        ],
        "deleted": False,
        "is_calculating": False,
        "created_at": "2024-03-01T10:00:00Z",
        "last_calculated_at": "2024-03-02T10:00:00.123456Z",
    }


@pytest.fixture
def sample_project() -> dict[str, Any]:
    """Sample project API response."""
    return {
        "id": 42,
        "name": "Web",
        "autocapture_opt_out": False,
        "timezone": "Europe/Paris",
        "app_urls": ["https://www.example.com", "https://app.example.com"],
        "data_attributes": ["data-attr"],
        "person_display_name_properties": ["name", "email"],
        "slack_incoming_webhook": "",
        "anonymize_ips": True,
        "toolbar_mode": "toolbar",
        "capture_performance_opt_in": True,
        "capture_console_log_opt_in": False,
        "session_recording_opt_in": True,
        "session_recording_version": "v2",
        "recording_domains": [],
        "access_control": False,
        "api_token": "phc_abc",
        "completed_snippet_onboarding": True,
        "created_at": "2024-01-01T00:00:00Z",
        "updated_at": "2024-01-02T00:00:00Z",
    }
