"""Tests for PostHogClient request handling and status mapping."""

import json

import pytest
import requests
import responses

from posthog_provider.client import PostHogClient
from posthog_provider.errors import APIError, EncodingError, TransportError
from posthog_provider.models import (
    ActionID,
    ActionStep,
    CreateActionRequest,
    CreateProjectRequest,
    ProjectID,
    TextMatching,
    ToolbarMode,
)

# Constants
MOCK_POSTHOG_URL = "https://posthog.example.com"
MOCK_API_URL = f"{MOCK_POSTHOG_URL}/api"


class TestHeaders:
    """Tests for authentication and content negotiation headers."""

    @responses.activate
    def test_get_sends_bearer_and_accept(self, mock_client, sample_project):
        responses.add(responses.GET, f"{MOCK_API_URL}/projects/42", json=sample_project)

        mock_client.get_project(ProjectID(42))

        headers = responses.calls[0].request.headers
        assert headers["Authorization"] == "Bearer test-key"
        assert headers["Accept"] == "application/json"
        assert "Content-Type" not in headers

    @responses.activate
    def test_post_sends_json_content_type(self, mock_client, sample_project):
        responses.add(responses.POST, f"{MOCK_API_URL}/projects/", json=sample_project, status=201)

        mock_client.create_project(CreateProjectRequest(name="Web"))

        headers = responses.calls[0].request.headers
        assert headers["Content-Type"] == "application/json"
        assert headers["Accept"] == "application/json"

    @responses.activate
    def test_delete_has_no_accept_header(self, mock_client):
        responses.add(responses.DELETE, f"{MOCK_API_URL}/projects/42", status=204)

        mock_client.delete_project(ProjectID(42))

        headers = responses.calls[0].request.headers
        assert headers["Authorization"] == "Bearer test-key"
        assert "Accept" not in headers or headers["Accept"] != "application/json"

    def test_host_trailing_slash_stripped(self):
        client = PostHogClient(f"{MOCK_POSTHOG_URL}/", "test-key")
        assert client.api_url == MOCK_API_URL


class TestStatusMapping:
    """Tests for status code handling."""

    @responses.activate
    def test_404_on_read_is_absence(self, mock_client):
        """404 on a read yields None rather than an error."""
        responses.add(responses.GET, f"{MOCK_API_URL}/projects/42/actions/7", status=404)

        assert mock_client.get_action(ProjectID(42), ActionID(7)) is None

    @responses.activate
    def test_404_on_write_is_an_error(self, mock_client):
        """Absence only applies to reads."""
        responses.add(responses.DELETE, f"{MOCK_API_URL}/projects/42", status=404, body="not found")

        with pytest.raises(APIError) as exc_info:
            mock_client.delete_project(ProjectID(42))
        assert exc_info.value.status_code == 404
        assert exc_info.value.expected_status == 204

    @responses.activate
    def test_403_on_read_is_an_error(self, mock_client):
        """Only 404 counts as absence."""
        responses.add(responses.GET, f"{MOCK_API_URL}/projects/42", status=403, body='{"detail": "forbidden"}')

        with pytest.raises(APIError) as exc_info:
            mock_client.get_project(ProjectID(42))
        assert exc_info.value.status_code == 403
        assert exc_info.value.body == '{"detail": "forbidden"}'

    @responses.activate
    def test_200_when_201_expected_is_an_error(self, mock_client, sample_project):
        """Status codes must match exactly."""
        responses.add(responses.POST, f"{MOCK_API_URL}/projects/", json=sample_project, status=200)

        with pytest.raises(APIError, match="expected 201, got 200"):
            mock_client.create_project(CreateProjectRequest(name="Web"))

    @responses.activate
    def test_no_retry_on_server_error(self, mock_client):
        """A 503 fails immediately with a single request."""
        responses.add(responses.GET, f"{MOCK_API_URL}/projects/42", status=503)

        with pytest.raises(APIError):
            mock_client.get_project(ProjectID(42))
        assert len(responses.calls) == 1


class TestFailures:
    """Tests for transport and encoding failures."""

    @responses.activate
    def test_connection_error_is_transport_error(self, mock_client):
        responses.add(
            responses.GET,
            f"{MOCK_API_URL}/projects/42",
            body=requests.exceptions.ConnectionError("connection refused"),
        )

        with pytest.raises(TransportError, match="connection refused"):
            mock_client.get_project(ProjectID(42))

    @responses.activate
    def test_timeout_is_transport_error(self, mock_client):
        responses.add(responses.GET, f"{MOCK_API_URL}/projects/42", body=requests.exceptions.ReadTimeout("slow"))

        with pytest.raises(TransportError):
            mock_client.get_project(ProjectID(42))

    @responses.activate
    def test_malformed_json_reply(self, mock_client):
        responses.add(responses.GET, f"{MOCK_API_URL}/projects/42", body="<html>oops</html>", status=200)

        with pytest.raises(EncodingError):
            mock_client.get_project(ProjectID(42))

    @responses.activate
    def test_reply_without_id(self, mock_client):
        responses.add(responses.GET, f"{MOCK_API_URL}/projects/42", json={"name": "Web"})

        with pytest.raises(EncodingError, match="no id"):
            mock_client.get_project(ProjectID(42))

    def test_unencodable_body(self, mock_client):
        """Encoding errors surface before any request is sent."""
        with pytest.raises(EncodingError):
            mock_client._request("POST", "/projects/", data={"bad": object()}, expected_status=201)


class TestActionPayloads:
    """Tests for action request bodies."""

    @responses.activate
    def test_create_normalizes_missing_lists(self, mock_client, sample_action):
        responses.add(responses.POST, f"{MOCK_API_URL}/projects/42/actions", json=sample_action, status=201)

        mock_client.create_action(ProjectID(42), CreateActionRequest(name="Signed up"))

        body = json.loads(responses.calls[0].request.body)
        assert body == {"name": "Signed up", "tags": [], "post_to_slack": False, "steps": []}

    @responses.activate
    def test_create_omits_empty_step_fields(self, mock_client, sample_action):
        responses.add(responses.POST, f"{MOCK_API_URL}/projects/42/actions", json=sample_action, status=201)

        request = CreateActionRequest(
            name="Signed up",
            steps=[ActionStep(event="$pageview", url="/welcome", url_matching=TextMatching.EXACT)],
        )
        mock_client.create_action(ProjectID(42), request)

        body = json.loads(responses.calls[0].request.body)
        assert body["steps"] == [{"event": "$pageview", "url": "/welcome", "url_matching": "exact"}]

    @responses.activate
    def test_get_decodes_action(self, mock_client, sample_action):
        responses.add(responses.GET, f"{MOCK_API_URL}/projects/42/actions/7", json=sample_action)

        action = mock_client.get_action(ProjectID(42), ActionID(7))

        assert action.id == 7
        assert isinstance(action.id, ActionID)
        assert action.steps[0].text_matching is TextMatching.EXACT
        assert action.created_at.year == 2024


class TestProjectPayloads:
    """Tests for project request bodies and decoding."""

    @responses.activate
    def test_create_normalizes_missing_lists(self, mock_client, sample_project):
        responses.add(responses.POST, f"{MOCK_API_URL}/projects/", json=sample_project, status=201)

        mock_client.create_project(CreateProjectRequest(name="Web"))

        body = json.loads(responses.calls[0].request.body)
        assert body["app_urls"] == []
        assert body["data_attributes"] == []
        assert body["person_display_name_properties"] == []
        assert body["recording_domains"] == []
        assert body["toolbar_mode"] == "toolbar"

    @responses.activate
    def test_missing_toolbar_mode_backfilled(self, mock_client, sample_project):
        """GET responses without toolbar_mode default to the toolbar being on."""
        del sample_project["toolbar_mode"]
        responses.add(responses.GET, f"{MOCK_API_URL}/projects/42", json=sample_project)

        project = mock_client.get_project(ProjectID(42))

        assert project.toolbar_mode == ToolbarMode.TOOLBAR

    @responses.activate
    def test_unknown_toolbar_mode_kept(self, mock_client, sample_project):
        sample_project["toolbar_mode"] = "heatmaps"
        responses.add(responses.GET, f"{MOCK_API_URL}/projects/42", json=sample_project)

        project = mock_client.get_project(ProjectID(42))

        assert project.toolbar_mode == "heatmaps"
