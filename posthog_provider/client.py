"""PostHog REST API client."""

from __future__ import annotations

import json
import logging
import urllib.parse
from typing import Any, Protocol

import requests

from posthog_provider.errors import APIError, EncodingError, TransportError
from posthog_provider.models import (
    API_PREFIX,
    LOGGER_NAME,
    Action,
    ActionID,
    CreateActionRequest,
    CreateProjectRequest,
    Project,
    ProjectID,
)


class Transport(Protocol):
    """Anything able to execute one HTTP request, e.g. a ``requests.Session``."""

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response: ...


def _escape(value: Any) -> str:
    return urllib.parse.quote(str(value), safe="")


class PostHogClient:
    """Thin wrapper around the PostHog REST API.

    Every call is a single blocking round trip: no retries, no backoff.
    """

    def __init__(self, host: str, api_key: str, session: Transport | None = None, timeout: float | None = None):
        self.host = host.rstrip("/")
        self.api_url = f"{self.host}{API_PREFIX}"
        self.api_key = api_key
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.logger = logging.getLogger(LOGGER_NAME)

    def _request(
        self,
        method: str,
        path: str,
        data: Any = None,
        expected_status: int = 200,
        decode: bool = True,
        absent_if_404: bool = False,
    ) -> Any:
        """Issue one request and decode its JSON reply.

        Returns ``None`` when ``absent_if_404`` is set and the API answers 404,
        or when ``decode`` is false.
        """
        url = f"{self.api_url}{path}"
        headers = {"Authorization": f"Bearer {self.api_key}"}

        body = None
        if data is not None:
            try:
                body = json.dumps(data)
            except (TypeError, ValueError) as e:
                raise EncodingError(f"error encoding request body to JSON: {e}") from e
            headers["Content-Type"] = "application/json"

        if decode:
            headers["Accept"] = "application/json"

        self.logger.debug(f"{method} {url} {body or ''}")
        try:
            resp = self.session.request(method, url, data=body, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise TransportError(f"error doing HTTP request {method} {url}: {e}") from e

        if absent_if_404 and resp.status_code == 404:
            self.logger.debug(f"{method} {url} -> 404, treating as absent")
            return None

        if resp.status_code != expected_status:
            self.logger.error(f"API error {resp.status_code}: {resp.text[:500]}")
            raise APIError(method, url, resp.status_code, expected_status, resp.text)

        if not decode:
            return None

        try:
            return resp.json()
        except ValueError as e:
            raise EncodingError(f"error decoding JSON reply from {method} {url}: {e}") from e

    # -- Actions --

    def create_action(self, project_id: ProjectID, request: CreateActionRequest) -> Action:
        res = self._request(
            "POST",
            f"/projects/{_escape(project_id)}/actions",
            data=request.to_dict(),
            expected_status=201,
        )
        return Action.from_dict(res)

    def update_action(self, project_id: ProjectID, action: Action) -> Action:
        res = self._request(
            "PATCH",
            f"/projects/{_escape(project_id)}/actions/{_escape(action.id)}",
            data=action.to_dict(),
            expected_status=200,
        )
        return Action.from_dict(res)

    def get_action(self, project_id: ProjectID, action_id: ActionID) -> Action | None:
        res = self._request(
            "GET",
            f"/projects/{_escape(project_id)}/actions/{_escape(action_id)}",
            expected_status=200,
            absent_if_404=True,
        )
        if res is None:
            return None
        return Action.from_dict(res)

    # -- Projects --

    def create_project(self, request: CreateProjectRequest) -> Project:
        res = self._request("POST", "/projects/", data=request.to_dict(), expected_status=201)
        return Project.from_dict(res)

    def update_project(self, project: Project) -> Project:
        res = self._request(
            "PATCH",
            f"/projects/{_escape(project.id)}",
            data=project.to_dict(),
            expected_status=200,
        )
        return Project.from_dict(res)

    def get_project(self, project_id: ProjectID) -> Project | None:
        res = self._request(
            "GET",
            f"/projects/{_escape(project_id)}",
            expected_status=200,
            absent_if_404=True,
        )
        if res is None:
            return None
        return Project.from_dict(res)

    def delete_project(self, project_id: ProjectID) -> None:
        self._request("DELETE", f"/projects/{_escape(project_id)}", expected_status=204, decode=False)
