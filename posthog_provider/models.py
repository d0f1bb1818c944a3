"""Data models and constants for posthog-provider."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from posthog_provider.errors import EncodingError, InvalidIDError

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

LOGGER_NAME = "posthog-provider"
API_PREFIX = "/api"

# Identifiers are unsigned 64-bit integers
MAX_ID = 2**64 - 1

AUTOCAPTURE_EVENT = "$autocapture"
PAGEVIEW_EVENT = "$pageview"


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class TextMatching(str, Enum):
    EXACT = "exact"
    CONTAINS = "contains"
    REGEX = "regex"


class ToolbarMode(str, Enum):
    DISABLED = "disabled"
    TOOLBAR = "toolbar"


class SessionRecordingVersion(str, Enum):
    V1 = "v1"
    V2 = "v2"


# ---------------------------------------------------------------------------
# Identifiers
# ---------------------------------------------------------------------------


class ResourceID(int):
    """Server-assigned resource identifier, rendered as a decimal string."""

    kind = "resource"

    def __new__(cls, value: int):
        value = int(value)
        if value < 0 or value > MAX_ID:
            raise InvalidIDError(f"Invalid {cls.kind} ID", f"{value} is out of range")
        return super().__new__(cls, value)

    def __str__(self) -> str:
        return int.__repr__(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({int.__repr__(self)})"

    @classmethod
    def parse(cls, s: str, attribute: str | None = None):
        """Parse a decimal string, rejecting signs, spaces and values above 2**64-1."""
        if not isinstance(s, str) or not s.isascii() or not s.isdigit():
            raise InvalidIDError(f"Invalid {cls.kind} ID", f"{s!r} is not an unsigned decimal integer", attribute)
        value = int(s)
        if value > MAX_ID:
            raise InvalidIDError(f"Invalid {cls.kind} ID", f"{s!r} overflows an unsigned 64-bit integer", attribute)
        return cls(value)


class ProjectID(ResourceID):
    kind = "project"


class ActionID(ResourceID):
    kind = "action"


# ---------------------------------------------------------------------------
# Wire helpers
# ---------------------------------------------------------------------------


def parse_timestamp(value: Any) -> datetime | None:
    if not value:
        return None
    if not isinstance(value, str):
        raise EncodingError(f"invalid timestamp: {value!r}")
    try:
        # fromisoformat() only learned about "Z" in Python 3.11
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise EncodingError(f"invalid timestamp {value!r}: {e}") from e


def format_timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _wire(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _matching(raw: dict, key: str) -> TextMatching | None:
    value = raw.get(key)
    if not value:
        return None
    try:
        return TextMatching(value)
    except ValueError:
        raise EncodingError(f"unknown {key} value: {value!r}") from None


def _strings(raw: dict, key: str) -> list[str]:
    value = raw.get(key) or []
    if not isinstance(value, list):
        raise EncodingError(f"expected a list for {key}, got {type(value).__name__}")
    return [str(v) for v in value]


def _require_object(raw: Any, what: str) -> dict:
    if not isinstance(raw, dict):
        raise EncodingError(f"expected a JSON object for {what}, got {type(raw).__name__}")
    if "id" not in raw:
        raise EncodingError(f"{what} payload has no id")
    return raw


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


@dataclass
class ActionStep:
    """One trigger rule of an action, as the API represents it.

    ``event`` is ``$autocapture``, ``$pageview`` or a custom event name. URL
    matching applies to the first two, text/href/selector to autocapture only.
    Empty fields are left out of the request body.
    """

    event: str
    id: str = ""
    url: str = ""
    url_matching: TextMatching | None = None
    text: str = ""
    text_matching: TextMatching | None = None
    href: str = ""
    href_matching: TextMatching | None = None
    selector: str = ""

    def to_dict(self) -> dict:
        d: dict[str, Any] = {}
        if self.id:
            d["id"] = self.id
        d["event"] = self.event
        for key in ("url", "url_matching", "text", "text_matching", "href", "href_matching", "selector"):
            value = getattr(self, key)
            if value:
                d[key] = _wire(value)
        return d

    @classmethod
    def from_dict(cls, raw: dict) -> ActionStep:
        if not isinstance(raw, dict):
            raise EncodingError(f"expected a JSON object for action step, got {type(raw).__name__}")
        return cls(
            id=str(raw.get("id") or ""),
            event=raw.get("event") or "",
            url=raw.get("url") or "",
            url_matching=_matching(raw, "url_matching"),
            text=raw.get("text") or "",
            text_matching=_matching(raw, "text_matching"),
            href=raw.get("href") or "",
            href_matching=_matching(raw, "href_matching"),
            selector=raw.get("selector") or "",
        )


@dataclass
class CreateActionRequest:
    name: str
    description: str = ""
    tags: list[str] | None = None
    post_to_slack: bool = False
    slack_message_format: str = ""
    steps: list[ActionStep] | None = None

    def to_dict(self) -> dict:
        d: dict[str, Any] = {"name": self.name}
        if self.description:
            d["description"] = self.description
        d["tags"] = list(self.tags or [])
        d["post_to_slack"] = self.post_to_slack
        if self.slack_message_format:
            d["slack_message_format"] = self.slack_message_format
        d["steps"] = [step.to_dict() for step in self.steps or []]
        return d


@dataclass
class Action:
    """An action as returned by (and sent back to) the API."""

    id: ActionID
    name: str
    description: str = ""
    tags: list[str] | None = None
    post_to_slack: bool = False
    slack_message_format: str = ""
    steps: list[ActionStep] | None = None
    deleted: bool = False
    is_calculating: bool = False
    created_at: datetime | None = None
    last_calculated_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "id": int(self.id),
            "name": self.name,
            "description": self.description,
            "tags": list(self.tags or []),
            "post_to_slack": self.post_to_slack,
            "slack_message_format": self.slack_message_format,
            "steps": [step.to_dict() for step in self.steps or []],
            "deleted": self.deleted,
            "is_calculating": self.is_calculating,
            "created_at": format_timestamp(self.created_at),
            "last_calculated_at": format_timestamp(self.last_calculated_at),
        }

    @classmethod
    def from_dict(cls, raw: Any) -> Action:
        raw = _require_object(raw, "action")
        steps = raw.get("steps") or []
        if not isinstance(steps, list):
            raise EncodingError(f"expected a list for steps, got {type(steps).__name__}")
        try:
            action_id = ActionID(raw["id"])
        except (TypeError, ValueError, InvalidIDError) as e:
            raise EncodingError(f"invalid action id {raw['id']!r}: {e}") from e
        return cls(
            id=action_id,
            name=raw.get("name") or "",
            description=raw.get("description") or "",
            tags=_strings(raw, "tags"),
            post_to_slack=bool(raw.get("post_to_slack")),
            slack_message_format=raw.get("slack_message_format") or "",
            steps=[ActionStep.from_dict(step) for step in steps],
            deleted=bool(raw.get("deleted")),
            is_calculating=bool(raw.get("is_calculating")),
            created_at=parse_timestamp(raw.get("created_at")),
            last_calculated_at=parse_timestamp(raw.get("last_calculated_at")),
        )


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

PROJECT_LIST_FIELDS = ("app_urls", "data_attributes", "person_display_name_properties", "recording_domains")


@dataclass
class CreateProjectRequest:
    name: str
    autocapture_opt_out: bool = False
    timezone: str = "UTC"
    app_urls: list[str] | None = None
    data_attributes: list[str] | None = None
    person_display_name_properties: list[str] | None = None
    slack_incoming_webhook: str = ""
    anonymize_ips: bool = False
    toolbar_mode: str = ToolbarMode.TOOLBAR
    capture_performance_opt_in: bool = True
    capture_console_log_opt_in: bool = True
    session_recording_opt_in: bool = True
    session_recording_version: str = SessionRecordingVersion.V2
    recording_domains: list[str] | None = None
    access_control: bool = False
    completed_snippet_onboarding: bool = True

    def to_dict(self) -> dict:
        d = {
            "name": self.name,
            "autocapture_opt_out": self.autocapture_opt_out,
            "timezone": self.timezone,
            "slack_incoming_webhook": self.slack_incoming_webhook,
            "anonymize_ips": self.anonymize_ips,
            "toolbar_mode": _wire(self.toolbar_mode),
            "capture_performance_opt_in": self.capture_performance_opt_in,
            "capture_console_log_opt_in": self.capture_console_log_opt_in,
            "session_recording_opt_in": self.session_recording_opt_in,
            "session_recording_version": _wire(self.session_recording_version),
            "access_control": self.access_control,
            "completed_snippet_onboarding": self.completed_snippet_onboarding,
        }
        for key in PROJECT_LIST_FIELDS:
            d[key] = list(getattr(self, key) or [])
        return d


@dataclass
class Project(CreateProjectRequest):
    """A project as returned by (and sent back to) the API."""

    id: ProjectID = field(default_factory=lambda: ProjectID(0))
    api_token: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["id"] = int(self.id)
        d["api_token"] = self.api_token
        d["created_at"] = format_timestamp(self.created_at)
        d["updated_at"] = format_timestamp(self.updated_at)
        return d

    @classmethod
    def from_dict(cls, raw: Any) -> Project:
        raw = _require_object(raw, "project")
        try:
            project_id = ProjectID(raw["id"])
        except (TypeError, ValueError, InvalidIDError) as e:
            raise EncodingError(f"invalid project id {raw['id']!r}: {e}") from e
        return cls(
            id=project_id,
            name=raw.get("name") or "",
            autocapture_opt_out=bool(raw.get("autocapture_opt_out")),
            timezone=raw.get("timezone") or "",
            app_urls=_strings(raw, "app_urls"),
            data_attributes=_strings(raw, "data_attributes"),
            person_display_name_properties=_strings(raw, "person_display_name_properties"),
            slack_incoming_webhook=raw.get("slack_incoming_webhook") or "",
            anonymize_ips=bool(raw.get("anonymize_ips")),
            # GET responses sometimes leave toolbar_mode out; the API default is "toolbar"
            toolbar_mode=raw.get("toolbar_mode") or ToolbarMode.TOOLBAR.value,
            capture_performance_opt_in=bool(raw.get("capture_performance_opt_in")),
            capture_console_log_opt_in=bool(raw.get("capture_console_log_opt_in")),
            session_recording_opt_in=bool(raw.get("session_recording_opt_in")),
            session_recording_version=raw.get("session_recording_version") or "",
            recording_domains=_strings(raw, "recording_domains"),
            access_control=bool(raw.get("access_control")),
            api_token=raw.get("api_token") or "",
            completed_snippet_onboarding=bool(raw.get("completed_snippet_onboarding")),
            created_at=parse_timestamp(raw.get("created_at")),
            updated_at=parse_timestamp(raw.get("updated_at")),
        )


# ---------------------------------------------------------------------------
# Operation results
# ---------------------------------------------------------------------------


@dataclass
class OperationResult:
    """Outcome of a single adapter operation."""

    resource_type: str
    resource_id: str
    operation: str
    outcome: str  # "created", "read", "updated", "deleted", "removed", "imported"
    detail: str = ""

    def to_dict(self) -> dict:
        d = {
            "resource_type": self.resource_type,
            "resource_id": self.resource_id,
            "operation": self.operation,
            "outcome": self.outcome,
        }
        if self.detail:
            d["detail"] = self.detail
        return d
