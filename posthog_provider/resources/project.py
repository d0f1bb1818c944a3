"""Project resource."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any

from posthog_provider.errors import ValidationError
from posthog_provider.models import (
    CreateProjectRequest,
    Project,
    ProjectID,
    SessionRecordingVersion,
    ToolbarMode,
)
from posthog_provider.resources.base import Resource, model_kwargs, register_resource, sorted_strings, string_list

LIST_ATTRIBUTES = (
    "authorized_urls",
    "data_attributes",
    "person_display_name_properties",
    "authorized_session_recording_urls",
)

BOOL_ATTRIBUTES = (
    "disable_autocapture",
    "anonymize_ips",
    "enable_toolbar",
    "record_user_sessions",
    "capture_console_logs",
    "capture_network_performance",
    "use_session_recorder_v2",
    "enable_access_control",
)


@dataclass
class ProjectModel:
    """Declarative state of a project."""

    name: str
    id: str | None = None
    disable_autocapture: bool = False
    timezone: str = "UTC"
    authorized_urls: list[str] | None = None
    data_attributes: list[str] | None = None
    person_display_name_properties: list[str] | None = None
    webhook_url: str = ""
    anonymize_ips: bool = False
    enable_toolbar: bool = True
    record_user_sessions: bool = True
    capture_console_logs: bool = True
    capture_network_performance: bool = True
    use_session_recorder_v2: bool = True
    authorized_session_recording_urls: list[str] | None = None
    enable_access_control: bool = False
    api_token: str | None = None


def toolbar_mode(enabled: bool) -> ToolbarMode:
    return ToolbarMode.TOOLBAR if enabled else ToolbarMode.DISABLED


def session_recording_version(use_v2: bool) -> SessionRecordingVersion:
    return SessionRecordingVersion.V2 if use_v2 else SessionRecordingVersion.V1


def apply_project(model: ProjectModel, project: Project) -> ProjectModel:
    """Return ``model`` updated with the state reported by the API."""
    return dataclasses.replace(
        model,
        id=str(project.id),
        name=project.name,
        disable_autocapture=project.autocapture_opt_out,
        timezone=project.timezone,
        authorized_urls=sorted_strings(project.app_urls),
        data_attributes=sorted_strings(project.data_attributes),
        person_display_name_properties=sorted_strings(project.person_display_name_properties),
        webhook_url=project.slack_incoming_webhook,
        anonymize_ips=project.anonymize_ips,
        # anything but "toolbar" counts as disabled
        enable_toolbar=project.toolbar_mode == ToolbarMode.TOOLBAR,
        record_user_sessions=project.session_recording_opt_in,
        capture_console_logs=project.capture_console_log_opt_in,
        capture_network_performance=project.capture_performance_opt_in,
        use_session_recorder_v2=project.session_recording_version == SessionRecordingVersion.V2,
        authorized_session_recording_urls=sorted_strings(project.recording_domains),
        enable_access_control=project.access_control,
        api_token=project.api_token,
    )


def _settings_from_model(model: ProjectModel) -> dict[str, Any]:
    return {
        "name": model.name,
        "autocapture_opt_out": model.disable_autocapture,
        "timezone": model.timezone,
        "app_urls": list(model.authorized_urls or []),
        "data_attributes": list(model.data_attributes or []),
        "person_display_name_properties": list(model.person_display_name_properties or []),
        "slack_incoming_webhook": model.webhook_url,
        "anonymize_ips": model.anonymize_ips,
        "toolbar_mode": toolbar_mode(model.enable_toolbar),
        "capture_performance_opt_in": model.capture_network_performance,
        "capture_console_log_opt_in": model.capture_console_logs,
        "session_recording_opt_in": model.record_user_sessions,
        "session_recording_version": session_recording_version(model.use_session_recorder_v2),
        "recording_domains": list(model.authorized_session_recording_urls or []),
        "access_control": model.enable_access_control,
    }


def create_request_from_model(model: ProjectModel) -> CreateProjectRequest:
    return CreateProjectRequest(completed_snippet_onboarding=True, **_settings_from_model(model))


def project_from_model(model: ProjectModel) -> Project:
    return Project(
        id=ProjectID.parse(model.id, attribute="id"),
        api_token=model.api_token or "",
        completed_snippet_onboarding=True,
        **_settings_from_model(model),
    )


@register_resource("posthog_project")
class ProjectResource(Resource[ProjectModel]):
    """Manages a PostHog project."""

    @staticmethod
    def model_from_dict(raw: Any) -> ProjectModel:
        kwargs = model_kwargs(ProjectModel, raw, required=("name",))
        for attr in LIST_ATTRIBUTES:
            kwargs[attr] = string_list(kwargs, attr)
        for attr in BOOL_ATTRIBUTES:
            if attr in kwargs and not isinstance(kwargs[attr], bool):
                raise ValidationError("Invalid attribute value", f"{attr!r} must be a boolean", attribute=attr)
        if kwargs.get("id") is not None:
            kwargs["id"] = str(kwargs["id"])
        return ProjectModel(**kwargs)

    @staticmethod
    def model_to_dict(model: ProjectModel) -> dict:
        return dataclasses.asdict(model)

    def create(self, model: ProjectModel) -> ProjectModel:
        res = self.client.create_project(create_request_from_model(model))
        self._record(res.id, "create", "created", f"name={res.name}")
        return apply_project(model, res)

    def read(self, model: ProjectModel) -> ProjectModel | None:
        project_id = ProjectID.parse(model.id, attribute="id")
        res = self.client.get_project(project_id)
        if res is None:
            self._record(project_id, "read", "removed", "not found")
            return None
        self._record(project_id, "read", "read")
        return apply_project(model, res)

    def update(self, model: ProjectModel) -> ProjectModel:
        project = project_from_model(model)
        res = self.client.update_project(project)
        self._record(res.id, "update", "updated")
        return apply_project(model, res)

    def delete(self, model: ProjectModel) -> None:
        project_id = ProjectID.parse(model.id, attribute="id")
        self.client.delete_project(project_id)
        self._record(project_id, "delete", "deleted")

    def import_state(self, import_id: str) -> ProjectModel:
        project_id = ProjectID.parse(import_id, attribute="id")
        self._record(project_id, "import", "imported")
        return ProjectModel(name="", id=str(project_id))
