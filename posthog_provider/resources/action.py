"""Action resource: trigger rules matching custom events, page views and autocaptures."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any

from posthog_provider.errors import ValidationError
from posthog_provider.models import (
    AUTOCAPTURE_EVENT,
    PAGEVIEW_EVENT,
    Action,
    ActionID,
    ActionStep,
    CreateActionRequest,
    ProjectID,
    TextMatching,
)
from posthog_provider.resources.base import Resource, model_kwargs, register_resource, sorted_strings, string_list


def parse_matching(value: Any) -> TextMatching:
    if isinstance(value, TextMatching):
        return value
    try:
        return TextMatching(value)
    except ValueError:
        raise ValidationError(
            "Invalid matching strategy",
            f"{value!r}, must be `exact`, `contains` or `regex`",
            attribute="matching",
        ) from None


# ---------------------------------------------------------------------------
# Local model
# ---------------------------------------------------------------------------


@dataclass
class MatchableValue:
    """A string to compare against, and how to compare it."""

    value: str
    matching: TextMatching = TextMatching.CONTAINS

    def __post_init__(self):
        self.matching = parse_matching(self.matching)

    def to_dict(self) -> dict:
        return {"value": self.value, "matching": self.matching.value}

    @classmethod
    def from_dict(cls, raw: Any, attribute: str) -> MatchableValue | None:
        if raw is None:
            return None
        if not isinstance(raw, dict) or not isinstance(raw.get("value"), str):
            raise ValidationError("Invalid matcher", f"{attribute!r} needs a string `value`", attribute=attribute)
        return cls(value=raw["value"], matching=raw.get("matching") or TextMatching.CONTAINS)

    @classmethod
    def from_remote(cls, value: str, matching: TextMatching | None) -> MatchableValue | None:
        if not value:
            return None
        return cls(value=value, matching=matching or TextMatching.CONTAINS)


def _matcher_fields(matcher: MatchableValue | None) -> tuple[str, TextMatching | None]:
    if matcher is None:
        return "", None
    return matcher.value, matcher.matching


@dataclass
class MatchCustomEvent:
    event: str
    id: str = ""

    def to_step(self, include_id: bool = True) -> ActionStep:
        return ActionStep(id=self.id if include_id else "", event=self.event)

    @classmethod
    def from_step(cls, step: ActionStep) -> MatchCustomEvent:
        return cls(id=step.id, event=step.event)

    def to_dict(self) -> dict:
        return {"id": self.id, "event": self.event}

    @classmethod
    def from_dict(cls, raw: dict) -> MatchCustomEvent:
        if not isinstance(raw.get("event"), str) or not raw["event"]:
            raise ValidationError("Missing required attribute", "custom event needs an `event` name", attribute="event")
        return cls(id=raw.get("id") or "", event=raw["event"])


@dataclass
class MatchPageView:
    url: MatchableValue
    id: str = ""

    def to_step(self, include_id: bool = True) -> ActionStep:
        return ActionStep(
            id=self.id if include_id else "",
            event=PAGEVIEW_EVENT,
            url=self.url.value,
            url_matching=self.url.matching,
        )

    @classmethod
    def from_step(cls, step: ActionStep) -> MatchPageView:
        return cls(id=step.id, url=MatchableValue(step.url, step.url_matching or TextMatching.CONTAINS))

    def to_dict(self) -> dict:
        return {"id": self.id, "url": self.url.to_dict()}

    @classmethod
    def from_dict(cls, raw: dict) -> MatchPageView:
        url = MatchableValue.from_dict(raw.get("url"), "url")
        if url is None:
            raise ValidationError("Missing required attribute", "page view needs a `url`", attribute="url")
        return cls(id=raw.get("id") or "", url=url)


@dataclass
class MatchAutocapture:
    url: MatchableValue | None = None
    element_text: MatchableValue | None = None
    link_href: MatchableValue | None = None
    selector: str = ""
    id: str = ""

    def to_step(self, include_id: bool = True) -> ActionStep:
        url, url_matching = _matcher_fields(self.url)
        text, text_matching = _matcher_fields(self.element_text)
        href, href_matching = _matcher_fields(self.link_href)
        return ActionStep(
            id=self.id if include_id else "",
            event=AUTOCAPTURE_EVENT,
            url=url,
            url_matching=url_matching,
            text=text,
            text_matching=text_matching,
            href=href,
            href_matching=href_matching,
            selector=self.selector,
        )

    @classmethod
    def from_step(cls, step: ActionStep) -> MatchAutocapture:
        return cls(
            id=step.id,
            url=MatchableValue.from_remote(step.url, step.url_matching),
            element_text=MatchableValue.from_remote(step.text, step.text_matching),
            link_href=MatchableValue.from_remote(step.href, step.href_matching),
            selector=step.selector,
        )

    def to_dict(self) -> dict:
        d: dict[str, Any] = {"id": self.id}
        for key in ("url", "element_text", "link_href"):
            matcher = getattr(self, key)
            d[key] = matcher.to_dict() if matcher else None
        d["selector"] = self.selector or None
        return d

    @classmethod
    def from_dict(cls, raw: dict) -> MatchAutocapture:
        return cls(
            id=raw.get("id") or "",
            url=MatchableValue.from_dict(raw.get("url"), "url"),
            element_text=MatchableValue.from_dict(raw.get("element_text"), "element_text"),
            link_href=MatchableValue.from_dict(raw.get("link_href"), "link_href"),
            selector=raw.get("selector") or "",
        )


@dataclass
class ActionModel:
    """Declarative state of an action."""

    project_id: str
    name: str
    id: str | None = None
    description: str = ""
    tags: list[str] | None = None
    post_to_webhook: bool = False
    webhook_message_format: str = ""
    match_custom_events: list[MatchCustomEvent] | None = None
    match_page_views: list[MatchPageView] | None = None
    match_autocaptures: list[MatchAutocapture] | None = None


MATCH_GROUPS = (
    ("match_custom_events", MatchCustomEvent),
    ("match_page_views", MatchPageView),
    ("match_autocaptures", MatchAutocapture),
)


# ---------------------------------------------------------------------------
# Translation
# ---------------------------------------------------------------------------


def steps_from_model(model: ActionModel, include_ids: bool = True) -> list[ActionStep]:
    """Flatten the three match groups: custom events, then page views, then autocaptures."""
    steps: list[ActionStep] = []
    for attr, _ in MATCH_GROUPS:
        for match in getattr(model, attr) or []:
            steps.append(match.to_step(include_id=include_ids))
    return steps


def partition_steps(
    steps: list[ActionStep] | None,
) -> tuple[list[MatchCustomEvent], list[MatchPageView], list[MatchAutocapture]]:
    """Split a flat step list into match groups by event name."""
    custom_events: list[MatchCustomEvent] = []
    page_views: list[MatchPageView] = []
    autocaptures: list[MatchAutocapture] = []
    for step in steps or []:
        if step.event == AUTOCAPTURE_EVENT:
            autocaptures.append(MatchAutocapture.from_step(step))
        elif step.event == PAGEVIEW_EVENT:
            page_views.append(MatchPageView.from_step(step))
        else:
            custom_events.append(MatchCustomEvent.from_step(step))
    return custom_events, page_views, autocaptures


def apply_action(model: ActionModel, action: Action) -> ActionModel:
    """Return ``model`` updated with the state reported by the API."""
    custom_events, page_views, autocaptures = partition_steps(action.steps)
    return dataclasses.replace(
        model,
        id=str(action.id),
        name=action.name,
        description=action.description,
        tags=sorted_strings(action.tags),
        post_to_webhook=action.post_to_slack,
        webhook_message_format=action.slack_message_format,
        match_custom_events=custom_events or None,
        match_page_views=page_views or None,
        match_autocaptures=autocaptures or None,
    )


def action_from_model(model: ActionModel) -> tuple[ProjectID, Action]:
    project_id = ProjectID.parse(model.project_id, attribute="project_id")
    action = Action(
        id=ActionID.parse(model.id, attribute="id"),
        name=model.name,
        description=model.description,
        tags=list(model.tags or []),
        post_to_slack=model.post_to_webhook,
        slack_message_format=model.webhook_message_format,
        steps=steps_from_model(model),
    )
    return project_id, action


def parse_import_id(import_id: str) -> tuple[ProjectID, ActionID]:
    """Split a ``PROJECT_ID/ACTION_ID`` import identifier."""
    tokens = import_id.split("/", 1)
    if len(tokens) != 2:
        raise ValidationError("Invalid import ID", "ID not of the form PROJECT_ID/ACTION_ID", attribute="id")
    return ProjectID.parse(tokens[0], attribute="project_id"), ActionID.parse(tokens[1], attribute="id")


# ---------------------------------------------------------------------------
# Resource
# ---------------------------------------------------------------------------


@register_resource("posthog_action")
class ActionResource(Resource[ActionModel]):
    """Manages a PostHog action."""

    @staticmethod
    def model_from_dict(raw: Any) -> ActionModel:
        kwargs = model_kwargs(ActionModel, raw, required=("project_id", "name"))
        kwargs["tags"] = string_list(kwargs, "tags")
        for attr, match_cls in MATCH_GROUPS:
            entries = kwargs.get(attr)
            if entries is None:
                continue
            if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
                raise ValidationError("Invalid attribute value", f"{attr!r} must be a list of objects", attribute=attr)
            kwargs[attr] = [match_cls.from_dict(entry) for entry in entries]
        kwargs["project_id"] = str(kwargs["project_id"])
        if kwargs.get("id") is not None:
            kwargs["id"] = str(kwargs["id"])
        return ActionModel(**kwargs)

    @staticmethod
    def model_to_dict(model: ActionModel) -> dict:
        d = dataclasses.asdict(model)
        for attr, _ in MATCH_GROUPS:
            matches = getattr(model, attr)
            d[attr] = [m.to_dict() for m in matches] if matches is not None else None
        return d

    def create(self, model: ActionModel) -> ActionModel:
        project_id = ProjectID.parse(model.project_id, attribute="project_id")
        request = CreateActionRequest(
            name=model.name,
            description=model.description,
            tags=list(model.tags or []),
            post_to_slack=model.post_to_webhook,
            slack_message_format=model.webhook_message_format,
            steps=steps_from_model(model, include_ids=False),
        )
        res = self.client.create_action(project_id, request)
        self._record(res.id, "create", "created", f"project={project_id}, steps={len(res.steps or [])}")
        return apply_action(model, res)

    def read(self, model: ActionModel) -> ActionModel | None:
        project_id = ProjectID.parse(model.project_id, attribute="project_id")
        action_id = ActionID.parse(model.id, attribute="id")

        res = self.client.get_action(project_id, action_id)
        if res is None:
            self._record(action_id, "read", "removed", "not found")
            return None
        if res.deleted:
            self._record(action_id, "read", "removed", "deleted remotely")
            return None

        self._record(action_id, "read", "read")
        return apply_action(model, res)

    def update(self, model: ActionModel) -> ActionModel:
        project_id, action = action_from_model(model)
        res = self.client.update_action(project_id, action)
        self._record(res.id, "update", "updated")
        return apply_action(model, res)

    def delete(self, model: ActionModel) -> None:
        # Actions cannot be removed through the API, only flagged as deleted
        project_id, action = action_from_model(model)
        action.deleted = True
        self.client.update_action(project_id, action)
        self._record(action.id, "delete", "deleted")

    def import_state(self, import_id: str) -> ActionModel:
        project_id, action_id = parse_import_id(import_id)
        self._record(action_id, "import", "imported", f"project={project_id}")
        return ActionModel(project_id=str(project_id), name="", id=str(action_id))
